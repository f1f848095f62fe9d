# storage.py
from __future__ import annotations

import io
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import BinaryIO

from PIL import Image

from models import Profile

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
JPEG_MIME = "image/jpeg"


def export_filename(profile: Profile, ext: str, now: datetime | None = None) -> str:
    """invoice_<MOBILE|A4>_<epoch-millis>.<ext>"""
    stamp = now or datetime.now()
    millis = int(stamp.timestamp() * 1000)
    return f"invoice_{profile.value}_{millis}.{ext}"


# -----------------------------
# Exported files
# -----------------------------
class DownloadsStorage:
    """
    Writes exports into one folder (by default ~/Downloads/Invoices).

    `open_output` hands back a writable binary stream, or None when the
    folder or file cannot be created. Callers own the stream and close it.
    """

    def __init__(self, root: str | os.PathLike, location: str | None = None):
        self.root = Path(root)
        self.location = location or _display_location(self.root)

    def open_output(self, filename: str, mime_type: str) -> BinaryIO | None:
        target = self.root / filename
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            out = open(target, "wb")
        except OSError as e:
            logger.warning("Cannot open %s (%s) for writing: %s", target, mime_type, e)
            return None
        logger.info("Writing %s (%s)", target, mime_type)
        return out


def _display_location(root: Path) -> str:
    # "Downloads/Invoices" for the default root, the full path otherwise
    parent = root.parent.name
    return f"{parent}/{root.name}" if parent == "Downloads" else str(root)


# -----------------------------
# Logo source
# -----------------------------
def load_logo(handle) -> Image.Image | None:
    """
    Decode the user's logo. `handle` is a file path, raw image bytes, or None.
    Anything that cannot be read or decoded yields None; the invoice is then
    rendered without a logo.
    """
    if handle is None or handle == "":
        return None
    try:
        if isinstance(handle, (bytes, bytearray)):
            img = Image.open(io.BytesIO(bytes(handle)))
        else:
            img = Image.open(Path(handle))
        img.load()
    except Exception as e:
        logger.warning("Logo could not be decoded, continuing without it: %s", e)
        return None
    return img
