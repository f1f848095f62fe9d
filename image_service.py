# image_service.py
import io
import logging
from datetime import datetime
from functools import lru_cache

from PIL import Image, ImageDraw, ImageFont

from layout import DrawLine, PlaceImage, PlaceText, layout_invoice
from models import Invoice, Profile
from storage import JPEG_MIME, export_filename, load_logo

logger = logging.getLogger(__name__)

# Canvas size in pixels per profile (A4 at 300 dpi for print)
JPEG_SIZES = {
    Profile.MOBILE: (1200, 1800),
    Profile.A4: (2480, 3508),
}
JPEG_QUALITY = 90

_REGULAR_FONTS = ("DejaVuSans.ttf", "Arial.ttf", "LiberationSans-Regular.ttf")
_BOLD_FONTS = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "LiberationSans-Bold.ttf")


@lru_cache(maxsize=64)
def _font(size: int, bold: bool):
    """
    Returns (font, stroke_width). Falls back to Pillow's bundled font; bold
    is then imitated with a stroke.
    """
    for name in (_BOLD_FONTS if bold else _REGULAR_FONTS):
        try:
            return ImageFont.truetype(name, size), 0
        except OSError:
            continue
    font = ImageFont.load_default(size=size)
    return font, (max(1, size // 30) if bold else 0)


def render_invoice_jpeg(invoice: Invoice, tax_rate: float, logo, profile: Profile) -> bytes:
    """
    Rasterize the invoice on a white canvas sized for `profile` and
    return JPEG bytes.
    """
    width, height = JPEG_SIZES[profile]
    page = layout_invoice(invoice, tax_rate, logo, width, height)

    img = Image.new("RGB", (width, height), (255, 255, 255))
    draw = ImageDraw.Draw(img)

    for op in page.ops:
        if isinstance(op, PlaceText):
            if not op.text:
                continue
            font, stroke = _font(max(1, round(op.size)), op.bold)
            draw.text(
                (op.x, op.y),
                op.text,
                font=font,
                fill=(0, 0, 0),
                anchor="ls",
                stroke_width=stroke,
                stroke_fill=(0, 0, 0),
            )
        elif isinstance(op, DrawLine):
            draw.line(
                [(op.x1, op.y1), (op.x2, op.y2)],
                fill=(0, 0, 0),
                width=max(1, round(op.stroke)),
            )
        elif isinstance(op, PlaceImage):
            size = (max(1, round(op.width)), max(1, round(op.height)))
            logo = op.image.convert("RGBA").resize(size)
            img.paste(logo, (round(op.x), round(op.y)), logo)

    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=JPEG_QUALITY)
    return buf.getvalue()


def save_invoice_jpeg(invoice: Invoice, tax_rate: float, logo_handle, profile: Profile, storage) -> bool:
    """
    Render the JPEG and write it through `storage`.
    Returns False (after logging) on any failure; never raises.
    """
    try:
        logo = load_logo(logo_handle)
        data = render_invoice_jpeg(invoice, tax_rate, logo, profile)
        filename = export_filename(profile, "jpg", datetime.now())
        out = storage.open_output(filename, JPEG_MIME)
        if out is None:
            return False
        with out:
            out.write(data)
        logger.info("Saved %s (%d bytes)", filename, len(data))
        return True
    except Exception:
        logger.exception("JPEG export failed for %s", invoice.invoice_number)
        return False
