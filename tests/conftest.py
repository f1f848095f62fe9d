import io
import locale
import sys
from datetime import datetime
from pathlib import Path

import pytest

# Ensure the repo root modules are importable when running tests from anywhere.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _restore_numeric_locale():
    """create_app and the CLI switch LC_NUMERIC process-wide."""
    saved = locale.setlocale(locale.LC_NUMERIC)
    yield
    locale.setlocale(locale.LC_NUMERIC, saved)


class NullStorage:
    """Storage that refuses every file, like a full or read-only disk."""

    location = "nowhere"

    def __init__(self):
        self.requests = []

    def open_output(self, filename, mime_type):
        self.requests.append((filename, mime_type))
        return None


class SelectiveStorage:
    """Hands out in-memory sinks only for the given MIME types."""

    location = "memory"

    def __init__(self, allowed):
        self.allowed = set(allowed)
        self.files = {}

    def open_output(self, filename, mime_type):
        if mime_type not in self.allowed:
            return None
        storage = self

        class _Sink(io.BytesIO):
            def close(self):
                storage.files[filename] = self.getvalue()
                super().close()

        return _Sink()


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 2, 3, 4, 5)


@pytest.fixture
def sample_invoice(fixed_now):
    from models import InvoiceItem, build_invoice

    return build_invoice(
        seller_name="My Company Ltd",
        seller_address="123 Business St, City",
        buyer_name="Client Name",
        buyer_address="Client Address",
        items=[InvoiceItem("Design Work", 2, 150.0)],
        now=fixed_now,
    )


@pytest.fixture
def storage(tmp_path):
    from storage import DownloadsStorage

    return DownloadsStorage(tmp_path / "Downloads" / "Invoices")


@pytest.fixture
def null_storage():
    return NullStorage()


@pytest.fixture
def selective_storage():
    return SelectiveStorage


@pytest.fixture
def logo_png():
    from PIL import Image

    buf = io.BytesIO()
    Image.new("RGB", (8, 8), (255, 0, 0)).save(buf, format="PNG")
    return buf.getvalue()
