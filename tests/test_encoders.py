import io
import re

import pytest
from PIL import Image

import image_service
import pdf_service
from models import Profile


def _media_box(data: bytes):
    m = re.search(rb"/MediaBox\s*\[\s*0\s+0\s+([\d.]+)\s+([\d.]+)\s*\]", data)
    assert m, "no MediaBox in PDF"
    return float(m.group(1)), float(m.group(2))


@pytest.mark.parametrize("profile, size", [(Profile.MOBILE, (800, 1200)), (Profile.A4, (595, 842))])
def test_pdf_page_matches_profile(sample_invoice, profile, size):
    data = pdf_service.render_invoice_pdf(sample_invoice, 5.0, None, profile)

    assert data.startswith(b"%PDF")
    assert data.rstrip().endswith(b"%%EOF")
    assert _media_box(data) == size


@pytest.mark.parametrize("profile, size", [(Profile.MOBILE, (1200, 1800)), (Profile.A4, (2480, 3508))])
def test_jpeg_matches_profile(sample_invoice, profile, size):
    data = image_service.render_invoice_jpeg(sample_invoice, 5.0, None, profile)

    img = Image.open(io.BytesIO(data))
    assert img.format == "JPEG"
    assert img.size == size


def test_jpeg_background_is_white(sample_invoice):
    data = image_service.render_invoice_jpeg(sample_invoice, 5.0, None, Profile.MOBILE)
    img = Image.open(io.BytesIO(data)).convert("RGB")
    r, g, b = img.getpixel((1190, 1790))
    assert min(r, g, b) > 245


def test_jpeg_draws_text(sample_invoice):
    data = image_service.render_invoice_jpeg(sample_invoice, 5.0, None, Profile.MOBILE)
    img = Image.open(io.BytesIO(data)).convert("L")
    # some dark pixels exist somewhere on the page
    assert img.getextrema()[0] < 100


def test_jpeg_pastes_logo(sample_invoice, logo_png):
    from storage import load_logo

    data = image_service.render_invoice_jpeg(sample_invoice, 5.0, load_logo(logo_png), Profile.MOBILE)
    img = Image.open(io.BytesIO(data)).convert("RGB")
    # logo square starts at the margin (~81px) and is 240px wide on mobile
    r, g, b = img.getpixel((200, 200))
    assert r > 200 and g < 80 and b < 80


def test_pdf_embeds_logo_only_when_given(sample_invoice, logo_png):
    from storage import load_logo

    with_logo = pdf_service.render_invoice_pdf(sample_invoice, 5.0, load_logo(logo_png), Profile.A4)
    without = pdf_service.render_invoice_pdf(sample_invoice, 5.0, None, Profile.A4)

    assert b"/Subtype /Image" in with_logo
    assert b"/Subtype /Image" not in without


@pytest.mark.parametrize(
    "save, ext",
    [(pdf_service.save_invoice_pdf, "pdf"), (image_service.save_invoice_jpeg, "jpg")],
)
def test_save_writes_named_file(sample_invoice, storage, save, ext):
    assert save(sample_invoice, 5.0, None, Profile.A4, storage) is True

    files = list(storage.root.iterdir())
    assert len(files) == 1
    assert re.fullmatch(rf"invoice_A4_\d+\.{ext}", files[0].name)
    assert files[0].stat().st_size > 0


@pytest.mark.parametrize("save", [pdf_service.save_invoice_pdf, image_service.save_invoice_jpeg])
def test_save_reports_missing_sink(sample_invoice, null_storage, save):
    assert save(sample_invoice, 5.0, None, Profile.MOBILE, null_storage) is False
    assert len(null_storage.requests) == 1


@pytest.mark.parametrize("save", [pdf_service.save_invoice_pdf, image_service.save_invoice_jpeg])
def test_save_continues_without_undecodable_logo(sample_invoice, storage, save):
    assert save(sample_invoice, 5.0, b"definitely not an image", Profile.MOBILE, storage) is True


@pytest.mark.parametrize(
    "module, render_name, save_name",
    [
        (pdf_service, "render_invoice_pdf", "save_invoice_pdf"),
        (image_service, "render_invoice_jpeg", "save_invoice_jpeg"),
    ],
)
def test_save_catches_render_failure(monkeypatch, sample_invoice, storage, module, render_name, save_name):
    def boom(*args, **kwargs):
        raise MemoryError("canvas too large")

    monkeypatch.setattr(module, render_name, boom)

    assert getattr(module, save_name)(sample_invoice, 5.0, None, Profile.A4, storage) is False
    assert not storage.root.exists() or not list(storage.root.iterdir())


def test_save_catches_write_failure(sample_invoice):
    class BrokenSink(io.BytesIO):
        def write(self, data):
            raise OSError("No space left on device")

    class FullDisk:
        location = "full"

        def open_output(self, filename, mime_type):
            return BrokenSink()

    assert pdf_service.save_invoice_pdf(sample_invoice, 5.0, None, Profile.A4, FullDisk()) is False
    assert image_service.save_invoice_jpeg(sample_invoice, 5.0, None, Profile.A4, FullDisk()) is False
