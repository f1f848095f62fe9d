# pdf_service.py
import io
import logging
from datetime import datetime

from reportlab.pdfgen import canvas
from reportlab.lib import colors
from reportlab.lib.utils import ImageReader

from layout import DrawLine, PlaceImage, PlaceText, layout_invoice
from models import Invoice, Profile
from storage import PDF_MIME, export_filename, load_logo

logger = logging.getLogger(__name__)

# Page size in points per profile
PDF_SIZES = {
    Profile.MOBILE: (800, 1200),
    Profile.A4: (595, 842),
}


def _font(bold: bool) -> str:
    return "Helvetica-Bold" if bold else "Helvetica"


def render_invoice_pdf(invoice: Invoice, tax_rate: float, logo, profile: Profile) -> bytes:
    """
    Draw the invoice on one page sized for `profile` and return the PDF bytes.
    `logo` is an already decoded image (or None).
    """
    PAGE_W, PAGE_H = PDF_SIZES[profile]
    page = layout_invoice(invoice, tax_rate, logo, PAGE_W, PAGE_H)

    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=(PAGE_W, PAGE_H))
    pdf.setTitle(f"Invoice - {invoice.invoice_number}")

    # Layout uses a top-left origin; PDF user space starts bottom-left.
    def _map_y(y: float) -> float:
        return PAGE_H - y

    pdf.setFillColor(colors.black)
    pdf.setStrokeColor(colors.black)
    for op in page.ops:
        if isinstance(op, PlaceText):
            pdf.setFont(_font(op.bold), op.size)
            pdf.drawString(op.x, _map_y(op.y), op.text)
        elif isinstance(op, DrawLine):
            pdf.setLineWidth(op.stroke)
            pdf.line(op.x1, _map_y(op.y1), op.x2, _map_y(op.y2))
        elif isinstance(op, PlaceImage):
            pdf.drawImage(
                ImageReader(op.image),
                op.x,
                _map_y(op.y + op.height),
                width=op.width,
                height=op.height,
                mask="auto",
            )

    pdf.showPage()
    pdf.save()
    return buf.getvalue()


def save_invoice_pdf(invoice: Invoice, tax_rate: float, logo_handle, profile: Profile, storage) -> bool:
    """
    Render the PDF and write it through `storage`.
    Returns False (after logging) on any failure; never raises.
    """
    try:
        logo = load_logo(logo_handle)
        data = render_invoice_pdf(invoice, tax_rate, logo, profile)
        filename = export_filename(profile, "pdf", datetime.now())
        out = storage.open_output(filename, PDF_MIME)
        if out is None:
            return False
        with out:
            out.write(data)
        logger.info("Saved %s (%d bytes)", filename, len(data))
        return True
    except Exception:
        logger.exception("PDF export failed for %s", invoice.invoice_number)
        return False
