# export_service.py
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from image_service import save_invoice_jpeg
from models import Invoice, Profile
from pdf_service import save_invoice_pdf

logger = logging.getLogger(__name__)


class ExportOutcome(enum.Enum):
    BOTH = "both"
    PDF_ONLY = "pdf_only"
    JPEG_ONLY = "jpeg_only"
    NONE = "none"


@dataclass(frozen=True)
class ExportResult:
    outcome: ExportOutcome
    ok: bool
    message: str
    pdf_saved: bool
    jpeg_saved: bool


def _combine(pdf_saved: bool, jpeg_saved: bool, location: str) -> ExportResult:
    if pdf_saved and jpeg_saved:
        return ExportResult(ExportOutcome.BOTH, True, f"Saved PDF & JPEG in {location}", True, True)
    if pdf_saved:
        return ExportResult(ExportOutcome.PDF_ONLY, True, "Saved PDF only", True, False)
    if jpeg_saved:
        return ExportResult(ExportOutcome.JPEG_ONLY, True, "Saved JPEG only", False, True)
    return ExportResult(ExportOutcome.NONE, False, "Failed to save files", False, False)


def save_both_formats(invoice: Invoice, tax_rate: float, logo_handle, profile: Profile, storage) -> ExportResult:
    """
    Export the invoice as PDF and as JPEG for `profile`.

    The two encoders run one after the other and fail independently: a
    file written by one is kept even when the other fails. Nothing is
    retried and nothing is raised to the caller.
    """
    pdf_saved = save_invoice_pdf(invoice, tax_rate, logo_handle, profile, storage)
    jpeg_saved = save_invoice_jpeg(invoice, tax_rate, logo_handle, profile, storage)

    location = getattr(storage, "location", None) or "Downloads/Invoices"
    result = _combine(pdf_saved, jpeg_saved, location)
    if result.ok:
        logger.info("Export %s (%s): %s", invoice.invoice_number, profile.value, result.message)
    else:
        logger.error("Export %s (%s): %s", invoice.invoice_number, profile.value, result.message)
    return result
