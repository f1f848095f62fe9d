# layout.py
"""
Invoice page layout shared by the PDF and JPEG encoders.

Coordinates are top-left origin, y growing down; a text `y` is its baseline.
Every length is a base value (in points on a 595-wide A4 page) times
`scale = width / 595`, so a layout computed for any canvas width is the A4
layout stretched uniformly.
"""
from __future__ import annotations

import locale
import logging
from dataclasses import dataclass, field
from typing import Any, Union

from models import Invoice

logger = logging.getLogger(__name__)

REFERENCE_WIDTH = 595.0

# Base geometry (points at REFERENCE_WIDTH)
MARGIN = 40
TITLE_SIZE = 36
TITLE_BASELINE = 30
BODY_SIZE = 14
TABLE_SIZE = 16
HEADER_BLOCK = 80
INFO_GAP = 30
DATE_FROM_RIGHT = 200
TABLE_HEADER_GAP = 20
ROW_HEIGHT = 18
TOTALS_GAP = 20
STROKE = 1

LOGO_FRACTION = 0.2
SELLER_NAME_X = 0.22

# Column positions as fractions of the page width
COL_QTY = 0.7
COL_UNIT = 0.8
COL_TOTAL = 0.9
TOTALS_X = 0.6


# -----------------------------
# Draw operations
# -----------------------------
@dataclass(frozen=True)
class PlaceText:
    text: str
    x: float
    y: float
    size: float
    bold: bool = False


@dataclass(frozen=True)
class PlaceImage:
    image: Any
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class DrawLine:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: float


DrawOp = Union[PlaceText, PlaceImage, DrawLine]


@dataclass(frozen=True)
class Layout:
    width: float
    height: float
    scale: float
    ops: list[DrawOp] = field(default_factory=list)
    # True when item rows or totals run past the bottom of the page.
    # Only one page is ever produced; the encoder canvas clips the rest.
    overflows: bool = False


# -----------------------------
# Formatting
# -----------------------------
def format_amount(value: float) -> str:
    """Two decimals, locale decimal separator, no grouping, no currency."""
    return locale.format_string("%.2f", float(value))


def _tax_label(rate: float) -> str:
    return f"Tax ({float(rate):g}%):"


# -----------------------------
# Layout
# -----------------------------
def layout_invoice(invoice: Invoice, tax_rate: float, logo, width: float, height: float) -> Layout:
    """
    Compute the draw operations for a single-page invoice on a
    `width` x `height` canvas. Pure: no I/O, same input -> same output.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Canvas size must be positive: {width}x{height}")

    s = width / REFERENCE_WIDTH
    ops: list = []

    def text(value, x, y, size, bold=False):
        ops.append(PlaceText(str(value), float(x), float(y), float(size), bold))

    def line(x1, y1, x2, y2):
        ops.append(DrawLine(float(x1), float(y1), float(x2), float(y2), STROKE * s))

    margin = MARGIN * s
    left = margin
    right = width - left
    y = margin

    # Header - logo + seller
    if logo is not None:
        side = width * LOGO_FRACTION
        ops.append(PlaceImage(logo, float(left), float(y), float(side), float(side)))
    text(invoice.seller_name, left + width * SELLER_NAME_X, y + TITLE_BASELINE * s, TITLE_SIZE * s, bold=True)

    y += HEADER_BLOCK * s
    text(invoice.seller_address, left, y, BODY_SIZE * s)
    y += INFO_GAP * s
    text(f"Invoice #: {invoice.invoice_number}", left, y, BODY_SIZE * s)
    text(f"Date: {invoice.date}", width - DATE_FROM_RIGHT * s, y, BODY_SIZE * s)
    y += INFO_GAP * s

    # Table header
    size = TABLE_SIZE * s
    text("Description", left, y, size, bold=True)
    text("Qty", width * COL_QTY, y, size, bold=True)
    text("Unit", width * COL_UNIT, y, size, bold=True)
    text("Total", width * COL_TOTAL, y, size, bold=True)
    y += TABLE_HEADER_GAP * s
    line(left, y, right, y)
    y += ROW_HEIGHT * s

    # Items
    for it in invoice.items:
        text(it.description, left, y, size)
        text(it.qty, width * COL_QTY, y, size)
        text(format_amount(it.unit_price), width * COL_UNIT, y, size)
        text(format_amount(it.line_total()), width * COL_TOTAL, y, size)
        y += ROW_HEIGHT * s

    # Totals
    y += TOTALS_GAP * s
    line(width * TOTALS_X, y, right, y)
    y += TOTALS_GAP * s
    text("Subtotal:", width * TOTALS_X, y, size)
    text(format_amount(invoice.subtotal()), width * COL_TOTAL, y, size)
    y += ROW_HEIGHT * s
    text(_tax_label(tax_rate), width * TOTALS_X, y, size)
    text(format_amount(invoice.tax(tax_rate)), width * COL_TOTAL, y, size)
    y += ROW_HEIGHT * s
    text("Total:", width * TOTALS_X, y, size, bold=True)
    text(format_amount(invoice.total(tax_rate)), width * COL_TOTAL, y, size, bold=True)

    overflows = y > height - margin
    if overflows:
        logger.warning(
            "Invoice %s does not fit on one %gx%g page (%d items); content past the bottom is clipped",
            invoice.invoice_number, width, height, len(invoice.items),
        )

    return Layout(width=float(width), height=float(height), scale=s, ops=ops, overflows=overflows)
