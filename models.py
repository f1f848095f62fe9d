# models.py
from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, Mapping


# -----------------------------
# Output profiles
# -----------------------------
class Profile(enum.Enum):
    """Output sizing preset. The value is the tag used in export filenames."""

    MOBILE = "MOBILE"
    A4 = "A4"

    @classmethod
    def parse(cls, text: str | None) -> "Profile":
        key = (text or "").strip().upper()
        if key == "A4":
            return cls.A4
        return cls.MOBILE


# -----------------------------
# Free-text parsing (form input)
# -----------------------------
def parse_qty(text, default: int = 1) -> int:
    """
    Quantity typed by the user. Anything that is not a non-negative
    integer becomes `default`; the user is still editing.
    """
    try:
        value = int(str(text).strip())
    except (TypeError, ValueError):
        return default
    return value if value >= 0 else default


def _parse_decimal(text, default: float) -> float:
    try:
        value = float(str(text).strip())
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value < 0:
        return default
    return value


def parse_price(text, default: float = 0.0) -> float:
    return _parse_decimal(text, default)


def parse_tax_rate(text, default: float = 0.0) -> float:
    return _parse_decimal(text, default)


# -----------------------------
# Invoice values
# -----------------------------
@dataclass
class InvoiceItem:
    """One line of the invoice. Position in the list is its only identity."""

    description: str = ""
    qty: int = 1
    unit_price: float = 0.0

    def line_total(self) -> float:
        return self.qty * self.unit_price


@dataclass(frozen=True)
class Invoice:
    """
    Snapshot of the form at render/export time.

    Totals are recomputed from `items` on every call. The tax rate is an
    argument, never a field.
    """

    seller_name: str = ""
    seller_address: str = ""
    buyer_name: str = ""
    buyer_address: str = ""
    invoice_number: str = ""
    date: str = ""
    items: tuple[InvoiceItem, ...] = field(default_factory=tuple)

    # Convenience totals (computed, not stored)
    def subtotal(self) -> float:
        return sum((it.qty * it.unit_price for it in self.items), 0.0)

    def tax(self, rate: float) -> float:
        return self.subtotal() * rate / 100.0

    def total(self, rate: float) -> float:
        return self.subtotal() + self.tax(rate)


def item_from_fields(description, qty_text, price_text) -> InvoiceItem:
    return InvoiceItem(
        description=str(description or ""),
        qty=parse_qty(qty_text),
        unit_price=parse_price(price_text),
    )


def _copy_item(raw) -> InvoiceItem:
    if isinstance(raw, InvoiceItem):
        return replace(raw)
    if isinstance(raw, Mapping):
        return item_from_fields(
            raw.get("description", ""),
            raw.get("qty", 1),
            raw.get("unit_price", 0.0),
        )
    raise TypeError(f"Unsupported invoice item: {raw!r}")


# -----------------------------
# Invoice number / date
# -----------------------------
def make_invoice_number(now: datetime) -> str:
    """
    INV-<seconds since epoch>. Two invoices built within the same second
    share a number.
    """
    return f"INV-{int(now.timestamp())}"


def build_invoice(
    *,
    seller_name: str = "",
    seller_address: str = "",
    buyer_name: str = "",
    buyer_address: str = "",
    items: Iterable = (),
    now: datetime | None = None,
) -> Invoice:
    """
    Snapshot the caller's current values into an Invoice.
    Items are copied so later edits of the caller's list never reach
    a render or export that is already running.
    """
    stamp = now or datetime.now()
    return Invoice(
        seller_name=seller_name or "",
        seller_address=seller_address or "",
        buyer_name=buyer_name or "",
        buyer_address=buyer_address or "",
        invoice_number=make_invoice_number(stamp),
        date=stamp.strftime("%Y-%m-%d"),
        items=tuple(_copy_item(it) for it in items),
    )
