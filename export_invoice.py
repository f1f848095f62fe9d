# export_invoice.py
import argparse
import json
from pathlib import Path

from config import Config, configure_locale, configure_logging
from export_service import save_both_formats
from models import Profile, build_invoice, parse_tax_rate
from storage import DownloadsStorage


def _load_invoice_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise SystemExit(f"Invoice file not found: {path}")
    except json.JSONDecodeError as e:
        raise SystemExit(f"Invoice file is not valid JSON: {path} ({e})")
    if not isinstance(data, dict):
        raise SystemExit("Invoice file must contain a JSON object.")
    items = data.get("items", [])
    if not isinstance(items, list) or not all(isinstance(it, dict) for it in items):
        raise SystemExit("'items' must be a list of objects.")
    return data


def main(argv=None):
    parser = argparse.ArgumentParser(description="Export an invoice as PDF and JPEG.")
    parser.add_argument("invoice", type=Path, help="JSON file with seller/buyer fields and items.")
    parser.add_argument("--profile", choices=["mobile", "a4"], default="mobile", help="Output sizing preset.")
    parser.add_argument("--tax", type=str, default=None, help="Tax rate in percent (overrides the file).")
    parser.add_argument("--logo", type=str, default="", help="Logo image file.")
    parser.add_argument("--out", type=str, default=Config.INVOICES_DIR, help="Folder to write exports into.")
    parser.add_argument("--log-level", type=str, default=Config.LOG_LEVEL)
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    configure_locale()

    data = _load_invoice_json(args.invoice)
    raw_tax = args.tax if args.tax is not None else data.get("tax_rate", Config.DEFAULT_TAX_RATE)
    tax_rate = parse_tax_rate(raw_tax)

    invoice = build_invoice(
        seller_name=str(data.get("seller_name", "")),
        seller_address=str(data.get("seller_address", "")),
        buyer_name=str(data.get("buyer_name", "")),
        buyer_address=str(data.get("buyer_address", "")),
        items=data.get("items", []),
    )

    storage = DownloadsStorage(args.out)
    result = save_both_formats(invoice, tax_rate, args.logo or None, Profile.parse(args.profile), storage)

    print(f"{invoice.invoice_number}: {result.message}")
    print(f"Subtotal: {invoice.subtotal():.2f}")
    print(f"Tax:      {invoice.tax(tax_rate):.2f}")
    print(f"Total:    {invoice.total(tax_rate):.2f}")
    print(f"Exports:  {storage.root}")
    return 0 if result.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
