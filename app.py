# app.py
import logging
from datetime import datetime
from pathlib import Path

from flask import (
    Flask, render_template, request, redirect, url_for,
    flash, session
)

from config import Config, configure_locale, configure_logging
from export_service import save_both_formats
from models import (
    InvoiceItem, Profile, build_invoice, item_from_fields, parse_tax_rate
)
from storage import DownloadsStorage, load_logo

logger = logging.getLogger(__name__)

FORM_KEY = "invoice_form"
LOGO_KEY = "logo_path"


# -----------------------------
# Helpers
# -----------------------------
def _default_form(tax_rate: float) -> dict:
    return {
        "seller_name": "My Company Ltd",
        "seller_address": "123 Business St, City",
        "buyer_name": "Client Name",
        "buyer_address": "Client Address",
        "tax_rate": tax_rate,
        "items": [{"description": "Design Work", "qty": 1, "unit_price": 150.0}],
    }


def _parse_item_rows(descriptions, qtys, prices):
    """
    One dict per submitted row. Rows are kept even when blank: the
    user added them on purpose and may still be typing.
    """
    out = []
    n = max(len(descriptions), len(qtys), len(prices))
    for i in range(n):
        item = item_from_fields(
            descriptions[i] if i < len(descriptions) else "",
            qtys[i] if i < len(qtys) else "",
            prices[i] if i < len(prices) else "",
        )
        out.append({"description": item.description, "qty": item.qty, "unit_price": item.unit_price})
    return out


def _money(x, symbol: str) -> str:
    try:
        return f"{symbol}{float(x):,.2f}"
    except Exception:
        return f"{symbol}{x}"


def _ensure_dirs(app: Flask):
    Path(app.config["UPLOADS_DIR"]).mkdir(parents=True, exist_ok=True)


def _discard_logo(uploads_dir, path):
    """Delete a previously uploaded logo. Only files inside `uploads_dir` are touched."""
    if not path:
        return
    p = Path(path)
    if p.parent.resolve() != Path(uploads_dir).resolve():
        return
    try:
        p.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("Could not remove old logo %s: %s", p, e)


# -----------------------------
# App factory
# -----------------------------
def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app.config.get("LOG_LEVEL"))
    configure_locale()
    _ensure_dirs(app)

    def current_form() -> dict:
        form = session.get(FORM_KEY)
        if not form:
            form = _default_form(float(app.config["DEFAULT_TAX_RATE"]))
            session[FORM_KEY] = form
        return form

    def save_form(form: dict):
        session[FORM_KEY] = form
        session.modified = True

    def snapshot(form: dict):
        return build_invoice(
            seller_name=form.get("seller_name", ""),
            seller_address=form.get("seller_address", ""),
            buyer_name=form.get("buyer_name", ""),
            buyer_address=form.get("buyer_address", ""),
            items=[InvoiceItem(**it) for it in form.get("items", [])],
        )

    def storage() -> DownloadsStorage:
        return DownloadsStorage(app.config["INVOICES_DIR"])

    # -----------------------------
    # Form
    # -----------------------------
    @app.route("/", methods=["GET"])
    def index():
        form = current_form()
        invoice = snapshot(form)
        rate = float(form.get("tax_rate", 0.0) or 0.0)
        symbol = app.config["CURRENCY_SYMBOL"]
        return render_template(
            "index.html",
            form=form,
            invoice=invoice,
            has_logo=bool(session.get(LOGO_KEY)),
            subtotal=_money(invoice.subtotal(), symbol),
            tax=_money(invoice.tax(rate), symbol),
            total=_money(invoice.total(rate), symbol),
        )

    @app.route("/", methods=["POST"])
    def submit():
        form = current_form()
        form.update({
            "seller_name": request.form.get("seller_name", form["seller_name"]),
            "seller_address": request.form.get("seller_address", form["seller_address"]),
            "buyer_name": request.form.get("buyer_name", form["buyer_name"]),
            "buyer_address": request.form.get("buyer_address", form["buyer_address"]),
            "tax_rate": parse_tax_rate(request.form.get("tax_rate", form["tax_rate"])),
            "items": _parse_item_rows(
                request.form.getlist("item_description"),
                request.form.getlist("item_qty"),
                request.form.getlist("item_price"),
            ),
        })

        action = (request.form.get("action") or "update").strip()
        if action == "add_item":
            form["items"].append({"description": "", "qty": 1, "unit_price": 0.0})
        elif action.startswith("remove:"):
            try:
                idx = int(action.split(":", 1)[1])
            except ValueError:
                idx = -1
            if 0 <= idx < len(form["items"]):
                form["items"].pop(idx)
        elif action in ("export_mobile", "export_a4"):
            profile = Profile.A4 if action == "export_a4" else Profile.MOBILE
            result = save_both_formats(
                snapshot(form),
                form["tax_rate"],
                session.get(LOGO_KEY),
                profile,
                storage(),
            )
            flash(result.message, "success" if result.ok else "error")

        save_form(form)
        return redirect(url_for("index"))

    # -----------------------------
    # Logo
    # -----------------------------
    @app.route("/logo", methods=["POST"])
    def logo_upload():
        f = request.files.get("logo")
        if not f or not f.filename:
            flash("Choose an image first.", "error")
            return redirect(url_for("index"))

        data = f.read()
        if load_logo(data) is None:
            flash("That file is not an image.", "error")
            return redirect(url_for("index"))

        suffix = Path(f.filename).suffix.lower()[:8] or ".img"
        millis = int(datetime.now().timestamp() * 1000)
        dest = Path(app.config["UPLOADS_DIR"]) / f"logo_{millis}{suffix}"
        dest.write_bytes(data)
        previous = session.get(LOGO_KEY)
        if previous != str(dest):
            _discard_logo(app.config["UPLOADS_DIR"], previous)
        session[LOGO_KEY] = str(dest)
        logger.info("Stored logo %s (%d bytes)", dest, len(data))
        flash("Logo uploaded.", "success")
        return redirect(url_for("index"))

    @app.route("/logo/clear", methods=["POST"])
    def logo_clear():
        _discard_logo(app.config["UPLOADS_DIR"], session.pop(LOGO_KEY, None))
        return redirect(url_for("index"))

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
