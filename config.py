# config.py
import locale
import logging
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env if present
load_dotenv()

BASE_DIR = Path(__file__).resolve().parent

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class Config:
    # Flask
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-change-me")

    # Export storage: a dedicated "Invoices" folder under the user's downloads
    INVOICES_DIR = os.getenv(
        "INVOICES_DIR",
        (Path.home() / "Downloads" / "Invoices").as_posix()
    )

    # Uploaded logos (referenced by path from the form session)
    UPLOADS_DIR = os.getenv("UPLOADS_DIR", (BASE_DIR / "instance" / "uploads").as_posix())

    # Form defaults
    DEFAULT_TAX_RATE = float(os.getenv("DEFAULT_TAX_RATE", "5.0"))

    # Only used by the on-screen preview; exported files carry plain numbers.
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")

    # Cap on uploaded logo size (bytes); Flask answers 413 above it
    MAX_CONTENT_LENGTH = int(os.getenv("MAX_CONTENT_LENGTH", str(5 * 1024 * 1024)))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level: str | None = None) -> None:
    """
    Root logging setup shared by the web shell and the CLI.
    Unknown level names fall back to INFO.
    """
    name = (level or Config.LOG_LEVEL or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format=LOG_FORMAT,
        force=True,
    )


def configure_locale() -> bool:
    """
    Adopt the user's LC_NUMERIC so exported amounts use their decimal
    separator. Python starts in the "C" locale until this runs.
    Returns False (and keeps "C") when the environment names a locale
    the system does not have.
    """
    try:
        locale.setlocale(locale.LC_NUMERIC, "")
    except locale.Error as e:
        logging.getLogger(__name__).warning("Keeping C numeric locale: %s", e)
        return False
    return True
