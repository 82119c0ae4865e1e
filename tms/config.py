"""
Runtime configuration for the TMS console.

All values come from the environment with safe defaults.
Never read these inside pure metric functions: pass them in.
"""

import logging
import os


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            f"{name}={raw!r} is not an integer, using {default}"
        )
        return default


TMS_LOG_LEVEL = os.getenv("TMS_LOG_LEVEL", "INFO").upper()

# Documents within this many days of expiry are flagged "expiring_soon"
EXPIRY_SOON_WINDOW_DAYS = _int_env("TMS_EXPIRY_SOON_WINDOW_DAYS", 30)

# Year used in human document numbers (LR-2024-001)
DOCUMENT_YEAR = _int_env("TMS_DOCUMENT_YEAR", 2024)

INVOICE_DUE_DAYS = _int_env("TMS_INVOICE_DUE_DAYS", 7)
PAYMENT_DUE_DAYS = _int_env("TMS_PAYMENT_DUE_DAYS", 15)

SEED_MOCK_DATA = os.getenv("TMS_SEED_MOCK_DATA", "1").strip().lower() not in ("0", "false", "no")


_LOGGING_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    """Apply the console log format once per process."""
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(
        level=getattr(logging, (level or TMS_LOG_LEVEL), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _LOGGING_CONFIGURED = True
