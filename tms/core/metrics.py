"""
FREIGHT & PAYMENT METRICS

Pure derivations shared by every entity store and view.

Rules:
- No I/O
- No logging
- No global state (defaults are module constants, overridable per call)
- Deterministic output for the same inputs
"""

import math
from datetime import date, datetime, timedelta
from typing import Dict, Optional, Union

GST_RATE = 0.18
EXPIRY_SOON_WINDOW_DAYS = 30
ROUTE_REVENUE_FACTOR = 0.8

# Expiry classes
EXPIRED = "expired"
EXPIRING_SOON = "expiring_soon"
VALID = "valid"

DateLike = Union[str, date, datetime]


def to_datetime(value: DateLike) -> datetime:
    """
    Coerce an ISO date / datetime string, date or datetime to datetime.

    Accepts "2024-12-22", "2024-12-22T18:00" and "2024-12-22 18:00".
    Bare dates become midnight. Raises ValueError on anything else.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str) and value.strip():
        return datetime.fromisoformat(value.strip())
    raise ValueError(f"Not a date: {value!r}")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ==================================================
# FREIGHT
# ==================================================

def freight_value(weight_kg: float, rate_per_thousand_kg: float) -> float:
    """Freight charge for a consignment: weight × rate / 1000."""
    return weight_kg * rate_per_thousand_kg / 1000


def gst_split(base_amount: float, rate: float = GST_RATE) -> float:
    """GST portion of a base amount."""
    return base_amount * rate


def total_with_gst(base_amount: float, gst: Optional[float] = None) -> float:
    if gst is None:
        gst = gst_split(base_amount)
    return base_amount + gst


def estimated_route_revenue(
    completed_shipments: int,
    rate_per_ton: float,
    factor: float = ROUTE_REVENUE_FACTOR,
) -> float:
    return completed_shipments * rate_per_ton * factor


# ==================================================
# PAYMENTS
# ==================================================

def payment_state(invoice_amount: float, paid_amount: float) -> Dict:
    """
    Derive payment status from the invoice and paid amounts.

    Returns:
        {"status": "paid" | "partial" | "unpaid",
         "remaining": outstanding balance (never negative),
         "utilization": percent of the invoice paid}

    A zero invoice counts as settled: status "paid", remaining 0,
    utilization 100.
    """
    if invoice_amount <= 0:
        return {"status": "paid", "remaining": 0, "utilization": 100.0}

    remaining = invoice_amount - paid_amount

    if remaining <= 0:
        status = "paid"
    elif paid_amount <= 0:
        status = "unpaid"
    else:
        status = "partial"

    return {
        "status": status,
        "remaining": max(remaining, 0),
        "utilization": paid_amount / invoice_amount * 100,
    }


def credit_utilization(outstanding: float, total_revenue: float) -> float:
    return outstanding / total_revenue * 100 if total_revenue > 0 else 0


def collection_rate(collected: float, outstanding: float) -> float:
    """Share of billed money already collected, as a percentage."""
    billed = collected + outstanding
    return collected / billed * 100 if billed > 0 else 0


def days_sales_outstanding(
    receivables: float,
    credit_sales: float,
    period_days: int = 30,
) -> float:
    """DSO: receivables / credit sales × days in the period."""
    return receivables / credit_sales * period_days if credit_sales > 0 else 0


# ==================================================
# TIME
# ==================================================

def delay_hours(expected: Optional[DateLike], actual: Optional[DateLike]) -> Optional[int]:
    """
    Arrival delay in whole hours (actual − expected).

    Positive means late; zero or negative means on time or early.
    Returns None until both timestamps are known.
    """
    if not expected or not actual:
        return None

    delta = to_datetime(actual) - to_datetime(expected)
    return _round_half_up(delta.total_seconds() / 3600)


def days_until(target: DateLike, now: DateLike) -> int:
    """Whole days from ``now`` until ``target`` (floored; negative once past)."""
    delta = to_datetime(target) - to_datetime(now)
    return math.floor(delta.total_seconds() / 86400)


def expiry_classification(
    expiry_date: DateLike,
    now: DateLike,
    soon_window_days: int = EXPIRY_SOON_WINDOW_DAYS,
) -> str:
    """
    Classify a certificate / licence expiry date.

    "expired" once the date has passed, "expiring_soon" when it falls
    within ``soon_window_days`` (inclusive), otherwise "valid".
    """
    remaining = to_datetime(expiry_date) - to_datetime(now)

    if remaining < timedelta(0):
        return EXPIRED
    if remaining <= timedelta(days=soon_window_days):
        return EXPIRING_SOON
    return VALID


def is_payment_overdue(due_date: Optional[DateLike], status: str, now: DateLike) -> bool:
    if not due_date or status == "paid":
        return False
    return to_datetime(due_date) < to_datetime(now)
