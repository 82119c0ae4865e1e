"""
Summary Metrics - per-store cards, dashboard KPIs and analytics series

All functions take record snapshots (lists of dicts, as returned by
EntityStore.snapshot / list) so they work on filtered views too.
"""

from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

from tms.core.metrics import (
    EXPIRED,
    EXPIRING_SOON,
    collection_rate,
    days_sales_outstanding,
)
from tms.security.roles import (
    CHALLAN,
    CUSTOMERS,
    DRIVERS,
    INVOICE,
    LR,
    PAYMENTS,
    ROUTES,
    VEHICLES,
)

Records = List[Dict[str, Any]]


def _count(records: Records, status: str) -> int:
    return sum(1 for r in records if r.get("status") == status)


def _total(records: Iterable[Dict[str, Any]], name: str) -> float:
    return sum((r.get(name) or 0) for r in records)


def _average(records: Records, name: str) -> float:
    if not records:
        return 0
    return _total(records, name) / len(records)


# ==================================================
# STORE SUMMARY CARDS
# ==================================================

def lr_summary(lrs: Records) -> Dict[str, Any]:
    return {
        "total": len(lrs),
        "in_transit": _count(lrs, "in_transit"),
        "delivered": _count(lrs, "delivered"),
        "total_revenue": _total(lrs, "total_value"),
    }


def challan_summary(challans: Records) -> Dict[str, Any]:
    arrived = [c for c in challans if c.get("delay_hours") is not None]
    return {
        "total": len(challans),
        "pending": _count(challans, "pending"),
        "in_transit": _count(challans, "in_transit"),
        "delivered": _count(challans, "delivered"),
        "on_time": sum(1 for c in arrived if c["delay_hours"] <= 0),
        "late": sum(1 for c in arrived if c["delay_hours"] > 0),
    }


def vehicle_summary(vehicles: Records) -> Dict[str, Any]:
    flagged = (EXPIRED, EXPIRING_SOON)
    return {
        "total": len(vehicles),
        "active": _count(vehicles, "active"),
        "maintenance": _count(vehicles, "maintenance"),
        "total_capacity": _total(vehicles, "capacity"),
        "documents_attention": sum(
            1 for v in vehicles
            if v.get("insurance_status") in flagged or v.get("pollution_cert_status") in flagged
        ),
    }


def driver_summary(drivers: Records) -> Dict[str, Any]:
    return {
        "total": len(drivers),
        "active": _count(drivers, "active"),
        "avg_rating": round(_average(drivers, "avg_rating"), 2),
        "avg_on_time": round(_average(drivers, "on_time_percentage"), 1),
        "licenses_attention": sum(
            1 for d in drivers if d.get("license_status") in (EXPIRED, EXPIRING_SOON)
        ),
    }


def route_summary(routes: Records) -> Dict[str, Any]:
    return {
        "total": len(routes),
        "active": _count(routes, "active"),
        "total_distance": _total(routes, "distance"),
        "total_shipments": _total(routes, "completed_shipments"),
        "estimated_revenue": _total(routes, "estimated_revenue"),
    }


def customer_summary(customers: Records) -> Dict[str, Any]:
    return {
        "total": len(customers),
        "active": _count(customers, "active"),
        "total_revenue": _total(customers, "total_revenue"),
        "total_outstanding": _total(customers, "outstanding_balance"),
    }


def invoice_summary(invoices: Records) -> Dict[str, Any]:
    paid = [i for i in invoices if i.get("status") == "paid"]
    open_invoices = [i for i in invoices if i.get("status") != "paid"]
    return {
        "total_amount": _total(invoices, "amount"),
        "paid_amount": _total(paid, "amount"),
        "pending_amount": _total(open_invoices, "remaining"),
        "total_gst": _total(invoices, "gst"),
    }


def payment_summary(payments: Records, period_days: int = 30) -> Dict[str, Any]:
    collected = _total(payments, "paid_amount")
    outstanding = _total(payments, "remaining_balance")
    return {
        "total": len(payments),
        "paid": _count(payments, "paid"),
        "partial": _count(payments, "partial"),
        "unpaid": _count(payments, "unpaid"),
        "total_collected": collected,
        "total_outstanding": outstanding,
        "collection_rate": collection_rate(collected, outstanding),
        "dso_days": round(
            days_sales_outstanding(outstanding, _total(payments, "invoice_amount"), period_days), 1
        ),
    }


SUMMARY_BUILDERS = {
    LR: lr_summary,
    CHALLAN: challan_summary,
    VEHICLES: vehicle_summary,
    DRIVERS: driver_summary,
    ROUTES: route_summary,
    CUSTOMERS: customer_summary,
    INVOICE: invoice_summary,
    PAYMENTS: payment_summary,
}


def store_summary(resource: str, records: Records) -> Dict[str, Any]:
    if resource not in SUMMARY_BUILDERS:
        raise ValueError(f"No summary for resource '{resource}'")
    return SUMMARY_BUILDERS[resource](records)


# ==================================================
# DASHBOARD & ANALYTICS
# ==================================================

def dashboard_kpis(
    lrs: Records,
    challans: Records,
    invoices: Records,
) -> Dict[str, Any]:
    """Headline cards above the console tabs."""
    return {
        "active_lrs": sum(1 for r in lrs if r.get("status") != "delivered"),
        "pending_challans": _count(challans, "pending"),
        "pending_invoices": sum(1 for i in invoices if i.get("status") != "paid"),
        "total_revenue": _total(lrs, "total_value"),
    }


def status_distribution(records: Records, statuses: Optional[Iterable[str]] = None) -> Dict[str, int]:
    """Count per status; listed statuses appear even when zero."""
    counts = Counter(r.get("status") for r in records)
    if statuses is None:
        return dict(counts)
    return {status: counts.get(status, 0) for status in statuses}


def revenue_by_lane(lrs: Records, top: Optional[int] = None) -> List[Dict[str, Any]]:
    """Freight value per origin-destination lane, highest first."""
    lanes: Dict[str, float] = {}
    for lr in lrs:
        lane = f"{lr.get('origin') or '?'}-{lr.get('destination') or '?'}"
        lanes[lane] = lanes.get(lane, 0) + (lr.get("total_value") or 0)

    ranked = sorted(lanes.items(), key=lambda item: item[1], reverse=True)
    if top is not None and len(ranked) > top:
        others = sum(value for _, value in ranked[top:])
        ranked = ranked[:top] + [("Others", others)]

    return [{"lane": lane, "revenue": value} for lane, value in ranked]


def invoice_revenue_breakdown(invoices: Records) -> Dict[str, float]:
    gst = _total(invoices, "gst")
    net = _total(invoices, "amount")
    return {
        "gross": net + gst,
        "gst": gst,
        "net": net,
    }
