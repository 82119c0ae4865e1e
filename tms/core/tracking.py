# tms/core/tracking.py

from typing import Dict, List

from tms.core.entity_store import EntityStore


def build_shipment_view(lr: Dict, challan: Dict | None) -> Dict:
    """
    Project an LR (and its latest challan, if any) into the shape the
    customer portal shows.

    Read-only: neither input is modified.
    """
    challan = challan or {}
    return {
        "lr_number": lr.get("lr_number"),
        "origin": lr.get("origin"),
        "destination": lr.get("destination"),
        "weight": lr.get("weight"),
        "status": lr.get("status"),
        "ship_date": lr.get("date"),
        "expected_delivery": challan.get("expected_arrival"),
        "delivered_at": lr.get("delivered_at") or challan.get("actual_arrival"),
        "vehicle_number": challan.get("vehicle_number"),
        "driver_name": challan.get("driver_name"),
        "challan_number": challan.get("challan_number"),
    }


def shipments_for_consigner(
    lr_store: EntityStore,
    challan_store: EntityStore,
    consigner: str,
) -> List[Dict]:
    """Every LR raised for ``consigner``, most recent first, with its latest challan."""
    latest_challan: Dict[str, Dict] = {}
    for challan in challan_store.snapshot():
        # snapshot is most recent first, keep the first seen per LR
        latest_challan.setdefault(challan.get("lr_number"), challan)

    return [
        build_shipment_view(lr, latest_challan.get(lr.get("lr_number")))
        for lr in lr_store.where(consigner=consigner)
    ]


def invoices_for_consigner(invoice_store: EntityStore, consigner: str) -> List[Dict]:
    return invoice_store.where(consigner=consigner)


def search_shipments(shipments: List[Dict], search_term: str) -> List[Dict]:
    term = (search_term or "").strip().lower()
    if not term:
        return list(shipments)
    return [
        s for s in shipments
        if term in (s.get("lr_number") or "").lower()
        or term in (s.get("destination") or "").lower()
    ]


def search_invoices(invoices: List[Dict], search_term: str) -> List[Dict]:
    term = (search_term or "").strip().lower()
    if not term:
        return list(invoices)
    return [
        i for i in invoices
        if term in (i.get("invoice_number") or "").lower()
        or term in (i.get("lr_number") or "").lower()
    ]
