from tms.core.tracking import (
    invoices_for_consigner,
    search_invoices,
    search_shipments,
    shipments_for_consigner,
)
from tms.security.roles import CHALLAN, INVOICE, LR


def test_shipments_for_consigner(workspace):
    shipments = shipments_for_consigner(workspace[LR], workspace[CHALLAN], "ABC Traders")

    assert [s["lr_number"] for s in shipments] == ["LR-2024-001", "LR-2024-005"]

    in_transit, delivered = shipments
    assert in_transit["vehicle_number"] == "MH-01-AB-1234"
    assert in_transit["expected_delivery"] == "2024-12-22T18:00"
    assert in_transit["delivered_at"] is None

    assert delivered["vehicle_number"] is None
    assert delivered["delivered_at"] == "2024-12-17T11:00"


def test_other_consigners_are_not_visible(workspace):
    shipments = shipments_for_consigner(workspace[LR], workspace[CHALLAN], "Retail Hub")
    assert [s["lr_number"] for s in shipments] == ["LR-2024-003"]
    assert shipments_for_consigner(workspace[LR], workspace[CHALLAN], "Nobody") == []


def test_latest_challan_wins(workspace):
    workspace[CHALLAN].create({"lr_number": "LR-2024-001", "vehicle_number": "DL-01-EF-9012"})

    shipments = shipments_for_consigner(workspace[LR], workspace[CHALLAN], "ABC Traders")
    assert shipments[0]["vehicle_number"] == "DL-01-EF-9012"


def test_search_shipments(workspace):
    shipments = shipments_for_consigner(workspace[LR], workspace[CHALLAN], "ABC Traders")

    assert [s["lr_number"] for s in search_shipments(shipments, "bangalore")] == ["LR-2024-005"]
    assert [s["lr_number"] for s in search_shipments(shipments, "lr-2024-001")] == ["LR-2024-001"]
    assert search_shipments(shipments, "  ") == shipments


def test_invoices_for_consigner(workspace):
    invoices = invoices_for_consigner(workspace[INVOICE], "ABC Traders")
    assert [i["invoice_number"] for i in invoices] == ["INV-2024-001"]

    assert search_invoices(invoices, "LR-2024-001") == invoices
    assert search_invoices(invoices, "INV-2024-002") == []
