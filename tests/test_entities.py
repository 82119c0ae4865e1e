from datetime import datetime

import pytest

from tms.core.entities import create_stores
from tms.core.lifecycle import InvalidTransition
from tms.core.role_guard import AuthorizationError
from tms.security.roles import (
    ACCOUNTS,
    CHALLAN,
    CUSTOMERS,
    DRIVERS,
    INVOICE,
    LR,
    OPERATIONS,
    PAYMENTS,
    ROUTES,
    VEHICLES,
)


def test_seeded_derived_fields(workspace):
    assert workspace[LR].get("lr-1")["total_value"] == 12500
    assert workspace[CHALLAN].get("ch-2")["delay_hours"] == 0
    assert workspace[CHALLAN].get("ch-1")["delay_hours"] is None
    assert workspace[VEHICLES].get("veh-1")["load_utilization"] == pytest.approx(86.667, abs=1e-3)
    assert workspace[DRIVERS].get("drv-3")["license_status"] == "valid"
    assert workspace[ROUTES].get("rt-1")["estimated_revenue"] == pytest.approx(290000)
    assert workspace[CUSTOMERS].get("cus-1")["credit_utilization"] == pytest.approx(6.207, abs=1e-3)


def test_challan_delivery_records_delay(workspace):
    store = workspace[CHALLAN]
    challan = store.create({
        "lr_number": "LR-2024-003",
        "vehicle_number": "DL-01-EF-9012",
        "driver_name": "Priya Sharma",
        "expected_arrival": "2024-12-22T10:00",
    })
    assert challan["challan_number"] == "CH-2024-003"
    assert challan["status"] == "pending"
    assert challan["delay_hours"] is None

    store.change_status(challan["id"], "in_transit")
    delivered = store.change_status(challan["id"], "delivered")

    assert delivered["actual_arrival"] == "2024-12-22T12:00"
    assert delivered["delay_hours"] == 2


def test_invoice_creation_defaults(workspace):
    invoice = workspace[INVOICE].create({
        "lr_number": "LR-2024-003",
        "consigner": "Retail Hub",
        "amount": "7200",
        "gst": "",
    })

    assert invoice["invoice_number"] == "INV-2024-004"
    assert invoice["status"] == "draft"
    assert invoice["gst"] == pytest.approx(1296)
    assert invoice["total_with_gst"] == pytest.approx(8496)
    assert invoice["remaining"] == 7200
    assert invoice["due_date"] == "2024-12-29"


def test_invoice_partial_then_full_payment(workspace):
    store = workspace[INVOICE]

    partial = store.record_payment("inv-1", 2000)
    assert partial["status"] == "issued"
    assert partial["remaining"] == 3000

    settled = store.record_payment("inv-1", 3000)
    assert settled["status"] == "paid"
    assert settled["remaining"] == 0

    with pytest.raises(ValueError):
        store.record_payment("inv-1", 100)


def test_invoice_payment_must_be_positive(workspace):
    with pytest.raises(ValueError):
        workspace[INVOICE].record_payment("inv-1", 0)


def test_mark_overdue(workspace):
    store = workspace[INVOICE]

    assert store.mark_overdue(now=datetime(2024, 12, 27)) == 0
    assert store.mark_overdue(now=datetime(2024, 12, 28)) == 1

    assert store.get("inv-1")["status"] == "overdue"
    assert store.get("inv-3")["status"] == "draft"
    assert store.get("inv-2")["status"] == "paid"


def test_overdue_invoice_can_still_be_paid(workspace):
    store = workspace[INVOICE]
    store.mark_overdue(now=datetime(2025, 1, 15))
    assert store.change_status("inv-1", "paid")["status"] == "paid"

    with pytest.raises(InvalidTransition):
        store.change_status("inv-1", "issued")


def test_invoice_payment_needs_billing_role(clock, session_for):
    stores = create_stores(session=session_for(OPERATIONS), clock=clock)
    stores[INVOICE].seed([{
        "id": "inv-9", "invoice_number": "INV-2024-009", "lr_number": "LR-2024-001",
        "consigner": "ABC Traders", "amount": 1000, "status": "issued",
    }])

    with pytest.raises(AuthorizationError):
        stores[INVOICE].record_payment("inv-9", 1000)
    assert stores[INVOICE].get("inv-9")["paid_amount"] == 0


def test_mark_overdue_runs_without_role_check(clock, session_for):
    stores = create_stores(session=session_for(ACCOUNTS), clock=clock)
    stores[INVOICE].seed([{
        "id": "inv-9", "invoice_number": "INV-2024-009", "lr_number": "LR-2024-001",
        "consigner": "ABC Traders", "amount": 1000, "status": "issued", "due_date": "2024-12-01",
    }])
    assert stores[INVOICE].mark_overdue() == 1


def test_seeded_payment_statuses(workspace):
    store = workspace[PAYMENTS]
    assert [p["status"] for p in store.snapshot()] == ["paid", "partial", "unpaid", "paid"]
    assert store.get("pay-2")["remaining_balance"] == 30000


def test_payment_settles_when_balance_cleared(workspace):
    store = workspace[PAYMENTS]
    settled = store.record_payment("pay-2", 30000)

    assert settled["status"] == "paid"
    assert settled["remaining_balance"] == 0
    assert settled["utilization"] == 100


def test_payment_status_cannot_be_set_directly(workspace):
    with pytest.raises(InvalidTransition):
        workspace[PAYMENTS].change_status("pay-3", "paid")
    assert workspace[PAYMENTS].get("pay-3")["status"] == "unpaid"


def test_payment_create(workspace):
    store = workspace[PAYMENTS]

    payment = store.create({
        "invoice_number": "INV-2024-003",
        "consigner": "Retail Hub",
        "invoice_amount": 8496,
        "paid_amount": 4000,
        "payment_mode": "upi",
    })
    assert payment["status"] == "partial"
    assert payment["remaining_balance"] == 4496
    assert payment["due_date"] == "2025-01-06"

    with pytest.raises(InvalidTransition):
        store.create({"invoice_number": "INV-2024-003", "invoice_amount": 100, "paid_amount": 0, "status": "paid"})


def test_payment_mode_is_checked(workspace):
    with pytest.raises(ValueError):
        workspace[PAYMENTS].create({"invoice_number": "INV-2024-003", "paid_amount": 10, "payment_mode": "barter"})


def test_invoice_gst_follows_amount(workspace):
    store = workspace[INVOICE]
    invoice = store.create({"lr_number": "LR-2024-001", "consigner": "ABC Traders", "amount": 5000})

    updated = store.update_fields(invoice["id"], {"amount": 10000})

    assert updated["gst"] == pytest.approx(1800)
    assert updated["total_with_gst"] == pytest.approx(11800)


def test_invoice_typed_gst_sticks_until_cleared(workspace):
    store = workspace[INVOICE]
    invoice = store.create({"lr_number": "LR-2024-001", "consigner": "ABC Traders", "amount": 5000, "gst": "500"})

    updated = store.update_fields(invoice["id"], {"amount": 10000})
    assert updated["gst"] == 500
    assert updated["total_with_gst"] == 10500

    cleared = store.update_fields(invoice["id"], {"gst": ""})
    assert cleared["gst"] == pytest.approx(1800)


def test_mark_overdue_skips_unreadable_due_dates(clock):
    stores = create_stores(clock=clock)
    stores[INVOICE].seed([{
        "id": "inv-9", "invoice_number": "INV-2024-009", "lr_number": "LR-2024-001",
        "consigner": "ABC Traders", "amount": 1000, "status": "issued", "due_date": "soon",
    }])

    assert stores[INVOICE].mark_overdue(now=datetime(2025, 6, 1)) == 0
    assert stores[INVOICE].get("inv-9")["status"] == "issued"


def test_fractional_payments_add_up(workspace):
    store = workspace[PAYMENTS]
    payment = store.create({
        "invoice_number": "INV-2024-003",
        "invoice_amount": 1000,
        "paid_amount": 999,
    })

    store.record_payment(payment["id"], 0.5)
    settled = store.record_payment(payment["id"], 0.5)

    assert settled["paid_amount"] == 1000
    assert settled["status"] == "paid"


def test_settled_payment_rejects_more_money(workspace):
    store = workspace[PAYMENTS]

    with pytest.raises(ValueError):
        store.record_payment("pay-1", 100)
    assert store.get("pay-1")["paid_amount"] == 45000


def test_driver_license_days_left(workspace):
    assert workspace[DRIVERS].get("drv-1")["license_days_left"] == 357
