from datetime import datetime, timedelta

import pytest

from tms.core.metrics import (
    EXPIRED,
    EXPIRING_SOON,
    VALID,
    collection_rate,
    credit_utilization,
    days_sales_outstanding,
    days_until,
    delay_hours,
    estimated_route_revenue,
    expiry_classification,
    freight_value,
    gst_split,
    is_payment_overdue,
    payment_state,
    to_datetime,
    total_with_gst,
)

NOW = datetime(2024, 12, 22, 0, 0)


def test_freight_value():
    assert freight_value(2500, 5000) == 12500
    assert freight_value(0, 9999) == 0


def test_gst():
    assert gst_split(5000, 0.18) == pytest.approx(900)
    assert total_with_gst(5000, 900) == 5900
    assert total_with_gst(5000) == pytest.approx(5900)


def test_estimated_route_revenue():
    assert estimated_route_revenue(145, 2500) == pytest.approx(290000)


@pytest.mark.parametrize(
    "invoice, paid, status, remaining",
    [
        (45000, 45000, "paid", 0),
        (75000, 45000, "partial", 30000),
        (38000, 0, "unpaid", 38000),
        (1000, 1500, "paid", 0),
    ],
)
def test_payment_state(invoice, paid, status, remaining):
    state = payment_state(invoice, paid)
    assert state["status"] == status
    assert state["remaining"] == remaining


def test_payment_state_zero_invoice():
    assert payment_state(0, 0) == {"status": "paid", "remaining": 0, "utilization": 100.0}


def test_percentages_guard_zero_denominators():
    assert credit_utilization(45000, 0) == 0
    assert collection_rate(0, 0) == 0
    assert days_sales_outstanding(100, 0) == 0
    assert collection_rate(75, 25) == 75
    assert days_sales_outstanding(30000, 90000, 30) == pytest.approx(10)


def test_delay_hours_early_arrival_is_negative():
    assert delay_hours("2024-12-22T18:00", "2024-12-20T15:30") == -50


def test_delay_hours_late_and_missing():
    assert delay_hours("2024-12-20T16:00", "2024-12-20T19:00") == 3
    assert delay_hours("2024-12-20T16:00", None) is None
    assert delay_hours("", "2024-12-20T19:00") is None


def test_expiry_boundaries():
    assert expiry_classification(NOW + timedelta(days=30), NOW) == EXPIRING_SOON
    assert expiry_classification(NOW + timedelta(days=31), NOW) == VALID
    assert expiry_classification(NOW - timedelta(days=1), NOW) == EXPIRED


def test_expiry_window_override():
    assert expiry_classification(NOW + timedelta(days=45), NOW, soon_window_days=60) == EXPIRING_SOON


def test_days_until():
    assert days_until("2024-12-25", NOW) == 3
    assert days_until("2024-12-21", NOW) == -1


def test_is_payment_overdue():
    assert is_payment_overdue("2024-12-20", "unpaid", NOW)
    assert not is_payment_overdue("2024-12-20", "paid", NOW)
    assert not is_payment_overdue("2024-12-30", "partial", NOW)
    assert not is_payment_overdue("", "unpaid", NOW)


def test_to_datetime():
    assert to_datetime("2024-12-22") == datetime(2024, 12, 22)
    assert to_datetime("2024-12-22T18:00") == datetime(2024, 12, 22, 18, 0)
    with pytest.raises(ValueError):
        to_datetime("next tuesday")
