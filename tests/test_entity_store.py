from datetime import datetime

import pytest

from tms.core.entities import create_stores, get_store
from tms.core.entity_store import EntityNotFound, ValidationMissing
from tms.core.lifecycle import InvalidTransition
from tms.core.role_guard import AuthorizationError
from tms.security.roles import ACCOUNTS, ADMIN, LR, OPERATIONS, TRANSPORT, VEHICLES


@pytest.fixture
def lr_store(clock):
    return create_stores(clock=clock)[LR]


def test_lr_end_to_end(lr_store):
    lr = lr_store.create({
        "consigner": "Retail Hub",
        "consignee": "Metro Stores",
        "origin": "Pune",
        "destination": "Hyderabad",
        "weight": 3600,
        "rate": 7200,
    })

    assert lr["total_value"] == 25920
    assert lr["status"] == "created"
    assert lr["lr_number"] == "LR-2024-001"
    assert lr["date"] == "2024-12-22"

    with pytest.raises(InvalidTransition):
        lr_store.change_status(lr["id"], "created")

    moved = lr_store.change_status(lr["id"], "in_transit")
    assert moved["status"] == "in_transit"

    with pytest.raises(InvalidTransition):
        lr_store.change_status(lr["id"], "created")
    assert lr_store.get(lr["id"])["status"] == "in_transit"

    delivered = lr_store.change_status(lr["id"], "delivered")
    assert delivered["delivered_at"] == "2024-12-22T12:00"


def test_form_strings_are_coerced(lr_store):
    lr = lr_store.create({"consigner": "A", "destination": "B", "weight": "2500", "rate": "abc"})
    assert lr["weight"] == 2500
    assert lr["rate"] == 0
    assert lr["total_value"] == 0


def test_missing_required_fields(lr_store):
    with pytest.raises(ValidationMissing) as exc:
        lr_store.create({"consigner": "ABC Traders", "destination": "   "})

    assert exc.value.missing == ["destination"]
    assert len(lr_store) == 0


def test_create_rejects_non_initial_status(lr_store):
    with pytest.raises(InvalidTransition):
        lr_store.create({"consigner": "A", "destination": "B", "status": "delivered"})
    assert len(lr_store) == 0

    lr = lr_store.create({"consigner": "A", "destination": "B", "status": "created"})
    assert lr["status"] == "created"


def test_unknown_id(lr_store):
    with pytest.raises(EntityNotFound):
        lr_store.change_status("missing", "in_transit")
    with pytest.raises(EntityNotFound):
        lr_store.get("missing")


def test_callers_get_copies(lr_store):
    lr = lr_store.create({"consigner": "A", "destination": "B"})
    lr["status"] = "delivered"
    lr_store.snapshot()[0]["consigner"] = "Z"

    stored = lr_store.get(lr["id"])
    assert stored["status"] == "created"
    assert stored["consigner"] == "A"


def test_protected_fields_cannot_be_written(lr_store):
    lr = lr_store.create({"consigner": "A", "destination": "B"})
    with pytest.raises(ValueError):
        lr_store.update_fields(lr["id"], {"status": "delivered"})


def test_update_fields_rederives(lr_store):
    lr = lr_store.create({"consigner": "A", "destination": "B", "weight": 1000, "rate": 1000})
    updated = lr_store.update_fields(lr["id"], {"weight": 2000})
    assert updated["total_value"] == 2000


def test_numbering_continues_after_seed(workspace):
    lr = workspace[LR].create({"consigner": "A", "destination": "B"})
    assert lr["lr_number"] == "LR-2024-006"


def test_list_search_and_status_filter(workspace):
    store = workspace[LR]

    assert [r["id"] for r in store.list("abc")] == ["lr-1", "lr-5"]
    assert [r["id"] for r in store.list("", "delivered")] == ["lr-2", "lr-5"]
    assert [r["id"] for r in store.list("ABC", "delivered")] == ["lr-5"]
    assert [r["id"] for r in store.list("LR-2024-003", "all")] == ["lr-3"]
    assert store.list("nobody") == []


def test_new_records_come_first(workspace):
    lr = workspace[LR].create({"consigner": "A", "destination": "B"})
    assert workspace[LR].snapshot()[0]["id"] == lr["id"]
    assert len(workspace[LR]) == 5
    assert lr["id"] in workspace[LR]


def test_where(workspace):
    assert [r["id"] for r in workspace[LR].where(consigner="ABC Traders", status="delivered")] == ["lr-5"]


def test_derived_fields_follow_the_clock():
    now = {"value": datetime(2024, 12, 22)}
    stores = create_stores(clock=lambda: now["value"])
    stores[VEHICLES].seed([{
        "id": "veh-3", "vehicle_number": "DL-01-EF-9012", "type": "4 Wheeler", "capacity": 5000,
        "avg_load": 4500, "insurance_expiry": "2025-03-10", "pollution_cert_expiry": "2025-01-15",
        "status": "maintenance",
    }])

    vehicle = stores[VEHICLES].get("veh-3")
    assert vehicle["insurance_status"] == "valid"
    assert vehicle["pollution_cert_status"] == "expiring_soon"
    assert vehicle["load_utilization"] == pytest.approx(90)

    now["value"] = datetime(2025, 2, 1)
    assert stores[VEHICLES].get("veh-3")["pollution_cert_status"] == "expired"


def test_session_role_is_enforced(clock, session_for):
    stores = create_stores(session=session_for(TRANSPORT), clock=clock)

    with pytest.raises(AuthorizationError):
        stores[LR].create({"consigner": "A", "destination": "B"})
    assert not stores[LR].can_view()


def test_accounts_cannot_advance_lr(clock, session_for):
    stores = create_stores(session=session_for(ACCOUNTS), clock=clock)
    stores[LR].seed([{"id": "lr-9", "consigner": "A", "destination": "B", "status": "created"}])

    assert stores[LR].can_view()
    with pytest.raises(AuthorizationError):
        stores[LR].change_status("lr-9", "in_transit")
    assert stores[LR].get("lr-9")["status"] == "created"


def test_role_argument_cannot_escalate_session(clock, session_for):
    stores = create_stores(session=session_for(TRANSPORT), clock=clock)

    with pytest.raises(AuthorizationError):
        stores[LR].create({"consigner": "A", "destination": "B"}, role=ADMIN)
    assert len(stores[LR]) == 0
    assert not stores[LR].can_view(role=ADMIN)


def test_role_argument_matching_session_is_accepted(clock, session_for):
    stores = create_stores(session=session_for(OPERATIONS), clock=clock)
    lr = stores[LR].create({"consigner": "A", "destination": "B"}, role=OPERATIONS)
    assert lr["status"] == "created"


def test_get_store_unknown_resource(workspace):
    with pytest.raises(EntityNotFound):
        get_store(workspace, "warehouse")
