import pytest

from tms.core.role_guard import (
    AuthorizationError,
    can_perform,
    is_allowed,
    validate_role_authority,
    visible_tabs,
)
from tms.security.roles import (
    ACCOUNTS,
    ADMIN,
    ALL_RESOURCES,
    ANALYTICS,
    CHANGE_STATUS,
    CREATE,
    CUSTOMER,
    INVOICE,
    LR,
    OPERATIONS,
    PAYMENTS,
    STAFF_ROLES,
    TRANSPORT,
    VIEW,
)


def test_admin_sees_every_store():
    for resource in ALL_RESOURCES:
        assert is_allowed(ADMIN, resource)


def test_transport_has_no_access():
    for resource in ALL_RESOURCES:
        assert not is_allowed(TRANSPORT, resource)
    assert visible_tabs(TRANSPORT) == []


def test_console_tabs_per_role():
    assert visible_tabs(OPERATIONS) == ["lr", "challan", "vehicles", "drivers", "routes"]
    assert visible_tabs(ACCOUNTS) == ["lr", "invoice", "customers", "payments"]
    assert visible_tabs(ADMIN) == ALL_RESOURCES


def test_unknown_and_missing_roles_are_denied():
    assert not is_allowed("intern", LR)
    assert not is_allowed(None, LR)
    assert not is_allowed(ADMIN, "warehouse")
    assert not is_allowed(CUSTOMER, INVOICE)


def test_analytics_is_admin_only():
    assert is_allowed(ADMIN, ANALYTICS)
    assert not is_allowed(OPERATIONS, ANALYTICS)
    assert not is_allowed(ACCOUNTS, ANALYTICS)


def test_accounts_views_lr_but_cannot_change_it():
    assert can_perform(ACCOUNTS, LR, VIEW)
    assert not can_perform(ACCOUNTS, LR, CREATE)
    assert not can_perform(ACCOUNTS, LR, CHANGE_STATUS)
    assert can_perform(OPERATIONS, LR, CHANGE_STATUS)


def test_accounts_mutates_billing():
    assert can_perform(ACCOUNTS, INVOICE, CREATE)
    assert can_perform(ACCOUNTS, PAYMENTS, CHANGE_STATUS)
    assert not can_perform(OPERATIONS, PAYMENTS, CREATE)


def test_unknown_action_is_denied():
    assert not can_perform(ADMIN, LR, "delete")


def test_validate_role_authority():
    validate_role_authority(ADMIN, INVOICE, CREATE)

    with pytest.raises(AuthorizationError):
        validate_role_authority(TRANSPORT, LR)


def test_policy_is_total_over_staff_roles():
    for role in STAFF_ROLES:
        for resource in ALL_RESOURCES:
            assert is_allowed(role, resource) in (True, False)
            for action in (VIEW, CREATE, CHANGE_STATUS):
                if can_perform(role, resource, action):
                    assert is_allowed(role, resource)
