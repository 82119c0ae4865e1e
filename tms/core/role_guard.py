# tms/core/role_guard.py

from typing import Dict, List, Optional, Set

from tms.security.roles import (
    ACCOUNTS,
    ADMIN,
    ALL_RESOURCES,
    ANALYTICS,
    CHALLAN,
    CUSTOMERS,
    DRIVERS,
    INVOICE,
    LR,
    MUTATING_ACTIONS,
    OPERATIONS,
    PAYMENTS,
    ROUTES,
    VEHICLES,
    VIEW,
)


class AuthorizationError(Exception):
    """Raised when a role attempts an unauthorized action."""
    pass


# ==================================================
# RESOURCE → ROLES ALLOWED TO VIEW IT
# ==================================================
VIEW_ROLE_AUTHORITY: Dict[str, Set[str]] = {
    LR: {ADMIN, OPERATIONS, ACCOUNTS},
    CHALLAN: {ADMIN, OPERATIONS},
    VEHICLES: {ADMIN, OPERATIONS},
    DRIVERS: {ADMIN, OPERATIONS},
    ROUTES: {ADMIN, OPERATIONS},
    INVOICE: {ADMIN, ACCOUNTS},
    CUSTOMERS: {ADMIN, ACCOUNTS},
    PAYMENTS: {ADMIN, ACCOUNTS},

    # Not a store; admin-only reporting page
    ANALYTICS: {ADMIN},
}


# ==================================================
# RESOURCE → ROLES ALLOWED TO CREATE / CHANGE STATUS
# ==================================================
MUTATION_ROLE_AUTHORITY: Dict[str, Set[str]] = {
    resource: set(roles) | {ADMIN}
    for resource, roles in VIEW_ROLE_AUTHORITY.items()
    if resource in ALL_RESOURCES
}

# Accounts can read lorry receipts but not raise or advance them
MUTATION_ROLE_AUTHORITY[LR] = {ADMIN, OPERATIONS}


def is_allowed(role: Optional[str], resource: Optional[str]) -> bool:
    """
    May ``role`` view ``resource``?

    Total over every role/resource pair: unknown or unlisted
    combinations are denied, never raised.
    """
    if not role or not resource:
        return False
    return role in VIEW_ROLE_AUTHORITY.get(resource, set())


def can_perform(role: Optional[str], resource: Optional[str], action: str = VIEW) -> bool:
    """May ``role`` perform ``action`` (view / create / change_status) on ``resource``?"""
    if action == VIEW:
        return is_allowed(role, resource)

    if action not in MUTATING_ACTIONS:
        return False

    if not role or not resource:
        return False
    return role in MUTATION_ROLE_AUTHORITY.get(resource, set())


def validate_role_authority(role: Optional[str], resource: str, action: str = VIEW) -> None:
    """
    Validate whether a role may perform an action on a resource.

    Raises AuthorizationError if not.
    """
    if not can_perform(role, resource, action):
        raise AuthorizationError(
            f"Role '{role}' is not allowed to {action.replace('_', ' ')} '{resource}'"
        )


def visible_tabs(role: Optional[str]) -> List[str]:
    """Store tabs the role can open, in console order."""
    return [resource for resource in ALL_RESOURCES if is_allowed(role, resource)]
