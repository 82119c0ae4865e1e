"""
ROLE DEFINITIONS

Staff console roles, the customer-portal principal and the resources
they can be granted.

Rules:
- No imports outside typing
- No logic, only declarations
- Roles must be explicit strings
- Used by role_guard.py and auth.py
"""

from typing import Literal

# Staff roles
ADMIN: Literal["admin"] = "admin"
OPERATIONS: Literal["operations"] = "operations"
ACCOUNTS: Literal["accounts"] = "accounts"
TRANSPORT: Literal["transport"] = "transport"

# Customer portal principal (consigner login, separate credential list)
CUSTOMER: Literal["customer"] = "customer"

# Resources (one per entity store), in console tab order
LR: Literal["lr"] = "lr"
CHALLAN: Literal["challan"] = "challan"
VEHICLES: Literal["vehicles"] = "vehicles"
DRIVERS: Literal["drivers"] = "drivers"
ROUTES: Literal["routes"] = "routes"
INVOICE: Literal["invoice"] = "invoice"
CUSTOMERS: Literal["customers"] = "customers"
PAYMENTS: Literal["payments"] = "payments"

# Capability outside the eight stores
ANALYTICS: Literal["analytics"] = "analytics"

# Actions
VIEW: Literal["view"] = "view"
CREATE: Literal["create"] = "create"
CHANGE_STATUS: Literal["change_status"] = "change_status"

STAFF_ROLES: list[str] = [
    ADMIN,
    OPERATIONS,
    ACCOUNTS,
    TRANSPORT,
]

ALL_RESOURCES: list[str] = [
    LR,
    CHALLAN,
    VEHICLES,
    DRIVERS,
    ROUTES,
    INVOICE,
    CUSTOMERS,
    PAYMENTS,
]

MUTATING_ACTIONS: list[str] = [
    CREATE,
    CHANGE_STATUS,
]

# Human labels for console tabs
RESOURCE_LABELS: dict[str, str] = {
    LR: "LR",
    CHALLAN: "Challan",
    VEHICLES: "Vehicles",
    DRIVERS: "Drivers",
    ROUTES: "Routes",
    INVOICE: "Invoice",
    CUSTOMERS: "Customers",
    PAYMENTS: "Payments",
}
