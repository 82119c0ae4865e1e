# tms/core/entities.py

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from tms import config
from tms.core.entity_store import EntityDefinition, EntityStore, EntityNotFound, is_blank
from tms.core.id_generator import CHALLAN_PREFIX, INVOICE_PREFIX, LR_PREFIX
from tms.core.metrics import (
    credit_utilization,
    days_until,
    delay_hours,
    estimated_route_revenue,
    expiry_classification,
    freight_value,
    gst_split,
    is_payment_overdue,
    payment_state,
    total_with_gst,
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
from tms.security.session import SessionContext

logger = logging.getLogger(__name__)

PAYMENT_MODES = ("cash", "bank", "upi", "cheque")


def _today(now: datetime) -> str:
    return now.date().isoformat()


def _minute(now: datetime) -> str:
    return now.strftime("%Y-%m-%dT%H:%M")


def _expiry(value: Optional[str], now: datetime) -> Optional[str]:
    if not value:
        return None
    try:
        return expiry_classification(value, now, config.EXPIRY_SOON_WINDOW_DAYS)
    except ValueError:
        logger.warning(f"Unreadable expiry date {value!r}")
        return None


# ==================================================
# LORRY RECEIPT
# ==================================================

def _lr_defaults(now: datetime) -> Dict[str, Any]:
    return {
        "lr_number": None,
        "consigner": "",
        "consignee": "",
        "origin": "",
        "destination": "",
        "weight": 0,
        "rate": 0,
        "date": _today(now),
        "delivered_at": None,
    }


def _lr_derive(record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    record["total_value"] = freight_value(record.get("weight") or 0, record.get("rate") or 0)
    return record


LR_DEFINITION = EntityDefinition(
    entity_type="lr",
    resource=LR,
    required_fields=("consigner", "destination"),
    search_fields=("lr_number", "consigner", "consignee"),
    defaults=_lr_defaults,
    derive=_lr_derive,
    number_field="lr_number",
    number_prefix=LR_PREFIX,
    numeric_fields={"weight": int, "rate": int},
)


# ==================================================
# CHALLAN
# ==================================================

def _challan_defaults(now: datetime) -> Dict[str, Any]:
    return {
        "challan_number": None,
        "lr_number": "",
        "vehicle_number": "",
        "driver_name": "",
        "driver_contact": "",
        "route": "TBD",
        "departure": _minute(now),
        "expected_arrival": "",
        "actual_arrival": None,
        "date": _today(now),
    }


def _challan_derive(record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    try:
        record["delay_hours"] = delay_hours(record.get("expected_arrival"), record.get("actual_arrival"))
    except ValueError:
        logger.warning(
            f"Challan {record.get('challan_number')} has unreadable arrival times"
        )
        record["delay_hours"] = None
    return record


CHALLAN_DEFINITION = EntityDefinition(
    entity_type="challan",
    resource=CHALLAN,
    required_fields=("lr_number", "vehicle_number"),
    search_fields=("challan_number", "lr_number", "vehicle_number", "driver_name"),
    defaults=_challan_defaults,
    derive=_challan_derive,
    number_field="challan_number",
    number_prefix=CHALLAN_PREFIX,
)


# ==================================================
# VEHICLE
# ==================================================

def _vehicle_defaults(now: datetime) -> Dict[str, Any]:
    return {
        "vehicle_number": "",
        "type": "",
        "capacity": 0,
        "owner": "",
        "registration_date": "",
        "insurance_expiry": "",
        "pollution_cert_expiry": "",
        "total_trips": 0,
        "avg_load": 0,
        "last_maintenance": _today(now),
    }


def _vehicle_derive(record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    capacity = record.get("capacity") or 0
    record["load_utilization"] = (record.get("avg_load") or 0) / capacity * 100 if capacity > 0 else 0
    record["insurance_status"] = _expiry(record.get("insurance_expiry"), now)
    record["pollution_cert_status"] = _expiry(record.get("pollution_cert_expiry"), now)
    return record


VEHICLE_DEFINITION = EntityDefinition(
    entity_type="vehicle",
    resource=VEHICLES,
    required_fields=("vehicle_number", "type"),
    search_fields=("vehicle_number", "owner", "type"),
    defaults=_vehicle_defaults,
    derive=_vehicle_derive,
    numeric_fields={"capacity": int, "total_trips": int, "avg_load": int},
)


# ==================================================
# DRIVER
# ==================================================

def _driver_defaults(now: datetime) -> Dict[str, Any]:
    return {
        "name": "",
        "license_number": "",
        "phone": "",
        "email": "",
        "license_expiry": "",
        "aadhar_number": "",
        "address": "",
        "total_trips": 0,
        "avg_rating": 0.0,
        "on_time_percentage": 0,
        "joining_date": _today(now),
    }


def _driver_derive(record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    expiry = record.get("license_expiry")
    record["license_status"] = _expiry(expiry, now)
    try:
        record["license_days_left"] = days_until(expiry, now) if expiry else None
    except ValueError:
        record["license_days_left"] = None
    return record


DRIVER_DEFINITION = EntityDefinition(
    entity_type="driver",
    resource=DRIVERS,
    required_fields=("name", "license_number"),
    search_fields=("name", "license_number", "phone"),
    defaults=_driver_defaults,
    derive=_driver_derive,
    numeric_fields={"total_trips": int, "avg_rating": float, "on_time_percentage": float},
)


# ==================================================
# ROUTE
# ==================================================

def _route_defaults(now: datetime) -> Dict[str, Any]:
    return {
        "route_name": "",
        "origin": "",
        "destination": "",
        "distance": 0,
        "estimated_days": 0,
        "rate_per_ton": 0,
        "rate_per_kg": 0.0,
        "minimum_freight": 0,
        "active_challans": 0,
        "completed_shipments": 0,
        "avg_load_percentage": 0,
        "created_date": _today(now),
    }


def _route_derive(record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    record["estimated_revenue"] = estimated_route_revenue(
        record.get("completed_shipments") or 0,
        record.get("rate_per_ton") or 0,
    )
    return record


ROUTE_DEFINITION = EntityDefinition(
    entity_type="route",
    resource=ROUTES,
    required_fields=("route_name", "origin", "destination"),
    search_fields=("route_name", "origin", "destination"),
    defaults=_route_defaults,
    derive=_route_derive,
    numeric_fields={
        "distance": int,
        "estimated_days": int,
        "rate_per_ton": int,
        "rate_per_kg": float,
        "minimum_freight": int,
        "active_challans": int,
        "completed_shipments": int,
        "avg_load_percentage": float,
    },
)


# ==================================================
# CUSTOMER
# ==================================================

def _customer_defaults(now: datetime) -> Dict[str, Any]:
    return {
        "company_name": "",
        "contact_person": "",
        "phone": "",
        "email": "",
        "address": "",
        "city": "",
        "state": "",
        "gst_number": "",
        "pan_number": "",
        "total_shipments": 0,
        "total_revenue": 0,
        "outstanding_balance": 0,
        "registration_date": _today(now),
    }


def _customer_derive(record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    record["credit_utilization"] = credit_utilization(
        record.get("outstanding_balance") or 0,
        record.get("total_revenue") or 0,
    )
    return record


CUSTOMER_DEFINITION = EntityDefinition(
    entity_type="customer",
    resource=CUSTOMERS,
    required_fields=("company_name", "gst_number"),
    search_fields=("company_name", "contact_person", "gst_number"),
    defaults=_customer_defaults,
    derive=_customer_derive,
    numeric_fields={"total_shipments": int, "total_revenue": float, "outstanding_balance": float},
)


# ==================================================
# INVOICE
# ==================================================

def _invoice_defaults(now: datetime) -> Dict[str, Any]:
    return {
        "invoice_number": None,
        "lr_number": "",
        "challan_number": None,
        "consigner": "",
        "consignee": "",
        "invoice_date": _today(now),
        "due_date": (now + timedelta(days=config.INVOICE_DUE_DAYS)).date().isoformat(),
        "amount": 0,
        "paid_amount": 0,
        "gst": None,
        "notes": None,
    }


def _invoice_derive(record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    amount = record.get("amount") or 0
    # A GST figure typed in by the caller sticks; otherwise it follows the amount
    if "gst_override" not in record:
        record["gst_override"] = record.get("gst") is not None
    if not record["gst_override"]:
        record["gst"] = gst_split(amount)
    record["total_with_gst"] = total_with_gst(amount, record["gst"])
    record["remaining"] = amount - (record.get("paid_amount") or 0)
    return record


INVOICE_DEFINITION = EntityDefinition(
    entity_type="invoice",
    resource=INVOICE,
    required_fields=("lr_number", "consigner", "amount"),
    search_fields=("invoice_number", "lr_number", "consigner"),
    defaults=_invoice_defaults,
    derive=_invoice_derive,
    number_field="invoice_number",
    number_prefix=INVOICE_PREFIX,
    numeric_fields={"amount": float, "paid_amount": float, "gst": float},
)


class InvoiceStore(EntityStore):
    """Invoice collection with payment recording and overdue sweeps."""

    def update_fields(
        self,
        entity_id: str,
        fields: Dict[str, Any],
        role: Optional[str] = None,
    ) -> Dict[str, Any]:
        if "gst" in fields:
            gst = None if is_blank(fields["gst"]) else fields["gst"]
            fields = {**fields, "gst": gst, "gst_override": gst is not None}
        return super().update_fields(entity_id, fields, role=role)

    def record_payment(self, entity_id: str, amount: float, role: Optional[str] = None) -> Dict[str, Any]:
        """
        Add a payment against an invoice.

        The invoice moves to "paid" once nothing remains; a partial
        payment leaves the status as it was.
        """
        if amount <= 0:
            raise ValueError(f"Payment amount must be positive, got {amount}")

        invoice = self.get(entity_id)
        if invoice["status"] == "paid":
            raise ValueError(f"Invoice {invoice['invoice_number']} is already paid")

        updated = self.update_fields(
            entity_id,
            {"paid_amount": (invoice.get("paid_amount") or 0) + amount},
            role=role,
        )
        logger.info(
            f"Recorded {amount} against {updated['invoice_number']}, remaining {updated['remaining']}"
        )

        if updated["remaining"] <= 0:
            updated = self.change_status(entity_id, "paid", role=role)
        return updated

    def mark_overdue(self, now: Optional[datetime] = None) -> int:
        """Move issued invoices past their due date to "overdue"."""
        now = now or self._now()
        moved = 0
        for invoice in self.where(status="issued"):
            try:
                overdue = is_payment_overdue(invoice.get("due_date"), invoice["status"], now.date())
            except ValueError:
                logger.warning(f"Invoice {invoice.get('invoice_number')} has no usable due date")
                continue
            if overdue:
                self._transition(invoice["id"], "overdue")
                moved += 1
        if moved:
            logger.info(f"Marked {moved} invoice(s) overdue")
        return moved


# ==================================================
# PAYMENT
# ==================================================

def _payment_defaults(now: datetime) -> Dict[str, Any]:
    return {
        "invoice_number": "",
        "consigner": "",
        "invoice_amount": 0,
        "paid_amount": 0,
        "payment_date": _today(now),
        "payment_mode": "bank",
        "transaction_ref": "",
        "due_date": (now + timedelta(days=config.PAYMENT_DUE_DAYS)).date().isoformat(),
        "received_by": "",
    }


def _payment_derive(record: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    mode = record.get("payment_mode")
    if mode not in PAYMENT_MODES:
        raise ValueError(f"Unknown payment mode: {mode}")

    state = payment_state(record.get("invoice_amount") or 0, record.get("paid_amount") or 0)
    record["remaining_balance"] = state["remaining"]
    record["utilization"] = state["utilization"]
    return record


PAYMENT_DEFINITION = EntityDefinition(
    entity_type="payment",
    resource=PAYMENTS,
    required_fields=("invoice_number", "paid_amount"),
    search_fields=("invoice_number", "consigner", "transaction_ref"),
    defaults=_payment_defaults,
    derive=_payment_derive,
    numeric_fields={"invoice_amount": float, "paid_amount": float},
)


class PaymentStore(EntityStore):
    """Payments whose status always follows the amounts."""

    def record_payment(self, entity_id: str, amount: float, role: Optional[str] = None) -> Dict[str, Any]:
        if amount <= 0:
            raise ValueError(f"Payment amount must be positive, got {amount}")

        payment = self.get(entity_id)
        if payment["status"] == "paid":
            raise ValueError(f"Payment for {payment['invoice_number']} is already settled")

        updated = self.update_fields(
            entity_id,
            {"paid_amount": (payment.get("paid_amount") or 0) + amount},
            role=role,
        )
        logger.info(
            f"Payment {updated['invoice_number']}: {payment['status']} → {updated['status']}"
        )
        return updated


# ==================================================
# REGISTRY
# ==================================================

ENTITY_DEFINITIONS: Dict[str, EntityDefinition] = {
    definition.resource: definition
    for definition in (
        LR_DEFINITION,
        CHALLAN_DEFINITION,
        VEHICLE_DEFINITION,
        DRIVER_DEFINITION,
        ROUTE_DEFINITION,
        INVOICE_DEFINITION,
        CUSTOMER_DEFINITION,
        PAYMENT_DEFINITION,
    )
}

STORE_CLASSES = {
    INVOICE: InvoiceStore,
    PAYMENTS: PaymentStore,
}


def create_stores(
    session: Optional[SessionContext] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> Dict[str, EntityStore]:
    """One empty store per resource, all bound to the same session."""
    return {
        resource: STORE_CLASSES.get(resource, EntityStore)(
            definition, session=session, clock=clock, document_year=config.DOCUMENT_YEAR
        )
        for resource, definition in ENTITY_DEFINITIONS.items()
    }


def get_store(stores: Dict[str, EntityStore], resource: str) -> EntityStore:
    if resource not in stores:
        raise EntityNotFound(f"No store for resource '{resource}'")
    return stores[resource]
