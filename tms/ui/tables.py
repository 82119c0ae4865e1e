"""
Table & formatting helpers for the console views.

Pure functions (no Streamlit calls) so views stay thin and these can
be tested on their own.
"""

from typing import Dict, List, Optional, Tuple

import pandas as pd

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

STATUS_ICONS: Dict[str, str] = {
    "delivered": "🟢",
    "paid": "🟢",
    "active": "🟢",
    "valid": "🟢",
    "in_transit": "🔵",
    "issued": "🔵",
    "created": "🟡",
    "pending": "🟡",
    "draft": "⚪",
    "partial": "🟠",
    "maintenance": "🟠",
    "expiring_soon": "🟠",
    "overdue": "🔴",
    "unpaid": "🔴",
    "suspended": "🔴",
    "expired": "🔴",
    "inactive": "⚫",
}

# (field, column label) per resource, in display order
TABLE_COLUMNS: Dict[str, List[Tuple[str, str]]] = {
    LR: [
        ("lr_number", "LR Number"), ("consigner", "Consigner"), ("consignee", "Consignee"),
        ("origin", "Origin"), ("destination", "Destination"), ("weight", "Weight (kg)"),
        ("total_value", "Freight"), ("status", "Status"), ("date", "Date"),
    ],
    CHALLAN: [
        ("challan_number", "Challan"), ("lr_number", "LR Number"), ("vehicle_number", "Vehicle"),
        ("driver_name", "Driver"), ("expected_arrival", "Expected"), ("actual_arrival", "Actual"),
        ("delay_hours", "Delay (h)"), ("status", "Status"),
    ],
    VEHICLES: [
        ("vehicle_number", "Vehicle"), ("type", "Type"), ("capacity", "Capacity (kg)"),
        ("owner", "Owner"), ("insurance_status", "Insurance"), ("pollution_cert_status", "PUC"),
        ("load_utilization", "Load %"), ("status", "Status"),
    ],
    DRIVERS: [
        ("name", "Name"), ("license_number", "License"), ("phone", "Phone"),
        ("license_status", "License Validity"), ("license_days_left", "Days Left"), ("avg_rating", "Rating"),
        ("on_time_percentage", "On-time %"), ("status", "Status"),
    ],
    ROUTES: [
        ("route_name", "Route"), ("origin", "Origin"), ("destination", "Destination"),
        ("distance", "Distance (km)"), ("rate_per_ton", "Rate/Ton"),
        ("completed_shipments", "Shipments"), ("estimated_revenue", "Est. Revenue"), ("status", "Status"),
    ],
    CUSTOMERS: [
        ("company_name", "Company"), ("contact_person", "Contact"), ("city", "City"),
        ("gst_number", "GSTIN"), ("total_revenue", "Revenue"), ("outstanding_balance", "Outstanding"),
        ("credit_utilization", "Credit %"), ("status", "Status"),
    ],
    INVOICE: [
        ("invoice_number", "Invoice"), ("lr_number", "LR Number"), ("consigner", "Consigner"),
        ("amount", "Amount"), ("gst", "GST"), ("total_with_gst", "Total"),
        ("remaining", "Remaining"), ("due_date", "Due"), ("status", "Status"),
    ],
    PAYMENTS: [
        ("invoice_number", "Invoice"), ("consigner", "Consigner"), ("invoice_amount", "Invoice Amount"),
        ("paid_amount", "Paid"), ("remaining_balance", "Balance"), ("payment_mode", "Mode"),
        ("transaction_ref", "Reference"), ("status", "Status"),
    ],
}

# (field, label, kind) for the create forms; kind is "text", "number" or "date"
FORM_FIELDS: Dict[str, List[Tuple[str, str, str]]] = {
    LR: [
        ("consigner", "Consigner", "text"), ("consignee", "Consignee", "text"),
        ("origin", "Origin", "text"), ("destination", "Destination", "text"),
        ("weight", "Weight (kg)", "number"), ("rate", "Rate (per 1000 kg)", "number"),
    ],
    CHALLAN: [
        ("lr_number", "LR Number", "text"), ("vehicle_number", "Vehicle Number", "text"),
        ("driver_name", "Driver Name", "text"), ("driver_contact", "Driver Contact", "text"),
        ("expected_arrival", "Expected Arrival (YYYY-MM-DDTHH:MM)", "text"),
    ],
    VEHICLES: [
        ("vehicle_number", "Vehicle Number", "text"), ("type", "Type", "text"),
        ("capacity", "Capacity (kg)", "number"), ("owner", "Owner", "text"),
        ("registration_date", "Registration Date", "date"), ("insurance_expiry", "Insurance Expiry", "date"),
        ("pollution_cert_expiry", "Pollution Cert Expiry", "date"),
    ],
    DRIVERS: [
        ("name", "Name", "text"), ("license_number", "License Number", "text"),
        ("phone", "Phone", "text"), ("email", "Email", "text"),
        ("license_expiry", "License Expiry", "date"), ("aadhar_number", "Aadhar Number", "text"),
        ("address", "Address", "text"),
    ],
    ROUTES: [
        ("route_name", "Route Name", "text"), ("origin", "Origin", "text"),
        ("destination", "Destination", "text"), ("distance", "Distance (km)", "number"),
        ("estimated_days", "Estimated Days", "number"), ("rate_per_ton", "Rate per Ton", "number"),
        ("rate_per_kg", "Rate per Kg", "number"), ("minimum_freight", "Minimum Freight", "number"),
    ],
    CUSTOMERS: [
        ("company_name", "Company Name", "text"), ("contact_person", "Contact Person", "text"),
        ("phone", "Phone", "text"), ("email", "Email", "text"), ("address", "Address", "text"),
        ("city", "City", "text"), ("state", "State", "text"),
        ("gst_number", "GST Number", "text"), ("pan_number", "PAN Number", "text"),
    ],
    INVOICE: [
        ("lr_number", "LR Number", "text"), ("consigner", "Consigner", "text"),
        ("consignee", "Consignee", "text"), ("amount", "Amount", "number"),
        ("gst", "GST (blank = 18%)", "text"),
    ],
    PAYMENTS: [
        ("invoice_number", "Invoice Number", "text"), ("consigner", "Consigner", "text"),
        ("invoice_amount", "Invoice Amount", "number"), ("paid_amount", "Paid Amount", "number"),
        ("transaction_ref", "Transaction Ref", "text"), ("received_by", "Received By", "text"),
        ("payment_date", "Payment Date", "date"),
    ],
}


def status_badge(status: Optional[str]) -> str:
    if not status:
        return "—"
    return f"{STATUS_ICONS.get(status, '⚪')} {status.replace('_', ' ')}"


def format_inr(amount: Optional[float]) -> str:
    """
    Rupee amount with Indian digit grouping, no decimals.

    Examples:
        >>> format_inr(2592000)
        '₹25,92,000'
        >>> format_inr(-900)
        '-₹900'
    """
    if amount is None:
        return "—"

    value = int(round(abs(amount)))
    digits = str(value)

    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])

    sign = "-" if amount < 0 else ""
    return f"{sign}₹{digits}"


def format_compact_inr(amount: float) -> str:
    """₹2.4L for lakhs, ₹45k for thousands, plain rupees below that."""
    if abs(amount) >= 100000:
        return f"₹{amount / 100000:.1f}L"
    if abs(amount) >= 1000:
        return f"₹{amount / 1000:.0f}k"
    return format_inr(amount)


def records_to_frame(resource: str, records: List[Dict]) -> pd.DataFrame:
    """Project store records into the labelled table for ``resource``."""
    columns = TABLE_COLUMNS[resource]
    rows = []
    for record in records:
        row = {}
        for name, label in columns:
            value = record.get(name)
            if name.endswith("status") or name == "status":
                value = status_badge(value)
            row[label] = value
        rows.append(row)

    return pd.DataFrame(rows, columns=[label for _, label in columns])
