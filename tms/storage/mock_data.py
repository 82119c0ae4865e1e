"""
MOCK DATA SEED

Deterministic demo records for every store. Nothing is persisted:
each call to build_workspace returns fresh, independent stores.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from tms import config
from tms.core.entities import create_stores
from tms.core.entity_store import EntityStore
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


MOCK_LRS: List[Dict] = [
    {"id": "lr-1", "lr_number": "LR-2024-001", "consigner": "ABC Traders", "consignee": "XYZ Enterprises",
     "origin": "Mumbai", "destination": "Delhi", "weight": 2500, "rate": 5000,
     "status": "in_transit", "date": "2024-12-20"},
    {"id": "lr-2", "lr_number": "LR-2024-002", "consigner": "Tech Solutions", "consignee": "Global Corp",
     "origin": "Bangalore", "destination": "Chennai", "weight": 1200, "rate": 3000,
     "status": "delivered", "date": "2024-12-19", "delivered_at": "2024-12-20T15:30"},
    {"id": "lr-3", "lr_number": "LR-2024-003", "consigner": "Retail Hub", "consignee": "Metro Stores",
     "origin": "Pune", "destination": "Hyderabad", "weight": 3600, "rate": 7200,
     "status": "created", "date": "2024-12-21"},
    {"id": "lr-5", "lr_number": "LR-2024-005", "consigner": "ABC Traders", "consignee": "Southern Retail",
     "origin": "Mumbai", "destination": "Bangalore", "weight": 1800, "rate": 4200,
     "status": "delivered", "date": "2024-12-15", "delivered_at": "2024-12-17T11:00"},
]

MOCK_CHALLANS: List[Dict] = [
    {"id": "ch-1", "challan_number": "CH-2024-001", "lr_number": "LR-2024-001",
     "vehicle_number": "MH-01-AB-1234", "driver_name": "Rajesh Kumar", "driver_contact": "9876543210",
     "route": "Mumbai → Delhi", "departure": "2024-12-20T08:00", "expected_arrival": "2024-12-22T18:00",
     "status": "in_transit", "date": "2024-12-20"},
    {"id": "ch-2", "challan_number": "CH-2024-002", "lr_number": "LR-2024-002",
     "vehicle_number": "KA-01-CD-5678", "driver_name": "Amit Singh", "driver_contact": "9765432109",
     "route": "Bangalore → Chennai", "departure": "2024-12-19T10:00", "expected_arrival": "2024-12-20T16:00",
     "actual_arrival": "2024-12-20T15:30", "status": "delivered", "date": "2024-12-19"},
]

MOCK_VEHICLES: List[Dict] = [
    {"id": "veh-1", "vehicle_number": "MH-01-AB-1234", "type": "10 Wheeler", "capacity": 18000,
     "owner": "ABC Transport", "registration_date": "2022-01-15", "insurance_expiry": "2025-06-15",
     "pollution_cert_expiry": "2025-03-20", "status": "active", "total_trips": 145, "avg_load": 15600,
     "last_maintenance": "2024-12-10"},
    {"id": "veh-2", "vehicle_number": "KA-01-CD-5678", "type": "7.5 Wheeler", "capacity": 12000,
     "owner": "XYZ Logistics", "registration_date": "2021-08-22", "insurance_expiry": "2025-08-22",
     "pollution_cert_expiry": "2025-05-10", "status": "active", "total_trips": 198, "avg_load": 11200,
     "last_maintenance": "2024-11-25"},
    {"id": "veh-3", "vehicle_number": "DL-01-EF-9012", "type": "4 Wheeler", "capacity": 5000,
     "owner": "ABC Transport", "registration_date": "2023-03-10", "insurance_expiry": "2025-03-10",
     "pollution_cert_expiry": "2025-01-15", "status": "maintenance", "total_trips": 67, "avg_load": 4500,
     "last_maintenance": "2024-12-18"},
]

MOCK_DRIVERS: List[Dict] = [
    {"id": "drv-1", "name": "Rajesh Kumar", "license_number": "DL-0001-9876543", "phone": "9876543210",
     "email": "rajesh@transport.com", "license_expiry": "2025-12-15", "aadhar_number": "1234-5678-9012",
     "address": "Mumbai, Maharashtra", "status": "active", "total_trips": 145, "avg_rating": 4.8,
     "on_time_percentage": 96, "joining_date": "2021-06-15"},
    {"id": "drv-2", "name": "Amit Singh", "license_number": "HR-0002-1234567", "phone": "9765432109",
     "email": "amit@transport.com", "license_expiry": "2025-08-22", "aadhar_number": "2345-6789-0123",
     "address": "Haryana", "status": "active", "total_trips": 198, "avg_rating": 4.6,
     "on_time_percentage": 92, "joining_date": "2020-03-10"},
    {"id": "drv-3", "name": "Priya Sharma", "license_number": "KA-0003-5555555", "phone": "9654321098",
     "email": "priya@transport.com", "license_expiry": "2026-05-30", "aadhar_number": "3456-7890-1234",
     "address": "Bangalore, Karnataka", "status": "active", "total_trips": 167, "avg_rating": 4.7,
     "on_time_percentage": 94, "joining_date": "2019-11-20"},
]

MOCK_ROUTES: List[Dict] = [
    {"id": "rt-1", "route_name": "Mumbai-Delhi Express", "origin": "Mumbai", "destination": "Delhi",
     "distance": 1440, "estimated_days": 2, "rate_per_ton": 2500, "rate_per_kg": 2.5, "minimum_freight": 5000,
     "active_challans": 5, "completed_shipments": 145, "avg_load_percentage": 87, "status": "active",
     "created_date": "2022-01-15"},
    {"id": "rt-2", "route_name": "Bangalore-Chennai Route", "origin": "Bangalore", "destination": "Chennai",
     "distance": 350, "estimated_days": 1, "rate_per_ton": 1800, "rate_per_kg": 1.8, "minimum_freight": 3000,
     "active_challans": 3, "completed_shipments": 98, "avg_load_percentage": 91, "status": "active",
     "created_date": "2021-08-22"},
    {"id": "rt-3", "route_name": "Pune-Hyderabad Lane", "origin": "Pune", "destination": "Hyderabad",
     "distance": 560, "estimated_days": 1, "rate_per_ton": 2000, "rate_per_kg": 2.0, "minimum_freight": 4000,
     "active_challans": 2, "completed_shipments": 76, "avg_load_percentage": 84, "status": "active",
     "created_date": "2021-12-10"},
    {"id": "rt-4", "route_name": "Delhi-Kolkata Highway", "origin": "Delhi", "destination": "Kolkata",
     "distance": 1440, "estimated_days": 2, "rate_per_ton": 2200, "rate_per_kg": 2.2, "minimum_freight": 5000,
     "active_challans": 0, "completed_shipments": 52, "avg_load_percentage": 78, "status": "inactive",
     "created_date": "2020-06-05"},
]

MOCK_CUSTOMERS: List[Dict] = [
    {"id": "cus-1", "company_name": "ABC Traders", "contact_person": "Rajesh Patel", "phone": "9876543210",
     "email": "abc.traders@email.com", "address": "Plot 123, Industrial Area", "city": "Mumbai",
     "state": "Maharashtra", "gst_number": "27AABCU9603R1Z5", "pan_number": "AABCU9603R", "status": "active",
     "total_shipments": 145, "total_revenue": 725000, "outstanding_balance": 45000,
     "registration_date": "2021-06-15"},
    {"id": "cus-2", "company_name": "Tech Solutions Ltd", "contact_person": "Priya Singh", "phone": "9765432109",
     "email": "tech.sol@email.com", "address": "Tech Park Building A", "city": "Bangalore",
     "state": "Karnataka", "gst_number": "29AAGCU8604R1Z0", "pan_number": "AAGCU8604R", "status": "active",
     "total_shipments": 98, "total_revenue": 490000, "outstanding_balance": 25000,
     "registration_date": "2020-03-10"},
    {"id": "cus-3", "company_name": "Retail Hub Inc", "contact_person": "Vikram Kumar", "phone": "9654321098",
     "email": "retail.hub@email.com", "address": "Shopping Complex, Main Road", "city": "Delhi",
     "state": "Delhi", "gst_number": "07AADCA5055K2Z2", "pan_number": "AADCA5055K", "status": "active",
     "total_shipments": 76, "total_revenue": 380000, "outstanding_balance": 15000,
     "registration_date": "2022-08-20"},
]

MOCK_INVOICES: List[Dict] = [
    {"id": "inv-1", "invoice_number": "INV-2024-001", "lr_number": "LR-2024-001", "challan_number": "CH-2024-001",
     "consigner": "ABC Traders", "consignee": "XYZ Enterprises", "invoice_date": "2024-12-20",
     "due_date": "2024-12-27", "amount": 5000, "paid_amount": 0, "gst": 900, "status": "issued",
     "notes": "Standard freight charges"},
    {"id": "inv-2", "invoice_number": "INV-2024-002", "lr_number": "LR-2024-002", "challan_number": "CH-2024-002",
     "consigner": "Tech Solutions", "consignee": "Global Corp", "invoice_date": "2024-12-19",
     "due_date": "2024-12-26", "amount": 3000, "paid_amount": 3000, "gst": 540, "status": "paid",
     "notes": "Freight + Handling"},
    {"id": "inv-3", "invoice_number": "INV-2024-003", "lr_number": "LR-2024-003",
     "consigner": "Retail Hub", "consignee": "Metro Stores", "invoice_date": "2024-12-21",
     "due_date": "2024-12-28", "amount": 7200, "paid_amount": 0, "gst": 1296, "status": "draft"},
]

MOCK_PAYMENTS: List[Dict] = [
    {"id": "pay-1", "invoice_number": "INV-2024-001", "consigner": "ABC Traders", "invoice_amount": 45000,
     "paid_amount": 45000, "payment_date": "2024-12-18", "payment_mode": "bank",
     "transaction_ref": "TXN123456789", "due_date": "2024-12-25", "received_by": "Rajesh Kumar"},
    {"id": "pay-2", "invoice_number": "INV-2024-002", "consigner": "Tech Solutions", "invoice_amount": 75000,
     "paid_amount": 45000, "payment_date": "2024-12-15", "payment_mode": "bank",
     "transaction_ref": "TXN987654321", "due_date": "2024-12-30", "received_by": "Priya Sharma"},
    {"id": "pay-3", "invoice_number": "INV-2024-003", "consigner": "Retail Hub", "invoice_amount": 38000,
     "paid_amount": 0, "payment_date": "", "payment_mode": "cash",
     "transaction_ref": "", "due_date": "2024-12-28", "received_by": ""},
    {"id": "pay-4", "invoice_number": "INV-2024-004", "consigner": "ABC Traders", "invoice_amount": 52000,
     "paid_amount": 52000, "payment_date": "2024-12-10", "payment_mode": "upi",
     "transaction_ref": "UPI123ABCD456", "due_date": "2024-12-20", "received_by": "Amit Singh"},
]

MOCK_RECORDS: Dict[str, List[Dict]] = {
    LR: MOCK_LRS,
    CHALLAN: MOCK_CHALLANS,
    VEHICLES: MOCK_VEHICLES,
    DRIVERS: MOCK_DRIVERS,
    ROUTES: MOCK_ROUTES,
    CUSTOMERS: MOCK_CUSTOMERS,
    INVOICE: MOCK_INVOICES,
    PAYMENTS: MOCK_PAYMENTS,
}


def seed_stores(stores: Dict[str, EntityStore]) -> Dict[str, int]:
    """Load the mock records into the given stores; returns counts per resource."""
    counts = {}
    for resource, records in MOCK_RECORDS.items():
        if resource in stores:
            counts[resource] = stores[resource].seed(records)
    logger.info(f"Seeded mock data: {counts}")
    return counts


def build_workspace(
    session: Optional[SessionContext] = None,
    clock: Optional[Callable[[], datetime]] = None,
    seed: Optional[bool] = None,
) -> Dict[str, EntityStore]:
    """
    Fresh set of stores for one session, optionally seeded.

    ``seed`` defaults to the TMS_SEED_MOCK_DATA setting.
    """
    stores = create_stores(session=session, clock=clock)
    if config.SEED_MOCK_DATA if seed is None else seed:
        seed_stores(stores)
    return stores
