"""
Customer Portal - read-only shipment tracking and invoices

A consigner only ever sees LRs and invoices raised under their own
name (the session name). Nothing here mutates a store.
"""

from typing import Dict

import streamlit as st

from tms.core.entity_store import EntityStore
from tms.core.summary_metrics import invoice_summary
from tms.core.tracking import (
    invoices_for_consigner,
    search_invoices,
    search_shipments,
    shipments_for_consigner,
)
from tms.security.roles import CHALLAN, INVOICE, LR
from tms.security.session import SessionContext
from tms.ui.tables import format_inr, records_to_frame, status_badge


def render_customer_portal(stores: Dict[str, EntityStore], session: SessionContext):
    st.markdown(f"## 📦 Welcome, {session.name}")
    if session.company:
        st.caption(session.company)

    shipments = shipments_for_consigner(stores[LR], stores[CHALLAN], session.name)
    invoices = invoices_for_consigner(stores[INVOICE], session.name)

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Shipments", len(shipments))
    c2.metric("In Transit", sum(1 for s in shipments if s["status"] == "in_transit"))
    c3.metric("Delivered", sum(1 for s in shipments if s["status"] == "delivered"))
    c4.metric("Amount Due", format_inr(invoice_summary(invoices)["pending_amount"]))

    st.divider()

    shipments_tab, invoices_tab = st.tabs(["🚚 Track Shipments", "🧾 Invoices"])

    with shipments_tab:
        _render_shipments(shipments)

    with invoices_tab:
        _render_invoices(invoices)


def _render_shipments(shipments):
    term = st.text_input("Search by LR number or destination", key="portal_shipment_search")
    matches = search_shipments(shipments, term)

    if not matches:
        st.info("No shipments found")
        return

    for shipment in matches:
        with st.expander(f"{shipment['lr_number']} · {status_badge(shipment['status'])}"):
            col1, col2 = st.columns(2)
            with col1:
                st.write(f"**Route:** {shipment['origin']} → {shipment['destination']}")
                st.write(f"**Weight:** {shipment['weight']} kg")
                st.write(f"**Shipped:** {shipment['ship_date']}")
            with col2:
                st.write(f"**Vehicle:** {shipment['vehicle_number'] or 'Not assigned'}")
                st.write(f"**Driver:** {shipment['driver_name'] or 'Not assigned'}")
                if shipment["delivered_at"]:
                    st.write(f"**Delivered:** {shipment['delivered_at']}")
                else:
                    st.write(f"**Expected:** {shipment['expected_delivery'] or 'TBD'}")


def _render_invoices(invoices):
    term = st.text_input("Search by invoice or LR number", key="portal_invoice_search")
    matches = search_invoices(invoices, term)

    if not matches:
        st.info("No invoices found")
        return

    st.dataframe(records_to_frame(INVOICE, matches), use_container_width=True, hide_index=True)
