"""
Staff Console - KPI cards and one tab per store the role can view

Every mutation goes through the EntityStore, so lifecycle and role
checks apply here exactly as they do everywhere else. Views only
decide which buttons to offer.
"""

from typing import Callable, Dict, List, Tuple

import streamlit as st

from tms.core.entities import PAYMENT_MODES, get_store
from tms.core.entity_store import STATUS_FILTER_ALL, EntityStore, ValidationMissing
from tms.core.lifecycle import InvalidTransition, get_policy, next_statuses
from tms.core.role_guard import AuthorizationError, can_perform, is_allowed, visible_tabs
from tms.core.summary_metrics import dashboard_kpis, store_summary
from tms.security.roles import (
    ANALYTICS,
    CHALLAN,
    CHANGE_STATUS,
    CREATE,
    CUSTOMERS,
    DRIVERS,
    INVOICE,
    LR,
    PAYMENTS,
    RESOURCE_LABELS,
    ROUTES,
    VEHICLES,
)
from tms.security.session import SessionContext
from tms.ui.tables import FORM_FIELDS, format_compact_inr, format_inr, records_to_frame, status_badge


STORE_ERRORS = (InvalidTransition, ValidationMissing, AuthorizationError, ValueError)


def _pct(value) -> str:
    return f"{value:.1f}%"


def _plain(value) -> str:
    return f"{value:,}" if isinstance(value, int) else str(value)


# (label, summary key, formatter) per resource
SUMMARY_CARDS: Dict[str, List[Tuple[str, str, Callable]]] = {
    LR: [
        ("Total LRs", "total", _plain),
        ("In Transit", "in_transit", _plain),
        ("Delivered", "delivered", _plain),
        ("Freight Value", "total_revenue", format_compact_inr),
    ],
    CHALLAN: [
        ("Pending", "pending", _plain),
        ("In Transit", "in_transit", _plain),
        ("On Time", "on_time", _plain),
        ("Late", "late", _plain),
    ],
    VEHICLES: [
        ("Fleet", "total", _plain),
        ("Active", "active", _plain),
        ("In Maintenance", "maintenance", _plain),
        ("Docs Need Attention", "documents_attention", _plain),
    ],
    DRIVERS: [
        ("Drivers", "total", _plain),
        ("Active", "active", _plain),
        ("Avg Rating", "avg_rating", _plain),
        ("Licenses Need Attention", "licenses_attention", _plain),
    ],
    ROUTES: [
        ("Routes", "total", _plain),
        ("Active", "active", _plain),
        ("Shipments", "total_shipments", _plain),
        ("Est. Revenue", "estimated_revenue", format_compact_inr),
    ],
    CUSTOMERS: [
        ("Customers", "total", _plain),
        ("Active", "active", _plain),
        ("Revenue", "total_revenue", format_compact_inr),
        ("Outstanding", "total_outstanding", format_compact_inr),
    ],
    INVOICE: [
        ("Invoiced", "total_amount", format_inr),
        ("Paid", "paid_amount", format_inr),
        ("Pending", "pending_amount", format_inr),
        ("GST", "total_gst", format_inr),
    ],
    PAYMENTS: [
        ("Collected", "total_collected", format_inr),
        ("Outstanding", "total_outstanding", format_inr),
        ("Collection Rate", "collection_rate", _pct),
        ("DSO (days)", "dso_days", _plain),
    ],
}

# Field shown as the expander title per resource
TITLE_FIELDS = {
    LR: "lr_number",
    CHALLAN: "challan_number",
    VEHICLES: "vehicle_number",
    DRIVERS: "name",
    ROUTES: "route_name",
    INVOICE: "invoice_number",
    CUSTOMERS: "company_name",
    PAYMENTS: "invoice_number",
}

MAX_DETAIL_ROWS = 20


# ==================================================
# ENTRY
# ==================================================

def render_console(stores: Dict[str, EntityStore], session: SessionContext):
    """Render KPI cards and the role's tabs."""
    tabs = visible_tabs(session.role)
    if is_allowed(session.role, ANALYTICS):
        tabs = tabs + [ANALYTICS]

    if not tabs:
        st.warning(f"Role '{session.role}' has no console access")
        return

    _render_kpis(stores)

    labels = [RESOURCE_LABELS.get(t, "📈 Analytics") for t in tabs]
    for resource, tab in zip(tabs, st.tabs(labels)):
        with tab:
            if resource == ANALYTICS:
                from tms.ui.analytics import render_analytics
                render_analytics(stores)
            else:
                render_store_tab(get_store(stores, resource), session)


def _render_kpis(stores: Dict[str, EntityStore]):
    kpis = dashboard_kpis(
        stores[LR].snapshot(),
        stores[CHALLAN].snapshot(),
        stores[INVOICE].snapshot(),
    )

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Active LRs", kpis["active_lrs"])
    c2.metric("Pending Challans", kpis["pending_challans"])
    c3.metric("Pending Invoices", kpis["pending_invoices"])
    c4.metric("Total Revenue", format_compact_inr(kpis["total_revenue"]))

    st.divider()


# ==================================================
# STORE TAB
# ==================================================

def render_store_tab(store: EntityStore, session: SessionContext):
    resource = store.definition.resource
    role = session.role

    summary = store_summary(resource, store.snapshot())
    cards = SUMMARY_CARDS[resource]
    for col, (label, key, fmt) in zip(st.columns(len(cards)), cards):
        col.metric(label, fmt(summary[key]))

    if resource == INVOICE and can_perform(role, INVOICE, CHANGE_STATUS):
        if st.button("⏰ Mark overdue invoices", key="invoice_mark_overdue"):
            moved = store.mark_overdue()
            st.info(f"{moved} invoice(s) marked overdue")

    if can_perform(role, resource, CREATE):
        _render_create_form(store)

    search_col, status_col = st.columns([3, 1])
    with search_col:
        term = st.text_input("🔍 Search", key=f"{resource}_search")
    with status_col:
        statuses = [STATUS_FILTER_ALL, *get_policy(store.entity_type)["statuses"]]
        status_filter = st.selectbox("Status", statuses, key=f"{resource}_status")

    records = store.list(term, status_filter)
    if not records:
        st.info("No records match")
        return

    st.dataframe(records_to_frame(resource, records), use_container_width=True, hide_index=True)

    st.markdown("#### Details")
    for record in records[:MAX_DETAIL_ROWS]:
        _render_detail(store, record, session)


def _render_create_form(store: EntityStore):
    resource = store.definition.resource

    with st.expander(f"➕ New {RESOURCE_LABELS[resource]}"):
        with st.form(f"{resource}_create", clear_on_submit=True):
            values = {}
            cols = st.columns(2)
            for i, (name, label, kind) in enumerate(FORM_FIELDS[resource]):
                with cols[i % 2]:
                    if kind == "number":
                        values[name] = st.number_input(label, min_value=0.0, step=1.0, key=f"{resource}_{name}")
                    elif kind == "date":
                        picked = st.date_input(label, value=None, key=f"{resource}_{name}")
                        values[name] = picked.isoformat() if picked else ""
                    else:
                        values[name] = st.text_input(label, key=f"{resource}_{name}")

            if resource == PAYMENTS:
                values["payment_mode"] = st.selectbox("Payment Mode", PAYMENT_MODES)

            submitted = st.form_submit_button("Create")

        if submitted:
            try:
                created = store.create(values)
            except STORE_ERRORS as e:
                st.error(str(e))
                return
            title = created.get(TITLE_FIELDS[resource]) or created["id"]
            st.success(f"Created {title}")


def _render_detail(store: EntityStore, record: Dict, session: SessionContext):
    resource = store.definition.resource
    title = record.get(TITLE_FIELDS[resource]) or record["id"]

    with st.expander(f"{title} · {status_badge(record.get('status'))}"):
        left, right = st.columns([3, 2])

        with left:
            for name, value in record.items():
                if name == "id" or value in (None, ""):
                    continue
                st.write(f"**{name.replace('_', ' ').title()}:** {value}")

        with right:
            if not can_perform(session.role, resource, CHANGE_STATUS):
                st.caption("Read-only for your role")
                return

            _render_status_buttons(store, record)

            if resource in (INVOICE, PAYMENTS) and record.get("status") != "paid":
                _render_payment_action(store, record)


def _render_status_buttons(store: EntityStore, record: Dict):
    allowed = next_statuses(store.entity_type, record.get("status"))
    if not allowed:
        return

    st.markdown("**Move to**")
    for target in allowed:
        if st.button(status_badge(target), key=f"{record['id']}_{target}"):
            try:
                store.change_status(record["id"], target)
            except STORE_ERRORS as e:
                st.error(str(e))
                return
            st.rerun()


def _render_payment_action(store: EntityStore, record: Dict):
    with st.form(f"{record['id']}_pay", clear_on_submit=True):
        amount = st.number_input("Amount received", min_value=0.0, step=100.0, key=f"{record['id']}_amount")
        submitted = st.form_submit_button("💰 Record Payment")

    if submitted:
        try:
            store.record_payment(record["id"], amount)
        except STORE_ERRORS as e:
            st.warning(str(e))
            return
        st.rerun()
