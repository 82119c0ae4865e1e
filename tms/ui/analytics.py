"""
Analytics Tab - admin-only charts over the live stores

Heavy imports (pandas, plotly) stay local to the render functions so
the console loads fast for roles that never open this tab.
"""

from typing import Dict

import streamlit as st

from tms.core.entity_store import EntityStore
from tms.core.lifecycle import get_policy
from tms.core.summary_metrics import (
    invoice_revenue_breakdown,
    payment_summary,
    revenue_by_lane,
    status_distribution,
)
from tms.security.roles import CHALLAN, INVOICE, LR, PAYMENTS
from tms.ui.tables import format_inr

TOP_LANES = 6


def render_analytics(stores: Dict[str, EntityStore]):
    st.markdown("### 📈 Analytics")

    left, right = st.columns(2)
    with left:
        _render_status_chart(stores[LR], "LRs by Status")
    with right:
        _render_status_chart(stores[CHALLAN], "Challans by Status")

    st.divider()
    _render_lane_revenue(stores[LR])

    st.divider()
    left, right = st.columns(2)
    with left:
        _render_invoice_breakdown(stores[INVOICE])
    with right:
        _render_collections(stores[PAYMENTS])


def _render_status_chart(store: EntityStore, title: str):
    import pandas as pd
    import plotly.express as px

    counts = status_distribution(store.snapshot(), get_policy(store.entity_type)["statuses"])
    df = pd.DataFrame({"status": list(counts.keys()), "count": list(counts.values())})

    fig = px.bar(df, x="status", y="count", title=title)
    st.plotly_chart(fig, use_container_width=True)


def _render_lane_revenue(store: EntityStore):
    import pandas as pd
    import plotly.express as px

    lanes = revenue_by_lane(store.snapshot(), top=TOP_LANES)
    if not lanes:
        st.info("No freight recorded yet")
        return

    df = pd.DataFrame(lanes)
    fig = px.bar(df, x="revenue", y="lane", orientation="h", title="Freight Value by Lane")
    st.plotly_chart(fig, use_container_width=True)


def _render_invoice_breakdown(store: EntityStore):
    import pandas as pd
    import plotly.express as px

    breakdown = invoice_revenue_breakdown(store.snapshot())
    st.metric("Gross Invoiced", format_inr(breakdown["gross"]))

    df = pd.DataFrame({
        "component": ["Net", "GST"],
        "amount": [breakdown["net"], breakdown["gst"]],
    })
    fig = px.pie(df, names="component", values="amount", title="Invoice Value Split")
    st.plotly_chart(fig, use_container_width=True)


def _render_collections(store: EntityStore):
    summary = payment_summary(store.snapshot())

    c1, c2 = st.columns(2)
    c1.metric("Collection Rate", f"{summary['collection_rate']:.1f}%")
    c2.metric("DSO", f"{summary['dso_days']} days")

    st.write(f"**Collected:** {format_inr(summary['total_collected'])}")
    st.write(f"**Outstanding:** {format_inr(summary['total_outstanding'])}")
    st.write(
        f"**Paid / Partial / Unpaid:** "
        f"{summary['paid']} / {summary['partial']} / {summary['unpaid']}"
    )
