"""
TMS Console - Streamlit entry point

Staff log in to the operations console; consigners log in to the
customer portal. Each browser session holds its own SessionContext
and its own in-memory workspace.
"""
import logging

import streamlit as st

from tms.config import configure_logging
from tms.security.auth import customer_verifier, handle_login, staff_verifier
from tms.security.roles import CUSTOMER
from tms.security.session import SessionContext
from tms.storage.mock_data import build_workspace

configure_logging()
logger = logging.getLogger(__name__)

# ═══════════════════════════════════════════════════════════════
# PAGE CONFIG (MUST BE FIRST)
# ═══════════════════════════════════════════════════════════════
st.set_page_config(
    page_title="Transport Management System",
    page_icon="🚚",
    layout="wide",
)

# ═══════════════════════════════════════════════════════════════
# SESSION STATE
# ═══════════════════════════════════════════════════════════════
if "session" not in st.session_state:
    st.session_state.session = None
    st.session_state.stores = None


def _sign_in(session: SessionContext):
    st.session_state.session = session
    st.session_state.stores = build_workspace(session)


def _sign_out():
    session = st.session_state.session
    if session is not None:
        logger.info(f"Logout: {session.email}")
    st.session_state.session = None
    st.session_state.stores = None


# ═══════════════════════════════════════════════════════════════
# LOGIN
# ═══════════════════════════════════════════════════════════════
def render_login():
    st.title("🚚 Transport Management System")

    portal = st.radio("Sign in to", ["Staff Console", "Customer Portal"], horizontal=True)
    verifier = staff_verifier() if portal == "Staff Console" else customer_verifier()

    with st.form("login"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")

    if submitted:
        status, body = handle_login({"email": email, "password": password}, verifier)
        if status == 200:
            _sign_in(SessionContext.from_user(body["user"]))
            st.rerun()
        else:
            st.error(body["error"])


# ═══════════════════════════════════════════════════════════════
# MAIN
# ═══════════════════════════════════════════════════════════════
session = st.session_state.session

if session is None:
    render_login()
else:
    with st.sidebar:
        st.markdown(f"**{session.name}**")
        st.caption(f"{session.email} · {session.role}")
        if st.button("🚪 Logout"):
            _sign_out()
            st.rerun()

    if session.role == CUSTOMER:
        from tms.ui.customer_portal import render_customer_portal
        render_customer_portal(st.session_state.stores, session)
    else:
        from tms.ui.console import render_console
        st.title("🚚 Operations Console")
        render_console(st.session_state.stores, session)
