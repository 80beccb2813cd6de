import logging

import streamlit as st

from sheetkit import config as cfg
from sheetkit.sheet_api import fetch_users, remote_login

logger = logging.getLogger(__name__)


def authenticate(username, password, users):
    username = (username or "").strip()
    password = (password or "").strip()
    for user in users:
        if user["username"] == username and user["password"] == password:
            return user
    return None


def login(username, password):
    result = remote_login(username, password)
    if result is False:
        return None
    if result:
        return result
    # endpoint has no login action, compare against the account sheet
    user = authenticate(username, password, fetch_users())
    if user:
        return dict(user, password="")
    return None


def logout():
    logger.info("%s logged out", (st.session_state.get("user") or {}).get("franchiseName"))
    st.session_state.user = None
    st.session_state.cart = []
    st.session_state.products = []
    st.session_state.local_orders = []
    st.session_state.local_ledger = []
    for key in ("history", "remote_orders", "ledger", "news"):
        st.session_state.pop(key, None)


def login_page():
    st.markdown(f"<h2 style='text-align:center;color:#059669'>{cfg.APP_TITLE}</h2>", unsafe_allow_html=True)
    st.caption("Franchise store ordering portal. Sign in with the account issued by head office.")
    if not cfg.is_configured():
        st.warning("The ordering endpoint (SHEET_API_URL) is not configured.")
    with st.form("login_form"):
        username = st.text_input("👤 Account")
        password = st.text_input("🔒 Password", type="password")
        submitted = st.form_submit_button("Login", use_container_width=True)
    if submitted:
        if not username.strip() or not password.strip():
            st.error("Enter both account and password.")
            return
        with st.spinner("Connecting to head office..."):
            user = login(username, password)
        if user:
            logger.info("%s (%s) logged in", user["username"], user["franchiseName"])
            st.session_state.user = user
            st.rerun()
        else:
            logger.warning("Failed login for %s", username.strip())
            st.error("Invalid account or password")


def require_login():
    if not st.session_state.get("user"):
        st.warning("Please login to access this page")
        st.stop()
