# app.py - Franchise Pro ordering portal
# Run:
#   streamlit run app.py
# The spreadsheet endpoint is read from SHEET_API_URL.

import streamlit as st
from streamlit_option_menu import option_menu

from portal.auth import login_page, logout, require_login
from portal.cart import cart_count, render_cart
from portal.catalog import render_catalog
from portal.home import render_home
from portal.ledger import render_ledger
from portal.orders import render_orders
from portal.reports import render_reports
from sheetkit import config as cfg
from sheetkit.logging_config import setup_logging

st.set_page_config(page_title="Franchise Pro", page_icon="🍵", layout="centered")
setup_logging()

VIEWS = {
    "Home": ("house", render_home),
    "Catalog": ("shop", render_catalog),
    "Cart": ("cart", render_cart),
    "Orders": ("receipt", render_orders),
    "Ledger": ("journal-text", render_ledger),
    "Reports": ("bar-chart", render_reports),
}

# -----------------------
# Session state
# -----------------------
for key, default in [("user", None), ("cart", []), ("products", []),
                     ("local_orders", []), ("local_ledger", []), ("goto", None), ("flash", None)]:
    if key not in st.session_state:
        st.session_state[key] = default


def app_ui():
    user = st.session_state.user
    colL, colR = st.columns([0.7, 0.3])
    with colL:
        st.markdown(f"<h3 style='margin:0;color:#059669'>{cfg.APP_TITLE}</h3>", unsafe_allow_html=True)
    with colR:
        st.markdown(f"**{user['franchiseName']}** · 🛒 {cart_count(st.session_state.cart)}")
        st.button("Logout", on_click=logout)

    goto = st.session_state.goto
    st.session_state.goto = None
    names = list(VIEWS.keys())
    choice = option_menu(
        menu_title=None,
        options=names,
        icons=[icon for icon, _ in VIEWS.values()],
        orientation="horizontal",
        default_index=0,
        manual_select=names.index(goto) if goto in VIEWS else None,
        key="nav",
        styles={
            "container": {"padding": "0", "background-color": "#ffffff"},
            "nav-link": {"font-size": "12px", "padding": "6px 4px"},
            "nav-link-selected": {"background-color": "#059669"},
        },
    )

    if st.session_state.flash:
        st.success(st.session_state.flash)
        st.session_state.flash = None

    require_login()
    VIEWS.get(choice, VIEWS["Home"])[1]()


# -----------------------
# Run
# -----------------------
if st.session_state.user is None:
    login_page()
else:
    app_ui()
