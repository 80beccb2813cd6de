import logging

import streamlit as st

from portal.cart import add_product, change_quantity
from portal.ui import money
from sheetkit.sheet_api import fetch_products

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"


def list_categories(products):
    return sorted({p["category"] for p in products if p.get("category")})


def filter_products(products, category=ALL_CATEGORIES, query=""):
    query = (query or "").strip().lower()
    return [
        p for p in products
        if (category in (None, "", ALL_CATEGORIES) or p["category"] == category)
        and (not query or query in p["name"].lower())
    ]


def load_products(force=False):
    if force or not st.session_state.get("products"):
        st.session_state.products = fetch_products()
    return st.session_state.products


def render_catalog():
    products = load_products()
    top_l, top_r = st.columns([0.8, 0.2])
    query = top_l.text_input("Search", placeholder="🔍 Search product name...", label_visibility="collapsed")
    if top_r.button("↻ Refresh", use_container_width=True):
        load_products(force=True)
        st.rerun()

    if not products:
        st.warning("No products available. Check the connection to head office and try refreshing.")
        return

    category = st.radio(
        "Category",
        [ALL_CATEGORIES] + list_categories(products),
        horizontal=True,
        label_visibility="collapsed",
    )
    shown = filter_products(products, category, query)
    if not shown:
        st.info("No products match your search.")
        return

    in_cart = {item["id"]: item["quantity"] for item in st.session_state.cart}
    cols = st.columns(2)
    for i, product in enumerate(shown):
        with cols[i % 2].container(border=True):
            st.image(product["image"], use_container_width=True)
            st.caption(product["category"])
            st.markdown(f"**{product['name']}**")
            st.markdown(f"<span style='color:#059669;font-weight:700;font-size:18px'>{money(product['price'])}</span>"
                        f"<span style='color:#94a3b8;font-size:11px'> /{product['unit']}</span>",
                        unsafe_allow_html=True)
            if product["minUnit"] > 1:
                st.caption(f"Minimum order: {product['minUnit']} {product['unit']}")
            qty = in_cart.get(product["id"])
            if qty:
                c_minus, c_qty, c_plus = st.columns(3)
                c_minus.button("−", key=f"cat_dec_{product['id']}", on_click=change_quantity, args=(product["id"], -1))
                c_qty.markdown(f"**{qty}**")
                c_plus.button("+", key=f"cat_inc_{product['id']}", on_click=change_quantity, args=(product["id"], 1))
            else:
                st.button("➕ Add", key=f"cat_add_{product['id']}", on_click=add_product, args=(product,),
                          use_container_width=True)
