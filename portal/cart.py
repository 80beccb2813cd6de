import logging
import re
from datetime import datetime, timedelta

import streamlit as st

from portal.ui import money
from sheetkit import config as cfg
from sheetkit.sheet_api import submit_order

logger = logging.getLogger(__name__)

_SUMMARY_PART = re.compile(r"^\s*(.+?)\s*[*×xX]\s*(\d+(?:\.\d+)?)\s*$")


# -----------------------
# Cart math
# -----------------------
def add_to_cart(cart, product):
    """First add puts in the product's minimum order unit, later adds one more."""
    if any(item["id"] == product["id"] for item in cart):
        return [
            dict(item, quantity=item["quantity"] + 1) if item["id"] == product["id"] else item
            for item in cart
        ]
    return cart + [dict(product, quantity=int(product.get("minUnit") or 1))]


def update_quantity(cart, product_id, delta):
    updated = []
    for item in cart:
        if item["id"] == product_id:
            item = dict(item, quantity=max(0, item["quantity"] + delta))
        if item["quantity"] > 0:
            updated.append(item)
    return updated


def set_quantity(cart, product_id, quantity):
    quantity = max(0, int(quantity))
    return [
        dict(item, quantity=quantity) if item["id"] == product_id else item
        for item in cart
        if item["id"] != product_id or quantity > 0
    ]


def line_total(item):
    return float(item["price"]) * item["quantity"]


def cart_total(cart):
    return sum(line_total(item) for item in cart)


def cart_count(cart):
    return sum(item["quantity"] for item in cart)


def items_summary(items):
    return ", ".join(f"{item['id']}*{item['quantity']}" for item in items)


def parse_items_summary(text):
    """'P1*3, P2*1' -> [('P1', 3), ('P2', 1)]; malformed parts are skipped."""
    parsed = []
    for part in str(text or "").split(","):
        m = _SUMMARY_PART.match(part)
        if not m:
            continue
        qty = float(m.group(2))
        if qty <= 0:
            continue
        parsed.append((m.group(1), int(qty) if qty == int(qty) else qty))
    return parsed


def build_order(cart, franchise, now=None):
    if not cart:
        raise ValueError("Cart is empty")
    now = now or datetime.now()
    items = [dict(item) for item in cart]
    return {
        "id": f"ORD-{int(now.timestamp() * 1000)}",
        "date": now.strftime("%Y/%m/%d %H:%M:%S"),
        "total": round(cart_total(items), 2),
        "items": items,
        "itemsSummary": items_summary(items),
        "status": "Pending",
        "deliveryDate": (now + timedelta(days=cfg.DELIVERY_DAYS)).strftime("%Y/%m/%d"),
        "franchiseName": franchise,
    }


# -----------------------
# Session helpers
# -----------------------
def add_product(product):
    st.session_state.cart = add_to_cart(st.session_state.cart, product)


def change_quantity(product_id, delta):
    st.session_state.cart = update_quantity(st.session_state.cart, product_id, delta)


def checkout():
    user = st.session_state.user
    try:
        order = build_order(st.session_state.cart, user["franchiseName"])
    except ValueError:
        st.warning("Your cart is empty.")
        return False
    ok, msg = submit_order(order, user["franchiseName"])
    if not ok:
        logger.warning("Checkout failed for %s: %s", user["franchiseName"], msg)
        st.error(f"Order could not be sent, please contact head office. ({msg})")
        return False
    st.session_state.local_orders = [order] + st.session_state.local_orders
    st.session_state.cart = []
    return True


def render_cart():
    cart = st.session_state.cart
    st.markdown(f"### 🛒 Cart ({len(cart)})")
    if not cart:
        st.info("Your cart is empty. Head to the catalog to restock ingredients and supplies.")
        return

    for item in cart:
        with st.container(border=True):
            c_img, c_body = st.columns([1, 3])
            c_img.image(item["image"], use_container_width=True)
            c_body.markdown(f"**{item['name']}**")
            c_body.caption(f"Unit price: {money(item['price'])}/{item['unit']}")
            c_minus, c_qty, c_plus, c_sum = c_body.columns([1, 1, 1, 2])
            c_minus.button("−", key=f"cart_dec_{item['id']}", on_click=change_quantity, args=(item["id"], -1))
            c_qty.markdown(f"**{item['quantity']}**")
            c_plus.button("+", key=f"cart_inc_{item['id']}", on_click=change_quantity, args=(item["id"], 1))
            c_sum.markdown(f"**{money(line_total(item))}**")

    total = cart_total(cart)
    with st.container(border=True):
        c1, c2 = st.columns(2)
        c1.write("Subtotal")
        c2.write(money(total))
        c1.write("Shipping")
        c2.write("Free")
        c1.markdown("**Total**")
        c2.markdown(f"**{money(total)}**")
        st.caption(f"🚚 Estimated delivery: within {cfg.DELIVERY_DAYS} working days to your store.")
        if st.button("Confirm order", type="primary", use_container_width=True):
            if checkout():
                st.session_state.flash = "✅ Order submitted! Head office will confirm the delivery date."
                st.session_state.goto = "Orders"
                st.rerun()
