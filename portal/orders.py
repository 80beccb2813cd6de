import logging

import pandas as pd
import streamlit as st

from portal.cart import parse_items_summary
from portal.catalog import load_products
from portal.ui import csv_download, make_pdf_bytes, money, status_badge
from sheetkit.normalize import parse_date
from sheetkit.sheet_api import fetch_history, fetch_orders

logger = logging.getLogger(__name__)

IN_FLIGHT = ("Pending", "Preparing", "Shipping")


def resolve_order_items(order, products):
    """Expand an order into priced lines; summaries are priced from the catalog."""
    by_id = {p["id"]: p for p in products}
    if order.get("items"):
        # items submitted from this session keep the price paid
        pairs = [(item["id"], item["quantity"], item) for item in order["items"]]
    else:
        pairs = [(pid, qty, None) for pid, qty in parse_items_summary(order.get("itemsSummary"))]
    lines = []
    for product_id, qty, own in pairs:
        product = own if own and own.get("price") is not None else by_id.get(product_id)
        price = float(product["price"]) if product else 0.0
        lines.append({
            "id": product_id,
            "name": product.get("name", product_id) if product else product_id,
            "unit": product.get("unit", "") if product else "",
            "price": price,
            "quantity": qty,
            "amount": round(price * qty, 2),
        })
    return lines


def order_total(order, products):
    if float(order.get("total") or 0) > 0:
        return float(order["total"])
    return round(sum(line["amount"] for line in resolve_order_items(order, products)), 2)


def _sort_key(order):
    parsed = parse_date(order.get("date"))
    return parsed.timestamp() if parsed else 0.0


def merge_history(remote, local):
    """Remote rows win; locally submitted orders fill in until the sheet catches up."""
    seen = {o["id"] for o in remote}
    merged = list(remote) + [o for o in local if o["id"] not in seen]
    return sorted(merged, key=_sort_key, reverse=True)


def load_remote_orders(force=False):
    if force or "remote_orders" not in st.session_state:
        st.session_state.remote_orders = fetch_orders(st.session_state.user["franchiseName"])
    return st.session_state.remote_orders


def load_report_orders(force=False):
    """getOrders rows (or the history when empty) plus orders submitted this session."""
    remote = load_remote_orders(force)
    if not remote:
        return load_history(force)
    return merge_history(remote, st.session_state.local_orders)


def load_history(force=False):
    if force or "history" not in st.session_state:
        franchise = st.session_state.user["franchiseName"]
        st.session_state.history = fetch_history(franchise)
    return merge_history(st.session_state.history, st.session_state.local_orders)


def history_frame(orders, products):
    return pd.DataFrame([{
        "order_id": o["id"],
        "date": o["date"],
        "status": o["status"],
        "items": o.get("itemsSummary", ""),
        "total": order_total(o, products),
        "delivery_date": o.get("deliveryDate", ""),
    } for o in orders], columns=["order_id", "date", "status", "items", "total", "delivery_date"])


def render_orders():
    st.markdown("### 📋 My Orders")
    if st.button("↻ Refresh history"):
        load_history(force=True)
    orders = load_history()
    products = load_products()
    if not orders:
        st.info("No orders yet.")
        return

    for order in orders:
        lines = resolve_order_items(order, products)
        with st.container(border=True):
            head_l, head_r = st.columns([0.7, 0.3])
            head_l.caption("ORDER NO.")
            head_l.markdown(f"**{order['id']}**")
            head_r.markdown(status_badge(order["status"]), unsafe_allow_html=True)
            c1, c2 = st.columns(2)
            c1.write("Order date")
            c2.write(order["date"] or "-")
            c1.write("Items")
            c2.write(f"{len(lines)} products")
            c1.write("Estimated delivery")
            c2.write(order.get("deliveryDate") or "-")
            c1.markdown("**Total**")
            c2.markdown(f"**{money(order_total(order, products))}**")
            with st.expander("View details"):
                if lines:
                    st.dataframe(pd.DataFrame(lines)[["name", "quantity", "unit", "price", "amount"]],
                                 hide_index=True, use_container_width=True)
                else:
                    st.write(order.get("itemsSummary") or "No item details")

    df = history_frame(orders, products)
    csv_download(df, "Order History")
    if st.button("Export Order History PDF"):
        st.download_button("Download Order History PDF", make_pdf_bytes("Order History", df),
                           "order_history.pdf", "application/pdf")
