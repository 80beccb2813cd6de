import io
import logging
from datetime import datetime

import pandas as pd
import plotly.express as px
import streamlit as st
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.cidfonts import UnicodeCIDFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from portal.catalog import load_products
from portal.ledger import EXPENSE, INCOME, load_ledger
from portal.orders import load_report_orders, order_total, resolve_order_items
from portal.ui import csv_download, kpi_card, money
from sheetkit.normalize import parse_date

logger = logging.getLogger(__name__)

LINE_COLUMNS = ["order_id", "date", "month", "product_id", "name", "unit", "quantity", "price", "amount"]
ITEM_COLUMNS = ["month", "product_id", "name", "unit", "quantity", "amount"]
PROFIT_COLUMNS = ["month", "order_count", "purchases", "income", "expense", "profit"]
ALL_MONTHS = "All months"
PDF_FONT = "MSung-Light"


def _month(value):
    parsed = parse_date(value)
    return parsed.strftime("%Y-%m") if parsed else None


# -----------------------
# Aggregation
# -----------------------
def order_lines_frame(orders, products):
    rows = []
    for order in orders:
        month = _month(order.get("date"))
        if month is None:
            logger.debug("Skipping order %s with unreadable date %r", order.get("id"), order.get("date"))
            continue
        for line in resolve_order_items(order, products):
            rows.append({
                "order_id": order["id"],
                "date": order["date"],
                "month": month,
                "product_id": line["id"],
                "name": line["name"],
                "unit": line["unit"],
                "quantity": line["quantity"],
                "price": line["price"],
                "amount": line["amount"],
            })
    return pd.DataFrame(rows, columns=LINE_COLUMNS)


def monthly_item_summary(lines):
    if lines.empty:
        return pd.DataFrame(columns=ITEM_COLUMNS)
    summary = (
        lines.groupby(["month", "product_id", "name", "unit"], as_index=False)[["quantity", "amount"]]
        .sum()
        .sort_values(["month", "quantity"], ascending=[True, False])
    )
    return summary[ITEM_COLUMNS].reset_index(drop=True)


def monthly_order_totals(orders, products):
    rows = [
        {"month": _month(o.get("date")), "order_id": o["id"], "total": order_total(o, products)}
        for o in orders
    ]
    df = pd.DataFrame(rows, columns=["month", "order_id", "total"]).dropna(subset=["month"])
    if df.empty:
        return pd.DataFrame(columns=["month", "order_count", "purchases"])
    return (
        df.groupby("month", as_index=False)
        .agg(order_count=("order_id", "count"), purchases=("total", "sum"))
        .sort_values("month")
        .reset_index(drop=True)
    )


def monthly_ledger_summary(entries):
    rows = [
        {"month": _month(e.get("date")), "type": e["type"], "amount": float(e.get("amount") or 0)}
        for e in entries
    ]
    df = pd.DataFrame(rows, columns=["month", "type", "amount"]).dropna(subset=["month"])
    if df.empty:
        return pd.DataFrame(columns=["month", INCOME, EXPENSE])
    pivot = df.pivot_table(index="month", columns="type", values="amount", aggfunc="sum", fill_value=0.0)
    for col in (INCOME, EXPENSE):
        if col not in pivot.columns:
            pivot[col] = 0.0
    pivot = pivot[[INCOME, EXPENSE]].reset_index()
    pivot.columns.name = None
    return pivot.sort_values("month").reset_index(drop=True)


def monthly_profit(order_totals, ledger_summary):
    """Profit per month: ledger income minus ledger expenses minus replenishment purchases."""
    df = pd.merge(order_totals, ledger_summary, on="month", how="outer")
    for col in ("order_count", "purchases", INCOME, EXPENSE):
        if col not in df.columns:
            df[col] = 0
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0)
    df["order_count"] = df["order_count"].astype(int)
    df["profit"] = df[INCOME] - df[EXPENSE] - df["purchases"]
    return df[PROFIT_COLUMNS].sort_values("month").reset_index(drop=True)


# -----------------------
# PDF export
# -----------------------
def _register_font():
    if PDF_FONT not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(UnicodeCIDFont(PDF_FONT))


def _table(df):
    data = [list(df.columns)] + [[str(v) for v in row] for row in df.itertuples(index=False)]
    table = Table(data, repeatRows=1)
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), PDF_FONT),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#d1fae5")),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
    ]))
    return table


def build_report_pdf(title, profit, items):
    _register_font()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4)
    styles = getSampleStyleSheet()
    for name in ("Title", "Heading2", "Normal"):
        styles[name].fontName = PDF_FONT
    story = [
        Paragraph(title, styles["Title"]),
        Spacer(1, 12),
        Paragraph(f"Generated on: {datetime.now():%Y-%m-%d %H:%M:%S}", styles["Normal"]),
        Spacer(1, 24),
        Paragraph("Monthly Profit & Loss", styles["Heading2"]),
    ]
    story.append(_table(profit) if not profit.empty else Paragraph("No data available", styles["Normal"]))
    story += [Spacer(1, 12), Paragraph("Items Ordered by Month", styles["Heading2"])]
    story.append(_table(items) if not items.empty else Paragraph("No data available", styles["Normal"]))
    doc.build(story)
    return buffer.getvalue()


# -----------------------
# Screen
# -----------------------
def render_reports():
    st.markdown("### 🧾 Monthly Reports")
    franchise = st.session_state.user["franchiseName"]
    products = load_products()
    if st.button("↻ Refresh reports"):
        load_report_orders(force=True)
        load_ledger(force=True)
    orders = load_report_orders()
    entries = load_ledger()

    lines = order_lines_frame(orders, products)
    items = monthly_item_summary(lines)
    profit = monthly_profit(monthly_order_totals(orders, products), monthly_ledger_summary(entries))
    if profit.empty:
        st.info("No orders or ledger entries to report on yet.")
        return

    months = profit["month"].tolist()
    chosen = st.selectbox("Month", [ALL_MONTHS] + months[::-1])
    if chosen == ALL_MONTHS:
        p_view, i_view = profit, items
    else:
        p_view = profit[profit["month"] == chosen]
        i_view = items[items["month"] == chosen]

    c1, c2, c3, c4 = st.columns(4)
    with c1: kpi_card("Income", money(p_view[INCOME].sum()))
    with c2: kpi_card("Expenses", money(p_view[EXPENSE].sum()))
    with c3: kpi_card("Purchases", money(p_view["purchases"].sum()))
    with c4: kpi_card("Profit / Loss", money(p_view["profit"].sum()))

    tab1, tab2 = st.tabs(["Profit Trend", "Items Ordered"])
    with tab1:
        melted = profit.melt(id_vars="month", value_vars=[INCOME, EXPENSE, "purchases", "profit"],
                             var_name="measure", value_name="value")
        fig = px.bar(melted, x="month", y="value", color="measure", barmode="group", title="Monthly Profit & Loss")
        st.plotly_chart(fig, use_container_width=True)
        st.dataframe(p_view, hide_index=True, use_container_width=True)
        csv_download(p_view, "Monthly Profit", key="csv_profit")
    with tab2:
        if i_view.empty:
            st.info("No items ordered in this period.")
        else:
            top = i_view.groupby("name", as_index=False)["quantity"].sum().sort_values("quantity", ascending=False).head(10)
            fig = px.bar(top, x="name", y="quantity", title="Top Ordered Items")
            st.plotly_chart(fig, use_container_width=True)
            st.dataframe(i_view, hide_index=True, use_container_width=True)
            csv_download(i_view, "Monthly Items", key="csv_items")

    if st.button("Generate PDF Report", type="primary"):
        title = f"{franchise} Report ({chosen})"
        st.download_button("Download PDF Report", build_report_pdf(title, p_view, i_view),
                           "monthly_report.pdf", "application/pdf")
