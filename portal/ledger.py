import logging
from datetime import date, datetime

import pandas as pd
import streamlit as st

from portal.ui import csv_download, money
from sheetkit.normalize import parse_date
from sheetkit.sheet_api import fetch_ledger, submit_ledger

logger = logging.getLogger(__name__)

INCOME = "income"
EXPENSE = "expense"
CATEGORIES = {
    INCOME: ["Sales", "Delivery platform", "Other income"],
    EXPENSE: ["Rent", "Wages", "Utilities", "Supplies", "Marketing", "Other expense"],
}
LEDGER_COLUMNS = ["id", "date", "type", "category", "amount", "note"]


def build_ledger_entry(entry_date, entry_type, category, amount, note, franchise, now=None):
    if entry_type not in (INCOME, EXPENSE):
        return False, "Type must be income or expense"
    try:
        amount = round(float(amount), 2)
    except (TypeError, ValueError):
        return False, "Amount must be a number"
    if amount <= 0:
        return False, "Amount must be positive"
    if not str(category or "").strip():
        return False, "Category required"
    now = now or datetime.now()
    if isinstance(entry_date, (date, datetime)):
        entry_date = entry_date.strftime("%Y-%m-%d")
    return True, {
        "id": f"LED-{int(now.timestamp() * 1000)}",
        "date": str(entry_date),
        "type": entry_type,
        "category": str(category).strip(),
        "amount": amount,
        "note": str(note or "").strip(),
        "franchiseName": franchise,
    }


def record_ledger_entry(entry_date, entry_type, category, amount, note, franchise):
    ok, result = build_ledger_entry(entry_date, entry_type, category, amount, note, franchise)
    if not ok:
        return False, result
    ok, msg = submit_ledger(result, franchise)
    if not ok:
        return False, msg
    logger.info("Ledger %s %s recorded for %s", result["type"], result["amount"], franchise)
    return True, result


def ledger_frame(entries):
    df = pd.DataFrame(entries, columns=LEDGER_COLUMNS)
    if df.empty:
        return df
    df["amount"] = pd.to_numeric(df["amount"], errors="coerce").fillna(0.0)
    df["_parsed"] = pd.to_datetime(df["date"].map(parse_date))
    df = df.sort_values("_parsed", ascending=False, na_position="last")
    return df.drop(columns="_parsed").reset_index(drop=True)


def load_ledger(force=False):
    if force or "ledger" not in st.session_state:
        st.session_state.ledger = fetch_ledger(st.session_state.user["franchiseName"])
    seen = {e["id"] for e in st.session_state.ledger}
    return st.session_state.ledger + [e for e in st.session_state.local_ledger if e["id"] not in seen]


def render_ledger():
    st.markdown("### 💰 Income & Expenses")
    franchise = st.session_state.user["franchiseName"]
    entry_type = st.radio("Type", [INCOME, EXPENSE], horizontal=True, format_func=str.title)
    with st.form("ledger_form", clear_on_submit=True):
        l_date = st.date_input("Date", datetime.now().date())
        l_cat = st.selectbox("Category", CATEGORIES[entry_type])
        l_amt = st.number_input("Amount", min_value=0.0, step=10.0)
        l_note = st.text_input("Note")
        submitted = st.form_submit_button("Record entry")
    if submitted:
        ok, result = record_ledger_entry(l_date, entry_type, l_cat, l_amt, l_note, franchise)
        if ok:
            st.session_state.local_ledger = st.session_state.local_ledger + [result]
            st.success(f"{entry_type.title()} of {money(result['amount'])} recorded.")
        else:
            st.error(result)

    st.markdown("#### History")
    if st.button("↻ Refresh ledger"):
        load_ledger(force=True)
    df = ledger_frame(load_ledger())
    if df.empty:
        st.info("No entries recorded yet")
        return
    income = df.loc[df["type"] == INCOME, "amount"].sum()
    expense = df.loc[df["type"] == EXPENSE, "amount"].sum()
    c1, c2 = st.columns(2)
    c1.metric("Income", money(income))
    c2.metric("Expenses", money(expense))
    st.dataframe(df, hide_index=True, use_container_width=True)
    csv_download(df, "Ledger")
