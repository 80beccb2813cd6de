import pandas as pd
import streamlit as st
from fpdf import FPDF

from sheetkit import config as cfg


def money(value) -> str:
    value = round(float(value or 0), 2)
    if value == int(value):
        return f"{cfg.CURRENCY}{int(value):,}"
    return f"{cfg.CURRENCY}{value:,.2f}"


# -----------------------
# Exports (CSV/PDF)
# -----------------------
def csv_download(df, label, key=None):
    if df.empty:
        st.warning("No data to export.")
        return
    st.download_button(
        f"⬇ Download {label} (CSV)",
        data=df.to_csv(index=False).encode("utf-8-sig"),
        file_name=f"{label.replace(' ', '_')}.csv",
        mime="text/csv",
        key=key or f"csv_{label}",
    )


def _latin1(text):
    # core PDF fonts are latin-1 only
    return str(text).encode("latin-1", "replace").decode("latin-1")


def make_pdf_bytes(title, df: pd.DataFrame) -> bytes:
    pdf = FPDF()
    pdf.add_page()
    pdf.set_font("Helvetica", size=10)
    pdf.cell(0, 8, text=_latin1(title), new_x="LMARGIN", new_y="NEXT")
    pdf.ln(2)
    if df.empty:
        pdf.cell(0, 6, text="No data", new_x="LMARGIN", new_y="NEXT")
        return bytes(pdf.output())
    cols = list(df.columns)[:8]
    colw = pdf.epw / max(len(cols), 1)
    for c in cols:
        pdf.cell(colw, 7, text=_latin1(c)[:20], border=1)
    pdf.ln()
    for _, row in df.iterrows():
        for c in cols:
            pdf.cell(colw, 6, text=_latin1(row.get(c, ""))[:20], border=1)
        pdf.ln()
    return bytes(pdf.output())


# -----------------------
# UI helpers
# -----------------------
def kpi_card(label, value):
    st.markdown(f"""
    <div style="background:#fff;padding:12px;border-radius:14px;box-shadow:0 6px 18px rgba(0,0,0,0.06);">
      <div style="font-weight:700;font-size:20px;color:#059669">{value}</div>
      <div style="color:#64748b;font-size:12px">{label}</div>
    </div>
    """, unsafe_allow_html=True)


STATUS_COLOURS = {
    "Pending": ("#fef3c7", "#b45309"),
    "Preparing": ("#e0f2fe", "#0369a1"),
    "Shipping": ("#ede9fe", "#6d28d9"),
    "Completed": ("#d1fae5", "#047857"),
    "Cancelled": ("#f1f5f9", "#64748b"),
}


def status_badge(status):
    bg, fg = STATUS_COLOURS.get(status, STATUS_COLOURS["Pending"])
    return (
        f"<span style='background:{bg};color:{fg};padding:2px 10px;"
        f"border-radius:999px;font-size:11px;font-weight:700'>{status}</span>"
    )
