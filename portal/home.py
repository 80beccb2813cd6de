from datetime import datetime

import streamlit as st

from portal.orders import IN_FLIGHT, load_history
from sheetkit.normalize import parse_date
from sheetkit.sheet_api import fetch_news

MAX_NEWS = 5


def latest_news(news, limit=MAX_NEWS):
    dated = sorted(news, key=lambda n: parse_date(n["date"]) or datetime.min, reverse=True)
    return dated[:limit]


def in_flight_count(orders):
    return sum(1 for o in orders if o["status"] in IN_FLIGHT)


def go_to(view):
    st.session_state.goto = view


def render_home():
    user = st.session_state.user
    pending = in_flight_count(load_history())
    st.markdown(f"""
    <div style="background:#059669;color:#fff;padding:20px;border-radius:24px;margin-bottom:12px">
      <div style="font-weight:700;font-size:18px">Good day, {user['franchiseName']}!</div>
      <div style="color:#d1fae5;font-size:13px">{pending} order(s) on the way to your store</div>
    </div>
    """, unsafe_allow_html=True)
    st.button("Restock now", type="primary", on_click=go_to, args=("Catalog",))

    st.markdown("#### Quick links")
    c1, c2, c3 = st.columns(3)
    c1.button("🍵 Ingredients", use_container_width=True, on_click=go_to, args=("Catalog",))
    c2.button("📦 Supplies", use_container_width=True, on_click=go_to, args=("Catalog",))
    c3.button("📋 Order history", use_container_width=True, on_click=go_to, args=("Orders",))

    st.markdown("#### Latest news")
    if "news" not in st.session_state:
        st.session_state.news = fetch_news()
    news = latest_news(st.session_state.news)
    if not news:
        st.info("No announcements from head office.")
    for item in news:
        with st.container(border=True):
            st.markdown(f"**{item['title']}**")
            if item["date"]:
                st.caption(item["date"])
            st.write(item["content"])
