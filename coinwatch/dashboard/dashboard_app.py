from __future__ import annotations

import pandas as pd
import plotly.express as px
import requests
import streamlit as st

from coinwatch.config import settings

API_BASE = settings.resolved_api_base_url.rstrip("/")

st.set_page_config(page_title="Cryptocurrency Dashboard", layout="wide")
st.title("Cryptocurrency Dashboard")
st.markdown(
    """
    <style>
    .positive {color: #16a34a;}
    .negative {color: #dc2626;}
    </style>
    """,
    unsafe_allow_html=True,
)


def _call(method: str, path: str, **kwargs) -> dict | list | None:
    try:
        resp = requests.request(method, f"{API_BASE}{path}", timeout=30, **kwargs)
        resp.raise_for_status()
        return resp.json()
    except Exception as exc:  # noqa: BLE001
        st.error(f"Could not reach the dashboard API: {exc}")
        return None


def render_rows(rows: list[dict], with_select: bool) -> None:
    header = st.columns(5 if with_select else 4)
    for col, title in zip(header, ["Name", "Price", "Market Cap", "24h Change"]):
        col.markdown(f"**{title}**")
    for row in rows:
        cols = st.columns(5 if with_select else 4)
        cols[0].write(row["label"])
        cols[1].write(row["price"])
        cols[2].write(row["market_cap"])
        cols[3].markdown(f'<span class="{row["change_class"]}">{row["change"]}</span>', unsafe_allow_html=True)
        if with_select and cols[4].button("Chart", key=f"select-{row['id']}"):
            _call("POST", f"/select/{row['id']}")
            st.rerun()


def render_chart(chart: dict | None) -> None:
    if not chart:
        st.info("Loading chart...")
        return
    points = chart.get("points") or []
    df = pd.DataFrame(points, columns=["timestamp_label", "value"])
    fig = px.line(df, x="timestamp_label", y="value", title=chart["asset_label"])
    fig.update_xaxes(title_text="Time")
    fig.update_yaxes(title_text="Price (USD)")
    st.plotly_chart(fig, use_container_width=True)


with st.form("search"):
    query = st.text_input("Search", placeholder="Enter Cryptocurrency's name or symbol...")
    submitted = st.form_submit_button("Search")

state = _call("POST", "/search", json={"query": query}) if submitted else _call("GET", "/state")
if state is None:
    st.stop()

if state.get("validation_prompt"):
    st.warning(state["validation_prompt"])
if state.get("error_message"):
    st.error(state["error_message"])

if state["primary_view"] == "detail":
    detail_row = _call("GET", "/detail")
    if detail_row:
        st.subheader(detail_row["label"])
        render_rows([detail_row], with_select=False)
else:
    render_rows(_call("GET", "/markets") or [], with_select=True)

if state.get("selected_asset_id"):
    render_chart(state.get("chart"))
