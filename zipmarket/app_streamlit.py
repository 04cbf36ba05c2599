"""
ZIP Market Penetration - Streamlit dashboard.
Run from project root: python -m streamlit run zipmarket/app_streamlit.py
Requires API running: python -m zipmarket.main
"""

import os
import sys

import requests

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

API_BASE = os.environ.get("API_BASE", "http://127.0.0.1:3000")

DATA_TIMEOUT = 60
HEALTH_TIMEOUT = 10

SORT_FIELDS = {
    "marketPenetration": "Market penetration",
    "orderCount": "Orders",
    "population": "Population",
    "netMV": "Net MV",
    "mvPerOrder": "MV per order",
    "zipCode": "ZIP code",
    "areaName": "Area",
}


def api_get(path: str, timeout: int = None, **kwargs):
    if timeout is None:
        timeout = DATA_TIMEOUT
    r = requests.get(f"{API_BASE}{path}", timeout=timeout, **kwargs)
    r.raise_for_status()
    return r.json()


def api_post(path: str, json_data: dict, timeout: int = None):
    if timeout is None:
        timeout = DATA_TIMEOUT
    r = requests.post(f"{API_BASE}{path}", json=json_data, timeout=timeout)
    return r.status_code, r.json()


def build_params(zip_code, area_name, min_pen, max_pen, min_orders, min_population, hide_commercial, sort_by, sort_order):
    """Query string for /api/data; empty filters are left out."""
    params = {"hideCommercial": "true" if hide_commercial else "false"}
    if zip_code:
        params["zipCode"] = zip_code
    if area_name:
        params["areaName"] = area_name
    if min_pen:
        params["minPenetration"] = min_pen
    if max_pen:
        params["maxPenetration"] = max_pen
    if min_orders:
        params["minOrders"] = min_orders
    if min_population:
        params["minPopulation"] = min_population
    if sort_by:
        params["sortBy"] = sort_by
        params["sortOrder"] = sort_order
    return params


def run():
    import streamlit as st
    import pandas as pd

    st.set_page_config(
        page_title="ZIP Market Penetration",
        page_icon="📍",
        layout="wide",
        initial_sidebar_state="expanded",
    )

    if "token" not in st.session_state:
        st.session_state.token = None

    st.markdown("""
        <style>
        .big-title { font-size: 1.8rem; font-weight: 600; color: #1e3a5f; margin-bottom: 0.2rem; }
        .subtitle { color: #5a6c7d; font-size: 0.95rem; margin-bottom: 1.5rem; }
        </style>
    """, unsafe_allow_html=True)

    st.markdown('<p class="big-title">📍 ZIP Market Penetration</p>', unsafe_allow_html=True)
    st.markdown('<p class="subtitle">Orders per resident by ZIP code</p>', unsafe_allow_html=True)

    # Health check (short timeout)
    try:
        api_get("/api/health", timeout=HEALTH_TIMEOUT)
        st.sidebar.success("✓ API connected")
    except Exception as e:
        st.error(f"**API not reachable.** Start it first: `python -m zipmarket.main` — {e}")
        return

    # ----- Login gate -----
    if st.session_state.token is None:
        password = st.text_input("Password", type="password")
        if st.button("Log in", type="primary"):
            try:
                status, out = api_post("/api/login", {"password": password}, timeout=HEALTH_TIMEOUT)
                if status == 200 and out.get("success"):
                    st.session_state.token = out["token"]
                    st.rerun()
                else:
                    st.error(out.get("message", "Login failed"))
            except Exception as e:
                st.error(str(e))
        return

    # ----- Summary -----
    try:
        stats = api_get("/api/stats")
    except Exception as e:
        st.error(f"Could not load stats: {e}")
        stats = None

    if stats:
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("ZIP codes", f"{stats['totalZipCodes']:,}", help="Records in the dataset")
        with col2:
            st.metric("Total orders", f"{stats['totalOrders']:,}")
        with col3:
            overall = stats.get("overallMarketPenetration")
            st.metric("Overall penetration", f"{overall:.4f}%" if overall is not None else "—")
        with col4:
            st.metric("Average penetration", f"{stats['averageMarketPenetration']:.4f}%",
                      help=f"{stats['zipCodesWithPopulationData']} ZIPs with population data")
    else:
        st.info("No penetration data yet. Build the snapshot with `python scripts/build_snapshot.py`.")

    # ----- Filters -----
    st.sidebar.markdown("### Filters")
    zip_code = st.sidebar.text_input("ZIP contains", "")
    area_name = st.sidebar.text_input("Area contains", "")
    min_pen = st.sidebar.text_input("Min penetration (%)", "")
    max_pen = st.sidebar.text_input("Max penetration (%)", "")
    min_orders = st.sidebar.text_input("Min orders", "")
    min_population = st.sidebar.text_input("Min population", "")
    hide_commercial = st.sidebar.checkbox("Hide commercial ZIPs (population 0)", value=True)
    sort_by = st.sidebar.selectbox("Sort by", [""] + list(SORT_FIELDS),
                                   format_func=lambda x: SORT_FIELDS.get(x, "Unsorted"))
    sort_order = st.sidebar.radio("Order", ["desc", "asc"], horizontal=True)

    params = build_params(zip_code, area_name, min_pen, max_pen, min_orders, min_population,
                          hide_commercial, sort_by, sort_order)
    try:
        out = api_get("/api/data", params=params)
    except requests.exceptions.HTTPError as e:
        detail = e.response.json().get("error") if e.response is not None else str(e)
        st.error(f"Invalid filter: {detail}")
        return
    except Exception as e:
        st.error(str(e))
        return

    st.markdown(f"#### {out['total']:,} ZIP codes")
    if out["data"]:
        df = pd.DataFrame(out["data"])
        cols = [c for c in ["zipCode", "areaName", "deliveryType", "orderCount", "population",
                            "marketPenetration", "netMV", "mvPerOrder"] if c in df.columns]
        st.dataframe(df[cols], use_container_width=True, hide_index=True)
        top = df.dropna(subset=["marketPenetration"]).head(25)
        if not top.empty:
            st.markdown("#### 📈 Market penetration")
            st.bar_chart(top.set_index("zipCode")["marketPenetration"], height=320)

    st.sidebar.markdown("---")
    if st.sidebar.button("Log out"):
        st.session_state.token = None
        st.rerun()
    st.sidebar.caption("ZIP Market Penetration · census ACS 5-year population")


if __name__ == "__main__":
    run()
