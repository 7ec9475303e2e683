"""
bl_funding/viz/app.py — Streamlit explorer for the funding analysis.

Three-page interactive view over a PipelineResult.

Pages:
    1. Overview     — headline numbers + period summary table
    2. Composition  — stacked income sources and shares
    3. Trends       — GIA recovery, diversification, nominal vs real

Usage:
    streamlit run bl_funding/viz/app.py

Reads the cached raw CSV under the default output tree (run
`bl-funding fetch` first). Requires the 'dashboard' extra
(streamlit + plotly); the module is importable without them.
"""

import logging
import os
from typing import Optional

from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig

logger = logging.getLogger(__name__)

# ── Optional Streamlit dependency ──────────────────────────────────────────────
try:
    import streamlit as st
    HAS_STREAMLIT = True
except ImportError:
    st = None
    HAS_STREAMLIT = False

# ── Optional Plotly dependency ─────────────────────────────────────────────────
try:
    import plotly.express as px
    import plotly.graph_objects as go
    HAS_PLOTLY = True
except ImportError:
    px = None
    go = None
    HAS_PLOTLY = False


def period_table_rows(summaries: dict) -> list[dict]:
    """Display rows for the period summary table."""
    return [
        {
            "Period": s.period,
            "Years": f"{s.first_year}–{s.last_year}",
            "Mean Nominal (£M)": s.mean_nominal_gbp_millions,
            "Gov. Dependency (%)": s.mean_government_dependency_pct,
            "Diversification": s.mean_diversification_index,
        }
        for s in summaries.values()
    ]


def _render_overview(result) -> None:
    """Render Page 1: headline metrics and the per-period table."""
    import pandas as pd

    st.header("Overview")
    snap = result.snapshot
    if snap is not None:
        col1, col2, col3, col4 = st.columns(4)
        col1.metric("Latest nominal", f"£{snap.latest_nominal_gbp_millions:.1f}M")
        col2.metric("Latest real (2000 £)", f"£{snap.latest_real_gbp_millions:.1f}M")
        col3.metric("GIA vs peak", f"{snap.latest_gia_pct_of_peak:.0f}%")
        col4.metric("Gov. dependency", f"{snap.latest_government_dependency_pct:.1f}%")
        st.info(snap.headline)

    st.subheader("Funding by Period")
    st.dataframe(pd.DataFrame(period_table_rows(result.summaries)), use_container_width=True)


def _render_composition(result) -> None:
    """Render Page 2: stacked sources in £M and as shares of nominal."""
    st.header("Income Composition")
    fig = px.area(result.long_df, x="year", y="amount_millions", color="funding_source",
                  labels={"amount_millions": "£ millions", "funding_source": "Source"},
                  title="Funding Sources Over Time")
    st.plotly_chart(fig, use_container_width=True)

    shares = result.shares_df.melt(id_vars="year", var_name="source", value_name="share")
    shares["source"] = shares["source"].str.replace("_prop", "", regex=False)
    fig = px.area(shares, x="year", y="share", color="source", groupnorm="percent",
                  title="Share of Nominal Total")
    st.plotly_chart(fig, use_container_width=True)


def _render_trends(result) -> None:
    """Render Page 3: recovery, diversification and real-terms trends."""
    st.header("Trends")
    df = result.metrics_df

    peak = [(y, v * 100) for y, v in result.peak_series]
    fig = go.Figure(
        data=[go.Scatter(x=[y for y, _ in peak], y=[v for _, v in peak], mode="lines+markers",
                         name="GIA % of peak")],
        layout=go.Layout(title="Government Funding Recovery", yaxis_title="% of peak GIA"),
    )
    fig.add_hline(y=100, line_dash="dash", line_color="red")
    st.plotly_chart(fig, use_container_width=True)

    fig = px.line(df, x="year", y="diversification_index", color="period", markers=True,
                  title="Revenue Diversification (1 - HHI)")
    st.plotly_chart(fig, use_container_width=True)

    fig = px.line(df, x="year", y=["nominal_gbp_millions", "total_y2000_gbp_millions"],
                  title="Nominal vs Real (2000 £)")
    st.plotly_chart(fig, use_container_width=True)


def run_app(result=None, config: BLFundingConfig = DEFAULT_CONFIG,
            data_path: Optional[str] = None) -> None:
    """
    Launch the Streamlit explorer.

    Args:
        result:    PipelineResult. If None, metrics are computed from
                   data_path or the cached raw CSV.
        config:    BLFundingConfig.
        data_path: CSV to load when result is None.

    Raises:
        ImportError: If streamlit or plotly is not installed.
    """
    if not HAS_STREAMLIT:
        raise ImportError("streamlit is required: pip install 'bl-funding[dashboard]'")
    if not HAS_PLOTLY:
        raise ImportError("plotly is required: pip install 'bl-funding[dashboard]'")

    st.set_page_config(page_title="British Library Funding", layout="wide")
    st.title("British Library Funding, 1998–2023")
    st.caption("Data: TidyTuesday 2025-07-15")

    if result is None:
        from bl_funding.ingestion.loader import load_funding_records
        from bl_funding.pipeline import compute_metrics
        from bl_funding.reports.funding_report import generate_funding_report

        path = data_path or os.path.join(config.output_root, config.raw_data_dir, config.raw_filename)
        if not os.path.isfile(path):
            st.warning(f"No dataset at {path}. Run `bl-funding fetch` first.")
            return
        records = load_funding_records(path)
        result = compute_metrics(records, config)
        result.snapshot = generate_funding_report(records, result.derived, result.summaries, config)

    page = st.sidebar.selectbox("Navigate", ["Overview", "Composition", "Trends"])
    if page == "Overview":
        _render_overview(result)
    elif page == "Composition":
        _render_composition(result)
    elif page == "Trends":
        _render_trends(result)


if __name__ == "__main__":
    run_app()
