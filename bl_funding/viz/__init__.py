"""
bl_funding.viz — Charts and dashboards.

Modules:
    figures    — Individual matplotlib charts (generate_all_figures entry point).
    dashboard  — Composite 2x2 dashboard PNG and its panel drawers.
    app        — Optional Streamlit + Plotly explorer.
"""

from bl_funding.viz.figures import generate_all_figures
