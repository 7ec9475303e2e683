"""
bl_funding — British Library funding analysis, 1998–2023.

Loads the TidyTuesday 2025-07-15 British Library funding table, derives
per-year funding metrics, summarises them by policy era and renders the
charts and composite dashboard used in the written analysis.

Modules:
- bl_funding.metrics.derived      — period, diversification, dependency, real change
- bl_funding.metrics.period_summary — per-era aggregates
- bl_funding.metrics.composition  — income shares and long-format tables
- bl_funding.metrics.trends       — peak recovery and decline figures
- bl_funding.reports.funding_report — snapshot JSON + Markdown report
- bl_funding.viz                  — figures and the composite dashboard
"""

__version__ = "0.1.0"
