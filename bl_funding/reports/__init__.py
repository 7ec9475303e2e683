"""
bl_funding.reports — Snapshot JSON and Markdown report generation.

Modules:
    funding_report — FundingSnapshot, headline narrative, Markdown export.
"""
