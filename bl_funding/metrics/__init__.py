"""
bl_funding.metrics — Funding metric computation.

Modules:
    derived         — Period, diversification index, government dependency,
                      real-terms change (one DerivedMetrics per year).
    period_summary  — Per-era means of nominal funding, dependency, diversification.
    composition     — Income shares, long-format tables, the bl_metrics table.
    trends          — Peak recovery, decline from peak, purchasing power.

All metrics are pure functions over a year-sorted list of FundingRecord.
Tunable boundaries live in bl_funding.config.BLFundingConfig.
"""
