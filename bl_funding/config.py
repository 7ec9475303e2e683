"""
bl_funding/config.py — All tunable parameters for the funding analysis.

Period boundaries, dataset location, output layout and figure settings live
here so that re-running the analysis with different choices is a single-file
diff.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BLFundingConfig:
    """
    Immutable configuration for the funding analysis pipeline.

    Override by constructing a new BLFundingConfig with the desired values.
    """

    # ── Period classification ─────────────────────────────────────────────────
    pre_crisis_last_year: int = 2007
    # Years up to and including this one are 'Pre-Crisis'.

    recovery_first_year: int = 2016
    # Years from this one onward are 'Recovery Era'. Everything strictly
    # between the two boundaries is 'Austerity Era'.

    # ── Metric policy ─────────────────────────────────────────────────────────
    zero_total_policy: str = "raise"
    # What derive_metrics() does when the four main income components sum
    # to zero for a year: 'raise' (DivisionError) or 'null' (index = None,
    # WARNING logged, year skipped by aggregates).

    # ── Data source ───────────────────────────────────────────────────────────
    tidytuesday_week: str = "2025-07-15"

    dataset_url: str = (
        "https://raw.githubusercontent.com/rfordatascience/tidytuesday/"
        "main/data/2025/2025-07-15/bl_funding.csv"
    )

    request_timeout_s: float = 30.0

    # ── Output layout ─────────────────────────────────────────────────────────
    output_root: str = "british-library-austerity-analysis"
    raw_data_dir: str = "data/raw"
    processed_data_dir: str = "data/processed"
    figures_dir: str = "outputs/figures"
    reports_dir: str = "outputs/reports"

    raw_filename: str = "bl_funding.csv"
    metrics_filename: str = "bl_metrics.csv"

    # ── Figures ───────────────────────────────────────────────────────────────
    figure_dpi: int = 150
    dashboard_dpi: int = 300
    dashboard_size_in: tuple = (12.0, 8.0)
    panel_size_in: tuple = (8.0, 6.0)

    lowess_frac: float = 0.75
    # Smoothing span for the diversification trend line on the dashboard.


# Singleton default — import this everywhere instead of constructing anew.
DEFAULT_CONFIG = BLFundingConfig()
