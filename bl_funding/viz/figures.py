"""
bl_funding/viz/figures.py — Programmatic figure generation.

Generates the individual funding charts and the composite dashboard from a
PipelineResult object. No file I/O is needed beyond writing the PNGs.

Usage:
    from bl_funding.viz.figures import generate_all_figures
    paths = generate_all_figures(result, output_dir="outputs/figures")
    # paths = {"fig1_funding_sources_area.png": "/abs/path/...", ...}
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
from matplotlib.ticker import PercentFormatter

from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig
from bl_funding.records import SOURCE_LABELS

if TYPE_CHECKING:
    from bl_funding.pipeline import PipelineResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shared colour palette
# ---------------------------------------------------------------------------
C_GIA = "#2c3e50"       # slate — government
C_GIA_FILL = "#3498db"
C_DIV = "#8e44ad"       # purple — diversification
C_DIV_FILL = "#9b59b6"
C_SERV = "#e74c3c"      # red — services
C_SERV_FILL = "#e67e22"
C_NOMINAL = "#27ae60"
C_REAL = "#f39c12"
C_PEAK = "red"
C_DARK = "#1A2B3C"

SOURCE_COLORS = {
    "gia": "#440154",
    "investment": "#3b528b",
    "other": "#21918c",
    "services": "#5ec962",
    "voluntary": "#fde725",
}

STYLE = {
    "figure.facecolor": "white",
    "axes.facecolor": "white",
    "axes.edgecolor": C_DARK,
    "axes.labelcolor": C_DARK,
    "xtick.color": C_DARK,
    "ytick.color": C_DARK,
    "text.color": C_DARK,
    "axes.grid": True,
    "grid.color": "#E5E5E5",
    "grid.linewidth": 0.8,
    "axes.spines.top": False,
    "axes.spines.right": False,
    "font.family": "DejaVu Sans",
}

CAPTION = "Data: TidyTuesday 2025-07-15"


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------
def generate_all_figures(
    result: "PipelineResult",
    output_dir: str,
    config: BLFundingConfig = DEFAULT_CONFIG,
) -> dict[str, str]:
    """
    Generate every funding figure plus the composite dashboard.

    Args:
        result:     PipelineResult from run_full_pipeline() or compute_metrics().
        output_dir: Directory to save PNG files into (created if needed).
        config:     BLFundingConfig (DPI, dashboard size, LOWESS span).

    Returns:
        Dict mapping filename -> absolute path for each generated figure.
    """
    from bl_funding.viz.dashboard import render_dashboard, render_recovery_panel

    os.makedirs(output_dir, exist_ok=True)
    paths: dict[str, str] = {}
    plt.rcParams.update(STYLE)

    builders = [
        lambda: _fig1_funding_sources_area(result, output_dir, config),
        lambda: _fig2_total_nominal_trend(result, output_dir, config),
        lambda: _fig3_nominal_vs_real(result, output_dir, config),
        lambda: _fig4_gia_percent_of_peak(result, output_dir, config),
        lambda: _fig5_source_composition(result, output_dir, config),
        lambda: _fig6_non_government_streams(result, output_dir, config),
        lambda: render_recovery_panel(
            result, os.path.join(output_dir, "government_funding_recovery.png"), config),
        lambda: render_dashboard(
            result, os.path.join(output_dir, "british_library_dashboard.png"), config),
    ]
    for build in builders:
        p = build()
        if p:
            paths[os.path.basename(p)] = p

    logger.info("Generated %d figures in %s", len(paths), output_dir)
    return paths


def _save(fig, output_dir: str, filename: str, config: BLFundingConfig) -> str:
    fig.tight_layout()
    path = os.path.join(output_dir, filename)
    fig.savefig(path, dpi=config.figure_dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return os.path.abspath(path)


def _years(result: "PipelineResult") -> list[int]:
    return [r.year for r in result.records]


def _span(result: "PipelineResult") -> str:
    return f"{result.records[0].year}-{result.records[-1].year}"


# ---------------------------------------------------------------------------
# Figure 1 — Funding sources (stacked area, nominal £M)
# ---------------------------------------------------------------------------
def _fig1_funding_sources_area(result, output_dir, config) -> str | None:
    wide = result.long_df.pivot(index="year", columns="funding_source", values="amount_millions")
    if wide.empty:
        return None
    sources = sorted(wide.columns)

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.stackplot(
        wide.index,
        [wide[s] for s in sources],
        labels=[SOURCE_LABELS.get(s, s) for s in sources],
        colors=[SOURCE_COLORS.get(s, "#999999") for s in sources],
        alpha=0.7,
    )
    ax.set_title(f"British Library Funding Sources Over Time ({_span(result)})",
                 fontsize=13, fontweight="bold", pad=12)
    ax.set_xlabel("Year")
    ax.set_ylabel("Funding Amount (£ millions)")
    ax.legend(title="Funding Source", loc="upper center", bbox_to_anchor=(0.5, -0.12),
              ncol=len(sources), fontsize=9, frameon=False)
    fig.text(0.99, 0.01, CAPTION, ha="right", fontsize=8, alpha=0.7)
    return _save(fig, output_dir, "fig1_funding_sources_area.png", config)


# ---------------------------------------------------------------------------
# Figure 2 — Total nominal funding
# ---------------------------------------------------------------------------
def _fig2_total_nominal_trend(result, output_dir, config) -> str | None:
    years = _years(result)
    nominal = [r.nominal_gbp_millions for r in result.records]

    fig, ax = plt.subplots(figsize=(9, 5))
    ax.plot(years, nominal, color="steelblue", linewidth=1.8, zorder=3)
    ax.scatter(years, nominal, color="steelblue", s=20, zorder=4)
    ax.set_title("Total British Library Funding Over Time", fontsize=13, fontweight="bold", pad=12)
    ax.set_xlabel("Year")
    ax.set_ylabel("Total Funding (£ millions)")
    return _save(fig, output_dir, "fig2_total_nominal_trend.png", config)


# ---------------------------------------------------------------------------
# Figure 3 — Nominal vs real
# ---------------------------------------------------------------------------
def _fig3_nominal_vs_real(result, output_dir, config) -> str | None:
    years = _years(result)
    fig, ax = plt.subplots(figsize=(9, 5))
    for values, color, label in (
        ([r.nominal_gbp_millions for r in result.records], "steelblue", "Nominal (Current £)"),
        ([r.total_y2000_gbp_millions for r in result.records], "darkred", "Real (2000 £)"),
    ):
        ax.plot(years, values, color=color, linewidth=1.8, label=label, zorder=3)
        ax.scatter(years, values, color=color, s=20, zorder=4)
    ax.set_title("British Library Funding: Nominal vs Real Values",
                 fontsize=13, fontweight="bold", pad=12)
    ax.set_xlabel("Year")
    ax.set_ylabel("Funding (£ millions)")
    ax.legend(title="Value Type", loc="lower right", fontsize=9)
    return _save(fig, output_dir, "fig3_nominal_vs_real.png", config)


# ---------------------------------------------------------------------------
# Figure 4 — GIA as % of peak
# ---------------------------------------------------------------------------
def _fig4_gia_percent_of_peak(result, output_dir, config) -> str | None:
    if not result.peak_series:
        logger.info("No GIA peak share values — skipping fig4.")
        return None
    years = [y for y, _ in result.peak_series]
    values = [v for _, v in result.peak_series]

    fig, ax = plt.subplots(figsize=(9, 5))
    ax.plot(years, values, color="darkgreen", linewidth=1.8, zorder=3)
    ax.scatter(years, values, color="darkgreen", s=20, zorder=4)
    ax.axhline(1.0, color=C_PEAK, linestyle="--", alpha=0.7, linewidth=1.2)
    ax.yaxis.set_major_formatter(PercentFormatter(xmax=1.0))
    ax.set_title("Government Funding Recovery: GIA as % of Peak",
                 fontsize=13, fontweight="bold", pad=12)
    ax.set_xlabel("Year")
    ax.set_ylabel("GIA as % of Peak GIA")
    fig.text(0.99, 0.01, "Red line shows 100% (peak level)", ha="right", fontsize=8, alpha=0.7)
    return _save(fig, output_dir, "fig4_gia_percent_of_peak.png", config)


# ---------------------------------------------------------------------------
# Figure 5 — Composition (stacked percentage)
# ---------------------------------------------------------------------------
def _fig5_source_composition(result, output_dir, config) -> str | None:
    df = result.shares_df
    if df.empty:
        return None
    prop_cols = [c for c in df.columns if c.endswith("_prop")]
    sources = [c[: -len("_prop")] for c in prop_cols]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.stackplot(
        df["year"],
        [df[c] for c in prop_cols],
        labels=[SOURCE_LABELS.get(s, s) for s in sources],
        colors=[SOURCE_COLORS.get(s, "#999999") for s in sources],
    )
    ax.yaxis.set_major_formatter(PercentFormatter(xmax=1.0))
    ax.set_title("British Library Funding Sources: Changing Composition",
                 fontsize=13, fontweight="bold", pad=12)
    ax.set_xlabel("Year")
    ax.set_ylabel("Percentage of Total Funding")
    ax.legend(title="Funding Source", loc="upper center", bbox_to_anchor=(0.5, -0.12),
              ncol=len(sources), fontsize=9, frameon=False)
    return _save(fig, output_dir, "fig5_source_composition.png", config)


# ---------------------------------------------------------------------------
# Figure 6 — Non-government income streams
# ---------------------------------------------------------------------------
def _fig6_non_government_streams(result, output_dir, config) -> str | None:
    years = _years(result)
    streams = {
        "Voluntary": ([r.voluntary_gbp_millions for r in result.records], "#1b9e77"),
        "Services": ([r.services_gbp_millions for r in result.records], "#d95f02"),
        "Investment": ([r.investment_gbp_millions for r in result.records], "#7570b3"),
    }

    fig, ax = plt.subplots(figsize=(9, 5))
    for label, (values, color) in streams.items():
        ax.plot(years, values, color=color, linewidth=1.8, label=label, zorder=3)
        ax.scatter(years, values, color=color, s=20, zorder=4)
    ax.set_title("Non-Government Income Streams Over Time",
                 fontsize=13, fontweight="bold", pad=12)
    ax.set_xlabel("Year")
    ax.set_ylabel("Amount (£ millions)")
    ax.legend(title="Income Source", fontsize=9)
    return _save(fig, output_dir, "fig6_non_government_streams.png", config)
