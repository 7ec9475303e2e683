"""
bl_funding/viz/dashboard.py — Composite four-panel funding dashboard.

Panels:
    A) Government Funding Recovery — GIA as % of peak, dashed 100% line
    B) Revenue Diversification     — 1 - HHI with a LOWESS trend line
    C) Commercial Services Revenue — services income with decline annotation
    D) Purchasing Power Erosion    — nominal vs real (2000 £) totals

The panel drawers take an Axes so the same code renders the dashboard and
the standalone government funding recovery figure.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.ticker import PercentFormatter
from statsmodels.nonparametric.smoothers_lowess import lowess

from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig
from bl_funding.metrics.trends import current_peak_shortfall, decline_from_peak
from bl_funding.viz.figures import (
    C_DIV,
    C_DIV_FILL,
    C_GIA,
    C_GIA_FILL,
    C_NOMINAL,
    C_PEAK,
    C_REAL,
    C_SERV,
    C_SERV_FILL,
    STYLE,
)

if TYPE_CHECKING:
    from bl_funding.pipeline import PipelineResult

logger = logging.getLogger(__name__)

# LOWESS needs a handful of points to say anything useful.
_MIN_LOWESS_POINTS = 5


def _panel_title(ax, title: str, subtitle: str) -> None:
    ax.set_title(f"{title}\n", loc="left", fontsize=12, fontweight="bold")
    ax.text(0.0, 1.02, subtitle, transform=ax.transAxes, fontsize=9, alpha=0.8)


def draw_gia_recovery(ax, result: "PipelineResult") -> None:
    """Panel A. Years with no GIA peak share are left out of the line."""
    if not result.peak_series:
        ax.text(0.5, 0.5, "No GIA peak data", ha="center", va="center", transform=ax.transAxes)
        _panel_title(ax, "A) Government Funding Recovery", "")
        return
    years = np.array([y for y, _ in result.peak_series])
    values = np.array([v for _, v in result.peak_series])

    ax.plot(years, values, color=C_GIA, linewidth=1.8, zorder=3)
    ax.fill_between(years, values, color=C_GIA_FILL, alpha=0.3)
    ax.axhline(1.0, color=C_PEAK, linestyle="--", alpha=0.7)
    ax.text(years[-1], 0.97, "Peak Level", color=C_PEAK, fontsize=8, ha="right")
    ax.set_ylim(min(0.65, values.min() - 0.05), 1.05)
    ax.yaxis.set_major_formatter(PercentFormatter(xmax=1.0, decimals=0))
    ax.set_ylabel("% of Peak GIA")

    shortfall = current_peak_shortfall(result.records)
    _panel_title(ax, "A) Government Funding Recovery",
                 f"Still {shortfall * 100:.0f}% below historical peak")


def draw_diversification(ax, result: "PipelineResult", config: BLFundingConfig) -> None:
    """Panel B. LOWESS trend drawn when there are enough non-empty years."""
    points = [(d.year, d.diversification_index) for d in result.derived
              if d.diversification_index is not None]
    years = np.array([y for y, _ in points], dtype=float)
    values = np.array([v for _, v in points], dtype=float)

    ax.plot(years, values, color=C_DIV, linewidth=1.8, zorder=3)
    ax.fill_between(years, values, color=C_DIV_FILL, alpha=0.3)
    if len(points) >= _MIN_LOWESS_POINTS:
        smoothed = lowess(values, years, frac=config.lowess_frac)
        ax.plot(smoothed[:, 0], smoothed[:, 1], color=C_GIA, linewidth=1.2, alpha=0.8, zorder=4)
    top = max(0.4, float(values.max()) * 1.1) if len(values) else 0.4
    ax.set_ylim(0, top)
    ax.set_ylabel("Diversification Index")
    _panel_title(ax, "B) Revenue Diversification", "Higher values = less government dependent")


def draw_services(ax, result: "PipelineResult") -> None:
    """Panel C. Annotates the decline from the services peak."""
    years = np.array([r.year for r in result.records])
    values = np.array([r.services_gbp_millions for r in result.records])

    ax.plot(years, values, color=C_SERV, linewidth=1.8, zorder=3)
    ax.fill_between(years, values, color=C_SERV_FILL, alpha=0.3)
    decline = decline_from_peak(result.records, "services_gbp_millions")
    if decline.decline_pct > 0:
        ax.annotate(
            f"{decline.decline_pct:.0f}% decline\nsince peak",
            xy=(decline.latest_year, decline.latest_value),
            xytext=(float(np.median(years)), decline.peak_value * 0.5),
            color="#c0392b", fontsize=9, ha="center",
            arrowprops={"arrowstyle": "->", "color": "#c0392b", "alpha": 0.6},
        )
    ax.set_ylabel("Services Income (£M)")
    _panel_title(ax, "C) Commercial Services Revenue",
                 f"Peak of £{decline.peak_value:.1f}M in {decline.peak_year}")


def draw_real_vs_nominal(ax, result: "PipelineResult") -> None:
    """Panel D."""
    years = [r.year for r in result.records]
    ax.plot(years, [r.nominal_gbp_millions for r in result.records],
            color=C_NOMINAL, linewidth=1.8, label="Nominal")
    ax.plot(years, [r.total_y2000_gbp_millions for r in result.records],
            color=C_REAL, linewidth=1.8, label="Real (2000 £)")
    ax.set_ylabel("Funding (£M)")
    ax.set_xlabel("Year")
    ax.legend(loc="lower center", bbox_to_anchor=(0.5, -0.35), ncol=2, frameon=False, fontsize=9)
    _panel_title(ax, "D) Purchasing Power Erosion", "Inflation's hidden impact on capacity")


def render_dashboard(
    result: "PipelineResult",
    output_path: str,
    config: BLFundingConfig = DEFAULT_CONFIG,
) -> str:
    """
    Render the 2x2 dashboard to a PNG file.

    Args:
        result:      PipelineResult.
        output_path: PNG path (parent directory created if needed).
        config:      Uses config.dashboard_size_in, config.dashboard_dpi,
                     config.lowess_frac.

    Returns:
        Absolute path of the written PNG.
    """
    plt.rcParams.update(STYLE)
    fig, axes = plt.subplots(2, 2, figsize=config.dashboard_size_in)

    draw_gia_recovery(axes[0, 0], result)
    draw_diversification(axes[0, 1], result, config)
    draw_services(axes[1, 0], result)
    draw_real_vs_nominal(axes[1, 1], result)

    first, last = result.records[0].year, result.records[-1].year
    span = last - first
    fig.suptitle(
        f"British Library Funding: {span} Years of Institutional Adaptation ({first}-{last})",
        fontsize=15, fontweight="bold", x=0.02, ha="left",
    )
    fig.text(
        0.02, 0.005,
        "Data: TidyTuesday 2025-07-15 | How cultural institutions navigate austerity "
        "and changing revenue landscapes",
        fontsize=8, alpha=0.7,
    )
    fig.tight_layout(rect=[0, 0.02, 1, 0.95])

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    fig.savefig(output_path, dpi=config.dashboard_dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    logger.info("Dashboard saved to: %s", output_path)
    return os.path.abspath(output_path)


def render_recovery_panel(
    result: "PipelineResult",
    output_path: str,
    config: BLFundingConfig = DEFAULT_CONFIG,
) -> str:
    """Render panel A on its own (the standalone government funding recovery figure)."""
    plt.rcParams.update(STYLE)
    fig, ax = plt.subplots(figsize=config.panel_size_in)
    draw_gia_recovery(ax, result)
    fig.tight_layout()

    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    fig.savefig(output_path, dpi=config.dashboard_dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)
    return os.path.abspath(output_path)
