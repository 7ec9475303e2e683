"""
bl_funding/reports/funding_report.py — Funding snapshot and written report.

Each run produces a FundingSnapshot that:
  - Captures the headline numbers quoted in the analysis
  - Persists to JSON for comparison with later dataset releases
  - Exports to a human-readable Markdown report with figure links
"""

import json
import logging
import os
import statistics
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig
from bl_funding.metrics.derived import DerivedMetrics
from bl_funding.metrics.period_summary import PeriodSummary
from bl_funding.metrics.trends import (
    current_peak_shortfall,
    decline_from_peak,
    purchasing_power_change,
)
from bl_funding.records import FundingRecord

logger = logging.getLogger(__name__)


@dataclass
class FundingSnapshot:
    """
    Timestamped summary of one analysis run.

    Monetary values are GBP millions; *_pct fields are percentages (0–100).
    """

    snapshot_date: str                      # ISO 8601 date string
    dataset_week: str                       # TidyTuesday week, e.g. "2025-07-15"

    # Coverage
    first_year: int
    last_year: int
    n_years: int

    # Latest year
    latest_nominal_gbp_millions: float
    latest_real_gbp_millions: float
    latest_gia_pct_of_peak: float
    peak_shortfall_pct: float
    latest_government_dependency_pct: float
    latest_diversification_index: Optional[float]

    # Long-run change
    nominal_change_pct: float
    real_change_pct: float
    services_peak_year: int
    services_decline_pct: float
    mean_diversification_index: Optional[float]

    # Per-era aggregates: {period: PeriodSummary as dict}
    period_summaries: dict

    # Narrative
    headline: str


def generate_headline(
    first_year: int,
    last_year: int,
    peak_shortfall_pct: float,
    services_decline_pct: float,
    nominal_change_pct: float,
    real_change_pct: float,
    summaries: dict[str, PeriodSummary],
) -> str:
    """
    Summarise the run in 2-3 sentences.

    Example:
    "In 2023, government grant-in-aid stood 25% below its historical peak.
    Between 1998 and 2023 nominal funding changed by +12.0% but real funding
    by -30.5%. Commercial services income is 50% below its peak. Government
    dependency averaged 83.1% in the Pre-Crisis years and 79.4% in the
    Recovery Era."
    """
    parts = [
        f"In {last_year}, government grant-in-aid stood "
        f"{peak_shortfall_pct:.0f}% below its historical peak.",
        f"Between {first_year} and {last_year} nominal funding changed by "
        f"{nominal_change_pct:+.1f}% but real (2000 £) funding by {real_change_pct:+.1f}%.",
    ]
    if services_decline_pct > 0:
        parts.append(f"Commercial services income is {services_decline_pct:.0f}% below its peak.")

    periods = list(summaries.values())
    if len(periods) >= 2:
        first, last = periods[0], periods[-1]
        parts.append(
            f"Government dependency averaged {first.mean_government_dependency_pct:.1f}% "
            f"in the {first.period} years and {last.mean_government_dependency_pct:.1f}% "
            f"in the {last.period}."
        )
    return " ".join(parts)


def generate_funding_report(
    records: Sequence[FundingRecord],
    derived: Sequence[DerivedMetrics],
    summaries: dict[str, PeriodSummary],
    config: BLFundingConfig = DEFAULT_CONFIG,
    output_dir: Optional[str] = None,
) -> FundingSnapshot:
    """
    Build a FundingSnapshot and (optionally) save it to JSON.

    Filename: {date}_bl_funding_snapshot.json inside output_dir.

    Args:
        records:    FundingRecords sorted by year.
        derived:    Output of derive_metrics(records).
        summaries:  Output of period_summary(records, derived).
        config:     BLFundingConfig.
        output_dir: Directory for the JSON file; skipped when None.

    Raises:
        MissingValueError: if the most recent year has no GIA peak share.
        DivisionError:     from the trend calculations on zero denominators.
    """
    snapshot_date = datetime.now(tz=timezone.utc).strftime("%Y-%m-%d")
    latest = records[-1]
    latest_metrics = derived[-1]

    shortfall = current_peak_shortfall(records)
    services = decline_from_peak(records, "services_gbp_millions")
    power = purchasing_power_change(records)

    div_values = [d.diversification_index for d in derived if d.diversification_index is not None]
    mean_div = round(statistics.mean(div_values), 3) if div_values else None

    headline = generate_headline(
        first_year=records[0].year,
        last_year=latest.year,
        peak_shortfall_pct=shortfall * 100,
        services_decline_pct=services.decline_pct,
        nominal_change_pct=power.nominal_change_pct,
        real_change_pct=power.real_change_pct,
        summaries=summaries,
    )

    snapshot = FundingSnapshot(
        snapshot_date=snapshot_date,
        dataset_week=config.tidytuesday_week,
        first_year=records[0].year,
        last_year=latest.year,
        n_years=len(records),
        latest_nominal_gbp_millions=round(latest.nominal_gbp_millions, 1),
        latest_real_gbp_millions=round(latest.total_y2000_gbp_millions, 1),
        latest_gia_pct_of_peak=round(latest.gia_as_percent_of_peak_gia * 100, 1),
        peak_shortfall_pct=round(shortfall * 100, 1),
        latest_government_dependency_pct=round(latest_metrics.government_dependency * 100, 1),
        latest_diversification_index=(
            None if latest_metrics.diversification_index is None
            else round(latest_metrics.diversification_index, 3)
        ),
        nominal_change_pct=round(power.nominal_change_pct, 1),
        real_change_pct=round(power.real_change_pct, 1),
        services_peak_year=services.peak_year,
        services_decline_pct=round(services.decline_pct, 1),
        mean_diversification_index=mean_div,
        period_summaries={p: asdict(s) for p, s in summaries.items()},
        headline=headline,
    )

    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
        filepath = os.path.join(output_dir, f"{snapshot_date}_bl_funding_snapshot.json")
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(asdict(snapshot), f, indent=2, default=str)
            logger.info("Funding snapshot saved to: %s", filepath)
        except OSError as e:
            logger.error("Failed to write snapshot to %s: %s", filepath, e)

    return snapshot


# Figure filename → (alt text, caption), in report order.
_FIGURE_CAPTIONS = {
    "british_library_dashboard.png": (
        "British Library Funding Dashboard",
        "Four-panel summary: GIA recovery, diversification, services revenue, real vs nominal.",
    ),
    "government_funding_recovery.png": (
        "Government Funding Recovery",
        "Grant-in-aid as a share of its historical peak; dashed line = 100%.",
    ),
    "fig1_funding_sources_area.png": (
        "Funding Sources Over Time",
        "Stacked area of the five income categories (nominal £M).",
    ),
    "fig2_total_nominal_trend.png": (
        "Total Funding Over Time",
        "Total nominal funding.",
    ),
    "fig3_nominal_vs_real.png": (
        "Nominal vs Real Funding",
        "Current pounds vs year-2000 pounds.",
    ),
    "fig4_gia_percent_of_peak.png": (
        "GIA as % of Peak",
        "Years without a recorded peak share are omitted.",
    ),
    "fig5_source_composition.png": (
        "Changing Composition",
        "Share of nominal total by income category.",
    ),
    "fig6_non_government_streams.png": (
        "Non-Government Income Streams",
        "Voluntary, services and investment income.",
    ),
}


def export_report_markdown(
    snapshot: FundingSnapshot,
    output_path: str,
    figure_paths: "dict[str, str] | None" = None,
) -> str:
    """
    Export the Markdown funding report.

    Structure:
        # British Library Funding — {first_year}–{last_year}
        ## Summary                (headline narrative)
        ## Key Figures            (table of snapshot values)
        ## Funding by Period      (period summary table)
        ## Visual Analysis        (only when figure_paths is given)

    Writes the file to output_path and returns the Markdown string.
    """
    lines: list[str] = [
        f"# British Library Funding — {snapshot.first_year}–{snapshot.last_year}",
        "",
        f"**Date:** {snapshot.snapshot_date} | **Data:** TidyTuesday {snapshot.dataset_week}",
        "",
        "---",
        "",
        "## Summary",
        "",
        snapshot.headline,
        "",
        "## Key Figures",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        f"| Years covered | {snapshot.n_years} ({snapshot.first_year}–{snapshot.last_year}) |",
        f"| Latest nominal total | £{snapshot.latest_nominal_gbp_millions:.1f}M |",
        f"| Latest real total (2000 £) | £{snapshot.latest_real_gbp_millions:.1f}M |",
        f"| GIA as % of peak ({snapshot.last_year}) | {snapshot.latest_gia_pct_of_peak:.1f}% |",
        f"| Government dependency ({snapshot.last_year}) | {snapshot.latest_government_dependency_pct:.1f}% |",
        f"| Nominal change since {snapshot.first_year} | {snapshot.nominal_change_pct:+.1f}% |",
        f"| Real change since {snapshot.first_year} | {snapshot.real_change_pct:+.1f}% |",
        f"| Services decline from {snapshot.services_peak_year} peak | {snapshot.services_decline_pct:.1f}% |",
    ]
    if snapshot.mean_diversification_index is not None:
        lines.append(f"| Mean diversification index | {snapshot.mean_diversification_index:.3f} |")
    lines.append("")

    lines += [
        "## Funding by Period",
        "",
        "| Period | Years | Mean Nominal (£M) | Gov. Dependency (%) | Diversification |",
        "|--------|-------|-------------------|---------------------|-----------------|",
    ]
    for period, s in snapshot.period_summaries.items():
        div = s["mean_diversification_index"]
        div_label = f"{div:.3f}" if div is not None else "n/a"
        lines.append(
            f"| {period} | {s['first_year']}–{s['last_year']} | "
            f"{s['mean_nominal_gbp_millions']:.1f} | "
            f"{s['mean_government_dependency_pct']:.1f} | {div_label} |"
        )
    lines.append("")

    if figure_paths:
        report_dir = os.path.dirname(os.path.abspath(output_path))
        lines += [
            "---",
            "",
            "## Visual Analysis",
            "",
            "*Paths are relative to this report file.*",
            "",
        ]
        for fname, (alt, caption) in _FIGURE_CAPTIONS.items():
            if fname in figure_paths:
                rel_path = os.path.relpath(figure_paths[fname], report_dir)
                lines += [f"![{alt}]({rel_path})", f"*{caption}*", ""]

    lines += [
        "---",
        "",
        f"_Data: TidyTuesday {snapshot.dataset_week} — British Library funding._",
        "",
    ]

    markdown = "\n".join(lines)

    try:
        os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(markdown)
        logger.info("Funding report exported to: %s", output_path)
    except OSError as e:
        logger.error("Failed to write report to %s: %s", output_path, e)

    return markdown
