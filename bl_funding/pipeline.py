"""
bl_funding/pipeline.py — Single-call pipeline orchestrator.

Provides run_full_pipeline() which executes the whole analysis in dependency
order and returns a PipelineResult holding every intermediate table.

Usage:
    from bl_funding.pipeline import run_full_pipeline
    result = run_full_pipeline()
    print(result.snapshot.headline)

Output tree (under config.output_root):
    data/raw/bl_funding.csv
    data/processed/bl_metrics.csv
    outputs/reports/{date}_bl_funding_snapshot.json
    outputs/reports/bl_funding_report.md
    outputs/figures/*.png
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

from bl_funding.config import DEFAULT_CONFIG, BLFundingConfig
from bl_funding.ingestion.loader import load_funding_records, write_records_csv
from bl_funding.ingestion.tidytuesday_client import fetch_bl_funding
from bl_funding.metrics.composition import metrics_frame, source_shares, to_long_format
from bl_funding.metrics.derived import DerivedMetrics, derive_metrics
from bl_funding.metrics.period_summary import PeriodSummary, period_summary
from bl_funding.metrics.trends import peak_recovery_series
from bl_funding.records import FundingRecord
from bl_funding.reports.funding_report import (
    FundingSnapshot,
    export_report_markdown,
    generate_funding_report,
)

logger = logging.getLogger(__name__)


@dataclass
class OutputLayout:
    """Absolute directories of one run's output tree."""

    root: str
    raw_dir: str
    processed_dir: str
    figures_dir: str
    reports_dir: str

    @classmethod
    def from_config(cls, config: BLFundingConfig, output_root: Optional[str] = None) -> "OutputLayout":
        root = os.path.abspath(output_root or config.output_root)
        return cls(
            root=root,
            raw_dir=os.path.join(root, config.raw_data_dir),
            processed_dir=os.path.join(root, config.processed_data_dir),
            figures_dir=os.path.join(root, config.figures_dir),
            reports_dir=os.path.join(root, config.reports_dir),
        )

    def create(self) -> None:
        for path in (self.raw_dir, self.processed_dir, self.figures_dir, self.reports_dir):
            os.makedirs(path, exist_ok=True)


@dataclass
class PipelineResult:
    """
    Complete output of a single analysis run.

    Contains every intermediate table for inspection, plus the snapshot and
    the paths of everything written to disk.
    """

    # Input
    records: list[FundingRecord]

    # Core metrics
    derived: list[DerivedMetrics]
    summaries: dict[str, PeriodSummary]

    # Tables for charts and export
    metrics_df: pd.DataFrame
    shares_df: pd.DataFrame
    long_df: pd.DataFrame
    peak_series: list[tuple[int, float]]

    # Final output
    snapshot: Optional[FundingSnapshot] = None
    layout: Optional[OutputLayout] = None
    raw_csv_path: Optional[str] = None
    metrics_csv_path: Optional[str] = None
    report_path: Optional[str] = None

    # Generated figure paths (populated by viz module)
    figure_paths: dict = field(default_factory=dict)


def compute_metrics(
    records: list[FundingRecord],
    config: BLFundingConfig = DEFAULT_CONFIG,
) -> PipelineResult:
    """
    Run only the in-memory computation steps (no I/O).

    Raises:
        FundingDataError: if records are empty, unsorted or duplicated.
        DivisionError:    on any zero denominator.
    """
    derived = derive_metrics(records, config)
    return PipelineResult(
        records=records,
        derived=derived,
        summaries=period_summary(records, derived, config),
        metrics_df=metrics_frame(records, derived, config),
        shares_df=source_shares(records),
        long_df=to_long_format(records),
        peak_series=peak_recovery_series(records),
    )


def run_full_pipeline(
    data_path: Optional[str] = None,
    config: BLFundingConfig = DEFAULT_CONFIG,
    output_root: Optional[str] = None,
    offline: bool = False,
    generate_figures: bool = True,
) -> PipelineResult:
    """
    Execute the complete analysis in one call.

    Dependency order:
        1. Output tree creation
        2. Dataset acquisition (download/cache, or data_path)
        3. Load + validate FundingRecords
        4. Derived metrics
        5. Period summary + composition tables
        6. Funding snapshot (JSON)
        7. CSV exports (raw + processed)
        8. Markdown report
        9. Figures + dashboard (optional; failures are logged, not raised)

    Args:
        data_path:        Local CSV to use instead of the TidyTuesday download.
        config:           BLFundingConfig.
        output_root:      Root of the output tree (default config.output_root).
        offline:          Never hit the network; requires a cached raw CSV.
        generate_figures: Render PNG figures and the dashboard.

    Returns:
        PipelineResult with every intermediate and final result.

    Raises:
        DatasetUnavailableError: if no dataset can be obtained.
        FundingDataError:        if the dataset fails validation.
        DivisionError:           on any zero denominator in the metrics.
        MissingValueError:       if the latest year has no GIA peak share.
    """
    logger.info("British Library funding pipeline starting.")

    # ── 1. Output tree ─────────────────────────────────────────────────────────
    layout = OutputLayout.from_config(config, output_root)
    layout.create()
    logger.info("Phase 1/9: Output tree ready under %s", layout.root)

    # ── 2. Acquire dataset ─────────────────────────────────────────────────────
    raw_csv = os.path.join(layout.raw_dir, config.raw_filename)
    if data_path:
        source_csv = data_path
        logger.info("Phase 2/9: Using local dataset %s", data_path)
    else:
        source_csv = fetch_bl_funding(raw_csv, config, offline=offline)
        logger.info("Phase 2/9: Dataset available at %s", source_csv)

    # ── 3. Load ────────────────────────────────────────────────────────────────
    records = load_funding_records(source_csv)
    logger.info("Phase 3/9: Loaded %d funding records.", len(records))

    # ── 4–5. Metrics ───────────────────────────────────────────────────────────
    result = compute_metrics(records, config)
    result.layout = layout
    logger.info("Phase 4/9: Derived metrics for %d years.", len(result.derived))
    logger.info("Phase 5/9: Period summary — %s.", ", ".join(result.summaries))

    # ── 6. Snapshot ────────────────────────────────────────────────────────────
    result.snapshot = generate_funding_report(
        records, result.derived, result.summaries, config, output_dir=layout.reports_dir,
    )
    logger.info("Phase 6/9: Snapshot generated.")

    # ── 7. CSV exports ─────────────────────────────────────────────────────────
    if data_path:
        write_records_csv(records, raw_csv)
    result.raw_csv_path = raw_csv
    result.metrics_csv_path = os.path.join(layout.processed_dir, config.metrics_filename)
    result.metrics_df.to_csv(result.metrics_csv_path, index=False)
    logger.info("Phase 7/9: Wrote %s and %s.", result.raw_csv_path, result.metrics_csv_path)

    # ── 8. Markdown report ─────────────────────────────────────────────────────
    result.report_path = os.path.join(layout.reports_dir, "bl_funding_report.md")
    export_report_markdown(result.snapshot, result.report_path)
    logger.info("Phase 8/9: Markdown report exported to %s.", result.report_path)

    # ── 9. Figures ─────────────────────────────────────────────────────────────
    if generate_figures:
        try:
            from bl_funding.viz.figures import generate_all_figures
            result.figure_paths = generate_all_figures(result, layout.figures_dir, config)
            logger.info("Phase 9/9: Generated %d figures to %s", len(result.figure_paths), layout.figures_dir)
        except Exception as e:
            logger.warning("Phase 9/9: Figure generation failed: %s", e)
            result.figure_paths = {}
    else:
        logger.info("Phase 9/9: Figure generation skipped (generate_figures=False).")

    # ── Re-export report with figure references if figures were generated ─────
    if result.figure_paths:
        export_report_markdown(result.snapshot, result.report_path, figure_paths=result.figure_paths)
        logger.info("Phase 9/9: Report re-exported with figure references.")

    logger.info("British Library funding pipeline complete.")
    return result
