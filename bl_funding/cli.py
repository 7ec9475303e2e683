"""
bl_funding/cli.py — Command-line interface for the funding analysis.

Usage:
    bl-funding fetch                  # download bl_funding.csv into the cache
    bl-funding run                    # full pipeline: metrics, report, figures
    bl-funding run --data-path my.csv # use a local CSV instead of downloading
    bl-funding metrics                # print per-year metrics + period summary
    bl-funding viz                    # regenerate figures from the cached CSV
    bl-funding status                 # show what exists in the output tree
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time

from bl_funding.config import DEFAULT_CONFIG
from bl_funding.errors import BLFundingError


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str = "INFO") -> None:
    """Configure root logger with timestamps and level names."""
    numeric = getattr(logging, level.upper(), logging.INFO)
    fmt = "%(asctime)s  %(levelname)-8s  %(name)s — %(message)s"
    datefmt = "%H:%M:%S"
    logging.basicConfig(level=numeric, format=fmt, datefmt=datefmt, stream=sys.stderr)
    # Silence noisy matplotlib / urllib debug output
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


logger = logging.getLogger("bl_funding.cli")


def _raw_csv_path(output_root: str | None) -> str:
    root = output_root or DEFAULT_CONFIG.output_root
    return os.path.join(root, DEFAULT_CONFIG.raw_data_dir, DEFAULT_CONFIG.raw_filename)


def _fmt(value, spec: str, missing: str = "—") -> str:
    return missing if value is None else format(value, spec)


# ── Subcommand: fetch ─────────────────────────────────────────────────────────

def cmd_fetch(args: argparse.Namespace) -> int:
    """Download (or refresh) the raw dataset cache."""
    from bl_funding.ingestion.tidytuesday_client import fetch_bl_funding

    path = fetch_bl_funding(_raw_csv_path(args.output_root), DEFAULT_CONFIG)
    print(f"  Dataset cached at: {path}")
    return 0


# ── Subcommand: run (full pipeline) ──────────────────────────────────────────

def cmd_run(args: argparse.Namespace) -> int:
    """Full pipeline: acquire → metrics → snapshot → CSV → report → figures."""
    from bl_funding.pipeline import run_full_pipeline

    logger.info("=" * 60)
    logger.info("British Library Funding — Full Pipeline Run")
    logger.info("  Data path    : %s", args.data_path or "TidyTuesday download")
    logger.info("  Output root  : %s", args.output_root or DEFAULT_CONFIG.output_root)
    logger.info("  Offline      : %s", args.offline)
    logger.info("=" * 60)

    t0 = time.monotonic()
    result = run_full_pipeline(
        data_path=args.data_path,
        output_root=args.output_root,
        offline=args.offline,
        generate_figures=not args.no_figures,
    )
    elapsed = time.monotonic() - t0

    snap = result.snapshot
    print()
    print("=" * 60)
    print("  BRITISH LIBRARY FUNDING — RUN COMPLETE")
    print("=" * 60)
    print(f"  Elapsed          : {elapsed:.1f}s")
    print(f"  Years            : {snap.n_years} ({snap.first_year}–{snap.last_year})")
    print(f"  Metrics CSV      : {result.metrics_csv_path}")
    print(f"  Report           : {result.report_path}")
    if result.figure_paths:
        print(f"  Figures ({len(result.figure_paths):2d})     : {result.layout.figures_dir}/")
    else:
        print(f"  Figures          : {'skipped' if args.no_figures else 'none generated'}")
    print()
    print("  Headline:")
    print(f"  {snap.headline}")
    print("=" * 60)
    return 0


# ── Subcommand: metrics ───────────────────────────────────────────────────────

def cmd_metrics(args: argparse.Namespace) -> int:
    """Print per-year derived metrics and the period summary (no files written)."""
    from bl_funding.ingestion.loader import load_funding_records
    from bl_funding.pipeline import compute_metrics

    path = args.data_path or _raw_csv_path(args.output_root)
    if not os.path.isfile(path):
        logger.error("No dataset at %s — run `bl-funding fetch` or pass --data-path.", path)
        return 1

    result = compute_metrics(load_funding_records(path), DEFAULT_CONFIG)

    print()
    print(f"  {'Year':<6}{'Period':<16}{'Diversif.':>10}{'Gov. dep.':>11}{'Real Δ%':>10}")
    print("  " + "-" * 51)
    for d in result.derived:
        print(
            f"  {d.year:<6}{d.period:<16}"
            f"{_fmt(d.diversification_index, '.3f'):>10}"
            f"{d.government_dependency * 100:>10.1f}%"
            f"{_fmt(d.real_change_pct, '+.1f'):>10}"
        )
    print()
    print(f"  {'Period':<16}{'Years':>11}{'Nominal £M':>12}{'Gov. dep. %':>13}{'Diversif.':>11}")
    print("  " + "-" * 63)
    for s in result.summaries.values():
        print(
            f"  {s.period:<16}{f'{s.first_year}–{s.last_year}':>11}"
            f"{s.mean_nominal_gbp_millions:>12.1f}{s.mean_government_dependency_pct:>13.1f}"
            f"{_fmt(s.mean_diversification_index, '.3f'):>11}"
        )
    print()
    return 0


# ── Subcommand: viz ───────────────────────────────────────────────────────────

def cmd_viz(args: argparse.Namespace) -> int:
    """Regenerate all figures from the cached dataset (no download, no report)."""
    from bl_funding.ingestion.loader import load_funding_records
    from bl_funding.pipeline import compute_metrics
    from bl_funding.viz.figures import generate_all_figures

    path = args.data_path or _raw_csv_path(args.output_root)
    if not os.path.isfile(path):
        logger.error("No dataset at %s — run `bl-funding fetch` or pass --data-path.", path)
        return 1

    result = compute_metrics(load_funding_records(path), DEFAULT_CONFIG)
    root = args.output_root or DEFAULT_CONFIG.output_root
    figures_dir = args.figures_dir or os.path.join(root, DEFAULT_CONFIG.figures_dir)
    paths = generate_all_figures(result, figures_dir, DEFAULT_CONFIG)
    print(f"  {len(paths)} figures written to {figures_dir}/")
    for name in sorted(paths):
        print(f"    {name}")
    return 0


# ── Subcommand: status ────────────────────────────────────────────────────────

def cmd_status(args: argparse.Namespace) -> int:
    """Show which outputs exist without running anything."""
    root = args.output_root or DEFAULT_CONFIG.output_root
    checks = [
        ("Raw dataset", os.path.join(root, DEFAULT_CONFIG.raw_data_dir, DEFAULT_CONFIG.raw_filename)),
        ("Metrics CSV", os.path.join(root, DEFAULT_CONFIG.processed_data_dir, DEFAULT_CONFIG.metrics_filename)),
        ("Report", os.path.join(root, DEFAULT_CONFIG.reports_dir, "bl_funding_report.md")),
        ("Dashboard", os.path.join(root, DEFAULT_CONFIG.figures_dir, "british_library_dashboard.png")),
    ]
    print()
    print(f"  Output root: {os.path.abspath(root)}")
    for label, path in checks:
        state = "present" if os.path.isfile(path) else "missing"
        print(f"  {label:<14}: {state:<8} {path}")
    figures_dir = os.path.join(root, DEFAULT_CONFIG.figures_dir)
    n_figs = len([f for f in os.listdir(figures_dir) if f.endswith(".png")]) if os.path.isdir(figures_dir) else 0
    print(f"  {'Figures':<14}: {n_figs}")
    print()
    return 0


# ── Argument parser ───────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bl-funding",
        description="British Library funding analysis (TidyTuesday 2025-07-15).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full pipeline (download, metrics, report, figures)
  bl-funding run

  # Full pipeline from a local CSV, no figures
  bl-funding run --data-path bl_funding.csv --no-figures

  # Print the metrics table from the cached CSV
  bl-funding metrics
        """,
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--output-root",
        default=None,
        metavar="PATH",
        help=f"Root of the output tree (default: {DEFAULT_CONFIG.output_root})",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    p_fetch = subparsers.add_parser("fetch", help="Download bl_funding.csv into the cache")
    p_fetch.set_defaults(func=cmd_fetch)

    p_run = subparsers.add_parser("run", help="Full pipeline: metrics → report → figures")
    p_run.add_argument("--data-path", default=None, metavar="CSV",
                       help="Use a local CSV instead of downloading")
    p_run.add_argument("--offline", action="store_true",
                       help="Never hit the network; use the cached raw CSV")
    p_run.add_argument("--no-figures", action="store_true", help="Skip figure generation")
    p_run.set_defaults(func=cmd_run)

    p_metrics = subparsers.add_parser("metrics", help="Print per-year metrics and period summary")
    p_metrics.add_argument("--data-path", default=None, metavar="CSV")
    p_metrics.set_defaults(func=cmd_metrics)

    p_viz = subparsers.add_parser("viz", help="Regenerate figures from the cached dataset")
    p_viz.add_argument("--data-path", default=None, metavar="CSV")
    p_viz.add_argument("--figures-dir", default=None, metavar="PATH",
                       help="Output directory for figures")
    p_viz.set_defaults(func=cmd_viz)

    p_status = subparsers.add_parser("status", help="Show output tree state")
    p_status.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.log_level)
    try:
        return args.func(args)
    except BLFundingError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
