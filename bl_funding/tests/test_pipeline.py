"""
bl_funding/tests/test_pipeline.py — End-to-end pipeline tests on the synthetic CSV.
"""

import os

import pandas as pd
import pytest

from bl_funding.config import BLFundingConfig
from bl_funding.errors import DatasetUnavailableError
from bl_funding.pipeline import OutputLayout, PipelineResult, compute_metrics, run_full_pipeline

FAST = BLFundingConfig(figure_dpi=40, dashboard_dpi=40)


def test_compute_metrics_is_in_memory(synthetic_records):
    result = compute_metrics(synthetic_records)
    assert isinstance(result, PipelineResult)
    assert len(result.derived) == len(synthetic_records)
    assert len(result.metrics_df) == len(synthetic_records)
    assert len(result.long_df) == len(synthetic_records) * 5
    assert result.snapshot is None and result.report_path is None


def test_output_layout(tmp_path):
    layout = OutputLayout.from_config(BLFundingConfig(), str(tmp_path))
    layout.create()
    assert layout.root == os.path.abspath(str(tmp_path))
    for path in (layout.raw_dir, layout.processed_dir, layout.figures_dir, layout.reports_dir):
        assert os.path.isdir(path)


def test_full_pipeline_without_figures(tmp_path, synthetic_csv):
    result = run_full_pipeline(
        data_path=synthetic_csv, config=FAST, output_root=str(tmp_path), generate_figures=False,
    )
    assert result.figure_paths == {}
    assert os.path.isfile(result.raw_csv_path)
    assert os.path.isfile(result.report_path)

    metrics = pd.read_csv(result.metrics_csv_path)
    assert len(metrics) == 26
    assert {"period", "hhi", "diversification_index", "government_dependency"} <= set(metrics.columns)

    report = open(result.report_path, encoding="utf-8").read()
    assert "## Visual Analysis" not in report
    assert result.snapshot.headline in report


def test_full_pipeline_with_figures(tmp_path, synthetic_csv):
    result = run_full_pipeline(data_path=synthetic_csv, config=FAST, output_root=str(tmp_path))
    assert "british_library_dashboard.png" in result.figure_paths
    assert all(os.path.isfile(p) for p in result.figure_paths.values())
    report = open(result.report_path, encoding="utf-8").read()
    assert "## Visual Analysis" in report
    assert "../figures/british_library_dashboard.png" in report


def test_full_pipeline_snapshot_json(tmp_path, synthetic_csv):
    result = run_full_pipeline(
        data_path=synthetic_csv, config=FAST, output_root=str(tmp_path), generate_figures=False,
    )
    json_name = f"{result.snapshot.snapshot_date}_bl_funding_snapshot.json"
    assert os.path.isfile(os.path.join(result.layout.reports_dir, json_name))


def test_offline_pipeline_uses_cached_raw(tmp_path, synthetic_csv):
    run_full_pipeline(data_path=synthetic_csv, config=FAST, output_root=str(tmp_path),
                      generate_figures=False)
    again = run_full_pipeline(config=FAST, output_root=str(tmp_path), offline=True,
                              generate_figures=False)
    assert len(again.records) == 26


def test_offline_pipeline_without_cache(tmp_path):
    with pytest.raises(DatasetUnavailableError):
        run_full_pipeline(config=FAST, output_root=str(tmp_path), offline=True)
