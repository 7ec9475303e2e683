"""
bl_funding/tests/test_cli.py — Tests for argument parsing and the subcommands.
"""

import pytest

from bl_funding import cli
from bl_funding.cli import build_parser, main


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_parser_run_flags():
    args = build_parser().parse_args(
        ["--output-root", "out", "run", "--data-path", "x.csv", "--offline", "--no-figures"]
    )
    assert args.command == "run"
    assert args.output_root == "out"
    assert args.data_path == "x.csv"
    assert args.offline and args.no_figures
    assert args.func is cli.cmd_run


def test_metrics_prints_tables(synthetic_csv, capsys):
    assert main(["metrics", "--data-path", synthetic_csv]) == 0
    out = capsys.readouterr().out
    assert "Pre-Crisis" in out and "Recovery Era" in out
    assert "2023" in out


def test_metrics_without_dataset(tmp_path):
    assert main(["--output-root", str(tmp_path), "metrics"]) == 1


def test_viz_without_dataset(tmp_path):
    assert main(["--output-root", str(tmp_path), "viz"]) == 1


def test_run_then_status(tmp_path, synthetic_csv, capsys):
    root = str(tmp_path / "out")
    assert main(["--output-root", root, "run", "--data-path", synthetic_csv, "--no-figures"]) == 0
    out = capsys.readouterr().out
    assert "RUN COMPLETE" in out

    assert main(["--output-root", root, "status"]) == 0
    out = capsys.readouterr().out
    assert "Raw dataset   : present" in out
    assert "Dashboard     : missing" in out


def test_package_errors_return_exit_code_one(tmp_path):
    # Offline with an empty cache raises DatasetUnavailableError inside the command.
    assert main(["--output-root", str(tmp_path), "run", "--offline", "--no-figures"]) == 1
