"""Tests for CLI commands using Click's CliRunner."""

from __future__ import annotations

import csv
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from scanbench.cli import main

OUTPUT_DIR = "local_scan_results"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "SCANBENCH_TRIALS",
        "SCANBENCH_IMAGE_LIST",
        "SCANBENCH_OUTPUT_DIR",
        "SCANBENCH_SCAN_TIMEOUT",
        "SCANBENCH_DOCKER",
        "SCANBENCH_TRIVY",
    ):
        monkeypatch.delenv(name, raising=False)


def _rows(path: Path) -> list[dict[str, str]]:
    with path.open(newline="") as f:
        return list(csv.DictReader(f))


def test_main_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "scanbench" in result.output
    assert "run" in result.output
    assert "summary" in result.output


def test_short_help_flag():
    runner = CliRunner()
    result = runner.invoke(main, ["run", "-h"])
    assert result.exit_code == 0
    assert "--trials" in result.output


def test_main_version():
    runner = CliRunner()
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_unknown_flag():
    runner = CliRunner()
    result = runner.invoke(main, ["run", "--bogus"])
    assert result.exit_code != 0


@pytest.mark.parametrize("value", ["abc", "0", "-2"])
def test_invalid_trials_no_side_effects(value: str):
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("images.txt").write_text("alpine\n")
        result = runner.invoke(main, ["run", "-n", value])
        assert result.exit_code != 0
        assert not Path(OUTPUT_DIR).exists()


def test_missing_trials_argument():
    runner = CliRunner()
    result = runner.invoke(main, ["run", "-n"])
    assert result.exit_code != 0


def test_missing_image_list():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["run"])
        assert result.exit_code == 1
        assert "not found" in result.output
        assert not Path(OUTPUT_DIR).exists()


@patch("scanbench.cli.run.DockerTrivyTooling")
def test_missing_tools(mock_tooling_cls: MagicMock, make_tooling):
    tooling = make_tooling()
    tooling.missing_tools = lambda: ["trivy"]
    mock_tooling_cls.return_value = tooling

    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("images.txt").write_text("alpine\n")
        result = runner.invoke(main, ["run"])
        assert result.exit_code == 1
        assert "trivy" in result.output
        assert tooling.calls == []


@patch("scanbench.cli.run.DockerTrivyTooling")
def test_run_appends_rows(mock_tooling_cls: MagicMock, make_tooling):
    tooling = make_tooling(fail_fetch={"broken:1"})
    mock_tooling_cls.return_value = tooling

    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("images.txt").write_text("alpine\n\nnginx:1.25\nbroken:1\n")

        result = runner.invoke(main, ["run", "-n", "2"])
        assert result.exit_code == 0, result.output
        assert "STARTING TRIAL 2 / 2" in result.output

        metrics = Path(OUTPUT_DIR) / "summary_metrics.csv"
        rows = _rows(metrics)
        assert len(rows) == 6
        assert [r["status"] for r in rows].count("FAILED") == 2

        # A second run appends without a second header
        result = runner.invoke(main, ["run", "-n", "1"])
        assert result.exit_code == 0, result.output
        lines = metrics.read_text().splitlines()
        assert len(lines) == 1 + 9
        assert sum(1 for line in lines if line.startswith("trial,")) == 1

        assert Path(OUTPUT_DIR, "reports", "nginx", "1.25").is_dir()
        assert Path(OUTPUT_DIR, "reports", "alpine", "latest").is_dir()


@patch("scanbench.cli.run.DockerTrivyTooling")
def test_run_with_options(mock_tooling_cls: MagicMock, make_tooling):
    mock_tooling_cls.return_value = make_tooling()

    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("list.txt").write_text("redis:7\n")
        result = runner.invoke(
            main,
            ["run", "-n", "1", "-i", "list.txt", "-o", "out", "--timeout", "60"],
        )
        assert result.exit_code == 0, result.output
        assert len(_rows(Path("out") / "summary_metrics.csv")) == 1
        assert mock_tooling_cls.call_args.kwargs["timeout"] == 60.0


@patch("scanbench.cli.run.DockerTrivyTooling")
def test_run_with_config_file(mock_tooling_cls: MagicMock, make_tooling):
    mock_tooling_cls.return_value = make_tooling()

    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("list.txt").write_text("alpine\n")
        Path("bench.yaml").write_text(
            "trials: 2\nimage_list: list.txt\noutput_dir: yaml_out\n"
        )
        result = runner.invoke(main, ["run", "--config", "bench.yaml"])
        assert result.exit_code == 0, result.output
        assert len(_rows(Path("yaml_out") / "summary_metrics.csv")) == 2


def test_invalid_config_file():
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("bench.yaml").write_text("- not\n- a mapping\n")
        result = runner.invoke(main, ["run", "--config", "bench.yaml"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


@patch("scanbench.cli.run.DockerTrivyTooling")
def test_summary(mock_tooling_cls: MagicMock, make_tooling):
    mock_tooling_cls.return_value = make_tooling(fail_scan={"nginx:1.25"})

    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("images.txt").write_text("alpine\nnginx:1.25\n")
        assert runner.invoke(main, ["run", "-n", "3"]).exit_code == 0

        result = runner.invoke(main, ["summary"])
        assert result.exit_code == 0, result.output
        assert "Total attempts: 6" in result.output


def test_summary_missing_log():
    runner = CliRunner()
    with runner.isolated_filesystem():
        result = runner.invoke(main, ["summary"])
        assert result.exit_code == 1
        assert "No metrics log" in result.output


@pytest.mark.parametrize("content", ["trials: [1\n", "trials: 2.5\n", "trials: [1]\n"])
def test_bad_config_values(content: str):
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("images.txt").write_text("alpine\n")
        Path("bench.yaml").write_text(content)
        result = runner.invoke(main, ["run", "--config", "bench.yaml"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output
        assert not Path(OUTPUT_DIR).exists()


@patch("scanbench.cli.run.DockerTrivyTooling")
def test_run_reports_rows_written(mock_tooling_cls: MagicMock, make_tooling):
    mock_tooling_cls.return_value = make_tooling()

    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("images.txt").write_text("alpine\nnginx:1.25\n")
        result = runner.invoke(main, ["run", "-n", "2"])
        assert result.exit_code == 0, result.output
        assert "Logged 4 record(s)" in result.output
