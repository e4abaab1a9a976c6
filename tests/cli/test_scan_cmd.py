"""Tests for ``testatlas scan`` command.

Verifies:
    - JSON output (the default) carries counts, the framework histogram
      and per-file entries sorted by path.
    - Text output renders the inventory table and the summary line.
    - A nonexistent path exits with code 2.
    - Options can be supplied through TESTATLAS_SCAN_* environment variables.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from testatlas.cli.main import ENVVAR_PREFIX, cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


class TestScanJson:
    """Tests for the default JSON output."""

    def test_summary(self, runner: CliRunner, sample_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(sample_project)])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["filesScanned"] == 3
        assert data["filesMatched"] == 3
        assert data["testCount"] == 3
        assert data["frameworks"] == {"go-testing": 1, "pytest": 1, "vitest": 1}
        assert [f["path"] for f in data["files"]] == [
            "pkg/math_test.go", "src/cart.test.ts", "tests/test_math.py",
        ]
        assert data["errors"] == []
        assert "domainHints" not in data["files"][0]

    def test_domain_hints_flag(self, runner: CliRunner, sample_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(sample_project), "--domain-hints"])
        assert result.exit_code == 0, result.output
        files = {f["path"]: f for f in json.loads(result.output)["files"]}
        assert files["tests/test_math.py"]["domainHints"]["imports"] == ["pytest"]

    def test_pattern_and_exclude(self, runner: CliRunner, sample_project: Path) -> None:
        result = runner.invoke(
            cli, ["scan", str(sample_project), "--pattern", "src/**", "--exclude", "pkg"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [f["path"] for f in data["files"]] == ["src/cart.test.ts"]

    def test_empty_directory(self, runner: CliRunner, empty_dir: Path) -> None:
        result = runner.invoke(cli, ["scan", str(empty_dir)])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["filesScanned"] == 0
        assert data["files"] == []


class TestScanText:
    """Tests for the rich table output."""

    def test_table_and_summary(self, runner: CliRunner, sample_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(sample_project), "--format", "text"])
        assert result.exit_code == 0, result.output
        assert "testatlas Inventory" in result.output
        assert "vitest" in result.output
        assert "files scanned" in result.output

    def test_empty_directory_message(self, runner: CliRunner, empty_dir: Path) -> None:
        result = runner.invoke(cli, ["scan", str(empty_dir), "--format", "text"])
        assert result.exit_code == 0
        assert "No test files found" in result.output

    def test_format_from_environment(self, runner: CliRunner, empty_dir: Path) -> None:
        result = runner.invoke(
            cli,
            ["scan", str(empty_dir)],
            auto_envvar_prefix=ENVVAR_PREFIX,
            env={"TESTATLAS_SCAN_OUTPUT_FORMAT": "text"},
        )
        assert result.exit_code == 0
        assert "No test files found" in result.output


class TestScanErrors:
    """Tests for invalid invocations."""

    def test_nonexistent_path_exits_2(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["scan", str(tmp_path / "missing")])
        assert result.exit_code == 2

    def test_file_path_exits_2(self, runner: CliRunner, sample_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(sample_project / "README.md")])
        assert result.exit_code == 2

    def test_invalid_format(self, runner: CliRunner, sample_project: Path) -> None:
        result = runner.invoke(cli, ["scan", str(sample_project), "--format", "xml"])
        assert result.exit_code == 2
