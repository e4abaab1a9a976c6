"""Tests for ``testatlas detect`` and ``testatlas frameworks`` commands."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from testatlas.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


class TestDetect:
    """Single-file detection."""

    def test_config_scope_with_root(self, runner: CliRunner, sample_project: Path) -> None:
        target = sample_project / "src" / "cart.test.ts"
        result = runner.invoke(
            cli, ["detect", str(target), "--root", str(sample_project), "--format", "json"]
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["path"] == "src/cart.test.ts"
        assert data["framework"] == "vitest"
        assert data["source"] == "config-scope"
        assert data["level"] == "moderate"
        assert data["configPath"] == "vitest.config.ts"

    def test_import_without_root(self, runner: CliRunner, sample_project: Path) -> None:
        target = sample_project / "tests" / "test_math.py"
        result = runner.invoke(cli, ["detect", str(target), "--format", "json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["framework"] == "pytest"
        assert data["confidence"] == 100
        assert data["evidence"][0]["source"] == "import"

    def test_text_output(self, runner: CliRunner, sample_project: Path) -> None:
        target = sample_project / "pkg" / "math_test.go"
        result = runner.invoke(cli, ["detect", str(target)])
        assert result.exit_code == 0
        assert "Detection Result" in result.output
        assert "go-testing" in result.output

    def test_unknown_exits_1(self, runner: CliRunner, sample_project: Path) -> None:
        result = runner.invoke(cli, ["detect", str(sample_project / "README.md")])
        assert result.exit_code == 1
        assert "unknown" in result.output

    def test_file_outside_root_exits_2(
        self, runner: CliRunner, sample_project: Path, empty_dir: Path
    ) -> None:
        target = sample_project / "tests" / "test_math.py"
        result = runner.invoke(cli, ["detect", str(target), "--root", str(empty_dir)])
        assert result.exit_code == 2

    def test_missing_file_exits_2(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["detect", str(tmp_path / "nope.ts")])
        assert result.exit_code == 2


class TestFrameworks:
    """Framework listing."""

    def test_json_in_detection_order(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["frameworks", "--format", "json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert len(data) == 22
        keys = [(-entry["priority"], entry["name"]) for entry in data]
        assert keys == sorted(keys)
        by_name = {entry["name"]: entry for entry in data}
        assert "jest.config.js" in by_name["jest"]["configFiles"]
        assert by_name["jest"]["hasConfigParser"] is True
        assert by_name["go-testing"]["configFiles"] == []
        assert by_name["junit5"]["languages"] == ["java", "kotlin"]

    def test_text_table(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["frameworks"])
        assert result.exit_code == 0
        assert "22 Supported Test Frameworks" in result.output
        assert "playwright" in result.output

    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "version" in result.output
