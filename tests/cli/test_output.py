"""Tests for the CLI output helpers."""

from __future__ import annotations

from testatlas.cli.output import config_files, framework_histogram, level_style, scan_summary
from testatlas.detection import ConfidenceLevel
from testatlas.domain import DomainHints, Inventory, Language, Location, Test, TestFile
from testatlas.exceptions import ConfigParseError
from testatlas.parsers import gotesting, pytest as pytest_framework
from testatlas.scanner import ScanError, ScanPhase, ScanResult


def _result() -> ScanResult:
    location = Location("a", 1, 1)
    files = [
        TestFile("src/a.test.ts", Language.TYPESCRIPT, "vitest", tests=[Test("x", location)]),
        TestFile(
            "tests/test_b.py",
            Language.PYTHON,
            "pytest",
            tests=[Test("y", location), Test("z", location)],
            domain_hints=DomainHints(imports=("pytest",)),
        ),
        TestFile("src/c.test.ts", Language.TYPESCRIPT, "vitest"),
    ]
    result = ScanResult(inventory=Inventory(root_path="/repo", files=files))
    result.errors.append(
        ScanError(ConfigParseError("jest.config.json: invalid JSON"), "jest.config.json",
                  ScanPhase.CONFIG_PARSE)
    )
    result.stats.files_scanned = 4
    result.stats.files_matched = 3
    result.stats.duration = 0.12345
    return result


class TestScanSummary:

    def test_histogram_counts_files_per_framework(self) -> None:
        assert framework_histogram(_result()) == {"pytest": 1, "vitest": 2}

    def test_summary(self) -> None:
        summary = scan_summary(_result())
        assert summary["filesScanned"] == 4
        assert summary["filesMatched"] == 3
        assert summary["testCount"] == 3
        assert summary["duration"] == 0.123
        assert summary["files"][1] == {
            "path": "tests/test_b.py",
            "framework": "pytest",
            "testCount": 2,
            "domainHints": {"imports": ["pytest"], "calls": []},
        }
        assert summary["errors"] == [{
            "path": "jest.config.json",
            "phase": "config-parse",
            "error": "jest.config.json: invalid JSON",
        }]


class TestHelpers:

    def test_config_files(self) -> None:
        assert config_files(pytest_framework.definition()) == [
            "conftest.py", "pyproject.toml", "pytest.ini",
        ]
        assert config_files(gotesting.definition()) == []

    def test_level_styles(self) -> None:
        assert level_style(ConfidenceLevel.DEFINITE) == "bold green"
        assert level_style(ConfidenceLevel.UNKNOWN) == "dim"
