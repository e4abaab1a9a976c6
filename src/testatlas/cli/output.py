"""Rich output formatting helpers for the testatlas CLI.

Provides the terminal tables for scan inventories, single-file detection
results and the framework listing, plus the JSON summary emitted by
``testatlas scan --format json``.

Confidence Color Mapping:
    definite = bold green, moderate = yellow, weak = cyan, unknown = dim
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from testatlas.detection import ConfidenceLevel, DetectionResult
from testatlas.framework import ConfigMatcher, Definition
from testatlas.scanner import ScanResult

_LEVEL_STYLES: dict[ConfidenceLevel, str] = {
    ConfidenceLevel.DEFINITE: "bold green",
    ConfidenceLevel.MODERATE: "yellow",
    ConfidenceLevel.WEAK: "cyan",
    ConfidenceLevel.UNKNOWN: "dim",
}

console = Console()


def level_style(level: ConfidenceLevel) -> str:
    """Return the Rich style string for a confidence level."""
    return _LEVEL_STYLES.get(level, "white")


def framework_histogram(result: ScanResult) -> dict[str, int]:
    """Count parsed files per framework, sorted by framework name."""
    counts: dict[str, int] = {}
    for test_file in result.inventory.files:
        counts[test_file.framework] = counts.get(test_file.framework, 0) + 1
    return dict(sorted(counts.items()))


def scan_summary(result: ScanResult) -> dict[str, Any]:
    """Build the JSON-serializable summary of a scan.

    Args:
        result: A complete or partial scan result.

    Returns:
        A dict with ``filesScanned``, ``filesMatched``, ``testCount``,
        ``duration`` (seconds), ``frameworks`` (files per framework),
        ``files`` and ``errors``.
    """
    files: list[dict[str, Any]] = []
    for test_file in result.inventory.files:
        entry: dict[str, Any] = {
            "path": test_file.path,
            "framework": test_file.framework,
            "testCount": test_file.count_tests(),
        }
        if test_file.domain_hints is not None:
            entry["domainHints"] = test_file.domain_hints.to_dict()
        files.append(entry)
    return {
        "filesScanned": result.stats.files_scanned,
        "filesMatched": result.stats.files_matched,
        "testCount": result.inventory.count_tests(),
        "duration": round(result.stats.duration, 3),
        "frameworks": framework_histogram(result),
        "files": files,
        "errors": [e.to_dict() for e in result.errors],
    }


def print_scan_result(result: ScanResult) -> None:
    """Print the inventory table, errors and a one-line summary.

    Args:
        result: A complete or partial scan result.
    """
    if not result.inventory.files:
        console.print("[dim]No test files found.[/dim]")
    else:
        table = Table(title="testatlas Inventory", show_header=True, header_style="bold")
        table.add_column("File", style="bold", overflow="fold")
        table.add_column("Framework")
        table.add_column("Language", style="dim")
        table.add_column("Tests", justify="right")
        for test_file in result.inventory.files:
            table.add_row(
                test_file.path,
                test_file.framework,
                test_file.language.value,
                str(test_file.count_tests()),
            )
        console.print(table)

    if result.errors:
        errors = Table(title="Errors", show_header=True, header_style="bold red")
        errors.add_column("Phase", justify="center")
        errors.add_column("Path", overflow="fold")
        errors.add_column("Error", style="dim", overflow="fold")
        for error in result.errors:
            errors.add_row(error.phase.value, error.path or "-", str(error.error))
        console.print(errors)

    _print_scan_stats(result)


def _print_scan_stats(result: ScanResult) -> None:
    stats = result.stats
    parts = [
        f"[bold]{stats.files_scanned}[/bold] files scanned",
        f"[green]{stats.files_matched} matched[/green]",
    ]
    if stats.files_failed:
        parts.append(f"[red]{stats.files_failed} failed[/red]")
    parts.append(f"{stats.files_skipped} skipped")
    parts.append(f"[bold]{result.inventory.count_tests()}[/bold] tests")
    parts.append(f"{stats.duration:.2f}s")
    console.print(" | ".join(parts))


def print_detection(path: str, result: DetectionResult) -> None:
    """Print the framework detected for one file and its evidence."""
    level = result.level
    framework = Text(result.framework or "unknown", style="bold" if result.framework else "dim")
    header = Text.assemble(
        ("File: ", "bold"), (path, ""),
        ("  Framework: ", "bold"), framework,
        ("  Confidence: ", "bold"), (f"{result.confidence} ({level.value})", level_style(level)),
    )
    console.print(Panel(header, title="Detection Result"))

    if result.config_path:
        console.print(f"Config: {result.config_path}")
    if not result.evidence:
        console.print("[dim]No evidence collected.[/dim]")
        return

    table = Table(title="Evidence", show_header=True)
    table.add_column("Source")
    table.add_column("Description", overflow="fold")
    table.add_column("Confidence", justify="right")
    for evidence in result.evidence:
        table.add_row(evidence.source.value, evidence.description, str(evidence.confidence))
    console.print(table)


def config_files(definition: Definition) -> list[str]:
    """Config file names a definition's config matchers accept."""
    names: set[str] = set()
    for matcher in definition.matchers:
        if isinstance(matcher, ConfigMatcher):
            names.update(matcher.filenames)
    return sorted(names)


def print_frameworks(definitions: list[Definition]) -> None:
    """Print registered frameworks in detection order."""
    table = Table(
        title=f"{len(definitions)} Supported Test Frameworks",
        show_header=True,
        header_style="bold",
    )
    table.add_column("#", justify="right")
    table.add_column("Framework", style="bold")
    table.add_column("Languages")
    table.add_column("Priority", justify="right")
    table.add_column("Config files", style="dim", overflow="fold")
    for index, definition in enumerate(definitions, start=1):
        table.add_row(
            str(index),
            definition.name,
            ", ".join(language.value for language in definition.languages),
            str(definition.priority),
            ", ".join(config_files(definition)) or "-",
        )
    console.print(table)
