"""``testatlas scan PATH`` -- Build the test inventory of a directory.

Discovers config and test files below PATH, detects each file's framework
and parses it into suites and tests. Prints a JSON summary (default) or a
rich table.

Exit Codes:
    0 -- The scan completed (per-file errors are reported, not fatal).
    1 -- The scan was cancelled or timed out; partial results are printed.
    2 -- PATH is not an existing directory.
"""

from __future__ import annotations

import json
import sys

import click

from testatlas.exceptions import ScanAbortedError
from testatlas.scanner import (
    Scanner,
    ScanResult,
    with_domain_hints,
    with_exclude_patterns,
    with_max_file_size,
    with_patterns,
    with_timeout,
    with_workers,
)
from testatlas.source import LocalSource


def _output_result(result: ScanResult, output_format: str) -> None:
    """Dispatch a scan result to the requested formatter.

    Args:
        result: Complete or partial scan result.
        output_format: ``json`` or ``text``.
    """
    if output_format == "json":
        from testatlas.cli.output import scan_summary
        click.echo(json.dumps(scan_summary(result), indent=2))
    else:
        from testatlas.cli.output import print_scan_result
        print_scan_result(result)


@click.command("scan")
@click.argument("path", type=click.Path(exists=True, file_okay=False))
@click.option(
    "--format", "output_format",
    type=click.Choice(["json", "text"]),
    default="json",
    help="Output format: json (default) or text.",
)
@click.option("--workers", type=int, default=0, help="Parallel parse workers (0 = CPU count).")
@click.option("--timeout", type=float, default=0, help="Scan timeout in seconds (0 = 300).")
@click.option(
    "--exclude", "excludes",
    multiple=True,
    help="Directory name to skip, in addition to the defaults. Repeatable.",
)
@click.option(
    "--pattern", "patterns",
    multiple=True,
    help="Only scan test files matching this glob. Repeatable.",
)
@click.option(
    "--max-file-size",
    type=int,
    default=0,
    help="Skip files larger than this many bytes (0 = 10 MiB).",
)
@click.option(
    "--domain-hints",
    is_flag=True,
    default=False,
    help="Attach imports and call names to every parsed file.",
)
def scan_command(
    path: str,
    output_format: str,
    workers: int,
    timeout: float,
    excludes: tuple[str, ...],
    patterns: tuple[str, ...],
    max_file_size: int,
    domain_hints: bool,
) -> None:
    """Scan PATH and print its test inventory.

    Exit code 0 when the scan completes, 1 when it was cancelled or
    timed out.
    """
    scanner = Scanner(
        with_workers(workers),
        with_timeout(timeout),
        with_exclude_patterns(excludes),
        with_patterns(patterns),
        with_max_file_size(max_file_size),
        with_domain_hints(domain_hints),
    )
    with LocalSource(path) as source:
        try:
            result = scanner.scan(source)
        except ScanAbortedError as exc:
            click.echo(f"Error: {exc}", err=True)
            if exc.result is not None:
                _output_result(exc.result, output_format)
            sys.exit(1)

    _output_result(result, output_format)
    sys.exit(0)
