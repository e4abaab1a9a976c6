"""``testatlas detect FILE`` -- Explain the framework detected for one file.

Runs the detection chain (imports, config scope, content patterns) on a
single file and prints the winning framework with its evidence. With
``--root``, config files below that directory are parsed first so config
scopes take part, and FILE is resolved relative to it.

Exit Codes:
    0 -- A framework was detected.
    1 -- No framework matched the file.
    2 -- FILE does not exist or lies outside ``--root``.
"""

from __future__ import annotations

import json
import os
import sys

import click

from testatlas.detection import Detector
from testatlas.framework import ProjectScope
from testatlas.parsers import default_registry
from testatlas.scanner import Scanner, discover_config_files
from testatlas.scanner.discovery import config_file_names
from testatlas.source import LocalSource


def _project_scope(root: str) -> ProjectScope:
    """Parse every config file below ``root``; failures are reported on stderr."""
    scanner = Scanner()
    paths, _ = discover_config_files(root, config_file_names(scanner.registry))
    with LocalSource(root) as source:
        scope, errors = scanner.parse_configs(source, paths)
    for error in errors:
        click.echo(f"Warning: {error}", err=True)
    return scope


@click.command("detect")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project root whose config files scope the detection.",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format: text (default) or json.",
)
def detect_command(file: str, root: str | None, output_format: str) -> None:
    """Detect the test framework of FILE and show the evidence."""
    project_scope = None
    rel_path = file
    if root is not None:
        rel_path = os.path.relpath(os.path.abspath(file), os.path.abspath(root))
        if rel_path.startswith(".."):
            click.echo(f"Error: {file} is not inside {root}", err=True)
            sys.exit(2)
        project_scope = _project_scope(root)
    rel_path = rel_path.replace(os.sep, "/")

    with open(file, "rb") as handle:
        content = handle.read()
    result = Detector(default_registry(), project_scope).detect(rel_path, content)

    if output_format == "json":
        click.echo(json.dumps({"path": rel_path, **result.to_dict()}, indent=2))
    else:
        from testatlas.cli.output import print_detection
        print_detection(rel_path, result)

    sys.exit(0 if result.is_detected() else 1)
