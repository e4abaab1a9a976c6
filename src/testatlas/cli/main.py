"""testatlas CLI -- Test framework detection and test inventory extraction.

Entry point for the ``testatlas`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    scan       -- Build the test inventory of a directory.
    detect     -- Explain the framework detected for one file.
    frameworks -- List the registered test frameworks.

Every option can also be set through an environment variable named
``TESTATLAS_<COMMAND>_<OPTION>``, e.g. ``TESTATLAS_SCAN_WORKERS=8``.

Usage::

    testatlas scan ./my-project
    testatlas scan ./my-project --format text --exclude fixtures
    testatlas -v scan ./my-project --domain-hints
    testatlas detect src/app.spec.ts --root .
    testatlas frameworks
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from testatlas import __version__
from testatlas.cli.detect import detect_command
from testatlas.cli.frameworks_cmd import frameworks_command
from testatlas.cli.scan import scan_command

ENVVAR_PREFIX = "TESTATLAS"

_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def configure_logging(verbosity: int) -> None:
    """Send library logs to stderr through rich, at a level set by ``-v``."""
    level = _LEVELS[min(verbosity, len(_LEVELS) - 1)]
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """testatlas: Detect test frameworks and inventory the tests of a source tree.

    Supports JavaScript/TypeScript, Python, Go, Java, Kotlin, C#, Ruby,
    Rust, Swift, PHP and C++ test frameworks.
    """
    configure_logging(verbose)


# Register all subcommands
cli.add_command(scan_command)
cli.add_command(detect_command)
cli.add_command(frameworks_command)


def main() -> None:
    """Console-script entry point."""
    cli(auto_envvar_prefix=ENVVAR_PREFIX)


if __name__ == "__main__":
    main()
