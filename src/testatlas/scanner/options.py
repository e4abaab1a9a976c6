"""Scan configuration and its functional-option helpers.

A ``Scanner`` is built from ``ScanOption`` callables, each tweaking one
field of a ``ScanOptions``::

    scanner = Scanner(with_workers(4), with_timeout(60), with_domain_hints())

``apply_defaults()`` then fills in everything left unset.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from testatlas.framework import FrameworkRegistry
from testatlas.parsers import default_registry

MAX_WORKERS = 1024
DEFAULT_TIMEOUT = 300.0
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


@dataclass
class ScanOptions:
    """Settings of one scanner.

    Attributes:
        workers: Parallel parse workers; ``<= 0`` means one per CPU.
        timeout: Seconds before the whole scan is abandoned; ``<= 0``
            means ``DEFAULT_TIMEOUT``.
        exclude_patterns: Extra directory names to skip during discovery.
        max_file_size: Larger files are not scanned; ``<= 0`` means
            ``DEFAULT_MAX_FILE_SIZE``.
        patterns: Optional allow-list of globs (relative to the root) a
            test file must match.
        registry: Framework registry; None means the process-wide default.
        extract_domain_hints: Attach ``DomainHints`` to parsed files.
    """

    workers: int = 0
    timeout: float = 0
    exclude_patterns: list[str] = field(default_factory=list)
    max_file_size: int = 0
    patterns: list[str] = field(default_factory=list)
    registry: FrameworkRegistry | None = None
    extract_domain_hints: bool = False


ScanOption = Callable[[ScanOptions], None]


def with_workers(workers: int) -> ScanOption:
    """Set the worker count. Negative values are ignored."""
    def apply(options: ScanOptions) -> None:
        if workers >= 0:
            options.workers = workers
    return apply


def with_timeout(seconds: float) -> ScanOption:
    """Set the scan timeout in seconds. Negative values are ignored."""
    def apply(options: ScanOptions) -> None:
        if seconds >= 0:
            options.timeout = seconds
    return apply


def with_exclude_patterns(patterns: Iterable[str]) -> ScanOption:
    def apply(options: ScanOptions) -> None:
        options.exclude_patterns = list(patterns)
    return apply


def with_max_file_size(size: int) -> ScanOption:
    def apply(options: ScanOptions) -> None:
        options.max_file_size = size
    return apply


def with_patterns(patterns: Iterable[str]) -> ScanOption:
    def apply(options: ScanOptions) -> None:
        options.patterns = list(patterns)
    return apply


def with_registry(registry: FrameworkRegistry) -> ScanOption:
    def apply(options: ScanOptions) -> None:
        options.registry = registry
    return apply


def with_domain_hints(enabled: bool = True) -> ScanOption:
    def apply(options: ScanOptions) -> None:
        options.extract_domain_hints = enabled
    return apply


def apply_defaults(options: ScanOptions) -> ScanOptions:
    """Resolve unset fields in place and return ``options``."""
    if options.workers <= 0:
        options.workers = os.cpu_count() or 1
    options.workers = min(options.workers, MAX_WORKERS)
    if options.timeout <= 0:
        options.timeout = DEFAULT_TIMEOUT
    if options.max_file_size <= 0:
        options.max_file_size = DEFAULT_MAX_FILE_SIZE
    if options.registry is None:
        options.registry = default_registry()
    return options


def build_options(*options: ScanOption) -> ScanOptions:
    """Apply ``options`` to a fresh ``ScanOptions`` and resolve defaults."""
    resolved = ScanOptions()
    for option in options:
        option(resolved)
    return apply_defaults(resolved)
