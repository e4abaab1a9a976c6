"""Scanning: discovery, concurrent detection/parsing and result collection."""

from __future__ import annotations

from testatlas.scanner.context import ScanContext
from testatlas.scanner.discovery import (
    DEFAULT_SKIP_DIRS,
    DiscoveryResult,
    discover_config_files,
    discover_test_files,
    is_test_file_candidate,
)
from testatlas.scanner.options import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_TIMEOUT,
    MAX_WORKERS,
    ScanOption,
    ScanOptions,
    apply_defaults,
    build_options,
    with_domain_hints,
    with_exclude_patterns,
    with_max_file_size,
    with_patterns,
    with_registry,
    with_timeout,
    with_workers,
)
from testatlas.scanner.results import FileResult, ScanError, ScanPhase, ScanResult, ScanStats
from testatlas.scanner.scanner import ResultStream, Scanner, scan, scan_streaming

__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "DEFAULT_SKIP_DIRS",
    "DEFAULT_TIMEOUT",
    "MAX_WORKERS",
    "DiscoveryResult",
    "FileResult",
    "ResultStream",
    "ScanContext",
    "ScanError",
    "ScanOption",
    "ScanOptions",
    "ScanPhase",
    "ScanResult",
    "ScanStats",
    "Scanner",
    "apply_defaults",
    "build_options",
    "discover_config_files",
    "discover_test_files",
    "is_test_file_candidate",
    "scan",
    "scan_streaming",
    "with_domain_hints",
    "with_exclude_patterns",
    "with_max_file_size",
    "with_patterns",
    "with_registry",
    "with_timeout",
    "with_workers",
]
