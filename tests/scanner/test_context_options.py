"""Tests for ScanContext and the scan option helpers."""

from __future__ import annotations

import os
import threading

from testatlas.framework import FrameworkRegistry
from testatlas.parsers import default_registry
from testatlas.scanner import (
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_TIMEOUT,
    MAX_WORKERS,
    ScanContext,
    build_options,
    with_domain_hints,
    with_exclude_patterns,
    with_max_file_size,
    with_patterns,
    with_registry,
    with_timeout,
    with_workers,
)

# ---------------------------------------------------------------------------
# ScanContext
# ---------------------------------------------------------------------------


class TestScanContext:

    def test_live_context(self) -> None:
        ctx = ScanContext()
        assert not ctx.done()
        assert ctx.reason is None
        assert ctx.deadline is None
        assert ctx.remaining() is None

    def test_cancel_is_idempotent(self) -> None:
        ctx = ScanContext()
        ctx.cancel()
        ctx.cancel()
        assert ctx.done()
        assert ctx.cancelled
        assert not ctx.expired

    def test_expired_deadline(self) -> None:
        ctx = ScanContext(timeout=0)
        assert ctx.expired
        assert ctx.remaining() == 0.0

    def test_child_follows_parent(self) -> None:
        parent = ScanContext()
        child = parent.with_timeout(60)
        parent.cancel()
        assert child.done()
        assert child.cancelled

    def test_cancelling_child_leaves_parent_alone(self) -> None:
        parent = ScanContext()
        child = parent.with_timeout(None)
        child.cancel()
        assert child.done()
        assert not parent.done()

    def test_deadline_is_earliest_in_chain(self) -> None:
        parent = ScanContext(timeout=10)
        child = parent.with_timeout(1000)
        assert child.deadline == parent.deadline
        assert child.remaining() <= 10

    def test_cancel_from_another_thread(self) -> None:
        ctx = ScanContext()
        thread = threading.Thread(target=ctx.cancel)
        thread.start()
        thread.join()
        assert ctx.cancelled


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


class TestScanOptions:

    def test_defaults(self) -> None:
        options = build_options()
        assert options.workers == min(os.cpu_count() or 1, MAX_WORKERS)
        assert options.timeout == DEFAULT_TIMEOUT
        assert options.max_file_size == DEFAULT_MAX_FILE_SIZE
        assert options.registry is default_registry()
        assert options.patterns == []
        assert options.extract_domain_hints is False

    def test_negative_values_are_ignored(self) -> None:
        options = build_options(with_workers(-3), with_timeout(-1))
        assert options.workers == min(os.cpu_count() or 1, MAX_WORKERS)
        assert options.timeout == DEFAULT_TIMEOUT

    def test_workers_are_capped(self) -> None:
        assert build_options(with_workers(MAX_WORKERS * 2)).workers == MAX_WORKERS

    def test_explicit_values(self) -> None:
        registry = FrameworkRegistry()
        options = build_options(
            with_workers(3),
            with_timeout(12.5),
            with_max_file_size(4096),
            with_exclude_patterns(["generated"]),
            with_patterns(["src/**"]),
            with_registry(registry),
            with_domain_hints(),
        )
        assert options.workers == 3
        assert options.timeout == 12.5
        assert options.max_file_size == 4096
        assert options.exclude_patterns == ["generated"]
        assert options.patterns == ["src/**"]
        assert options.registry is registry
        assert options.extract_domain_hints is True
