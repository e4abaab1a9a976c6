"""The scan engine: config discovery, streaming detection and parsing.

A scan runs in four stages:

1. **Config discovery** -- the tree is walked once for framework config
   files (``jest.config.js``, ``pyproject.toml``, ``.rspec`` ...). Each is
   handed to the first definition (in registry order) whose config matcher
   accepts it, and the resulting ``ConfigScope`` joins the scan's
   ``ProjectScope``. Failures become ``config-parse`` errors; they never
   abort the scan. An injected scope (``Scanner.set_project_scope``) skips
   this stage.
2. **Test-file discovery** -- a second walk streams test-file candidates
   (see ``testatlas.scanner.discovery``).
3. **Dispatch** -- one producer thread pulls candidates from the walk and
   hands each to a thread pool, holding a semaphore slot per file so at
   most ``workers`` files are in flight.
4. **Processing** -- a worker reads the file through the ``Source``, runs
   the ``Detector``, calls the framework's parser and optionally extracts
   domain hints, then puts a ``FileResult`` on a one-slot output queue.

Every blocking step (queue put, semaphore acquire) polls the scan's
``ScanContext``, so a cancel or an expired timeout stops discovery, lets
workers drop their results and ends the stream promptly. All threads are
joined before the stream reports exhaustion or ``close()`` returns.

Streaming results arrive in completion order. The batch ``scan()`` sorts
files by path, so two scans of an unchanged tree are identical.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable, Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor

from testatlas.detection import ConfidenceLevel, Detector
from testatlas.domain import Inventory, TestFile
from testatlas.exceptions import (
    ConfigParseError,
    ParseError,
    ScanAbortedError,
    ScanCancelledError,
    ScanTimeoutError,
    TestAtlasError,
)
from testatlas.framework import Definition, ProjectScope, Signal, SignalType
from testatlas.framework.globs import normalize
from testatlas.hints import get_extractor
from testatlas.scanner.context import TIMEOUT, ScanContext
from testatlas.scanner.discovery import (
    DiscoveryResult,
    config_file_names,
    discover_config_files,
    discover_test_files,
)
from testatlas.scanner.options import ScanOption, ScanOptions, build_options
from testatlas.scanner.results import FileResult, ScanError, ScanPhase, ScanResult, ScanStats
from testatlas.source import LocalSource, Source

logger = logging.getLogger(__name__)

# Seconds between cancellation checks while blocked.
POLL_INTERVAL = 0.02

_DONE = object()


def _put(out: queue.Queue, item: object, ctx: ScanContext) -> bool:
    """Put ``item`` on ``out`` unless ``ctx`` finishes first."""
    while not ctx.done():
        try:
            out.put(item, timeout=POLL_INTERVAL)
            return True
        except queue.Full:
            continue
    return False


def _acquire(slots: threading.BoundedSemaphore, ctx: ScanContext) -> bool:
    """Take a worker slot unless ``ctx`` finishes first."""
    while not ctx.done():
        if slots.acquire(timeout=POLL_INTERVAL):
            return True
    return False


def _abort_error(ctx: ScanContext, result: ScanResult | None = None) -> ScanAbortedError:
    if ctx.reason == TIMEOUT:
        return ScanTimeoutError(result)
    return ScanCancelledError(result)


def _read(source: Source, path: str) -> bytes:
    with source.open(path) as handle:
        return handle.read()


class ResultStream:
    """Iterator over the ``FileResult``s of one running scan.

    Produced by ``Scanner.scan_stream()``. Iterate it to drain results;
    call ``close()`` (or leave its ``with`` block) to stop early. Closing
    cancels the scan and joins every thread it started.

    Attributes:
        context: The scan's own context (the caller's context plus the
            configured timeout).
        project_scope: Config scopes used for detection.
        config_errors: ``config-parse`` errors met before streaming
            started. They are not yielded as results.
    """

    def __init__(
        self,
        scanner: Scanner,
        source: Source,
        items: Callable[[ScanContext], Iterable[DiscoveryResult]],
        ctx: ScanContext,
        project_scope: ProjectScope,
        config_errors: list[ScanError] | None = None,
    ) -> None:
        self.context = ctx
        self.project_scope = project_scope
        self.config_errors = list(config_errors or ())
        self._scanner = scanner
        self._source = source
        self._items = items
        self._detector = Detector(scanner.registry, project_scope)
        self._out: queue.Queue = queue.Queue(maxsize=1)
        self._finished = threading.Event()
        self._exhausted = False
        self._producer = threading.Thread(
            target=self._dispatch, name="testatlas-dispatch", daemon=True
        )
        self._producer.start()

    @property
    def configs_found(self) -> int:
        return len(self.project_scope)

    # ── Producer side ───────────────────────────────────────────────────

    def _dispatch(self) -> None:
        ctx = self.context
        workers = self._scanner.options.workers
        slots = threading.BoundedSemaphore(workers)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="testatlas-worker")
        try:
            for item in self._items(ctx):
                if ctx.done():
                    break
                if item.error is not None:
                    error = ScanError(item.error, item.path, ScanPhase.DISCOVERY)
                    if not _put(self._out, FileResult(path=item.path, error=error), ctx):
                        break
                    continue
                if not _acquire(slots, ctx):
                    break
                executor.submit(self._work, item.path, slots)
        finally:
            executor.shutdown(wait=True)
            self._finished.set()
            _put(self._out, _DONE, ctx)

    def _work(self, path: str, slots: threading.BoundedSemaphore) -> None:
        try:
            if self.context.done():
                return
            try:
                result = self._scanner.process_file(self._source, path, self._detector)
            except Exception as exc:
                logger.exception("Unexpected failure processing %s", path)
                result = FileResult(path=path, error=ScanError(exc, path, ScanPhase.PARSING))
            _put(self._out, result, self.context)
        finally:
            slots.release()

    # ── Consumer side ───────────────────────────────────────────────────

    def __iter__(self) -> Iterator[FileResult]:
        return self

    def __next__(self) -> FileResult:
        while not self._exhausted:
            try:
                item = self._out.get(timeout=POLL_INTERVAL)
            except queue.Empty:
                if self._finished.is_set() and self._out.empty():
                    self._stop()
                continue
            if item is _DONE:
                self._stop()
                continue
            return item
        raise StopIteration

    def _stop(self) -> None:
        self._exhausted = True
        self._producer.join()

    def close(self) -> None:
        """Cancel the scan and wait for its threads. Idempotent."""
        self.context.cancel()
        self._exhausted = True
        self._producer.join()

    def __enter__(self) -> ResultStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class Scanner:
    """Scans a ``Source`` for test files and parses them.

    Args:
        *options: ``ScanOption`` callables (``with_workers(4)``, ...).

    Example::

        with LocalSource("/path/to/repo") as source:
            result = Scanner(with_workers(4)).scan(source)
        print(result.inventory.count_tests())
    """

    def __init__(self, *options: ScanOption) -> None:
        self.options: ScanOptions = build_options(*options)
        self.registry = self.options.registry
        self.project_scope: ProjectScope | None = None

    def set_project_scope(self, project_scope: ProjectScope | None) -> None:
        """Use pre-parsed config scopes instead of discovering config files.

        Meant for sources whose configs were parsed elsewhere. Pass None to
        go back to per-scan config discovery.
        """
        self.project_scope = project_scope

    # ── Config files ────────────────────────────────────────────────────

    def config_definition(self, config_path: str) -> Definition | None:
        """First definition with a config parser whose matchers accept ``config_path``."""
        signal = Signal(SignalType.CONFIG_FILE, config_path)
        for definition in self.registry.all():
            if definition.config_parser is None:
                continue
            if definition.evaluate(signal).is_match:
                return definition
        return None

    def parse_configs(
        self, source: Source, config_paths: Iterable[str], ctx: ScanContext | None = None
    ) -> tuple[ProjectScope, list[ScanError]]:
        """Parse config files into a ``ProjectScope``.

        Returns:
            The scope of every config parsed successfully, and one
            ``config-parse`` error per config that failed.
        """
        project_scope = ProjectScope()
        errors: list[ScanError] = []
        for path in config_paths:
            if ctx is not None and ctx.done():
                break
            definition = self.config_definition(path)
            if definition is None:
                error = ConfigParseError("no matching framework config parser")
                errors.append(ScanError(error, path, ScanPhase.CONFIG_PARSE))
                continue
            try:
                scope = definition.config_parser.parse(path, _read(source, path))
            except Exception as exc:
                logger.warning("Failed to parse %s config %s: %s", definition.name, path, exc)
                errors.append(ScanError(exc, path, ScanPhase.CONFIG_PARSE))
                continue
            project_scope.add(scope)
        return project_scope, errors

    def _discover_project_scope(
        self, source: Source, ctx: ScanContext
    ) -> tuple[ProjectScope, list[ScanError]]:
        if self.project_scope is not None:
            return self.project_scope, []
        paths, walk_errors = discover_config_files(
            source.root,
            config_file_names(self.registry),
            self.options.exclude_patterns,
            ctx,
        )
        for error in walk_errors:
            # The test-file walk meets and reports the same errors.
            logger.debug("Config discovery walk error: %s", error)
        project_scope, errors = self.parse_configs(source, paths, ctx)
        logger.info("Parsed %d of %d config files", len(project_scope), len(paths))
        return project_scope, errors

    # ── Per-file work ───────────────────────────────────────────────────

    def process_file(self, source: Source, path: str, detector: Detector) -> FileResult:
        """Read, detect and parse one file.

        Never raises for problems with the file itself: those come back as
        a ``FileResult`` carrying a ``ScanError``.
        """
        try:
            content = _read(source, path)
        except (OSError, TestAtlasError) as exc:
            return FileResult(path=path, error=ScanError(exc, path, ScanPhase.PARSING))

        detection = detector.detect(path, content)
        if not detection.is_detected():
            return FileResult(path=path, confidence=ConfidenceLevel.UNKNOWN.value)
        confidence = detection.level.value

        definition = self.registry.find(detection.framework)
        if definition is None or definition.parser is None:
            error = TestAtlasError(f"no parser for framework {detection.framework}")
            return FileResult(
                path=path,
                error=ScanError(error, path, ScanPhase.DETECTION),
                confidence=confidence,
            )

        try:
            test_file = definition.parser.parse(content, path)
        except ParseError as exc:
            return FileResult(
                path=path, error=ScanError(exc, path, ScanPhase.PARSING), confidence=confidence
            )
        except Exception as exc:
            wrapped = ParseError(definition.name, path, f"{type(exc).__name__}: {exc}")
            wrapped.__cause__ = exc
            return FileResult(
                path=path, error=ScanError(wrapped, path, ScanPhase.PARSING), confidence=confidence
            )

        if self.options.extract_domain_hints:
            self._attach_hints(test_file, content)
        return FileResult(path=path, file=test_file, confidence=confidence)

    @staticmethod
    def _attach_hints(test_file: TestFile, content: bytes) -> None:
        extractor = get_extractor(test_file.language)
        if extractor is not None:
            test_file.domain_hints = extractor.extract(content.decode("utf-8", errors="replace"))

    # ── Streaming ───────────────────────────────────────────────────────

    def _scan_context(self, ctx: ScanContext | None) -> ScanContext:
        return (ctx or ScanContext()).with_timeout(self.options.timeout)

    def scan_stream(self, source: Source, ctx: ScanContext | None = None) -> ResultStream:
        """Start a streaming scan of ``source``.

        Config files are discovered and parsed before this returns.

        Args:
            source: Tree to scan. The caller keeps ownership and closes it.
            ctx: Optional cancellation context.

        Returns:
            A running ``ResultStream``.

        Raises:
            ScanCancelledError: If ``ctx`` was cancelled before streaming
                could start.
            ScanTimeoutError: If the timeout expired before streaming
                could start.
        """
        scan_ctx = self._scan_context(ctx)
        project_scope, config_errors = self._discover_project_scope(source, scan_ctx)
        if scan_ctx.done():
            raise _abort_error(scan_ctx)

        options = self.options

        def items(item_ctx: ScanContext) -> Iterator[DiscoveryResult]:
            return discover_test_files(
                source.root,
                options.exclude_patterns,
                options.patterns,
                options.max_file_size,
                item_ctx,
            )

        return ResultStream(self, source, items, scan_ctx, project_scope, config_errors)

    # ── Batch ───────────────────────────────────────────────────────────

    def scan(self, source: Source, ctx: ScanContext | None = None) -> ScanResult:
        """Scan ``source`` and collect every result.

        Returns:
            The inventory (files sorted by path), errors (config errors
            first, then per-file errors sorted by path) and stats.

        Raises:
            ScanCancelledError: If the scan was cancelled; ``.result``
                holds what was collected so far.
            ScanTimeoutError: If the scan timed out; ``.result`` holds what
                was collected so far.
        """
        started = time.monotonic()
        result = ScanResult(inventory=Inventory(root_path=source.root))
        try:
            stream = self.scan_stream(source, ctx)
        except ScanAbortedError as exc:
            result.stats.duration = time.monotonic() - started
            exc.result = result
            raise

        with stream:
            self._collect(stream, result)
            abort = _abort_error(stream.context, result) if stream.context.done() else None

        result.stats.configs_found = stream.configs_found
        result.errors = stream.config_errors + result.errors
        result.stats.duration = time.monotonic() - started
        if abort is not None:
            logger.warning("Scan of %s aborted: %s", source.root, abort)
            raise abort
        logger.info(
            "Scanned %d files under %s: %d matched, %d failed",
            result.stats.files_scanned,
            source.root,
            result.stats.files_matched,
            result.stats.files_failed,
        )
        return result

    def scan_files(
        self, source: Source, files: Iterable[str], ctx: ScanContext | None = None
    ) -> ScanResult:
        """Scan an explicit list of relative paths, bypassing discovery.

        Used for incremental re-scans. Only a scope injected with
        ``set_project_scope`` takes part in detection.
        """
        started = time.monotonic()
        paths = [normalize(f) for f in files]
        result = ScanResult(inventory=Inventory(root_path=source.root))
        result.stats.files_scanned = len(paths)
        if not paths:
            return result

        scan_ctx = self._scan_context(ctx)
        project_scope = self.project_scope if self.project_scope is not None else ProjectScope()

        def items(item_ctx: ScanContext) -> Iterator[DiscoveryResult]:
            return (DiscoveryResult(path=p) for p in paths)

        with ResultStream(self, source, items, scan_ctx, project_scope) as stream:
            self._collect(stream, result, count_scanned=False)
            abort = _abort_error(scan_ctx, result) if scan_ctx.done() else None

        result.stats.configs_found = len(project_scope)
        result.stats.duration = time.monotonic() - started
        if abort is not None:
            raise abort
        return result

    @staticmethod
    def _collect(stream: ResultStream, result: ScanResult, count_scanned: bool = True) -> None:
        stats: ScanStats = result.stats
        files: list[TestFile] = []
        errors: list[ScanError] = []
        for file_result in stream:
            if count_scanned:
                stats.files_scanned += 1
            if file_result.confidence:
                stats.confidence_dist[file_result.confidence] = (
                    stats.confidence_dist.get(file_result.confidence, 0) + 1
                )
            if file_result.error is not None:
                errors.append(file_result.error)
            elif file_result.file is not None:
                files.append(file_result.file)

        files.sort(key=lambda f: f.path)
        errors.sort(key=lambda e: e.path)
        result.inventory.files = files
        result.errors = errors
        stats.files_matched = len(files)
        stats.files_failed = len(errors)
        stats.files_skipped = stats.files_scanned - stats.files_matched - stats.files_failed


def scan(source: Source | str, *options: ScanOption, ctx: ScanContext | None = None) -> ScanResult:
    """Scan a source, or a local directory path, with a fresh ``Scanner``.

    A path is opened as a ``LocalSource`` and closed afterwards.
    """
    scanner = Scanner(*options)
    if isinstance(source, str):
        with LocalSource(source) as local:
            return scanner.scan(local, ctx)
    return scanner.scan(source, ctx)


def scan_streaming(
    source: Source, *options: ScanOption, ctx: ScanContext | None = None
) -> ResultStream:
    """Start a streaming scan of ``source`` with a fresh ``Scanner``."""
    return Scanner(*options).scan_stream(source, ctx)
