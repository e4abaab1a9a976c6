"""File discovery: config files and test-file candidates.

Discovery walks the source root twice. The first walk collects framework
config files by exact base name; the second streams test-file candidates
chosen by per-language naming and directory conventions, so the expensive
detection and parsing steps only see files likely to hold tests.

Both walks skip the default directories (dependency caches, build output,
VCS metadata) plus any names passed as exclude patterns. ``coverage`` is
only skipped at the root, where coverage tools write it; deeper
``coverage`` directories may be legitimate source packages. Walk order is
sorted, so discovery is deterministic. Symlinked files are never followed.
"""

from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from testatlas.domain import Language, language_for_path
from testatlas.framework import ConfigMatcher, FrameworkRegistry
from testatlas.framework.globs import match_any
from testatlas.scanner.context import ScanContext

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS: tuple[str, ...] = (
    "node_modules",
    ".git",
    "vendor",
    "dist",
    ".next",
    "__pycache__",
    "coverage",
    ".cache",
)

# Skipped only when they sit directly under the root.
ROOT_ONLY_SKIP_DIRS = frozenset({"coverage"})


@dataclass(frozen=True)
class DiscoveryResult:
    """One discovered candidate path, or an error met while walking."""

    path: str = ""
    error: OSError | None = None


def should_skip_dir(rel_dir: str, skip: frozenset[str]) -> bool:
    """Report whether the walk should not descend into ``rel_dir``."""
    if rel_dir in ("", "."):
        return False
    base = posixpath.basename(rel_dir)
    if base in ROOT_ONLY_SKIP_DIRS:
        return "/" not in rel_dir
    return base in skip


def _in_dir(path: str, *names: str) -> bool:
    """``path`` lies under a directory called one of ``names`` (any depth)."""
    return any(path.startswith(f"{n}/") or f"/{n}/" in path for n in names)


def _stem(path: str) -> str:
    return posixpath.splitext(posixpath.basename(path))[0]


# ── Per-language conventions ────────────────────────────────────────────

def is_js_test_file(path: str) -> bool:
    base = posixpath.basename(path).lower()
    if ".test." in base or ".spec." in base or ".cy." in base:
        return True
    stem, ext = posixpath.splitext(base)
    if ext in (".js", ".ts", ".jsx", ".tsx") and stem.endswith((".setup", ".teardown")):
        return True
    if _in_dir(path, "__fixtures__", "__mocks__"):
        return False
    if _in_dir(path, "__tests__"):
        return True
    if "/cypress/e2e/" in f"/{path}" or "/cypress/component/" in f"/{path}":
        return True
    return _in_dir(path, "test", "tests")


def is_python_test_file(path: str) -> bool:
    base = posixpath.basename(path)
    if base == "conftest.py":
        return False
    if base.startswith("test_") or base.endswith("_test.py"):
        return True
    return _in_dir(path, "tests")


def is_go_test_file(path: str) -> bool:
    return path.endswith("_test.go")


def _is_jvm_test_file(path: str) -> bool:
    if _in_dir(path, "src/main"):
        return False
    name = _stem(path)
    if name.endswith(("Test", "Tests", "Spec", "IT")) or name.startswith("Test"):
        return True
    return _in_dir(path, "test", "tests")


def is_java_test_file(path: str) -> bool:
    return _is_jvm_test_file(path)


def is_kotlin_test_file(path: str) -> bool:
    if path.endswith(".gradle.kts"):
        return False
    return _is_jvm_test_file(path)


def is_csharp_test_file(path: str) -> bool:
    name = _stem(path)
    if name.endswith(("Test", "Tests", "Spec", "Specs")) or name.startswith("Test"):
        return True
    if _in_dir(path, "test", "tests", "Tests", "Test"):
        return True
    return any(
        f"{suffix}/" in path for suffix in (".Tests", ".Test", ".Specs", ".Spec", ".UnitTests", ".IntegrationTests")
    )


def is_ruby_test_file(path: str) -> bool:
    base = posixpath.basename(path)
    if base in ("spec_helper.rb", "rails_helper.rb", "test_helper.rb"):
        return False
    if base.endswith(("_spec.rb", "_test.rb")) or base.startswith("test_"):
        return True
    if _in_dir(path, "spec"):
        return not _in_dir(path, "spec/support")
    return _in_dir(path, "test")


def is_rust_test_file(path: str) -> bool:
    # Unit tests live inline in #[cfg(test)] modules, so every source
    # file is a candidate; detection filters files without tests.
    return path.endswith(".rs") and not _in_dir(path, "target")


def is_swift_test_file(path: str) -> bool:
    name = _stem(path)
    if name.endswith(("Tests", "Test", "Spec", "Specs")):
        return True
    return _in_dir(path, "Tests", "Test", "tests")


def is_php_test_file(path: str) -> bool:
    name = _stem(path)
    if name.endswith(("Test", "Tests")) or name.startswith("Test"):
        return True
    return _in_dir(path, "test", "tests", "Tests")


def is_cpp_test_file(path: str) -> bool:
    name = _stem(path)
    lower = name.lower()
    if lower.endswith(("_test", "_unittest", "_tests")) or lower.startswith("test_"):
        return True
    if name.endswith("Test") and len(name) > 4:
        return True
    return _in_dir(path, "test", "tests")


CANDIDATE_RULES: dict[Language, Callable[[str], bool]] = {
    Language.TYPESCRIPT: is_js_test_file,
    Language.JAVASCRIPT: is_js_test_file,
    Language.PYTHON: is_python_test_file,
    Language.GO: is_go_test_file,
    Language.JAVA: is_java_test_file,
    Language.KOTLIN: is_kotlin_test_file,
    Language.CSHARP: is_csharp_test_file,
    Language.RUBY: is_ruby_test_file,
    Language.RUST: is_rust_test_file,
    Language.SWIFT: is_swift_test_file,
    Language.PHP: is_php_test_file,
    Language.CPP: is_cpp_test_file,
}


def is_test_file_candidate(path: str) -> bool:
    """Report whether ``path`` (relative, ``/``-separated) may hold tests."""
    language = language_for_path(path)
    if language is None:
        return False
    rule = CANDIDATE_RULES.get(language)
    return rule is not None and rule(path)


# ── Walking ─────────────────────────────────────────────────────────────

def config_file_names(registry: FrameworkRegistry) -> frozenset[str]:
    """Base names of every config file a registered framework understands."""
    names: set[str] = set()
    for definition in registry.all():
        if definition.config_parser is None:
            continue
        for matcher in definition.matchers:
            if isinstance(matcher, ConfigMatcher):
                names.update(matcher.filenames)
    return frozenset(names)


def build_skip_set(exclude_patterns: Iterable[str] = (), defaults: bool = True) -> frozenset[str]:
    names = set(DEFAULT_SKIP_DIRS) if defaults else set()
    names.update(p.strip("/") for p in exclude_patterns if p.strip("/"))
    return frozenset(names)


def walk_files(
    root: str,
    skip: frozenset[str],
    ctx: ScanContext | None = None,
) -> Iterator[DiscoveryResult]:
    """Yield every regular file below ``root`` as a relative path.

    Walk errors (unreadable directories) are yielded as results carrying
    the ``OSError`` instead of aborting the walk. Stops as soon as ``ctx``
    is done.
    """
    errors: list[OSError] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=errors.append):
        while errors:
            yield DiscoveryResult(error=errors.pop(0))
        if ctx is not None and ctx.done():
            return
        rel_dir = os.path.relpath(dirpath, root).replace(os.sep, "/")
        rel_dir = "" if rel_dir == "." else rel_dir
        dirnames[:] = sorted(
            d for d in dirnames
            if not should_skip_dir(posixpath.join(rel_dir, d), skip)
        )
        for name in sorted(filenames):
            if os.path.islink(os.path.join(dirpath, name)):
                continue
            yield DiscoveryResult(path=posixpath.join(rel_dir, name) if rel_dir else name)
    while errors:
        yield DiscoveryResult(error=errors.pop(0))


def discover_config_files(
    root: str,
    names: frozenset[str],
    exclude_patterns: Iterable[str] = (),
    ctx: ScanContext | None = None,
) -> tuple[list[str], list[OSError]]:
    """Find config files by exact base name.

    Returns:
        Relative config paths in walk order, and the walk errors met.
    """
    found: list[str] = []
    errors: list[OSError] = []
    for result in walk_files(root, build_skip_set(exclude_patterns), ctx):
        if result.error is not None:
            errors.append(result.error)
        elif posixpath.basename(result.path) in names:
            found.append(result.path)
    logger.debug("Discovered %d config files under %s", len(found), root)
    return found, errors


def discover_test_files(
    root: str,
    exclude_patterns: Iterable[str] = (),
    patterns: list[str] | None = None,
    max_file_size: int = 0,
    ctx: ScanContext | None = None,
) -> Iterator[DiscoveryResult]:
    """Stream test-file candidates below ``root``.

    Args:
        root: Absolute root directory.
        exclude_patterns: Extra directory names to skip.
        patterns: Optional allow-list of globs a candidate must match.
        max_file_size: Files larger than this many bytes are dropped;
            ``<= 0`` disables the check.
        ctx: Cancellation context; the stream ends once it is done.
    """
    for result in walk_files(root, build_skip_set(exclude_patterns), ctx):
        if result.error is not None:
            yield result
            continue
        path = result.path
        if not is_test_file_candidate(path):
            continue
        if patterns and not match_any(patterns, path):
            continue
        if max_file_size > 0:
            try:
                size = os.stat(os.path.join(root, path)).st_size
            except OSError as exc:
                yield DiscoveryResult(path=path, error=exc)
                continue
            if size > max_file_size:
                logger.debug("Skipping %s: %d bytes exceeds limit", path, size)
                continue
        yield result
