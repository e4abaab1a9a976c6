"""Per-language import extraction.

Each extractor turns file content into the module paths it imports, in
source order without duplicates. Comments are blanked first (via the
shared lexer) so commented-out imports never count; string literals stay
intact because most import paths are strings.

Two rules refine the raw statements:

- Python: ``unittest`` is dropped when the file only uses
  ``unittest.mock`` (``from unittest import mock``, ``from unittest.mock
  import ...``, ``import unittest.mock``), since mocking says nothing about
  the test runner.
- C#: ``using Alias = Some.Namespace;`` aliases are ignored.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Callable, Iterable

from testatlas.domain import Language
from testatlas.parsers.shared.lexer import (
    CPP,
    CSHARP,
    GO,
    JAVA,
    JAVASCRIPT,
    KOTLIN,
    PHP,
    RUBY,
    RUST,
    SWIFT,
    Syntax,
    strip_comments,
)

# ── JavaScript / TypeScript ─────────────────────────────────────────────

_JS_IMPORT = re.compile(
    r"""(?:\bimport\s+(?:type\s+)?(?:[\w$*{}\s,]+?\s+from\s+)?|\bexport\s+[\w$*{}\s,]*?\s+from\s+)"""
    r"""(['"])([^'"\n]+)\1"""
)
_JS_REQUIRE = re.compile(r"""\b(?:require|import)\s*\(\s*(['"`])([^'"`\n]+)\1\s*\)""")


def _javascript(text: str) -> Iterable[str]:
    matches = [(m.start(), m.group(2)) for m in _JS_IMPORT.finditer(text)]
    matches += [(m.start(), m.group(2)) for m in _JS_REQUIRE.finditer(text)]
    return (value for _, value in sorted(matches))


# ── Python ──────────────────────────────────────────────────────────────

_PY_IMPORT = re.compile(r"^[ \t]*(?:import\s+([\w.]+(?:\s*,\s*[\w.]+)*)|from\s+([\w.]+)\s+import\s+\(?\s*(\w+))", re.MULTILINE)
_PY_MOCK_ONLY = (
    re.compile(r"^[ \t]*from\s+unittest\s+import\s+mock\b", re.MULTILINE),
    re.compile(r"^[ \t]*from\s+unittest\.mock\s+import\b", re.MULTILINE),
    re.compile(r"^[ \t]*import\s+unittest\.mock\b", re.MULTILINE),
)
_PY_REAL_UNITTEST = (
    re.compile(r"^[ \t]*import\s+unittest\s*(?:#.*)?$", re.MULTILINE),
    re.compile(r"^[ \t]*from\s+unittest\s+import\s+(?!mock\b)\w+", re.MULTILINE),
)


def _python(text: str) -> Iterable[str]:
    mock_only = any(p.search(text) for p in _PY_MOCK_ONLY) and not any(
        p.search(text) for p in _PY_REAL_UNITTEST
    )
    for m in _PY_IMPORT.finditer(text):
        if m.group(1):
            modules = [part.strip() for part in m.group(1).split(",")]
        else:
            module = m.group(2)
            if module == "unittest" and m.group(3) == "mock":
                module = "unittest.mock"
            modules = [module]
        for module in modules:
            if module == "unittest" and mock_only:
                continue
            yield module


# ── Go ──────────────────────────────────────────────────────────────────

_GO_SINGLE = re.compile(r'^\s*import\s+(?:[\w.]+\s+)?"([^"\n]+)"', re.MULTILINE)
_GO_BLOCK = re.compile(r"^\s*import\s*\(([^)]*)\)", re.MULTILINE)
_GO_SPEC = re.compile(r'(?:[\w.]+\s+)?[`"]([^`"\n]+)[`"]')


def _go(text: str) -> Iterable[str]:
    found = [(m.start(), m.group(1)) for m in _GO_SINGLE.finditer(text)]
    for block in _GO_BLOCK.finditer(text):
        found.extend(
            (block.start(1) + spec.start(), spec.group(1))
            for spec in _GO_SPEC.finditer(block.group(1))
        )
    return (value for _, value in sorted(found))


# ── Java / Kotlin ───────────────────────────────────────────────────────

_JVM_IMPORT = re.compile(r"^[ \t]*import\s+(?:static\s+)?([\w.]+?)(?:\.\*)?\s*(?:\bas\s+\w+)?\s*;?[ \t]*$", re.MULTILINE)


def _jvm(text: str) -> Iterable[str]:
    return (m.group(1) for m in _JVM_IMPORT.finditer(text))


# ── C# ──────────────────────────────────────────────────────────────────

_CS_USING = re.compile(
    r"^[ \t]*(?:global\s+)?using\s+(?:static\s+)?([A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)\s*;",
    re.MULTILINE,
)


def _csharp(text: str) -> Iterable[str]:
    # Aliases (``using X = Y;``) never match: the name must be followed by ``;``.
    return (m.group(1) for m in _CS_USING.finditer(text))


# ── Ruby ────────────────────────────────────────────────────────────────

_RB_REQUIRE = re.compile(r"""^[ \t]*(require|require_relative)\s*\(?\s*(['"])([^'"\n]+)\2""", re.MULTILINE)


def _ruby(text: str) -> Iterable[str]:
    for m in _RB_REQUIRE.finditer(text):
        path = m.group(3)
        if path.endswith(".rb"):
            path = path[:-3]
        if m.group(1) == "require_relative":
            path = posixpath.basename(path)
        yield path


# ── Rust ────────────────────────────────────────────────────────────────

_RS_USE = re.compile(r"^[ \t]*(?:pub(?:\([^)]*\))?\s+)?use\s+([\w:]+)", re.MULTILINE)
_RS_EXTERN = re.compile(r"^[ \t]*extern\s+crate\s+(\w+)", re.MULTILINE)


def _rust(text: str) -> Iterable[str]:
    found = [(m.start(), m.group(1).rstrip(":")) for m in _RS_USE.finditer(text)]
    found += [(m.start(), m.group(1)) for m in _RS_EXTERN.finditer(text)]
    return (value for _, value in sorted(found))


# ── Swift ───────────────────────────────────────────────────────────────

_SWIFT_IMPORT = re.compile(
    r"^[ \t]*(?:@\w+(?:\([^)]*\))?\s+)*import\s+(?:(?:typealias|struct|class|enum|protocol|let|var|func)\s+)?([\w.]+)",
    re.MULTILINE,
)


def _swift(text: str) -> Iterable[str]:
    return (m.group(1) for m in _SWIFT_IMPORT.finditer(text))


# ── PHP ─────────────────────────────────────────────────────────────────

_PHP_USE = re.compile(r"^[ \t]*use\s+(?:function\s+|const\s+)?\\?([\w\\]+)(?:\s+as\s+\w+)?\s*;", re.MULTILINE)


def _php(text: str) -> Iterable[str]:
    return (m.group(1) for m in _PHP_USE.finditer(text))


# ── C++ ─────────────────────────────────────────────────────────────────

_CPP_INCLUDE = re.compile(r"""^[ \t]*#[ \t]*include\s*[<"]([^>"\n]+)[>"]""", re.MULTILINE)


def _cpp(text: str) -> Iterable[str]:
    return (m.group(1) for m in _CPP_INCLUDE.finditer(text))


_EXTRACTORS: dict[Language, tuple[Syntax | None, Callable[[str], Iterable[str]]]] = {
    Language.TYPESCRIPT: (JAVASCRIPT, _javascript),
    Language.JAVASCRIPT: (JAVASCRIPT, _javascript),
    Language.PYTHON: (None, _python),
    Language.GO: (GO, _go),
    Language.JAVA: (JAVA, _jvm),
    Language.KOTLIN: (KOTLIN, _jvm),
    Language.CSHARP: (CSHARP, _csharp),
    Language.RUBY: (RUBY, _ruby),
    Language.RUST: (RUST, _rust),
    Language.SWIFT: (SWIFT, _swift),
    Language.PHP: (PHP, _php),
    Language.CPP: (CPP, _cpp),
}


def extract_imports(language: Language, content: str) -> list[str]:
    """Return the modules imported by ``content``.

    Args:
        language: Source language of the content.
        content: Decoded file content.

    Returns:
        Import paths in source order, without duplicates. Empty for
        languages without an extractor.
    """
    entry = _EXTRACTORS.get(language)
    if entry is None:
        return []
    syntax, extractor = entry
    text = strip_comments(content, syntax) if syntax is not None else content
    seen: dict[str, None] = {}
    for value in extractor(text):
        value = value.strip()
        if value:
            seen.setdefault(value, None)
    return list(seen)
