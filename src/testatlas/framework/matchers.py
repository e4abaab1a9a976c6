"""Reusable matcher implementations.

Most frameworks are detected with the same three building blocks: an import
path check, a config-filename check and a set of content regexes. Framework
modules compose these instead of writing bespoke matchers.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Iterable

from testatlas.framework.definition import Matcher
from testatlas.framework.signals import MatchResult, Signal, SignalType

CONTENT_CONFIDENCE = 40


class ImportMatcher(Matcher):
    """Matches import paths exactly, or by prefix when a pattern ends in ``/``.

    Example::

        ImportMatcher("vitest", "vitest/")
    """

    def __init__(self, *patterns: str) -> None:
        self.patterns: tuple[str, ...] = patterns

    def match(self, signal: Signal) -> MatchResult:
        if signal.type is not SignalType.IMPORT:
            return MatchResult.no_match()
        for pattern in self.patterns:
            if _import_matches(signal.value, pattern):
                return MatchResult.definite(f"import: {signal.value}")
        return MatchResult.no_match()


def _import_matches(import_path: str, pattern: str) -> bool:
    if import_path == pattern:
        return True
    return pattern.endswith("/") and import_path.startswith(pattern)


class ConfigMatcher(Matcher):
    """Matches config files by exact base name."""

    def __init__(self, *filenames: str) -> None:
        self.filenames: frozenset[str] = frozenset(filenames)

    def match(self, signal: Signal) -> MatchResult:
        if signal.type is not SignalType.CONFIG_FILE:
            return MatchResult.no_match()
        name = posixpath.basename(signal.value.replace("\\", "/"))
        if name in self.filenames:
            return MatchResult.definite(f"config: {name}")
        return MatchResult.no_match()


class ContentMatcher(Matcher):
    """Matches file content against regular expressions.

    Every pattern that matches contributes one evidence string; any match
    yields a partial result with ``CONTENT_CONFIDENCE``.
    """

    def __init__(self, *patterns: str | re.Pattern[str], flags: int = re.MULTILINE) -> None:
        self.patterns: tuple[re.Pattern[str], ...] = tuple(
            p if isinstance(p, re.Pattern) else re.compile(p, flags) for p in patterns
        )

    def match(self, signal: Signal) -> MatchResult:
        if signal.type is not SignalType.FILE_CONTENT:
            return MatchResult.no_match()
        evidence = [
            f"pattern: {p.pattern}" for p in self.patterns if p.search(signal.content)
        ]
        if evidence:
            return MatchResult.partial(CONTENT_CONFIDENCE, *evidence)
        return MatchResult.no_match()


class ExcludingContentMatcher(Matcher):
    """Answers negatively when content shows another framework is in use.

    Used for frameworks whose generic ``describe``/``it`` shape is shared
    with others, e.g. mocha must not claim files calling ``jest.fn()``.
    """

    def __init__(self, *patterns: str, flags: int = re.MULTILINE) -> None:
        self.patterns: tuple[re.Pattern[str], ...] = tuple(
            re.compile(p, flags) for p in patterns
        )

    def match(self, signal: Signal) -> MatchResult:
        if signal.type is not SignalType.FILE_CONTENT:
            return MatchResult.no_match()
        for pattern in self.patterns:
            if pattern.search(signal.content):
                return MatchResult.negative_match(f"excluded by pattern: {pattern.pattern}")
        return MatchResult.no_match()


class FileNameMatcher(Matcher):
    """Matches file paths by suffix, e.g. ``_test.go``."""

    def __init__(self, suffixes: Iterable[str]) -> None:
        self.suffixes: tuple[str, ...] = tuple(suffixes)

    def match(self, signal: Signal) -> MatchResult:
        if signal.type is not SignalType.FILE_NAME:
            return MatchResult.no_match()
        for suffix in self.suffixes:
            if signal.value.endswith(suffix):
                return MatchResult.definite(f"filename: *{suffix}")
        return MatchResult.no_match()
