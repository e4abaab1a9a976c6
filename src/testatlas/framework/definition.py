"""The framework ``Definition`` contract.

Every supported test framework is described by one ``Definition`` bundling
its identity, the matchers used to detect it, an optional config-file parser
and the test-file parser. Definitions are registered once at startup with a
``FrameworkRegistry`` and never mutated afterwards.

Three small interfaces make up the contract:

- ``Matcher.match(signal)`` -- pure scoring of a ``Signal``; signals a
  matcher does not care about yield ``MatchResult.no_match()``.
- ``ConfigParser.parse(config_path, content)`` -- turns a framework config
  file into a ``ConfigScope``.
- ``Parser.parse(source, filename)`` -- turns a test file into a
  ``TestFile``; raises ``ParseError`` on malformed input.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

from testatlas.domain import Language, TestFile
from testatlas.framework.signals import MatchResult, Signal

if TYPE_CHECKING:
    from testatlas.framework.scope import ConfigScope

# Detection order: higher priorities are consulted first.
PRIORITY_GENERIC = 100
PRIORITY_E2E = 150
PRIORITY_SPECIALIZED = 200


class Matcher(ABC):
    """A rule scoring how strongly a signal points at one framework."""

    @abstractmethod
    def match(self, signal: Signal) -> MatchResult:
        """Score a signal.

        Args:
            signal: The signal to evaluate.

        Returns:
            A ``MatchResult``. Must be ``MatchResult.no_match()`` for signal
            types this matcher does not handle.
        """


class ConfigParser(ABC):
    """Parses a framework config file into a ``ConfigScope``."""

    @abstractmethod
    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        """Parse a config file.

        Args:
            config_path: Path of the config file relative to the scan root.
            content: Raw file content.

        Returns:
            The scope established by the config file.

        Raises:
            ConfigParseError: If the content cannot be interpreted.
        """


class Parser(ABC):
    """Extracts the suite/test tree from one source file."""

    @abstractmethod
    def parse(self, source: bytes, filename: str) -> TestFile:
        """Parse a test file.

        Args:
            source: Raw file content.
            filename: Path relative to the scan root, ``/``-separated.

        Returns:
            The parsed ``TestFile``.

        Raises:
            ParseError: If the file cannot be parsed.
        """


@dataclass(frozen=True)
class Definition:
    """Identity, detection rules and parsers of one test framework.

    Attributes:
        name: Unique framework identifier, e.g. ``"vitest"``.
        languages: Languages the framework supports.
        matchers: Detection rules, evaluated in order.
        parser: Test-file parser. ``None`` makes detection succeed but
            parsing fail with a ``detection`` error.
        config_parser: Optional config-file parser.
        priority: Detection order (``PRIORITY_*`` constants).
    """

    name: str
    languages: tuple[Language, ...]
    matchers: tuple[Matcher, ...] = ()
    parser: Parser | None = None
    config_parser: ConfigParser | None = None
    priority: int = PRIORITY_GENERIC

    def supports(self, language: Language) -> bool:
        return language in self.languages

    def evaluate(self, signal: Signal) -> MatchResult:
        """Run every matcher against ``signal`` and combine the results.

        A negative result from any matcher wins outright. Otherwise the
        first positive result is returned.
        """
        best = MatchResult.no_match()
        for matcher in self.matchers:
            result = matcher.match(signal)
            if result.negative:
                return result
            if result.is_match and not best.is_match:
                best = result
        return best
