"""Call-tree parsing for describe/it style JavaScript test frameworks.

Jest, Vitest, Mocha, Cypress and Playwright all declare tests as nested
function calls::

    describe("cart", () => {
      it("adds items", () => { ... });
      it.skip("removes items", () => { ... });
      describe.each(table)("with %s", (row) => { ... });
    });

``JsTestParser`` walks those calls on a masked copy of the source. A suite
call is descended into (up to ``MAX_NESTING_DEPTH``); a test call is never
descended, so helper calls inside test bodies are not counted. Curried
forms such as ``it.each(table)(name, fn)`` or ``test.skipIf(cond)(...)``
count as one test template.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.domain.languages import language_for_path
from testatlas.framework.definition import Parser
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.lexer import JAVASCRIPT, MaskedSource, mask_source

_CALL = re.compile(r"(?<![\w$.])([A-Za-z_$][\w$]*(?:\s*\.\s*[A-Za-z_$][\w$]*)*)\s*(?=[(`])")
_DOT = re.compile(r"\s*\.\s*")

_ROOT_STATUS: dict[str, TestStatus] = {
    "fdescribe": TestStatus.FOCUSED,
    "fit": TestStatus.FOCUSED,
    "xdescribe": TestStatus.SKIPPED,
    "xcontext": TestStatus.SKIPPED,
    "xit": TestStatus.SKIPPED,
    "xtest": TestStatus.SKIPPED,
    "xspecify": TestStatus.SKIPPED,
}

# Chain members allowed after the root; None leaves the status unchanged.
_MODIFIERS: dict[str, TestStatus | None] = {
    "skip": TestStatus.SKIPPED,
    "only": TestStatus.FOCUSED,
    "todo": TestStatus.TODO,
    "failing": TestStatus.XFAIL,
    "fails": TestStatus.XFAIL,
    "fixme": TestStatus.SKIPPED,
    "skipIf": TestStatus.SKIPPED,
    "runIf": None,
    "each": None,
    "for": None,
    "concurrent": None,
    "sequential": None,
    "serial": None,
    "parallel": None,
    "shuffle": None,
}

_CURRIED = frozenset({"each", "for", "skipIf", "runIf"})


@dataclass(frozen=True)
class JsTestDialect:
    """Which call names a framework uses for suites and tests."""

    suite_roots: frozenset[str] = frozenset({"describe", "fdescribe", "xdescribe"})
    test_roots: frozenset[str] = frozenset({"it", "test", "fit", "xit", "xtest"})
    suite_chains: tuple[tuple[str, ...], ...] = ()


JEST_DIALECT = JsTestDialect()
MOCHA_DIALECT = JsTestDialect(
    suite_roots=frozenset({"describe", "context", "suite", "xdescribe", "xcontext"}),
    test_roots=frozenset({"it", "specify", "test", "xit", "xspecify"}),
)
PLAYWRIGHT_DIALECT = JsTestDialect(
    suite_roots=frozenset(),
    test_roots=frozenset({"test", "it"}),
    suite_chains=(("test", "describe"), ("it", "describe")),
)
CYPRESS_DIALECT = JsTestDialect(
    suite_roots=frozenset({"describe", "context", "xdescribe", "xcontext"}),
    test_roots=frozenset({"it", "specify", "xit", "xspecify"}),
)


@dataclass
class _CallInfo:
    is_suite: bool
    status: TestStatus
    modifier: str
    curried: bool


def _classify(parts: list[str], dialect: JsTestDialect) -> _CallInfo | None:
    rest: list[str] | None = None
    is_suite = False
    for chain in dialect.suite_chains:
        if tuple(parts[:len(chain)]) == chain:
            rest, is_suite = parts[len(chain):], True
            break
    if rest is None:
        if parts[0] in dialect.suite_roots:
            rest, is_suite = parts[1:], True
        elif parts[0] in dialect.test_roots:
            rest = parts[1:]
        else:
            return None
    status = _ROOT_STATUS.get(parts[0], TestStatus.ACTIVE)
    for member in rest:
        if member not in _MODIFIERS:
            return None
        status = _MODIFIERS[member] or status
    modifier = ".".join(parts) if status is not TestStatus.ACTIVE else ""
    curried = any(member in _CURRIED for member in rest)
    return _CallInfo(is_suite, status, modifier, curried)


@dataclass
class _Walker:
    ms: MaskedSource
    filename: str
    dialect: JsTestDialect

    def first_argument(self, start: int, end: int) -> tuple[str, bool] | None:
        """Return the first call argument as ``(name, is_literal)``."""
        ms = self.ms
        pos = ms.skip_ws(start, end)
        if pos >= end:
            return None
        literal = ms.string_at(pos)
        if literal is not None:
            return literal.value, True
        stop = pos
        while stop < end and ms.masked[stop] != ",":
            if ms.masked[stop] in "([{":
                stop = ms.closing(stop)
            stop += 1
        text = ms.slice(pos, min(stop, end)).strip()
        return (text, False) if text else None

    def arguments_open(self, match_end: int, info: _CallInfo, end: int) -> int | None:
        ms = self.ms
        pos = match_end
        if ms.masked[pos] == "`":
            literal = ms.string_at(pos)
            if literal is None:
                return None
            pos = ms.skip_ws(literal.end, end)
        elif info.curried:
            pos = ms.skip_ws(ms.closing(pos) + 1, end)
        if pos >= end or ms.masked[pos] != "(":
            return None
        return pos

    def walk(self, start: int, end: int, depth: int,
             inherited: TestStatus) -> tuple[list[TestSuite], list[Test]]:
        ms = self.ms
        suites: list[TestSuite] = []
        tests: list[Test] = []
        pos = start
        while True:
            m = _CALL.search(ms.masked, pos, end)
            if m is None:
                break
            info = _classify(_DOT.split(m.group(1)), self.dialect)
            if info is None:
                pos = m.end()
                continue
            open_at = self.arguments_open(m.end(), info, end)
            if open_at is None:
                pos = m.end() + 1
                continue
            close_at = ms.closing(open_at)
            argument = self.first_argument(open_at + 1, close_at)
            if argument is None or (not info.is_suite and not argument[1]):
                pos = close_at + 1
                continue
            name = argument[0]
            location = ms.location(self.filename, m.start(), close_at + 1)
            status = info.status
            if status is TestStatus.ACTIVE and inherited is TestStatus.SKIPPED:
                status = TestStatus.SKIPPED
            if info.is_suite:
                suite = TestSuite(name=name, location=location, status=status,
                                  modifier=info.modifier)
                if depth + 1 < MAX_NESTING_DEPTH:
                    suite.suites, suite.tests = self.walk(
                        open_at + 1, close_at, depth + 1, status
                    )
                suites.append(suite)
            else:
                tests.append(Test(name=name, location=location, status=status,
                                  modifier=info.modifier))
            pos = close_at + 1
        return suites, tests


class JsTestParser(Parser):
    """Parser for describe/it style frameworks.

    Args:
        framework: Framework name recorded on the parsed file.
        dialect: Suite/test call names of the framework.
    """

    def __init__(self, framework: str, dialect: JsTestDialect = JEST_DIALECT) -> None:
        self.framework = framework
        self.dialect = dialect

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, self.framework)
        ms = mask_source(text, JAVASCRIPT)
        walker = _Walker(ms=ms, filename=filename, dialect=self.dialect)
        suites, tests = walker.walk(0, len(text), 0, TestStatus.ACTIVE)
        return TestFile(
            path=filename,
            language=language_for_path(filename) or Language.JAVASCRIPT,
            framework=self.framework,
            suites=suites,
            tests=tests,
        )
