"""Go ``testing`` package definition.

Go is detected by file name alone: every ``*_test.go`` file belongs to the
standard ``testing`` package. Tests are top-level ``func TestXxx(t
*testing.T)``; a test calling ``t.Run`` becomes a suite whose subtests are
its children (nested ``t.Run`` calls nest further). Table-driven subtests
inside a loop are reported once, with the name expression as written.
``t.Skip``/``t.Skipf``/``t.SkipNow`` in a body marks it skipped.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.framework import (
    PRIORITY_GENERIC,
    Definition,
    FileNameMatcher,
    ImportMatcher,
    Parser,
)
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.lexer import GO, MaskedSource, mask_source

FRAMEWORK_NAME = "go-testing"

_TEST_FUNC = re.compile(
    r"^func\s+(Test(?:[A-Z_0-9]\w*)?)\s*\(\s*(\w+)\s+\*testing\.T\s*\)[^{]*\{",
    re.MULTILINE,
)
_RUN_CALL = re.compile(r"\b(\w+)\.Run\s*\(")
_SKIP_CALL = re.compile(r"\b(\w+)\.Skip(?:f|Now)?\s*\(")
_FUNC_PARAM = re.compile(r"func\s*\(\s*(\w+)\s+\*testing\.T\s*\)")


class GoTestingParser(Parser):
    """Parses ``*_test.go`` files on masked source text."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, GO)
        suites: list[TestSuite] = []
        tests: list[Test] = []
        for m in _TEST_FUNC.finditer(ms.masked):
            body_open = m.end() - 1
            body_close = ms.closing(body_open)
            location = ms.location(filename, m.start(), body_close + 1)
            status = self._status(ms, body_open + 1, body_close, m.group(2))
            children_suites, children_tests = self._subtests(
                ms, filename, body_open + 1, body_close, m.group(2), 1
            )
            if children_suites or children_tests:
                suites.append(TestSuite(
                    name=m.group(1), location=location, status=status,
                    suites=children_suites, tests=children_tests,
                ))
            else:
                tests.append(Test(m.group(1), location, status))
        return TestFile(
            path=filename,
            language=Language.GO,
            framework=FRAMEWORK_NAME,
            suites=suites,
            tests=tests,
        )

    @staticmethod
    def _run_calls(
        ms: MaskedSource, start: int, end: int, receiver: str
    ) -> Iterator[tuple[re.Match[str], int]]:
        pos = start
        while True:
            m = _RUN_CALL.search(ms.masked, pos, end)
            if m is None:
                return
            close = ms.closing(m.end() - 1)
            if m.group(1) == receiver:
                yield m, close
            pos = close + 1 if m.group(1) == receiver else m.end()

    def _status(self, ms: MaskedSource, start: int, end: int, receiver: str) -> TestStatus:
        nested = [(m.start(), close) for m, close in self._run_calls(ms, start, end, receiver)]
        for skip in _SKIP_CALL.finditer(ms.masked, start, end):
            if skip.group(1) != receiver:
                continue
            if not any(a <= skip.start() <= b for a, b in nested):
                return TestStatus.SKIPPED
        return TestStatus.ACTIVE

    def _subtests(
        self, ms: MaskedSource, filename: str, start: int, end: int, receiver: str, depth: int
    ) -> tuple[list[TestSuite], list[Test]]:
        suites: list[TestSuite] = []
        tests: list[Test] = []
        for m, close in self._run_calls(ms, start, end, receiver):
            literal = ms.string_after(m.end(), close)
            if literal is not None:
                name = literal.value
            else:
                name = ms.slice(m.end(), close).split(",", 1)[0].strip()
            location = ms.location(filename, m.start(), close + 1)
            param = _FUNC_PARAM.search(ms.masked, m.end(), close)
            inner = param.group(1) if param else receiver
            status = self._status(ms, m.end(), close, inner)
            child_suites: list[TestSuite] = []
            child_tests: list[Test] = []
            if param is not None and depth < MAX_NESTING_DEPTH:
                child_suites, child_tests = self._subtests(
                    ms, filename, param.end(), close, inner, depth + 1
                )
            if child_suites or child_tests:
                suites.append(TestSuite(name=name, location=location, status=status,
                                        suites=child_suites, tests=child_tests))
            else:
                tests.append(Test(name, location, status))
        return suites, tests


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.GO,),
        matchers=(
            FileNameMatcher(["_test.go"]),
            ImportMatcher("testing"),
        ),
        parser=GoTestingParser(),
        priority=PRIORITY_GENERIC,
    )
