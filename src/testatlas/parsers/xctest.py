"""XCTest framework definition (Swift).

``XCTestCase`` subclasses are suites; their parameterless ``func test*()``
methods are tests. A test body throwing ``XCTSkip`` (or calling
``XCTSkipIf``/``XCTSkipUnless``) is skipped. Async tests carry an ``async``
modifier, combined as ``"XCTSkip, async"`` when both apply.
"""

from __future__ import annotations

import re

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.framework import (
    PRIORITY_GENERIC,
    ContentMatcher,
    Definition,
    ImportMatcher,
    Parser,
)
from testatlas.parsers.shared import decode_source
from testatlas.parsers.shared.blocks import Member, members
from testatlas.parsers.shared.lexer import SWIFT, MaskedSource, mask_source
from testatlas.parsers.shared.swift import declaration

FRAMEWORK_NAME = "xctest"

_CLASS = re.compile(r"\bclass\s+([A-Za-z_]\w*)\s*:\s*([A-Za-z_][\w.]*)")
_TEST_FUNC = re.compile(r"\bfunc\s+(test\w*)\s*\(\s*\)([^{}]*)$")
_ASYNC = re.compile(r"\basync\b")
_XCTSKIP = re.compile(r"\bXCTSkip(?:If|Unless)?\s*\(")


class XCTestParser(Parser):
    """Parses ``XCTestCase`` subclasses."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, SWIFT)
        suites: list[TestSuite] = []
        test_classes: set[str] = set()
        for member in members(ms, 0, len(text)):
            decl = _CLASS.search(member.header(ms))
            if decl is None or member.body_open is None:
                continue
            base = decl.group(2).rsplit(".", 1)[-1]
            if not base.endswith("TestCase") and base not in test_classes:
                continue
            test_classes.add(decl.group(1))
            suite = self._suite(ms, filename, member, decl)
            if not suite.is_empty():
                suites.append(suite)
        return TestFile(
            path=filename,
            language=Language.SWIFT,
            framework=FRAMEWORK_NAME,
            suites=suites,
        )

    def _suite(self, ms: MaskedSource, filename: str, member: Member,
               decl: re.Match[str]) -> TestSuite:
        start, _ = declaration(ms, member, member.start + decl.start())
        suite = TestSuite(name=decl.group(1), location=ms.location(filename, start, member.end))
        if member.body_open is None or member.body_close is None:
            return suite
        for child in members(ms, member.body_open + 1, member.body_close):
            func = _TEST_FUNC.search(child.header(ms))
            if func is None or child.body_open is None or child.body_close is None:
                continue
            func_start, _ = declaration(ms, child, child.start + func.start())
            modifiers: list[str] = []
            status = TestStatus.ACTIVE
            if _XCTSKIP.search(ms.masked, child.body_open, child.body_close):
                status = TestStatus.SKIPPED
                modifiers.append("XCTSkip")
            if _ASYNC.search(func.group(2)):
                modifiers.append("async")
            suite.tests.append(Test(
                func.group(1),
                ms.location(filename, func_start, child.end),
                status,
                ", ".join(modifiers),
            ))
        return suite


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.SWIFT,),
        matchers=(
            ImportMatcher("XCTest"),
            ContentMatcher(
                r":\s*XCTestCase\b",
                r"\bXCTAssert\w*\s*\(",
                r"\bfunc\s+test\w*\s*\(\s*\)",
            ),
        ),
        parser=XCTestParser(),
        priority=PRIORITY_GENERIC,
    )
