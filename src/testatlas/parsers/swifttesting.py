"""Swift Testing framework definition.

Tests are functions annotated ``@Test`` (optionally ``@Test("Display
name")``); parameterized ``@Test(arguments:)`` functions count once. Types
holding tests are suites, explicitly (``@Suite``) or implicitly, and nest.
A ``.disabled(...)`` trait skips a test or a whole suite.
"""

from __future__ import annotations

import re

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.framework import (
    PRIORITY_SPECIALIZED,
    ContentMatcher,
    Definition,
    ImportMatcher,
    Parser,
)
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.blocks import Attribute, Member, members
from testatlas.parsers.shared.lexer import SWIFT, MaskedSource, mask_source
from testatlas.parsers.shared.swift import declaration

FRAMEWORK_NAME = "swift-testing"

_TYPE = re.compile(r"\b(?:struct|class|enum|actor|extension)\s+([A-Za-z_][\w.]*)")
_FUNC = re.compile(r"\bfunc\s+(`[^`\n]+`|[A-Za-z_]\w*)\s*[(<]")
_DISABLED = re.compile(r"\.\s*disabled\b")


def _trait_status(ms: MaskedSource, attribute: Attribute) -> tuple[TestStatus, str]:
    if attribute.args_open is not None and attribute.args_close is not None:
        if _DISABLED.search(ms.masked, attribute.args_open, attribute.args_close):
            return TestStatus.SKIPPED, ".disabled"
    return TestStatus.ACTIVE, ""


class SwiftTestingParser(Parser):
    """Parses ``@Test`` functions and the types that group them."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, SWIFT)
        root = TestSuite(name="", location=ms.location(filename, 0, len(text)))
        self._region(ms, filename, 0, len(text), root, 0)
        return TestFile(
            path=filename,
            language=Language.SWIFT,
            framework=FRAMEWORK_NAME,
            suites=root.suites,
            tests=root.tests,
        )

    def _region(self, ms: MaskedSource, filename: str, start: int, end: int,
                parent: TestSuite, depth: int) -> None:
        for member in members(ms, start, end):
            header = member.header(ms)
            func = _FUNC.search(header)
            decl = _TYPE.search(header)
            if decl is not None and member.body_open is not None and (
                func is None or decl.start() > func.start()
            ):
                if depth < MAX_NESTING_DEPTH:
                    self._type(ms, filename, member, decl, parent, depth)
                continue
            if func is None:
                continue
            func_start, attributes = declaration(ms, member, member.start + func.start())
            test_attr = next((a for a in attributes if a.name == "Test"), None)
            if test_attr is None:
                continue
            status, modifier = _trait_status(ms, test_attr)
            if status is TestStatus.ACTIVE and parent.status is TestStatus.SKIPPED:
                status, modifier = parent.status, parent.modifier
            parent.tests.append(Test(
                test_attr.first_literal(ms) or func.group(1).strip("`"),
                ms.location(filename, func_start, member.end),
                status,
                modifier,
            ))

    def _type(self, ms: MaskedSource, filename: str, member: Member, decl: re.Match[str],
              parent: TestSuite, depth: int) -> None:
        if member.body_open is None or member.body_close is None:
            return
        start, attributes = declaration(ms, member, member.start + decl.start())
        suite_attr = next((a for a in attributes if a.name == "Suite"), None)
        status, modifier = TestStatus.ACTIVE, ""
        name = decl.group(1)
        if suite_attr is not None:
            status, modifier = _trait_status(ms, suite_attr)
            name = suite_attr.first_literal(ms) or name
        if status is TestStatus.ACTIVE and parent.status is TestStatus.SKIPPED:
            status, modifier = parent.status, parent.modifier
        suite = TestSuite(
            name=name,
            location=ms.location(filename, start, member.end),
            status=status,
            modifier=modifier,
        )
        self._region(ms, filename, member.body_open + 1, member.body_close, suite, depth + 1)
        if not suite.is_empty():
            parent.suites.append(suite)


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.SWIFT,),
        matchers=(
            ImportMatcher("Testing"),
            ContentMatcher(
                r"@Test\b",
                r"@Suite\b",
                r"#expect\s*\(",
            ),
        ),
        parser=SwiftTestingParser(),
        priority=PRIORITY_SPECIALIZED,
    )
