"""GoogleTest framework definition (C++).

``TEST(Suite, Name)``, ``TEST_F``, ``TEST_P``, ``TYPED_TEST`` and
``TYPED_TEST_P`` macros declare tests; tests sharing a suite name are
grouped into one suite in order of first appearance. A ``DISABLED_``
prefix on the test or suite name skips it, as does ``GTEST_SKIP()`` in the
body.
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
from testatlas.parsers.shared.blocks import split_arguments
from testatlas.parsers.shared.lexer import CPP, mask_source

FRAMEWORK_NAME = "gtest"

DISABLED_PREFIX = "DISABLED_"

_TEST_MACRO = re.compile(r"^[ \t]*(TEST|TEST_F|TEST_P|TYPED_TEST|TYPED_TEST_P)\s*\(", re.MULTILINE)
_GTEST_SKIP = re.compile(r"\bGTEST_SKIP\s*\(")


class GTestParser(Parser):
    """Parses GoogleTest test macros."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, CPP)
        suites: dict[str, TestSuite] = {}
        starts: dict[str, int] = {}
        for m in _TEST_MACRO.finditer(ms.masked):
            open_paren = m.end() - 1
            close = ms.closing(open_paren)
            args = [ms.slice(a, b).strip() for a, b in split_arguments(ms, open_paren, close)]
            if len(args) != 2 or not all(args):
                continue
            suite_name, test_name = args
            body = ms.skip_ws(close + 1)
            end = close + 1
            status, modifier = TestStatus.ACTIVE, ""
            if body < len(text) and ms.masked[body] == "{":
                end = ms.closing(body) + 1
                if _GTEST_SKIP.search(ms.masked, body, end):
                    status, modifier = TestStatus.SKIPPED, "GTEST_SKIP"
            if test_name.startswith(DISABLED_PREFIX) or suite_name.startswith(DISABLED_PREFIX):
                status, modifier = TestStatus.SKIPPED, DISABLED_PREFIX
            location = ms.location(filename, m.start(1), end)
            suite = suites.get(suite_name)
            if suite is None:
                starts[suite_name] = m.start(1)
                suite = suites[suite_name] = TestSuite(name=suite_name, location=location)
            else:
                suite.location = ms.location(filename, starts[suite_name], end)
            suite.tests.append(Test(test_name, location, status, modifier))
        return TestFile(
            path=filename,
            language=Language.CPP,
            framework=FRAMEWORK_NAME,
            suites=list(suites.values()),
        )


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.CPP,),
        matchers=(
            ImportMatcher("gtest/gtest.h", "gmock/gmock.h", "gtest/", "gmock/"),
            ContentMatcher(
                r"^\s*TEST(?:_F|_P)?\s*\(\s*\w+\s*,\s*\w+\s*\)",
                r"\b(?:EXPECT|ASSERT)_(?:EQ|NE|TRUE|FALSE|THAT)\s*\(",
            ),
        ),
        parser=GTestParser(),
        priority=PRIORITY_GENERIC,
    )
