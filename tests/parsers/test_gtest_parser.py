"""Tests for the GoogleTest parser."""

from __future__ import annotations

import textwrap

from testatlas.domain import Language, TestStatus
from testatlas.parsers.gtest import GTestParser

GTEST_FILE = textwrap.dedent("""\
    #include <gtest/gtest.h>

    TEST(MathTest, Adds) {
      EXPECT_EQ(add(1, 2), 3);
    }

    TEST_F(MathTest, DISABLED_Slow) {
    }

    TEST(StringTest, Skips) {
      GTEST_SKIP() << "later";
    }

    TEST(MathTest, Subtracts) {
      EXPECT_EQ(sub(3, 2), 1);
    }
""").encode()


class TestGTestParser:
    """Test macros grouped by suite name."""

    def test_grouping_in_first_appearance_order(self) -> None:
        result = GTestParser().parse(GTEST_FILE, "test/math_test.cc")
        assert result.framework == "gtest"
        assert result.language is Language.CPP
        assert [s.name for s in result.suites] == ["MathTest", "StringTest"]
        assert [t.name for t in result.suites[0].tests] == ["Adds", "DISABLED_Slow", "Subtracts"]

    def test_suite_location_spans_all_its_tests(self) -> None:
        math = GTestParser().parse(GTEST_FILE, "math_test.cc").suites[0]
        assert math.location.start_line == 3
        assert math.location.end_line == 16

    def test_disabled_and_skipped(self) -> None:
        math, strings = GTestParser().parse(GTEST_FILE, "math_test.cc").suites
        slow = math.tests[1]
        assert slow.status is TestStatus.SKIPPED
        assert slow.modifier == "DISABLED_"
        skips = strings.tests[0]
        assert skips.status is TestStatus.SKIPPED
        assert skips.modifier == "GTEST_SKIP"
        assert math.tests[0].status is TestStatus.ACTIVE

    def test_malformed_macros_are_ignored(self) -> None:
        source = b"TEST(OnlyOne) {}\n// TEST(Commented, Out) {}\n"
        assert GTestParser().parse(source, "a_test.cc").suites == []
