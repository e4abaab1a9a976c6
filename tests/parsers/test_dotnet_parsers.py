"""Tests for the xUnit, NUnit and MSTest parsers.

Verifies:
    - Each literal data row (InlineData, TestCase, DataRow) is one test.
    - Runtime data sources (MemberData, TestCaseSource) add one test.
    - Skip arguments and ignore attributes mark tests skipped.
    - Namespaces (block and file-scoped) are transparent.
"""

from __future__ import annotations

import textwrap

from testatlas.domain import Language, TestStatus
from testatlas.parsers.mstest import definition as mstest_definition
from testatlas.parsers.nunit import definition as nunit_definition
from testatlas.parsers.xunit import definition as xunit_definition


def _src(text: str) -> bytes:
    return textwrap.dedent(text).lstrip().encode()


XUNIT_FILE = _src("""
    using Xunit;

    namespace Shop.Tests
    {
        public class CalculatorTests
        {
            [Fact]
            public void Adds()
            {
                Assert.Equal(3, 1 + 2);
            }

            [Fact(Skip = "flaky")]
            public void Divides() { }

            [Theory]
            [InlineData(1, 2)]
            [InlineData(3, 4)]
            public void Sums(int a, int b) { }

            [Theory]
            [MemberData(nameof(Rows))]
            public void FromMember(int a) { }

            [Fact(DisplayName = "multiplies numbers")]
            public void Multiplies() { }

            private int Helper() => 1;

            public class Nested
            {
                [Fact]
                public void Inner() { }
            }
        }
    }
""")


class TestXunitParser:
    """Facts, theories and data rows."""

    def test_suite_tree(self) -> None:
        result = xunit_definition().parser.parse(XUNIT_FILE, "tests/CalculatorTests.cs")
        assert result.framework == "xunit"
        assert result.language is Language.CSHARP
        assert [s.name for s in result.suites] == ["CalculatorTests"]
        suite = result.suites[0]
        assert [t.name for t in suite.tests] == [
            "Adds", "Divides", "Sums", "Sums", "FromMember", "multiplies numbers",
        ]
        assert [s.name for s in suite.suites] == ["Nested"]
        assert result.count_tests() == 7

    def test_inline_data_rows_are_separate_tests(self) -> None:
        source = _src("""
            public class T
            {
                [Theory]
                [InlineData(1)]
                [InlineData(2)]
                public void Works(int n) { }
            }
        """)
        result = xunit_definition().parser.parse(source, "T.cs")
        assert result.count_tests() == 2

    def test_skip_argument(self) -> None:
        suite = xunit_definition().parser.parse(XUNIT_FILE, "CalculatorTests.cs").suites[0]
        divides = suite.tests[1]
        assert divides.status is TestStatus.SKIPPED
        assert divides.modifier == "Skip"
        assert suite.tests[0].status is TestStatus.ACTIVE

    def test_classes_without_tests_are_dropped(self) -> None:
        source = b"public class Helpers\n{\n    public int Value() => 1;\n}\n"
        assert xunit_definition().parser.parse(source, "Helpers.cs").suites == []


class TestNunitParser:
    """Fixtures, test cases and ignores."""

    SOURCE = _src("""
        using NUnit.Framework;

        [TestFixture]
        [Ignore("later")]
        public class ParserTests
        {
            [Test]
            public void Parses() { }
        }

        [TestFixture]
        public class MathTests
        {
            [TestCase(1, 2, TestName = "small")]
            [TestCase(100, 200)]
            [TestCase(0, 0, Ignore = "zero")]
            public void Adds(int a, int b) { }

            [TestCaseSource(nameof(Cases))]
            public void FromSource(int a) { }

            [Test, Explicit]
            public void Slow() { }
        }
    """)

    def test_ignored_fixture(self) -> None:
        parser_tests = nunit_definition().parser.parse(self.SOURCE, "Tests.cs").suites[0]
        assert parser_tests.status is TestStatus.SKIPPED
        assert parser_tests.modifier == "[Ignore]"
        assert parser_tests.tests[0].status is TestStatus.SKIPPED

    def test_cases(self) -> None:
        math = nunit_definition().parser.parse(self.SOURCE, "Tests.cs").suites[1]
        assert [t.name for t in math.tests] == ["small", "Adds", "Adds", "FromSource", "Slow"]
        ignored_case = math.tests[2]
        assert ignored_case.status is TestStatus.SKIPPED
        assert ignored_case.modifier == "Ignore"
        slow = math.tests[4]
        assert slow.status is TestStatus.SKIPPED
        assert slow.modifier == "[Explicit]"


class TestMstestParser:
    """Test methods, data rows and file-scoped namespaces."""

    def test_methods_and_rows(self) -> None:
        source = _src("""
            using Microsoft.VisualStudio.TestTools.UnitTesting;

            namespace App.Tests;

            [TestClass]
            public class StringTests
            {
                [TestMethod("trims whitespace")]
                public void Trims() { }

                [DataTestMethod]
                [DataRow("a")]
                [DataRow("b", DisplayName = "second row")]
                public void Rows(string s) { }

                [TestMethod]
                [Ignore]
                public void Pending() { }
            }
        """)
        result = mstest_definition().parser.parse(source, "StringTests.cs")
        suite = result.suites[0]
        assert suite.name == "StringTests"
        assert [t.name for t in suite.tests] == ["trims whitespace", "Rows", "second row", "Pending"]
        assert suite.tests[3].status is TestStatus.SKIPPED
        assert suite.tests[3].modifier == "[Ignore]"
