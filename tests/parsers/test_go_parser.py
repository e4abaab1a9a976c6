"""Tests for the Go ``testing`` parser."""

from __future__ import annotations

import textwrap

from testatlas.domain import Language, TestStatus
from testatlas.parsers.gotesting import GoTestingParser

GO_FILE = textwrap.dedent("""\
    package calc

    import "testing"

    func TestAdd(t *testing.T) {
    \tif Add(1, 2) != 3 {
    \t\tt.Fatal("bad")
    \t}
    }

    func TestSkipped(t *testing.T) {
    \tt.Skip("slow")
    }

    func TestTable(t *testing.T) {
    \tcases := []struct{ name string }{{"a"}, {"b"}}
    \tfor _, tc := range cases {
    \t\tt.Run(tc.name, func(t *testing.T) {
    \t\t\tt.Parallel()
    \t\t})
    \t}
    \tt.Run("literal", func(t *testing.T) {
    \t\tt.Run("inner", func(t *testing.T) {})
    \t})
    }

    func helper(t *testing.T) {}

    func BenchmarkAdd(b *testing.B) {}
""").encode()


class TestGoTestingParser:
    """Top-level TestXxx functions and t.Run subtests."""

    def test_top_level_functions(self) -> None:
        result = GoTestingParser().parse(GO_FILE, "calc/calc_test.go")
        assert result.framework == "go-testing"
        assert result.language is Language.GO
        assert [t.name for t in result.tests] == ["TestAdd", "TestSkipped"]
        assert [s.name for s in result.suites] == ["TestTable"]
        assert result.count_tests() == 4

    def test_skip_call_marks_test_skipped(self) -> None:
        add, skipped = GoTestingParser().parse(GO_FILE, "calc_test.go").tests
        assert add.status is TestStatus.ACTIVE
        assert skipped.status is TestStatus.SKIPPED

    def test_subtests_become_children(self) -> None:
        table = GoTestingParser().parse(GO_FILE, "calc_test.go").suites[0]
        assert [t.name for t in table.tests] == ["tc.name"]
        assert [s.name for s in table.suites] == ["literal"]
        assert [t.name for t in table.suites[0].tests] == ["inner"]

    def test_skip_inside_subtest_only_skips_the_subtest(self) -> None:
        source = textwrap.dedent("""\
            package p

            func TestParent(t *testing.T) {
            \tt.Run("child", func(t *testing.T) {
            \t\tt.Skip("later")
            \t})
            }
        """).encode()
        parent = GoTestingParser().parse(source, "p_test.go").suites[0]
        assert parent.status is TestStatus.ACTIVE
        assert parent.tests[0].status is TestStatus.SKIPPED

    def test_location(self) -> None:
        add = GoTestingParser().parse(GO_FILE, "calc_test.go").tests[0]
        assert add.location.start_line == 5
        assert add.location.end_line == 9

    def test_functions_in_strings_are_ignored(self) -> None:
        source = b'package p\n\nvar doc = `\nfunc TestFake(t *testing.T) {}\n`\n'
        assert GoTestingParser().parse(source, "p_test.go").count_tests() == 0
