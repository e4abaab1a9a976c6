"""Minitest framework definition.

Two styles are understood. Classic test classes (``< Minitest::Test``,
``< ActiveSupport::TestCase`` ...) are suites whose ``def test_*`` methods
and ``test "name" do`` blocks are tests. Spec style ``describe``/``it``
blocks are walked like RSpec. A ``skip`` call in a test body marks the
test skipped.

Config: ``test_helper.rb`` roots a scope at its directory.
"""

from __future__ import annotations

import re

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.framework import (
    PRIORITY_SPECIALIZED,
    ConfigMatcher,
    ConfigParser,
    ConfigScope,
    ContentMatcher,
    Definition,
    ImportMatcher,
    Parser,
)
from testatlas.parsers.shared import decode_source
from testatlas.parsers.shared.lexer import RUBY, MaskedSource, mask_source
from testatlas.parsers.shared.ruby import Block, RubyDialect, RubySpecWalker, end_pairs

FRAMEWORK_NAME = "minitest"

CONFIG_FILES = ("test_helper.rb",)

_TEST_CLASS = re.compile(
    r"^[ \t]*(class)\s+([A-Z][\w:]*)\s*<\s*((?:\w+::)*\w*Test(?:Case)?)\b", re.MULTILINE
)
_TEST_DEF = re.compile(r"^[ \t]*(def)\s+(test_\w*[?!]?)", re.MULTILINE)
_SKIP = re.compile(r"^[ \t]*skip\b", re.MULTILINE)

SPEC_DIALECT = RubyDialect(
    suites=frozenset({"describe"}),
    tests=frozenset({"it", "specify"}),
)
CLASS_DIALECT = RubyDialect(suites=frozenset(), tests=frozenset({"test"}))


class _MinitestWalker(RubySpecWalker):
    def body_status(self, block: Block) -> tuple[TestStatus, str] | None:
        if _SKIP.search(self.ms.masked, block.body_start, block.body_end):
            return TestStatus.SKIPPED, "skip"
        return None


class MinitestParser(Parser):
    """Parses ``*_test.rb`` files in classic and spec style."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, RUBY)
        pairs = end_pairs(ms)
        root = TestSuite(name="", location=ms.location(filename, 0, len(text)))
        _MinitestWalker(ms, filename, SPEC_DIALECT, pairs).walk(0, len(text), root, 0)
        class_walker = _MinitestWalker(ms, filename, CLASS_DIALECT, pairs)
        suites = [s for s in self._classes(ms, filename, class_walker) if not s.is_empty()]
        return TestFile(
            path=filename,
            language=Language.RUBY,
            framework=FRAMEWORK_NAME,
            suites=suites + root.suites,
            tests=root.tests,
        )

    def _classes(self, ms: MaskedSource, filename: str,
                 walker: RubySpecWalker) -> list[TestSuite]:
        suites: list[TestSuite] = []
        for m in _TEST_CLASS.finditer(ms.masked):
            block = walker.keyword_block(m.start(1))
            if block is None:
                continue
            suite = TestSuite(name=m.group(2), location=ms.location(filename, m.start(1), block.end))
            walker.walk(block.body_start, block.body_end, suite, 1)
            for method in _TEST_DEF.finditer(ms.masked, block.body_start, block.body_end):
                body = walker.keyword_block(method.start(1))
                end = body.end if body else method.end()
                status, modifier = TestStatus.ACTIVE, ""
                if body is not None and _SKIP.search(ms.masked, body.body_start, body.body_end):
                    status, modifier = TestStatus.SKIPPED, "skip"
                suite.tests.append(Test(
                    method.group(2), ms.location(filename, method.start(1), end), status, modifier
                ))
            suite.tests.sort(key=lambda t: (t.location.start_line, t.location.start_col))
            suites.append(suite)
        return suites


class MinitestConfigParser(ConfigParser):
    """``test_helper.rb`` roots a scope at its directory."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        scope = ConfigScope.from_config(config_path, framework=FRAMEWORK_NAME)
        scope.include = ["**/*_test.rb", "**/test_*.rb"]
        return scope


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.RUBY,),
        matchers=(
            ImportMatcher("minitest", "minitest/", "test_helper", "test/unit"),
            ConfigMatcher(*CONFIG_FILES),
            ContentMatcher(
                r"<\s*(?:Minitest::Test|ActiveSupport::TestCase|Test::Unit::TestCase)\b",
                r"^\s*def\s+test_\w+",
                r"\bassert_equal\b",
            ),
        ),
        parser=MinitestParser(),
        config_parser=MinitestConfigParser(),
        priority=PRIORITY_SPECIALIZED,
    )
