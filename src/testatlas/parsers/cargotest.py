"""Rust ``cargo test`` framework definition.

Tests are functions marked ``#[test]`` (or a test attribute from a
harness crate such as ``#[tokio::test]``, ``#[rstest]``,
``#[test_case(...)]``). Modules marked ``#[cfg(test)]`` or named ``tests``
become suites; tests in other modules attach to the nearest enclosing test
module, or to the file. ``#[ignore]`` skips a test and ``#[should_panic]``
is kept as the modifier. Module-level invocations of macros whose name
contains ``test`` (``rgtest!(name, ...)``) are tests named by their first
identifier.
"""

from __future__ import annotations

import re

from testatlas.domain import Language, Location, Test, TestFile, TestStatus, TestSuite
from testatlas.framework import PRIORITY_GENERIC, ContentMatcher, Definition, Parser
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.blocks import Attribute, Member, bracket_attributes, members
from testatlas.parsers.shared.lexer import RUST, MaskedSource, mask_source

FRAMEWORK_NAME = "cargo-test"

_MOD = re.compile(r"\bmod\s+([A-Za-z_]\w*)\s*$")
_FN = re.compile(r"\bfn\s+([A-Za-z_]\w*)")
_MACRO = re.compile(r"(?:[A-Za-z_]\w*\s*::\s*)*([A-Za-z_]\w*)\s*!\s*[(\[{]")
_IDENT = re.compile(r"[A-Za-z_]\w*")
_WS = re.compile(r"\s+")
_TEST_ATTRIBUTES = frozenset({"test", "rstest", "test_case"})
_ITEM_KEYWORDS = frozenset({"fn", "pub", "async", "const", "unsafe"})


def _compact(attribute: Attribute, ms: MaskedSource) -> str:
    return _WS.sub("", attribute.text(ms))


class CargoTestParser(Parser):
    """Parses Rust sources for test functions and test modules."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, RUST)
        suites: list[TestSuite] = []
        tests: list[Test] = []
        self._items(ms, filename, 0, len(text), suites, tests, 0)
        return TestFile(
            path=filename,
            language=Language.RUST,
            framework=FRAMEWORK_NAME,
            suites=suites,
            tests=tests,
        )

    @staticmethod
    def _item_start(ms: MaskedSource, member: Member) -> int:
        """Offset of the item after its outer attributes."""
        pos = member.start
        while ms.masked.startswith("#[", pos):
            pos = ms.skip_ws(ms.closing(pos + 1) + 1, member.header_end)
        return pos

    def _items(self, ms: MaskedSource, filename: str, start: int, end: int,
               suites: list[TestSuite], tests: list[Test], depth: int) -> None:
        for member in members(ms, start, end):
            item = self._item_start(ms, member)
            attributes = bracket_attributes(ms, member.start, item, prefix="#")
            header = ms.masked[item:member.header_end]
            location = ms.location(filename, member.start, member.end)
            mod = _MOD.search(header)
            if mod is not None and member.body_open is not None:
                if depth >= MAX_NESTING_DEPTH or member.body_close is None:
                    continue
                body = (member.body_open + 1, member.body_close)
                is_test_module = mod.group(1) == "tests" or any(
                    a.name == "cfg" and "cfg(test)" in _compact(a, ms) for a in attributes
                )
                if not is_test_module:
                    self._items(ms, filename, *body, suites, tests, depth + 1)
                    continue
                suite = TestSuite(name=mod.group(1), location=location)
                self._items(ms, filename, *body, suite.suites, suite.tests, depth + 1)
                if not suite.is_empty():
                    suites.append(suite)
                continue
            fn = _FN.search(header)
            if fn is not None:
                test = self._function(ms, fn.group(1), attributes, location)
                if test is not None:
                    tests.append(test)
                continue
            macro = _MACRO.match(ms.masked, item)
            if macro is not None and "test" in macro.group(1).lower():
                name = self._macro_test_name(ms, macro.end() - 1)
                if name:
                    tests.append(Test(name, location, TestStatus.ACTIVE, macro.group(1) + "!"))

    @staticmethod
    def _function(ms: MaskedSource, name: str, attributes: list[Attribute],
                  location: Location) -> Test | None:
        names = [a.name for a in attributes]
        if not any(n in _TEST_ATTRIBUTES for n in names):
            return None
        status, modifiers = TestStatus.ACTIVE, []
        if "ignore" in names:
            status = TestStatus.SKIPPED
            modifiers.append("#[ignore]")
        for attribute in attributes:
            if attribute.name == "should_panic":
                modifiers.append(f"#[{attribute.text(ms).strip()}]")
        return Test(name, location, status, " ".join(modifiers))

    @staticmethod
    def _macro_test_name(ms: MaskedSource, open_offset: int) -> str:
        close = ms.closing(open_offset)
        pos = open_offset + 1
        while pos < close:
            pos = ms.skip_ws(pos, close)
            if ms.masked.startswith("#[", pos):
                pos = ms.closing(pos + 1) + 1
                continue
            ident = _IDENT.match(ms.masked, pos, close)
            if ident is None:
                pos += 1
                continue
            if ident.group() not in _ITEM_KEYWORDS:
                return ident.group()
            pos = ident.end()
        return ""


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.RUST,),
        matchers=(
            ContentMatcher(
                r"#\[test\]",
                r"#\[cfg\(test\)\]",
                r"#\[ignore\]",
                r"#\[should_panic",
                r"\w*test\w*!\s*\(",
            ),
        ),
        parser=CargoTestParser(),
        priority=PRIORITY_GENERIC,
    )
