"""Attribute-driven test parsing shared by the .NET frameworks.

xUnit, NUnit and MSTest differ only in attribute vocabulary, so one parser
walks C# classes and a ``DotnetRules`` value says which attributes mean
what:

- *test* attributes (``[Fact]``, ``[Test]``, ``[TestMethod]``) make one test;
- *case* attributes (``[InlineData]``, ``[TestCase]``, ``[DataRow]``) make
  one test each, since their arguments are literal;
- *source* attributes (``[MemberData]``, ``[TestCaseSource]``,
  ``[DynamicData]``) make one test, their rows only exist at run time.

Classes become suites; nested classes nest. Classes without tests are
dropped. A skip marker on a class applies to everything inside it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.framework.definition import Parser
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.blocks import (
    Attribute,
    Member,
    bracket_attributes,
    members,
    normalize_attribute,
    signature,
)
from testatlas.parsers.shared.lexer import CSHARP, MaskedSource, mask_source

_NAMESPACE = re.compile(r"\bnamespace\s+[\w.]+\s*$")
_TYPE_DECL = re.compile(r"\b(?:class|struct|record)\s+(?:(?:class|struct)\s+)?([A-Za-z_]\w*)")


@dataclass(frozen=True)
class DotnetRules:
    """Attribute vocabulary of one .NET test framework."""

    framework: str
    test_attributes: frozenset[str]
    case_attributes: frozenset[str] = frozenset()
    source_attributes: frozenset[str] = frozenset()
    custom_suffixes: tuple[str, ...] = ()
    ignore_attributes: frozenset[str] = frozenset()
    skip_arguments: tuple[str, ...] = ()
    name_arguments: tuple[str, ...] = ()
    positional_name: bool = False

    def is_test(self, name: str) -> bool:
        return name in self.test_attributes or any(
            name.endswith(suffix) for suffix in self.custom_suffixes
        )


class DotnetTestParser(Parser):
    """C# test parser configured by ``DotnetRules``."""

    def __init__(self, rules: DotnetRules) -> None:
        self.rules = rules

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, self.rules.framework)
        ms = mask_source(text, CSHARP)
        return TestFile(
            path=filename,
            language=Language.CSHARP,
            framework=self.rules.framework,
            suites=self._region(ms, filename, 0, len(text), 0),
        )

    def _region(self, ms: MaskedSource, filename: str, start: int, end: int,
                depth: int) -> list[TestSuite]:
        suites: list[TestSuite] = []
        if depth > MAX_NESTING_DEPTH:
            return suites
        for member in members(ms, start, end):
            if member.body_open is None or member.body_close is None:
                continue
            header = member.header(ms)
            if _NAMESPACE.search(header):
                suites.extend(self._region(
                    ms, filename, member.body_open + 1, member.body_close, depth + 1
                ))
                continue
            decl = _TYPE_DECL.search(header)
            if decl is None:
                continue
            suite = self._class(ms, filename, member, decl, TestStatus.ACTIVE, "", depth)
            if suite is not None:
                suites.append(suite)
        return suites

    def _class(self, ms: MaskedSource, filename: str, member: Member, decl: re.Match[str],
               status: TestStatus, modifier: str, depth: int) -> TestSuite | None:
        if depth > MAX_NESTING_DEPTH:
            return None
        if member.body_open is None or member.body_close is None:
            return None
        for attribute in bracket_attributes(ms, member.start, member.start + decl.start()):
            name = normalize_attribute(attribute.name)
            if name in self.rules.ignore_attributes:
                status, modifier = TestStatus.SKIPPED, f"[{name}]"
        tests: list[Test] = []
        nested: list[TestSuite] = []
        for child in members(ms, member.body_open + 1, member.body_close):
            child_decl = _TYPE_DECL.search(child.header(ms))
            if child_decl is not None and child.body_open is not None:
                suite = self._class(ms, filename, child, child_decl, status, modifier, depth + 1)
                if suite is not None:
                    nested.append(suite)
                continue
            tests.extend(self._method(ms, filename, child, status, modifier))
        if not tests and not nested:
            return None
        return TestSuite(
            name=decl.group(1),
            location=ms.location(filename, member.start, member.end),
            status=status,
            modifier=modifier,
            suites=nested,
            tests=tests,
        )

    def _display_name(self, ms: MaskedSource, attribute: Attribute) -> str | None:
        for key in self.rules.name_arguments:
            value = attribute.named(ms, key)
            if value:
                return value
        if self.rules.positional_name:
            return attribute.first_literal(ms)
        return None

    def _skip_argument(self, ms: MaskedSource, attribute: Attribute) -> str | None:
        for key in self.rules.skip_arguments:
            if attribute.has_named(ms, key):
                return key
        return None

    def _method(self, ms: MaskedSource, filename: str, member: Member,
                status: TestStatus, modifier: str) -> list[Test]:
        sig = signature(ms, member.start, member.header_end)
        if sig is None:
            return []
        method_name, params = sig
        rules = self.rules
        is_test = False
        display: str | None = None
        sourced = False
        cases: list[Attribute] = []
        for attribute in bracket_attributes(ms, member.start, params):
            name = normalize_attribute(attribute.name)
            if rules.is_test(name):
                is_test = True
                display = display or self._display_name(ms, attribute)
                skip = self._skip_argument(ms, attribute)
                if skip is not None:
                    status, modifier = TestStatus.SKIPPED, skip
            elif name in rules.case_attributes:
                cases.append(attribute)
            elif name in rules.source_attributes:
                sourced = True
            elif name in rules.ignore_attributes:
                status, modifier = TestStatus.SKIPPED, f"[{name}]"
        location = ms.location(filename, member.start, member.end)
        if not cases and not sourced:
            if not is_test:
                return []
            return [Test(display or method_name, location, status, modifier)]
        tests: list[Test] = []
        for case in cases:
            case_status, case_modifier = status, modifier
            skip = self._skip_argument(ms, case)
            if skip is not None:
                case_status, case_modifier = TestStatus.SKIPPED, skip
            case_name = next(
                (v for v in (case.named(ms, k) for k in rules.name_arguments) if v), None
            )
            tests.append(Test(case_name or method_name, location, case_status, case_modifier))
        if sourced:
            tests.append(Test(display or method_name, location, status, modifier))
        return tests


__all__ = ["DotnetRules", "DotnetTestParser"]
