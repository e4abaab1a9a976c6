"""Annotation-driven test parsing for JUnit 4, JUnit 5 and TestNG.

All three mark test methods with annotations on Java (or Kotlin) classes::

    @Disabled("flaky")
    class CartTest {
        @Test void addsItem() { ... }
        @ParameterizedTest @ValueSource(ints = {1, 2}) void counts(int n) { ... }
        @Nested class WhenEmpty { @Test void isEmpty() { ... } }
    }

Classes become suites (nested classes nest, classes without tests are
dropped); annotated methods become tests. Parameterized and repeated tests
count once: their invocations are only known at run time.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.domain.languages import language_for_path
from testatlas.framework.definition import Matcher, Parser
from testatlas.framework.signals import MatchResult, Signal, SignalType
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.blocks import (
    Attribute,
    Member,
    at_annotations,
    leading_lines,
    members,
    signature,
)
from testatlas.parsers.shared.lexer import JAVA, KOTLIN, MaskedSource, mask_source

_TYPE_DECL = re.compile(
    r"(?<![\w@])(?:class|interface|enum|record|object)\s+([A-Za-z_]\w*)"
)
_KT_FUN = re.compile(
    r"\bfun\s+(?:<[^>]*>\s*)?(?:[\w.]+\.)?(`[^`\n]+`|[A-Za-z_]\w*)\s*\("
)
_KT_KEEP = re.compile(
    r"@|(?:public|private|internal|protected|open|override|suspend|final|abstract|inner)\b"
)
_PUBLIC = re.compile(r"\bpublic\b")


class PackageImportMatcher(Matcher):
    """Matches dotted JVM imports by package prefix.

    ``PackageImportMatcher(["org.junit"], exclude=["org.junit.jupiter"])``
    accepts ``org.junit.Test`` but not ``org.junit.jupiter.api.Test``.
    """

    def __init__(self, packages: list[str], exclude: list[str] | None = None) -> None:
        self.packages = tuple(packages)
        self.exclude = tuple(exclude or ())

    @staticmethod
    def _within(import_path: str, package: str) -> bool:
        return import_path == package or import_path.startswith(package + ".")

    def match(self, signal: Signal) -> MatchResult:
        if signal.type is not SignalType.IMPORT:
            return MatchResult.no_match()
        value = signal.value
        if any(self._within(value, p) for p in self.exclude):
            return MatchResult.no_match()
        if any(self._within(value, p) for p in self.packages):
            return MatchResult.definite(f"import: {value}")
        return MatchResult.no_match()


@dataclass(frozen=True)
class JvmRules:
    """Annotation vocabulary of one JVM test framework.

    Attributes:
        framework: Framework name reported on parsed files.
        test_annotations: Annotations declaring a test method.
        skip_annotations: Annotations skipping a method or class.
        display_annotation: Annotation whose literal renames a test/suite.
        disabled_argument: Named ``@Test`` argument that disables a test
            when ``false`` (TestNG ``enabled``).
        class_level_tests: A class-level test annotation makes every public
            method a test (TestNG).
    """

    framework: str
    test_annotations: frozenset[str]
    skip_annotations: frozenset[str] = frozenset()
    display_annotation: str | None = None
    disabled_argument: str | None = None
    class_level_tests: bool = False


class JvmTestParser(Parser):
    """Java/Kotlin test parser configured by ``JvmRules``."""

    def __init__(self, rules: JvmRules) -> None:
        self.rules = rules

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, self.rules.framework)
        language = language_for_path(filename) or Language.JAVA
        kotlin = language is Language.KOTLIN
        ms = mask_source(text, KOTLIN if kotlin else JAVA)
        return TestFile(
            path=filename,
            language=language,
            framework=self.rules.framework,
            suites=self._classes(ms, filename, 0, len(text), kotlin, None, 0),
        )

    def _classes(self, ms: MaskedSource, filename: str, start: int, end: int, kotlin: bool,
                 inherited: tuple[TestStatus, str] | None, depth: int) -> list[TestSuite]:
        suites: list[TestSuite] = []
        for member in members(ms, start, end):
            decl = _TYPE_DECL.search(member.header(ms))
            if decl is None or member.body_open is None:
                continue
            suite = self._class(ms, filename, member, decl, kotlin, inherited, depth)
            if suite is not None:
                suites.append(suite)
        return suites

    def _annotations(self, ms: MaskedSource, member: Member, decl_start: int,
                     kotlin: bool) -> tuple[int, list[Attribute]]:
        start = member.start
        if kotlin:
            start = leading_lines(ms, member.start, decl_start, _KT_KEEP)
        return start, at_annotations(ms, start, decl_start)

    def _status(self, ms: MaskedSource, annotations: list[Attribute]) -> tuple[TestStatus, str]:
        for annotation in annotations:
            if annotation.name in self.rules.skip_annotations:
                return TestStatus.SKIPPED, f"@{annotation.name}"
            key = self.rules.disabled_argument
            if key and annotation.name in self.rules.test_annotations:
                if annotation.named(ms, key) == "false":
                    return TestStatus.SKIPPED, f"{key}=false"
        return TestStatus.ACTIVE, ""

    def _display(self, ms: MaskedSource, annotations: list[Attribute]) -> str | None:
        for annotation in annotations:
            if annotation.name == self.rules.display_annotation:
                return annotation.first_literal(ms)
        return None

    def _class(self, ms: MaskedSource, filename: str, member: Member, decl: re.Match[str],
               kotlin: bool, inherited: tuple[TestStatus, str] | None,
               depth: int) -> TestSuite | None:
        if depth >= MAX_NESTING_DEPTH or member.body_open is None:
            return None
        body_close = member.body_close if member.body_close is not None else member.end
        decl_start = member.start + decl.start()
        start, annotations = self._annotations(ms, member, decl_start, kotlin)
        status, modifier = self._status(ms, annotations)
        if status is TestStatus.ACTIVE and inherited is not None:
            status, modifier = inherited
        class_tests = self.rules.class_level_tests and any(
            a.name in self.rules.test_annotations for a in annotations
        )
        propagate = (status, modifier) if status is not TestStatus.ACTIVE else None
        tests: list[Test] = []
        nested: list[TestSuite] = []
        for child in members(ms, member.body_open + 1, body_close):
            child_decl = _TYPE_DECL.search(child.header(ms))
            if child_decl is not None and child.body_open is not None:
                suite = self._class(ms, filename, child, child_decl, kotlin, propagate, depth + 1)
                if suite is not None:
                    nested.append(suite)
                continue
            tests.extend(self._methods(ms, filename, child, kotlin, propagate, class_tests))
        if not tests and not nested:
            return None
        return TestSuite(
            name=self._display(ms, annotations) or decl.group(1),
            location=ms.location(filename, start, member.end),
            status=status,
            modifier=modifier,
            suites=nested,
            tests=tests,
        )

    def _declarations(self, ms: MaskedSource, member: Member,
                      kotlin: bool) -> list[tuple[str, int]]:
        if kotlin:
            found = []
            for m in _KT_FUN.finditer(ms.masked, member.start, member.header_end):
                found.append((m.group(1).strip("`"), m.start()))
            return found
        sig = signature(ms, member.start, member.header_end)
        if sig is None:
            return []
        return [sig]

    def _methods(self, ms: MaskedSource, filename: str, member: Member, kotlin: bool,
                 inherited: tuple[TestStatus, str] | None, class_tests: bool) -> list[Test]:
        tests: list[Test] = []
        for name, decl_start in self._declarations(ms, member, kotlin):
            start, annotations = self._annotations(ms, member, decl_start, kotlin)
            is_test = any(a.name in self.rules.test_annotations for a in annotations)
            if not is_test and class_tests:
                is_test = not annotations and _PUBLIC.search(ms.masked, start, decl_start) is not None
            if not is_test:
                continue
            status, modifier = self._status(ms, annotations)
            if status is TestStatus.ACTIVE and inherited is not None:
                status, modifier = inherited
            tests.append(Test(
                self._display(ms, annotations) or name,
                ms.location(filename, start, member.end),
                status,
                modifier,
            ))
        return tests


__all__ = ["JvmRules", "JvmTestParser", "PackageImportMatcher"]
