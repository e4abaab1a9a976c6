"""Kotest framework definition.

Kotest specs are classes extending one of the spec styles, with tests
declared by calls in the spec's constructor lambda (or ``init`` block)::

    class CartSpec : FunSpec({
        test("adds items") { ... }
        context("when empty") {
            xtest("checks out") { ... }
        }
    })

Each spec class is a suite. Container calls (``context``, ``describe``,
``given``/``when`` ...) become nested suites, leaf calls (``test``, ``it``,
``then``, ``should`` ...) tests. String-keyed styles are understood too:
``"name" { }`` is a test (StringSpec), ``"name" - { }`` a container
(FreeSpec) and ``"name" should { }`` a container (WordSpec). An ``x``
prefix or ``.config(enabled = false)`` skips. AnnotationSpec methods are
read from their ``@Test`` annotations.
"""

from __future__ import annotations

import re

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.framework import (
    PRIORITY_SPECIALIZED,
    ContentMatcher,
    Definition,
    Parser,
)
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.blocks import at_annotations, leading_lines, members
from testatlas.parsers.shared.jvm import PackageImportMatcher
from testatlas.parsers.shared.lexer import KOTLIN, MaskedSource, mask_source

FRAMEWORK_NAME = "kotest"

_SPEC_CLASS = re.compile(
    r"\bclass\s+([A-Za-z_]\w*)\s*(?:\([^)]*\))?\s*:\s*(?:[\w.]+\.)?(\w*Spec)\s*\("
)
_ENTRY = re.compile(r'(?<![\w.`])`?([A-Za-z_]\w*)`?\s*\(|"')
_CONFIG = re.compile(r"\s*\.\s*config\s*\(")
_WORD_CONTAINER = re.compile(r"\s*(?:should|Should|[Ww]hen|`when`|[Aa]nd|-)\s*\{")
_INIT = re.compile(r"\binit\s*\{")
_KT_FUN = re.compile(r"\bfun\s+(`[^`\n]+`|[A-Za-z_]\w*)\s*\(")
_KT_KEEP = re.compile(r"@|(?:public|private|internal|protected|open|override|suspend)\b")
_DISABLED = re.compile(r"\benabled\s*=\s*false\b")

_CONTAINERS = frozenset({
    "context", "describe", "given", "Given", "when", "When", "and", "And",
    "feature", "Feature",
})
_LEAVES = frozenset({
    "test", "it", "then", "Then", "should", "expect", "scenario", "Scenario",
})


def _classify(name: str) -> tuple[bool, TestStatus, str] | None:
    """Return ``(is_container, status, modifier)`` for a spec DSL call."""
    base, status, modifier = name, TestStatus.ACTIVE, ""
    if name.startswith("x") and name[1:] in _CONTAINERS | _LEAVES:
        base, status, modifier = name[1:], TestStatus.SKIPPED, name
    elif name.startswith("f") and name[1:] in _CONTAINERS | _LEAVES:
        base, status, modifier = name[1:], TestStatus.FOCUSED, name
    if base in _CONTAINERS:
        return True, status, modifier
    if base in _LEAVES:
        return False, status, modifier
    return None


class KotestParser(Parser):
    """Parses Kotest spec classes on masked Kotlin source."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, KOTLIN)
        suites: list[TestSuite] = []
        for m in _SPEC_CLASS.finditer(ms.masked):
            suite = self._spec(ms, filename, m)
            if suite is not None:
                suites.append(suite)
        return TestFile(
            path=filename,
            language=Language.KOTLIN,
            framework=FRAMEWORK_NAME,
            suites=suites,
        )

    def _spec(self, ms: MaskedSource, filename: str, m: re.Match[str]) -> TestSuite | None:
        paren = m.end() - 1
        paren_close = ms.closing(paren)
        suite = TestSuite(
            name=m.group(1),
            location=ms.location(filename, m.start(), paren_close + 1),
        )
        lambda_open = ms.masked.find("{", paren, paren_close)
        if lambda_open != -1:
            self._walk(ms, filename, lambda_open + 1, ms.closing(lambda_open), suite, 1)
        else:
            body = ms.skip_ws(paren_close + 1)
            if body < len(ms.masked) and ms.masked[body] == "{":
                body_close = ms.closing(body)
                suite.location = ms.location(filename, m.start(), body_close + 1)
                for init in _INIT.finditer(ms.masked, body, body_close):
                    block = init.end() - 1
                    self._walk(ms, filename, block + 1, ms.closing(block), suite, 1)
                if m.group(2) == "AnnotationSpec":
                    suite.tests.extend(self._annotated(ms, filename, body + 1, body_close))
        if suite.is_empty():
            return None
        return suite

    def _annotated(self, ms: MaskedSource, filename: str, start: int, end: int) -> list[Test]:
        tests: list[Test] = []
        for member in members(ms, start, end):
            for fun in _KT_FUN.finditer(ms.masked, member.start, member.header_end):
                first = leading_lines(ms, member.start, fun.start(), _KT_KEEP)
                names = {a.name for a in at_annotations(ms, first, fun.start())}
                if "Test" not in names:
                    continue
                status, modifier = TestStatus.ACTIVE, ""
                if "Ignore" in names:
                    status, modifier = TestStatus.SKIPPED, "@Ignore"
                tests.append(Test(
                    fun.group(1).strip("`"),
                    ms.location(filename, first, member.end),
                    status,
                    modifier,
                ))
        return tests

    def _block_after(self, ms: MaskedSource, offset: int, end: int) -> tuple[int, bool]:
        """Offset of a trailing lambda ``{`` after ``offset`` (or -1) and
        whether a ``.config(enabled = false)`` disabled it."""
        disabled = False
        config = _CONFIG.match(ms.masked, offset, end)
        if config is not None:
            close = ms.closing(config.end() - 1)
            disabled = _DISABLED.search(ms.masked, config.end(), close) is not None
            offset = close + 1
        after = ms.skip_ws(offset, end)
        if after < end and ms.masked[after] == "{":
            return after, disabled
        return -1, disabled

    def _walk(self, ms: MaskedSource, filename: str, start: int, end: int,
              parent: TestSuite, depth: int) -> None:
        pos = start
        while pos < end:
            m = _ENTRY.search(ms.masked, pos, end)
            if m is None:
                return
            if m.group(1) is None:
                pos = self._string_entry(ms, filename, m.start(), end, parent, depth)
                continue
            paren = m.end() - 1
            close = ms.closing(paren)
            kind = _classify(m.group(1))
            literal = ms.string_after(paren + 1, close)
            if kind is None or literal is None:
                pos = m.end()
                continue
            block, disabled = self._block_after(ms, close + 1, end)
            if block == -1:
                pos = close + 1
                continue
            is_container, status, modifier = kind
            if disabled:
                status, modifier = TestStatus.SKIPPED, "enabled=false"
            pos = self._emit(ms, filename, m.start(), block, literal.value, is_container,
                             status, modifier, parent, depth)

    def _string_entry(self, ms: MaskedSource, filename: str, offset: int, end: int,
                      parent: TestSuite, depth: int) -> int:
        literal = ms.string_at(offset)
        if literal is None:
            return offset + 1
        container = _WORD_CONTAINER.match(ms.masked, literal.end, end)
        if container is not None:
            block = container.end() - 1
            return self._emit(ms, filename, offset, block, literal.value, True,
                              TestStatus.ACTIVE, "", parent, depth)
        block, disabled = self._block_after(ms, literal.end, end)
        if block == -1:
            return literal.end
        status, modifier = TestStatus.ACTIVE, ""
        if disabled:
            status, modifier = TestStatus.SKIPPED, "enabled=false"
        return self._emit(ms, filename, offset, block, literal.value, False,
                          status, modifier, parent, depth)

    def _emit(self, ms: MaskedSource, filename: str, start: int, block: int, name: str,
              is_container: bool, status: TestStatus, modifier: str,
              parent: TestSuite, depth: int) -> int:
        close = ms.closing(block)
        location = ms.location(filename, start, close + 1)
        if status is TestStatus.ACTIVE and parent.status is TestStatus.SKIPPED:
            status, modifier = parent.status, parent.modifier
        if not is_container:
            parent.tests.append(Test(name, location, status, modifier))
            return close + 1
        suite = TestSuite(name=name, location=location, status=status, modifier=modifier)
        if depth < MAX_NESTING_DEPTH:
            self._walk(ms, filename, block + 1, close, suite, depth + 1)
        parent.suites.append(suite)
        return close + 1


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.KOTLIN,),
        matchers=(
            PackageImportMatcher(["io.kotest"]),
            ContentMatcher(
                r":\s*(?:Fun|String|Behavior|Describe|Should|Word|Free|Feature|Expect|Annotation)Spec\s*[({]",
                r"\bshouldBe\b",
            ),
        ),
        parser=KotestParser(),
        priority=PRIORITY_SPECIALIZED,
    )
