"""PHPUnit framework definition.

Test classes extend ``TestCase`` (directly or through a ``*TestCase``
base). Their tests are ``test*`` methods, methods whose docblock carries
``@test`` and methods with the ``#[Test]`` attribute. Every ``#[TestWith]``
row is its own test; data providers count once. ``markTestSkipped()`` in a
body skips the test, ``markTestIncomplete()`` marks it todo.

Config: ``phpunit.xml`` / ``phpunit.xml.dist`` ``<testsuite>`` entries
become include globs, ``<exclude>`` entries exclude globs.
"""

from __future__ import annotations

import posixpath
import re
import xml.etree.ElementTree as ET

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.exceptions import ConfigParseError
from testatlas.framework import (
    PRIORITY_GENERIC,
    ConfigMatcher,
    ConfigParser,
    ConfigScope,
    ContentMatcher,
    Definition,
    ImportMatcher,
    Parser,
)
from testatlas.framework.scope import clean_path
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.blocks import Member, bracket_attributes, members
from testatlas.parsers.shared.lexer import PHP, MaskedSource, mask_source

FRAMEWORK_NAME = "phpunit"

CONFIG_FILES = ("phpunit.xml", "phpunit.xml.dist")

DEFAULT_SUFFIX = "Test.php"

_NAMESPACE = re.compile(r"\bnamespace\s+[\w\\]+\s*$")
_CLASS = re.compile(r"\bclass\s+([A-Za-z_]\w*)(?:\s+extends\s+\\?([\w\\]+))?")
_FUNCTION = re.compile(r"\bfunction\s+&?\s*([A-Za-z_]\w*)\s*\(")
_DOC_TEST = re.compile(r"@test\b")
_SKIPPED = re.compile(r"->\s*markTestSkipped\s*\(|\bself::markTestSkipped\s*\(")
_INCOMPLETE = re.compile(r"->\s*markTestIncomplete\s*\(|\bself::markTestIncomplete\s*\(")


def _docblock(ms: MaskedSource, offset: int) -> str:
    """The ``/** ... */`` comment directly above ``offset``, if any."""
    end = ms.text.rfind("*/", 0, offset)
    if end == -1 or ms.masked[end + 2:offset].strip():
        return ""
    start = ms.text.rfind("/**", 0, end)
    return ms.text[start:end + 2] if start != -1 else ""


class PHPUnitParser(Parser):
    """Parses PHPUnit test classes."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, PHP)
        return TestFile(
            path=filename,
            language=Language.PHP,
            framework=FRAMEWORK_NAME,
            suites=self._region(ms, filename, 0, len(text), 0),
        )

    def _region(self, ms: MaskedSource, filename: str, start: int, end: int,
                depth: int) -> list[TestSuite]:
        suites: list[TestSuite] = []
        for member in members(ms, start, end):
            if member.body_open is None or member.body_close is None:
                continue
            header = member.header(ms)
            if _NAMESPACE.search(header):
                if depth < MAX_NESTING_DEPTH:
                    suites.extend(self._region(
                        ms, filename, member.body_open + 1, member.body_close, depth + 1
                    ))
                continue
            decl = _CLASS.search(header)
            if decl is None:
                continue
            base = (decl.group(2) or "").rsplit("\\", 1)[-1]
            if not base.endswith("TestCase") and not decl.group(1).endswith("Test"):
                continue
            suite = TestSuite(
                name=decl.group(1),
                location=ms.location(filename, member.start, member.end),
            )
            for child in members(ms, member.body_open + 1, member.body_close):
                suite.tests.extend(self._method(ms, filename, child))
            if not suite.is_empty():
                suites.append(suite)
        return suites

    def _method(self, ms: MaskedSource, filename: str, member: Member) -> list[Test]:
        func = _FUNCTION.search(member.header(ms))
        if func is None or member.body_open is None or member.body_close is None:
            return []
        name = func.group(1)
        attributes = bracket_attributes(ms, member.start, member.start + func.start(), prefix="#")
        names = {a.name for a in attributes}
        docblock = _docblock(ms, member.start)
        if not (name.startswith("test") or "Test" in names or _DOC_TEST.search(docblock)):
            return []
        status, modifier = TestStatus.ACTIVE, ""
        if _SKIPPED.search(ms.masked, member.body_open, member.body_close):
            status, modifier = TestStatus.SKIPPED, "markTestSkipped"
        elif _INCOMPLETE.search(ms.masked, member.body_open, member.body_close):
            status, modifier = TestStatus.TODO, "markTestIncomplete"
        location = ms.location(filename, member.start, member.end)
        rows = [a for a in attributes if a.name == "TestWith"]
        if rows:
            return [Test(name, location, status, modifier) for _ in rows]
        return [Test(name, location, status, modifier)]


def _child_texts(element: ET.Element, tag: str) -> list[ET.Element]:
    return [child for child in element.iter(tag) if (child.text or "").strip()]


class PHPUnitConfigParser(ConfigParser):
    """Reads ``<testsuites>`` from ``phpunit.xml(.dist)``."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        try:
            root = ET.fromstring(content)
        except ET.ParseError as exc:
            raise ConfigParseError(f"{config_path}: invalid XML: {exc}") from exc
        scope = ConfigScope.from_config(config_path, framework=FRAMEWORK_NAME)
        suites: list[str] = []
        for testsuite in root.iter("testsuite"):
            if testsuite.get("name"):
                suites.append(testsuite.get("name", ""))
            for directory in _child_texts(testsuite, "directory"):
                if _excluded(testsuite, directory):
                    continue
                suffix = directory.get("suffix") or DEFAULT_SUFFIX
                path = clean_path((directory.text or "").strip())
                scope.include.append(posixpath.join(path, "**", "*" + suffix))
            for entry in _child_texts(testsuite, "file"):
                if not _excluded(testsuite, entry):
                    scope.include.append(clean_path((entry.text or "").strip()))
            for exclude in testsuite.iter("exclude"):
                path = clean_path((exclude.text or "").strip())
                if path and path != ".":
                    scope.exclude.extend([path, path + "/**"])
                for nested in list(exclude):
                    nested_path = clean_path((nested.text or "").strip())
                    if nested_path and nested_path != ".":
                        scope.exclude.extend([nested_path, nested_path + "/**"])
        scope.settings = {"testsuites": suites}
        return scope


def _excluded(testsuite: ET.Element, element: ET.Element) -> bool:
    """Report whether ``element`` is nested inside an ``<exclude>`` block."""
    for exclude in testsuite.iter("exclude"):
        if any(child is element for child in exclude.iter()):
            return True
    return False


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.PHP,),
        matchers=(
            ImportMatcher(
                "PHPUnit\\Framework\\TestCase",
                "PHPUnit\\Framework\\Assert",
                "PHPUnit\\Framework\\Attributes\\Test",
                "PHPUnit\\Framework\\Attributes\\DataProvider",
                "PHPUnit\\Framework\\Attributes\\TestWith",
            ),
            ConfigMatcher(*CONFIG_FILES),
            ContentMatcher(
                r"\bextends\s+\\?(?:PHPUnit\\Framework\\)?TestCase\b",
                r"\$this\s*->\s*assert\w+\s*\(",
            ),
        ),
        parser=PHPUnitParser(),
        config_parser=PHPUnitConfigParser(),
        priority=PRIORITY_GENERIC,
    )
