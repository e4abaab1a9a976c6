"""unittest framework definition.

Suites are classes deriving from ``*TestCase``; their ``test*`` methods are
the tests. ``@unittest.skip*`` and ``@unittest.expectedFailure`` set the
status, and a skipped class skips all of its methods.
"""

from __future__ import annotations

import ast

from testatlas.domain import Language, Test, TestFile, TestStatus, TestSuite
from testatlas.framework import (
    PRIORITY_SPECIALIZED,
    ContentMatcher,
    Definition,
    ImportMatcher,
    Parser,
)
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.pyast import dotted_name, marker_status, node_location, parse_module

FRAMEWORK_NAME = "unittest"


def is_test_case(node: ast.ClassDef) -> bool:
    return any(dotted_name(base).endswith("TestCase") for base in node.bases)


class UnittestParser(Parser):
    """Parses ``unittest.TestCase`` modules with the standard-library ``ast``."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        module = parse_module(text, filename, FRAMEWORK_NAME)
        return TestFile(
            path=filename,
            language=Language.PYTHON,
            framework=FRAMEWORK_NAME,
            suites=self._suites(module.body, filename, 0),
        )

    def _suites(self, body: list[ast.stmt], filename: str, depth: int) -> list[TestSuite]:
        suites: list[TestSuite] = []
        for node in body:
            if not isinstance(node, ast.ClassDef) or depth >= MAX_NESTING_DEPTH:
                continue
            if not is_test_case(node):
                # Test cases may be declared inside helper classes.
                suites.extend(self._suites(node.body, filename, depth + 1))
                continue
            status, modifier = marker_status(node.decorator_list)
            suite = TestSuite(
                name=node.name,
                location=node_location(node, filename),
                status=status,
                modifier=modifier,
                suites=self._suites(node.body, filename, depth + 1),
            )
            for child in node.body:
                if not isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
                    continue
                if not child.name.startswith("test"):
                    continue
                test_status, test_modifier = marker_status(child.decorator_list)
                if test_status is TestStatus.ACTIVE:
                    test_status, test_modifier = status, modifier
                suite.tests.append(Test(
                    child.name, node_location(child, filename), test_status, test_modifier
                ))
            suites.append(suite)
        return suites


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.PYTHON,),
        matchers=(
            ImportMatcher("unittest"),
            ContentMatcher(r"\(\s*(?:unittest\.)?(?:IsolatedAsyncio)?TestCase\s*\)"),
        ),
        parser=UnittestParser(),
        priority=PRIORITY_SPECIALIZED,
    )
