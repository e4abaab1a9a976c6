"""pytest framework definition.

Tests are ``test_*`` functions, at module level or inside ``Test*`` classes
(nested classes become nested suites). ``@pytest.mark.skip``/``skipif`` and
``@pytest.mark.xfail`` set the status; a skip on a class, or in a
``pytestmark`` assignment, applies to everything it contains. A
parametrized test is reported once: its cases are only known at run time.

Config files: ``pytest.ini`` (``[pytest]``), ``pyproject.toml``
(``[tool.pytest.ini_options]``) and ``conftest.py``. ``testpaths`` and
``python_files`` narrow the scope.
"""

from __future__ import annotations

import ast
import configparser
import posixpath
import tomllib

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
from testatlas.parsers.shared import MAX_NESTING_DEPTH, decode_source
from testatlas.parsers.shared.pyast import (
    marker_status,
    module_marks,
    node_location,
    parse_module,
)

FRAMEWORK_NAME = "pytest"

CONFIG_FILES = ("pytest.ini", "pyproject.toml", "conftest.py")


def _split_setting(value: object) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value]
    if isinstance(value, str):
        return value.split()
    return []


def include_globs(testpaths: list[str], python_files: list[str]) -> list[str]:
    """Combine ``testpaths`` and ``python_files`` into include globs."""
    testpaths = [p.strip("/") for p in testpaths if p.strip("/") not in ("", ".")]
    if not testpaths:
        return list(python_files)
    if not python_files:
        return [f"{path}/**" for path in testpaths]
    return [f"{path}/**/{pattern}" for path in testpaths for pattern in python_files]


class PytestConfigParser(ConfigParser):
    """Reads ``pytest.ini``, ``pyproject.toml`` and ``conftest.py``."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        name = posixpath.basename(config_path)
        text = content.decode("utf-8", errors="replace")
        if name == "pyproject.toml":
            options = self._from_pyproject(config_path, text)
        elif name == "pytest.ini":
            options = self._from_ini(config_path, text)
        else:
            options = {}
        scope = ConfigScope.from_config(config_path, "", FRAMEWORK_NAME)
        scope.include = include_globs(
            _split_setting(options.get("testpaths")),
            _split_setting(options.get("python_files")),
        )
        scope.settings = dict(options)
        return scope

    @staticmethod
    def _from_pyproject(config_path: str, text: str) -> dict:
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigParseError(f"{config_path}: invalid TOML: {exc}") from exc
        options = data.get("tool", {}).get("pytest", {}).get("ini_options", {})
        return options if isinstance(options, dict) else {}

    @staticmethod
    def _from_ini(config_path: str, text: str) -> dict:
        parser = configparser.ConfigParser(interpolation=None)
        try:
            parser.read_string(text, source=config_path)
        except configparser.Error as exc:
            raise ConfigParseError(f"{config_path}: invalid INI: {exc}") from exc
        if not parser.has_section("pytest"):
            return {}
        return dict(parser.items("pytest"))


class PytestParser(Parser):
    """Parses pytest modules with the standard-library ``ast``."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        module = parse_module(text, filename, FRAMEWORK_NAME)
        inherited, modifier = marker_status(module_marks(module.body))
        suites, tests = self._walk(module.body, filename, 0, inherited, modifier)
        return TestFile(
            path=filename,
            language=Language.PYTHON,
            framework=FRAMEWORK_NAME,
            suites=suites,
            tests=tests,
        )

    def _walk(
        self,
        body: list[ast.stmt],
        filename: str,
        depth: int,
        inherited: TestStatus,
        inherited_modifier: str,
    ) -> tuple[list[TestSuite], list[Test]]:
        suites: list[TestSuite] = []
        tests: list[Test] = []
        for node in body:
            if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                if not node.name.startswith("test"):
                    continue
                status, modifier = marker_status(node.decorator_list)
                if status is TestStatus.ACTIVE:
                    status, modifier = inherited, inherited_modifier
                tests.append(Test(node.name, node_location(node, filename), status, modifier))
            elif isinstance(node, ast.ClassDef) and node.name.startswith("Test"):
                if depth + 1 > MAX_NESTING_DEPTH:
                    continue
                status, modifier = marker_status(node.decorator_list + module_marks(node.body))
                if status is TestStatus.ACTIVE:
                    status, modifier = inherited, inherited_modifier
                child_suites, child_tests = self._walk(
                    node.body, filename, depth + 1, status, modifier
                )
                suites.append(TestSuite(
                    name=node.name,
                    location=node_location(node, filename),
                    status=status,
                    modifier=modifier,
                    suites=child_suites,
                    tests=child_tests,
                ))
        return suites, tests


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.PYTHON,),
        matchers=(
            ImportMatcher("pytest", "_pytest"),
            ConfigMatcher(*CONFIG_FILES),
            ContentMatcher(
                r"^\s*@pytest\.",
                r"^\s*def\s+test_\w*\s*\(",
                r"^\s*async\s+def\s+test_\w*\s*\(",
            ),
        ),
        config_parser=PytestConfigParser(),
        parser=PytestParser(),
        priority=PRIORITY_GENERIC,
    )
