"""Vitest framework definition.

Vitest outranks the generic JS runners: its explicit ``vitest`` imports and
``vi.*`` helpers are unambiguous. Globals are opt-in (``globals: true``).

Config settings understood: ``root``, ``test.globals``, ``test.include``,
``test.exclude`` (the ``coverage`` block is ignored) and ``test.projects``,
each project contributing a nested scope with its own root and globs.
"""

from __future__ import annotations

from testatlas.domain import Language
from testatlas.framework import (
    PRIORITY_SPECIALIZED,
    ConfigMatcher,
    ConfigParser,
    ConfigScope,
    ContentMatcher,
    Definition,
    ImportMatcher,
    SubProject,
)
from testatlas.framework.scope import resolve_base_dir
from testatlas.parsers.shared.jsconfig import JsConfig
from testatlas.parsers.shared.jstest import JEST_DIALECT, JsTestDialect, JsTestParser

FRAMEWORK_NAME = "vitest"

CONFIG_FILES = (
    "vitest.config.js",
    "vitest.config.ts",
    "vitest.config.mjs",
    "vitest.config.mts",
    "vitest.config.cjs",
)

_VITEST_API = (
    r"\bbench\s*\(",
    r"\bbench\.skip\s*\(",
    r"\bbench\.only\s*\(",
    r"\bvi\.fn\s*\(",
    r"\bvi\.mock\s*\(",
    r"\bvi\.spyOn\s*\(",
    r"\bvi\.useFakeTimers\s*\(",
    r"\bvi\.clearAllMocks\s*\(",
    r"\bvi\.resetAllMocks\s*\(",
    r"\bvi\.restoreAllMocks\s*\(",
    r"\bvi\.stubGlobal\s*\(",
    r"\bvi\.stubEnv\s*\(",
)

VITEST_DIALECT = JsTestDialect(
    suite_roots=JEST_DIALECT.suite_roots,
    test_roots=JEST_DIALECT.test_roots | {"bench"},
)


class VitestConfigParser(ConfigParser):
    """Reads ``vitest.config.*`` sources."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        config = JsConfig(content.decode("utf-8", errors="replace"))
        test = config.object("test") or config
        projects = test.objects("projects") or test.objects("workspace")
        for view in (config, test):
            for block in ("coverage", "projects", "workspace"):
                view.ignore_block(block)

        scope = ConfigScope.from_config(config_path, config.string("root") or "", FRAMEWORK_NAME)
        scope.globals_mode = bool(test.boolean("globals"))
        if not projects:
            scope.include = test.strings("include") or []
            scope.exclude = test.strings("exclude") or []
        for index, project in enumerate(projects):
            scope.projects.append(self._project(scope.config_path, project, index))
        return scope

    @staticmethod
    def _project(config_path: str, project: JsConfig, index: int) -> SubProject:
        test = project.object("test") or project
        root = project.string("root") or test.string("root") or ""
        name = test.string("name") or project.string("name") or root or f"project-{index}"
        globals_mode = test.boolean("globals")
        return SubProject(
            name=name,
            base_dir=resolve_base_dir(config_path, root),
            include=test.strings("include") or [],
            exclude=test.strings("exclude") or [],
            globals_mode=bool(globals_mode),
        )


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.TYPESCRIPT, Language.JAVASCRIPT),
        matchers=(
            ImportMatcher("vitest", "vitest/"),
            ConfigMatcher(*CONFIG_FILES),
            ContentMatcher(*_VITEST_API),
        ),
        config_parser=VitestConfigParser(),
        parser=JsTestParser(FRAMEWORK_NAME, VITEST_DIALECT),
        priority=PRIORITY_SPECIALIZED,
    )
