"""Cypress framework definition.

Cypress specs use mocha-style ``describe``/``it`` with the global ``cy``
command chain. Config settings understood: ``specPattern`` and
``excludeSpecPattern`` (both under ``e2e``/``component`` or top-level).
"""

from __future__ import annotations

from testatlas.domain import Language
from testatlas.framework import (
    PRIORITY_E2E,
    ConfigMatcher,
    ConfigParser,
    ConfigScope,
    ContentMatcher,
    Definition,
    ImportMatcher,
)
from testatlas.parsers.shared.jsconfig import JsConfig
from testatlas.parsers.shared.jstest import CYPRESS_DIALECT, JsTestParser

FRAMEWORK_NAME = "cypress"

CONFIG_FILES = (
    "cypress.config.cjs",
    "cypress.config.js",
    "cypress.config.mjs",
    "cypress.config.mts",
    "cypress.config.ts",
)


class CypressConfigParser(ConfigParser):
    """Reads ``cypress.config.*`` sources."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        config = JsConfig(content.decode("utf-8", errors="replace"))
        scope = ConfigScope.from_config(config_path, "", FRAMEWORK_NAME)
        # specPattern may appear once per testing type; collect all of them.
        for section in ("e2e", "component"):
            view = config.object(section)
            if view is None:
                continue
            scope.include.extend(view.strings("specPattern") or [])
            scope.exclude.extend(view.strings("excludeSpecPattern") or [])
            config.ignore_block(section)
        scope.include.extend(config.strings("specPattern") or [])
        scope.exclude.extend(config.strings("excludeSpecPattern") or [])
        scope.globals_mode = True
        return scope


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.TYPESCRIPT, Language.JAVASCRIPT),
        matchers=(
            ImportMatcher("cypress", "cypress/"),
            ConfigMatcher(*CONFIG_FILES),
            ContentMatcher(r"\bcy\.(?:visit|get|contains|request|intercept|mount)\s*\("),
        ),
        config_parser=CypressConfigParser(),
        parser=JsTestParser(FRAMEWORK_NAME, CYPRESS_DIALECT),
        priority=PRIORITY_E2E,
    )
