"""Playwright Test framework definition.

Playwright tests are declared with ``test()`` and grouped with
``test.describe()``; both come from ``@playwright/test``. Config settings
understood: ``testDir`` (becomes the scope root), ``testMatch`` and
``testIgnore`` (string globs only; regex literals are not evaluated).
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
from testatlas.parsers.shared.jstest import PLAYWRIGHT_DIALECT, JsTestParser

FRAMEWORK_NAME = "playwright"

CONFIG_FILES = ("playwright.config.js", "playwright.config.ts")


class PlaywrightConfigParser(ConfigParser):
    """Reads ``playwright.config.*`` sources."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        config = JsConfig(content.decode("utf-8", errors="replace"))
        projects = config.objects("projects")
        config.ignore_block("projects")
        scope = ConfigScope.from_config(config_path, config.string("testDir") or "", FRAMEWORK_NAME)
        scope.include = config.strings("testMatch") or []
        scope.exclude = config.strings("testIgnore") or []
        scope.settings["projects"] = [p.string("name") for p in projects if p.string("name")]
        return scope


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.TYPESCRIPT, Language.JAVASCRIPT),
        matchers=(
            ImportMatcher("@playwright/test", "@playwright/test/"),
            ConfigMatcher(*CONFIG_FILES),
            ContentMatcher(
                r"\btest\.describe\s*\(",
                r"\btest\.beforeEach\s*\(\s*async\s*\(\s*\{\s*page\b",
                r"\bawait\s+page\.goto\s*\(",
            ),
        ),
        config_parser=PlaywrightConfigParser(),
        parser=JsTestParser(FRAMEWORK_NAME, PLAYWRIGHT_DIALECT),
        priority=PRIORITY_E2E,
    )
