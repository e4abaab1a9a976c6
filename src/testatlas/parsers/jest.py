"""Jest framework definition.

Detection: ``@jest/globals`` / ``jest`` imports, ``jest.config.*`` scopes
and ``jest.fn()``-style API usage. Jest injects its globals by default, so
a config scope is in globals mode unless ``injectGlobals: false`` is set.

Config settings understood: ``rootDir``, ``roots`` (``<rootDir>``
placeholders resolved), ``testMatch`` and ``injectGlobals``.
"""

from __future__ import annotations

import json
import posixpath

from testatlas.domain import Language
from testatlas.exceptions import ConfigParseError
from testatlas.framework import (
    PRIORITY_GENERIC,
    ConfigMatcher,
    ConfigParser,
    ConfigScope,
    ContentMatcher,
    Definition,
    ImportMatcher,
)
from testatlas.framework.scope import clean_path
from testatlas.parsers.shared.jsconfig import JsConfig
from testatlas.parsers.shared.jstest import JEST_DIALECT, JsTestParser

FRAMEWORK_NAME = "jest"

CONFIG_FILES = (
    "jest.config.js",
    "jest.config.ts",
    "jest.config.mjs",
    "jest.config.cjs",
    "jest.config.json",
)

_JEST_API = (
    r"\bjest\.advanceTimersByTime\s*\(",
    r"\bjest\.clearAllMocks\s*\(",
    r"\bjest\.fn\s*\(",
    r"\bjest\.isolateModules\s*\(",
    r"\bjest\.mock\s*\(",
    r"\bjest\.resetAllMocks\s*\(",
    r"\bjest\.resetModules\s*\(",
    r"\bjest\.restoreAllMocks\s*\(",
    r"\bjest\.runAllTimers\s*\(",
    r"\bjest\.runOnlyPendingTimers\s*\(",
    r"\bjest\.setTimeout\s*\(",
    r"\bjest\.spyOn\s*\(",
    r"\bjest\.useFakeTimers\s*\(",
    r"\bjest\.useRealTimers\s*\(",
)

_ROOT_DIR = "<rootDir>"


def resolve_roots(config_path: str, root_dir: str, roots: list[str]) -> list[str]:
    """Resolve Jest ``roots`` entries to scan-root relative directories.

    Entries with a ``<rootDir>`` placeholder are resolved against the
    configured ``rootDir``; plain entries against the config's directory.
    """
    config_dir = posixpath.dirname(config_path) or "."
    resolved_root = clean_path(posixpath.join(config_dir, root_dir)) if root_dir else config_dir
    resolved: list[str] = []
    for entry in roots:
        if _ROOT_DIR in entry:
            entry = entry.replace(_ROOT_DIR, resolved_root)
        else:
            entry = posixpath.join(config_dir, entry)
        resolved.append(clean_path(entry))
    return resolved


class JestConfigParser(ConfigParser):
    """Reads ``jest.config.*`` files (JSON or JS/TS source)."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        text = content.decode("utf-8", errors="replace")
        if config_path.endswith(".json"):
            settings = self._parse_json(config_path, text)
        else:
            settings = self._parse_source(text)
        root_dir = settings.get("rootDir") or ""
        scope = ConfigScope.from_config(config_path, root_dir, FRAMEWORK_NAME)
        scope.globals_mode = settings.get("injectGlobals") is not False
        scope.include = list(settings.get("testMatch") or [])
        if settings.get("roots"):
            scope.roots = resolve_roots(scope.config_path, root_dir, settings["roots"])
        scope.settings = settings
        return scope

    @staticmethod
    def _parse_json(config_path: str, text: str) -> dict:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigParseError(f"{config_path}: invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigParseError(f"{config_path}: expected a JSON object")
        settings: dict = {}
        if isinstance(data.get("rootDir"), str):
            settings["rootDir"] = data["rootDir"]
        for key in ("roots", "testMatch"):
            value = data.get(key)
            if isinstance(value, list):
                settings[key] = [v for v in value if isinstance(v, str)]
        if isinstance(data.get("injectGlobals"), bool):
            settings["injectGlobals"] = data["injectGlobals"]
        return settings

    @staticmethod
    def _parse_source(text: str) -> dict:
        config = JsConfig(text)
        config.ignore_block("coverageThreshold")
        settings: dict = {}
        root_dir = config.string("rootDir")
        if root_dir is not None:
            settings["rootDir"] = root_dir
        for key in ("roots", "testMatch"):
            values = config.strings(key)
            if values:
                settings[key] = values
        inject = config.boolean("injectGlobals")
        if inject is not None:
            settings["injectGlobals"] = inject
        return settings


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.TYPESCRIPT, Language.JAVASCRIPT),
        matchers=(
            ImportMatcher("@jest/globals", "@jest/", "jest"),
            ConfigMatcher(*CONFIG_FILES),
            ContentMatcher(*_JEST_API),
        ),
        config_parser=JestConfigParser(),
        parser=JsTestParser(FRAMEWORK_NAME, JEST_DIALECT),
        priority=PRIORITY_GENERIC,
    )
