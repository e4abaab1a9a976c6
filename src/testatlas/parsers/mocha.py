"""Mocha framework definition.

Mocha has no imports of its own in most test files: its BDD (``describe``,
``it``) and TDD (``suite``, ``test``) interfaces are globals. Content
detection therefore falls back to the bare call shape, and answers
negatively whenever the file visibly belongs to Jest, Vitest, Playwright
or Cypress instead.

Config files: ``.mocharc.{js,cjs,mjs}`` (source), ``.mocharc.json(c)``,
``.mocharc.y(a)ml`` and legacy ``mocha.opts``. Settings understood:
``spec`` and ``ignore``.
"""

from __future__ import annotations

import json
import re

import yaml

from testatlas.domain import Language
from testatlas.exceptions import ConfigParseError
from testatlas.framework import (
    PRIORITY_GENERIC,
    ConfigMatcher,
    ConfigParser,
    ConfigScope,
    ContentMatcher,
    Definition,
    ExcludingContentMatcher,
    ImportMatcher,
)
from testatlas.parsers.shared.jsconfig import JsConfig
from testatlas.parsers.shared.jstest import MOCHA_DIALECT, JsTestParser
from testatlas.parsers.shared.lexer import JAVASCRIPT, strip_comments

FRAMEWORK_NAME = "mocha"

CONFIG_FILES = (
    ".mocharc.cjs",
    ".mocharc.js",
    ".mocharc.json",
    ".mocharc.jsonc",
    ".mocharc.mjs",
    ".mocharc.yaml",
    ".mocharc.yml",
    "mocha.opts",
)

_GLOB_CHARS = re.compile(r"[*?\[{]")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def spec_to_glob(spec: str) -> str:
    """Turn a mocha ``spec`` entry into an include glob.

    Plain directories (``test``) mean "everything below".
    """
    spec = spec.rstrip("/")
    if _GLOB_CHARS.search(spec) or "." in spec.rsplit("/", 1)[-1]:
        return spec
    return f"{spec}/**"


def _as_list(value: object) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [v for v in value if isinstance(v, str)]
    return []


class MochaConfigParser(ConfigParser):
    """Reads every flavour of mocha run-commands file."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        text = content.decode("utf-8", errors="replace")
        if config_path.endswith((".json", ".jsonc")):
            data = self._load_json(config_path, text)
        elif config_path.endswith((".yaml", ".yml")):
            data = self._load_yaml(config_path, text)
        elif config_path.endswith("mocha.opts"):
            data = {}
        else:
            config = JsConfig(text)
            data = {"spec": config.strings("spec") or [], "ignore": config.strings("ignore") or []}
        scope = ConfigScope.from_config(config_path, "", FRAMEWORK_NAME)
        scope.globals_mode = True
        scope.include = [spec_to_glob(s) for s in _as_list(data.get("spec"))]
        scope.exclude = _as_list(data.get("ignore"))
        return scope

    @staticmethod
    def _load_json(config_path: str, text: str) -> dict:
        cleaned = _TRAILING_COMMA.sub(r"\1", strip_comments(text, JAVASCRIPT))
        try:
            data = json.loads(cleaned or "{}")
        except json.JSONDecodeError as exc:
            raise ConfigParseError(f"{config_path}: invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigParseError(f"{config_path}: expected a JSON object")
        return data

    @staticmethod
    def _load_yaml(config_path: str, text: str) -> dict:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigParseError(f"{config_path}: invalid YAML: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigParseError(f"{config_path}: expected a YAML mapping")
        return data


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.TYPESCRIPT, Language.JAVASCRIPT),
        matchers=(
            ImportMatcher("mocha"),
            ConfigMatcher(*CONFIG_FILES),
            ExcludingContentMatcher(
                r"\bjest\.\w+\s*\(",
                r"\bvi\.\w+\s*\(",
                r"\bcy\.\w+\s*\(",
                r"\btest\.describe\s*\(",
            ),
            ContentMatcher(
                r"^\s*(?:describe|context|suite)\s*\(\s*['\"`]",
                r"^\s*(?:it|specify)\s*\(\s*['\"`]",
            ),
        ),
        config_parser=MochaConfigParser(),
        parser=JsTestParser(FRAMEWORK_NAME, MOCHA_DIALECT),
        priority=PRIORITY_GENERIC,
    )
