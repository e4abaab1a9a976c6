"""RSpec framework definition.

``describe``/``context``/``feature`` blocks are suites, ``it``/``specify``/
``example``/``scenario`` blocks tests. ``x``-prefixed calls and
``skip:``/``:skip`` metadata skip, ``f``-prefixed calls and ``:focus``
focus, ``pending`` marks a test todo, and an ``it`` without a block is
pending too. Loop bodies (``3.times do |i| it ... end``) are reported
once.

Config: ``.rspec`` options (``--default-path``, ``--pattern``,
``--exclude-pattern``) and ``spec_helper.rb``/``rails_helper.rb``, which
root a scope at their directory. Shared helpers under ``spec/support`` are
never tests.
"""

from __future__ import annotations

import posixpath
import shlex

from testatlas.domain import Language, TestFile, TestSuite
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
from testatlas.parsers.shared import decode_source
from testatlas.parsers.shared.lexer import RUBY, mask_source
from testatlas.parsers.shared.ruby import RubyDialect, RubySpecWalker

FRAMEWORK_NAME = "rspec"

CONFIG_FILES = (".rspec", "spec_helper.rb", "rails_helper.rb")

DEFAULT_PATTERN = "**/*_spec.rb"
SUPPORT_EXCLUDE = "**/support/**"

RSPEC_DIALECT = RubyDialect(
    suites=frozenset({
        "describe", "context", "feature", "example_group",
        "shared_examples", "shared_examples_for", "shared_context",
        "xdescribe", "xcontext", "xfeature",
        "fdescribe", "fcontext", "ffeature",
    }),
    tests=frozenset({
        "it", "specify", "example", "scenario", "its",
        "xit", "xspecify", "xexample", "xscenario", "skip",
        "fit", "fspecify", "fexample", "fscenario", "focus",
        "pending",
    }),
    skipped=frozenset({
        "xdescribe", "xcontext", "xfeature",
        "xit", "xspecify", "xexample", "xscenario", "skip",
    }),
    focused=frozenset({
        "fdescribe", "fcontext", "ffeature",
        "fit", "fspecify", "fexample", "fscenario", "focus",
    }),
    todo=frozenset({"pending"}),
)


def parse_options(text: str) -> dict[str, list[str]]:
    """Parse ``.rspec`` command-line options into ``{flag: [values]}``."""
    options: dict[str, list[str]] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        try:
            tokens = shlex.split(line)
        except ValueError:
            tokens = line.split()
        i = 0
        while i < len(tokens):
            token = tokens[i]
            if token.startswith("--") and "=" in token:
                flag, value = token.split("=", 1)
                options.setdefault(flag, []).append(value)
            elif token.startswith("-") and i + 1 < len(tokens) and not tokens[i + 1].startswith("-"):
                options.setdefault(token, []).append(tokens[i + 1])
                i += 1
            else:
                options.setdefault(token, [])
            i += 1
    return options


class RSpecConfigParser(ConfigParser):
    """Builds scopes from ``.rspec`` option files and spec helpers."""

    def parse(self, config_path: str, content: bytes) -> ConfigScope:
        scope = ConfigScope.from_config(config_path, framework=FRAMEWORK_NAME)
        scope.exclude = [SUPPORT_EXCLUDE]
        if posixpath.basename(config_path) != ".rspec":
            scope.include = [DEFAULT_PATTERN]
            return scope
        options = parse_options(content.decode("utf-8", errors="replace"))
        default_path = (options.get("--default-path") or ["spec"])[-1].strip("/")
        patterns = options.get("--pattern") or options.get("-P") or []
        if patterns:
            scope.include = [p for value in patterns for p in value.split(",") if p]
        else:
            scope.include = [f"{default_path}/{DEFAULT_PATTERN}"]
        scope.exclude.extend(options.get("--exclude-pattern", []))
        scope.settings = {"default_path": default_path}
        return scope


class RSpecParser(Parser):
    """Parses ``*_spec.rb`` files."""

    def parse(self, source: bytes, filename: str) -> TestFile:
        text = decode_source(source, filename, FRAMEWORK_NAME)
        ms = mask_source(text, RUBY)
        root = TestSuite(name="", location=ms.location(filename, 0, len(text)))
        RubySpecWalker(ms, filename, RSPEC_DIALECT).walk(0, len(text), root, 0)
        return TestFile(
            path=filename,
            language=Language.RUBY,
            framework=FRAMEWORK_NAME,
            suites=root.suites,
            tests=root.tests,
        )


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.RUBY,),
        matchers=(
            ImportMatcher("rspec", "rspec/", "spec_helper", "rails_helper"),
            ConfigMatcher(*CONFIG_FILES),
            ContentMatcher(
                r"\bRSpec\s*\.\s*(?:describe|configure|shared_examples)\b",
                r"^\s*(?:describe|context)\s+.*\bdo\s*(?:\|[^|]*\|)?\s*$",
                r"\bexpect\s*\(.*\)\s*\.\s*(?:to|not_to)\b",
            ),
        ),
        parser=RSpecParser(),
        config_parser=RSpecConfigParser(),
        priority=PRIORITY_GENERIC,
    )
