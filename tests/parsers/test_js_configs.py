"""Tests for the JavaScript config parsers (jest, vitest, playwright, cypress, mocha).

Verifies:
    - Literal settings are read from JS/TS sources without evaluating them.
    - Root settings move the scope's base directory.
    - Blocks that merely look like scope settings (coverage) are ignored.
    - Malformed JSON and YAML configs raise ConfigParseError.
"""

from __future__ import annotations

import textwrap

import pytest

from testatlas.exceptions import ConfigParseError
from testatlas.parsers.cypress import CypressConfigParser
from testatlas.parsers.jest import JestConfigParser, resolve_roots
from testatlas.parsers.mocha import MochaConfigParser, spec_to_glob
from testatlas.parsers.playwright import PlaywrightConfigParser
from testatlas.parsers.vitest import VitestConfigParser


def _src(text: str) -> bytes:
    return textwrap.dedent(text).lstrip().encode()


# ---------------------------------------------------------------------------
# Jest
# ---------------------------------------------------------------------------


class TestJestConfig:
    """jest.config.* in source and JSON form."""

    def test_source_config(self) -> None:
        content = _src("""
            module.exports = {
              rootDir: 'src',
              roots: ['<rootDir>/app', 'lib'],
              testMatch: ['**/*.spec.js'],
              coverageThreshold: { global: { branches: 80 } },
            };
        """)
        scope = JestConfigParser().parse("packages/web/jest.config.js", content)
        assert scope.framework == "jest"
        assert scope.base_dir == "packages/web/src"
        assert scope.roots == ["packages/web/src/app", "packages/web/lib"]
        assert scope.include == ["**/*.spec.js"]
        assert scope.globals_mode is True

    def test_inject_globals_false(self) -> None:
        content = b"export default { injectGlobals: false };\n"
        scope = JestConfigParser().parse("jest.config.ts", content)
        assert scope.globals_mode is False
        assert scope.base_dir == "."

    def test_json_config(self) -> None:
        content = b'{"rootDir": "src", "testMatch": ["**/*.test.js"], "injectGlobals": false}'
        scope = JestConfigParser().parse("jest.config.json", content)
        assert scope.base_dir == "src"
        assert scope.include == ["**/*.test.js"]
        assert scope.globals_mode is False

    @pytest.mark.parametrize("content", [b"{not json", b"[1, 2]"])
    def test_bad_json_raises(self, content: bytes) -> None:
        with pytest.raises(ConfigParseError, match="jest.config.json"):
            JestConfigParser().parse("jest.config.json", content)

    def test_resolve_roots(self) -> None:
        assert resolve_roots("jest.config.js", "", ["<rootDir>/src"]) == ["src"]
        assert resolve_roots("app/jest.config.js", "..", ["<rootDir>/shared"]) == ["shared"]


# ---------------------------------------------------------------------------
# Vitest
# ---------------------------------------------------------------------------


class TestVitestConfig:
    """vitest.config.* including projects."""

    def test_root_globals_and_globs(self) -> None:
        content = _src("""
            import { defineConfig } from 'vitest/config'

            export default defineConfig({
              root: 'web',
              test: {
                globals: true,
                include: ['src/**/*.test.ts'],
                exclude: ['src/legacy/**'],
                coverage: { include: ['src/**'] },
              },
            })
        """)
        scope = VitestConfigParser().parse("vitest.config.ts", content)
        assert scope.base_dir == "web"
        assert scope.globals_mode is True
        assert scope.include == ["src/**/*.test.ts"]
        assert scope.exclude == ["src/legacy/**"]
        assert scope.contains("web/src/a/b.test.ts")
        assert not scope.contains("web/src/legacy/old.test.ts")

    def test_globals_default_off(self) -> None:
        scope = VitestConfigParser().parse("vitest.config.ts", b"export default {}\n")
        assert scope.globals_mode is False
        assert scope.include == []

    def test_projects(self) -> None:
        content = _src("""
            export default defineConfig({
              test: {
                projects: [
                  { test: { name: 'unit', root: 'packages/core', include: ['**/*.test.ts'] } },
                  { root: 'packages/ui', test: { name: 'ui', globals: true } },
                ],
              },
            })
        """)
        scope = VitestConfigParser().parse("vitest.config.ts", content)
        assert scope.base_dir == "."
        assert scope.globals_mode is False
        assert [p.name for p in scope.projects] == ["unit", "ui"]
        unit, ui = scope.projects
        assert unit.base_dir == "packages/core"
        assert unit.include == ["**/*.test.ts"]
        assert ui.base_dir == "packages/ui"
        assert ui.globals_mode is True
        assert scope.contains("packages/ui/button.test.tsx")
        assert not scope.contains("tools/script.test.ts")


# ---------------------------------------------------------------------------
# Playwright and Cypress
# ---------------------------------------------------------------------------


class TestPlaywrightConfig:
    """testDir, testMatch and testIgnore."""

    def test_settings(self) -> None:
        content = _src("""
            import { defineConfig, devices } from '@playwright/test';

            export default defineConfig({
              testDir: './tests',
              testMatch: '**/*.e2e.ts',
              testIgnore: ['**/legacy/**'],
              projects: [
                { name: 'chromium', use: { ...devices['Desktop Chrome'] } },
                { name: 'firefox', use: { ...devices['Desktop Firefox'] } },
              ],
            });
        """)
        scope = PlaywrightConfigParser().parse("e2e/playwright.config.ts", content)
        assert scope.framework == "playwright"
        assert scope.base_dir == "e2e/tests"
        assert scope.include == ["**/*.e2e.ts"]
        assert scope.exclude == ["**/legacy/**"]
        assert scope.settings["projects"] == ["chromium", "firefox"]
        assert scope.contains("e2e/tests/login.e2e.ts")
        assert not scope.contains("e2e/login.e2e.ts")


class TestCypressConfig:
    """specPattern per testing type."""

    def test_spec_patterns(self) -> None:
        content = _src("""
            const { defineConfig } = require('cypress')

            module.exports = defineConfig({
              e2e: {
                specPattern: 'cypress/e2e/**/*.cy.{js,ts}',
                excludeSpecPattern: ['**/examples/*'],
              },
              component: {
                specPattern: 'src/**/*.cy.tsx',
              },
            })
        """)
        scope = CypressConfigParser().parse("cypress.config.js", content)
        assert scope.include == ["cypress/e2e/**/*.cy.{js,ts}", "src/**/*.cy.tsx"]
        assert scope.exclude == ["**/examples/*"]
        assert scope.globals_mode is True
        assert scope.contains("cypress/e2e/todo.cy.ts")
        assert not scope.contains("cypress/e2e/examples/demo.cy.ts")


# ---------------------------------------------------------------------------
# Mocha
# ---------------------------------------------------------------------------


class TestMochaConfig:
    """.mocharc in its JSON, YAML and JS flavours."""

    def test_spec_to_glob(self) -> None:
        assert spec_to_glob("test") == "test/**"
        assert spec_to_glob("test/") == "test/**"
        assert spec_to_glob("test/**/*.spec.js") == "test/**/*.spec.js"
        assert spec_to_glob("test/setup.js") == "test/setup.js"

    def test_jsonc_with_comments_and_trailing_comma(self) -> None:
        content = _src("""
            {
              // run unit specs
              "spec": ["test/unit", "test/**/*.spec.js"],
              "ignore": "test/fixtures/**",
            }
        """)
        scope = MochaConfigParser().parse(".mocharc.jsonc", content)
        assert scope.include == ["test/unit/**", "test/**/*.spec.js"]
        assert scope.exclude == ["test/fixtures/**"]
        assert scope.globals_mode is True

    def test_yaml(self) -> None:
        content = b"spec: test\nignore:\n  - test/tmp/**\n"
        scope = MochaConfigParser().parse("api/.mocharc.yml", content)
        assert scope.base_dir == "api"
        assert scope.include == ["test/**"]
        assert scope.exclude == ["test/tmp/**"]

    def test_empty_yaml(self) -> None:
        scope = MochaConfigParser().parse(".mocharc.yaml", b"")
        assert scope.include == []

    def test_js_source(self) -> None:
        content = b"module.exports = { spec: 'spec/**/*.js', ignore: ['spec/slow/**'] };\n"
        scope = MochaConfigParser().parse(".mocharc.js", content)
        assert scope.include == ["spec/**/*.js"]
        assert scope.exclude == ["spec/slow/**"]

    @pytest.mark.parametrize(
        ("path", "content"),
        [
            (".mocharc.json", b"{broken"),
            (".mocharc.yml", b"spec: [unclosed\n"),
            (".mocharc.yml", b"- just\n- a list\n"),
        ],
    )
    def test_malformed_config_raises(self, path: str, content: bytes) -> None:
        with pytest.raises(ConfigParseError):
            MochaConfigParser().parse(path, content)
