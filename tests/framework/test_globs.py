"""Tests for the doublestar glob dialect used by config include/exclude rules."""

from __future__ import annotations

import pytest

from testatlas.framework.globs import match_any, match_glob, normalize


class TestSingleStar:
    """``*`` stays within one path segment."""

    def test_star_matches_within_segment(self) -> None:
        assert match_glob("src/*.ts", "src/app.ts")

    def test_star_does_not_cross_separator(self) -> None:
        assert not match_glob("src/*.ts", "src/nested/app.ts")

    def test_question_mark_is_one_character(self) -> None:
        assert match_glob("src/?.ts", "src/a.ts")
        assert not match_glob("src/?.ts", "src/ab.ts")


class TestDoubleStar:
    """``**`` spans zero or more segments."""

    @pytest.mark.parametrize(
        "path",
        ["app.test.ts", "src/app.test.ts", "src/a/b/c/app.test.ts"],
    )
    def test_leading_doublestar(self, path: str) -> None:
        assert match_glob("**/*.test.ts", path)

    def test_middle_doublestar_matches_zero_segments(self) -> None:
        assert match_glob("src/**/*.spec.ts", "src/x.spec.ts")
        assert match_glob("src/**/*.spec.ts", "src/a/b/x.spec.ts")

    def test_trailing_doublestar(self) -> None:
        assert match_glob("e2e/**", "e2e/login/flow.spec.ts")
        assert not match_glob("e2e/**", "src/e2e.ts")


class TestBracesAndClasses:
    """Alternatives, character classes and extglobs."""

    def test_brace_alternatives(self) -> None:
        pattern = "**/*.{test,spec}.{js,ts}"
        assert match_glob(pattern, "a/b.test.js")
        assert match_glob(pattern, "a/b.spec.ts")
        assert not match_glob(pattern, "a/b.bench.ts")

    def test_character_class_and_negation(self) -> None:
        assert match_glob("v[0-9].ts", "v1.ts")
        assert not match_glob("v[!0-9].ts", "v1.ts")
        assert match_glob("v[!0-9].ts", "vx.ts")

    def test_jest_default_test_match(self) -> None:
        pattern = "**/?(*.)+(spec|test).[jt]s?(x)"
        assert match_glob(pattern, "src/button.test.tsx")
        assert match_glob(pattern, "src/spec.js")
        assert not match_glob(pattern, "src/button.tsx")


class TestBaseNamePatterns:
    """Patterns without ``/`` match the base name only."""

    def test_base_name_pattern_matches_nested_path(self) -> None:
        assert match_glob("test_*.py", "pkg/tests/test_models.py")

    def test_base_name_pattern_rejects_other_names(self) -> None:
        assert not match_glob("test_*.py", "pkg/models_test.py")


class TestHelpers:
    """normalize() and match_any()."""

    def test_normalize_strips_dot_slash_and_backslashes(self) -> None:
        assert normalize("./src\\app.ts") == "src/app.ts"

    def test_empty_pattern_never_matches(self) -> None:
        assert not match_glob("", "anything.ts")

    def test_match_any(self) -> None:
        assert match_any(["*.cy.ts", "**/*.spec.ts"], "e2e/login.spec.ts")
        assert not match_any([], "e2e/login.spec.ts")
