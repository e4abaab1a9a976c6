"""Tests for per-language import extraction."""

from __future__ import annotations

import pytest

from testatlas.detection import extract_imports
from testatlas.domain import Language


class TestJavaScriptImports:

    def test_statement_forms_in_source_order(self) -> None:
        content = (
            "import a from 'x'\n"
            'import type { B } from "y"\n'
            "import 'polyfill'\n"
            "const z = require('z')\n"
            "export * from './w'\n"
            "const lazy = await import('m')\n"
        )
        assert extract_imports(Language.TYPESCRIPT, content) == [
            "x", "y", "polyfill", "z", "./w", "m",
        ]

    def test_commented_imports_are_ignored(self) -> None:
        content = "// import a from 'jest'\n/* require('mocha') */\nimport { it } from 'vitest'\n"
        assert extract_imports(Language.JAVASCRIPT, content) == ["vitest"]

    def test_duplicates_collapse(self) -> None:
        content = "import { a } from 'vitest'\nimport { b } from 'vitest'\n"
        assert extract_imports(Language.TYPESCRIPT, content) == ["vitest"]


class TestPythonImports:

    def test_import_and_from_forms(self) -> None:
        content = "import os, sys\nfrom a.b import (c,\n    d)\n# import hidden\n"
        assert extract_imports(Language.PYTHON, content) == ["os", "sys", "a.b"]

    def test_mock_only_drops_unittest(self) -> None:
        assert extract_imports(Language.PYTHON, "from unittest import mock\n") == ["unittest.mock"]
        assert extract_imports(Language.PYTHON, "from unittest.mock import patch\n") == [
            "unittest.mock"
        ]

    def test_real_unittest_is_kept(self) -> None:
        content = "import unittest\nfrom unittest import mock\n"
        assert extract_imports(Language.PYTHON, content) == ["unittest", "unittest.mock"]


class TestOtherLanguages:

    def test_go_block_and_single(self) -> None:
        content = (
            'import "fmt"\n'
            "import (\n"
            '\t"testing"\n'
            '\tassert "github.com/stretchr/testify/assert"\n'
            ")\n"
        )
        assert extract_imports(Language.GO, content) == [
            "fmt", "testing", "github.com/stretchr/testify/assert",
        ]

    def test_jvm_static_and_wildcard(self) -> None:
        content = (
            "import static org.junit.Assert.assertEquals;\n"
            "import org.junit.jupiter.api.*;\n"
        )
        assert extract_imports(Language.JAVA, content) == [
            "org.junit.Assert.assertEquals", "org.junit.jupiter.api",
        ]

    def test_csharp_aliases_are_ignored(self) -> None:
        content = "using Xunit;\nusing Foo = Bar.Baz;\nglobal using static NUnit.Framework.Assert;\n"
        assert extract_imports(Language.CSHARP, content) == ["Xunit", "NUnit.Framework.Assert"]

    def test_ruby_requires(self) -> None:
        content = 'require "rspec"\nrequire_relative "../support/helpers.rb"\n'
        assert extract_imports(Language.RUBY, content) == ["rspec", "helpers"]

    @pytest.mark.parametrize(
        ("language", "content", "expected"),
        [
            (Language.RUST, "use proptest::prelude::*;\nextern crate rstest;\n", ["proptest::prelude", "rstest"]),
            (Language.SWIFT, "@testable import App\nimport XCTest\n", ["App", "XCTest"]),
            (Language.PHP, "use PHPUnit\\Framework\\TestCase;\n", ["PHPUnit\\Framework\\TestCase"]),
            (Language.CPP, "#include <gtest/gtest.h>\n#include \"util.h\"\n", ["gtest/gtest.h", "util.h"]),
        ],
    )
    def test_single_statement_languages(
        self, language: Language, content: str, expected: list[str]
    ) -> None:
        assert extract_imports(language, content) == expected
