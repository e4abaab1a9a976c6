"""Tests for the JUnit 4, JUnit 5, TestNG and Kotest parsers.

Verifies:
    - Annotated methods become tests; helpers and fields do not.
    - Class-level skips propagate to the methods they contain.
    - @DisplayName renames suites and tests; @Nested classes nest.
    - Kotest DSL calls and string-keyed specs build the suite tree.
"""

from __future__ import annotations

import textwrap

from testatlas.domain import Language, TestStatus
from testatlas.framework import Signal, SignalType
from testatlas.parsers import testng
from testatlas.parsers.junit4 import definition as junit4_definition
from testatlas.parsers.junit5 import definition as junit5_definition
from testatlas.parsers.kotest import KotestParser


def _src(text: str) -> bytes:
    return textwrap.dedent(text).lstrip().encode()


# ---------------------------------------------------------------------------
# JUnit 5
# ---------------------------------------------------------------------------


JUNIT5_JAVA = _src("""
    package com.example;

    import org.junit.jupiter.api.Disabled;
    import org.junit.jupiter.api.DisplayName;
    import org.junit.jupiter.api.Nested;
    import org.junit.jupiter.api.Test;
    import org.junit.jupiter.params.ParameterizedTest;
    import org.junit.jupiter.params.provider.ValueSource;

    @DisplayName("Shopping cart")
    class CartTest {
        private final Cart cart = new Cart();

        @Test
        void addsItem() {
            cart.add("apple");
        }

        @ParameterizedTest
        @ValueSource(ints = {1, 2, 3})
        void counts(int n) {
            assertTrue(n > 0);
        }

        @Test
        @Disabled("flaky")
        void removesItem() {
        }

        void helper() {
        }

        @Nested
        class WhenEmpty {
            @Test
            @DisplayName("reports zero items")
            void isEmpty() {
            }
        }
    }
""")


class TestJUnit5Parser:
    """Jupiter annotations on Java and Kotlin classes."""

    def test_java_class(self) -> None:
        result = junit5_definition().parser.parse(JUNIT5_JAVA, "src/test/java/CartTest.java")
        assert result.framework == "junit5"
        assert result.language is Language.JAVA
        cart = result.suites[0]
        assert cart.name == "Shopping cart"
        assert [t.name for t in cart.tests] == ["addsItem", "counts", "removesItem"]
        assert [s.name for s in cart.suites] == ["WhenEmpty"]
        assert [t.name for t in cart.suites[0].tests] == ["reports zero items"]
        assert result.count_tests() == 4

    def test_disabled_method(self) -> None:
        cart = junit5_definition().parser.parse(JUNIT5_JAVA, "CartTest.java").suites[0]
        removes = cart.tests[2]
        assert removes.status is TestStatus.SKIPPED
        assert removes.modifier == "@Disabled"
        assert cart.tests[0].status is TestStatus.ACTIVE

    def test_disabled_class_skips_methods(self) -> None:
        source = _src("""
            @Disabled
            class LegacyTest {
                @Test void works() {}
            }
        """)
        suite = junit5_definition().parser.parse(source, "LegacyTest.java").suites[0]
        assert suite.status is TestStatus.SKIPPED
        assert suite.tests[0].status is TestStatus.SKIPPED
        assert suite.tests[0].modifier == "@Disabled"

    def test_classes_without_tests_are_dropped(self) -> None:
        source = b"class Util {\n    void x() {}\n}\n"
        assert junit5_definition().parser.parse(source, "Util.java").suites == []

    def test_kotlin_class(self) -> None:
        source = _src("""
            package com.example

            import org.junit.jupiter.api.Disabled
            import org.junit.jupiter.api.Test

            class CalculatorTest {
                private val calc = Calculator()

                @Test
                fun `adds two numbers`() {
                    assertEquals(3, calc.add(1, 2))
                }

                @Disabled
                @Test
                fun subtracts() {
                }

                fun helper() = 1
            }
        """)
        result = junit5_definition().parser.parse(source, "CalculatorTest.kt")
        assert result.language is Language.KOTLIN
        suite = result.suites[0]
        assert suite.name == "CalculatorTest"
        assert [t.name for t in suite.tests] == ["adds two numbers", "subtracts"]
        assert suite.tests[1].status is TestStatus.SKIPPED


# ---------------------------------------------------------------------------
# JUnit 4 and TestNG
# ---------------------------------------------------------------------------


class TestJUnit4Parser:
    """@Test and @Ignore."""

    def test_ignore(self) -> None:
        source = _src("""
            import org.junit.Ignore;
            import org.junit.Test;

            public class LegacyTest {
                @Test
                public void works() {}

                @Ignore("broken")
                @Test
                public void broken() {}
            }
        """)
        suite = junit4_definition().parser.parse(source, "LegacyTest.java").suites[0]
        works, broken = suite.tests
        assert works.status is TestStatus.ACTIVE
        assert broken.status is TestStatus.SKIPPED
        assert broken.modifier == "@Ignore"

    def test_import_matcher_excludes_jupiter(self) -> None:
        definition = junit4_definition()
        assert definition.evaluate(Signal(SignalType.IMPORT, "org.junit.Test")).is_match
        assert not definition.evaluate(Signal(SignalType.IMPORT, "org.junit.jupiter.api.Test")).is_match
        assert junit5_definition().evaluate(
            Signal(SignalType.IMPORT, "org.junit.jupiter.api.Test")
        ).is_match


class TestTestNGParser:
    """Class-level @Test and enabled = false."""

    def test_class_level_test_annotation(self) -> None:
        source = _src("""
            import org.testng.annotations.Test;

            @Test
            public class ApiTest {
                public void listsUsers() {}

                @Test(enabled = false)
                public void deletesUser() {}

                @Test(dataProvider = "ids")
                public void fetchesUser(int id) {}

                private void helper() {}
            }
        """)
        suite = testng.definition().parser.parse(source, "ApiTest.java").suites[0]
        assert [t.name for t in suite.tests] == ["listsUsers", "deletesUser", "fetchesUser"]
        deletes = suite.tests[1]
        assert deletes.status is TestStatus.SKIPPED
        assert deletes.modifier == "enabled=false"


# ---------------------------------------------------------------------------
# Kotest
# ---------------------------------------------------------------------------


class TestKotestParser:
    """Spec styles."""

    def test_fun_spec(self) -> None:
        source = _src("""
            class CartSpec : FunSpec({
                test("adds items") {
                    cart.add("apple") shouldBe true
                }
                context("when empty") {
                    xtest("checks out") { }
                    test("is empty").config(enabled = false) { }
                }
            })
        """)
        result = KotestParser().parse(source, "CartSpec.kt")
        assert result.framework == "kotest"
        spec = result.suites[0]
        assert spec.name == "CartSpec"
        assert [t.name for t in spec.tests] == ["adds items"]
        when_empty = spec.suites[0]
        assert when_empty.name == "when empty"
        checks_out, is_empty = when_empty.tests
        assert checks_out.status is TestStatus.SKIPPED
        assert checks_out.modifier == "xtest"
        assert is_empty.status is TestStatus.SKIPPED
        assert is_empty.modifier == "enabled=false"

    def test_string_and_free_specs(self) -> None:
        source = _src("""
            class MathSpec : StringSpec({
                "adds numbers" {
                    (1 + 2) shouldBe 3
                }
            })

            class TreeSpec : FreeSpec({
                "outer" - {
                    "inner" {
                    }
                }
            })
        """)
        math, tree = KotestParser().parse(source, "Specs.kt").suites
        assert [t.name for t in math.tests] == ["adds numbers"]
        assert [s.name for s in tree.suites] == ["outer"]
        assert [t.name for t in tree.suites[0].tests] == ["inner"]

    def test_specs_without_tests_are_dropped(self) -> None:
        source = b"class EmptySpec : FunSpec({\n})\n"
        assert KotestParser().parse(source, "EmptySpec.kt").suites == []
