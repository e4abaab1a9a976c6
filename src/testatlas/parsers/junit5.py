"""JUnit 5 (Jupiter) framework definition, for Java and Kotlin.

Test methods carry ``@Test``, ``@ParameterizedTest``, ``@RepeatedTest``,
``@TestFactory`` or ``@TestTemplate``; ``@Disabled`` skips a method or a
class and ``@DisplayName`` renames either. ``@Nested`` inner classes become
nested suites. Jupiter outranks JUnit 4 so files mixing ``org.junit``
assertions with Jupiter tests resolve to JUnit 5.
"""

from __future__ import annotations

from testatlas.domain import Language
from testatlas.framework import PRIORITY_SPECIALIZED, ContentMatcher, Definition
from testatlas.parsers.shared.jvm import JvmRules, JvmTestParser, PackageImportMatcher

FRAMEWORK_NAME = "junit5"

RULES = JvmRules(
    framework=FRAMEWORK_NAME,
    test_annotations=frozenset({
        "Test",
        "ParameterizedTest",
        "RepeatedTest",
        "TestFactory",
        "TestTemplate",
    }),
    skip_annotations=frozenset({"Disabled"}),
    display_annotation="DisplayName",
)


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.JAVA, Language.KOTLIN),
        matchers=(
            PackageImportMatcher(["org.junit.jupiter"]),
            ContentMatcher(
                r"^\s*import\s+org\.junit\.jupiter\.",
                r"@(?:ParameterizedTest|RepeatedTest|TestFactory|Nested)\b",
            ),
        ),
        parser=JvmTestParser(RULES),
        priority=PRIORITY_SPECIALIZED,
    )
