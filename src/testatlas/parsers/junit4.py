"""JUnit 4 framework definition.

``@Test`` methods are tests and ``@Ignore`` skips a method or a whole
class. Imports from ``org.junit`` (outside the Jupiter and Platform
packages, which belong to JUnit 5) identify the framework.
"""

from __future__ import annotations

from testatlas.domain import Language
from testatlas.framework import PRIORITY_GENERIC, ContentMatcher, Definition
from testatlas.parsers.shared.jvm import JvmRules, JvmTestParser, PackageImportMatcher

FRAMEWORK_NAME = "junit4"

RULES = JvmRules(
    framework=FRAMEWORK_NAME,
    test_annotations=frozenset({"Test"}),
    skip_annotations=frozenset({"Ignore"}),
)


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.JAVA,),
        matchers=(
            PackageImportMatcher(
                ["org.junit", "junit.framework"],
                exclude=["org.junit.jupiter", "org.junit.platform"],
            ),
            ContentMatcher(
                r"^\s*import\s+org\.junit\.(?:Test|Ignore|Before|After|Assert)\b",
                r"@RunWith\s*\(",
            ),
        ),
        parser=JvmTestParser(RULES),
        priority=PRIORITY_GENERIC,
    )
