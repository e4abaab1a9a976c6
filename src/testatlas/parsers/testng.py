"""TestNG framework definition.

``@Test`` marks test methods; ``@Test(enabled = false)`` disables one. A
class-level ``@Test`` turns every public method of the class into a test.
Data-provider tests count once.
"""

from __future__ import annotations

from testatlas.domain import Language
from testatlas.framework import PRIORITY_GENERIC, ContentMatcher, Definition
from testatlas.parsers.shared.jvm import JvmRules, JvmTestParser, PackageImportMatcher

FRAMEWORK_NAME = "testng"

RULES = JvmRules(
    framework=FRAMEWORK_NAME,
    test_annotations=frozenset({"Test"}),
    skip_annotations=frozenset({"Ignore"}),
    disabled_argument="enabled",
    class_level_tests=True,
)


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.JAVA,),
        matchers=(
            PackageImportMatcher(["org.testng"]),
            ContentMatcher(
                r"^\s*import\s+org\.testng\.",
                r"@Test\s*\(\s*(?:dataProvider|groups|enabled)\s*=",
            ),
        ),
        parser=JvmTestParser(RULES),
        priority=PRIORITY_GENERIC,
    )
