"""NUnit framework definition.

``[Test]`` methods are single tests, every ``[TestCase(...)]`` row is its
own test (named by ``TestName`` when given) and ``[TestCaseSource]`` adds
one test for the runtime rows. ``[Ignore]``/``[Explicit]`` on a method or a
fixture class marks tests skipped; ``Ignore = "..."`` skips a single case.
"""

from __future__ import annotations

from testatlas.domain import Language
from testatlas.framework import (
    PRIORITY_GENERIC,
    ContentMatcher,
    Definition,
    ImportMatcher,
)
from testatlas.parsers.shared.dotnet import DotnetRules, DotnetTestParser

FRAMEWORK_NAME = "nunit"

RULES = DotnetRules(
    framework=FRAMEWORK_NAME,
    test_attributes=frozenset({"Test", "Theory"}),
    case_attributes=frozenset({"TestCase"}),
    source_attributes=frozenset({"TestCaseSource"}),
    ignore_attributes=frozenset({"Ignore", "Explicit"}),
    skip_arguments=("Ignore", "IgnoreReason"),
    name_arguments=("TestName",),
)


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.CSHARP,),
        matchers=(
            ImportMatcher("NUnit.Framework", "NUnit.Framework.Legacy"),
            ContentMatcher(
                r"\[\s*TestFixture\b",
                r"\[\s*(?:TestCase|TestCaseSource)\s*\(",
                r"^\s*using\s+NUnit\.Framework\s*;",
            ),
        ),
        parser=DotnetTestParser(RULES),
        priority=PRIORITY_GENERIC,
    )
