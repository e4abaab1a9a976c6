"""xUnit.net framework definition.

``[Fact]`` methods are single tests. ``[Theory]`` methods yield one test per
``[InlineData]`` row and one for each ``[MemberData]``/``[ClassData]``
source. Attributes ending in ``Fact``/``Theory`` (``[SkippableFact]``,
``[CustomTheory]``) count as their base kind. ``Skip = "..."``
marks a test skipped; ``DisplayName`` renames it.
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

FRAMEWORK_NAME = "xunit"

RULES = DotnetRules(
    framework=FRAMEWORK_NAME,
    test_attributes=frozenset({"Fact", "Theory"}),
    case_attributes=frozenset({"InlineData"}),
    source_attributes=frozenset({"MemberData", "ClassData"}),
    custom_suffixes=("Fact", "Theory"),
    ignore_attributes=frozenset({"Skip"}),
    skip_arguments=("Skip",),
    name_arguments=("DisplayName",),
)


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.CSHARP,),
        matchers=(
            ImportMatcher("Xunit", "Xunit.Abstractions", "Xunit.Sdk"),
            ContentMatcher(
                r"\[\s*(?:Fact|Theory)\s*[\]\(]",
                r"\[\s*(?:InlineData|MemberData|ClassData)\s*\(",
                r"^\s*using\s+Xunit\s*;",
            ),
        ),
        parser=DotnetTestParser(RULES),
        priority=PRIORITY_GENERIC,
    )
