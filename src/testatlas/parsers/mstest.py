"""MSTest framework definition.

``[TestMethod]`` (optionally with a display name) and ``[DataTestMethod]``
declare tests; each ``[DataRow(...)]`` is one test and ``[DynamicData]``
adds one for its runtime rows. ``[Ignore]`` skips a method or a whole
``[TestClass]``.
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

FRAMEWORK_NAME = "mstest"

RULES = DotnetRules(
    framework=FRAMEWORK_NAME,
    test_attributes=frozenset({"TestMethod", "DataTestMethod"}),
    case_attributes=frozenset({"DataRow"}),
    source_attributes=frozenset({"DynamicData"}),
    ignore_attributes=frozenset({"Ignore"}),
    name_arguments=("DisplayName",),
    positional_name=True,
)


def definition() -> Definition:
    return Definition(
        name=FRAMEWORK_NAME,
        languages=(Language.CSHARP,),
        matchers=(
            ImportMatcher("Microsoft.VisualStudio.TestTools.UnitTesting"),
            ContentMatcher(
                r"\[\s*TestClass\s*\]",
                r"\[\s*(?:Data)?TestMethod\b",
                r"^\s*using\s+Microsoft\.VisualStudio\.TestTools\.UnitTesting\s*;",
            ),
        ),
        parser=DotnetTestParser(RULES),
        priority=PRIORITY_GENERIC,
    )
