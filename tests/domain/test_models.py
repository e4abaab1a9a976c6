"""Tests for the inventory data model and its JSON wire shape.

Verifies:
    - count_tests() equals an independent flatten of the suite tree.
    - to_dict() -> from_dict() reproduces every node exactly.
    - Wire keys use the camelCase names downstream services expect.
    - Extension lookup covers every language.
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from testatlas.domain import (
    DomainHints,
    Inventory,
    Language,
    Location,
    Test,
    TestFile,
    TestStatus,
    TestSuite,
    language_for_path,
)

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

names = st.text(min_size=1, max_size=30)
statuses = st.sampled_from(list(TestStatus))
modifiers = st.sampled_from(["", "skip", "[Ignore]", "XCTSkip, async"])


@st.composite
def locations(draw: st.DrawFn) -> Location:
    start = draw(st.integers(min_value=1, max_value=500))
    return Location(
        file="src/app.test.ts",
        start_line=start,
        end_line=start + draw(st.integers(min_value=0, max_value=50)),
        start_col=draw(st.integers(min_value=0, max_value=80)),
        end_col=draw(st.integers(min_value=0, max_value=80)),
    )


tests_strategy = st.builds(
    Test, name=names, location=locations(), status=statuses, modifier=modifiers
)

suites_strategy = st.recursive(
    st.builds(
        TestSuite,
        name=names,
        location=locations(),
        status=statuses,
        modifier=modifiers,
        tests=st.lists(tests_strategy, max_size=4),
    ),
    lambda children: st.builds(
        TestSuite,
        name=names,
        location=locations(),
        status=statuses,
        suites=st.lists(children, max_size=3),
        tests=st.lists(tests_strategy, max_size=3),
    ),
    max_leaves=12,
)

files_strategy = st.builds(
    TestFile,
    path=st.just("src/app.test.ts"),
    language=st.sampled_from(list(Language)),
    framework=st.sampled_from(["jest", "vitest", "pytest", "xunit"]),
    suites=st.lists(suites_strategy, max_size=3),
    tests=st.lists(tests_strategy, max_size=3),
    domain_hints=st.one_of(
        st.none(),
        st.builds(
            DomainHints,
            imports=st.lists(names, max_size=3).map(tuple),
            calls=st.lists(names, max_size=3).map(tuple),
        ),
    ),
)


def _flatten(suites: list[TestSuite]) -> int:
    stack = list(suites)
    total = 0
    while stack:
        suite = stack.pop()
        total += len(suite.tests)
        stack.extend(suite.suites)
    return total


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------


class TestTreeProperties:
    """count_tests() and serialization over generated trees."""

    @given(test_file=files_strategy)
    @settings(max_examples=80)
    def test_count_matches_flattened_tree(self, test_file: TestFile) -> None:
        expected = len(test_file.tests) + _flatten(test_file.suites)
        assert test_file.count_tests() == expected

    @given(test_file=files_strategy)
    @settings(max_examples=80)
    def test_dict_round_trip(self, test_file: TestFile) -> None:
        assert TestFile.from_dict(test_file.to_dict()) == test_file


# ---------------------------------------------------------------------------
# Wire shape
# ---------------------------------------------------------------------------


def _sample_file() -> TestFile:
    loc = Location(file="a.test.ts", start_line=1, end_line=9, start_col=1, end_col=3)
    return TestFile(
        path="a.test.ts",
        language=Language.TYPESCRIPT,
        framework="vitest",
        suites=[
            TestSuite(
                name="math",
                location=loc,
                tests=[Test(name="adds", location=loc, status=TestStatus.SKIPPED, modifier="it.skip")],
            )
        ],
        tests=[Test(name="top", location=loc)],
    )


class TestWireShape:
    """The JSON keys are a durable contract."""

    def test_location_keys(self) -> None:
        loc = Location(file="x.py", start_line=3, end_line=4, start_col=5, end_col=6)
        assert loc.to_dict() == {
            "file": "x.py",
            "startLine": 3,
            "endLine": 4,
            "startCol": 5,
            "endCol": 6,
        }

    def test_file_keys(self) -> None:
        data = _sample_file().to_dict()
        assert set(data) == {"path", "language", "framework", "suites", "tests"}
        assert data["language"] == "typescript"
        assert data["suites"][0]["tests"][0]["status"] == "skipped"
        assert data["suites"][0]["tests"][0]["modifier"] == "it.skip"

    def test_modifier_omitted_when_empty(self) -> None:
        data = _sample_file().to_dict()
        assert "modifier" not in data["tests"][0]

    def test_domain_hints_only_when_present(self) -> None:
        test_file = _sample_file()
        assert "domainHints" not in test_file.to_dict()
        test_file.domain_hints = DomainHints(imports=("vitest",), calls=("add",))
        assert test_file.to_dict()["domainHints"] == {"imports": ["vitest"], "calls": ["add"]}

    def test_inventory_round_trip(self) -> None:
        inventory = Inventory(root_path="/repo", files=[_sample_file()])
        data = inventory.to_dict()
        assert data["rootPath"] == "/repo"
        assert Inventory.from_dict(data) == inventory
        assert inventory.count_tests() == 2


class TestLanguageForPath:
    """Extension lookup."""

    def test_known_extensions(self) -> None:
        assert language_for_path("a/b.spec.ts") is Language.TYPESCRIPT
        assert language_for_path("a/b.test.mjs") is Language.JAVASCRIPT
        assert language_for_path("test_x.py") is Language.PYTHON
        assert language_for_path("x_test.go") is Language.GO
        assert language_for_path("FooTest.java") is Language.JAVA
        assert language_for_path("FooSpec.kt") is Language.KOTLIN
        assert language_for_path("FooTests.cs") is Language.CSHARP
        assert language_for_path("foo_spec.rb") is Language.RUBY
        assert language_for_path("lib.rs") is Language.RUST
        assert language_for_path("FooTests.swift") is Language.SWIFT
        assert language_for_path("FooTest.php") is Language.PHP
        assert language_for_path("foo_test.cc") is Language.CPP

    def test_case_insensitive_and_windows_separators(self) -> None:
        assert language_for_path("SRC\\App.TEST.TS") is Language.TYPESCRIPT

    def test_unknown_extension(self) -> None:
        assert language_for_path("README.md") is None
        assert language_for_path("Makefile") is None
