"""Data model for parsed test inventories.

A scan produces one ``TestFile`` per recognised test file. Each file holds
top-level ``Test`` entries and a tree of ``TestSuite`` nodes; suites nest
suites and tests, tests are always leaves. The whole structure is created by
a single parser call and is not mutated afterwards.

The JSON shape produced by ``to_dict()`` is the wire contract consumed by
downstream services::

    {
      "path": "src/app.test.ts",
      "language": "typescript",
      "framework": "vitest",
      "suites": [{"name": ..., "status": ..., "location": {...}, ...}],
      "tests": [{"name": ..., "status": ..., "location": {...}}]
    }

``from_dict()`` on every type reverses it exactly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Language(str, Enum):
    """Programming languages a test file can be written in."""

    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    GO = "go"
    JAVA = "java"
    KOTLIN = "kotlin"
    CSHARP = "csharp"
    RUBY = "ruby"
    RUST = "rust"
    SWIFT = "swift"
    PHP = "php"
    CPP = "cpp"


class TestStatus(str, Enum):
    """Execution status a test or suite is declared with."""

    ACTIVE = "active"
    SKIPPED = "skipped"
    FOCUSED = "focused"
    TODO = "todo"
    XFAIL = "xfail"


@dataclass(frozen=True)
class Location:
    """Source span of a suite or test (1-based lines and columns)."""

    file: str
    start_line: int
    end_line: int
    start_col: int = 0
    end_col: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "startCol": self.start_col,
            "endCol": self.end_col,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Location:
        return cls(
            file=data.get("file", ""),
            start_line=int(data.get("startLine", 0)),
            end_line=int(data.get("endLine", 0)),
            start_col=int(data.get("startCol", 0)),
            end_col=int(data.get("endCol", 0)),
        )


@dataclass(frozen=True)
class Test:
    """A single test case (``it``, ``test``, ``[Fact]``, ``func TestXxx``).

    Attributes:
        name: Test description or method/function name.
        location: Where the test is declared.
        status: Declared status (skipped, focused, ...).
        modifier: Original framework marker text, e.g. ``"[Ignore]"`` or
            ``"XCTSkip, async"``. Empty when the test carries none.
    """

    name: str
    location: Location
    status: TestStatus = TestStatus.ACTIVE
    modifier: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "location": self.location.to_dict(),
        }
        if self.modifier:
            data["modifier"] = self.modifier
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Test:
        return cls(
            name=data["name"],
            status=TestStatus(data.get("status", TestStatus.ACTIVE.value)),
            modifier=data.get("modifier", ""),
            location=Location.from_dict(data.get("location", {})),
        )


@dataclass
class TestSuite:
    """A group of tests (``describe``, test class, ``mod tests``).

    Suites form a strict tree. Parsers bound the nesting depth they
    descend into (see ``MAX_NESTING_DEPTH`` in ``testatlas.parsers.shared``).
    """

    name: str
    location: Location
    status: TestStatus = TestStatus.ACTIVE
    modifier: str = ""
    suites: list[TestSuite] = field(default_factory=list)
    tests: list[Test] = field(default_factory=list)

    def count_tests(self) -> int:
        """Return the number of tests in this suite and all nested suites."""
        return len(self.tests) + sum(s.count_tests() for s in self.suites)

    def is_empty(self) -> bool:
        return not self.tests and not self.suites

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "location": self.location.to_dict(),
        }
        if self.modifier:
            data["modifier"] = self.modifier
        if self.suites:
            data["suites"] = [s.to_dict() for s in self.suites]
        if self.tests:
            data["tests"] = [t.to_dict() for t in self.tests]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestSuite:
        return cls(
            name=data["name"],
            status=TestStatus(data.get("status", TestStatus.ACTIVE.value)),
            modifier=data.get("modifier", ""),
            location=Location.from_dict(data.get("location", {})),
            suites=[cls.from_dict(s) for s in data.get("suites", [])],
            tests=[Test.from_dict(t) for t in data.get("tests", [])],
        )


@dataclass(frozen=True)
class DomainHints:
    """Imports and call names extracted from a test file for downstream use."""

    imports: tuple[str, ...] = ()
    calls: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"imports": list(self.imports), "calls": list(self.calls)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DomainHints:
        return cls(
            imports=tuple(data.get("imports", [])),
            calls=tuple(data.get("calls", [])),
        )


@dataclass
class TestFile:
    """All suites and tests parsed from one source file.

    Attributes:
        path: Path relative to the scanned root, ``/``-separated.
        language: Source language of the file.
        framework: Name of the detected framework definition.
        suites: Top-level suites.
        tests: Tests declared outside any suite.
        domain_hints: Optional hints, present only when extraction was
            requested.
    """

    path: str
    language: Language
    framework: str
    suites: list[TestSuite] = field(default_factory=list)
    tests: list[Test] = field(default_factory=list)
    domain_hints: DomainHints | None = None

    def count_tests(self) -> int:
        """Return the number of tests in the file, suites included."""
        return len(self.tests) + sum(s.count_tests() for s in self.suites)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "path": self.path,
            "language": self.language.value,
            "framework": self.framework,
            "suites": [s.to_dict() for s in self.suites],
            "tests": [t.to_dict() for t in self.tests],
        }
        if self.domain_hints is not None:
            data["domainHints"] = self.domain_hints.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TestFile:
        hints = data.get("domainHints")
        return cls(
            path=data["path"],
            language=Language(data["language"]),
            framework=data["framework"],
            suites=[TestSuite.from_dict(s) for s in data.get("suites", [])],
            tests=[Test.from_dict(t) for t in data.get("tests", [])],
            domain_hints=DomainHints.from_dict(hints) if hints else None,
        )


@dataclass
class Inventory:
    """Every parsed test file of a scanned tree."""

    root_path: str
    files: list[TestFile] = field(default_factory=list)

    def count_tests(self) -> int:
        """Return the total number of tests across all files."""
        return sum(f.count_tests() for f in self.files)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rootPath": self.root_path,
            "files": [f.to_dict() for f in self.files],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Inventory:
        return cls(
            root_path=data.get("rootPath", ""),
            files=[TestFile.from_dict(f) for f in data.get("files", [])],
        )
