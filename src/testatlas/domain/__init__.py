"""Structural test inventory model: files, suites, tests and locations."""

from __future__ import annotations

from testatlas.domain.languages import EXTENSION_LANGUAGES, language_for_path
from testatlas.domain.models import (
    DomainHints,
    Inventory,
    Language,
    Location,
    Test,
    TestFile,
    TestStatus,
    TestSuite,
)

__all__ = [
    "EXTENSION_LANGUAGES",
    "DomainHints",
    "Inventory",
    "Language",
    "Location",
    "Test",
    "TestFile",
    "TestStatus",
    "TestSuite",
    "language_for_path",
]
