"""Framework definitions, matchers, the registry and config scopes."""

from __future__ import annotations

from testatlas.framework.definition import (
    PRIORITY_E2E,
    PRIORITY_GENERIC,
    PRIORITY_SPECIALIZED,
    ConfigParser,
    Definition,
    Matcher,
    Parser,
)
from testatlas.framework.matchers import (
    ConfigMatcher,
    ContentMatcher,
    ExcludingContentMatcher,
    FileNameMatcher,
    ImportMatcher,
)
from testatlas.framework.registry import FrameworkRegistry
from testatlas.framework.scope import ConfigScope, ProjectScope, SubProject
from testatlas.framework.signals import MatchResult, Signal, SignalType

__all__ = [
    "PRIORITY_E2E",
    "PRIORITY_GENERIC",
    "PRIORITY_SPECIALIZED",
    "ConfigMatcher",
    "ConfigParser",
    "ConfigScope",
    "ContentMatcher",
    "Definition",
    "ExcludingContentMatcher",
    "FileNameMatcher",
    "FrameworkRegistry",
    "ImportMatcher",
    "MatchResult",
    "Matcher",
    "Parser",
    "ProjectScope",
    "Signal",
    "SignalType",
    "SubProject",
]
