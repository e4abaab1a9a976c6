"""Detection signals and matcher results.

A ``Signal`` is one typed piece of evidence about a file (an import path, a
config filename, the file content, the file name). ``Matcher`` objects score
signals and answer with a ``MatchResult``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SignalType(str, Enum):
    """Kinds of evidence a matcher can be asked about."""

    IMPORT = "import"
    CONFIG_FILE = "config-file"
    FILE_CONTENT = "file-content"
    FILE_NAME = "file-name"


@dataclass(frozen=True)
class Signal:
    """A typed piece of evidence fed to a matcher.

    Attributes:
        type: Kind of signal.
        value: Import path, config filename or file path.
        content: Decoded file content. Only set for ``FILE_CONTENT``.
    """

    type: SignalType
    value: str
    content: str = ""


NO_CONFIDENCE = 0
DEFINITE_CONFIDENCE = 100


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one matcher evaluation.

    ``negative=True`` means "definitely not this framework" and overrides
    positive results of any other matcher of the same framework.
    """

    confidence: int = NO_CONFIDENCE
    evidence: tuple[str, ...] = ()
    negative: bool = False

    @property
    def is_match(self) -> bool:
        return self.confidence > 0 and not self.negative

    @classmethod
    def no_match(cls) -> MatchResult:
        return cls()

    @classmethod
    def definite(cls, *evidence: str) -> MatchResult:
        return cls(confidence=DEFINITE_CONFIDENCE, evidence=evidence)

    @classmethod
    def partial(cls, confidence: int, *evidence: str) -> MatchResult:
        confidence = max(NO_CONFIDENCE, min(DEFINITE_CONFIDENCE, confidence))
        return cls(confidence=confidence, evidence=evidence)

    @classmethod
    def negative_match(cls, *evidence: str) -> MatchResult:
        return cls(confidence=NO_CONFIDENCE, evidence=evidence, negative=True)
