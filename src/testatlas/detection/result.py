"""Detection results, evidence and confidence levels."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from testatlas.framework import ConfigScope

IMPORT_CONFIDENCE = 100
FILENAME_CONFIDENCE = 100
CONFIG_SCOPE_CONFIDENCE = 70

DEFINITE_THRESHOLD = 80
MODERATE_THRESHOLD = 50


class DetectionSource(str, Enum):
    """Which signal decided the framework of a file."""

    IMPORT = "import"
    CONFIG_SCOPE = "config-scope"
    CONTENT_PATTERN = "content-pattern"
    FILENAME = "filename"
    UNKNOWN = "unknown"


class ConfidenceLevel(str, Enum):
    """Coarse bucket of a numeric confidence score."""

    DEFINITE = "definite"
    MODERATE = "moderate"
    WEAK = "weak"
    UNKNOWN = "unknown"

    @classmethod
    def from_score(cls, confidence: int) -> ConfidenceLevel:
        if confidence >= DEFINITE_THRESHOLD:
            return cls.DEFINITE
        if confidence >= MODERATE_THRESHOLD:
            return cls.MODERATE
        if confidence > 0:
            return cls.WEAK
        return cls.UNKNOWN


@dataclass(frozen=True)
class Evidence:
    """One piece of reasoning behind a detection result."""

    source: DetectionSource
    description: str
    confidence: int = 0
    negative: bool = False

    def to_dict(self) -> dict:
        return {
            "source": self.source.value,
            "description": self.description,
            "confidence": self.confidence,
            "negative": self.negative,
        }


@dataclass(frozen=True)
class DetectionResult:
    """The framework chosen for one file and why.

    Attributes:
        framework: Framework name, empty when unknown.
        confidence: Score from 0 to 100.
        source: Signal that decided the result.
        evidence: Evidence collected for the winning framework.
        scope: The governing config scope for ``config-scope`` results.
    """

    framework: str = ""
    confidence: int = 0
    source: DetectionSource = DetectionSource.UNKNOWN
    evidence: tuple[Evidence, ...] = field(default_factory=tuple)
    scope: ConfigScope | None = None

    @classmethod
    def unknown(cls) -> DetectionResult:
        return cls()

    @property
    def config_path(self) -> str:
        return self.scope.config_path if self.scope is not None else ""

    @property
    def level(self) -> ConfidenceLevel:
        return ConfidenceLevel.from_score(self.confidence)

    def is_unknown(self) -> bool:
        return not self.framework or self.source is DetectionSource.UNKNOWN

    def is_detected(self) -> bool:
        return not self.is_unknown()

    def to_dict(self) -> dict:
        data = {
            "framework": self.framework,
            "confidence": self.confidence,
            "level": self.level.value,
            "source": self.source.value,
            "evidence": [e.to_dict() for e in self.evidence],
        }
        if self.config_path:
            data["configPath"] = self.config_path
        return data
