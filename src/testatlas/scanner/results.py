"""Scan output envelopes: per-file results, errors, stats and the batch result."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from testatlas.detection import ConfidenceLevel
from testatlas.domain import Inventory, TestFile


class ScanPhase(str, Enum):
    """Stage of a scan in which a non-fatal error occurred."""

    DISCOVERY = "discovery"
    CONFIG_PARSE = "config-parse"
    DETECTION = "detection"
    PARSING = "parsing"


@dataclass(frozen=True)
class ScanError:
    """A non-fatal error tied to one path (or to no path) and a phase."""

    error: BaseException
    path: str
    phase: ScanPhase

    def __str__(self) -> str:
        if not self.path:
            return f"[{self.phase.value}] {self.error}"
        return f"[{self.phase.value}] {self.path}: {self.error}"

    def to_dict(self) -> dict:
        return {"path": self.path, "phase": self.phase.value, "error": str(self.error)}


@dataclass(frozen=True)
class FileResult:
    """Outcome for one discovered file in a streaming scan.

    Exactly one of three shapes:

    - ``file`` set: the file was detected and parsed;
    - ``error`` set: discovery, detection or parsing failed;
    - neither set: no framework matched and the file was skipped.

    Attributes:
        path: File path relative to the root; empty for discovery errors
            not tied to a file.
        confidence: Confidence level of the detection (``definite``,
            ``moderate``, ``weak``, ``unknown``); empty when the file was
            never detected.
    """

    path: str
    file: TestFile | None = None
    error: ScanError | None = None
    confidence: str = ""

    @property
    def skipped(self) -> bool:
        return self.file is None and self.error is None


def _empty_distribution() -> dict[str, int]:
    return {level.value: 0 for level in ConfidenceLevel}


@dataclass
class ScanStats:
    """Counters collected by a batch scan.

    ``files_skipped`` is derived: scanned minus matched minus failed.
    """

    files_scanned: int = 0
    files_matched: int = 0
    files_failed: int = 0
    files_skipped: int = 0
    configs_found: int = 0
    confidence_dist: dict[str, int] = field(default_factory=_empty_distribution)
    duration: float = 0.0

    def to_dict(self) -> dict:
        return {
            "filesScanned": self.files_scanned,
            "filesMatched": self.files_matched,
            "filesFailed": self.files_failed,
            "filesSkipped": self.files_skipped,
            "configsFound": self.configs_found,
            "confidenceDist": dict(self.confidence_dist),
            "duration": round(self.duration, 6),
        }


@dataclass
class ScanResult:
    """Inventory, non-fatal errors and stats of one batch scan."""

    inventory: Inventory
    errors: list[ScanError] = field(default_factory=list)
    stats: ScanStats = field(default_factory=ScanStats)
