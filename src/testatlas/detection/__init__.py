"""Per-file framework detection."""

from testatlas.detection.detector import FILENAME_LANGUAGES, Detector
from testatlas.detection.imports import extract_imports
from testatlas.detection.result import (
    ConfidenceLevel,
    DetectionResult,
    DetectionSource,
    Evidence,
)

__all__ = [
    "FILENAME_LANGUAGES",
    "ConfidenceLevel",
    "DetectionResult",
    "DetectionSource",
    "Detector",
    "Evidence",
    "extract_imports",
]
