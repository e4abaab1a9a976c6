"""Domain-hint extraction: imports and call names of test files."""

from __future__ import annotations

from testatlas.hints.base import DomainHintsExtractor
from testatlas.hints.generic import GenericHintsExtractor, get_extractor, is_noise, normalize_call

__all__ = [
    "DomainHintsExtractor",
    "GenericHintsExtractor",
    "get_extractor",
    "is_noise",
    "normalize_call",
]
