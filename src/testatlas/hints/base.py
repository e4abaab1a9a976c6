"""Contract for domain-hint extractors.

Domain hints are the imports and call names of a test file, trimmed of
test-framework vocabulary. They give downstream consumers (classification,
ownership and search) a cheap summary of *what* a test exercises without
shipping the whole source.

Every extractor implements ``DomainHintsExtractor``:

- ``extract(content)`` -- return ``DomainHints`` for the decoded file
  content, or None when the content cannot be read or holds neither
  imports nor calls.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from testatlas.domain import DomainHints, Language


class DomainHintsExtractor(ABC):
    """Abstract base class for per-language domain-hint extractors.

    Attributes:
        language: Source language the extractor understands.
    """

    language: Language

    @abstractmethod
    def extract(self, content: str) -> DomainHints | None:
        """Extract domain hints from one file.

        Args:
            content: Decoded file content.

        Returns:
            The hints, or None when nothing useful was found.
        """
