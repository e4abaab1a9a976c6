"""Framework detection for a single file.

``Detector.detect`` runs a fixed early-return chain, strongest signal
first:

1. **Language gate** -- the file extension decides the language; unknown
   extensions are ``unknown`` immediately. Go files are decided by file
   name alone (``_test.go``) and skip every later step.
2. **Imports** -- the language's import statements are extracted and
   offered to each framework of that language in registry order; the first
   positive match wins (confidence 100).
3. **Config scope** -- the deepest config scope containing the file whose
   framework supports the language wins (confidence 70); equal depths go
   to the lexically smallest config path.
4. **Content patterns** -- each framework's content matchers run over the
   whole file; the first positive match wins with the matcher's own
   confidence. A negative answer removes that framework from the race.
5. Otherwise ``unknown``.

The detector keeps no per-call state. It is safe to call from many worker
threads once its project scope has been set.
"""

from __future__ import annotations

import logging

from testatlas.detection.imports import extract_imports
from testatlas.detection.result import (
    CONFIG_SCOPE_CONFIDENCE,
    DetectionResult,
    DetectionSource,
    Evidence,
)
from testatlas.domain import Language, language_for_path
from testatlas.framework import (
    ConfigScope,
    Definition,
    FrameworkRegistry,
    ProjectScope,
    Signal,
    SignalType,
)
from testatlas.framework.globs import normalize

logger = logging.getLogger(__name__)

# Languages decided purely by file name.
FILENAME_LANGUAGES = frozenset({Language.GO})


def _evidence(source: DetectionSource, result_evidence: tuple[str, ...],
              confidence: int, negative: bool = False) -> tuple[Evidence, ...]:
    return tuple(Evidence(source, text, confidence, negative) for text in result_evidence)


class Detector:
    """Resolves the framework of a file from its path and content.

    Args:
        registry: Framework definitions to choose from.
        project_scope: Config scopes of the scanned project, if known.
    """

    def __init__(self, registry: FrameworkRegistry,
                 project_scope: ProjectScope | None = None) -> None:
        self.registry = registry
        self.project_scope = project_scope

    def set_project_scope(self, project_scope: ProjectScope | None) -> None:
        """Replace the project scope. Must not be called during a scan."""
        self.project_scope = project_scope

    def detect(self, file_path: str, content: bytes | str) -> DetectionResult:
        """Detect the framework of one file.

        Args:
            file_path: Path relative to the scan root.
            content: Raw or decoded file content.

        Returns:
            The detection result; ``DetectionResult.unknown()`` when no
            signal matched.
        """
        path = normalize(file_path)
        language = language_for_path(path)
        if language is None:
            return DetectionResult.unknown()
        definitions = self.registry.find_by_language(language)
        if not definitions:
            return DetectionResult.unknown()

        if language in FILENAME_LANGUAGES:
            return self._from_filename(path, definitions)

        text = content.decode("utf-8", errors="replace") if isinstance(content, bytes) else content

        result = self._from_imports(language, text, definitions)
        if result is not None:
            return result
        result = self._from_config_scope(path, language)
        if result is not None:
            return result
        result = self._from_content(path, text, definitions)
        if result is not None:
            return result
        logger.debug("No framework detected for %s", path)
        return DetectionResult.unknown()

    # ── Signals ─────────────────────────────────────────────────────────

    @staticmethod
    def _from_filename(path: str, definitions: list[Definition]) -> DetectionResult:
        signal = Signal(SignalType.FILE_NAME, path)
        for definition in definitions:
            match = definition.evaluate(signal)
            if match.is_match:
                return DetectionResult(
                    framework=definition.name,
                    confidence=match.confidence,
                    source=DetectionSource.FILENAME,
                    evidence=_evidence(DetectionSource.FILENAME, match.evidence, match.confidence),
                )
        return DetectionResult.unknown()

    @staticmethod
    def _from_imports(language: Language, text: str,
                      definitions: list[Definition]) -> DetectionResult | None:
        imports = extract_imports(language, text)
        if not imports:
            return None
        for definition in definitions:
            for import_path in imports:
                match = definition.evaluate(Signal(SignalType.IMPORT, import_path))
                if match.is_match:
                    return DetectionResult(
                        framework=definition.name,
                        confidence=match.confidence,
                        source=DetectionSource.IMPORT,
                        evidence=_evidence(DetectionSource.IMPORT, match.evidence,
                                           match.confidence),
                    )
        return None

    def _from_config_scope(self, path: str, language: Language) -> DetectionResult | None:
        if not self.project_scope:
            return None

        def accept(scope: ConfigScope) -> bool:
            definition = self.registry.find(scope.framework)
            return definition is not None and definition.supports(language)

        scope = self.project_scope.resolve(path, accept=accept)
        if scope is None:
            return None
        description = f"config: {scope.config_path} (base {scope.base_dir})"
        return DetectionResult(
            framework=scope.framework,
            confidence=CONFIG_SCOPE_CONFIDENCE,
            source=DetectionSource.CONFIG_SCOPE,
            evidence=(Evidence(DetectionSource.CONFIG_SCOPE, description, CONFIG_SCOPE_CONFIDENCE),),
            scope=scope,
        )

    @staticmethod
    def _from_content(path: str, text: str,
                      definitions: list[Definition]) -> DetectionResult | None:
        signal = Signal(SignalType.FILE_CONTENT, path, text)
        for definition in definitions:
            match = definition.evaluate(signal)
            if match.negative:
                logger.debug("%s ruled out for %s: %s", definition.name, path, match.evidence)
                continue
            if match.is_match:
                return DetectionResult(
                    framework=definition.name,
                    confidence=match.confidence,
                    source=DetectionSource.CONTENT_PATTERN,
                    evidence=_evidence(DetectionSource.CONTENT_PATTERN, match.evidence,
                                       match.confidence),
                )
        return None
