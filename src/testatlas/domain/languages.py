"""File-extension to language mapping."""

from __future__ import annotations

import posixpath

from testatlas.domain.models import Language

EXTENSION_LANGUAGES: dict[str, Language] = {
    ".ts": Language.TYPESCRIPT,
    ".tsx": Language.TYPESCRIPT,
    ".mts": Language.TYPESCRIPT,
    ".cts": Language.TYPESCRIPT,
    ".js": Language.JAVASCRIPT,
    ".jsx": Language.JAVASCRIPT,
    ".mjs": Language.JAVASCRIPT,
    ".cjs": Language.JAVASCRIPT,
    ".py": Language.PYTHON,
    ".go": Language.GO,
    ".java": Language.JAVA,
    ".kt": Language.KOTLIN,
    ".kts": Language.KOTLIN,
    ".cs": Language.CSHARP,
    ".rb": Language.RUBY,
    ".rs": Language.RUST,
    ".swift": Language.SWIFT,
    ".php": Language.PHP,
    ".cc": Language.CPP,
    ".cpp": Language.CPP,
    ".cxx": Language.CPP,
    ".c++": Language.CPP,
}


def language_for_path(path: str) -> Language | None:
    """Return the language of ``path`` from its extension, or None."""
    _, ext = posixpath.splitext(path.replace("\\", "/"))
    return EXTENSION_LANGUAGES.get(ext.lower())
