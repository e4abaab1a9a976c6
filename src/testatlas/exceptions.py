"""testatlas exception hierarchy.

All public exceptions inherit from TestAtlasError, giving callers a single
base class to catch when they want to handle any testatlas-specific failure
without swallowing unrelated errors.
"""

from __future__ import annotations

from typing import Any


class TestAtlasError(Exception):
    """Base exception for all testatlas errors."""


class ParseError(TestAtlasError):
    """Raised when a framework parser cannot parse a test file.

    The message always names the framework and the file path so the error
    is actionable without a traceback.
    """

    def __init__(self, framework: str, path: str, reason: str) -> None:
        super().__init__(f"{framework} parser: failed to parse {path}: {reason}")
        self.framework = framework
        self.path = path
        self.reason = reason


class ConfigParseError(TestAtlasError):
    """Raised when a framework config file cannot be interpreted."""


class SourceError(TestAtlasError):
    """Raised for failures reading from a ``Source``."""


class InvalidPathError(SourceError):
    """Raised when a path is invalid or escapes the source root."""


class GitCloneError(SourceError):
    """Raised when a shallow git clone fails."""


class ScanAbortedError(TestAtlasError):
    """Raised when a whole scan is aborted.

    Carries the partial ``ScanResult`` collected before the abort on
    ``result`` so callers can still report what was found.
    """

    def __init__(self, message: str, result: Any = None) -> None:
        super().__init__(message)
        self.result = result


class ScanCancelledError(ScanAbortedError):
    """Raised when a scan is cancelled through its ``ScanContext``."""

    def __init__(self, result: Any = None) -> None:
        super().__init__("scanner: scan cancelled", result)


class ScanTimeoutError(ScanAbortedError):
    """Raised when a scan exceeds its timeout."""

    def __init__(self, result: Any = None) -> None:
        super().__init__("scanner: scan timeout", result)
