"""Helpers shared by the per-framework test parsers."""

from __future__ import annotations

from testatlas.exceptions import ParseError

# Hard cap on suite nesting walked by any parser.
MAX_NESTING_DEPTH = 20


def decode_source(source: bytes | str, filename: str, framework: str) -> str:
    """Decode raw file content for parsing.

    Undecodable bytes are replaced; NUL bytes mark binary content, which
    no test file contains.

    Raises:
        ParseError: If the content looks binary.
    """
    if isinstance(source, str):
        text = source
    else:
        text = source.decode("utf-8", errors="replace")
    if "\x00" in text:
        raise ParseError(framework, filename, "binary content")
    return text.lstrip("\ufeff")


__all__ = ["MAX_NESTING_DEPTH", "decode_source"]
