"""Declaration helpers shared by the Swift test frameworks."""

from __future__ import annotations

import re

from testatlas.parsers.shared.blocks import Attribute, Member, at_annotations, leading_lines
from testatlas.parsers.shared.lexer import MaskedSource

# Lines that may sit between a declaration and the attributes above it.
DECLARATION_PREFIX = re.compile(
    r"@|(?:public|private|internal|fileprivate|open|final|static|override|"
    r"nonisolated|mutating|required|convenience)\b"
)


def declaration(ms: MaskedSource, member: Member, decl_start: int) -> tuple[int, list[Attribute]]:
    """Start offset and attributes of the declaration at ``decl_start``.

    Swift has no statement terminator, so a member header may also hold
    the tail of earlier declarations; only the attribute lines directly
    above ``decl_start`` belong to it.
    """
    start = leading_lines(ms, member.start, decl_start, DECLARATION_PREFIX)
    return start, at_annotations(ms, start, decl_start)


__all__ = ["DECLARATION_PREFIX", "declaration"]
