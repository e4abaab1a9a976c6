"""Declaration splitting for brace-structured languages.

Class-based test frameworks (JUnit, xUnit, NUnit, XCTest, PHPUnit, cargo
test, GoogleTest ...) all declare tests as *members* of a braced body: a
header of attributes/annotations and a signature, followed by a body block
or a terminating ``;``. ``members()`` cuts a region of masked source into
those declarations without understanding the language grammar::

    [Theory]                          <- header start
    [InlineData(1, 2)]
    public void Adds(int a, int b)    <- header end at the "{"
    { ... }                           <- body_open .. body_close

Attributes are then read from the header with ``bracket_attributes`` (C#,
PHP 8, Rust) or ``at_annotations`` (Java, Kotlin, Swift).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from testatlas.parsers.shared.lexer import MaskedSource

_AT_ANNOTATION = re.compile(r"(?<![\w.])@([A-Za-z_][\w]*(?:\s*\.\s*[A-Za-z_]\w*)*)")
_ATTRIBUTE_NAME = re.compile(r"\s*(?:(?:assembly|module|method|type|return)\s*:\s*)?"
                             r"([A-Za-z_][\w]*(?:\s*(?:\.|::)\s*[A-Za-z_]\w*)*)\s*")
_NAME_BEFORE_PAREN = re.compile(r"(@?)([A-Za-z_]\w*)\s*(?:<[^()]*>)?\s*$")
_NAMED_ARG = re.compile(r"\s*([A-Za-z_]\w*)\s*[=:]\s*(?![=:])")
_WS = re.compile(r"\s+")

_NOT_METHODS = frozenset({
    "if", "for", "foreach", "while", "switch", "catch", "using", "lock",
    "return", "new", "nameof", "typeof", "sizeof", "default", "base", "this",
    "super", "throw", "when", "fixed",
})


@dataclass(frozen=True)
class Member:
    """One declaration inside a braced region.

    Attributes:
        start: First non-blank offset of the declaration (its attributes).
        header_end: Offset of the body ``{`` or of the terminator.
        body_open: Offset of the body ``{``, if the member has one.
        body_close: Offset of the matching ``}``.
    """

    start: int
    header_end: int
    body_open: int | None = None
    body_close: int | None = None

    @property
    def end(self) -> int:
        """Offset just past the declaration."""
        if self.body_close is not None:
            return self.body_close + 1
        return self.header_end

    def header(self, ms: MaskedSource) -> str:
        return ms.masked[self.start:self.header_end]


@dataclass(frozen=True)
class Attribute:
    """An attribute or annotation such as ``[InlineData(1, 2)]`` or ``@Test``.

    ``name`` is the last component of the written name with any
    ``Attribute`` suffix kept; callers normalize as they need.
    """

    name: str
    qualified: str
    start: int
    end: int
    args_open: int | None = None
    args_close: int | None = None

    def text(self, ms: MaskedSource) -> str:
        return ms.slice(self.start, self.end)

    def arguments(self, ms: MaskedSource) -> list[tuple[int, int]]:
        """Spans of the top-level, comma-separated arguments."""
        if self.args_open is None or self.args_close is None:
            return []
        return split_arguments(ms, self.args_open, self.args_close)

    def named(self, ms: MaskedSource, key: str) -> str | None:
        """Value of the named argument ``key`` (``Key = value``/``key: value``).

        String literals yield their value, anything else the raw text.
        """
        for start, end in self.arguments(ms):
            m = _NAMED_ARG.match(ms.masked, start, end)
            if m is None or m.group(1) != key:
                continue
            literal = ms.string_after(m.end(), end)
            if literal is not None:
                return literal.value
            return ms.slice(m.end(), end).strip()
        return None

    def has_named(self, ms: MaskedSource, key: str) -> bool:
        return self.named(ms, key) is not None

    def positional(self, ms: MaskedSource) -> list[tuple[int, int]]:
        return [
            span for span in self.arguments(ms)
            if _NAMED_ARG.match(ms.masked, span[0], span[1]) is None
        ]

    def first_literal(self, ms: MaskedSource) -> str | None:
        """Value of the first positional argument if it is a string literal."""
        positional = self.positional(ms)
        if not positional:
            return None
        start, end = positional[0]
        literal = ms.string_after(start, end)
        return literal.value if literal is not None else None


def split_arguments(ms: MaskedSource, open_offset: int, close_offset: int) -> list[tuple[int, int]]:
    """Split the bracketed list at ``open_offset`` on top-level commas."""
    spans: list[tuple[int, int]] = []
    masked = ms.masked
    start = open_offset + 1
    pos = start
    while pos < close_offset:
        ch = masked[pos]
        if ch in "([{":
            pos = ms.closing(pos) + 1
            continue
        if ch == ",":
            if masked[start:pos].strip():
                spans.append((start, pos))
            start = pos + 1
        pos += 1
    if masked[start:close_offset].strip():
        spans.append((start, close_offset))
    return spans


def members(ms: MaskedSource, start: int, end: int) -> list[Member]:
    """Cut ``[start, end)`` into member declarations.

    A member ends at its body block or at a ``;``. Bracketed groups in the
    header (attribute lists, parameter lists) are skipped whole.
    """
    out: list[Member] = []
    masked = ms.masked
    pos = ms.skip_ws(start, end)
    seg = pos
    while pos < end:
        ch = masked[pos]
        if ch in "([":
            pos = ms.closing(pos) + 1
            continue
        if ch == "{":
            close = min(ms.closing(pos), end)
            out.append(Member(seg, pos, pos, close))
            pos = ms.skip_ws(close + 1, end)
            seg = pos
            continue
        if ch == ";":
            if masked[seg:pos].strip():
                out.append(Member(seg, pos))
            pos = ms.skip_ws(pos + 1, end)
            seg = pos
            continue
        pos += 1
    if seg < end and masked[seg:end].strip():
        out.append(Member(seg, end))
    return out


def signature(ms: MaskedSource, start: int, end: int) -> tuple[str, int] | None:
    """Name and parameter-list offset of the first call-shaped signature.

    Attribute brackets and ``@Annotation(...)`` argument lists are skipped,
    so in ``@Test void adds(int a)`` the result is ``("adds", <offset>)``.
    """
    masked = ms.masked
    pos = start
    while pos < end:
        ch = masked[pos]
        if ch == "[":
            pos = ms.closing(pos) + 1
            continue
        if ch == "(":
            m = _NAME_BEFORE_PAREN.search(masked, start, pos)
            if m is not None and not m.group(1) and m.group(2) not in _NOT_METHODS:
                return m.group(2), pos
            pos = ms.closing(pos) + 1
            continue
        pos += 1
    return None


def bracket_attributes(ms: MaskedSource, start: int, end: int, prefix: str = "") -> list[Attribute]:
    """Attributes written in brackets: ``[A, B(x)]`` or ``#[a(x)]``.

    Args:
        ms: Masked source.
        start: Region start (usually a member header).
        end: Region end.
        prefix: Text that must precede ``[``, ``"#"`` for Rust and PHP.

    Returns:
        Attributes in source order.
    """
    attributes: list[Attribute] = []
    masked = ms.masked
    pos = start
    while pos < end:
        ch = masked[pos]
        if ch == "(":
            pos = ms.closing(pos) + 1
            continue
        if ch != "[" or (prefix and masked[pos - len(prefix):pos] != prefix):
            pos += 1
            continue
        close = ms.closing(pos)
        for item_start, item_end in split_arguments(ms, pos, close):
            attribute = _bracket_item(ms, item_start, item_end)
            if attribute is not None:
                attributes.append(attribute)
        pos = close + 1
    return attributes


def _bracket_item(ms: MaskedSource, start: int, end: int) -> Attribute | None:
    m = _ATTRIBUTE_NAME.match(ms.masked, start, end)
    if m is None:
        return None
    qualified = _WS.sub("", m.group(1))
    name = re.split(r"\.|::", qualified)[-1]
    args_open = args_close = None
    if m.end() < end and ms.masked[m.end()] == "(":
        args_open = m.end()
        args_close = ms.closing(args_open)
    begin = ms.skip_ws(start, end)
    return Attribute(name, qualified, begin, end, args_open, args_close)


def at_annotations(ms: MaskedSource, start: int, end: int) -> list[Attribute]:
    """``@Name`` / ``@Name(args)`` annotations in ``[start, end)``."""
    annotations: list[Attribute] = []
    pos = start
    while True:
        m = _AT_ANNOTATION.search(ms.masked, pos, end)
        if m is None:
            return annotations
        qualified = _WS.sub("", m.group(1))
        args_open = args_close = None
        after = ms.skip_ws(m.end(), end)
        if after < end and ms.masked[after] == "(":
            args_open = after
            args_close = ms.closing(after)
        stop = args_close + 1 if args_close is not None else m.end()
        annotations.append(Attribute(
            qualified.rsplit(".", 1)[-1], qualified, m.start(), stop, args_open, args_close
        ))
        pos = stop


def leading_lines(ms: MaskedSource, start: int, decl: int, keep: re.Pattern[str]) -> int:
    """Start of the annotation block directly above offset ``decl``.

    For newline-terminated languages a member header can swallow earlier
    statements. Walking upwards from the declaration line, lines are kept
    while ``keep`` matches their masked text; the first other line stops.
    """
    masked = ms.masked
    line_start = masked.rfind("\n", start, decl) + 1
    first = max(line_start, start)
    cursor = first
    while cursor > start:
        prev_start = max(masked.rfind("\n", start, cursor - 1) + 1, start)
        line = masked[prev_start:cursor - 1].strip()
        if line and not keep.match(line):
            break
        first = prev_start
        cursor = prev_start
    return ms.skip_ws(first, decl)


def normalize_attribute(name: str) -> str:
    """``FactAttribute`` -> ``Fact``."""
    if name.endswith("Attribute") and name != "Attribute":
        return name[: -len("Attribute")]
    return name


__all__ = [
    "Attribute",
    "Member",
    "at_annotations",
    "bracket_attributes",
    "leading_lines",
    "members",
    "normalize_attribute",
    "signature",
    "split_arguments",
]
