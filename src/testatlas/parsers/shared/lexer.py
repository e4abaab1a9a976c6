"""Comment/string masking for brace-structured source languages.

Test parsers for JavaScript, Java, C#, Go, Rust, Swift, PHP, Ruby and C++
work on a *masked* copy of the source: comments and string-literal contents
are blanked out with spaces (newlines preserved), so offsets stay identical
to the original text while regexes and bracket matching can no longer be
fooled by ``"describe("`` inside a string or ``{`` inside a comment.

Literal values are not lost: ``MaskedSource.strings`` keeps every string
literal with its span and (lightly unescaped) value, so a parser that finds
``it(`` in the masked text can read the test name from the literal right
after it.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass, field

from testatlas.domain import Location

_OPENERS = {")": "(", "]": "[", "}": "{"}
_BRACKETS = re.compile(r"[()\[\]{}]")
_RUST_CHAR = re.compile(r"'(?:\\(?:x[0-9a-fA-F]{2}|u\{[0-9a-fA-F]{1,6}\}|.)|[^\\'\n])'")
_RUST_RAW = re.compile(r'b?r(#*)"')
_CPP_RAW = re.compile(r'(?:u8|[uUL])?R"([^()\\\s]{0,16})\(')
_SWIFT_RAW = re.compile(r'(#+)"')
_IDENT_CHAR = re.compile(r"[\w$]")
# ``<`` is left out so JSX closing tags (``</p>``) stay code.
_REGEX_PRECEDERS = frozenset("(,=:[!&|?{};+-*%>~^")
_REGEX_KEYWORDS = frozenset({
    "return", "typeof", "case", "delete", "void", "throw", "in", "of", "yield", "await",
    "instanceof", "new", "else", "do",
})


@dataclass(frozen=True)
class Syntax:
    """Lexical conventions of one language family.

    Attributes:
        line_comments: Line-comment openers.
        block_comment: Block-comment delimiters, if the language has them.
        nested_comments: Block comments nest (Rust, Swift, Kotlin).
        quotes: Characters that open a string literal.
        multiline_quotes: Quote characters whose literals may span lines.
        triple_quotes: ``\"\"\"`` opens a multi-line literal.
        rust_chars: ``'`` only opens a char literal when one closes it
            (so lifetimes such as ``'a`` stay code).
        raw_strings: Raw-literal dialect: ``"rust"``, ``"cpp"``,
            ``"swift"`` or ``"csharp"``.
        ruby_block_comments: ``=begin``/``=end`` comments.
        hash_attributes: ``#[`` is an attribute, not a comment (PHP).
        regex_literals: ``/`` opens a regex literal where an operand is
            expected (JavaScript).
        interpolation: ``#{...}`` inside a double-quoted literal is code
            that may hold its own quotes (Ruby).
    """

    line_comments: tuple[str, ...] = ("//",)
    block_comment: tuple[str, str] | None = ("/*", "*/")
    nested_comments: bool = False
    quotes: str = "\"'"
    multiline_quotes: str = ""
    triple_quotes: bool = False
    rust_chars: bool = False
    raw_strings: str = ""
    ruby_block_comments: bool = False
    hash_attributes: bool = False
    regex_literals: bool = False
    interpolation: bool = False


JAVASCRIPT = Syntax(quotes="\"'`", multiline_quotes="`", regex_literals=True)
JAVA = Syntax(triple_quotes=True)
KOTLIN = Syntax(triple_quotes=True, nested_comments=True)
CSHARP = Syntax(triple_quotes=True, raw_strings="csharp")
GO = Syntax(quotes="\"'`", multiline_quotes="`")
RUST = Syntax(quotes='"', rust_chars=True, raw_strings="rust", nested_comments=True)
SWIFT = Syntax(quotes='"', triple_quotes=True, raw_strings="swift", nested_comments=True)
CPP = Syntax(raw_strings="cpp")
PHP = Syntax(line_comments=("//", "#"), hash_attributes=True)
RUBY = Syntax(
    line_comments=("#",), block_comment=None, ruby_block_comments=True, interpolation=True
)


@dataclass(frozen=True)
class StringLiteral:
    """A string literal: ``start``/``end`` span the delimiters too."""

    start: int
    end: int
    value: str


_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0"}


def _unescape(raw: str) -> str:
    if "\\" not in raw:
        return raw
    out: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw):
            nxt = raw[i + 1]
            out.append(_SIMPLE_ESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


@dataclass
class MaskedSource:
    """Source text paired with its masked copy and literal/bracket indexes."""

    text: str
    masked: str
    strings: list[StringLiteral] = field(default_factory=list)
    _by_start: dict[int, StringLiteral] = field(default_factory=dict, repr=False)
    _pairs: dict[int, int] = field(default_factory=dict, repr=False)
    _line_starts: list[int] = field(default_factory=list, repr=False)

    def __post_init__(self) -> None:
        self._by_start = {s.start: s for s in self.strings}
        self._pairs = _pair_brackets(self.masked)
        self._line_starts = [0] + [m.end() for m in re.finditer("\n", self.text)]

    # -- Positions ----------------------------------------------------------

    def line_of(self, offset: int) -> int:
        """1-based line number of ``offset``."""
        return bisect_right(self._line_starts, offset)

    def col_of(self, offset: int) -> int:
        """1-based column of ``offset``."""
        line = self.line_of(offset)
        return offset - self._line_starts[line - 1] + 1

    def location(self, filename: str, start: int, end: int) -> Location:
        """Build a ``Location`` spanning ``[start, end)``."""
        last = max(start, end - 1)
        return Location(
            file=filename,
            start_line=self.line_of(start),
            end_line=self.line_of(last),
            start_col=self.col_of(start),
            end_col=self.col_of(last) + 1,
        )

    # -- Brackets -----------------------------------------------------------

    def closing(self, open_offset: int) -> int:
        """Offset of the bracket closing the one at ``open_offset``.

        Unbalanced openers close at the end of the text.
        """
        return self._pairs.get(open_offset, len(self.text) - 1)

    def skip_ws(self, offset: int, limit: int | None = None) -> int:
        """First offset at or after ``offset`` that is not masked whitespace."""
        limit = len(self.masked) if limit is None else limit
        while offset < limit and self.masked[offset].isspace():
            offset += 1
        return offset

    # -- Literals -----------------------------------------------------------

    def string_at(self, offset: int) -> StringLiteral | None:
        """The literal starting exactly at ``offset``, if any."""
        return self._by_start.get(offset)

    def string_after(self, offset: int, limit: int | None = None) -> StringLiteral | None:
        """The literal starting at the first non-blank offset from ``offset``."""
        return self.string_at(self.skip_ws(offset, limit))

    def slice(self, start: int, end: int) -> str:
        return self.text[start:end]


def _pair_brackets(masked: str) -> dict[int, int]:
    pairs: dict[int, int] = {}
    stack: list[tuple[str, int]] = []
    for m in _BRACKETS.finditer(masked):
        ch = m.group()
        if ch in "([{":
            stack.append((ch, m.start()))
            continue
        opener = _OPENERS[ch]
        # Drop unmatched openers of a different kind.
        while stack and stack[-1][0] != opener:
            stack.pop()
        if stack:
            pairs[stack.pop()[1]] = m.start()
    return pairs


_RAW_STARTERS = {
    "rust": "rb",
    "cpp": "uUL8R",
    "swift": "#",
    "csharp": "@$",
}


def _trigger_pattern(syntax: Syntax) -> re.Pattern[str]:
    chars = set(syntax.quotes)
    chars.update(c[0] for c in syntax.line_comments)
    if syntax.block_comment:
        chars.add(syntax.block_comment[0][0])
    if syntax.ruby_block_comments:
        chars.add("=")
    if syntax.triple_quotes:
        chars.add('"')
    chars.update(_RAW_STARTERS.get(syntax.raw_strings, ""))
    return re.compile("[" + re.escape("".join(sorted(chars))) + "]")


class _Masker:
    def __init__(self, text: str, syntax: Syntax) -> None:
        self.text = text
        self.syntax = syntax
        self.out = list(text)
        self.strings: list[StringLiteral] = []
        self.n = len(text)
        self.trigger = _trigger_pattern(syntax)

    def blank(self, start: int, end: int) -> None:
        out = self.out
        for k in range(start, min(end, self.n)):
            if out[k] != "\n":
                out[k] = " "

    def literal(self, start: int, content_start: int, content_end: int, end: int,
                escapes: bool = True) -> int:
        raw = self.text[content_start:content_end]
        self.strings.append(StringLiteral(start, end, _unescape(raw) if escapes else raw))
        self.blank(content_start, content_end)
        return end

    def run(self) -> MaskedSource:
        text, syntax, n = self.text, self.syntax, self.n
        i = 0
        while i < n:
            m = self.trigger.search(text, i)
            if m is None:
                break
            i = m.start()
            ch = text[i]
            at_line_start = i == 0 or text[i - 1] == "\n"
            if syntax.ruby_block_comments and at_line_start and text.startswith("=begin", i):
                i = self._ruby_comment(i)
                continue
            opener = next((c for c in syntax.line_comments if text.startswith(c, i)), None)
            if opener and not (syntax.hash_attributes and text.startswith("#[", i)):
                end = text.find("\n", i)
                end = n if end == -1 else end
                self.blank(i, end)
                i = end
                continue
            if syntax.block_comment and text.startswith(syntax.block_comment[0], i):
                end = self._block_comment_end(i)
                self.blank(i, end)
                i = end
                continue
            if syntax.regex_literals and ch == "/" and self._operand_expected(i):
                i = self._regex(i)
                continue
            raw_end = self._raw_string(i)
            if raw_end is not None:
                i = raw_end
                continue
            if syntax.triple_quotes and text.startswith('"""', i):
                close = text.find('"""', i + 3)
                if close == -1:
                    i = self.literal(i, i + 3, n, n)
                else:
                    i = self.literal(i, i + 3, close, close + 3)
                continue
            if ch in syntax.quotes:
                if ch == "'" and syntax.rust_chars:
                    m = _RUST_CHAR.match(text, i)
                    if m is None:
                        i += 1
                        continue
                    i = self.literal(i, i + 1, m.end() - 1, m.end())
                    continue
                i = self._quoted(i, ch)
                continue
            i += 1
        return MaskedSource(text=text, masked="".join(self.out), strings=self.strings)

    def _quoted(self, start: int, quote: str) -> int:
        text, n = self.text, self.n
        multiline = quote in self.syntax.multiline_quotes
        interpolates = self.syntax.interpolation and quote == '"'
        j = start + 1
        while j < n:
            c = text[j]
            if c == "\\":
                j += 2
                continue
            if interpolates and text.startswith("#{", j):
                j = self._interpolation_end(j + 2)
                continue
            if c == quote:
                return self.literal(start, start + 1, j, j + 1)
            if c == "\n" and not multiline:
                return self.literal(start, start + 1, j, j)
            j += 1
        return self.literal(start, start + 1, n, n)

    def _interpolation_end(self, j: int) -> int:
        """Offset just past the ``}`` closing a ``#{`` whose body starts at ``j``."""
        text, n = self.text, self.n
        depth = 1
        while j < n:
            c = text[j]
            if c in "\"'":
                j = self._skip_nested_string(j, c)
                continue
            if c == "{":
                depth += 1
            elif c == "}":
                depth -= 1
                if depth == 0:
                    return j + 1
            elif c == "\n":
                return j
            j += 1
        return n

    def _skip_nested_string(self, start: int, quote: str) -> int:
        text, n = self.text, self.n
        j = start + 1
        while j < n:
            c = text[j]
            if c == "\\":
                j += 2
                continue
            if quote == '"' and text.startswith("#{", j):
                j = self._interpolation_end(j + 2)
                continue
            if c == quote:
                return j + 1
            if c == "\n":
                return j
            j += 1
        return n

    def _operand_expected(self, i: int) -> bool:
        """True when a ``/`` at ``i`` starts a regex literal, not a division."""
        out = self.out
        k = i - 1
        while k >= 0 and out[k] in " \t\r":
            k -= 1
        if k < 0 or out[k] == "\n":
            return True
        if out[k] in _REGEX_PRECEDERS:
            return True
        if not _IDENT_CHAR.match(out[k]):
            return False
        end = k + 1
        while k >= 0 and _IDENT_CHAR.match(out[k]):
            k -= 1
        return "".join(out[k + 1:end]) in _REGEX_KEYWORDS

    def _regex(self, start: int) -> int:
        """Blank a regex literal body; a lone ``/`` is stepped over."""
        text, n = self.text, self.n
        j = start + 1
        in_class = False
        while j < n:
            c = text[j]
            if c == "\\":
                j += 2
                continue
            if c == "\n":
                return start + 1
            if in_class:
                if c == "]":
                    in_class = False
            elif c == "[":
                in_class = True
            elif c == "/":
                break
            j += 1
        else:
            return start + 1
        self.blank(start + 1, j)
        j += 1
        while j < n and text[j].isalpha():
            j += 1
        return j

    def _block_comment_end(self, start: int) -> int:
        open_tok, close_tok = self.syntax.block_comment or ("", "")
        text = self.text
        depth = 0
        i = start
        while i < self.n:
            if text.startswith(open_tok, i) and (depth == 0 or self.syntax.nested_comments):
                depth += 1
                i += len(open_tok)
                continue
            if text.startswith(close_tok, i):
                depth -= 1
                i += len(close_tok)
                if depth == 0:
                    return i
                continue
            i += 1
        return self.n

    def _ruby_comment(self, start: int) -> int:
        end = self.text.find("\n=end", start)
        if end == -1:
            self.blank(start, self.n)
            return self.n
        line_end = self.text.find("\n", end + 1)
        line_end = self.n if line_end == -1 else line_end
        self.blank(start, line_end)
        return line_end

    def _raw_string(self, i: int) -> int | None:
        dialect = self.syntax.raw_strings
        if not dialect:
            return None
        text = self.text
        if i > 0 and _IDENT_CHAR.match(text, i - 1):
            return None
        if dialect == "rust":
            m = _RUST_RAW.match(text, i)
            if m is None:
                return None
            closer = '"' + m.group(1)
        elif dialect == "cpp":
            m = _CPP_RAW.match(text, i)
            if m is None:
                return None
            closer = ")" + m.group(1) + '"'
        elif dialect == "swift":
            m = _SWIFT_RAW.match(text, i)
            if m is None:
                return None
            closer = '"' + m.group(1)
        elif dialect == "csharp":
            if not text.startswith('@"', i) and not text.startswith('$@"', i) \
                    and not text.startswith('@$"', i):
                return None
            return self._verbatim(i, text.index('"', i))
        else:
            return None
        close = text.find(closer, m.end())
        if close == -1:
            return self.literal(i, m.end(), self.n, self.n, escapes=False)
        return self.literal(i, m.end(), close, close + len(closer), escapes=False)

    def _verbatim(self, start: int, quote: int) -> int:
        text, n = self.text, self.n
        j = quote + 1
        while j < n:
            if text[j] == '"':
                if j + 1 < n and text[j + 1] == '"':
                    j += 2
                    continue
                end = self.literal(start, quote + 1, j, j + 1, escapes=False)
                return end
            j += 1
        return self.literal(start, quote + 1, n, n, escapes=False)


def mask_source(text: str, syntax: Syntax) -> MaskedSource:
    """Blank out comments and string contents of ``text``.

    Args:
        text: Source text.
        syntax: Lexical conventions of the source language.

    Returns:
        A ``MaskedSource`` with the same length as ``text``.
    """
    return _Masker(text, syntax).run()


def strip_comments(text: str, syntax: Syntax) -> str:
    """Return ``text`` with comments and regex bodies blanked, string literals intact."""
    masked = mask_source(text, syntax)
    out = list(masked.masked)
    for literal in masked.strings:
        out[literal.start:literal.end] = text[literal.start:literal.end]
    return "".join(out)
