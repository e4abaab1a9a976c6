"""Statement and block walking for Ruby test DSLs.

Ruby closes most constructs with ``end`` rather than braces, so bracket
pairing alone cannot find the body of ``describe "x" do ... end``.
``end_pairs()`` pairs every block-opening keyword with its ``end`` on the
masked source, skipping modifier forms (``return if x``) and endless
methods (``def foo = 1``).

``RubySpecWalker`` then walks statement by statement through a region:

- a DSL suite call with a block (``describe``, ``context`` ...) becomes a
  suite and is descended into;
- a DSL test call (``it``, ``specify`` ...) becomes a test, never
  descended; one without a block is pending;
- loops (``3.times do``, ``each do``, ``while``) and ``module``/``class``
  wrappers are transparent: their body is walked at the same level, so a
  loop declaring one ``it`` yields one test;
- any other block (``before``, ``let``, ``def``) is skipped whole.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from testatlas.domain import Test, TestStatus, TestSuite
from testatlas.parsers.shared import MAX_NESTING_DEPTH
from testatlas.parsers.shared.lexer import MaskedSource

_KEYWORD = re.compile(
    r"(?<![\w.:$@])(do|def|class|module|begin|case|if|unless|while|until|for|end)(?![\w?!:])"
)
_ENDLESS_DEF = re.compile(r"def\s+[\w.?!=\[\]<>+\-*/%]+?\s*(?:\([^)\n]*\))?\s*=(?![=~>])")
_MODIFIER_CONTEXT = re.compile(
    r"(?:^|[=(,\[{|&?:!;]|\b(?:then|do|begin))\s*$"
)
_WORD = re.compile(r"(?:(?:::)?RSpec\s*\.\s*)?([A-Za-z_]\w*[?!]?)")
_LOOP = re.compile(r"\.\s*(?:times|each\w*|map|upto|downto|step)\b|^\s*loop\b")
_PARAMS = re.compile(r"\s*\|[^|\n]*\|")
_TRANSPARENT = frozenset({"module", "class", "if", "unless", "begin", "while", "until", "for"})
_SKIP_META = re.compile(r"(?:\bskip\s*:|:skip\b|\bpending\s*:|:pending\b)")
_FOCUS_META = re.compile(r"(?:\bfocus\s*:\s*true|:focus\b)")


def end_pairs(ms: MaskedSource) -> dict[int, tuple[int, int]]:
    """Map each block-opening keyword offset to its ``end`` span."""
    masked = ms.masked
    pairs: dict[int, tuple[int, int]] = {}
    stack: list[int] = []
    loop_line_end = -1
    for m in _KEYWORD.finditer(masked):
        word, start = m.group(1), m.start()
        if word == "end":
            if stack:
                pairs[stack.pop()] = (start, m.end())
            continue
        if word == "do" and start < loop_line_end:
            # ``while cond do`` belongs to the loop.
            continue
        if word in ("if", "unless", "while", "until"):
            line_start = masked.rfind("\n", 0, start) + 1
            if not _MODIFIER_CONTEXT.search(masked[line_start:start]):
                continue
        if word == "def" and _ENDLESS_DEF.match(masked, start):
            continue
        if word in ("while", "until", "for"):
            line_end = masked.find("\n", start)
            loop_line_end = len(masked) if line_end == -1 else line_end
        stack.append(start)
    return pairs


@dataclass(frozen=True)
class Block:
    """A ``do ... end``, ``{ ... }`` or keyword block.

    ``body_start``/``body_end`` delimit the inside; ``end`` is the offset
    just past the closing token.
    """

    kind: str
    start: int
    body_start: int
    body_end: int
    end: int


@dataclass(frozen=True)
class RubyDialect:
    """Call names of one Ruby test DSL."""

    suites: frozenset[str]
    tests: frozenset[str]
    skipped: frozenset[str] = frozenset()
    focused: frozenset[str] = frozenset()
    todo: frozenset[str] = frozenset()


class RubySpecWalker:
    """Builds suites and tests from a Ruby DSL region."""

    def __init__(self, ms: MaskedSource, filename: str, dialect: RubyDialect,
                 pairs: dict[int, tuple[int, int]] | None = None) -> None:
        self.ms = ms
        self.filename = filename
        self.dialect = dialect
        self.pairs = end_pairs(ms) if pairs is None else pairs

    def keyword_block(self, offset: int) -> Block | None:
        """Block of the keyword construct (``class``, ``def`` ...) at ``offset``."""
        span = self.pairs.get(offset)
        if span is None:
            return None
        line_end = self.ms.masked.find("\n", offset, span[0])
        body_start = span[0] if line_end == -1 else line_end + 1
        return Block("keyword", offset, body_start, span[0], span[1])

    def statement(self, start: int, end: int) -> tuple[Block | None, int]:
        """Find the block attached to the statement at ``start``.

        Returns:
            The block (or None) and the offset where the statement ends.
        """
        ms, masked = self.ms, self.ms.masked
        pos = start
        while pos < end:
            ch = masked[pos]
            if ch in "\n;":
                return None, pos
            if ch in "([":
                pos = ms.closing(pos) + 1
                continue
            if ch == "{":
                close = min(ms.closing(pos), end)
                return Block("{", pos, self._after_params(pos + 1), close, close + 1), close + 1
            if ch == "d" and pos in self.pairs and masked.startswith("do", pos):
                end_start, end_end = self.pairs[pos]
                return Block("do", pos, self._after_params(pos + 2), end_start, end_end), end_end
            pos += 1
        return None, end

    def _after_params(self, offset: int) -> int:
        m = _PARAMS.match(self.ms.masked, offset)
        return m.end() if m else offset

    def _skip_separators(self, pos: int, end: int) -> int:
        masked = self.ms.masked
        while pos < end and (masked[pos].isspace() or masked[pos] == ";"):
            pos += 1
        return pos

    def _status(self, word: str, args: str) -> tuple[TestStatus, str]:
        d = self.dialect
        if word in d.skipped:
            return TestStatus.SKIPPED, word
        if word in d.focused:
            return TestStatus.FOCUSED, word
        if word in d.todo:
            return TestStatus.TODO, word
        if _SKIP_META.search(args):
            return TestStatus.SKIPPED, "skip"
        if _FOCUS_META.search(args):
            return TestStatus.FOCUSED, "focus"
        return TestStatus.ACTIVE, ""

    def body_status(self, block: Block) -> tuple[TestStatus, str] | None:
        """Status implied by a test body; DSLs that skip from inside override."""
        return None

    def _description(self, name_start: int, limit: int) -> str:
        ms = self.ms
        pos = ms.skip_ws(name_start, limit)
        if pos < limit and ms.masked[pos] == "(":
            pos = ms.skip_ws(pos + 1, limit)
        literal = ms.string_at(pos)
        if literal is not None:
            return literal.value
        m = re.match(r"[^,\n{]*?(?=\s*(?:,|\)|\bdo\b|\{|$))", ms.masked[pos:limit])
        return ms.slice(pos, pos + m.end()).strip() if m else ""

    def walk(self, start: int, end: int, parent: TestSuite, depth: int) -> None:
        """Add the suites and tests declared in ``[start, end)`` to ``parent``."""
        ms, masked, d = self.ms, self.ms.masked, self.dialect
        pos = start
        while True:
            pos = self._skip_separators(pos, end)
            if pos >= end:
                return
            word_match = _WORD.match(masked, pos)
            word = word_match.group(1) if word_match else ""
            if word in _TRANSPARENT or word == "def" or word == "case":
                block = self.keyword_block(pos)
                if block is None:
                    _, stmt_end = self.statement(pos, end)
                    pos = max(stmt_end, pos + 1)
                    continue
                if word in _TRANSPARENT and depth < MAX_NESTING_DEPTH:
                    self.walk(block.body_start, block.body_end, parent, depth + 1)
                pos = block.end
                continue
            block, stmt_end = self.statement(pos, end)
            header = masked[pos:block.start] if block else masked[pos:stmt_end]
            is_suite = word in d.suites
            is_test = word in d.tests
            if (is_suite or is_test) and word_match is not None:
                status, modifier = self._status(word, header)
                if status is TestStatus.ACTIVE and parent.status is TestStatus.SKIPPED:
                    status, modifier = parent.status, parent.modifier
                limit = block.start if block else stmt_end
                name = self._description(word_match.end(), limit)
                stop = block.end if block else stmt_end
                location = ms.location(self.filename, pos, stop)
                if is_suite and block is not None:
                    suite = TestSuite(name=name, location=location, status=status,
                                      modifier=modifier)
                    if depth < MAX_NESTING_DEPTH:
                        self.walk(block.body_start, block.body_end, suite, depth + 1)
                    parent.suites.append(suite)
                elif is_test:
                    if not name and block is not None:
                        name = " ".join(ms.slice(block.body_start, block.body_end).split())
                    if block is None and status is TestStatus.ACTIVE:
                        status, modifier = TestStatus.TODO, "pending"
                    elif block is not None and status is TestStatus.ACTIVE:
                        status, modifier = self.body_status(block) or (status, modifier)
                    parent.tests.append(Test(name, location, status, modifier))
                pos = max(stop, pos + 1)
                continue
            if block is not None and _LOOP.search(header) and depth < MAX_NESTING_DEPTH:
                self.walk(block.body_start, block.body_end, parent, depth + 1)
            pos = max(stmt_end, pos + 1)


__all__ = ["Block", "RubyDialect", "RubySpecWalker", "end_pairs"]
