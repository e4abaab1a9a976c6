"""Static extraction of settings from JavaScript/TypeScript config files.

``jest.config.ts`` and friends are programs, not data, so they are never
evaluated. Instead the handful of literal settings that shape test scope
(``rootDir``, ``include``, ``testDir``, ``globals`` ...) are read with
regular expressions from a copy of the source whose comments have been
masked out. Values built dynamically are simply not seen.
"""

from __future__ import annotations

import re

from testatlas.parsers.shared.lexer import JAVASCRIPT, MaskedSource, mask_source


_COLON = re.compile(r"\s*:\s*")


def _key(name: str) -> re.Pattern[str]:
    return re.compile(r"(?<![\w$.])" + re.escape(name) + r"\s*:\s*")


class JsConfig:
    """Literal property lookups over one JS/TS config source.

    Lookups are by property name anywhere in the (optionally narrowed)
    source, which is enough for the flat objects test-runner configs are.
    """

    def __init__(self, text: str, start: int = 0, end: int | None = None,
                 ms: MaskedSource | None = None) -> None:
        self.ms = ms or mask_source(text, JAVASCRIPT)
        self.start = start
        self.end = len(self.ms.text) if end is None else end
        self._removed: list[tuple[int, int]] = []

    def _visible(self, offset: int) -> bool:
        return not any(a <= offset < b for a, b in self._removed)

    def _value_offset(self, name: str) -> int | None:
        found: list[tuple[int, int]] = []
        for m in _key(name).finditer(self.ms.masked, self.start, self.end):
            if self._visible(m.start()):
                found.append((m.start(), m.end()))
                break
        # Quoted keys are blanked in the masked text; look them up by literal.
        for literal in self.ms.strings:
            if not self.start <= literal.start < self.end or literal.value != name:
                continue
            colon = _COLON.match(self.ms.masked, literal.end)
            if colon and self._visible(literal.start):
                found.append((literal.start, colon.end()))
                break
        if not found:
            return None
        return min(found)[1]

    def ignore_block(self, name: str) -> None:
        """Hide the object or array literal of ``name`` from later lookups."""
        offset = self._value_offset(name)
        if offset is not None and self.ms.masked[offset:offset + 1] in ("{", "["):
            self._removed.append((offset, self.ms.closing(offset) + 1))

    def string(self, name: str) -> str | None:
        offset = self._value_offset(name)
        if offset is None:
            return None
        literal = self.ms.string_at(offset)
        return literal.value if literal is not None else None

    def boolean(self, name: str) -> bool | None:
        offset = self._value_offset(name)
        if offset is None:
            return None
        word = re.match(r"true|false", self.ms.masked[offset:offset + 5])
        if word is None:
            return None
        return word.group() == "true"

    def strings(self, name: str) -> list[str] | None:
        """Value of ``name`` as a list of strings.

        A single string literal yields a one-element list; an array yields
        its string elements (non-literal elements are skipped).
        """
        offset = self._value_offset(name)
        if offset is None:
            return None
        literal = self.ms.string_at(offset)
        if literal is not None:
            return [literal.value]
        if self.ms.masked[offset:offset + 1] != "[":
            return None
        close = self.ms.closing(offset)
        return [s.value for s in self.ms.strings if offset < s.start < close]

    def object(self, name: str) -> JsConfig | None:
        """Narrowed view on the object literal of property ``name``."""
        offset = self._value_offset(name)
        if offset is None or self.ms.masked[offset:offset + 1] != "{":
            return None
        return JsConfig(self.ms.text, offset, self.ms.closing(offset) + 1, ms=self.ms)

    def objects(self, name: str) -> list[JsConfig]:
        """Views on every object literal directly inside array ``name``."""
        offset = self._value_offset(name)
        if offset is None or self.ms.masked[offset:offset + 1] != "[":
            return []
        close = self.ms.closing(offset)
        views: list[JsConfig] = []
        pos = offset + 1
        while pos < close:
            ch = self.ms.masked[pos]
            if ch == "{":
                end = self.ms.closing(pos)
                views.append(JsConfig(self.ms.text, pos, end + 1, ms=self.ms))
                pos = end + 1
                continue
            if ch in "([":
                pos = self.ms.closing(pos) + 1
                continue
            pos += 1
        return views
