"""Doublestar glob matching for config include/exclude patterns.

``fnmatch`` lets ``*`` cross directory separators, which is wrong for the
globs found in test-runner configs. This module implements the usual
doublestar dialect instead:

- ``*`` matches within one path segment, ``?`` one non-separator character;
- ``**`` as a whole segment matches zero or more segments;
- ``[abc]`` / ``[!abc]`` character classes and ``{a,b}`` alternatives;
- extglob groups ``?(a|b)``, ``@(a|b)``, ``*(a|b)``, ``+(a|b)`` and
  ``!(a|b)`` as written in Jest ``testMatch`` defaults.

Patterns without a ``/`` are matched against the base name only, the way
``python_files = test_*.py`` or ``*.spec.ts`` are meant.
"""

from __future__ import annotations

import posixpath
import re
from functools import lru_cache

_EXTGLOB = {
    "?": "(?:{})?",
    "@": "(?:{})",
    "*": "(?:{})*",
    "+": "(?:{})+",
    "!": "(?!(?:{}))[^/]*",
}


def _find_closing_brace(pattern: str, start: int) -> int:
    depth = 0
    for i in range(start, len(pattern)):
        if pattern[i] == "{":
            depth += 1
        elif pattern[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _split_alternatives(body: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in body:
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        current.append(ch)
    parts.append("".join(current))
    return parts


def _translate(pattern: str) -> str:
    out: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        ch = pattern[i]
        if ch in _EXTGLOB and pattern.startswith("(", i + 1):
            close = pattern.find(")", i + 2)
            if close != -1:
                alternatives = "|".join(_translate(a) for a in pattern[i + 2:close].split("|"))
                out.append(_EXTGLOB[ch].format(alternatives))
                i = close + 1
                continue
        if ch == "*":
            if pattern.startswith("**", i):
                end = i + 2
                seg_start = i == 0 or pattern[i - 1] == "/"
                if seg_start and end == n:
                    out.append(".*")
                    i = end
                    continue
                if seg_start and pattern[end] == "/":
                    out.append("(?:.*/)?")
                    i = end + 1
                    continue
                out.append("[^/]*")
                i = end
                continue
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        elif ch == "[":
            close = pattern.find("]", i + 1)
            if close == -1:
                out.append(re.escape(ch))
            else:
                body = pattern[i + 1:close]
                if body.startswith("!"):
                    body = "^" + body[1:]
                out.append("[" + body.replace("\\", "\\\\") + "]")
                i = close
        elif ch == "{":
            close = _find_closing_brace(pattern, i)
            if close == -1:
                out.append(re.escape(ch))
            else:
                alternatives = _split_alternatives(pattern[i + 1:close])
                out.append("(?:" + "|".join(_translate(a) for a in alternatives) + ")")
                i = close
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


@lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a doublestar glob into an anchored regular expression."""
    return re.compile("^" + _translate(normalize(pattern)) + "$")


def normalize(path: str) -> str:
    """Return ``path`` with ``/`` separators and no leading ``./``."""
    path = path.replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


def match_glob(pattern: str, path: str) -> bool:
    """Report whether ``path`` matches the glob ``pattern``.

    Args:
        pattern: Doublestar glob. Without a ``/`` it applies to the base name.
        path: Slash-separated relative path.

    Returns:
        True if the path matches.
    """
    pattern = normalize(pattern)
    path = normalize(path)
    if not pattern:
        return False
    if "/" not in pattern:
        path = posixpath.basename(path)
    return compile_glob(pattern).match(path) is not None


def match_any(patterns: list[str] | tuple[str, ...], path: str) -> bool:
    return any(match_glob(p, path) for p in patterns)
