"""Registry of framework definitions.

The ``FrameworkRegistry`` indexes every registered ``Definition`` by name and
by language and keeps them in detection order: priority descending, then
name ascending so that equal priorities resolve deterministically.

Registration happens once at startup (see
``testatlas.parsers.register_all_frameworks``); during a scan the registry is
only read, from many worker threads at once. A lock still guards every
access so that tests may ``clear()`` and re-register safely.
"""

from __future__ import annotations

import threading

from testatlas.domain import Language
from testatlas.framework.definition import Definition


def _sort_key(definition: Definition) -> tuple[int, str]:
    return (-definition.priority, definition.name)


class FrameworkRegistry:
    """Thread-safe collection of framework definitions."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_name: dict[str, Definition] = {}
        self._by_language: dict[Language, list[Definition]] = {}
        self._ordered: list[Definition] = []

    def register(self, definition: Definition) -> None:
        """Add a definition, replacing any earlier one with the same name.

        Args:
            definition: The framework definition to register.
        """
        with self._lock:
            previous = self._by_name.get(definition.name)
            if previous is not None:
                self._remove(previous)
            self._by_name[definition.name] = definition
            self._ordered.append(definition)
            self._ordered.sort(key=_sort_key)
            for language in definition.languages:
                bucket = self._by_language.setdefault(language, [])
                bucket.append(definition)
                bucket.sort(key=_sort_key)

    def _remove(self, definition: Definition) -> None:
        self._ordered.remove(definition)
        for language in definition.languages:
            self._by_language.get(language, []).remove(definition)

    def find(self, name: str) -> Definition | None:
        """Return the definition registered as ``name``, or None."""
        with self._lock:
            return self._by_name.get(name)

    def find_by_language(self, language: Language) -> list[Definition]:
        """Return the definitions supporting ``language`` in detection order.

        The returned list is a copy; mutating it does not affect the registry.
        """
        with self._lock:
            return list(self._by_language.get(language, ()))

    def all(self) -> list[Definition]:
        """Return every definition in detection order (as a copy)."""
        with self._lock:
            return list(self._ordered)

    def names(self) -> list[str]:
        """Return all registered names, sorted alphabetically."""
        with self._lock:
            return sorted(self._by_name)

    def clear(self) -> None:
        """Remove every definition. Meant for test isolation."""
        with self._lock:
            self._by_name.clear()
            self._by_language.clear()
            self._ordered.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._by_name
