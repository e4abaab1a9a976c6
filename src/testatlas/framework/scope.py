"""Config scopes and their project-wide aggregation.

A ``ConfigScope`` is the region of a source tree governed by one framework
config file: a base directory (the config's own directory, or its ``root``
setting resolved against it) narrowed by optional include/exclude globs,
``roots`` and nested sub-projects. ``ProjectScope`` aggregates every scope
discovered in one scan and answers "which config governs this file?".

Resolution rule: among all scopes containing a file, the one with the
deepest base directory wins; equal depths are resolved by the lexically
smallest config path so that the answer never depends on discovery order.

All paths are slash-separated and relative to the scan root; ``"."`` is the
root itself.
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from testatlas.framework.globs import match_any, normalize


def clean_path(path: str) -> str:
    """Normalize a relative path: slashes, no ``./`` or trailing ``/``."""
    path = normalize(path).strip()
    if not path:
        return "."
    cleaned = posixpath.normpath(path)
    return "." if cleaned in ("", "/") else cleaned


def resolve_base_dir(config_path: str, root: str = "") -> str:
    """Resolve a config's base directory from its path and ``root`` setting.

    ``root`` is interpreted relative to the config file's directory. Results
    that would leave the scan root are clamped to ``"."``.

    Examples:
        >>> resolve_base_dir("src/extension/vitest.config.ts", "..")
        'src'
        >>> resolve_base_dir("vitest.config.ts", "src")
        'src'
    """
    config_dir = posixpath.dirname(normalize(config_path)) or "."
    if not root:
        return clean_path(config_dir)
    root = normalize(root).lstrip("/")
    base = clean_path(posixpath.join(config_dir, root))
    if base == ".." or base.startswith("../"):
        return "."
    return base


def is_under(path: str, directory: str) -> bool:
    """Report whether ``path`` is ``directory`` or lies below it."""
    if directory in (".", ""):
        return True
    return path == directory or path.startswith(directory + "/")


def relative_to(path: str, directory: str) -> str:
    if directory in (".", ""):
        return path
    if path == directory:
        return "."
    return path[len(directory) + 1:]


def path_depth(directory: str) -> int:
    """Depth of a directory: ``"."`` is 0, ``"e2e"`` is 1, ``"a/b"`` is 2."""
    directory = clean_path(directory)
    if directory == ".":
        return 0
    return len([part for part in directory.split("/") if part])


def _region_contains(
    base_dir: str,
    include: list[str],
    exclude: list[str],
    file_path: str,
) -> bool:
    if not is_under(file_path, base_dir):
        return False
    rel = relative_to(file_path, base_dir)
    if include and not match_any(include, rel):
        return False
    if exclude and match_any(exclude, rel):
        return False
    return True


@dataclass
class SubProject:
    """A nested project declared inside one config (e.g. vitest ``projects``)."""

    name: str
    base_dir: str
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    globals_mode: bool = False

    def contains(self, file_path: str) -> bool:
        return _region_contains(
            self.base_dir, self.include, self.exclude, clean_path(file_path)
        )

    def depth(self) -> int:
        return path_depth(self.base_dir)


@dataclass
class ConfigScope:
    """The directory region and glob rules established by one config file.

    Attributes:
        config_path: Path of the config file.
        base_dir: Directory the scope is rooted at.
        framework: Name of the framework the config belongs to.
        globals_mode: True when test APIs are injected as globals (jest
            default, vitest ``globals: true``).
        include: Globs (relative to ``base_dir``) a file must match.
        exclude: Globs (relative to ``base_dir``) that reject a file.
            Exclusion always overrides inclusion.
        roots: Directories (relative to the scan root) a file must lie in.
        projects: Nested sub-projects. When present, a file must belong
            to at least one of them.
        settings: Free-form extra settings extracted from the config.
    """

    config_path: str
    base_dir: str = "."
    framework: str = ""
    globals_mode: bool = False
    include: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    roots: list[str] = field(default_factory=list)
    projects: list[SubProject] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config_path: str, root: str = "", framework: str = "") -> ConfigScope:
        """Create a scope whose base directory is resolved from ``root``."""
        return cls(
            config_path=normalize(config_path),
            base_dir=resolve_base_dir(config_path, root),
            framework=framework,
        )

    def contains(self, file_path: str) -> bool:
        """Report whether ``file_path`` falls inside this scope."""
        path = clean_path(file_path)
        if not _region_contains(self.base_dir, self.include, self.exclude, path):
            return False
        if self.roots and not any(is_under(path, clean_path(r)) for r in self.roots):
            return False
        if self.projects and self.find_matching_project(path) is None:
            return False
        return True

    def depth(self) -> int:
        return path_depth(self.base_dir)

    def find_matching_project(self, file_path: str) -> SubProject | None:
        """Return the most specific sub-project containing ``file_path``."""
        best: SubProject | None = None
        for project in self.projects:
            if not project.contains(file_path):
                continue
            if best is None or project.depth() > best.depth():
                best = project
        return best


class ProjectScope:
    """Every ``ConfigScope`` found in one scanned project, keyed by path.

    Built single-threaded with ``add()`` before a scan starts; read-only
    (and therefore safe to share between workers) afterwards.
    """

    def __init__(self, scopes: list[ConfigScope] | None = None) -> None:
        self._configs: dict[str, ConfigScope] = {}
        for scope in scopes or ():
            self.add(scope)

    def add(self, scope: ConfigScope) -> None:
        self._configs[scope.config_path] = scope

    @property
    def configs(self) -> Mapping[str, ConfigScope]:
        return MappingProxyType(self._configs)

    def __len__(self) -> int:
        return len(self._configs)

    def __iter__(self) -> Iterator[ConfigScope]:
        return iter(self._configs.values())

    def resolve(
        self,
        file_path: str,
        accept: Callable[[ConfigScope], bool] | None = None,
    ) -> ConfigScope | None:
        """Find the scope that governs ``file_path``.

        Args:
            file_path: Slash-separated path relative to the scan root.
            accept: Optional filter applied before containment, e.g. to
                keep only frameworks supporting the file's language.

        Returns:
            The deepest containing scope, ties broken by lexical config
            path, or None when no scope contains the file.
        """
        best: ConfigScope | None = None
        for path in sorted(self._configs):
            scope = self._configs[path]
            if accept is not None and not accept(scope):
                continue
            if not scope.contains(file_path):
                continue
            if best is None or scope.depth() > best.depth():
                best = scope
        return best
