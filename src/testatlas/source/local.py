"""Local filesystem source with root-escape protection."""

from __future__ import annotations

import logging
import os
from typing import BinaryIO

from testatlas.exceptions import InvalidPathError
from testatlas.source.base import Source

logger = logging.getLogger(__name__)


def _is_within(path: str, root: str) -> bool:
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


class LocalSource(Source):
    """Reads files from a directory on the local filesystem.

    Every path is checked twice: lexically (``..`` may not leave the root)
    and after resolving symlinks (a link may not point outside the root).

    Args:
        root_path: Directory to expose.

    Raises:
        InvalidPathError: If ``root_path`` does not exist or is not a
            directory.
    """

    def __init__(self, root_path: str | os.PathLike[str]) -> None:
        root = os.path.normpath(os.path.abspath(os.fspath(root_path)))
        if not os.path.exists(root):
            raise InvalidPathError(f"source: path does not exist: {root}")
        if not os.path.isdir(root):
            raise InvalidPathError(f"source: path is not a directory: {root}")
        self._root = root

    @property
    def root(self) -> str:
        return self._root

    def resolve(self, path: str) -> str:
        """Map a root-relative path to an absolute one inside the root.

        Raises:
            InvalidPathError: If the path is empty, absolute, or escapes the
                root lexically or through a symlink.
        """
        cleaned = os.path.normpath(path.replace("/", os.sep)) if path else ""
        if cleaned in ("", "."):
            raise InvalidPathError("source: empty or current directory path not allowed")
        if os.path.isabs(cleaned):
            raise InvalidPathError(f"source: absolute path not allowed: {path}")
        full = os.path.normpath(os.path.join(self._root, cleaned))
        if not _is_within(full, self._root):
            raise InvalidPathError(f"source: path escapes root directory: {path}")
        if os.path.lexists(full):
            real = os.path.realpath(full)
            real_root = os.path.realpath(self._root)
            if not _is_within(real, real_root):
                raise InvalidPathError(f"source: path escapes root directory via symlink: {path}")
        return full

    def open(self, path: str) -> BinaryIO:
        return open(self.resolve(path), "rb")

    def stat(self, path: str) -> os.stat_result:
        return os.stat(self.resolve(path))

    def close(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"LocalSource({self._root!r})"
