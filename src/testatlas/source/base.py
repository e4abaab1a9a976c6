"""The ``Source`` contract: read-only access to a file tree.

The scanner never touches the filesystem directly; it walks ``root`` and
reads files through ``open()``/``stat()`` so that every read is checked
against the tree's boundary. Paths given to a source are relative to its
root and ``/``-separated.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import BinaryIO


class Source(ABC):
    """A file tree the scanner can read from.

    Sources are context managers; leaving the ``with`` block calls
    ``close()``.
    """

    @property
    @abstractmethod
    def root(self) -> str:
        """Absolute path of the tree's root directory."""

    @abstractmethod
    def open(self, path: str) -> BinaryIO:
        """Open a file below the root for binary reading.

        Raises:
            InvalidPathError: If ``path`` is empty or escapes the root.
            OSError: If the file cannot be opened.
        """

    @abstractmethod
    def stat(self, path: str) -> os.stat_result:
        """Return file metadata for a path below the root.

        Raises:
            InvalidPathError: If ``path`` is empty or escapes the root.
            OSError: If the file cannot be inspected.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the source's resources. Safe to call more than once."""

    def __enter__(self) -> Source:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
