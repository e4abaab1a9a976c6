"""Git repository source: a shallow clone in a private temp directory.

``GitSource`` makes a shallow, single-branch GitPython clone into a fresh
temporary directory (mode 0700) and then serves files through a
``LocalSource`` over the clone. ``close()`` deletes the clone; it is
idempotent and is also called when the clone itself fails.

Credentials, when given, are injected into the URL for the clone only and
scrubbed from every error message.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import threading
from dataclasses import dataclass
from typing import BinaryIO
from urllib.parse import quote, urlsplit, urlunsplit

from git import GitCommandError, Repo
from git.exc import GitCommandNotFound

from testatlas.exceptions import GitCloneError, InvalidPathError
from testatlas.source.base import Source
from testatlas.source.local import LocalSource

logger = logging.getLogger(__name__)

DEFAULT_CLONE_DEPTH = 1
REDACTED = "[REDACTED]"


@dataclass(frozen=True)
class GitCredentials:
    """HTTP(S) credentials for private repositories."""

    username: str = ""
    password: str = ""


def inject_credentials(repo_url: str, credentials: GitCredentials | None) -> str:
    """Return ``repo_url`` with credentials in its userinfo part.

    A token without a username is sent as ``oauth2:<token>``.
    """
    if credentials is None or not (credentials.username or credentials.password):
        return repo_url
    parts = urlsplit(repo_url)
    if not parts.scheme or not parts.hostname:
        raise InvalidPathError(f"source: invalid repository URL: {repo_url}")
    host = parts.hostname + (f":{parts.port}" if parts.port else "")
    if credentials.password:
        user = credentials.username or "oauth2"
        userinfo = f"{quote(user, safe='')}:{quote(credentials.password, safe='')}"
    else:
        userinfo = quote(credentials.username, safe="")
    return urlunsplit((parts.scheme, f"{userinfo}@{host}", parts.path, parts.query, parts.fragment))


def sanitize(text: str, credentials: GitCredentials | None) -> str:
    """Remove credentials from ``text``; values shorter than 3 are left alone."""
    if credentials is None:
        return text
    for secret in (credentials.username, credentials.password):
        if len(secret) >= 3:
            text = text.replace(secret, REDACTED).replace(quote(secret, safe=""), REDACTED)
    return text


def validate_branch(branch: str) -> None:
    if branch.startswith("-") or "\x00" in branch:
        raise InvalidPathError(f"source: invalid branch name: {branch!r}")


class GitSource(Source):
    """Shallow clone of a git repository.

    Args:
        repo_url: Repository URL accepted by ``git clone``.
        branch: Branch or tag to check out; default branch when empty.
        depth: Clone depth; values below 1 fall back to a depth of 1.
        credentials: Optional HTTP(S) credentials.

    Raises:
        GitCloneError: If git is missing or the clone fails.
        InvalidPathError: If the URL or branch is unusable.
    """

    def __init__(
        self,
        repo_url: str,
        branch: str = "",
        depth: int = DEFAULT_CLONE_DEPTH,
        credentials: GitCredentials | None = None,
    ) -> None:
        if branch:
            validate_branch(branch)
        clone_url = inject_credentials(repo_url, credentials)
        self._credentials = credentials
        self._lock = threading.Lock()
        self._closed = False
        self._temp_dir = tempfile.mkdtemp(prefix="testatlas-git-")
        os.chmod(self._temp_dir, 0o700)
        try:
            self._clone(clone_url, branch, max(depth, 1))
            self._local = LocalSource(self._temp_dir)
        except BaseException:
            self.close()
            raise
        logger.info("Cloned %s into %s", sanitize(repo_url, credentials), self._temp_dir)

    def _clone(self, clone_url: str, branch: str, depth: int) -> None:
        try:
            Repo.clone_from(
                clone_url,
                self._temp_dir,
                env={"GIT_TERMINAL_PROMPT": "0"},
                depth=depth,
                single_branch=True,
                branch=branch or None,
            )
        except GitCommandNotFound as exc:
            raise GitCloneError("source: git clone failed: git is not installed") from exc
        except GitCommandError as exc:
            message = sanitize(str(exc.stderr).strip(), self._credentials)
            raise GitCloneError(f"source: git clone failed: {message}") from exc

    @property
    def root(self) -> str:
        return self._local.root

    def open(self, path: str) -> BinaryIO:
        return self._local.open(path)

    def stat(self, path: str) -> os.stat_result:
        return self._local.stat(path)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
        shutil.rmtree(self._temp_dir, ignore_errors=True)
        logger.debug("Removed clone %s", self._temp_dir)


def repo_path_from_url(repo_url: str) -> str:
    """Filesystem-safe ``host/owner/repo`` path of a repository URL.

    Example:
        >>> repo_path_from_url("https://github.com/owner/repo.git")
        'github.com/owner/repo'
    """
    parts = urlsplit(repo_url)
    path = parts.path.strip("/")
    if path.endswith(".git"):
        path = path[:-4]
    if not parts.hostname or not path:
        raise InvalidPathError(f"source: URL must have host and path: {parts.hostname or ''}/{path}")
    return f"{parts.hostname}/{path}"
