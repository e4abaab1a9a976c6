"""File-tree sources the scanner reads from."""

from testatlas.source.base import Source
from testatlas.source.git import GitCredentials, GitSource, repo_path_from_url
from testatlas.source.local import LocalSource

__all__ = ["GitCredentials", "GitSource", "LocalSource", "Source", "repo_path_from_url"]
