"""Commit descriptors and their once-per-build resolution from git."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pygit2

from impactplane.config.models import CommitConfig
from impactplane.core.errors import CommitResolutionError
from impactplane.core.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CommitDescriptor:
    """Branch and commit time (epoch millis) that reports are anchored at."""

    branch: str
    timestamp: int

    @classmethod
    def parse(cls, value: str) -> CommitDescriptor:
        """Parse the ``<branch>:<timestamp>`` wire form."""
        branch, sep, timestamp = value.rpartition(":")
        if not sep or not branch or not timestamp.isdigit():
            raise ValueError(f"Expected <branch>:<timestamp>, got {value!r}")
        return cls(branch, int(timestamp))

    def __str__(self) -> str:
        return f"{self.branch}:{self.timestamp}"


def read_commit_from_git(path: Path) -> CommitDescriptor:
    """Describe the checked-out HEAD of the repository containing ``path``."""
    git_dir = pygit2.discover_repository(str(path))
    if git_dir is None:
        raise CommitResolutionError.unresolvable(str(path), "not a git repository")
    try:
        repo = pygit2.Repository(git_dir)
    except pygit2.GitError as e:
        raise CommitResolutionError.unresolvable(str(path), str(e)) from e

    if repo.head_is_unborn:
        raise CommitResolutionError.unresolvable(str(path), "HEAD has no commits")
    if repo.head_is_detached:
        raise CommitResolutionError.unresolvable(
            str(path), "HEAD is detached; configure commit.branch and commit.timestamp"
        )

    commit = repo.head.peel(pygit2.Commit)
    return CommitDescriptor(branch=repo.head.shorthand, timestamp=commit.commit_time * 1000)


class CommitResolver:
    """Resolves the build's commit at most once.

    The uploader and the engine configuration both read from the same
    resolver so they always agree on the commit within one build.
    """

    def __init__(
        self,
        config: CommitConfig,
        repo_path: Path,
        source: Callable[[Path], CommitDescriptor] = read_commit_from_git,
    ) -> None:
        self._config = config
        self._repo_path = repo_path
        self._source = source
        self._resolved: CommitDescriptor | None = None
        self._lock = threading.Lock()

    def resolve(self) -> CommitDescriptor:
        with self._lock:
            if self._resolved is None:
                self._resolved = self._resolve_uncached()
                log.info("commit_resolved", commit=str(self._resolved))
            return self._resolved

    def _resolve_uncached(self) -> CommitDescriptor:
        branch, timestamp = self._config.branch, self._config.timestamp
        if branch is not None and timestamp is not None:
            return CommitDescriptor(branch, timestamp)
        return self._source(self._repo_path)
