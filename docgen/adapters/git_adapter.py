"""
docgen/adapters/git_adapter.py

Git history → Commit entities (GitPython).

The repository handle is an explicit value: open it with
``open_repository`` (or the ``connect`` context manager), pass it to every
GitAdapter call, and close it when done. A closed handle refuses further
work.

Each commit is diffed against its first parent only (root commits against
the empty tree), with rename/copy detection controlled by DiffOptions.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import git
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from docgen.adapters.git_diff import to_file_change
from docgen.cir.model import Commit, FileChange

logger = logging.getLogger(__name__)


class RepositoryClosedError(RuntimeError):
    """Raised when a released repository handle is used again."""


@dataclass(frozen=True)
class DiffOptions:
    detect_renames: bool = True
    detect_copies: bool = True

    def diff_kwargs(self) -> Dict[str, Any]:
        # zero context so that every hunk is exactly one edit span
        kwargs: Dict[str, Any] = {"create_patch": True, "unified": 0}
        if self.detect_renames:
            kwargs["find_renames"] = True
        else:
            kwargs["no_renames"] = True
        if self.detect_copies:
            kwargs["find_copies"] = True
        return kwargs


class RepositoryHandle:
    """An open git repository. Usable until ``close()``."""

    def __init__(self, repo: git.Repo) -> None:
        self._repo: Optional[git.Repo] = repo
        self.path = Path(repo.working_tree_dir or repo.git_dir)

    @property
    def closed(self) -> bool:
        return self._repo is None

    @property
    def repo(self) -> git.Repo:
        if self._repo is None:
            raise RepositoryClosedError(f"Repository handle for {self.path} is closed")
        return self._repo

    def close(self) -> None:
        if self._repo is not None:
            self._repo.close()
            self._repo = None
            logger.info("Closed repository %s", self.path)

    def __enter__(self) -> "RepositoryHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


@dataclass
class RepositoryConnection:
    """Result of opening a repository: a handle, or the reason there is none."""
    path: str
    handle: Optional[RepositoryHandle] = None
    connected: bool = False
    error: Optional[str] = None

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()

    def __enter__(self) -> "RepositoryConnection":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_repository(path: Union[str, Path]) -> RepositoryConnection:
    """
    Open the git repository containing ``path``.
    Failures come back as ``connected=False`` with an error string.
    """
    try:
        repo = git.Repo(str(path), search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError, GitCommandError) as e:
        message = f"Could not open repository: {e}"
        logger.warning("%s (%s)", message, path)
        return RepositoryConnection(path=str(path), connected=False, error=message)

    handle = RepositoryHandle(repo)
    logger.info("Opened repository %s", handle.path)
    return RepositoryConnection(path=str(path), handle=handle, connected=True)


@contextmanager
def connect(path: Union[str, Path]) -> Iterator[RepositoryConnection]:
    """Scoped acquisition: the handle is released on every exit path."""
    conn = open_repository(path)
    try:
        yield conn
    finally:
        conn.close()


class GitAdapter:

    def __init__(self, options: Optional[DiffOptions] = None) -> None:
        self.options = options or DiffOptions()

    # ---------------- History walks ----------------

    def commit_history(self, handle: RepositoryHandle, max_commits: int = 0, all_refs: bool = True) -> List[Commit]:
        """
        Newest-first commits, with file changes. ``max_commits`` <= 0 means
        no limit. Walk failures (e.g. no HEAD yet) give an empty list.
        """
        repo = handle.repo
        rev = "--all" if all_refs else "HEAD"
        commits = self._walk(repo, rev, max_commits=max_commits)
        logger.info("Retrieved %d commit(s) from %s", len(commits), handle.path)
        return commits

    def file_history(self, handle: RepositoryHandle, path: str, max_commits: int = 0) -> List[Commit]:
        """Commits whose tree differs from their parent's at ``path``."""
        repo = handle.repo
        return self._walk(repo, "HEAD", max_commits=max_commits, paths=path)

    def commits_by_author(self, handle: RepositoryHandle, author: str, max_commits: int = 0) -> List[Commit]:
        """
        Case-sensitive substring match on author name or email, over the
        full history. Not indexed: every call walks every commit.
        """
        matched = [
            c for c in self.commit_history(handle)
            if author in c.author_name or author in c.author_email
        ]
        if max_commits > 0:
            matched = matched[:max_commits]
        return matched

    def _walk(self, repo: git.Repo, rev: str, max_commits: int = 0, paths: Optional[str] = None) -> List[Commit]:
        kwargs: Dict[str, Any] = {}
        if max_commits > 0:
            kwargs["max_count"] = max_commits
        if paths:
            kwargs["paths"] = paths
        try:
            raw = list(repo.iter_commits(rev, **kwargs))
        except (GitCommandError, ValueError) as e:
            logger.warning("Could not walk history (%s): %s", rev, e)
            return []
        return [self.extract_commit(c) for c in raw]

    # ---------------- Per-commit extraction ----------------

    def extract_commit(self, commit: git.Commit) -> Commit:
        diff_error: Optional[str] = None
        try:
            changes = self.file_changes(commit)
        except GitCommandError as e:
            logger.warning("Could not diff commit %s: %s", commit.hexsha[:7], e)
            changes = []
            diff_error = str(e)

        return Commit(
            hash=commit.hexsha,
            author_name=commit.author.name or "",
            author_email=commit.author.email or "",
            author_date=commit.authored_datetime,
            committer_name=commit.committer.name or "",
            committer_email=commit.committer.email or "",
            commit_date=commit.committed_datetime,
            message=commit.message if isinstance(commit.message, str) else commit.message.decode("utf-8", "replace"),
            parent_hashes=tuple(p.hexsha for p in commit.parents),
            file_changes=tuple(changes),
            diff_error=diff_error,
        )

    def file_changes(self, commit: git.Commit) -> List[FileChange]:
        """
        Changes against the baseline tree: the first parent, or the empty
        tree for a root commit. Other parents of a merge are ignored.
        """
        kwargs = self.options.diff_kwargs()
        if commit.parents:
            diffs = commit.parents[0].diff(commit, **kwargs)
        else:
            diffs = commit.diff(git.NULL_TREE, **kwargs)
        return [to_file_change(d) for d in diffs]


__all__ = [
    "DiffOptions",
    "GitAdapter",
    "RepositoryClosedError",
    "RepositoryConnection",
    "RepositoryHandle",
    "connect",
    "open_repository",
]
