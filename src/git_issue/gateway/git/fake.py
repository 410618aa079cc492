"""Fake implementation of the git gateway for testing."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path

from git_issue.gateway.git.abc import Git
from git_issue.gateway.git.errors import (
    CommitBareRepository,
    CommitFailure,
    StagingBareRepository,
    StagingFileDoesNotExist,
    StashingError,
)

FAKE_EPOCH = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


@dataclass(frozen=True)
class CommitRecord:
    """Record of a commit operation.

    Attributes:
        sha: Hash assigned to the commit
        parents: Parent hashes, two for a merge
        message: Full commit message
        staged_files: Paths staged since the previous commit
        no_verify: Whether hooks were bypassed
        author_date: Timestamp reported by get_author_date()
    """

    sha: str
    parents: tuple[str, ...]
    message: str
    staged_files: tuple[Path, ...]
    no_verify: bool
    author_date: datetime


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    The fake models the commit graph (HEAD, parents, messages) and the
    stash stack, not file contents: a reset does not rewrite files on disk.

    Constructor Injection:
    ---------------------
    - repo_root: Path reported by get_repository_root(); None means no repository
    - head: Initial HEAD hash; None means unborn or bare
    - bare: Report the repository as bare
    - dirty: Report uncommitted changes until a stash is pushed
    - stage_raises, commit_raises, stash_push_raises, stash_pop_raises,
      reset_raises, merge_raises: Exceptions to raise from that operation

    Mutation Tracking:
    -----------------
    - commits: CommitRecord list in creation order
    - staged_files: Every path passed to stage()
    - stash_messages: Messages of every stash_push()
    - stash_pops: Number of successful stash_pop() calls
    - resets: Hashes passed to reset_hard()
    - merges: (sha, message) pairs passed to merge_no_ff()
    - initialized_repos: Paths passed to init_repository()
    """

    def __init__(
        self,
        *,
        repo_root: Path | None = None,
        head: str | None = "0" * 40,
        bare: bool = False,
        dirty: bool = False,
        author_name: str = "Test User",
        stage_raises: Exception | None = None,
        commit_raises: Exception | None = None,
        stash_push_raises: Exception | None = None,
        stash_pop_raises: Exception | None = None,
        reset_raises: Exception | None = None,
        merge_raises: Exception | None = None,
    ) -> None:
        self._repo_root = repo_root
        self._head = head
        self._bare = bare
        self._dirty = dirty
        self._author_name = author_name
        self._stage_raises = stage_raises
        self._commit_raises = commit_raises
        self._stash_push_raises = stash_push_raises
        self._stash_pop_raises = stash_pop_raises
        self._reset_raises = reset_raises
        self._merge_raises = merge_raises

        self._commits: list[CommitRecord] = []
        self._pending: list[Path] = []
        self._staged_files: list[Path] = []
        self._stash: list[str] = []
        self._stash_messages: list[str] = []
        self._stash_pops = 0
        self._resets: list[str] = []
        self._merges: list[tuple[str, str]] = []
        self._initialized_repos: list[Path] = []

    # ============================================================================
    # Query Operations
    # ============================================================================

    def get_repository_root(self, cwd: Path) -> Path | None:
        if self._bare:
            return None
        return self._repo_root

    def is_bare_repository(self, cwd: Path) -> bool:
        return self._bare

    def get_head(self, repo_root: Path) -> str | None:
        if self._bare:
            return None
        return self._head

    def is_clean(self, repo_root: Path) -> bool:
        return not self._dirty

    def get_author_date(self, repo_root: Path, sha: str) -> datetime:
        record = self._find(sha)
        if record is None:
            return FAKE_EPOCH
        return record.author_date

    def get_author_name(self, repo_root: Path, sha: str) -> str:
        return self._author_name

    def get_file_history(self, repo_root: Path, paths: list[Path]) -> list[str]:
        wanted = set(paths)
        lines = []
        for record in self._commits:
            if wanted.intersection(record.staged_files):
                subject = record.message.splitlines()[0]
                lines.append(f"* {record.author_date:%Y-%m-%d} by {self._author_name} - {subject}")
        return lines

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    def init_repository(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)
        self._initialized_repos.append(path)

    def stage(self, repo_root: Path, path: Path) -> None:
        if self._stage_raises is not None:
            raise self._stage_raises
        if self._bare:
            raise StagingBareRepository()
        if not path.exists() and path not in self._staged_files:
            raise StagingFileDoesNotExist(path)
        self._pending.append(path)
        self._staged_files.append(path)

    def commit(self, repo_root: Path, message: str, *, allow_empty: bool, no_verify: bool) -> None:
        if self._commit_raises is not None:
            raise self._commit_raises
        if self._bare:
            raise CommitBareRepository()
        if not self._pending and not allow_empty:
            raise CommitFailure("nothing to commit, working tree clean", 1)
        parents = () if self._head is None else (self._head,)
        self._record_commit(parents, message, tuple(self._pending), no_verify)
        self._pending = []

    def stash_push(self, repo_root: Path, message: str) -> None:
        if self._stash_push_raises is not None:
            raise self._stash_push_raises
        self._stash.append(message)
        self._stash_messages.append(message)
        self._dirty = False

    def stash_pop(self, repo_root: Path) -> None:
        if self._stash_pop_raises is not None:
            raise self._stash_pop_raises
        if not self._stash:
            raise StashingError("No stash entries found.", 1)
        self._stash.pop()
        self._stash_pops += 1
        self._dirty = True

    def reset_hard(self, repo_root: Path, sha: str) -> None:
        if self._reset_raises is not None:
            raise self._reset_raises
        self._resets.append(sha)
        self._head = sha
        self._pending = []

    def merge_no_ff(self, repo_root: Path, sha: str, message: str) -> None:
        if self._merge_raises is not None:
            raise self._merge_raises
        self._merges.append((sha, message))
        parents = (sha,) if self._head is None else (self._head, sha)
        self._record_commit(parents, message, (), False)

    # ============================================================================
    # Test Helpers (read-only)
    # ============================================================================

    @property
    def head(self) -> str | None:
        return self._head

    @property
    def commits(self) -> list[CommitRecord]:
        return list(self._commits)

    @property
    def staged_files(self) -> list[Path]:
        return list(self._staged_files)

    @property
    def stash_messages(self) -> list[str]:
        return list(self._stash_messages)

    @property
    def stash_pops(self) -> int:
        return self._stash_pops

    @property
    def stash_depth(self) -> int:
        return len(self._stash)

    @property
    def resets(self) -> list[str]:
        return list(self._resets)

    @property
    def merges(self) -> list[tuple[str, str]]:
        return list(self._merges)

    @property
    def initialized_repos(self) -> list[Path]:
        return list(self._initialized_repos)

    def commit_messages(self) -> list[str]:
        return [record.message for record in self._commits]

    def _find(self, sha: str) -> CommitRecord | None:
        for record in self._commits:
            if record.sha == sha:
                return record
        return None

    def _record_commit(
        self,
        parents: tuple[str, ...],
        message: str,
        staged_files: tuple[Path, ...],
        no_verify: bool,
    ) -> None:
        seed = f"{len(self._commits)}\0{' '.join(parents)}\0{message}"
        sha = hashlib.sha1(seed.encode("utf-8")).hexdigest()
        author_date = FAKE_EPOCH + timedelta(minutes=len(self._commits) + 1)
        self._commits.append(
            CommitRecord(
                sha=sha,
                parents=parents,
                message=message,
                staged_files=staged_files,
                no_verify=no_verify,
                author_date=author_date,
            )
        )
        self._head = sha
