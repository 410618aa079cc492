"""Exception taxonomy for issue tracker operations.

Every exception carries the process exit status the CLI reports for it.
Transaction finish and rollback failures also carry the exact shell command
that restores the repository, since the branch or the stash is left in a
state the operator may not notice.
"""

from __future__ import annotations

import errno
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from git_issue.gateway.git.errors import (
    CommitBareRepository,
    CommitError,
    StagingBareRepository,
    StagingError,
    StagingFailure,
    StagingFileDoesNotExist,
)

if TYPE_CHECKING:
    from git_issue.core.issue_id import IssueId

# Repository already exists / git repository missing
E_REPO_EXIST = 128 + 7
# Bare repository where a work tree is required
E_REPO_BARE = 128 + 41
# .issues directory missing
E_ISSUES_DIR_EXIST = 128 + 16 + 7
# Stashing operation failed
E_STASH_ERROR = 128 + 16 + 16 + 5
# Editor was terminated by a signal
E_EDITOR_KILLED = errno.EINTR
# Programming defect
EDOOFUS = 88


class GitIssueError(Exception):
    """Base class for all tracker errors."""

    exit_code: int = 1

    def __init__(self, message: str, *, exit_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if exit_code is not None:
            self.exit_code = exit_code


# ============================================================================
# Resolution
# ============================================================================


class FindError(GitIssueError):
    exit_code = errno.ENOENT


class IssueNotFoundError(FindError):
    def __init__(self, needle: str) -> None:
        super().__init__(f"Not found issue with prefix {needle}")
        self.needle = needle


class MultipleIssuesFoundError(FindError):
    def __init__(self, needle: str, candidates: list[IssueId]) -> None:
        listing = ", ".join(c.id for c in candidates)
        super().__init__(f"Issue prefix {needle} matched multiple issues: {listing}")
        self.needle = needle
        self.candidates = candidates


# ============================================================================
# Initialization
# ============================================================================


class InitError(GitIssueError):
    pass


class GitRepoNotFoundError(InitError):
    exit_code = E_REPO_EXIST

    def __init__(self) -> None:
        super().__init__("Git repository not found")


class IssuesRepoNotFoundError(InitError):
    exit_code = E_ISSUES_DIR_EXIST

    def __init__(self) -> None:
        super().__init__("Not an issues repository (or any of the parent directories)")


class BareRepositoryError(InitError):
    exit_code = E_REPO_BARE

    def __init__(self) -> None:
        super().__init__("Can not use bare git repository")


class IssuesDirExistsError(InitError):
    exit_code = errno.EEXIST

    def __init__(self, path: Path) -> None:
        super().__init__(f"An .issues directory is already present in {path}")
        self.path = path


class ConfigError(GitIssueError):
    exit_code = errno.EINVAL


# ============================================================================
# Writes
# ============================================================================


class WriteError(GitIssueError):
    """A property write or its commit failed."""


class WritePropertyError(WriteError):
    """Writing or staging a property file failed."""

    @classmethod
    def from_staging(cls, error: StagingError) -> WritePropertyError:
        if isinstance(error, StagingBareRepository):
            return cls("Can not use bare git repository", exit_code=E_REPO_BARE)
        if isinstance(error, StagingFileDoesNotExist):
            return cls(f"Unstaged file {error.path} Bug?", exit_code=EDOOFUS)
        if isinstance(error, StagingFailure):
            return cls(str(error), exit_code=error.code)
        return cls(str(error))

    @classmethod
    def from_os_error(cls, error: OSError) -> WritePropertyError:
        return cls(str(error), exit_code=error.errno or 1)


class CommitWriteError(WriteError):
    """Committing a staged property failed."""

    @classmethod
    def from_commit(cls, error: CommitError) -> CommitWriteError:
        if isinstance(error, CommitBareRepository):
            return cls("Bare repository", exit_code=E_REPO_BARE)
        return cls(str(error), exit_code=getattr(error, "code", 1))


# ============================================================================
# Transactions
# ============================================================================


class TransactionError(GitIssueError):
    pass


class TransactionNotStartedError(TransactionError):
    exit_code = EDOOFUS

    def __init__(self) -> None:
        super().__init__("Bug! Transaction not started!")


class TransactionAlreadyOpenError(TransactionError):
    exit_code = EDOOFUS

    def __init__(self) -> None:
        super().__init__("Bug! A transaction is already open!")


class TransactionBareRepositoryError(TransactionError):
    exit_code = E_REPO_BARE

    def __init__(self) -> None:
        super().__init__("Can not use bare git repository")


class TransactionStashError(TransactionError):
    exit_code = E_STASH_ERROR


class FinishFailure(Enum):
    RESET = "reset"
    RESET_UNSTASH = "reset-unstash"
    MERGE = "merge"
    MERGE_UNSTASH = "merge-unstash"
    UNSTASH = "unstash"


class RollbackFailure(Enum):
    RESET = "reset"
    RESET_UNSTASH = "reset-unstash"
    UNSTASH = "unstash"


UNSTASH_HINT = "{detail}\nFailed to unstash changes.\nUse git stash pop to do it manually."


def _recovery_command(start_sha: str, *, reset: bool, unstash: bool) -> str:
    steps = []
    if reset:
        steps.append(f"git reset --hard {start_sha}")
    if unstash:
        steps.append("git stash pop")
    return " && ".join(steps)


class FinishError(TransactionError):
    """The collapse of a transaction into one commit failed part way."""

    exit_code = errno.ENOEXEC

    def __init__(self, kind: FinishFailure, *, start_sha: str, detail: str) -> None:
        self.kind = kind
        self.start_sha = start_sha
        self.detail = detail
        self.recovery_command = _recovery_command(
            start_sha,
            reset=kind is not FinishFailure.UNSTASH,
            unstash=kind
            in (FinishFailure.RESET_UNSTASH, FinishFailure.MERGE_UNSTASH, FinishFailure.UNSTASH),
        )
        super().__init__(self._render())

    def _render(self) -> str:
        if self.kind is FinishFailure.UNSTASH:
            return UNSTASH_HINT.format(detail=self.detail)
        if self.kind in (FinishFailure.RESET, FinishFailure.RESET_UNSTASH):
            headline = f"Failed to reset back to commit {self.start_sha}."
        else:
            headline = "Failed to merge issue changes."
        return (
            f"{headline}\n{self.detail}\n"
            f"To restore your repo to its previous state, use:\n {self.recovery_command}"
        )


class RollbackError(TransactionError):
    """Discarding a transaction failed part way."""

    exit_code = errno.ENOEXEC

    def __init__(self, kind: RollbackFailure, *, start_sha: str, detail: str) -> None:
        self.kind = kind
        self.start_sha = start_sha
        self.detail = detail
        self.recovery_command = _recovery_command(
            start_sha,
            reset=kind is not RollbackFailure.UNSTASH,
            unstash=kind in (RollbackFailure.RESET_UNSTASH, RollbackFailure.UNSTASH),
        )
        super().__init__(self._render())

    def _render(self) -> str:
        if self.kind is RollbackFailure.UNSTASH:
            return UNSTASH_HINT.format(detail=self.detail)
        if self.kind is RollbackFailure.RESET:
            return (
                f"Failed to reset back to commit {self.start_sha}.\n{self.detail}\n"
                f"Use {self.recovery_command}."
            )
        return (
            f"Failed to reset back to commit {self.start_sha}.\n{self.detail}\n"
            f"To restore your data use:\n {self.recovery_command}"
        )


# ============================================================================
# Reads and presentation
# ============================================================================


class CacheError(GitIssueError):
    """Reading an issue field from disk failed."""

    @classmethod
    def from_os_error(cls, field: str, error: OSError) -> CacheError:
        return cls(f"Failed to read {field}: {error}", exit_code=error.errno or 1)


class PropertyValueError(GitIssueError):
    """A property file holds a value that can not be parsed."""

    exit_code = errno.EINVAL


class FormatStringError(GitIssueError):
    exit_code = errno.EINVAL


class EditorError(GitIssueError):
    pass
