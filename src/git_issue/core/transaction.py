"""Bracketing several property commits so they read as one change.

A transaction records where the branch was when it started and whether the
caller's uncommitted work had to be stashed first. Finishing hard-resets the
branch back to that start and merges the chain of property commits with
``--no-ff``: the branch advances by exactly one commit carrying the summary
message, and the individual commits stay reachable through its second
parent. Rolling back resets to the start and drops them.

    start()                  Idle -> Open
    finish(tx, message)      Open -> Idle   reset + merge + unstash
    finish_without_merge(tx) Open -> Idle   unstash only
    rollback(tx)             Open -> Idle   reset + unstash

A failure while finishing or rolling back is never retried. The raised error
names the command that puts the repository back.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

from git_issue.core.errors import (
    FinishError,
    FinishFailure,
    RollbackError,
    RollbackFailure,
    TransactionAlreadyOpenError,
    TransactionBareRepositoryError,
    TransactionNotStartedError,
    TransactionStashError,
)
from git_issue.gateway.git.abc import Git
from git_issue.gateway.git.errors import GitCommandFailed, StashingError
from git_issue.subprocess_utils import SubprocessKilledError

logger = logging.getLogger(__name__)

STASH_MESSAGE = "git-issue: Start Transaction"


@dataclass(frozen=True)
class Transaction:
    """Token for an open transaction, handed back to finish or rollback.

    Attributes:
        start_sha: HEAD when the transaction started
        stash_before: Whether uncommitted changes were stashed at start
    """

    start_sha: str
    stash_before: bool


class TransactionCoordinator:
    """Owns the single open-transaction slot of one repository handle.

    With ``strict`` set the property commits are left on the branch as they
    are; finishing only restores the stash.
    """

    def __init__(self, git: Git, repo_root: Path, *, strict: bool) -> None:
        self._git = git
        self._repo_root = repo_root
        self._strict = strict
        self._open: Transaction | None = None

    @property
    def current(self) -> Transaction | None:
        return self._open

    def start(self) -> Transaction:
        """Open a transaction on a clean work tree.

        Raises:
            TransactionAlreadyOpenError: If a transaction is already open
            TransactionBareRepositoryError: If HEAD can not be resolved
            TransactionStashError: If uncommitted changes could not be stashed
        """
        if self._open is not None:
            raise TransactionAlreadyOpenError()

        start_sha = self._git.get_head(self._repo_root)
        if start_sha is None:
            raise TransactionBareRepositoryError()

        stash_before = not self._git.is_clean(self._repo_root)
        if stash_before:
            try:
                self._git.stash_push(self._repo_root, STASH_MESSAGE)
            except StashingError as e:
                raise TransactionStashError(str(e)) from e

        transaction = Transaction(start_sha=start_sha, stash_before=stash_before)
        logger.debug("Started transaction at %s (stashed=%s)", start_sha, stash_before)
        self._open = transaction
        return transaction

    def finish(self, transaction: Transaction, message: str) -> None:
        """Collapse the transaction's commits into one merge commit.

        Raises:
            TransactionNotStartedError: If ``transaction`` is not the open one
            FinishError: If reset, merge or unstash failed
        """
        transaction = self._claim(transaction)

        if not self._strict:
            logger.info("Merging issue changes as not fast forward branch")
            end_sha = self._git.get_head(self._repo_root)
            if end_sha is None:
                kind = (
                    FinishFailure.RESET_UNSTASH if transaction.stash_before else FinishFailure.RESET
                )
                raise FinishError(
                    kind, start_sha=transaction.start_sha, detail="HEAD can not be resolved"
                )

            try:
                self._git.reset_hard(self._repo_root, transaction.start_sha)
            except (GitCommandFailed, SubprocessKilledError) as e:
                kind = (
                    FinishFailure.RESET_UNSTASH if transaction.stash_before else FinishFailure.RESET
                )
                raise FinishError(kind, start_sha=transaction.start_sha, detail=str(e)) from e

            try:
                self._git.merge_no_ff(self._repo_root, end_sha, message)
            except (GitCommandFailed, SubprocessKilledError) as e:
                kind = (
                    FinishFailure.MERGE_UNSTASH if transaction.stash_before else FinishFailure.MERGE
                )
                raise FinishError(kind, start_sha=transaction.start_sha, detail=str(e)) from e

        self._unstash_after_finish(transaction)

    def finish_without_merge(self, transaction: Transaction) -> None:
        """Close the transaction leaving its commits on the branch as they are.

        Raises:
            TransactionNotStartedError: If ``transaction`` is not the open one
            FinishError: If the stash could not be restored
        """
        self._unstash_after_finish(self._claim(transaction))

    def rollback(self, transaction: Transaction) -> None:
        """Discard every commit made since the transaction started.

        Raises:
            TransactionNotStartedError: If ``transaction`` is not the open one
            RollbackError: If reset or unstash failed
        """
        transaction = self._claim(transaction)
        logger.debug("Rolling back to %s", transaction.start_sha)

        try:
            self._git.reset_hard(self._repo_root, transaction.start_sha)
        except (GitCommandFailed, SubprocessKilledError) as e:
            kind = (
                RollbackFailure.RESET_UNSTASH
                if transaction.stash_before
                else RollbackFailure.RESET
            )
            raise RollbackError(kind, start_sha=transaction.start_sha, detail=str(e)) from e

        if transaction.stash_before:
            try:
                self._git.stash_pop(self._repo_root)
            except (StashingError, SubprocessKilledError) as e:
                raise RollbackError(
                    RollbackFailure.UNSTASH, start_sha=transaction.start_sha, detail=str(e)
                ) from e

    def _claim(self, transaction: Transaction) -> Transaction:
        # The slot empties before any git call so a failed finish can not be
        # followed by a rollback of the same transaction.
        if self._open is None or self._open is not transaction:
            raise TransactionNotStartedError()
        self._open = None
        return transaction

    def _unstash_after_finish(self, transaction: Transaction) -> None:
        if not transaction.stash_before:
            return
        try:
            self._git.stash_pop(self._repo_root)
        except (StashingError, SubprocessKilledError) as e:
            raise FinishError(
                FinishFailure.UNSTASH, start_sha=transaction.start_sha, detail=str(e)
            ) from e
