"""One property change, one commit.

Tracker commits are bookkeeping, not source changes, so they always bypass
the repository's commit hooks.
"""

import logging
from pathlib import Path

from git_issue.core.errors import CommitWriteError
from git_issue.core.issue_id import IssueId
from git_issue.core.properties import PropertyChange, WriteResult, commit_message
from git_issue.core.store import PropertyStore
from git_issue.gateway.git.abc import Git
from git_issue.gateway.git.errors import CommitError

logger = logging.getLogger(__name__)


class CommitWriter:
    """Applies property changes through a PropertyStore and commits each one."""

    def __init__(self, store: PropertyStore, git: Git, repo_root: Path, *, strict: bool) -> None:
        self._store = store
        self._git = git
        self._repo_root = repo_root
        self._strict = strict

    def write(self, issue_id: IssueId, change: PropertyChange) -> WriteResult:
        """Write ``change`` and commit it.

        Returns:
            APPLIED with exactly one new commit, or NO_CHANGES with none

        Raises:
            WritePropertyError: If the file could not be written or staged
            CommitWriteError: If git refused the commit
        """
        result = self._store.write_file(issue_id, change)
        if result is WriteResult.NO_CHANGES:
            return result
        self._commit(commit_message(issue_id, change, strict=self._strict), allow_empty=False)
        return result

    def mark(self, message: str) -> str:
        """Create an empty marker commit and return its hash."""
        self._commit(message, allow_empty=True)
        head = self._git.get_head(self._repo_root)
        if head is None:
            raise CommitWriteError("Marker commit did not advance HEAD")
        logger.debug("%s %s", message.splitlines()[-1], head)
        return head

    def _commit(self, message: str, *, allow_empty: bool) -> None:
        try:
            self._git.commit(self._repo_root, message, allow_empty=allow_empty, no_verify=True)
        except CommitError as e:
            raise CommitWriteError.from_commit(e) from e
