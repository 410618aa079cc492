"""Entry point for reading and changing the issues of one repository."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from git_issue.core.config import IssuesConfig, load_config
from git_issue.core.errors import (
    BareRepositoryError,
    GitRepoNotFoundError,
    IssuesRepoNotFoundError,
    PropertyValueError,
)
from git_issue.core.issue import Comment, Issue
from git_issue.core.issue_id import IssueId, list_issue_ids, resolve
from git_issue.core.properties import (
    CLOSED_TAG,
    COMMENT_MARK_MESSAGE,
    COMMENTS_DIR,
    ISSUE_MARK_MESSAGE,
    OPEN_TAG,
    Action,
    ChangeAction,
    CommentChange,
    DescriptionChange,
    DueDateChange,
    MilestoneChange,
    Property,
    TagChange,
    WriteResult,
)
from git_issue.core.store import PropertyStore
from git_issue.core.transaction import Transaction, TransactionCoordinator
from git_issue.core.writer import CommitWriter
from git_issue.gateway.git.abc import Git

logger = logging.getLogger(__name__)

ISSUES_DIRNAME = ".issues"


def find_issues_dir(start: Path) -> Path | None:
    """Find `.issues` in start or the closest parent that has one."""
    for directory in (start, *start.parents):
        candidate = directory / ISSUES_DIRNAME
        if candidate.exists():
            return candidate
    return None


def parse_due_date(text: str) -> datetime:
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise PropertyValueError(f"Invalid RFC-3339 due date {text!r}") from e


class DataSource:
    """Issues stored below one `.issues` directory.

    Reads go straight to the property files. Every mutating method makes
    one commit per changed property and is meant to run inside a
    transaction: callers start one, perform their writes, then finish it
    on success or roll it back.

        data = DataSource.discover(cwd, git)
        issue_id = data.find_issue("2d9d")
        tx = data.start_transaction()
        try:
            result = data.close_issue(issue_id)
        except GitIssueError:
            data.rollback_transaction(tx)
            raise
        if result is WriteResult.APPLIED:
            data.finish_transaction(tx, "DONE(2d9deaf1): Crash on empty input")
        else:
            data.rollback_transaction(tx)
    """

    def __init__(self, issues_dir: Path, repo_root: Path, git: Git, config: IssuesConfig) -> None:
        self.issues_dir = issues_dir
        self.repo_root = repo_root
        self.git = git
        self.config = config
        strict = config.strict_compatibility
        self._store = PropertyStore(issues_dir, repo_root, git)
        self._writer = CommitWriter(self._store, git, repo_root, strict=strict)
        self._transactions = TransactionCoordinator(git, repo_root, strict=strict)

    @classmethod
    def discover(cls, cwd: Path, git: Git) -> DataSource:
        """Open the issues repository containing cwd.

        Raises:
            IssuesRepoNotFoundError: If no `.issues` exists in cwd or above
            BareRepositoryError: If `.issues` lives in a bare repository
            GitRepoNotFoundError: If `.issues` is not inside a git work tree
        """
        issues_dir = find_issues_dir(cwd)
        if issues_dir is None:
            raise IssuesRepoNotFoundError()
        repo_root = git.get_repository_root(issues_dir)
        if repo_root is None:
            if git.is_bare_repository(issues_dir):
                raise BareRepositoryError()
            raise GitRepoNotFoundError()
        logger.debug("Using issues in %s (repository %s)", issues_dir, repo_root)
        return cls(issues_dir, repo_root, git, load_config(issues_dir))

    @property
    def store(self) -> PropertyStore:
        return self._store

    # ============================================================================
    # Lookup
    # ============================================================================

    def all_ids(self) -> list[IssueId]:
        return list_issue_ids(self.issues_dir)

    def all(self) -> Iterator[Issue]:
        for issue_id in self.all_ids():
            yield Issue(self, issue_id)

    def get(self, issue_id: IssueId) -> Issue:
        return Issue(self, issue_id)

    def find_issue(self, needle: str) -> IssueId:
        """Resolve a full or abbreviated identifier.

        Raises:
            IssueNotFoundError: If nothing matches
            MultipleIssuesFoundError: If the needle is ambiguous
        """
        return resolve(needle, self.issues_dir)

    # ============================================================================
    # Reads
    # ============================================================================

    def read(self, issue_id: IssueId, prop: Property) -> str:
        return self._store.read(issue_id, prop)

    def title(self, issue_id: IssueId) -> str:
        description = self._store.read(issue_id, Property.DESCRIPTION)
        lines = description.splitlines()
        return lines[0] if lines else ""

    def tags(self, issue_id: IssueId) -> list[str]:
        return self._store.read_tags(issue_id)

    def milestone(self, issue_id: IssueId) -> str | None:
        return self._store.read_optional(issue_id, Property.MILESTONE)

    def duedate(self, issue_id: IssueId) -> datetime | None:
        text = self._store.read_optional(issue_id, Property.DUE_DATE)
        if text is None:
            return None
        return parse_due_date(text)

    def creation_date(self, issue_id: IssueId) -> datetime:
        """Author date of the issue's marker commit."""
        return self.git.get_author_date(self.repo_root, issue_id.id)

    def comments(self, issue_id: IssueId) -> list[Comment]:
        """Comments of an issue, oldest first."""
        comments_dir = issue_id.path(self.issues_dir) / COMMENTS_DIR
        if not comments_dir.is_dir():
            return []
        comments = [
            Comment(
                id=path.name,
                author=self.git.get_author_name(self.repo_root, path.name),
                created=self.git.get_author_date(self.repo_root, path.name),
                body=path.read_text(encoding="utf-8").rstrip(),
            )
            for path in comments_dir.iterdir()
            if path.is_file()
        ]
        comments.sort(key=lambda comment: comment.created)
        return comments

    def history(self, issue_id: IssueId) -> list[str]:
        """One line per commit that touched the issue's files, oldest first."""
        issue_dir = issue_id.path(self.issues_dir)
        if not issue_dir.is_dir():
            return []
        paths = sorted(p for p in issue_dir.rglob("*") if p.is_file())
        return self.git.get_file_history(self.repo_root, paths)

    # ============================================================================
    # Writes
    # ============================================================================

    def create_issue(self, description: str, tags: list[str], milestone: str | None) -> IssueId:
        """Create an issue: marker commit, description, `open` tag, tags, milestone."""
        issue_id = IssueId(self._writer.mark(ISSUE_MARK_MESSAGE))
        self.new_description(issue_id, description)
        for tag in tags:
            self.add_tag(issue_id, tag)
        if milestone is not None:
            self.add_milestone(issue_id, milestone)
        return issue_id

    def new_description(self, issue_id: IssueId, text: str) -> None:
        description = DescriptionChange(action=ChangeAction.NEW, text=text)
        open_tag = TagChange(action=Action.ADD, tag=OPEN_TAG)
        if self.config.strict_compatibility:
            # The shell tool records the initial tag in the description commit
            self._store.write_file(issue_id, open_tag)
            self._writer.write(issue_id, description)
        else:
            self._writer.write(issue_id, description)
            self._writer.write(issue_id, open_tag)

    def edit_description(self, issue_id: IssueId, text: str) -> WriteResult:
        return self._writer.write(issue_id, DescriptionChange(action=ChangeAction.EDIT, text=text))

    def add_tag(self, issue_id: IssueId, tag: str) -> WriteResult:
        if tag in self.tags(issue_id):
            return WriteResult.NO_CHANGES
        return self._writer.write(issue_id, TagChange(action=Action.ADD, tag=tag))

    def remove_tag(self, issue_id: IssueId, tag: str) -> WriteResult:
        if tag not in self.tags(issue_id):
            return WriteResult.NO_CHANGES
        return self._writer.write(issue_id, TagChange(action=Action.REMOVE, tag=tag))

    def close_issue(self, issue_id: IssueId) -> WriteResult:
        """Replace the `open` tag with `closed`."""
        removed = self.remove_tag(issue_id, OPEN_TAG)
        added = self.add_tag(issue_id, CLOSED_TAG)
        return WriteResult.combine([removed, added])

    def add_milestone(self, issue_id: IssueId, milestone: str) -> WriteResult:
        if self.milestone(issue_id) == milestone:
            return WriteResult.NO_CHANGES
        change = MilestoneChange(action=Action.ADD, milestone=milestone)
        return self._writer.write(issue_id, change)

    def remove_milestone(self, issue_id: IssueId) -> WriteResult:
        current = self.milestone(issue_id)
        if current is None:
            return WriteResult.NO_CHANGES
        change = MilestoneChange(action=Action.REMOVE, milestone=current)
        return self._writer.write(issue_id, change)

    def set_due_date(self, issue_id: IssueId, when: datetime) -> WriteResult:
        if when.tzinfo is None:
            when = when.astimezone()
        text = when.isoformat()
        if self._store.read_optional(issue_id, Property.DUE_DATE) == text:
            return WriteResult.NO_CHANGES
        return self._writer.write(issue_id, DueDateChange(action=Action.ADD, when=text))

    def remove_due_date(self, issue_id: IssueId) -> WriteResult:
        current = self._store.read_optional(issue_id, Property.DUE_DATE)
        if current is None:
            return WriteResult.NO_CHANGES
        return self._writer.write(issue_id, DueDateChange(action=Action.REMOVE, when=current))

    def add_comment(self, issue_id: IssueId, body: str) -> str:
        """Add a comment and return its identifier (its marker commit hash)."""
        comment_id = self._writer.mark(COMMENT_MARK_MESSAGE.format(id=issue_id.id))
        self._writer.write(issue_id, CommentChange(comment_id=comment_id, body=body))
        return comment_id

    # ============================================================================
    # Transactions
    # ============================================================================

    def start_transaction(self) -> Transaction:
        return self._transactions.start()

    def finish_transaction(self, transaction: Transaction, message: str) -> None:
        self._transactions.finish(transaction, message)

    def finish_transaction_without_merge(self, transaction: Transaction) -> None:
        self._transactions.finish_without_merge(transaction)

    def rollback_transaction(self, transaction: Transaction) -> None:
        self._transactions.rollback(transaction)

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """Open a transaction that is rolled back unless the body closes it.

        The body finishes (or rolls back) the yielded transaction itself.
        When the body raises, or returns with the transaction still open,
        every commit it made is discarded.
        """
        transaction = self.start_transaction()
        try:
            yield transaction
        except Exception:
            if self._transactions.current is transaction:
                logger.warning("Rolling back transaction")
                self.rollback_transaction(transaction)
            raise
        if self._transactions.current is transaction:
            self.rollback_transaction(transaction)
