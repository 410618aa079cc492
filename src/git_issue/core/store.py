"""Reading and writing property files of a single issue.

On-disk format, one directory per issue:

    description   free text, first line is the title, one trailing newline
    tags          sorted, deduplicated, one tag per line, trailing newline
    milestone     single value plus newline; absent file means unset
    duedate       RFC-3339 timestamp plus newline; absent file means unset
    comments/<id> comment body plus newline
"""

import logging
from pathlib import Path

from git_issue.core.errors import WritePropertyError
from git_issue.core.issue_id import IssueId
from git_issue.core.properties import (
    Action,
    CommentChange,
    DescriptionChange,
    DueDateChange,
    MilestoneChange,
    Property,
    PropertyChange,
    TagChange,
    WriteResult,
)
from git_issue.gateway.git.abc import Git
from git_issue.gateway.git.errors import StagingError

logger = logging.getLogger(__name__)


def normalize_tags(tags: list[str]) -> list[str]:
    """Sort ascending and drop duplicates and blank entries."""
    return sorted({tag for tag in tags if tag})


def parse_tags(text: str) -> list[str]:
    """One tag per line, taken verbatim; blank lines are skipped."""
    return [line for line in text.splitlines() if line]


class PropertyStore:
    """Property files of every issue below one ``.issues`` directory.

    Every write that changes a file stages it, so the following commit
    captures exactly that change. A write that would leave the file as it is
    stages nothing and reports NO_CHANGES.
    """

    def __init__(self, issues_dir: Path, repo_root: Path, git: Git) -> None:
        self._issues_dir = issues_dir
        self._repo_root = repo_root
        self._git = git

    @property
    def issues_dir(self) -> Path:
        return self._issues_dir

    def path(self, issue_id: IssueId, prop: Property) -> Path:
        return issue_id.path(self._issues_dir) / prop.filename

    def read(self, issue_id: IssueId, prop: Property) -> str:
        """Read a property with trailing whitespace stripped.

        Raises:
            FileNotFoundError: If the property is not set
        """
        return self.path(issue_id, prop).read_text(encoding="utf-8").rstrip()

    def read_optional(self, issue_id: IssueId, prop: Property) -> str | None:
        try:
            return self.read(issue_id, prop)
        except FileNotFoundError:
            return None

    def read_tags(self, issue_id: IssueId) -> list[str]:
        try:
            text = self.path(issue_id, Property.TAGS).read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        return parse_tags(text)

    def write_file(self, issue_id: IssueId, change: PropertyChange) -> WriteResult:
        """Apply ``change`` to its file and stage it, without committing.

        Raises:
            WritePropertyError: If the file can not be written or staged
        """
        issue_dir = issue_id.path(self._issues_dir)
        path = issue_dir / change.filename

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            old_content = path.read_text(encoding="utf-8") if path.exists() else None
            new_content = self._render(change, old_content)

            if new_content == old_content:
                logger.debug("Unchanged %s", path)
                return WriteResult.NO_CHANGES

            logger.debug("Writing %s", path)
            if new_content is None:
                path.unlink()
            else:
                path.write_text(new_content, encoding="utf-8")
        except OSError as e:
            raise WritePropertyError.from_os_error(e) from e

        logger.debug("Staging %s", path)
        try:
            self._git.stage(self._repo_root, path)
        except StagingError as e:
            raise WritePropertyError.from_staging(e) from e
        return WriteResult.APPLIED

    def _render(self, change: PropertyChange, old_content: str | None) -> str | None:
        """New file content for ``change``; None deletes the file."""
        if isinstance(change, TagChange):
            tags = parse_tags(old_content) if old_content is not None else []
            if change.action is Action.ADD:
                tags.append(change.tag)
            else:
                tags = [tag for tag in tags if tag != change.tag]
            return "\n".join(normalize_tags(tags)) + "\n"

        if isinstance(change, DescriptionChange):
            return change.text.rstrip() + "\n"

        if isinstance(change, CommentChange):
            return change.body.rstrip() + "\n"

        if isinstance(change, MilestoneChange | DueDateChange):
            if change.action is Action.REMOVE:
                return None
            value = change.milestone if isinstance(change, MilestoneChange) else change.when
            return value + "\n"

        raise TypeError(f"Unknown property change {change!r}")
