"""Issue properties, property changes and the commit messages they produce.

Each mutation of an issue is one of a small closed set of change values.
The commit message of every change comes from ``MESSAGE_TEMPLATES`` so the
wording of history is declared in one place.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from git_issue.core.issue_id import IssueId


class Property(Enum):
    """One independently stored attribute of an issue."""

    DESCRIPTION = "description"
    DUE_DATE = "duedate"
    TAGS = "tags"
    MILESTONE = "milestone"

    @property
    def filename(self) -> str:
        return self.value


COMMENTS_DIR = "comments"
OPEN_TAG = "open"
CLOSED_TAG = "closed"


class Action(Enum):
    ADD = "add"
    REMOVE = "remove"


class ChangeAction(Enum):
    NEW = "new"
    EDIT = "edit"


class WriteResult(Enum):
    """Whether a requested change altered the repository."""

    APPLIED = "applied"
    NO_CHANGES = "no-changes"

    @staticmethod
    def combine(results: Iterable[WriteResult]) -> WriteResult:
        """APPLIED if any of the results was applied."""
        if any(result is WriteResult.APPLIED for result in results):
            return WriteResult.APPLIED
        return WriteResult.NO_CHANGES


@dataclass(frozen=True)
class DescriptionChange:
    action: ChangeAction
    text: str

    filename: ClassVar[str] = Property.DESCRIPTION.filename

    @property
    def template_value(self) -> str:
        return self.text.splitlines()[0] if self.text else ""


@dataclass(frozen=True)
class TagChange:
    action: Action
    tag: str

    filename: ClassVar[str] = Property.TAGS.filename

    @property
    def template_value(self) -> str:
        return self.tag


@dataclass(frozen=True)
class MilestoneChange:
    action: Action
    milestone: str

    filename: ClassVar[str] = Property.MILESTONE.filename

    @property
    def template_value(self) -> str:
        return self.milestone


@dataclass(frozen=True)
class DueDateChange:
    """Set or clear the due date; ``when`` is RFC-3339 text."""

    action: Action
    when: str

    filename: ClassVar[str] = Property.DUE_DATE.filename

    @property
    def template_value(self) -> str:
        return self.when


@dataclass(frozen=True)
class CommentChange:
    """Add a comment stored at ``comments/<comment_id>``."""

    comment_id: str
    body: str
    action: Action = Action.ADD

    @property
    def filename(self) -> str:
        return f"{COMMENTS_DIR}/{self.comment_id}"

    @property
    def template_value(self) -> str:
        return self.comment_id


PropertyChange = DescriptionChange | TagChange | MilestoneChange | DueDateChange | CommentChange


@dataclass(frozen=True)
class MessageTemplate:
    """Commit message wording for one kind of change.

    ``subject`` is used normally; ``strict_subject`` when the repository must
    stay byte-compatible with the shell implementation's history. Both and
    ``body`` are ``str.format`` templates over ``id``, ``short`` and ``value``.
    """

    subject: str
    strict_subject: str
    body: str


MESSAGE_TEMPLATES: dict[tuple[type, Enum], MessageTemplate] = {
    (DescriptionChange, ChangeAction.NEW): MessageTemplate(
        subject="gi: Add issue description",
        strict_subject="gi: Add issue description",
        body="gi new description {id}",
    ),
    (DescriptionChange, ChangeAction.EDIT): MessageTemplate(
        subject="gi: Edit issue description",
        strict_subject="gi: Edit issue description",
        body="gi edit description {id}",
    ),
    (TagChange, Action.ADD): MessageTemplate(
        subject="gi({short}): Add tag {value}",
        strict_subject="gi: Add tag",
        body="gi tag add {value}",
    ),
    (TagChange, Action.REMOVE): MessageTemplate(
        subject="gi({short}): Remove tag {value}",
        strict_subject="gi: Remove tag",
        body="gi tag remove {value}",
    ),
    (MilestoneChange, Action.ADD): MessageTemplate(
        subject="gi({short}): Add milestone {value}",
        strict_subject="gi: Add milestone",
        body="gi milestone add {value}",
    ),
    (MilestoneChange, Action.REMOVE): MessageTemplate(
        subject="gi({short}): Remove milestone {value}",
        strict_subject="gi: Remove milestone",
        body="gi milestone remove {value}",
    ),
    (DueDateChange, Action.ADD): MessageTemplate(
        subject="gi({short}): Set due date {value}",
        strict_subject="gi: Set due date",
        body="gi duedate set {value}",
    ),
    (DueDateChange, Action.REMOVE): MessageTemplate(
        subject="gi({short}): Remove due date {value}",
        strict_subject="gi: Remove due date",
        body="gi duedate remove {value}",
    ),
    (CommentChange, Action.ADD): MessageTemplate(
        subject="gi({short}): Add comment {value:.8}",
        strict_subject="gi: Add comment",
        body="gi comment add {value}",
    ),
}

ISSUE_MARK_MESSAGE = "gi: Add issue\n\ngi new mark"
COMMENT_MARK_MESSAGE = "gi: Add comment\n\ngi comment mark {id}"


def commit_message(issue_id: IssueId, change: PropertyChange, *, strict: bool) -> str:
    """Build the full commit message recorded for ``change``."""
    template = MESSAGE_TEMPLATES[(type(change), change.action)]
    fields = {
        "id": issue_id.id,
        "short": issue_id.short,
        "value": change.template_value,
    }
    subject = template.strict_subject if strict else template.subject
    return f"{subject.format(**fields)}\n\n{template.body.format(**fields)}"
