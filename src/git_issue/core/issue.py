"""Issue entity with per-field reads memoized on first access."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from functools import cached_property
from typing import TYPE_CHECKING, TypeVar

from git_issue.core.errors import CacheError
from git_issue.core.issue_id import SHORT_ID_LENGTH, IssueId
from git_issue.core.properties import OPEN_TAG, Property
from git_issue.subprocess_utils import SubprocessError, SubprocessKilledError

if TYPE_CHECKING:
    from git_issue.core.source import DataSource

T = TypeVar("T")

FIELDS = ("creation_date", "due_date", "description", "milestone", "tags", "comments")


@dataclass(frozen=True)
class Comment:
    """One comment; ``id`` is the hash of the commit that created it."""

    id: str
    author: str
    created: datetime
    body: str

    @property
    def short_id(self) -> str:
        return self.id[:SHORT_ID_LENGTH]


class Issue:
    """A view of one issue whose fields are read from disk at most once.

    Filesystem failures surface as CacheError from whichever access first
    needed the field. ``preload`` reads a set of fields up front.
    """

    def __init__(self, source: DataSource, issue_id: IssueId) -> None:
        self._source = source
        self._id = issue_id

    def __repr__(self) -> str:
        return f"Issue({self._id.id!r})"

    @property
    def id(self) -> IssueId:
        return self._id

    @property
    def short_id(self) -> str:
        return self._id.short

    @cached_property
    def creation_date(self) -> datetime:
        return self._load("creation date", lambda: self._source.creation_date(self._id))

    @cached_property
    def due_date(self) -> datetime | None:
        return self._load("due date", lambda: self._source.duedate(self._id))

    @cached_property
    def description(self) -> str:
        return self._load(
            "description", lambda: self._source.read(self._id, Property.DESCRIPTION)
        )

    @property
    def title(self) -> str:
        lines = self.description.splitlines()
        return lines[0] if lines else ""

    @cached_property
    def milestone(self) -> str | None:
        return self._load("milestone", lambda: self._source.milestone(self._id))

    @cached_property
    def tags(self) -> list[str]:
        return self._load("tags", lambda: self._source.tags(self._id))

    @cached_property
    def comments(self) -> list[Comment]:
        return self._load("comments", lambda: self._source.comments(self._id))

    @property
    def is_open(self) -> bool:
        return OPEN_TAG in self.tags

    def preload(self, fields: Iterable[str]) -> None:
        """Read the named fields now.

        Raises:
            ValueError: If a name is not one of FIELDS
            CacheError: If a field can not be read
        """
        for field in fields:
            if field not in FIELDS:
                raise ValueError(f"Unknown issue field {field!r}")
            getattr(self, field)

    def _load(self, field: str, reader: Callable[[], T]) -> T:
        try:
            return reader()
        except OSError as e:
            raise CacheError.from_os_error(field, e) from e
        except SubprocessKilledError:
            raise
        except SubprocessError as e:
            raise CacheError(f"Failed to read {field}: {e}", exit_code=e.returncode) from e
