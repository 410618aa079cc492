"""Selecting, ordering and rendering issues for listings.

Reads need no transaction. A field that fails to load drops that issue from
the result and is reported alongside it, so one damaged issue never hides
the rest of a listing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from git_issue.core.errors import CacheError, FormatStringError
from git_issue.core.issue import Issue
from git_issue.core.properties import OPEN_TAG

logger = logging.getLogger(__name__)


# ============================================================================
# Selection
# ============================================================================


@dataclass(frozen=True)
class AnyMilestone:
    """Milestone is not filtered on."""


@dataclass(frozen=True)
class WithoutMilestone:
    """Only issues without a milestone."""


@dataclass(frozen=True)
class MilestoneValue:
    """Only issues with exactly this milestone."""

    name: str


MilestoneFilter = AnyMilestone | WithoutMilestone | MilestoneValue


@dataclass(frozen=True)
class Filter:
    """Conjunction of tag presence, tag absence and milestone match."""

    with_tags: tuple[str, ...]
    without_tags: tuple[str, ...]
    milestone: MilestoneFilter

    @classmethod
    def from_options(
        cls,
        *,
        show_all: bool,
        with_tags: Iterable[str],
        without_tags: Iterable[str],
        milestone: str | None,
        without_milestone: bool,
    ) -> Filter:
        """Build a filter from listing options.

        Unless ``show_all`` is set only open issues are selected.
        """
        if without_milestone:
            milestone_filter: MilestoneFilter = WithoutMilestone()
        elif milestone is not None:
            milestone_filter = MilestoneValue(milestone)
        else:
            milestone_filter = AnyMilestone()

        required = list(with_tags)
        if not show_all:
            required.append(OPEN_TAG)

        return cls(
            with_tags=tuple(required),
            without_tags=tuple(without_tags),
            milestone=milestone_filter,
        )

    def matches(self, issue: Issue) -> bool:
        if isinstance(self.milestone, WithoutMilestone) and issue.milestone is not None:
            return False
        if isinstance(self.milestone, MilestoneValue) and issue.milestone != self.milestone.name:
            return False
        if self.without_tags or self.with_tags:
            tags = issue.tags
            if any(tag in tags for tag in self.without_tags):
                return False
            if not all(tag in tags for tag in self.with_tags):
                return False
        return True

    def apply(self, issues: Iterable[Issue]) -> tuple[list[Issue], list[CacheError]]:
        selected: list[Issue] = []
        errors: list[CacheError] = []
        for issue in issues:
            try:
                if self.matches(issue):
                    selected.append(issue)
            except CacheError as e:
                errors.append(e)
        return selected, errors


# ============================================================================
# Ordering
# ============================================================================


class SortKey(Enum):
    CREATION_DATE = "%c"
    DUE_DATE = "%d"
    DESCRIPTION = "%D"
    MILESTONE = "%M"

    def value_of(self, issue: Issue) -> tuple[Any, ...]:
        """Sort value of an issue; missing values order first."""
        if self is SortKey.CREATION_DATE:
            value: Any = issue.creation_date
        elif self is SortKey.DUE_DATE:
            value = issue.due_date
        elif self is SortKey.DESCRIPTION:
            value = issue.description
        else:
            value = issue.milestone
        if value is None:
            return (False,)
        return (True, value)


def sort_issues(
    issues: list[Issue], key: SortKey, *, reverse: bool
) -> tuple[list[Issue], list[CacheError]]:
    keyed: list[tuple[tuple[Any, ...], Issue]] = []
    errors: list[CacheError] = []
    for issue in issues:
        try:
            keyed.append((key.value_of(issue), issue))
        except CacheError as e:
            errors.append(e)
    keyed.sort(key=lambda pair: pair[0], reverse=reverse)
    return [issue for _, issue in keyed], errors


# ============================================================================
# Projection
# ============================================================================


NAMED_FORMATS = {
    "simple": "%i %D",
    "oneline": "ID: %i  Date: %c  Tags: %T  Desc: %D",
    "short": "ID: %i%nDate: %c%nDue Date: %d%nTags: %T%nDescription: %D",
}


class Placeholder(Enum):
    SHORT_ID = "i"
    ID = "I"
    TITLE = "D"
    MILESTONE = "M"
    CREATION_DATE = "c"
    DUE_DATE = "d"
    TAGS = "T"


_PLACEHOLDER_FIELDS = {
    Placeholder.TITLE: "description",
    Placeholder.MILESTONE: "milestone",
    Placeholder.CREATION_DATE: "creation_date",
    Placeholder.DUE_DATE: "due_date",
    Placeholder.TAGS: "tags",
}


@dataclass(frozen=True)
class FormatString:
    """Parsed listing template.

    ``%i`` short id, ``%I`` id, ``%D`` title, ``%M`` milestone, ``%c``
    creation date, ``%d`` due date, ``%T`` space separated tags, ``%n``
    newline, ``%%`` percent sign. ``simple``, ``oneline`` and ``short`` name
    predefined templates.
    """

    parts: tuple[str | Placeholder, ...]

    @classmethod
    def parse(cls, text: str) -> FormatString:
        """Parse a template or a predefined template name.

        Raises:
            FormatStringError: On an unknown placeholder or a trailing ``%``
        """
        template = NAMED_FORMATS.get(text, text)
        parts: list[str | Placeholder] = []
        literal = ""
        position = 0
        while position < len(template):
            char = template[position]
            position += 1
            if char != "%":
                literal += char
                continue
            if position >= len(template):
                raise FormatStringError("Premature end of string. Expected placeholder")
            code = template[position]
            position += 1
            if code == "%":
                literal += "%"
            elif code == "n":
                literal += "\n"
            else:
                try:
                    placeholder = Placeholder(code)
                except ValueError as e:
                    raise FormatStringError(
                        f"Unexpected format string placeholder '%{code}'"
                    ) from e
                if literal:
                    parts.append(literal)
                    literal = ""
                parts.append(placeholder)
        if literal:
            parts.append(literal)
        return cls(parts=tuple(parts))

    @property
    def fields(self) -> set[str]:
        """Issue fields this template reads."""
        return {
            _PLACEHOLDER_FIELDS[part]
            for part in self.parts
            if isinstance(part, Placeholder) and part in _PLACEHOLDER_FIELDS
        }

    def format(self, issue: Issue) -> str:
        return "".join(self._render(part, issue) for part in self.parts)

    def _render(self, part: str | Placeholder, issue: Issue) -> str:
        if isinstance(part, str):
            return part
        if part is Placeholder.SHORT_ID:
            return issue.short_id
        if part is Placeholder.ID:
            return issue.id.id
        if part is Placeholder.TITLE:
            return issue.title
        if part is Placeholder.MILESTONE:
            return issue.milestone or ""
        if part is Placeholder.CREATION_DATE:
            return str(issue.creation_date)
        if part is Placeholder.DUE_DATE:
            return "" if issue.due_date is None else str(issue.due_date)
        return " ".join(issue.tags)


# ============================================================================
# Query
# ============================================================================


@dataclass(frozen=True)
class Query:
    selection: Filter
    projection: FormatString
    order: SortKey | None
    reverse: bool

    def run(self, issues: Iterable[Issue]) -> tuple[list[str], list[CacheError]]:
        """Render every selected issue, in order."""
        selected, errors = self.selection.apply(issues)

        if self.order is not None:
            selected, sort_errors = sort_issues(selected, self.order, reverse=self.reverse)
            errors.extend(sort_errors)
        elif self.reverse:
            selected.reverse()

        lines: list[str] = []
        for issue in selected:
            try:
                issue.preload(self.projection.fields)
                lines.append(self.projection.format(issue))
            except CacheError as e:
                errors.append(e)

        for error in errors:
            logger.error("%s", error)
        return lines, errors


# ============================================================================
# Milestone summary
# ============================================================================


NO_MILESTONE = "No Milestone"


@dataclass(frozen=True)
class MilestoneSummary:
    name: str
    open: int
    total: int


def summarize_milestones(
    issues: Iterable[Issue], *, show_all: bool
) -> tuple[list[MilestoneSummary], list[CacheError]]:
    """Open and total issue counts per milestone, sorted by name.

    Milestones without open issues are left out unless ``show_all``. The
    last entry always counts the issues without a milestone.
    """
    counts: dict[str | None, list[int]] = {}
    errors: list[CacheError] = []
    for issue in issues:
        try:
            milestone = issue.milestone
            is_open = issue.is_open
        except CacheError as e:
            errors.append(e)
            continue
        open_count, total = counts.get(milestone, [0, 0])
        counts[milestone] = [open_count + int(is_open), total + 1]

    named = sorted((name, counts[name]) for name in counts if name is not None)
    summary = [
        MilestoneSummary(name=name, open=open_count, total=total)
        for name, (open_count, total) in named
        if show_all or open_count > 0
    ]
    unassigned_open, unassigned_total = counts.get(None, [0, 0])
    summary.append(
        MilestoneSummary(name=NO_MILESTONE, open=unassigned_open, total=unassigned_total)
    )
    return summary, errors
