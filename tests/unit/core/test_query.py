"""Tests for listing selection, ordering and format strings."""

from pathlib import Path

import pytest

from git_issue.core.config import IssuesConfig
from git_issue.core.errors import CacheError, FormatStringError
from git_issue.core.issue import Issue
from git_issue.core.issue_id import IssueId
from git_issue.core.properties import Property
from git_issue.core.query import (
    NO_MILESTONE,
    Filter,
    FormatString,
    MilestoneSummary,
    Placeholder,
    Query,
    SortKey,
    summarize_milestones,
)
from git_issue.core.source import DataSource
from git_issue.gateway.git.fake import FakeGit


@pytest.fixture
def source(tmp_path: Path) -> DataSource:
    issues_dir = tmp_path / ".issues"
    issues_dir.mkdir()
    config = IssuesConfig(strict_compatibility=False, list_format="simple")
    return DataSource(issues_dir, tmp_path, FakeGit(), config)


def _filter(
    *,
    show_all: bool = False,
    with_tags: tuple[str, ...] = (),
    without_tags: tuple[str, ...] = (),
    milestone: str | None = None,
    without_milestone: bool = False,
) -> Filter:
    return Filter.from_options(
        show_all=show_all,
        with_tags=with_tags,
        without_tags=without_tags,
        milestone=milestone,
        without_milestone=without_milestone,
    )


class TestFormatString:
    def test_named_format_expands(self) -> None:
        parsed = FormatString.parse("simple")
        assert parsed.parts == (Placeholder.SHORT_ID, " ", Placeholder.TITLE)

    def test_escapes(self) -> None:
        parsed = FormatString.parse("100%%%n%I")
        assert parsed.parts == ("100%\n", Placeholder.ID)

    def test_trailing_percent_is_an_error(self) -> None:
        with pytest.raises(FormatStringError, match="Premature end of string"):
            FormatString.parse("%i %")

    def test_unknown_placeholder_is_an_error(self) -> None:
        with pytest.raises(FormatStringError, match="Unexpected format string placeholder '%x'"):
            FormatString.parse("%x")

    def test_fields_lists_what_must_be_read(self) -> None:
        parsed = FormatString.parse("oneline")
        assert parsed.fields == {"creation_date", "tags", "description"}

    def test_format_renders_issue(self, source: DataSource) -> None:
        issue_id = source.create_issue("Crash\n\nDetails", ["bug"], "v1")
        issue = source.get(issue_id)

        text = FormatString.parse("%i|%D|%M|%T|%d").format(issue)

        assert text == f"{issue_id.short}|Crash|v1|bug open|"


class TestFilter:
    def test_default_selects_only_open_issues(self, source: DataSource) -> None:
        kept = source.create_issue("Open one", [], None)
        closed = source.create_issue("Closed one", [], None)
        source.close_issue(closed)

        selected, errors = _filter().apply(source.all())

        assert [issue.id for issue in selected] == [kept]
        assert errors == []

    def test_show_all_includes_closed(self, source: DataSource) -> None:
        source.create_issue("Open one", [], None)
        closed = source.create_issue("Closed one", [], None)
        source.close_issue(closed)

        selected, _ = _filter(show_all=True).apply(source.all())

        assert len(selected) == 2

    def test_tag_presence_and_absence(self, source: DataSource) -> None:
        bug = source.create_issue("Bug", ["bug"], None)
        source.create_issue("Bug wontfix", ["bug", "wontfix"], None)
        source.create_issue("Feature", ["feature"], None)

        selected, _ = _filter(with_tags=("bug",), without_tags=("wontfix",)).apply(source.all())

        assert [issue.id for issue in selected] == [bug]

    def test_milestone_value_and_absence(self, source: DataSource) -> None:
        planned = source.create_issue("Planned", [], "v1")
        unplanned = source.create_issue("Unplanned", [], None)

        with_milestone, _ = _filter(milestone="v1").apply(source.all())
        without_milestone, _ = _filter(without_milestone=True).apply(source.all())

        assert [issue.id for issue in with_milestone] == [planned]
        assert [issue.id for issue in without_milestone] == [unplanned]

    def test_unreadable_issue_is_reported_not_fatal(self, source: DataSource) -> None:
        good = source.create_issue("Good", [], None)
        broken = IssueId("ff" + "0" * 38)
        broken.path(source.issues_dir).mkdir(parents=True)
        (broken.path(source.issues_dir) / Property.TAGS.filename).mkdir()

        selected, errors = _filter().apply(source.all())

        assert [issue.id for issue in selected] == [good]
        assert len(errors) == 1
        assert isinstance(errors[0], CacheError)


class TestQuery:
    def test_orders_by_description(self, source: DataSource) -> None:
        source.create_issue("b second", [], None)
        source.create_issue("a first", [], None)
        query = Query(
            selection=_filter(),
            projection=FormatString.parse("%D"),
            order=SortKey.DESCRIPTION,
            reverse=False,
        )

        lines, errors = query.run(source.all())

        assert lines == ["a first", "b second"]
        assert errors == []

    def test_missing_values_sort_first(self, source: DataSource) -> None:
        source.create_issue("with", [], "v1")
        source.create_issue("without", [], None)
        source.create_issue("also without", [], None)
        query = Query(
            selection=_filter(),
            projection=FormatString.parse("%D"),
            order=SortKey.MILESTONE,
            reverse=False,
        )

        lines, _ = query.run(source.all())

        assert sorted(lines[:2]) == ["also without", "without"]
        assert lines[2] == "with"

    def test_reverse_creation_order(self, source: DataSource) -> None:
        source.create_issue("older", [], None)
        source.create_issue("newer", [], None)
        query = Query(
            selection=_filter(),
            projection=FormatString.parse("%D"),
            order=SortKey.CREATION_DATE,
            reverse=True,
        )

        lines, _ = query.run(source.all())

        assert lines == ["newer", "older"]


def test_issue_fields_are_read_once(source: DataSource) -> None:
    issue_id = source.create_issue("Crash", [], None)
    issue = Issue(source, issue_id)
    assert issue.title == "Crash"

    source.store.path(issue_id, Property.DESCRIPTION).write_text("Changed\n", encoding="utf-8")

    assert issue.title == "Crash"
    assert source.get(issue_id).title == "Changed"


def test_preload_rejects_unknown_field(source: DataSource) -> None:
    issue = source.get(source.create_issue("Crash", [], None))
    with pytest.raises(ValueError):
        issue.preload(["assignee"])


def test_milestone_summary(source: DataSource) -> None:
    source.create_issue("a", [], "v1")
    done = source.create_issue("b", [], "v1")
    source.close_issue(done)
    finished = source.create_issue("c", [], "v0")
    source.close_issue(finished)
    source.create_issue("d", [], None)

    summary, errors = summarize_milestones(source.all(), show_all=False)
    everything, _ = summarize_milestones(source.all(), show_all=True)

    assert errors == []
    assert summary == [
        MilestoneSummary(name="v1", open=1, total=2),
        MilestoneSummary(name=NO_MILESTONE, open=1, total=1),
    ]
    assert everything[0] == MilestoneSummary(name="v0", open=0, total=1)
