"""Tests for identifier layout and prefix resolution."""

from pathlib import Path

import pytest

from git_issue.core.errors import IssueNotFoundError, MultipleIssuesFoundError
from git_issue.core.issue_id import IssueId, list_issue_ids, resolve, resolve_prefix

ID_A = "2d9deaf1b8b146d7e3c4c92133532b314da3e350"
ID_B = "2d9de0000b146d7e3c4c92133532b314da3e3501"
ID_C = "8e7f1e2c0d0b8d1b77a4f01e4e0a5b0f1c2d3e4f"


def _listing(*ids: str) -> list[IssueId]:
    return sorted(IssueId(i) for i in ids)


def _make_issue_dirs(issues_dir: Path, *ids: str) -> None:
    for i in ids:
        IssueId(i).path(issues_dir).mkdir(parents=True)


class TestIssueId:
    def test_path_splits_shard_and_leaf(self) -> None:
        issue_id = IssueId(ID_A)
        assert issue_id.path(Path("/r/.issues")) == Path(
            "/r/.issues/issues/2d/9deaf1b8b146d7e3c4c92133532b314da3e350"
        )

    def test_short_is_first_eight_characters(self) -> None:
        assert IssueId(ID_A).short == "2d9deaf1"

    def test_from_path_inverts_path(self, tmp_path: Path) -> None:
        issue_id = IssueId(ID_C)
        assert IssueId.from_path(issue_id.path(tmp_path)) == issue_id


class TestResolvePrefix:
    def test_empty_needle_is_not_found(self) -> None:
        with pytest.raises(IssueNotFoundError):
            resolve_prefix("", _listing(ID_A))

    def test_single_character_with_one_shard_resolves_single_issue(self) -> None:
        assert resolve_prefix("8", _listing(ID_C)) == IssueId(ID_C)

    def test_single_character_with_one_shard_of_two_issues_is_ambiguous(self) -> None:
        with pytest.raises(MultipleIssuesFoundError) as exc_info:
            resolve_prefix("2", _listing(ID_A, ID_B))
        assert exc_info.value.candidates == _listing(ID_A, ID_B)

    def test_single_character_with_several_shards_lists_every_issue(self) -> None:
        with pytest.raises(MultipleIssuesFoundError) as exc_info:
            resolve_prefix("2", _listing(ID_A, ID_C))
        assert exc_info.value.candidates == _listing(ID_A, ID_C)

    def test_single_character_without_issues_is_not_found(self) -> None:
        with pytest.raises(IssueNotFoundError):
            resolve_prefix("2", [])

    def test_two_characters_match_shard(self) -> None:
        assert resolve_prefix("8e", _listing(ID_A, ID_C)) == IssueId(ID_C)

    def test_two_characters_unknown_shard_is_not_found(self) -> None:
        with pytest.raises(IssueNotFoundError) as exc_info:
            resolve_prefix("ff", _listing(ID_A, ID_C))
        assert str(exc_info.value) == "Not found issue with prefix ff"

    def test_unique_prefix_resolves(self) -> None:
        assert resolve_prefix("2d9dea", _listing(ID_A, ID_B, ID_C)) == IssueId(ID_A)

    def test_shared_prefix_is_ambiguous(self) -> None:
        with pytest.raises(MultipleIssuesFoundError) as exc_info:
            resolve_prefix("2d9de", _listing(ID_A, ID_B, ID_C))
        assert set(exc_info.value.candidates) == {IssueId(ID_A), IssueId(ID_B)}
        assert "matched multiple issues" in exc_info.value.message

    def test_exact_match_wins_over_longer_identifiers(self) -> None:
        listing = _listing("abc123", "abc1234")
        assert resolve_prefix("abc123", listing) == IssueId("abc123")

    def test_unknown_prefix_is_not_found(self) -> None:
        with pytest.raises(IssueNotFoundError):
            resolve_prefix("2d0", _listing(ID_A, ID_B))

    def test_full_identifier_resolves(self) -> None:
        assert resolve_prefix(ID_B, _listing(ID_A, ID_B)) == IssueId(ID_B)


class TestListAndResolve:
    def test_missing_issues_directory_lists_nothing(self, tmp_path: Path) -> None:
        assert list_issue_ids(tmp_path) == []

    def test_lists_every_issue_sorted(self, tmp_path: Path) -> None:
        _make_issue_dirs(tmp_path, ID_C, ID_A, ID_B)
        assert list_issue_ids(tmp_path) == _listing(ID_A, ID_B, ID_C)

    def test_ignores_plain_files_in_shards(self, tmp_path: Path) -> None:
        _make_issue_dirs(tmp_path, ID_A)
        (tmp_path / "issues" / "2d" / "stray").write_text("x", encoding="utf-8")
        assert list_issue_ids(tmp_path) == _listing(ID_A)

    def test_resolve_uses_existing_directory_for_full_identifier(self, tmp_path: Path) -> None:
        _make_issue_dirs(tmp_path, ID_A, ID_B)
        assert resolve(ID_A, tmp_path) == IssueId(ID_A)

    def test_resolve_scans_for_prefix(self, tmp_path: Path) -> None:
        _make_issue_dirs(tmp_path, ID_A, ID_C)
        assert resolve("8e7f", tmp_path) == IssueId(ID_C)
