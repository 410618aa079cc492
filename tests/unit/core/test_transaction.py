"""Tests for TransactionCoordinator against FakeGit."""

from pathlib import Path

import pytest

from git_issue.core.errors import (
    E_REPO_BARE,
    E_STASH_ERROR,
    EDOOFUS,
    FinishError,
    FinishFailure,
    RollbackError,
    RollbackFailure,
    TransactionAlreadyOpenError,
    TransactionBareRepositoryError,
    TransactionNotStartedError,
    TransactionStashError,
)
from git_issue.core.transaction import STASH_MESSAGE, TransactionCoordinator
from git_issue.gateway.git.errors import GitCommandFailed, StashingError
from git_issue.gateway.git.fake import FakeGit
from git_issue.subprocess_utils import SubprocessKilledError

REPO = Path("/repo")
START = "a" * 40


def _coordinator(git: FakeGit, *, strict: bool = False) -> TransactionCoordinator:
    return TransactionCoordinator(git, REPO, strict=strict)


class _HeadLostAfterStart(FakeGit):
    """FakeGit whose HEAD stops resolving once ``lose_head`` is called."""

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self._head_lost = False

    def lose_head(self) -> None:
        self._head_lost = True

    def get_head(self, repo_root: Path) -> str | None:
        if self._head_lost:
            return None
        return super().get_head(repo_root)


def _make_commits(git: FakeGit, count: int) -> None:
    for n in range(count):
        git.commit(REPO, f"change {n}", allow_empty=True, no_verify=True)


class TestStart:
    def test_clean_tree_is_not_stashed(self) -> None:
        git = FakeGit(head=START)

        transaction = _coordinator(git).start()

        assert transaction.start_sha == START
        assert transaction.stash_before is False
        assert git.stash_messages == []

    def test_dirty_tree_is_stashed_with_marker_message(self) -> None:
        git = FakeGit(head=START, dirty=True)

        transaction = _coordinator(git).start()

        assert transaction.stash_before is True
        assert git.stash_messages == [STASH_MESSAGE]
        assert git.is_clean(REPO)

    def test_second_start_is_a_bug(self) -> None:
        coordinator = _coordinator(FakeGit(head=START))
        coordinator.start()

        with pytest.raises(TransactionAlreadyOpenError) as exc_info:
            coordinator.start()

        assert exc_info.value.exit_code == EDOOFUS

    def test_unresolvable_head(self) -> None:
        with pytest.raises(TransactionBareRepositoryError) as exc_info:
            _coordinator(FakeGit(head=None)).start()

        assert exc_info.value.exit_code == E_REPO_BARE

    def test_stash_failure_leaves_no_open_transaction(self) -> None:
        git = FakeGit(head=START, dirty=True, stash_push_raises=StashingError("locked", 1))
        coordinator = _coordinator(git)

        with pytest.raises(TransactionStashError) as exc_info:
            coordinator.start()

        assert exc_info.value.exit_code == E_STASH_ERROR
        assert coordinator.current is None


class TestFinish:
    def test_collapses_commits_into_one_merge(self) -> None:
        git = FakeGit(head=START)
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        _make_commits(git, 3)
        end_sha = git.head

        coordinator.finish(transaction, "DONE(aaaaaaaa): Crash")

        assert git.resets == [START]
        assert git.merges == [(end_sha, "DONE(aaaaaaaa): Crash")]
        merge = git.commits[-1]
        assert merge.parents == (START, end_sha)
        assert git.head == merge.sha
        assert coordinator.current is None

    def test_restores_stash_after_merge(self) -> None:
        git = FakeGit(head=START, dirty=True)
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        _make_commits(git, 1)

        coordinator.finish(transaction, "summary")

        assert git.stash_pops == 1
        assert git.stash_depth == 0

    def test_strict_mode_keeps_commits_linear(self) -> None:
        git = FakeGit(head=START, dirty=True)
        coordinator = _coordinator(git, strict=True)
        transaction = coordinator.start()
        _make_commits(git, 2)
        end_sha = git.head

        coordinator.finish(transaction, "summary")

        assert git.resets == []
        assert git.merges == []
        assert git.head == end_sha
        assert git.stash_pops == 1

    def test_finish_without_merge_only_unstashes(self) -> None:
        git = FakeGit(head=START, dirty=True)
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        _make_commits(git, 1)
        end_sha = git.head

        coordinator.finish_without_merge(transaction)

        assert git.head == end_sha
        assert git.merges == []
        assert git.stash_pops == 1

    def test_finish_without_start_is_a_bug(self) -> None:
        git = FakeGit(head=START)
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        coordinator.finish(transaction, "summary")

        with pytest.raises(TransactionNotStartedError):
            coordinator.finish(transaction, "summary")

    def test_reset_failure_names_recovery_command(self) -> None:
        git = FakeGit(head=START, reset_raises=GitCommandFailed("index.lock exists", 128))
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        _make_commits(git, 1)

        with pytest.raises(FinishError) as exc_info:
            coordinator.finish(transaction, "summary")

        error = exc_info.value
        assert error.kind is FinishFailure.RESET
        assert error.recovery_command == f"git reset --hard {START}"
        assert f"git reset --hard {START}" in error.message
        assert "index.lock exists" in error.message
        assert coordinator.current is None

    def test_reset_failure_with_stash_adds_stash_pop(self) -> None:
        git = FakeGit(
            head=START, dirty=True, reset_raises=GitCommandFailed("index.lock exists", 128)
        )
        coordinator = _coordinator(git)
        transaction = coordinator.start()

        with pytest.raises(FinishError) as exc_info:
            coordinator.finish(transaction, "summary")

        assert exc_info.value.kind is FinishFailure.RESET_UNSTASH
        assert exc_info.value.recovery_command == f"git reset --hard {START} && git stash pop"

    def test_lost_head_with_stash_names_stash_pop(self) -> None:
        git = _HeadLostAfterStart(head=START, dirty=True)
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        git.lose_head()

        with pytest.raises(FinishError) as exc_info:
            coordinator.finish(transaction, "summary")

        assert exc_info.value.kind is FinishFailure.RESET_UNSTASH
        assert exc_info.value.recovery_command == f"git reset --hard {START} && git stash pop"
        assert "HEAD can not be resolved" in exc_info.value.message
        assert git.resets == []
        assert coordinator.current is None

    def test_merge_failure(self) -> None:
        git = FakeGit(head=START, merge_raises=GitCommandFailed("conflict", 1))
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        _make_commits(git, 1)

        with pytest.raises(FinishError) as exc_info:
            coordinator.finish(transaction, "summary")

        assert exc_info.value.kind is FinishFailure.MERGE
        assert exc_info.value.message.startswith("Failed to merge issue changes.")

    def test_merge_failure_with_stash(self) -> None:
        git = FakeGit(head=START, dirty=True, merge_raises=GitCommandFailed("conflict", 1))
        coordinator = _coordinator(git)
        transaction = coordinator.start()

        with pytest.raises(FinishError) as exc_info:
            coordinator.finish(transaction, "summary")

        assert exc_info.value.kind is FinishFailure.MERGE_UNSTASH
        assert exc_info.value.recovery_command.endswith("&& git stash pop")

    def test_killed_merge_is_reported_as_finish_failure(self) -> None:
        killed = SubprocessKilledError("killed by signal 9", returncode=-9, stderr="")
        git = FakeGit(head=START, merge_raises=killed)
        coordinator = _coordinator(git)
        transaction = coordinator.start()

        with pytest.raises(FinishError) as exc_info:
            coordinator.finish(transaction, "summary")

        assert exc_info.value.__cause__ is killed

    def test_unstash_failure(self) -> None:
        git = FakeGit(head=START, dirty=True, stash_pop_raises=StashingError("conflict", 1))
        coordinator = _coordinator(git)
        transaction = coordinator.start()

        with pytest.raises(FinishError) as exc_info:
            coordinator.finish(transaction, "summary")

        assert exc_info.value.kind is FinishFailure.UNSTASH
        assert exc_info.value.recovery_command == "git stash pop"
        assert "Failed to unstash changes." in exc_info.value.message


class TestRollback:
    def test_discards_commits(self) -> None:
        git = FakeGit(head=START)
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        _make_commits(git, 2)

        coordinator.rollback(transaction)

        assert git.head == START
        assert git.merges == []
        assert coordinator.current is None

    def test_restores_stash(self) -> None:
        git = FakeGit(head=START, dirty=True)
        coordinator = _coordinator(git)
        transaction = coordinator.start()

        coordinator.rollback(transaction)

        assert git.stash_depth == 0
        assert not git.is_clean(REPO)

    def test_rollback_after_finish_is_a_bug(self) -> None:
        git = FakeGit(head=START)
        coordinator = _coordinator(git)
        transaction = coordinator.start()
        coordinator.finish(transaction, "summary")

        with pytest.raises(TransactionNotStartedError):
            coordinator.rollback(transaction)

    def test_reset_failure(self) -> None:
        git = FakeGit(head=START, reset_raises=GitCommandFailed("denied", 128))
        coordinator = _coordinator(git)
        transaction = coordinator.start()

        with pytest.raises(RollbackError) as exc_info:
            coordinator.rollback(transaction)

        assert exc_info.value.kind is RollbackFailure.RESET
        assert exc_info.value.start_sha == START
        assert exc_info.value.message.endswith(f"Use git reset --hard {START}.")

    def test_reset_failure_with_stash(self) -> None:
        git = FakeGit(head=START, dirty=True, reset_raises=GitCommandFailed("denied", 128))
        coordinator = _coordinator(git)
        transaction = coordinator.start()

        with pytest.raises(RollbackError) as exc_info:
            coordinator.rollback(transaction)

        assert exc_info.value.kind is RollbackFailure.RESET_UNSTASH
        assert exc_info.value.recovery_command == f"git reset --hard {START} && git stash pop"

    def test_unstash_failure(self) -> None:
        git = FakeGit(head=START, dirty=True, stash_pop_raises=StashingError("conflict", 1))
        coordinator = _coordinator(git)
        transaction = coordinator.start()

        with pytest.raises(RollbackError) as exc_info:
            coordinator.rollback(transaction)

        assert exc_info.value.kind is RollbackFailure.UNSTASH
        assert exc_info.value.recovery_command == "git stash pop"
