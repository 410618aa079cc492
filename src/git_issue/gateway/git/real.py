"""Production implementation of the git gateway using subprocess."""

import logging
from datetime import datetime
from pathlib import Path

from git_issue.gateway.git.abc import Git
from git_issue.gateway.git.errors import (
    CommitBareRepository,
    CommitFailure,
    GitCommandFailed,
    StagingBareRepository,
    StagingFailure,
    StagingFileDoesNotExist,
    StashingError,
)
from git_issue.gateway.git.lock import (
    DEFAULT_MAX_WAIT_SECONDS,
    INDEX_LOCKED_EXIT_CODE,
    index_locked_message,
    wait_for_index_lock,
)
from git_issue.gateway.time.abc import Time
from git_issue.subprocess_utils import (
    SubprocessError,
    SubprocessKilledError,
    run_subprocess_with_context,
)

logger = logging.getLogger(__name__)

HISTORY_FORMAT = "* %>(16)%ah by %aN - %s"


class RealGit(Git):
    """Real implementation of git operations using subprocess.

    Killed git processes are never translated: SubprocessKilledError always
    propagates unchanged so callers can tell a signal from a refusal.
    """

    def __init__(self, time: Time) -> None:
        """Initialize RealGit with Time provider.

        Args:
            time: Time provider for lock waiting
        """
        self._time = time

    # ============================================================================
    # Query Operations
    # ============================================================================

    def get_repository_root(self, cwd: Path) -> Path | None:
        try:
            result = run_subprocess_with_context(
                cmd=["git", "rev-parse", "--show-toplevel"],
                operation_context="find repository root",
                cwd=cwd,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError:
            return None
        return Path(result.stdout.strip())

    def is_bare_repository(self, cwd: Path) -> bool:
        try:
            result = run_subprocess_with_context(
                cmd=["git", "rev-parse", "--is-bare-repository"],
                operation_context="check for bare repository",
                cwd=cwd,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError:
            return False
        return result.stdout.strip() == "true"

    def get_head(self, repo_root: Path) -> str | None:
        if self.is_bare_repository(repo_root):
            return None
        try:
            result = run_subprocess_with_context(
                cmd=["git", "rev-parse", "--verify", "HEAD"],
                operation_context="resolve HEAD",
                cwd=repo_root,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError:
            return None
        return result.stdout.strip()

    def is_clean(self, repo_root: Path) -> bool:
        result = run_subprocess_with_context(
            cmd=["git", "status", "--porcelain", "--untracked-files=all"],
            operation_context="check work tree status",
            cwd=repo_root,
        )
        return result.stdout.strip() == ""

    def get_author_date(self, repo_root: Path, sha: str) -> datetime:
        result = run_subprocess_with_context(
            cmd=["git", "show", "--no-patch", "--format=%aI", sha],
            operation_context=f"read author date of {sha}",
            cwd=repo_root,
        )
        return datetime.fromisoformat(result.stdout.strip())

    def get_author_name(self, repo_root: Path, sha: str) -> str:
        result = run_subprocess_with_context(
            cmd=["git", "show", "--no-patch", "--format=%aN", sha],
            operation_context=f"read author of {sha}",
            cwd=repo_root,
        )
        return result.stdout.strip()

    def get_file_history(self, repo_root: Path, paths: list[Path]) -> list[str]:
        if not paths:
            return []
        result = run_subprocess_with_context(
            cmd=[
                "git",
                "log",
                "-M",
                "-C",
                "-C",
                "-C",
                "--reverse",
                f"--format={HISTORY_FORMAT}",
                "--",
                *[str(p) for p in paths],
            ],
            operation_context="read file history",
            cwd=repo_root,
        )
        return [line for line in result.stdout.splitlines() if line.strip()]

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    def init_repository(self, path: Path) -> None:
        run_subprocess_with_context(
            cmd=["git", "init", "--quiet", str(path)],
            operation_context=f"initialize repository at {path}",
        )

    def stage(self, repo_root: Path, path: Path) -> None:
        if self.is_bare_repository(repo_root):
            raise StagingBareRepository()

        locked = self._wait_for_index(repo_root)
        if locked is not None:
            raise StagingFailure(locked, INDEX_LOCKED_EXIT_CODE)

        try:
            run_subprocess_with_context(
                cmd=["git", "add", "--", str(path)],
                operation_context=f"stage {path}",
                cwd=repo_root,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError as e:
            if "did not match any files" in e.stderr:
                raise StagingFileDoesNotExist(path) from e
            raise StagingFailure(str(e), e.returncode) from e

    def commit(self, repo_root: Path, message: str, *, allow_empty: bool, no_verify: bool) -> None:
        if self.is_bare_repository(repo_root):
            raise CommitBareRepository()

        locked = self._wait_for_index(repo_root)
        if locked is not None:
            raise CommitFailure(locked, INDEX_LOCKED_EXIT_CODE)

        cmd = ["git", "commit", "--quiet", "-m", message]
        if allow_empty:
            cmd.append("--allow-empty")
        if no_verify:
            cmd.append("--no-verify")

        try:
            run_subprocess_with_context(cmd=cmd, operation_context="create commit", cwd=repo_root)
        except SubprocessKilledError:
            raise
        except SubprocessError as e:
            raise CommitFailure(str(e), e.returncode) from e

    def stash_push(self, repo_root: Path, message: str) -> None:
        logger.debug("Stashing repository changes")
        try:
            run_subprocess_with_context(
                cmd=["git", "stash", "push", "--quiet", "--include-untracked", "-m", message],
                operation_context="stash work tree changes",
                cwd=repo_root,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError as e:
            raise StashingError(str(e), e.returncode) from e

    def stash_pop(self, repo_root: Path) -> None:
        logger.debug("Unstashing repository changes")
        try:
            run_subprocess_with_context(
                cmd=["git", "stash", "pop", "--quiet"],
                operation_context="restore stashed changes",
                cwd=repo_root,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError as e:
            raise StashingError(str(e), e.returncode) from e

    def reset_hard(self, repo_root: Path, sha: str) -> None:
        try:
            run_subprocess_with_context(
                cmd=["git", "reset", "--hard", "--quiet", sha],
                operation_context=f"reset to {sha}",
                cwd=repo_root,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError as e:
            raise GitCommandFailed(str(e), e.returncode) from e

    def merge_no_ff(self, repo_root: Path, sha: str, message: str) -> None:
        try:
            run_subprocess_with_context(
                cmd=["git", "merge", "--no-ff", "--quiet", "-m", message, sha],
                operation_context=f"merge {sha}",
                cwd=repo_root,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError as e:
            raise GitCommandFailed(str(e), e.returncode) from e

    # ============================================================================
    # Index Lock
    # ============================================================================

    def _wait_for_index(self, repo_root: Path) -> str | None:
        """Wait for the checkout's index.lock; returns an error message on timeout."""
        try:
            result = run_subprocess_with_context(
                cmd=["git", "rev-parse", "--git-path", "index.lock"],
                operation_context="locate index.lock",
                cwd=repo_root,
            )
        except SubprocessKilledError:
            raise
        except SubprocessError as e:
            return str(e)

        lock_path = repo_root / result.stdout.strip()
        if wait_for_index_lock(lock_path, self._time):
            return None
        logger.debug("Gave up waiting for %s", lock_path)
        return index_locked_message(lock_path, DEFAULT_MAX_WAIT_SECONDS)
