"""Abstract base class for the git operations the issue tracker needs.

The tracker only ever touches a repository through this interface: property
writes stage and commit, the transaction coordinator stashes, resets and
merges, and readers ask for commit metadata.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real and fake) must implement this interface.
    """

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path | None:
        """Get the top-level directory of the work tree containing cwd.

        Returns:
            Work tree root, or None if cwd is not inside a non-bare repository
        """
        ...

    @abstractmethod
    def is_bare_repository(self, cwd: Path) -> bool:
        """Check whether the repository at cwd has no work tree."""
        ...

    @abstractmethod
    def get_head(self, repo_root: Path) -> str | None:
        """Get the commit hash HEAD points to.

        Returns:
            Full commit hash, or None when HEAD can not be resolved (bare
            repository, unborn branch)
        """
        ...

    @abstractmethod
    def is_clean(self, repo_root: Path) -> bool:
        """Check that the work tree has no staged, modified or untracked files."""
        ...

    @abstractmethod
    def get_author_date(self, repo_root: Path, sha: str) -> datetime:
        """Get the timezone-aware author timestamp of a commit."""
        ...

    @abstractmethod
    def get_author_name(self, repo_root: Path, sha: str) -> str:
        """Get the author name of a commit."""
        ...

    @abstractmethod
    def get_file_history(self, repo_root: Path, paths: list[Path]) -> list[str]:
        """Get one formatted line per commit touching paths, oldest first."""
        ...

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def init_repository(self, path: Path) -> None:
        """Create an empty repository at path."""
        ...

    @abstractmethod
    def stage(self, repo_root: Path, path: Path) -> None:
        """Stage a single path (addition, modification or deletion).

        Raises:
            StagingBareRepository: If the repository has no work tree
            StagingFileDoesNotExist: If the path is neither on disk nor tracked
            StagingFailure: If git fails for any other reason
        """
        ...

    @abstractmethod
    def commit(self, repo_root: Path, message: str, *, allow_empty: bool, no_verify: bool) -> None:
        """Commit the index.

        Args:
            repo_root: Repository root
            message: Full commit message (subject, blank line, body)
            allow_empty: Permit a commit that changes nothing
            no_verify: Bypass pre-commit and commit-msg hooks

        Raises:
            CommitBareRepository: If the repository has no work tree
            CommitFailure: If git fails for any other reason
        """
        ...

    @abstractmethod
    def stash_push(self, repo_root: Path, message: str) -> None:
        """Stash all changes, untracked files included.

        Raises:
            StashingError: If git refuses to stash
        """
        ...

    @abstractmethod
    def stash_pop(self, repo_root: Path) -> None:
        """Apply and drop the most recent stash entry.

        Raises:
            StashingError: If the stash can not be applied
        """
        ...

    @abstractmethod
    def reset_hard(self, repo_root: Path, sha: str) -> None:
        """Move the current branch to sha, discarding work tree differences.

        Raises:
            GitCommandFailed: If git fails
        """
        ...

    @abstractmethod
    def merge_no_ff(self, repo_root: Path, sha: str, message: str) -> None:
        """Merge sha into the current branch, always creating a merge commit.

        Raises:
            GitCommandFailed: If git fails
        """
        ...
