"""Exceptions raised by the git gateway.

Each class corresponds to one way a git primitive can fail that callers need
to tell apart. Anything else surfaces as SubprocessError from subprocess_utils.
"""

from pathlib import Path


class GitError(RuntimeError):
    """Base class for failures reported by the git gateway."""


class StagingError(GitError):
    """Staging a path into the index failed."""


class StagingBareRepository(StagingError):
    def __init__(self) -> None:
        super().__init__("Can not stage files in a bare repository")


class StagingFileDoesNotExist(StagingError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Can not stage missing file {path}")
        self.path = path


class StagingFailure(StagingError):
    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


class CommitError(GitError):
    """Committing the index failed."""


class CommitBareRepository(CommitError):
    def __init__(self) -> None:
        super().__init__("Bare repository")


class CommitFailure(CommitError):
    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


class StashingError(GitError):
    """Pushing or popping a stash entry failed."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code


class GitCommandFailed(GitError):
    """A reset or merge exited with a non-zero status."""

    def __init__(self, message: str, code: int) -> None:
        super().__init__(message)
        self.code = code
