"""Dependency bundle handed to every command through click's ``ctx.obj``."""

from dataclasses import dataclass
from pathlib import Path

import click

from git_issue.core.editor import ClickEditor, Editor
from git_issue.core.source import DataSource
from git_issue.gateway.git.abc import Git
from git_issue.gateway.git.real import RealGit
from git_issue.gateway.time.abc import Time
from git_issue.gateway.time.real import RealTime


@dataclass(frozen=True)
class IssueContext:
    """Immutable context holding all dependencies for git-issue operations.

    Created once at CLI entry point and threaded through the commands.
    Tests build one with ``for_test`` and pass it as ``obj`` to the runner.
    """

    git: Git
    time: Time
    editor: Editor
    cwd: Path

    def open_source(self) -> DataSource:
        """Open the issues repository containing ``cwd``.

        Raises:
            IssuesRepoNotFoundError: If no `.issues` exists in cwd or above
            BareRepositoryError: If `.issues` lives in a bare repository
            GitRepoNotFoundError: If `.issues` is not inside a git work tree
            ConfigError: If `.issues/config` is malformed
        """
        return DataSource.discover(self.cwd, self.git)

    @staticmethod
    def for_test(
        git: Git | None = None,
        time: Time | None = None,
        editor: Editor | None = None,
        cwd: Path | None = None,
    ) -> "IssueContext":
        """Create a test context, filling unspecified dependencies with fakes.

        Example:
            >>> ctx = IssueContext.for_test(git=RealGit(FakeTime()), cwd=tmp_path)
            >>> result = CliRunner().invoke(cli, ["list"], obj=ctx)
        """
        from tests.fakes.editor import FakeEditor

        from git_issue.gateway.git.fake import FakeGit
        from git_issue.gateway.time.fake import FakeTime

        return IssueContext(
            git=git if git is not None else FakeGit(),
            time=time if time is not None else FakeTime(),
            editor=editor if editor is not None else FakeEditor(),
            cwd=cwd if cwd is not None else Path("/test/default/cwd"),
        )


def create_context() -> IssueContext:
    """Create production context with real implementations."""
    try:
        cwd = Path.cwd()
    except FileNotFoundError as e:
        raise click.ClickException("The current directory has been deleted") from e
    time: Time = RealTime()
    return IssueContext(git=RealGit(time), time=time, editor=ClickEditor(), cwd=cwd)
