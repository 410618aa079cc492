"""Shared plumbing for git-issue commands."""

import click

from git_issue.cli.output import user_output
from git_issue.core.errors import GitIssueError


class IssueCommandGroup(click.Group):
    """Click group that turns tracker errors into a red message and exit code.

    Nested groups inherit the handling because their commands run inside
    the top-level ``invoke``.
    """

    def invoke(self, ctx: click.Context):
        try:
            return super().invoke(ctx)
        except GitIssueError as e:
            report_error(e)
            raise SystemExit(e.exit_code) from e


def report_error(error: GitIssueError) -> None:
    user_output(click.style("Error: ", fg="red") + error.message)
