import click

from git_issue.cli.output import user_output
from git_issue.core.context import IssueContext
from git_issue.core.repo_init import create


@click.command("init")
@click.option(
    "--existing",
    is_flag=True,
    help="Track issues in the git repository containing the current directory",
)
@click.pass_obj
def init_cmd(ctx: IssueContext, existing: bool) -> None:
    """Create an issues repository in the current directory.

    By default `.issues` becomes a git repository of its own. With
    --existing the issues are committed to the enclosing repository.
    """
    issues_dir = create(ctx.cwd, existing=existing, git=ctx.git)
    user_output(f"Initialized empty issues repository in {issues_dir}")
