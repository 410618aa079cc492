import logging

import click

from git_issue.cli.commands.close_cmd import close_cmd
from git_issue.cli.commands.comment_cmd import comment_cmd
from git_issue.cli.commands.due_cmd import due_cmd
from git_issue.cli.commands.init_cmd import init_cmd
from git_issue.cli.commands.list_cmd import list_cmd
from git_issue.cli.commands.milestone_cmd import milestone_group
from git_issue.cli.commands.new_cmd import new_cmd
from git_issue.cli.commands.show_cmd import show_cmd
from git_issue.cli.commands.tag_cmd import tag_cmd
from git_issue.cli.commands.validate_cmd import validate_cmd
from git_issue.cli.core import IssueCommandGroup
from git_issue.core.context import create_context

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.group(cls=IssueCommandGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="git-issue")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, debug: bool) -> None:
    """Distributed issue tracking stored in git."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        ctx.obj = create_context()


cli.add_command(close_cmd)
cli.add_command(comment_cmd)
cli.add_command(due_cmd)
cli.add_command(init_cmd)
cli.add_command(list_cmd)
cli.add_command(milestone_group)
cli.add_command(new_cmd)
cli.add_command(show_cmd)
cli.add_command(tag_cmd)
cli.add_command(validate_cmd)


def main() -> None:
    """CLI entry point used by the `git-issue` console script."""
    cli()
