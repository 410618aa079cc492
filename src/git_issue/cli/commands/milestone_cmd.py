import click
from rich.console import Console
from rich.table import Table

from git_issue.cli.output import machine_output, user_output
from git_issue.core.context import IssueContext
from git_issue.core.properties import WriteResult
from git_issue.core.query import summarize_milestones


@click.group("milestone", invoke_without_command=True)
@click.pass_context
def milestone_group(click_ctx: click.Context) -> None:
    """Manage milestones. Lists them when no subcommand is given."""
    if click_ctx.invoked_subcommand is None:
        click_ctx.invoke(list_milestones)


@milestone_group.command("list")
@click.option(
    "-a", "--all", "show_all", is_flag=True, help="Include milestones without open issues"
)
@click.option("--plain", is_flag=True, help="Print 'name<TAB>open/total' lines on stdout")
@click.pass_obj
def list_milestones(ctx: IssueContext, show_all: bool, plain: bool) -> None:
    """List milestones with their open and total issue counts."""
    source = ctx.open_source()
    summary, errors = summarize_milestones(source.all(), show_all=show_all)
    for error in errors:
        user_output(click.style("Warning: ", fg="yellow") + error.message)

    if plain:
        for row in summary:
            machine_output(f"{row.name}\t{row.open}/{row.total}")
        return

    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("milestone", style="cyan", no_wrap=True)
    table.add_column("open", justify="right", no_wrap=True)
    table.add_column("total", justify="right", no_wrap=True)
    for row in summary:
        table.add_row(row.name, str(row.open), str(row.total))

    console = Console(stderr=True, force_terminal=True)
    console.print(table)


@milestone_group.command("set")
@click.argument("issue_id")
@click.argument("milestone")
@click.pass_obj
def set_milestone(ctx: IssueContext, issue_id: str, milestone: str) -> None:
    """Set the milestone of an issue."""
    source = ctx.open_source()
    found = source.find_issue(issue_id)

    with source.transaction() as transaction:
        if source.add_milestone(found, milestone) is WriteResult.NO_CHANGES:
            user_output(f"Milestone “{milestone}” already set on issue {found.short}")
            return
        source.finish_transaction_without_merge(transaction)
    user_output(f"Set milestone “{milestone}” on issue {found.short}")


@milestone_group.command("remove")
@click.argument("issue_id")
@click.pass_obj
def remove_milestone(ctx: IssueContext, issue_id: str) -> None:
    """Remove the milestone from an issue."""
    source = ctx.open_source()
    found = source.find_issue(issue_id)

    with source.transaction() as transaction:
        if source.remove_milestone(found) is WriteResult.NO_CHANGES:
            user_output(f"Issue {found.short} already has no milestone")
            return
        source.finish_transaction_without_merge(transaction)
    user_output(f"Removed milestone from issue {found.short}")
