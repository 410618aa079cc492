import click

from git_issue.cli.output import user_output
from git_issue.core.context import IssueContext
from git_issue.core.properties import WriteResult
from git_issue.core.source import parse_due_date


@click.command("due")
@click.argument("issue_id")
@click.argument("date", required=False)
@click.option("--remove", is_flag=True, help="Remove the due date")
@click.pass_obj
def due_cmd(ctx: IssueContext, issue_id: str, date: str | None, remove: bool) -> None:
    """Set the due date of an issue to an RFC 3339 DATE, or remove it.

    Dates without an offset are taken in the local timezone.
    """
    if remove == (date is not None):
        raise click.UsageError("Give either a DATE or --remove")

    source = ctx.open_source()
    found = source.find_issue(issue_id)

    with source.transaction() as transaction:
        if date is not None:
            result = source.set_due_date(found, parse_due_date(date))
        else:
            result = source.remove_due_date(found)
        if result is WriteResult.NO_CHANGES:
            user_output(f"Nothing to do for issue {found.short}")
            return
        source.finish_transaction_without_merge(transaction)

    if date is not None:
        user_output(f"Set due date of issue {found.short} to {source.duedate(found)}")
    else:
        user_output(f"Removed due date from issue {found.short}")
