import click

from git_issue.cli.output import user_output
from git_issue.core.context import IssueContext
from git_issue.core.properties import WriteResult


@click.command("close")
@click.argument("issue_ids", nargs=-1, required=True)
@click.pass_obj
def close_cmd(ctx: IssueContext, issue_ids: tuple[str, ...]) -> None:
    """Close one or more issues."""
    source = ctx.open_source()
    ids = [source.find_issue(needle) for needle in issue_ids]

    with source.transaction() as transaction:
        results = []
        for issue_id in ids:
            result = source.close_issue(issue_id)
            if result is WriteResult.APPLIED:
                user_output(f"Closed issue {issue_id.short}: {source.title(issue_id)}")
            else:
                user_output(f"Skipping issue {issue_id.short}. It is already closed")
            results.append(result)

        if WriteResult.combine(results) is WriteResult.NO_CHANGES:
            user_output("Nothing to do")
            return

        if len(ids) == 1:
            message = f"DONE({ids[0].short}): {source.title(ids[0])}"
        else:
            message = "gi: Closed " + ", ".join(issue_id.short for issue_id in ids)
        source.finish_transaction(transaction, message)
