import click

from git_issue.cli.output import machine_output, user_output
from git_issue.core.context import IssueContext
from git_issue.core.editor import compose, read_template
from git_issue.core.errors import PropertyValueError
from git_issue.core.issue_id import SHORT_ID_LENGTH


@click.command("comment")
@click.argument("issue_id")
@click.option("-m", "--message", help="Comment text; opens $EDITOR when omitted")
@click.pass_obj
def comment_cmd(ctx: IssueContext, issue_id: str, message: str | None) -> None:
    """Add a comment to an issue.

    Prints the identifier of the new comment on stdout.
    """
    source = ctx.open_source()
    found = source.find_issue(issue_id)

    if message is None:
        body = compose(ctx.editor, read_template(source.issues_dir, "comment"), what="comment")
    else:
        body = message.strip()
    if not body:
        raise PropertyValueError("Aborting due to empty comment")

    with source.transaction() as transaction:
        comment_id = source.add_comment(found, body)
        short = comment_id[:SHORT_ID_LENGTH]
        source.finish_transaction(transaction, f"gi({found.short}): Add comment {short}")

    user_output(f"Added comment {short} to issue {found.short}")
    machine_output(comment_id)
