import click

from git_issue.cli.output import user_output
from git_issue.core.context import IssueContext
from git_issue.core.properties import WriteResult


@click.command("tag")
@click.argument("issue_id")
@click.argument("tags", nargs=-1, required=True)
@click.option("-r", "--remove", is_flag=True, help="Remove the tags instead of adding them")
@click.pass_obj
def tag_cmd(ctx: IssueContext, issue_id: str, tags: tuple[str, ...], remove: bool) -> None:
    """Add tags to an issue, or remove them with --remove."""
    source = ctx.open_source()
    found = source.find_issue(issue_id)

    with source.transaction() as transaction:
        applied: list[str] = []
        for tag in tags:
            if remove:
                result = source.remove_tag(found, tag)
            else:
                result = source.add_tag(found, tag)
            if result is WriteResult.APPLIED:
                applied.append(tag)
            elif remove:
                user_output(f"Skipping tag {tag}. {found.short} not tagged with it.")
            else:
                user_output(f"Skipping tag {tag}. {found.short} already tagged with it.")

        if not applied:
            return

        verb = "Remove" if remove else "Add"
        noun = "tag" if len(applied) == 1 else "tags"
        message = f"gi({found.short}): {verb} {noun}: {', '.join(applied)}"
        source.finish_transaction(transaction, message)
