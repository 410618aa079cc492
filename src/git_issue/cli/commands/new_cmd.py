import click

from git_issue.cli.output import machine_output, user_output
from git_issue.core.context import IssueContext
from git_issue.core.editor import compose, read_template
from git_issue.core.errors import PropertyValueError


@click.command("new")
@click.option("-s", "--summary", help="One line summary; skips the editor unless --edit")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag to add (repeatable)")
@click.option("-m", "--milestone", help="Milestone to assign to")
@click.option("-e", "--edit", is_flag=True, help="Edit the description in $EDITOR")
@click.pass_obj
def new_cmd(
    ctx: IssueContext,
    summary: str | None,
    tags: tuple[str, ...],
    milestone: str | None,
    edit: bool,
) -> None:
    """Create a new issue.

    Prints the full identifier of the new issue on stdout.
    """
    source = ctx.open_source()

    if edit or summary is None:
        template = f"{summary or ''}\n\n{read_template(source.issues_dir, 'description')}"
        description = compose(ctx.editor, template, what="issue description")
    else:
        description = summary.strip()
    if not description:
        raise PropertyValueError("Aborting due to empty issue description")
    title = description.splitlines()[0]

    with source.transaction() as transaction:
        issue_id = source.create_issue(description, list(tags), milestone)
        source.finish_transaction(transaction, f"gi({issue_id.short}): {title}")

    user_output(f"Added issue {issue_id.short}: {title}")
    machine_output(issue_id.id)
