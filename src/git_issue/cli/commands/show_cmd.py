import click

from git_issue.cli.output import machine_output
from git_issue.core.context import IssueContext


@click.command("show")
@click.argument("issue_id")
@click.option("-c", "--comments", is_flag=True, help="Also print the comments")
@click.pass_obj
def show_cmd(ctx: IssueContext, issue_id: str, comments: bool) -> None:
    """Show an issue with its edit history."""
    source = ctx.open_source()
    issue = source.get(source.find_issue(issue_id))
    issue.preload(["creation_date", "due_date", "milestone", "tags", "description"])

    machine_output(f"issue      {issue.id}")
    machine_output(f"Date       {issue.creation_date}")
    if issue.milestone is not None:
        machine_output(f"Milestone  {issue.milestone}")
    if issue.due_date is not None:
        machine_output(f"Due Date   {issue.due_date}")
    machine_output(f"Tags       {', '.join(issue.tags)}")
    machine_output()
    for line in issue.description.splitlines():
        machine_output(f"    {line}")
    machine_output()

    machine_output("Edit History:")
    for line in source.history(issue.id):
        machine_output(line)

    if not comments:
        return
    for comment in issue.comments:
        machine_output()
        machine_output(f"comment {comment.id}")
        machine_output(f"Author: {comment.author}")
        machine_output(f"Date    {comment.created}")
        machine_output()
        for line in comment.body.splitlines():
            machine_output(f"    {line}")
