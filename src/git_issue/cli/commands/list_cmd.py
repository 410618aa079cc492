import click

from git_issue.cli.output import machine_output, user_output
from git_issue.core.context import IssueContext
from git_issue.core.query import Filter, FormatString, Query, SortKey


@click.command("list")
@click.option("-a", "--all", "show_all", is_flag=True, help="Include closed issues")
@click.option("-t", "--with-tags", multiple=True, help="Only issues with this tag (repeatable)")
@click.option(
    "-T", "--without-tags", multiple=True, help="Only issues without this tag (repeatable)"
)
@click.option("-m", "--with-milestone", help="Only issues with this milestone")
@click.option("-M", "--without-milestone", is_flag=True, help="Only issues without a milestone")
@click.option(
    "-l",
    "--format",
    "format_string",
    help="Format string or one of simple, oneline, short (default from .issues/config)",
)
@click.option(
    "-o",
    "--order",
    type=click.Choice([key.value for key in SortKey]),
    help="Order issues by creation date, due date, description or milestone",
)
@click.option("-r", "--reverse", is_flag=True, help="Print results in reverse order")
@click.pass_obj
def list_cmd(
    ctx: IssueContext,
    show_all: bool,
    with_tags: tuple[str, ...],
    without_tags: tuple[str, ...],
    with_milestone: str | None,
    without_milestone: bool,
    format_string: str | None,
    order: str | None,
    reverse: bool,
) -> None:
    """List issues, open ones only unless --all is given.

    Format placeholders: %i short id, %I id, %D title, %M milestone,
    %c creation date, %d due date, %T tags, %n newline, %% percent.
    """
    source = ctx.open_source()
    query = Query(
        selection=Filter.from_options(
            show_all=show_all,
            with_tags=with_tags,
            without_tags=without_tags,
            milestone=with_milestone,
            without_milestone=without_milestone,
        ),
        projection=FormatString.parse(format_string or source.config.list_format),
        order=SortKey(order) if order is not None else None,
        reverse=reverse,
    )

    lines, errors = query.run(source.all())
    for line in lines:
        machine_output(line)
    for error in errors:
        user_output(click.style("Warning: ", fg="yellow") + error.message)
