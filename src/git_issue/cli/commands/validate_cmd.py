import click

from git_issue.cli.output import user_output
from git_issue.core.context import IssueContext
from git_issue.core.validate import validate


@click.command("validate")
@click.option("--fix", is_flag=True, help="Append the missing newlines")
@click.pass_obj
def validate_cmd(ctx: IssueContext, fix: bool) -> None:
    """Check that every issue file ends with a newline.

    Exits with status 1 when problems were found and not fixed.
    """
    source = ctx.open_source()
    problems = validate(source.issues_dir, fix=fix)
    for problem in problems:
        if problem.fixed:
            user_output(f"{problem.label}: Fixing NL at EOF")
        else:
            user_output(f"{problem.label}: Missing NL at EOF")

    if problems and not fix:
        raise SystemExit(1)
