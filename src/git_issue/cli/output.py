"""Output helpers separating human messages from machine-readable results."""

import click


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Status, warnings and errors for a person; written to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", *, nl: bool = True) -> None:
    """Results meant for pipes and scripts; written to stdout."""
    click.echo(message, nl=nl)
