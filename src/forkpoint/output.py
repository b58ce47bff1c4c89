"""User-facing output helpers."""

import click


def user_output(message: str) -> None:
    """Write a message for the user to stderr, keeping stdout for results."""
    click.echo(message, err=True)


def machine_output(message: str) -> None:
    """Write a result meant for scripts to stdout."""
    click.echo(message)
