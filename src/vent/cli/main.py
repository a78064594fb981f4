"""Vent CLI entry point."""

import logging

import click

from vent.auth.password import PasswordService

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--log-level",
    envvar="VENT_LOG_LEVEL",
    default="INFO",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging level (env: VENT_LOG_LEVEL).",
)
def cli(log_level: str):
    """Vent - schema-driven admin CLI."""
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command("hash-password")
@click.password_option(help="Password to hash (prompted when omitted).")
@click.option("--rounds", default=12, show_default=True, help="bcrypt work factor.")
def hash_password_cmd(password: str, rounds: int):
    """Print the bcrypt hash of a password."""
    click.echo(PasswordService(rounds).generate(password))


# Register subcommand groups
from vent.cli.schemas_cmd import schemas  # noqa: E402
from vent.cli.serve_cmd import serve  # noqa: E402

cli.add_command(schemas)
cli.add_command(serve)
