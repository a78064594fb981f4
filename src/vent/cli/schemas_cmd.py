"""Schema CLI commands."""

from pathlib import Path

import click

from vent.core.errors import SchemaConfigError
from vent.schema.loader import SchemaLoader
from vent.schema.validator import validate_schema_dir


@click.group()
def schemas():
    """Schema declaration commands."""
    pass


@schemas.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--strict",
    is_flag=True,
    default=False,
    help="Treat warnings as errors.",
)
def check(directory: Path, strict: bool):
    """Load the YAML schema declarations in DIRECTORY and report problems."""
    # ── Structural (JSON Schema) validation ──────────────────────────────────
    issues = validate_schema_dir(directory)
    for issue in issues:
        click.echo(click.style(str(issue), fg="red"), err=True)
    if issues:
        click.echo(
            click.style(f"\n{len(issues)} schema error(s) found", fg="red", bold=True),
            err=True,
        )
        raise SystemExit(1)

    # ── Semantic (loader) validation ─────────────────────────────────────────
    loader = SchemaLoader(directory)
    try:
        loaded = loader.load_all()
    except SchemaConfigError as e:
        click.echo(click.style(f"Invalid schema declarations: {e}", fg="red"), err=True)
        raise SystemExit(1)

    click.echo(f"Loaded {len(loaded)} schemas:")
    for name in sorted(loaded):
        schema = loaded[name]
        flags = " (admin disabled)" if schema.disable_admin else ""
        click.echo(f"  ✓ {name} ({len(schema.fields)} fields, path: {schema.path}){flags}")

    warnings = loader.check_relations(loaded)
    for warning in warnings:
        click.echo(click.style(f"Warning: {warning}", fg="yellow"))

    if warnings and strict:
        click.echo(click.style(f"\n{len(warnings)} warning(s) found", fg="red", bold=True))
        raise SystemExit(1)

    click.echo(click.style("\nAll schema declarations are valid.", fg="green", bold=True))
