"""Demo server command."""

import asyncio
import logging

import click
from fastapi import FastAPI

from vent.api.app import create_app
from vent.auth.password import PasswordService
from vent.auth.schemas import (
    PASSWORD_HASH_FIELD,
    create_auth_schemas,
    create_memory_auth_clients,
    seed_permissions,
)
from vent.config import AdminConfig
from vent.schema.registry import SchemaRegistry

logger = logging.getLogger(__name__)


def build_demo_app(config: AdminConfig, admin_email: str, admin_password: str) -> FastAPI:
    """Build an admin app over in-memory auth schemas with one superuser.

    Args:
        config: Admin settings
        admin_email: Email of the bootstrapped superuser
        admin_password: Plain text password of the bootstrapped superuser

    Returns:
        The FastAPI application
    """
    passwords = PasswordService(config.bcrypt_rounds)
    users, groups, permissions = create_memory_auth_clients(config.base_path)
    registry = SchemaRegistry(
        create_auth_schemas(users, groups, permissions, passwords, config.base_path)
    )

    created = asyncio.run(seed_permissions(permissions, registry))
    logger.info("Seeded %d permissions", len(created))

    users.insert({
        "email": admin_email,
        PASSWORD_HASH_FIELD: passwords.generate(admin_password),
        "is_staff": True,
        "is_superuser": True,
        "is_active": True,
    })
    logger.info("Bootstrapped superuser %s", admin_email)

    return create_app(registry, config, credential_authenticator=passwords)


@click.command()
@click.option("--host", envvar="VENT_HOST", default=None, help="Bind host (env: VENT_HOST).")
@click.option("--port", envvar="VENT_PORT", default=None, type=int, help="Bind port (env: VENT_PORT).")
@click.option(
    "--admin-email",
    envvar="VENT_ADMIN_EMAIL",
    default="admin@vent.com",
    show_default=True,
    help="Email of the bootstrapped superuser.",
)
@click.option(
    "--admin-password",
    envvar="VENT_ADMIN_PASSWORD",
    prompt=True,
    hide_input=True,
    help="Password of the bootstrapped superuser.",
)
def serve(host: str | None, port: int | None, admin_email: str, admin_password: str):
    """Run the admin API over in-memory storage."""
    import uvicorn

    config = AdminConfig.from_env()
    if host:
        config.host = host
    if port:
        config.port = port

    app = build_demo_app(config, admin_email, admin_password)
    click.echo(f"Admin API at http://{config.host}:{config.port}{config.base_path}")
    uvicorn.run(app, host=config.host, port=config.port)
