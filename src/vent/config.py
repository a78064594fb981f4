"""Admin configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_SECRET_KEY = "dev-secret-key-change-in-production"


def normalize_base_path(path: str) -> str:
    """Ensure a base path has exactly one leading and one trailing slash."""
    stripped = path.strip("/")
    return f"/{stripped}/" if stripped else "/"


@dataclass
class AdminConfig:
    """Settings of the admin handler.

    Attributes:
        secret_key: Key used to sign auth tokens
        base_path: URL prefix of all admin routes
        cookie_name: Cookie carrying the auth token
        token_ttl: Lifetime of auth tokens in seconds
        bcrypt_rounds: Work factor for password hashes
        host: Bind host of the dev server
        port: Bind port of the dev server
    """

    secret_key: str = DEFAULT_SECRET_KEY
    base_path: str = "/admin/"
    cookie_name: str = "vent-auth-token"
    token_ttl: int = 24 * 60 * 60
    bcrypt_rounds: int = 12
    host: str = "127.0.0.1"
    port: int = 8080

    def __post_init__(self):
        self.base_path = normalize_base_path(self.base_path)

    @classmethod
    def from_env(cls) -> AdminConfig:
        """Create config from environment variables.

        Reads VENT_SECRET_KEY, VENT_BASE_PATH, VENT_COOKIE_NAME,
        VENT_TOKEN_TTL, VENT_BCRYPT_ROUNDS, VENT_HOST and VENT_PORT;
        anything unset keeps its default.

        Raises:
            ValueError: If a numeric variable is not an integer
        """
        defaults = cls()
        return cls(
            secret_key=os.environ.get("VENT_SECRET_KEY", defaults.secret_key),
            base_path=os.environ.get("VENT_BASE_PATH", defaults.base_path),
            cookie_name=os.environ.get("VENT_COOKIE_NAME", defaults.cookie_name),
            token_ttl=int(os.environ.get("VENT_TOKEN_TTL", defaults.token_ttl)),
            bcrypt_rounds=int(os.environ.get("VENT_BCRYPT_ROUNDS", defaults.bcrypt_rounds)),
            host=os.environ.get("VENT_HOST", defaults.host),
            port=int(os.environ.get("VENT_PORT", defaults.port)),
        )

    @property
    def uses_default_secret(self) -> bool:
        return self.secret_key == DEFAULT_SECRET_KEY
