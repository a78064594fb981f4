"""Type definitions for authentication."""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass
class Claims:
    """Claims embedded in an admin token.

    Attributes:
        subject: The authenticated user's ID, as a string
        issued_at: Token issued-at timestamp
        expires_at: Token expiration timestamp
    """

    subject: str
    issued_at: int = 0
    expires_at: int = 0

    @property
    def user_id(self) -> int:
        """The subject as an integer user ID.

        Raises:
            ValueError: If the subject is not an integer
        """
        return int(self.subject)

    def to_payload(self) -> dict[str, Any]:
        return {"sub": self.subject, "iat": self.issued_at, "exp": self.expires_at}


@runtime_checkable
class CredentialGenerator(Protocol):
    """Turns a plain-text password into a storable hash."""

    def generate(self, password: str) -> str: ...


@runtime_checkable
class CredentialAuthenticator(Protocol):
    """Checks a plain-text password against a stored hash.

    Raises PasswordMismatchError when they do not match.
    """

    def authenticate(self, password: str, hash: str) -> None: ...


@runtime_checkable
class TokenGenerator(Protocol):
    """Signs claims into a token string."""

    def generate(self, claims: Claims) -> str: ...


@runtime_checkable
class TokenAuthenticator(Protocol):
    """Validates a token and returns its claims.

    Raises an AuthenticationError subclass for bad or expired tokens.
    """

    def authenticate(self, token: str) -> Claims: ...
