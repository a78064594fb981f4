"""JWT token generation and validation service."""

import time

import jwt

from vent.auth.types import Claims
from vent.core.errors import InvalidTokenError, TokenExpiredError


class JWTService:
    """Service for generating and validating admin tokens.

    Uses HS256 algorithm with a shared secret key. Implements both
    TokenGenerator and TokenAuthenticator.
    """

    DEFAULT_TTL = 24 * 60 * 60  # 24 hours

    def __init__(self, secret_key: str, ttl: int = DEFAULT_TTL, algorithm: str = "HS256"):
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens (should be at least 32 chars)
            ttl: Lifetime of new tokens in seconds
            algorithm: JWT algorithm (default HS256)
        """
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.ttl = ttl

    def new_claims(self, user_id: int) -> Claims:
        """Claims for a freshly logged-in user."""
        now = int(time.time())
        return Claims(subject=str(user_id), issued_at=now, expires_at=now + self.ttl)

    def generate(self, claims: Claims) -> str:
        """Sign claims into a token."""
        return jwt.encode(
            claims.to_payload(),
            self._secret_key,
            algorithm=self._algorithm,
        )

    def authenticate(self, token: str) -> Claims:
        """Decode and validate a token.

        Args:
            token: The JWT token string

        Returns:
            Claims with the decoded values

        Raises:
            TokenExpiredError: If the token has expired
            InvalidTokenError: If the token is invalid or malformed
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError("Token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid token: {e}")

        return Claims(
            subject=str(payload["sub"]),
            issued_at=payload.get("iat", 0),
            expires_at=payload["exp"],
        )
