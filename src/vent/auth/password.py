"""Password hashing service using bcrypt."""

from passlib.context import CryptContext

from vent.core.errors import PasswordMismatchError


class PasswordService:
    """Service for hashing and verifying passwords using bcrypt.

    Uses passlib's CryptContext for secure password hashing with
    automatic salt generation and configurable work factor. Implements
    both CredentialGenerator and CredentialAuthenticator.
    """

    def __init__(self, rounds: int = 12):
        """Initialize the password service.

        Args:
            rounds: bcrypt work factor (default 12, higher = slower + more secure)
        """
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def generate(self, password: str) -> str:
        """Hash a password.

        Args:
            password: Plain text password

        Returns:
            Bcrypt hash string (includes algorithm, rounds, salt, and hash)
        """
        return self._context.hash(password)

    def verify(self, password: str, hash: str) -> bool:
        """Verify a password against a hash.

        Args:
            password: Plain text password to verify
            hash: Bcrypt hash to verify against

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        try:
            return self._context.verify(password, hash)
        except (ValueError, TypeError):
            return False

    def authenticate(self, password: str, hash: str) -> None:
        """Check a password against a hash.

        Raises:
            PasswordMismatchError: If the password does not match
        """
        if not self.verify(password, hash):
            raise PasswordMismatchError("Password is invalid")
