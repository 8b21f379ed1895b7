"""Password hashing service using bcrypt."""

from passlib.context import CryptContext


class PasswordService:
    """Service for hashing and verifying passwords using bcrypt.

    Uses passlib's CryptContext for salted hashing with a
    configurable work factor.
    """

    def __init__(self, rounds: int = 10):
        """Initialize the password service.

        Args:
            rounds: bcrypt work factor (default 10, higher = slower + more secure)
        """
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
            # Hashes at any other cost are reported by needs_rehash()
            bcrypt__min_rounds=rounds,
            bcrypt__max_rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Hash a password.

        Returns:
            Bcrypt hash string (includes algorithm, rounds, salt, and hash)
        """
        return self._context.hash(password)

    def verify(self, password: str, hash: str | None) -> bool:
        """Verify a password against a hash.

        Returns:
            True if password matches. False on mismatch, and also when
            the hash is missing or the library cannot verify it.
        """
        if not hash:
            return False
        try:
            return self._context.verify(password, hash)
        except Exception:
            return False

    def needs_rehash(self, hash: str) -> bool:
        """Check if a hash was made with an outdated scheme or work factor."""
        return self._context.needs_update(hash)
