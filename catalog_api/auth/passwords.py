"""Password hashing using bcrypt."""

import bcrypt

# bcrypt only looks at the first 72 bytes and newer releases reject longer input
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Hashes and verifies passwords with bcrypt.

    Example usage:
        hasher = PasswordHasher(rounds=12)
        password_hash = hasher.hash("s3cret!")
        hasher.verify("s3cret!", password_hash)  # True
    """

    MAX_BYTES = MAX_PASSWORD_BYTES

    def __init__(self, rounds: int = 12) -> None:
        """Initialize hasher.

        Args:
            rounds: bcrypt work factor.
        """
        self.rounds = rounds

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Raises:
            ValueError: If the password is longer than ``MAX_BYTES`` in UTF-8.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > self.MAX_BYTES:
            raise ValueError(f"Password cannot exceed {self.MAX_BYTES} bytes")
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(encoded, salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a plaintext password against a stored hash.

        Returns:
            True if the password matches. Malformed hashes and over-long
            passwords never match.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > self.MAX_BYTES:
            return False
        try:
            return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
        except (ValueError, TypeError):
            return False
