"""Bearer token issuing and verification.

Tokens are HS256 JWTs whose ``sub`` claim is the user id.
"""

from datetime import datetime, timedelta, timezone

import jwt

from catalog_api.domain.exceptions import AuthenticationError


class TokenService:
    """Service for JWT token creation and verification."""

    ALGORITHM = "HS256"

    def __init__(self, secret_key: str, expires_minutes: int = 60 * 24) -> None:
        """Initialize the token service.

        Args:
            secret_key: Secret used to sign tokens.
            expires_minutes: Token lifetime in minutes.

        Raises:
            ValueError: If the secret is empty.
        """
        if not secret_key:
            raise ValueError("JWT secret key cannot be empty")
        self._secret_key = secret_key
        self._expires = timedelta(minutes=expires_minutes)

    def issue(self, subject: str, expires_delta: timedelta | None = None) -> str:
        """Create a signed token for a subject.

        Args:
            subject: User id carried by the token.
            expires_delta: Custom lifetime.

        Returns:
            Encoded token string.
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            "iat": now,
            "exp": now + (expires_delta or self._expires),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.ALGORITHM)

    def verify(self, token: str) -> str:
        """Verify a token and return its subject.

        Raises:
            AuthenticationError: If the token is expired, invalid or has no
                subject.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self.ALGORITHM])
        except jwt.ExpiredSignatureError as e:
            raise AuthenticationError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise AuthenticationError("Invalid token") from e

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise AuthenticationError("Malformed token payload")
        return subject
