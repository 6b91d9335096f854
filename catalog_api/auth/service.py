"""Credential service.

Registers users, verifies passwords, issues bearer tokens and resolves
tokens back into caller identities.
"""

import asyncio
from dataclasses import dataclass

import structlog

from catalog_api.auth.passwords import PasswordHasher
from catalog_api.auth.repository import UserStore
from catalog_api.auth.tokens import TokenService
from catalog_api.domain.entities import Role, User, new_id, utcnow
from catalog_api.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from catalog_api.infrastructure.timeouts import call_with_timeout

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid credentials"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller."""

    id: str
    role: Role


@dataclass(frozen=True)
class AuthResult:
    """Registered or logged-in user with a fresh token."""

    user: User
    token: str


class CredentialService:
    """Service for registration, login and token resolution.

    The role of a caller is always read from the user store, never from
    the token, so it reflects the stored record.
    """

    def __init__(
        self,
        users: UserStore,
        hasher: PasswordHasher,
        tokens: TokenService,
        min_password_length: int = 6,
        timeout: float | None = 5.0,
    ) -> None:
        """Initialize service.

        Args:
            users: User store adapter.
            hasher: Password hasher.
            tokens: Token service.
            min_password_length: Shortest accepted password.
            timeout: Seconds allowed per store call.
        """
        self.users = users
        self.hasher = hasher
        self.tokens = tokens
        self.min_password_length = min_password_length
        self.timeout = timeout

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        role: Role = Role.USER,
    ) -> AuthResult:
        """Register a new user and issue a token.

        Raises:
            ValidationError: If a field is missing or the password is too short
                or too long.
            ConflictError: If the email is already registered.
        """
        missing = [
            field
            for field, value in (("email", email), ("password", password), ("name", name))
            if not value or not value.strip()
        ]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                fields=missing,
            )
        if len(password) < self.min_password_length:
            raise ValidationError(
                f"Password must be at least {self.min_password_length} characters",
                fields=["password"],
            )
        if len(password.encode("utf-8")) > self.hasher.MAX_BYTES:
            raise ValidationError(
                f"Password cannot exceed {self.hasher.MAX_BYTES} bytes",
                fields=["password"],
            )

        email = email.strip()
        logger.info("Registration attempt", email=email)

        existing = await call_with_timeout(
            "find_user_by_email", self.users.find_by_email(email), self.timeout
        )
        if existing is not None:
            raise ConflictError("User already exists with this email")

        # bcrypt is CPU-bound; keep it off the event loop
        password_hash = await asyncio.to_thread(self.hasher.hash, password)
        user = User(
            id=new_id(),
            email=email,
            name=name.strip(),
            role=role,
            password_hash=password_hash,
            created_at=utcnow(),
        )
        user = await call_with_timeout("insert_user", self.users.insert(user), self.timeout)

        logger.info("User created", user_id=user.id, role=user.role.value)
        return AuthResult(user=user, token=self.tokens.issue(user.id))

    async def login(self, email: str, password: str) -> AuthResult:
        """Verify credentials and issue a token.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong.
        """
        if not email or not password:
            raise AuthenticationError(INVALID_CREDENTIALS)

        user = await call_with_timeout(
            "find_user_by_email", self.users.find_by_email(email.strip()), self.timeout
        )
        if user is None or not await asyncio.to_thread(
            self.hasher.verify, password, user.password_hash
        ):
            logger.warning("Login failed", email=email)
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("Login successful", user_id=user.id)
        return AuthResult(user=user, token=self.tokens.issue(user.id))

    async def resolve_identity(self, token: str) -> Identity:
        """Resolve a bearer token into the caller's identity.

        Raises:
            AuthenticationError: If the token is invalid or its user is gone.
        """
        user_id = self.tokens.verify(token)
        user = await call_with_timeout(
            "find_user_by_id", self.users.find_by_id(user_id), self.timeout
        )
        if user is None:
            raise AuthenticationError("User no longer exists")
        return Identity(id=user.id, role=user.role)

    async def get_user(self, user_id: str) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If no user has this ID.
        """
        user = await call_with_timeout(
            "find_user_by_id", self.users.find_by_id(user_id), self.timeout
        )
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def get_users(self, user_ids: list[str]) -> dict[str, User]:
        """Get several users keyed by ID."""
        return await call_with_timeout(
            "find_users_by_ids", self.users.find_by_ids(user_ids), self.timeout
        )
