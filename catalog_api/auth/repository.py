"""User store contract and adapters."""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import replace

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from catalog_api.domain.entities import User
from catalog_api.domain.exceptions import ConflictError
from catalog_api.infrastructure.database import Database
from catalog_api.infrastructure.models import UserModel


class UserStore(ABC):
    """Document store for users."""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> User | None:
        """Get user by ID."""

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None:
        """Get user by exact email."""

    @abstractmethod
    async def find_by_ids(self, user_ids: Iterable[str]) -> dict[str, User]:
        """Get several users keyed by ID; unknown IDs are skipped."""

    @abstractmethod
    async def insert(self, user: User) -> User:
        """Persist a new user.

        Raises:
            ConflictError: If the email is already registered.
        """


class InMemoryUserStore(UserStore):
    """User store kept in a dict, for development and tests."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    async def find_by_id(self, user_id: str) -> User | None:
        user = self._users.get(user_id)
        return replace(user) if user else None

    async def find_by_email(self, email: str) -> User | None:
        for user in self._users.values():
            if user.email == email:
                return replace(user)
        return None

    async def find_by_ids(self, user_ids: Iterable[str]) -> dict[str, User]:
        return {uid: replace(self._users[uid]) for uid in set(user_ids) if uid in self._users}

    async def insert(self, user: User) -> User:
        if any(u.email == user.email for u in self._users.values()):
            raise ConflictError("User already exists with this email")
        self._users[user.id] = replace(user)
        return replace(user)


class UserRepository(UserStore):
    """Repository for User database operations."""

    def __init__(self, database: Database) -> None:
        """Initialize repository with a database handle.

        Args:
            database: Connected database handle.
        """
        self.database = database

    async def find_by_id(self, user_id: str) -> User | None:
        async with self.database.session() as session:
            model = await session.get(UserModel, user_id)
            return model.to_entity() if model else None

    async def find_by_email(self, email: str) -> User | None:
        async with self.database.session() as session:
            result = await session.execute(select(UserModel).where(UserModel.email == email))
            model = result.scalar_one_or_none()
            return model.to_entity() if model else None

    async def find_by_ids(self, user_ids: Iterable[str]) -> dict[str, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        async with self.database.session() as session:
            result = await session.execute(select(UserModel).where(UserModel.id.in_(ids)))
            return {model.id: model.to_entity() for model in result.scalars().all()}

    async def insert(self, user: User) -> User:
        try:
            async with self.database.session() as session:
                model = UserModel.from_entity(user)
                session.add(model)
                await session.flush()
                return model.to_entity()
        except IntegrityError as e:
            raise ConflictError("User already exists with this email") from e
