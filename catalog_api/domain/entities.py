"""Domain entities.

Plain records shared by the services and the store adapters.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID, uuid4


class Role(str, Enum):
    """User roles."""

    USER = "user"
    ADMIN = "admin"


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid4())


def is_valid_id(value: Any) -> bool:
    """Check whether a value has the identifier shape used by the stores.

    Args:
        value: Candidate identifier.

    Returns:
        True for canonical UUID strings.
    """
    if not isinstance(value, str):
        return False
    try:
        return str(UUID(value)) == value.lower()
    except ValueError:
        return False


def utcnow() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


@dataclass
class User:
    """Registered user.

    Attributes:
        id: Unique user identifier.
        email: Login email, unique as stored.
        name: Display name.
        role: User role.
        password_hash: bcrypt hash, only read by the credential service.
        created_at: Registration timestamp.
    """

    id: str
    email: str
    name: str
    role: Role = Role.USER
    password_hash: str = field(default="", repr=False)
    created_at: datetime = field(default_factory=utcnow)

    def to_public_dict(self) -> dict[str, Any]:
        """Serialize without the password hash."""
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "role": self.role.value,
        }


@dataclass
class Product:
    """Catalog product.

    Attributes:
        id: Unique product identifier.
        name: Product name.
        description: Product description.
        category: Free-form category.
        price: Non-negative price.
        rating: Rating in [0, 5].
        owner_id: User that created the product.
        image_url: Uploaded image URL.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    id: str
    name: str
    description: str
    category: str
    price: Decimal
    owner_id: str
    rating: Decimal = Decimal("0")
    image_url: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
