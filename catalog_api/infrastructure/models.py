"""SQLAlchemy models for database tables.

Defines the users and products tables and their conversion to domain
entities.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import DateTime, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog_api.domain.entities import Product, Role, User, new_id
from catalog_api.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime) -> datetime:
    # SQLite drops tzinfo on the way back
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class UserModel(Base):
    """User model for database persistence."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=Role.USER.value)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<UserModel(id={self.id}, email={self.email})>"

    def to_entity(self) -> User:
        """Convert to domain entity."""
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            role=Role(self.role),
            password_hash=self.password_hash,
            created_at=_aware(self.created_at),
        )

    @classmethod
    def from_entity(cls, user: User) -> "UserModel":
        """Create model from domain entity."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role.value,
            password_hash=user.password_hash,
            created_at=user.created_at,
        )


class ProductModel(Base):
    """Product model for database persistence.

    ``owner_id`` is a plain reference to users.id without a foreign key:
    products outlive their owner.
    """

    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, index=True)
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=False, default=Decimal("0"))
    image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ProductModel(id={self.id}, name={self.name[:30]})>"

    def to_entity(self) -> Product:
        """Convert to domain entity."""
        return Product(
            id=self.id,
            name=self.name,
            description=self.description,
            category=self.category,
            price=Decimal(self.price),
            rating=Decimal(self.rating),
            image_url=self.image_url,
            owner_id=self.owner_id,
            created_at=_aware(self.created_at),
            updated_at=_aware(self.updated_at),
        )

    @classmethod
    def from_entity(cls, product: Product) -> "ProductModel":
        """Create model from domain entity."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            category=product.category,
            price=product.price,
            rating=product.rating,
            image_url=product.image_url,
            owner_id=product.owner_id,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
