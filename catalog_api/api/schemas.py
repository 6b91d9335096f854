"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization.
Product payloads use camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from catalog_api.domain.entities import Product, User


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(default=None, description="Request ID for correlation")


class MessageResponse(BaseModel):
    """Plain confirmation message."""

    message: str


# ============================================================================
# Auth Schemas
# ============================================================================


class RegisterRequest(BaseModel):
    """Request to register a user."""

    email: str = Field(..., description="Login email")
    password: str = Field(..., description="Plaintext password")
    name: str = Field(..., description="Display name")


class LoginRequest(BaseModel):
    """Request to log in."""

    email: str
    password: str


class UserSchema(BaseModel):
    """Public user representation."""

    id: str
    email: str
    name: str
    role: str

    @classmethod
    def from_entity(cls, user: User) -> "UserSchema":
        """Convert User entity to schema."""
        return cls(**user.to_public_dict())


class AuthResponse(BaseModel):
    """Authenticated user with bearer token."""

    user: UserSchema
    token: str


# ============================================================================
# Product Schemas
# ============================================================================


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OwnerSchema(CamelModel):
    """Owner summary embedded in products."""

    id: str
    name: str
    email: str


class ProductResponse(CamelModel):
    """Product representation."""

    id: str
    name: str
    description: str
    category: str
    price: float
    rating: float
    image_url: str | None = None
    user_id: str
    owner: OwnerSchema | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product, owner: User | None = None) -> "ProductResponse":
        """Convert Product entity to response schema."""
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            category=product.category,
            price=float(product.price),
            rating=float(product.rating),
            image_url=product.image_url,
            user_id=product.owner_id,
            owner=(
                OwnerSchema(id=owner.id, name=owner.name, email=owner.email)
                if owner
                else None
            ),
            created_at=product.created_at,
            updated_at=product.updated_at,
        )


class PaginationSchema(CamelModel):
    """Pagination metadata."""

    total: int = Field(..., description="Total number of matching products")
    page: int = Field(..., description="Current page number (1-based)")
    limit: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Number of pages")


class ProductListResponse(BaseModel):
    """Page of products."""

    products: list[ProductResponse]
    pagination: PaginationSchema
