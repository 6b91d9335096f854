"""Domain layer module.

Contains the entities and exceptions shared across the catalog.
"""

from catalog_api.domain.entities import Product, Role, User, is_valid_id, new_id
from catalog_api.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainError,
    ForbiddenError,
    InvalidIdentifierError,
    NotFoundError,
    TransientStoreError,
    ValidationError,
)

__all__ = [
    # Entities
    "Product",
    "Role",
    "User",
    "is_valid_id",
    "new_id",
    # Exceptions
    "AuthenticationError",
    "ConflictError",
    "DomainError",
    "ForbiddenError",
    "InvalidIdentifierError",
    "NotFoundError",
    "TransientStoreError",
    "ValidationError",
]
