"""Product store contract and in-process adapter."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from catalog_api.catalog.query import ProductFilter, SortSpec
from catalog_api.domain.entities import Product, utcnow

# Sort keys accepted by the adapters, mapped to Product attributes
SORTABLE_FIELDS = {
    "createdAt": "created_at",
    "created_at": "created_at",
    "updatedAt": "updated_at",
    "updated_at": "updated_at",
    "name": "name",
    "category": "category",
    "price": "price",
    "rating": "rating",
}

# Fields a partial update may change
MUTABLE_FIELDS = frozenset({"name", "description", "category", "price", "rating", "image_url"})


def resolve_sort_attribute(sort_field: str) -> str:
    """Map a requested sort field to a Product attribute.

    Unknown fields fall back to the creation timestamp.
    """
    return SORTABLE_FIELDS.get(sort_field, "created_at")


class ProductStore(ABC):
    """Document store for products.

    Each operation is atomic on its own; nothing spans several calls.
    """

    @abstractmethod
    async def find(
        self,
        product_filter: ProductFilter,
        sort: SortSpec,
        skip: int,
        limit: int,
    ) -> Sequence[Product]:
        """Find products matching a filter, ordered and windowed."""

    @abstractmethod
    async def count(self, product_filter: ProductFilter) -> int:
        """Count products matching a filter."""

    @abstractmethod
    async def find_by_id(self, product_id: str) -> Product | None:
        """Get product by ID."""

    @abstractmethod
    async def insert(self, product: Product) -> Product:
        """Persist a new product."""

    @abstractmethod
    async def update_by_id(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        """Apply changes to a product.

        Returns:
            The updated product, or None if it no longer exists.
        """

    @abstractmethod
    async def delete_by_id(self, product_id: str) -> bool:
        """Delete a product.

        Returns:
            True if a product was deleted.
        """

    async def ping(self) -> bool:
        """Check store availability."""
        return True


class InMemoryProductStore(ProductStore):
    """Product store kept in a dict.

    Used for local development and tests. Records are copied on the way in
    and out so callers never share state with the store.
    """

    def __init__(self) -> None:
        self._products: dict[str, Product] = {}

    async def find(
        self,
        product_filter: ProductFilter,
        sort: SortSpec,
        skip: int,
        limit: int,
    ) -> Sequence[Product]:
        attribute = resolve_sort_attribute(sort.field)
        matching = [p for p in self._products.values() if product_filter.matches(p)]
        matching.sort(key=lambda p: getattr(p, attribute), reverse=sort.descending)
        return [replace(p) for p in matching[skip : skip + limit]]

    async def count(self, product_filter: ProductFilter) -> int:
        return sum(1 for p in self._products.values() if product_filter.matches(p))

    async def find_by_id(self, product_id: str) -> Product | None:
        product = self._products.get(product_id)
        return replace(product) if product else None

    async def insert(self, product: Product) -> Product:
        self._products[product.id] = replace(product)
        return replace(product)

    async def update_by_id(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        product = self._products.get(product_id)
        if product is None:
            return None
        updates = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS}
        if not updates:
            return replace(product)
        updated = replace(product, **updates, updated_at=utcnow())
        self._products[product_id] = updated
        return replace(updated)

    async def delete_by_id(self, product_id: str) -> bool:
        return self._products.pop(product_id, None) is not None
