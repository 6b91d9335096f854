"""Catalog service for product operations.

High-level service that combines the product store, the query builder and
the access policy into the create/read/update/delete use cases.
"""

import asyncio
from collections.abc import Mapping
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict

from catalog_api.catalog.policy import Decision, authorize
from catalog_api.catalog.query import (
    PaginatedResult,
    QueryConfig,
    build_query,
    parse_decimal,
)
from catalog_api.catalog.store import ProductStore
from catalog_api.domain.entities import Product, Role, is_valid_id, new_id, utcnow
from catalog_api.domain.exceptions import (
    DomainError,
    ForbiddenError,
    InvalidIdentifierError,
    NotFoundError,
    ValidationError,
)
from catalog_api.infrastructure.blob_store import ImageUpload, LocalBlobStore
from catalog_api.infrastructure.timeouts import call_with_timeout

logger = structlog.get_logger()

REQUIRED_FIELDS = ("name", "description", "category", "price")
TEXT_FIELDS = ("name", "description", "category")

MAX_RATING = Decimal("5")
CENTS = Decimal("0.01")


class ProductFields(BaseModel):
    """Partial set of product fields.

    Only the fields passed to the constructor count as provided, whatever
    their value; everything else is left alone by an update.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    description: str | None = None
    category: str | None = None
    price: str | int | float | Decimal | None = None
    rating: str | int | float | Decimal | None = None

    def provided(self) -> dict[str, Any]:
        """Return the provided fields and their values."""
        return {name: getattr(self, name) for name in self.model_fields_set}


def _clean_text(name: str, value: Any) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f"'{name}' must not be empty", fields=[name])
    return text


def _coerce_price(value: Any) -> Decimal:
    price = parse_decimal(value)
    if price is None:
        raise ValidationError("'price' must be a number", fields=["price"])
    if price < 0:
        raise ValidationError("'price' must not be negative", fields=["price"])
    return price.quantize(CENTS, rounding=ROUND_HALF_UP)


def _coerce_rating(value: Any, lenient: bool) -> Decimal:
    rating = parse_decimal(value)
    if rating is None:
        if lenient:
            return Decimal("0")
        raise ValidationError("'rating' must be a number", fields=["rating"])
    if rating < 0 or rating > MAX_RATING:
        raise ValidationError("'rating' must be between 0 and 5", fields=["rating"])
    return rating.quantize(CENTS, rounding=ROUND_HALF_UP)


class CatalogService:
    """Service for catalog operations.

    Reads are open to everyone. Updates and deletes go through the access
    policy: the owner or an admin may mutate a product. Every store call is
    bounded by ``timeout`` seconds.

    Example usage:
        service = CatalogService(InMemoryProductStore())
        product = await service.create_product(
            owner_id,
            ProductFields(name="Lamp", description="Desk lamp", category="Home", price="19.99"),
        )
        page = await service.list_products({"category": "Home", "page": "1"})
    """

    def __init__(
        self,
        store: ProductStore,
        blobs: LocalBlobStore | None = None,
        query_config: QueryConfig | None = None,
        timeout: float | None = 5.0,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            store: Product store adapter.
            blobs: Blob store for uploaded images.
            query_config: Listing query policy.
            timeout: Seconds allowed per store call.
            request_id: Request ID for log correlation.
        """
        self.store = store
        self.blobs = blobs
        self.query_config = query_config or QueryConfig()
        self.timeout = timeout
        self.log = logger.bind(request_id=request_id) if request_id else logger

    async def create_product(
        self,
        owner_id: str,
        fields: ProductFields,
        image: ImageUpload | None = None,
    ) -> Product:
        """Create a product owned by the caller.

        Args:
            owner_id: Creating user, recorded as owner.
            fields: Product fields; name, description, category and price
                are required.
            image: Uploaded image, stored once the fields are valid.

        Returns:
            The created product with its assigned ID.

        Raises:
            ValidationError: If required fields are missing or malformed.
        """
        values = fields.provided()
        missing = [
            name
            for name in REQUIRED_FIELDS
            if values.get(name) is None or str(values[name]).strip() == ""
        ]
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                fields=missing,
            )

        name = _clean_text("name", values["name"])
        description = _clean_text("description", values["description"])
        category = _clean_text("category", values["category"])
        price = _coerce_price(values["price"])
        rating = _coerce_rating(values.get("rating"), lenient=True)

        image_url = await self._store_image(image)
        now = utcnow()
        product = Product(
            id=new_id(),
            name=name,
            description=description,
            category=category,
            price=price,
            rating=rating,
            image_url=image_url,
            owner_id=owner_id,
            created_at=now,
            updated_at=now,
        )

        try:
            created = await call_with_timeout(
                "insert", self.store.insert(product), self.timeout
            )
        except DomainError:
            await self._discard_image(image_url)
            raise
        self.log.info("Product created", product_id=created.id, owner_id=owner_id)
        return created

    async def list_products(self, params: Mapping[str, Any]) -> PaginatedResult[Product]:
        """List products with filters and pagination.

        Args:
            params: Listing options keyed by their wire names.

        Returns:
            Page of products with pagination metadata.
        """
        query = build_query(params, self.query_config)

        total = await call_with_timeout(
            "count", self.store.count(query.filter), self.timeout
        )
        items = await call_with_timeout(
            "find",
            self.store.find(query.filter, query.sort, query.skip, query.limit),
            self.timeout,
        )

        return PaginatedResult(
            items=list(items),
            total=total,
            page=query.page,
            limit=query.limit,
        )

    async def get_product(self, product_id: str) -> Product:
        """Get product by ID.

        Raises:
            InvalidIdentifierError: If the ID is not a valid identifier.
            NotFoundError: If no product has this ID.
        """
        if not is_valid_id(product_id):
            raise InvalidIdentifierError("Product", str(product_id))

        product = await call_with_timeout(
            "find_by_id", self.store.find_by_id(product_id), self.timeout
        )
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    async def update_product(
        self,
        product_id: str,
        caller_id: str,
        caller_role: Role | str,
        fields: ProductFields,
        image: ImageUpload | None = None,
    ) -> Product:
        """Apply a partial update to a product.

        Only provided fields are changed; a new image replaces the old one.
        The new image is removed again when the write does not go through.

        Args:
            product_id: Product to update.
            caller_id: Calling user.
            caller_role: Role of the calling user.
            fields: Fields to change.
            image: Newly uploaded image.

        Returns:
            The updated product.

        Raises:
            NotFoundError: If the product does not exist.
            ForbiddenError: If the caller is neither owner nor admin.
            ValidationError: If a provided field is malformed.
        """
        existing = await self.get_product(product_id)
        self._check_access(existing, caller_id, caller_role, "update")

        changes: dict[str, Any] = {}
        for name, value in fields.provided().items():
            if name in TEXT_FIELDS:
                changes[name] = _clean_text(name, value)
            elif name == "price":
                changes[name] = _coerce_price(value)
            elif name == "rating":
                changes[name] = _coerce_rating(value, lenient=False)
        if image is not None:
            changes["image_url"] = await self._store_image(image)

        try:
            updated = await call_with_timeout(
                "update_by_id",
                self.store.update_by_id(product_id, changes),
                self.timeout,
            )
        except DomainError:
            await self._discard_image(changes.get("image_url"))
            raise
        if updated is None:
            await self._discard_image(changes.get("image_url"))
            raise NotFoundError("Product", product_id)

        self.log.info(
            "Product updated",
            product_id=product_id,
            caller_id=caller_id,
            fields=sorted(changes),
        )
        return updated

    async def delete_product(
        self,
        product_id: str,
        caller_id: str,
        caller_role: Role | str,
    ) -> None:
        """Delete a product.

        Raises:
            NotFoundError: If the product does not exist.
            ForbiddenError: If the caller is neither owner nor admin.
        """
        existing = await self.get_product(product_id)
        self._check_access(existing, caller_id, caller_role, "delete")

        deleted = await call_with_timeout(
            "delete_by_id", self.store.delete_by_id(product_id), self.timeout
        )
        if not deleted:
            raise NotFoundError("Product", product_id)

        self.log.info("Product deleted", product_id=product_id, caller_id=caller_id)

    def _check_access(
        self,
        product: Product,
        caller_id: str,
        caller_role: Role | str,
        action: str,
    ) -> None:
        if authorize(caller_id, caller_role, product.owner_id) is Decision.DENY:
            self.log.warning(
                "Product mutation denied",
                product_id=product.id,
                caller_id=caller_id,
                action=action,
            )
            raise ForbiddenError(action)

    async def _store_image(self, image: ImageUpload | None) -> str | None:
        if image is None:
            return None
        if self.blobs is None:
            raise ValidationError("Image uploads are not supported", fields=["image"])
        return await asyncio.to_thread(self.blobs.store, image.filename, image.content)

    async def _discard_image(self, image_url: str | None) -> None:
        # Called on failed writes; the original error is re-raised by the caller
        if image_url is None or self.blobs is None:
            return
        try:
            await asyncio.to_thread(self.blobs.delete, image_url)
        except OSError:
            self.log.warning("Failed to remove orphaned upload", image_url=image_url, exc_info=True)
