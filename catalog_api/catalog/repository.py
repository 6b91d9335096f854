"""Product repository for database operations.

SQLAlchemy adapter for the product store: translates ``ProductFilter``
and ``SortSpec`` into SQL and maps rows to domain entities.
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import and_, delete, func, or_, select

from catalog_api.catalog.query import ProductFilter, SortSpec
from catalog_api.catalog.store import MUTABLE_FIELDS, ProductStore, resolve_sort_attribute
from catalog_api.domain.entities import Product, utcnow
from catalog_api.infrastructure.database import Database
from catalog_api.infrastructure.models import ProductModel


def build_conditions(product_filter: ProductFilter) -> list[Any]:
    """Translate a filter into SQL conditions.

    Args:
        product_filter: Filter predicate.

    Returns:
        Conditions to be combined with AND.
    """
    conditions: list[Any] = []

    if product_filter.category is not None:
        conditions.append(ProductModel.category == product_filter.category)

    if product_filter.min_price is not None:
        conditions.append(ProductModel.price >= product_filter.min_price)

    if product_filter.max_price is not None:
        conditions.append(ProductModel.price <= product_filter.max_price)

    if product_filter.min_rating is not None:
        conditions.append(ProductModel.rating >= product_filter.min_rating)

    if product_filter.owner_id is not None:
        conditions.append(ProductModel.owner_id == product_filter.owner_id)

    if product_filter.search is not None:
        conditions.append(
            or_(
                ProductModel.name.icontains(product_filter.search, autoescape=True),
                ProductModel.description.icontains(product_filter.search, autoescape=True),
            )
        )

    return conditions


class ProductRepository(ProductStore):
    """Repository for Product database operations.

    Every method runs in its own session, so each call is one atomic
    unit of work.

    Example usage:
        repo = ProductRepository(database)
        products = await repo.find(
            ProductFilter(category="Phones"),
            SortSpec("price", descending=False),
            skip=0,
            limit=10,
        )
    """

    def __init__(self, database: Database) -> None:
        """Initialize repository with a database handle.

        Args:
            database: Connected database handle.
        """
        self.database = database

    async def find(
        self,
        product_filter: ProductFilter,
        sort: SortSpec,
        skip: int,
        limit: int,
    ) -> Sequence[Product]:
        query = select(ProductModel)

        conditions = build_conditions(product_filter)
        if conditions:
            query = query.where(and_(*conditions))

        # Sorting
        sort_column = getattr(ProductModel, resolve_sort_attribute(sort.field))
        if sort.descending:
            query = query.order_by(sort_column.desc(), ProductModel.id)
        else:
            query = query.order_by(sort_column.asc(), ProductModel.id)

        # Pagination
        query = query.offset(skip).limit(limit)

        async with self.database.session() as session:
            result = await session.execute(query)
            return [row.to_entity() for row in result.scalars().all()]

    async def count(self, product_filter: ProductFilter) -> int:
        query = select(func.count(ProductModel.id))

        conditions = build_conditions(product_filter)
        if conditions:
            query = query.where(and_(*conditions))

        async with self.database.session() as session:
            result = await session.execute(query)
            return result.scalar_one()

    async def find_by_id(self, product_id: str) -> Product | None:
        async with self.database.session() as session:
            model = await session.get(ProductModel, product_id)
            return model.to_entity() if model else None

    async def insert(self, product: Product) -> Product:
        async with self.database.session() as session:
            model = ProductModel.from_entity(product)
            session.add(model)
            await session.flush()
            return model.to_entity()

    async def update_by_id(self, product_id: str, changes: dict[str, Any]) -> Product | None:
        async with self.database.session() as session:
            model = await session.get(ProductModel, product_id, with_for_update=True)
            if model is None:
                return None

            updates = {k: v for k, v in changes.items() if k in MUTABLE_FIELDS}
            if updates:
                for key, value in updates.items():
                    setattr(model, key, value)
                model.updated_at = utcnow()
                await session.flush()

            return model.to_entity()

    async def delete_by_id(self, product_id: str) -> bool:
        async with self.database.session() as session:
            result = await session.execute(
                delete(ProductModel).where(ProductModel.id == product_id)
            )
            return result.rowcount > 0

    async def ping(self) -> bool:
        return await self.database.ping()
