"""Tests for the SQLAlchemy store adapters, run against SQLite."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from pathlib import Path

import pytest
import pytest_asyncio

from catalog_api.auth.repository import UserRepository
from catalog_api.catalog.query import ProductFilter, SortSpec, build_query
from catalog_api.catalog.repository import ProductRepository
from catalog_api.domain.entities import Product, Role, User, new_id
from catalog_api.domain.exceptions import ConflictError
from catalog_api.infrastructure.database import Database, mask_database_url
from catalog_api.infrastructure.models import ProductModel


@pytest_asyncio.fixture
async def database(tmp_path: Path) -> AsyncGenerator[Database, None]:
    """Create a connected SQLite database with the schema."""
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await db.connect(retries=1, create_schema=True)
    yield db
    await db.dispose()


@pytest.fixture
def products(database: Database) -> ProductRepository:
    """Create a product repository."""
    return ProductRepository(database)


@pytest.fixture
def users(database: Database) -> UserRepository:
    """Create a user repository."""
    return UserRepository(database)


def make_product(**overrides: object) -> Product:
    """Create a product with sensible defaults."""
    values: dict = {
        "id": new_id(),
        "name": "Widget",
        "description": "A useful widget",
        "category": "Tools",
        "price": Decimal("20.00"),
        "owner_id": "owner-1",
    }
    values.update(overrides)
    return Product(**values)


class TestMaskDatabaseUrl:
    """Tests for mask_database_url."""

    def test_password_hidden(self) -> None:
        url = "postgresql+asyncpg://catalog:secret@db:5432/catalog"
        assert mask_database_url(url) == "postgresql+asyncpg://catalog:****@db:5432/catalog"

    def test_url_without_password(self) -> None:
        assert mask_database_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


class TestDatabase:
    """Tests for the database handle."""

    @pytest.mark.asyncio
    async def test_ping(self, database: Database) -> None:
        assert await database.ping() is True

    @pytest.mark.asyncio
    async def test_session_rolls_back_on_error(
        self, database: Database, products: ProductRepository
    ) -> None:
        product = make_product()

        with pytest.raises(RuntimeError):
            async with database.session() as session:
                session.add(ProductModel.from_entity(product))
                await session.flush()
                raise RuntimeError("boom")

        assert await products.find_by_id(product.id) is None


class TestProductRepository:
    """Tests for ProductRepository."""

    @pytest.mark.asyncio
    async def test_insert_and_find_by_id(self, products: ProductRepository) -> None:
        product = await products.insert(make_product(price=Decimal("19.99")))

        found = await products.find_by_id(product.id)

        assert found is not None
        assert found.price == Decimal("19.99")
        assert found.owner_id == "owner-1"
        assert found.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, products: ProductRepository) -> None:
        assert await products.find_by_id(new_id()) is None

    @pytest.mark.asyncio
    async def test_filters(self, products: ProductRepository) -> None:
        await products.insert(make_product(name="Phone", price=Decimal("10")))
        await products.insert(make_product(name="Case", description="For a PHONE", price=Decimal("50")))
        await products.insert(make_product(name="Phone XL", price=Decimal("9.99")))
        await products.insert(make_product(name="Lamp", price=Decimal("20")))

        product_filter = ProductFilter(
            min_price=Decimal("10"), max_price=Decimal("50"), search="phone"
        )
        found = await products.find(product_filter, SortSpec("price", False), skip=0, limit=10)

        assert [p.name for p in found] == ["Phone", "Case"]
        assert await products.count(product_filter) == 2

    @pytest.mark.asyncio
    async def test_search_escapes_wildcards(self, products: ProductRepository) -> None:
        await products.insert(make_product(name="100% cotton"))
        await products.insert(make_product(name="1000 threads"))

        assert await products.count(ProductFilter(search="100%")) == 1

    @pytest.mark.asyncio
    async def test_category_owner_and_rating(self, products: ProductRepository) -> None:
        await products.insert(make_product(rating=Decimal("4.5")))
        await products.insert(make_product(rating=Decimal("2")))
        await products.insert(make_product(category="Toys", rating=Decimal("5")))
        await products.insert(make_product(owner_id="owner-2", rating=Decimal("5")))

        product_filter = ProductFilter(category="Tools", owner_id="owner-1", min_rating=Decimal("4"))

        assert await products.count(product_filter) == 1

    @pytest.mark.asyncio
    async def test_pagination(self, products: ProductRepository) -> None:
        for i in range(12):
            await products.insert(make_product(name=f"P{i:02d}", price=Decimal(i)))

        page = await products.find(ProductFilter(), SortSpec("price", False), skip=10, limit=5)

        assert [p.name for p in page] == ["P10", "P11"]
        assert await products.count(ProductFilter()) == 12

    @pytest.mark.asyncio
    async def test_far_page_is_empty(self, products: ProductRepository) -> None:
        await products.insert(make_product())
        query = build_query({"page": "1e20", "limit": "100"})

        found = await products.find(query.filter, query.sort, query.skip, query.limit)

        assert found == []

    @pytest.mark.asyncio
    async def test_unknown_sort_field_uses_created_at(self, products: ProductRepository) -> None:
        await products.insert(make_product(name="first"))
        await products.insert(make_product(name="second"))

        found = await products.find(ProductFilter(), SortSpec("password_hash"), skip=0, limit=10)

        assert len(found) == 2

    @pytest.mark.asyncio
    async def test_update_by_id(self, products: ProductRepository) -> None:
        product = await products.insert(make_product())

        updated = await products.update_by_id(
            product.id, {"name": "Renamed", "owner_id": "intruder"}
        )

        assert updated is not None
        assert updated.name == "Renamed"
        assert updated.owner_id == "owner-1"
        assert updated.updated_at >= product.updated_at

    @pytest.mark.asyncio
    async def test_empty_update(self, products: ProductRepository) -> None:
        product = await products.insert(make_product())

        updated = await products.update_by_id(product.id, {})

        assert updated is not None
        assert updated.name == product.name
        assert updated.updated_at == product.updated_at

    @pytest.mark.asyncio
    async def test_update_missing(self, products: ProductRepository) -> None:
        assert await products.update_by_id(new_id(), {"name": "x"}) is None

    @pytest.mark.asyncio
    async def test_delete_by_id(self, products: ProductRepository) -> None:
        product = await products.insert(make_product())

        assert await products.delete_by_id(product.id) is True
        assert await products.delete_by_id(product.id) is False
        assert await products.find_by_id(product.id) is None

    @pytest.mark.asyncio
    async def test_ping(self, products: ProductRepository) -> None:
        assert await products.ping() is True


class TestUserRepository:
    """Tests for UserRepository."""

    @pytest.mark.asyncio
    async def test_insert_and_find(self, users: UserRepository) -> None:
        user = User(id=new_id(), email="ann@example.com", name="Ann", role=Role.ADMIN, password_hash="h")
        await users.insert(user)

        by_id = await users.find_by_id(user.id)
        by_email = await users.find_by_email("ann@example.com")

        assert by_id is not None
        assert by_id.role is Role.ADMIN
        assert by_email is not None
        assert by_email.id == user.id

    @pytest.mark.asyncio
    async def test_duplicate_email(self, users: UserRepository) -> None:
        await users.insert(User(id=new_id(), email="ann@example.com", name="Ann", password_hash="h"))

        with pytest.raises(ConflictError):
            await users.insert(User(id=new_id(), email="ann@example.com", name="Ann 2", password_hash="h"))

    @pytest.mark.asyncio
    async def test_find_by_ids(self, users: UserRepository) -> None:
        ann = await users.insert(User(id=new_id(), email="ann@example.com", name="Ann", password_hash="h"))
        bob = await users.insert(User(id=new_id(), email="bob@example.com", name="Bob", password_hash="h"))

        found = await users.find_by_ids([ann.id, bob.id, new_id()])

        assert set(found) == {ann.id, bob.id}
        assert await users.find_by_ids([]) == {}
