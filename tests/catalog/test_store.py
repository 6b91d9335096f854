"""Tests for the in-process product store."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from catalog_api.catalog.query import ProductFilter, SortSpec
from catalog_api.catalog.store import InMemoryProductStore, resolve_sort_attribute
from catalog_api.domain.entities import Product, new_id

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_product(index: int, **overrides: object) -> Product:
    """Create the index-th product, created one minute after the previous."""
    values: dict = {
        "id": new_id(),
        "name": f"Product {index:02d}",
        "description": "Sample",
        "category": "Misc",
        "price": Decimal(index),
        "owner_id": "owner-1",
        "created_at": BASE_TIME + timedelta(minutes=index),
        "updated_at": BASE_TIME + timedelta(minutes=index),
    }
    values.update(overrides)
    return Product(**values)


@pytest.fixture
def store() -> InMemoryProductStore:
    """Create an empty store."""
    return InMemoryProductStore()


class TestResolveSortAttribute:
    """Tests for resolve_sort_attribute."""

    def test_known_fields(self) -> None:
        assert resolve_sort_attribute("createdAt") == "created_at"
        assert resolve_sort_attribute("created_at") == "created_at"
        assert resolve_sort_attribute("price") == "price"

    def test_unknown_field_falls_back_to_created_at(self) -> None:
        assert resolve_sort_attribute("password_hash") == "created_at"


class TestInMemoryProductStore:
    """Tests for InMemoryProductStore."""

    @pytest.mark.asyncio
    async def test_insert_and_find_by_id(self, store: InMemoryProductStore) -> None:
        product = make_product(1)
        await store.insert(product)

        found = await store.find_by_id(product.id)
        assert found == product
        assert found is not product

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, store: InMemoryProductStore) -> None:
        assert await store.find_by_id(new_id()) is None

    @pytest.mark.asyncio
    async def test_find_sorts_newest_first_by_default(self, store: InMemoryProductStore) -> None:
        for i in range(3):
            await store.insert(make_product(i))

        products = await store.find(ProductFilter(), SortSpec(), skip=0, limit=10)
        assert [p.name for p in products] == ["Product 02", "Product 01", "Product 00"]

    @pytest.mark.asyncio
    async def test_find_sorts_by_price_ascending(self, store: InMemoryProductStore) -> None:
        for i in (3, 1, 2):
            await store.insert(make_product(i))

        products = await store.find(
            ProductFilter(), SortSpec("price", descending=False), skip=0, limit=10
        )
        assert [p.price for p in products] == [Decimal(1), Decimal(2), Decimal(3)]

    @pytest.mark.asyncio
    async def test_find_windows_results(self, store: InMemoryProductStore) -> None:
        for i in range(12):
            await store.insert(make_product(i))

        page = await store.find(ProductFilter(), SortSpec("price", False), skip=10, limit=5)
        assert [p.price for p in page] == [Decimal(10), Decimal(11)]

    @pytest.mark.asyncio
    async def test_count_applies_filter(self, store: InMemoryProductStore) -> None:
        for i in range(5):
            await store.insert(make_product(i, category="A" if i % 2 else "B"))

        assert await store.count(ProductFilter()) == 5
        assert await store.count(ProductFilter(category="A")) == 2

    @pytest.mark.asyncio
    async def test_update_changes_only_given_fields(self, store: InMemoryProductStore) -> None:
        product = await store.insert(make_product(1))

        updated = await store.update_by_id(product.id, {"name": "Renamed"})

        assert updated is not None
        assert updated.name == "Renamed"
        assert updated.price == product.price
        assert updated.updated_at > product.updated_at

    @pytest.mark.asyncio
    async def test_update_ignores_immutable_fields(self, store: InMemoryProductStore) -> None:
        product = await store.insert(make_product(1))

        updated = await store.update_by_id(product.id, {"owner_id": "intruder"})

        assert updated is not None
        assert updated.owner_id == "owner-1"

    @pytest.mark.asyncio
    async def test_empty_update_leaves_record_unchanged(self, store: InMemoryProductStore) -> None:
        product = await store.insert(make_product(1))

        updated = await store.update_by_id(product.id, {})

        assert updated == product

    @pytest.mark.asyncio
    async def test_update_missing(self, store: InMemoryProductStore) -> None:
        assert await store.update_by_id(new_id(), {"name": "x"}) is None

    @pytest.mark.asyncio
    async def test_delete(self, store: InMemoryProductStore) -> None:
        product = await store.insert(make_product(1))

        assert await store.delete_by_id(product.id) is True
        assert await store.delete_by_id(product.id) is False
        assert await store.find_by_id(product.id) is None
