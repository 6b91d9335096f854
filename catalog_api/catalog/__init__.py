"""Product Catalog.

Provides the access policy, the listing query builder, the product stores
and the catalog service.
"""

from catalog_api.catalog.policy import Decision, authorize
from catalog_api.catalog.query import (
    PaginatedResult,
    ProductFilter,
    ProductQuery,
    QueryConfig,
    SortSpec,
    build_query,
)
from catalog_api.catalog.repository import ProductRepository
from catalog_api.catalog.service import CatalogService, ProductFields
from catalog_api.catalog.store import InMemoryProductStore, ProductStore

__all__ = [
    # Policy
    "Decision",
    "authorize",
    # Query
    "PaginatedResult",
    "ProductFilter",
    "ProductQuery",
    "QueryConfig",
    "SortSpec",
    "build_query",
    # Stores
    "InMemoryProductStore",
    "ProductRepository",
    "ProductStore",
    # Service
    "CatalogService",
    "ProductFields",
]
