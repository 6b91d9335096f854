"""Service wiring and FastAPI dependencies.

The ``Container`` owns the stores and services of one application
instance. It is built when the app is created and kept on ``app.state``;
request handlers reach it through the dependencies below.
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from catalog_api.auth.passwords import PasswordHasher
from catalog_api.auth.repository import InMemoryUserStore, UserRepository, UserStore
from catalog_api.auth.service import CredentialService, Identity
from catalog_api.auth.tokens import TokenService
from catalog_api.catalog.query import QueryConfig
from catalog_api.catalog.repository import ProductRepository
from catalog_api.catalog.service import CatalogService
from catalog_api.catalog.store import InMemoryProductStore, ProductStore
from catalog_api.domain.exceptions import AuthenticationError
from catalog_api.infrastructure.blob_store import LocalBlobStore
from catalog_api.infrastructure.config import Settings
from catalog_api.infrastructure.database import Database


@dataclass
class Container:
    """Stores and services of one application instance."""

    settings: Settings
    database: Database | None
    products: ProductStore
    users: UserStore
    credentials: CredentialService
    blobs: LocalBlobStore
    query_config: QueryConfig


def build_container(settings: Settings) -> Container:
    """Create stores and services for the configured backend.

    No I/O happens here; the database is connected in the app lifespan.

    Args:
        settings: Application settings.

    Returns:
        Wired container.

    Raises:
        ValueError: If the store backend is unknown.
    """
    database: Database | None = None
    products: ProductStore
    users: UserStore

    if settings.store_backend == "sql":
        database = Database(settings.database_url, echo=settings.debug)
        products = ProductRepository(database)
        users = UserRepository(database)
    elif settings.store_backend == "memory":
        products = InMemoryProductStore()
        users = InMemoryUserStore()
    else:
        raise ValueError(f"Unknown store backend: {settings.store_backend}")

    credentials = CredentialService(
        users=users,
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        tokens=TokenService(settings.jwt_secret, settings.jwt_expiration_minutes),
        min_password_length=settings.min_password_length,
        timeout=settings.store_timeout_seconds,
    )

    return Container(
        settings=settings,
        database=database,
        products=products,
        users=users,
        credentials=credentials,
        blobs=LocalBlobStore(settings.upload_dir),
        query_config=QueryConfig(
            lenient_numeric_parsing=settings.lenient_numeric_parsing,
            default_limit=settings.default_page_size,
            max_limit=settings.max_page_size,
            max_page=settings.max_page,
        ),
    )


# ============================================================================
# Dependencies
# ============================================================================


bearer_scheme = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    """Get the application container."""
    return request.app.state.container


def get_catalog_service(
    request: Request,
    container: Annotated[Container, Depends(get_container)],
) -> CatalogService:
    """Get catalog service with request ID."""
    return CatalogService(
        store=container.products,
        blobs=container.blobs,
        query_config=container.query_config,
        timeout=container.settings.store_timeout_seconds,
        request_id=getattr(request.state, "request_id", None),
    )


def get_credential_service(
    container: Annotated[Container, Depends(get_container)],
) -> CredentialService:
    """Get credential service."""
    return container.credentials


async def get_current_identity(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> Identity:
    """Resolve the bearer token of the request.

    Raises:
        AuthenticationError: If the header is missing or the token is invalid.
    """
    if credentials is None:
        raise AuthenticationError(
            "Missing or malformed Authorization header. Use 'Bearer <token>'"
        )
    return await service.resolve_identity(credentials.credentials)


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
