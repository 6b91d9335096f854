"""Product API endpoints.

Listing and lookup are public; creating, updating and deleting need a
bearer token. Create and update take multipart form data with an optional
``image`` file.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status

from catalog_api.api.dependencies import (
    Container,
    CurrentIdentity,
    get_catalog_service,
    get_container,
)
from catalog_api.api.schemas import (
    ErrorResponse,
    MessageResponse,
    PaginationSchema,
    ProductListResponse,
    ProductResponse,
)
from catalog_api.catalog.service import CatalogService, ProductFields
from catalog_api.domain.entities import Product
from catalog_api.infrastructure.blob_store import ImageUpload

router = APIRouter(prefix="/api/products", tags=["Products"])

Catalog = Annotated[CatalogService, Depends(get_catalog_service)]
AppContainer = Annotated[Container, Depends(get_container)]

OptionalForm = Annotated[str | None, Form()]
OptionalImage = Annotated[UploadFile | None, File()]


# ============================================================================
# Converters
# ============================================================================


async def products_to_response(
    products: list[Product],
    container: Container,
) -> list[ProductResponse]:
    """Convert products to responses with their owner summaries."""
    owners = await container.credentials.get_users([p.owner_id for p in products])
    return [ProductResponse.from_entity(p, owners.get(p.owner_id)) for p in products]


def form_fields(**values: str | None) -> ProductFields:
    """Build product fields from form values; empty values are not provided."""
    return ProductFields(**{k: v for k, v in values.items() if v not in (None, "")})


async def read_image(image: UploadFile | None, container: Container) -> ImageUpload | None:
    """Read and validate an uploaded image."""
    if image is None or not image.filename:
        return None
    upload = ImageUpload(
        filename=image.filename,
        content_type=image.content_type,
        content=await image.read(),
    )
    upload.validate(container.settings.max_upload_bytes)
    return upload


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    summary="List products",
    description="Filter, sort and paginate products. Malformed numbers are ignored.",
)
async def list_products(
    service: Catalog,
    container: AppContainer,
    category: Annotated[str | None, Query()] = None,
    min_price: Annotated[str | None, Query(alias="minPrice")] = None,
    max_price: Annotated[str | None, Query(alias="maxPrice")] = None,
    min_rating: Annotated[str | None, Query(alias="minRating")] = None,
    search: Annotated[str | None, Query()] = None,
    user_id: Annotated[str | None, Query(alias="userId")] = None,
    sort_by: Annotated[str | None, Query(alias="sortBy")] = None,
    sort_order: Annotated[str | None, Query(alias="sortOrder")] = None,
    page: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ProductListResponse:
    """List products.

    Numeric options arrive as strings so that the catalog's parsing policy,
    not request validation, decides what a malformed number means.
    """
    params = {
        "category": category,
        "minPrice": min_price,
        "maxPrice": max_price,
        "minRating": min_rating,
        "search": search,
        "userId": user_id,
        "sortBy": sort_by,
        "sortOrder": sort_order,
        "page": page,
        "limit": limit,
    }
    result = await service.list_products({k: v for k, v in params.items() if v is not None})

    return ProductListResponse(
        products=await products_to_response(result.items, container),
        pagination=PaginationSchema(**result.pagination()),
    )


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(
    product_id: str,
    service: Catalog,
    container: AppContainer,
) -> ProductResponse:
    """Get a product by ID."""
    product = await service.get_product(product_id)
    return (await products_to_response([product], container))[0]


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
    summary="Create product",
)
async def create_product(
    identity: CurrentIdentity,
    service: Catalog,
    container: AppContainer,
    name: OptionalForm = None,
    description: OptionalForm = None,
    category: OptionalForm = None,
    price: OptionalForm = None,
    rating: OptionalForm = None,
    image: OptionalImage = None,
) -> ProductResponse:
    """Create a product owned by the caller."""
    product = await service.create_product(
        identity.id,
        form_fields(
            name=name,
            description=description,
            category=category,
            price=price,
            rating=rating,
        ),
        image=await read_image(image, container),
    )
    return (await products_to_response([product], container))[0]


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Update product",
    description="Change the provided fields only. Owner or admin.",
)
async def update_product(
    product_id: str,
    identity: CurrentIdentity,
    service: Catalog,
    container: AppContainer,
    name: OptionalForm = None,
    description: OptionalForm = None,
    category: OptionalForm = None,
    price: OptionalForm = None,
    rating: OptionalForm = None,
    image: OptionalImage = None,
) -> ProductResponse:
    """Update a product."""
    product = await service.update_product(
        product_id,
        identity.id,
        identity.role,
        form_fields(
            name=name,
            description=description,
            category=category,
            price=price,
            rating=rating,
        ),
        image=await read_image(image, container),
    )
    return (await products_to_response([product], container))[0]


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Delete product",
    description="Owner or admin.",
)
async def delete_product(
    product_id: str,
    identity: CurrentIdentity,
    service: Catalog,
) -> MessageResponse:
    """Delete a product."""
    await service.delete_product(product_id, identity.id, identity.role)
    return MessageResponse(message="Product deleted successfully")
