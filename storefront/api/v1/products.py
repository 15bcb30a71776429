"""
Product catalog routes.

Defines the catalog endpoints (mounted under /api/products). Reads are
public; create, update and delete require an admin bearer token.
"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, status

from storefront.api.dependencies import get_catalog_service, require_admin
from storefront.api.models import (
    ErrorResponse,
    MessageResponse,
    ProductCreate,
    ProductUpdate,
    ProductView,
)
from storefront.domain.catalog import CatalogService
from storefront.domain.exceptions import StorefrontError
from storefront.domain.ports import Account, Product

router = APIRouter(tags=["products"])

_ADMIN_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Not authenticated"},
    403: {"model": ErrorResponse, "description": "Admin role required"},
}


def _view(product: Product) -> ProductView:
    return ProductView(**asdict(product))


@router.get("", response_model=list[ProductView], summary="Search products")
def list_products(
    q: str = "",
    service: CatalogService = Depends(get_catalog_service),
) -> list[ProductView]:
    """Case-insensitive name search; without `q` every product is listed."""
    return [_view(product) for product in service.search(q)]


@router.get(
    "/{product_id}",
    response_model=ProductView,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}},
    summary="Get a product",
)
def get_product(
    product_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> ProductView:
    try:
        return _view(service.get(product_id))
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from None


@router.post(
    "",
    response_model=ProductView,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Invalid product"}, **_ADMIN_RESPONSES},
    summary="Create a product",
)
def create_product(
    request_data: ProductCreate,
    admin: Account = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> ProductView:
    try:
        product = service.create(Product(**request_data.model_dump()))
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from None
    return _view(product)


@router.put(
    "/{product_id}",
    response_model=ProductView,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid product fields"},
        404: {"model": ErrorResponse, "description": "Product not found"},
        **_ADMIN_RESPONSES,
    },
    summary="Update a product",
)
def update_product(
    product_id: str,
    request_data: ProductUpdate,
    admin: Account = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> ProductView:
    changes = {**request_data.model_dump(exclude_unset=True), **(request_data.model_extra or {})}
    try:
        product = service.update(product_id, changes)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from None
    return _view(product)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse, "description": "Product not found"}, **_ADMIN_RESPONSES},
    summary="Delete a product",
)
def delete_product(
    product_id: str,
    admin: Account = Depends(require_admin),
    service: CatalogService = Depends(get_catalog_service),
) -> MessageResponse:
    try:
        service.delete(product_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from None
    return MessageResponse(message="Product deleted")
