"""Product Routes — public reads, vendor-or-admin create, owner-or-admin update/delete.

Invariants:
    - Reads resolve category and vendor references; write responses carry raw ids
    - Only fields present in the request body reach the service (exclude_unset)
"""

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_catalog_service, get_current_user
from app.api.serializers import product_list_out, product_out
from app.models.user import User
from app.schemas.catalog import ProductCreate, ProductUpdate
from app.schemas.envelope import envelope, list_envelope
from app.services.catalog import CatalogService

router = APIRouter(prefix="/api/v1/products", tags=["products"])


@router.get("")
async def list_products(
    category_id: str | None = Query(None, alias="categoryId"),
    vendor_id: str | None = Query(None, alias="vendorId"),
    catalog: CatalogService = Depends(get_catalog_service),
):
    view = await catalog.list_products(category_id, vendor_id)
    return list_envelope(product_list_out(view))


@router.get("/{product_id}")
async def get_product(product_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    view = await catalog.get_product(product_id)
    return envelope(data=product_out(view.products[0], view))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    current_user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    product = await catalog.create_product(
        current_user, body.model_dump(),
    )
    return envelope(
        data=product_out(product), message="Product created successfully",
    )


@router.put("/{product_id}")
async def update_product(
    product_id: str,
    body: ProductUpdate,
    current_user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    product = await catalog.update_product(
        current_user, product_id, body.model_dump(exclude_unset=True),
    )
    return envelope(
        data=product_out(product), message="Product updated successfully",
    )


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    current_user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_product(current_user, product_id)
    return envelope(message="Product deleted successfully")
