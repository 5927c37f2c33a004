"""Category Routes — public reads, admin-only writes."""

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_catalog_service, get_current_user
from app.api.serializers import category_out
from app.models.user import User
from app.schemas.catalog import CategoryCreate, CategoryUpdate
from app.schemas.envelope import envelope, list_envelope
from app.services.catalog import CatalogService

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


@router.get("")
async def list_categories(catalog: CatalogService = Depends(get_catalog_service)):
    categories = await catalog.list_categories()
    return list_envelope([category_out(c) for c in categories])


@router.get("/{category_id}")
async def get_category(category_id: str, catalog: CatalogService = Depends(get_catalog_service)):
    category = await catalog.get_category(category_id)
    return envelope(data=category_out(category))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate,
    current_user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    category = await catalog.create_category(
        current_user, body.name, body.description,
    )
    return envelope(data=category_out(category))


@router.put("/{category_id}")
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    current_user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    category = await catalog.update_category(
        current_user, category_id, body.name, body.description,
    )
    return envelope(data=category_out(category))


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    current_user: User = Depends(get_current_user),
    catalog: CatalogService = Depends(get_catalog_service),
):
    await catalog.delete_category(current_user, category_id)
    return envelope(message="Category deleted successfully")
