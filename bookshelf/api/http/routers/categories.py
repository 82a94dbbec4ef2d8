"""Category endpoints."""

from fastapi import APIRouter, Depends

from bookshelf.api.http.deps import get_catalog_service
from bookshelf.core.services import CatalogService
from bookshelf.entities import Category, CategoryCreate

router = APIRouter(tags=["categories"])


@router.get("/categories", response_model=list[Category])
def list_categories(
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[Category]:
    """List all categories."""
    return catalog.list_categories()


@router.post("/categories", response_model=Category)
def create_category(
    body: CategoryCreate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> Category:
    """Create a category with a unique, non-empty name."""
    return catalog.create_category(body.name)
