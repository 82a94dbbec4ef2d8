"""Book endpoints, served at the root path."""

from fastapi import APIRouter, Depends

from bookshelf.api.http.deps import get_catalog_service
from bookshelf.core.services import CatalogService
from bookshelf.entities import Book, BookCreate

router = APIRouter(tags=["books"])


@router.get("/", response_model=list[Book])
def list_books(
    catalog: CatalogService = Depends(get_catalog_service),
) -> list[Book]:
    """List all books. Category data is not expanded."""
    return catalog.list_books()


@router.post("/", response_model=Book)
def create_book(
    body: BookCreate,
    catalog: CatalogService = Depends(get_catalog_service),
) -> Book:
    """Create a book and link it to its category.

    Answers 404 when ``category_id`` does not name an existing category.
    """
    return catalog.create_book(body)
