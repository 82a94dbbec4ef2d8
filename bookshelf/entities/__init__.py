"""Entities organised by business concept.

Each entity package holds:
- entity.py: domain model returned to callers and serialized to JSON
- table.py: database persistence model
- repository.py: data access layer

Importing this package registers every table with ``SQLModel.metadata``.
"""

from .book import Book, BookCreate, BookRepository, BookTable
from .category import Category, CategoryCreate, CategoryRepository, CategoryTable
from .category_book import CategoryBookTable

__all__ = [
    "Book",
    "BookCreate",
    "BookRepository",
    "BookTable",
    "Category",
    "CategoryCreate",
    "CategoryRepository",
    "CategoryTable",
    "CategoryBookTable",
]
