"""Bookshelf: a JSON-over-HTTP catalog of books and categories.

The service exposes four endpoints over a relational database:
list and create categories, list and create books.
"""

__version__ = "0.1.0"
