"""Entity package: category/book association."""

from .table import CategoryBookTable

__all__ = ["CategoryBookTable"]
