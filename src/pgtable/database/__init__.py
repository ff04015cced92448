"""
Database integration package for pgtable.

This package provides:
- Async PostgreSQL connection pooling
- Catalog introspection (table existence, ordered columns)
"""

from .connection import ConnectionConfig, ConnectionPool
from .introspection import CatalogReader, TYPE_ALIASES, use_type_alias

__all__ = [
    "ConnectionConfig",
    "ConnectionPool",
    "CatalogReader",
    "TYPE_ALIASES",
    "use_type_alias",
]
