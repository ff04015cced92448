"""
Schema management package for pgtable.

This package provides:
- Table lifecycle reconciliation (create, read, update, delete, exists, import)
- Positional, append-only column diffing
- DDL rendering with consistent identifier quoting
- In-order DDL execution
- The reader/writer lock guarding the shared catalog
"""

from .reconciler import TableReconciler
from .differ import AddColumn, diff_columns
from .ddl import ChangeType, SchemaChange, quote_identifier
from .operations import SchemaOperations
from .locking import CatalogLock

__all__ = [
    "TableReconciler",
    "AddColumn",
    "diff_columns",
    "ChangeType",
    "SchemaChange",
    "quote_identifier",
    "SchemaOperations",
    "CatalogLock",
]
