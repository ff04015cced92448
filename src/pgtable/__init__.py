"""
pgtable: Declarative PostgreSQL table reconciliation.

pgtable converges a declared table (name + ordered column list) toward the
live PostgreSQL catalog by issuing the minimal DDL, then reads the catalog
back as the source of truth.
"""

__version__ = "0.1.0"
__author__ = "pgtable Contributors"

from .config import PgTableConfig
from .exceptions import (
    PgTableError,
    ConfigurationError,
    ValidationError,
    DatabaseError,
    CatalogError,
)
from .resource import ResourceData
from .schema.reconciler import TableReconciler

__all__ = [
    "__version__",
    "PgTableConfig",
    "PgTableError",
    "ConfigurationError",
    "ValidationError",
    "DatabaseError",
    "CatalogError",
    "ResourceData",
    "TableReconciler",
]
