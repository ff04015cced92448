"""
Exception classes for pgtable.
"""

from typing import Any, Dict, Optional


class PgTableError(Exception):
    """Base exception for all pgtable errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            result += f" [{details_str}]"
        if self.cause:
            result += f" (caused by: {self.cause})"
        return result


class ConfigurationError(PgTableError):
    """Raised when there's an error in configuration."""

    pass


class ValidationError(PgTableError):
    """Raised when a declared value is rejected before any SQL is issued."""

    pass


class DatabaseError(PgTableError):
    """Raised when there's an error with database operations."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when there's an error establishing or maintaining database connections."""

    pass


class DatabaseConfigurationError(DatabaseError):
    """Raised when there's an error in database configuration."""

    pass


class CatalogError(DatabaseError):
    """
    Raised when a catalog query or DDL statement fails.

    Carries the table (and column, when one is involved) the failing
    operation addressed so the caller can report it.
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        column: Optional[str] = None,
        statement: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {}
        if table is not None:
            details["table"] = table
        if column is not None:
            details["column"] = column

        super().__init__(message, details, cause)
        self.table = table
        self.column = column
        self.statement = statement
