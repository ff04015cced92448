"""
Catalog introspection for pgtable.

Reads table existence and ordered column descriptors from PostgreSQL's
information schema, normalizing catalog-internal type names to the
aliases users declare.
"""

import logging
from typing import Any, Dict, List, Optional

from .connection import ConnectionPool
from ..exceptions import CatalogError
from ..models import ColumnDescriptor, TableDescriptor


logger = logging.getLogger(__name__)


TABLE_EXISTS_QUERY = (
    "SELECT table_name FROM information_schema.tables "
    "WHERE table_schema='public' AND table_name = $1"
)

TABLE_DESCRIBE_QUERY = TABLE_EXISTS_QUERY

COLUMNS_DESCRIBE_QUERY = """
    SELECT
        column_name AS name,
        column_default AS default_expr,
        is_nullable,
        udt_name AS column_type,
        character_maximum_length AS max_length
    FROM information_schema.columns
    WHERE table_name = $1
    ORDER BY ordinal_position
"""

# udt_name -> the name users write in declarations
TYPE_ALIASES: Dict[str, str] = {
    "int2": "smallint",
    "int4": "int",
    "int8": "bigint",
    "bool": "boolean",
    "float4": "real",
    "float8": "double precision",
}


def use_type_alias(column_type: str) -> str:
    """Map a catalog type name to its user-facing alias, if any."""
    return TYPE_ALIASES.get(column_type, column_type)


def parse_is_nullable(value: Any) -> bool:
    """information_schema reports nullability as 'YES' / 'NO'."""
    return str(value).lower() == "yes"


class CatalogReader:
    """Read-only access to the catalog's table registry."""

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    async def table_exists(self, table: str) -> bool:
        """Check if a table exists; a missing row is not an error."""
        return await self.describe_table(table) is not None

    async def describe_table(self, table: str) -> Optional[TableDescriptor]:
        """
        Look up a table by name.

        Returns:
            TableDescriptor with the canonical name (no columns), or None
            when the catalog has no such table.
        """
        try:
            row = await self.pool.fetchrow(TABLE_DESCRIBE_QUERY, table)
        except Exception as e:
            logger.error(f"Error reading table {table}: {e}")
            raise CatalogError(
                f"Error reading TABLE ({table})",
                table=table,
                statement=TABLE_DESCRIBE_QUERY,
                cause=e,
            ) from e

        if row is None:
            return None

        return TableDescriptor(name=row["table_name"])

    async def describe_columns(self, table: str) -> List[ColumnDescriptor]:
        """Get all columns for a table, in ordinal position order."""
        try:
            rows = await self.pool.fetch(COLUMNS_DESCRIBE_QUERY, table)
        except Exception as e:
            logger.error(f"Error reading columns for {table}: {e}")
            raise CatalogError(
                f"Error reading columns TABLE ({table})",
                table=table,
                statement=COLUMNS_DESCRIBE_QUERY,
                cause=e,
            ) from e

        columns = []
        for row in rows:
            max_length = row["max_length"]
            columns.append(
                ColumnDescriptor(
                    name=row["name"],
                    type=use_type_alias(row["column_type"]),
                    max_length=int(max_length) if max_length is not None else None,
                    default=row["default_expr"],
                    nullable=parse_is_nullable(row["is_nullable"]),
                )
            )

        return columns
