"""
DDL rendering for pgtable.

Turns table and column operations into SQL text. Identifiers cannot be
bound as query parameters, so every statement path quotes table and
column names through quote_identifier().
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..models import ColumnDescriptor


class ChangeType(str, Enum):
    """Types of schema changes."""

    CREATE_TABLE = "create_table"
    RENAME_TABLE = "rename_table"
    ADD_COLUMN = "add_column"


@dataclass
class SchemaChange:
    """A rendered DDL statement and its execution outcome."""

    change_type: ChangeType
    table: str
    description: str
    sql: str
    target_object: Optional[str] = None  # column name or new table name

    # Execution results
    executed: bool = False
    execution_time_ms: Optional[float] = None
    error: Optional[str] = None

    @property
    def change_id(self) -> str:
        """Get identifier for this change, used in logs."""
        target = self.target_object or self.table
        return f"{self.change_type.value}_{self.table}_{target}"


def quote_identifier(name: str) -> str:
    """
    Quote an identifier for PostgreSQL.

    Embedded double quotes are doubled. Anything from the first NUL byte on
    is dropped since the server cannot accept it.
    """
    end = name.find("\x00")
    if end > -1:
        name = name[:end]
    return '"' + name.replace('"', '""') + '"'


def build_max_length_clause(column: ColumnDescriptor) -> str:
    if column.max_length:
        return f"({column.max_length})"
    return ""


def build_default_clause(column: ColumnDescriptor) -> str:
    if column.default:
        return f" DEFAULT {column.default}"
    return ""


def build_not_null_clause(column: ColumnDescriptor) -> str:
    if not column.nullable:
        return " NOT NULL"
    return ""


def render_create_table(table: str) -> SchemaChange:
    """Tables are always created without columns; columns are appended after."""
    return SchemaChange(
        change_type=ChangeType.CREATE_TABLE,
        table=table,
        description=f"Create table {table}",
        sql=f"CREATE TABLE {quote_identifier(table)} ()",
        target_object=table,
    )


def render_rename_table(old_name: str, new_name: str) -> SchemaChange:
    return SchemaChange(
        change_type=ChangeType.RENAME_TABLE,
        table=old_name,
        description=f"Rename table {old_name} to {new_name}",
        sql=f"ALTER TABLE {quote_identifier(old_name)} RENAME TO {quote_identifier(new_name)}",
        target_object=new_name,
    )


def render_add_column(table: str, column: ColumnDescriptor) -> SchemaChange:
    """
    Render ``ALTER TABLE ... ADD COLUMN``.

    The column type is emitted verbatim followed by an optional length,
    default expression and NOT NULL clause.
    """
    sql = (
        f"ALTER TABLE {quote_identifier(table)} "
        f"ADD COLUMN {quote_identifier(column.name)} {column.type}"
        f"{build_max_length_clause(column)}"
        f"{build_default_clause(column)}"
        f"{build_not_null_clause(column)}"
    )

    return SchemaChange(
        change_type=ChangeType.ADD_COLUMN,
        table=table,
        description=f"Add column {column.name}",
        sql=sql,
        target_object=column.name,
    )
