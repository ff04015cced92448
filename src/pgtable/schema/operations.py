"""
Schema operation executor for pgtable.

Runs rendered DDL one statement at a time, in order. There is no batching
and no rollback: a failure stops execution and statements that already ran
stay applied.
"""

import logging
import time
from typing import List

from ..database.connection import ConnectionPool
from ..exceptions import CatalogError
from .ddl import ChangeType, SchemaChange


logger = logging.getLogger(__name__)


_ERROR_MESSAGES = {
    ChangeType.CREATE_TABLE: "Error creating table {table}",
    ChangeType.RENAME_TABLE: "Error updating table NAME ({table})",
    ChangeType.ADD_COLUMN: "Error adding column {column} to table {table}",
}


class SchemaOperations:
    """Executes SchemaChange records against the catalog."""

    def __init__(self, pool: ConnectionPool, dry_run: bool = False):
        self.pool = pool
        self.dry_run = dry_run

    async def execute(self, change: SchemaChange) -> SchemaChange:
        """
        Execute a single schema change.

        Raises:
            CatalogError: The statement failed; ``change.error`` is set.
        """
        logger.debug(f"{change.change_type.value}: `{change.sql}`")

        if self.dry_run:
            logger.info(f"DRY RUN: Would execute {change.change_id}")
            change.executed = False
            return change

        start_time = time.time()
        try:
            await self.pool.execute(change.sql)
        except Exception as e:
            change.executed = False
            change.error = str(e)
            logger.error(f"Failed to execute {change.change_id}: {e}")

            column = change.target_object if change.change_type == ChangeType.ADD_COLUMN else None
            message = _ERROR_MESSAGES[change.change_type].format(
                table=change.table, column=column
            )
            raise CatalogError(
                message,
                table=change.table,
                column=column,
                statement=change.sql,
                cause=e,
            ) from e

        change.executed = True
        change.execution_time_ms = (time.time() - start_time) * 1000
        logger.info(f"Successfully executed {change.change_id}")
        return change

    async def execute_all(self, changes: List[SchemaChange]) -> List[SchemaChange]:
        """Execute changes in order, stopping at the first failure."""
        for change in changes:
            await self.execute(change)
        return changes
