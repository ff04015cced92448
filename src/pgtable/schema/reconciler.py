"""
Table reconciliation core logic for pgtable.

Implements the lifecycle verbs of the declarative table resource: create,
read, update, delete, exists and import. Mutating verbs hold the catalog
lock exclusively for the whole operation (DDL plus read-back); reads share
it.
"""

import logging
from typing import List, Optional

from ..database.connection import ConnectionPool
from ..database.introspection import CatalogReader
from ..exceptions import ValidationError
from ..models import (
    COLUMN_ATTR,
    TABLE_NAME_ATTR,
    columns_from_attributes,
    columns_to_attributes,
)
from ..resource import ResourceData
from .ddl import SchemaChange, render_add_column, render_create_table, render_rename_table
from .differ import diff_columns
from .locking import CatalogLock
from .operations import SchemaOperations


logger = logging.getLogger(__name__)


class TableReconciler:
    """
    Core reconciliation engine for a single declared table resource.

    Coordinates:
    - Catalog introspection through CatalogReader
    - Positional, append-only column diffing
    - DDL rendering and in-order execution
    - Read-back of the observed state after every mutation

    The table identifier is the table name itself and changes on rename.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        lock: Optional[CatalogLock] = None,
    ):
        self.pool = pool
        self.lock = lock or CatalogLock()

        self.reader = CatalogReader(pool)
        self.operations = SchemaOperations(pool)

    async def create(self, data: ResourceData) -> ResourceData:
        """Create the table empty, then converge columns as an update would."""
        async with self.lock.exclusive():
            table_name = data.get(TABLE_NAME_ATTR)
            if not table_name:
                raise ValidationError("Error creating table with an empty name")

            await self.operations.execute(render_create_table(table_name))
            data.set_id(table_name)

            return await self._update(data)

    async def read(self, data: ResourceData) -> ResourceData:
        """Refresh ``data`` from the catalog; clears the id if the table is gone."""
        async with self.lock.shared():
            return await self._read(data)

    async def update(self, data: ResourceData) -> ResourceData:
        async with self.lock.exclusive():
            return await self._update(data)

    async def delete(self, data: ResourceData) -> ResourceData:
        """
        Forget the table.

        Only the local identifier is cleared. The catalog table is left in
        place and no DROP TABLE is issued.
        """
        async with self.lock.exclusive():
            logger.info(f"Releasing table {data.id}; catalog table is left in place")
            data.set_id("")
            return data

    async def exists(self, data: ResourceData) -> bool:
        async with self.lock.shared():
            logger.debug(f"table exists: `{data.id}`")
            return await self.reader.table_exists(data.id)

    async def import_table(self, table_id: str) -> ResourceData:
        """Import is a plain read under the supplied identifier."""
        return await self.read(ResourceData.for_import(table_id))

    async def plan(self, data: ResourceData) -> List[SchemaChange]:
        """
        Render the DDL an update (or create, for new resources) would issue.

        Nothing is executed; name validation happens as it would on apply.
        """
        async with self.lock.shared():
            changes = []
            table_id = data.id

            if data.is_new_resource():
                table_id = data.get(TABLE_NAME_ATTR)
                if not table_id:
                    raise ValidationError("Error creating table with an empty name")
                changes.append(render_create_table(table_id))
            elif data.has_change(TABLE_NAME_ATTR):
                old_name, new_name = data.get_change(TABLE_NAME_ATTR)
                self._validate_new_name(new_name)
                changes.append(render_rename_table(old_name, new_name))
                table_id = new_name

            changes.extend(self._column_changes(data, table_id))
            return await SchemaOperations(self.pool, dry_run=True).execute_all(changes)

    async def _read(self, data: ResourceData) -> ResourceData:
        table_id = data.id
        logger.debug(f"table read: `{table_id}`")

        table = await self.reader.describe_table(table_id)
        if table is None:
            logger.warning(f"PostgreSQL TABLE ({table_id}) not found")
            data.set_id("")
            return data

        data.set(TABLE_NAME_ATTR, table.name)
        data.set_id(table.name)

        columns = await self.reader.describe_columns(table.name)
        data.set(COLUMN_ATTR, columns_to_attributes(columns))

        return data

    async def _update(self, data: ResourceData) -> ResourceData:
        if not data.is_new_resource():
            await self._rename_table_if_needed(data)

        await self._add_columns_if_needed(data)

        return await self._read(data)

    async def _rename_table_if_needed(self, data: ResourceData) -> None:
        if not data.has_change(TABLE_NAME_ATTR):
            return

        old_name, new_name = data.get_change(TABLE_NAME_ATTR)
        self._validate_new_name(new_name)

        await self.operations.execute(render_rename_table(old_name, new_name))
        data.set_id(new_name)

    async def _add_columns_if_needed(self, data: ResourceData) -> None:
        # data.id is the current name, already updated by a rename above
        for change in self._column_changes(data, data.id):
            await self.operations.execute(change)

    def _column_changes(self, data: ResourceData, table: str) -> List[SchemaChange]:
        if not data.has_change(COLUMN_ATTR):
            return []

        old_raw, new_raw = data.get_change(COLUMN_ATTR)
        operations = diff_columns(
            columns_from_attributes(old_raw), columns_from_attributes(new_raw)
        )
        logger.debug(f"column diff for {table}: {len(operations)} addition(s)")

        return [render_add_column(table, op.column) for op in operations]

    @staticmethod
    def _validate_new_name(new_name: str) -> None:
        if not new_name:
            raise ValidationError("Error setting table name to an empty string")
