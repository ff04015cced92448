"""
Tests for pgtable.schema.operations module.
"""

import pytest

from pgtable.exceptions import CatalogError
from pgtable.models import ColumnDescriptor
from pgtable.schema.ddl import render_add_column, render_create_table, render_rename_table
from pgtable.schema.operations import SchemaOperations


class TestSchemaOperations:
    """Test SchemaOperations class."""

    @pytest.fixture
    def operations(self, mock_pool):
        return SchemaOperations(mock_pool)

    @pytest.mark.asyncio
    async def test_execute_success(self, operations, mock_pool):
        mock_pool.execute.return_value = "CREATE TABLE"
        change = render_create_table("users")

        result = await operations.execute(change)

        assert result is change
        assert change.executed is True
        assert change.error is None
        assert change.execution_time_ms is not None
        mock_pool.execute.assert_called_once_with('CREATE TABLE "users" ()')

    @pytest.mark.asyncio
    async def test_execute_failure_wraps_with_context(self, operations, mock_pool):
        mock_pool.execute.side_effect = Exception('column "email" already exists')
        change = render_add_column("users", ColumnDescriptor("email", "text"))

        with pytest.raises(CatalogError) as exc_info:
            await operations.execute(change)

        error = exc_info.value
        assert error.table == "users"
        assert error.column == "email"
        assert error.statement == change.sql
        assert "Error adding column email to table users" in str(error)
        assert "already exists" in str(error)
        assert change.executed is False
        assert change.error == 'column "email" already exists'

    @pytest.mark.asyncio
    async def test_rename_failure_has_no_column(self, operations, mock_pool):
        mock_pool.execute.side_effect = Exception("permission denied")

        with pytest.raises(CatalogError) as exc_info:
            await operations.execute(render_rename_table("users", "accounts"))

        assert exc_info.value.column is None
        assert "Error updating table NAME (users)" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_create_failure_message(self, operations, mock_pool):
        mock_pool.execute.side_effect = Exception('relation "users" already exists')

        with pytest.raises(CatalogError, match="Error creating table users"):
            await operations.execute(render_create_table("users"))

    @pytest.mark.asyncio
    async def test_dry_run_executes_nothing(self, mock_pool):
        operations = SchemaOperations(mock_pool, dry_run=True)
        change = render_create_table("users")

        await operations.execute(change)

        assert change.executed is False
        mock_pool.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_execute_all_runs_in_order(self, operations, mock_pool):
        changes = [
            render_add_column("t", ColumnDescriptor("a", "int")),
            render_add_column("t", ColumnDescriptor("b", "int")),
        ]

        await operations.execute_all(changes)

        executed = [call.args[0] for call in mock_pool.execute.call_args_list]
        assert executed == [c.sql for c in changes]

    @pytest.mark.asyncio
    async def test_execute_all_stops_at_first_failure(self, operations, mock_pool):
        mock_pool.execute.side_effect = [None, Exception("boom"), None]
        changes = [
            render_add_column("t", ColumnDescriptor(name, "int"))
            for name in ("a", "b", "c")
        ]

        with pytest.raises(CatalogError):
            await operations.execute_all(changes)

        assert mock_pool.execute.call_count == 2
        assert [c.executed for c in changes] == [True, False, False]
        assert changes[2].error is None
