"""
Pytest configuration and shared fixtures for pgtable tests.

Provides an in-memory stand-in for the PostgreSQL catalog that understands
the statements pgtable issues, so lifecycle behaviour can be asserted
without a running server.
"""

import asyncio
import os
import re
import tempfile
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest
import yaml

from pgtable.database.connection import ConnectionPool
from pgtable.database.introspection import COLUMNS_DESCRIBE_QUERY, TABLE_DESCRIBE_QUERY
from pgtable.schema.locking import CatalogLock
from pgtable.schema.reconciler import TableReconciler


# ============================================================================
# In-memory catalog
# ============================================================================

_IDENT = r'"((?:[^"]|"")*)"'

_CREATE_RE = re.compile(rf"^CREATE TABLE {_IDENT} \(\)$")
_RENAME_RE = re.compile(rf"^ALTER TABLE {_IDENT} RENAME TO {_IDENT}$")
_ADD_COLUMN_RE = re.compile(
    rf"^ALTER TABLE {_IDENT} ADD COLUMN {_IDENT} "
    r"(?P<type>[A-Za-z0-9_ ]+?)"
    r"(?:\((?P<length>\d+)\))?"
    r"(?: DEFAULT (?P<default>.+?))?"
    r"(?P<not_null> NOT NULL)?$"
)

# declared type -> udt_name as PostgreSQL reports it
_UDT_NAMES = {
    "int": "int4",
    "integer": "int4",
    "serial": "int4",
    "bigint": "int8",
    "smallint": "int2",
    "boolean": "bool",
    "real": "float4",
    "double precision": "float8",
}


class FakeCatalogError(Exception):
    """Raised by FakeCatalog where PostgreSQL would report an error."""


def _unquote(name: str) -> str:
    return name.replace('""', '"')


class FakeCatalog:
    """
    Duck-typed ConnectionPool backed by a dict of tables.

    Every executed statement is appended to ``statements``; ``events``
    records the start and end of every call so tests can check that
    statements never interleave. Each call yields to the event loop once
    between start and end.
    """

    def __init__(self):
        self.tables: Dict[str, List[Dict[str, Any]]] = {}
        self.statements: List[str] = []
        self.events: List[tuple] = []
        self.fail_on: Optional[str] = None

    def add_table(self, name: str, columns: Optional[List[Dict[str, Any]]] = None) -> None:
        """Seed a table; columns use the keys name/udt_name/max_length/default/nullable."""
        self.tables[name] = [
            {
                "name": c["name"],
                "udt_name": c.get("udt_name", c.get("type", "text")),
                "max_length": c.get("max_length"),
                "default": c.get("default"),
                "nullable": c.get("nullable", False),
            }
            for c in columns or []
        ]

    def column_names(self, table: str) -> List[str]:
        return [c["name"] for c in self.tables[table]]

    async def _yield(self, kind: str, detail: str) -> None:
        self.events.append(("start", kind, detail))
        await asyncio.sleep(0)
        self.events.append(("end", kind, detail))

    async def fetchrow(self, query: str, *args):
        await self._yield("fetchrow", args[0])
        if query != TABLE_DESCRIBE_QUERY:
            raise FakeCatalogError(f"unexpected query: {query}")
        if self.fail_on and self.fail_on == query:
            raise FakeCatalogError("connection reset")
        if args[0] in self.tables:
            return {"table_name": args[0]}
        return None

    async def fetch(self, query: str, *args):
        await self._yield("fetch", args[0])
        if query != COLUMNS_DESCRIBE_QUERY:
            raise FakeCatalogError(f"unexpected query: {query}")
        if self.fail_on and self.fail_on == query:
            raise FakeCatalogError("connection reset")
        return [
            {
                "name": c["name"],
                "default_expr": c["default"],
                "is_nullable": "YES" if c["nullable"] else "NO",
                "column_type": c["udt_name"],
                "max_length": c["max_length"],
            }
            for c in self.tables.get(args[0], [])
        ]

    async def execute(self, query: str, *args) -> str:
        await self._yield("execute", query)
        if self.fail_on and self.fail_on in query:
            raise FakeCatalogError(f"statement rejected: {query}")
        self.statements.append(query)

        match = _CREATE_RE.match(query)
        if match:
            name = _unquote(match.group(1))
            if name in self.tables:
                raise FakeCatalogError(f'relation "{name}" already exists')
            self.tables[name] = []
            return "CREATE TABLE"

        match = _RENAME_RE.match(query)
        if match:
            old, new = _unquote(match.group(1)), _unquote(match.group(2))
            if old not in self.tables:
                raise FakeCatalogError(f'relation "{old}" does not exist')
            self.tables[new] = self.tables.pop(old)
            return "ALTER TABLE"

        match = _ADD_COLUMN_RE.match(query)
        if match:
            table, column = _unquote(match.group(1)), _unquote(match.group(2))
            if table not in self.tables:
                raise FakeCatalogError(f'relation "{table}" does not exist')
            if column in self.column_names(table):
                raise FakeCatalogError(f'column "{column}" already exists')
            declared_type = match.group("type")
            length = match.group("length")
            self.tables[table].append(
                {
                    "name": column,
                    "udt_name": _UDT_NAMES.get(declared_type, declared_type),
                    "max_length": int(length) if length else None,
                    "default": match.group("default"),
                    "nullable": match.group("not_null") is None,
                }
            )
            return "ALTER TABLE"

        raise FakeCatalogError(f"syntax error: {query}")


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def fake_catalog() -> FakeCatalog:
    """Empty in-memory catalog."""
    return FakeCatalog()


@pytest.fixture
def catalog_lock() -> CatalogLock:
    return CatalogLock()


@pytest.fixture
def reconciler(fake_catalog, catalog_lock) -> TableReconciler:
    """TableReconciler wired to the in-memory catalog."""
    return TableReconciler(fake_catalog, lock=catalog_lock)


@pytest.fixture
def mock_pool():
    """Mock connection pool for unit tests that stub single queries."""
    return MagicMock(spec=ConnectionPool)


@pytest.fixture
def sample_config_data() -> Dict[str, Any]:
    return {
        "database": {
            "host": "localhost",
            "port": 5432,
            "database": "app_test",
            "user": "tester",
            "password": "secret",
        },
        "tables": [
            {
                "name": "users",
                "columns": [
                    {"name": "id", "type": "int"},
                    {"name": "email", "type": "varchar", "max_length": 255},
                    {"name": "nickname", "type": "text", "is_null": True},
                ],
            },
            {
                "name": "orders",
                "rename_from": "purchases",
                "columns": [
                    {"name": "id", "type": "bigint"},
                    {"name": "placed_at", "type": "timestamptz", "default": "now()"},
                ],
            },
        ],
    }


@pytest.fixture
def temp_config_file(sample_config_data):
    """Temporary YAML configuration file."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(sample_config_data, f)
        path = f.name
    yield path
    os.unlink(path)
