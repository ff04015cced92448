"""
Test suite for pgtable.

- Unit tests for the catalog reader, differ, DDL renderer, executor and lock
- Reconciler lifecycle tests against an in-memory catalog
- CLI tests through click's CliRunner
"""
