"""
Database catalog introspection.

Reads per-column metadata (descriptions, types, constraints, foreign keys)
for every base table of a Postgres database.
"""

from table_schema_export.db_introspect.schema_introspector import (
    CATALOG_QUERY,
    ColumnDescriptor,
    SchemaIntrospector,
)

__all__ = [
    "CATALOG_QUERY",
    "ColumnDescriptor",
    "SchemaIntrospector",
]
