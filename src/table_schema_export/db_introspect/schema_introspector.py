"""Column-level catalog extraction from Postgres.

Reads information_schema plus the comment functions to describe every column
of every base table:
- Table and column identity with their COMMENT ON descriptions
- Ordinal position, declared type, length, nullability and default
- The key constraint the column takes part in (one per column)
- The referenced table/column for foreign keys
"""
from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping

import asyncpg

from table_schema_export.errors import DataAccessError

logger = logging.getLogger(__name__)

# asyncio.TimeoutError is not an OSError before Python 3.11
DATABASE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)

# A column listed under several key constraints keeps only the first of these.
# key_column_usage has no rows for CHECK constraints.
CATALOG_QUERY = """
    SELECT
        table_name,
        table_description,
        column_name,
        column_description,
        ordinal_position,
        data_type,
        character_maximum_length,
        is_nullable,
        default_value,
        constraint_type,
        foreign_table_name,
        foreign_column_name
    FROM (
        SELECT DISTINCT ON (t.table_schema, t.table_name, c.ordinal_position)
            t.table_schema,
            t.table_name,
            obj_description((quote_ident(t.table_schema) || '.' || quote_ident(t.table_name))::regclass, 'pg_class') AS table_description,
            c.column_name,
            col_description((quote_ident(t.table_schema) || '.' || quote_ident(t.table_name))::regclass, c.ordinal_position) AS column_description,
            c.ordinal_position,
            c.data_type,
            c.character_maximum_length,
            c.is_nullable,
            c.column_default AS default_value,
            n.constraint_type,
            k2.table_name AS foreign_table_name,
            k2.column_name AS foreign_column_name
        FROM information_schema.tables t
        LEFT JOIN information_schema.columns c
            ON c.table_catalog = t.table_catalog
            AND c.table_schema = t.table_schema
            AND c.table_name = t.table_name
        LEFT JOIN (
            information_schema.key_column_usage k
            JOIN information_schema.table_constraints n
                ON n.constraint_catalog = k.constraint_catalog
                AND n.constraint_schema = k.constraint_schema
                AND n.constraint_name = k.constraint_name
                AND n.table_name = k.table_name
            LEFT JOIN information_schema.referential_constraints r
                ON r.constraint_catalog = k.constraint_catalog
                AND r.constraint_schema = k.constraint_schema
                AND r.constraint_name = k.constraint_name
        )
            ON c.table_catalog = k.table_catalog
            AND c.table_schema = k.table_schema
            AND c.table_name = k.table_name
            AND c.column_name = k.column_name
        LEFT JOIN information_schema.key_column_usage k2
            ON k.position_in_unique_constraint = k2.ordinal_position
            AND r.unique_constraint_catalog = k2.constraint_catalog
            AND r.unique_constraint_schema = k2.constraint_schema
            AND r.unique_constraint_name = k2.constraint_name
        WHERE t.table_type = 'BASE TABLE'
        AND t.table_schema NOT IN ('information_schema', 'pg_catalog')
        AND ($1::text[] IS NULL OR t.table_schema = ANY($1::text[]))
        ORDER BY
            t.table_schema,
            t.table_name,
            c.ordinal_position,
            CASE n.constraint_type
                WHEN 'PRIMARY KEY' THEN 0
                WHEN 'FOREIGN KEY' THEN 1
                WHEN 'UNIQUE' THEN 2
                ELSE 3
            END
    ) columns
    ORDER BY table_name, ordinal_position
"""


@dataclass(frozen=True)
class ColumnDescriptor:
    """One table column as described by the catalog."""
    table_name: str
    table_description: str | None = None
    column_name: str | None = None  # None for the single row of a table without columns
    column_description: str | None = None
    ordinal_position: int | None = None
    data_type: str | None = None
    character_maximum_length: int | None = None
    is_nullable: str | None = None
    default_value: str | None = None
    constraint_type: str | None = None  # "PRIMARY KEY", "FOREIGN KEY", "UNIQUE", "CHECK"
    foreign_table_name: str | None = None
    foreign_column_name: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ColumnDescriptor:
        return cls(
            table_name=record["table_name"],
            table_description=record["table_description"],
            column_name=record["column_name"],
            column_description=record["column_description"],
            ordinal_position=record["ordinal_position"],
            data_type=record["data_type"],
            character_maximum_length=record["character_maximum_length"],
            is_nullable=record["is_nullable"],
            default_value=record["default_value"],
            constraint_type=record["constraint_type"],
            foreign_table_name=record["foreign_table_name"],
            foreign_column_name=record["foreign_column_name"],
        )

    @property
    def is_placeholder(self) -> bool:
        return self.column_name is None

    @property
    def is_foreign_key(self) -> bool:
        return self.constraint_type == "FOREIGN KEY"


class SchemaIntrospector:
    """Reads column descriptors for every base table of one database."""

    def __init__(
        self,
        dsn: str,
        schemas: list[str] | None = None,
        disable_nestloop: bool = True
    ):
        self.dsn = dsn
        self.schemas = schemas
        self.disable_nestloop = disable_nestloop

    async def fetch_columns(self) -> list[ColumnDescriptor]:
        """Run the catalog query.

        Returns:
            Descriptors ordered by table name, then ordinal position

        Raises:
            DataAccessError: If the connection or the query fails
        """
        logger.info("Reading catalog metadata")
        try:
            conn = await asyncpg.connect(dsn=self.dsn)
        except DATABASE_ERRORS as e:
            raise DataAccessError(f"Could not connect to database: {e}") from e

        try:
            if self.disable_nestloop:
                logger.debug("Disabling nested loop joins for catalog query")
                await conn.execute("SET enable_nestloop = off")
            rows = await conn.fetch(CATALOG_QUERY, self.schemas)
        except DATABASE_ERRORS as e:
            raise DataAccessError(f"Catalog query failed: {e}") from e
        finally:
            await conn.close()

        columns = [ColumnDescriptor.from_record(r) for r in rows]
        logger.info(f"Read {len(columns)} column rows")
        return columns
