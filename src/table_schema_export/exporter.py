"""Runs one export: catalog query, workbook build, file write."""
from __future__ import annotations
import logging
from dataclasses import dataclass
from pathlib import Path

from table_schema_export.config.export import ExportConfig
from table_schema_export.db_introspect.schema_introspector import ColumnDescriptor, SchemaIntrospector
from table_schema_export.errors import DataAccessError, StorageWriteError
from table_schema_export.report.builder import ReportBuilder, group_tables

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Outcome of an export run."""
    path: Path
    table_count: int
    column_count: int
    size_bytes: int
    degraded: bool  # catalog query failed, an empty file was written


def write_document(path: Path, data: bytes) -> None:
    """Write the document bytes, replacing any existing file.

    Raises:
        StorageWriteError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as e:
        raise StorageWriteError(path, str(e)) from e


async def export_table_schemas(
    config: ExportConfig,
    introspector: SchemaIntrospector | None = None,
    builder: ReportBuilder | None = None
) -> ExportResult:
    """
    Export the table schemas of the configured database to an xlsx file.

    Args:
        config: Export configuration
        introspector: Catalog reader (default: built from ``config.database``)
        builder: Workbook builder (default: built from ``config.report``)

    Returns:
        ExportResult describing the written file

    Raises:
        DataAccessError: If the catalog query fails and
            ``report.write_partial_on_failure`` is off
        FormatConstraintError: If strict sheet names are on and a table name
            is not a valid sheet title
        StorageWriteError: If the file cannot be written
    """
    if introspector is None:
        introspector = SchemaIntrospector(
            dsn=config.database.dsn,
            schemas=config.database.schemas,
            disable_nestloop=config.database.disable_nestloop
        )
    if builder is None:
        builder = ReportBuilder(
            filename=config.report.filename,
            strict_sheet_names=config.report.strict_sheet_names
        )

    degraded = False
    columns: list[ColumnDescriptor] = []
    try:
        columns = await introspector.fetch_columns()
    except DataAccessError:
        logger.error("Reading catalog metadata failed", exc_info=True)
        if not config.report.write_partial_on_failure:
            raise
        degraded = True

    data, filename = builder.build_document(columns)
    table_count = len(group_tables(columns))
    column_count = sum(1 for c in columns if not c.is_placeholder)
    logger.info(f"Built workbook: {table_count} tables, {column_count} columns")

    path = config.output_path.with_name(filename)
    write_document(path, data)
    logger.info(f"Wrote {len(data)} bytes to {path}")

    return ExportResult(
        path=path,
        table_count=table_count,
        column_count=column_count,
        size_bytes=len(data),
        degraded=degraded
    )
