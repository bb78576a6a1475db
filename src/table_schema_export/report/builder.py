"""
Table Schema Workbook Builder

Turns the flat, ordered column list from the introspector into an xlsx
workbook with one formatted sheet per table.
"""
from __future__ import annotations
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from io import BytesIO
from typing import Iterable
from zipfile import ZIP_DEFLATED, ZipFile, ZipInfo

from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet
from openpyxl.xml.functions import tostring

from table_schema_export.config.export import REPORT_FILENAME
from table_schema_export.db_introspect.schema_introspector import ColumnDescriptor
from table_schema_export.errors import FormatConstraintError
from table_schema_export.report.layout import DEFAULT_LAYOUT, SheetLayout
from table_schema_export.report.styles import StylePalette

logger = logging.getLogger(__name__)

MAX_SHEET_TITLE_LENGTH = 31
INVALID_TITLE_CHARS = re.compile(r"[\\*?:/\[\]]")

# Pinned so that identical input gives identical bytes
FIXED_TIMESTAMP = datetime(2000, 1, 1)
FIXED_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)
CORE_PROPERTIES_PART = "docProps/core.xml"


@dataclass
class TableGroup:
    """Columns of one table, in ordinal order."""
    table_name: str
    table_description: str | None
    rows: list[ColumnDescriptor] = field(default_factory=list)


def group_tables(columns: Iterable[ColumnDescriptor]) -> list[TableGroup]:
    """Group descriptors by (table name, table description).

    Groups keep the order in which tables first appear and rows keep their
    input order; nothing is re-sorted.
    """
    groups: dict[tuple[str, str | None], TableGroup] = {}
    for column in columns:
        key = (column.table_name, column.table_description)
        group = groups.get(key)
        if group is None:
            group = groups[key] = TableGroup(column.table_name, column.table_description)
        if not column.is_placeholder:
            group.rows.append(column)
    return list(groups.values())


def sanitize_sheet_title(name: str, taken: set[str], strict: bool = False) -> str:
    """Make ``name`` a legal, unique worksheet title.

    Args:
        name: Table name
        taken: Lower-cased titles already used in the workbook
        strict: Raise instead of rewriting an illegal title

    Returns:
        The title to use

    Raises:
        FormatConstraintError: In strict mode, if the title must change
    """
    title = INVALID_TITLE_CHARS.sub("_", name)[:MAX_SHEET_TITLE_LENGTH].strip("'") or "Sheet"

    if title.lower() in taken:
        stem = title
        n = 1
        while title.lower() in taken:
            suffix = f"~{n}"
            title = stem[:MAX_SHEET_TITLE_LENGTH - len(suffix)].rstrip("'") + suffix
            n += 1

    if title != name:
        if strict:
            raise FormatConstraintError(name, f"not a valid unique sheet title (would become {title!r})")
        logger.warning(f"Sheet title {name!r} renamed to {title!r}")

    taken.add(title.lower())
    return title


class ReportBuilder:
    """Builds the table schema workbook."""

    def __init__(
        self,
        palette: StylePalette | None = None,
        layout: SheetLayout = DEFAULT_LAYOUT,
        filename: str = REPORT_FILENAME,
        strict_sheet_names: bool = False
    ):
        self.palette = palette or StylePalette()
        self.layout = layout
        self.filename = filename
        self.strict_sheet_names = strict_sheet_names

    def build_document(self, columns: Iterable[ColumnDescriptor]) -> tuple[bytes, str]:
        """Build the workbook and serialize it.

        Args:
            columns: Descriptors ordered by table name, then ordinal position

        Returns:
            (xlsx bytes, suggested file name). The bytes are empty when there
            are no tables, since a workbook needs at least one sheet.

        Raises:
            FormatConstraintError: If strict sheet names are on and a table
                name is not a valid sheet title
        """
        groups = group_tables(columns)
        if not groups:
            logger.warning("No tables to export")
            return b"", self.filename

        workbook = self.build_workbook(groups)
        return self.serialize(workbook), self.filename

    def build_workbook(self, groups: list[TableGroup]) -> Workbook:
        workbook = Workbook()
        workbook.remove(workbook.active)
        self.palette.register(workbook)

        taken: set[str] = set()
        for group in groups:
            title = sanitize_sheet_title(group.table_name, taken, self.strict_sheet_names)
            sheet = workbook.create_sheet(title=title)
            self._write_sheet(sheet, group)
            logger.debug(f"Sheet {title!r}: {len(group.rows)} columns")

        return workbook

    def _write_sheet(self, sheet: Worksheet, group: TableGroup) -> None:
        layout = self.layout

        # Merge before styling: merge_cells replaces the covered cells
        for row in (layout.label_row, layout.value_row):
            for band in layout.title_bands:
                sheet.merge_cells(layout.band_range(band, row))

        for band in layout.title_bands:
            self._write_band(sheet, layout.label_row, band.first_offset, band.last_offset, band.label, band.style)
            value = getattr(group, band.field)
            self._write_band(sheet, layout.value_row, band.first_offset, band.last_offset, value, band.style)

        for column in layout.columns:
            self._write_cell(sheet, layout.header_row, column.offset, column.label, column.style)
            sheet.column_dimensions[layout.column_letter(column.offset)].width = column.width

        for rank, descriptor in enumerate(group.rows):
            row = layout.data_row(rank)
            for column in layout.columns:
                value = getattr(descriptor, column.field)
                if value is None:
                    value = 0 if column.numeric else ""
                self._write_cell(sheet, row, column.offset, value, column.style)

    def _write_band(self, sheet, row, first_offset, last_offset, value, style) -> None:
        """Write ``value`` to the first cell of a merged band and style all of it."""
        self._write_cell(sheet, row, first_offset, value, style)
        for offset in range(first_offset + 1, last_offset + 1):
            self._write_cell(sheet, row, offset, None, style)

    def _write_cell(self, sheet, row, offset, value, style) -> None:
        cell = sheet.cell(row=row, column=self.layout.column_index(offset))
        if value is not None:
            cell.value = value
        cell.style = self.palette.name_of(style)

    def serialize(self, workbook: Workbook) -> bytes:
        """Save ``workbook`` to bytes with every timestamp pinned."""
        buffer = BytesIO()
        workbook.save(buffer)

        # save() stamps the modification time, so the core properties are
        # rewritten after the fact along with the zip entry times.
        workbook.properties.created = FIXED_TIMESTAMP
        workbook.properties.modified = FIXED_TIMESTAMP
        core_properties = tostring(workbook.properties.to_tree())

        output = BytesIO()
        with ZipFile(BytesIO(buffer.getvalue())) as source, ZipFile(output, "w", ZIP_DEFLATED) as target:
            for entry in source.infolist():
                data = source.read(entry.filename)
                if entry.filename == CORE_PROPERTIES_PART:
                    data = core_properties
                info = ZipInfo(entry.filename, date_time=FIXED_ZIP_DATE_TIME)
                target.writestr(info, data, compress_type=ZIP_DEFLATED)

        return output.getvalue()
