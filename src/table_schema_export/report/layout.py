"""Sheet layout of the table schema report.

The title block and the column grid are plain data so that labels, widths
and styles can be changed without touching the assembly code.
"""
from __future__ import annotations
from dataclasses import dataclass

from openpyxl.utils import get_column_letter

from table_schema_export.report.styles import StyleClass


@dataclass(frozen=True)
class TitleBand:
    """A merged label/value pair in the title block."""
    first_offset: int
    last_offset: int
    label: str
    field: str  # TableGroup attribute shown in the value row
    style: StyleClass = StyleClass.BORDERED_CENTERED


@dataclass(frozen=True)
class GridColumn:
    """One column of the per-table column grid."""
    offset: int
    label: str
    field: str  # ColumnDescriptor attribute
    numeric: bool = False
    width: float = 14.0
    style: StyleClass = StyleClass.BORDERED_CENTERED


@dataclass(frozen=True)
class SheetLayout:
    """Where everything goes on a table sheet.

    Offsets are relative to ``first_column`` (1-based, so 2 is column B).
    """
    first_column: int
    label_row: int
    value_row: int
    header_row: int
    title_bands: tuple[TitleBand, ...]
    columns: tuple[GridColumn, ...]

    @property
    def first_data_row(self) -> int:
        return self.header_row + 1

    @property
    def width(self) -> int:
        return len(self.columns)

    def column_index(self, offset: int) -> int:
        return self.first_column + offset

    def column_letter(self, offset: int) -> str:
        return get_column_letter(self.column_index(offset))

    def band_range(self, band: TitleBand, row: int) -> str:
        return f"{self.column_letter(band.first_offset)}{row}:{self.column_letter(band.last_offset)}{row}"

    def data_row(self, rank: int) -> int:
        """Sheet row of the column with the given 0-based rank."""
        return self.first_data_row + rank


DEFAULT_LAYOUT = SheetLayout(
    first_column=2,
    label_row=2,
    value_row=3,
    header_row=4,
    title_bands=(
        TitleBand(0, 3, "中文table名稱", "table_description"),
        TitleBand(4, 8, "table name", "table_name"),
    ),
    columns=(
        GridColumn(0, "項次", "ordinal_position", numeric=True, width=8),
        GridColumn(1, "欄位名稱", "column_name", width=24),
        GridColumn(2, "欄位中文名稱", "column_description", width=28),
        GridColumn(3, "型態", "data_type", width=20),
        GridColumn(4, "LENGTH", "character_maximum_length", numeric=True, width=10),
        GridColumn(5, "NULL?", "is_nullable", width=8),
        GridColumn(6, "預設值", "default_value", width=24),
        GridColumn(7, "CONSTRAINT TYPE", "constraint_type", width=18),
        # Repeats the column description
        GridColumn(8, "備註說明", "column_description", width=28),
    ),
)
