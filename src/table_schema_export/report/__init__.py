"""
Spreadsheet report assembly.

Groups column descriptors by table and renders one styled sheet per table
into a single xlsx document.
"""

from table_schema_export.report.builder import ReportBuilder, TableGroup, group_tables, sanitize_sheet_title
from table_schema_export.report.layout import DEFAULT_LAYOUT, GridColumn, SheetLayout, TitleBand
from table_schema_export.report.styles import StyleClass, StylePalette, StyleSpec

__all__ = [
    "ReportBuilder",
    "TableGroup",
    "group_tables",
    "sanitize_sheet_title",
    "DEFAULT_LAYOUT",
    "GridColumn",
    "SheetLayout",
    "TitleBand",
    "StyleClass",
    "StylePalette",
    "StyleSpec",
]
