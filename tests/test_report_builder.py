"""
Tests for workbook assembly.

Covers table grouping, sheet naming, the title block and column grid,
cell styles, and deterministic serialization.
"""

import pytest
from io import BytesIO

from openpyxl import load_workbook

from table_schema_export.db_introspect.schema_introspector import ColumnDescriptor
from table_schema_export.errors import FormatConstraintError
from table_schema_export.report.builder import (
    ReportBuilder,
    group_tables,
    sanitize_sheet_title,
)
from table_schema_export.report.layout import DEFAULT_LAYOUT


HEADER_LABELS = [
    "項次", "欄位名稱", "欄位中文名稱", "型態", "LENGTH",
    "NULL?", "預設值", "CONSTRAINT TYPE", "備註說明",
]
MERGED_RANGES = {"B2:E2", "F2:J2", "B3:E3", "F3:J3"}


def _load(data):
    return load_workbook(BytesIO(data))


def _header_row(ws):
    return [ws.cell(row=4, column=c).value for c in range(2, 11)]


# =============================================================================
# Grouping
# =============================================================================

class TestGroupTables:
    """Test grouping the flat column list by table."""

    def test_groups_in_first_seen_order(self, shop_columns):
        groups = group_tables(shop_columns)

        assert [g.table_name for g in groups] == ["customers", "orders", "audit_log"]
        assert [len(g.rows) for g in groups] == [2, 3, 1]

    def test_rows_keep_input_order(self, shop_columns):
        orders = group_tables(shop_columns)[1]

        assert [c.column_name for c in orders.rows] == ["id", "customer_id", "placed_at"]
        assert orders.table_description is None

    def test_placeholder_creates_empty_group(self):
        groups = group_tables([ColumnDescriptor(table_name="empty_table")])

        assert len(groups) == 1
        assert groups[0].table_name == "empty_table"
        assert groups[0].rows == []

    def test_empty_input(self):
        assert group_tables([]) == []


# =============================================================================
# Sheet titles
# =============================================================================

class TestSanitizeSheetTitle:
    """Test worksheet title rules."""

    def test_valid_title_unchanged(self):
        taken = set()
        assert sanitize_sheet_title("users", taken) == "users"
        assert taken == {"users"}

    def test_invalid_characters_replaced(self):
        assert sanitize_sheet_title("a/b:c[d]", set()) == "a_b_c_d_"

    def test_long_title_truncated(self):
        title = sanitize_sheet_title("x" * 40, set())
        assert title == "x" * 31

    def test_duplicate_after_truncation(self):
        taken = set()
        first = sanitize_sheet_title("customer_subscription_history_2023", taken)
        second = sanitize_sheet_title("customer_subscription_history_2024", taken)

        assert first == "customer_subscription_history_2"
        assert second == "customer_subscription_history~1"
        assert len(second) == 31

    def test_case_insensitive_duplicates(self):
        taken = set()
        sanitize_sheet_title("Users", taken)
        assert sanitize_sheet_title("users", taken) == "users~1"

    def test_apostrophes_stripped(self):
        assert sanitize_sheet_title("'quoted'", set()) == "quoted"

    def test_truncation_does_not_leave_trailing_apostrophe(self):
        title = sanitize_sheet_title("x" * 30 + "'" + "tail", set())
        assert title == "x" * 30
        assert not title.endswith("'")

    def test_duplicate_suffix_does_not_follow_apostrophe(self):
        taken = {"x" * 28 + "'y"}
        title = sanitize_sheet_title("x" * 28 + "'y", taken)
        assert title == "x" * 28 + "~1"
        assert len(title) <= 31

    def test_strict_mode_raises(self):
        with pytest.raises(FormatConstraintError) as exc_info:
            sanitize_sheet_title("a/b", set(), strict=True)
        assert exc_info.value.title == "a/b"

    def test_strict_mode_accepts_valid_title(self):
        assert sanitize_sheet_title("orders", set(), strict=True) == "orders"


# =============================================================================
# Document assembly
# =============================================================================

class TestBuildDocument:
    """Test the generated workbook."""

    def test_users_scenario(self, users_columns):
        data, filename = ReportBuilder().build_document(users_columns)
        wb = _load(data)

        assert filename == "Table Schemas.xlsx"
        assert wb.sheetnames == ["users"]
        ws = wb["users"]
        assert ws["F3"].value == "users"
        assert ws["B3"].value == "app users"
        assert ws["B5"].value == 1
        assert ws["C5"].value == "id"
        assert ws["I5"].value == "PRIMARY KEY"
        assert ws["B6"].value == 2
        assert ws["C6"].value == "email"
        assert ws["G6"].value == "YES"

    def test_one_sheet_per_table_in_input_order(self, shop_columns):
        data, _ = ReportBuilder().build_document(shop_columns)
        wb = _load(data)

        assert wb.sheetnames == ["customers", "orders", "audit_log"]

    def test_header_rows(self, shop_columns):
        data, _ = ReportBuilder().build_document(shop_columns)
        wb = _load(data)

        for ws in wb.worksheets:
            assert ws["B2"].value == "中文table名稱"
            assert ws["F2"].value == "table name"
            assert ws["F3"].value == ws.title
            assert _header_row(ws) == HEADER_LABELS
            assert {str(r) for r in ws.merged_cells.ranges} == MERGED_RANGES

    def test_data_row_follows_ordinal_rank(self, shop_columns):
        data, _ = ReportBuilder().build_document(shop_columns)
        ws = _load(data)["orders"]

        for rank, name in enumerate(["id", "customer_id", "placed_at"]):
            row = DEFAULT_LAYOUT.data_row(rank)
            assert row == 5 + rank
            assert ws.cell(row=row, column=2).value == rank + 1
            assert ws.cell(row=row, column=3).value == name
        assert ws.max_row == 7

    def test_data_row_fields(self, shop_columns):
        data, _ = ReportBuilder().build_document(shop_columns)
        ws = _load(data)["customers"]

        values = [ws.cell(row=6, column=c).value for c in range(2, 11)]
        assert [v if v != "" else None for v in values] == [
            2, "name", "full name", "character varying", 120, "NO", None, None, "full name",
        ]
        assert ws["H5"].value == "nextval('customers_id_seq'::regclass)"

    def test_missing_numbers_default_to_zero(self, users_columns):
        data, _ = ReportBuilder().build_document(users_columns)
        ws = _load(data)["users"]

        assert ws["F5"].value == 0
        assert ws["F6"].value == 0

    def test_missing_text_is_blank(self, users_columns):
        data, _ = ReportBuilder().build_document(users_columns)
        ws = _load(data)["users"]

        assert ws["D5"].value in (None, "")
        assert ws["H6"].value in (None, "")
        assert ws["I6"].value in (None, "")

    def test_note_column_repeats_description(self, shop_columns):
        data, _ = ReportBuilder().build_document(shop_columns)
        ws = _load(data)["orders"]

        assert ws["J6"].value == "buyer"
        assert ws["J6"].value == ws["D6"].value

    def test_table_without_columns(self):
        data, _ = ReportBuilder().build_document([ColumnDescriptor(table_name="empty_table")])
        ws = _load(data)["empty_table"]

        assert _header_row(ws) == HEADER_LABELS
        assert ws.max_row == 4

    def test_blank_description_keeps_style(self, shop_columns):
        data, _ = ReportBuilder().build_document(shop_columns)
        cell = _load(data)["orders"]["B3"]

        assert cell.value is None
        assert cell.border.left.style == "thin"
        assert cell.border.top.style == "thin"
        assert cell.alignment.horizontal == "center"
        assert cell.alignment.vertical == "center"

    def test_cells_use_bordered_centered_style(self, users_columns):
        data, _ = ReportBuilder().build_document(users_columns)
        ws = _load(data)["users"]

        for coordinate in ("B2", "F3", "B4", "J4", "B5", "J6"):
            cell = ws[coordinate]
            assert cell.style == "bordered_centered"
            assert cell.border.left.style == "thin"
            assert cell.border.right.style == "thin"
            assert cell.border.top.style == "thin"
            assert cell.border.bottom.style == "thin"
            assert cell.alignment.horizontal == "center"
            assert cell.alignment.vertical == "center"

    def test_column_widths(self, users_columns):
        data, _ = ReportBuilder().build_document(users_columns)
        ws = _load(data)["users"]

        assert ws.column_dimensions["C"].width == 24
        assert ws.column_dimensions["B"].width == 8

    def test_invalid_table_name_sanitized(self):
        columns = [ColumnDescriptor("weird/name", None, "id", None, 1, "integer", None, "NO")]
        data, _ = ReportBuilder().build_document(columns)
        ws = _load(data)["weird_name"]

        # The value row still shows the real table name
        assert ws["F3"].value == "weird/name"

    def test_strict_sheet_names(self):
        columns = [ColumnDescriptor("weird/name", None, "id", None, 1, "integer", None, "NO")]
        with pytest.raises(FormatConstraintError):
            ReportBuilder(strict_sheet_names=True).build_document(columns)

    def test_empty_input_gives_empty_buffer(self):
        data, filename = ReportBuilder().build_document([])

        assert data == b""
        assert filename == "Table Schemas.xlsx"

    def test_custom_filename(self, users_columns):
        _, filename = ReportBuilder(filename="schemas.xlsx").build_document(users_columns)
        assert filename == "schemas.xlsx"

    def test_rebuild_is_byte_identical(self, shop_columns):
        builder = ReportBuilder()
        first, _ = builder.build_document(shop_columns)
        second, _ = builder.build_document(shop_columns)
        third, _ = ReportBuilder().build_document(list(shop_columns))

        assert first == second
        assert first == third

    def test_palette_registered(self, users_columns):
        wb = ReportBuilder().build_workbook(group_tables(users_columns))

        assert "bordered_centered" in wb.named_styles
        assert "title" in wb.named_styles
