"""Named cell styles shared by every sheet of the report."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, NamedStyle, PatternFill, Side


class StyleClass(IntEnum):
    """Index of a style in the palette."""
    DEFAULT = 0
    BORDERED_CENTERED = 1
    TOTAL = 2
    VALUE = 3
    FORMULA = 4
    FORMULA_PERCENT = 5
    WRAPPED = 6
    TITLE = 7
    NUMBER_WITH_COMMA = 8


# Built-in style every workbook already has
DEFAULT_STYLE_NAME = "Normal"

THIN_BORDER = ("left", "right", "top", "bottom")


@dataclass(frozen=True)
class StyleSpec:
    """Font/fill/border/alignment/number format of one named style."""
    name: str
    font_size: float = 10
    bold: bool = False
    fill_rgb: str | None = None
    bordered: bool = False
    horizontal: str | None = None
    vertical: str | None = None
    wrap_text: bool = False
    number_format: str = "General"

    def to_named_style(self) -> NamedStyle:
        sides = {}
        if self.bordered:
            sides = {edge: Side(style="thin") for edge in THIN_BORDER}
        fill = PatternFill()
        if self.fill_rgb:
            fill = PatternFill(fill_type="solid", fgColor=self.fill_rgb)
        return NamedStyle(
            name=self.name,
            font=Font(size=self.font_size, bold=self.bold),
            fill=fill,
            border=Border(**sides),
            alignment=Alignment(
                horizontal=self.horizontal,
                vertical=self.vertical,
                wrap_text=self.wrap_text or None,
            ),
            number_format=self.number_format,
        )


def _centered(name: str, **kwargs) -> StyleSpec:
    return StyleSpec(name=name, bordered=True, horizontal="center", vertical="center", **kwargs)


@dataclass(frozen=True)
class StylePalette:
    """The closed set of styles a report cell may use.

    Specs are immutable; ``register`` creates fresh ``NamedStyle`` objects
    for each workbook so one palette can serve any number of documents.
    """
    specs: Mapping[StyleClass, StyleSpec] = field(default_factory=lambda: MappingProxyType({
        StyleClass.BORDERED_CENTERED: _centered("bordered_centered"),
        StyleClass.TOTAL: _centered("total", fill_rgb="F6D8D8", number_format="#,##0"),
        StyleClass.VALUE: _centered("value", fill_rgb="EBF1DE", number_format="#,##0"),
        StyleClass.FORMULA: _centered("formula", fill_rgb="DCE6F1", number_format="#,##0"),
        StyleClass.FORMULA_PERCENT: _centered("formula_percent", fill_rgb="DCE6F1", number_format="0.00%"),
        StyleClass.WRAPPED: _centered("wrapped", wrap_text=True),
        StyleClass.TITLE: StyleSpec(name="title", font_size=12, bold=True, horizontal="center", vertical="top"),
        StyleClass.NUMBER_WITH_COMMA: StyleSpec(
            name="number_with_comma", bordered=True, horizontal="center", vertical="top", number_format="#,##0"
        ),
    }))

    def name_of(self, style: StyleClass) -> str:
        if style == StyleClass.DEFAULT:
            return DEFAULT_STYLE_NAME
        return self.specs[style].name

    def register(self, workbook: Workbook) -> None:
        """Add every palette style to ``workbook`` in index order."""
        for style in sorted(self.specs):
            workbook.add_named_style(self.specs[style].to_named_style())
