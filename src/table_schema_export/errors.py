"""Error types raised by the schema export pipeline."""
from __future__ import annotations

from pathlib import Path


class SchemaExportError(Exception):
    """Base class for export failures."""


class DataAccessError(SchemaExportError):
    """The source database could not be reached or queried."""


class FormatConstraintError(SchemaExportError):
    """A sheet title breaks the spreadsheet format's naming rules."""

    def __init__(self, title: str, reason: str):
        super().__init__(f"Invalid sheet title {title!r}: {reason}")
        self.title = title
        self.reason = reason


class StorageWriteError(SchemaExportError):
    """The finished document could not be written to disk."""

    def __init__(self, path: str | Path, message: str):
        super().__init__(f"Failed to write {path}: {message}")
        self.path = Path(path)
