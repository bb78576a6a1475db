"""Export Postgres table schemas to a formatted xlsx workbook."""

__version__ = "0.1.0"
