"""Configuration management for the table schema export."""
from .export import (
    REPORT_FILENAME,
    DatabaseConfig,
    ExportConfig,
    LoggingConfig,
    ReportConfig,
    load_export_config,
)

__all__ = [
    "REPORT_FILENAME",
    "DatabaseConfig",
    "ExportConfig",
    "LoggingConfig",
    "ReportConfig",
    "load_export_config",
]
