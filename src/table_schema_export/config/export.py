"""Export configuration loading and validation.

Loads YAML configuration for a schema export run, falling back to the
DATABASE_URL environment variable when no configuration file is present.
"""
from __future__ import annotations
import os
import yaml
from pathlib import Path
from typing import Literal
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("appsettings.yaml")
REPORT_FILENAME = "Table Schemas.xlsx"


class DatabaseConfig(BaseModel):
    """Source database configuration."""
    dsn: str = Field(..., description="Connection string of the database to document")
    schemas: list[str] | None = Field(None, description="Schemas to include (default: all non-system)")
    disable_nestloop: bool = Field(True, description="Run SET enable_nestloop = off before the catalog query")

    @field_validator("dsn")
    @classmethod
    def validate_dsn(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith(("postgresql://", "postgres://")):
            raise ValueError("dsn must start with 'postgresql://' or 'postgres://'")
        return v


class ReportConfig(BaseModel):
    """Spreadsheet output configuration."""
    output_dir: str = Field(".", description="Directory the workbook is written to")
    filename: str = Field(REPORT_FILENAME, description="Workbook file name")
    strict_sheet_names: bool = Field(False, description="Fail instead of sanitizing invalid sheet titles")
    write_partial_on_failure: bool = Field(
        True, description="Still write the (empty) workbook when the catalog query fails"
    )

    @field_validator("filename")
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """Only xlsx output is produced."""
        if not v.lower().endswith(".xlsx"):
            raise ValueError("filename must end with '.xlsx'")
        return v


class LoggingConfig(BaseModel):
    """Console logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("INFO", description="Log level")
    format: str = Field(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log record format"
    )


class ExportConfig(BaseModel):
    """Complete export configuration."""
    database: DatabaseConfig
    report: ReportConfig = Field(default_factory=ReportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def output_path(self) -> Path:
        return Path(self.report.output_dir) / self.report.filename

    @classmethod
    def from_yaml(cls, path: str | Path) -> ExportConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated ExportConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        if not data:
            raise ValueError(f"Empty configuration file: {config_path}")

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    @classmethod
    def from_env(cls, env_var: str = "TABLE_SCHEMA_EXPORT_CONFIG") -> ExportConfig:
        """Load configuration from the environment.

        The path in ``env_var`` wins, then ``appsettings.yaml`` in the working
        directory, then a bare configuration built from DATABASE_URL.

        Args:
            env_var: Environment variable holding the config path

        Returns:
            Validated ExportConfig instance

        Raises:
            ValueError: If no configuration source is available
        """
        load_dotenv()

        config_path = os.getenv(env_var)
        if config_path:
            return cls.from_yaml(config_path)

        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)

        database_url = os.getenv("DATABASE_URL")
        if database_url:
            return cls.model_validate({"database": {"dsn": database_url}})

        raise ValueError(
            f"Environment variable {env_var} not set, {DEFAULT_CONFIG_PATH} not found "
            "and DATABASE_URL not set"
        )

    def log_redacted(self) -> dict:
        """Get configuration dict with secrets redacted for logging.

        Returns:
            Dictionary with the DSN password masked
        """
        config_dict = self.model_dump()

        dsn = config_dict["database"]["dsn"]
        scheme, sep, rest = dsn.partition("://")
        if "@" in rest:
            credentials, host = rest.rsplit("@", 1)
            if ":" in credentials:
                user = credentials.split(":", 1)[0]
                config_dict["database"]["dsn"] = f"{scheme}{sep}{user}:***@{host}"

        return config_dict


def load_export_config(config_path: str | Path | None = None) -> ExportConfig:
    """Load export configuration from file or environment.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Validated ExportConfig instance

    Raises:
        ValueError: If configuration is invalid or not found
    """
    if config_path:
        return ExportConfig.from_yaml(config_path)

    return ExportConfig.from_env()
