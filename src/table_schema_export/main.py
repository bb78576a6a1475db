"""
Table Schema Export - Main entry point.

Documents every base table of a Postgres database as one sheet of
"Table Schemas.xlsx" in the output directory, then exits.
"""
import asyncio
import logging
import sys
from typing import Optional

from table_schema_export.config.export import ExportConfig, load_export_config
from table_schema_export.exporter import export_table_schemas

logger = logging.getLogger(__name__)


def configure_logging(config: ExportConfig) -> None:
    logging.basicConfig(
        level=getattr(logging, config.logging.level.upper()),
        format=config.logging.format,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


async def main_async(config_path: Optional[str] = None):
    """Load configuration and run a single export."""
    config = load_export_config(config_path)
    configure_logging(config)

    logger.info("Starting application")
    logger.debug(f"Configuration: {config.log_redacted()}")

    result = await export_table_schemas(config)
    if result.degraded:
        logger.warning(f"Catalog query failed, wrote empty file {result.path}")

    logger.info("All done!")
    return result


def main(config_path: Optional[str] = None):
    """CLI entry point."""
    try:
        asyncio.run(main_async(config_path))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
