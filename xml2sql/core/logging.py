"""Global logging configuration for the application."""
import logging
import sys
from pathlib import Path

from xml2sql.core.config import Config, LoggingConfig

DETAILED_FORMAT = (
    '%(asctime)s - %(name)s - %(levelname)s - %(message)s\n'
    '  Location: %(pathname)s:%(lineno)d\n'
    '  Function: %(funcName)s'
)

def setup_logging(config: LoggingConfig) -> None:
    """Set up global logging configuration.

    Args:
        config: Logging configuration
    """
    detailed_formatter = logging.Formatter(DETAILED_FORMAT)
    simple_formatter = logging.Formatter(config.format)

    handlers = []

    # Console output stays short, the log file gets the detailed format
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(simple_formatter)
    handlers.append(console_handler)

    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(detailed_formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(config.level.upper())

    # Remove any existing handlers to avoid duplicate log entries
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    root_logger.debug("Logging system initialized")
    root_logger.debug(f"Log level: {config.level}")
    if config.file:
        root_logger.debug(f"Log file: {config.file}")

def get_logger(name: str = None) -> logging.Logger:
    """Get a logger instance with the specified name.

    This is the preferred way to get a logger in this application.
    The logger will inherit the root logger's configuration.

    Args:
        name: The name for the logger. If None, returns the root logger.

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name) if name else logging.getLogger()

def log_config(config: Config) -> None:
    """Log configuration settings.

    Args:
        config: Loaded configuration
    """
    logger = get_logger(__name__)

    # The password is never logged
    logger.debug("Database Configuration:")
    logger.debug(f"  Host: {config.database.host}")
    logger.debug(f"  Port: {config.database.port}")
    logger.debug(f"  User: {config.database.user}")
    logger.debug(f"  Database: {config.database.database}")
    logger.debug(f"  Prefix: {config.database.prefix}")

    logger.debug("Export Configuration:")
    logger.debug(f"  Tables: {config.export.tables}")
    logger.debug(f"  With Structure: {config.export.with_structure}")
    logger.debug(f"  With Data: {config.export.with_data}")
    logger.debug(f"  Output: {config.export.output}")
    logger.debug(f"  Compression: {config.export.compression}")

    logger.debug("Convert Configuration:")
    logger.debug(f"  Input: {config.convert.input}")
    logger.debug(f"  Output: {config.convert.output}")
    logger.debug(f"  Format: {config.convert.format}")
    logger.debug(f"  Prefix: {config.convert.prefix}")
    logger.debug(f"  Sample Data: {config.convert.sample_data}")
    logger.debug(f"  Pretty: {config.convert.pretty}")

    logger.debug("Logging Configuration:")
    logger.debug(f"  Level: {config.logging.level}")
    logger.debug(f"  File: {config.logging.file}")
