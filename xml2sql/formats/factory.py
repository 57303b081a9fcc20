"""Registry of SQL dialect formatters."""
from typing import Dict, List, Type

from xml2sql.core.exceptions import UnknownFormatError
from xml2sql.core.logging import get_logger
from .base import BaseFormatter
from .mysql import MySQLFormatter
from .postgresql import PostgreSQLFormatter
from .sql import GenericFormatter
from .sqlite import SQLiteFormatter

logger = get_logger(__name__)

FORMATS: Dict[str, Type[BaseFormatter]] = {
    'sql': GenericFormatter,
    'mysql': MySQLFormatter,
    'postgresql': PostgreSQLFormatter,
    'sqlite': SQLiteFormatter,
}

ALIASES = {
    'mariadb': 'mysql',
    'postgres': 'postgresql',
    'pgsql': 'postgresql',
}

def get_formatter(name: str, **options) -> BaseFormatter:
    """Create the formatter registered under a name.

    Args:
        name: Dialect identifier, case-insensitive
        options: Passed to the formatter, e.g. prefix

    Returns:
        Formatter instance

    Raises:
        UnknownFormatError: If no formatter is registered under the name
    """
    key = str(name).strip().lower()
    key = ALIASES.get(key, key)

    if key not in FORMATS:
        raise UnknownFormatError(
            f"Unknown format '{name}', available formats: {', '.join(available_formats())}"
        )

    logger.debug(f"Using {FORMATS[key].__name__} for format '{name}'")
    return FORMATS[key](**options)

def available_formats() -> List[str]:
    return sorted(FORMATS)
