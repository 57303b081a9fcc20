"""MariaDB schema source implementation."""
import time
from typing import Any, Dict, Iterator, List, Mapping, Optional

import mysql.connector
from mysql.connector import Error

from xml2sql.core.config import DatabaseConfig
from xml2sql.core.exceptions import DatabaseError
from xml2sql.core.logging import get_logger
from ..domain.interfaces import SchemaSourceInterface
from ..domain.models import ColumnDescriptor, KeyDescriptor

logger = get_logger(__name__)

def quote_identifier(name: str) -> str:
    """Quote a table name for use in a MySQL statement."""
    return '`' + name.replace('`', '``') + '`'

def column_from_row(row: Mapping[str, Any]) -> ColumnDescriptor:
    """Build a column descriptor from a SHOW FULL COLUMNS row."""
    default = row.get('Default')
    return ColumnDescriptor(
        name=_text(row['Field']),
        type=_text(row['Type']),
        nullable=_text(row.get('Null')) == 'YES',
        key=_text(row.get('Key')),
        default=None if default is None else _text(default),
        extra=_text(row.get('Extra')),
        comment=_text(row.get('Comment'))
    )

def key_from_row(row: Mapping[str, Any]) -> KeyDescriptor:
    """Build a key descriptor from a SHOW KEYS row."""
    return KeyDescriptor(
        table=_text(row['Table']),
        non_unique=int(row['Non_unique']) == 1,
        key_name=_text(row['Key_name']),
        seq_in_index=int(row['Seq_in_index']),
        column_name=_text(row['Column_name']),
        collation=_text(row.get('Collation')),
        nullable=_text(row.get('Null')) == 'YES',
        index_type=_text(row.get('Index_type')),
        comment=_text(row.get('Comment'))
    )

def _text(value: Any) -> str:
    # Older connector versions return bytearrays for some SHOW columns
    if value is None:
        return ''
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8')
    return str(value)

class MariaDB(SchemaSourceInterface):
    """Schema source backed by a MariaDB or MySQL server."""

    def __init__(self, config: DatabaseConfig, batch_size: int = 1000):
        """Initialize the MariaDB connection.

        Args:
            config: Connection settings and the live table prefix
            batch_size: Number of rows fetched per round trip when streaming
        """
        self._config = {
            'host': config.host,
            'port': config.port,
            'user': config.user,
            'password': config.password,
            'use_pure': config.use_pure,
            'charset': config.charset,
        }

        # Only add database if it's not empty
        if config.database:
            self._config['database'] = config.database

        self.prefix = config.prefix or ''
        self.batch_size = batch_size

        # Retry settings
        self.max_retries = 3
        self.retry_backoff_factor = 1.5  # Each retry will wait 1.5 times longer

        self._connection = None

    @property
    def connection(self):
        return self._connection

    def connect(self) -> None:
        """Connect to the MariaDB server with retry logic.

        Uses exponential backoff for connection retries.

        Raises:
            DatabaseError: If connection fails after all retries
        """
        if self._connection and self._connection.is_connected():
            return

        logger.info(f"Connecting to MariaDB server at {self._config.get('host')}:{self._config.get('port')}")

        retry_count = 0
        last_error = None

        while retry_count <= self.max_retries:
            try:
                self._connection = mysql.connector.connect(**self._config)
                self._connection.autocommit = True

                database_name = self._config.get('database', '')
                if database_name:
                    logger.info(f"Connected to MariaDB database: {database_name}")
                else:
                    logger.info("Connected to MariaDB server (no database selected)")
                return

            except Error as e:
                retry_count += 1
                last_error = str(e)

                if retry_count <= self.max_retries:
                    wait_time = self.retry_backoff_factor ** (retry_count - 1)
                    logger.warning(
                        f"Connection attempt {retry_count} failed: {str(e)}. "
                        f"Retrying in {wait_time:.1f} seconds..."
                    )
                    time.sleep(wait_time)
                else:
                    logger.error(f"Failed to connect to MariaDB after {self.max_retries} attempts: {str(e)}")

        raise DatabaseError(f"Failed to connect to MariaDB: {last_error}")

    def disconnect(self) -> None:
        """Disconnect from the MariaDB database."""
        try:
            if self._connection and self._connection.is_connected():
                self._connection.close()
                logger.info("Disconnected from MariaDB database")
        except Error as e:
            logger.warning(f"Error during disconnect: {str(e)}")
        finally:
            self._connection = None

    def _ensure_connected(self) -> None:
        if not self._connection or not self._connection.is_connected():
            self.connect()

    def _query(self, query: str, params: Optional[tuple] = None) -> List[Dict[str, Any]]:
        self._ensure_connected()
        cursor = self._connection.cursor(dictionary=True)
        try:
            cursor.execute(query, params)
            return cursor.fetchall()
        finally:
            cursor.close()

    def get_table_names(self, prefixed_only: bool = False) -> List[str]:
        """Get the tables of the current database.

        Args:
            prefixed_only: Only return tables whose name starts with the live prefix
        """
        try:
            rows = self._query("SHOW TABLES")
        except Error as e:
            raise DatabaseError(f"Failed to get table names: {str(e)}")

        tables = [_text(next(iter(row.values()))) for row in rows]
        if prefixed_only and self.prefix:
            tables = [table for table in tables if table.startswith(self.prefix)]
        logger.debug(f"Found {len(tables)} tables")
        return tables

    def list_columns(self, table_name: str) -> List[ColumnDescriptor]:
        try:
            rows = self._query(f"SHOW FULL COLUMNS FROM {quote_identifier(table_name)}")
        except Error as e:
            raise DatabaseError(f"Failed to get columns of table {table_name}: {str(e)}")
        return [column_from_row(row) for row in rows]

    def list_keys(self, table_name: str) -> List[KeyDescriptor]:
        try:
            rows = self._query(f"SHOW KEYS FROM {quote_identifier(table_name)}")
        except Error as e:
            raise DatabaseError(f"Failed to get keys of table {table_name}: {str(e)}")
        return [key_from_row(row) for row in rows]

    def stream_rows(self, table_name: str) -> Iterator[Dict[str, Any]]:
        """Yield the rows of a table using an unbuffered cursor.

        The connection cannot run other queries until the iterator is exhausted
        or closed.
        """
        try:
            self._ensure_connected()
            cursor = self._connection.cursor(dictionary=True, buffered=False)
        except Error as e:
            raise DatabaseError(f"Failed to open cursor for table {table_name}: {str(e)}")

        try:
            cursor.execute(f"SELECT * FROM {quote_identifier(table_name)}")
            while True:
                batch = cursor.fetchmany(self.batch_size)
                if not batch:
                    break
                yield from batch
        except Error as e:
            raise DatabaseError(f"Failed to get data from table {table_name}: {str(e)}")
        finally:
            try:
                cursor.close()
            except Error as e:
                logger.warning(f"Error closing cursor for table {table_name}: {str(e)}")

    def resolve_prefix(self) -> str:
        return self.prefix

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
