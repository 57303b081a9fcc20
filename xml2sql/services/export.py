"""Export service: database schema and data to an XML dump."""
import time
from dataclasses import replace
from typing import Any, List, Mapping, Optional, TextIO, Union

from xml2sql.core.exceptions import InvalidInputError, PreconditionFailedError
from xml2sql.core.logging import get_logger
from xml2sql.domain.interfaces import SchemaSourceInterface
from xml2sql.domain.models import (
    GENERIC_PREFIX,
    Document,
    Row,
    TableData,
    TableStructure,
    to_text
)
from . import document as xml

logger = get_logger(__name__)

class Exporter:
    """Builds dump documents from a schema source.

    Configuration methods return the exporter so calls can be chained::

        document = Exporter().set_source(db).from_tables(tables).with_data().export()

    An instance must not be reconfigured while an export is running on it.
    """

    def __init__(self, source: Optional[SchemaSourceInterface] = None):
        """Initialize the exporter.

        Args:
            source: Schema source to read from, may be bound later with set_source()
        """
        self.source = source
        self.tables: List[str] = []
        self.options = {'with-structure': True, 'with-data': False}

    def from_tables(self, tables: Union[str, List[str]]) -> 'Exporter':
        """Specify the tables to export.

        Args:
            tables: A single table name or a list of table names

        Raises:
            InvalidInputError: If tables is neither a string nor a list of strings
        """
        if isinstance(tables, str):
            tables = [tables]
        elif isinstance(tables, (list, tuple)):
            tables = list(tables)
        else:
            raise InvalidInputError(
                f"Tables must be given as a string or a list, got {type(tables).__name__}"
            )

        if not tables:
            raise InvalidInputError("No tables specified")

        invalid = [table for table in tables if not isinstance(table, str) or not table]
        if invalid:
            raise InvalidInputError(f"Invalid table name(s): {invalid!r}")

        self.tables = tables
        return self

    def with_structure(self, setting: bool = True) -> 'Exporter':
        """Export the structure of the input tables."""
        self.options['with-structure'] = bool(setting)
        return self

    def with_data(self, setting: bool = True) -> 'Exporter':
        """Export the data of the input tables."""
        self.options['with-data'] = bool(setting)
        return self

    def set_source(self, source: SchemaSourceInterface) -> 'Exporter':
        """Bind the schema source used for structure and data."""
        self.source = source
        return self

    def check(self) -> 'Exporter':
        """Check that everything is in order before exporting.

        Raises:
            PreconditionFailedError: If no valid source is bound or no tables are set
        """
        if self.source is None:
            raise PreconditionFailedError("No schema source bound to the exporter")

        if not isinstance(self.source, SchemaSourceInterface):
            raise PreconditionFailedError(
                f"Schema source has the wrong type: {type(self.source).__name__}"
            )

        if not self.tables:
            raise PreconditionFailedError("No tables specified for export")

        return self

    def get_generic_table_name(self, table: str) -> str:
        """Replace the configured prefix at the start of a table name with #__."""
        prefix = self.source.resolve_prefix()
        if prefix and table.startswith(prefix):
            return GENERIC_PREFIX + table[len(prefix):]
        return table

    def export(self) -> Document:
        """Export the configured tables.

        Returns:
            The complete dump document

        Raises:
            PreconditionFailedError: If check() fails
        """
        self.check()
        start_time = time.time()
        entries = []

        for table in self.tables:
            name = self.get_generic_table_name(table)

            if self.options['with-structure']:
                entries.append(self._build_structure(table, name))

            if self.options['with-data']:
                rows = [self._build_row(record) for record in self.source.stream_rows(table)]
                logger.debug(f"Exported {len(rows)} rows from {table}")
                entries.append(TableData(name=name, rows=rows))

        logger.info(f"Exported {len(self.tables)} tables in {time.time() - start_time:.2f}s")
        return Document(entries=entries)

    def write_xml(self, stream: TextIO) -> int:
        """Export the configured tables straight to a text stream.

        Rows are written as they are read from the source, so the memory used
        does not depend on the size of a table.

        Args:
            stream: Writable text stream

        Returns:
            Number of rows written

        Raises:
            PreconditionFailedError: If check() fails
        """
        self.check()
        total_rows = 0

        self._write_lines(stream, xml.xml_header())

        for table in self.tables:
            name = self.get_generic_table_name(table)

            if self.options['with-structure']:
                self._write_lines(stream, xml.encode_structure_lines(self._build_structure(table, name)))

            if self.options['with-data']:
                self._write_lines(stream, [xml.open_table_data(name)])
                table_rows = 0
                for record in self.source.stream_rows(table):
                    self._write_lines(stream, xml.encode_row_lines(self._build_row(record)))
                    table_rows += 1
                self._write_lines(stream, [xml.close_table_data()])
                logger.debug(f"Streamed {table_rows} rows from {table}")
                total_rows += table_rows

        self._write_lines(stream, xml.xml_footer())
        return total_rows

    def _build_structure(self, table: str, name: str) -> TableStructure:
        columns = self.source.list_columns(table)
        keys = [
            key if key.table == name else replace(key, table=name)
            for key in self.source.list_keys(table)
        ]
        logger.debug(f"Table {table}: {len(columns)} columns, {len(keys)} key parts")
        return TableStructure(name=name, columns=columns, keys=keys)

    @staticmethod
    def _build_row(record: Mapping[str, Any]) -> Row:
        return Row(tuple((str(column), to_text(value)) for column, value in record.items()))

    @staticmethod
    def _write_lines(stream: TextIO, lines: List[str]) -> None:
        for line in lines:
            stream.write(f'{line}\n')
