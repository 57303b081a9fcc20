"""Base class for SQL dialect formatters."""
import re
from abc import abstractmethod
from typing import List, Optional, Tuple

from xml2sql.core.config import DEFAULT_LIVE_PREFIX
from xml2sql.core.exceptions import UnsupportedConstructError
from xml2sql.core.logging import get_logger
from xml2sql.domain.interfaces import FormatterInterface
from xml2sql.domain.models import (
    GENERIC_PREFIX,
    ColumnDescriptor,
    KeyDescriptor,
    TableData,
    TableStructure,
    group_keys
)

logger = get_logger(__name__)

PLAIN_IDENTIFIER = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')
CURRENT_TIMESTAMP = re.compile(r'^(current_timestamp|now|localtimestamp)(\(\d*\))?$', re.IGNORECASE)
# Column types whose default may be the current time
TEMPORAL_TYPES = frozenset({'datetime', 'timestamp', 'date', 'time'})

# Kinds of key groups
PRIMARY = 'primary'
UNIQUE = 'unique'
INDEX = 'index'

class BaseFormatter(FormatterInterface):
    """Turns dump entries into SQL statements for one dialect.

    Subclasses describe their dialect through the class attributes and the
    quoting, type and key hooks; the statement layout is shared.
    """

    name = 'base'
    null_literal = 'NULL'
    # Index types (as reported by SHOW KEYS) the dialect can express
    index_types = frozenset({'', 'BTREE'})

    def __init__(self, prefix: str = DEFAULT_LIVE_PREFIX, **options):
        """Initialize the formatter.

        Args:
            prefix: Live table prefix substituted for the #__ placeholder
            options: Dialect specific options
        """
        self.prefix = prefix
        self.options = options

    def get_table_name(self, generic_name: str) -> str:
        """Replace the #__ placeholder at the start of a table name with the live prefix."""
        if generic_name.startswith(GENERIC_PREFIX):
            return self.prefix + generic_name[len(GENERIC_PREFIX):]
        return generic_name

    def quote_name(self, name: str) -> str:
        return '"' + name.replace('"', '""') + '"'

    def quote_value(self, value: Optional[str]) -> str:
        if value is None:
            return self.null_literal
        return "'" + value.replace("'", "''") + "'"

    def format_default(self, column: ColumnDescriptor) -> str:
        if CURRENT_TIMESTAMP.match(column.default) and split_type(column.type)[0] in TEMPORAL_TYPES:
            return 'CURRENT_TIMESTAMP'
        return self.quote_value(column.default)

    def map_type(self, column: ColumnDescriptor) -> str:
        return column.type

    @abstractmethod
    def format_column(self, column: ColumnDescriptor, structure: TableStructure) -> str:
        """Format one column definition inside CREATE TABLE."""
        pass

    def format_key(
        self,
        table: str,
        key_name: str,
        kind: str,
        members: List[KeyDescriptor],
        structure: TableStructure
    ) -> Tuple[List[str], List[str]]:
        """Format one key group.

        Returns:
            Tuple of (clauses inside CREATE TABLE, statements following it)
        """
        columns = ', '.join(self.quote_name(member.column_name) for member in members)

        if kind == PRIMARY:
            return [f"PRIMARY KEY ({columns})"], []
        if kind == UNIQUE:
            return [f"CONSTRAINT {self.quote_name(self.index_name(table, key_name))} UNIQUE ({columns})"], []

        index = self.quote_name(self.index_name(table, key_name))
        method = self.index_method(key_name, members)
        return [], [f"CREATE INDEX {index} ON {self.quote_name(table)}{method} ({columns});\n"]

    def index_method(self, key_name: str, members: List[KeyDescriptor]) -> str:
        return ''

    def index_name(self, table: str, key_name: str) -> str:
        """Index names are schema wide in most dialects, so they carry the table name."""
        return f"{table}_{key_name}"

    def table_options(self) -> str:
        return ''

    def trailing_statements(self, table: str, structure: TableStructure) -> List[str]:
        return []

    def classify_key(self, key_name: str, members: List[KeyDescriptor]) -> str:
        """A group with only unique members is a constraint, the primary one if so named."""
        if all(not member.non_unique for member in members):
            return PRIMARY if members[0].is_primary else UNIQUE
        return INDEX

    def key_groups(self, structure: TableStructure) -> List[Tuple[str, str, List[KeyDescriptor]]]:
        """Group and classify the keys of a table, checking index types.

        A table whose columns are flagged PRI without any primary key
        descriptor gets its primary key from those columns.

        Raises:
            UnsupportedConstructError: If an index type cannot be expressed
        """
        groups = []
        for key_name, members in group_keys(structure.keys):
            for member in members:
                if member.index_type.upper() not in self.index_types:
                    raise UnsupportedConstructError(
                        f"{self.name}: index type {member.index_type} of key {key_name} "
                        f"on {structure.name} is not supported"
                    )
            groups.append((key_name, self.classify_key(key_name, members), members))

        if not any(kind == PRIMARY for _, kind, _ in groups):
            flagged = [column for column in structure.columns if column.is_primary]
            if flagged:
                members = [
                    KeyDescriptor(
                        table=structure.name,
                        non_unique=False,
                        key_name='PRIMARY',
                        seq_in_index=position,
                        column_name=column.name
                    )
                    for position, column in enumerate(flagged, 1)
                ]
                groups.insert(0, ('PRIMARY', PRIMARY, members))

        return groups

    def format_create(self, structure: TableStructure) -> str:
        """Format the CREATE TABLE statement of a structure entry.

        Raises:
            UnsupportedConstructError: If the table uses a feature the dialect lacks
        """
        if not structure.columns:
            raise UnsupportedConstructError(f"Table {structure.name} has no columns")

        table = self.get_table_name(structure.name)
        definitions = [self.format_column(column, structure) for column in structure.columns]
        statements = []

        for key_name, kind, members in self.key_groups(structure):
            clauses, following = self.format_key(table, key_name, kind, members, structure)
            definitions.extend(clauses)
            statements.extend(following)

        body = ',\n'.join(f"  {definition}" for definition in definitions)
        sql = f"CREATE TABLE {self.quote_name(table)} (\n{body}\n){self.table_options()};\n"

        statements.extend(self.trailing_statements(table, structure))
        logger.debug(f"{self.name}: formatted CREATE TABLE {table}")
        return sql + ''.join(statements)

    def format_insert(self, data: TableData) -> str:
        """Format one INSERT statement per row of a data entry.

        Raises:
            UnsupportedConstructError: If a row has no fields
        """
        table = self.quote_name(self.get_table_name(data.name))
        statements = []

        for row in data.rows:
            if not row.fields:
                raise UnsupportedConstructError(f"Empty row in data of {data.name}")

            columns = ', '.join(self.quote_name(column) for column in row.columns)
            values = ', '.join(self.quote_value(value) for value in row.values)
            statements.append(f"INSERT INTO {table} ({columns}) VALUES ({values});\n")

        return ''.join(statements)

    def format_truncate(self, structure: TableStructure) -> str:
        return f"TRUNCATE TABLE {self.quote_name(self.get_table_name(structure.name))};\n"

def split_type(raw_type: str) -> Tuple[str, Optional[str], str]:
    """Split a MySQL column type into base name, arguments and modifiers.

    >>> split_type('int(10) unsigned')
    ('int', '10', 'unsigned')
    """
    match = re.match(r'^\s*(\w+)\s*(?:\((.*)\))?\s*(.*?)\s*$', raw_type)
    if not match:
        raise UnsupportedConstructError(f"Cannot parse column type {raw_type!r}")
    base, arguments, modifiers = match.groups()
    return base.lower(), arguments, modifiers.lower()
