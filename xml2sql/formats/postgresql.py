"""PostgreSQL dialect."""
from typing import List, Optional

from xml2sql.core.exceptions import UnsupportedConstructError
from xml2sql.domain.models import ColumnDescriptor, KeyDescriptor, TableStructure
from .base import BaseFormatter, split_type

# MySQL zero dates have no PostgreSQL counterpart
ZERO_DATES = {
    '0000-00-00 00:00:00': '1970-01-01 00:00:00',
    '0000-00-00': '1970-01-01',
}

# MySQL base type -> PostgreSQL type, for types that take no size over
SIMPLE_TYPES = {
    'tinytext': 'text',
    'text': 'text',
    'mediumtext': 'text',
    'longtext': 'text',
    'binary': 'bytea',
    'varbinary': 'bytea',
    'tinyblob': 'bytea',
    'blob': 'bytea',
    'mediumblob': 'bytea',
    'longblob': 'bytea',
    'date': 'date',
    'datetime': 'timestamp without time zone',
    'timestamp': 'timestamp without time zone',
    'time': 'time without time zone',
    'year': 'smallint',
    'float': 'real',
    'double': 'double precision',
    'real': 'double precision',
    'bool': 'boolean',
    'boolean': 'boolean',
    'json': 'json',
    'enum': 'character varying(255)',
    'set': 'character varying(255)',
}

# Integer types, signed and unsigned, with their serial counterpart
INTEGER_TYPES = {
    'tinyint': ('smallint', 'smallint', 'smallserial'),
    'smallint': ('smallint', 'integer', 'serial'),
    'mediumint': ('integer', 'integer', 'serial'),
    'int': ('integer', 'bigint', 'serial'),
    'integer': ('integer', 'bigint', 'serial'),
    'bigint': ('bigint', 'numeric(20,0)', 'bigserial'),
}

class PostgreSQLFormatter(BaseFormatter):
    """Statements for PostgreSQL, converting MySQL types on the way."""

    name = 'postgresql'
    index_types = frozenset({'', 'BTREE', 'HASH'})

    def quote_value(self, value: Optional[str]) -> str:
        if value is not None and '\0' in value:
            raise UnsupportedConstructError("PostgreSQL text cannot contain NUL characters")
        return super().quote_value(value)

    def map_type(self, column: ColumnDescriptor) -> str:
        """Map a MySQL column type to PostgreSQL.

        Raises:
            UnsupportedConstructError: If the type has no PostgreSQL counterpart
        """
        base, arguments, modifiers = split_type(column.type)
        unsigned = 'unsigned' in modifiers

        if base in INTEGER_TYPES:
            signed_type, unsigned_type, serial_type = INTEGER_TYPES[base]
            if column.is_auto_increment:
                if base == 'bigint' or (unsigned and base in ('int', 'integer')):
                    return 'bigserial'
                return serial_type
            return unsigned_type if unsigned else signed_type

        if base in ('decimal', 'numeric', 'dec', 'fixed'):
            return f"numeric({arguments})" if arguments else 'numeric'
        if base == 'char':
            return f"character({arguments or 1})"
        if base == 'varchar':
            return f"character varying({arguments})" if arguments else 'character varying'
        if base in SIMPLE_TYPES:
            return SIMPLE_TYPES[base]

        raise UnsupportedConstructError(f"Column {column.name}: type {column.type} is not supported by PostgreSQL")

    def format_default(self, column: ColumnDescriptor) -> str:
        if column.default in ZERO_DATES:
            return self.quote_value(ZERO_DATES[column.default])
        return super().format_default(column)

    def format_column(self, column: ColumnDescriptor, structure: TableStructure) -> str:
        extra = column.extra.lower()
        for flag in ('auto_increment', 'default_generated'):
            extra = extra.replace(flag, '')
        if extra.strip():
            raise UnsupportedConstructError(
                f"Column {column.name}: '{column.extra}' cannot be expressed in PostgreSQL"
            )

        parts = [self.quote_name(column.name), self.map_type(column)]

        # Serial columns carry their own default
        if column.default is not None and not column.is_auto_increment:
            parts.append(f"DEFAULT {self.format_default(column)}")
        if not column.nullable:
            parts.append('NOT NULL')

        return ' '.join(parts)

    def index_method(self, key_name: str, members: List[KeyDescriptor]) -> str:
        if members[0].index_type.upper() != 'HASH':
            return ''
        if len(members) > 1:
            raise UnsupportedConstructError(f"Hash index {key_name} cannot span several columns in PostgreSQL")
        return ' USING hash'

    def trailing_statements(self, table: str, structure: TableStructure) -> List[str]:
        return [
            f"COMMENT ON COLUMN {self.quote_name(table)}.{self.quote_name(column.name)} "
            f"IS {self.quote_value(column.comment)};\n"
            for column in structure.columns
            if column.comment
        ]

    def format_truncate(self, structure: TableStructure) -> str:
        return f"TRUNCATE TABLE {self.quote_name(self.get_table_name(structure.name))} RESTART IDENTITY;\n"
