"""Generic SQL dialect."""
from xml2sql.core.exceptions import UnsupportedConstructError
from xml2sql.domain.models import ColumnDescriptor, TableStructure
from .base import PLAIN_IDENTIFIER, BaseFormatter, split_type

# Words that cannot be used as bare identifiers in most databases
RESERVED_WORDS = frozenset({
    'ALL', 'AND', 'AS', 'BY', 'CHECK', 'COLUMN', 'CONSTRAINT', 'CREATE', 'DEFAULT',
    'DELETE', 'DESC', 'DISTINCT', 'DROP', 'FROM', 'GROUP', 'IN', 'INDEX', 'INSERT',
    'INTO', 'IS', 'KEY', 'NOT', 'NULL', 'ON', 'OR', 'ORDER', 'PRIMARY', 'REFERENCES',
    'SELECT', 'SET', 'TABLE', 'TO', 'UNION', 'UNIQUE', 'UPDATE', 'USER', 'VALUES',
    'WHERE', 'WITH'
})

# MySQL integer type -> (signed, unsigned) standard type; display widths are dropped
INTEGER_TYPES = {
    'tinyint': ('smallint', 'smallint'),
    'smallint': ('smallint', 'integer'),
    'mediumint': ('integer', 'integer'),
    'int': ('integer', 'bigint'),
    'integer': ('integer', 'bigint'),
    'bigint': ('bigint', 'numeric(20)'),
}

SIMPLE_TYPES = {
    'tinytext': 'text',
    'text': 'text',
    'mediumtext': 'text',
    'longtext': 'text',
    'binary': 'blob',
    'varbinary': 'blob',
    'tinyblob': 'blob',
    'blob': 'blob',
    'mediumblob': 'blob',
    'longblob': 'blob',
    'date': 'date',
    'datetime': 'timestamp',
    'timestamp': 'timestamp',
    'time': 'time',
    'year': 'smallint',
    'float': 'real',
    'double': 'double precision',
    'real': 'double precision',
    'bool': 'boolean',
    'boolean': 'boolean',
}

class GenericFormatter(BaseFormatter):
    """Plain SQL close to the standard, without vendor extensions."""

    name = 'sql'
    index_types = frozenset({'', 'BTREE', 'HASH'})

    def quote_name(self, name: str) -> str:
        if PLAIN_IDENTIFIER.match(name) and name.upper() not in RESERVED_WORDS:
            return name
        return super().quote_name(name)

    def map_type(self, column: ColumnDescriptor) -> str:
        """Map a MySQL column type to a standard one.

        Raises:
            UnsupportedConstructError: For types without a portable spelling, e.g. enum or json
        """
        base, arguments, modifiers = split_type(column.type)

        if base in INTEGER_TYPES:
            signed_type, unsigned_type = INTEGER_TYPES[base]
            return unsigned_type if 'unsigned' in modifiers else signed_type
        if base in ('decimal', 'numeric', 'dec', 'fixed'):
            return f"numeric({arguments})" if arguments else 'numeric'
        if base in ('char', 'varchar'):
            return f"{base}({arguments or 1})"
        if base in SIMPLE_TYPES:
            return SIMPLE_TYPES[base]

        raise UnsupportedConstructError(f"Column {column.name}: type {column.type} has no generic SQL form")

    def format_column(self, column: ColumnDescriptor, structure: TableStructure) -> str:
        parts = [self.quote_name(column.name), self.map_type(column)]

        if column.is_auto_increment:
            parts.append('GENERATED BY DEFAULT AS IDENTITY')
        elif column.default is not None:
            parts.append(f"DEFAULT {self.format_default(column)}")

        if not column.nullable:
            parts.append('NOT NULL')

        return ' '.join(parts)
