"""MySQL / MariaDB dialect."""
import re
from typing import List, Optional, Tuple

from xml2sql.core.exceptions import UnsupportedConstructError
from xml2sql.domain.models import ColumnDescriptor, KeyDescriptor, TableStructure
from .base import PRIMARY, UNIQUE, BaseFormatter

# Escapes applied by mysql_real_escape_string()
_ESCAPES = {
    '\\': '\\\\',
    "'": "\\'",
    '\0': '\\0',
    '\n': '\\n',
    '\r': '\\r',
    '\x1a': '\\Z',
}

_GENERATED = re.compile(r'\b(virtual|stored|persistent)\s+generated\b', re.IGNORECASE)
# Extra flags that are rendered separately or implied by DEFAULT
_EXTRA_NOISE = re.compile(r'\b(auto_increment|default_generated)\b', re.IGNORECASE)

class MySQLFormatter(BaseFormatter):
    """Statements for MySQL and MariaDB, the dialect dumps are taken from.

    Options:
        charset: Default character set of created tables (utf8mb4)
        engine: Storage engine of created tables, omitted when not set
    """

    name = 'mysql'
    index_types = frozenset({'', 'BTREE', 'HASH', 'FULLTEXT', 'SPATIAL'})

    def quote_name(self, name: str) -> str:
        return '`' + name.replace('`', '``') + '`'

    def quote_value(self, value: Optional[str]) -> str:
        if value is None:
            return self.null_literal
        return "'" + ''.join(_ESCAPES.get(char, char) for char in value) + "'"

    def format_column(self, column: ColumnDescriptor, structure: TableStructure) -> str:
        parts = [self.quote_name(column.name), column.type]

        if not column.nullable:
            parts.append('NOT NULL')
        if column.default is not None:
            parts.append(f"DEFAULT {self.format_default(column)}")

        for extra in self._split_extra(column):
            parts.append(extra)

        if column.comment:
            parts.append(f"COMMENT {self.quote_value(column.comment)}")

        return ' '.join(parts)

    def _split_extra(self, column: ColumnDescriptor) -> List[str]:
        if _GENERATED.search(column.extra):
            # The generation expression is not part of the dump
            raise UnsupportedConstructError(
                f"Generated column {column.name} cannot be recreated without its expression"
            )

        parts = ['AUTO_INCREMENT'] if column.is_auto_increment else []
        rest = ' '.join(_EXTRA_NOISE.sub(' ', column.extra).split())
        if rest:
            parts.append(rest)
        return parts

    def format_key(
        self,
        table: str,
        key_name: str,
        kind: str,
        members: List[KeyDescriptor],
        structure: TableStructure
    ) -> Tuple[List[str], List[str]]:
        columns = ', '.join(self.quote_name(member.column_name) for member in members)
        index_type = members[0].index_type.upper()

        if kind == PRIMARY:
            clause = f"PRIMARY KEY ({columns})"
        elif kind == UNIQUE:
            clause = f"UNIQUE KEY {self.quote_name(key_name)} ({columns})"
        elif index_type in ('FULLTEXT', 'SPATIAL'):
            clause = f"{index_type} KEY {self.quote_name(key_name)} ({columns})"
        else:
            clause = f"KEY {self.quote_name(key_name)} ({columns})"

        if index_type == 'HASH':
            clause += ' USING HASH'

        return [clause], []

    def table_options(self) -> str:
        options = []
        if self.options.get('engine'):
            options.append(f"ENGINE={self.options['engine']}")
        options.append(f"DEFAULT CHARSET={self.options.get('charset', 'utf8mb4')}")
        return ' ' + ' '.join(options)
