"""SQLite dialect."""
from typing import List, Tuple

from xml2sql.core.exceptions import UnsupportedConstructError
from xml2sql.domain.models import ColumnDescriptor, KeyDescriptor, TableStructure
from .base import PRIMARY, BaseFormatter, split_type

# MySQL base type -> SQLite type affinity
AFFINITIES = {
    'INTEGER': ('tinyint', 'smallint', 'mediumint', 'int', 'integer', 'bigint', 'bit', 'bool', 'boolean', 'year'),
    'TEXT': ('char', 'varchar', 'tinytext', 'text', 'mediumtext', 'longtext', 'enum', 'set',
             'date', 'datetime', 'timestamp', 'time', 'json'),
    'BLOB': ('binary', 'varbinary', 'tinyblob', 'blob', 'mediumblob', 'longblob'),
    'REAL': ('float', 'double', 'real'),
    'NUMERIC': ('decimal', 'numeric', 'dec', 'fixed'),
}

_TYPE_AFFINITY = {base: affinity for affinity, bases in AFFINITIES.items() for base in bases}

class SQLiteFormatter(BaseFormatter):
    """Statements for SQLite.

    An auto-increment column must be the whole primary key; it is then written
    as INTEGER PRIMARY KEY AUTOINCREMENT and no separate primary key clause
    follows. SQLite has no truncate, tables are emptied with DELETE.
    """

    name = 'sqlite'

    def map_type(self, column: ColumnDescriptor) -> str:
        base, _, _ = split_type(column.type)
        if base not in _TYPE_AFFINITY:
            raise UnsupportedConstructError(f"Column {column.name}: type {column.type} is not supported by SQLite")
        return _TYPE_AFFINITY[base]

    def format_column(self, column: ColumnDescriptor, structure: TableStructure) -> str:
        if column.is_auto_increment:
            primary_key = self._primary_columns(structure)
            if primary_key != [column.name]:
                raise UnsupportedConstructError(
                    f"SQLite auto-increment column {column.name} must be the only primary key column"
                )
            return f"{self.quote_name(column.name)} INTEGER PRIMARY KEY AUTOINCREMENT"

        parts = [self.quote_name(column.name), self.map_type(column)]
        if not column.nullable:
            parts.append('NOT NULL')
        if column.default is not None:
            parts.append(f"DEFAULT {self.format_default(column)}")
        return ' '.join(parts)

    def format_key(
        self,
        table: str,
        key_name: str,
        kind: str,
        members: List[KeyDescriptor],
        structure: TableStructure
    ) -> Tuple[List[str], List[str]]:
        if kind == PRIMARY and len(members) == 1 and self._auto_increment_column(structure, members[0].column_name):
            # Already declared on the column
            return [], []
        return super().format_key(table, key_name, kind, members, structure)

    def format_truncate(self, structure: TableStructure) -> str:
        return f"DELETE FROM {self.quote_name(self.get_table_name(structure.name))};\n"

    def _primary_columns(self, structure: TableStructure) -> List[str]:
        for _, kind, members in self.key_groups(structure):
            if kind == PRIMARY:
                return [member.column_name for member in members]
        return []

    def _auto_increment_column(self, structure: TableStructure, name: str) -> bool:
        return any(column.name == name and column.is_auto_increment for column in structure.columns)
