"""
Shared fixtures for the xml2sql tests.

The fake schema source serves a small deterministic schema: a users table
with a composite index and a two-row table ``t`` with a nullable column.
"""
from typing import Any, Dict, Iterator, List, Mapping

import pytest

from xml2sql.domain.interfaces import SchemaSourceInterface
from xml2sql.domain.models import (
    ColumnDescriptor,
    Document,
    KeyDescriptor,
    Row,
    TableData,
    TableStructure
)

class FakeSchemaSource(SchemaSourceInterface):
    """In-memory schema source."""

    def __init__(self, tables: Dict[str, Dict[str, Any]], prefix: str = ""):
        self.tables = tables
        self.prefix = prefix
        self.streamed: List[str] = []

    def list_columns(self, table_name: str) -> List[ColumnDescriptor]:
        return list(self.tables[table_name]['columns'])

    def list_keys(self, table_name: str) -> List[KeyDescriptor]:
        return list(self.tables[table_name]['keys'])

    def stream_rows(self, table_name: str) -> Iterator[Mapping[str, Any]]:
        self.streamed.append(table_name)
        for row in self.tables[table_name]['rows']:
            yield dict(row)

    def resolve_prefix(self) -> str:
        return self.prefix

def users_table(name: str = 'xxxxx_users') -> Dict[str, Any]:
    return {
        'columns': [
            ColumnDescriptor('id', 'int(11)', nullable=False, key='PRI', extra='auto_increment'),
            ColumnDescriptor('first_name', 'varchar(50)', nullable=False, key='', default=''),
            ColumnDescriptor('last_name', 'varchar(50)', nullable=False, key='MUL', default=''),
            ColumnDescriptor('email', 'varchar(100)', nullable=False, key='UNI'),
            ColumnDescriptor('created', 'datetime', nullable=False, default='0000-00-00 00:00:00',
                             comment='Creation date'),
        ],
        'keys': [
            KeyDescriptor(name, False, 'PRIMARY', 1, 'id'),
            KeyDescriptor(name, False, 'idx_email', 1, 'email'),
            # Listed out of order on purpose
            KeyDescriptor(name, True, 'idx_name', 2, 'first_name'),
            KeyDescriptor(name, True, 'idx_name', 1, 'last_name'),
        ],
        'rows': [
            {'id': 1, 'first_name': 'Ada', 'last_name': 'Lovelace', 'email': 'ada@example.com',
             'created': '2011-01-01 00:00:00'},
        ],
    }

def t_table() -> Dict[str, Any]:
    return {
        'columns': [
            ColumnDescriptor('id', 'int', nullable=False, key='PRI', extra='auto_increment'),
            ColumnDescriptor('name', 'varchar(255)', nullable=True),
        ],
        'keys': [
            KeyDescriptor('t', False, 'PRI', 1, 'id'),
        ],
        'rows': [
            {'id': 1, 'name': 'a'},
            {'id': 2, 'name': None},
        ],
    }

@pytest.fixture
def source():
    """Schema source with the live prefix xxxxx_."""
    return FakeSchemaSource(
        {'xxxxx_users': users_table(), 't': t_table(), 'xxxxx_empty': {
            'columns': [ColumnDescriptor('id', 'int(11)', nullable=False)],
            'keys': [],
            'rows': [],
        }},
        prefix='xxxxx_'
    )

@pytest.fixture
def users_structure():
    table = users_table('#__users')
    return TableStructure(name='#__users', columns=table['columns'], keys=table['keys'])

@pytest.fixture
def t_document():
    """Document of table t with structure and both rows."""
    table = t_table()
    return Document(entries=[
        TableStructure(name='t', columns=table['columns'], keys=table['keys']),
        TableData(name='t', rows=[
            Row((('id', '1'), ('name', 'a'))),
            Row((('id', '2'), ('name', None))),
        ]),
    ])
