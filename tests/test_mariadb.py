"""Tests for the MariaDB schema source with a mocked driver."""
from unittest.mock import MagicMock, patch

import pytest
from mysql.connector import Error

from xml2sql.core.config import DatabaseConfig
from xml2sql.core.exceptions import DatabaseError
from xml2sql.domain.models import ColumnDescriptor, KeyDescriptor
from xml2sql.infrastructure.mariadb import MariaDB, column_from_row, key_from_row, quote_identifier

@pytest.fixture
def connection():
    connection = MagicMock()
    connection.is_connected.return_value = True
    return connection

@pytest.fixture
def db(connection):
    with patch('xml2sql.infrastructure.mariadb.mysql.connector.connect', return_value=connection):
        source = MariaDB(DatabaseConfig(database='joomla', prefix='jos_'), batch_size=2)
        source.connect()
    return source

def test_column_from_row():
    row = {
        'Field': 'created', 'Type': 'datetime', 'Collation': None, 'Null': 'NO', 'Key': '',
        'Default': '0000-00-00 00:00:00', 'Extra': '', 'Privileges': 'select', 'Comment': 'When',
    }
    assert column_from_row(row) == ColumnDescriptor(
        'created', 'datetime', nullable=False, key='', default='0000-00-00 00:00:00', extra='', comment='When'
    )

def test_column_without_default():
    row = {'Field': b'id', 'Type': bytearray(b'int(11)'), 'Null': 'YES', 'Key': 'PRI', 'Default': None,
           'Extra': 'auto_increment', 'Comment': ''}
    column = column_from_row(row)

    assert column.name == 'id'
    assert column.type == 'int(11)'
    assert column.default is None
    assert column.is_auto_increment

def test_key_from_row():
    row = {
        'Table': 'jos_users', 'Non_unique': 1, 'Key_name': 'idx_name', 'Seq_in_index': 2,
        'Column_name': 'first_name', 'Collation': None, 'Cardinality': 0, 'Sub_part': None,
        'Packed': None, 'Null': '', 'Index_type': 'BTREE', 'Comment': '', 'Index_comment': '',
    }
    assert key_from_row(row) == KeyDescriptor(
        'jos_users', True, 'idx_name', 2, 'first_name', collation='', nullable=False, index_type='BTREE'
    )

def test_quote_identifier():
    assert quote_identifier('jos_users') == '`jos_users`'
    assert quote_identifier('odd`name') == '`odd``name`'

def test_list_columns_and_keys(db, connection):
    cursor = connection.cursor.return_value
    cursor.fetchall.return_value = [
        {'Field': 'id', 'Type': 'int(11)', 'Null': 'NO', 'Key': 'PRI', 'Default': None,
         'Extra': 'auto_increment', 'Comment': ''},
    ]

    columns = db.list_columns('jos_users')

    cursor.execute.assert_called_with('SHOW FULL COLUMNS FROM `jos_users`', None)
    assert [column.name for column in columns] == ['id']
    cursor.close.assert_called()

    cursor.fetchall.return_value = [
        {'Table': 'jos_users', 'Non_unique': 0, 'Key_name': 'PRIMARY', 'Seq_in_index': 1,
         'Column_name': 'id', 'Collation': 'A', 'Null': '', 'Index_type': 'BTREE', 'Comment': ''},
    ]
    keys = db.list_keys('jos_users')

    cursor.execute.assert_called_with('SHOW KEYS FROM `jos_users`', None)
    assert keys[0].is_primary

def test_stream_rows_fetches_in_batches(db, connection):
    cursor = connection.cursor.return_value
    cursor.fetchmany.side_effect = [[{'id': 1}, {'id': 2}], [{'id': 3}], []]

    rows = list(db.stream_rows('jos_users'))

    assert rows == [{'id': 1}, {'id': 2}, {'id': 3}]
    connection.cursor.assert_called_with(dictionary=True, buffered=False)
    cursor.execute.assert_called_with('SELECT * FROM `jos_users`')
    cursor.fetchmany.assert_called_with(2)
    cursor.close.assert_called_once()

def test_driver_errors_become_database_errors(db, connection):
    connection.cursor.return_value.execute.side_effect = Error('table missing')

    with pytest.raises(DatabaseError):
        db.list_columns('jos_missing')
    with pytest.raises(DatabaseError):
        list(db.stream_rows('jos_missing'))

def test_table_names_with_prefix(db, connection):
    connection.cursor.return_value.fetchall.return_value = [
        {'Tables_in_joomla': 'jos_users'}, {'Tables_in_joomla': 'other'},
    ]

    assert db.get_table_names() == ['jos_users', 'other']
    assert db.get_table_names(prefixed_only=True) == ['jos_users']

def test_resolve_prefix(db):
    assert db.resolve_prefix() == 'jos_'

def test_connect_retries_then_fails():
    source = MariaDB(DatabaseConfig())
    with patch('xml2sql.infrastructure.mariadb.mysql.connector.connect', side_effect=Error('refused')) as connect, \
            patch('xml2sql.infrastructure.mariadb.time.sleep') as sleep:
        with pytest.raises(DatabaseError):
            source.connect()

    assert connect.call_count == source.max_retries + 1
    assert sleep.call_count == source.max_retries

def test_context_manager_disconnects(connection):
    with patch('xml2sql.infrastructure.mariadb.mysql.connector.connect', return_value=connection):
        with MariaDB(DatabaseConfig()) as source:
            assert source.connection is connection

    connection.close.assert_called_once()
    assert source.connection is None
