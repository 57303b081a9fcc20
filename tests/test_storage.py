"""Tests for file storage."""
import gzip

import pytest

from xml2sql.core.exceptions import StorageError
from xml2sql.infrastructure.storage import SQLStorage, compressed_path, split_statements

@pytest.fixture
def storage():
    return SQLStorage()

def test_document_round_trip(tmp_path, storage):
    path = storage.write_document('<dump/>\n', tmp_path / 'sub' / 'dump.xml')

    assert path == tmp_path / 'sub' / 'dump.xml'
    assert storage.read_document(path) == '<dump/>\n'

def test_document_from_lines(tmp_path, storage):
    path = storage.write_document(['<dump>', '</dump>'], tmp_path / 'dump.xml')
    assert path.read_text(encoding='utf-8') == '<dump>\n</dump>\n'

def test_compressed_document(tmp_path, storage):
    path = storage.write_document('<dump/>', tmp_path / 'dump.xml', compression=True)

    assert path == tmp_path / 'dump.xml.gz'
    with gzip.open(path, 'rt', encoding='utf-8') as f:
        assert f.read() == '<dump/>'
    assert storage.read_document(path) == '<dump/>'

def test_read_missing_document(tmp_path, storage):
    with pytest.raises(StorageError):
        storage.read_document(tmp_path / 'missing.xml')

def test_failed_write_leaves_no_file(tmp_path, storage):
    target = tmp_path / 'dump.xml'

    with pytest.raises(RuntimeError):
        with storage.open_for_writing(target) as stream:
            stream.write('<dump>')
            raise RuntimeError('source went away')

    assert list(tmp_path.iterdir()) == []

def test_failed_write_keeps_previous_file(tmp_path, storage):
    target = tmp_path / 'dump.xml'
    target.write_text('old', encoding='utf-8')

    with pytest.raises(RuntimeError):
        with storage.open_for_writing(target) as stream:
            stream.write('new')
            raise RuntimeError('interrupted')

    assert target.read_text(encoding='utf-8') == 'old'

def test_write_sql(tmp_path, storage):
    path = storage.write_sql(["INSERT INTO t VALUES (1);\n", "INSERT INTO t VALUES (2);"], tmp_path / 'out.sql')
    assert path.read_text(encoding='utf-8') == "INSERT INTO t VALUES (1);\nINSERT INTO t VALUES (2);\n"

def test_write_sql_pretty(tmp_path, storage):
    path = storage.write_sql(["select id, name from t where id = 1;"], tmp_path / 'out.sql', pretty=True)
    content = path.read_text(encoding='utf-8')

    assert content.startswith('SELECT id,')
    assert '\nFROM t\n' in content
    assert content.endswith(';\n')

def test_write_sql_compressed(tmp_path, storage):
    path = storage.write_sql(["DELETE FROM t;"], tmp_path / 'out.sql', compression=True)

    assert path.name == 'out.sql.gz'
    with gzip.open(path, 'rt', encoding='utf-8') as f:
        assert f.read() == "DELETE FROM t;\n"

def test_split_statements():
    sql = "CREATE TABLE t (\n  a int\n);\nINSERT INTO t (a) VALUES ('x;y');\n\n"
    assert split_statements(sql) == ["CREATE TABLE t (\n  a int\n);", "INSERT INTO t (a) VALUES ('x;y');"]

def test_compressed_path(tmp_path):
    assert compressed_path(tmp_path / 'a.xml', False) == tmp_path / 'a.xml'
    assert compressed_path(tmp_path / 'a.xml', True) == tmp_path / 'a.xml.gz'
    assert compressed_path(tmp_path / 'a.xml.gz', True) == tmp_path / 'a.xml.gz'
