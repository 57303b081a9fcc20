"""Tests for the command line entry point."""
import logging
from unittest.mock import patch

import pytest

from conftest import FakeSchemaSource, t_table
from xml2sql.main import main
from xml2sql.services import document as xml

class FakeMariaDB(FakeSchemaSource):
    """Stands in for MariaDB(config) in the export command."""

    def __init__(self, config):
        super().__init__({'jos_t': t_table(), 'other': t_table()}, prefix=config.prefix)

    def get_table_names(self, prefixed_only=False):
        return [name for name in self.tables if not prefixed_only or name.startswith(self.prefix)]

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return None

@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('HOME', str(tmp_path))
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level

    yield tmp_path

    # main() binds a handler to the captured stdout of the test
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)

@pytest.fixture
def dump(workdir, t_document):
    path = workdir / 'xml2sql-created.xml'
    path.write_text(xml.encode(t_document), encoding='utf-8')
    return path

def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert 'usage' in capsys.readouterr().out

def test_formats_command(capsys):
    assert main(['formats']) == 0
    output = capsys.readouterr().out
    assert 'postgresql' in output
    assert 'sqlite' in output

def test_convert(workdir, dump):
    assert main(['convert', str(dump), '--format', 'sql', '--output', 'out.sql', '--prefix', 'jos_']) == 0
    assert (workdir / 'out.sql').read_text(encoding='utf-8').startswith('CREATE TABLE t (')

def test_convert_all_formats(workdir, dump):
    assert main(['convert', str(dump), '--all-formats', '--sample-data']) == 0

    for name in ('mysql', 'postgresql', 'sql', 'sqlite'):
        assert (workdir / f'xml2sql-created.{name}.sampledata.sql').exists()

def test_convert_unknown_format(workdir, dump, capsys):
    assert main(['convert', str(dump), '--format', 'doesnotexist']) == 1
    assert 'doesnotexist' in capsys.readouterr().out

def test_convert_malformed_input(workdir):
    (workdir / 'broken.xml').write_text('<dump><database name="">', encoding='utf-8')
    assert main(['convert', 'broken.xml', '--format', 'mysql']) == 1

def test_convert_missing_input(workdir):
    assert main(['convert', 'missing.xml']) == 1
    assert main(['convert']) == 1

def test_bad_config_file(workdir):
    (workdir / 'bad.yaml').write_text('database: [1]\n', encoding='utf-8')
    assert main(['--config', 'bad.yaml', 'formats']) == 1

def test_export(workdir):
    with patch('xml2sql.main.MariaDB', FakeMariaDB):
        code = main(['export', '--prefix', 'jos_', '--with-data', '--output', 'dump.xml'])

    assert code == 0
    document = xml.decode((workdir / 'dump.xml').read_text(encoding='utf-8'))
    assert [entry.name for entry in document.entries] == ['#__t', '#__t']
    assert len(document.data[0].rows) == 2

def test_export_without_tables_fails(workdir):
    with patch('xml2sql.main.MariaDB', FakeMariaDB):
        assert main(['export', '--prefix', 'nomatch_']) == 1
    assert not (workdir / 'xml2sql-created.xml').exists()
