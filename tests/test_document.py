"""Tests for the XML dump serializer."""
import pytest

from xml2sql.core.exceptions import InvalidInputError, MalformedDocumentError
from xml2sql.domain.models import ColumnDescriptor, Document, KeyDescriptor, Row, TableData, TableStructure
from xml2sql.services import document as xml

def test_round_trip(t_document, users_structure):
    document = Document(database_name='joomla', entries=list(t_document.entries) + [users_structure])
    assert xml.decode(xml.encode(document)) == document

def test_encoded_layout(t_document):
    text = xml.encode(t_document)

    assert text.startswith('<?xml version="1.0"?>\n<dump xmlns:xsi=')
    assert '<table_structure name="t">' in text
    assert '<field Field="id" Type="int" Null="NO" Key="PRI" Extra="auto_increment" Comment="" />' in text
    assert '<key Table="t" Non_unique="0" Key_name="PRI" Seq_in_index="1" Column_name="id"' in text
    assert '<field name="name">a</field>' in text
    assert '<field name="name" xsi:nil="true" />' in text
    assert text.endswith(' </database>\n</dump>\n')

def test_default_absent_and_empty_are_distinct():
    structure = TableStructure(name='t', columns=[
        ColumnDescriptor('a', 'varchar(10)'),
        ColumnDescriptor('b', 'varchar(10)', default=''),
    ])
    text = xml.encode(Document(entries=[structure]))

    assert 'Field="a" Type="varchar(10)" Null="YES" Key="" Extra=' in text
    assert 'Field="b" Type="varchar(10)" Null="YES" Key="" Default="" Extra=' in text

    columns = xml.decode(text).entries[0].columns
    assert columns[0].default is None
    assert columns[1].default == ''

def test_null_and_empty_string_values_are_distinct():
    data = TableData(name='t', rows=[Row((('a', None), ('b', '')))])
    decoded = xml.decode(xml.encode(Document(entries=[data])))
    assert decoded.entries[0].rows[0].as_dict() == {'a': None, 'b': ''}

def test_markup_characters_are_escaped():
    value = '<b>"Tom" & \'Jerry\'</b>\nline two\ttab'
    structure = TableStructure(name='t', columns=[ColumnDescriptor('a', 'text', comment=value)])
    data = TableData(name='t', rows=[Row((('a', value),))])
    document = Document(entries=[structure, data])

    text = xml.encode(document)

    assert '<b>' not in text
    assert '&lt;b&gt;' in text
    assert '&amp;' in text
    assert xml.decode(text) == document

def test_control_characters_in_values_survive_as_base64():
    data = TableData(name='t', rows=[
        Row((('a', 'x\x01y'), ('b', 'nul\x00byte'), ('c', 'plain'), ('d', '\x1b[0m\r\n'))),
    ])
    document = Document(entries=[data])

    text = xml.encode(document)

    assert '<field name="a" encoding="base64">eAF5</field>' in text
    assert '<field name="c">plain</field>' in text
    assert '\x00' not in text and '\x01' not in text
    assert xml.decode(text) == document

def test_control_characters_in_attributes_rejected():
    structure = TableStructure(name='t', columns=[ColumnDescriptor('a', 'text', comment='bell\x07')])

    with pytest.raises(InvalidInputError):
        xml.encode(Document(entries=[structure]))
    with pytest.raises(InvalidInputError):
        xml.encode(Document(entries=[TableData(name='t', rows=[Row((('a\x00', '1'),))])]))

def test_empty_document():
    document = Document()
    assert xml.decode(xml.encode(document)) == document

def test_mysqldump_output_is_accepted():
    text = """<?xml version="1.0"?>
<mysqldump xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">
<database name="joomla">
  <table_structure name="jos_users">
    <field Field="id" Type="int(11)" Null="NO" Key="PRI" Extra="auto_increment" Comment="" />
    <key Table="jos_users" Non_unique="0" Key_name="PRIMARY" Seq_in_index="1" Column_name="id" Collation="A" Cardinality="2" Null="" Index_type="BTREE" Comment="" Index_comment="" />
    <options Name="jos_users" Engine="InnoDB" Rows="2" />
  </table_structure>
  <table_data name="jos_users">
    <row>
      <field name="id">1</field>
    </row>
  </table_data>
</database>
</mysqldump>
"""
    document = xml.decode(text)

    assert document.database_name == 'joomla'
    structure, data = document.entries
    assert structure.keys == (KeyDescriptor('jos_users', False, 'PRIMARY', 1, 'id', 'A', False, 'BTREE', ''),)
    assert data.rows[0].as_dict() == {'id': '1'}

@pytest.mark.parametrize('text', [
    '<dump></dump>',
    '<dump><database name=""/><database name=""/></dump>',
    '<dump><database name=""/><extra/></dump>',
    '<other><database name=""/></other>',
    '<dump><database name=""><view name="v"/></database></dump>',
    '<dump><database name=""><table_structure/></database></dump>',
    '<dump><database name=""><table_structure name="t"><field Field="a" Type="int" Null="maybe"/>'
    '</table_structure></database></dump>',
    '<dump><database name=""><table_structure name="t"><key Table="t" Non_unique="0" Key_name="k" '
    'Seq_in_index="0" Column_name="a"/></table_structure></database></dump>',
    '<dump><database name=""><table_data name="t"><field name="a">1</field></table_data></database></dump>',
    '<dump><database name="">',
    'not xml at all',
    '<dump><database name=""><table_data name="t"><row><field name="a" encoding="base64">@@@</field>'
    '</row></table_data></database></dump>',
    '<dump><database name=""><table_data name="t"><row><field name="a" encoding="rot13">n</field>'
    '</row></table_data></database></dump>',
])
def test_malformed_documents_rejected(text):
    with pytest.raises(MalformedDocumentError):
        xml.decode(text)

def test_non_text_input_rejected():
    with pytest.raises(MalformedDocumentError):
        xml.decode(None)
