"""XML encoding and decoding of dump documents.

The wire format follows the layout of ``mysqldump --xml``::

    <dump xmlns:xsi="...">
     <database name="">
      <table_structure name="#__users">
       <field Field="id" Type="int(11)" Null="NO" Key="PRI" Extra="auto_increment" Comment="" />
       <key Table="#__users" Non_unique="0" Key_name="PRIMARY" Seq_in_index="1" ... />
      </table_structure>
      <table_data name="#__users">
        <row>
          <field name="id">1</field>
        </row>
      </table_data>
     </database>
    </dump>

Encoding works line by line so the exporter can stream rows straight
to a file without holding a whole table in memory. Row values holding
characters XML 1.0 cannot carry are written as
``<field name="x" encoding="base64">...</field>``; such characters in
names, types or comments make encoding fail instead.
"""
import base64
import binascii
import re
from typing import Iterator, List, Union
from xml.etree import ElementTree as ET
from xml.sax.saxutils import escape

from xml2sql.core.exceptions import InvalidInputError, MalformedDocumentError
from xml2sql.core.logging import get_logger
from xml2sql.domain.models import (
    ColumnDescriptor,
    Document,
    KeyDescriptor,
    Row,
    TableData,
    TableStructure
)

logger = get_logger(__name__)

XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
XSI_NIL = f"{{{XSI_NAMESPACE}}}nil"

ROOT_TAGS = ("dump", "mysqldump")

# Newlines and tabs must survive attribute-value normalization
_ATTRIBUTE_ENTITIES = {'"': '&quot;', '\n': '&#10;', '\r': '&#13;', '\t': '&#9;'}
_TEXT_ENTITIES = {'\r': '&#13;'}

# Characters outside the XML 1.0 Char production, e.g. NUL and most C0 controls
_XML_ILLEGAL = re.compile('[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]')

# Row values XML cannot carry are stored as base64 of their UTF-8 bytes
BASE64 = "base64"

def is_xml_safe(value: str) -> bool:
    return _XML_ILLEGAL.search(value) is None

def escape_attribute(value: str) -> str:
    """Escape an attribute value.

    Raises:
        InvalidInputError: If the value holds characters XML 1.0 cannot carry
    """
    if not is_xml_safe(value):
        raise InvalidInputError(f"{value!r} contains characters that cannot be written to an XML dump")
    return escape(value, _ATTRIBUTE_ENTITIES)

def escape_text(value: str) -> str:
    return escape(value, _TEXT_ENTITIES)

def xml_header(database_name: str = "") -> List[str]:
    return [
        '<?xml version="1.0"?>',
        f'<dump xmlns:xsi="{XSI_NAMESPACE}">',
        f' <database name="{escape_attribute(database_name)}">',
    ]

def xml_footer() -> List[str]:
    return [' </database>', '</dump>']

def encode_column(column: ColumnDescriptor) -> str:
    default = '' if column.default is None else f' Default="{escape_attribute(column.default)}"'
    return (
        '   <field'
        f' Field="{escape_attribute(column.name)}"'
        f' Type="{escape_attribute(column.type)}"'
        f' Null="{"YES" if column.nullable else "NO"}"'
        f' Key="{escape_attribute(column.key)}"'
        f'{default}'
        f' Extra="{escape_attribute(column.extra)}"'
        f' Comment="{escape_attribute(column.comment)}"'
        ' />'
    )

def encode_key(key: KeyDescriptor) -> str:
    return (
        '   <key'
        f' Table="{escape_attribute(key.table)}"'
        f' Non_unique="{1 if key.non_unique else 0}"'
        f' Key_name="{escape_attribute(key.key_name)}"'
        f' Seq_in_index="{key.seq_in_index}"'
        f' Column_name="{escape_attribute(key.column_name)}"'
        f' Collation="{escape_attribute(key.collation)}"'
        f' Null="{"YES" if key.nullable else ""}"'
        f' Index_type="{escape_attribute(key.index_type)}"'
        f' Comment="{escape_attribute(key.comment)}"'
        ' />'
    )

def encode_structure_lines(structure: TableStructure) -> List[str]:
    lines = [f'  <table_structure name="{escape_attribute(structure.name)}">']
    lines.extend(encode_column(column) for column in structure.columns)
    lines.extend(encode_key(key) for key in structure.keys)
    lines.append('  </table_structure>')
    return lines

def open_table_data(name: str) -> str:
    return f'  <table_data name="{escape_attribute(name)}">'

def close_table_data() -> str:
    return '  </table_data>'

def encode_row_lines(row: Row) -> List[str]:
    lines = ['    <row>']
    for name, value in row.fields:
        if value is None:
            lines.append(f'      <field name="{escape_attribute(name)}" xsi:nil="true" />')
        elif not is_xml_safe(value):
            encoded = base64.b64encode(value.encode('utf-8', 'surrogatepass')).decode('ascii')
            lines.append(f'      <field name="{escape_attribute(name)}" encoding="{BASE64}">{encoded}</field>')
        else:
            lines.append(f'      <field name="{escape_attribute(name)}">{escape_text(value)}</field>')
    lines.append('    </row>')
    return lines

def iter_encode(document: Document) -> Iterator[str]:
    """Yield the lines of the XML representation of a document."""
    yield from xml_header(document.database_name)

    for entry in document.entries:
        if isinstance(entry, TableStructure):
            yield from encode_structure_lines(entry)
        else:
            yield open_table_data(entry.name)
            for row in entry.rows:
                yield from encode_row_lines(row)
            yield close_table_data()

    yield from xml_footer()

def encode(document: Document) -> str:
    """Encode a document as XML text."""
    return ''.join(f'{line}\n' for line in iter_encode(document))

def decode(text: Union[str, bytes]) -> Document:
    """Decode XML text into a document.

    Args:
        text: XML produced by encode() or by ``mysqldump --xml``

    Returns:
        The decoded document

    Raises:
        MalformedDocumentError: If the text is not a well-formed dump
    """
    if not isinstance(text, (str, bytes)):
        raise MalformedDocumentError(f"Expected XML text, got {type(text).__name__}")

    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise MalformedDocumentError(f"Invalid XML: {str(e)}")

    if root.tag not in ROOT_TAGS:
        raise MalformedDocumentError(f"Unexpected root element <{root.tag}>")

    databases = [child for child in root if child.tag == 'database']
    if len(databases) != 1:
        raise MalformedDocumentError(
            f"A dump must contain exactly one <database> element, found {len(databases)}"
        )
    if len(root) != 1:
        raise MalformedDocumentError(f"Unexpected element next to <database> in <{root.tag}>")

    database = databases[0]
    entries = []
    for element in database:
        if element.tag == 'table_structure':
            entries.append(_decode_structure(element))
        elif element.tag == 'table_data':
            entries.append(_decode_data(element))
        else:
            raise MalformedDocumentError(f"Unexpected element <{element.tag}> in <database>")

    document = Document(database_name=database.get('name', ''), entries=entries)
    logger.debug(f"Decoded dump with {len(document.structures)} structure and {len(document.data)} data entries")
    return document

def _required(element: ET.Element, attribute: str) -> str:
    value = element.get(attribute)
    if value is None:
        raise MalformedDocumentError(f"<{element.tag}> is missing the {attribute} attribute")
    return value

def _decode_structure(element: ET.Element) -> TableStructure:
    name = _required(element, 'name')
    columns = []
    keys = []

    for child in element:
        if child.tag == 'field':
            columns.append(_decode_column(child))
        elif child.tag == 'key':
            keys.append(_decode_key(child))
        elif child.tag == 'options':
            # Table options written by mysqldump carry nothing we can regenerate
            continue
        else:
            raise MalformedDocumentError(f"Unexpected element <{child.tag}> in table_structure {name}")

    return TableStructure(name=name, columns=columns, keys=keys)

def _decode_column(element: ET.Element) -> ColumnDescriptor:
    null = _required(element, 'Null')
    if null not in ('YES', 'NO'):
        raise MalformedDocumentError(f"Invalid Null value {null!r} for field {element.get('Field')}")

    return ColumnDescriptor(
        name=_required(element, 'Field'),
        type=_required(element, 'Type'),
        nullable=null == 'YES',
        key=element.get('Key', ''),
        default=element.get('Default'),
        extra=element.get('Extra', ''),
        comment=element.get('Comment', '')
    )

def _decode_key(element: ET.Element) -> KeyDescriptor:
    non_unique = _required(element, 'Non_unique')
    if non_unique not in ('0', '1'):
        raise MalformedDocumentError(f"Invalid Non_unique value {non_unique!r}")

    seq = _required(element, 'Seq_in_index')
    try:
        seq_in_index = int(seq)
    except ValueError:
        raise MalformedDocumentError(f"Invalid Seq_in_index value {seq!r}")
    if seq_in_index < 1:
        raise MalformedDocumentError(f"Seq_in_index must be positive, got {seq_in_index}")

    return KeyDescriptor(
        table=element.get('Table', ''),
        non_unique=non_unique == '1',
        key_name=_required(element, 'Key_name'),
        seq_in_index=seq_in_index,
        column_name=_required(element, 'Column_name'),
        collation=element.get('Collation', ''),
        nullable=element.get('Null', '') == 'YES',
        index_type=element.get('Index_type', ''),
        comment=element.get('Comment', '')
    )

def _decode_data(element: ET.Element) -> TableData:
    name = _required(element, 'name')
    rows = []

    for row in element:
        if row.tag != 'row':
            raise MalformedDocumentError(f"Unexpected element <{row.tag}> in table_data {name}")
        rows.append(Row(tuple(_decode_value(field) for field in row)))

    return TableData(name=name, rows=rows)

def _decode_value(element: ET.Element) -> tuple:
    if element.tag != 'field':
        raise MalformedDocumentError(f"Unexpected element <{element.tag}> in row")
    if len(element):
        raise MalformedDocumentError(f"Field {element.get('name')} must not contain elements")

    name = _required(element, 'name')
    if element.get(XSI_NIL) == 'true':
        return name, None

    encoding = element.get('encoding')
    if encoding is None:
        return name, element.text or ''
    if encoding != BASE64:
        raise MalformedDocumentError(f"Unknown encoding {encoding!r} for field {name}")

    try:
        return name, base64.b64decode(element.text or '', validate=True).decode('utf-8', 'surrogatepass')
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedDocumentError(f"Invalid base64 value for field {name}: {str(e)}")
