"""Convert service: XML dump to an SQL script."""
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from xml2sql.core.config import DEFAULT_LIVE_PREFIX
from xml2sql.core.logging import get_logger
from xml2sql.domain.interfaces import FormatterInterface, StorageInterface
from xml2sql.domain.models import Document
from xml2sql.formats.factory import get_formatter
from xml2sql.infrastructure.storage import SQLStorage, split_statements
from . import document as xml

logger = get_logger(__name__)

@dataclass
class ConversionResult:
    """Outcome of converting a document to SQL."""
    sql: str
    create_count: int = 0
    truncate_count: int = 0
    insert_count: int = 0  # data entries, not rows
    row_count: int = 0
    statement_count: int = 0
    duration: float = 0.0
    file_path: Optional[str] = None

class Converter:
    """Turns a dump document into one SQL script for a dialect.

    Table definitions come first so every INSERT finds its table. With sample
    data the tables are expected to exist already and are emptied instead.
    """

    def __init__(self, formatter: FormatterInterface):
        self.formatter = formatter

    def convert(self, document: Document, sample_data: bool = False) -> ConversionResult:
        """Convert a document.

        Args:
            document: Decoded dump
            sample_data: Emit truncate statements instead of CREATE TABLE

        Returns:
            The complete script and statement counts

        Raises:
            UnsupportedConstructError: If an entry cannot be expressed in the dialect
        """
        start_time = time.time()
        parts = []
        result = ConversionResult(sql='')

        for structure in document.structures:
            if sample_data:
                parts.append(self.formatter.format_truncate(structure))
                result.truncate_count += 1
            else:
                parts.append(self.formatter.format_create(structure))
                result.create_count += 1

        for data in document.data:
            parts.append(self.formatter.format_insert(data))
            result.insert_count += 1
            result.row_count += len(data.rows)

        result.sql = ''.join(parts)
        result.statement_count = len(split_statements(result.sql))
        result.duration = time.time() - start_time

        logger.info(
            f"Converted {len(document.entries)} entries into {result.statement_count} statements "
            f"in {result.duration:.2f}s"
        )
        return result

def default_output_path(input_path: Path, format_name: str, sample_data: bool = False) -> Path:
    """Name the SQL file for a dump, e.g. xml2sql-created.postgresql.sampledata.sql."""
    input_path = Path(input_path)
    stem = input_path.name
    for suffix in ('.gz', '.xml'):
        if stem.endswith(suffix):
            stem = stem[:-len(suffix)]

    parts = [stem, format_name.lower()]
    if sample_data:
        parts.append('sampledata')
    return input_path.with_name('.'.join(parts) + '.sql')

def convert_file(
    input_path: Path,
    output_path: Optional[Path],
    format_name: str,
    prefix: str = DEFAULT_LIVE_PREFIX,
    sample_data: bool = False,
    pretty: bool = False,
    compression: bool = False,
    storage: Optional[StorageInterface] = None
) -> ConversionResult:
    """Convert an XML dump file into an SQL file.

    The formatter is resolved before the input is read, so an unknown format
    fails without touching any file. The output is only written once the whole
    script has been built. Without an output path the file is named after
    the input, the format and the sample data flag.

    Raises:
        UnknownFormatError: If format_name is not registered
        StorageError: If a file cannot be read or written
        MalformedDocumentError: If the input is not a valid dump
        UnsupportedConstructError: If the dump cannot be expressed in the dialect
    """
    formatter = get_formatter(format_name, prefix=prefix)
    storage = storage or SQLStorage()

    logger.info(f"Converting {input_path} to {format_name}")
    document = xml.decode(storage.read_document(Path(input_path)))

    result = Converter(formatter).convert(document, sample_data=sample_data)
    if not output_path:
        output_path = default_output_path(input_path, format_name, sample_data)

    written = storage.write_sql(
        split_statements(result.sql),
        Path(output_path),
        compression=compression,
        pretty=pretty
    )
    result.file_path = str(written)
    return result
