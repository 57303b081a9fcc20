"""File storage operations implementation."""
import gzip
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterable, Iterator, List, Union

import sqlparse

from ..core.exceptions import StorageError
from ..core.logging import get_logger
from ..domain.interfaces import StorageInterface

logger = get_logger(__name__)

def split_statements(sql: str) -> List[str]:
    """Split an SQL script into its statements, dropping empty ones."""
    return [statement.strip() for statement in sqlparse.split(sql) if statement.strip()]

def compressed_path(file_path: Path, compression: bool) -> Path:
    """Get the path a file is actually written to."""
    if compression and file_path.suffix != '.gz':
        return file_path.with_suffix(file_path.suffix + '.gz')
    return file_path

class SQLStorage(StorageInterface):
    """Reads and writes dump documents and SQL scripts, optionally gzipped."""

    @contextmanager
    def open_for_writing(self, file_path: Path, compression: bool = False) -> Iterator[IO[str]]:
        """Open a text stream whose content replaces the file only on success.

        Content goes to a temporary file next to the target, which is renamed
        over the target when the block exits normally and removed otherwise.

        Raises:
            StorageError: If the file cannot be created or replaced
        """
        file_path = compressed_path(Path(file_path), compression)

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{file_path.name}.", suffix='.tmp', dir=str(file_path.parent)
            )
            os.close(fd)
        except OSError as e:
            raise StorageError(f"Failed to create {file_path}: {str(e)}")

        try:
            if compression:
                stream = gzip.open(temp_name, 'wt', encoding='utf-8')
            else:
                stream = open(temp_name, 'w', encoding='utf-8', newline='\n')

            with stream:
                yield stream

            os.replace(temp_name, file_path)
            logger.debug(f"Wrote {file_path}")
        except OSError as e:
            raise StorageError(f"Failed to write {file_path}: {str(e)}")
        finally:
            if os.path.exists(temp_name):
                os.remove(temp_name)

    def write_document(
        self,
        content: Union[str, Iterable[str]],
        file_path: Path,
        compression: bool = False
    ) -> Path:
        """Save an XML dump to a file.

        Args:
            content: Document text, or an iterable of lines without newlines
            file_path: Target path, suffixed with .gz when compressed
            compression: Whether to gzip the file

        Returns:
            The path written to
        """
        with self.open_for_writing(file_path, compression) as stream:
            if isinstance(content, str):
                stream.write(content)
            else:
                for line in content:
                    stream.write(f'{line}\n')

        return compressed_path(Path(file_path), compression)

    def read_document(self, file_path: Path, compression: bool = False) -> str:
        """Load an XML dump from a file.

        Files ending in .gz are always read as gzip.

        Raises:
            StorageError: If the file cannot be read
        """
        file_path = Path(file_path)
        try:
            if compression or file_path.suffix == '.gz':
                with gzip.open(file_path, 'rt', encoding='utf-8') as f:
                    return f.read()
            with open(file_path, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read document from {file_path}: {str(e)}")

    def write_sql(
        self,
        statements: Iterable[str],
        file_path: Path,
        compression: bool = False,
        pretty: bool = False
    ) -> Path:
        """Save SQL statements to a file.

        Args:
            statements: Complete statements, each terminated with ;
            file_path: Target path, suffixed with .gz when compressed
            compression: Whether to gzip the file
            pretty: Reindent statements and upper-case keywords with sqlparse

        Returns:
            The path written to
        """
        with self.open_for_writing(file_path, compression) as stream:
            for statement in statements:
                if pretty:
                    statement = sqlparse.format(statement, reindent=True, keyword_case='upper')
                stream.write(statement.rstrip() + '\n')

        return compressed_path(Path(file_path), compression)
