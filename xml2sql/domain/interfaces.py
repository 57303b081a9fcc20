"""Abstract interfaces for the xml2sql tool."""
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Iterable, Iterator, List, Mapping, Union

from .models import ColumnDescriptor, KeyDescriptor, TableData, TableStructure

class SchemaSourceInterface(ABC):
    """Interface for schema introspection."""

    @abstractmethod
    def list_columns(self, table_name: str) -> List[ColumnDescriptor]:
        """Get the columns of a table in schema order."""
        # Implementation contract: one descriptor per column, ordered as in the table definition
        pass

    @abstractmethod
    def list_keys(self, table_name: str) -> List[KeyDescriptor]:
        """Get the index members of a table."""
        # Implementation contract: one descriptor per (index, column) pair, as SHOW KEYS reports them
        pass

    @abstractmethod
    def stream_rows(self, table_name: str) -> Iterator[Mapping[str, Any]]:
        """Run SELECT * on a table and yield its rows."""
        # Implementation contract: lazy, single-pass iterator of column-ordered mappings
        pass

    @abstractmethod
    def resolve_prefix(self) -> str:
        """Get the configured table prefix."""
        # Implementation contract: return the live prefix, or an empty string when none is used
        pass

class FormatterInterface(ABC):
    """Interface for SQL dialect formatters."""

    @abstractmethod
    def format_create(self, structure: TableStructure) -> str:
        """Format a CREATE TABLE statement."""
        pass

    @abstractmethod
    def format_insert(self, data: TableData) -> str:
        """Format INSERT statements, one per row."""
        pass

    @abstractmethod
    def format_truncate(self, structure: TableStructure) -> str:
        """Format a statement that empties the table."""
        pass

class StorageInterface(ABC):
    """Interface for storage operations."""

    @abstractmethod
    def write_document(
        self,
        content: Union[str, Iterable[str]],
        file_path: Path,
        compression: bool = False
    ) -> Path:
        """Save an XML dump to a file."""
        # Implementation contract: accept full text or an iterable of lines and return the written path
        pass

    @abstractmethod
    def read_document(
        self,
        file_path: Path,
        compression: bool = False
    ) -> str:
        """Load an XML dump from a file."""
        pass

    @abstractmethod
    def write_sql(
        self,
        statements: Iterable[str],
        file_path: Path,
        compression: bool = False,
        pretty: bool = False
    ) -> Path:
        """Save SQL statements to a file."""
        pass
