"""Custom exceptions for the xml2sql tool."""

class InvalidInputError(Exception):
    """Invalid input error."""
    # Raised for malformed exporter configuration or unencodable input
    # e.g., a table set that is neither a string nor a list of strings,
    # or a column comment holding a NUL character
    pass

class PreconditionFailedError(Exception):
    """Precondition error."""
    # Raised when an export is attempted before it can run
    # e.g., no schema source bound, wrong source type, or no tables configured
    pass

class MalformedDocumentError(Exception):
    """Malformed document error."""
    # Raised when decoding a structurally invalid XML dump
    pass

class UnknownFormatError(Exception):
    """Unknown format error."""
    # Raised when a SQL dialect identifier is not registered
    pass

class UnsupportedConstructError(Exception):
    """Unsupported construct error."""
    # Raised when a dialect cannot express a schema feature
    # e.g., a FULLTEXT index for PostgreSQL or a composite auto-increment key for SQLite
    pass

class ConfigError(Exception):
    """Configuration error."""
    # Raised when there are issues with configuration loading or saving
    pass

class DatabaseError(Exception):
    """Database operation error."""
    # Wraps underlying database adapter exceptions with contextual information
    pass

class StorageError(Exception):
    """Storage operation error."""
    # Raised when reading or writing dump and SQL files fails
    pass
