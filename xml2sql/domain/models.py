"""Domain models for the xml2sql intermediate document."""
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

# Placeholder that stands for the live table prefix inside a dump
GENERIC_PREFIX = "#__"

# Key names treated as the primary key
PRIMARY_KEY_NAMES = ("PRIMARY", "PRI")

@dataclass(frozen=True)
class ColumnDescriptor:
    """Column metadata as reported by SHOW FULL COLUMNS."""
    name: str
    type: str
    nullable: bool = True
    key: str = ""  # PRI, UNI, MUL or empty
    default: Optional[str] = None  # None means the column has no default at all
    extra: str = ""  # e.g. auto_increment
    comment: str = ""

    @property
    def is_primary(self) -> bool:
        return self.key.upper() == "PRI"

    @property
    def is_auto_increment(self) -> bool:
        return "auto_increment" in self.extra.lower()

@dataclass(frozen=True)
class KeyDescriptor:
    """One column of one index, as reported by SHOW KEYS."""
    table: str
    non_unique: bool
    key_name: str
    seq_in_index: int  # 1-based position inside a composite key
    column_name: str
    collation: str = "A"
    nullable: bool = False
    index_type: str = "BTREE"
    comment: str = ""

    @property
    def is_primary(self) -> bool:
        return self.key_name.upper() in PRIMARY_KEY_NAMES

@dataclass(frozen=True)
class TableStructure:
    """Structure entry of a dump: the columns and keys of one table."""
    name: str
    columns: Tuple[ColumnDescriptor, ...] = ()
    keys: Tuple[KeyDescriptor, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'columns', tuple(self.columns))
        object.__setattr__(self, 'keys', tuple(self.keys))

    @property
    def primary_key(self) -> List[str]:
        """Column names of the primary key in index order."""
        for key_name, members in group_keys(self.keys):
            if key_name.upper() in PRIMARY_KEY_NAMES:
                return [member.column_name for member in members]
        return []

@dataclass(frozen=True)
class Row:
    """One record of a data entry; an ordered mapping of column name to text."""
    fields: Tuple[Tuple[str, Optional[str]], ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'fields', tuple((name, value) for name, value in self.fields))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Optional[str]]) -> 'Row':
        return cls(tuple(mapping.items()))

    @property
    def columns(self) -> List[str]:
        return [name for name, _ in self.fields]

    @property
    def values(self) -> List[Optional[str]]:
        return [value for _, value in self.fields]

    def as_dict(self) -> Dict[str, Optional[str]]:
        return dict(self.fields)

@dataclass(frozen=True)
class TableData:
    """Data entry of a dump: the rows of one table."""
    name: str
    rows: Tuple[Row, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'rows', tuple(self.rows))

TableEntry = Union[TableStructure, TableData]

@dataclass(frozen=True)
class Document:
    """A complete database dump: an ordered sequence of table entries."""
    database_name: str = ""
    entries: Tuple[TableEntry, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, 'entries', tuple(self.entries))

    @property
    def structures(self) -> List[TableStructure]:
        return [entry for entry in self.entries if isinstance(entry, TableStructure)]

    @property
    def data(self) -> List[TableData]:
        return [entry for entry in self.entries if isinstance(entry, TableData)]

    def structure_for(self, name: str) -> Optional[TableStructure]:
        for entry in self.structures:
            if entry.name == name:
                return entry
        return None

def group_keys(keys: Iterable[KeyDescriptor]) -> List[Tuple[str, List[KeyDescriptor]]]:
    """Group key descriptors into composite keys.

    Groups keep the order in which each key name first appears; the members
    of every group are sorted by their position in the index.

    Args:
        keys: Key descriptors of one table

    Returns:
        List of (key name, members) pairs
    """
    groups: Dict[str, List[KeyDescriptor]] = {}
    for key in keys:
        groups.setdefault(key.key_name, []).append(key)

    return [
        (key_name, sorted(members, key=lambda member: member.seq_in_index))
        for key_name, members in groups.items()
    ]

def to_text(value: Any) -> Optional[str]:
    """Flatten a driver value to the text stored in a dump row.

    None stays None so NULL survives the round trip. Dates use ISO-8601,
    booleans 1/0, bytes are decoded as UTF-8.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return '1' if value else '0'
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode('utf-8', errors='replace')
    if isinstance(value, datetime):
        return value.isoformat(sep=' ')
    if isinstance(value, (date, time)):
        return value.isoformat()
    return str(value)
