"""
Data model shared by introspection and generation.

- ColumnInfo: one catalog column, in ordinal position order
- TableInfo: one entry of the table listing
- StructInfo: the result of generating a module for one table
"""
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Self

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {'yes', 'y', 'true', 't', '1'}


def _as_bool(value: Any) -> bool:
    """Interpret catalog flags such as 'YES'/'NO' as booleans."""
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


@dataclass(frozen=True, slots=True)
class ColumnInfo:
    """Catalog metadata for a single column.
    """
    column_name: str
    table_name: str
    schema_name: str
    udt_name: str
    is_nullable: bool

    def __post_init__(self):
        if not self.column_name:
            raise ValueError('column_name cannot be empty')

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        """Create a ColumnInfo from an introspection row.

        Args:
            row: Mapping with column_name, table_name, schema_name, udt_name
                and is_nullable keys

        Returns
            ColumnInfo instance
        """
        return cls(
            column_name=row['column_name'],
            table_name=row['table_name'],
            schema_name=row.get('schema_name') or '',
            udt_name=row['udt_name'],
            is_nullable=_as_bool(row['is_nullable']),
        )


@dataclass(frozen=True, slots=True)
class TableInfo:
    """Entry of the table listing.
    """
    table_name: str
    is_view: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Self:
        return cls(table_name=row['table_name'], is_view=_as_bool(row.get('is_view', False)))


@dataclass(frozen=True)
class StructInfo:
    """Generated module for one table.

    `content` is the full module text; `user_types` maps each udt name that
    was resolved through the override table to (udt name, expression).
    """
    struct_name: str
    content: str
    user_types: dict[str, tuple[str, str]] = field(default_factory=dict)
    columns: tuple[ColumnInfo, ...] = ()
