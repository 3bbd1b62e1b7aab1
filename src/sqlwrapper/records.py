"""
Record declaration synthesis (the generated struct).

Emits a dataclass whose fields follow the catalog column order exactly:

    @dataclasses.dataclass
    class User(Record):
        \"\"\"Row of table users.\"\"\"
        id: int
        class_: Optional[str]
"""
import logging
from collections.abc import Sequence

from sqlwrapper.adapters.type_mapping import get_resolver
from sqlwrapper.config.type_mapping import TypeOverrides
from sqlwrapper.naming import field_symbols, struct_name
from sqlwrapper.strategy.base import INDENT, split_table_name
from sqlwrapper.types import ColumnInfo

logger = logging.getLogger(__name__)

# Base classes every generated record carries
BASE_MARKERS: tuple[str, ...] = ('Record',)


def synthesize_struct(table: str, columns: Sequence[ColumnInfo],
                      extra_markers: Sequence[str] = (),
                      extra_annotations: Sequence[str] = (),
                      overrides: TypeOverrides | dict | None = None,
                      dialect: str = 'postgresql') -> str:
    """Generate the dataclass declaration for a table.

    Args:
        table: Table name, optionally schema-qualified
        columns: Columns in ordinal position order
        extra_markers: Base classes appended after the default Record base
        extra_annotations: Lines emitted verbatim before the declaration,
            typically decorators
        overrides: Optional type override table
        dialect: Dialect name ('postgresql', 'mysql')

    Returns
        str: Declaration text

    Raises
        UnsupportedType: If a column type cannot be resolved
    """
    resolver = get_resolver(dialect)
    _, name = split_table_name(table)

    lines = [*extra_annotations]
    lines.append('@dataclasses.dataclass')
    bases = ', '.join([*BASE_MARKERS, *extra_markers])
    lines.append(f'class {struct_name(name)}({bases}):')
    lines.append(f'{INDENT}"""Row of table {name}."""')
    symbols = field_symbols([column.column_name for column in columns])
    for column, symbol in zip(columns, symbols):
        resolved = resolver.resolve_column(column, overrides)
        lines.append(f'{INDENT}{symbol}: {resolved.expression}')

    content = '\n'.join(lines) + '\n\n\n'
    logger.debug(f'Generated struct for {table}:\n{content}')
    return content


def collect_user_types(columns: Sequence[ColumnInfo],
                       overrides: TypeOverrides | dict | None = None,
                       dialect: str = 'postgresql') -> dict[str, tuple[str, str]]:
    """Map each udt name resolved through the override table to its expression.

    Returns
        dict: udt name -> (udt name, resolved expression)
    """
    resolver = get_resolver(dialect)
    user_types = {}
    for column in columns:
        resolved = resolver.resolve_column(column, overrides)
        if resolved.from_override:
            user_types[column.udt_name] = (column.udt_name, resolved.expression)
    return user_types
