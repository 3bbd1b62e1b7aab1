"""
Generator façade: one module of Python source per table.

A generated module is the concatenation, in this order, of

    header                       module docstring and imports
    struct                       the record dataclass
    insert_returning_id
    insert
    batch_insert_returning_id
    batch_insert
    select_sql
    select_by_id
    delete_by_id

Sections with nothing to emit contribute no text.

Empty tables are handled differently by the two entry points:
`generate_module` raises TableNotFoundOrEmpty, while `generate_file` logs a
warning and writes nothing. Concurrent `generate_file` calls targeting the
same path are not coordinated.
"""
import logging
import pathlib
from collections.abc import Sequence
from functools import lru_cache
from typing import Any

from sqlwrapper.config.type_mapping import TypeOverrides
from sqlwrapper.exceptions import TableNotFoundOrEmpty
from sqlwrapper.records import collect_user_types, synthesize_struct
from sqlwrapper.statements import StatementTemplates
from sqlwrapper.strategy import DatabaseStrategy, get_strategy, strategy_for
from sqlwrapper.strategy.base import split_table_name
from sqlwrapper.types import ColumnInfo, StructInfo, TableInfo

logger = logging.getLogger(__name__)

__all__ = [
    'Generator',
    'get_generator',
    'get_generator_for',
    'generate_module',
    'generate_file',
    'list_tables',
    'render_header',
]

RUNTIME_IMPORTS = (
    'Json',
    'Record',
    'SqlBuilder',
    'execute',
    'field_to_string',
    'json_to_string',
    'unwrap',
)


def render_header(table: str, quote_function: str = 'quote') -> str:
    """Module docstring and imports of a generated module.

    Statement bodies call `quote`; the dialect's quoting function is bound to
    that name here.
    """
    quote = 'quote' if quote_function == 'quote' else f'{quote_function} as quote'
    names = ', '.join([*RUNTIME_IMPORTS, quote])
    lines = [
        f'"""Generated record and statements for table {table}."""',
        'from __future__ import annotations',
        '',
        'import dataclasses',
        'import datetime',
        'import decimal',
        'import uuid',
        'from typing import Any, Optional',
        '',
        'import sqlalchemy as sa',
        f'from sqlwrapper.runtime import {names}',
    ]
    return '\n'.join(lines) + '\n\n\n'


class Generator:
    """Generates table modules for one dialect.
    """

    def __init__(self, strategy: DatabaseStrategy) -> None:
        self.strategy = strategy

    @property
    def dialect(self) -> str:
        return self.strategy.dialect_name

    def render(self, table: str, columns: Sequence[ColumnInfo],
               extra_markers: Sequence[str] = (),
               extra_annotations: Sequence[str] = (),
               overrides: TypeOverrides | dict | None = None) -> StructInfo:
        """Render a module from already introspected columns.

        Performs no I/O.

        Raises
            TableNotFoundOrEmpty: If columns is empty
            UnsupportedType: If a column type cannot be resolved
            StringificationError: If an inserted column type has no stringifier
        """
        if not columns:
            raise TableNotFoundOrEmpty(table)
        overrides = TypeOverrides.from_mapping(overrides)

        struct = synthesize_struct(table, columns, extra_markers, extra_annotations,
                                   overrides, self.dialect)
        templates = StatementTemplates(table, columns, self.strategy, overrides)
        header = render_header(table, self.strategy.quote_function)
        sections = [header, struct, *templates.all_statements()]
        content = ''.join(sections)

        logger.debug(f'Generated {len(content)} characters for {table}')
        return StructInfo(
            struct_name=templates.struct_name,
            content=content,
            user_types=collect_user_types(columns, overrides, self.dialect),
            columns=tuple(columns),
        )

    def generate_module(self, cn: Any, table: str,
                        extra_markers: Sequence[str] = (),
                        extra_annotations: Sequence[str] = (),
                        overrides: TypeOverrides | dict | None = None) -> StructInfo:
        """Introspect a table and generate its module text.

        Args:
            cn: SQLAlchemy connection or ConnectionWrapper
            table: Table name, optionally schema-qualified
            extra_markers: Extra base classes of the record
            extra_annotations: Lines emitted verbatim before the record
            overrides: Optional type override table

        Returns
            StructInfo with the struct name and module text

        Raises
            TableNotFoundOrEmpty: If the table has no columns (or does not exist)
        """
        columns = self.strategy.get_columns(cn, table)
        return self.render(table, columns, extra_markers, extra_annotations, overrides)

    def generate_file(self, cn: Any, table: str,
                      output_dir: str | pathlib.Path = '.',
                      overrides: TypeOverrides | dict | None = None) -> pathlib.Path | None:
        """Generate a table module and write it to `<output_dir>/<table>.py`.

        An existing file is overwritten. A table without columns is not an
        error here: a warning is logged and nothing is written.

        Returns
            Path of the written file, or None when nothing was written
        """
        columns = self.strategy.get_columns(cn, table)
        if not columns:
            logger.warning(f'Table {table} not found or has no columns, nothing written')
            return None

        info = self.render(table, columns, overrides=overrides)
        _, name = split_table_name(table)
        path = pathlib.Path(output_dir) / f'{name}.py'
        path.write_text(info.content)
        logger.info(f'Wrote {info.struct_name} module to {path}')
        return path

    def list_tables(self, cn: Any, schema: str | None = None) -> list[TableInfo]:
        return self.strategy.get_tables(cn, schema)


@lru_cache(maxsize=8)
def get_generator(dialect: str) -> Generator:
    """Get the generator for a dialect name."""
    return Generator(get_strategy(dialect))


def get_generator_for(cn: Any) -> Generator:
    """Get the generator matching a connection's dialect."""
    return Generator(strategy_for(cn))


def generate_module(cn: Any, table: str,
                    extra_markers: Sequence[str] = (),
                    extra_annotations: Sequence[str] = (),
                    overrides: TypeOverrides | dict | None = None) -> StructInfo:
    """Generate the module text for a table.

    Raises TableNotFoundOrEmpty when the table has no columns.
    """
    return get_generator_for(cn).generate_module(cn, table, extra_markers,
                                                 extra_annotations, overrides)


def generate_file(cn: Any, table: str, output_dir: str | pathlib.Path = '.',
                  overrides: TypeOverrides | dict | None = None) -> pathlib.Path | None:
    """Generate a table module and write it to `<output_dir>/<table>.py`.

    Returns None, writing nothing, when the table has no columns.
    """
    return get_generator_for(cn).generate_file(cn, table, output_dir, overrides)


def list_tables(cn: Any, schema: str | None = None) -> list[TableInfo]:
    """List tables of the connection's current schema (or the given one).
    """
    return get_generator_for(cn).list_tables(cn, schema)
