"""
Base strategy interface for dialect-specific generation concerns.

Everything about ordering, escaping, wrapping and templating is shared code in
sqlwrapper.statements and sqlwrapper.adapters.type_mapping. A strategy only
owns what differs between catalogs:

- the built-in type vocabulary (type_map, null_suppressed_types, array_marker)
- the string literal quoting imported by generated modules
- the returning-identifier mechanism of generated insert functions
- the catalog queries, including whether the table listing reports views

Default method bodies implement the common behavior; concrete strategies
override only what their dialect does differently.
"""
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa

from sqlwrapper.exceptions import ConnectionFailure, DbConnectionError
from sqlwrapper.types import ColumnInfo, TableInfo

if TYPE_CHECKING:
    from sqlwrapper.options import DatabaseOptions

logger = logging.getLogger(__name__)

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['DatabaseStrategy']] = {}

INDENT = '    '


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(DatabaseStrategy):
            ...
    """
    def decorator(cls: type['DatabaseStrategy']) -> type['DatabaseStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


def split_table_name(table: str) -> tuple[str | None, str]:
    """Split 'schema.table' into (schema, table); schema is None when absent."""
    schema, sep, name = table.rpartition('.')
    if not sep:
        return None, table
    return schema.strip('"`') or None, name.strip('"`')


class DatabaseStrategy(ABC):
    """Base class for dialect-specific behavior.
    """

    # Uppercased raw type name -> Python type expression
    type_map: Mapping[str, str] = MappingProxyType({})

    # Types whose own representation encodes absence; never Optional-wrapped
    null_suppressed_types: frozenset[str] = frozenset()

    # Prefix marking an array of the remaining type name, None if unsupported
    array_marker: str | None = None

    # Whether the table listing distinguishes views from base tables
    reports_views: bool = False

    # Runtime function generated modules import as `quote`
    quote_function: str = 'quote'

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'mysql')."""

    @property
    @abstractmethod
    def drivername(self) -> str:
        """Return the SQLAlchemy driver name (e.g., 'postgresql+psycopg')."""

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of required option field names for this dialect.

        Returns
            List of field names that must have non-None/non-zero values
        """

    @classmethod
    def validate_options(cls, options: 'DatabaseOptions') -> None:
        """Validate options for this dialect.

        Args:
            options: DatabaseOptions to validate

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for this dialect.
        """
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        return sa.URL.create(
            drivername=self.drivername,
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query,
        )

    # Catalog queries

    @abstractmethod
    def columns_sql(self) -> str:
        """Return the column introspection query.

        The query takes :table and :schema parameters and yields column_name,
        table_name, schema_name, udt_name and is_nullable ordered by ordinal
        position.
        """

    @abstractmethod
    def tables_sql(self) -> str:
        """Return the table listing query.

        The query takes a :schema parameter and yields table_name and, when
        reports_views is set, is_view.
        """

    def _select_raw(self, cn: Any, sql: str, params: dict | None = None) -> list[dict]:
        """Execute a catalog query and return rows as dicts.

        Driver errors are surfaced as ConnectionFailure.
        """
        try:
            result = cn.execute(sa.text(sql), params or {})
            return [dict(row) for row in result.mappings().all()]
        except DbConnectionError as err:
            raise ConnectionFailure(str(err)) from err

    def get_columns(self, cn: Any, table: str) -> list[ColumnInfo]:
        """Get catalog metadata for every column of a table.

        Args:
            cn: SQLAlchemy connection (or ConnectionWrapper)
            table: Table name, optionally schema-qualified

        Returns
            list: ColumnInfo in ordinal position order, empty if not found
        """
        schema, name = split_table_name(table)
        rows = self._select_raw(cn, self.columns_sql(), {'table': name, 'schema': schema})
        columns = [ColumnInfo.from_row(row) for row in rows]
        logger.debug(f'Introspected {len(columns)} columns for {table=}')
        return columns

    def get_tables(self, cn: Any, schema: str | None = None) -> list[TableInfo]:
        """List tables (and views) in a schema.

        Args:
            cn: SQLAlchemy connection (or ConnectionWrapper)
            schema: Schema to list, by default the connection's current one

        Returns
            list: TableInfo ordered by name
        """
        rows = self._select_raw(cn, self.tables_sql(), {'schema': schema})
        if not self.reports_views:
            return [TableInfo(table_name=row['table_name']) for row in rows]
        return [TableInfo.from_row(row) for row in rows]

    # Returning-identifier mechanism of generated insert functions

    def returning_id_return_type(self, batch: bool) -> str:
        """Return annotation of the generated returning-id function."""
        return 'list[int]' if batch else 'int'

    def emit_returning_id(self, batch: bool) -> list[str]:
        """Emit the statements that finalize a returning-id insert.

        Called after the value list(s) were appended to `sql`. The default
        uses a native RETURNING clause yielding one row per inserted record.

        Args:
            batch: Whether the function inserts a collection `objs`

        Returns
            list: Source lines, indented for a function body
        """
        lines = [f'{INDENT}sql.returning_id()']
        if batch:
            lines.append(f'{INDENT}return list(execute(cn, sql.sql()).scalars().all())')
        else:
            lines.append(f'{INDENT}return execute(cn, sql.sql()).scalar_one()')
        return lines
