"""
Catalog introspection.

Thin entry points over the dialect strategy's catalog queries. The dialect is
detected from the connection unless given.
"""
import logging
from typing import Any

from sqlwrapper.strategy import strategy_for
from sqlwrapper.types import ColumnInfo, TableInfo

logger = logging.getLogger(__name__)


def query_columns(cn: Any, table: str, dialect: str | None = None) -> list[ColumnInfo]:
    """Get the columns of a table in ordinal position order.

    Args:
        cn: SQLAlchemy connection or ConnectionWrapper
        table: Table name, optionally schema-qualified
        dialect: Dialect name, detected from the connection by default

    Returns
        list: ColumnInfo per column; empty when the table does not exist

    Raises
        ConnectionFailure: If the catalog query fails at the driver level
    """
    return strategy_for(cn, dialect).get_columns(cn, table)


def query_tables(cn: Any, schema: str | None = None,
                 dialect: str | None = None) -> list[TableInfo]:
    """List the tables of a schema (the connection's current one by default).
    """
    tables = strategy_for(cn, dialect).get_tables(cn, schema)
    logger.debug(f'Found {len(tables)} tables')
    return tables
