"""
Database connection handling with SQLAlchemy.

This module provides:
1. The `connect()` function for opening a connection from DatabaseOptions
2. The `ConnectionWrapper` class, a thin delegate around a SQLAlchemy
   connection that the generator and generated modules accept directly

Engines use NullPool: each connect() opens exactly one connection, closed
with the wrapper.
"""
import logging
from collections.abc import Callable
from dataclasses import fields
from typing import Any, Self

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool
from sqlwrapper.exceptions import ConnectionFailure, DbConnectionError
from sqlwrapper.options import DatabaseOptions
from sqlwrapper.strategy import get_strategy
from sqlwrapper.utils import get_dialect_name

from libb import load_options

__all__ = [
    'ConnectionWrapper',
    'connect',
    'create_url_from_options',
    'create_engine_for_options',
]

logger = logging.getLogger(__name__)


def create_url_from_options(options: DatabaseOptions) -> sa.URL:
    """Convert DatabaseOptions to SQLAlchemy URL.
    """
    return get_strategy(options.drivername).build_connection_url(options)


def create_engine_for_options(options: DatabaseOptions,
                              engine_factory: Callable[..., Engine] | None = None,
                              **kwargs: Any) -> Engine:
    """Create a non-pooling SQLAlchemy engine for the given options.
    """
    url = create_url_from_options(options)
    engine_kwargs: dict[str, Any] = {'echo': False, 'poolclass': NullPool}
    engine_kwargs.update(kwargs)
    engine = (engine_factory or sa.create_engine)(url, **engine_kwargs)
    logger.debug(f'Created engine for {options.drivername}')
    return engine


class ConnectionWrapper:
    """Wraps a SQLAlchemy connection object

    Attribute access is delegated to the SQLAlchemy connection, so a wrapper
    can be passed anywhere a `sa.Connection` is expected (execute,
    exec_driver_sql). Supports the context manager protocol.
    """

    def __init__(self, sa_connection: sa.engine.Connection,
                 options: DatabaseOptions | None = None) -> None:
        self.sa_connection = sa_connection
        self.engine = sa_connection.engine
        self.options = options
        self._dialect = get_dialect_name(sa_connection)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Commit on success, roll back on error, then close.
        """
        if exc_type is None:
            self.commit()
        else:
            self.sa_connection.rollback()
        self.close()

    def __getattr__(self, name: str) -> Any:
        """Delegate attribute access to the SQLAlchemy connection.
        """
        return getattr(self.sa_connection, name)

    @property
    def dialect(self) -> str:
        """Return the dialect name ('postgresql' or 'mysql')."""
        return self._dialect

    def commit(self) -> None:
        self.sa_connection.commit()

    def close(self) -> None:
        """Close the SQLAlchemy connection and dispose its engine.
        """
        if not self.sa_connection.closed:
            self.sa_connection.close()
            logger.debug('Connection closed')
        self.engine.dispose()


@load_options(cls=DatabaseOptions)
def connect(options: DatabaseOptions | dict[str, Any] | str,
            config: Any | None = None, **kw: Any) -> ConnectionWrapper:
    """Connect to a database using SQLAlchemy for connection management

    Args:
        options: Can be:
                - DatabaseOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        ConnectionWrapper object for connecting to the database

    Raises
        ConnectionFailure: If the driver cannot establish the connection
    """
    if isinstance(options, DatabaseOptions):
        for field in fields(options):
            kw.pop(field.name, None)
    else:
        options_func = load_options(cls=DatabaseOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)

    engine = create_engine_for_options(options)
    try:
        sa_connection = engine.connect()
    except DbConnectionError as err:
        engine.dispose()
        raise ConnectionFailure(f'Could not connect to {options.drivername} '
                                f'database {options.database}: {err}') from err

    logger.debug(f'Connected to {options.drivername} database {options.database}')
    return ConnectionWrapper(sa_connection, options)
