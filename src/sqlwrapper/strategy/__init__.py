"""
Dialect strategy lookup.

Strategies register themselves by dialect name with `register_strategy`;
importing this package registers the PostgreSQL and MySQL strategies.
Connections are mapped to a strategy by their detected dialect.
"""
from functools import lru_cache
from typing import Any

from sqlwrapper.strategy.base import _STRATEGY_REGISTRY
from sqlwrapper.strategy.base import DatabaseStrategy as DatabaseStrategy
from sqlwrapper.strategy.base import register_strategy as register_strategy
from sqlwrapper.strategy.mysql import MySQLStrategy as MySQLStrategy
from sqlwrapper.strategy.postgres import PostgresStrategy as PostgresStrategy
from sqlwrapper.utils import get_dialect_name


def get_available_dialects() -> list[str]:
    return sorted(_STRATEGY_REGISTRY)


def get_strategy_class(dialect: str) -> type[DatabaseStrategy]:
    """Get the strategy class registered for a dialect.

    Raises
        ValueError: If no strategy is registered under that name
    """
    try:
        return _STRATEGY_REGISTRY[dialect]
    except KeyError:
        raise ValueError(f'Unsupported dialect: {dialect}. '
                         f'Available: {get_available_dialects()}') from None


@lru_cache(maxsize=8)
def get_strategy(dialect: str) -> DatabaseStrategy:
    """Get the shared strategy instance for a dialect name."""
    return get_strategy_class(dialect)()


def strategy_for(cn: Any, dialect: str | None = None) -> DatabaseStrategy:
    """Get the strategy for a connection.

    Args:
        cn: ConnectionWrapper, SQLAlchemy connection or engine, or a raw
            driver connection
        dialect: Dialect name overriding detection

    Raises
        AttributeError: If the dialect cannot be detected from the connection
        ValueError: If the dialect has no registered strategy
    """
    return get_strategy(dialect or get_dialect_name(cn))
