"""
Generator-specific exception classes.
"""
import psycopg
import pymysql
import sqlalchemy as sa


class GeneratorError(Exception):
    """Base class for all sqlwrapper errors.
    """


class ConnectionFailure(GeneratorError):
    """Error establishing a connection or running an introspection query.
    """


class TableNotFoundOrEmpty(GeneratorError):
    """Introspection returned no columns for the table.
    """

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f'Table {table!r} not found or has no columns')


class UnsupportedType(GeneratorError):
    """No built-in mapping and no override exists for a raw column type.
    """

    def __init__(self, raw_type: str, column: str | None = None,
                 table: str | None = None) -> None:
        self.raw_type = raw_type
        self.column = column
        self.table = table
        where = ''
        if column:
            where = f' (column {table}.{column})' if table else f' (column {column})'
        super().__init__(f'Unsupported type: {raw_type}{where}')

    def with_context(self, column: str, table: str | None) -> 'UnsupportedType':
        """Return a copy carrying the column and table that failed to map."""
        return UnsupportedType(self.raw_type, column=column, table=table)


class MalformedOverride(GeneratorError):
    """Type override table contains an invalid or ambiguous entry.
    """

    def __init__(self, key: object, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f'Malformed type override {key!r}: {reason}')


class StringificationError(GeneratorError):
    """Resolved field type has no field_to_string implementation.
    """

    def __init__(self, expression: str, column: str) -> None:
        self.expression = expression
        self.column = column
        super().__init__(f'No stringification for type {expression} (column {column})')


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    pymysql.OperationalError,
    pymysql.InterfaceError,
    sa.exc.OperationalError,
    sa.exc.InterfaceError,
    sa.exc.DBAPIError,
    )
