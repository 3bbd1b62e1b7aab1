"""
Runtime support imported by generated modules.

Generated insert functions build statement text from pre-quoted text
fragments rather than bind parameters:

    sql = SqlBuilder.insert_into('users')
    sql.field('name')
    sql.values([quote(field_to_string(obj.name))])
    cn.exec_driver_sql(sql.sql())

`field_to_string` is a singledispatch function; register an implementation
for any user-defined type referenced through a type override:

    @field_to_string.register
    def _(value: Mood) -> str:
        return value.value
"""
import dataclasses
import datetime
import decimal
import functools
import json
import logging
import re
import uuid
from typing import Any, Self, TypeAlias

from pymysql.converters import escape_string

logger = logging.getLogger(__name__)

Json: TypeAlias = Any

__all__ = [
    'Json',
    'Record',
    'SqlBuilder',
    'execute',
    'field_to_string',
    'json_to_string',
    'mysql_quote',
    'quote',
    'unwrap',
    'is_stringifiable',
    'stringifier_for',
]


def execute(cn: Any, sql: str) -> Any:
    """Execute finished statement text on a SQLAlchemy connection.

    The text carries its values inline, so the driver must not interpret
    '%' as a parameter placeholder.

    Returns
        CursorResult of the statement
    """
    logger.debug(f'Executing: {sql[:200]}')
    return cn.exec_driver_sql(sql, execution_options={'no_parameters': True})


def quote(text: str) -> str:
    """Quote text as a SQL string literal, doubling embedded quotes."""
    return "'" + text.replace("'", "''") + "'"


def mysql_quote(text: str) -> str:
    """Quote text as a MySQL string literal.

    MySQL reads backslash as an escape character unless NO_BACKSLASH_ESCAPES
    is set, so backslashes and control characters are escaped as well.
    Generated MySQL modules import this as `quote`.
    """
    return "'" + escape_string(text) + "'"


def unwrap(value: Any) -> Any:
    """Return value, failing on None.

    Generated code calls this on every nullable field before stringification.
    Callers must populate nullable fields before inserting.
    """
    if value is None:
        raise ValueError('called unwrap on a None value')
    return value


@functools.singledispatch
def field_to_string(value: Any) -> str:
    """Convert a field value to the text embedded in a statement.
    """
    raise TypeError(f'No field_to_string implementation for {type(value).__name__}')


@field_to_string.register
def _(value: bool) -> str:
    return '1' if value else '0'


@field_to_string.register
def _(value: int) -> str:
    return str(value)


@field_to_string.register
def _(value: float) -> str:
    return repr(value)


@field_to_string.register
def _(value: str) -> str:
    return value


@field_to_string.register(bytes)
@field_to_string.register(bytearray)
@field_to_string.register(memoryview)
def _(value) -> str:
    return '\\x' + bytes(value).hex()


@field_to_string.register
def _(value: decimal.Decimal) -> str:
    return str(value)


@field_to_string.register
def _(value: datetime.datetime) -> str:
    return value.isoformat(sep=' ')


@field_to_string.register
def _(value: datetime.date) -> str:
    return value.isoformat()


@field_to_string.register
def _(value: datetime.time) -> str:
    return value.isoformat()


@field_to_string.register
def _(value: datetime.timedelta) -> str:
    """Render as signed total hours, e.g. -26:00:00.000000.

    A single time field carries the sign for the whole value, which both
    PostgreSQL INTERVAL and MySQL TIME read the same way.
    """
    sign = '-' if value < datetime.timedelta(0) else ''
    value = abs(value)
    hours, rem = divmod(value.days * 86400 + value.seconds, 3600)
    minutes, seconds = divmod(rem, 60)
    return f'{sign}{hours:02d}:{minutes:02d}:{seconds:02d}.{value.microseconds:06d}'


@field_to_string.register
def _(value: uuid.UUID) -> str:
    return str(value)


@field_to_string.register
def _(value: dict) -> str:
    return json.dumps(value, default=str)


_ARRAY_ELEMENT_ESCAPE = re.compile(r'(["\\])')


@field_to_string.register(list)
@field_to_string.register(tuple)
def _(value) -> str:
    """Render a Postgres array literal, e.g. {"1","2"}."""
    parts = []
    for item in value:
        if item is None:
            parts.append('NULL')
        elif isinstance(item, (list, tuple)):
            parts.append(field_to_string(item))
        else:
            text = _ARRAY_ELEMENT_ESCAPE.sub(r'\\\1', field_to_string(item))
            parts.append(f'"{text}"')
    return '{' + ','.join(parts) + '}'


def json_to_string(value: Json) -> str:
    """Serialize a JSON column value; None becomes the JSON null literal."""
    return json.dumps(value, default=str)


class SqlBuilder:
    """Minimal INSERT statement builder working on text fragments.
    """

    def __init__(self, table: str) -> None:
        self.table = table
        self._fields: list[str] = []
        self._values: list[list[str]] = []
        self._returning: str | None = None

    @classmethod
    def insert_into(cls, table: str) -> Self:
        return cls(table)

    def field(self, name: str) -> Self:
        self._fields.append(name)
        return self

    def values(self, values: list[str]) -> Self:
        """Append one value-list block.
        """
        self._values.append(list(values))
        return self

    def returning(self, column: str) -> Self:
        self._returning = column
        return self

    def returning_id(self) -> Self:
        return self.returning('id')

    def sql(self) -> str:
        """Finalize the statement text.

        Raises
            ValueError: If no fields or no value blocks were added, or a block
                does not match the field list
        """
        if not self._fields:
            raise ValueError(f'No fields for insert into {self.table}')
        if not self._values:
            raise ValueError(f'No values for insert into {self.table}')
        for row in self._values:
            if len(row) != len(self._fields):
                raise ValueError(f'Expected {len(self._fields)} values, got {len(row)}')

        blocks = ', '.join(f"({', '.join(row)})" for row in self._values)
        text = f"INSERT INTO {self.table} ({', '.join(self._fields)}) VALUES {blocks}"
        if self._returning:
            text += f' RETURNING {self._returning}'
        return text


class Record:
    """Base class of generated dataclasses.
    """

    @classmethod
    def from_row(cls, row: Any) -> Self:
        """Build a record from a row whose values follow field order.
        """
        return cls(*tuple(row))

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


# Type expressions (as emitted by the type mapper) with a stringification
STRINGIFIABLE: frozenset[str] = frozenset({
    'bool',
    'int',
    'float',
    'str',
    'bytes',
    'decimal.Decimal',
    'datetime.datetime',
    'datetime.date',
    'datetime.time',
    'datetime.timedelta',
    'uuid.UUID',
    'Json',
    })

_WRAPPER = re.compile(r'^(Optional|list)\[(.*)\]$')


def _base_expression(expression: str) -> str:
    """Strip Optional[...] and list[...] wrappers."""
    expression = expression.strip()
    while match := _WRAPPER.match(expression):
        expression = match.group(2).strip()
    return expression


def is_stringifiable(expression: str) -> bool:
    """Check whether values of a type expression can be stringified.
    """
    return _base_expression(expression) in STRINGIFIABLE


def stringifier_for(expression: str) -> str:
    """Name of the runtime function that stringifies a type expression.

    Top-level JSON fields (optionally wrapped in Optional) use
    json_to_string; everything else goes through field_to_string.
    """
    expression = expression.strip()
    if match := re.match(r'^Optional\[(.*)\]$', expression):
        expression = match.group(1).strip()
    if expression == 'Json':
        return 'json_to_string'
    return 'field_to_string'
