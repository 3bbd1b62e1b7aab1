"""
PostgreSQL-specific strategy implementation.

Column types are read from information_schema.columns.udt_name, so the
vocabulary uses internal names (int4, timestamptz, _text for arrays) next to
the long SQL spellings.
"""
import logging
from types import MappingProxyType

from sqlwrapper.strategy.base import DatabaseStrategy, register_strategy

logger = logging.getLogger(__name__)

postgres_types = {}
for v in [
    'BPCHAR',
    'CHAR',
    'CHARACTER',
    'CHARACTER VARYING',
    'CITEXT',
    'NAME',
    'TEXT',
    'VARCHAR',
]:
    postgres_types[v] = 'str'
for v in [
    'BIGINT',
    'BIGSERIAL',
    'INT',
    'INT2',
    'INT4',
    'INT8',
    'INTEGER',
    'OID',
    'SERIAL',
    'SMALLINT',
    'SMALLSERIAL',
]:
    postgres_types[v] = 'int'
for v in ['DOUBLE PRECISION', 'FLOAT4', 'FLOAT8', 'REAL']:
    postgres_types[v] = 'float'
for v in ['BOOL', 'BOOLEAN']:
    postgres_types[v] = 'bool'
for v in [
    'TIMESTAMP',
    'TIMESTAMP WITH TIME ZONE',
    'TIMESTAMP WITHOUT TIME ZONE',
    'TIMESTAMPTZ',
]:
    postgres_types[v] = 'datetime.datetime'
for v in ['TIME', 'TIME WITH TIME ZONE', 'TIME WITHOUT TIME ZONE', 'TIMETZ']:
    postgres_types[v] = 'datetime.time'
for v in ['JSON', 'JSONB']:
    postgres_types[v] = 'Json'
postgres_types['BYTEA'] = 'bytes'
postgres_types['DATE'] = 'datetime.date'
postgres_types['INTERVAL'] = 'datetime.timedelta'
postgres_types['NUMERIC'] = 'decimal.Decimal'
postgres_types['UUID'] = 'uuid.UUID'
postgres_types['VOID'] = 'None'


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific behavior.
    """

    type_map = MappingProxyType(postgres_types)
    null_suppressed_types = frozenset({'JSON', 'JSONB'})
    array_marker = '_'
    reports_views = True

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    @property
    def drivername(self) -> str:
        return 'postgresql+psycopg'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for PostgreSQL connections."""
        return ['hostname', 'username', 'password', 'database', 'port']

    def columns_sql(self) -> str:
        return """
select
    c.column_name,
    c.table_name,
    c.table_schema as schema_name,
    c.udt_name,
    c.is_nullable
from information_schema.columns c
where
    c.table_name = :table
    and c.table_schema = coalesce(:schema, current_schema())
order by
    c.ordinal_position
"""

    def tables_sql(self) -> str:
        return """
select
    t.table_name,
    t.table_type = 'VIEW' as is_view
from information_schema.tables t
where
    t.table_schema = coalesce(:schema, current_schema())
order by
    t.table_name
"""
