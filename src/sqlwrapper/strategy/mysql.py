"""
MySQL-specific strategy implementation.

Differences from the PostgreSQL strategy:
- udt_name is DATA_TYPE, suffixed with ' unsigned' for unsigned numeric columns
- there is no native RETURNING; generated functions read the driver's
  last-insert id, which for a multi-row insert is the id of the first row
- the table listing does not report view-ness
- string literals escape backslashes (runtime.mysql_quote)
"""
import logging
from types import MappingProxyType

from sqlwrapper.strategy.base import INDENT, DatabaseStrategy, register_strategy

logger = logging.getLogger(__name__)

mysql_types = {}
for v in ['TINYINT', 'SMALLINT', 'MEDIUMINT', 'INT', 'INTEGER', 'BIGINT']:
    mysql_types[v] = 'int'
    mysql_types[f'{v} UNSIGNED'] = 'int'
for v in ['YEAR']:
    mysql_types[v] = 'int'
for v in ['BOOL', 'BOOLEAN']:
    mysql_types[v] = 'bool'
for v in ['FLOAT', 'DOUBLE', 'DOUBLE PRECISION', 'REAL']:
    mysql_types[v] = 'float'
    mysql_types[f'{v} UNSIGNED'] = 'float'
for v in ['CHAR', 'VARCHAR', 'TINYTEXT', 'TEXT', 'MEDIUMTEXT', 'LONGTEXT', 'ENUM', 'SET']:
    mysql_types[v] = 'str'
for v in ['BINARY', 'VARBINARY', 'TINYBLOB', 'BLOB', 'MEDIUMBLOB', 'LONGBLOB']:
    mysql_types[v] = 'bytes'
for v in ['DATETIME', 'TIMESTAMP']:
    mysql_types[v] = 'datetime.datetime'
mysql_types['DATE'] = 'datetime.date'
mysql_types['TIME'] = 'datetime.timedelta'
mysql_types['DECIMAL'] = 'decimal.Decimal'
mysql_types['JSON'] = 'Json'


@register_strategy('mysql')
class MySQLStrategy(DatabaseStrategy):
    """MySQL-specific behavior.
    """

    type_map = MappingProxyType(mysql_types)
    null_suppressed_types = frozenset({'JSON'})
    quote_function = 'mysql_quote'

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for MySQL."""
        return 'mysql'

    @property
    def drivername(self) -> str:
        return 'mysql+pymysql'

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required options for MySQL connections."""
        return ['hostname', 'username', 'database', 'port']

    def columns_sql(self) -> str:
        return """
select
    c.COLUMN_NAME as column_name,
    c.TABLE_NAME as table_name,
    c.TABLE_SCHEMA as schema_name,
    concat(c.DATA_TYPE, if(locate('unsigned', c.COLUMN_TYPE) > 0, ' unsigned', '')) as udt_name,
    c.IS_NULLABLE as is_nullable
from information_schema.columns c
where
    c.TABLE_NAME = :table
    and c.TABLE_SCHEMA = coalesce(:schema, database())
order by
    c.ORDINAL_POSITION
"""

    def tables_sql(self) -> str:
        return """
select
    t.TABLE_NAME as table_name
from information_schema.tables t
where
    t.TABLE_SCHEMA = coalesce(:schema, database())
order by
    t.TABLE_NAME
"""

    def emit_returning_id(self, batch: bool) -> list[str]:
        """Read the last-insert id instead of a RETURNING clause.

        For a batch the ids are derived from the first generated id and the
        number of records, which assumes consecutive auto-increment values.
        """
        lines = [f'{INDENT}result = execute(cn, sql.sql())']
        if batch:
            lines.append(f'{INDENT}first_id = result.lastrowid')
            lines.append(f'{INDENT}return [first_id + idx for idx in range(len(objs))]')
        else:
            lines.append(f'{INDENT}return result.lastrowid')
        return lines
