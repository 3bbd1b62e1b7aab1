"""
CRUD module generator for PostgreSQL and MySQL tables.

Introspects a table's columns and emits a Python module holding a record
dataclass plus insert/select/delete functions for it:

    cn = sqlwrapper.connect(options)
    sqlwrapper.generate_file(cn, 'users', output_dir='models')
"""
__version__ = '0.1.0'

from sqlwrapper.adapters.type_mapping import resolve_type
from sqlwrapper.config.type_mapping import TypeOverrides, load_type_overrides
from sqlwrapper.connection import ConnectionWrapper, connect
from sqlwrapper.exceptions import ConnectionFailure, DbConnectionError
from sqlwrapper.exceptions import GeneratorError, MalformedOverride
from sqlwrapper.exceptions import StringificationError, TableNotFoundOrEmpty
from sqlwrapper.exceptions import UnsupportedType
from sqlwrapper.generator import Generator, generate_file, generate_module
from sqlwrapper.generator import get_generator, list_tables
from sqlwrapper.introspect import query_columns, query_tables
from sqlwrapper.naming import escape_field_name, field_symbols, struct_name
from sqlwrapper.options import DatabaseOptions
from sqlwrapper.types import ColumnInfo, StructInfo, TableInfo

__all__ = [
    'connect',
    'ConnectionWrapper',
    'DatabaseOptions',
    'Generator',
    'get_generator',
    'generate_module',
    'generate_file',
    'list_tables',
    'query_columns',
    'query_tables',
    'resolve_type',
    'struct_name',
    'escape_field_name',
    'field_symbols',
    'TypeOverrides',
    'load_type_overrides',
    'ColumnInfo',
    'TableInfo',
    'StructInfo',
    'GeneratorError',
    'ConnectionFailure',
    'TableNotFoundOrEmpty',
    'UnsupportedType',
    'MalformedOverride',
    'StringificationError',
    'DbConnectionError',
]
