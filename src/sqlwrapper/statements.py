"""
Statement template engine.

Emits the CRUD functions of a generated module as source text. All ordering,
escaping and templating is shared; only the returning-identifier tail comes
from the dialect strategy.

Generated insert functions pass every value through a single stringifier and
quote() before handing it to SqlBuilder. Nullable fields are unwrapped with
unwrap() first, which raises on None at runtime: callers must populate
nullable fields before inserting.
"""
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlwrapper.adapters.type_mapping import get_resolver
from sqlwrapper.config.type_mapping import TypeOverrides
from sqlwrapper.exceptions import StringificationError
from sqlwrapper.naming import field_symbols, struct_name
from sqlwrapper.runtime import is_stringifiable, stringifier_for
from sqlwrapper.strategy.base import INDENT, DatabaseStrategy, split_table_name
from sqlwrapper.types import ColumnInfo

logger = logging.getLogger(__name__)

ID_COLUMN = 'id'


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """A column together with its Python symbol and resolved type."""
    column: ColumnInfo
    symbol: str
    expression: str
    from_override: bool = False

    @property
    def name(self) -> str:
        return self.column.column_name

    @property
    def is_optional(self) -> bool:
        return self.expression.startswith('Optional[')

    def value_expression(self, obj: str = 'obj') -> str:
        """Source text producing the quoted value of this field."""
        access = f'{obj}.{self.symbol}'
        if self.is_optional:
            access = f'unwrap({access})'
        return f'quote({stringifier_for(self.expression)}({access}))'


class StatementTemplates:
    """Generates CRUD function source for one table.
    """

    def __init__(self, table: str, columns: Sequence[ColumnInfo],
                 strategy: DatabaseStrategy,
                 overrides: TypeOverrides | dict | None = None) -> None:
        self.table = table
        self.strategy = strategy
        _, bare = split_table_name(table)
        self.struct_name = struct_name(bare)
        resolver = get_resolver(strategy.dialect_name)
        fields = []
        symbols = field_symbols([column.column_name for column in columns])
        for column, symbol in zip(columns, symbols):
            resolved = resolver.resolve_column(column, overrides)
            fields.append(FieldSpec(column=column,
                                    symbol=symbol,
                                    expression=resolved.expression,
                                    from_override=resolved.from_override))
        self.fields: tuple[FieldSpec, ...] = tuple(fields)

    def insert_fields(self, include_primary_key: bool) -> list[FieldSpec]:
        """Fields taking part in an insert.

        The column named 'id' is left out when the server generates it.

        Raises
            StringificationError: If an included field cannot be stringified
        """
        selected = [f for f in self.fields
                    if include_primary_key or f.name != ID_COLUMN]
        for f in selected:
            if not (f.from_override or is_stringifiable(f.expression)):
                raise StringificationError(f.expression, f.name)
        return selected

    def _field_and_value_lines(self, include_primary_key: bool, batch: bool) -> list[str]:
        fields = self.insert_fields(include_primary_key)
        lines = [f'{INDENT}sql = SqlBuilder.insert_into({self.table!r})']
        lines.extend(f'{INDENT}sql.field({f.name!r})' for f in fields)

        indent = INDENT * 2 if batch else INDENT
        if batch:
            lines.append(f'{INDENT}for obj in objs:')
        lines.append(f'{indent}sql.values([')
        lines.extend(f'{indent}{INDENT}{f.value_expression()},' for f in fields)
        lines.append(f'{indent}])')
        return lines

    def _has_insert_fields(self, include_primary_key: bool) -> bool:
        return bool(self.insert_fields(include_primary_key))

    def _signature(self, name: str, batch: bool, returns: str) -> str:
        param = f'objs: list[{self.struct_name}]' if batch else f'obj: {self.struct_name}'
        return f'def {name}(cn: sa.Connection, {param}) -> {returns}:'

    @staticmethod
    def _render(lines: list[str]) -> str:
        return '\n'.join(lines) + '\n\n\n'

    def insert_returning_id(self) -> str:
        """Insert one record, returning the server-generated id."""
        return self._returning_id_fn('insert_returning_id', batch=False)

    def batch_insert_returning_id(self) -> str:
        """Insert many records with one statement, returning their ids."""
        return self._returning_id_fn('batch_insert_returning_id', batch=True)

    def _returning_id_fn(self, name: str, batch: bool) -> str:
        if not self._has_insert_fields(include_primary_key=False):
            logger.debug(f'No insertable columns besides {ID_COLUMN} in {self.table}, skipping {name}')
            return ''
        returns = self.strategy.returning_id_return_type(batch)
        lines = [self._signature(name, batch, returns)]
        lines.extend(self._field_and_value_lines(include_primary_key=False, batch=batch))
        lines.extend(self.strategy.emit_returning_id(batch))
        return self._render(lines)

    def insert(self) -> str:
        """Insert one record including its id, returning the row count."""
        return self._insert_fn('insert', batch=False)

    def batch_insert(self) -> str:
        """Insert many records including their ids, returning the row count."""
        return self._insert_fn('batch_insert', batch=True)

    def _insert_fn(self, name: str, batch: bool) -> str:
        if not self._has_insert_fields(include_primary_key=True):
            return ''
        lines = [self._signature(name, batch, 'int')]
        lines.extend(self._field_and_value_lines(include_primary_key=True, batch=batch))
        lines.append(f'{INDENT}return execute(cn, sql.sql()).rowcount')
        return self._render(lines)

    def select_sql_text(self) -> str:
        """The select-all statement text."""
        names = [f.name for f in self.fields]
        return 'select ' + ', '.join(names) + ' from ' + self.table

    def delete_sql_text(self) -> str:
        return 'delete from ' + self.table

    def _id_expression(self) -> str:
        for f in self.fields:
            if f.name == ID_COLUMN:
                expression = f.expression
                if f.is_optional:
                    expression = expression[len('Optional['):-1]
                return expression
        return 'int'

    def select(self) -> str:
        lines = [
            'def select_sql() -> str:',
            f'{INDENT}return {self.select_sql_text()!r}',
        ]
        return self._render(lines)

    def select_by_id(self) -> str:
        base = self.select_sql_text() + f' where {ID_COLUMN}='
        lines = [
            f'def select_by_id(cn: sa.Connection, id: {self._id_expression()}) -> {self.struct_name}:',
            f'{INDENT}sql = {base!r} + quote(field_to_string(id))',
            f'{INDENT}row = execute(cn, sql).one()',
            f'{INDENT}return {self.struct_name}.from_row(row)',
        ]
        return self._render(lines)

    def delete_by_id(self) -> str:
        base = self.delete_sql_text() + f' where {ID_COLUMN}='
        lines = [
            f'def delete_by_id(cn: sa.Connection, id: {self._id_expression()}) -> int:',
            f'{INDENT}sql = {base!r} + quote(field_to_string(id))',
            f'{INDENT}return execute(cn, sql).rowcount',
        ]
        return self._render(lines)

    def all_statements(self) -> list[str]:
        """Every statement section in module order.
        """
        return [
            self.insert_returning_id(),
            self.insert(),
            self.batch_insert_returning_id(),
            self.batch_insert(),
            self.select(),
            self.select_by_id(),
            self.delete_by_id(),
        ]
