"""
Type resolution for generated record fields.

Turns a raw catalog type name plus nullability into a Python type expression.
Sources are consulted in priority order:

1. Dialect null-suppressed types (never Optional-wrapped)
2. Array marker (element resolved recursively, wrapped as list[...])
3. Parameterized character types, e.g. VARCHAR(32)
4. Arbitrary-precision numeric family, e.g. NUMERIC(10,2)
5. Nullable-specific override (used verbatim)
6. Plain override
7. Built-in dialect type map

Anything else raises UnsupportedType; the resolver never guesses.
"""
import logging
import re
from dataclasses import dataclass
from functools import lru_cache

from sqlwrapper.config.type_mapping import TypeOverrides
from sqlwrapper.exceptions import UnsupportedType
from sqlwrapper.strategy import DatabaseStrategy, get_strategy
from sqlwrapper.types import ColumnInfo

logger = logging.getLogger(__name__)

_PARAMETERIZED_CHAR = re.compile(r'CHAR[A-Z ]*\(\s*\d+\s*\)')
NUMERIC_PREFIXES = ('NUMERIC', 'DECIMAL')


def wrap(nullable: bool, base: str) -> str:
    """Wrap a type expression in Optional when the column is nullable."""
    return f'Optional[{base}]' if nullable else base


@dataclass(frozen=True, slots=True)
class ResolvedType:
    """Type expression plus whether an override supplied it."""
    expression: str
    from_override: bool = False


class TypeResolver:
    """Resolves raw column types for one dialect.

    Holds no mutable state: the same input always produces the same output.
    """

    def __init__(self, strategy: DatabaseStrategy) -> None:
        self.strategy = strategy

    def resolve(self, raw_type: str, is_nullable: bool,
                overrides: TypeOverrides | dict | None = None) -> str:
        """Resolve a raw type to a Python type expression.

        Args:
            raw_type: Raw catalog type name (e.g. 'int4', '_text', 'varchar(20)')
            is_nullable: Whether the column allows NULL
            overrides: Optional type override table

        Returns
            str: Python type expression

        Raises
            UnsupportedType: If no rule, override or built-in mapping applies
        """
        return self.resolve_detailed(raw_type, is_nullable, overrides).expression

    def resolve_detailed(self, raw_type: str, is_nullable: bool,
                         overrides: TypeOverrides | dict | None = None) -> ResolvedType:
        """Resolve a raw type, also reporting whether an override was used.
        """
        overrides = TypeOverrides.from_mapping(overrides)
        return self._resolve(raw_type, is_nullable, overrides)

    def _resolve(self, raw_type: str, is_nullable: bool,
                 overrides: TypeOverrides) -> ResolvedType:
        sql_type = raw_type.strip().upper()
        strategy = self.strategy

        if sql_type in strategy.null_suppressed_types:
            return ResolvedType(strategy.type_map[sql_type])

        marker = strategy.array_marker
        if marker and sql_type.startswith(marker) and len(sql_type) > len(marker):
            element = self._resolve(sql_type[len(marker):], is_nullable, overrides)
            return ResolvedType(wrap(is_nullable, f'list[{element.expression}]'),
                                element.from_override)

        if _PARAMETERIZED_CHAR.search(sql_type):
            return ResolvedType(wrap(is_nullable, 'str'))

        if sql_type.startswith(NUMERIC_PREFIXES):
            return ResolvedType(wrap(is_nullable, 'decimal.Decimal'))

        if is_nullable:
            expression = overrides.for_nullable(sql_type)
            if expression is not None:
                return ResolvedType(expression, from_override=True)

        expression = overrides.for_type(sql_type)
        if expression is not None:
            return ResolvedType(wrap(is_nullable, expression), from_override=True)

        if sql_type in strategy.type_map:
            return ResolvedType(wrap(is_nullable, strategy.type_map[sql_type]))

        raise UnsupportedType(raw_type)

    def resolve_column(self, column: ColumnInfo,
                       overrides: TypeOverrides | dict | None = None) -> ResolvedType:
        """Resolve a column's type, attaching column context to failures.
        """
        try:
            return self.resolve_detailed(column.udt_name, column.is_nullable, overrides)
        except UnsupportedType as err:
            raise err.with_context(column.column_name, column.table_name) from None


@lru_cache(maxsize=8)
def get_resolver(dialect: str) -> TypeResolver:
    """Get the resolver for a dialect name."""
    return TypeResolver(get_strategy(dialect))


def resolve_type(raw_type: str, is_nullable: bool,
                 overrides: TypeOverrides | dict | None = None,
                 dialect: str = 'postgresql') -> str:
    """Resolve a raw column type to a Python type expression.

    Args:
        raw_type: Raw catalog type name
        is_nullable: Whether the column allows NULL
        overrides: Optional type override table
        dialect: Dialect name ('postgresql', 'mysql')

    Returns
        str: Python type expression
    """
    return get_resolver(dialect).resolve(raw_type, is_nullable, overrides)
