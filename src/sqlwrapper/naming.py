"""
Identifier derivation for generated code.

Struct names come from table names (singularized, class-cased). Field names
come from column names, escaped only when they collide with a Python keyword
or with the field of an earlier column.
Escaping affects the Python symbol only; SQL text always uses the column name.
"""
import keyword
import logging
import re
from collections.abc import Sequence

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])')
_SEPARATORS = re.compile(r'[^0-9a-zA-Z]+')

# (suffix, characters to drop, replacement), first match wins
_PLURAL_RULES: tuple[tuple[str, int, str], ...] = (
    ('ies', 3, 'y'),
    ('sses', 2, ''),
    ('uses', 2, ''),
    ('xes', 2, ''),
    ('ches', 2, ''),
    ('shes', 2, ''),
    ('zes', 2, ''),
    ('ss', 0, ''),
    ('us', 0, ''),
    ('is', 0, ''),
    ('s', 1, ''),
)


def singularize(word: str) -> str:
    """Strip a common plural suffix from the last word of a name.

    >>> singularize('user_groups')
    'user_group'
    >>> singularize('categories')
    'category'
    >>> singularize('group_history')
    'group_history'
    """
    lowered = word.lower()
    for suffix, drop, replacement in _PLURAL_RULES:
        if lowered.endswith(suffix) and len(word) > len(suffix):
            if not drop:
                return word
            return word[:-drop] + replacement
    return word


def class_case(name: str) -> str:
    """Format a name as ClassCase.

    Camel humps are treated as separators, so the function is idempotent.

    >>> class_case('group_history')
    'GroupHistory'
    >>> class_case('GroupHistory')
    'GroupHistory'
    """
    name = _CAMEL_BOUNDARY.sub('_', name).lower()
    return ''.join(seg[:1].upper() + seg[1:] for seg in _SEPARATORS.split(name) if seg)


def struct_name(table: str) -> str:
    """Derive the generated class name for a table.
    """
    return class_case(singularize(table))


def escape_field_name(name: str) -> str:
    """Return a valid Python symbol for a column name.

    Keywords get the PEP 8 trailing underscore (class -> class_).
    """
    if keyword.iskeyword(name):
        return f'{name}_'
    return name


def field_symbols(names: Sequence[str]) -> list[str]:
    """Escape every column name of a table into a distinct field symbol.

    A symbol already taken by an earlier column gets another trailing
    underscore, so columns `class` and `class_` become `class_` and `class__`.
    """
    symbols = []
    taken = set()
    for name in names:
        symbol = escape_field_name(name)
        while symbol in taken:
            symbol += '_'
        taken.add(symbol)
        symbols.append(symbol)
    return symbols
