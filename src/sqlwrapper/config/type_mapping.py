"""
Configuration for user-supplied column type overrides.

An override table maps a raw database type name to a Python type expression.
Keys are normalized to uppercase. A key ending in NULLABLE_SUFFIX applies only
to nullable columns and its expression is used verbatim (no Optional wrap).

Example JSON file:

    {
        "postgresql": {"mood": "Mood", "mood?": "Mood | None"},
        "mysql": {"geometry": "bytes"}
    }
"""
import json
import logging
import pathlib
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any, Self

from sqlwrapper.exceptions import MalformedOverride

logger = logging.getLogger(__name__)

NULLABLE_SUFFIX = '?'


def normalize_key(key: str) -> str:
    """Normalize an override key to its canonical uppercase form."""
    return key.strip().upper()


class TypeOverrides(Mapping[str, str]):
    """Read-only table of type overrides keyed by uppercased raw type.
    """

    def __init__(self, entries: Mapping[str, str] | None = None) -> None:
        normalized: dict[str, str] = {}
        originals: dict[str, str] = {}
        for key, expression in (entries or {}).items():
            if not isinstance(key, str) or not key.strip():
                raise MalformedOverride(key, 'key must be a non-empty string')
            norm = normalize_key(key)
            nullable_only = norm.endswith(NULLABLE_SUFFIX)
            base = norm.removesuffix(NULLABLE_SUFFIX).rstrip()
            if not base or base.endswith(NULLABLE_SUFFIX):
                raise MalformedOverride(key, 'key must name a type before the nullable marker')
            norm = base + NULLABLE_SUFFIX if nullable_only else base
            if not isinstance(expression, str) or not expression.strip():
                raise MalformedOverride(key, 'expression must be a non-empty string')
            if norm in normalized:
                raise MalformedOverride(key, f'collides with {originals[norm]!r}')
            normalized[norm] = expression.strip()
            originals[norm] = key
        self._entries = MappingProxyType(normalized)

    @classmethod
    def from_mapping(cls, entries: 'Mapping[str, str] | TypeOverrides | None') -> Self:
        """Build overrides from a plain mapping, passing existing tables through.
        """
        if isinstance(entries, cls):
            return entries
        return cls(entries)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f'TypeOverrides({dict(self._entries)!r})'

    def for_nullable(self, raw_type: str) -> str | None:
        """Get the nullable-specific expression for a normalized raw type."""
        return self._entries.get(raw_type + NULLABLE_SUFFIX)

    def for_type(self, raw_type: str) -> str | None:
        """Get the plain expression for a normalized raw type."""
        return self._entries.get(raw_type)


def load_type_overrides(config_file: str | pathlib.Path, dialect: str) -> TypeOverrides:
    """Load the override table for a dialect from a JSON file.

    Args:
        config_file: Path to a JSON file keyed by dialect name
        dialect: Dialect section to read ('postgresql', 'mysql')

    Returns
        TypeOverrides for the dialect, empty if the section is missing
    """
    with pathlib.Path(config_file).open() as f:
        config: dict[str, Any] = json.load(f)

    if not isinstance(config, dict):
        raise MalformedOverride(str(config_file), 'top level must be an object keyed by dialect')

    section = config.get(dialect, {})
    if not isinstance(section, dict):
        raise MalformedOverride(dialect, 'dialect section must be an object')

    overrides = TypeOverrides(section)
    logger.info(f'Loaded {len(overrides)} type overrides for {dialect} from {config_file}')
    return overrides
