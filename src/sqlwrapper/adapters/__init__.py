"""
Adapters between catalog metadata and generated Python types.
"""
from sqlwrapper.adapters.type_mapping import ResolvedType, TypeResolver
from sqlwrapper.adapters.type_mapping import get_resolver, resolve_type, wrap

__all__ = [
    'ResolvedType',
    'TypeResolver',
    'get_resolver',
    'resolve_type',
    'wrap',
]
