from sqlwrapper.config.type_mapping import NULLABLE_SUFFIX, TypeOverrides
from sqlwrapper.config.type_mapping import load_type_overrides

__all__ = ['NULLABLE_SUFFIX', 'TypeOverrides', 'load_type_overrides']
