import pathlib
import site

import pytest
from sqlwrapper.adapters.type_mapping import get_resolver
from sqlwrapper.generator import get_generator

HERE = pathlib.Path(pathlib.Path(__file__).resolve()).parent
site.addsitedir(HERE)


@pytest.fixture(autouse=True)
def clear_caches():
    """Clear cached resolvers and generators to ensure test isolation."""
    get_resolver.cache_clear()
    get_generator.cache_clear()
    yield
    get_resolver.cache_clear()
    get_generator.cache_clear()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.columns',
    'tests.fixtures.postgres',
]
