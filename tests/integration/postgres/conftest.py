"""
Fixtures for PostgreSQL-specific integration tests.
"""
import pytest


def load_generated(content, name):
    """Execute generated module text and return its namespace."""
    namespace = {'__name__': name}
    exec(compile(content, f'{name}.py', 'exec'), namespace)
    return namespace


@pytest.fixture
def notes_module(conn):
    """Module generated from the staged notes table."""
    import sqlwrapper
    info = sqlwrapper.generate_module(conn, 'notes')
    return load_generated(info.content, 'notes')
