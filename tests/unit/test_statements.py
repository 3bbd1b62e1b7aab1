"""
Tests for CRUD statement emission.

Emitted functions are also compiled and run against a mocked connection to
check the statement text they produce.
"""
import datetime
import decimal

import pytest
from sqlwrapper.exceptions import StringificationError
from sqlwrapper.generator import get_generator
from sqlwrapper.statements import StatementTemplates
from sqlwrapper.strategy import get_strategy


def load_generated(content, name='generated'):
    """Execute generated module text and return its namespace."""
    namespace = {'__name__': name}
    exec(compile(content, f'{name}.py', 'exec'), namespace)
    return namespace


@pytest.fixture
def pg_templates(users_columns):
    return StatementTemplates('users', users_columns, get_strategy('postgresql'))


@pytest.fixture
def users_module(users_columns):
    info = get_generator('postgresql').render('users', users_columns)
    return load_generated(info.content)


@pytest.fixture
def alice(users_module):
    return users_module['User'](
        id=1,
        name="O'Brien",
        class_='first',
        tags=['a', 'b'],
        balance=decimal.Decimal('1.50'),
        profile={'k': 1},
        created=datetime.datetime(2024, 1, 2, 3, 4, 5),
    )


class TestFieldSelection:
    """Test which columns take part in inserts"""

    def test_returning_variant_excludes_id(self, pg_templates):
        names = [f.name for f in pg_templates.insert_fields(include_primary_key=False)]
        assert 'id' not in names
        assert names == ['name', 'class', 'tags', 'balance', 'profile', 'created']

    def test_plain_variant_includes_id(self, pg_templates):
        names = [f.name for f in pg_templates.insert_fields(include_primary_key=True)]
        assert names[0] == 'id'

    def test_field_order(self, column):
        templates = StatementTemplates('people', [column('id', 'bigint'), column('name', 'text', nullable=True)],
                                       get_strategy('postgresql'))
        insert = templates.insert()
        assert insert.index("sql.field('id')") < insert.index("sql.field('name')")
        assert insert.index('obj.id') < insert.index('unwrap(obj.name)')
        returning = templates.insert_returning_id()
        assert "sql.field('id')" not in returning
        assert 'obj.id' not in returning

    def test_only_literal_id_is_excluded(self, column):
        templates = StatementTemplates('t', [column('ID', 'int4'), column('user_id', 'int4')],
                                       get_strategy('postgresql'))
        names = [f.name for f in templates.insert_fields(include_primary_key=False)]
        assert names == ['ID', 'user_id']

    def test_escaped_symbol_keeps_column_name(self, pg_templates):
        text = pg_templates.insert()
        assert "sql.field('class')" in text
        assert 'quote(field_to_string(unwrap(obj.class_))),' in text


class TestEmittedText:
    """Test the shape of emitted functions"""

    def test_insert_returning_id(self, pg_templates):
        text = pg_templates.insert_returning_id()
        assert text.startswith('def insert_returning_id(cn: sa.Connection, obj: User) -> int:\n')
        assert "    sql = SqlBuilder.insert_into('users')" in text
        assert "sql.field('id')" not in text
        assert '    sql.returning_id()' in text
        assert 'return execute(cn, sql.sql()).scalar_one()' in text
        assert text.endswith('\n\n\n')

    def test_value_expressions(self, pg_templates):
        text = pg_templates.insert()
        assert 'quote(field_to_string(obj.name)),' in text
        assert 'quote(field_to_string(unwrap(obj.tags))),' in text
        assert 'quote(field_to_string(obj.balance)),' in text
        assert 'quote(json_to_string(obj.profile)),' in text

    def test_batch_loops_over_objs(self, pg_templates):
        text = pg_templates.batch_insert()
        assert text.startswith('def batch_insert(cn: sa.Connection, objs: list[User]) -> int:\n')
        assert text.count('SqlBuilder.insert_into') == 1
        assert '    for obj in objs:\n        sql.values([' in text

    def test_batch_returning_type(self, pg_templates):
        text = pg_templates.batch_insert_returning_id()
        assert '-> list[int]:' in text
        assert 'return list(execute(cn, sql.sql()).scalars().all())' in text

    def test_select_sql(self, pg_templates):
        assert pg_templates.select_sql_text() == (
            'select id, name, class, tags, balance, profile, created from users')

    def test_select_and_delete_by_id(self, pg_templates):
        select = pg_templates.select_by_id()
        assert select.startswith('def select_by_id(cn: sa.Connection, id: int) -> User:')
        assert "'select id, name, class, tags, balance, profile, created from users where id='" in select
        delete = pg_templates.delete_by_id()
        assert "'delete from users where id=' + quote(field_to_string(id))" in delete

    def test_table_name_with_quote_is_escaped(self, column):
        templates = StatementTemplates("odd'name", [column('v', 'int4')], get_strategy('postgresql'))
        compile(templates.select(), 'select.py', 'exec')
        compile(templates.insert(), 'insert.py', 'exec')

    def test_only_id_column(self, column):
        """Returning variants have nothing to insert and are omitted"""
        templates = StatementTemplates('counters', [column('id', 'int4')], get_strategy('postgresql'))
        assert templates.insert_returning_id() == ''
        assert templates.batch_insert_returning_id() == ''
        assert templates.insert().startswith('def insert(')

    def test_mysql_returning_id(self, column):
        templates = StatementTemplates('users', [column('id', 'int'), column('name', 'varchar')],
                                       get_strategy('mysql'))
        single = templates.insert_returning_id()
        assert 'returning_id' not in single.split('\n', 1)[1]
        assert 'return result.lastrowid' in single
        batch = templates.batch_insert_returning_id()
        assert 'first_id = result.lastrowid' in batch
        assert 'return [first_id + idx for idx in range(len(objs))]' in batch

    def test_statement_order(self, pg_templates):
        names = [text.split('(', 1)[0] for text in pg_templates.all_statements()]
        assert names == [
            'def insert_returning_id',
            'def insert',
            'def batch_insert_returning_id',
            'def batch_insert',
            'def select_sql',
            'def select_by_id',
            'def delete_by_id',
        ]


class TestStringification:
    """Types without a stringifier fail at generation time"""

    def test_void_column(self, column):
        templates = StatementTemplates('t', [column('id', 'int4'), column('v', 'void')],
                                       get_strategy('postgresql'))
        with pytest.raises(StringificationError) as exc:
            templates.insert()
        assert exc.value.column == 'v'
        assert exc.value.expression == 'None'

    def test_override_types_are_trusted(self, column):
        templates = StatementTemplates('t', [column('mood', 'mood')], get_strategy('postgresql'),
                                       {'mood': 'Mood'})
        assert 'quote(field_to_string(obj.mood)),' in templates.insert()


class TestGeneratedExecution:
    """Run generated functions against a mocked connection"""

    def test_insert_returning_id(self, users_module, alice, mock_sa_connection):
        cn = mock_sa_connection(scalars=[7])
        assert users_module['insert_returning_id'](cn, alice) == 7
        assert cn.statements == [
            'INSERT INTO users (name, class, tags, balance, profile, created) VALUES '
            """('O''Brien', 'first', '{"a","b"}', '1.50', '{"k": 1}', '2024-01-02 03:04:05') """
            'RETURNING id'
        ]

    def test_batch_insert_is_one_statement(self, users_module, alice, mock_sa_connection):
        cn = mock_sa_connection(scalars=[7, 8])
        bob = users_module['User'](**{**alice.to_dict(), 'name': 'Bob'})
        assert users_module['batch_insert_returning_id'](cn, [alice, bob]) == [7, 8]
        assert len(cn.statements) == 1
        sql = cn.statements[0]
        assert sql.count('INSERT INTO') == 1
        assert sql.count("'O''Brien'") == 1
        assert sql.count("'Bob'") == 1
        assert '), (' in sql

    def test_insert_includes_id(self, users_module, alice, mock_sa_connection):
        cn = mock_sa_connection()
        assert users_module['insert'](cn, alice) == 1
        assert cn.statements[0].startswith(
            'INSERT INTO users (id, name, class, tags, balance, profile, created) VALUES (\'1\', ')
        assert 'RETURNING' not in cn.statements[0]

    def test_none_in_nullable_field_raises(self, users_module, alice, mock_sa_connection):
        cn = mock_sa_connection()
        alice.class_ = None
        with pytest.raises(ValueError):
            users_module['insert'](cn, alice)
        assert cn.statements == []

    def test_null_json_is_stringified(self, users_module, alice, mock_sa_connection):
        cn = mock_sa_connection()
        alice.profile = None
        users_module['insert'](cn, alice)
        assert "'null'" in cn.statements[0]

    def test_select_by_id(self, users_module, alice, mock_sa_connection):
        cn = mock_sa_connection()
        cn.result.one.return_value = tuple(alice.to_dict().values())
        found = users_module['select_by_id'](cn, 1)
        assert found == alice
        assert cn.statements == [
            "select id, name, class, tags, balance, profile, created from users where id='1'"
        ]

    def test_delete_by_id(self, users_module, mock_sa_connection):
        cn = mock_sa_connection()
        assert users_module['delete_by_id'](cn, 5) == 1
        assert cn.statements == ["delete from users where id='5'"]

    def test_mysql_batch_ids(self, column, mock_sa_connection):
        columns = [column('id', 'int'), column('name', 'varchar')]
        info = get_generator('mysql').render('people', columns)
        module = load_generated(info.content, 'people')
        cn = mock_sa_connection('mysql', lastrowid=10)
        people = [module['People'](id=None, name=n) for n in ['a', 'b', 'c']]
        assert module['batch_insert_returning_id'](cn, people) == [10, 11, 12]
        assert cn.statements == ["INSERT INTO people (name) VALUES ('a'), ('b'), ('c')"]

    def test_escaped_and_literal_column_names(self, column, mock_sa_connection):
        columns = [column('id', 'int4'), column('class', 'text'), column('class_', 'text')]
        info = get_generator('postgresql').render('lessons', columns)
        module = load_generated(info.content, 'lessons')
        lesson = module['Lesson'](id=1, class_='a', class__='b')
        cn = mock_sa_connection()
        module['insert'](cn, lesson)
        assert cn.statements == ["INSERT INTO lessons (id, class, class_) VALUES ('1', 'a', 'b')"]
        assert module['Lesson'].from_row((1, 'a', 'b')) == lesson

    def test_mysql_escapes_backslashes(self, column, mock_sa_connection):
        columns = [column('id', 'int'), column('name', 'varchar')]
        info = get_generator('mysql').render('people', columns)
        module = load_generated(info.content, 'people')
        cn = mock_sa_connection('mysql', lastrowid=1)
        people = [module['People'](id=None, name=n) for n in ['C:\\', "a\\' OR 1=1 -- "]]
        module['batch_insert_returning_id'](cn, people)
        assert cn.statements == [
            r"INSERT INTO people (name) VALUES ('C:\\'), ('a\\\' OR 1=1 -- ')"
        ]

    def test_mysql_delete_by_id_escapes(self, column, mock_sa_connection):
        info = get_generator('mysql').render('notes', [column('id', 'varchar')])
        module = load_generated(info.content, 'notes')
        cn = mock_sa_connection('mysql')
        module['delete_by_id'](cn, "x\\' or 1=1 -- ")
        assert cn.statements == [r"delete from notes where id='x\\\' or 1=1 -- '"]


if __name__ == '__main__':
    __import__('pytest').main([__file__])
