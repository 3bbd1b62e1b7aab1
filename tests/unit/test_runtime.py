"""
Tests for the runtime used by generated modules.
"""
import dataclasses
import datetime
import decimal
import uuid

import pytest
from sqlwrapper.runtime import Record, SqlBuilder, execute, field_to_string
from sqlwrapper.runtime import is_stringifiable, json_to_string, mysql_quote, quote
from sqlwrapper.runtime import stringifier_for, unwrap


class TestQuote:

    def test_plain(self):
        assert quote('abc') == "'abc'"

    def test_embedded_quotes_doubled(self):
        assert quote("it's") == "'it''s'"
        assert quote("''") == "''''''"

    def test_empty(self):
        assert quote('') == "''"


class TestMySQLQuote:
    """MySQL reads backslash as an escape character"""

    def test_plain(self):
        assert mysql_quote('abc') == "'abc'"
        assert mysql_quote("it's") == r"'it\'s'"

    def test_trailing_backslash(self):
        assert mysql_quote('C:\\') == r"'C:\\'"

    def test_escaped_quote_stays_inside_literal(self):
        text = mysql_quote("a\\' OR 1=1 -- ")
        assert text == r"'a\\\' OR 1=1 -- '"

    def test_control_characters(self):
        assert mysql_quote('a\nb\x00') == r"'a\nb\0'"


def test_unwrap():
    assert unwrap(0) == 0
    assert unwrap('') == ''
    with pytest.raises(ValueError):
        unwrap(None)


class TestFieldToString:
    """Test stringification of field values"""

    @pytest.mark.parametrize(('value', 'expected'), [
        (True, '1'),
        (False, '0'),
        (42, '42'),
        (-7, '-7'),
        (1.5, '1.5'),
        ('text', 'text'),
        (b'\x00\xff', '\\x00ff'),
        (decimal.Decimal('10.20'), '10.20'),
        (datetime.datetime(2024, 1, 2, 3, 4, 5), '2024-01-02 03:04:05'),
        (datetime.date(2024, 1, 2), '2024-01-02'),
        (datetime.time(3, 4, 5), '03:04:05'),
        (uuid.UUID('12345678-1234-5678-1234-567812345678'), '12345678-1234-5678-1234-567812345678'),
        ({'a': 1}, '{"a": 1}'),
    ])
    def test_builtin_types(self, value, expected):
        assert field_to_string(value) == expected

    @pytest.mark.parametrize(('value', 'expected'), [
        (datetime.timedelta(days=1, hours=2, seconds=3), '26:00:03.000000'),
        (datetime.timedelta(minutes=5, microseconds=7), '00:05:00.000007'),
        (datetime.timedelta(hours=-2), '-02:00:00.000000'),
        (datetime.timedelta(hours=-26), '-26:00:00.000000'),
        (datetime.timedelta(days=-1, hours=2), '-22:00:00.000000'),
    ])
    def test_timedelta(self, value, expected):
        """The sign applies to the whole interval"""
        assert field_to_string(value) == expected

    def test_array(self):
        assert field_to_string(['a', 'b"c', None]) == '{"a","b\\"c",NULL}'
        assert field_to_string([[1, 2], [3, 4]]) == '{{"1","2"},{"3","4"}}'
        assert field_to_string([]) == '{}'

    def test_unknown_type(self):
        with pytest.raises(TypeError):
            field_to_string(object())

    def test_register_user_type(self):
        class Mood:
            def __init__(self, value):
                self.value = value

        @field_to_string.register
        def _(value: Mood) -> str:
            return value.value

        assert quote(field_to_string(Mood('happy'))) == "'happy'"


def test_json_to_string():
    assert json_to_string(None) == 'null'
    assert json_to_string([1, 'a']) == '[1, "a"]'
    assert json_to_string({'when': datetime.date(2024, 1, 2)}) == '{"when": "2024-01-02"}'


class TestSqlBuilder:
    """Test INSERT statement building"""

    def test_single_row(self):
        sql = SqlBuilder.insert_into('users')
        sql.field('name').field('age')
        sql.values(["'a'", "'1'"])
        assert sql.sql() == "INSERT INTO users (name, age) VALUES ('a', '1')"

    def test_multiple_rows_and_returning(self):
        sql = SqlBuilder.insert_into('users')
        sql.field('name')
        sql.values(["'a'"])
        sql.values(["'b'"])
        sql.returning_id()
        assert sql.sql() == "INSERT INTO users (name) VALUES ('a'), ('b') RETURNING id"

    def test_no_fields(self):
        with pytest.raises(ValueError):
            SqlBuilder.insert_into('users').values([]).sql()

    def test_no_values(self):
        with pytest.raises(ValueError):
            SqlBuilder.insert_into('users').field('name').sql()

    def test_width_mismatch(self):
        sql = SqlBuilder.insert_into('users').field('name')
        sql.values(["'a'", "'b'"])
        with pytest.raises(ValueError):
            sql.sql()


def test_execute_passes_text_through(mocker):
    cn = mocker.Mock()
    execute(cn, "select '100%'")
    cn.exec_driver_sql.assert_called_once_with(
        "select '100%'", execution_options={'no_parameters': True})


def test_record():

    @dataclasses.dataclass
    class Point(Record):
        x: int
        y: int

    point = Point.from_row((1, 2))
    assert point == Point(1, 2)
    assert point.to_dict() == {'x': 1, 'y': 2}


class TestStringifiable:

    @pytest.mark.parametrize('expression', [
        'int',
        'Optional[str]',
        'list[int]',
        'Optional[list[Optional[datetime.datetime]]]',
        'Json',
        'uuid.UUID',
    ])
    def test_supported(self, expression):
        assert is_stringifiable(expression)

    @pytest.mark.parametrize('expression', ['None', 'Mood', 'Optional[Mood]'])
    def test_unsupported(self, expression):
        assert not is_stringifiable(expression)

    def test_stringifier_for(self):
        assert stringifier_for('Json') == 'json_to_string'
        assert stringifier_for('Optional[Json]') == 'json_to_string'
        assert stringifier_for('list[Json]') == 'field_to_string'
        assert stringifier_for('int') == 'field_to_string'


if __name__ == '__main__':
    __import__('pytest').main([__file__])
