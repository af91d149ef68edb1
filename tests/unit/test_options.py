import sqlite3
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from dbreader import DbapiRowCursor, ReaderOptions, ReaderWrapper, open_reader


def test_init_defaults():
    """Test default initialization"""
    options = ReaderOptions()
    assert options.description == ''
    assert options.fetch_size == 5000


def test_invalid_fetch_size():
    with pytest.raises(ValueError, match='fetch_size'):
        ReaderOptions(fetch_size=0)


@pytest.fixture
def executed_cursor():
    conn = sqlite3.connect(':memory:')
    cursor = conn.cursor()
    cursor.execute('select 1 as Id, ? as Name', ('Alice',))
    yield cursor
    conn.close()


def test_open_reader_with_options(executed_cursor):
    options = ReaderOptions(description='people', fetch_size=10)
    reader = open_reader(executed_cursor, options)

    assert isinstance(reader, ReaderWrapper)
    assert isinstance(reader.cursor, DbapiRowCursor)
    assert reader.cursor.fetch_size == 10
    assert reader.description == 'people'
    assert reader.field_names == ('Id', 'Name')


def test_open_reader_with_dict(executed_cursor):
    reader = open_reader(executed_cursor, {'description': 'people', 'fetch_size': 2})
    assert reader.description == 'people'
    assert reader.cursor.fetch_size == 2
    assert reader.read()
    assert reader.get_string('name') == 'Alice'


def test_open_reader_keeps_row_cursor(make_cursor):
    """Test objects already implementing RowCursor are used as-is"""
    cursor = make_cursor((['Id'], [(1,)]))
    reader = open_reader(cursor, ReaderOptions(description='fake'))
    assert reader.cursor is cursor


def test_open_reader_with_config_path(executed_cursor):
    """Test a string path loads ReaderOptions from the config object"""
    config = SimpleNamespace(reader=SimpleNamespace(description='from config', fetch_size=25))
    loaded = MagicMock(return_value=ReaderOptions(description='from config', fetch_size=25))

    with patch('dbreader.options.load_options') as load_options:
        load_options.return_value = MagicMock(return_value=loaded)
        reader = open_reader(executed_cursor, 'reader', config)

    load_options.assert_called_once_with(cls=ReaderOptions)
    loaded.assert_called_once_with('reader', config)
    assert reader.description == 'from config'
    assert isinstance(reader.cursor, DbapiRowCursor)
    assert reader.cursor.fetch_size == 25
    assert reader.read()
    assert reader.get_int32('id') == 1


def test_open_reader_config_path_passes_overrides(executed_cursor):
    config = SimpleNamespace(reader=SimpleNamespace(description='from config'))
    loaded = MagicMock(return_value=ReaderOptions(description='override', fetch_size=3))

    with patch('dbreader.options.load_options') as load_options:
        load_options.return_value = MagicMock(return_value=loaded)
        reader = open_reader(executed_cursor, 'reader', config, description='override')

    loaded.assert_called_once_with('reader', config, description='override')
    assert reader.description == 'override'
    assert reader.cursor.fetch_size == 3
