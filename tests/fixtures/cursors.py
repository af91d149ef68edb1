"""
In-memory row cursor for reader tests.

Usage:
    def test_something(make_cursor):
        cursor = make_cursor(
            (['Id', 'Name'], [(1, 'Alice'), (2, None)]),
            (['Total'], [(3,)]),
        )
        reader = ReaderWrapper(cursor, 'usp_test')
"""
import pytest
from dbreader.exceptions import ReaderStateError
from dbreader.types import ScalarKind, coerce, resolve_type


class FakeRowCursor:
    """Row cursor over lists of (field names, rows) result sets.

    Counts close() calls and typed getter calls so tests can check what
    the reader delegates.
    """

    def __init__(self, *result_sets):
        self.result_sets = [(list(names), [tuple(r) for r in rows]) for names, rows in result_sets]
        self.set_index = 0
        self.row_index = -1
        self.closed = False
        self.close_count = 0
        self.getter_calls: list[tuple[str, int]] = []
        self.metadata_calls = 0

    @property
    def names(self):
        return self.result_sets[self.set_index][0]

    @property
    def rows(self):
        return self.result_sets[self.set_index][1]

    def _value(self, position):
        if self.row_index < 0:
            raise ReaderStateError('Invalid attempt to read when no data is present')
        if not 0 <= position < len(self.names):
            raise IndexError(position)
        return self.rows[self.row_index][position]

    def _get(self, kind, position):
        self.getter_calls.append((kind.value, position))
        return coerce(self._value(position), kind)

    def read_next_row(self):
        if self.row_index + 1 >= len(self.rows):
            return False
        self.row_index += 1
        return True

    def next_result_set(self):
        if self.set_index + 1 >= len(self.result_sets):
            return False
        self.set_index += 1
        self.row_index = -1
        return True

    def close(self):
        self.close_count += 1
        self.closed = True

    def is_closed(self):
        return self.closed

    def depth(self):
        return 0

    def field_count(self):
        self.metadata_calls += 1
        return len(self.names)

    def rows_affected(self):
        return -1

    def field_name(self, position):
        return self.names[position]

    def is_null(self, position):
        return self._value(position) is None

    def data_type_name(self, position):
        return resolve_type(None, self._value(position)).__name__

    def field_type(self, position):
        return resolve_type(None, self._value(position))

    def get_value(self, position):
        return self._value(position)

    def get_boolean(self, position):
        return self._get(ScalarKind.BOOLEAN, position)

    def get_byte(self, position):
        return self._get(ScalarKind.BYTE, position)

    def get_datetime(self, position):
        return self._get(ScalarKind.DATETIME, position)

    def get_decimal(self, position):
        return self._get(ScalarKind.DECIMAL, position)

    def get_double(self, position):
        return self._get(ScalarKind.DOUBLE, position)

    def get_float(self, position):
        return self._get(ScalarKind.FLOAT, position)

    def get_guid(self, position):
        return self._get(ScalarKind.GUID, position)

    def get_int16(self, position):
        return self._get(ScalarKind.INT16, position)

    def get_int32(self, position):
        return self._get(ScalarKind.INT32, position)

    def get_int64(self, position):
        return self._get(ScalarKind.INT64, position)

    def get_string(self, position):
        return self._get(ScalarKind.STRING, position)


@pytest.fixture
def make_cursor():
    """Factory for FakeRowCursor instances."""
    def factory(*result_sets):
        return FakeRowCursor(*result_sets)

    return factory
