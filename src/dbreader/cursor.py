"""
Row cursor interface and a DB-API 2.0 (PEP-249) implementation of it.

A row cursor walks a query result one row at a time and exposes typed
getters by ordinal position. The reader in `dbreader.reader` layers name
based access on top of any object satisfying `RowCursor`.
"""
import datetime
import decimal
import logging
import uuid
from collections import deque
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from dbreader.exceptions import ReaderStateError
from dbreader.types import ScalarKind, coerce, resolve_type, resolve_type_name

logger = logging.getLogger(__name__)

__all__ = ['RowCursor', 'DbapiRowCursor']


@runtime_checkable
class RowCursor(Protocol):
    """Sequential cursor over one or more result sets.

    Typed getters raise InvalidCastError when the value cannot be read as
    the requested kind and NullValueError when the value is null. Positions
    outside the current result set raise IndexError.
    """

    def read_next_row(self) -> bool: ...
    def next_result_set(self) -> bool: ...
    def close(self) -> None: ...
    def is_closed(self) -> bool: ...
    def depth(self) -> int: ...
    def field_count(self) -> int: ...
    def rows_affected(self) -> int: ...
    def field_name(self, position: int) -> str: ...
    def is_null(self, position: int) -> bool: ...
    def data_type_name(self, position: int) -> str: ...
    def field_type(self, position: int) -> type: ...
    def get_value(self, position: int) -> Any: ...
    def get_boolean(self, position: int) -> bool: ...
    def get_byte(self, position: int) -> int: ...
    def get_datetime(self, position: int) -> datetime.datetime: ...
    def get_decimal(self, position: int) -> decimal.Decimal: ...
    def get_double(self, position: int) -> float: ...
    def get_float(self, position: int) -> float: ...
    def get_guid(self, position: int) -> uuid.UUID: ...
    def get_int16(self, position: int) -> int: ...
    def get_int32(self, position: int) -> int: ...
    def get_int64(self, position: int) -> int: ...
    def get_string(self, position: int) -> str: ...


class DbapiRowCursor:
    """Row cursor over a DB-API 2.0 cursor that has already executed a query.

    Rows are fetched in chunks of `fetch_size` and handed out one at a time.
    Multiple result sets are supported when the driver implements
    `nextset()` (psycopg, pyodbc); otherwise there is only one.
    """

    def __init__(self, cursor: Any, fetch_size: int = 5000) -> None:
        """Initialize cursor wrapper.

        Args:
            cursor: The underlying DB-API cursor, already executed
            fetch_size: Rows requested from the driver per fetchmany() call
        """
        self.dbapi_cursor = cursor
        self.fetch_size = fetch_size
        self._buffer: deque = deque()
        self._row: tuple | None = None
        self._exhausted = False
        self._closed = False

    def __repr__(self) -> str:
        return f'DbapiRowCursor({self.dbapi_cursor!r}, fetch_size={self.fetch_size})'

    @property
    def description(self) -> list[tuple]:
        return self.dbapi_cursor.description or []

    def _check_open(self) -> None:
        if self._closed:
            raise ReaderStateError('Invalid attempt to read when the reader is closed')

    def _fill_buffer(self) -> None:
        if self._exhausted:
            return
        if self.dbapi_cursor.description is None:
            self._exhausted = True
            return
        chunk = self.dbapi_cursor.fetchmany(self.fetch_size)
        if not chunk:
            self._exhausted = True
            return
        self._buffer.extend(chunk)

    def read_next_row(self) -> bool:
        self._check_open()
        if not self._buffer:
            self._fill_buffer()
        if not self._buffer:
            self._row = None
            return False
        row = self._buffer.popleft()
        self._row = tuple(row.values()) if isinstance(row, Mapping) else row
        return True

    def next_result_set(self) -> bool:
        self._check_open()
        nextset = getattr(self.dbapi_cursor, 'nextset', None)
        if nextset is None:
            return False
        if not nextset():
            return False
        self._buffer.clear()
        self._row = None
        self._exhausted = False
        logger.debug(f'Advanced to next result set with {self.field_count()} fields')
        return True

    def close(self) -> None:
        if self._closed:
            return
        self.dbapi_cursor.close()
        self._closed = True
        self._buffer.clear()
        self._row = None
        logger.debug('Closed DB-API cursor')

    def is_closed(self) -> bool:
        return self._closed

    def depth(self) -> int:
        # DB-API result sets are flat
        return 0

    def field_count(self) -> int:
        return len(self.description)

    def rows_affected(self) -> int:
        return self.dbapi_cursor.rowcount

    def field_name(self, position: int) -> str:
        item = self.description[position]
        return getattr(item, 'name', None) or item[0]

    def _type_code(self, position: int) -> Any:
        item = self.description[position]
        return getattr(item, 'type_code', None) or item[1]

    def _value(self, position: int) -> Any:
        self._check_open()
        if self._row is None:
            raise ReaderStateError('Invalid attempt to read when no data is present')
        if not 0 <= position < len(self._row):
            raise IndexError(f'Index {position} is outside the bounds of the row')
        return self._row[position]

    def _current_or_none(self, position: int) -> Any:
        if self._row is None or not 0 <= position < len(self._row):
            return None
        return self._row[position]

    def is_null(self, position: int) -> bool:
        return self._value(position) is None

    def data_type_name(self, position: int) -> str:
        return resolve_type_name(self._type_code(position), self._current_or_none(position))

    def field_type(self, position: int) -> type:
        return resolve_type(self._type_code(position), self._current_or_none(position))

    def get_value(self, position: int) -> Any:
        return self._value(position)

    def get_boolean(self, position: int) -> bool:
        return coerce(self._value(position), ScalarKind.BOOLEAN)

    def get_byte(self, position: int) -> int:
        return coerce(self._value(position), ScalarKind.BYTE)

    def get_datetime(self, position: int) -> datetime.datetime:
        return coerce(self._value(position), ScalarKind.DATETIME)

    def get_decimal(self, position: int) -> decimal.Decimal:
        return coerce(self._value(position), ScalarKind.DECIMAL)

    def get_double(self, position: int) -> float:
        return coerce(self._value(position), ScalarKind.DOUBLE)

    def get_float(self, position: int) -> float:
        return coerce(self._value(position), ScalarKind.FLOAT)

    def get_guid(self, position: int) -> uuid.UUID:
        return coerce(self._value(position), ScalarKind.GUID)

    def get_int16(self, position: int) -> int:
        return coerce(self._value(position), ScalarKind.INT16)

    def get_int32(self, position: int) -> int:
        return coerce(self._value(position), ScalarKind.INT32)

    def get_int64(self, position: int) -> int:
        return coerce(self._value(position), ScalarKind.INT64)

    def get_string(self, position: int) -> str:
        return coerce(self._value(position), ScalarKind.STRING)
