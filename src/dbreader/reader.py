"""
Column-name indexed reader over a row cursor.

`ReaderWrapper` keeps a name -> position index for the current result set
so columns can be read by name, and gives every scalar kind three access
policies:

- get_<kind>(name, default): null reads return `default`
- get_<kind>_not_null(name): null reads raise NullValueError
- get_nullable_<kind>(name): null reads return None

Usage:
    with ReaderWrapper(DbapiRowCursor(cursor), 'usp_get_orders') as reader:
        while reader.read():
            order_id = reader.get_int32_not_null('OrderId')
            shipped = reader.get_nullable_datetime('ShippedAt')
"""
import datetime
import decimal
import logging
import unicodedata
import uuid
from collections.abc import Callable, Iterator
from typing import Any, Self, TypeVar

from dbreader.cursor import RowCursor
from dbreader.exceptions import FieldNotFoundError, InvalidArgumentError
from dbreader.exceptions import InvalidCastError, NullValueError
from dbreader.types import ScalarKind

from libb import attrdict

logger = logging.getLogger(__name__)

__all__ = ['ReaderWrapper']

T = TypeVar('T')

_BOOLEAN = ScalarKind.BOOLEAN.zero
_BYTE = ScalarKind.BYTE.zero
_CHAR = ScalarKind.CHAR.zero
_DATETIME = ScalarKind.DATETIME.zero
_DECIMAL = ScalarKind.DECIMAL.zero
_DOUBLE = ScalarKind.DOUBLE.zero
_FLOAT = ScalarKind.FLOAT.zero
_GUID = ScalarKind.GUID.zero
_INT = ScalarKind.INT32.zero
_STRING = ScalarKind.STRING.zero


def _fold(name: str) -> str:
    return unicodedata.normalize('NFC', name).casefold()


def _names_match(requested: str, field_name: str) -> bool:
    """Case-insensitive, Unicode aware field name comparison."""
    return _fold(requested) == _fold(field_name)


class ReaderWrapper:
    """Name based, null aware access to a row cursor.

    The wrapper owns the cursor: closing or disposing the wrapper closes it.
    Not safe for concurrent use.
    """

    def __init__(self, cursor: RowCursor, description: str = '') -> None:
        """Initialize the reader and index the current result set.

        Args:
            cursor: Row cursor positioned at its first result set
            description: What is being read, e.g. a stored procedure name.
                Only used in error messages.
        """
        self.cursor = cursor
        self.description = description
        self._ordinals: dict[str, int] = {}
        self._field_names: tuple[str, ...] = ()
        self._build_ordinals()

    def __repr__(self) -> str:
        return f'ReaderWrapper({self.description!r}, fields={list(self._field_names)})'

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def __iter__(self) -> Iterator[Self]:
        """Advance row by row, yielding the reader positioned on each row."""
        while self.read():
            yield self

    def _build_ordinals(self) -> None:
        """Rebuild the name index from the cursor's current field metadata.

        First occurrence wins for duplicate column names.
        """
        ordinals: dict[str, int] = {}
        names = []
        for i in range(self.cursor.field_count()):
            name = self.cursor.field_name(i)
            ordinals.setdefault(name, i)
            names.append(name)
        self._ordinals = ordinals
        self._field_names = tuple(names)
        logger.debug(f'Indexed {len(names)} fields for reader {self.description!r}')

    # Cursor passthrough

    @property
    def field_names(self) -> tuple[str, ...]:
        """Column names of the current result set, by position."""
        return self._field_names

    @property
    def is_closed(self) -> bool:
        return self.cursor.is_closed()

    @property
    def depth(self) -> int:
        return self.cursor.depth()

    @property
    def field_count(self) -> int:
        return self.cursor.field_count()

    @property
    def rows_affected(self) -> int:
        """Rows changed by the statement; -1 for queries that return rows."""
        return self.cursor.rows_affected()

    def read(self) -> bool:
        """Advance to the next row. Returns False when no rows remain."""
        return self.cursor.read_next_row()

    def close(self) -> None:
        self.cursor.close()

    def dispose(self) -> None:
        """Close the underlying cursor if it is still open. Safe to repeat."""
        if not self.is_closed:
            self.close()

    def next_result(self) -> bool:
        """Advance to the next result set, re-indexing its columns.
        """
        if not self.cursor.next_result_set():
            return False
        logger.debug(f'Reader {self.description!r} moved to next result set')
        self._build_ordinals()
        return True

    # Name resolution

    def resolve(self, name: str) -> int:
        """Return the position of the named field.

        Falls back to a case-insensitive scan when there is no exact match,
        caching the spelling used so the next lookup is exact.

        Raises
            InvalidArgumentError: name is None
            FieldNotFoundError: no field matches, with or without case
        """
        if name is None:
            raise InvalidArgumentError('name')

        ordinal = self._ordinals.get(name)
        if ordinal is not None:
            return ordinal

        for i, field_name in enumerate(self._field_names):
            if _names_match(name, field_name):
                self._ordinals[name] = i
                logger.debug(f'Cached {name!r} as alias of field {field_name!r} ({i})')
                return i

        raise FieldNotFoundError(name)

    get_ordinal = resolve

    def field_exists(self, name: str) -> bool:
        """Whether `name` is in the index as currently cached.

        Unlike resolve() this does no case-insensitive scan: a field only
        reported under another casing is not found until resolve() has
        been called with this exact spelling.
        """
        if name is None:
            raise InvalidArgumentError('name')
        return name in self._ordinals

    def is_null(self, name: str) -> bool:
        return self.cursor.is_null(self.resolve(name))

    def get_data_type_name(self, name: str) -> str:
        return self.cursor.data_type_name(self.resolve(name))

    def get_field_type(self, name: str) -> type:
        return self.cursor.field_type(self.resolve(name))

    def get_value(self, name: str) -> Any:
        """Raw value of the named field, None for null."""
        return self.cursor.get_value(self.resolve(name))

    def to_dict(self) -> attrdict:
        """Snapshot of the current row keyed by field name.

        Duplicate names keep the first column's value.
        """
        row = attrdict()
        for i, name in enumerate(self._field_names):
            if name not in row:
                row[name] = self.cursor.get_value(i)
        return row

    # Null handling

    def _cast_error(self, name: str) -> InvalidCastError:
        return InvalidCastError(
            f"Invalid cast reading field '{name}', Reader: '{self.description}'")

    def _get_or_default(self, name: str, getter: Callable[[int], T], default: T) -> T:
        ordinal = self.resolve(name)
        if self.cursor.is_null(ordinal):
            return default
        try:
            return getter(ordinal)
        except InvalidCastError as ex:
            raise self._cast_error(name) from ex

    def _get_not_null(self, name: str, getter: Callable[[int], T],
                      describe: bool = False) -> T:
        ordinal = self.resolve(name)
        try:
            return getter(ordinal)
        except InvalidCastError as ex:
            raise self._cast_error(name) from ex
        except NullValueError as ex:
            message = f"Field '{name}' returned an invalid null"
            if describe:
                message += f", Reader: '{self.description}'"
            raise NullValueError(message + '.') from ex

    def _get_nullable(self, name: str, getter: Callable[[int], T]) -> T | None:
        ordinal = self.resolve(name)
        if self.cursor.is_null(ordinal):
            return None
        try:
            return getter(ordinal)
        except InvalidCastError as ex:
            raise self._cast_error(name) from ex

    def _char_at(self, ordinal: int, default: str) -> str:
        # Drivers have no single character type; read text and take the first
        # non-blank character
        text = self.cursor.get_string(ordinal).strip()
        return text[0] if text else default

    # Default-on-null accessors

    def get_boolean(self, name: str, default: bool = _BOOLEAN) -> bool:
        return self._get_or_default(name, self.cursor.get_boolean, default)

    def get_byte(self, name: str, default: int = _BYTE) -> int:
        return self._get_or_default(name, self.cursor.get_byte, default)

    def get_char(self, name: str, default: str = _CHAR) -> str:
        """First non-whitespace character of the field.

        Returns `default` when the field is null or blank.
        """
        return self._get_or_default(name, lambda i: self._char_at(i, default), default)

    def get_datetime(self, name: str,
                     default: datetime.datetime = _DATETIME) -> datetime.datetime:
        return self._get_or_default(name, self.cursor.get_datetime, default)

    def get_decimal(self, name: str, default: decimal.Decimal = _DECIMAL) -> decimal.Decimal:
        return self._get_or_default(name, self.cursor.get_decimal, default)

    def get_double(self, name: str, default: float = _DOUBLE) -> float:
        return self._get_or_default(name, self.cursor.get_double, default)

    def get_float(self, name: str, default: float = _FLOAT) -> float:
        """Single precision value of the field."""
        return self._get_or_default(name, self.cursor.get_float, default)

    def get_guid(self, name: str, default: uuid.UUID = _GUID) -> uuid.UUID:
        return self._get_or_default(name, self.cursor.get_guid, default)

    def get_int16(self, name: str, default: int = _INT) -> int:
        return self._get_or_default(name, self.cursor.get_int16, default)

    def get_int32(self, name: str, default: int = _INT) -> int:
        return self._get_or_default(name, self.cursor.get_int32, default)

    def get_int64(self, name: str, default: int = _INT) -> int:
        return self._get_or_default(name, self.cursor.get_int64, default)

    def get_string(self, name: str, default: str = _STRING) -> str:
        return self._get_or_default(name, self.cursor.get_string, default)

    # Reject-on-null accessors

    def get_boolean_not_null(self, name: str) -> bool:
        return self._get_not_null(name, self.cursor.get_boolean)

    def get_byte_not_null(self, name: str) -> int:
        return self._get_not_null(name, self.cursor.get_byte)

    def get_char_not_null(self, name: str) -> str:
        """First non-whitespace character of the field.

        A blank value raises IndexError from the character extraction.
        """
        return self._get_not_null(name, lambda i: self.cursor.get_string(i).strip()[0])

    def get_datetime_not_null(self, name: str) -> datetime.datetime:
        return self._get_not_null(name, self.cursor.get_datetime)

    def get_decimal_not_null(self, name: str) -> decimal.Decimal:
        return self._get_not_null(name, self.cursor.get_decimal)

    def get_double_not_null(self, name: str) -> float:
        return self._get_not_null(name, self.cursor.get_double)

    def get_float_not_null(self, name: str) -> float:
        return self._get_not_null(name, self.cursor.get_float)

    def get_guid_not_null(self, name: str) -> uuid.UUID:
        return self._get_not_null(name, self.cursor.get_guid)

    def get_int16_not_null(self, name: str) -> int:
        return self._get_not_null(name, self.cursor.get_int16)

    def get_int32_not_null(self, name: str) -> int:
        return self._get_not_null(name, self.cursor.get_int32)

    def get_int64_not_null(self, name: str) -> int:
        return self._get_not_null(name, self.cursor.get_int64)

    def get_string_not_null(self, name: str) -> str:
        return self._get_not_null(name, self.cursor.get_string, describe=True)

    # Nullable accessors

    def get_nullable_boolean(self, name: str) -> bool | None:
        return self._get_nullable(name, self.cursor.get_boolean)

    def get_nullable_byte(self, name: str) -> int | None:
        return self._get_nullable(name, self.cursor.get_byte)

    def get_nullable_char(self, name: str) -> str | None:
        return self._get_nullable(name, lambda i: self.get_char(name))

    def get_nullable_datetime(self, name: str) -> datetime.datetime | None:
        return self._get_nullable(name, self.cursor.get_datetime)

    def get_nullable_decimal(self, name: str) -> decimal.Decimal | None:
        return self._get_nullable(name, self.cursor.get_decimal)

    def get_nullable_double(self, name: str) -> float | None:
        return self._get_nullable(name, self.cursor.get_double)

    def get_nullable_float(self, name: str) -> float | None:
        return self._get_nullable(name, self.cursor.get_float)

    def get_nullable_guid(self, name: str) -> uuid.UUID | None:
        return self._get_nullable(name, self.cursor.get_guid)

    def get_nullable_int16(self, name: str) -> int | None:
        return self._get_nullable(name, self.cursor.get_int16)

    def get_nullable_int32(self, name: str) -> int | None:
        return self._get_nullable(name, self.cursor.get_int32)

    def get_nullable_int64(self, name: str) -> int | None:
        return self._get_nullable(name, self.cursor.get_int64)

    def get_nullable_string(self, name: str) -> str | None:
        return self._get_nullable(name, self.cursor.get_string)
