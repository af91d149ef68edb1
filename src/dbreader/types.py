"""
Scalar kinds and value coercion for typed column access.

This module provides:
- ScalarKind: the scalar kinds a reader can return, with their zero values
- coerce: strict conversion of a raw driver value to a scalar kind
- resolve_type / resolve_type_name: database type codes -> Python types
"""
import datetime
import decimal
import enum
import math
import uuid
from typing import Any

import dateutil.parser
import numpy as np
from dbreader.exceptions import InvalidCastError, NullValueError

__all__ = [
    'ScalarKind',
    'coerce',
    'resolve_type',
    'resolve_type_name',
    'postgres_types',
    'sqlite_types',
]

INT_RANGES: dict[str, tuple[int, int]] = {
    'byte': (0, 2 ** 8 - 1),
    'int16': (-2 ** 15, 2 ** 15 - 1),
    'int32': (-2 ** 31, 2 ** 31 - 1),
    'int64': (-2 ** 63, 2 ** 63 - 1),
}


class ScalarKind(enum.Enum):
    """Scalar kinds readable by name, keyed by accessor suffix."""

    BOOLEAN = 'boolean'
    BYTE = 'byte'
    CHAR = 'char'
    DATETIME = 'datetime'
    DECIMAL = 'decimal'
    DOUBLE = 'double'
    FLOAT = 'float'
    GUID = 'guid'
    INT16 = 'int16'
    INT32 = 'int32'
    INT64 = 'int64'
    STRING = 'string'

    @property
    def zero(self) -> Any:
        """Value returned for a null when the caller supplies no default."""
        return _ZERO_VALUES[self]

    @property
    def python_type(self) -> type:
        return _PYTHON_TYPES[self]


_ZERO_VALUES: dict[ScalarKind, Any] = {
    ScalarKind.BOOLEAN: False,
    ScalarKind.BYTE: 0,
    ScalarKind.CHAR: '\0',
    ScalarKind.DATETIME: datetime.datetime.min,
    ScalarKind.DECIMAL: decimal.Decimal(0),
    ScalarKind.DOUBLE: 0.0,
    ScalarKind.FLOAT: 0.0,
    ScalarKind.GUID: uuid.UUID(int=0),
    ScalarKind.INT16: 0,
    ScalarKind.INT32: 0,
    ScalarKind.INT64: 0,
    ScalarKind.STRING: '',
}

_PYTHON_TYPES: dict[ScalarKind, type] = {
    ScalarKind.BOOLEAN: bool,
    ScalarKind.BYTE: int,
    ScalarKind.CHAR: str,
    ScalarKind.DATETIME: datetime.datetime,
    ScalarKind.DECIMAL: decimal.Decimal,
    ScalarKind.DOUBLE: float,
    ScalarKind.FLOAT: float,
    ScalarKind.GUID: uuid.UUID,
    ScalarKind.INT16: int,
    ScalarKind.INT32: int,
    ScalarKind.INT64: int,
    ScalarKind.STRING: str,
}


def _cast_error(value: Any, kind: ScalarKind) -> InvalidCastError:
    return InvalidCastError(
        f'Unable to cast value of type {type(value).__name__} to {kind.value}')


def _normalize(value: Any) -> Any:
    """Unwrap numpy scalars returned by some drivers."""
    if isinstance(value, np.generic):
        return value.item()
    return value


def _to_integer(value: Any, kind: ScalarKind) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise _cast_error(value, kind)
    low, high = INT_RANGES[kind.value]
    if not low <= value <= high:
        raise InvalidCastError(f'Value {value} is out of range for {kind.value}')
    return value


def _to_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    # SQLite and SQL Server bit columns come back as 0/1
    if isinstance(value, int) and value in {0, 1}:
        return bool(value)
    raise _cast_error(value, ScalarKind.BOOLEAN)


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime.combine(value, datetime.time.min)
    if isinstance(value, str):
        try:
            return dateutil.parser.isoparse(value)
        except ValueError as err:
            raise _cast_error(value, ScalarKind.DATETIME) from err
    raise _cast_error(value, ScalarKind.DATETIME)


def _to_decimal(value: Any) -> decimal.Decimal:
    if isinstance(value, decimal.Decimal):
        return value
    if isinstance(value, bool):
        raise _cast_error(value, ScalarKind.DECIMAL)
    if isinstance(value, int | float | str):
        try:
            return decimal.Decimal(str(value))
        except decimal.InvalidOperation as err:
            raise _cast_error(value, ScalarKind.DECIMAL) from err
    raise _cast_error(value, ScalarKind.DECIMAL)


def _to_double(value: Any, kind: ScalarKind = ScalarKind.DOUBLE) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float | decimal.Decimal):
        raise _cast_error(value, kind)
    return float(value)


FLOAT32_MAX = float(np.finfo(np.float32).max)


def _to_single(value: Any) -> float:
    value = _to_double(value, ScalarKind.FLOAT)
    if math.isfinite(value) and abs(value) > FLOAT32_MAX:
        raise InvalidCastError(f'Value {value} is out of range for float')
    return float(np.float32(value))


def _to_guid(value: Any) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        if isinstance(value, str):
            return uuid.UUID(value)
        if isinstance(value, bytes | bytearray) and len(value) == 16:
            return uuid.UUID(bytes=bytes(value))
    except ValueError as err:
        raise _cast_error(value, ScalarKind.GUID) from err
    raise _cast_error(value, ScalarKind.GUID)


def _to_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    raise _cast_error(value, ScalarKind.STRING)


def coerce(value: Any, kind: ScalarKind) -> Any:
    """Convert a raw driver value to the requested scalar kind.

    Raises NullValueError for a null, InvalidCastError when the value cannot
    be represented as `kind`. Character access is built on top of STRING by
    the reader and is not handled here.
    """
    if value is None:
        raise NullValueError('Data is Null. This method cannot be called on Null values.')
    value = _normalize(value)
    match kind:
        case ScalarKind.BOOLEAN:
            return _to_boolean(value)
        case ScalarKind.BYTE | ScalarKind.INT16 | ScalarKind.INT32 | ScalarKind.INT64:
            return _to_integer(value, kind)
        case ScalarKind.DATETIME:
            return _to_datetime(value)
        case ScalarKind.DECIMAL:
            return _to_decimal(value)
        case ScalarKind.DOUBLE:
            return _to_double(value)
        case ScalarKind.FLOAT:
            return _to_single(value)
        case ScalarKind.GUID:
            return _to_guid(value)
        case ScalarKind.STRING | ScalarKind.CHAR:
            return _to_string(value)
    raise ValueError(f'Unsupported scalar kind: {kind}')


# Type Resolution - Database type codes -> Python types

from psycopg.postgres import types as pg_types

_oid = lambda x: pg_types.get(x).oid

postgres_types: dict[int, type] = {}

for v in [_oid('"char"'), _oid('bpchar'), _oid('character varying'), _oid('name'),
          _oid('text'), _oid('varchar'), _oid('json')]:
    postgres_types[v] = str

for v in [_oid('int2'), _oid('int4'), _oid('int8')]:
    postgres_types[v] = int

for v in [_oid('float4'), _oid('float8')]:
    postgres_types[v] = float

postgres_types[_oid('numeric')] = decimal.Decimal
postgres_types[_oid('uuid')] = uuid.UUID
postgres_types[_oid('bool')] = bool
postgres_types[_oid('bytea')] = bytes
postgres_types[_oid('date')] = datetime.date

for v in [_oid('timestamp'), _oid('timestamptz')]:
    postgres_types[v] = datetime.datetime

for v in [_oid('time'), _oid('timetz')]:
    postgres_types[v] = datetime.time


sqlite_types: dict[str, type] = {
    'INTEGER': int,
    'INT': int,
    'BIGINT': int,
    'SMALLINT': int,
    'TINYINT': int,
    'REAL': float,
    'FLOAT': float,
    'DOUBLE': float,
    'TEXT': str,
    'VARCHAR': str,
    'CHAR': str,
    'BLOB': bytes,
    'NUMERIC': decimal.Decimal,
    'DECIMAL': decimal.Decimal,
    'BOOLEAN': bool,
    'DATE': datetime.date,
    'DATETIME': datetime.datetime,
    'TIMESTAMP': datetime.datetime,
    'TIME': datetime.time,
    'UUID': uuid.UUID,
}


def resolve_type(type_code: Any, value: Any = None) -> type:
    """Resolve a cursor description type code to a Python type.

    Priority:
    1. type code that is already a Python type (pyodbc)
    2. PostgreSQL OID
    3. SQLite declared type name
    4. type of the current value, when not null
    5. str
    """
    if isinstance(type_code, type):
        return type_code
    if isinstance(type_code, int) and type_code in postgres_types:
        return postgres_types[type_code]
    if isinstance(type_code, str):
        base_type = type_code.split('(')[0].strip().upper()
        if base_type in sqlite_types:
            return sqlite_types[base_type]
    if value is not None:
        return type(_normalize(value))
    return str


def resolve_type_name(type_code: Any, value: Any = None) -> str:
    """Database-side name of a column type, as best the driver reports it."""
    if isinstance(type_code, str) and type_code:
        return type_code.upper()
    if isinstance(type_code, int) and not isinstance(type_code, bool):
        info = pg_types.get(type_code)
        if info is not None:
            return info.name
    return resolve_type(type_code, value).__name__
