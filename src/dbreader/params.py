"""
Named, typed query parameters.

    params = SqlParam.bind(
        SqlParam('@CustomerId', DbType.INT, customer_id),
        SqlParam('@Since', DbType.DATETIME, since),
    )
    cursor.execute('select ... where customer_id = :CustomerId', params)
"""
import enum
import math
from typing import Any

import numpy as np
import pandas as pd
from dbreader.types import ScalarKind

__all__ = ['DbType', 'SqlParam', 'convert_value']


class DbType(enum.Enum):
    """Database column types a parameter can be declared as."""

    BIT = ScalarKind.BOOLEAN
    TINYINT = ScalarKind.BYTE
    NCHAR = ScalarKind.CHAR
    DATETIME = ScalarKind.DATETIME
    DECIMAL = ScalarKind.DECIMAL
    FLOAT = ScalarKind.DOUBLE
    REAL = ScalarKind.FLOAT
    UNIQUEIDENTIFIER = ScalarKind.GUID
    SMALLINT = ScalarKind.INT16
    INT = ScalarKind.INT32
    BIGINT = ScalarKind.INT64
    NVARCHAR = ScalarKind.STRING

    @property
    def kind(self) -> ScalarKind:
        return self.value


def convert_value(value: Any) -> Any:
    """Convert a bind value to something every DB-API driver accepts.

    NaN, NaT and pandas NA become None; NumPy scalars become Python values.
    """
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            return None
        return pd.Timestamp(value).to_pydatetime()
    if isinstance(value, np.generic):
        value = value.item()
        if isinstance(value, float) and math.isnan(value):
            return None
        return value
    if pd.api.types.is_scalar(value) and pd.isna(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


class SqlParam:
    """A query parameter with a name and declared database type."""

    def __init__(self, name: str, db_type: DbType, value: Any) -> None:
        self.name = name
        self.db_type = db_type
        self._value = value

    def __repr__(self) -> str:
        return f'SqlParam({self.name!r}, {self.db_type.name}, {self._value!r})'

    @property
    def key(self) -> str:
        """Parameter name without a leading '@' or ':' marker."""
        return self.name.lstrip('@:')

    @property
    def value(self) -> Any:
        return convert_value(self._value)

    @staticmethod
    def bind(*params: 'SqlParam') -> dict[str, Any]:
        """Named-parameter mapping for cursor.execute()."""
        return {p.key: p.value for p in params}
