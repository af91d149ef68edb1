"""
Column-name indexed, null aware reader over database cursors.

    import dbreader

    cursor.execute('select OrderId, ShippedAt from orders')
    with dbreader.open_reader(cursor, description='orders') as reader:
        for row in reader:
            order_id = row.get_int32_not_null('orderid')
            shipped = row.get_nullable_datetime('ShippedAt')
"""
__version__ = '0.1.0'

from dbreader.cursor import DbapiRowCursor, RowCursor
from dbreader.exceptions import DatabaseError, FieldNotFoundError
from dbreader.exceptions import InvalidArgumentError, InvalidCastError
from dbreader.exceptions import NullValueError, ReaderStateError
from dbreader.options import ReaderOptions, open_reader
from dbreader.params import DbType, SqlParam
from dbreader.reader import ReaderWrapper
from dbreader.types import ScalarKind

__all__ = [
    'open_reader',
    'ReaderOptions',
    'ReaderWrapper',
    'RowCursor',
    'DbapiRowCursor',
    'ScalarKind',
    'SqlParam',
    'DbType',
    'DatabaseError',
    'FieldNotFoundError',
    'InvalidArgumentError',
    'InvalidCastError',
    'NullValueError',
    'ReaderStateError',
]
