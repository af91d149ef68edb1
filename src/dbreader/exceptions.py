"""
Reader-specific exception classes.
"""


class DatabaseError(Exception):
    """Base class for all dbreader errors.
    """


class InvalidArgumentError(DatabaseError, ValueError):
    """A required argument (such as a field name) was missing.
    """


class FieldNotFoundError(DatabaseError, IndexError):
    """Field name could not be resolved in the current result set.

    Subclasses IndexError so a name lookup fails the same way a bad
    positional access does.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


class InvalidCastError(DatabaseError, TypeError):
    """Value could not be read as the requested scalar kind.
    """


class NullValueError(DatabaseError, ValueError):
    """A null was read where a value was required.
    """


class ReaderStateError(DatabaseError):
    """Reader is not positioned on a row, or is already closed.
    """
