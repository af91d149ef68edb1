from dataclasses import dataclass, replace
from typing import Any

from dbreader.cursor import DbapiRowCursor, RowCursor
from dbreader.reader import ReaderWrapper

from libb import ConfigOptions, load_options

__all__ = ['ReaderOptions', 'open_reader']


@dataclass
class ReaderOptions(ConfigOptions):
    """Options

    description: what is being read, used in error messages
    fetch_size: rows requested from the driver per fetchmany() call
    """
    description: str = ''
    fetch_size: int = 5000

    def __post_init__(self):
        if self.fetch_size < 1:
            raise ValueError('fetch_size must be a positive integer')
        self.description = self.description or ''


def open_reader(cursor: Any, options: ReaderOptions | dict[str, Any] | str | None = None,
                config: Any | None = None, **kw: Any) -> ReaderWrapper:
    """Wrap an executed cursor in a ReaderWrapper.

    Args:
        cursor: A RowCursor, or a DB-API cursor that has executed a query
        options: Can be:
                - ReaderOptions object
                - String path to configuration
                - Dictionary of options
                - Options specified as keyword arguments
        config: Configuration object (for loading from config files)
        **kw: Additional keyword arguments to override options

    Returns
        ReaderWrapper positioned before the first row
    """
    if isinstance(options, ReaderOptions):
        if kw:
            options = replace(options, **kw)
    elif isinstance(options, str):
        options_func = load_options(cls=ReaderOptions)(lambda o, c: o)
        options = options_func(options, config, **kw)
    else:
        options = ReaderOptions(**{**(options or {}), **kw})

    if not isinstance(cursor, RowCursor):
        cursor = DbapiRowCursor(cursor, fetch_size=options.fetch_size)

    return ReaderWrapper(cursor, options.description)
