"""
Wrapper around logging to provide our own functionality.

This adds the ability to log using str.format() instead of %, and to tag messages
with the file currently being processed.
"""
from typing import (
    TYPE_CHECKING, Any, Dict, Generator, List, Mapping, Optional, Tuple, Type, Union, cast,
)
from pathlib import Path
from types import TracebackType
import contextlib
import contextvars
import logging
import os
import sys


__all__ = ['LoggerAdapter', 'Formatter', 'get_handler', 'get_logger', 'init_logging', 'context']
CTX_STACK: 'contextvars.ContextVar[List[str]]' = contextvars.ContextVar('osufile_logger')
#: Set this environment variable to ``1`` to show debug messages on the console.
DEBUG_ENV = 'OSUFILE_DEBUG'


class LogMessage:
    """Allow using str.format() in logging messages.

    The __str__() method performs the joining.
    """
    fmt: str
    args: Tuple[object, ...]
    kwargs: Dict[str, object]
    has_args: bool

    def __init__(
        self,
        fmt: str,
        args: Tuple[object, ...],
        kwargs: Dict[str, object],
    ) -> None:
        self.fmt = fmt
        self.args = args
        self.kwargs = kwargs
        self.has_args = bool(kwargs or args)

    def format_msg(self) -> str:
        """Format using str.format."""
        # Only format if we have arguments, so { or } can be used in plain messages.
        if self.has_args:
            f = self.fmt = str(self.fmt).format(*self.args, **self.kwargs)
            del self.args, self.kwargs
            self.has_args = False
            return f
        else:
            return str(self.fmt)

    def __str__(self) -> str:
        """Format the string, and indent continuation lines."""
        msg = self.format_msg()
        if '\n' not in msg:
            return msg
        lines = msg.split('\n')
        if lines[-1].isspace() or not lines[-1]:
            del lines[-1]
        # | first
        # | second
        # |___
        return '\n | '.join(lines) + '\n |___\n'


_SysExcInfoType = Union[
    Tuple[Type[BaseException], BaseException, Optional[TracebackType]],
    Tuple[None, None, None]
]
if TYPE_CHECKING:  # Only generic in stubs.
    _AdapterBase = logging.LoggerAdapter[logging.Logger]
else:
    _AdapterBase = logging.LoggerAdapter


class LoggerAdapter(_AdapterBase):
    """Fix loggers to use str.format(), and include the current context."""
    logger: logging.Logger

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger
        logging.LoggerAdapter.__init__(self, logger, extra={})

    def log(
        self,
        level: int,
        msg: Any,
        *args: Any,
        exc_info: Union[None, bool, _SysExcInfoType, BaseException] = None,
        stack_info: bool = False,
        extra: Optional[Mapping[str, object]] = None,
        stacklevel: int = 0,
        **kwargs: Any,
    ) -> None:
        """This version of :external:py:meth:`~logging.Logger.log()` is for :external:py:meth:`str.format()` compatibility.

        The message is wrapped in a :py:class:`LogMessage` object, which is given the
        ``args`` and ``kwargs``.
        """
        if self.isEnabledFor(level):
            new_extra = {} if extra is None else dict(extra)
            ctx = ', '.join(CTX_STACK.get([]))
            new_extra['osufile_context'] = f' ({ctx})' if ctx else ''

            # Skip over the adapter's own frames.
            if sys.version_info >= (3, 10):
                stacklevel += 2

            # noinspection PyProtectedMember
            self.logger._log(
                level,
                LogMessage(str(msg), args, kwargs),
                (),  # Formatting is done by LogMessage.
                extra=new_extra,
                exc_info=exc_info,
                stack_info=stack_info,
                stacklevel=stacklevel,
            )

    def __getattr__(self, attr: str) -> Any:
        """Delegate unknown methods to the logger."""
        return getattr(self.logger, attr)


class Formatter(logging.Formatter):
    """Ensure the context is available to format strings."""
    def format(self, record: logging.LogRecord) -> str:
        """Ensure a default context is set in the record."""
        record.__dict__.setdefault('osufile_context', '')
        return super().format(record)


def get_handler(filename: 'str | os.PathLike[str]') -> logging.FileHandler:
    """Keep the previous log as ``name.1.log``, then give a handler writing to the file."""
    path = Path(filename)
    ext = ''.join(path.suffixes)
    previous = path.with_suffix('.1' + ext)
    try:
        previous.unlink(missing_ok=True)
        path.rename(previous)
    except FileNotFoundError:
        pass
    return logging.FileHandler(path, mode='w', encoding='utf8')


def init_logging(filename: 'str | os.PathLike[str] | None' = None) -> logging.Logger:
    """Set up the root logger to write to the console, and optionally a file.

    Debug messages are shown on the console only if the ``OSUFILE_DEBUG`` environment
    variable is ``1``. Warnings and errors go to stderr, everything else to stdout.
    """
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG)

    long_log_format = Formatter(
        '[{levelname}]{osufile_context} {module}.{funcName}(): {message}',
        style='{',
    )
    # One letter for the level name.
    short_log_format = Formatter(
        '[{levelname[0]}]{osufile_context} {message}',
        style='{',
    )

    if filename is not None:
        os.makedirs(os.path.dirname(os.path.abspath(filename)), exist_ok=True)
        log_handler = get_handler(filename)
        log_handler.setLevel(logging.DEBUG)
        log_handler.setFormatter(long_log_format)
        logger.addHandler(log_handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(
        logging.DEBUG
        if os.environ.get(DEBUG_ENV, '0') == '1' else
        logging.INFO
    )
    stdout_handler.setFormatter(short_log_format)
    # Warnings are written by the stderr handler.
    stdout_handler.addFilter(lambda record: record.levelno < logging.WARNING)
    logger.addHandler(stdout_handler)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(short_log_format)
    logger.addHandler(stderr_handler)

    return get_logger()


def get_logger(name: str = '') -> logging.Logger:
    """Get the named logger object.

    This puts the logger into the ``osufile`` namespace, and wraps it to
    use :external:py:meth:`str.format()` instead of ``%`` formatting.
    Module names already inside the package are used as-is.
    """
    if not name:
        log = logging.getLogger('osufile')
    elif name == 'osufile' or name.startswith('osufile.'):
        log = logging.getLogger(name)
    else:
        log = logging.getLogger('osufile.' + name)
    return cast(logging.Logger, LoggerAdapter(log))


@contextlib.contextmanager
def context(name: str) -> Generator[str, None, None]:
    """Context manager to allow specifying additional information for any logs contained in this block.

    The specified string gets included in the log messages.
    """
    stack = CTX_STACK.get([])
    token = CTX_STACK.set([*stack, name])
    try:
        yield name
    finally:
        CTX_STACK.reset(token)
