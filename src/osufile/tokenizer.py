"""Splits section lines into comma-separated fields, and reports errors with their location.

:py:class:`FieldTokenizer` walks the fields of one line in order. Each fetch names the field it
expects, so running out of fields raises :py:class:`~osufile.errors.MissingFieldError` and a value
the codec rejects raises :py:class:`~osufile.errors.InvalidFieldError`, both tagged with that name.

:py:class:`LineSyntaxError` is the shared wrapper that attaches the physical line number (and
optionally a filename) to any of those errors, once a whole section is being parsed.
"""
from typing import Callable, List, Optional, TypeVar, Union

from .errors import InvalidFieldError, MissingFieldError


__all__ = ['LineSyntaxError', 'FieldTokenizer', 'format_exc_fileinfo']
T = TypeVar('T')


def format_exc_fileinfo(msg: str, file: Optional[str], line_num: Optional[int]) -> str:
    """If a line number or file is provided, include those in the error message.

    The line number is 0-based, but displayed 1-based to match text editors.
    """
    if file is None and line_num is None:
        return msg
    parts = [msg]
    if line_num is not None:
        parts.append(f'\nError occurred on line {line_num + 1}')
        if file is not None:
            parts.append(f', with file "{file}".')
        else:
            parts.append('.')
    elif file is not None:
        parts.append(f'\nError occurred with file "{file}".')
    return ''.join(parts)


class LineSyntaxError(Exception):
    """An error that occurred when parsing a section, with the line it occurred on.

    The original exception is available as :py:attr:`error`, and is also set as the cause.
    """
    mess: str
    """The error message that occurred."""
    error: Optional[Exception]
    """The error raised by the line's parser, if any."""
    file: Optional[str]
    """The filename of the file being parsed, or ``None`` if not known."""
    line_num: Optional[int]
    """The 0-based physical line where the error occurred, counting blank lines."""

    def __init__(
        self,
        error: Union[Exception, str],
        line_num: Optional[int] = None,
        file: Optional[str] = None,
    ) -> None:
        super().__init__()
        if isinstance(error, str):
            self.mess = error
            self.error = None
        else:
            self.mess = str(error)
            self.error = error
        self.line_num = line_num
        self.file = file

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.mess!r}, {self.line_num!r}, {self.file!r})'

    # This is mutable.
    __hash__ = None  # type: ignore[assignment]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LineSyntaxError):
            return (
                self.mess == other.mess and
                self.file == other.file and
                self.line_num == other.line_num
            )
        return NotImplemented

    def __str__(self) -> str:
        """Generate the complete error message.

        This includes the line number and file, if available.
        """
        return format_exc_fileinfo(self.mess, self.file, self.line_num)


class FieldTokenizer:
    """Reads the comma-separated fields of a single line, in order."""
    line: str
    _fields: List[str]
    _pos: int
    _sep: str

    def __init__(self, line: str, sep: str = ',') -> None:
        self.line = line
        self._fields = line.split(sep)
        self._pos = 0
        self._sep = sep

    def __repr__(self) -> str:
        return f'<FieldTokenizer {self.line!r} @ {self._pos}>'

    def __bool__(self) -> bool:
        """A tokenizer is truthy if fields remain."""
        return self._pos < len(self._fields)

    @property
    def remaining(self) -> int:
        """The number of fields left to read."""
        return len(self._fields) - self._pos

    def __call__(self, field: str) -> str:
        """Fetch the next field, which must be present."""
        if self._pos >= len(self._fields):
            raise MissingFieldError(field)
        value = self._fields[self._pos]
        self._pos += 1
        return value

    def parse(self, field: str, conv: Callable[[str], T]) -> T:
        """Fetch the next field, converting it with ``conv``.

        ``ValueError`` from the converter becomes an :py:class:`InvalidFieldError`.
        """
        value = self(field)
        try:
            return conv(value)
        except ValueError:
            raise InvalidFieldError(field, value) from None

    def parse_optional(self, field: str, conv: Callable[[str], T]) -> Optional[T]:
        """Fetch the next field, which may be textually empty to produce ``None``."""
        value = self(field)
        if not value:
            return None
        try:
            return conv(value)
        except ValueError:
            raise InvalidFieldError(field, value) from None

    def rest(self) -> List[str]:
        """Consume and return all remaining fields."""
        fields = self._fields[self._pos:]
        self._pos = len(self._fields)
        return fields

    def parse_last(self, field: str, conv: Callable[[str], T]) -> T:
        """Fetch the final field of the line.

        Any fields after this are included in the value, which then fails to parse.
        """
        if self._pos >= len(self._fields):
            raise MissingFieldError(field)
        value = self._sep.join(self.rest())
        try:
            return conv(value)
        except ValueError:
            raise InvalidFieldError(field, value) from None
