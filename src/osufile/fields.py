"""Primitive field codecs shared by every section of a beatmap file.

These parse and format the small scalar types that appear in comma-separated records:
integers, decimals, ``0``/``1`` booleans, bit-flag sets and colon-separated sets. They all
raise :external:py:class:`ValueError` on bad input, which callers convert into field-tagged
errors. The module also defines the shared :py:class:`Position` and :py:class:`FilePath` types.
"""
from typing import Callable, Iterable, List, Optional, Type, TypeVar, Union
from typing_extensions import Literal, Self, TypeAlias
from decimal import Decimal
import enum
import re

import attrs


__all__ = [
    'Number', 'Position', 'FilePath',
    'parse_int', 'parse_decimal', 'parse_zero_one_bool', 'bool_as_int',
    'parse_bit_flags', 'check_flag_at_bit',
    'parse_colon_set', 'join_colon_set',
]

T = TypeVar('T')
FlagT = TypeVar('FlagT', bound=enum.IntFlag)
Number: TypeAlias = Union[int, Decimal]

_INT_RE = re.compile(r'[+-]?[0-9]+')
_DECIMAL_RE = re.compile(r'-?[0-9]+(?:\.[0-9]+)?')


def parse_int(text: str) -> int:
    """Parse a plain integer.

    Unlike :external:py:class:`int`, surrounding whitespace and ``_`` separators are rejected,
    so the parsed value always formats back to the same digits.
    """
    if _INT_RE.fullmatch(text) is None:
        raise ValueError(f'Invalid integer "{text}"')
    return int(text)


def parse_decimal(text: str) -> Decimal:
    """Parse a decimal number, keeping the written precision.

    ``Decimal('1.50')`` formats back to ``1.50``, which floats cannot do. Exponents, a
    leading ``+`` and bare ``.5`` or ``5.`` are rejected, since those would not.
    """
    if _DECIMAL_RE.fullmatch(text) is None:
        raise ValueError(f'Invalid decimal "{text}"')
    return Decimal(text)


def parse_zero_one_bool(text: str) -> bool:
    """Parse a boolean written as ``0`` or ``1``."""
    value = parse_int(text)
    if value == 0:
        return False
    elif value == 1:
        return True
    raise ValueError(f'Expected a value of 0 or 1, got "{text}"')


def bool_as_int(val: object) -> Literal['0', '1']:
    """Convert a True/False value into ``'1'`` or ``'0'``."""
    if val:
        return '1'
    else:
        return '0'


def check_flag_at_bit(value: int, bit: int) -> bool:
    """Check if the ``bit``-th bit of the value is set."""
    return (value >> bit) & 1 == 1


def parse_bit_flags(text: str, flag_type: Type[FlagT]) -> FlagT:
    """Parse an integer bit-flag set into the given :external:py:class:`enum.IntFlag`.

    Bits which have no matching member are rejected.
    """
    value = parse_int(text)
    if value < 0:
        raise ValueError(f'Bit flags cannot be negative, got "{text}"')
    known = 0
    for member in flag_type:
        known |= member.value
    if value & ~known:
        raise ValueError(f'Unknown bits set in "{text}" for {flag_type.__name__}')
    return flag_type(value)


def parse_colon_set(
    text: str,
    conv: Callable[[str], T],
    length: Optional[int] = None,
) -> List[T]:
    """Parse a colon-separated set like ``1:2:0:0:``.

    Each item is passed to ``conv``. A trailing empty item (from a final colon) is parsed like any
    other, so converters which reject empty strings should be wrapped by the caller.
    If ``length`` is given, the set must have exactly that many items.
    """
    parts = text.split(':')
    if length is not None and len(parts) != length:
        raise ValueError(f'Expected {length} colon-separated values, got {len(parts)}')
    return [conv(part) for part in parts]


def join_colon_set(values: Iterable[object]) -> str:
    """Produce the textual form of a colon-separated set."""
    return ':'.join([str(val) for val in values])


@attrs.frozen
class Position:
    """A 2D position on the playfield.

    Shorthand events use integer coordinates, storyboard objects allow decimals.
    """
    x: Number
    y: Number

    @classmethod
    def parse(cls, x: str, y: str, conv: Callable[[str], Number] = parse_int) -> Self:
        """Parse a pair of coordinates using the given codec."""
        return cls(conv(x), conv(y))

    def __str__(self) -> str:
        return f'{self.x},{self.y}'


@attrs.frozen
class FilePath:
    """A file path relative to the beatmap folder.

    Paths are usually quoted, but not always. The quoting is kept, so the path is written back the same way.
    """
    path: str
    quoted: bool = attrs.field(default=False, kw_only=True)

    @classmethod
    def parse(cls, text: str) -> Self:
        """Parse a path, stripping the quotes if present."""
        if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
            return cls(text[1:-1], quoted=True)
        return cls(text)

    def __str__(self) -> str:
        if self.quoted:
            return f'"{self.path}"'
        return self.path
