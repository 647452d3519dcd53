"""Test the primitive field codecs."""
from decimal import Decimal
import enum

import pytest

from osufile.fields import (
    FilePath, Position, bool_as_int, check_flag_at_bit, join_colon_set, parse_bit_flags,
    parse_colon_set, parse_decimal, parse_int, parse_zero_one_bool,
)


class HitSound(enum.IntFlag):
    """Bit flags like those used by hit objects."""
    NORMAL = 1
    WHISTLE = 2
    FINISH = 4
    CLAP = 8


@pytest.mark.parametrize('text, value', [
    ('0', 0),
    ('42', 42),
    ('-24', -24),
    ('+7', 7),
])
def test_parse_int(text: str, value: int) -> None:
    """Test parsing plain integers."""
    assert parse_int(text) == value


@pytest.mark.parametrize('text', ['', ' 1', '1 ', '1_000', '1.0', '0x10', 'foo', '-'])
def test_parse_int_invalid(text: str) -> None:
    """Anything int() would do extra interpretation on is rejected."""
    with pytest.raises(ValueError):
        parse_int(text)


@pytest.mark.parametrize('text', ['0', '1.50', '-0.5', '0.25', '320.0001', '-100'])
def test_parse_decimal_keeps_text(text: str) -> None:
    """Decimals format back to the same text."""
    value = parse_decimal(text)
    assert isinstance(value, Decimal)
    assert str(value) == text


@pytest.mark.parametrize('text', [
    '', 'nan', 'Infinity', '1,5', 'one', '1.2.3',
    # These would be written back differently.
    '1e2', '.5', '5.', '+1.5',
])
def test_parse_decimal_invalid(text: str) -> None:
    """Test text which isn't a decimal number."""
    with pytest.raises(ValueError):
        parse_decimal(text)


def test_zero_one_bool() -> None:
    """Test 0/1 booleans in both directions."""
    assert parse_zero_one_bool('0') is False
    assert parse_zero_one_bool('1') is True
    with pytest.raises(ValueError, match='0 or 1'):
        parse_zero_one_bool('2')
    with pytest.raises(ValueError):
        parse_zero_one_bool('true')
    assert bool_as_int(True) == '1'
    assert bool_as_int(0) == '0'
    assert bool_as_int([]) == '0'


def test_bit_flags() -> None:
    """Test parsing bit flag sets."""
    assert parse_bit_flags('0', HitSound) == HitSound(0)
    assert parse_bit_flags('10', HitSound) == HitSound.WHISTLE | HitSound.CLAP
    assert parse_bit_flags('15', HitSound) == (
        HitSound.NORMAL | HitSound.WHISTLE | HitSound.FINISH | HitSound.CLAP
    )
    with pytest.raises(ValueError, match='Unknown bits'):
        parse_bit_flags('16', HitSound)
    with pytest.raises(ValueError, match='negative'):
        parse_bit_flags('-1', HitSound)

    assert check_flag_at_bit(0b1010, 1)
    assert not check_flag_at_bit(0b1010, 2)
    assert check_flag_at_bit(0b1010, 3)


def test_colon_sets() -> None:
    """Test colon-separated sets."""
    assert parse_colon_set('1:2:0:0', parse_int) == [1, 2, 0, 0]
    assert parse_colon_set('0:0:0:0:', str) == ['0', '0', '0', '0', '']
    assert parse_colon_set('1:2', parse_int, 2) == [1, 2]
    with pytest.raises(ValueError, match='Expected 3'):
        parse_colon_set('1:2', parse_int, 3)
    with pytest.raises(ValueError):
        parse_colon_set('1:x', parse_int)
    assert join_colon_set([1, 2, 0, 0, '']) == '1:2:0:0:'


def test_position() -> None:
    """Test the shared position type."""
    pos = Position.parse('320', '-24')
    assert pos == Position(320, -24)
    assert str(pos) == '320,-24'
    dec = Position.parse('0.5', '12.25', parse_decimal)
    assert dec == Position(Decimal('0.5'), Decimal('12.25'))
    assert str(dec) == '0.5,12.25'
    with pytest.raises(ValueError):
        Position.parse('0.5', '1')


def test_file_path() -> None:
    """Quoting is preserved, so paths export as they were written."""
    quoted = FilePath.parse('"sb/star.png"')
    assert quoted == FilePath('sb/star.png', quoted=True)
    assert str(quoted) == '"sb/star.png"'

    bare = FilePath.parse('bg.jpg')
    assert bare == FilePath('bg.jpg')
    assert str(bare) == 'bg.jpg'

    # A lone quote is just part of the name.
    assert FilePath.parse('"') == FilePath('"')
