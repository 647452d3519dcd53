"""Test storyboard objects and command trees."""
from decimal import Decimal

from dirty_equals import HasAttributes, IsList
import pytest

from osufile.commands import Fade, Loop, Scale, Trigger, TriggerKeyword
from osufile.errors import InvalidFieldError, InvalidIndentationError, MissingFieldError, UnknownObjectTypeError
from osufile.fields import FilePath, Position
from osufile.storyboard import (
    Animation, CommandTreeBuilder, Layer, LoopType, Object, Origin, Sprite, iter_command_lines,
)


def make_sprite() -> Object:
    """Make a simple sprite to attach commands to."""
    return Object(
        layer=Layer.FOREGROUND,
        origin=Origin.CENTRE,
        file_path=FilePath('sb/star.png', quoted=True),
        position=Position(Decimal(320), Decimal(240)),
    )


def fade(time: int) -> Fade:
    """Make a fade with a distinguishable time."""
    return Fade(start_time=time, end_time=time + 100, start_value=0, continuing=[1])


def test_enum_spelling() -> None:
    """Enums accept both spellings, and export based on the version."""
    assert Layer.parse('Foreground') is Layer.FOREGROUND
    assert Layer.parse('3') is Layer.FOREGROUND
    assert Origin.parse('BottomCentre') is Origin.BOTTOM_CENTRE
    assert Origin.parse('9') is Origin.BOTTOM_RIGHT
    assert LoopType.parse('LoopOnce') is LoopType.LOOP_ONCE

    assert Origin.CENTRE_LEFT.file_name == 'CentreLeft'
    assert Origin.CENTRE_LEFT.export(14) == 'CentreLeft'
    assert Origin.CENTRE_LEFT.export(5) == 'CentreLeft'
    assert Origin.CENTRE_LEFT.export(4) == '2'
    assert LoopType.LOOP_FOREVER.export(3) == '0'

    for text in ['5', 'foreground', 'Middle', '']:
        with pytest.raises(ValueError):
            Layer.parse(text)


def test_parse_sprite() -> None:
    """Test parsing a sprite header."""
    obj = Object.parse('Sprite,Foreground,Centre,"sb/star.png",320,240', 14)
    assert obj == make_sprite()
    assert obj.object_type == Sprite()
    assert not obj.short_hand
    assert obj.export(14) == 'Sprite,Foreground,Centre,"sb/star.png",320,240'
    assert obj.export(3) == 'Sprite,3,1,"sb/star.png",320,240'

    legacy = Object.parse('4,3,1,"sb/star.png",320,240', 3)
    assert legacy == HasAttributes(
        layer=Layer.FOREGROUND,
        origin=Origin.CENTRE,
        short_hand=True,
    )
    assert legacy.export(3) == '4,3,1,"sb/star.png",320,240'
    assert legacy.export(14) == '4,Foreground,Centre,"sb/star.png",320,240'


def test_parse_animation() -> None:
    """Animations have extra frame fields, and an optional loop type."""
    obj = Object.parse('Animation,Background,TopLeft,"sb/anim.png",0.5,-10,12,16.67,LoopOnce', 14)
    assert obj == HasAttributes(
        layer=Layer.BACKGROUND,
        origin=Origin.TOP_LEFT,
        position=Position(Decimal('0.5'), Decimal(-10)),
        object_type=Animation(12, Decimal('16.67'), LoopType.LOOP_ONCE),
    )
    assert obj.export(14) == 'Animation,Background,TopLeft,"sb/anim.png",0.5,-10,12,16.67,LoopOnce'
    assert obj.export(4) == 'Animation,0,0,"sb/anim.png",0.5,-10,12,16.67,1'

    no_loop = Object.parse('6,0,0,anim.png,0,0,4,100', 4)
    assert no_loop.object_type == Animation(4, Decimal(100))
    assert no_loop.object_type.loop_type is None
    assert no_loop.export(4) == '6,0,0,anim.png,0,0,4,100'


def test_object_errors() -> None:
    """Test errors in object headers."""
    with pytest.raises(UnknownObjectTypeError, match='^Unknown object type 2$'):
        Object.parse('2,100,163', 14)
    with pytest.raises(MissingFieldError, match='^Missing `origin` field$'):
        Object.parse('Sprite,Foreground', 14)
    with pytest.raises(InvalidFieldError, match='^Invalid `layer` value$'):
        Object.parse('Sprite,Middle,Centre,a.png,0,0', 14)
    with pytest.raises(InvalidFieldError, match='^Invalid `y` value$'):
        Object.parse('Sprite,Foreground,Centre,a.png,0,0,0', 14)
    with pytest.raises(MissingFieldError, match='^Missing `frame_count` field$'):
        Object.parse('Animation,Foreground,Centre,a.png,0,0', 14)
    with pytest.raises(InvalidFieldError, match='^Invalid `loop_type` value$'):
        Object.parse('Animation,Foreground,Centre,a.png,0,0,2,50,LoopTwice', 14)


def test_builder_nesting() -> None:
    """Commands attach to the innermost open container at their depth."""
    obj = make_sprite()
    builder = CommandTreeBuilder(obj)
    assert builder.depth == 1
    loop = Loop(start_time=0, loop_count=2)
    trigger = Trigger(trigger_type=TriggerKeyword.PASSING, start_time=0, end_time=100)
    builder.push(fade(0), 1)
    builder.push(loop, 1)
    builder.push(fade(1), 2)
    builder.push(trigger, 2)
    builder.push(fade(2), 3)
    assert builder.depth == 3
    builder.push(fade(3), 1)
    assert builder.depth == 1

    assert obj.commands == [fade(0), loop, fade(3)]
    assert loop.commands == [fade(1), trigger]
    assert trigger.commands == [fade(2)]
    assert list(iter_command_lines(obj.commands)) == [
        ' F,0,0,100,0,1',
        ' L,0,2',
        '  F,0,1,101,0,1',
        '  T,Passing,0,100',
        '   F,0,2,102,0,1',
        ' F,0,3,103,0,1',
    ]


def test_builder_pop_partially() -> None:
    """Returning to a middle depth only closes the inner containers."""
    obj = make_sprite()
    builder = CommandTreeBuilder(obj)
    outer = Loop(start_time=0, loop_count=2)
    inner = Loop(start_time=0, loop_count=3)
    builder.push(outer, 1)
    builder.push(inner, 2)
    builder.push(fade(0), 3)
    builder.push(fade(1), 2)
    assert outer.commands == [inner, fade(1)]
    assert inner.commands == [fade(0)]


def test_builder_bad_indentation() -> None:
    """Going deeper is only allowed directly after a container."""
    builder = CommandTreeBuilder(make_sprite())
    builder.push(fade(0), 1)
    with pytest.raises(InvalidIndentationError, match='^Invalid indentation, expected 1, got 2$') as exc:
        builder.push(fade(1), 2)
    assert exc.value.expected == 1
    assert exc.value.actual == 2

    builder.push(Loop(start_time=0, loop_count=1), 1)
    with pytest.raises(InvalidIndentationError, match='expected 2, got 3'):
        builder.push(fade(1), 3)
    with pytest.raises(InvalidIndentationError, match='expected 2, got 0'):
        builder.push(fade(1), 0)


def test_builder_resumes_existing() -> None:
    """A builder for an object with commands continues after the last one."""
    obj = make_sprite()
    trigger = Trigger(trigger_type=TriggerKeyword.FAILING, start_time=0, end_time=10, commands=[fade(0)])
    loop = Loop(start_time=0, loop_count=1, commands=[trigger])
    obj.commands.append(loop)

    builder = CommandTreeBuilder(obj)
    assert builder.depth == 3
    builder.push(fade(1), 3)
    assert trigger.commands == [fade(0), fade(1)]


def test_append_and_push_command() -> None:
    """Test the mutation API for building storyboards in code."""
    obj = make_sprite()
    loop = Loop(start_time=500, loop_count=4)
    obj.append_command(loop)
    obj.push_command(fade(0), 2)
    obj.push_command(Scale(start_time=0, start_value='0.5'), 2)
    obj.append_command(fade(1))
    with pytest.raises(InvalidIndentationError):
        obj.push_command(fade(2), 2)

    assert obj.commands == IsList(loop, fade(1))
    assert loop.commands == IsList(fade(0), HasAttributes(start_value=Decimal('0.5')))
    assert obj.export(14) == '\n'.join([
        'Sprite,Foreground,Centre,"sb/star.png",320,240',
        ' L,500,4',
        '  F,0,0,100,0,1',
        '  S,0,0,,0.5',
        ' F,0,1,101,0,1',
    ])


def test_empty_container() -> None:
    """Containers without children are written alone."""
    obj = make_sprite()
    obj.append_command(Loop(start_time=0, loop_count=3))
    obj.append_command(fade(0))
    assert list(iter_command_lines(obj.commands)) == [' L,0,3', ' F,0,0,100,0,1']


def test_deep_tree() -> None:
    """Trees deeper than the recursion limit can be built and written."""
    depth = 5000
    obj = make_sprite()
    builder = CommandTreeBuilder(obj)
    for i in range(1, depth + 1):
        builder.push(Loop(start_time=i, loop_count=1), i)
    builder.push(fade(0), depth + 1)
    assert builder.depth == depth + 1

    lines = list(iter_command_lines(obj.commands, indent='_'))
    assert len(lines) == depth + 1
    assert lines[0] == '_L,1,1'
    assert lines[-1] == '_' * (depth + 1) + 'F,0,0,100,0,1'

    # Rebuilding the stack from the finished tree must not recurse either.
    assert CommandTreeBuilder(obj).depth == depth + 1
