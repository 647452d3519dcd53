"""Storyboard objects (sprites and animations) and the tree of commands they own.

Objects are the unindented ``Sprite`` and ``Animation`` lines of the events section. Commands
follow on indented lines, with the depth (number of leading spaces or underscores) deciding which
``L`` or ``T`` container they belong to::

    Sprite,Foreground,Centre,"sb/star.png",320,240
     L,0,4
      F,0,0,500,0,1
      F,0,500,1000,1,0
     S,0,0,,0.5

Trees can be arbitrarily deep, so building and writing them never recurses.
"""
from typing import Iterator, List, Optional, Tuple, Union
from typing_extensions import Self
from decimal import Decimal
from enum import IntEnum

import attrs

from .commands import Command, ContainerCommand
from .errors import InvalidIndentationError, UnknownObjectTypeError
from .fields import FilePath, Position, parse_decimal, parse_int
from .tokenizer import FieldTokenizer
from .version import Version, VersionPolicy


__all__ = [
    'Layer', 'Origin', 'LoopType', 'Sprite', 'Animation', 'ObjectType', 'Object',
    'CommandTreeBuilder', 'iter_command_lines', 'INDENT',
]

#: Each level of command depth is written as one of these.
INDENT = ' '


class _NamedIntEnum(IntEnum):
    """An enum which is written either as a legacy number or a CamelCase name."""
    @property
    def file_name(self) -> str:
        """The name used in the file, like ``BottomCentre``."""
        return ''.join([word.capitalize() for word in self.name.split('_')])

    @classmethod
    def parse(cls, text: str) -> Self:
        """Parse either spelling. Both are accepted regardless of the version."""
        for member in cls:
            if member.file_name == text:
                return member
        return cls(parse_int(text))

    def export(self, version: Version) -> str:
        """Produce the spelling used by this version."""
        if VersionPolicy.for_version(version).named_enums:
            return self.file_name
        return str(self.value)


class Layer(_NamedIntEnum):
    """The layer an object or sample is drawn or played on."""
    BACKGROUND = 0
    FAIL = 1
    PASS = 2
    FOREGROUND = 3
    OVERLAY = 4


class Origin(_NamedIntEnum):
    """The point of the image placed at the object's position."""
    TOP_LEFT = 0
    CENTRE = 1
    CENTRE_LEFT = 2
    TOP_RIGHT = 3
    BOTTOM_CENTRE = 4
    TOP_CENTRE = 5
    CUSTOM = 6
    CENTRE_RIGHT = 7
    BOTTOM_LEFT = 8
    BOTTOM_RIGHT = 9


class LoopType(_NamedIntEnum):
    """Whether an animation repeats."""
    LOOP_FOREVER = 0
    LOOP_ONCE = 1


@attrs.frozen
class Sprite:
    """A still image."""
    NAME = 'Sprite'
    NUMBER = '4'


@attrs.frozen
class Animation:
    """A sequence of images, named ``file_name0.png``, ``file_name1.png`` etc."""
    NAME = 'Animation'
    NUMBER = '6'

    frame_count: int
    #: Milliseconds between frames.
    frame_delay: Decimal
    #: If ``None``, this was not written and the game defaults to looping forever.
    loop_type: Optional[LoopType] = None


ObjectType = Union[Sprite, Animation]


@attrs.define(kw_only=True)
class Object:
    """A storyboard sprite or animation, and the commands animating it."""
    layer: Layer
    origin: Origin
    file_path: FilePath
    position: Position
    object_type: ObjectType = attrs.Factory(Sprite)
    commands: List[Command] = attrs.Factory(list)
    #: If set, the header was written as the number ``4`` or ``6`` instead of the name.
    short_hand: bool = False

    @classmethod
    def parse(cls, line: str, version: Version) -> 'Object':
        """Parse an object header line. Commands are attached afterwards.

        If the line is not an object at all, :py:class:`~osufile.errors.UnknownObjectTypeError`
        is raised.
        """
        VersionPolicy.for_version(version)
        tok = FieldTokenizer(line)
        token = tok('type')
        if token in (Sprite.NAME, Sprite.NUMBER):
            is_animation = False
            short_hand = token == Sprite.NUMBER
        elif token in (Animation.NAME, Animation.NUMBER):
            is_animation = True
            short_hand = token == Animation.NUMBER
        else:
            raise UnknownObjectTypeError(token)

        layer = tok.parse('layer', Layer.parse)
        origin = tok.parse('origin', Origin.parse)
        file_path = tok.parse('file_path', FilePath.parse)
        x = tok.parse('x', parse_decimal)
        object_type: ObjectType
        if is_animation:
            y = tok.parse('y', parse_decimal)
            frame_count = tok.parse('frame_count', parse_int)
            if tok.remaining > 1:
                frame_delay = tok.parse('frame_delay', parse_decimal)
                loop_type: Optional[LoopType] = tok.parse_last('loop_type', LoopType.parse)
            else:
                frame_delay = tok.parse_last('frame_delay', parse_decimal)
                loop_type = None
            object_type = Animation(frame_count, frame_delay, loop_type)
        else:
            y = tok.parse_last('y', parse_decimal)
            object_type = Sprite()

        return cls(
            layer=layer,
            origin=origin,
            file_path=file_path,
            position=Position(x, y),
            object_type=object_type,
            short_hand=short_hand,
        )

    def export_header(self, version: Version) -> str:
        """Produce the header line, without any commands."""
        obj_type = self.object_type
        parts = [
            obj_type.NUMBER if self.short_hand else obj_type.NAME,
            self.layer.export(version),
            self.origin.export(version),
            str(self.file_path),
            str(self.position),
        ]
        if isinstance(obj_type, Animation):
            parts.append(str(obj_type.frame_count))
            parts.append(str(obj_type.frame_delay))
            if obj_type.loop_type is not None:
                parts.append(obj_type.loop_type.export(version))
        return ','.join(parts)

    def export(self, version: Version) -> str:
        """Produce the header line followed by all the command lines."""
        lines = [self.export_header(version)]
        lines.extend(iter_command_lines(self.commands))
        return '\n'.join(lines)

    def append_command(self, command: Command) -> None:
        """Add a command to the end of the object's top level."""
        self.commands.append(command)

    def push_command(self, command: Command, depth: int) -> None:
        """Add a command after the last one, at the given indentation depth.

        Depth 1 is the object's top level. Deeper commands are placed inside the last
        container, like an indented line would be.
        """
        CommandTreeBuilder(self).push(command, depth)


class CommandTreeBuilder:
    """Attaches commands to an object one at a time, using their indentation depth.

    The builder keeps a stack of the open command lists, paired with the depth their
    children are written at.
    """
    _stack: List[Tuple[List[Command], int]]
    _last: Optional[Command]

    def __init__(self, obj: Object) -> None:
        self._stack = [(obj.commands, 1)]
        self._last = None
        # Reopen the trailing containers of an existing tree, so we can continue after it.
        commands = obj.commands
        depth = 1
        while commands:
            self._last = last = commands[-1]
            if isinstance(last, ContainerCommand) and last.commands:
                commands = last.commands
                depth += 1
                self._stack.append((commands, depth))
            else:
                break

    def __repr__(self) -> str:
        return f'<CommandTreeBuilder depth={self.depth}, last={self._last!r}>'

    @property
    def depth(self) -> int:
        """The depth of the innermost open command list."""
        return self._stack[-1][1]

    def push(self, command: Command, depth: int) -> None:
        """Add a command found at the given depth."""
        top = self._stack[-1][1]
        if depth == top + 1 and isinstance(self._last, ContainerCommand):
            self._stack.append((self._last.commands, depth))
        elif depth == top:
            pass
        elif 1 <= depth < top:
            while self._stack[-1][1] > depth:
                self._stack.pop()
        else:
            expected = top + 1 if isinstance(self._last, ContainerCommand) else top
            raise InvalidIndentationError(expected, depth)
        self._stack[-1][0].append(command)
        self._last = command


def iter_command_lines(commands: List[Command], indent: str = INDENT) -> Iterator[str]:
    """Produce the indented lines for a tree of commands, in file order.

    Top-level commands get one indent.
    """
    stack: List[Tuple[Iterator[Command], int]] = [(iter(commands), 1)]
    while stack:
        children, depth = stack[-1]
        for command in children:
            yield indent * depth + command.export()
            if isinstance(command, ContainerCommand) and command.commands:
                stack.append((iter(command.commands), depth + 1))
                break
        else:
            stack.pop()
