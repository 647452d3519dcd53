"""The ``[Events]`` section of a beatmap or storyboard file.

Each unindented line is an event: a ``//`` comment, a storyboard object, or one of the
shorthand "normal" events below. Indented lines are storyboard commands, belonging to the
object directly above them.

* Background: ``0,<start>,<file>[,<x>,<y>]``
* Video: ``1|Video,<start>,<file>[,<x>,<y>]``
* Break: ``2|Break,<start>,<end>``
* Colour transformation: ``3,<start>,<red>,<green>,<blue>``
* Sample: ``5|Sample,<time>,<layer>,<file>[,<volume>]``

Parsing and exporting both take the file format version, which decides time offsets, whether
positions are always written, and how enums are spelled.
"""
from typing import ClassVar, Dict, Iterable, Iterator, List, Optional, Tuple, Type, Union
from typing_extensions import Self, TypeAlias
import abc

import attrs

from .commands import Command, parse_colour_byte
from .errors import CommandWithNoObjectError, UnknownEventTypeError, UnknownObjectTypeError
from .fields import FilePath, Position, parse_int
from .logger import get_logger
from .storyboard import CommandTreeBuilder, Layer, Object
from .tokenizer import FieldTokenizer, LineSyntaxError
from .version import Version, VersionPolicy


__all__ = [
    'EventsParseError', 'Comment', 'EventParams', 'Background', 'Video', 'Break',
    'ColourTransformation', 'Sample', 'NormalEvent', 'Event', 'Events',
]
LOGGER = get_logger(__name__)


class EventsParseError(LineSyntaxError):
    """Raised when a line of the events section could not be parsed."""


@attrs.frozen
class Comment:
    """A ``//`` comment line. The text excludes the slashes."""
    text: str

    def export(self, version: Version) -> str:
        """Comments are written the same in every version."""
        return '//' + self.text


@attrs.frozen
class EventParams(abc.ABC):
    """The type-specific fields of a normal event."""
    #: The numeric header, always accepted.
    NUMBER: ClassVar[str]
    #: The long header, if this event has one.
    NAME: ClassVar[Optional[str]] = None

    def header(self) -> str:
        """The header to write for this event."""
        if self.NAME is not None and not getattr(self, 'short_hand', True):
            return self.NAME
        return self.NUMBER

    @classmethod
    @abc.abstractmethod
    def _parse(cls, tok: FieldTokenizer, policy: VersionPolicy, short_hand: bool) -> Self:
        """Parse the fields after the start time."""
        raise NotImplementedError

    @abc.abstractmethod
    def _export(self, policy: VersionPolicy) -> Optional[List[str]]:
        """Produce the fields after the start time, or ``None`` if the version can't represent this."""
        raise NotImplementedError


def _parse_position(tok: FieldTokenizer, policy: VersionPolicy) -> Optional[Position]:
    """Parse the optional trailing position of backgrounds and videos."""
    if tok:
        x = tok.parse('x', parse_int)
        y = tok.parse_last('y', parse_int)
        return Position(x, y)
    elif policy.position_required:
        return Position(0, 0)
    else:
        return None


def _export_position(parts: List[str], position: Optional[Position], policy: VersionPolicy) -> None:
    if position is None and policy.position_required:
        position = Position(0, 0)
    if position is not None:
        parts.append(str(position))


@attrs.frozen
class Background(EventParams):
    """The background image, shown during gameplay."""
    NUMBER: ClassVar[str] = '0'

    file_name: FilePath
    #: An offset from the centre of the screen. In version 14 and later this is always present.
    position: Optional[Position] = None

    @classmethod
    def _parse(cls, tok: FieldTokenizer, policy: VersionPolicy, short_hand: bool) -> Self:
        file_name = tok.parse('file_name', FilePath.parse)
        return cls(file_name, _parse_position(tok, policy))

    def _export(self, policy: VersionPolicy) -> Optional[List[str]]:
        parts = [str(self.file_name)]
        _export_position(parts, self.position, policy)
        return parts


@attrs.frozen
class Video(EventParams):
    """A video, played behind the storyboard."""
    NUMBER: ClassVar[str] = '1'
    NAME: ClassVar[Optional[str]] = 'Video'

    file_name: FilePath
    position: Optional[Position] = None
    short_hand: bool = attrs.field(default=True, kw_only=True)

    @classmethod
    def _parse(cls, tok: FieldTokenizer, policy: VersionPolicy, short_hand: bool) -> Self:
        file_name = tok.parse('file_name', FilePath.parse)
        return cls(file_name, _parse_position(tok, policy), short_hand=short_hand)

    def _export(self, policy: VersionPolicy) -> Optional[List[str]]:
        parts = [str(self.file_name)]
        _export_position(parts, self.position, policy)
        return parts


@attrs.frozen
class Break(EventParams):
    """A break period, where no objects need to be hit."""
    NUMBER: ClassVar[str] = '2'
    NAME: ClassVar[Optional[str]] = 'Break'

    end_time: int
    short_hand: bool = attrs.field(default=True, kw_only=True)

    @classmethod
    def _parse(cls, tok: FieldTokenizer, policy: VersionPolicy, short_hand: bool) -> Self:
        end_time = tok.parse_last('end_time', parse_int)
        return cls(policy.add_offset(end_time), short_hand=short_hand)

    def _export(self, policy: VersionPolicy) -> Optional[List[str]]:
        return [str(policy.remove_offset(self.end_time))]


@attrs.frozen
class ColourTransformation(EventParams):
    """A background colour change. Version 14 removed these."""
    NUMBER: ClassVar[str] = '3'

    red: int
    green: int
    blue: int

    @classmethod
    def _parse(cls, tok: FieldTokenizer, policy: VersionPolicy, short_hand: bool) -> Self:
        return cls(
            tok.parse('red', parse_colour_byte),
            tok.parse('green', parse_colour_byte),
            tok.parse_last('blue', parse_colour_byte),
        )

    def _export(self, policy: VersionPolicy) -> Optional[List[str]]:
        if not policy.colour_transformation:
            return None
        return [str(self.red), str(self.green), str(self.blue)]


@attrs.frozen
class Sample(EventParams):
    """A sound sample, played at a specific time."""
    NUMBER: ClassVar[str] = '5'
    NAME: ClassVar[Optional[str]] = 'Sample'

    layer: Layer
    file_name: FilePath
    #: The volume percentage. If ``None`` this is omitted, meaning full volume.
    volume: Optional[int] = None
    short_hand: bool = attrs.field(default=True, kw_only=True)

    @classmethod
    def _parse(cls, tok: FieldTokenizer, policy: VersionPolicy, short_hand: bool) -> Self:
        layer = tok.parse('layer', Layer.parse)
        if tok.remaining > 1:
            file_name = tok.parse('file_name', FilePath.parse)
            volume: Optional[int] = tok.parse_last('volume', parse_int)
        else:
            file_name = tok.parse_last('file_name', FilePath.parse)
            volume = None
        return cls(layer, file_name, volume, short_hand=short_hand)

    def _export(self, policy: VersionPolicy) -> Optional[List[str]]:
        # Unlike objects, sample layers are always numeric.
        parts = [str(self.layer.value), str(self.file_name)]
        if self.volume is not None:
            parts.append(str(self.volume))
        return parts


#: Maps each header token to the event type and whether it is the short form.
EVENT_TYPES: Dict[str, Tuple[Type[EventParams], bool]] = {}
for _event_type in [Background, Video, Break, ColourTransformation, Sample]:
    EVENT_TYPES[_event_type.NUMBER] = (_event_type, True)
    if _event_type.NAME is not None:
        EVENT_TYPES[_event_type.NAME] = (_event_type, False)
del _event_type


@attrs.define
class NormalEvent:
    """A non-storyboard event, like the background or a break period."""
    #: The time in the internal timeline, with any old-version offset applied.
    start_time: int
    params: EventParams

    @classmethod
    def parse(cls, line: str, version: Version) -> 'NormalEvent':
        """Parse a single event line."""
        policy = VersionPolicy.for_version(version)
        tok = FieldTokenizer(line)
        token = tok('type')
        try:
            event_type, short_hand = EVENT_TYPES[token]
        except KeyError:
            raise UnknownEventTypeError(token) from None
        start_time = policy.add_offset(tok.parse('start_time', parse_int))
        return cls(start_time, event_type._parse(tok, policy, short_hand))

    def export(self, version: Version) -> Optional[str]:
        """Produce the text of this event, or ``None`` if it can't be written in this version."""
        policy = VersionPolicy.for_version(version)
        parts = self.params._export(policy)
        if parts is None:
            return None
        return ','.join([
            self.params.header(),
            str(policy.remove_offset(self.start_time)),
            *parts,
        ])


Event: TypeAlias = Union[Comment, NormalEvent, Object]


def _parse_unindented(line: str, version: Version) -> Union[NormalEvent, Object]:
    """Parse a line as an object, falling back to a normal event."""
    try:
        return Object.parse(line, version)
    except UnknownObjectTypeError:
        pass
    return NormalEvent.parse(line, version)


@attrs.define
class Events:
    """All the events in a section, in file order."""
    events: List[Event] = attrs.Factory(list)

    def __iter__(self) -> Iterator[Event]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)

    @classmethod
    def parse(
        cls,
        text: Union[str, Iterable[str]],
        version: Version,
        filename: Optional[str] = None,
    ) -> 'Events':
        """Parse the body of an events section, excluding the ``[Events]`` header.

        :param text: The section text, or an iterable of lines such as an open file.
        :param version: The format version of the file.
        :param filename: If provided, this is included in error messages.
        :raises EventsParseError: If any line is invalid. The line number counts blank lines.
        """
        VersionPolicy.for_version(version)
        # Not splitlines(), that also breaks on form feeds and other control characters.
        lines = text.split('\n') if isinstance(text, str) else text
        events: List[Event] = []
        builder: Optional[CommandTreeBuilder] = None
        command_count = 0

        for line_num, line in enumerate(lines):
            line = line.rstrip('\r\n')
            if not line.strip():
                continue
            try:
                if line.startswith('//'):
                    events.append(Comment(line[2:]))
                    builder = None
                    continue
                depth = len(line) - len(line.lstrip(' _'))
                if depth == 0:
                    event = _parse_unindented(line, version)
                    events.append(event)
                    builder = CommandTreeBuilder(event) if isinstance(event, Object) else None
                else:
                    if builder is None:
                        raise CommandWithNoObjectError()
                    builder.push(Command.parse(line[depth:]), depth)
                    command_count += 1
            except ValueError as exc:
                raise EventsParseError(exc, line_num, filename) from exc

        LOGGER.debug('Parsed {} events and {} commands', len(events), command_count)
        return cls(events)

    def export(self, version: Version, *, skip_unrepresentable: bool = False) -> Optional[str]:
        """Produce the text of the section.

        If any event can't be written in this version, ``None`` is returned.
        With ``skip_unrepresentable`` set, those events are left out with a warning instead.
        """
        VersionPolicy.for_version(version)
        lines: List[str] = []
        for event in self.events:
            text = event.export(version)
            if text is None:
                if not skip_unrepresentable:
                    return None
                LOGGER.warning('Skipping {!r}, it cannot be written in version {}', event, version)
                continue
            lines.append(text)
        return '\n'.join(lines)
