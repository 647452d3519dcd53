"""Parse and write the events section of osu! beatmap and storyboard files.

The main entry point is :py:meth:`Events.parse() <osufile.events.Events.parse>`, with
:py:meth:`Events.export() <osufile.events.Events.export>` producing text again.
"""
from .commands import (
    Colour, Command, Easing, Fade, Loop, Move, MoveX, MoveY, Parameter, Rotate, Scale, Trigger,
    VectorScale,
)
from .events import (
    Background, Break, ColourTransformation, Comment, Events, EventsParseError, NormalEvent,
    Sample, Video,
)
from .fields import FilePath, Position
from .storyboard import Animation, Layer, LoopType, Object, Origin, Sprite
from .tokenizer import LineSyntaxError
from .version import LATEST_VERSION, Version


__version__ = '0.1.0'
__all__ = [
    '__version__',
    'Events', 'EventsParseError', 'LineSyntaxError', 'Version', 'LATEST_VERSION',
    'Comment', 'NormalEvent', 'Background', 'Video', 'Break', 'ColourTransformation', 'Sample',
    'Object', 'Sprite', 'Animation', 'Layer', 'Origin', 'LoopType', 'Position', 'FilePath',
    'Command', 'Easing', 'Fade', 'Move', 'MoveX', 'MoveY', 'Scale', 'VectorScale', 'Rotate',
    'Colour', 'Parameter', 'Loop', 'Trigger',

    # Submodules:
    'commands', 'errors', 'events', 'fields', 'logger', 'storyboard', 'tokenizer', 'version',  # pyright: ignore
]
