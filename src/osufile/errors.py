"""Exceptions raised when a single line of a section fails to parse.

These describe what went wrong within the line. When parsing a whole section, they are wrapped
in a :py:class:`~osufile.tokenizer.LineSyntaxError` subclass which adds the line number.

Every error here is a :external:py:class:`ValueError`. Field errors carry a stable ``field`` tag,
so callers can tell a missing ``start_time`` from an invalid one without inspecting messages.
"""
from typing import Optional


__all__ = [
    'FieldError', 'MissingFieldError', 'InvalidFieldError', 'InvalidContinuingError',
    'ContinuingOmissionError',
    'TriggerTypeError', 'TooManyHitSoundFieldsError', 'UnknownHitSoundTypeError',
    'UnknownTriggerTypeError',
    'UnknownTypeError', 'UnknownObjectTypeError', 'UnknownEventTypeError',
    'UnknownCommandTypeError',
    'InvalidIndentationError', 'CommandWithNoObjectError',
]


class FieldError(ValueError):
    """Base class for errors about a specific field of a record."""
    field: str
    """The name of the field, for example ``start_time``."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field

    def __eq__(self, other: object) -> bool:
        if type(self) is type(other):
            return self.args == other.args and self.field == other.field  # type: ignore
        return NotImplemented

    __hash__ = ValueError.__hash__


class MissingFieldError(FieldError):
    """The line ended before this field was reached."""
    def __init__(self, field: str) -> None:
        super().__init__(field, f'Missing `{field}` field')

    def __repr__(self) -> str:
        return f'MissingFieldError({self.field!r})'


class InvalidFieldError(FieldError):
    """The field is present, but its value could not be parsed."""
    value: Optional[str]
    """The text of the invalid field, if known."""

    def __init__(self, field: str, value: Optional[str] = None, message: Optional[str] = None) -> None:
        super().__init__(field, message or f'Invalid `{field}` value')
        self.value = value

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.field!r}, {self.value!r})'


class InvalidContinuingError(InvalidFieldError):
    """One of the continuing values following a command's start value is invalid."""
    def __init__(self, field: str, noun: str, value: Optional[str] = None) -> None:
        super().__init__(field, value, f'Invalid continuing {noun} value')


class ContinuingOmissionError(FieldError):
    """A continuing value tuple omitted a component, without being the last tuple."""
    def __init__(self, field: str) -> None:
        super().__init__(
            field,
            f'Continuing `{field}` is omitted without it being '
            'the last item in the continuing fields',
        )


class TriggerTypeError(InvalidFieldError):
    """The trigger type of a ``T`` command could not be parsed."""
    def __init__(self, value: str, message: str) -> None:
        super().__init__('trigger_type', value, message)


class TooManyHitSoundFieldsError(TriggerTypeError):
    """A ``HitSound`` trigger has more than three named parts."""
    count: int

    def __init__(self, value: str, count: int) -> None:
        super().__init__(value, f'There are too many `HitSound` fields: {count}')
        self.count = count


class UnknownHitSoundTypeError(TriggerTypeError):
    """A part of a ``HitSound`` trigger is not a sample set or addition."""
    part: str

    def __init__(self, value: str, part: str) -> None:
        super().__init__(value, f'Unknown `HitSound` type {part}')
        self.part = part


class UnknownTriggerTypeError(TriggerTypeError):
    """The trigger type is not ``HitSound`` or one of the keyword triggers."""
    def __init__(self, value: str) -> None:
        super().__init__(value, f'Unknown trigger type {value}')


class UnknownTypeError(ValueError):
    """The leading token of the line does not name a known record type."""
    kind = 'record'
    token: str

    def __init__(self, token: str) -> None:
        super().__init__(f'Unknown {self.kind} type {token}')
        self.token = token

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.token!r})'

    def __eq__(self, other: object) -> bool:
        if type(self) is type(other):
            return self.token == other.token  # type: ignore
        return NotImplemented

    __hash__ = ValueError.__hash__


class UnknownObjectTypeError(UnknownTypeError):
    """The line is not a storyboard object. The events parser then tries other events."""
    kind = 'object'


class UnknownEventTypeError(UnknownTypeError):
    """The line is not any known event."""
    kind = 'event'


class UnknownCommandTypeError(UnknownTypeError):
    """The indented line is not a known storyboard command."""
    kind = 'command'


class InvalidIndentationError(ValueError):
    """A command line's depth does not fit in the current command tree."""
    expected: int
    actual: int

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f'Invalid indentation, expected {expected}, got {actual}')
        self.expected = expected
        self.actual = actual


class CommandWithNoObjectError(ValueError):
    """A command line appeared without a storyboard object directly before it."""
    def __init__(self) -> None:
        super().__init__('Storyboard command found without a sprite or animation to attach to')
