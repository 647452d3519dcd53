"""The file format version, and the behaviours that depend on it.

Each version-sensitive rule is looked up here once, so parsing and exporting stay symmetric.
"""
from typing import Dict, Final
from typing_extensions import TypeAlias

import attrs


__all__ = [
    'Version', 'VersionPolicy',
    'MIN_VERSION', 'LATEST_VERSION', 'OLD_VERSION_TIME_OFFSET',
]

#: The ``osu file format vN`` number from the first line of the file.
Version: TypeAlias = int

MIN_VERSION: Final = 3
LATEST_VERSION: Final = 14
#: Times in version 3 and 4 files are shifted by this many milliseconds.
OLD_VERSION_TIME_OFFSET: Final = 24


@attrs.frozen
class VersionPolicy:
    """The grammar rules in effect for a particular format version."""
    version: Version
    #: Milliseconds added to event times when parsing, and removed when exporting.
    time_offset: int
    #: If set, background and video positions are always written, defaulting to ``0,0``.
    position_required: bool
    #: If set, layers, origins and loop types are written by name, not legacy number.
    named_enums: bool
    #: If set, colour transformation events can be exported.
    colour_transformation: bool

    @classmethod
    def for_version(cls, version: Version) -> 'VersionPolicy':
        """Look up the policy for a version.

        Versions newer than the latest known one use the latest rules.
        """
        try:
            return _POLICIES[version]
        except KeyError:
            pass
        if version < MIN_VERSION:
            raise ValueError(f'osu file format v{version} is not supported!')
        return _POLICIES[LATEST_VERSION]

    def add_offset(self, time: int) -> int:
        """Convert a time from the file into the internal timeline."""
        return time + self.time_offset

    def remove_offset(self, time: int) -> int:
        """Convert an internal time back into the form written in the file."""
        return time - self.time_offset


_POLICIES: Dict[Version, VersionPolicy] = {
    ver: VersionPolicy(
        version=ver,
        time_offset=OLD_VERSION_TIME_OFFSET if ver <= 4 else 0,
        position_required=ver >= 14,
        named_enums=ver >= 5,
        colour_transformation=ver < 14,
    )
    for ver in range(MIN_VERSION, LATEST_VERSION + 1)
}
