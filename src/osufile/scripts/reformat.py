"""Parse the events section of a beatmap or storyboard, then write it back out.

This checks that a file parses, and can convert events to a different format version.
If the file has an ``[Events]`` header only that section is read, otherwise the whole file is
treated as the section body.
"""
from typing import List, Optional
import argparse
import sys

from osufile.events import Events, EventsParseError
from osufile.logger import context, get_logger, init_logging
from osufile.version import LATEST_VERSION


LOGGER = get_logger(__name__)


def extract_section(lines: List[str], name: str = 'Events') -> List[str]:
    """Return the lines inside the given ``[section]``, or all lines if no headers are present."""
    header = f'[{name}]'
    found_any = False
    section: Optional[List[str]] = None
    for line in lines:
        stripped = line.strip()
        if stripped.startswith('[') and stripped.endswith(']'):
            found_any = True
            if section is not None:
                break
            if stripped == header:
                section = []
        elif section is not None:
            section.append(line)
    if section is not None:
        return section
    if found_any:
        return []
    return lines


def main(args: List[str]) -> int:
    """Main script."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "file",
        help="the .osu or .osb file to read.",
    )
    parser.add_argument(
        "-v", "--version",
        help="the format version the file is written in.",
        type=int,
        default=LATEST_VERSION,
    )
    parser.add_argument(
        "-t", "--target-version",
        help="the format version to write. Defaults to the input version.",
        type=int,
        default=None,
    )
    parser.add_argument(
        "-s", "--skip-unrepresentable",
        help="leave out events which can't be written in the target version, "
             "instead of failing.",
        action='store_true',
    )
    result = parser.parse_args(args)
    target: int = result.version if result.target_version is None else result.target_version

    with open(result.file, encoding='utf8') as f:
        lines = extract_section(f.read().splitlines())

    with context(result.file):
        try:
            events = Events.parse(lines, result.version, result.file)
        except EventsParseError as exc:
            LOGGER.error('{}', exc)
            return 1
        except ValueError as exc:
            # An unsupported version.
            LOGGER.error('{}', exc)
            return 1
        LOGGER.debug('Read {} events', len(events))

        try:
            text = events.export(target, skip_unrepresentable=result.skip_unrepresentable)
        except ValueError as exc:
            LOGGER.error('{}', exc)
            return 1
        if text is None:
            LOGGER.error('Some events cannot be written in version {}.', target)
            return 1
    print(text)
    return 0


def run() -> None:
    """Entry point for the console script."""
    init_logging()
    sys.exit(main(sys.argv[1:]))


if __name__ == '__main__':
    run()
