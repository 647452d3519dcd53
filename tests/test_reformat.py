"""Test the reformatting script."""
from pathlib import Path

import pytest

from osufile.scripts.reformat import extract_section, main


BEATMAP = '''\
osu file format v{version}

[General]
AudioFilename: audio.mp3

[Events]
//Background and Video events
0,0,"bg.jpg"
//Background Colour Transformations
3,100,163,162,255
//Storyboard Layer 0 (Background)
Sprite,Background,Centre,"sb/bg.png",320,240
 F,0,0,1000,0,1

[TimingPoints]
0,500,4,2,0,100,1,0
'''


def test_extract_section() -> None:
    """Only the requested section is returned."""
    lines = BEATMAP.format(version=13).splitlines()
    section = extract_section(lines)
    assert section[0] == '//Background and Video events'
    assert section[-2:] == [' F,0,0,1000,0,1', '']
    assert extract_section(lines, 'TimingPoints') == ['0,500,4,2,0,100,1,0']
    assert extract_section(lines, 'Colours') == []
    # Without headers, the whole text is the section.
    assert extract_section(['2,0,100']) == ['2,0,100']


def test_reformat_same_version(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Reformatting a valid file reproduces the section."""
    path = tmp_path / 'map.osu'
    path.write_text(BEATMAP.format(version=13), encoding='utf8')
    assert main([str(path), '--version', '13']) == 0
    assert capsys.readouterr().out == (
        '//Background and Video events\n'
        '0,0,"bg.jpg"\n'
        '//Background Colour Transformations\n'
        '3,100,163,162,255\n'
        '//Storyboard Layer 0 (Background)\n'
        'Sprite,Background,Centre,"sb/bg.png",320,240\n'
        ' F,0,0,1000,0,1\n'
    )


def test_reformat_convert(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Converting fails on unrepresentable events, unless they are skipped."""
    path = tmp_path / 'map.osu'
    path.write_text(BEATMAP.format(version=4), encoding='utf8')
    assert main([str(path), '-v', '4', '-t', '14']) == 1
    assert 'cannot be written in version 14' in caplog.text
    assert capsys.readouterr().out == ''

    assert main([str(path), '-v', '4', '-t', '14', '--skip-unrepresentable']) == 0
    assert capsys.readouterr().out == (
        '//Background and Video events\n'
        '0,24,"bg.jpg",0,0\n'
        '//Background Colour Transformations\n'
        '//Storyboard Layer 0 (Background)\n'
        'Sprite,Background,Centre,"sb/bg.png",320,240\n'
        ' F,0,0,1000,0,1\n'
    )


def test_reformat_error(
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Parse errors are logged with their location."""
    path = tmp_path / 'broken.osb'
    path.write_text('[Events]\nSprite,Pass,Centre,"a.png",0,0\n  F,0,0,1,0,1\n', encoding='utf8')
    assert main([str(path)]) == 1
    assert 'Invalid indentation, expected 1, got 2' in caplog.text
    assert 'Error occurred on line 2' in caplog.text
    assert capsys.readouterr().out == ''

    assert main([str(path), '--version', '2']) == 1
    assert 'v2 is not supported' in caplog.text
