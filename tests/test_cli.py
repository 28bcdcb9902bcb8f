import json
from unittest.mock import patch

from click.testing import CliRunner

from chordchart.cli import main
from chordchart.exceptions import FetchError

CHART = "{title: Amazing Grace}\n{key: G}\n[G]Amazing [C]grace\n{comment: Chorus}\n"

SONGS = [
    {"id": "1", "title": "Amazing Grace", "artist": "John Newton", "slug": "amazing-grace"},
    {"id": "2", "title": "Blessed Assurance", "artist": "Fanny Crosby"},
]


def _catalog(tmp_path) -> str:
    path = tmp_path / "songs.json"
    path.write_text(json.dumps(SONGS), encoding="utf-8")
    return str(path)


# ---------------------------------------------------------------------------
# --help
# ---------------------------------------------------------------------------


def test_help_output():
    result = CliRunner().invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "render" in result.output
    assert "dupes" in result.output


# ---------------------------------------------------------------------------
# render
# ---------------------------------------------------------------------------


def test_render_from_stdin():
    result = CliRunner().invoke(main, ["render", "-"], input=CHART)
    assert result.exit_code == 0
    assert result.output == "Amazing Grace\nKey: G\n\nG       C\nAmazing grace\n(Chorus)\n"


def test_render_from_file(tmp_path):
    path = tmp_path / "song.cho"
    path.write_text(CHART, encoding="utf-8")
    result = CliRunner().invoke(main, ["render", "--no-header", str(path)])
    assert result.exit_code == 0
    assert result.output.startswith("G       C\nAmazing grace\n")


def test_render_no_chords():
    result = CliRunner().invoke(main, ["render", "--no-header", "--no-chords", "-"], input=CHART)
    assert result.output == "Amazing grace\n(Chorus)\n"


def test_render_transpose_follows_key():
    result = CliRunner().invoke(main, ["render", "--transpose", "3", "-"], input=CHART)
    assert result.exit_code == 0
    assert "Key: Bb" in result.output
    assert "Bb      Eb" in result.output


def test_render_transpose_down_with_sharps():
    result = CliRunner().invoke(
        main, ["render", "--no-header", "--transpose=-1", "--spelling", "sharps", "-"],
        input="[C]Hi",
    )
    assert result.output == "B\nHi\n"


def test_render_transpose_with_flats():
    result = CliRunner().invoke(
        main, ["render", "--no-header", "-t", "1", "--spelling", "flats", "-"], input="[C]Hi"
    )
    assert result.output == "Db\nHi\n"


def test_render_writes_output_file(tmp_path):
    out_file = tmp_path / "out.txt"
    result = CliRunner().invoke(main, ["render", "-o", str(out_file), "-"], input=CHART)
    assert result.exit_code == 0
    assert "Written to" in result.output
    assert "Amazing grace" in out_file.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# dupes
# ---------------------------------------------------------------------------


def test_dupes_lists_match(tmp_path):
    result = CliRunner().invoke(main, ["dupes", "amazing grace", "--catalog", _catalog(tmp_path)])
    assert result.exit_code == 0
    assert "0.00  Amazing Grace — John Newton (amazing-grace)" in result.output


def test_dupes_no_match(tmp_path):
    result = CliRunner().invoke(main, ["dupes", "Xyzzy Quux", "-c", _catalog(tmp_path)])
    assert result.exit_code == 0
    assert "No likely duplicates." in result.output


def test_dupes_requires_catalog():
    result = CliRunner().invoke(main, ["dupes", "Amazing Grace"])
    assert result.exit_code != 0


def test_dupes_bad_catalog_exits_nonzero(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{oops", encoding="utf-8")
    result = CliRunner().invoke(main, ["dupes", "Amazing Grace", "-c", str(bad)])
    assert result.exit_code == 1
    assert "Error" in result.output


def test_dupes_fetch_error_exits_nonzero():
    with patch("chordchart.cli.load_catalog", side_effect=FetchError("https://x.test", 503)):
        result = CliRunner().invoke(main, ["dupes", "Amazing Grace", "-c", "https://x.test"])
    assert result.exit_code == 1
    assert "503" in result.output


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


def test_search_by_artist(tmp_path):
    result = CliRunner().invoke(main, ["search", "crosby", "-c", _catalog(tmp_path)])
    assert result.exit_code == 0
    assert "Blessed Assurance" in result.output


def test_search_no_match(tmp_path):
    result = CliRunner().invoke(main, ["search", "zzzzqq", "-c", _catalog(tmp_path)])
    assert "No matches." in result.output
