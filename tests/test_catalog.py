import json
from unittest.mock import MagicMock, patch

import httpx
import pytest

from chordchart.catalog import load_catalog, parse_catalog, slugify, song_from_dict
from chordchart.exceptions import CatalogError, FetchError

SONGS = [
    {"_id": "k1", "title": "Amazing Grace", "artist": "John Newton",
     "slug": "amazing-grace", "themes": ["grace"]},
    {"id": "k2", "title": "How Great Thou Art"},
]


# ---------------------------------------------------------------------------
# slugify / song_from_dict
# ---------------------------------------------------------------------------


def test_slugify_basic():
    assert slugify("How Great Thou Art") == "how-great-thou-art"


def test_slugify_punctuation():
    assert slugify("Oh, How I Love Jesus!") == "oh-how-i-love-jesus"


def test_slugify_collapses_separators():
    assert slugify("  10,000 Reasons - (Bless_The Lord) ") == "10000-reasons-bless-the-lord"


def test_song_from_dict_accepts_underscore_id():
    song = song_from_dict(SONGS[0])
    assert song.id == "k1"
    assert song.artist == "John Newton"
    assert song.themes == ["grace"]


def test_song_from_dict_fills_defaults():
    song = song_from_dict(SONGS[1])
    assert song.artist == "Unknown Artist"
    assert song.slug == "how-great-thou-art"
    assert song.themes == []


def test_song_from_dict_requires_title():
    with pytest.raises(CatalogError):
        song_from_dict({"id": "k3"})


def test_song_from_dict_rejects_non_object():
    with pytest.raises(CatalogError):
        song_from_dict(["not", "a", "song"])


# ---------------------------------------------------------------------------
# parse_catalog
# ---------------------------------------------------------------------------


def test_parse_catalog():
    songs = parse_catalog(json.dumps(SONGS))
    assert [s.title for s in songs] == ["Amazing Grace", "How Great Thou Art"]


def test_parse_catalog_invalid_json():
    with pytest.raises(CatalogError, match="invalid JSON"):
        parse_catalog("{not json")


def test_parse_catalog_requires_array():
    with pytest.raises(CatalogError):
        parse_catalog(json.dumps({"songs": SONGS}))


# ---------------------------------------------------------------------------
# load_catalog
# ---------------------------------------------------------------------------


def test_load_catalog_from_file(tmp_path):
    path = tmp_path / "songs.json"
    path.write_text(json.dumps(SONGS), encoding="utf-8")
    songs = load_catalog(str(path))
    assert len(songs) == 2


def test_load_catalog_missing_file(tmp_path):
    with pytest.raises(CatalogError):
        load_catalog(str(tmp_path / "missing.json"))


def test_load_catalog_from_url():
    resp = MagicMock(status_code=200, text=json.dumps(SONGS))
    with patch("chordchart.catalog.httpx.get", return_value=resp) as get:
        songs = load_catalog("https://example.com/songs.json")
    assert songs[0].id == "k1"
    assert get.call_args.args[0] == "https://example.com/songs.json"


def test_load_catalog_http_error():
    resp = MagicMock(status_code=503, text="")
    with patch("chordchart.catalog.httpx.get", return_value=resp):
        with pytest.raises(FetchError) as excinfo:
            load_catalog("https://example.com/songs.json")
    assert excinfo.value.status_code == 503


def test_load_catalog_transport_error():
    with patch("chordchart.catalog.httpx.get", side_effect=httpx.ConnectError("refused")):
        with pytest.raises(FetchError) as excinfo:
            load_catalog("http://localhost:1/songs.json")
    assert excinfo.value.status_code == 0
