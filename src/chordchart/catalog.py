"""Load the song catalog used for duplicate detection and search.

A catalog source is either a local JSON file or an ``http(s)://`` URL that
returns JSON.  Both hold an array of song objects::

    [
      {"_id": "k17...", "title": "Amazing Grace", "artist": "John Newton",
       "slug": "amazing-grace", "themes": ["grace", "salvation"]},
      ...
    ]

``id`` and ``_id`` are both accepted.  ``artist`` falls back to
``"Unknown Artist"`` and a missing ``slug`` is derived from the title.
"""

import json
import logging
import re
from pathlib import Path

import httpx

from .exceptions import CatalogError, FetchError
from .models import SongSummary

logger = logging.getLogger(__name__)

_FETCH_HEADERS = {"Accept": "application/json"}


_SLUG_PUNCT_RE = re.compile(r"[^\w\s-]")
_SLUG_SEPARATOR_RE = re.compile(r"[\s_-]+")


def slugify(title: str) -> str:
    """Catalog slug for a song title: ``"Oh, How I Love Jesus!"`` → ``"oh-how-i-love-jesus"``."""
    words = _SLUG_PUNCT_RE.sub("", title.lower())
    return _SLUG_SEPARATOR_RE.sub("-", words).strip("-")


def song_from_dict(data: dict, source: str = "<catalog>") -> SongSummary:
    """Build a :class:`SongSummary` from one catalog record.

    Raises :class:`~chordchart.exceptions.CatalogError` if the record is not
    an object or lacks an id or title.
    """
    if not isinstance(data, dict):
        raise CatalogError(source, f"expected an object, got {type(data).__name__}")
    song_id = data.get("id") or data.get("_id")
    title = data.get("title")
    if not song_id or not title:
        raise CatalogError(source, f"record missing id or title: {data!r}")
    themes = data.get("themes") or []
    return SongSummary(
        id=str(song_id),
        title=str(title),
        artist=data.get("artist") or "Unknown Artist",
        slug=data.get("slug") or slugify(str(title)),
        themes=[str(t) for t in themes],
    )


def fetch(url: str) -> str:
    """GET *url* and return the response body.

    Raises FetchError on transport failures (status 0) and non-200 responses.
    """
    try:
        resp = httpx.get(url, headers=_FETCH_HEADERS, follow_redirects=True, timeout=15)
    except httpx.RequestError as exc:
        raise FetchError(url, 0) from exc
    if resp.status_code != 200:
        raise FetchError(url, resp.status_code)
    return resp.text


def parse_catalog(text: str, source: str = "<catalog>") -> list[SongSummary]:
    """Parse catalog JSON *text* into song summaries."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(source, f"invalid JSON: {exc}") from exc
    if not isinstance(data, list):
        raise CatalogError(source, "expected a JSON array of songs")
    return [song_from_dict(item, source) for item in data]


def load_catalog(source: str) -> list[SongSummary]:
    """Read the catalog at *source* (file path or http/https URL)."""
    if source.startswith(("http://", "https://")):
        text = fetch(source)
    else:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as exc:
            raise CatalogError(source, exc.strerror or str(exc)) from exc

    songs = parse_catalog(text, source)
    logger.info("Loaded %d songs from %s", len(songs), source)
    return songs
