"""Fuzzy title matching: duplicate warnings and catalog search.

Scores are distances in ``[0, 1]`` where 0 is an exact match, computed as
``1 - difflib.SequenceMatcher(...).ratio()`` on case-folded text.

Duplicate detection is deliberately strict (title only, low threshold, at
most five results) because it only drives an advisory warning when someone
adds a song.  Catalog search is looser and also looks at artist and themes.
"""

import logging
import re
import sys
from collections.abc import Iterable
from difflib import SequenceMatcher

from .models import PotentialDuplicate, SearchResult, SongSummary

logger = logging.getLogger(__name__)

DUPLICATE_THRESHOLD = 0.3
MAX_DUPLICATES = 5
MIN_TITLE_LENGTH = 3

SEARCH_THRESHOLD = 0.4
SEARCH_WEIGHTS = {"title": 0.5, "artist": 0.3, "themes": 0.2}

_EPSILON = sys.float_info.epsilon

# Leading words that often differ between entries of the same song:
# "Oh, How I Love Jesus" / "How I Love Jesus", "The Old Rugged Cross" / "Old Rugged Cross".
_LEADING_WORD_RE = re.compile(r"^(?:oh,?\s+|o\s+|the\s+|an?\s+)")
_PUNCT_RE = re.compile(r"[^\w\s]")


# ---------------------------------------------------------------------------
# Normalization and scoring
# ---------------------------------------------------------------------------


def _compact(text: str) -> str:
    return " ".join(text.casefold().split())


def normalize_title(title: str) -> str:
    """Case-fold, drop leading "Oh,"/"The"/"A"/"An" and punctuation.

    >>> normalize_title("Oh, The Wonderful Cross!")
    'wonderful cross'
    """
    text = _compact(title)
    while True:
        stripped = _LEADING_WORD_RE.sub("", text, count=1)
        if stripped == text:
            break
        text = stripped
    return _compact(_PUNCT_RE.sub("", text))


def similarity_score(a: str, b: str) -> float:
    """Distance between two already-normalized strings (0 = identical)."""
    if not a or not b:
        return 1.0
    return 1.0 - SequenceMatcher(None, a, b).ratio()


def _window_score(query: str, text: str) -> float:
    """Best score of *query* against any same-length window of *text*."""
    if len(text) <= len(query):
        return similarity_score(query, text)
    n = len(query)
    return min(similarity_score(query, text[i : i + n]) for i in range(len(text) - n + 1))


def _best_score(query: str, text: str) -> float:
    return min(similarity_score(query, text), _window_score(query, text))


def title_score(candidate: str, title: str) -> float:
    """Best score over the raw and normalized titles, whole or windowed.

    The windowed comparison lets a title that contains the candidate score
    near 0: a subtitled entry ("Amazing Grace (My Chains Are Gone)") or the
    part of a title typed so far ("How Great").
    """
    pairs = [(_compact(candidate), _compact(title))]
    norm_candidate = normalize_title(candidate)
    norm_title = normalize_title(title)
    if norm_candidate and norm_title:
        pairs.append((norm_candidate, norm_title))
    return min(_best_score(c, t) for c, t in pairs)


# ---------------------------------------------------------------------------
# Duplicate detection
# ---------------------------------------------------------------------------


def find_duplicates(
    title: str,
    corpus: Iterable[SongSummary],
    threshold: float = DUPLICATE_THRESHOLD,
    limit: int = MAX_DUPLICATES,
) -> list[PotentialDuplicate]:
    """Return catalog songs whose title closely matches *title*, best first.

    Titles shorter than three characters after trimming never match.  Each
    song appears at most once, with its best score; only scores strictly
    below *threshold* are kept, and at most *limit* results are returned.
    """
    candidate = title.strip() if title else ""
    if len(candidate) < MIN_TITLE_LENGTH:
        return []

    best: dict[str, PotentialDuplicate] = {}
    for song in corpus:
        score = round(title_score(candidate, song.title), 4)
        if score >= threshold:
            continue
        seen = best.get(song.id)
        if seen is None or score < seen.score:
            best[song.id] = PotentialDuplicate(
                id=song.id,
                title=song.title,
                artist=song.artist,
                slug=song.slug,
                score=score,
            )

    matches = sorted(best.values(), key=lambda d: d.score)[:limit]
    logger.debug("Duplicate check for %r: %d match(es)", candidate, len(matches))
    return matches


# ---------------------------------------------------------------------------
# Catalog search
# ---------------------------------------------------------------------------


def song_score(
    query: str,
    song: SongSummary,
    weights: dict[str, float] | None = None,
    threshold: float = SEARCH_THRESHOLD,
) -> float | None:
    """Score *song* against an already-compacted *query*, or ``None`` if no field matches.

    A field matches when its best score (whole or windowed) is within
    *threshold*; for themes the closest theme counts.  The song's score is
    the product of ``field_score ** weight`` over the matching fields, so
    every extra matching field improves it and a light field (artist,
    themes) pulls less than an equally close title.  An exact field match
    counts as ``sys.float_info.epsilon`` rather than 0.
    """
    weights = weights or SEARCH_WEIGHTS
    fields = {
        "title": [song.title],
        "artist": [song.artist],
        "themes": song.themes,
    }
    score = None
    for name, weight in weights.items():
        values = [_compact(v) for v in fields.get(name, []) if v]
        if not values:
            continue
        field_best = min(_best_score(query, v) for v in values)
        if field_best > threshold:
            continue
        score = (1.0 if score is None else score) * max(field_best, _EPSILON) ** weight
    return score


def search_songs(
    query: str,
    corpus: Iterable[SongSummary],
    threshold: float = SEARCH_THRESHOLD,
    min_query_length: int = 2,
) -> list[SearchResult]:
    """Fuzzy search over title, artist and themes, best match first.

    A query shorter than *min_query_length* returns every song with score
    1.0 in catalog order.
    """
    songs = list(corpus)
    q = _compact(query or "")
    if len(q) < min_query_length:
        return [SearchResult(song=song, score=1.0) for song in songs]

    results = []
    for song in songs:
        score = song_score(q, song, threshold=threshold)
        if score is not None:
            results.append(SearchResult(song=song, score=round(score, 4)))
    results.sort(key=lambda r: r.score)
    return results
