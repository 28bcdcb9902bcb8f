"""Chord and key transposition for parsed ChordPro documents.

Keys and chord roots are located on a 12-note chromatic scale and shifted by
a number of semitones.  The result is spelled with sharps or flats on request:

    >>> transpose_chord("D/F#", 3, prefer_flats=True)
    'F/A'
    >>> transpose_key("G", -2)
    'F'
"""

import logging
import re
from dataclasses import replace

from .models import ChordLine, ChordPart, ParsedDocument

logger = logging.getLogger(__name__)

CHROMATIC_SHARPS = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
CHROMATIC_FLATS = ("C", "Db", "D", "Eb", "E", "F", "Gb", "G", "Ab", "A", "Bb", "B")

# Spellings missing from both tables above.
_ENHARMONIC = {"Cb": "B", "Fb": "E", "E#": "F", "B#": "C"}

# Scale positions of keys conventionally written with flats.
_FLAT_MAJOR_KEYS = {1, 3, 5, 8, 10}  # Db Eb F Ab Bb
_FLAT_MINOR_KEYS = {0, 2, 5, 7, 10}  # Cm Dm Fm Gm Bbm

# Root note, quality (m7, sus4, maj7, ...), optional slash bass.
_CHORD_RE = re.compile(r"^([A-G][#b]?)(.*?)(?:/([A-G][#b]?))?$")


def note_index(note: str) -> int | None:
    """Return the chromatic position (C=0) of *note*, or ``None`` if unknown."""
    note = _ENHARMONIC.get(note, note)
    if note in CHROMATIC_SHARPS:
        return CHROMATIC_SHARPS.index(note)
    if note in CHROMATIC_FLATS:
        return CHROMATIC_FLATS.index(note)
    return None


def _shift(note: str, semitones: int, prefer_flats: bool) -> str:
    index = note_index(note)
    if index is None:
        return note
    scale = CHROMATIC_FLATS if prefer_flats else CHROMATIC_SHARPS
    return scale[(index + semitones) % 12]


def _split_key(key: str) -> tuple[str, str]:
    """Split ``"Bbm"`` into ``("Bb", "m")``."""
    key = key.strip()
    if key.endswith("m") and len(key) > 1:
        return key[:-1], "m"
    return key, ""


def semitone_distance(from_key: str, to_key: str) -> int:
    """Return the shortest semitone move from *from_key* to *to_key*.

    The result is in ``[-6, 6]``, e.g. G to D is ``-5`` rather than ``+7``.
    A minor suffix is ignored.  Unknown keys give ``0``.
    """
    from_index = note_index(_split_key(from_key)[0])
    to_index = note_index(_split_key(to_key)[0])
    if from_index is None or to_index is None:
        logger.warning("Invalid key in semitone calculation: %r -> %r", from_key, to_key)
        return 0

    diff = to_index - from_index
    if diff > 6:
        diff -= 12
    elif diff < -6:
        diff += 12
    return diff


def capo_for(original_key: str, target_key: str) -> int:
    """Capo fret that makes *original_key* shapes sound in *target_key*."""
    semitones = semitone_distance(original_key, target_key)
    return semitones if semitones > 0 else 0


def transpose_key(key: str, semitones: int, prefer_flats: bool = False) -> str:
    """Return *key* moved by *semitones*, keeping a minor suffix."""
    root, suffix = _split_key(key)
    if note_index(root) is None:
        logger.warning("Invalid key for transposition: %r", key)
        return key
    return _shift(root, semitones, prefer_flats) + suffix


def transpose_chord(chord: str, semitones: int, prefer_flats: bool = False) -> str:
    """Return *chord* moved by *semitones*.

    The root and any slash bass are shifted; the quality is kept as written.
    Symbols that do not start with a note name (``N.C.``, ``x``) are returned
    unchanged.
    """
    if semitones % 12 == 0:
        return chord
    m = _CHORD_RE.match(chord)
    if not m:
        return chord
    root, quality, bass = m.groups()
    result = _shift(root, semitones, prefer_flats) + quality
    if bass:
        result += "/" + _shift(bass, semitones, prefer_flats)
    return result


def prefers_flats(key: str) -> bool:
    """True if *key* is conventionally written with flats (F, Bb, Dm, ...)."""
    root, suffix = _split_key(key)
    index = note_index(root)
    if index is None:
        return False
    return index in (_FLAT_MINOR_KEYS if suffix else _FLAT_MAJOR_KEYS)


def transpose_document(
    document: ParsedDocument, semitones: int, prefer_flats: bool | None = None
) -> ParsedDocument:
    """Return a copy of *document* with every chord and the ``key`` directive moved.

    When *prefer_flats* is ``None`` the spelling follows the destination key:
    flats for flat keys, sharps otherwise (and sharps when no key is given).
    The input document is not modified.
    """
    key = document.metadata.get("key")
    if prefer_flats is None:
        prefer_flats = bool(key) and prefers_flats(transpose_key(key, semitones))

    metadata = dict(document.metadata)
    if key:
        metadata["key"] = transpose_key(key, semitones, prefer_flats)

    lines = []
    for record in document.lines:
        if isinstance(record, ChordLine):
            parts = [
                ChordPart(chord=transpose_chord(p.chord, semitones, prefer_flats))
                if isinstance(p, ChordPart)
                else replace(p)
                for p in record.parts
            ]
            lines.append(ChordLine(parts=parts))
        else:
            lines.append(replace(record))

    logger.debug("Transposed document by %d semitones (flats=%s)", semitones, prefer_flats)
    return ParsedDocument(metadata=metadata, lines=lines)
