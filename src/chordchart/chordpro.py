"""ChordPro parser and chord-over-lyrics formatter.

Parsing turns ChordPro text into a :class:`~chordchart.models.ParsedDocument`:

+-----------------------------------+---------------------------------------+
| Source line                       | Result                                |
+===================================+=======================================+
| ``{title: Amazing Grace}``        | ``metadata["title"]``, no line record |
+-----------------------------------+---------------------------------------+
| ``{comment: Chorus}``             | ``CommentLine("Chorus")``             |
+-----------------------------------+---------------------------------------+
| ``[C]Amazing [F]grace``           | ``ChordLine`` of chord/lyrics parts   |
+-----------------------------------+---------------------------------------+
| ``Amazing grace`` (no markers)    | ``TextLine``                          |
+-----------------------------------+---------------------------------------+
| blank / whitespace only           | ``EmptyLine``                         |
+-----------------------------------+---------------------------------------+

Formatting lays each chord above the lyric column it precedes::

    C        F         C
    Amazing grace, how sweet the sound

The format is lenient: nothing here raises.  Unbalanced brackets and odd
directives are kept as plain text.

Usage::

    from chordchart.chordpro import ChordProFormatter, parse_chordpro
    doc = parse_chordpro(Path("amazing-grace.cho").read_text())
    print(ChordProFormatter().render(doc))
"""

import logging

from .models import (
    ChordLine,
    ChordPart,
    CommentLine,
    EmptyLine,
    FormattedRow,
    LineRecord,
    LyricsPart,
    ParsedDocument,
    TextLine,
)

logger = logging.getLogger(__name__)

# Metadata directives shown above the chart when a header is requested.
_HEADER_FIELDS = ("key", "tempo", "time", "capo")


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


def match_directive(line: str) -> tuple[str, str] | None:
    """Return ``(key, value)`` if *line* is a ``{key: value}`` directive.

    The key is everything between ``{`` and the first ``:`` and must be
    non-empty.  Whitespace after the colon is skipped; a value made only of
    whitespace keeps its last character.  The key is returned as written
    (not lower-cased).
    """
    if len(line) < 4 or line[0] != "{" or line[-1] != "}":
        return None
    colon = line.find(":")
    if colon < 2:
        return None
    rest = line[colon + 1 : -1]
    if not rest:
        return None
    return line[1:colon], rest.lstrip() or rest[-1]


def scan_chord_tokens(line: str) -> list[tuple[int, int, str]]:
    """Return ``(start, end, chord)`` for every ``[chord]`` token in *line*.

    Scans left to right.  A token runs from ``[`` to the first ``]`` after
    it and needs at least one character inside, so ``[]`` is skipped and
    ``[a[b]`` yields ``"a[b"``.  An ``[`` with no closing ``]`` ends the scan.
    """
    tokens: list[tuple[int, int, str]] = []
    pos = 0
    while True:
        start = line.find("[", pos)
        if start == -1:
            break
        end = line.find("]", start + 1)
        if end == -1:
            break
        if end == start + 1:
            pos = start + 1
            continue
        tokens.append((start, end + 1, line[start + 1 : end]))
        pos = end + 1
    return tokens


def _split_chord_line(line: str, tokens: list[tuple[int, int, str]]) -> ChordLine:
    parts: list[ChordPart | LyricsPart] = []
    last = 0
    for start, end, chord in tokens:
        if start > last:
            parts.append(LyricsPart(text=line[last:start]))
        parts.append(ChordPart(chord=chord))
        last = end
    if last < len(line):
        parts.append(LyricsPart(text=line[last:]))
    return ChordLine(parts=parts)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def parse_chordpro(content: str | None) -> ParsedDocument:
    """Parse ChordPro *content* into metadata and ordered line records.

    ``None`` and ``""`` give an empty document.  Lines are classified one at a
    time; only the metadata map carries over between lines, and a repeated
    directive overwrites the earlier value.  A trailing ``\\r`` is dropped from
    each line so CRLF files parse the same as LF files.
    """
    doc = ParsedDocument()
    if not content:
        return doc

    for raw in content.split("\n"):
        line = raw.removesuffix("\r")

        directive = match_directive(line)
        if directive:
            key, value = directive
            key = key.lower()
            if key == "comment":
                doc.lines.append(CommentLine(content=value))
            else:
                doc.metadata[key] = value
            continue

        tokens = scan_chord_tokens(line)
        if tokens:
            doc.lines.append(_split_chord_line(line, tokens))
        elif line.strip():
            doc.lines.append(TextLine(content=line))
        else:
            doc.lines.append(EmptyLine())

    return doc


# ---------------------------------------------------------------------------
# Formatter
# ---------------------------------------------------------------------------


def format_line(record: LineRecord) -> FormattedRow:
    """Return the display row for one parsed line record.

    For a :class:`ChordLine`, each chord is placed at the length of the lyrics
    accumulated before it.  Chords never overlap: when a chord's column falls
    inside the previous chord it is appended with no padding instead.
    """
    if isinstance(record, CommentLine):
        return FormattedRow(chord="", lyrics=f"({record.content})", is_comment=True)
    if isinstance(record, TextLine):
        return FormattedRow(chord="", lyrics=record.content)
    if isinstance(record, EmptyLine):
        return FormattedRow(chord="", lyrics="")

    lyrics = ""
    positions: list[tuple[str, int]] = []
    for part in record.parts:
        if isinstance(part, ChordPart):
            positions.append((part.chord, len(lyrics)))
        else:
            lyrics += part.text

    chord_line = ""
    last_end = 0
    for chord, offset in positions:
        if offset < last_end:
            logger.debug(
                "Chord %r at column %d overlaps previous chord ending at %d; "
                "placing it directly after",
                chord,
                offset,
                last_end,
            )
        chord_line += " " * max(0, offset - last_end) + chord
        last_end = offset + len(chord)

    return FormattedRow(chord=chord_line, lyrics=lyrics)


class ChordProFormatter:
    """Render a :class:`~chordchart.models.ParsedDocument` for monospace display."""

    def format(self, document: ParsedDocument) -> list[FormattedRow]:
        return [format_line(record) for record in document.lines]

    def render(
        self, document: ParsedDocument, show_chords: bool = True, header: bool = False
    ) -> str:
        """Return the chart as plain text, chord lines above lyric lines.

        Chord lines are omitted when empty or when *show_chords* is false.
        Trailing whitespace is stripped from every line and the result ends
        with a single newline.
        """
        out: list[str] = []

        if header:
            out.extend(_render_header(document.metadata))

        for row in self.format(document):
            if show_chords and row.chord:
                out.append(row.chord.rstrip())
            out.append(row.lyrics.rstrip())

        return "\n".join(out).rstrip("\n") + "\n"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _render_header(metadata: dict[str, str]) -> list[str]:
    """Title, artist and a ``Key: G | Tempo: 72`` summary, then a blank line."""
    lines: list[str] = []
    if metadata.get("title"):
        lines.append(metadata["title"])
    if metadata.get("artist"):
        lines.append(metadata["artist"])
    details = [f"{name.title()}: {metadata[name]}" for name in _HEADER_FIELDS if metadata.get(name)]
    if details:
        lines.append(" | ".join(details))
    if lines:
        lines.append("")
    return lines
