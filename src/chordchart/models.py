from dataclasses import dataclass, field


@dataclass
class ChordPart:
    """A chord symbol taken from a ``[...]`` marker, e.g. ``"Am7"`` or ``"G/B"``."""

    chord: str


@dataclass
class LyricsPart:
    """Literal lyric text between (or around) chord markers."""

    text: str


@dataclass
class CommentLine:
    """Content of a ``{comment: ...}`` directive, kept in document position."""

    content: str
    type: str = field(default="comment", init=False)


@dataclass
class TextLine:
    """A non-blank line with no chord markers, stored verbatim."""

    content: str
    type: str = field(default="text", init=False)


@dataclass
class EmptyLine:
    """A blank or whitespace-only line."""

    type: str = field(default="empty", init=False)


@dataclass
class ChordLine:
    """A lyric line with one or more chords embedded inline.

    Example source: "[C]Amazing [F]grace, how [C]sweet the sound"
    """

    parts: list[ChordPart | LyricsPart] = field(default_factory=list)
    type: str = field(default="line", init=False)

    @property
    def lyrics(self) -> str:
        """The source line with every chord marker removed."""
        return "".join(p.text for p in self.parts if isinstance(p, LyricsPart))

    @property
    def chords(self) -> list[str]:
        return [p.chord for p in self.parts if isinstance(p, ChordPart)]


LineRecord = CommentLine | TextLine | EmptyLine | ChordLine


@dataclass
class ParsedDocument:
    """Metadata directives plus content lines of one ChordPro chart."""

    metadata: dict[str, str] = field(default_factory=dict)
    lines: list[LineRecord] = field(default_factory=list)


@dataclass
class FormattedRow:
    """One display row: a chord line to print above its lyrics line."""

    chord: str
    lyrics: str
    is_comment: bool = False


@dataclass
class SongSummary:
    """Catalog entry used for duplicate detection and search."""

    id: str
    title: str
    artist: str = "Unknown Artist"
    slug: str = ""
    themes: list[str] = field(default_factory=list)


@dataclass
class PotentialDuplicate:
    """A catalog song whose title closely resembles a candidate title.

    ``score`` is a distance in [0, 1]; 0 is an exact match.
    """

    id: str
    title: str
    artist: str
    slug: str
    score: float


@dataclass
class SearchResult:
    song: SongSummary
    score: float  # 0 = perfect match, 1 = no match
