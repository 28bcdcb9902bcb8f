import logging
import sys
from pathlib import Path

import click

from .catalog import load_catalog
from .chordpro import ChordProFormatter, parse_chordpro
from .duplicates import DUPLICATE_THRESHOLD, MAX_DUPLICATES, find_duplicates, search_songs
from .exceptions import CatalogError, FetchError
from .transpose import transpose_document

_SPELLINGS = {"auto": None, "sharps": False, "flats": True}


def _load_or_exit(source: str):
    try:
        return load_catalog(source)
    except FetchError as exc:
        msg = f"Error: Could not fetch {exc.url}"
        if exc.status_code:
            msg += f" (HTTP {exc.status_code})"
        click.echo(msg, err=True)
        sys.exit(1)
    except CatalogError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug output to stderr.")
def main(verbose: bool) -> None:
    """Render ChordPro charts and check a song catalog for duplicates."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("source", type=click.File("r", encoding="utf-8"))
@click.option("-o", "--output", "output_path", default=None, metavar="PATH",
              help="Write to PATH instead of stdout.")
@click.option("-t", "--transpose", "semitones", default=0, show_default=True,
              help="Transpose every chord by N semitones.")
@click.option("--spelling", type=click.Choice(["auto", "sharps", "flats"]), default="auto",
              show_default=True, help="Accidentals for transposed chords (auto follows the key).")
@click.option("--no-chords", is_flag=True, default=False,
              help="Print lyrics only.")
@click.option("--header/--no-header", default=True, show_default=True,
              help="Print title, artist and key above the chart.")
def render(source, output_path: str | None, semitones: int, spelling: str,
           no_chords: bool, header: bool) -> None:
    """Render a ChordPro file (or - for stdin) with chords above the lyrics."""
    document = parse_chordpro(source.read())
    if semitones:
        document = transpose_document(document, semitones, prefer_flats=_SPELLINGS[spelling])

    text = ChordProFormatter().render(document, show_chords=not no_chords, header=header)

    if output_path is None:
        click.echo(text, nl=False)
        return

    dest = Path(output_path)
    dest.write_text(text, encoding="utf-8")
    click.echo(f"Written to {dest}")


@main.command()
@click.argument("title")
@click.option("-c", "--catalog", "catalog_source", required=True, metavar="SOURCE",
              help="Catalog JSON file or http(s) URL.")
@click.option("--threshold", default=DUPLICATE_THRESHOLD, show_default=True,
              help="Keep matches scoring below this (0 = exact).")
@click.option("--limit", default=MAX_DUPLICATES, show_default=True,
              help="Maximum number of matches to show.")
def dupes(title: str, catalog_source: str, threshold: float, limit: int) -> None:
    """List catalog songs that look like duplicates of TITLE."""
    songs = _load_or_exit(catalog_source)
    matches = find_duplicates(title, songs, threshold=threshold, limit=limit)
    if not matches:
        click.echo("No likely duplicates.")
        return
    for match in matches:
        click.echo(f"{match.score:.2f}  {match.title} — {match.artist} ({match.slug})")


@main.command()
@click.argument("query")
@click.option("-c", "--catalog", "catalog_source", required=True, metavar="SOURCE",
              help="Catalog JSON file or http(s) URL.")
def search(query: str, catalog_source: str) -> None:
    """Fuzzy-search the catalog by title, artist and theme."""
    songs = _load_or_exit(catalog_source)
    results = search_songs(query, songs)
    if not results:
        click.echo("No matches.")
        return
    for result in results:
        song = result.song
        click.echo(f"{result.score:.2f}  {song.title} — {song.artist} ({song.slug})")
