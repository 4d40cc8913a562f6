# ABOUTME: The `bookmeta inspect` command for viewing ebook metadata.
# ABOUTME: Shows extracted metadata for a single file of any supported format.

import json as json_lib
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bookmeta.cli.options import json_option
from bookmeta.core.reader import EbookReadError, read_metadata
from bookmeta.metadata.types import BookMetadata

console = Console()


def _escaped(value: str | None) -> str | None:
    """Escape Rich markup in text taken from a book file, keeping None as None."""
    return escape(value) if value else value


def _to_json(meta: BookMetadata) -> dict:
    return {
        "title": meta.title,
        "authors": meta.authors,
        "language": meta.language,
        "publisher": meta.publisher,
        "isbn": meta.isbn,
        "description": meta.description,
        "series": meta.series,
        "series_index": meta.series_index,
        "identifiers": meta.identifiers,
        "subjects": meta.subjects,
        "publish_date": meta.publish_date.isoformat() if meta.publish_date else None,
        "format": meta.format,
        "has_cover": meta.has_cover,
        "source_path": str(meta.source_path) if meta.source_path else None,
    }


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--normalize", is_flag=True, default=False, help="Clean up mangled titles and authors."
)
@json_option
def inspect(path: Path, normalize: bool, json_output: bool) -> None:
    """Show metadata extracted from an ebook file."""
    try:
        meta = read_metadata(path, normalize=normalize)
    except EbookReadError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    if json_output:
        click.echo(json_lib.dumps(_to_json(meta), indent=2))
        return

    table = Table(title=escape(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")

    table.add_row("Format", (meta.format or "?").upper())
    table.add_row("Title", escape(meta.title))
    table.add_row("Author", _escaped(meta.author) or "[dim]unknown[/dim]")
    table.add_row("Language", _escaped(meta.language) or "[dim]unknown[/dim]")
    table.add_row("Publisher", _escaped(meta.publisher) or "[dim]unknown[/dim]")
    table.add_row("ISBN", _escaped(meta.isbn) or "[dim]none[/dim]")
    table.add_row("Description", _escaped(meta.description) or "[dim]none[/dim]")
    table.add_row("Series", _escaped(meta.series) or "[dim]none[/dim]")
    if meta.series_index is not None:
        table.add_row("Series Index", f"{meta.series_index:g}")
    if meta.subjects:
        table.add_row("Subjects", escape(", ".join(meta.subjects)))
    if meta.publish_date:
        table.add_row("Published", meta.publish_date.date().isoformat())
    table.add_row("Cover", "yes" if meta.has_cover else "no")
    if meta.identifiers:
        ids_str = ", ".join(f"{k}={v}" for k, v in meta.identifiers.items())
        table.add_row("Identifiers", escape(ids_str))

    console.print(table)
