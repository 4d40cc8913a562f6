# ABOUTME: The `bookmeta inventory` command for scanning ebook format coverage.
# ABOUTME: Walks a directory tree and reports which books are missing a target format.

import json as json_lib
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bookmeta.cli.options import json_option
from bookmeta.core.scanner import BookEntry, ScanResult, scan_directory

console = Console()


@click.command("inventory")
@click.argument(
    "path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.option(
    "--format",
    "target_format",
    default="epub",
    help="Target format to check for (default: epub).",
)
@click.option(
    "--sniff",
    is_flag=True,
    default=False,
    help="Detect formats from file contents instead of extensions.",
)
@json_option
def inventory(path: Path, target_format: str, sniff: bool, json_output: bool) -> None:
    """Scan a directory tree and report ebook format coverage."""
    result = scan_directory(path, sniff=sniff)
    target_label = target_format.upper().lstrip(".")
    missing = result.missing_format(target_format)

    if json_output:
        _print_json(result, missing, target_label)
        return

    if result.total_books == 0:
        console.print(f"No ebook files found in {escape(str(path))}")
        return

    counts = Table(title="Format counts")
    counts.add_column("Format", style="bold")
    counts.add_column("Files", justify="right")
    for book_format, count in sorted(result.format_counts.items(), key=lambda i: i[0].value):
        counts.add_row(book_format.value.upper(), str(count))
    console.print(counts)

    console.print(
        f"{result.total_books} books, {len(missing)} missing {target_label}"
    )
    if missing:
        table = Table(title=f"Missing {target_label}")
        table.add_column("Book")
        table.add_column("Formats")
        for book in missing:
            table.add_row(escape(book.name), _format_list(book))
        console.print(table)


def _format_list(book: BookEntry) -> str:
    return ", ".join(sorted(f.value for f in book.formats))


def _print_json(result: ScanResult, missing: list[BookEntry], target_label: str) -> None:
    payload = {
        "scan_root": str(result.scan_root),
        "total_books": result.total_books,
        "format_counts": {f.value: n for f, n in result.format_counts.items()},
        "target_format": target_label.lower(),
        "missing": [
            {"name": book.name, "directory": str(book.directory), "formats": _format_list(book)}
            for book in missing
        ],
    }
    click.echo(json_lib.dumps(payload, indent=2))
