# ABOUTME: The `bookmeta mobi` command for dumping the raw headers of a MOBI file.
# ABOUTME: Prints the PDB, PalmDOC, MOBI and EXTH headers plus the record table.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bookmeta.formats.mobi import EXTH_FIELDS, ExthKind, MobiContainer, MobiError

console = Console()


def _format_exth_value(tag_id: int, value: bytes, codec: str) -> str:
    field = EXTH_FIELDS.get(tag_id)
    if field is None or field.kind is ExthKind.BINARY:
        return f"0x{value.hex()}"
    if field.kind is ExthKind.NUMBER:
        return str(int.from_bytes(value, "big"))
    return value.decode(codec, errors="replace")


@click.command("mobi")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--records", "show_records", is_flag=True, default=False,
              help="Also list every entry of the PDB record table.")
def mobi(path: Path, show_records: bool) -> None:
    """Dump the PDB, PalmDOC, MOBI and EXTH headers of a MOBI file."""
    try:
        container = MobiContainer.from_path(path)
    except (OSError, MobiError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    pdb = container.pdb_header
    palmdoc = container.palmdoc_header
    header = container.mobi_header

    table = Table(title=escape(path.name), show_header=False, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("PDB name", escape(pdb.name))
    table.add_row("PDB type/creator", escape(pdb.ident))
    table.add_row("Records", str(len(container.records)))
    table.add_row("Compression", str(palmdoc.compression_type))
    table.add_row("Text length", str(palmdoc.text_length))
    table.add_row("Text records", str(palmdoc.record_count))
    table.add_row("Record size", str(palmdoc.record_size))
    table.add_row("Encryption", str(palmdoc.encryption_type))
    for name, value in header.fields.items():
        table.add_row(f"MOBI {name}", escape(str(value)))
    table.add_row("Full name", escape(header.full_name))
    table.add_row("Has EXTH", "yes" if header.has_exth else "no")
    console.print(table)

    if container.exth_error:
        reason = escape(str(container.exth_error))
        console.print(f"[yellow]Warning:[/yellow] EXTH block ignored: {reason}")

    if container.exth is not None:
        exth_table = Table(title="EXTH records")
        exth_table.add_column("Tag", justify="right")
        exth_table.add_column("Name")
        exth_table.add_column("Value")
        for record in container.exth.records:
            field = EXTH_FIELDS.get(record.tag_id)
            exth_table.add_row(
                str(record.tag_id),
                field.name if field else "[dim]unknown[/dim]",
                escape(_format_exth_value(record.tag_id, record.value, header.codec)),
            )
        console.print(exth_table)

    if show_records:
        rec_table = Table(title="Record table")
        rec_table.add_column("#", justify="right")
        rec_table.add_column("Offset", justify="right")
        rec_table.add_column("Length", justify="right")
        rec_table.add_column("Attributes", justify="right")
        rec_table.add_column("Unique ID", justify="right")
        for index, raw in enumerate(container.records):
            start, end = container.records.record_span(index)
            rec_table.add_row(
                str(index), str(raw.offset), str(end - start),
                f"0x{raw.attributes:02x}", str(raw.unique_id),
            )
        console.print(rec_table)
