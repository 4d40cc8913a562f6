# ABOUTME: PDB file header and record-info list decoding.
# ABOUTME: The record table locates every record boundary inside the container.

from dataclasses import dataclass

from bookmeta.formats.mobi.cursor import ByteCursor
from bookmeta.formats.mobi.errors import MalformedRecordTableError, OutOfBoundsError

PDB_HEADER_LENGTH = 78
RECORD_ENTRY_LENGTH = 8


@dataclass(frozen=True)
class PdbHeader:
    """The 78-byte Palm database header that opens every PDB file."""

    name: str
    attributes: int
    version: int
    created: int
    modified: int
    backed_up: int
    modification_number: int
    app_info_offset: int
    sort_info_offset: int
    type: str
    creator: str
    unique_id_seed: int
    next_record_list: int
    record_count: int

    @property
    def ident(self) -> str:
        """Type and creator joined, e.g. ``BOOKMOBI``."""
        return f"{self.type}{self.creator}"

    @classmethod
    def parse(cls, cursor: ByteCursor) -> "PdbHeader":
        try:
            return cls(
                name=cursor.read_fixed_string(0, 32, "latin-1"),
                attributes=cursor.read_uint16(32),
                version=cursor.read_uint16(34),
                created=cursor.read_uint32(36),
                modified=cursor.read_uint32(40),
                backed_up=cursor.read_uint32(44),
                modification_number=cursor.read_uint32(48),
                app_info_offset=cursor.read_uint32(52),
                sort_info_offset=cursor.read_uint32(56),
                type=cursor.slice(60, 4).decode("latin-1"),
                creator=cursor.slice(64, 4).decode("latin-1"),
                unique_id_seed=cursor.read_uint32(68),
                next_record_list=cursor.read_uint32(72),
                record_count=cursor.read_uint16(76),
            )
        except OutOfBoundsError as exc:
            raise MalformedRecordTableError(
                f"File too short for a PDB header ({len(cursor)} bytes)"
            ) from exc


@dataclass(frozen=True)
class RawRecord:
    """One entry of the PDB record table."""

    offset: int
    attributes: int
    unique_id: int


class RecordOffsetTable:
    """Decoded record-info list with span lookups into the owning buffer."""

    def __init__(self, records: list[RawRecord], buffer_length: int) -> None:
        self._records = tuple(records)
        self._buffer_length = buffer_length

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __getitem__(self, index: int) -> RawRecord:
        return self._records[index]

    @property
    def records(self) -> tuple[RawRecord, ...]:
        return self._records

    @classmethod
    def parse(
        cls, cursor: ByteCursor, start: int = PDB_HEADER_LENGTH - 2
    ) -> "RecordOffsetTable":
        """Decode the record count and entries beginning at ``start``.

        ``start`` points at the 16-bit record count that closes the PDB header;
        the entries follow immediately after it.
        """
        try:
            count = cursor.read_uint16(start)
        except OutOfBoundsError as exc:
            raise MalformedRecordTableError("Record count is missing") from exc

        table_start = start + 2
        table_end = table_start + count * RECORD_ENTRY_LENGTH
        if table_end > len(cursor):
            raise MalformedRecordTableError(
                f"Record table of {count} entries ends at {table_end}, "
                f"past the end of the {len(cursor)}-byte file"
            )

        records: list[RawRecord] = []
        previous = -1
        for i in range(count):
            entry = table_start + i * RECORD_ENTRY_LENGTH
            offset = cursor.read_uint32(entry)
            attributes = cursor.read_uint8(entry + 4)
            unique_id = cursor.read_uint24(entry + 5)
            if offset <= previous:
                raise MalformedRecordTableError(
                    f"Record {i} offset {offset} does not follow previous offset {previous}"
                )
            if offset > len(cursor):
                raise MalformedRecordTableError(
                    f"Record {i} offset {offset} lies past the end of the file"
                )
            records.append(RawRecord(offset=offset, attributes=attributes, unique_id=unique_id))
            previous = offset

        return cls(records, len(cursor))

    def record_span(self, index: int) -> tuple[int, int]:
        """Return the ``(start, end)`` byte range of record ``index``.

        The last record runs to the end of the buffer.

        Raises:
            IndexError: If ``index`` does not name a record.
        """
        if index < 0 or index >= len(self._records):
            raise IndexError(
                f"Record index {index} out of range (0..{len(self._records) - 1})"
            )
        start = self._records[index].offset
        if index + 1 < len(self._records):
            end = self._records[index + 1].offset
        else:
            end = self._buffer_length
        return start, end
