# ABOUTME: MOBI/PDB container: decodes all headers of a file eagerly on construction.
# ABOUTME: Gives record-level access to text and image records of the same buffer.

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from bookmeta.formats.mobi.cursor import ByteCursor
from bookmeta.formats.mobi.errors import (
    MalformedExthRecordError,
    MalformedRecordTableError,
    NotMobiFormatError,
)
from bookmeta.formats.mobi.exth import ExthHeader
from bookmeta.formats.mobi.headers import (
    NO_INDEX,
    PALMDOC_HEADER_LENGTH,
    MobiHeader,
    PalmDocHeader,
)
from bookmeta.formats.mobi.records import PdbHeader, RecordOffsetTable

if TYPE_CHECKING:
    from bookmeta.formats.mobi.reader import MobiMetadataReader

logger = logging.getLogger(__name__)


class MobiContainer:
    """A fully decoded MOBI file held in memory.

    Construction either succeeds with the PDB, PalmDOC and MOBI headers all
    decoded, or raises. A broken EXTH block is not fatal: ``exth`` is then None
    and ``exth_error`` describes the problem.

    Raises:
        MalformedRecordTableError: The PDB header or record table is unusable.
        NotMobiFormatError: Record 0 carries no valid MOBI header.
    """

    def __init__(self, data: bytes) -> None:
        self._cursor = ByteCursor(data)
        self._exth_error: str | None = None

        self._pdb_header = PdbHeader.parse(self._cursor)
        self._records = RecordOffsetTable.parse(self._cursor)
        if len(self._records) == 0:
            raise MalformedRecordTableError("Container has no records")
        if self._pdb_header.ident != "BOOKMOBI":
            logger.debug("Unexpected PDB type/creator %r", self._pdb_header.ident)

        base, end = self._records.record_span(0)
        if base + PALMDOC_HEADER_LENGTH > end:
            raise NotMobiFormatError("Record 0 is too short for a PalmDOC header")
        self._palmdoc_header = PalmDocHeader.parse(self._cursor, base)

        self._mobi_header = MobiHeader.parse(self._cursor, base, end)

        self._exth: ExthHeader | None = None
        if self._mobi_header.has_exth:
            exth_offset = base + PALMDOC_HEADER_LENGTH + self._mobi_header.header_length
            try:
                self._exth = ExthHeader.parse(self._cursor, exth_offset, end)
            except MalformedExthRecordError as exc:
                logger.warning("Ignoring malformed EXTH block: %s", exc)
                self._exth_error = str(exc)

    @classmethod
    def from_bytes(cls, data: bytes) -> "MobiContainer":
        return cls(data)

    @classmethod
    def from_path(cls, path: Path) -> "MobiContainer":
        """Read the whole file into memory and decode it."""
        return cls(Path(path).read_bytes())

    @property
    def pdb_header(self) -> PdbHeader:
        return self._pdb_header

    @property
    def records(self) -> RecordOffsetTable:
        return self._records

    @property
    def palmdoc_header(self) -> PalmDocHeader:
        return self._palmdoc_header

    @property
    def mobi_header(self) -> MobiHeader:
        return self._mobi_header

    @property
    def exth(self) -> ExthHeader | None:
        """The EXTH block, or None if the file has none or it was malformed."""
        return self._exth

    @property
    def exth_error(self) -> str | None:
        """Why a malformed EXTH block was dropped, if it was."""
        return self._exth_error

    @property
    def data(self) -> bytes:
        return self._cursor.data

    @property
    def title(self) -> str:
        """The MOBI full name, falling back to the PDB database name."""
        return self.mobi_header.full_name or self.pdb_header.name

    def metadata(self) -> "MobiMetadataReader":
        """A fresh EXTH metadata view over this container."""
        from bookmeta.formats.mobi.reader import MobiMetadataReader

        return MobiMetadataReader(self)

    def record(self, index: int) -> bytes:
        """Raw bytes of record ``index``."""
        start, end = self.records.record_span(index)
        return self._cursor.slice(start, end - start)

    def text_records(self) -> list[bytes]:
        """The raw (possibly compressed) text records that follow record 0."""
        last = min(self.palmdoc_header.record_count, len(self.records) - 1)
        return [self.record(i) for i in range(1, last + 1)]

    def image_record(self, image_index: int) -> bytes | None:
        """Bytes of the ``image_index``-th resource record, or None if there is none."""
        first = self.mobi_header.first_image_index
        if first is None or first == NO_INDEX or image_index == NO_INDEX:
            return None
        index = first + image_index
        if index >= len(self.records):
            logger.warning(
                "Image record %d points past the last record (%d)", index, len(self.records) - 1
            )
            return None
        return self.record(index)

    def cover_image(self) -> bytes | None:
        offset = self.metadata().cover_offset()
        return None if offset is None else self.image_record(offset)

    def thumbnail_image(self) -> bytes | None:
        offset = self.metadata().thumb_offset()
        return None if offset is None else self.image_record(offset)
