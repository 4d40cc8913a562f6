# ABOUTME: EXTH extended-header parsing, a counted list of tagged metadata records.
# ABOUTME: Records keep their original order and duplicates (several authors, subjects).

import logging
from dataclasses import dataclass

from bookmeta.formats.mobi.cursor import ByteCursor
from bookmeta.formats.mobi.errors import MalformedExthRecordError, OutOfBoundsError

logger = logging.getLogger(__name__)

EXTH_MAGIC = b"EXTH"
EXTH_HEADER_LENGTH = 12
EXTH_RECORD_HEADER_LENGTH = 8


@dataclass(frozen=True)
class ExthRecord:
    """A single EXTH record. ``length`` includes the 8-byte record header."""

    tag_id: int
    length: int
    value: bytes

    def to_bytes(self) -> bytes:
        return self.tag_id.to_bytes(4, "big") + self.length.to_bytes(4, "big") + self.value


@dataclass(frozen=True)
class ExthHeader:
    magic: bytes
    header_length: int
    record_count: int
    records: tuple[ExthRecord, ...]

    def find(self, tag_id: int) -> list[ExthRecord]:
        """All records carrying ``tag_id``, in file order."""
        return [record for record in self.records if record.tag_id == tag_id]

    @classmethod
    def parse(
        cls, cursor: ByteCursor, offset: int, limit: int | None = None
    ) -> "ExthHeader | None":
        """Decode the EXTH block at ``offset``.

        Returns None when the block does not start with the EXTH magic.

        Raises:
            MalformedExthRecordError: If the block or one of its records is
                truncated, or a record declares a length shorter than its header.
        """
        limit = len(cursor) if limit is None else limit
        try:
            magic = cursor.slice(offset, 4)
        except OutOfBoundsError:
            logger.debug("No room for an EXTH header at offset %d", offset)
            return None
        if magic != EXTH_MAGIC:
            logger.debug("Expected EXTH magic at offset %d, found %r", offset, magic)
            return None

        try:
            header_length = cursor.read_uint32(offset + 4)
            record_count = cursor.read_uint32(offset + 8)
        except OutOfBoundsError as exc:
            raise MalformedExthRecordError("Truncated EXTH header") from exc

        end = offset + header_length
        if header_length < EXTH_HEADER_LENGTH or end > limit:
            raise MalformedExthRecordError(
                f"EXTH length {header_length} does not fit in record 0"
            )

        records: list[ExthRecord] = []
        position = offset + EXTH_HEADER_LENGTH
        for index in range(record_count):
            if position + EXTH_RECORD_HEADER_LENGTH > end:
                raise MalformedExthRecordError(
                    f"EXTH record {index} header runs past the EXTH section"
                )
            tag_id = cursor.read_uint32(position)
            length = cursor.read_uint32(position + 4)
            if length < EXTH_RECORD_HEADER_LENGTH:
                raise MalformedExthRecordError(
                    f"EXTH record {index} (tag {tag_id}) declares length {length} < 8"
                )
            if position + length > end:
                raise MalformedExthRecordError(
                    f"EXTH record {index} (tag {tag_id}) runs past the EXTH section"
                )
            value = cursor.slice(
                position + EXTH_RECORD_HEADER_LENGTH, length - EXTH_RECORD_HEADER_LENGTH
            )
            records.append(ExthRecord(tag_id=tag_id, length=length, value=value))
            position += length

        logger.debug("Decoded %d EXTH records", len(records))
        return cls(
            magic=magic,
            header_length=header_length,
            record_count=record_count,
            records=tuple(records),
        )

    def to_bytes(self) -> bytes:
        """Re-encode the block, zero-padding up to the declared length."""
        body = b"".join(record.to_bytes() for record in self.records)
        encoded = (
            self.magic
            + self.header_length.to_bytes(4, "big")
            + self.record_count.to_bytes(4, "big")
            + body
        )
        return encoded.ljust(self.header_length, b"\x00")
