# ABOUTME: PalmDOC and MOBI header decoding from record 0 of a PDB container.
# ABOUTME: Both headers keep every raw field so they can be re-encoded byte for byte.

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType

from bookmeta.formats.mobi.cursor import ByteCursor
from bookmeta.formats.mobi.errors import NotMobiFormatError, OutOfBoundsError

logger = logging.getLogger(__name__)

PALMDOC_HEADER_LENGTH = 16
MOBI_MAGIC = b"MOBI"
EXTH_FLAG = 0x40
NO_INDEX = 0xFFFFFFFF


class CompressionType(IntEnum):
    NONE = 1
    PALMDOC = 2
    HUFF_CDIC = 17480


class EncryptionType(IntEnum):
    NONE = 0
    OLD_MOBI = 1
    MOBI = 2


class TextEncoding(IntEnum):
    CP1252 = 1252
    UTF8 = 65001

    @property
    def codec(self) -> str:
        return "utf-8" if self is TextEncoding.UTF8 else "cp1252"


def _as_enum(enum_cls, value: int):
    """Return the enum member for ``value``, or the raw integer if unknown."""
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class PalmDocHeader:
    """The 16-byte PalmDOC header at the start of record 0."""

    compression_type: CompressionType | int
    unused: int
    text_length: int
    record_count: int
    record_size: int
    encryption_type: EncryptionType | int
    unknown: int

    @classmethod
    def parse(cls, cursor: ByteCursor, base: int = 0) -> "PalmDocHeader":
        compression = cursor.read_uint16(base)
        if compression not in CompressionType._value2member_map_:
            logger.debug("Unknown PalmDOC compression type %d", compression)
        return cls(
            compression_type=_as_enum(CompressionType, compression),
            unused=cursor.read_uint16(base + 2),
            text_length=cursor.read_uint32(base + 4),
            record_count=cursor.read_uint16(base + 8),
            record_size=cursor.read_uint16(base + 10),
            encryption_type=_as_enum(EncryptionType, cursor.read_uint16(base + 12)),
            unknown=cursor.read_uint16(base + 14),
        )

    def to_bytes(self) -> bytes:
        return b"".join(
            [
                int(self.compression_type).to_bytes(2, "big"),
                self.unused.to_bytes(2, "big"),
                self.text_length.to_bytes(4, "big"),
                self.record_count.to_bytes(2, "big"),
                self.record_size.to_bytes(2, "big"),
                int(self.encryption_type).to_bytes(2, "big"),
                self.unknown.to_bytes(2, "big"),
            ]
        )


# (name, offset from the MOBI magic, width in bytes). Contiguous from offset 4
# so that every byte up to the last fully-contained field is accounted for.
MOBI_HEADER_LAYOUT: tuple[tuple[str, int, int], ...] = (
    ("header_length", 4, 4),
    ("mobi_type", 8, 4),
    ("text_encoding", 12, 4),
    ("unique_id", 16, 4),
    ("file_version", 20, 4),
    ("orthographic_index", 24, 4),
    ("inflection_index", 28, 4),
    ("index_names", 32, 4),
    ("index_keys", 36, 4),
    ("extra_index_0", 40, 4),
    ("extra_index_1", 44, 4),
    ("extra_index_2", 48, 4),
    ("extra_index_3", 52, 4),
    ("extra_index_4", 56, 4),
    ("extra_index_5", 60, 4),
    ("first_non_book_index", 64, 4),
    ("full_name_offset", 68, 4),
    ("full_name_length", 72, 4),
    ("locale", 76, 4),
    ("input_language", 80, 4),
    ("output_language", 84, 4),
    ("min_version", 88, 4),
    ("first_image_index", 92, 4),
    ("huffman_record_offset", 96, 4),
    ("huffman_record_count", 100, 4),
    ("huffman_table_offset", 104, 4),
    ("huffman_table_length", 108, 4),
    ("exth_flags", 112, 4),
    ("unknown_116", 116, 4),
    ("unknown_120", 120, 4),
    ("unknown_124", 124, 4),
    ("unknown_128", 128, 4),
    ("unknown_132", 132, 4),
    ("unknown_136", 136, 4),
    ("unknown_140", 140, 4),
    ("unknown_144", 144, 4),
    ("unknown_148", 148, 4),
    ("drm_offset", 152, 4),
    ("drm_count", 156, 4),
    ("drm_size", 160, 4),
    ("drm_flags", 164, 4),
    ("unknown_168", 168, 4),
    ("unknown_172", 172, 4),
    ("first_content_record", 176, 2),
    ("last_content_record", 178, 2),
    ("unknown_180", 180, 4),
    ("fcis_record", 184, 4),
    ("fcis_count", 188, 4),
    ("flis_record", 192, 4),
    ("flis_count", 196, 4),
    ("unknown_200", 200, 4),
    ("unknown_204", 204, 4),
    ("srcs_record", 208, 4),
    ("srcs_count", 212, 4),
    ("unknown_216", 216, 4),
    ("unknown_220", 220, 4),
    ("unknown_224", 224, 2),
    ("extra_record_data_flags", 226, 2),
    ("ncx_index", 228, 4),
    ("fragment_index", 232, 4),
    ("skeleton_index", 236, 4),
    ("datp_record", 240, 4),
    ("guide_index", 244, 4),
    ("unknown_248", 248, 4),
    ("unknown_252", 252, 4),
    ("unknown_256", 256, 4),
    ("unknown_260", 260, 4),
)


def _field(name: str) -> property:
    def getter(self: "MobiHeader") -> int | None:
        return self.fields.get(name)

    return property(getter, doc=f"``{name}`` header field, or None if the header is too short.")


@dataclass(frozen=True)
class MobiHeader:
    """The MOBI header that follows the PalmDOC header in record 0.

    ``fields`` holds every layout field that fits inside ``header_length``;
    fields the header is too short to contain are simply missing. Bytes past
    the last whole field are kept in ``trailing``.
    """

    magic: bytes
    fields: Mapping[str, int]
    trailing: bytes
    full_name: str

    mobi_type = _field("mobi_type")
    unique_id = _field("unique_id")
    file_version = _field("file_version")
    first_non_book_index = _field("first_non_book_index")
    full_name_offset = _field("full_name_offset")
    full_name_length = _field("full_name_length")
    locale = _field("locale")
    min_version = _field("min_version")
    first_image_index = _field("first_image_index")
    exth_flags = _field("exth_flags")
    drm_offset = _field("drm_offset")
    first_content_record = _field("first_content_record")
    last_content_record = _field("last_content_record")
    extra_record_data_flags = _field("extra_record_data_flags")

    @property
    def header_length(self) -> int:
        return self.fields["header_length"]

    @property
    def text_encoding(self) -> TextEncoding | int | None:
        value = self.fields.get("text_encoding")
        return None if value is None else _as_enum(TextEncoding, value)

    @property
    def codec(self) -> str:
        """Python codec name for strings in this file (CP1252 unless UTF-8 is declared)."""
        encoding = self.text_encoding
        return encoding.codec if isinstance(encoding, TextEncoding) else "cp1252"

    @property
    def has_exth(self) -> bool:
        return bool((self.exth_flags or 0) & EXTH_FLAG)

    @classmethod
    def parse(
        cls,
        cursor: ByteCursor,
        base: int = 0,
        record_end: int | None = None,
    ) -> "MobiHeader":
        """Decode the MOBI header of the record 0 that starts at ``base``.

        Raises:
            NotMobiFormatError: If the magic is wrong or the header is truncated.
        """
        record_end = len(cursor) if record_end is None else record_end
        start = base + PALMDOC_HEADER_LENGTH

        try:
            magic = cursor.slice(start, 4)
        except OutOfBoundsError as exc:
            raise NotMobiFormatError("Record 0 is too short for a MOBI header") from exc
        if magic != MOBI_MAGIC:
            raise NotMobiFormatError(f"Expected MOBI magic, found {magic!r}")

        try:
            header_length = cursor.read_uint32(start + 4)
            if header_length < 8 or start + header_length > record_end:
                raise NotMobiFormatError(
                    f"MOBI header length {header_length} does not fit in record 0"
                )

            fields: dict[str, int] = {}
            consumed = 8
            for name, offset, width in MOBI_HEADER_LAYOUT:
                if offset + width > header_length:
                    break
                reader = cursor.read_uint16 if width == 2 else cursor.read_uint32
                fields[name] = reader(start + offset)
                consumed = offset + width
            trailing = cursor.slice(start + consumed, header_length - consumed)

            full_name = ""
            name_offset = fields.get("full_name_offset")
            name_length = fields.get("full_name_length")
            if name_offset is not None and name_length:
                if base + name_offset + name_length > record_end:
                    raise NotMobiFormatError(
                        f"Full name at {name_offset}+{name_length} lies outside record 0"
                    )
                encoding = _as_enum(TextEncoding, fields.get("text_encoding", 1252))
                codec = encoding.codec if isinstance(encoding, TextEncoding) else "cp1252"
                full_name = cursor.read_fixed_string(base + name_offset, name_length, codec)
        except OutOfBoundsError as exc:
            raise NotMobiFormatError(f"Truncated MOBI header: {exc}") from exc

        logger.debug(
            "MOBI header: length=%d type=%s encoding=%s",
            header_length,
            fields.get("mobi_type"),
            fields.get("text_encoding"),
        )
        return cls(
            magic=magic,
            fields=MappingProxyType(fields),
            trailing=trailing,
            full_name=full_name,
        )

    def to_bytes(self) -> bytes:
        """Re-encode the header exactly as it appeared in record 0."""
        parts = [self.magic]
        for name, _offset, width in MOBI_HEADER_LAYOUT:
            if name not in self.fields:
                break
            parts.append(self.fields[name].to_bytes(width, "big"))
        parts.append(self.trailing)
        return b"".join(parts)
