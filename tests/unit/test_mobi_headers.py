# ABOUTME: Unit tests for PalmDOC and MOBI header decoding from record 0.
# ABOUTME: Covers field decoding, the MOBI magic gate, short headers and byte-exact re-encoding.

import struct

import pytest

from bookmeta.formats.mobi.cursor import ByteCursor
from bookmeta.formats.mobi.errors import NotMobiFormatError
from bookmeta.formats.mobi.headers import (
    CompressionType,
    EncryptionType,
    MobiHeader,
    PalmDocHeader,
    TextEncoding,
)
from tests.fixtures.mobi_builder import NO_INDEX, build_exth, build_record0, exth_record


class TestPalmDocHeader:
    """The 16-byte PalmDOC header."""

    def test_decodes_fields(self) -> None:
        record0 = build_record0(
            compression=2, text_length=230241, text_record_count=57, record_size=4096
        )
        header = PalmDocHeader.parse(ByteCursor(record0))
        assert header.compression_type is CompressionType.PALMDOC
        assert header.text_length == 230241
        assert header.record_count == 57
        assert header.record_size == 4096
        assert header.encryption_type is EncryptionType.NONE

    def test_huff_compression(self) -> None:
        header = PalmDocHeader.parse(ByteCursor(build_record0(compression=17480)))
        assert header.compression_type is CompressionType.HUFF_CDIC

    def test_unknown_compression_kept_as_integer(self) -> None:
        header = PalmDocHeader.parse(ByteCursor(build_record0(compression=99)))
        assert header.compression_type == 99
        assert not isinstance(header.compression_type, CompressionType)

    def test_parses_at_base_offset(self) -> None:
        record0 = build_record0(text_length=1234)
        header = PalmDocHeader.parse(ByteCursor(b"\xaa" * 7 + record0), base=7)
        assert header.text_length == 1234

    def test_round_trip(self) -> None:
        record0 = build_record0(compression=2, encryption=2)
        header = PalmDocHeader.parse(ByteCursor(record0))
        assert header.to_bytes() == record0[:16]


class TestMobiHeader:
    """The MOBI header following the PalmDOC header."""

    def test_decodes_identity_fields(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0()))
        assert header.magic == b"MOBI"
        assert header.header_length == 232
        assert header.mobi_type == 2
        assert header.text_encoding is TextEncoding.UTF8
        assert header.unique_id == 1542928680
        assert header.file_version == 6
        assert header.locale == 9

    def test_full_name_resolved_from_record0(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0(title="Dune")))
        assert header.full_name == "Dune"

    def test_full_name_relative_to_record_start(self) -> None:
        record0 = build_record0(title="Dune")
        data = b"\x00" * 50 + record0
        header = MobiHeader.parse(ByteCursor(data), base=50, record_end=len(data))
        assert header.full_name == "Dune"

    def test_cp1252_full_name(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0(title="Café", encoding=1252)))
        assert header.text_encoding is TextEncoding.CP1252
        assert header.codec == "cp1252"
        assert header.full_name == "Café"

    def test_unknown_encoding_falls_back_to_cp1252(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0(encoding=1200)))
        assert header.text_encoding == 1200
        assert header.codec == "cp1252"

    def test_content_record_indices(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0(text_record_count=12)))
        assert header.first_content_record == 1
        assert header.last_content_record == 12
        assert header.first_non_book_index == 13

    def test_bad_magic_raises(self) -> None:
        with pytest.raises(NotMobiFormatError):
            MobiHeader.parse(ByteCursor(build_record0(magic=b"XXXX")))

    def test_record_too_short_for_magic_raises(self) -> None:
        with pytest.raises(NotMobiFormatError):
            MobiHeader.parse(ByteCursor(build_record0()[:18]))

    def test_header_longer_than_record_raises(self) -> None:
        record0 = build_record0()
        with pytest.raises(NotMobiFormatError):
            MobiHeader.parse(ByteCursor(record0), record_end=100)

    def test_title_outside_record_raises(self) -> None:
        record0 = bytearray(build_record0())
        struct.pack_into(">I", record0, 16 + 68, len(record0) + 10)
        with pytest.raises(NotMobiFormatError):
            MobiHeader.parse(ByteCursor(bytes(record0)))

    def test_fields_beyond_short_header_are_absent(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0(header_length=88)))
        assert header.locale == 9
        assert header.first_image_index is None
        assert header.exth_flags is None
        assert header.first_content_record is None
        assert "min_version" not in header.fields

    def test_short_header_never_has_exth(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0(header_length=88)))
        assert header.has_exth is False

    def test_exth_flag_is_bit_6(self) -> None:
        with_flag = MobiHeader.parse(ByteCursor(build_record0(exth_flags=0x50)))
        bit_zero_only = MobiHeader.parse(ByteCursor(build_record0(exth_flags=0x01)))
        assert with_flag.has_exth is True
        assert bit_zero_only.has_exth is False

    def test_first_image_index(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0(first_image_index=5)))
        assert header.first_image_index == 5
        no_images = MobiHeader.parse(ByteCursor(build_record0()))
        assert no_images.first_image_index == NO_INDEX

    def test_fields_are_read_only(self) -> None:
        header = MobiHeader.parse(ByteCursor(build_record0()))
        with pytest.raises(TypeError):
            header.fields["locale"] = 12  # type: ignore[index]


class TestMobiHeaderRoundTrip:
    """Re-encoding reproduces the original header bytes."""

    @pytest.mark.parametrize("header_length", [232, 264, 24, 90, 300])
    def test_round_trip(self, header_length: int) -> None:
        record0 = build_record0(header_length=header_length)
        header = MobiHeader.parse(ByteCursor(record0))
        assert header.to_bytes() == record0[16 : 16 + header_length]

    def test_round_trip_with_exth(self) -> None:
        exth = build_exth([exth_record(100, "Jane Doe")])
        record0 = build_record0(exth=exth)
        header = MobiHeader.parse(ByteCursor(record0))
        assert header.to_bytes() == record0[16:248]
