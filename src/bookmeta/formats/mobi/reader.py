# ABOUTME: Named, typed accessors over the EXTH records of a MobiContainer.
# ABOUTME: A static tag table decides each field's name, value kind and repeatability.

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from bookmeta.formats.mobi.headers import NO_INDEX
from bookmeta.metadata.dates import parse_date

if TYPE_CHECKING:
    from bookmeta.formats.mobi.container import MobiContainer


class ExthKind(Enum):
    STRING = "string"
    NUMBER = "number"
    BINARY = "binary"


@dataclass(frozen=True)
class ExthField:
    tag_id: int
    name: str
    kind: ExthKind
    repeatable: bool = False


_S, _N, _B = ExthKind.STRING, ExthKind.NUMBER, ExthKind.BINARY

EXTH_FIELDS: dict[int, ExthField] = {
    f.tag_id: f
    for f in (
        ExthField(1, "drm_server_id", _S),
        ExthField(2, "drm_commerce_id", _S),
        ExthField(3, "drm_ebookbase_book_id", _S),
        ExthField(100, "authors", _S, repeatable=True),
        ExthField(101, "publisher", _S),
        ExthField(102, "imprint", _S),
        ExthField(103, "description", _S),
        ExthField(104, "isbns", _S, repeatable=True),
        ExthField(105, "subjects", _S, repeatable=True),
        ExthField(106, "publishing_date", _S),
        ExthField(107, "review", _S),
        ExthField(108, "contributors", _S, repeatable=True),
        ExthField(109, "rights", _S),
        ExthField(110, "subject_code", _S),
        ExthField(111, "type", _S),
        ExthField(112, "source", _S),
        ExthField(113, "asin", _S),
        ExthField(114, "version", _S),
        ExthField(115, "sample", _N),
        ExthField(116, "start_reading", _N),
        ExthField(117, "adult", _S),
        ExthField(118, "retail_price", _S),
        ExthField(119, "retail_currency", _S),
        ExthField(121, "kf8_boundary", _N),
        ExthField(122, "fixed_layout", _S),
        ExthField(123, "book_type", _S),
        ExthField(124, "orientation_lock", _S),
        ExthField(125, "resource_count", _N),
        ExthField(126, "original_resolution", _S),
        ExthField(127, "zero_gutter", _S),
        ExthField(128, "zero_margin", _S),
        ExthField(129, "kf8_cover_uri", _S),
        ExthField(131, "unknown_131", _N),
        ExthField(132, "region_magnification", _S),
        ExthField(200, "dictionary_short_name", _S),
        ExthField(201, "cover_offset", _N),
        ExthField(202, "thumb_offset", _N),
        ExthField(203, "has_fake_cover", _N),
        ExthField(204, "creator_software", _N),
        ExthField(205, "creator_major_version", _N),
        ExthField(206, "creator_minor_version", _N),
        ExthField(207, "creator_build_number", _N),
        ExthField(208, "watermark", _S),
        ExthField(209, "tamper_proof_keys", _B),
        ExthField(300, "font_signature", _B),
        ExthField(401, "clipping_limit", _N),
        ExthField(402, "publisher_limit", _N),
        ExthField(404, "tts_disabled", _N),
        ExthField(406, "rent_expiration_date", _N),
        ExthField(501, "cde_content_type", _S),
        ExthField(502, "last_update_time", _S),
        ExthField(503, "updated_title", _S),
        ExthField(504, "asin_504", _S),
        ExthField(524, "language", _S),
        ExthField(525, "writing_mode", _S),
        ExthField(527, "page_progression_direction", _S),
        ExthField(528, "override_kindle_fonts", _S),
        ExthField(535, "kindlegen_build_rev", _S),
        ExthField(536, "unknown_536", _S),
        ExthField(538, "image_size", _S),
        ExthField(539, "mime_type", _S),
        ExthField(542, "unknown_542", _B),
        ExthField(543, "unknown_543", _B),
    )
}

_FIELDS_BY_NAME: dict[str, ExthField] = {f.name: f for f in EXTH_FIELDS.values()}

# Primary language ids of the Windows LCID stored in the MOBI header locale.
_LOCALE_LANGUAGES: dict[int, str] = {
    1: "ar", 2: "bg", 3: "ca", 4: "zh", 5: "cs", 6: "da", 7: "de", 8: "el",
    9: "en", 10: "es", 11: "fi", 12: "fr", 13: "he", 14: "hu", 15: "is",
    16: "it", 17: "ja", 18: "ko", 19: "nl", 20: "no", 21: "pl", 22: "pt",
    23: "rm", 24: "ro", 25: "ru", 26: "hr", 27: "sk", 28: "sq", 29: "sv",
    30: "th", 31: "tr", 32: "ur", 33: "id", 34: "uk", 35: "be", 36: "sl",
    37: "et", 38: "lv", 39: "lt", 41: "fa", 42: "vi", 43: "hy", 44: "az",
    45: "eu", 47: "mk", 54: "af", 55: "ka", 56: "fo", 57: "hi", 58: "mt",
    62: "ms", 63: "kk", 65: "sw", 69: "bn", 70: "pa", 71: "gu", 73: "ta",
    74: "te", 75: "kn", 76: "ml", 78: "mr", 79: "sa", 97: "ne",
}

ExthValue = str | int | bytes


class MobiMetadataReader:
    """Read-only view mapping EXTH tag ids onto named metadata fields.

    Nothing is cached: every accessor scans the container's EXTH records again.
    Absent fields are None for both singular and repeatable fields, so a
    missing field is never confused with an empty string or zero. When the
    container has no EXTH block every accessor returns None.
    """

    def __init__(self, container: "MobiContainer") -> None:
        self._container = container

    def _decode(self, kind: ExthKind, value: bytes) -> ExthValue:
        if kind is ExthKind.NUMBER:
            return int.from_bytes(value, "big")
        if kind is ExthKind.BINARY:
            return value
        codec = self._container.mobi_header.codec
        return value.decode(codec, errors="replace").rstrip("\x00")

    def values(self, tag_id: int) -> list[ExthValue] | None:
        """Decoded values of every record with ``tag_id``, or None if there are none."""
        exth = self._container.exth
        if exth is None:
            return None
        matches = exth.find(tag_id)
        if not matches:
            return None
        field = EXTH_FIELDS.get(tag_id)
        kind = field.kind if field else ExthKind.BINARY
        return [self._decode(kind, record.value) for record in matches]

    def get(self, name: str):
        """Look a field up by its table name.

        Repeatable fields come back as a list, singular fields as their first
        value.

        Raises:
            KeyError: If ``name`` is not a known EXTH field.
        """
        field = _FIELDS_BY_NAME[name]
        found = self.values(field.tag_id)
        if found is None:
            return None
        return found if field.repeatable else found[0]

    def authors(self) -> list[str] | None:
        return self.get("authors")

    def publisher(self) -> str | None:
        return self.get("publisher")

    def imprint(self) -> str | None:
        return self.get("imprint")

    def description(self) -> str | None:
        return self.get("description")

    def isbns(self) -> list[str] | None:
        return self.get("isbns")

    def subjects(self) -> list[str] | None:
        return self.get("subjects")

    def contributors(self) -> list[str] | None:
        return self.get("contributors")

    def rights(self) -> str | None:
        return self.get("rights")

    def source(self) -> str | None:
        return self.get("source")

    def asin(self) -> str | None:
        asin = self.get("asin")
        return asin if asin is not None else self.get("asin_504")

    def publishing_date(self) -> str | None:
        """The raw publishing date string (EXTH 106)."""
        return self.get("publishing_date")

    def published(self) -> datetime | None:
        """The publishing date parsed into a datetime, when it can be parsed."""
        return parse_date(self.publishing_date())

    def updated_title(self) -> str | None:
        return self.get("updated_title")

    def cde_content_type(self) -> str | None:
        return self.get("cde_content_type")

    def cover_offset(self) -> int | None:
        """Cover image index relative to the first image record."""
        offset = self.get("cover_offset")
        return None if offset == NO_INDEX else offset

    def thumb_offset(self) -> int | None:
        offset = self.get("thumb_offset")
        return None if offset == NO_INDEX else offset

    def kf8_boundary(self) -> int | None:
        return self.get("kf8_boundary")

    def language(self) -> str | None:
        """EXTH language, else the language of the MOBI header locale."""
        language = self.get("language")
        if language is not None:
            return language
        locale = self._container.mobi_header.locale
        if not locale:
            return None
        return _LOCALE_LANGUAGES.get(locale & 0xFF)

    def extra(self) -> dict[int, list[int | bytes]] | None:
        """Records whose tag id is not in the table, keyed by tag id.

        Payloads of 1, 2 or 4 bytes are read as unsigned integers; anything
        else is returned as raw bytes.
        """
        exth = self._container.exth
        if exth is None:
            return None
        unknown: dict[int, list[int | bytes]] = {}
        for record in exth.records:
            if record.tag_id in EXTH_FIELDS:
                continue
            value: int | bytes = record.value
            if len(record.value) in (1, 2, 4):
                value = int.from_bytes(record.value, "big")
            unknown.setdefault(record.tag_id, []).append(value)
        return unknown

    def as_dict(self) -> dict[str, object]:
        """Every known field that is present, keyed by field name."""
        present = {}
        for field in EXTH_FIELDS.values():
            value = self.get(field.name)
            if value is not None:
                present[field.name] = value
        return present
