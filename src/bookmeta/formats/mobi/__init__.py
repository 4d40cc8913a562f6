# ABOUTME: MOBI/PDB container parser: headers, EXTH metadata and record access.
# ABOUTME: Re-exports the public parser types and the BookMetadata adapter.

from bookmeta.formats.mobi.book import MobiReadError, container_to_metadata, read_mobi_metadata
from bookmeta.formats.mobi.container import MobiContainer
from bookmeta.formats.mobi.cursor import ByteCursor
from bookmeta.formats.mobi.errors import (
    MalformedExthRecordError,
    MalformedRecordTableError,
    MobiError,
    NotMobiFormatError,
    OutOfBoundsError,
)
from bookmeta.formats.mobi.exth import ExthHeader, ExthRecord
from bookmeta.formats.mobi.headers import (
    CompressionType,
    EncryptionType,
    MobiHeader,
    PalmDocHeader,
    TextEncoding,
)
from bookmeta.formats.mobi.reader import EXTH_FIELDS, ExthField, ExthKind, MobiMetadataReader
from bookmeta.formats.mobi.records import PdbHeader, RawRecord, RecordOffsetTable

__all__ = [
    "EXTH_FIELDS",
    "ByteCursor",
    "CompressionType",
    "EncryptionType",
    "ExthField",
    "ExthHeader",
    "ExthKind",
    "ExthRecord",
    "MalformedExthRecordError",
    "MalformedRecordTableError",
    "MobiContainer",
    "MobiError",
    "MobiHeader",
    "MobiMetadataReader",
    "MobiReadError",
    "NotMobiFormatError",
    "OutOfBoundsError",
    "PalmDocHeader",
    "PdbHeader",
    "RawRecord",
    "RecordOffsetTable",
    "TextEncoding",
    "container_to_metadata",
    "read_mobi_metadata",
]
