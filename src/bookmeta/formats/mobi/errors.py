# ABOUTME: Exception hierarchy for the MOBI/PDB container parser.
# ABOUTME: Each stage of the parse raises its own subclass of MobiError.


class MobiError(Exception):
    """Base class for all MOBI parsing failures."""


class OutOfBoundsError(MobiError):
    """Raised when a read would run past the end of the buffer."""


class NotMobiFormatError(MobiError):
    """Raised when record 0 does not carry a MOBI header."""


class MalformedRecordTableError(MobiError):
    """Raised when the PDB record table is truncated or inconsistent."""


class MalformedExthRecordError(MobiError):
    """Raised when an EXTH record declares an impossible length."""
