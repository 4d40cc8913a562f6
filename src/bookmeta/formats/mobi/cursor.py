# ABOUTME: Big-endian reader over an immutable in-memory byte buffer.
# ABOUTME: Every read is bounds-checked and raises OutOfBoundsError on overrun.

from bookmeta.formats.mobi.errors import OutOfBoundsError


class ByteCursor:
    """Sequential and random-access reader over a byte buffer.

    Integer reads take an optional absolute ``offset``. Without one they read
    at the current position and advance it, unless ``advance`` is False. Reads
    with an explicit offset never move the cursor.
    """

    def __init__(self, data: bytes, position: int = 0) -> None:
        self._data = bytes(data)
        self._position = position

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def position(self) -> int:
        return self._position

    def seek(self, position: int) -> None:
        if position < 0 or position > len(self._data):
            raise OutOfBoundsError(
                f"Cannot seek to {position}: buffer is {len(self._data)} bytes"
            )
        self._position = position

    def _check(self, offset: int, length: int) -> None:
        if offset < 0 or length < 0 or offset + length > len(self._data):
            raise OutOfBoundsError(
                f"Read of {length} bytes at offset {offset} exceeds "
                f"buffer length {len(self._data)}"
            )

    def _read_uint(self, width: int, offset: int | None, advance: bool) -> int:
        start = self._position if offset is None else offset
        self._check(start, width)
        value = int.from_bytes(self._data[start : start + width], "big")
        if offset is None and advance:
            self._position = start + width
        return value

    def read_uint8(self, offset: int | None = None, *, advance: bool = True) -> int:
        return self._read_uint(1, offset, advance)

    def read_uint16(self, offset: int | None = None, *, advance: bool = True) -> int:
        return self._read_uint(2, offset, advance)

    def read_uint24(self, offset: int | None = None, *, advance: bool = True) -> int:
        return self._read_uint(3, offset, advance)

    def read_uint32(self, offset: int | None = None, *, advance: bool = True) -> int:
        return self._read_uint(4, offset, advance)

    def slice(self, offset: int, length: int) -> bytes:
        """Return ``length`` raw bytes starting at ``offset``."""
        self._check(offset, length)
        return self._data[offset : offset + length]

    def read_bytes(self, length: int) -> bytes:
        """Return ``length`` bytes at the current position and advance past them."""
        chunk = self.slice(self._position, length)
        self._position += length
        return chunk

    def read_fixed_string(
        self, offset: int, length: int, encoding: str = "utf-8"
    ) -> str:
        """Decode a fixed-width string field, stopping at the first NUL.

        Undecodable bytes never raise; they are replaced so callers always get
        best-effort text back.
        """
        raw = self.slice(offset, length)
        nul = raw.find(b"\x00")
        if nul != -1:
            raw = raw[:nul]
        return raw.decode(encoding, errors="replace")
