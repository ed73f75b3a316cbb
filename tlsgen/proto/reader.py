"""Cursor over a byte buffer for decoding length-prefixed wire data."""

from .errors import MalformedInputError


class Reader:
    """Reads big-endian integers and length-prefixed values from a buffer.

    Every read either consumes exactly the bytes it needs from the front of
    the remaining input, or raises MalformedInputError and consumes nothing.

    Example:
        s = Reader(b"\\x00\\x02\\xab\\xcd")
        s.read_uint16_length_prefixed_bytes()  # b"\\xab\\xcd"
        s.empty()  # True
    """

    __slots__ = ("_data", "_offset")

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = memoryview(data).cast("B")
        self._offset = 0

    def __len__(self) -> int:
        return len(self._data) - self._offset

    def __repr__(self) -> str:
        return f"Reader({bytes(self._data[self._offset :])!r})"

    def empty(self) -> bool:
        """Check if all input has been consumed."""
        return len(self) == 0

    def _take(self, n: int) -> memoryview:
        if n < 0 or n > len(self):
            raise MalformedInputError(f"need {n} bytes, {len(self)} remaining")
        start = self._offset
        self._offset += n
        return self._data[start : self._offset]

    def skip(self, n: int) -> None:
        """Discard n bytes."""
        self._take(n)

    def read_bytes(self, n: int) -> bytes:
        """Read exactly n bytes."""
        return bytes(self._take(n))

    def read_uint(self, width: int) -> int:
        """Read a big-endian unsigned integer of the given bit width."""
        return int.from_bytes(self._take(width // 8), "big")

    def read_uint8(self) -> int:
        return self.read_uint(8)

    def read_uint16(self) -> int:
        return self.read_uint(16)

    def read_uint24(self) -> int:
        return self.read_uint(24)

    def read_uint32(self) -> int:
        return self.read_uint(32)

    def read_uint48(self) -> int:
        return self.read_uint(48)

    def read_uint64(self) -> int:
        return self.read_uint(64)

    def read_length_prefixed(self, prefix_width: int) -> "Reader":
        """Read a length prefix of the given bit width and return that many
        bytes as a new Reader."""
        start = self._offset
        length = self.read_uint(prefix_width)
        try:
            return Reader(self._take(length))
        except MalformedInputError:
            self._offset = start
            raise

    def read_uint8_length_prefixed(self) -> "Reader":
        return self.read_length_prefixed(8)

    def read_uint16_length_prefixed(self) -> "Reader":
        return self.read_length_prefixed(16)

    def read_uint24_length_prefixed(self) -> "Reader":
        return self.read_length_prefixed(24)

    def read_uint8_length_prefixed_bytes(self) -> bytes:
        return self.read_length_prefixed(8).read_rest()

    def read_uint16_length_prefixed_bytes(self) -> bytes:
        return self.read_length_prefixed(16).read_rest()

    def read_uint24_length_prefixed_bytes(self) -> bytes:
        return self.read_length_prefixed(24).read_rest()

    def read_rest(self) -> bytes:
        """Read all remaining bytes."""
        return self.read_bytes(len(self))
