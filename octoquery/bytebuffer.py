"""An append-only byte buffer."""

from __future__ import annotations


class Buffer:
    """Collects bytes written to it; writes never fail."""

    __slots__ = ("_data",)

    def __init__(self, initial: bytes | bytearray | None = None) -> None:
        self._data = bytearray(initial or b"")

    def write(self, data: bytes | bytearray) -> int:
        """Append raw bytes and return how many were written."""
        self._data += data
        return len(data)

    def write_string(self, text: str) -> int:
        """Append the UTF-8 encoding of ``text`` and return its byte length."""
        encoded = text.encode("utf-8")
        self._data += encoded
        return len(encoded)

    def write_byte(self, value: int) -> None:
        """Append a single byte."""
        self._data.append(value)

    def getvalue(self) -> bytes:
        """Return everything written so far."""
        return bytes(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __str__(self) -> str:
        return self._data.decode("utf-8", errors="surrogateescape")