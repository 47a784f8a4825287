"""A fixed-capacity arena that turns byte strings into text."""

from __future__ import annotations


def bytes_to_str(data: bytes | bytearray | None) -> str:
    """Decode bytes to text; empty or missing input gives an empty string."""
    if not data:
        return ""
    return bytes(data).decode("utf-8", errors="surrogateescape")


class StringArena:
    """Groups the storage of strings with a similar lifetime.

    Strings that fit are copied into the arena; once it is full, new
    strings are created on their own without consuming arena space.
    """

    __slots__ = ("_buf", "_capacity")

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError("arena size must not be negative")
        self._buf = bytearray()
        self._capacity = size

    def new_string(self, data: bytes | bytearray | None) -> str:
        """Copy ``data`` into the arena if it fits and return it as text."""
        if not data:
            return ""
        if len(self._buf) + len(data) <= self._capacity:
            self._buf += data
        return bytes_to_str(data)

    def space_left(self) -> int:
        """Return the number of bytes still free in the arena."""
        return self._capacity - len(self._buf)

    def used(self) -> int:
        """Return the number of bytes stored in the arena."""
        return len(self._buf)