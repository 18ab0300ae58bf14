"""
Endian-Aware Byte Cursor
=========================

:class:`ByteCursor` owns a position into an immutable buffer and exposes
advancing reads of fixed-width unsigned integers.  Every multi-byte read
takes the byte order explicitly; there is no default, and the ``INVALID``
tag is rejected at each read site.

:func:`read_address_or_offset` layers the ELF class on top: it is the one
place that decides whether an address, offset or size field is four or
eight bytes wide.
"""

from __future__ import annotations

import struct
from typing import Union

from kestrel.core.errors import (
    InvalidClassError,
    InvalidEndianError,
    NotEnoughBytesError,
)
from kestrel.parsers.ident import ElfClass, ElfEndian, ElfIdent

BufferLike = Union[bytes, bytearray, memoryview]

_WIDTH_CODES: dict[int, str] = {1: "B", 2: "H", 4: "I", 8: "Q"}

_ORDER_PREFIXES: dict[ElfEndian, str] = {
    ElfEndian.LITTLE: "<",
    ElfEndian.BIG: ">",
}


class ByteCursor:
    """Read cursor over a byte buffer.

    The cursor never copies the buffer; it keeps a :class:`memoryview`
    and an integer position.

    Usage::

        cur = ByteCursor(data, 16)
        e_type = cur.read_u16(ElfEndian.LITTLE)
        e_version = cur.read_u32(ElfEndian.LITTLE)
    """

    __slots__ = ("_data", "_position")

    def __init__(self, buffer: BufferLike, position: int = 0) -> None:
        self._data = memoryview(buffer)
        self._position = 0
        self.seek(position)

    # ------------------------------------------------------------------ #
    #  Position
    # ------------------------------------------------------------------ #

    @property
    def position(self) -> int:
        """Current absolute offset into the buffer."""
        return self._position

    @property
    def remaining(self) -> int:
        """Bytes left between the position and the end of the buffer."""
        return max(len(self._data) - self._position, 0)

    def seek(self, position: int) -> None:
        """Move to an absolute *position*."""
        if position < 0:
            raise ValueError(f"Negative cursor position: {position}")
        self._position = position

    def skip(self, count: int) -> None:
        """Advance by *count* bytes without reading them."""
        self._require(count)
        self._position += count

    # ------------------------------------------------------------------ #
    #  Reads
    # ------------------------------------------------------------------ #

    def read_u8(self) -> int:
        """Read one unsigned byte."""
        self._require(1)
        value = self._data[self._position]
        self._position += 1
        return value

    def read(self, width: int, order: ElfEndian) -> int:
        """Read an unsigned *width*-byte integer in byte order *order*.

        Args:
            width: 2, 4 or 8.
            order: :attr:`ElfEndian.LITTLE` or :attr:`ElfEndian.BIG`.

        Raises:
            InvalidEndianError: If *order* is not a valid byte order.
            NotEnoughBytesError: If fewer than *width* bytes remain.
        """
        if width not in (2, 4, 8):
            raise ValueError(f"Unsupported integer width: {width}")
        prefix = _ORDER_PREFIXES.get(order)
        if prefix is None:
            raise InvalidEndianError(order)
        self._require(width)
        (value,) = struct.unpack_from(
            prefix + _WIDTH_CODES[width], self._data, self._position
        )
        self._position += width
        return value

    def read_u16(self, order: ElfEndian) -> int:
        return self.read(2, order)

    def read_u32(self, order: ElfEndian) -> int:
        return self.read(4, order)

    def read_u64(self, order: ElfEndian) -> int:
        return self.read(8, order)

    def _require(self, count: int) -> None:
        if self.remaining < count:
            raise NotEnoughBytesError(self.remaining, count)


def read_address_or_offset(ident: ElfIdent, cursor: ByteCursor) -> int:
    """Read an address, offset or size field sized by the ELF class.

    ELFCLASS32 fields are four bytes and are zero-extended; ELFCLASS64
    fields are eight bytes and used as-is.  An invalid class consumes
    nothing.

    Raises:
        InvalidClassError: If ``ident.elf_class`` is not a valid class.
    """
    if ident.elf_class == ElfClass.CLASS32:
        return cursor.read(4, ident.endian)
    if ident.elf_class == ElfClass.CLASS64:
        return cursor.read(8, ident.endian)
    raise InvalidClassError(ident.elf_class)
