"""
ELF Identification Block
=========================

Decodes ``e_ident``: the sixteen bytes at the very start of every ELF
file.  After the four magic bytes come the class, the data encoding, the
identification version, the OS/ABI and the ABI version; the remaining
seven bytes are padding.

Each byte is mapped onto its enumeration explicitly.  Class and data
encoding must be valid because every later multi-byte read depends on
them; version and OS/ABI fall back to a documented default.

References:
    - System V ABI, chapter 4, "ELF Identification".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union

from kestrel.core.errors import (
    InvalidClassError,
    InvalidEndianError,
    NotEnoughBytesError,
)

BufferLike = Union[bytes, bytearray, memoryview]

# e_ident layout, relative to the first byte after the magic
EI_CLASS: int = 0
EI_DATA: int = 1
EI_VERSION: int = 2
EI_OSABI: int = 3
EI_ABIVERSION: int = 4

# Size of e_ident including the 4 magic bytes
EI_NIDENT: int = 16
# Size of e_ident after the magic bytes
IDENT_SIZE: int = EI_NIDENT - 4


class ElfClass(IntEnum):
    """``EI_CLASS`` -- width of addresses and offsets."""
    INVALID = 0
    CLASS32 = 1
    CLASS64 = 2

    @property
    def address_size(self) -> int:
        """Bytes per address/offset field (0 for INVALID)."""
        return 4 * self.value

    @property
    def bits(self) -> int:
        return 8 * self.address_size


class ElfEndian(IntEnum):
    """``EI_DATA`` -- byte order of multi-byte fields."""
    INVALID = 0
    LITTLE = 1
    BIG = 2


class ElfVersion(IntEnum):
    """``EI_VERSION``.  Anything other than 1 maps to INVALID."""
    INVALID = 0
    CURRENT = 1

    @classmethod
    def _missing_(cls, value: Any) -> ElfVersion:
        return cls.INVALID


class ElfOsABI(IntEnum):
    """``EI_OSABI``.  Unlisted values map to UNSPECIFIED."""
    UNSPECIFIED = 0x00
    HP_UX = 0x01
    NETBSD = 0x02
    GNU = 0x03
    SOLARIS = 0x06
    AIX = 0x07
    IRIX = 0x08
    FREEBSD = 0x09
    TRU64 = 0x0A
    MODESTO = 0x0B
    OPENBSD = 0x0C
    OPENVMS = 0x0D
    NSK = 0x0E
    AROS = 0x0F
    FENIXOS = 0x10
    CLOUDABI = 0x11
    OPENVOS = 0x12

    @classmethod
    def _missing_(cls, value: Any) -> ElfOsABI:
        return cls.UNSPECIFIED


@dataclass(frozen=True, slots=True)
class ElfIdent:
    """Decoded identification block (without the magic bytes).

    Attributes:
        elf_class: 32- or 64-bit object.
        endian: Byte order of every multi-byte field.
        version: Identification version.
        abi: Target OS/ABI extensions.
        abi_version: Version of the ABI extensions.
    """
    elf_class: ElfClass
    endian: ElfEndian
    version: ElfVersion
    abi: ElfOsABI
    abi_version: int


def decode_ident(buffer: BufferLike, offset: int) -> ElfIdent:
    """Decode the identification block starting at *offset*.

    *offset* is the position of ``EI_CLASS``, i.e. the byte right after
    the magic signature.

    Raises:
        NotEnoughBytesError: If the block runs past the end of *buffer*.
        InvalidClassError: If the class byte is not 1 or 2.
        InvalidEndianError: If the data-encoding byte is not 1 or 2.
    """
    remaining = len(buffer) - offset
    if remaining < IDENT_SIZE:
        raise NotEnoughBytesError(max(remaining, 0), IDENT_SIZE)

    raw_class = buffer[offset + EI_CLASS]
    if raw_class not in (ElfClass.CLASS32, ElfClass.CLASS64):
        raise InvalidClassError(raw_class)

    raw_endian = buffer[offset + EI_DATA]
    if raw_endian not in (ElfEndian.LITTLE, ElfEndian.BIG):
        raise InvalidEndianError(raw_endian)

    return ElfIdent(
        elf_class=ElfClass(raw_class),
        endian=ElfEndian(raw_endian),
        version=ElfVersion(buffer[offset + EI_VERSION]),
        abi=ElfOsABI(buffer[offset + EI_OSABI]),
        abi_version=buffer[offset + EI_ABIVERSION],
    )
