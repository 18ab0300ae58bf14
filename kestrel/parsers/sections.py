"""
ELF Section Headers
====================

Decodes one entry of the section header table (``Elf32_Shdr`` /
``Elf64_Shdr``).  Unlike program headers, both classes share the same
field order; only ``sh_flags``, ``sh_addr``, ``sh_offset``, ``sh_size``,
``sh_addralign`` and ``sh_entsize`` change width.

References:
    - System V ABI, chapter 4, "Sections".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from kestrel.parsers.cursor import ByteCursor, read_address_or_offset
from kestrel.parsers.enums import ElfFlags, OpenIntEnum
from kestrel.parsers.ident import ElfIdent

BufferLike = Union[bytes, bytearray, memoryview]


class SectionType(OpenIntEnum):
    """``sh_type``.  Unrecognised codes keep their raw value."""
    NULL = 0
    PROGBITS = 1
    SYMTAB = 2
    STRTAB = 3
    RELA = 4
    HASH = 5
    DYNAMIC = 6
    NOTE = 7
    NOBITS = 8
    REL = 9
    SHLIB = 10
    DYNSYM = 11
    INIT_ARRAY = 14
    FINI_ARRAY = 15
    PREINIT_ARRAY = 16
    GROUP = 17
    SYMTAB_SHNDX = 18


class SectionFlags(ElfFlags):
    """``sh_flags``.  Stored as 64 bits regardless of class."""
    WRITE = 0x1
    ALLOC = 0x2
    EXECINSTR = 0x4
    MERGE = 0x10
    STRINGS = 0x20
    INFO_LINK = 0x40
    LINK_ORDER = 0x80
    OS_NONCONFORMING = 0x100
    GROUP = 0x200
    TLS = 0x400
    COMPRESSED = 0x800

    def letters(self) -> str:
        """readelf-style key letters (``WAX`` ...); ``x`` marks unknown bits."""
        key = "".join(
            char
            for char, flag in _SECTION_FLAG_LETTERS
            if self.has(flag)
        )
        if self.unknown_bits:
            key += "x"
        return key


_SECTION_FLAG_LETTERS: tuple[tuple[str, SectionFlags], ...] = (
    ("W", SectionFlags.WRITE),
    ("A", SectionFlags.ALLOC),
    ("X", SectionFlags.EXECINSTR),
    ("M", SectionFlags.MERGE),
    ("S", SectionFlags.STRINGS),
    ("I", SectionFlags.INFO_LINK),
    ("L", SectionFlags.LINK_ORDER),
    ("O", SectionFlags.OS_NONCONFORMING),
    ("G", SectionFlags.GROUP),
    ("T", SectionFlags.TLS),
    ("C", SectionFlags.COMPRESSED),
)


@dataclass(frozen=True, slots=True)
class SectionHeader:
    """Decoded section header entry."""
    name: int
    section_type: SectionType
    flags: SectionFlags
    address: int
    offset: int
    size: int
    link: int
    info: int
    address_alignment: int
    entry_size: int


def decode_section_header(
    ident: ElfIdent,
    buffer: BufferLike,
    offset: int,
) -> SectionHeader:
    """Decode the section header entry that starts at *offset*.

    Raises:
        InvalidClassError: ``ident`` carries an invalid class.
        InvalidEndianError: ``ident`` carries an invalid byte order.
        NotEnoughBytesError: The entry runs past the end of *buffer*.
    """
    order = ident.endian
    cur = ByteCursor(buffer, offset)

    name = cur.read_u32(order)
    section_type = SectionType(cur.read_u32(order))
    flags = SectionFlags(read_address_or_offset(ident, cur))
    address = read_address_or_offset(ident, cur)
    sec_offset = read_address_or_offset(ident, cur)
    size = read_address_or_offset(ident, cur)
    link = cur.read_u32(order)
    info = cur.read_u32(order)
    address_alignment = read_address_or_offset(ident, cur)
    entry_size = read_address_or_offset(ident, cur)

    return SectionHeader(
        name=name,
        section_type=section_type,
        flags=flags,
        address=address,
        offset=sec_offset,
        size=size,
        link=link,
        info=info,
        address_alignment=address_alignment,
        entry_size=entry_size,
    )
