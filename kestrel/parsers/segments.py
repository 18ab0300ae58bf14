"""
ELF Program Headers (Segments)
===============================

Decodes one entry of the program header table.  The two classes lay the
entry out differently: ELF64 moves ``p_flags`` up next to ``p_type`` so
that the eight-byte fields stay naturally aligned.

    Elf32_Phdr: type, offset, vaddr, paddr, filesz, memsz, flags, align
    Elf64_Phdr: type, flags, offset, vaddr, paddr, filesz, memsz, align

References:
    - System V ABI, chapter 5, "Program Header".
    - Linux Standard Base Core Specification, "Program Header" (PT_GNU_*).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from kestrel.parsers.cursor import ByteCursor, read_address_or_offset
from kestrel.parsers.enums import ElfFlags, OpenIntEnum
from kestrel.parsers.ident import ElfClass, ElfIdent

BufferLike = Union[bytes, bytearray, memoryview]


class SegmentType(OpenIntEnum):
    """``p_type``.  Unrecognised codes keep their raw value."""
    NULL = 0x0
    LOAD = 0x1
    DYNAMIC = 0x2
    INTERP = 0x3
    NOTE = 0x4
    SHLIB = 0x5
    PHDR = 0x6
    TLS = 0x7
    GNU_EH_FRAME = 0x6474E550
    GNU_STACK = 0x6474E551
    GNU_RELRO = 0x6474E552
    GNU_PROPERTY = 0x6474E553


class SegmentFlags(ElfFlags):
    """``p_flags`` permission bits."""
    EXECUTABLE = 0x1
    WRITABLE = 0x2
    READABLE = 0x4

    def letters(self) -> str:
        """readelf-style ``RWE`` string, blanks for cleared bits."""
        return "".join(
            char if self.has(flag) else " "
            for char, flag in (
                ("R", SegmentFlags.READABLE),
                ("W", SegmentFlags.WRITABLE),
                ("E", SegmentFlags.EXECUTABLE),
            )
        )


@dataclass(frozen=True, slots=True)
class ProgramHeader:
    """Decoded program header entry."""
    segment_type: SegmentType
    flags: SegmentFlags
    offset: int
    virtual_address: int
    physical_address: int
    file_size: int
    memory_size: int
    alignment: int


def decode_program_header(
    ident: ElfIdent,
    buffer: BufferLike,
    offset: int,
) -> ProgramHeader:
    """Decode the program header entry that starts at *offset*.

    Raises:
        InvalidClassError: ``ident`` carries an invalid class.
        InvalidEndianError: ``ident`` carries an invalid byte order.
        NotEnoughBytesError: The entry runs past the end of *buffer*.
    """
    order = ident.endian
    cur = ByteCursor(buffer, offset)

    segment_type = SegmentType(cur.read_u32(order))

    flags = 0
    if ident.elf_class == ElfClass.CLASS64:
        flags = cur.read_u32(order)

    seg_offset = read_address_or_offset(ident, cur)
    virtual_address = read_address_or_offset(ident, cur)
    physical_address = read_address_or_offset(ident, cur)
    file_size = read_address_or_offset(ident, cur)
    memory_size = read_address_or_offset(ident, cur)

    if ident.elf_class == ElfClass.CLASS32:
        flags = cur.read_u32(order)

    alignment = read_address_or_offset(ident, cur)

    return ProgramHeader(
        segment_type=segment_type,
        flags=SegmentFlags(flags),
        offset=seg_offset,
        virtual_address=virtual_address,
        physical_address=physical_address,
        file_size=file_size,
        memory_size=memory_size,
        alignment=alignment,
    )
