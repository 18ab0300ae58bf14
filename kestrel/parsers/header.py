"""
ELF File Header
================

Decodes the ELF file header (``Elf32_Ehdr`` / ``Elf64_Ehdr``).  The
fields after ``e_ident`` are read one at a time through a
:class:`~kestrel.parsers.cursor.ByteCursor`; ``e_entry``, ``e_phoff`` and
``e_shoff`` go through :func:`~kestrel.parsers.cursor.read_address_or_offset`
so the same code serves both classes:

    ======================  =========  =========
    field                   ELF32      ELF64
    ======================  =========  =========
    e_type, e_machine       2 + 2      2 + 2
    e_version               4          4
    e_entry/phoff/shoff     3 x 4      3 x 8
    e_flags                 4          4
    e_ehsize ... shstrndx   6 x 2      6 x 2
    ======================  =========  =========

References:
    - System V ABI, chapter 4, "ELF Header".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional, Union

from kestrel.parsers.cursor import ByteCursor, read_address_or_offset
from kestrel.parsers.enums import OpenIntEnum
from kestrel.parsers.ident import IDENT_SIZE, ElfIdent, decode_ident

BufferLike = Union[bytes, bytearray, memoryview]


class FileType(OpenIntEnum):
    """``e_type``.  OS- and processor-specific codes are preserved."""
    NONE = 0
    RELOCATABLE = 1
    EXECUTABLE = 2
    SHARED_OBJECT = 3
    CORE = 4


_FILE_TYPE_NAMES: dict[int, str] = {
    FileType.NONE: "NONE (None)",
    FileType.RELOCATABLE: "REL (Relocatable file)",
    FileType.EXECUTABLE: "EXEC (Executable file)",
    FileType.SHARED_OBJECT: "DYN (Shared object file)",
    FileType.CORE: "CORE (Core file)",
}


class TargetMachine(IntEnum):
    """``e_machine``.  Unlisted architectures map to NONE."""
    NONE = 0
    M32 = 1
    SPARC = 2
    I386 = 3
    M68K = 4
    M88K = 5
    I860 = 7
    MIPS = 8
    S370 = 9
    MIPS_RS3_LE = 10
    PARISC = 15
    SPARC32PLUS = 18
    PPC = 20
    PPC64 = 21
    S390 = 22
    ARM = 40
    SUPERH = 42
    SPARCV9 = 43
    IA_64 = 50
    X86_64 = 62
    AVR = 83
    XTENSA = 94
    MSP430 = 105
    AARCH64 = 183
    RISCV = 243
    BPF = 247
    LOONGARCH = 258

    @classmethod
    def _missing_(cls, value: Any) -> TargetMachine:
        return cls.NONE


def file_type_name(file_type: FileType) -> str:
    """readelf-style description of *file_type*."""
    name = _FILE_TYPE_NAMES.get(file_type)
    if name is not None:
        return name
    return f"<unknown>: 0x{int(file_type):x}"


@dataclass(frozen=True, slots=True)
class FileHeader:
    """Decoded ELF file header.

    ``entry_address`` is ``None`` when the raw ``e_entry`` is zero.
    Counts and sizes are reported verbatim; nothing here checks them
    against the length of the buffer.
    """
    ident: ElfIdent
    file_type: FileType
    machine: TargetMachine
    version: int
    entry_address: Optional[int]
    program_header_offset: int
    section_header_offset: int
    flags: int
    header_size: int
    program_header_size: int
    program_header_count: int
    section_header_size: int
    section_header_count: int
    string_table_index: int


def decode_file_header(buffer: BufferLike, offset: int) -> FileHeader:
    """Decode the file header whose ``e_ident[EI_CLASS]`` is at *offset*.

    Args:
        buffer: Buffer holding the image.
        offset: Position of the first byte after the magic signature.

    Raises:
        InvalidClassError: Invalid ``EI_CLASS`` byte.
        InvalidEndianError: Invalid ``EI_DATA`` byte.
        NotEnoughBytesError: The header is truncated.
    """
    ident = decode_ident(buffer, offset)
    order = ident.endian
    cur = ByteCursor(buffer, offset + IDENT_SIZE)

    file_type = cur.read_u16(order)
    machine = cur.read_u16(order)
    version = cur.read_u32(order)

    entry_address = read_address_or_offset(ident, cur)
    program_header_offset = read_address_or_offset(ident, cur)
    section_header_offset = read_address_or_offset(ident, cur)

    flags = cur.read_u32(order)
    header_size = cur.read_u16(order)
    program_header_size = cur.read_u16(order)
    program_header_count = cur.read_u16(order)
    section_header_size = cur.read_u16(order)
    section_header_count = cur.read_u16(order)
    string_table_index = cur.read_u16(order)

    return FileHeader(
        ident=ident,
        file_type=FileType(file_type),
        machine=TargetMachine(machine),
        version=version,
        entry_address=entry_address or None,
        program_header_offset=program_header_offset,
        section_header_offset=section_header_offset,
        flags=flags,
        header_size=header_size,
        program_header_size=program_header_size,
        program_header_count=program_header_count,
        section_header_size=section_header_size,
        section_header_count=section_header_count,
        string_table_index=string_table_index,
    )
