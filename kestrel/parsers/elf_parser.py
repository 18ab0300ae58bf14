"""
ELF Image Parser
=================

:class:`ElfImage` ties the decoders together: it finds the signature,
decodes the file header, then walks the program header and section
header tables in a single pass.  The resulting image is immutable and
keeps a read-only :class:`memoryview` over the caller's buffer instead of
copying it, so the buffer must stay alive as long as the image does.

Table entry *i* lives at::

    image_start + table_offset + i * entry_size

where ``image_start`` is the offset of the magic signature in the
buffer.  Counts and entry sizes are taken from the header verbatim; an
entry that runs off the end of the buffer fails the whole parse.

Usage::

    image = ElfImage.parse(raw_bytes)
    print(image.header.machine, image.header.entry_address)
    for ph in image.program_headers or ():
        print(ph.segment_type.label, ph.flags.letters())

References:
    - TIS Committee. (1995). Tool Interface Standard (TIS) Executable and
      Linkable Format (ELF) Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Optional, TypeVar, Union

from kestrel.core.errors import (
    ElfIOError,
    InvalidMagicError,
    NotEnoughBytesError,
)
from kestrel.parsers.header import FileHeader, decode_file_header
from kestrel.parsers.ident import EI_NIDENT, IDENT_SIZE, ElfClass, ElfEndian, ElfIdent
from kestrel.parsers.magic import ELF_MAGIC, locate
from kestrel.parsers.sections import SectionHeader, SectionType, decode_section_header
from kestrel.parsers.segments import ProgramHeader, SegmentType, decode_program_header

BufferLike = Union[bytes, bytearray, memoryview]

_T = TypeVar("_T")

# Special section indices
SHN_UNDEF: int = 0
SHN_XINDEX: int = 0xFFFF


def _decode_table(
    decoder: Callable[[ElfIdent, BufferLike, int], _T],
    ident: ElfIdent,
    data: memoryview,
    image_start: int,
    table_offset: int,
    entry_size: int,
    count: int,
) -> Optional[tuple[_T, ...]]:
    """Decode *count* consecutive table entries, or ``None`` for an empty table."""
    if count == 0:
        return None
    start = image_start + table_offset
    return tuple(
        decoder(ident, data, start + i * entry_size) for i in range(count)
    )


class ElfImage:
    """A decoded ELF image: file header plus both header tables.

    Instances are created with :meth:`parse` or :meth:`from_path` and
    never change afterwards.
    """

    __slots__ = (
        "_data",
        "_magic_offset",
        "_header",
        "_program_headers",
        "_section_headers",
    )

    def __init__(
        self,
        data: memoryview,
        magic_offset: int,
        header: FileHeader,
        program_headers: Optional[tuple[ProgramHeader, ...]],
        section_headers: Optional[tuple[SectionHeader, ...]],
    ) -> None:
        self._data = data
        self._magic_offset = magic_offset
        self._header = header
        self._program_headers = program_headers
        self._section_headers = section_headers

    # ------------------------------------------------------------------ #
    #  Construction
    # ------------------------------------------------------------------ #

    @classmethod
    def parse(cls, buffer: BufferLike) -> ElfImage:
        """Decode *buffer* into an :class:`ElfImage`.

        Args:
            buffer: Raw bytes containing an ELF image, possibly preceded
                    by unrelated data.

        Returns:
            The decoded image.

        Raises:
            InvalidMagicError: No ELF signature in *buffer*.
            NotEnoughBytesError: The buffer is shorter than a structure
                that has to be read.
            InvalidClassError: Invalid ``EI_CLASS``.
            InvalidEndianError: Invalid ``EI_DATA``.
        """
        data = memoryview(buffer).toreadonly()

        magic_offset = locate(data)
        if magic_offset is None:
            raise InvalidMagicError()

        base = magic_offset + len(ELF_MAGIC)
        remaining = len(data) - base
        if remaining < IDENT_SIZE:
            raise NotEnoughBytesError(remaining)

        header = decode_file_header(data, base)
        ident = header.ident

        program_headers = _decode_table(
            decode_program_header,
            ident,
            data,
            magic_offset,
            header.program_header_offset,
            header.program_header_size,
            header.program_header_count,
        )
        section_headers = _decode_table(
            decode_section_header,
            ident,
            data,
            magic_offset,
            header.section_header_offset,
            header.section_header_size,
            header.section_header_count,
        )
        return cls(data, magic_offset, header, program_headers, section_headers)

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> ElfImage:
        """Read the file at *path* and decode it.

        The file is read fully into memory.

        Raises:
            ElfIOError: The file cannot be read.
            NotEnoughBytesError: The file is shorter than an identification
                block.
        """
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise ElfIOError(str(path), exc.strerror or str(exc)) from exc

        if len(data) < EI_NIDENT:
            raise NotEnoughBytesError(len(data))
        return cls.parse(data)

    # ------------------------------------------------------------------ #
    #  Read-only views
    # ------------------------------------------------------------------ #

    @property
    def buffer(self) -> memoryview:
        """Read-only view over the buffer the image was decoded from."""
        return self._data

    @property
    def magic_offset(self) -> int:
        """Offset of the ELF signature within :attr:`buffer`."""
        return self._magic_offset

    @property
    def header(self) -> FileHeader:
        return self._header

    @property
    def ident(self) -> ElfIdent:
        return self._header.ident

    @property
    def program_headers(self) -> Optional[tuple[ProgramHeader, ...]]:
        """Program header table, or ``None`` when the header declares none."""
        return self._program_headers

    @property
    def section_headers(self) -> Optional[tuple[SectionHeader, ...]]:
        """Section header table, or ``None`` when the header declares none."""
        return self._section_headers

    @property
    def is_64bit(self) -> bool:
        return self.ident.elf_class == ElfClass.CLASS64

    @property
    def is_little_endian(self) -> bool:
        return self.ident.endian == ElfEndian.LITTLE

    # ------------------------------------------------------------------ #
    #  Lookups
    # ------------------------------------------------------------------ #

    def segments_of_type(self, segment_type: SegmentType) -> tuple[ProgramHeader, ...]:
        """All program headers whose type equals *segment_type*."""
        return tuple(
            ph for ph in self._program_headers or ()
            if ph.segment_type == segment_type
        )

    def string_table(self) -> Optional[SectionHeader]:
        """The section-name string table, if the header names one.

        Follows the ``SHN_XINDEX`` escape, where the real index lives in
        ``sh_link`` of section 0.
        """
        sections = self._section_headers
        if not sections:
            return None
        index = self._header.string_table_index
        if index == SHN_XINDEX:
            index = sections[0].link
        if index == SHN_UNDEF or index >= len(sections):
            return None
        return sections[index]

    def section_name(self, section: SectionHeader) -> Optional[str]:
        """Resolve ``sh_name`` through the section-name string table.

        Returns:
            The name, or ``None`` when there is no string table or the
            index points outside it.
        """
        strtab = self.string_table()
        if strtab is None or section.name >= strtab.size:
            return None
        table = self.section_data(strtab)
        raw = bytes(table[section.name:])
        end = raw.find(b"\x00")
        if end != -1:
            raw = raw[:end]
        return raw.decode("ascii", errors="replace")

    def section_by_name(self, name: str) -> Optional[SectionHeader]:
        """First section called *name*, or ``None``."""
        for section in self._section_headers or ():
            if self.section_name(section) == name:
                return section
        return None

    def segment_data(self, segment: ProgramHeader) -> memoryview:
        """Borrowed view over the file bytes of *segment*."""
        return self._slice(segment.offset, segment.file_size)

    def section_data(self, section: SectionHeader) -> memoryview:
        """Borrowed view over the file bytes of *section*.

        ``SHT_NOBITS`` sections occupy no file space and yield an empty view.
        """
        if section.section_type == SectionType.NOBITS:
            return self._data[0:0]
        return self._slice(section.offset, section.size)

    def interpreter(self) -> Optional[str]:
        """Program interpreter path from ``PT_INTERP``, if any."""
        for segment in self.segments_of_type(SegmentType.INTERP):
            raw = bytes(self.segment_data(segment))
            return raw.rstrip(b"\x00").decode("ascii", errors="replace")
        return None

    def _slice(self, offset: int, size: int) -> memoryview:
        start = self._magic_offset + offset
        available = max(len(self._data) - start, 0)
        if size > available:
            raise NotEnoughBytesError(available, size)
        return self._data[start:start + size]

    def __repr__(self) -> str:
        h = self._header
        return (
            f"ElfImage(class={h.ident.elf_class.name}, "
            f"endian={h.ident.endian.name}, type={h.file_type.label}, "
            f"machine={h.machine.name}, "
            f"segments={h.program_header_count}, "
            f"sections={h.section_header_count})"
        )
