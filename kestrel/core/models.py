"""
Kestrel Report Models
======================

Pydantic models describing a decoded ELF image in a presentation- and
serialisation-friendly shape.  The decoders produce frozen dataclasses
with enum-typed fields; :meth:`ImageReport.from_image` flattens those
into names and plain integers for the console renderer and the JSON
report.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from kestrel.parsers.elf_parser import ElfImage
from kestrel.parsers.header import FileHeader, file_type_name
from kestrel.parsers.ident import ElfEndian, ElfIdent
from kestrel.parsers.sections import SectionHeader
from kestrel.parsers.segments import ProgramHeader


class IdentInfo(BaseModel):
    """Identification block summary.

    Attributes:
        elf_class: ``"ELF32"`` or ``"ELF64"``.
        bits: Address width (32 or 64).
        endian: ``"little"`` or ``"big"``.
        version: Identification version name.
        os_abi: OS/ABI name.
        abi_version: ABI version byte.
    """
    elf_class: str = ""
    bits: int = 0
    endian: str = ""
    version: str = ""
    os_abi: str = ""
    abi_version: int = 0

    @classmethod
    def from_ident(cls, ident: ElfIdent) -> IdentInfo:
        return cls(
            elf_class=f"ELF{ident.elf_class.bits}",
            bits=ident.elf_class.bits,
            endian="little" if ident.endian == ElfEndian.LITTLE else "big",
            version=ident.version.name,
            os_abi=ident.abi.name,
            abi_version=ident.abi_version,
        )


class HeaderInfo(BaseModel):
    """File header summary.

    Attributes:
        file_type: readelf-style file type description.
        file_type_code: Raw ``e_type``.
        machine: Architecture name (``NONE`` if unrecognised).
        entry_address: Entry point, ``None`` when absent.
    """
    file_type: str = ""
    file_type_code: int = 0
    machine: str = ""
    version: int = 0
    entry_address: Optional[int] = None
    program_header_offset: int = 0
    section_header_offset: int = 0
    flags: int = 0
    header_size: int = 0
    program_header_size: int = 0
    program_header_count: int = 0
    section_header_size: int = 0
    section_header_count: int = 0
    string_table_index: int = 0

    @classmethod
    def from_header(cls, header: FileHeader) -> HeaderInfo:
        return cls(
            file_type=file_type_name(header.file_type),
            file_type_code=int(header.file_type),
            machine=header.machine.name,
            version=header.version,
            entry_address=header.entry_address,
            program_header_offset=header.program_header_offset,
            section_header_offset=header.section_header_offset,
            flags=header.flags,
            header_size=header.header_size,
            program_header_size=header.program_header_size,
            program_header_count=header.program_header_count,
            section_header_size=header.section_header_size,
            section_header_count=header.section_header_count,
            string_table_index=header.string_table_index,
        )


class SegmentInfo(BaseModel):
    """One program header, flattened."""
    index: int = 0
    type: str = ""
    type_code: int = 0
    known_type: bool = True
    flags: str = ""
    flags_value: int = 0
    offset: int = 0
    virtual_address: int = 0
    physical_address: int = 0
    file_size: int = 0
    memory_size: int = 0
    alignment: int = 0

    @classmethod
    def from_header(cls, index: int, ph: ProgramHeader) -> SegmentInfo:
        return cls(
            index=index,
            type=ph.segment_type.label,
            type_code=int(ph.segment_type),
            known_type=ph.segment_type.is_known,
            flags=ph.flags.letters(),
            flags_value=int(ph.flags),
            offset=ph.offset,
            virtual_address=ph.virtual_address,
            physical_address=ph.physical_address,
            file_size=ph.file_size,
            memory_size=ph.memory_size,
            alignment=ph.alignment,
        )


class SectionInfo(BaseModel):
    """One section header, flattened.  ``name`` is ``None`` if unresolved."""
    index: int = 0
    name: Optional[str] = None
    name_index: int = 0
    type: str = ""
    type_code: int = 0
    known_type: bool = True
    flags: str = ""
    flags_value: int = 0
    address: int = 0
    offset: int = 0
    size: int = 0
    link: int = 0
    info: int = 0
    address_alignment: int = 0
    entry_size: int = 0

    @classmethod
    def from_header(
        cls, index: int, sh: SectionHeader, name: Optional[str] = None
    ) -> SectionInfo:
        return cls(
            index=index,
            name=name,
            name_index=sh.name,
            type=sh.section_type.label,
            type_code=int(sh.section_type),
            known_type=sh.section_type.is_known,
            flags=sh.flags.letters(),
            flags_value=int(sh.flags),
            address=sh.address,
            offset=sh.offset,
            size=sh.size,
            link=sh.link,
            info=sh.info,
            address_alignment=sh.address_alignment,
            entry_size=sh.entry_size,
        )


class ImageReport(BaseModel):
    """Complete, serialisable description of a decoded image.

    Attributes:
        path: Source path, or ``"<memory>"``.
        size: Buffer length in bytes.
        magic_offset: Offset of the ELF signature in the buffer.
        interpreter: ``PT_INTERP`` path, if any.
    """
    path: str = "<memory>"
    size: int = 0
    magic_offset: int = 0
    ident: IdentInfo = Field(default_factory=IdentInfo)
    header: HeaderInfo = Field(default_factory=HeaderInfo)
    interpreter: Optional[str] = None
    segments: list[SegmentInfo] = Field(default_factory=list)
    sections: list[SectionInfo] = Field(default_factory=list)

    @classmethod
    def from_image(
        cls,
        image: ElfImage,
        path: str = "<memory>",
        *,
        resolve_names: bool = True,
    ) -> ImageReport:
        """Flatten *image* into a report.

        Args:
            image: The decoded image.
            path: Display path.
            resolve_names: Look section names up in the string table.
        """
        sections: list[SectionInfo] = []
        for i, sh in enumerate(image.section_headers or ()):
            name = image.section_name(sh) if resolve_names else None
            sections.append(SectionInfo.from_header(i, sh, name))

        return cls(
            path=path,
            size=len(image.buffer),
            magic_offset=image.magic_offset,
            ident=IdentInfo.from_ident(image.ident),
            header=HeaderInfo.from_header(image.header),
            interpreter=image.interpreter(),
            segments=[
                SegmentInfo.from_header(i, ph)
                for i, ph in enumerate(image.program_headers or ())
            ],
            sections=sections,
        )
