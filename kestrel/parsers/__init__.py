"""
Kestrel Parsers
================

Field-by-field decoders for the ELF identification block, file header,
program header table and section header table.
"""

from kestrel.parsers.elf_parser import ElfImage
from kestrel.parsers.header import FileHeader, FileType, TargetMachine
from kestrel.parsers.ident import ElfClass, ElfEndian, ElfIdent, ElfOsABI, ElfVersion
from kestrel.parsers.sections import SectionFlags, SectionHeader, SectionType
from kestrel.parsers.segments import ProgramHeader, SegmentFlags, SegmentType

__all__ = [
    "ElfImage",
    "ElfClass",
    "ElfEndian",
    "ElfIdent",
    "ElfOsABI",
    "ElfVersion",
    "FileHeader",
    "FileType",
    "TargetMachine",
    "ProgramHeader",
    "SegmentFlags",
    "SegmentType",
    "SectionFlags",
    "SectionHeader",
    "SectionType",
]
