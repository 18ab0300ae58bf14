"""
Kestrel -- ELF Structure Decoder
=================================

Kestrel decodes the structural skeleton of ELF object files: the
identification block, the file header, and the program and section
header tables, for 32- and 64-bit images in either byte order.

Capabilities:
    - Signature scan (images embedded at any offset)
    - Field-by-field, class- and endian-aware header decoding
    - Open type enumerations that keep vendor-specific codes
    - Flag sets that keep unnamed bits
    - Rich console rendering and JSON reports

References:
    - TIS Committee. (1995). ELF Specification, Version 1.2.
    - System V Application Binary Interface, Edition 4.1.
"""

__version__ = "1.0.0"

from kestrel.core.errors import ElfError
from kestrel.parsers.elf_parser import ElfImage

__all__ = [
    "ElfError",
    "ElfImage",
    "__version__",
]
