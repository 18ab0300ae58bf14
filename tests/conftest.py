"""Synthetic ELF images for the Kestrel test suite.

Images are packed with :mod:`struct` independently of the decoders under
test, so every offset below is the on-disk layout from the System V gABI.
"""

from __future__ import annotations

import struct
from typing import Callable, Sequence

import pytest

EHDR_SIZE = {32: 52, 64: 64}
PHDR_SIZE = {32: 32, 64: 56}
SHDR_SIZE = {32: 40, 64: 64}

# (type, flags, offset, vaddr, paddr, filesz, memsz, align)
Segment = tuple[int, int, int, int, int, int, int, int]
# (name, type, flags, addr, offset, size, link, info, addralign, entsize)
Section = tuple[int, int, int, int, int, int, int, int, int, int]


def build_elf(
    *,
    bits: int = 64,
    little: bool = True,
    file_type: int = 3,
    machine: int = 62,
    version: int = 1,
    entry: int = 0,
    flags: int = 0,
    osabi: int = 0,
    abi_version: int = 0,
    segments: Sequence[Segment] = (),
    sections: Sequence[Section] = (),
    shstrndx: int = 0,
    payload: bytes = b"",
    data_offset: int | None = None,
) -> bytes:
    """Pack an ELF image: header, program headers, section headers, payload.

    The payload starts at *data_offset* (default: right after the tables).
    """
    o = "<" if little else ">"
    ehsize = EHDR_SIZE[bits]
    phentsize = PHDR_SIZE[bits]
    shentsize = SHDR_SIZE[bits]

    phoff = ehsize if segments else 0
    shoff = ehsize + len(segments) * phentsize if sections else 0
    tables_end = ehsize + len(segments) * phentsize + len(sections) * shentsize
    if data_offset is None:
        data_offset = tables_end
    assert data_offset >= tables_end

    ident = b"\x7fELF" + bytes(
        [1 if bits == 32 else 2, 1 if little else 2, 1, osabi, abi_version]
    ) + b"\x00" * 7
    addr = "I" if bits == 32 else "Q"
    ehdr = ident + struct.pack(
        o + "HHI" + addr * 3 + "IHHHHHH",
        file_type, machine, version, entry, phoff, shoff, flags,
        ehsize, phentsize, len(segments), shentsize, len(sections), shstrndx,
    )

    out = bytearray(ehdr)
    for p_type, p_flags, off, vaddr, paddr, filesz, memsz, align in segments:
        if bits == 64:
            out += struct.pack(
                o + "IIQQQQQQ",
                p_type, p_flags, off, vaddr, paddr, filesz, memsz, align,
            )
        else:
            out += struct.pack(
                o + "IIIIIIII",
                p_type, off, vaddr, paddr, filesz, memsz, p_flags, align,
            )
    for sh in sections:
        out += struct.pack(o + ("IIQQQQIIQQ" if bits == 64 else "IIIIIIIIII"), *sh)

    out += b"\x00" * (data_offset - len(out))
    out += payload
    return bytes(out)


def string_table(names: Sequence[str]) -> tuple[bytes, dict[str, int]]:
    """Build a string table; returns the bytes and each name's index."""
    blob = bytearray(b"\x00")
    index: dict[str, int] = {}
    for name in names:
        index[name] = len(blob)
        blob += name.encode("ascii") + b"\x00"
    return bytes(blob), index


@pytest.fixture
def elf_builder() -> Callable[..., bytes]:
    return build_elf


@pytest.fixture
def shared_object() -> bytes:
    """Little-endian ELF64 x86-64 shared object: 14 segments, 42 sections."""
    segments = [(1, 0x5, 0, 0, 0, 0x1000, 0x1000, 0x1000)] * 14
    sections = [(0,) * 10] + [
        (i, 1, 0x6, 0x1000 * i, 0x1000 * i, 0x10, 0, 0, 16, 0)
        for i in range(1, 42)
    ]
    return build_elf(entry=0x87A0, segments=segments, sections=sections)


@pytest.fixture
def named_image() -> bytes:
    """ELF64 image with a PT_INTERP segment and named sections."""
    strtab, names = string_table([".interp", ".text", ".bss", ".shstrtab"])
    interp = b"/lib64/ld-linux-x86-64.so.2\x00"
    text = b"\x90" * 16
    base = 0x400
    interp_off = base
    text_off = interp_off + len(interp)
    strtab_off = text_off + len(text)
    payload = interp + text + strtab

    segments = [
        (3, 0x4, interp_off, 0x400000 + interp_off, 0, len(interp), len(interp), 1),
        (1, 0x5, 0, 0x400000, 0x400000, strtab_off, strtab_off, 0x1000),
    ]
    sections = [
        (0,) * 10,
        (names[".interp"], 1, 0x2, 0x400000 + interp_off, interp_off, len(interp), 0, 0, 1, 0),
        (names[".text"], 1, 0x6, 0x400000 + text_off, text_off, len(text), 0, 0, 16, 0),
        (names[".bss"], 8, 0x3, 0x600000, strtab_off, 0x2000, 0, 0, 32, 0),
        (names[".shstrtab"], 3, 0, 0, strtab_off, len(strtab), 0, 0, 1, 0),
    ]
    return build_elf(
        file_type=2,
        entry=0x400000 + text_off,
        segments=segments,
        sections=sections,
        shstrndx=4,
        payload=payload,
        data_offset=base,
    )
