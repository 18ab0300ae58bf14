"""Tests for whole-image decoding with ElfImage."""

import pytest

from kestrel.core.errors import (
    ElfError,
    ElfIOError,
    InvalidClassError,
    InvalidEndianError,
    InvalidMagicError,
    NotEnoughBytesError,
)
from kestrel.parsers.elf_parser import SHN_XINDEX, ElfImage
from kestrel.parsers.header import FileType, TargetMachine
from kestrel.parsers.sections import SectionFlags, SectionType
from kestrel.parsers.segments import SegmentFlags, SegmentType


class TestTables:
    def test_shared_object_counts(self, shared_object):
        image = ElfImage.parse(shared_object)
        assert image.magic_offset == 0
        assert image.header.file_type == FileType.SHARED_OBJECT
        assert image.header.machine == TargetMachine.X86_64
        assert image.header.entry_address == 0x87A0
        assert len(image.program_headers) == 14
        assert len(image.section_headers) == 42
        assert image.is_64bit
        assert image.is_little_endian

    def test_first_section_is_null(self, shared_object):
        first = ElfImage.parse(shared_object).section_headers[0]
        assert first.section_type is SectionType.NULL
        assert first.name == 0
        assert first.flags == SectionFlags(0)
        assert first.address == 0
        assert first.offset == 0
        assert first.size == 0
        assert first.address_alignment == 0

    def test_entries_are_decoded_in_table_order(self, shared_object):
        sections = ElfImage.parse(shared_object).section_headers
        assert [sh.name for sh in sections[1:4]] == [1, 2, 3]
        assert sections[41].offset == 0x1000 * 41
        assert sections[5].flags == SectionFlags.ALLOC | SectionFlags.EXECINSTR

    def test_segment_entries(self, shared_object):
        for ph in ElfImage.parse(shared_object).program_headers:
            assert ph.segment_type is SegmentType.LOAD
            assert ph.flags == SegmentFlags.READABLE | SegmentFlags.EXECUTABLE
            assert ph.alignment == 0x1000

    def test_empty_tables_are_absent(self, elf_builder):
        image = ElfImage.parse(elf_builder(file_type=1))
        assert image.program_headers is None
        assert image.section_headers is None
        assert image.segments_of_type(SegmentType.LOAD) == ()
        assert image.string_table() is None

    def test_32bit_big_endian_image(self, elf_builder):
        data = elf_builder(
            bits=32, little=False, file_type=2, machine=20, entry=0x10000100,
            segments=[(1, 0x6, 0, 0x10000000, 0x10000000, 0x200, 0x400, 0x10000)],
            sections=[(0,) * 10, (1, 8, 0x3, 0x10000200, 0x200, 0x200, 0, 0, 4, 0)],
        )
        image = ElfImage.parse(data)
        assert not image.is_64bit
        assert not image.is_little_endian
        assert image.header.machine == TargetMachine.PPC
        (ph,) = image.program_headers
        assert ph.flags == SegmentFlags.READABLE | SegmentFlags.WRITABLE
        assert ph.memory_size == 0x400
        assert image.section_headers[1].section_type is SectionType.NOBITS

    def test_parse_is_deterministic(self, shared_object):
        first = ElfImage.parse(shared_object)
        second = ElfImage.parse(bytearray(shared_object))
        assert first.header == second.header
        assert first.program_headers == second.program_headers
        assert first.section_headers == second.section_headers


class TestSignature:
    def test_missing_magic(self):
        with pytest.raises(InvalidMagicError):
            ElfImage.parse(b"\x00" * 128)

    def test_empty_buffer(self):
        with pytest.raises(InvalidMagicError):
            ElfImage.parse(b"")

    def test_magic_too_close_to_the_end(self):
        data = b"\x00" * 10 + b"\x7fELF" + b"\x02\x01\x01\x00\x00"
        with pytest.raises(NotEnoughBytesError) as info:
            ElfImage.parse(data)
        assert info.value.remaining == 5

    def test_leading_bytes_are_skipped(self, shared_object):
        image = ElfImage.parse(b"garbage!" + shared_object)
        assert image.magic_offset == 8
        assert image.header == ElfImage.parse(shared_object).header
        assert image.section_headers == ElfImage.parse(shared_object).section_headers

    def test_invalid_class(self, shared_object):
        data = bytearray(shared_object)
        data[4] = 3
        with pytest.raises(InvalidClassError) as info:
            ElfImage.parse(bytes(data))
        assert info.value.value == 3

    def test_invalid_endian(self, shared_object):
        data = bytearray(shared_object)
        data[5] = 0
        with pytest.raises(InvalidEndianError):
            ElfImage.parse(bytes(data))

    def test_errors_share_a_base_class(self):
        with pytest.raises(ElfError):
            ElfImage.parse(b"not an elf")


class TestTruncation:
    def test_truncated_file_header(self, shared_object):
        with pytest.raises(NotEnoughBytesError):
            ElfImage.parse(shared_object[:30])

    def test_truncated_section_table(self, shared_object):
        end = 64 + 14 * 56 + 10 * 64 + 12
        with pytest.raises(NotEnoughBytesError):
            ElfImage.parse(shared_object[:end])

    def test_truncated_program_table(self, shared_object):
        with pytest.raises(NotEnoughBytesError):
            ElfImage.parse(shared_object[:64 + 3 * 56])


class TestLookups:
    def test_section_names(self, named_image):
        image = ElfImage.parse(named_image)
        names = [image.section_name(sh) for sh in image.section_headers]
        assert names == ["", ".interp", ".text", ".bss", ".shstrtab"]

    def test_section_by_name(self, named_image):
        image = ElfImage.parse(named_image)
        text = image.section_by_name(".text")
        assert text is image.section_headers[2]
        assert bytes(image.section_data(text)) == b"\x90" * 16
        assert image.section_by_name(".data") is None

    def test_nobits_section_has_no_data(self, named_image):
        image = ElfImage.parse(named_image)
        bss = image.section_by_name(".bss")
        assert bss.size == 0x2000
        assert len(image.section_data(bss)) == 0

    def test_interpreter(self, named_image):
        image = ElfImage.parse(named_image)
        assert image.interpreter() == "/lib64/ld-linux-x86-64.so.2"

    def test_no_interpreter(self, shared_object):
        assert ElfImage.parse(shared_object).interpreter() is None

    def test_segment_data_is_read_only(self, named_image):
        image = ElfImage.parse(named_image)
        (interp,) = image.segments_of_type(SegmentType.INTERP)
        view = image.segment_data(interp)
        assert view.readonly
        assert bytes(view).startswith(b"/lib64/")

    def test_segment_data_out_of_bounds(self, elf_builder):
        data = elf_builder(segments=[(1, 4, 0x10, 0, 0, 0x10000, 0x10000, 1)])
        image = ElfImage.parse(data)
        with pytest.raises(NotEnoughBytesError) as info:
            image.segment_data(image.program_headers[0])
        assert info.value.needed == 0x10000

    def test_names_without_string_table(self, shared_object):
        image = ElfImage.parse(shared_object)
        assert image.string_table() is None
        assert image.section_name(image.section_headers[1]) is None

    def test_extended_string_table_index(self, named_image):
        data = bytearray(named_image)
        # e_shstrndx is the last header field; section 0 sh_link carries 4
        data[62:64] = SHN_XINDEX.to_bytes(2, "little")
        shoff = 64 + 2 * 56
        data[shoff + 40:shoff + 44] = (4).to_bytes(4, "little")
        image = ElfImage.parse(bytes(data))
        assert image.string_table() is image.section_headers[4]
        assert image.section_name(image.section_headers[2]) == ".text"

    def test_repr(self, shared_object):
        text = repr(ElfImage.parse(shared_object))
        assert "CLASS64" in text
        assert "SHARED_OBJECT" in text
        assert "sections=42" in text


class TestFromPath:
    def test_reads_file(self, tmp_path, named_image):
        path = tmp_path / "a.out"
        path.write_bytes(named_image)
        image = ElfImage.from_path(path)
        assert image.header.file_type == FileType.EXECUTABLE
        assert image.interpreter() == "/lib64/ld-linux-x86-64.so.2"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ElfIOError) as info:
            ElfImage.from_path(tmp_path / "missing")
        assert isinstance(info.value.__cause__, OSError)

    def test_short_file(self, tmp_path):
        path = tmp_path / "short"
        path.write_bytes(b"\x7fELF\x02\x01")
        with pytest.raises(NotEnoughBytesError) as info:
            ElfImage.from_path(path)
        assert info.value.remaining == 6
