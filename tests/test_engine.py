"""Tests for the inspection engine, report models and report generator."""

import json

import pytest

from shared.config import InspectConfig, KestrelConfig
from shared.console import KestrelConsole

from kestrel.core.engine import KestrelEngine
from kestrel.core.errors import ElfIOError, InvalidMagicError
from kestrel.core.models import ImageReport
from kestrel.output.console import KestrelConsoleOutput
from kestrel.output.report import KestrelReportGenerator
from kestrel.parsers.elf_parser import ElfImage


@pytest.fixture
def engine():
    return KestrelEngine()


def test_inspect_data_builds_report(engine, named_image):
    report = engine.inspect_data(named_image)
    assert report.path == "<memory>"
    assert report.size == len(named_image)
    assert report.ident.elf_class == "ELF64"
    assert report.ident.endian == "little"
    assert report.header.file_type == "EXEC (Executable file)"
    assert report.header.machine == "X86_64"
    assert report.interpreter == "/lib64/ld-linux-x86-64.so.2"
    assert [s.type for s in report.segments] == ["INTERP", "LOAD"]
    assert report.segments[1].flags == "R E"
    assert [s.name for s in report.sections] == ["", ".interp", ".text", ".bss", ".shstrtab"]
    assert report.sections[2].flags == "AX"


def test_unknown_codes_in_report(engine, elf_builder):
    data = elf_builder(
        file_type=0xFE00,
        segments=[(0x60000001, 0x10000004, 0, 0, 0, 0, 0, 0)],
    )
    report = engine.inspect_data(data)
    assert report.header.file_type_code == 0xFE00
    assert report.header.file_type.startswith("<unknown>")
    seg = report.segments[0]
    assert seg.known_type is False
    assert seg.type == "0x60000001"
    assert seg.flags_value == 0x10000004


def test_names_can_be_skipped(named_image):
    config = KestrelConfig(inspect=InspectConfig(resolve_names=False))
    report = KestrelEngine(config=config).inspect_data(named_image)
    assert all(s.name is None for s in report.sections)


def test_inspect_reads_file(engine, tmp_path, shared_object):
    path = tmp_path / "libfoo.so"
    path.write_bytes(shared_object)
    report = engine.inspect(path)
    assert report.path == str(path.resolve())
    assert len(report.segments) == 14
    assert len(report.sections) == 42


def test_inspect_rejects_large_file(tmp_path, shared_object):
    path = tmp_path / "big.so"
    path.write_bytes(shared_object)
    config = KestrelConfig(inspect=InspectConfig(max_file_size=100))
    with pytest.raises(ElfIOError, match="too large"):
        KestrelEngine(config=config).inspect(path)


def test_inspect_missing_file(engine, tmp_path):
    with pytest.raises(ElfIOError):
        engine.inspect(tmp_path / "nope")


def test_decode_errors_propagate(engine):
    with pytest.raises(InvalidMagicError):
        engine.inspect_data(b"\x00" * 64)


def test_json_report(tmp_path, named_image):
    report = ImageReport.from_image(ElfImage.parse(named_image), "a.out")
    generator = KestrelReportGenerator()
    out = generator.generate_json(report, tmp_path / "reports" / "a.json")
    doc = json.loads((tmp_path / "reports" / "a.json").read_text(encoding="utf-8"))
    assert out.endswith("a.json")
    assert doc["report_type"] == "kestrel_elf_structure"
    assert doc["image"]["path"] == "a.out"
    assert doc["image"]["header"]["entry_address"] == report.header.entry_address
    assert len(doc["image"]["sections"]) == 5


def test_console_rendering(named_image):
    report = ImageReport.from_image(ElfImage.parse(named_image))
    console = KestrelConsole(record=True)
    console.rich.width = 200
    KestrelConsoleOutput(console=console).display(report)
    text = console.export_text()
    assert "EXEC (Executable file)" in text
    assert "INTERP" in text
    assert ".shstrtab" in text
