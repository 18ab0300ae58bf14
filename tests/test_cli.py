"""Tests for the kestrel command-line interface."""

import json

import pytest
from click.testing import CliRunner

from kestrel.cli import kestrel_cli


@pytest.fixture
def runner():
    return CliRunner(env={"COLUMNS": "200"})


@pytest.fixture
def elf_file(tmp_path, named_image):
    path = tmp_path / "a.out"
    path.write_bytes(named_image)
    return path


def test_json_output(runner, elf_file):
    result = runner.invoke(kestrel_cli, [str(elf_file), "--json"])
    assert result.exit_code == 0, result.output
    doc = json.loads(result.output)
    assert doc["image"]["ident"]["elf_class"] == "ELF64"
    assert doc["image"]["interpreter"] == "/lib64/ld-linux-x86-64.so.2"


def test_console_output(runner, elf_file):
    result = runner.invoke(kestrel_cli, [str(elf_file)])
    assert result.exit_code == 0, result.output
    assert "EXEC (Executable file)" in result.output
    assert ".text" in result.output


def test_header_only(runner, elf_file):
    result = runner.invoke(kestrel_cli, [str(elf_file), "--no-segments", "--no-sections"])
    assert result.exit_code == 0, result.output
    assert ".shstrtab" not in result.output


def test_report_file(runner, elf_file, tmp_path):
    out = tmp_path / "report.json"
    result = runner.invoke(kestrel_cli, [str(elf_file), "--no-sections", "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert json.loads(out.read_text(encoding="utf-8"))["image"]["header"]["machine"] == "X86_64"


def test_not_an_elf(runner, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"plain text, no signature here")
    result = runner.invoke(kestrel_cli, [str(path)])
    assert result.exit_code == 1
    assert "magic" in result.output


def test_config_output_format(runner, elf_file, tmp_path):
    cfg = tmp_path / "kestrel.toml"
    cfg.write_text('[inspect]\noutput_format = "json"\n', encoding="utf-8")
    result = runner.invoke(kestrel_cli, [str(elf_file), "-c", str(cfg)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["report_type"] == "kestrel_elf_structure"


def test_bad_config(runner, elf_file, tmp_path):
    cfg = tmp_path / "broken.toml"
    cfg.write_text("[inspect\n", encoding="utf-8")
    result = runner.invoke(kestrel_cli, [str(elf_file), "-c", str(cfg)])
    assert result.exit_code == 2


def test_missing_path(runner, tmp_path):
    result = runner.invoke(kestrel_cli, [str(tmp_path / "absent")])
    assert result.exit_code != 0
