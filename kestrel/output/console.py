"""
Kestrel Console Output
=======================

Rich-powered terminal display for decoded ELF images: an identification
and file-header panel, followed by readelf-style program header and
section header tables.

References:
    - Rich library: https://github.com/Textualize/rich
    - GNU Binutils ``readelf -h -l -S`` output layout.
"""

from __future__ import annotations

from rich.panel import Panel
from rich.table import Table

from shared.console import KestrelConsole

from kestrel import __version__
from kestrel.core.models import HeaderInfo, IdentInfo, ImageReport, SectionInfo, SegmentInfo


def _hex(value: int, width: int = 0) -> str:
    return f"0x{value:0{width}x}"


def _table() -> Table:
    return Table(
        border_style="bright_cyan",
        header_style="bold bright_magenta",
        padding=(0, 1),
    )


class KestrelConsoleOutput:
    """Rich terminal display for :class:`ImageReport` objects.

    Usage::

        output = KestrelConsoleOutput()
        output.display(report)
    """

    def __init__(self, console: KestrelConsole | None = None) -> None:
        self._console: KestrelConsole = console or KestrelConsole()

    def display(
        self,
        report: ImageReport,
        *,
        show_segments: bool = True,
        show_sections: bool = True,
    ) -> None:
        """Display the complete report.

        Args:
            report: The report to render.
            show_segments: Render the program header table.
            show_sections: Render the section header table.
        """
        self._console.banner(__version__)
        self.display_header(report)

        if show_segments:
            self.display_segments(report.segments, report.ident.bits)
        if show_sections:
            self.display_sections(report.sections, report.ident.bits)

    def display_header(self, report: ImageReport) -> None:
        """Display the identification and file header panel."""
        ident: IdentInfo = report.ident
        header: HeaderInfo = report.header
        entry = (
            _hex(header.entry_address)
            if header.entry_address is not None
            else "[dim]none[/dim]"
        )
        lines: list[str] = [
            f"[bold]File:[/bold]                {report.path}",
            f"[bold]Size:[/bold]                {report.size:,} bytes",
            f"[bold]Class:[/bold]               {ident.elf_class}",
            f"[bold]Data:[/bold]                {ident.endian} endian",
            f"[bold]OS/ABI:[/bold]              {ident.os_abi} (ABI version {ident.abi_version})",
            f"[bold]Type:[/bold]                {header.file_type}",
            f"[bold]Machine:[/bold]             {header.machine}",
            f"[bold]Version:[/bold]             {_hex(header.version)}",
            f"[bold]Entry point:[/bold]         {entry}",
            f"[bold]Program headers:[/bold]     {header.program_header_count} x "
            f"{header.program_header_size} bytes at {_hex(header.program_header_offset)}",
            f"[bold]Section headers:[/bold]     {header.section_header_count} x "
            f"{header.section_header_size} bytes at {_hex(header.section_header_offset)}",
            f"[bold]Flags:[/bold]               {_hex(header.flags)}",
            f"[bold]String table index:[/bold]  {header.string_table_index}",
        ]
        if report.magic_offset:
            lines.append(
                f"[bold]Signature offset:[/bold]    {_hex(report.magic_offset)}"
            )
        if report.interpreter:
            lines.append(f"[bold]Interpreter:[/bold]         {report.interpreter}")

        panel = Panel(
            "\n".join(lines),
            title="[bold bright_cyan]ELF Header[/bold bright_cyan]",
            border_style="bright_cyan",
            padding=(1, 2),
        )
        self._console.rich.print(panel)
        self._console.blank()

    def display_segments(self, segments: list[SegmentInfo], bits: int = 64) -> None:
        """Display the program header table."""
        self._console.section("Program Headers")
        if not segments:
            self._console.info("There are no program headers in this file.")
            self._console.blank()
            return

        width = bits // 4
        tbl = _table()
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Type", style="bold")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("VirtAddr", justify="right")
        tbl.add_column("PhysAddr", justify="right")
        tbl.add_column("FileSiz", justify="right")
        tbl.add_column("MemSiz", justify="right")
        tbl.add_column("Flg")
        tbl.add_column("Align", justify="right")

        for seg in segments:
            type_cell = seg.type if seg.known_type else f"[yellow]{seg.type}[/yellow]"
            tbl.add_row(
                str(seg.index),
                type_cell,
                _hex(seg.offset),
                _hex(seg.virtual_address, width),
                _hex(seg.physical_address, width),
                _hex(seg.file_size),
                _hex(seg.memory_size),
                seg.flags,
                _hex(seg.alignment),
            )

        self._console.rich.print(tbl)
        self._console.blank()

    def display_sections(self, sections: list[SectionInfo], bits: int = 64) -> None:
        """Display the section header table."""
        self._console.section("Section Headers")
        if not sections:
            self._console.info("There are no sections in this file.")
            self._console.blank()
            return

        width = bits // 4
        tbl = _table()
        tbl.add_column("#", style="dim", justify="right")
        tbl.add_column("Name", style="bold", min_width=12)
        tbl.add_column("Type")
        tbl.add_column("Address", justify="right")
        tbl.add_column("Offset", justify="right")
        tbl.add_column("Size", justify="right")
        tbl.add_column("EntSize", justify="right")
        tbl.add_column("Flags")
        tbl.add_column("Link", justify="right")
        tbl.add_column("Info", justify="right")
        tbl.add_column("Align", justify="right")

        for sec in sections:
            name = sec.name if sec.name is not None else f"[dim]<{sec.name_index}>[/dim]"
            type_cell = sec.type if sec.known_type else f"[yellow]{sec.type}[/yellow]"
            tbl.add_row(
                str(sec.index),
                name,
                type_cell,
                _hex(sec.address, width),
                _hex(sec.offset),
                _hex(sec.size),
                _hex(sec.entry_size),
                sec.flags,
                str(sec.link),
                str(sec.info),
                str(sec.address_alignment),
            )

        self._console.rich.print(tbl)
        self._console.print(
            "[dim]Key: W (write), A (alloc), X (execute), M (merge), S (strings), "
            "I (info), L (link order), O (extra OS processing), G (group), "
            "T (TLS), C (compressed), x (unknown)[/dim]"
        )
        self._console.blank()
