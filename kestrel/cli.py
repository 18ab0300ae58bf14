"""
Kestrel CLI -- ELF Structure Decoder
=====================================

Click-based command-line interface for Kestrel.  Decodes the header and
header tables of one ELF file and renders them to the terminal, as JSON
on stdout, or into a JSON report file.

Usage::

    # Header, program headers and section headers
    kestrel /usr/bin/ls

    # Header only
    kestrel /usr/bin/ls --no-segments --no-sections

    # JSON to stdout
    kestrel /usr/bin/ls --json

    # JSON report file
    kestrel /usr/bin/ls --output reports/ls.json

References:
    - Click documentation: https://click.palletsprojects.com/
"""

from __future__ import annotations

import sys

import click

from shared.config import KestrelConfig
from shared.console import KestrelConsole
from shared.logger import KestrelLogger

from kestrel import __version__
from kestrel.core.engine import KestrelEngine
from kestrel.core.errors import ElfError
from kestrel.output.console import KestrelConsoleOutput
from kestrel.output.report import KestrelReportGenerator


@click.command("kestrel")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--json", "json_output",
    is_flag=True,
    default=False,
    help="Print the decoded image as JSON to stdout.",
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a JSON report to this path.",
)
@click.option(
    "--segments/--no-segments",
    default=None,
    help="Show the program header table.",
)
@click.option(
    "--sections/--no-sections",
    default=None,
    help="Show the section header table.",
)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="TOML configuration file.",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(__version__, prog_name="kestrel")
def kestrel_cli(
    path: str,
    json_output: bool,
    output_path: str | None,
    segments: bool | None,
    sections: bool | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Kestrel -- ELF Structure Decoder.

    Decode the identification block, file header, program headers and
    section headers of an ELF file.

    PATH is the ELF file to decode.
    """
    console = KestrelConsole()

    try:
        config = KestrelConfig.load(config_path)
    except (OSError, ValueError) as exc:
        console.error(f"Cannot load configuration: {exc}")
        sys.exit(2)

    settings = config.global_settings
    log_level = "DEBUG" if verbose or settings.debug else settings.log_level
    logger = KestrelLogger(
        "cli",
        log_level=log_level,
        log_file=settings.log_file,
        json_logs=settings.log_json,
        console_output=verbose,
    )

    engine = KestrelEngine(config=config, logger=logger)
    try:
        report = engine.inspect(path)
    except ElfError as exc:
        console.error(str(exc))
        sys.exit(1)

    reporter = KestrelReportGenerator()
    json_output = json_output or config.inspect.output_format == "json"

    if json_output:
        click.echo(reporter.render_json(report))
    else:
        show_segments = config.inspect.show_segments if segments is None else segments
        show_sections = config.inspect.show_sections if sections is None else sections
        KestrelConsoleOutput(console=console).display(
            report,
            show_segments=show_segments,
            show_sections=show_sections,
        )

    if output_path:
        report_path = reporter.generate_json(report, output_path)
        if not json_output:
            console.success(f"JSON report saved: {report_path}")


def main() -> None:
    """Entry point for the ``kestrel`` console script."""
    kestrel_cli()


if __name__ == "__main__":
    main()
