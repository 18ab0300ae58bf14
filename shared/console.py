"""
Kestrel Console Interface
==========================

Rich-powered console abstraction used by the Kestrel CLI and output
renderers.

The class wraps :class:`rich.console.Console` and adds convenience methods
for the banner, section rules and severity-coloured messages,
all with consistent styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.text import Text
from rich.theme import Theme

# ---------------------------------------------------------------------------
# Theme -- consistent palette across all Kestrel output
# ---------------------------------------------------------------------------
_KESTREL_THEME = Theme(
    {
        "kestrel.banner": "bold bright_cyan",
        "kestrel.section": "bold bright_magenta",
        "kestrel.success": "bold green",
        "kestrel.warning": "bold yellow",
        "kestrel.error": "bold red",
        "kestrel.info": "bold bright_blue",
        "kestrel.dim": "dim white",
        "kestrel.highlight": "bold bright_white",
    }
)

_BANNER_TITLE = "KESTREL"
_TAGLINE = "ELF Structure Decoder"


class KestrelConsole:
    """Unified console interface for Kestrel output.

    Usage::

        con = KestrelConsole()
        con.banner()
        con.section("Program Headers")
        con.success("Image decoded")
    """

    def __init__(self, *, quiet: bool = False, record: bool = False) -> None:
        """Initialise the console.

        Args:
            quiet:  Suppress all output (useful in library / test mode).
            record: Enable Rich recording for text / HTML export.
        """
        self._console = Console(
            theme=_KESTREL_THEME,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    @property
    def rich(self) -> Console:
        """Direct access to the underlying Rich Console instance."""
        return self._console

    # ------------------------------------------------------------------ #
    #  Banner / sections
    # ------------------------------------------------------------------ #

    def banner(self, version: str = "1.0.0") -> None:
        """Display the Kestrel banner panel."""
        text = Text.from_markup(
            f"[kestrel.banner]{_BANNER_TITLE}[/kestrel.banner]\n"
            f"[kestrel.highlight]{_TAGLINE}[/kestrel.highlight]\n"
            f"[kestrel.dim]Version: {version}[/kestrel.dim]"
        )
        panel = Panel(
            Align.center(text),
            border_style="bright_cyan",
            padding=(0, 2),
        )
        self._console.print(panel)

    def section(self, title: str) -> None:
        """Print a prominent section header."""
        self._console.rule(
            f"  {title}  ",
            style="kestrel.section",
            characters="─",
        )
        self._console.print()

    # ------------------------------------------------------------------ #
    #  Message helpers (severity-coloured)
    # ------------------------------------------------------------------ #

    def success(self, message: str) -> None:
        self._console.print(
            f"[kestrel.success][✔] SUCCESS:[/kestrel.success] {message}"
        )

    def warning(self, message: str) -> None:
        self._console.print(
            f"[kestrel.warning][⚠] WARNING:[/kestrel.warning] {message}"
        )

    def error(self, message: str) -> None:
        self._console.print(
            f"[kestrel.error][✘] ERROR:[/kestrel.error] {message}"
        )

    def info(self, message: str) -> None:
        self._console.print(
            f"[kestrel.info][ℹ] INFO:[/kestrel.info] {message}"
        )

    # ------------------------------------------------------------------ #
    #  Utility
    # ------------------------------------------------------------------ #

    def print(self, *args: Any, **kwargs: Any) -> None:
        """Proxy to :meth:`rich.console.Console.print`."""
        self._console.print(*args, **kwargs)

    def blank(self, count: int = 1) -> None:
        """Print *count* blank lines."""
        for _ in range(count):
            self._console.print()

    def export_text(self) -> str:
        """Export recorded console output as plain text (requires ``record=True``)."""
        return self._console.export_text()
