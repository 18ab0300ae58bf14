"""
Kestrel Inspection Engine
==========================

Reads a file (or takes bytes already in memory), decodes it with
:class:`~kestrel.parsers.elf_parser.ElfImage`, and flattens the result
into an :class:`~kestrel.core.models.ImageReport`.

The engine is the only place that touches the filesystem; the decoders
work on buffers alone.  Decoding failures are logged and re-raised
unchanged, so callers see the same :class:`~kestrel.core.errors.ElfError`
family whether they use the engine or the parser directly.
"""

from __future__ import annotations

from pathlib import Path

from shared.config import KestrelConfig
from shared.logger import KestrelLogger

from kestrel.core.errors import ElfIOError
from kestrel.core.models import ImageReport
from kestrel.parsers.elf_parser import ElfImage


class KestrelEngine:
    """Inspect ELF files and produce :class:`ImageReport` objects.

    Usage::

        engine = KestrelEngine()
        report = engine.inspect("/usr/bin/ls")
        print(report.header.machine, len(report.sections))
    """

    def __init__(
        self,
        config: KestrelConfig | None = None,
        logger: KestrelLogger | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Kestrel configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
        """
        self._config: KestrelConfig = config or KestrelConfig()
        self._logger: KestrelLogger = logger or KestrelLogger(
            "engine", console_output=False
        )

    @property
    def config(self) -> KestrelConfig:
        return self._config

    def read(self, file_path: str | Path) -> bytes:
        """Read *file_path* into memory, honouring ``max_file_size``.

        Raises:
            ElfIOError: The file is missing, unreadable, or too large.
        """
        path = Path(file_path)
        max_size = self._config.inspect.max_file_size
        try:
            file_size = path.stat().st_size
            if file_size > max_size:
                raise ElfIOError(
                    str(path),
                    f"file too large: {file_size:,} bytes (max: {max_size:,} bytes)",
                )
            return path.read_bytes()
        except OSError as exc:
            raise ElfIOError(str(path), exc.strerror or str(exc)) from exc

    def inspect(self, file_path: str | Path) -> ImageReport:
        """Read and decode the file at *file_path*.

        Raises:
            ElfError: Any read or decode failure.
        """
        self._logger.info("Inspecting %s", file_path)
        try:
            data = self.read(file_path)
        except ElfIOError as exc:
            self._logger.error("%s", exc, error_type=type(exc).__name__)
            raise
        return self.inspect_data(data, str(Path(file_path).resolve()))

    def inspect_data(self, data: bytes, file_path: str = "<memory>") -> ImageReport:
        """Decode *data* directly, without reading from disk.

        Raises:
            ElfError: Any decode failure.
        """
        with self._logger.decoding(file_path):
            image = ElfImage.parse(data)
            report = ImageReport.from_image(
                image,
                file_path,
                resolve_names=self._config.inspect.resolve_names,
            )
            self._logger.debug(
                "%s image: %d segments, %d sections",
                report.ident.elf_class,
                len(report.segments),
                len(report.sections),
            )
        return report
