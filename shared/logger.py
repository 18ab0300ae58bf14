"""
Kestrel Structured Logger
==========================

:class:`KestrelLogger` is the logging facade used by the engine and the
CLI.  Records go to a Rich handler on stderr and, optionally, to a
rotating log file as plain text or JSON lines.

Every record carries the component name.  Inside
:meth:`KestrelLogger.decoding` it also carries the path being decoded,
and the closing record of the scope carries the elapsed time and, on
failure, the exception type.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import time
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
    }
)

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Rotate at 10 MiB, keep five backups
_MAX_BYTES = 10_485_760
_BACKUP_COUNT = 5

# Record attributes the JSON formatter copies when present
_CONTEXT_FIELDS = ("component", "elf_path", "elapsed_ms", "error_type")


class _JSONFormatter(logging.Formatter):
    """One JSON object per record.

    ``{"timestamp", "level", "logger", "message", "component",
    "elf_path", "elapsed_ms", "error_type"}``; the last three only
    when set.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for attr in _CONTEXT_FIELDS:
            val = getattr(record, attr, None)
            if val is not None:
                entry[attr] = val
        return json.dumps(entry, ensure_ascii=False, default=str)


def _console_handler(level: int) -> logging.Handler:
    return RichHandler(
        level=level,
        console=Console(theme=_LOG_THEME, stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )


def _file_handler(path: Path, level: int, json_logs: bool) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(fmt=_TEXT_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
        )
    return handler


class KestrelLogger:
    """Logger bound to one Kestrel component (``"engine"``, ``"cli"``).

    Creating a second logger for the same component replaces, and
    closes, the handlers of the first.  With neither console nor file
    output the logger is silent.

    Usage::

        log = KestrelLogger("engine", log_file="kestrel.log", json_logs=True)
        with log.decoding("/usr/bin/ls"):
            image = ElfImage.parse(data)

    Args:
        component:       Name stamped on every record.
        log_level:       Minimum severity name (``DEBUG`` ... ``CRITICAL``).
        log_file:        Rotating log file, or ``None`` for no file output.
        json_logs:       Write JSON lines instead of text to the file.
        console_output:  Attach the Rich stderr handler.
    """

    def __init__(
        self,
        component: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        console_output: bool = True,
    ) -> None:
        self._component = component
        self._elf_path: Optional[str] = None

        level = getattr(logging, log_level.upper(), logging.INFO)
        self._logger = logging.getLogger(f"kestrel.{component}")
        self._logger.setLevel(level)
        self._logger.propagate = False

        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()

        if console_output:
            self._logger.addHandler(_console_handler(level))
        if log_file is not None:
            self._logger.addHandler(_file_handler(Path(log_file), level, json_logs))
        if not self._logger.handlers:
            self._logger.addHandler(logging.NullHandler())

    def _emit(
        self, level: int, msg: str, args: tuple[Any, ...], **fields: Any
    ) -> None:
        extra = {"component": self._component, "elf_path": self._elf_path}
        extra.update(fields)
        self._logger.log(level, msg, *args, extra=extra)

    def debug(self, msg: str, *args: Any) -> None:
        self._emit(logging.DEBUG, msg, args)

    def info(self, msg: str, *args: Any) -> None:
        self._emit(logging.INFO, msg, args)

    def error(self, msg: str, *args: Any, error_type: str | None = None) -> None:
        self._emit(logging.ERROR, msg, args, error_type=error_type)

    class _DecodeScope:
        """Binds an ELF path to records and logs how the decode ended."""

        def __init__(self, owner: KestrelLogger, elf_path: str) -> None:
            self._owner = owner
            self._elf_path = elf_path
            self._prev: Optional[str] = None
            self._start = 0.0

        def __enter__(self) -> KestrelLogger:
            self._prev = self._owner._elf_path
            self._owner._elf_path = self._elf_path
            self._start = time.perf_counter()
            self._owner.debug("Decoding %s", self._elf_path)
            return self._owner

        def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> bool:
            elapsed_ms = round((time.perf_counter() - self._start) * 1000, 3)
            try:
                if exc is None:
                    self._owner._emit(
                        logging.DEBUG,
                        "Decoded in %.3f ms", (elapsed_ms,),
                        elapsed_ms=elapsed_ms,
                    )
                else:
                    self._owner._emit(
                        logging.ERROR,
                        "Decoding failed: %s", (exc,),
                        elapsed_ms=elapsed_ms,
                        error_type=exc_type.__name__,
                    )
            finally:
                self._owner._elf_path = self._prev
            return False

    def decoding(self, elf_path: str) -> _DecodeScope:
        """Context manager around one decode; exceptions propagate unchanged."""
        return self._DecodeScope(self, elf_path)

    @property
    def underlying(self) -> logging.Logger:
        """The stdlib :class:`logging.Logger` behind this facade."""
        return self._logger
