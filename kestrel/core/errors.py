"""
Kestrel Error Taxonomy
=======================

Every failure raised while decoding an ELF image derives from
:class:`ElfError`, so callers can catch the whole family in one place.
The first failure aborts a parse; no partially decoded image is ever
returned.

References:
    - System V Application Binary Interface, Edition 4.1, chapter 4.
"""

from __future__ import annotations

from typing import Any, Optional


def _raw(value: Any) -> Any:
    return int(value) if isinstance(value, int) else value


def _describe(value: Any) -> str:
    if isinstance(value, int) and value >= 0:
        return f"0x{value:02x}"
    return repr(value)


class ElfError(Exception):
    """Base class for every ELF decoding failure."""

    pass


class InvalidMagicError(ElfError):
    """The ``\\x7fELF`` signature is not present anywhere in the buffer."""

    def __init__(self) -> None:
        super().__init__("Unable to find ELF magic bytes in the specified data")


class NotEnoughBytesError(ElfError):
    """The buffer is too short for the structure being decoded.

    Attributes:
        remaining: Number of bytes that were available at the failing
                   position.
    """

    def __init__(self, remaining: int, needed: Optional[int] = None) -> None:
        self.remaining = remaining
        self.needed = needed
        if needed is None:
            message = f"The size {remaining} is too low for an ELF file"
        else:
            message = f"Needed {needed} bytes but only {remaining} remain"
        super().__init__(message)


class InvalidClassError(ElfError):
    """The class byte is neither ELFCLASS32 nor ELFCLASS64.

    Attributes:
        value: The offending class, as an ``int`` when it is one.
    """

    def __init__(self, value: Any) -> None:
        self.value = _raw(value)
        super().__init__(f"Invalid ELF class: {_describe(self.value)}")


class InvalidEndianError(ElfError):
    """The data-encoding byte is neither ELFDATA2LSB nor ELFDATA2MSB.

    Also raised when a read is asked for a byte order that is not an
    :class:`~kestrel.parsers.ident.ElfEndian` value at all.
    """

    def __init__(self, value: Any) -> None:
        self.value = _raw(value)
        super().__init__(f"Invalid ELF data encoding: {_describe(self.value)}")


class ElfIOError(ElfError):
    """Reading the ELF data from its source failed.

    Always raised ``from`` the underlying :class:`OSError`.
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(f"Unable to read {path}: {reason}")
