"""Kestrel core: error taxonomy, report models, and the inspection engine."""

from kestrel.core.errors import (
    ElfError,
    ElfIOError,
    InvalidClassError,
    InvalidEndianError,
    InvalidMagicError,
    NotEnoughBytesError,
)

__all__ = [
    "ElfError",
    "ElfIOError",
    "InvalidClassError",
    "InvalidEndianError",
    "InvalidMagicError",
    "NotEnoughBytesError",
]
