"""
Enumeration Bases for ELF Header Fields
========================================

ELF reserves whole ranges of type codes for operating-system and
processor specific values, so a closed enumeration would throw away
information the moment a vendor extension shows up.  The bases here keep
that information:

    - :class:`OpenIntEnum` turns any unrecognised code into an *unknown*
      pseudo-member that still carries its raw value.
    - :class:`ElfFlags` is an :class:`enum.IntFlag` that keeps bits it has
      no name for and reports them through :attr:`ElfFlags.unknown_bits`.
"""

from __future__ import annotations

from enum import IntEnum, IntFlag
from typing import Any, Optional


class OpenIntEnum(IntEnum):
    """An :class:`IntEnum` that never rejects an integer value.

    Unrecognised values become pseudo-members named ``UNKNOWN_0x...``;
    they compare equal to their raw integer and report
    ``is_known == False``.
    """

    @classmethod
    def _missing_(cls, value: Any) -> Optional[OpenIntEnum]:
        if not isinstance(value, int) or value < 0:
            return None
        obj = int.__new__(cls, value)
        obj._value_ = value
        obj._name_ = f"UNKNOWN_0x{value:x}"
        return obj

    @property
    def is_known(self) -> bool:
        """``True`` if the value is one of the named members."""
        return self._name_ in type(self).__members__

    @property
    def label(self) -> str:
        """readelf-style display name (hex for unknown codes)."""
        if self.is_known:
            return self._name_
        return f"0x{self._value_:x}"


class ElfFlags(IntFlag):
    """Bit set that retains bits without a named member."""

    @property
    def unknown_bits(self) -> int:
        """Bits set in this value that no member names."""
        known = 0
        for member in type(self).__members__.values():
            known |= int(member)
        return int(self) & ~known

    def has(self, flag: ElfFlags) -> bool:
        """Return ``True`` if every bit of *flag* is set."""
        return int(self) & int(flag) == int(flag)
