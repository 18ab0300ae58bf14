"""
ELF Signature Scanner
======================

Locates the four-byte ELF signature (``\\x7fELF``) inside an arbitrary
buffer.  The signature does not have to sit at offset zero: images
embedded in firmware blobs, archives, or memory dumps are found by
sliding a four-byte window over the whole buffer.

References:
    - System V ABI, chapter 4, "ELF Identification".
"""

from __future__ import annotations

from typing import Optional, Union

BufferLike = Union[bytes, bytearray, memoryview]

# Magic number
ELF_MAGIC: bytes = b"\x7fELF"


def locate(buffer: BufferLike) -> Optional[int]:
    """Return the offset of the first ELF signature in *buffer*.

    Every window ``buffer[i:i + 4]`` with ``0 <= i <= len(buffer) - 4`` is
    compared against :data:`ELF_MAGIC`.  Buffers shorter than the
    signature return ``None`` without touching the data.

    Args:
        buffer: Raw bytes to scan.

    Returns:
        Start offset of the signature, or ``None`` when it is absent.
    """
    width = len(ELF_MAGIC)
    if len(buffer) < width:
        return None

    view = memoryview(buffer)
    for i in range(len(view) - width + 1):
        if view[i:i + width] == ELF_MAGIC:
            return i
    return None
