"""
LRC (longitudinal redundancy check) calculation and validation.

The terminal protocol uses a single-byte XOR checksum:
- XOR every byte after STX, up to and including ETX
- The result is appended as one raw byte after ETX

The leading STX never contributes, and the LRC byte is never part of its
own computation.
"""

from __future__ import annotations

from functools import reduce
from operator import xor


def calculate_lrc(frame: bytes | bytearray | memoryview) -> int:
    """
    Calculate the LRC over a partial frame.

    Algorithm: XOR all bytes except the first (STX), starting from zero.

    Args:
        frame: STX + body + ETX (without the LRC byte).

    Returns:
        8-bit LRC value (0-255). Inputs of one byte or less give 0.

    Example:
        >>> calculate_lrc(b"\\x020800\\x03")
        11
    """
    return reduce(xor, bytes(frame[1:]), 0)


def validate_lrc(frame: bytes | bytearray | memoryview) -> bool:
    """
    Validate a complete frame whose last byte is the LRC.

    XOR-ing every byte after STX, the LRC included, yields zero for an
    intact frame.

    Args:
        frame: STX + body + ETX + LRC.

    Returns:
        True if the LRC matches, False otherwise (including frames too
        short to carry one).
    """
    if len(frame) < 3:
        return False
    return calculate_lrc(frame) == 0


def append_lrc(partial: bytes | bytearray) -> bytes:
    """
    Calculate the LRC and append it as a raw byte.

    Args:
        partial: STX + body + ETX.

    Returns:
        The complete frame.

    Example:
        >>> append_lrc(b"\\x020800\\x03")
        b'\\x020800\\x03\\x0b'
    """
    return bytes(partial) + bytes([calculate_lrc(partial)])
