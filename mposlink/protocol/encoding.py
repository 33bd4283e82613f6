"""
Hex encoding utilities for the terminal protocol.

The payment SDK boundary carries frames as uppercase hex strings. Each byte
is represented as two hexadecimal characters (0-9, A-F) with no separator.

For example:
- Byte 0x02 (STX) is transmitted as "02"
- The text "0800" is transmitted as "30383030"
"""

from __future__ import annotations

from typing import Final

from mposlink.exceptions import FramingError
from mposlink.protocol.constants import ProtocolConstants

# Pre-computed lookup table for fast encoding
_HEX_CHARS: Final[str] = "0123456789ABCDEF"


def encode_byte(value: int) -> str:
    """
    Encode a byte value as 2 uppercase hex characters.

    Args:
        value: Byte value (0-255).

    Returns:
        2-character hex representation.

    Raises:
        ValueError: If value is not in range 0-255.

    Example:
        >>> encode_byte(0x02)
        '02'
    """
    if not 0 <= value <= 255:
        raise ValueError(f"Byte value must be 0-255, got {value}")
    return _HEX_CHARS[value >> 4] + _HEX_CHARS[value & 0x0F]


def text_to_bytes(text: str) -> bytes:
    """
    Convert text to wire bytes, one byte per character.

    Args:
        text: Text whose characters all fit in a single byte.

    Returns:
        One byte per character (the character's code point).

    Raises:
        FramingError: If a character's code point exceeds 0xFF.
    """
    for position, char in enumerate(text):
        if ord(char) > ProtocolConstants.MAX_BYTE_VALUE:
            raise FramingError(position=position, character=char)
    return text.encode("latin-1")


def text_to_hex(text: str) -> str:
    """
    Render each character of text as its code point in 2 hex digits.

    Args:
        text: Text whose characters all fit in a single byte.

    Returns:
        Uppercase hex string, 2 characters per input character.

    Raises:
        FramingError: If a character's code point exceeds 0xFF.

    Example:
        >>> text_to_hex("0800")
        '30383030'
    """
    return bytes_to_hex(text_to_bytes(text))


def hex_to_bytes(hex_string: str | bytes) -> bytes:
    """
    Convert a strict hex string to bytes.

    Args:
        hex_string: Hexadecimal string (must be even length).

    Returns:
        Decoded bytes.

    Raises:
        ValueError: If string is not valid hex or has odd length.

    Example:
        >>> hex_to_bytes("0230383030030B")
        b'\\x020800\\x03\\x0b'
    """
    if isinstance(hex_string, bytes):
        hex_string = hex_string.decode("ascii")

    return bytes.fromhex(hex_string)


def bytes_to_hex(data: bytes | bytearray | memoryview) -> str:
    """
    Convert bytes to an uppercase hex string.

    Args:
        data: Binary data to encode.

    Returns:
        Uppercase hexadecimal string.

    Example:
        >>> bytes_to_hex(b'\\x020800')
        '0230383030'
    """
    return bytes(data).hex().upper()
