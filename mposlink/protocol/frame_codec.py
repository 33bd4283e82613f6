"""
Command framing for the terminal protocol.

Every command body travels inside a frame:

    +-----+---------------------------+-----+-----+
    | STX | body (opcode|field|...)   | ETX | LRC |
    | 02  | ASCII, 1 byte per char    | 03  | 1 B |
    +-----+---------------------------+-----+-----+

- The LRC is the XOR of every byte after STX, ETX included
- A frame is always len(body) + 3 bytes
- Across the SDK boundary the frame is an uppercase hex string,
  2 characters per byte, so a payload is 2 * (len(body) + 3) characters
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from mposlink.exceptions import ChecksumError, FrameError
from mposlink.protocol.checksums import append_lrc, calculate_lrc
from mposlink.protocol.constants import ProtocolConstants
from mposlink.protocol.encoding import bytes_to_hex, encode_byte, text_to_bytes

if TYPE_CHECKING:
    from mposlink.models.records import Command

_STX = bytes([ProtocolConstants.STX])
_ETX = bytes([ProtocolConstants.ETX])


@dataclass(frozen=True)
class ParsedFrame:
    """
    A received frame split into its parts.

    Attributes:
        body: Command or response text between STX and ETX.
        lrc: LRC byte as received.
        raw_frame: Complete raw frame bytes.
    """

    body: str
    lrc: int
    raw_frame: bytes

    @property
    def fields(self) -> list[str]:
        """Body split on the field separator."""
        return self.body.split(ProtocolConstants.FIELD_SEPARATOR)

    @property
    def opcode(self) -> str:
        """First field of the body."""
        return self.fields[0]

    def __repr__(self) -> str:
        return f"ParsedFrame({self.body!r}, lrc=0x{encode_byte(self.lrc)})"


def _body_of(command: str | Command) -> str:
    return command if isinstance(command, str) else command.body


def build_frame(command: str | Command) -> bytes:
    """
    Wrap a command body as STX + body + ETX + LRC.

    Args:
        command: Command body text, or a Command model.

    Returns:
        Raw frame bytes, exactly len(body) + 3 long.

    Raises:
        FramingError: If a character of the body does not fit in one byte.

    Example:
        >>> build_frame("0800")
        b'\\x020800\\x03\\x0b'
    """
    body = text_to_bytes(_body_of(command))
    return append_lrc(_STX + body + _ETX)


def encode(command: str | Command) -> str:
    """
    Frame a command and hex-encode it for the transport.

    Args:
        command: Command body text, or a Command model.

    Returns:
        Uppercase hex payload with no separators.

    Raises:
        FramingError: If a character of the body does not fit in one byte.

    Example:
        >>> encode("0800")
        '0230383030030B'
    """
    return bytes_to_hex(build_frame(command))


def parse_frame(data: bytes | bytearray, *, verify: bool = True) -> ParsedFrame:
    """
    Split a received frame into body and LRC.

    Args:
        data: Raw frame bytes (STX + body + ETX + LRC).
        verify: Check the LRC and raise on mismatch.

    Returns:
        The parsed frame.

    Raises:
        FrameError: If the frame is too short or its markers are missing.
        ChecksumError: If verify is set and the LRC does not match.
    """
    data = bytes(data)

    if len(data) < ProtocolConstants.FRAME_OVERHEAD:
        raise FrameError(f"Frame too short: {len(data)} bytes")

    if data[0] != ProtocolConstants.STX:
        raise FrameError(f"Frame does not start with STX: 0x{encode_byte(data[0])}")

    if data[-2] != ProtocolConstants.ETX:
        raise FrameError(f"ETX not found before LRC: 0x{encode_byte(data[-2])}")

    received = data[-1]
    if verify:
        expected = calculate_lrc(data[:-1])
        if expected != received:
            raise ChecksumError(expected=expected, received=received)

    return ParsedFrame(
        body=data[1:-2].decode("latin-1"),
        lrc=received,
        raw_frame=data,
    )
