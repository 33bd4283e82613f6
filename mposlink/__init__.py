"""
mposlink - Python library for driving POS payment terminals.

This library frames commands for integrated POS terminals (STX + body +
ETX + LRC), sends them as hex payloads over a transport, and decodes the
terminal's hex responses.

Example:
    >>> from mposlink import PosTerminal, TerminalSession
    >>> from mposlink.transport import AsyncSerialTransport
    >>>
    >>> async def main():
    ...     session = TerminalSession(AsyncSerialTransport("/dev/ttyACM0"))
    ...     terminal = PosTerminal(session, notify=print)
    ...     async with session:
    ...         await terminal.toggle_connection()
    ...         response = await terminal.sale("1500")
    ...         if response is not None:
    ...             print(response.text)
"""

from mposlink.commands import CommandBuilder, RefundValidation
from mposlink.exceptions import (
    ChecksumError,
    ConnectionError,
    DecodeError,
    FrameError,
    FramingError,
    MposLinkError,
    NotConnectedError,
    ProtocolError,
    TimeoutError,
    TransportError,
    ValidationError,
)
from mposlink.models.records import (
    Command,
    OperationNumber,
    SaleAmount,
    SecurityConfig,
    SerialSettings,
    TerminalResponse,
)
from mposlink.parsers import parse_response
from mposlink.protocol import calculate_lrc, decode, encode
from mposlink.session import SessionEvent, SessionState, TerminalSession
from mposlink.terminal import PosTerminal
from mposlink.transport import AbstractTransport, AsyncSerialTransport, ConnectionResult

__version__ = "0.1.0"
__all__ = [
    # Session / terminal
    "TerminalSession",
    "SessionState",
    "SessionEvent",
    "PosTerminal",
    # Commands
    "CommandBuilder",
    "RefundValidation",
    # Protocol
    "encode",
    "decode",
    "calculate_lrc",
    "parse_response",
    # Models
    "Command",
    "SaleAmount",
    "OperationNumber",
    "SecurityConfig",
    "SerialSettings",
    "TerminalResponse",
    # Exceptions
    "MposLinkError",
    "ValidationError",
    "NotConnectedError",
    "ConnectionError",
    "ProtocolError",
    "FramingError",
    "FrameError",
    "ChecksumError",
    "DecodeError",
    "TransportError",
    "TimeoutError",
    # Transport
    "AbstractTransport",
    "AsyncSerialTransport",
    "ConnectionResult",
    # Version
    "__version__",
]
