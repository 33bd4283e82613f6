"""
Exception hierarchy for mposlink.

All exceptions inherit from MposLinkError, providing a clean hierarchy
for error handling:

1. User input errors (ValidationError) are recoverable and carry the
   message meant for the operator
2. Connectivity errors (NotConnectedError, ConnectionError) are distinct
   from protocol errors
3. Protocol errors (framing, checksum, decode) carry the offending position
   or bytes for debugging
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from mposlink.transport.abc import ConnectionResult


class MposLinkError(Exception):
    """
    Base exception for all mposlink errors.

    All library-specific exceptions inherit from this class, allowing
    callers to catch all mposlink errors with a single except clause.
    """

    pass


class ValidationError(MposLinkError):
    """
    User-supplied value rejected before a command is built.

    Raised when a sale amount or refund operation number is non-numeric or
    out of range. The message is suitable for showing to the operator as is;
    no command is sent.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.value = value


class NotConnectedError(MposLinkError):
    """
    Command issued while no terminal session is active.

    Nothing is written to the transport when this is raised.
    """

    def __init__(self, message: str = "POS no conectado") -> None:
        super().__init__(message)
        self.message = message


class ConnectionError(MposLinkError):  # noqa: A001 - intentionally shadows builtin
    """
    Terminal connection error.

    Raised when the transport cannot start a session with the terminal.
    The result attribute carries the adapter's reported outcome.
    """

    def __init__(
        self,
        message: str = "No se pudo conectar al POS",
        *,
        result: ConnectionResult | None = None,
    ) -> None:
        super().__init__(message)
        self.result = result

    def __str__(self) -> str:
        base = super().__str__()
        if self.result is not None:
            return f"{base} ({self.result.name})"
        return base


class ProtocolError(MposLinkError):
    """
    Protocol-level error.

    Raised when the wire format is violated, such as:
    - A command that cannot be represented as single bytes
    - A malformed received frame
    - An invalid session state transition
    """

    pass


class FramingError(ProtocolError):
    """
    Command cannot be framed for the wire.

    Every character of a frame must fit in one byte. A character above
    0xFF is rejected rather than truncated.
    """

    def __init__(
        self,
        message: str = "Command contains a character outside the single-byte range",
        *,
        position: int | None = None,
        character: str | None = None,
    ) -> None:
        super().__init__(message)
        self.position = position
        self.character = character

    def __str__(self) -> str:
        base = super().__str__()
        if self.position is not None and self.character is not None:
            return f"{base} (U+{ord(self.character):04X} at position {self.position})"
        return base


class FrameError(ProtocolError):
    """
    Received frame is malformed.

    Raised when a frame is too short or is missing its STX/ETX markers.
    """

    pass


class ChecksumError(ProtocolError):
    """
    LRC validation failure.

    Raised when a received frame's LRC doesn't match the calculated value.
    This typically indicates data corruption during transmission.
    """

    def __init__(
        self,
        message: str = "LRC validation failed",
        *,
        expected: int | None = None,
        received: int | None = None,
    ) -> None:
        super().__init__(message)
        self.expected = expected
        self.received = received

    def __str__(self) -> str:
        base = super().__str__()
        if self.expected is not None and self.received is not None:
            return f"{base} (expected 0x{self.expected:02X}, got 0x{self.received:02X})"
        return base


class DecodeError(ProtocolError):
    """
    Hex response could not be decoded cleanly.

    Only raised by strict decoding. The default decoder skips anything it
    cannot match.
    """

    def __init__(
        self,
        message: str,
        *,
        skipped: int = 0,
        raw_data: str | None = None,
    ) -> None:
        super().__init__(message)
        self.skipped = skipped
        self.raw_data = raw_data

    def __str__(self) -> str:
        parts = [super().__str__(), f"skipped={self.skipped}"]
        if self.raw_data:
            # Truncate raw data for display
            display_data = self.raw_data[:40] + "..." if len(self.raw_data) > 40 else self.raw_data
            parts.append(f"data={display_data}")
        return " ".join(parts)


class TransportError(MposLinkError):
    """
    Transport-level error.

    Raised for low-level transport issues:
    - Serial port errors
    - I/O errors
    - Writing to a closed link
    """

    pass


class TimeoutError(TransportError):  # noqa: A001 - intentionally shadows builtin
    """
    Communication timeout.

    Raised when a response is not received within the expected time.
    """

    def __init__(
        self,
        message: str = "Communication timeout",
        *,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

    def __str__(self) -> str:
        base = super().__str__()
        if self.timeout_seconds is not None:
            return f"{base} (after {self.timeout_seconds:.1f}s)"
        return base
