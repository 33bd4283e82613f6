"""
Serial link to a POS terminal.

This module provides the transport for terminals attached over a serial or
USB CDC link. Commands are handed over as hex payloads and written as raw
frame bytes; responses are read back as raw frames and handed up as hex.

Serial Configuration:
- Baud rate: 115200 (default)
- Data bits: 8
- Parity: None
- Stop bits: 1
- Flow control: None

Response framing on the wire:

    [noise/ACK ...] STX body ETX LRC

Bytes before STX are dropped; the frame ends with the single byte after ETX.

Example:
    >>> transport = AsyncSerialTransport("/dev/ttyACM0")
    >>> async with transport:
    ...     await transport.connect()
    ...     await transport.send(encode("0800"))
    ...     response = await transport.receive(timeout=60.0)
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Final

import serial
import serial_asyncio

from mposlink.exceptions import TimeoutError, TransportError
from mposlink.protocol.constants import ProtocolConstants
from mposlink.protocol.encoding import bytes_to_hex, hex_to_bytes
from mposlink.transport.abc import AbstractTransport, ConnectionResult

if TYPE_CHECKING:
    from mposlink.models.records import SecurityConfig, SerialSettings

logger = logging.getLogger(__name__)

_DRAIN_CHUNK: Final[int] = 4096
_DRAIN_POLL_SECONDS: Final[float] = 0.01


class AsyncSerialTransport(AbstractTransport):
    """
    Terminal link over a serial or USB CDC port.

    Frames travel as raw bytes on the wire; the session above only ever
    sees hex payloads.

    Attributes:
        target: Serial port path (e.g., "/dev/ttyACM0", "COM3").
        is_connected: Whether the port is currently open.

    Example:
        >>> transport = AsyncSerialTransport("/dev/ttyACM0", baudrate=115200)
        >>> await transport.connect()
        >>> try:
        ...     await transport.send("0230383030030B")
        ...     response = await transport.receive(timeout=60.0)
        ... finally:
        ...     await transport.disconnect()
    """

    def __init__(
        self,
        port: str,
        baudrate: int = ProtocolConstants.DEFAULT_BAUD_RATE,
        default_timeout: float = ProtocolConstants.DEFAULT_RECEIVE_TIMEOUT,
    ) -> None:
        """
        Set up the transport without opening the port.

        Args:
            port: Serial port path (e.g., "/dev/ttyACM0", "COM3").
            baudrate: Baud rate (default: 115200).
            default_timeout: Default receive timeout in seconds.
        """
        self._port = port
        self._baudrate = baudrate
        self._default_timeout = default_timeout
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._serial_instance: serial.Serial | None = None

    @classmethod
    def from_settings(cls, settings: SerialSettings) -> AsyncSerialTransport:
        """Create a transport from validated serial settings."""
        return cls(settings.port, baudrate=settings.baudrate, default_timeout=settings.timeout)

    @property
    def is_connected(self) -> bool:
        """True while the port is open."""
        return (
            self._writer is not None
            and not self._writer.is_closing()
            and self._reader is not None
        )

    @property
    def target(self) -> str:
        """Port path, e.g. /dev/ttyACM0."""
        return self._port

    @property
    def baudrate(self) -> int:
        """Line speed in baud."""
        return self._baudrate

    async def connect(
        self,
        target: str | None = None,
        security: SecurityConfig | None = None,
    ) -> ConnectionResult:
        """
        Open the serial port.

        A serial link has no TLS layer; a security config with TLS enabled
        is refused rather than silently ignored.

        Args:
            target: Port path overriding the one given at construction.
            security: TLS settings (must have TLS disabled).

        Returns:
            CONNECTED once the port is open.

        Raises:
            TransportError: If TLS is requested or the port cannot be opened.
        """
        if security is not None and security.tls_enabled:
            raise TransportError("TLS is not available over a serial link")

        if target is not None and target != self._port:
            await self.disconnect()
            self._port = target

        if self.is_connected:
            return ConnectionResult.CONNECTED

        try:
            self._reader, self._writer = await serial_asyncio.open_serial_connection(
                url=self._port,
                baudrate=self._baudrate,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                bytesize=serial.EIGHTBITS,
                # No flow control
                xonxoff=False,
                rtscts=False,
                dsrdtr=False,
            )
            self._serial_instance = getattr(self._writer.transport, "serial", None)
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Cannot open {self._port}: {e}") from e

        logger.debug("Opened %s at %d baud", self._port, self._baudrate)
        return ConnectionResult.CONNECTED

    async def disconnect(self) -> None:
        """
        Close the serial port.

        Idempotent; a port that is already closed is left alone.
        """
        if self._writer is not None:
            self._writer.close()
            try:
                await self._writer.wait_closed()
            except (OSError, serial.SerialException) as e:
                logger.debug("Error while closing %s: %s", self._port, e)

        self._reader = None
        self._writer = None
        self._serial_instance = None

    async def send(self, payload_hex: str) -> None:
        """
        Write a hex payload to the port as raw frame bytes.

        Args:
            payload_hex: Hex payload from the frame codec.

        Raises:
            TransportError: If the port is not open, the payload is not
                valid hex, or the write fails.
        """
        if not self.is_connected:
            raise TransportError(f"{self._port} is not open")

        try:
            data = hex_to_bytes(payload_hex)
        except ValueError as e:
            raise TransportError(f"Payload is not valid hex: {e}") from e

        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Write to {self._port} failed: {e}") from e

    async def receive(self, timeout: float | None = None) -> str:
        """
        Read one response frame from the port.

        Args:
            timeout: Seconds to wait for the whole frame. None uses the
                default timeout.

        Returns:
            The frame (STX through LRC) as an uppercase hex string.

        Raises:
            TimeoutError: If the frame is not complete in time.
            TransportError: If the port is not open or closes mid-frame.
        """
        if not self.is_connected:
            raise TransportError(f"{self._port} is not open")

        limit = self._default_timeout if timeout is None else timeout

        try:
            frame = await asyncio.wait_for(self._read_frame(), timeout=limit)
        except asyncio.TimeoutError:
            raise TimeoutError(
                "Timeout waiting for terminal response",
                timeout_seconds=limit,
            ) from None
        except asyncio.LimitOverrunError as e:
            raise TransportError(
                f"No ETX within {e.consumed} bytes from {self._port}"
            ) from e
        except asyncio.IncompleteReadError as e:
            if e.partial:
                raise TransportError(
                    f"{self._port} closed mid-frame after {bytes_to_hex(e.partial)}"
                ) from e
            raise TransportError(f"{self._port} closed while waiting for a frame") from e
        except (OSError, serial.SerialException) as e:
            raise TransportError(f"Read from {self._port} failed: {e}") from e

        return bytes_to_hex(frame)

    async def _read_frame(self) -> bytes:
        while True:
            first = await self._reader.readexactly(1)
            if first[0] == ProtocolConstants.STX:
                break
            logger.debug("Dropping 0x%02X before STX", first[0])

        rest = await self._reader.readuntil(bytes([ProtocolConstants.ETX]))
        lrc = await self._reader.readexactly(1)
        return first + rest + lrc

    async def discard_responses(self) -> None:
        """
        Drop unread input, both in the port and in the asyncio reader.

        The reader is drained until it stays empty for a short poll.
        """
        if self._serial_instance is not None:
            try:
                self._serial_instance.reset_input_buffer()
            except serial.SerialException as e:
                logger.debug("Could not reset input buffer: %s", e)

        if self._reader is None:
            return

        dropped = 0
        while True:
            try:
                chunk = await asyncio.wait_for(
                    self._reader.read(_DRAIN_CHUNK), timeout=_DRAIN_POLL_SECONDS
                )
            except asyncio.TimeoutError:
                break
            if not chunk:
                break
            dropped += len(chunk)

        if dropped:
            logger.debug("Discarded %d stale bytes from %s", dropped, self._port)

    def __repr__(self) -> str:
        status = "open" if self.is_connected else "closed"
        return f"AsyncSerialTransport({self._port!r}, baudrate={self._baudrate}, {status})"
