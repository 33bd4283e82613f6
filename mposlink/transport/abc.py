"""
Abstract transport interface for POS terminal communication.

This module defines the abstract base class for all transport implementations.
A transport owns the link to one terminal and moves hex payloads across it.

The transport layer is responsible for:
- Starting and stopping the terminal link
- Sending framed, hex-encoded commands
- Delivering raw hex responses through a response channel
- Timeout handling

Implementations:
- AsyncSerialTransport: pyserial-asyncio based serial/USB link
- MockTransport: For testing without hardware
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from types import TracebackType

    from mposlink.models.records import SecurityConfig


class ConnectionResult(Enum):
    """Outcome reported by a transport when asked to connect."""

    STARTED = auto()
    """Link started; the terminal will attach shortly."""

    CONNECTED = auto()
    """Link started and the terminal is attached."""

    FAILED_NO_CONNECTION = auto()
    """No route to the terminal (port missing, no network)."""

    FAILED_INTERNAL = auto()
    """The transport failed internally."""

    @property
    def is_success(self) -> bool:
        """True for STARTED and CONNECTED."""
        return self in (ConnectionResult.STARTED, ConnectionResult.CONNECTED)


class AbstractTransport(ABC):
    """
    Abstract base class for POS terminal transports.

    Transports provide async send/receive operations for one terminal. All
    transport implementations must inherit from this class and implement
    all abstract methods.

    Responses are pulled with receive() rather than pushed to a callback,
    so each request can await exactly one response:

        await transport.connect()
        await transport.send(payload_hex)
        raw = await transport.receive(timeout=60.0)

    Transports support async context manager protocol; leaving the block
    disconnects:

        async with AsyncSerialTransport("/dev/ttyACM0") as transport:
            await transport.connect()
            ...

    Attributes:
        is_connected: Whether the terminal link is currently up.
        target: Identifier for the terminal (e.g., serial port name).
    """

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """
        Check if the terminal link is currently up.

        Returns:
            True if connected and ready for I/O, False otherwise.
        """
        ...

    @property
    @abstractmethod
    def target(self) -> str:
        """
        Get the terminal identifier.

        Returns:
            Port name or address string (e.g., "/dev/ttyACM0").
        """
        ...

    @abstractmethod
    async def connect(
        self,
        target: str | None = None,
        security: SecurityConfig | None = None,
    ) -> ConnectionResult:
        """
        Start the link to the terminal.

        Args:
            target: Terminal to connect to. None uses the configured target.
            security: TLS settings. None means TLS disabled.

        Returns:
            The outcome of the attempt.

        Raises:
            TransportError: If the link fails in a way the transport cannot
                report as a ConnectionResult.
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """
        Stop the link and drop any pending responses.

        Safe to call multiple times (idempotent).
        """
        ...

    @abstractmethod
    async def send(self, payload_hex: str) -> None:
        """
        Send a framed, hex-encoded command.

        Args:
            payload_hex: Uppercase hex payload from the frame codec.

        Raises:
            TransportError: If the link is down or the write fails.
        """
        ...

    @abstractmethod
    async def receive(self, timeout: float | None = None) -> str:
        """
        Wait for the next raw response.

        Args:
            timeout: Seconds to wait. None uses the transport default.

        Returns:
            Raw response as a hex string.

        Raises:
            TimeoutError: If no response arrives in time.
            TransportError: If the link is down or the read fails.
        """
        ...

    @abstractmethod
    async def discard_responses(self) -> None:
        """
        Drop responses received but not yet consumed.

        Called before every request so a response that arrived after an
        earlier timeout cannot be taken as the new answer.
        """
        ...

    async def __aenter__(self) -> AbstractTransport:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - disconnects the transport."""
        await self.disconnect()
