"""
POS terminal session.

This module owns the connection to one terminal and the request/response
exchange over it.

The session implements a state machine driven by discrete events:
    DISCONNECTED -> CONNECT_REQUESTED -> CONNECTING
    CONNECTING   -> CONNECTED         -> CONNECTED
    CONNECTING   -> CONNECT_FAILED    -> DISCONNECTED
    CONNECTED    -> LINK_LOST         -> DISCONNECTED
    CONNECTED    -> DISCONNECT_REQUESTED -> DISCONNECTING -> DISCONNECTED

Connection state is only ever read from the state machine; the transport is
consulted to detect a terminal that attached or went away in between.

Example:
    >>> from mposlink import TerminalSession, CommandBuilder
    >>> from mposlink.transport import AsyncSerialTransport
    >>>
    >>> async def main():
    ...     session = TerminalSession(AsyncSerialTransport("/dev/ttyACM0"))
    ...     await session.connect()
    ...     response = await session.transact(CommandBuilder().totals())
    ...     print(response.text)
    ...     await session.disconnect()
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum, auto
from typing import TYPE_CHECKING, Final

from mposlink.exceptions import (
    ConnectionError,
    NotConnectedError,
    ProtocolError,
    TimeoutError,
)
from mposlink.parsers.response_parser import parse_response
from mposlink.protocol.constants import MSG_CONNECT_FAILED
from mposlink.protocol.frame_codec import encode
from mposlink.transport.abc import ConnectionResult

if TYPE_CHECKING:
    from mposlink.models.records import Command, SecurityConfig, TerminalResponse
    from mposlink.transport.abc import AbstractTransport

# Module logger
logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Terminal session connection states."""

    DISCONNECTED = auto()
    """No link to a terminal."""

    CONNECTING = auto()
    """Link requested; waiting for the terminal to attach."""

    CONNECTED = auto()
    """Terminal attached and ready for commands."""

    DISCONNECTING = auto()
    """Link being torn down."""


class SessionEvent(Enum):
    """Events that drive the session state machine."""

    CONNECT_REQUESTED = auto()
    CONNECTED = auto()
    CONNECT_FAILED = auto()
    LINK_LOST = auto()
    DISCONNECT_REQUESTED = auto()
    DISCONNECTED = auto()


_TRANSITIONS: Final[dict[tuple[SessionState, SessionEvent], SessionState]] = {
    (SessionState.DISCONNECTED, SessionEvent.CONNECT_REQUESTED): SessionState.CONNECTING,
    (SessionState.CONNECTING, SessionEvent.CONNECTED): SessionState.CONNECTED,
    (SessionState.CONNECTING, SessionEvent.CONNECT_FAILED): SessionState.DISCONNECTED,
    (SessionState.CONNECTING, SessionEvent.LINK_LOST): SessionState.DISCONNECTED,
    (SessionState.CONNECTING, SessionEvent.DISCONNECT_REQUESTED): SessionState.DISCONNECTING,
    (SessionState.CONNECTED, SessionEvent.LINK_LOST): SessionState.DISCONNECTED,
    (SessionState.CONNECTED, SessionEvent.DISCONNECT_REQUESTED): SessionState.DISCONNECTING,
    (SessionState.DISCONNECTING, SessionEvent.DISCONNECTED): SessionState.DISCONNECTED,
}


class TerminalSession:
    """
    Session with a single POS terminal.

    The session manages the connection lifecycle and sends commands. Each
    transact() call holds a lock for the whole send/receive exchange, so
    only one request is ever outstanding and a response cannot be taken
    for the wrong command.

    Attributes:
        state: Current connection state.
        is_connected: True when commands can be sent.
        transport: The underlying transport layer.

    Example:
        >>> session = TerminalSession(transport)
        >>> await session.connect()
        >>> response = await session.transact(builder.last_sale())
        >>> await session.disconnect()
    """

    def __init__(
        self,
        transport: AbstractTransport,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the terminal session.

        Args:
            transport: Transport layer for communication.
            timeout: Response timeout in seconds. None uses the transport's.
        """
        self._transport = transport
        self._timeout = timeout
        self._state = SessionState.DISCONNECTED
        self._connecting = False
        self._exchange_lock = asyncio.Lock()

    @property
    def state(self) -> SessionState:
        """Get the current connection state."""
        self._sync_with_transport()
        return self._state

    @property
    def is_connected(self) -> bool:
        """Check if the terminal is attached and ready for commands."""
        return self.state == SessionState.CONNECTED

    @property
    def is_busy(self) -> bool:
        """Check if a request is waiting for its response."""
        return self._exchange_lock.locked()

    @property
    def transport(self) -> AbstractTransport:
        """Get the underlying transport."""
        return self._transport

    def handle_event(self, event: SessionEvent) -> SessionState:
        """
        Apply an event to the state machine.

        Args:
            event: The event that occurred.

        Returns:
            The new state.

        Raises:
            ProtocolError: If the event is not valid in the current state.
        """
        try:
            new_state = _TRANSITIONS[(self._state, event)]
        except KeyError:
            raise ProtocolError(
                f"Invalid session event {event.name} in state {self._state.name}"
            ) from None

        logger.debug("Session %s --%s--> %s", self._state.name, event.name, new_state.name)
        self._state = new_state
        return new_state

    def _sync_with_transport(self) -> None:
        if self._connecting:
            return

        if self._state == SessionState.CONNECTED and not self._transport.is_connected:
            logger.warning("Terminal link lost on %s", self._transport.target)
            self.handle_event(SessionEvent.LINK_LOST)
        elif self._state == SessionState.CONNECTING and self._transport.is_connected:
            logger.info("Terminal attached on %s", self._transport.target)
            self.handle_event(SessionEvent.CONNECTED)

    async def connect(
        self,
        target: str | None = None,
        security: SecurityConfig | None = None,
    ) -> ConnectionResult:
        """
        Start a session with the terminal.

        A CONNECTED result moves the session to CONNECTED. A STARTED result
        leaves it CONNECTING until the transport reports the terminal
        attached.

        Args:
            target: Terminal to connect to. None uses the transport's target.
            security: TLS settings handed to the transport.

        Returns:
            The transport's connection result.

        Raises:
            ConnectionError: If the session is not disconnected, or the
                transport reports a failed connection.
            TransportError: If the transport fails while connecting.
        """
        if self.state != SessionState.DISCONNECTED:
            raise ConnectionError(f"Cannot connect: session is in {self._state.name} state")

        self.handle_event(SessionEvent.CONNECT_REQUESTED)
        logger.info("Connecting to terminal %s", target or self._transport.target)

        self._connecting = True
        try:
            result = await self._transport.connect(target, security)
        except Exception:
            self.handle_event(SessionEvent.CONNECT_FAILED)
            raise
        finally:
            self._connecting = False

        if not result.is_success:
            self.handle_event(SessionEvent.CONNECT_FAILED)
            logger.error("Connection to %s failed: %s", self._transport.target, result.name)
            raise ConnectionError(MSG_CONNECT_FAILED, result=result)

        if result == ConnectionResult.CONNECTED:
            self.handle_event(SessionEvent.CONNECTED)
            logger.info("Connected to terminal %s", self._transport.target)
        else:
            logger.info("Link started on %s, waiting for terminal", self._transport.target)

        return result

    async def disconnect(self) -> None:
        """
        End the session.

        Safe to call even if not connected. The session always ends
        DISCONNECTED, even if the transport fails while closing.
        """
        if self.state == SessionState.DISCONNECTED:
            return

        logger.info("Disconnecting from terminal %s", self._transport.target)
        self.handle_event(SessionEvent.DISCONNECT_REQUESTED)

        try:
            await self._transport.disconnect()
        finally:
            self.handle_event(SessionEvent.DISCONNECTED)
            logger.debug("Disconnected")

    async def send(self, command: Command | str) -> str:
        """
        Frame and send a command without waiting for the response.

        Args:
            command: Command model or body text.

        Returns:
            The hex payload that was sent.

        Raises:
            NotConnectedError: If no terminal is attached (nothing is sent).
            FramingError: If the command cannot be framed (nothing is sent).
            TransportError: If the transport fails to send.
        """
        self._ensure_connected()

        payload = encode(command)
        logger.debug("Sending %s as %s", command, payload)
        await self._transport.send(payload)
        return payload

    async def transact(
        self,
        command: Command | str,
        timeout: float | None = None,
    ) -> TerminalResponse:
        """
        Send a command and wait for the terminal's response.

        Args:
            command: Command model or body text.
            timeout: Override response timeout in seconds.

        Returns:
            The decoded response.

        Raises:
            NotConnectedError: If no terminal is attached (nothing is sent).
            FramingError: If the command cannot be framed (nothing is sent).
            TimeoutError: If the terminal does not answer in time.
            TransportError: If the transport fails.
        """
        effective_timeout = timeout if timeout is not None else self._timeout

        async with self._exchange_lock:
            self._ensure_connected()
            # Anything still queued is a late answer to an earlier request
            await self._transport.discard_responses()
            await self.send(command)

            try:
                raw = await self._transport.receive(effective_timeout)
            except TimeoutError:
                logger.warning("No response to %s", command)
                raise

            response = parse_response(raw)
            logger.debug("Hex response: %s", raw)
            logger.debug("ASCII response: %r", response.text)
            return response

    def _ensure_connected(self) -> None:
        """Verify the terminal is attached."""
        if not self.is_connected:
            raise NotConnectedError()

    async def __aenter__(self) -> TerminalSession:
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - disconnect."""
        await self.disconnect()

    def __repr__(self) -> str:
        return f"TerminalSession(state={self._state.name}, target={self._transport.target})"
