"""
In-memory terminal link for tests.

MockTransport stands in for a real terminal so sessions and actions can
be exercised without hardware. Responses can be pre-configured
or dynamically generated using callback functions.

Example:
    >>> from mposlink.transport import MockTransport
    >>> from mposlink import TerminalSession
    >>>
    >>> mock = MockTransport()
    >>> mock.add_response("02303831307C30300376")  # "0810|00"
    >>>
    >>> session = TerminalSession(mock)
    >>> await session.connect()
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Callable

from mposlink.exceptions import TimeoutError, TransportError
from mposlink.transport.abc import AbstractTransport, ConnectionResult

if TYPE_CHECKING:
    from mposlink.models.records import SecurityConfig


class MockTransport(AbstractTransport):
    """
    Mock transport for testing without a terminal.

    This transport simulates the terminal link by serving pre-configured
    hex responses. It records every payload sent for verification in tests.

    Attributes:
        sent_payloads: List of all hex payloads sent.
        security: SecurityConfig passed to the last connect() call.
        connect_result: Result the next connect() call reports.

    Example:
        >>> mock = MockTransport()
        >>> mock.add_response("0648")
        >>>
        >>> await mock.connect()
        >>> await mock.send("0230383030030B")
        >>> assert await mock.receive() == "0648"
        >>> assert mock.sent_payloads == ["0230383030030B"]
    """

    def __init__(
        self,
        target: str = "mock://pos",
        connect_result: ConnectionResult = ConnectionResult.CONNECTED,
    ) -> None:
        """
        Create an unconnected mock link.

        Args:
            target: Identifier for the mock terminal.
            connect_result: Result returned by connect().
        """
        self._target = target
        self.connect_result = connect_result
        self._is_connected = False
        self._responses: deque[str] = deque()
        self._sent_payloads: list[str] = []
        self._response_callback: Callable[[str], str | None] | None = None
        self.security: SecurityConfig | None = None
        self.connect_count = 0

    @property
    def is_connected(self) -> bool:
        """Check if the mock link is up."""
        return self._is_connected

    @property
    def target(self) -> str:
        """Get the mock terminal identifier."""
        return self._target

    @property
    def sent_payloads(self) -> list[str]:
        """Get all payloads sent to the transport."""
        return self._sent_payloads.copy()

    @property
    def last_sent(self) -> str | None:
        """Get the most recently sent payload."""
        return self._sent_payloads[-1] if self._sent_payloads else None

    def add_response(self, response: str) -> None:
        """
        Add a response to the queue.

        Responses are returned in FIFO order by receive().

        Args:
            response: Hex string to return on next receive.
        """
        self._responses.append(response)

    def add_responses(self, *responses: str) -> None:
        """
        Add multiple responses to the queue.

        Args:
            *responses: Multiple hex responses to add.
        """
        for response in responses:
            self._responses.append(response)

    def set_response_callback(
        self,
        callback: Callable[[str], str | None] | None,
    ) -> None:
        """
        Install a function that answers each sent payload.

        The callback receives the sent payload and returns the response hex.
        If it returns None, nothing is queued for that send.

        Args:
            callback: Function that takes a sent payload and returns a response.
        """
        self._response_callback = callback

    def attach(self) -> None:
        """Simulate the terminal attaching after a STARTED connect."""
        self._is_connected = True

    def drop_link(self) -> None:
        """Simulate the terminal going away without a disconnect() call."""
        self._is_connected = False

    def clear(self) -> None:
        """Clear all sent payloads and pending responses."""
        self._sent_payloads.clear()
        self._responses.clear()

    async def connect(
        self,
        target: str | None = None,
        security: SecurityConfig | None = None,
    ) -> ConnectionResult:
        """Start the mock link and report the configured result."""
        if target is not None:
            self._target = target
        self.security = security
        self.connect_count += 1
        self._is_connected = self.connect_result == ConnectionResult.CONNECTED
        return self.connect_result

    async def disconnect(self) -> None:
        """Stop the mock link."""
        self._is_connected = False
        self._responses.clear()

    async def send(self, payload_hex: str) -> None:
        """
        Record a payload and optionally trigger the response callback.

        Args:
            payload_hex: Hex payload to send.

        Raises:
            TransportError: If the link is down.
        """
        if not self._is_connected:
            raise TransportError("Mock transport not connected")

        self._sent_payloads.append(payload_hex)

        if self._response_callback:
            response = self._response_callback(payload_hex)
            if response is not None:
                self._responses.append(response)

    async def receive(self, timeout: float | None = None) -> str:
        """
        Return the next queued response.

        Args:
            timeout: Read timeout (ignored in mock).

        Returns:
            Next queued hex response.

        Raises:
            TimeoutError: If no response is queued.
            TransportError: If the link is down.
        """
        if not self._is_connected:
            raise TransportError("Mock transport not connected")

        if self._responses:
            return self._responses.popleft()

        raise TimeoutError("No mock response available", timeout_seconds=timeout)

    async def discard_responses(self) -> None:
        """Discard pending responses."""
        self._responses.clear()

    def assert_sent(self, expected: str, index: int = -1) -> None:
        """
        Assert that a specific payload was sent.

        Args:
            expected: Expected hex payload.
            index: Index in sent_payloads (-1 for last).

        Raises:
            AssertionError: If the payload doesn't match.
        """
        if not self._sent_payloads:
            raise AssertionError("No payload sent to mock transport")

        actual = self._sent_payloads[index]
        if actual != expected:
            raise AssertionError(f"Sent payload mismatch: expected {expected!r}, got {actual!r}")

    def assert_send_count(self, expected: int) -> None:
        """
        Assert number of send operations.

        Args:
            expected: Expected number of sends.

        Raises:
            AssertionError: If count doesn't match.
        """
        actual = len(self._sent_payloads)
        if actual != expected:
            raise AssertionError(f"Send count mismatch: expected {expected}, got {actual}")


class ScriptedMockTransport(MockTransport):
    """
    Mock transport that replays a fixed conversation.

    Each expect() call adds one step; a send that does not match the
    step's request fails the test immediately.

    Example:
        >>> mock = ScriptedMockTransport()
        >>> mock.expect(request=encode("0800"), response="0230383030...")
        >>> mock.expect(response="02303730307C...")
    """

    def __init__(self, target: str = "mock://scripted") -> None:
        super().__init__(target)
        self._script: list[tuple[str | None, str]] = []
        self._script_index = 0

    def expect(
        self,
        response: str,
        request: str | None = None,
    ) -> None:
        """
        Append one conversation step.

        Args:
            response: Response to queue when the request is sent.
            request: Expected payload (None to match any).
        """
        self._script.append((request, response))

    async def send(self, payload_hex: str) -> None:
        """Send with script validation."""
        if not self._is_connected:
            raise TransportError("Mock transport not connected")

        self._sent_payloads.append(payload_hex)

        if self._script_index < len(self._script):
            expected_request, response = self._script[self._script_index]

            if expected_request is not None and payload_hex != expected_request:
                raise AssertionError(
                    f"Script mismatch at step {self._script_index}: "
                    f"expected {expected_request!r}, got {payload_hex!r}"
                )

            self._responses.append(response)
            self._script_index += 1

    def reset_script(self) -> None:
        """Rewind to the first step and drop queued answers."""
        self._script_index = 0
        self._responses.clear()
