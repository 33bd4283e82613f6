"""Tests for TerminalSession."""

import pytest

from mposlink import SessionEvent, SessionState, TerminalSession
from mposlink.commands import CommandBuilder
from mposlink.exceptions import (
    ConnectionError,
    FramingError,
    NotConnectedError,
    ProtocolError,
    TimeoutError,
    TransportError,
)
from mposlink.transport.abc import ConnectionResult
from mposlink.transport.mock import MockTransport

# STX "0810|00" ETX LRC
LOAD_KEYS_RESPONSE = "02303831307C30300376"
# STX "0710|00" ETX LRC
TOTALS_RESPONSE = "02303731307C30300379"


class FailingTransport(MockTransport):
    """Mock transport whose connect() blows up."""

    async def connect(self, target=None, security=None):
        raise TransportError("port busy")


class TestSessionStateMachine:
    """Tests for session state transitions."""

    @pytest.fixture
    def session(self):
        return TerminalSession(MockTransport())

    def test_initial_state(self, session):
        assert session.state == SessionState.DISCONNECTED
        assert session.is_connected is False
        assert session.is_busy is False

    def test_valid_transition(self, session):
        assert session.handle_event(SessionEvent.CONNECT_REQUESTED) == SessionState.CONNECTING

    def test_invalid_transition(self, session):
        with pytest.raises(ProtocolError, match="CONNECTED in state DISCONNECTED"):
            session.handle_event(SessionEvent.CONNECTED)
        assert session.state == SessionState.DISCONNECTED

    def test_repr(self, session):
        assert repr(session) == "TerminalSession(state=DISCONNECTED, target=mock://pos)"


class TestSessionConnect:
    """Tests for connect() and disconnect()."""

    @pytest.fixture
    def mock_transport(self):
        return MockTransport()

    @pytest.fixture
    def session(self, mock_transport):
        return TerminalSession(mock_transport, timeout=1.0)

    @pytest.mark.asyncio
    async def test_connect_success(self, session, mock_transport):
        result = await session.connect()
        assert result == ConnectionResult.CONNECTED
        assert session.state == SessionState.CONNECTED
        assert session.is_connected is True
        assert mock_transport.connect_count == 1

    @pytest.mark.asyncio
    async def test_connect_passes_target(self, session, mock_transport):
        await session.connect("mock://counter-2")
        assert mock_transport.target == "mock://counter-2"

    @pytest.mark.asyncio
    async def test_connect_started_then_attached(self):
        """Test a started link becomes connected once the terminal attaches."""
        transport = MockTransport(connect_result=ConnectionResult.STARTED)
        session = TerminalSession(transport)

        assert await session.connect() == ConnectionResult.STARTED
        assert session.state == SessionState.CONNECTING
        assert session.is_connected is False

        transport.attach()
        assert session.state == SessionState.CONNECTED
        assert session.is_connected is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "result",
        [ConnectionResult.FAILED_NO_CONNECTION, ConnectionResult.FAILED_INTERNAL],
    )
    async def test_connect_failed_result(self, result):
        session = TerminalSession(MockTransport(connect_result=result))
        with pytest.raises(ConnectionError) as exc_info:
            await session.connect()
        assert exc_info.value.result == result
        assert session.state == SessionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_connect_transport_error(self):
        session = TerminalSession(FailingTransport())
        with pytest.raises(TransportError, match="port busy"):
            await session.connect()
        assert session.state == SessionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_connect_twice_raises(self, session):
        await session.connect()
        with pytest.raises(ConnectionError, match="CONNECTED"):
            await session.connect()

    @pytest.mark.asyncio
    async def test_disconnect(self, session, mock_transport):
        await session.connect()
        await session.disconnect()
        assert session.state == SessionState.DISCONNECTED
        assert mock_transport.is_connected is False

    @pytest.mark.asyncio
    async def test_disconnect_when_disconnected(self, session):
        await session.disconnect()
        assert session.state == SessionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_disconnect_while_connecting(self):
        session = TerminalSession(MockTransport(connect_result=ConnectionResult.STARTED))
        await session.connect()
        await session.disconnect()
        assert session.state == SessionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_link_lost(self, session, mock_transport):
        """Test the session notices the terminal going away."""
        await session.connect()
        mock_transport.drop_link()
        assert session.state == SessionState.DISCONNECTED
        assert session.is_connected is False

    @pytest.mark.asyncio
    async def test_reconnect_after_link_lost(self, session, mock_transport):
        await session.connect()
        mock_transport.drop_link()
        await session.connect()
        assert session.is_connected is True
        assert mock_transport.connect_count == 2

    @pytest.mark.asyncio
    async def test_context_manager(self, mock_transport):
        async with TerminalSession(mock_transport) as session:
            await session.connect()
            assert session.is_connected
        assert session.state == SessionState.DISCONNECTED
        assert mock_transport.is_connected is False


class TestSessionExchange:
    """Tests for send() and transact()."""

    @pytest.fixture
    def mock_transport(self):
        return MockTransport()

    @pytest.fixture
    def session(self, mock_transport):
        return TerminalSession(mock_transport, timeout=1.0)

    @pytest.mark.asyncio
    async def test_send_not_connected(self, session, mock_transport):
        """Test nothing reaches the transport without a terminal."""
        with pytest.raises(NotConnectedError):
            await session.send("0800")
        mock_transport.assert_send_count(0)

    @pytest.mark.asyncio
    async def test_transact_not_connected(self, session, mock_transport):
        with pytest.raises(NotConnectedError) as exc_info:
            await session.transact(CommandBuilder().totals())
        assert exc_info.value.message == "POS no conectado"
        mock_transport.assert_send_count(0)

    @pytest.mark.asyncio
    async def test_send_while_connecting(self):
        transport = MockTransport(connect_result=ConnectionResult.STARTED)
        session = TerminalSession(transport)
        await session.connect()
        with pytest.raises(NotConnectedError):
            await session.send("0800")

    @pytest.mark.asyncio
    async def test_send_returns_payload(self, session, mock_transport):
        await session.connect()
        payload = await session.send(CommandBuilder().load_keys())
        assert payload == "0230383030030B"
        mock_transport.assert_sent("0230383030030B")

    @pytest.mark.asyncio
    async def test_send_unframeable_command(self, session, mock_transport):
        await session.connect()
        with pytest.raises(FramingError):
            await session.send("0200|€")
        mock_transport.assert_send_count(0)

    @pytest.mark.asyncio
    async def test_transact(self, session, mock_transport):
        await session.connect()
        mock_transport.add_response(LOAD_KEYS_RESPONSE)

        response = await session.transact(CommandBuilder().load_keys())

        mock_transport.assert_sent("0230383030030B")
        assert response.raw_hex == LOAD_KEYS_RESPONSE
        assert response.fields == ("0810", "00")
        assert response.lrc_valid is True
        assert session.is_busy is False

    @pytest.mark.asyncio
    async def test_transact_sequence(self, session, mock_transport):
        """Test each command gets its own response."""
        await session.connect()
        mock_transport.add_responses("4F4B31", "4F4B32")

        first = await session.transact("0250|0")
        second = await session.transact("0700||")

        assert first.text == "OK1"
        assert second.text == "OK2"
        assert mock_transport.sent_payloads == [
            "02303235307C300348",
            "02303730307C7C0304",
        ]

    @pytest.mark.asyncio
    async def test_late_response_not_taken_by_next_command(self, session, mock_transport):
        """Test an answer arriving after a timeout is dropped before the next send."""
        await session.connect()

        with pytest.raises(TimeoutError) as exc_info:
            await session.transact("0800")
        assert exc_info.value.timeout_seconds == 1.0

        mock_transport.add_response(LOAD_KEYS_RESPONSE)
        mock_transport.set_response_callback(lambda payload: TOTALS_RESPONSE)

        response = await session.transact(CommandBuilder().totals())

        assert response.fields == ("0710", "00")
        assert response.lrc_valid is True

    @pytest.mark.asyncio
    async def test_transact_timeout_override(self, session, mock_transport):
        await session.connect()
        with pytest.raises(TimeoutError) as exc_info:
            await session.transact("0800", timeout=0.25)
        assert exc_info.value.timeout_seconds == 0.25

    @pytest.mark.asyncio
    async def test_transact_after_link_lost(self, session, mock_transport):
        await session.connect()
        mock_transport.drop_link()
        with pytest.raises(NotConnectedError):
            await session.transact("0800")
        mock_transport.assert_send_count(0)
