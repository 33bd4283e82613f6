"""Tests for MockTransport."""

import pytest

from mposlink.exceptions import TimeoutError, TransportError
from mposlink.models.records import SecurityConfig
from mposlink.transport.abc import ConnectionResult
from mposlink.transport.mock import MockTransport, ScriptedMockTransport


class TestMockTransport:
    """Tests for MockTransport class."""

    @pytest.fixture
    def transport(self):
        """Create a MockTransport instance."""
        return MockTransport()

    @pytest.mark.asyncio
    async def test_connect_disconnect(self, transport):
        """Test starting and stopping the link."""
        assert not transport.is_connected
        assert await transport.connect() == ConnectionResult.CONNECTED
        assert transport.is_connected
        await transport.disconnect()
        assert not transport.is_connected

    @pytest.mark.asyncio
    async def test_connect_records_target_and_security(self, transport):
        security = SecurityConfig()
        await transport.connect("mock://other", security)
        assert transport.target == "mock://other"
        assert transport.security is security
        assert transport.connect_count == 1

    @pytest.mark.asyncio
    async def test_started_result_waits_for_attach(self):
        """Test a STARTED link is not connected until attached."""
        transport = MockTransport(connect_result=ConnectionResult.STARTED)
        assert await transport.connect() == ConnectionResult.STARTED
        assert not transport.is_connected
        transport.attach()
        assert transport.is_connected

    @pytest.mark.asyncio
    async def test_failed_result(self):
        transport = MockTransport(connect_result=ConnectionResult.FAILED_NO_CONNECTION)
        assert await transport.connect() == ConnectionResult.FAILED_NO_CONNECTION
        assert not transport.is_connected

    @pytest.mark.asyncio
    async def test_send_when_disconnected_raises(self, transport):
        with pytest.raises(TransportError):
            await transport.send("0230383030030B")
        assert transport.sent_payloads == []

    @pytest.mark.asyncio
    async def test_receive_when_disconnected_raises(self, transport):
        with pytest.raises(TransportError):
            await transport.receive()

    @pytest.mark.asyncio
    async def test_send_records_payload(self, transport):
        await transport.connect()
        await transport.send("0230383030030B")
        assert transport.sent_payloads == ["0230383030030B"]
        assert transport.last_sent == "0230383030030B"

    @pytest.mark.asyncio
    async def test_receive_fifo(self, transport):
        """Test queued responses come back in order."""
        await transport.connect()
        transport.add_responses("01", "02")
        transport.add_response("03")
        assert await transport.receive() == "01"
        assert await transport.receive() == "02"
        assert await transport.receive() == "03"

    @pytest.mark.asyncio
    async def test_receive_timeout(self, transport):
        await transport.connect()
        with pytest.raises(TimeoutError) as exc_info:
            await transport.receive(timeout=0.5)
        assert exc_info.value.timeout_seconds == 0.5

    @pytest.mark.asyncio
    async def test_response_callback(self, transport):
        """Test dynamic responses."""
        await transport.connect()
        transport.set_response_callback(lambda payload: "06" if payload.startswith("02") else None)
        await transport.send("0230383030030B")
        await transport.send("FF")
        assert await transport.receive() == "06"
        with pytest.raises(TimeoutError):
            await transport.receive()

    @pytest.mark.asyncio
    async def test_discard_responses(self, transport):
        await transport.connect()
        transport.add_response("06")
        await transport.discard_responses()
        with pytest.raises(TimeoutError):
            await transport.receive()

    @pytest.mark.asyncio
    async def test_drop_link(self, transport):
        await transport.connect()
        transport.drop_link()
        assert not transport.is_connected

    @pytest.mark.asyncio
    async def test_context_manager(self, transport):
        async with transport:
            await transport.connect()
            assert transport.is_connected
        assert not transport.is_connected

    @pytest.mark.asyncio
    async def test_assert_helpers(self, transport):
        await transport.connect()
        await transport.send("AA")
        transport.assert_sent("AA")
        transport.assert_send_count(1)
        with pytest.raises(AssertionError):
            transport.assert_sent("BB")
        with pytest.raises(AssertionError):
            transport.assert_send_count(2)

    def test_assert_sent_without_payloads(self, transport):
        with pytest.raises(AssertionError, match="No payload"):
            transport.assert_sent("AA")


class TestScriptedMockTransport:
    """Tests for ScriptedMockTransport."""

    @pytest.mark.asyncio
    async def test_script_sequence(self):
        transport = ScriptedMockTransport()
        transport.expect(response="06", request="AA")
        transport.expect(response="15")
        await transport.connect()

        await transport.send("AA")
        assert await transport.receive() == "06"
        await transport.send("BB")
        assert await transport.receive() == "15"

    @pytest.mark.asyncio
    async def test_script_mismatch(self):
        transport = ScriptedMockTransport()
        transport.expect(response="06", request="AA")
        await transport.connect()

        with pytest.raises(AssertionError, match="step 0"):
            await transport.send("BB")

    @pytest.mark.asyncio
    async def test_reset_script(self):
        transport = ScriptedMockTransport()
        transport.expect(response="06")
        await transport.connect()

        await transport.send("AA")
        transport.reset_script()
        await transport.send("AA")
        assert await transport.receive() == "06"
        with pytest.raises(TimeoutError):
            await transport.receive()
