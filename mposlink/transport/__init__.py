"""
Transport layer for POS terminal communication.

This package provides transport implementations for talking to payment
terminals over various physical links.

Available transports:
- AsyncSerialTransport: Async serial/USB port using pyserial-asyncio
- MockTransport: Mock transport for testing without a terminal

Example:
    >>> from mposlink.transport import AsyncSerialTransport
    >>> async with AsyncSerialTransport("/dev/ttyACM0") as transport:
    ...     await transport.connect()
    ...     await transport.send(payload_hex)
    ...     response = await transport.receive()

Testing Example:
    >>> from mposlink.transport import MockTransport
    >>> mock = MockTransport()
    >>> mock.add_response("02303831307C30300376")
"""

from mposlink.transport.abc import AbstractTransport, ConnectionResult
from mposlink.transport.mock import MockTransport, ScriptedMockTransport
from mposlink.transport.serial_async import AsyncSerialTransport

__all__ = [
    "AbstractTransport",
    "ConnectionResult",
    "AsyncSerialTransport",
    "MockTransport",
    "ScriptedMockTransport",
]
