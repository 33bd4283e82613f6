"""
Data models for POS terminal communication.

This module contains Pydantic models representing:

- Commands (opcode + fields)
- Value objects (SaleAmount, OperationNumber)
- Connection settings (SecurityConfig, SerialSettings)
- Decoded terminal responses
"""

from mposlink.models.records import (
    Command,
    OperationNumber,
    SaleAmount,
    SecurityConfig,
    SerialSettings,
    TerminalResponse,
)

__all__ = [
    # Commands
    "Command",
    # Value Objects
    "SaleAmount",
    "OperationNumber",
    # Settings
    "SecurityConfig",
    "SerialSettings",
    # Responses
    "TerminalResponse",
]
