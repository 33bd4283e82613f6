"""
POS integrado protocol opcodes and constants.

Commands are ASCII text: a 4-digit opcode followed by fields joined by
``|``. On the wire each command is wrapped as STX + body + ETX + LRC.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class Opcode(str, Enum):
    """
    Command opcodes understood by the terminal firmware.

    The opcode is always the first field of a command body. Field count and
    meaning after it are fixed per opcode.
    """

    SALE = "0200"
    """Card sale for an amount."""

    LAST_SALE = "0250"
    """Reprint / query the last sale."""

    DETAILS = "0260"
    """Sales detail report."""

    CLOSE = "0500"
    """Close the terminal's batch."""

    TOTALS = "0700"
    """Batch totals."""

    LOAD_KEYS = "0800"
    """Load encryption keys from the host."""

    REFUND = "1200"
    """Refund (cancel) a previous operation."""


class ProtocolConstants:
    """
    Protocol timing, delimiters and validation limits.
    """

    # ===== Frame Delimiters =====

    STX: Final[int] = 0x02
    """Start of text, first byte of every frame."""

    ETX: Final[int] = 0x03
    """End of text, precedes the LRC byte."""

    FIELD_SEPARATOR: Final[str] = "|"
    """Separator between command fields."""

    FRAME_OVERHEAD: Final[int] = 3
    """STX + ETX + LRC bytes added around a command body."""

    MAX_BYTE_VALUE: Final[int] = 0xFF
    """Highest code point that fits in a single wire byte."""

    # ===== Validation Limits =====

    MIN_SALE_AMOUNT: Final[int] = 50
    """Smallest accepted sale amount."""

    MAX_SALE_AMOUNT: Final[int] = 999_999_999
    """Largest accepted sale amount."""

    MAX_OPERATION_NUMBER: Final[int] = 999_999
    """Largest operation number accepted for a refund."""

    DEFAULT_TICKET_NUMBER: Final[str] = "123456"
    """Ticket number sent with every sale."""

    # ===== Timing / Serial Port Configuration =====

    DEFAULT_RECEIVE_TIMEOUT: Final[float] = 120.0
    """Seconds to wait for a transaction response (card holder interaction)."""

    DEFAULT_BAUD_RATE: Final[int] = 115200
    """Default serial baud rate."""


# Operator-facing notices
MSG_NOT_CONNECTED: Final[str] = "POS no conectado"
MSG_CONNECT_FAILED: Final[str] = "No se pudo conectar al POS"
MSG_AMOUNT_TOO_LOW: Final[str] = "El monto debe ser mayor o igual a $50"
MSG_AMOUNT_TOO_HIGH: Final[str] = "El monto debe ser menor o igual a $999.999.999"
MSG_OPERATION_TOO_LOW: Final[str] = "El número de operación debe ser mayor a 0"
MSG_OPERATION_TOO_HIGH: Final[str] = "El número de operación debe ser menor o igual a 999999"
