"""
Command construction for the POS terminal.

The builder turns operator input into protocol commands and enforces the
input rules before anything is framed:

    Load keys    0800
    Last sale    0250|0
    Totals       0700||
    Close        0500|0
    Details      0260|1
    Sale         0200|{amount}|{ticket}|||0
    Refund       1200|{operation number}|

Example:
    >>> builder = CommandBuilder()
    >>> builder.sale("1500").body
    '0200|1500|123456|||0'
    >>> builder.totals().body
    '0700||'
"""

from __future__ import annotations

import logging
import re
from enum import Enum, auto
from typing import Final

from mposlink.exceptions import ValidationError
from mposlink.models.records import Command, OperationNumber, SaleAmount
from mposlink.protocol.constants import (
    MSG_AMOUNT_TOO_HIGH,
    MSG_AMOUNT_TOO_LOW,
    MSG_OPERATION_TOO_HIGH,
    MSG_OPERATION_TOO_LOW,
    Opcode,
    ProtocolConstants,
)

logger = logging.getLogger(__name__)

_INTEGER_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")

# Signed 64-bit range; anything outside it counts as unparseable
INT_MIN: Final[int] = -(2**63)
INT_MAX: Final[int] = 2**63 - 1
_MAX_DIGITS: Final[int] = len(str(INT_MAX))


class RefundValidation(Enum):
    """How refund operation numbers are range-checked."""

    LEGACY = auto()
    """
    Reject numbers above 0, then numbers above 999999.

    Matches the terminal app this library replaces, which only lets
    zero or negative operation numbers through.
    """

    STRICT = auto()
    """Accept 1 to 999999."""


def parse_integer(value: int | str | None) -> int:
    """
    Parse operator input as an integer.

    Anything that is not a plain optionally-signed decimal integer, or
    that falls outside the signed 64-bit range, counts as 0.

    Args:
        value: Raw input (text field contents or an int).

    Returns:
        The parsed integer, or 0 for missing or non-numeric input.

    Example:
        >>> parse_integer("1500")
        1500
        >>> parse_integer("15.00")
        0
        >>> parse_integer("9" * 20)
        0
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value if INT_MIN <= value <= INT_MAX else 0
    if value is None or not _INTEGER_PATTERN.fullmatch(value):
        return 0

    negative = value[0] == "-"
    digits = value.lstrip("+-").lstrip("0") or "0"
    if len(digits) > _MAX_DIGITS:
        return 0

    number = -int(digits) if negative else int(digits)
    if not INT_MIN <= number <= INT_MAX:
        return 0
    return number


class CommandBuilder:
    """
    Builds protocol commands from operator input.

    The builder is stateless apart from its configuration and can be
    shared. It never checks connectivity; that is the session's job.

    Attributes:
        refund_validation: Range-check mode for refund operation numbers.
        ticket_number: Ticket number sent with every sale.
    """

    def __init__(
        self,
        refund_validation: RefundValidation = RefundValidation.LEGACY,
        ticket_number: str = ProtocolConstants.DEFAULT_TICKET_NUMBER,
    ) -> None:
        self.refund_validation = refund_validation
        self.ticket_number = ticket_number

    # ===== Fixed commands =====

    def load_keys(self) -> Command:
        return Command(opcode=Opcode.LOAD_KEYS)

    def last_sale(self) -> Command:
        return Command(opcode=Opcode.LAST_SALE, fields=("0",))

    def totals(self) -> Command:
        return Command(opcode=Opcode.TOTALS, fields=("", ""))

    def close(self) -> Command:
        return Command(opcode=Opcode.CLOSE, fields=("0",))

    def details(self) -> Command:
        return Command(opcode=Opcode.DETAILS, fields=("1",))

    # ===== Parameterized commands =====

    def sale(self, amount: int | str | None) -> Command:
        """
        Build a sale command.

        Args:
            amount: Sale amount as entered.

        Returns:
            The sale command.

        Raises:
            ValidationError: If the amount is non-numeric or outside 50-999999999.
        """
        sale_amount = self.validate_sale_amount(amount)
        command = Command(
            opcode=Opcode.SALE,
            fields=(str(sale_amount), self.ticket_number, "", "", "0"),
        )
        logger.debug("Built sale command: %s", command.body)
        return command

    def refund(self, operation_number: int | str | None) -> Command:
        """
        Build a refund command.

        Args:
            operation_number: Operation number of the sale to refund.

        Returns:
            The refund command.

        Raises:
            ValidationError: If the number fails the configured range check.
        """
        number = self.validate_operation_number(operation_number)
        command = Command(opcode=Opcode.REFUND, fields=(str(number), ""))
        logger.debug("Built refund command: %s", command.body)
        return command

    # ===== Validation =====

    def validate_sale_amount(self, amount: int | str | None) -> SaleAmount:
        value = parse_integer(amount)

        if value < ProtocolConstants.MIN_SALE_AMOUNT:
            raise ValidationError(MSG_AMOUNT_TOO_LOW, field="amount", value=amount)

        if value > ProtocolConstants.MAX_SALE_AMOUNT:
            raise ValidationError(MSG_AMOUNT_TOO_HIGH, field="amount", value=amount)

        return SaleAmount(value=value)

    def validate_operation_number(self, operation_number: int | str | None) -> OperationNumber:
        value = parse_integer(operation_number)

        if self.refund_validation is RefundValidation.LEGACY:
            too_low = value > 0
        else:
            too_low = value <= 0

        if too_low:
            raise ValidationError(
                MSG_OPERATION_TOO_LOW, field="operation_number", value=operation_number
            )

        if value > ProtocolConstants.MAX_OPERATION_NUMBER:
            raise ValidationError(
                MSG_OPERATION_TOO_HIGH, field="operation_number", value=operation_number
            )

        return OperationNumber(value=value)
