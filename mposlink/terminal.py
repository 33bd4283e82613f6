"""
Operator-facing terminal actions.

PosTerminal is the surface a point-of-sale screen talks to: one coroutine
per button. Input and connectivity problems never raise out of an action;
they are reported through a ``notify(message)`` callable (a toast, a status
bar, a log line) and the action returns None.

Example:
    >>> terminal = PosTerminal(TerminalSession(transport), notify=show_toast)
    >>> await terminal.toggle_connection()
    >>> response = await terminal.sale(amount_field.text)
    >>> if response is not None:
    ...     response_view.text = response.text
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from mposlink.commands import CommandBuilder, RefundValidation
from mposlink.exceptions import (
    ConnectionError,
    NotConnectedError,
    TransportError,
    ValidationError,
)
from mposlink.protocol.constants import MSG_CONNECT_FAILED
from mposlink.session import SessionState, TerminalSession

if TYPE_CHECKING:
    from mposlink.models.records import Command, SecurityConfig, TerminalResponse

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]


def log_notice(message: str) -> None:
    """Default notifier: log the notice at WARNING."""
    logger.warning("%s", message)


class PosTerminal:
    """
    Button-level actions for a POS terminal.

    Attributes:
        session: The terminal session commands go through.
        builder: Command builder used for every action.
        last_response: Response to the most recent successful action.
    """

    def __init__(
        self,
        session: TerminalSession,
        notify: Notifier | None = None,
        refund_validation: RefundValidation = RefundValidation.LEGACY,
        timeout: float | None = None,
    ) -> None:
        """
        Initialize the terminal actions.

        Args:
            session: Session with the terminal.
            notify: Called with a message for each transient notice.
            refund_validation: Range-check mode for refund operation numbers.
            timeout: Response timeout per action. None uses the session's.
        """
        self.session = session
        self.builder = CommandBuilder(refund_validation=refund_validation)
        self.last_response: TerminalResponse | None = None
        self._notify = notify or log_notice
        self._timeout = timeout

    @property
    def is_connected(self) -> bool:
        return self.session.is_connected

    async def toggle_connection(
        self,
        target: str | None = None,
        security: SecurityConfig | None = None,
    ) -> bool:
        """
        Disconnect if connected, otherwise (re)start the connection.

        A session still waiting for its terminal is torn down and started
        again. A failed connection is reported through notify.

        Returns:
            True if the terminal is connected afterwards.
        """
        if self.session.is_connected:
            await self.session.disconnect()
            return False

        if self.session.state != SessionState.DISCONNECTED:
            logger.info("Restarting connection still in %s", self.session.state.name)
            await self.session.disconnect()

        try:
            await self.session.connect(target, security)
        except (ConnectionError, TransportError) as e:
            logger.error("Could not connect to terminal: %s", e)
            self._notify(MSG_CONNECT_FAILED)
            return False

        return self.session.is_connected

    async def load_keys(self) -> TerminalResponse | None:
        return await self._run(self.builder.load_keys)

    async def last_sale(self) -> TerminalResponse | None:
        return await self._run(self.builder.last_sale)

    async def totals(self) -> TerminalResponse | None:
        return await self._run(self.builder.totals)

    async def close(self) -> TerminalResponse | None:
        return await self._run(self.builder.close)

    async def details(self) -> TerminalResponse | None:
        return await self._run(self.builder.details)

    async def sale(self, amount: int | str | None) -> TerminalResponse | None:
        """Run a sale for the amount as entered by the operator."""
        return await self._run(self.builder.sale, amount)

    async def refund(self, operation_number: int | str | None) -> TerminalResponse | None:
        """Refund the operation with the number as entered by the operator."""
        return await self._run(self.builder.refund, operation_number)

    async def _run(
        self,
        build: Callable[..., Command],
        *args: int | str | None,
    ) -> TerminalResponse | None:
        # Input is checked before connectivity
        try:
            command = build(*args)
            response = await self.session.transact(command, timeout=self._timeout)
        except (ValidationError, NotConnectedError) as e:
            self._notify(e.message)
            return None

        logger.info("Terminal answered %s with %r", command.opcode.name, response.text)
        self.last_response = response
        return response
