"""
Command-line tool for POS terminal payloads.

    mposlink encode "0200|1500|123456|||0"
    mposlink decode 02303831307C30300376 --fields
    mposlink send --port /dev/ttyACM0 sale 1500
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from mposlink.commands import RefundValidation
from mposlink.exceptions import FramingError, MposLinkError
from mposlink.models.records import SerialSettings
from mposlink.parsers.response_parser import parse_response
from mposlink.protocol.constants import ProtocolConstants
from mposlink.protocol.frame_codec import encode
from mposlink.protocol.response_decoder import decode_with_diagnostics
from mposlink.session import TerminalSession
from mposlink.terminal import PosTerminal
from mposlink.transport.serial_async import AsyncSerialTransport

logger = logging.getLogger(__name__)

ACTIONS = ("load-keys", "last-sale", "totals", "close", "details", "sale", "refund")
VALUE_ACTIONS = ("sale", "refund")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="mposlink", description="POS terminal protocol tool")
    ap.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    enc = sub.add_parser("encode", help="frame a command body and print the hex payload")
    enc.add_argument("body", help='command body, e.g. "0700||"')

    dec = sub.add_parser("decode", help="decode a hex response")
    dec.add_argument("hex", help="raw hex response")
    dec.add_argument("--fields", action="store_true", help="print protocol fields, one per line")
    dec.add_argument("--diagnostics", action="store_true", help="report skipped characters")

    snd = sub.add_parser("send", help="run one action against a serial terminal")
    snd.add_argument("--port", required=True, help="serial port, e.g. /dev/ttyACM0")
    snd.add_argument("--baudrate", type=int, default=ProtocolConstants.DEFAULT_BAUD_RATE)
    snd.add_argument(
        "--timeout",
        type=float,
        default=ProtocolConstants.DEFAULT_RECEIVE_TIMEOUT,
        help="seconds to wait for the response",
    )
    snd.add_argument(
        "--strict-refund",
        action="store_true",
        help="accept refund operation numbers 1-999999",
    )
    snd.add_argument("action", choices=ACTIONS)
    snd.add_argument("value", nargs="?", help="amount for sale, operation number for refund")

    return ap


def _print_notice(message: str) -> None:
    print(message, file=sys.stderr)


async def _send(args: argparse.Namespace) -> int:
    settings = SerialSettings(port=args.port, baudrate=args.baudrate, timeout=args.timeout)
    session = TerminalSession(AsyncSerialTransport.from_settings(settings))
    refund_validation = (
        RefundValidation.STRICT if args.strict_refund else RefundValidation.LEGACY
    )
    terminal = PosTerminal(session, notify=_print_notice, refund_validation=refund_validation)

    async with session:
        if not await terminal.toggle_connection():
            return 1

        action = getattr(terminal, args.action.replace("-", "_"))
        if args.action in VALUE_ACTIONS:
            response = await action(args.value)
        else:
            response = await action()

    if response is None:
        return 1
    print(response.text)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "encode":
        try:
            print(encode(args.body))
        except FramingError as e:
            print(f"error: {e}", file=sys.stderr)
            return 2
        return 0

    if args.command == "decode":
        if args.fields:
            response = parse_response(args.hex)
            for index, field in enumerate(response.fields):
                print(f"{index:02d} {field}")
            if response.lrc_valid is not None:
                print(f"LRC {'OK' if response.lrc_valid else 'BAD'}")
        else:
            result = decode_with_diagnostics(args.hex)
            print(result.text)
            if args.diagnostics:
                print(f"skipped {result.skipped} characters", file=sys.stderr)
        return 0

    try:
        return asyncio.run(_send(args))
    except MposLinkError as e:
        logger.error("%s", e)
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
