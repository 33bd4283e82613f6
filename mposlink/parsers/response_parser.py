"""
Terminal response parser.

Turns a raw hex response into a TerminalResponse. The decoded text of a
complete response looks like:

    [ACK] STX opcode|field|field|... ETX LRC

Anything before STX is ignored, the markers are stripped and the LRC is
checked. Text without STX is split as is, since some transports hand back
the bare body.
"""

from __future__ import annotations

import logging

from mposlink.models.records import TerminalResponse
from mposlink.protocol.checksums import validate_lrc
from mposlink.protocol.constants import ProtocolConstants
from mposlink.protocol.response_decoder import decode

logger = logging.getLogger(__name__)

_STX = chr(ProtocolConstants.STX)
_ETX = chr(ProtocolConstants.ETX)


def parse_response(raw: str) -> TerminalResponse:
    """
    Decode a hex response and split it into protocol fields.

    Args:
        raw: Hex response string as delivered by the transport.

    Returns:
        TerminalResponse with the decoded text and fields. lrc_valid is None
        when the text does not hold a complete STX ... ETX LRC frame.
    """
    text = decode(raw)
    body = text
    lrc_valid: bool | None = None

    start = text.find(_STX)
    if start != -1:
        end = text.find(_ETX, start + 1)
        if end == -1:
            body = text[start + 1 :]
        else:
            body = text[start + 1 : end]
            if end + 1 < len(text):
                # Decoded characters are always <= 0xFF
                frame = text[start : end + 2].encode("latin-1")
                lrc_valid = validate_lrc(frame)
                if not lrc_valid:
                    logger.warning("Response LRC mismatch: %s", raw)

    return TerminalResponse(
        raw_hex=raw,
        text=text,
        fields=tuple(body.split(ProtocolConstants.FIELD_SEPARATOR)),
        lrc_valid=lrc_valid,
    )
