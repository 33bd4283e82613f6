"""
Decoding of terminal responses.

The terminal hands back its response as a hex string. Decoding is
best-effort: the string is scanned left to right for two-digit hex tokens,
each optionally prefixed with ``0x``, and every token becomes the character
with that code point. Anything between tokens is skipped.

    >>> decode("48656C6C6F")
    'Hello'
    >>> decode("0x480x650x6C0x6C0x6F")
    'Hello'
    >>> decode("zz48")
    'H'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

from mposlink.exceptions import DecodeError

logger = logging.getLogger(__name__)

_HEX_DIGITS: Final[frozenset[str]] = frozenset("0123456789abcdefABCDEF")
_PREFIX_X: Final[frozenset[str]] = frozenset("xX")


@dataclass(frozen=True)
class DecodeResult:
    """
    Decoded text plus scanner diagnostics.

    Attributes:
        text: Characters for every matched hex token, in order.
        skipped: Number of input characters that were not part of a token.
    """

    text: str
    skipped: int

    @property
    def is_clean(self) -> bool:
        """True if every input character belonged to a token."""
        return self.skipped == 0


def _is_pair(raw: str, index: int) -> bool:
    return (
        index + 1 < len(raw)
        and raw[index] in _HEX_DIGITS
        and raw[index + 1] in _HEX_DIGITS
    )


def decode_with_diagnostics(raw: str) -> DecodeResult:
    """
    Scan a hex response and report what was skipped.

    At each position the scanner first tries ``0x`` followed by two hex
    digits, then two hex digits on their own. If neither matches, one
    character is skipped.

    Args:
        raw: Hex response string, possibly with noise.

    Returns:
        DecodeResult with the decoded text and the skipped character count.
    """
    chars: list[str] = []
    skipped = 0
    index = 0
    length = len(raw)

    while index < length:
        if (
            raw[index] == "0"
            and index + 1 < length
            and raw[index + 1] in _PREFIX_X
            and _is_pair(raw, index + 2)
        ):
            chars.append(chr(int(raw[index + 2 : index + 4], 16)))
            index += 4
        elif _is_pair(raw, index):
            chars.append(chr(int(raw[index : index + 2], 16)))
            index += 2
        else:
            skipped += 1
            index += 1

    return DecodeResult(text="".join(chars), skipped=skipped)


def decode(raw: str, *, strict: bool = False) -> str:
    """
    Decode a hex response into text.

    Args:
        raw: Hex response string.
        strict: Raise instead of silently skipping unmatched characters.

    Returns:
        Decoded text (empty for empty input).

    Raises:
        DecodeError: If strict is set and any character was skipped.
    """
    result = decode_with_diagnostics(raw)

    if result.skipped:
        if strict:
            raise DecodeError(
                "Response contains characters outside hex tokens",
                skipped=result.skipped,
                raw_data=raw,
            )
        logger.debug("Skipped %d non-hex characters while decoding", result.skipped)

    return result.text

