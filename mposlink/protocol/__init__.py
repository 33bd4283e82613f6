"""
Protocol layer for POS terminal communication.

This module contains the low-level protocol handling:
- Opcodes and protocol constants
- LRC calculation and validation
- Hex encoding utilities
- Command framing
- Hex response decoding
"""

from mposlink.protocol.checksums import append_lrc, calculate_lrc, validate_lrc
from mposlink.protocol.constants import Opcode, ProtocolConstants
from mposlink.protocol.encoding import (
    bytes_to_hex,
    encode_byte,
    hex_to_bytes,
    text_to_bytes,
    text_to_hex,
)
from mposlink.protocol.frame_codec import ParsedFrame, build_frame, encode, parse_frame
from mposlink.protocol.response_decoder import DecodeResult, decode, decode_with_diagnostics

__all__ = [
    # Constants
    "Opcode",
    "ProtocolConstants",
    # Checksums
    "calculate_lrc",
    "validate_lrc",
    "append_lrc",
    # Encoding
    "encode_byte",
    "text_to_bytes",
    "text_to_hex",
    "hex_to_bytes",
    "bytes_to_hex",
    # Framing
    "ParsedFrame",
    "build_frame",
    "encode",
    "parse_frame",
    # Decoding
    "DecodeResult",
    "decode",
    "decode_with_diagnostics",
]
