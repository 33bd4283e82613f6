"""Tests for LRC functions."""

import pytest

from mposlink.protocol.checksums import (
    append_lrc,
    calculate_lrc,
    validate_lrc,
)


class TestChecksums:
    """Tests for LRC calculation and validation."""

    def test_calculate_lrc_load_keys(self):
        """Test LRC of the load keys frame."""
        # 0x30 ^ 0x38 ^ 0x30 ^ 0x30 ^ 0x03 = 0x0B
        assert calculate_lrc(b"\x020800\x03") == 0x0B

    def test_calculate_lrc_skips_first_byte(self):
        """Test that the leading STX does not contribute."""
        assert calculate_lrc(b"\x02\x41") == 0x41
        assert calculate_lrc(b"\xFF\x41") == 0x41

    def test_calculate_lrc_includes_last_byte(self):
        """Test that ETX contributes."""
        assert calculate_lrc(b"\x02A\x03") == 0x41 ^ 0x03

    def test_calculate_lrc_empty(self):
        """Test LRC of empty data."""
        assert calculate_lrc(b"") == 0x00

    def test_calculate_lrc_single_byte(self):
        """Test LRC of a lone STX."""
        assert calculate_lrc(b"\x02") == 0x00

    def test_calculate_lrc_range(self):
        """Test that the result always fits in a byte."""
        data = bytes(range(256))
        assert 0 <= calculate_lrc(data) <= 255

    def test_calculate_lrc_accepts_bytearray_and_memoryview(self):
        """Test buffer types."""
        frame = b"\x020700||\x03"
        expected = calculate_lrc(frame)
        assert calculate_lrc(bytearray(frame)) == expected
        assert calculate_lrc(memoryview(frame)) == expected

    def test_append_lrc(self):
        """Test appending LRC to a partial frame."""
        result = append_lrc(b"\x020800\x03")
        assert result == b"\x020800\x03\x0b"

    def test_validate_lrc_valid(self):
        """Test validation of correct LRC."""
        assert validate_lrc(b"\x020800\x03\x0b") is True

    def test_validate_lrc_invalid(self):
        """Test validation of incorrect LRC."""
        assert validate_lrc(b"\x020800\x03\x0c") is False

    def test_validate_lrc_too_short(self):
        """Test validation of data too short to hold a frame."""
        assert validate_lrc(b"\x02\x03") is False

    @pytest.mark.parametrize(
        "body",
        [b"0800", b"0250|0", b"0700||", b"0200|1500|123456|||0", b"1200|0|"],
    )
    def test_xor_over_full_frame_is_zero(self, body):
        """Test that XOR after STX, LRC included, cancels out."""
        frame = append_lrc(b"\x02" + body + b"\x03")
        assert calculate_lrc(frame) == 0
        assert validate_lrc(frame) is True
