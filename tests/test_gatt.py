"""Tests for decoding gatttool characteristic dumps."""
from __future__ import annotations

import math

import pytest

from sensor_tap.errors import DecodeFormatError, SensorError
from sensor_tap.gatt import decode, encode_float32, format_frame


class TestDecode:
    def test_decode_one(self):
        assert decode(b"Characteristic value/descriptor: 00 00 80 3f \n") == 1.0

    def test_decode_short_prefix(self):
        assert decode(b"x: 00 00 80 3f") == 1.0

    def test_round_trip_is_bit_exact(self):
        for value in (412.5, -0.15625, 0.0, 3.4028234663852886e38):
            raw = format_frame(value)
            assert encode_float32(decode(raw)) == encode_float32(value)

    def test_float32_precision_preserved(self):
        raw = format_frame(0.1)
        # 0.1 is not representable as float32; the float32 value comes back
        assert decode(raw) == pytest.approx(0.1, rel=1e-7)
        assert decode(raw) != 0.1

    def test_extra_tokens_ignored(self):
        assert decode(b"x: 00 00 80 3f 11 22") == 1.0

    def test_multi_byte_token_uses_first_byte(self):
        assert decode(b"x: 00ff 00 80 3f") == 1.0

    def test_nan_payload(self):
        assert math.isnan(decode(b"x: 00 00 c0 7f"))

    def test_splits_on_first_colon_only(self):
        with pytest.raises(DecodeFormatError):
            decode(b"handle: 0x000e value: 00 00 80 3f")

    def test_missing_colon(self):
        with pytest.raises(DecodeFormatError):
            decode(b"00 00 80 3f")

    def test_empty_input(self):
        with pytest.raises(DecodeFormatError):
            decode(b"")

    def test_three_tokens(self):
        with pytest.raises(DecodeFormatError):
            decode(b"x: 00 00 80")

    def test_invalid_hex(self):
        with pytest.raises(DecodeFormatError):
            decode(b"x: 00 zz 80 3f")

    def test_odd_length_hex(self):
        with pytest.raises(DecodeFormatError):
            decode(b"x: 0 00 80 3f")

    def test_decode_errors_are_sensor_errors(self):
        with pytest.raises(SensorError):
            decode(b"Connection refused (111)\n")


class TestFormatFrame:
    def test_format_matches_gatttool_output(self):
        assert format_frame(1.0) == b"Characteristic value/descriptor: 00 00 80 3f \n"

    def test_encode_little_endian(self):
        assert encode_float32(1.0) == b"\x00\x00\x80\x3f"
