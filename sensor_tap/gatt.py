"""Decoding of ``gatttool --char-read`` output into float readings."""
from __future__ import annotations

import binascii
import struct

from sensor_tap.errors import DecodeFormatError

FRAME_SIZE = 4


def decode(raw: bytes) -> float:
    """Decode a characteristic dump such as ``b"...: 00 00 80 3f"``.

    The first byte of each of the first four hex tokens after the first colon
    forms a little-endian IEEE-754 single. The float32 value is returned as a
    Python float without loss.
    """
    head, sep, rest = raw.partition(b":")
    if not sep:
        raise DecodeFormatError(f"No ':' separator in characteristic output: {raw!r}")
    tokens = rest.split()
    if len(tokens) < FRAME_SIZE:
        raise DecodeFormatError(
            f"Expected {FRAME_SIZE} hex tokens after ':', got {len(tokens)}: {rest!r}"
        )
    frame = bytearray(FRAME_SIZE)
    for index, token in enumerate(tokens[:FRAME_SIZE]):
        try:
            decoded = binascii.unhexlify(token)
        except (binascii.Error, ValueError) as exc:
            raise DecodeFormatError(f"Invalid hex token {token!r}") from exc
        frame[index] = decoded[0]
    return struct.unpack("<f", bytes(frame))[0]


def encode_float32(value: float) -> bytes:
    """Little-endian float32 bytes for ``value``."""
    return struct.pack("<f", value)


def format_frame(value: float, prefix: str = "Characteristic value/descriptor") -> bytes:
    """Render ``value`` the way ``gatttool --char-read`` prints it."""
    tokens = " ".join(f"{byte:02x}" for byte in encode_float32(value))
    return f"{prefix}: {tokens} \n".encode("ascii")
