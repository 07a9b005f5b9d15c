"""Decoders for the single- and dual-channel BC4 and BC5 block formats."""

from __future__ import annotations

import struct

PIXELS_PER_BLOCK = 16

_WEIGHTS4 = (13107, 26215, 39321, 52429)
_WEIGHTS6 = (9363, 18724, 28086, 37450, 46812, 56173)

_F32 = struct.Struct("<f")


def _require(block: bytes | bytearray | memoryview, size: int) -> bytes:
    data = bytes(block)
    if len(data) < size:
        raise ValueError(f"a block needs {size} bytes, got {len(data)}")
    return data[:size]


def _f32(value: float) -> float:
    """Round a value to single precision."""
    return _F32.unpack(_F32.pack(value))[0]


def _int8(byte: int) -> int:
    return byte - 256 if byte >= 128 else byte


def _indices(data: bytes) -> list[int]:
    bits = int.from_bytes(data[:8], "little") >> 16
    return [(bits >> (3 * k)) & 0x07 for k in range(PIXELS_PER_BLOCK)]


def _channel(data: bytes, is_signed: bool) -> list[int]:
    """Decode one 8-byte channel block to 16 integer values."""
    if is_signed:
        a0 = max(_int8(data[0]), -127)
        a1 = max(_int8(data[1]), -127)
    else:
        a0, a1 = data[0], data[1]

    if a0 > a1:
        palette = [a0, a1] + [
            (_WEIGHTS6[5 - k] * a0 + _WEIGHTS6[k] * a1 + 32768) >> 16
            for k in range(6)
        ]
    else:
        palette = [a0, a1] + [
            (_WEIGHTS4[3 - k] * a0 + _WEIGHTS4[k] * a1 + 32768) >> 16
            for k in range(4)
        ]
        palette += [-127, 127] if is_signed else [0, 255]

    return [palette[i] for i in _indices(data)]


def _mix(a0: float, n: float, a1: float, m: float, d: float) -> float:
    """Compute (n*a0 + m*a1) / d with single-precision rounding at every step."""
    return _f32(_f32(_f32(n * a0) + _f32(m * a1)) / d)


def _channel_float(data: bytes, is_signed: bool) -> list[float]:
    """Decode one 8-byte channel block to 16 single-precision floats."""
    if is_signed:
        a0 = max(_f32(_int8(data[0]) / 127.0), -1.0)
        a1 = max(_f32(_int8(data[1]) / 127.0), -1.0)
    else:
        a0 = _f32(data[0] / 255.0)
        a1 = _f32(data[1] / 255.0)

    if a0 > a1:
        palette = [a0, a1] + [_mix(a0, 6 - k, a1, 1 + k, 7.0) for k in range(6)]
    else:
        palette = [a0, a1] + [_mix(a0, 4 - k, a1, 1 + k, 5.0) for k in range(4)]
        palette += [-1.0 if is_signed else 0.0, 1.0]

    return [palette[i] for i in _indices(data)]


def bc4(block: bytes | bytearray | memoryview, is_signed: bool = False) -> bytes:
    """Decode an 8-byte BC4 block to 16 bytes of row-major R8.

    Signed values are stored as two's complement bytes.
    """
    data = _require(block, 8)
    return bytes(v & 0xFF for v in _channel(data, is_signed))


def bc4_float(
    block: bytes | bytearray | memoryview, is_signed: bool = False
) -> list[float]:
    """Decode an 8-byte BC4 block to 16 row-major single-precision floats."""
    data = _require(block, 8)
    return _channel_float(data, is_signed)


def bc5(block: bytes | bytearray | memoryview, is_signed: bool = False) -> bytes:
    """Decode a 16-byte BC5 block to 32 bytes of row-major interleaved RG8."""
    data = _require(block, 16)
    red = _channel(data[:8], is_signed)
    green = _channel(data[8:], is_signed)
    return bytes(v & 0xFF for pair in zip(red, green) for v in pair)


def bc5_float(
    block: bytes | bytearray | memoryview, is_signed: bool = False
) -> list[float]:
    """Decode a 16-byte BC5 block to 32 row-major interleaved RG floats."""
    data = _require(block, 16)
    red = _channel_float(data[:8], is_signed)
    green = _channel_float(data[8:], is_signed)
    return [v for pair in zip(red, green) for v in pair]