"""Decoder for the BC6H block format to half- and single-precision RGB."""

from __future__ import annotations

import re
import struct
from dataclasses import dataclass

from .bitstream import Bitstream

PIXELS_PER_BLOCK = 16
CHANNELS = 3

# Bit counts of the base endpoint (W) and of the deltas for R, G and B, per mode.
_ACTUAL_BITS = (
    (10, 7, 11, 11, 11, 9, 8, 8, 8, 6, 10, 11, 12, 16),
    (5, 6, 5, 4, 4, 5, 6, 5, 5, 6, 10, 9, 8, 4),
    (5, 6, 4, 5, 4, 5, 5, 6, 5, 6, 10, 9, 8, 4),
    (5, 6, 4, 4, 5, 5, 5, 5, 6, 6, 10, 9, 8, 4),
)

_WEIGHTS3 = (0, 9, 18, 27, 37, 46, 55, 64)
_WEIGHTS4 = (0, 4, 9, 13, 17, 21, 26, 30, 34, 38, 43, 47, 51, 55, 60, 64)

# The 32 two-region partition shapes, one row-major 4x4 tile per entry.
# Fix-up indices have the high bit set.
_PARTITIONS = (
    (128, 0, 1, 1, 0, 0, 1, 1, 0, 0, 1, 1, 0, 0, 1, 129),
    (128, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 129),
    (128, 1, 1, 1, 0, 1, 1, 1, 0, 1, 1, 1, 0, 1, 1, 129),
    (128, 0, 0, 1, 0, 0, 1, 1, 0, 0, 1, 1, 0, 1, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 1, 129),
    (128, 0, 1, 1, 0, 1, 1, 1, 0, 1, 1, 1, 1, 1, 1, 129),
    (128, 0, 0, 1, 0, 0, 1, 1, 0, 1, 1, 1, 1, 1, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 1, 0, 0, 1, 1, 0, 1, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 0, 0, 1, 129),
    (128, 0, 1, 1, 0, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 1, 0, 1, 1, 1, 1, 1, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 0, 1, 1, 129),
    (128, 0, 0, 1, 0, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 1, 1, 1, 129),
    (128, 0, 0, 0, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 129),
    (128, 0, 0, 0, 1, 0, 0, 0, 1, 1, 1, 0, 1, 1, 1, 129),
    (128, 1, 129, 1, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 0, 0),
    (128, 0, 0, 0, 0, 0, 0, 0, 129, 0, 0, 0, 1, 1, 1, 0),
    (128, 1, 129, 1, 0, 0, 1, 1, 0, 0, 0, 1, 0, 0, 0, 0),
    (128, 0, 129, 1, 0, 0, 0, 1, 0, 0, 0, 0, 0, 0, 0, 0),
    (128, 0, 0, 0, 1, 0, 0, 0, 129, 1, 0, 0, 1, 1, 1, 0),
    (128, 0, 0, 0, 0, 0, 0, 0, 129, 0, 0, 0, 1, 1, 0, 0),
    (128, 1, 1, 1, 0, 0, 1, 1, 0, 0, 1, 1, 0, 0, 0, 129),
    (128, 0, 129, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 0),
    (128, 0, 0, 0, 1, 0, 0, 0, 129, 0, 0, 0, 1, 1, 0, 0),
    (128, 1, 129, 0, 0, 1, 1, 0, 0, 1, 1, 0, 0, 1, 1, 0),
    (128, 0, 129, 1, 0, 1, 1, 0, 0, 1, 1, 0, 1, 1, 0, 0),
    (128, 0, 0, 1, 0, 1, 1, 1, 129, 1, 1, 0, 1, 0, 0, 0),
    (128, 0, 0, 0, 1, 1, 1, 1, 129, 1, 1, 1, 0, 0, 0, 0),
    (128, 1, 129, 1, 0, 0, 0, 1, 1, 0, 0, 0, 1, 1, 1, 0),
    (128, 0, 129, 1, 1, 0, 0, 1, 1, 0, 0, 1, 1, 1, 0, 0),
)


@dataclass(frozen=True)
class _Field:
    """A run of endpoint bits in the mode header."""

    channel: int
    endpoint: int
    count: int
    shift: int
    reversed: bool


_FIELD_PATTERN = re.compile(r"([rgb])([wxyz])\[(\d+)(?::(\d+))?\]")


def _parse_field(spec: str) -> _Field:
    """Parse ``gy[4]``, ``rw[9:0]`` or the reversed form ``rw[10:15]``."""
    match = _FIELD_PATTERN.fullmatch(spec)
    if match is None:
        raise ValueError(f"bad field spec: {spec!r}")
    channel = "rgb".index(match[1])
    endpoint = "wxyz".index(match[2])
    first = int(match[3])
    last = first if match[4] is None else int(match[4])
    if first >= last:
        return _Field(channel, endpoint, first - last + 1, last, False)
    return _Field(channel, endpoint, last - first + 1, first, True)


def _layout(mode: int, specs: str) -> tuple[int, tuple[_Field, ...]]:
    return mode, tuple(_parse_field(spec) for spec in specs.split())


# Header bit order for each mode, keyed by the mode bits as read from the block.
_MODES = {
    0b00: _layout(0, "gy[4] by[4] bz[4] rw[9:0] gw[9:0] bw[9:0] rx[4:0] gz[4] gy[3:0] gx[4:0] bz[0] gz[3:0] bx[4:0] bz[1] by[3:0] ry[4:0] bz[2] rz[4:0] bz[3]"),
    0b01: _layout(1, "gy[5] gz[4] gz[5] rw[6:0] bz[0] bz[1] by[4] gw[6:0] by[5] bz[2] gy[4] bw[6:0] bz[3] bz[5] bz[4] rx[5:0] gy[3:0] gx[5:0] gz[3:0] bx[5:0] by[3:0] ry[5:0] rz[5:0]"),
    0b00010: _layout(2, "rw[9:0] gw[9:0] bw[9:0] rx[4:0] rw[10] gy[3:0] gx[3:0] gw[10] bz[0] gz[3:0] bx[3:0] bw[10] bz[1] by[3:0] ry[4:0] bz[2] rz[4:0] bz[3]"),
    0b00110: _layout(3, "rw[9:0] gw[9:0] bw[9:0] rx[3:0] rw[10] gz[4] gy[3:0] gx[4:0] gw[10] gz[3:0] bx[3:0] bw[10] bz[1] by[3:0] ry[3:0] bz[0] bz[2] rz[3:0] gy[4] bz[3]"),
    0b01010: _layout(4, "rw[9:0] gw[9:0] bw[9:0] rx[3:0] rw[10] by[4] gy[3:0] gx[3:0] gw[10] bz[0] gz[3:0] bx[4:0] bw[10] by[3:0] ry[3:0] bz[1] bz[2] rz[3:0] bz[4] bz[3]"),
    0b01110: _layout(5, "rw[8:0] by[4] gw[8:0] gy[4] bw[8:0] bz[4] rx[4:0] gz[4] gy[3:0] gx[4:0] bz[0] gz[3:0] bx[4:0] bz[1] by[3:0] ry[4:0] bz[2] rz[4:0] bz[3]"),
    0b10010: _layout(6, "rw[7:0] gz[4] by[4] gw[7:0] bz[2] gy[4] bw[7:0] bz[3] bz[4] rx[5:0] gy[3:0] gx[4:0] bz[0] gz[3:0] bx[4:0] bz[1] by[3:0] ry[5:0] rz[5:0]"),
    0b10110: _layout(7, "rw[7:0] bz[0] by[4] gw[7:0] gy[5] gy[4] bw[7:0] gz[5] bz[4] rx[4:0] gz[4] gy[3:0] gx[5:0] gz[3:0] bx[4:0] bz[1] by[3:0] ry[4:0] bz[2] rz[4:0] bz[3]"),
    0b11010: _layout(8, "rw[7:0] bz[1] by[4] gw[7:0] by[5] gy[4] bw[7:0] bz[5] bz[4] rx[4:0] gz[4] gy[3:0] gx[4:0] bz[0] gz[3:0] bx[5:0] by[3:0] ry[4:0] bz[2] rz[4:0] bz[3]"),
    0b11110: _layout(9, "rw[5:0] gz[4] bz[0] bz[1] by[4] gw[5:0] gy[5] by[5] bz[2] gy[4] bw[5:0] gz[5] bz[3] bz[5] bz[4] rx[5:0] gy[3:0] gx[5:0] gz[3:0] bx[5:0] by[3:0] ry[5:0] rz[5:0]"),
    0b00011: _layout(10, "rw[9:0] gw[9:0] bw[9:0] rx[9:0] gx[9:0] bx[9:0]"),
    0b00111: _layout(11, "rw[9:0] gw[9:0] bw[9:0] rx[8:0] rw[10] gx[8:0] gw[10] bx[8:0] bw[10]"),
    0b01011: _layout(12, "rw[9:0] gw[9:0] bw[9:0] rx[7:0] rw[10:11] gx[7:0] gw[10:11] bx[7:0] bw[10:11]"),
    0b01111: _layout(13, "rw[9:0] gw[9:0] bw[9:0] rx[3:0] rw[10:15] gx[3:0] gw[10:15] bx[3:0] bw[10:15]"),
}

_U32 = struct.Struct("<I")
_F32 = struct.Struct("<f")


def _bits_to_float(bits: int) -> float:
    return _F32.unpack(_U32.pack(bits & 0xFFFFFFFF))[0]


def _float_to_bits(value: float) -> int:
    return _U32.unpack(_F32.pack(value))[0]


_MAGIC = _bits_to_float(113 << 23)
_SHIFTED_EXP = 0x7C00 << 13


def _extend_sign(value: int, bits: int) -> int:
    value &= (1 << bits) - 1
    return value - (1 << bits) if value >> (bits - 1) else value


def _transform_inverse(value: int, base: int, bits: int, is_signed: bool) -> int:
    value = (value + base) & ((1 << bits) - 1)
    return _extend_sign(value, bits) if is_signed else value


def _unquantize(value: int, bits: int, is_signed: bool) -> int:
    if not is_signed:
        if bits >= 15 or value == 0:
            return value
        if value == (1 << bits) - 1:
            return 0xFFFF
        return ((value << 16) + 0x8000) >> bits

    negative = False
    if bits < 16 and value < 0:
        negative = True
        value = -value

    if value == 0:
        result = 0
    elif value >= (1 << (bits - 1)) - 1:
        result = 0x7FFF
    else:
        result = ((value << 15) + 0x4000) >> (bits - 1)
    return -result if negative else result


def _interpolate(a: int, b: int, weight: int) -> int:
    return (a * (64 - weight) + b * weight + 32) >> 6


def _finish_unquantize(value: int, is_signed: bool) -> int:
    if not is_signed:
        return ((value * 31) >> 6) & 0xFFFF
    # Scale the magnitude by 31/32 and store it as sign and magnitude.
    magnitude = (-value * 31) >> 5 if value < 0 else (value * 31) >> 5
    sign = 0x8000 if value < 0 and magnitude else 0
    return (sign | magnitude) & 0xFFFF


def half_to_float(half: int) -> float:
    """Convert the bits of a half-precision float to a single-precision value."""
    if not 0 <= half <= 0xFFFF:
        raise ValueError(f"not a 16-bit value: {half}")

    bits = (half & 0x7FFF) << 13
    exponent = bits & _SHIFTED_EXP
    bits += (127 - 15) << 23

    if exponent == _SHIFTED_EXP:
        # Infinity or NaN.
        bits += (128 - 16) << 23
    elif exponent == 0:
        # Zero or denormal: renormalise.
        bits += 1 << 23
        bits = _float_to_bits(_bits_to_float(bits) - _MAGIC)

    bits |= (half & 0x8000) << 16
    return _bits_to_float(bits)


def bc6h_half(
    block: bytes | bytearray | memoryview, is_signed: bool = False
) -> list[int]:
    """Decode a 16-byte BC6H block to 48 row-major RGB half-float bit patterns.

    Reserved modes decode to all zeros.
    """
    stream = Bitstream(block)

    raw_mode = stream.read_bits(2)
    if raw_mode > 1:
        raw_mode |= stream.read_bits(3) << 2

    layout = _MODES.get(raw_mode)
    if layout is None:
        return [0] * (PIXELS_PER_BLOCK * CHANNELS)
    mode, fields = layout

    endpoints = [[0] * 4 for _ in range(CHANNELS)]
    for field in fields:
        if field.reversed:
            value = stream.read_bits_reversed(field.count)
        else:
            value = stream.read_bits(field.count)
        endpoints[field.channel][field.endpoint] |= value << field.shift

    two_regions = mode < 10
    partition = stream.read_bits(5) if two_regions else 0
    count = 4 if two_regions else 2
    base_bits = _ACTUAL_BITS[0][mode]
    # Modes 9 and 10 store every endpoint explicitly rather than as deltas.
    uses_deltas = mode not in (9, 10)

    for channel, values in enumerate(endpoints):
        delta_bits = _ACTUAL_BITS[channel + 1][mode]
        if is_signed:
            values[0] = _extend_sign(values[0], base_bits)
        if uses_deltas or is_signed:
            for i in range(1, count):
                values[i] = _extend_sign(values[i], delta_bits)
        if uses_deltas:
            for i in range(1, count):
                values[i] = _transform_inverse(values[i], values[0], base_bits, is_signed)
        values[:count] = [_unquantize(v, base_bits, is_signed) for v in values[:count]]

    weights = _WEIGHTS3 if two_regions else _WEIGHTS4
    index_bits = 3 if two_regions else 4
    shape = _PARTITIONS[partition] if two_regions else (0x80,) + (0,) * 15

    decoded: list[int] = []
    for partition_set in shape:
        bits = index_bits - 1 if partition_set & 0x80 else index_bits
        weight = weights[stream.read_bits(bits)]
        first = (partition_set & 0x01) * 2
        decoded.extend(
            _finish_unquantize(
                _interpolate(values[first], values[first + 1], weight), is_signed
            )
            for values in endpoints
        )
    return decoded


def bc6h_float(
    block: bytes | bytearray | memoryview, is_signed: bool = False
) -> list[float]:
    """Decode a 16-byte BC6H block to 48 row-major RGB single-precision floats."""
    return [half_to_float(half) for half in bc6h_half(block, is_signed)]