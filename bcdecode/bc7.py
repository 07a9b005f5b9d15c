"""Decoder for the BC7 block format to RGBA8."""

from __future__ import annotations

from itertools import chain

from .bitstream import Bitstream

PIXELS_PER_BLOCK = 16
CHANNELS = 4

# Bit counts of the colour and alpha endpoint components, per mode.
_COLOR_BITS = (4, 6, 5, 7, 5, 7, 7, 5)
_ALPHA_BITS = (0, 0, 0, 0, 6, 8, 7, 5)

# Modes 0, 1, 3, 6 and 7 carry P-bits.
_PBIT_MODES = 0b11001011

_WEIGHTS2 = (0, 21, 43, 64)
_WEIGHTS3 = (0, 9, 18, 27, 37, 46, 55, 64)
_WEIGHTS4 = (0, 4, 9, 13, 17, 21, 26, 30, 34, 38, 43, 47, 51, 55, 60, 64)
_WEIGHTS = {2: _WEIGHTS2, 3: _WEIGHTS3, 4: _WEIGHTS4}

# Row-major 4x4 partition shapes for two and three subsets.
# Fix-up indices have the high bit set.
_PARTITIONS_2 = (
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
    (128, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 129),
    (128, 0, 0, 0, 1, 1, 1, 1, 0, 0, 0, 0, 1, 1, 1, 129),
    (128, 1, 0, 1, 1, 0, 129, 0, 0, 1, 0, 1, 1, 0, 1, 0),
    (128, 0, 1, 1, 0, 0, 1, 1, 129, 1, 0, 0, 1, 1, 0, 0),
    (128, 0, 129, 1, 1, 1, 0, 0, 0, 0, 1, 1, 1, 1, 0, 0),
    (128, 1, 0, 1, 0, 1, 0, 1, 129, 0, 1, 0, 1, 0, 1, 0),
    (128, 1, 1, 0, 1, 0, 0, 1, 0, 1, 1, 0, 1, 0, 0, 129),
    (128, 1, 0, 1, 1, 0, 1, 0, 1, 0, 1, 0, 0, 1, 0, 129),
    (128, 1, 129, 1, 0, 0, 1, 1, 1, 1, 0, 0, 1, 1, 1, 0),
    (128, 0, 0, 1, 0, 0, 1, 1, 129, 1, 0, 0, 1, 0, 0, 0),
    (128, 0, 129, 1, 0, 0, 1, 0, 0, 1, 0, 0, 1, 1, 0, 0),
    (128, 0, 129, 1, 1, 0, 1, 1, 1, 1, 0, 1, 1, 1, 0, 0),
    (128, 1, 129, 0, 1, 0, 0, 1, 1, 0, 0, 1, 0, 1, 1, 0),
    (128, 0, 1, 1, 1, 1, 0, 0, 1, 1, 0, 0, 0, 0, 1, 129),
    (128, 1, 1, 0, 0, 1, 1, 0, 1, 0, 0, 1, 1, 0, 0, 129),
    (128, 0, 0, 0, 0, 1, 129, 0, 0, 1, 1, 0, 0, 0, 0, 0),
    (128, 1, 0, 0, 1, 1, 129, 0, 0, 1, 0, 0, 0, 0, 0, 0),
    (128, 0, 129, 0, 0, 1, 1, 1, 0, 0, 1, 0, 0, 0, 0, 0),
    (128, 0, 0, 0, 0, 0, 129, 0, 0, 1, 1, 1, 0, 0, 1, 0),
    (128, 0, 0, 0, 0, 1, 0, 0, 129, 1, 1, 0, 0, 1, 0, 0),
    (128, 1, 1, 0, 1, 1, 0, 0, 1, 0, 0, 1, 0, 0, 1, 129),
    (128, 0, 1, 1, 0, 1, 1, 0, 1, 1, 0, 0, 1, 0, 0, 129),
    (128, 1, 129, 0, 0, 0, 1, 1, 1, 0, 0, 1, 1, 1, 0, 0),
    (128, 0, 129, 1, 1, 0, 0, 1, 1, 1, 0, 0, 0, 1, 1, 0),
    (128, 1, 1, 0, 1, 1, 0, 0, 1, 1, 0, 0, 1, 0, 0, 129),
    (128, 1, 1, 0, 0, 0, 1, 1, 0, 0, 1, 1, 1, 0, 0, 129),
    (128, 1, 1, 1, 1, 1, 1, 0, 1, 0, 0, 0, 0, 0, 0, 129),
    (128, 0, 0, 1, 1, 0, 0, 0, 1, 1, 1, 0, 0, 1, 1, 129),
    (128, 0, 0, 0, 1, 1, 1, 1, 0, 0, 1, 1, 0, 0, 1, 129),
    (128, 0, 129, 1, 0, 0, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0),
    (128, 0, 129, 0, 0, 0, 1, 0, 1, 1, 1, 0, 1, 1, 1, 0),
    (128, 1, 0, 0, 0, 1, 0, 0, 0, 1, 1, 1, 0, 1, 1, 129),
)

_PARTITIONS_3 = (
    (128, 0, 1, 129, 0, 0, 1, 1, 0, 2, 2, 1, 2, 2, 2, 130),
    (128, 0, 0, 129, 0, 0, 1, 1, 130, 2, 1, 1, 2, 2, 2, 1),
    (128, 0, 0, 0, 2, 0, 0, 1, 130, 2, 1, 1, 2, 2, 1, 129),
    (128, 2, 2, 130, 0, 0, 2, 2, 0, 0, 1, 1, 0, 1, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 0, 129, 1, 2, 2, 1, 1, 2, 130),
    (128, 0, 1, 129, 0, 0, 1, 1, 0, 0, 2, 2, 0, 0, 2, 130),
    (128, 0, 2, 130, 0, 0, 2, 2, 1, 1, 1, 1, 1, 1, 1, 129),
    (128, 0, 1, 1, 0, 0, 1, 1, 130, 2, 1, 1, 2, 2, 1, 129),
    (128, 0, 0, 0, 0, 0, 0, 0, 129, 1, 1, 1, 2, 2, 2, 130),
    (128, 0, 0, 0, 1, 1, 1, 1, 129, 1, 1, 1, 2, 2, 2, 130),
    (128, 0, 0, 0, 1, 1, 129, 1, 2, 2, 2, 2, 2, 2, 2, 130),
    (128, 0, 1, 2, 0, 0, 129, 2, 0, 0, 1, 2, 0, 0, 1, 130),
    (128, 1, 1, 2, 0, 1, 129, 2, 0, 1, 1, 2, 0, 1, 1, 130),
    (128, 1, 2, 2, 0, 129, 2, 2, 0, 1, 2, 2, 0, 1, 2, 130),
    (128, 0, 1, 129, 0, 1, 1, 2, 1, 1, 2, 2, 1, 2, 2, 130),
    (128, 0, 1, 129, 2, 0, 0, 1, 130, 2, 0, 0, 2, 2, 2, 0),
    (128, 0, 0, 129, 0, 0, 1, 1, 0, 1, 1, 2, 1, 1, 2, 130),
    (128, 1, 1, 129, 0, 0, 1, 1, 130, 0, 0, 1, 2, 2, 0, 0),
    (128, 0, 0, 0, 1, 1, 2, 2, 129, 1, 2, 2, 1, 1, 2, 130),
    (128, 0, 2, 130, 0, 0, 2, 2, 0, 0, 2, 2, 1, 1, 1, 129),
    (128, 1, 1, 129, 0, 1, 1, 1, 0, 2, 2, 2, 0, 2, 2, 130),
    (128, 0, 0, 129, 0, 0, 0, 1, 130, 2, 2, 1, 2, 2, 2, 1),
    (128, 0, 0, 0, 0, 0, 129, 1, 0, 1, 2, 2, 0, 1, 2, 130),
    (128, 0, 0, 0, 1, 1, 0, 0, 130, 2, 129, 0, 2, 2, 1, 0),
    (128, 1, 2, 130, 0, 129, 2, 2, 0, 0, 1, 1, 0, 0, 0, 0),
    (128, 0, 1, 2, 0, 0, 1, 2, 129, 1, 2, 2, 2, 2, 2, 130),
    (128, 1, 1, 0, 1, 2, 130, 1, 129, 2, 2, 1, 0, 1, 1, 0),
    (128, 0, 0, 0, 0, 1, 129, 0, 1, 2, 130, 1, 1, 2, 2, 1),
    (128, 0, 2, 2, 1, 1, 0, 2, 129, 1, 0, 2, 0, 0, 2, 130),
    (128, 1, 1, 0, 0, 129, 1, 0, 2, 0, 0, 2, 2, 2, 2, 130),
    (128, 0, 1, 1, 0, 1, 2, 2, 0, 1, 130, 2, 0, 0, 1, 129),
    (128, 0, 0, 0, 2, 0, 0, 0, 130, 2, 1, 1, 2, 2, 2, 129),
    (128, 0, 0, 0, 0, 0, 0, 2, 129, 1, 2, 2, 1, 2, 2, 130),
    (128, 2, 2, 130, 0, 0, 2, 2, 0, 0, 1, 2, 0, 0, 1, 129),
    (128, 0, 1, 129, 0, 0, 1, 2, 0, 0, 2, 2, 0, 2, 2, 130),
    (128, 1, 2, 0, 0, 129, 2, 0, 0, 1, 130, 0, 0, 1, 2, 0),
    (128, 0, 0, 0, 1, 1, 129, 1, 2, 2, 130, 2, 0, 0, 0, 0),
    (128, 1, 2, 0, 1, 2, 0, 1, 130, 0, 129, 2, 0, 1, 2, 0),
    (128, 1, 2, 0, 2, 0, 1, 2, 129, 130, 0, 1, 0, 1, 2, 0),
    (128, 0, 1, 1, 2, 2, 0, 0, 1, 1, 130, 2, 0, 0, 1, 129),
    (128, 0, 1, 1, 1, 1, 130, 2, 2, 2, 0, 0, 0, 0, 1, 129),
    (128, 1, 0, 129, 0, 1, 0, 1, 2, 2, 2, 2, 2, 2, 2, 130),
    (128, 0, 0, 0, 0, 0, 0, 0, 130, 1, 2, 1, 2, 1, 2, 129),
    (128, 0, 2, 2, 1, 129, 2, 2, 0, 0, 2, 2, 1, 1, 2, 130),
    (128, 0, 2, 130, 0, 0, 1, 1, 0, 0, 2, 2, 0, 0, 1, 129),
    (128, 2, 2, 0, 1, 2, 130, 1, 0, 2, 2, 0, 1, 2, 2, 129),
    (128, 1, 0, 1, 2, 2, 130, 2, 2, 2, 2, 2, 0, 1, 0, 129),
    (128, 0, 0, 0, 2, 1, 2, 1, 130, 1, 2, 1, 2, 1, 2, 129),
    (128, 1, 0, 129, 0, 1, 0, 1, 0, 1, 0, 1, 2, 2, 2, 130),
    (128, 2, 2, 130, 0, 1, 1, 1, 0, 2, 2, 2, 0, 1, 1, 129),
    (128, 0, 0, 2, 1, 129, 1, 2, 0, 0, 0, 2, 1, 1, 1, 130),
    (128, 0, 0, 0, 2, 129, 1, 2, 2, 1, 1, 2, 2, 1, 1, 130),
    (128, 2, 2, 2, 0, 129, 1, 1, 0, 1, 1, 1, 0, 2, 2, 130),
    (128, 0, 0, 2, 1, 1, 1, 2, 129, 1, 1, 2, 0, 0, 0, 130),
    (128, 1, 1, 0, 0, 129, 1, 0, 0, 1, 1, 0, 2, 2, 2, 130),
    (128, 0, 0, 0, 0, 0, 0, 0, 2, 1, 129, 2, 2, 1, 1, 130),
    (128, 1, 1, 0, 0, 129, 1, 0, 2, 2, 2, 2, 2, 2, 2, 130),
    (128, 0, 2, 2, 0, 0, 1, 1, 0, 0, 129, 1, 0, 0, 2, 130),
    (128, 0, 2, 2, 1, 1, 2, 2, 129, 1, 2, 2, 0, 0, 2, 130),
    (128, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 2, 129, 1, 130),
    (128, 0, 0, 130, 0, 0, 0, 1, 0, 0, 0, 2, 0, 0, 0, 129),
    (128, 2, 2, 2, 1, 2, 2, 2, 0, 2, 2, 2, 129, 2, 2, 130),
    (128, 1, 0, 129, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 130),
    (128, 1, 1, 129, 2, 0, 1, 1, 130, 2, 0, 1, 2, 2, 2, 0),
)

_SINGLE_SUBSET = (0x80,) + (0,) * 15


def _expand(value: int, precision: int) -> int:
    """Move the top bit of a component to bit 7 and replicate it downwards."""
    value <<= 8 - precision
    return value | (value >> precision)


def _interpolate(a: int, b: int, weight: int) -> int:
    return (a * (64 - weight) + b * weight + 32) >> 6


def bc7(block: bytes | bytearray | memoryview) -> bytes:
    """Decode a 16-byte BC7 block to 64 bytes of row-major RGBA8.

    Blocks with an invalid mode decode to transparent black.
    """
    stream = Bitstream(block)

    mode = 0
    while mode < 8 and stream.read_bit() == 0:
        mode += 1
    if mode >= 8:
        return bytes(PIXELS_PER_BLOCK * CHANNELS)

    num_subsets = 1
    partition = 0
    if mode in (0, 1, 2, 3, 7):
        num_subsets = 3 if mode in (0, 2) else 2
        partition = stream.read_bits(4 if mode == 0 else 6)

    rotation = 0
    index_selection = 0
    if mode in (4, 5):
        rotation = stream.read_bits(2)
        if mode == 4:
            index_selection = stream.read_bit()

    color_bits = _COLOR_BITS[mode]
    alpha_bits = _ALPHA_BITS[mode]
    endpoints = [[0] * CHANNELS for _ in range(num_subsets * 2)]

    for channel in range(3):
        for endpoint in endpoints:
            endpoint[channel] = stream.read_bits(color_bits)
    if alpha_bits:
        for endpoint in endpoints:
            endpoint[3] = stream.read_bits(alpha_bits)

    pbit = (_PBIT_MODES >> mode) & 1
    if pbit:
        for endpoint in endpoints:
            endpoint[:] = [component << 1 for component in endpoint]
        if mode == 1:
            # One P-bit shared by both endpoints of each subset.
            shared = (stream.read_bit(), stream.read_bit())
            for k, endpoint in enumerate(endpoints):
                for channel in range(3):
                    endpoint[channel] |= shared[k // 2]
        else:
            for endpoint in endpoints:
                bit = stream.read_bit()
                endpoint[:] = [component | bit for component in endpoint]

    color_precision = color_bits + pbit
    alpha_precision = alpha_bits + pbit
    for endpoint in endpoints:
        endpoint[:3] = [_expand(c, color_precision) for c in endpoint[:3]]
        # Modes without alpha are fully opaque.
        endpoint[3] = _expand(endpoint[3], alpha_precision) if alpha_bits else 0xFF

    if mode in (0, 1):
        index_bits = 3
    elif mode == 6:
        index_bits = 4
    else:
        index_bits = 2
    secondary_bits = {4: 3, 5: 2}.get(mode, 0)
    weights = _WEIGHTS[index_bits]
    weights2 = _WEIGHTS2 if secondary_bits == 2 else _WEIGHTS3

    if num_subsets == 1:
        shape = _SINGLE_SUBSET
    elif num_subsets == 2:
        shape = _PARTITIONS_2[partition]
    else:
        shape = _PARTITIONS_3[partition]

    # Colour indices come first for every pixel, then the secondary indices.
    primary = [
        weights[stream.read_bits(index_bits - 1 if entry & 0x80 else index_bits)]
        for entry in shape
    ]

    pixels: list[tuple[int, int, int, int]] = []
    for k, (entry, weight) in enumerate(zip(shape, primary)):
        subset = entry & 0x03
        low, high = endpoints[subset * 2], endpoints[subset * 2 + 1]

        if secondary_bits:
            weight2 = weights2[
                stream.read_bits(secondary_bits if k else secondary_bits - 1)
            ]
            if index_selection:
                color_weight, alpha_weight = weight2, weight
            else:
                color_weight, alpha_weight = weight, weight2
        else:
            color_weight = alpha_weight = weight

        r, g, b = (_interpolate(low[c], high[c], color_weight) for c in range(3))
        a = _interpolate(low[3], high[3], alpha_weight)

        if rotation == 1:
            r, a = a, r
        elif rotation == 2:
            g, a = a, g
        elif rotation == 3:
            b, a = a, b

        pixels.append((r & 0xFF, g & 0xFF, b & 0xFF, a & 0xFF))

    return bytes(chain.from_iterable(pixels))