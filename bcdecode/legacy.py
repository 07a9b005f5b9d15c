"""Decoders for the BC1, BC2 and BC3 block formats to RGBA8."""

from __future__ import annotations

from itertools import chain

Rgba = tuple[int, int, int, int]

PIXELS_PER_BLOCK = 16


def _require(block: bytes | bytearray | memoryview, size: int) -> bytes:
    data = bytes(block)
    if len(data) < size:
        raise ValueError(f"a block needs {size} bytes, got {len(data)}")
    return data[:size]


def _color_block(data: bytes, only_opaque_mode: bool) -> list[Rgba]:
    """Decode the 8-byte colour part of a block into 16 RGBA pixels."""
    c0 = int.from_bytes(data[0:2], "little")
    c1 = int.from_bytes(data[2:4], "little")

    r0, g0, b0 = (c0 >> 11) & 0x1F, (c0 >> 5) & 0x3F, c0 & 0x1F
    r1, g1, b1 = (c1 >> 11) & 0x1F, (c1 >> 5) & 0x3F, c1 & 0x1F

    colors: list[Rgba] = [
        ((r0 * 527 + 23) >> 6, (g0 * 259 + 33) >> 6, (b0 * 527 + 23) >> 6, 255),
        ((r1 * 527 + 23) >> 6, (g1 * 259 + 33) >> 6, (b1 * 527 + 23) >> 6, 255),
    ]

    if c0 > c1 or only_opaque_mode:
        # color_2 = 2/3*color_0 + 1/3*color_1, color_3 = 1/3*color_0 + 2/3*color_1
        colors.append(
            (
                ((2 * r0 + r1) * 351 + 61) >> 7,
                ((2 * g0 + g1) * 2763 + 1039) >> 11,
                ((2 * b0 + b1) * 351 + 61) >> 7,
                255,
            )
        )
        colors.append(
            (
                ((r0 + 2 * r1) * 351 + 61) >> 7,
                ((g0 + 2 * g1) * 2763 + 1039) >> 11,
                ((b0 + 2 * b1) * 351 + 61) >> 7,
                255,
            )
        )
    else:
        # Punch-through mode: color_2 is the midpoint, color_3 transparent black.
        colors.append(
            (
                ((r0 + r1) * 1053 + 125) >> 8,
                ((g0 + g1) * 4145 + 1019) >> 11,
                ((b0 + b1) * 1053 + 125) >> 8,
                255,
            )
        )
        colors.append((0, 0, 0, 0))

    indices = int.from_bytes(data[4:8], "little")
    return [colors[(indices >> (2 * k)) & 0x03] for k in range(PIXELS_PER_BLOCK)]


def _sharp_alpha_block(data: bytes) -> list[int]:
    """Decode 16 explicit 4-bit alpha values."""
    bits = int.from_bytes(data[:8], "little")
    return [((bits >> (4 * k)) & 0x0F) * 17 for k in range(PIXELS_PER_BLOCK)]


def _smooth_alpha_block(data: bytes) -> list[int]:
    """Decode 16 interpolated alpha values from two endpoints and 3-bit indices."""
    a0, a1 = data[0], data[1]
    if a0 > a1:
        palette = [a0, a1] + [
            ((7 - k) * a0 + k * a1 + 1) // 7 for k in range(1, 7)
        ]
    else:
        palette = [a0, a1] + [
            ((5 - k) * a0 + k * a1 + 1) // 5 for k in range(1, 5)
        ] + [0x00, 0xFF]

    indices = int.from_bytes(data[:8], "little") >> 16
    return [palette[(indices >> (3 * k)) & 0x07] for k in range(PIXELS_PER_BLOCK)]


def _with_alpha(colors: list[Rgba], alphas: list[int]) -> bytes:
    return bytes(
        chain.from_iterable((r, g, b, a) for (r, g, b, _), a in zip(colors, alphas))
    )


def bc1(block: bytes | bytearray | memoryview) -> bytes:
    """Decode an 8-byte BC1 block to 64 bytes of row-major RGBA8."""
    data = _require(block, 8)
    return bytes(chain.from_iterable(_color_block(data, False)))


def bc2(block: bytes | bytearray | memoryview) -> bytes:
    """Decode a 16-byte BC2 block to 64 bytes of row-major RGBA8."""
    data = _require(block, 16)
    return _with_alpha(_color_block(data[8:], True), _sharp_alpha_block(data))


def bc3(block: bytes | bytearray | memoryview) -> bytes:
    """Decode a 16-byte BC3 block to 64 bytes of row-major RGBA8."""
    data = _require(block, 16)
    return _with_alpha(_color_block(data[8:], True), _smooth_alpha_block(data))