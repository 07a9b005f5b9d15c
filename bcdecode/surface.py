"""Decoding of whole BCn compressed surfaces to uncompressed RGBA data."""

from __future__ import annotations

import math
import struct
from collections.abc import MutableSequence, Sequence
from enum import Enum

from .bc6h import bc6h_float
from .bc7 import bc7
from .channels import bc4, bc5
from .legacy import bc1, bc2, bc3

BLOCK_WIDTH = 4
BLOCK_HEIGHT = 4
CHANNELS = 4
ELEMENTS_PER_BLOCK = BLOCK_WIDTH * BLOCK_HEIGHT * CHANNELS

Pixel = tuple
BlockPixels = list[list[Pixel]]

_F32 = struct.Struct("<f")


class BcnFormat(Enum):
    """The block compressed formats, all using 4x4 pixel blocks."""

    BC1 = "bc1"
    BC2 = "bc2"
    BC3 = "bc3"
    BC4 = "bc4"
    BC5 = "bc5"
    BC6 = "bc6"
    BC7 = "bc7"

    def block_size(self) -> int:
        """Size of one compressed 4x4 block in bytes."""
        return 8 if self in (BcnFormat.BC1, BcnFormat.BC4) else 16


class SurfaceError(Exception):
    """A surface could not be decoded."""


class NotEnoughDataError(SurfaceError):
    """The compressed data is shorter than the surface dimensions require."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"not enough data: expected at least {expected} bytes, got {actual}"
        )
        self.expected = expected
        self.actual = actual


def _rows(flat: Sequence, channels: int) -> BlockPixels:
    pixels = [tuple(flat[k : k + channels]) for k in range(0, len(flat), channels)]
    return [pixels[row : row + BLOCK_WIDTH] for row in range(0, len(pixels), BLOCK_WIDTH)]


def _float_to_u8(value: float) -> int:
    """Scale to 0-255 and truncate, saturating like a float to byte cast."""
    scaled = _F32.unpack(_F32.pack(value * 255.0))[0]
    if math.isnan(scaled):
        return 0
    if scaled <= 0.0:
        return 0
    if scaled >= 255.0:
        return 255
    return int(scaled)


def decompress_block_float(fmt: BcnFormat, block: bytes) -> BlockPixels:
    """Decode one block to 4 rows of 4 RGBA float pixels.

    Only BC6 holds floating point data.
    """
    if fmt is not BcnFormat.BC6:
        raise SurfaceError(f"{fmt.name} cannot be decoded to floating point")
    rgb = bc6h_float(block, False)
    rgba = [
        value
        for k in range(0, len(rgb), 3)
        for value in (rgb[k], rgb[k + 1], rgb[k + 2], 1.0)
    ]
    return _rows(rgba, CHANNELS)


def decompress_block(fmt: BcnFormat, block: bytes) -> BlockPixels:
    """Decode one block to 4 rows of 4 RGBA8 pixels."""
    if fmt is BcnFormat.BC1:
        return _rows(bc1(block), CHANNELS)
    if fmt is BcnFormat.BC2:
        return _rows(bc2(block), CHANNELS)
    if fmt is BcnFormat.BC3:
        return _rows(bc3(block), CHANNELS)
    if fmt is BcnFormat.BC4:
        # Shown as grayscale rather than red to avoid confusion with colour data.
        return _rows([v for r in bc4(block) for v in (r, r, r, 255)], CHANNELS)
    if fmt is BcnFormat.BC5:
        # The blue channel is conventionally zero for BC5.
        rg = bc5(block)
        return _rows(
            [v for k in range(0, len(rg), 2) for v in (rg[k], rg[k + 1], 0, 255)],
            CHANNELS,
        )
    if fmt is BcnFormat.BC6:
        return [
            [tuple(_float_to_u8(c) for c in pixel) for pixel in row]
            for row in decompress_block_float(fmt, block)
        ]
    if fmt is BcnFormat.BC7:
        return _rows(bc7(block), CHANNELS)
    raise SurfaceError(f"unsupported format: {fmt!r}")


def put_rgba_block(
    surface: MutableSequence,
    pixels: Sequence[Sequence[Sequence]],
    x: int,
    y: int,
    width: int,
    height: int,
) -> None:
    """Copy a 4x4 block of RGBA pixels into ``surface`` at pixel ``(x, y)``.

    Rows and columns that fall outside the surface are dropped.
    """
    if x > width or y > height or x < 0 or y < 0:
        raise ValueError(f"block position ({x}, {y}) is outside a {width}x{height} surface")
    elements_per_row = CHANNELS * min(BLOCK_WIDTH, width - x)
    for row, row_pixels in enumerate(pixels[: min(BLOCK_HEIGHT, height - y)]):
        start = ((y + row) * width + x) * CHANNELS
        flat = [c for pixel in row_pixels for c in pixel]
        surface[start : start + elements_per_row] = flat[:elements_per_row]


def _expected_size(fmt: BcnFormat, width: int, height: int) -> int:
    if width < 0 or height < 0:
        raise ValueError(f"invalid surface dimensions {width}x{height}")
    blocks_x = -(-width // BLOCK_WIDTH)
    blocks_y = -(-height // BLOCK_HEIGHT)
    return blocks_x * blocks_y * fmt.block_size()


def _decode_surface(fmt, width, height, data, decode, surface) -> None:
    data = bytes(data)
    expected = _expected_size(fmt, width, height)
    # Mipmaps need not be multiples of the block size, so only the length matters.
    if len(data) < expected:
        raise NotEnoughDataError(expected, len(data))

    size = fmt.block_size()
    offset = 0
    for y in range(0, height, BLOCK_HEIGHT):
        for x in range(0, width, BLOCK_WIDTH):
            pixels = decode(fmt, data[offset : offset + size])
            put_rgba_block(surface, pixels, x, y, width, height)
            offset += size


def rgba_from_bcn(fmt: BcnFormat, width: int, height: int, data: bytes) -> bytes:
    """Decode a compressed surface to row-major RGBA8 bytes."""
    surface = bytearray(width * height * CHANNELS)
    _decode_surface(fmt, width, height, data, decompress_block, surface)
    return bytes(surface)


def rgbaf32_from_bcn(fmt: BcnFormat, width: int, height: int, data: bytes) -> list[float]:
    """Decode a compressed surface to row-major RGBA floats."""
    surface = [0.0] * (width * height * CHANNELS)
    _decode_surface(fmt, width, height, data, decompress_block_float, surface)
    return surface