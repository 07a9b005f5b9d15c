import pytest
from hypothesis import given, strategies as st

from bcdecode.surface import (
    BcnFormat,
    NotEnoughDataError,
    SurfaceError,
    decompress_block,
    decompress_block_float,
    put_rgba_block,
    rgba_from_bcn,
    rgbaf32_from_bcn,
)

WHITE_BC1 = bytes([0xFF, 0xFF, 0x00, 0x00, 0, 0, 0, 0])


def _block(value):
    return [[(value,) * 4 for _ in range(4)] for _ in range(4)]


def test_put_rgba_block_4x4():
    surface = bytearray(4 * 4 * 4)
    put_rgba_block(surface, _block(1), 0, 0, 4, 4)
    assert surface == bytearray([1] * (4 * 4 * 4))


def test_put_rgba_block_5x5():
    surface = bytearray(5 * 5 * 4)
    put_rgba_block(surface, _block(1), 0, 0, 5, 5)
    put_rgba_block(surface, _block(2), 1, 1, 5, 5)
    expected = [
        [1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 0, 0, 0],
        [1, 1, 1, 1, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2],
        [1, 1, 1, 1, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2],
        [1, 1, 1, 1, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2],
        [0, 0, 0, 0, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2, 2],
    ]
    assert list(surface) == [v for row in expected for v in row]


def test_put_rgba_block_outside_surface():
    with pytest.raises(ValueError):
        put_rgba_block(bytearray(16), _block(1), 5, 0, 2, 2)


@pytest.mark.parametrize(
    "fmt, size",
    [
        (BcnFormat.BC1, 8),
        (BcnFormat.BC2, 16),
        (BcnFormat.BC3, 16),
        (BcnFormat.BC4, 8),
        (BcnFormat.BC5, 16),
        (BcnFormat.BC6, 16),
        (BcnFormat.BC7, 16),
    ],
)
def test_block_size(fmt, size):
    assert fmt.block_size() == size


@pytest.mark.parametrize(
    "fmt, pixel",
    [
        (BcnFormat.BC1, (0, 0, 0, 255)),
        (BcnFormat.BC2, (0, 0, 0, 0)),
        (BcnFormat.BC3, (0, 0, 0, 0)),
        (BcnFormat.BC4, (0, 0, 0, 255)),
        (BcnFormat.BC5, (0, 0, 0, 255)),
        (BcnFormat.BC6, (0, 0, 0, 255)),
        (BcnFormat.BC7, (0, 0, 0, 0)),
    ],
)
def test_decompress_zero_block(fmt, pixel):
    pixels = decompress_block(fmt, bytes(fmt.block_size()))
    assert pixels == [[pixel] * 4 for _ in range(4)]


def test_decompress_bc1_white():
    assert decompress_block(BcnFormat.BC1, WHITE_BC1) == [[(255, 255, 255, 255)] * 4] * 4


def test_decompress_bc4_is_grayscale():
    block = bytes([255, 0, 0, 0, 0, 0, 0, 0])
    assert decompress_block(BcnFormat.BC4, block) == [[(255, 255, 255, 255)] * 4] * 4


def test_decompress_bc5_zeroes_blue():
    block = bytes([255, 0, 0, 0, 0, 0, 0, 0]) + bytes(8)
    assert decompress_block(BcnFormat.BC5, block) == [[(255, 0, 0, 255)] * 4] * 4


def test_decompress_block_float_bc6_zero():
    assert decompress_block_float(BcnFormat.BC6, bytes(16)) == [[(0.0, 0.0, 0.0, 1.0)] * 4] * 4


def test_decompress_block_float_rejects_integer_formats():
    with pytest.raises(SurfaceError):
        decompress_block_float(BcnFormat.BC1, bytes(8))


def test_rgba_from_bcn_single_block():
    assert rgba_from_bcn(BcnFormat.BC1, 4, 4, WHITE_BC1) == bytes([255] * 64)


def test_rgba_from_bcn_block_layout():
    data = WHITE_BC1 + bytes(8)
    rgba = rgba_from_bcn(BcnFormat.BC1, 8, 4, data)
    first_row = rgba[: 8 * 4]
    assert first_row == bytes([255] * 16) + bytes([0, 0, 0, 255] * 4)
    assert len(rgba) == 8 * 4 * 4


def test_rgba_from_bcn_small_mipmap():
    assert rgba_from_bcn(BcnFormat.BC1, 1, 1, WHITE_BC1) == bytes([255] * 4)


def test_rgba_from_bcn_not_enough_data():
    with pytest.raises(NotEnoughDataError) as info:
        rgba_from_bcn(BcnFormat.BC1, 5, 5, WHITE_BC1)
    assert info.value.expected == 32
    assert info.value.actual == 8


def test_rgbaf32_from_bcn_bc6():
    assert rgbaf32_from_bcn(BcnFormat.BC6, 4, 4, bytes(16)) == [0.0, 0.0, 0.0, 1.0] * 16


def test_rgbaf32_from_bcn_rejects_bc7():
    with pytest.raises(SurfaceError):
        rgbaf32_from_bcn(BcnFormat.BC7, 4, 4, bytes(16))


@given(
    st.sampled_from(list(BcnFormat)),
    st.integers(min_value=1, max_value=12),
    st.integers(min_value=1, max_value=12),
)
def test_rgba_from_bcn_output_length(fmt, width, height):
    blocks = -(-width // 4) * -(-height // 4)
    rgba = rgba_from_bcn(fmt, width, height, bytes(blocks * fmt.block_size()))
    assert len(rgba) == width * height * 4