import struct

import pytest
from hypothesis import given, strategies as st

from bcdecode.legacy import bc1, bc2, bc3

INDEX_0 = 0x00000000
INDEX_1 = 0x55555555
INDEX_2 = 0xAAAAAAAA
INDEX_3 = 0xFFFFFFFF


def color_block(c0, c1, indices):
    return struct.pack("<HHI", c0, c1, indices)


def pixels(data):
    return [tuple(data[i:i + 4]) for i in range(0, len(data), 4)]


def smooth_alpha(a0, a1, index):
    bits = 0
    for k in range(16):
        bits |= index << (3 * k)
    return bytes([a0, a1]) + bits.to_bytes(6, "little")


def test_bc1_white_endpoint():
    out = bc1(color_block(0xFFFF, 0x0000, INDEX_0))
    assert len(out) == 64
    assert pixels(out) == [(255, 255, 255, 255)] * 16


def test_bc1_black_endpoint():
    out = bc1(color_block(0xFFFF, 0x0000, INDEX_1))
    assert pixels(out) == [(0, 0, 0, 255)] * 16


def test_bc1_punch_through_is_transparent_black():
    out = bc1(color_block(0x0000, 0xFFFF, INDEX_3))
    assert pixels(out) == [(0, 0, 0, 0)] * 16


def test_bc1_opaque_mode_interpolants_between_endpoints():
    third = pixels(bc1(color_block(0xFFFF, 0x0000, INDEX_2)))[0]
    two_thirds = pixels(bc1(color_block(0xFFFF, 0x0000, INDEX_3)))[0]
    assert third[3] == 255 and two_thirds[3] == 255
    for a, b in zip(third[:3], two_thirds[:3]):
        assert 0 < b < a < 255


def test_bc1_indices_follow_row_major_order():
    indices = 0
    for k in range(16):
        indices |= (k % 2) << (2 * k)
    out = pixels(bc1(color_block(0xFFFF, 0x0000, indices)))
    for k, pixel in enumerate(out):
        expected = (0, 0, 0, 255) if k % 2 else (255, 255, 255, 255)
        assert pixel == expected


@given(st.integers(0, 31))
def test_bc1_red_expansion_keeps_extremes_and_order(r):
    low = pixels(bc1(color_block(r << 11, 0, INDEX_0)))[0][0]
    if r < 31:
        high = pixels(bc1(color_block((r + 1) << 11, 0, INDEX_0)))[0][0]
        assert high > low
    if r == 0:
        assert low == 0
    if r == 31:
        assert low == 255


@given(st.binary(min_size=8, max_size=8))
def test_bc1_opaque_when_c0_greater(data):
    c0, c1 = struct.unpack("<HH", data[:4])
    out = pixels(bc1(data))
    assert len(out) == 16
    if c0 > c1:
        assert all(p[3] == 255 for p in out)


def test_bc2_explicit_alpha_nibbles():
    alpha_bits = 0
    for k in range(16):
        alpha_bits |= k << (4 * k)
    block = alpha_bits.to_bytes(8, "little") + color_block(0xFFFF, 0, INDEX_0)
    out = pixels(bc2(block))
    assert [p[3] for p in out] == [k * 17 for k in range(16)]
    assert all(p[:3] == (255, 255, 255) for p in out)


def test_bc2_color_ignores_punch_through():
    block = bytes([0xFF] * 8) + color_block(0x0000, 0x0000, INDEX_3)
    assert pixels(bc2(block)) == [(0, 0, 0, 255)] * 16


def test_bc3_endpoints():
    color = color_block(0xFFFF, 0, INDEX_0)
    assert [p[3] for p in pixels(bc3(smooth_alpha(255, 0, 0) + color))] == [255] * 16
    assert [p[3] for p in pixels(bc3(smooth_alpha(255, 0, 1) + color))] == [0] * 16


def test_bc3_four_value_mode_extremes():
    color = color_block(0xFFFF, 0, INDEX_0)
    assert all(p[3] == 0 for p in pixels(bc3(smooth_alpha(10, 200, 6) + color)))
    assert all(p[3] == 255 for p in pixels(bc3(smooth_alpha(10, 200, 7) + color)))


def test_bc3_six_value_mode_is_monotonic():
    color = color_block(0xFFFF, 0, INDEX_0)
    values = [pixels(bc3(smooth_alpha(255, 0, i) + color))[0][3] for i in (0, 2, 3, 4, 5, 6, 7, 1)]
    assert values == sorted(values, reverse=True)
    assert len(set(values)) == len(values)


@given(st.binary(min_size=16, max_size=16))
def test_bc2_and_bc3_share_colors(data):
    two = pixels(bc2(data))
    three = pixels(bc3(data))
    assert [p[:3] for p in two] == [p[:3] for p in three]


@given(st.binary(min_size=16, max_size=16))
def test_bc2_color_matches_bc1_when_opaque(data):
    c0, c1 = struct.unpack("<HH", data[8:12])
    if c0 > c1:
        assert [p[:3] for p in pixels(bc2(data))] == [p[:3] for p in pixels(bc1(data[8:]))]
    assert len(bc2(data)) == 64


@pytest.mark.parametrize(
    "decode, size",
    [(bc1, 7), (bc2, 15), (bc3, 0)],
)
def test_short_block_raises(decode, size):
    with pytest.raises(ValueError):
        decode(bytes(size))