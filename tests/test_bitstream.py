import pytest
from hypothesis import given
from hypothesis import strategies as st

from bcdecode.bitstream import Bitstream


def _pack(fields):
    """Pack (value, width) pairs, first field in the lowest bits, into 16 bytes."""
    value = 0
    shift = 0
    for field, width in fields:
        value |= field << shift
        shift += width
    assert shift <= 128
    return value.to_bytes(16, "little")


def _reverse_by_string(value, width):
    if width == 0:
        return 0
    return int(format(value, f"0{width}b")[::-1], 2)


def test_reads_fields_in_order():
    fields = [(3, 2), (0b10110, 5), (0x3FF, 10), (0, 4), (1, 1), (0x1234, 16)]
    stream = Bitstream(_pack(fields))
    assert [stream.read_bits(width) for _, width in fields] == [
        value for value, _ in fields
    ]


def test_read_across_64_bit_boundary():
    fields = [(0, 60), (0xAB, 8), (0x5, 3)]
    stream = Bitstream(_pack(fields))
    stream.read_bits(60)
    assert stream.read_bits(8) == 0xAB
    assert stream.read_bits(3) == 0x5


def test_all_ones_block():
    stream = Bitstream(b"\xff" * 16)
    assert stream.read_bits(64) == 2**64 - 1
    assert stream.read_bits(64) == 2**64 - 1
    assert stream.read_bits(8) == 0


def test_read_bit_follows_byte_bits_lsb_first():
    data = bytes([0b1010_0101]) + bytes(15)
    stream = Bitstream(data)
    bits = [stream.read_bit() for _ in range(8)]
    assert int("".join(str(b) for b in reversed(bits)), 2) == data[0]


def test_reads_past_end_are_zero():
    stream = Bitstream(b"\xff" * 16)
    stream.read_bits(128)
    assert stream.read_bits(32) == 0


def test_only_first_sixteen_bytes_used():
    stream = Bitstream(bytes(16) + b"\xff" * 4)
    assert stream.read_bits(128) == 0
    assert stream.read_bit() == 0


def test_zero_width_read_consumes_nothing():
    stream = Bitstream(_pack([(1, 1)]))
    assert stream.read_bits(0) == 0
    assert stream.read_bit() == 1


def test_reversed_read():
    stream = Bitstream(_pack([(0b01, 2), (0b000011, 6)]))
    assert stream.read_bits_reversed(2) == 0b10
    assert stream.read_bits_reversed(6) == 0b110000


def test_short_block_rejected():
    with pytest.raises(ValueError):
        Bitstream(bytes(8))


def test_negative_width_rejected():
    stream = Bitstream(bytes(16))
    with pytest.raises(ValueError):
        stream.read_bits(-1)


@given(st.lists(st.integers(min_value=1, max_value=16), min_size=1, max_size=8), st.data())
def test_round_trip_fields(widths, data):
    fields = [
        (data.draw(st.integers(min_value=0, max_value=(1 << w) - 1)), w)
        for w in widths
    ]
    stream = Bitstream(_pack(fields))
    assert [stream.read_bits(w) for w in widths] == [v for v, _ in fields]


@given(st.lists(st.integers(min_value=1, max_value=16), min_size=1, max_size=8), st.data())
def test_round_trip_reversed_fields(widths, data):
    values = [
        data.draw(st.integers(min_value=0, max_value=(1 << w) - 1)) for w in widths
    ]
    packed = _pack([(_reverse_by_string(v, w), w) for v, w in zip(values, widths)])
    stream = Bitstream(packed)
    assert [stream.read_bits_reversed(w) for w in widths] == values


@given(st.binary(min_size=16, max_size=16), st.lists(st.integers(0, 20), max_size=12))
def test_reads_concatenate_to_block_value(block, widths):
    stream = Bitstream(block)
    total = 0
    shift = 0
    for width in widths:
        total |= stream.read_bits(width) << shift
        shift += width
    total |= stream.read_bits(128) << shift
    assert total == int.from_bytes(block, "little")