"""Little-endian bit reader over a 128-bit compressed block."""

from __future__ import annotations

BLOCK_BYTES = 16


class Bitstream:
    """Reads bits, least significant first, from a 16-byte compressed block.

    Bits read past the end of the block are zero.
    """

    __slots__ = ("_value",)

    def __init__(self, block: bytes | bytearray | memoryview) -> None:
        data = bytes(block)
        if len(data) < BLOCK_BYTES:
            raise ValueError(
                f"a block needs {BLOCK_BYTES} bytes, got {len(data)}"
            )
        self._value = int.from_bytes(data[:BLOCK_BYTES], "little")

    def read_bits(self, num_bits: int) -> int:
        """Consume ``num_bits`` bits and return them as an unsigned integer."""
        if num_bits < 0:
            raise ValueError(f"cannot read a negative number of bits: {num_bits}")
        bits = self._value & ((1 << num_bits) - 1)
        self._value >>= num_bits
        return bits

    def read_bit(self) -> int:
        """Consume a single bit."""
        return self.read_bits(1)

    def read_bits_reversed(self, num_bits: int) -> int:
        """Consume ``num_bits`` bits and return them in reversed bit order."""
        bits = self.read_bits(num_bits)
        result = 0
        for _ in range(num_bits):
            result = (result << 1) | (bits & 1)
            bits >>= 1
        return result