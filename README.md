# bcdecode

Decoders for the block-compressed (BCn) texture formats used by GPUs,
written in pure Python with no dependencies.

Every BCn format stores a 4x4 pixel tile in a fixed-size block: 8 bytes for
BC1 and BC4, 16 bytes for BC2, BC3, BC5, BC6H and BC7. A block shorter than
its format needs raises `ValueError`; extra bytes are ignored.

## Installation

```
pip install bcdecode
```

## Decoding single blocks

Each block decoder takes the compressed bytes of one block and returns the
16 pixels of the tile flattened in row-major order.

```python
from bcdecode.legacy import bc1, bc2, bc3
from bcdecode.channels import bc4, bc4_float, bc5, bc5_float
from bcdecode.bc6h import bc6h_half, bc6h_float, half_to_float
from bcdecode.bc7 import bc7

rgba = bc1(bytes(8))                          # 64 bytes of RGBA8
red = bc4(bytes(8), is_signed=False)          # 16 bytes of R8
red_f = bc4_float(bytes(8), is_signed=True)   # 16 floats
rg = bc5(bytes(16), is_signed=False)          # 32 bytes, R and G interleaved
rg_f = bc5_float(bytes(16))                   # 32 floats, R and G interleaved
halves = bc6h_half(bytes(16))                 # 48 ints: RGB half-float bit patterns
rgb_f = bc6h_float(bytes(16), is_signed=True) # 48 floats
rgba7 = bc7(bytes(16))                        # 64 bytes of RGBA8
```

| Function | Output |
| --- | --- |
| `bc1`, `bc2`, `bc3`, `bc7` | `bytes`, 64 values of RGBA8 |
| `bc4` | `bytes`, 16 values; signed values as two's complement bytes |
| `bc5` | `bytes`, 32 values of interleaved RG; signed as two's complement |
| `bc4_float`, `bc5_float` | `list[float]`, 16 or 32 single-precision values |
| `bc6h_half` | `list[int]`, 48 half-precision bit patterns of RGB |
| `bc6h_float` | `list[float]`, 48 single-precision RGB values |

`half_to_float` converts one 16-bit half-precision pattern to a float and
raises `ValueError` for values outside 0..0xFFFF.

Reserved or invalid modes follow the hardware rules: a reserved BC6H mode
decodes to all zeros and an invalid BC7 mode decodes to transparent black.

`bcdecode.bitstream.Bitstream` is the bit reader the BC6H and BC7 decoders
use: it reads a 16-byte block least significant bit first with `read_bits`,
`read_bit` and `read_bits_reversed`, and yields zeros past the end.

## Decoding whole surfaces

`bcdecode.surface` decodes a complete image made of row-major blocks,
clipping the blocks at the right and bottom edges, so dimensions need not
be multiples of four.

```python
from bcdecode.surface import BcnFormat, rgba_from_bcn, rgbaf32_from_bcn

rgba = rgba_from_bcn(BcnFormat.BC1, 8, 8, data)    # bytes, 8 * 8 * 4 values
hdr = rgbaf32_from_bcn(BcnFormat.BC6, 8, 8, data)  # list of 8 * 8 * 4 floats
```

`BcnFormat` has the members `BC1` to `BC7`; `block_size()` gives 8 or 16.
When decoding to RGBA8, BC4 becomes grey with opaque alpha, BC5 red and
green with a zero blue channel and opaque alpha, and BC6 (decoded as
unsigned) is scaled by 255 and clamped to 0..255. Only BC6 can be decoded
to floats, with alpha 1.0; other formats raise `SurfaceError`.

If `data` holds fewer bytes than the surface needs, `NotEnoughDataError`
(a `SurfaceError`) is raised, carrying `expected` and `actual` sizes.

The lower-level helpers are available too: `decompress_block` and
`decompress_block_float` return one block as 4 rows of 4 RGBA tuples, and
`put_rgba_block` copies such a block into a flat RGBA sequence.

## What it does not do

The package only decodes raw block data. It does not read or write DDS or
other image files, does not compress images into BCn formats, and has no
command-line tool.

## Running the tests

```
pip install -e ".[test]"
pytest
```