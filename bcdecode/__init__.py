"""Pure Python decoders for BC1-BC7 blocks and block-compressed surfaces."""

__version__ = "0.2.0"
__all__ = ["bitstream", "legacy", "channels", "bc6h", "bc7", "surface"]