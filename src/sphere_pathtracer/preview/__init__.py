"""Output utilities: sRGB encoding, BGRA buffers and PNG export."""

from .export import compute_rmse, image_to_uint8, save_png
from .srgb import check_bgra_target, encode_srgb8, to_display_byte, write_bgra

__all__ = [
    "check_bgra_target",
    "compute_rmse",
    "encode_srgb8",
    "image_to_uint8",
    "save_png",
    "to_display_byte",
    "write_bgra",
]
