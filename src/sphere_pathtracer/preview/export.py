"""Image export utilities for rendered images.

Supported formats:
    - PNG (8-bit sRGB via Pillow)

Example:
    >>> from sphere_pathtracer.core.frame import render
    >>> from sphere_pathtracer.preview.export import save_png
    >>>
    >>> image = render(scene, camera, 256, 256, samples_per_pixel=64)
    >>> save_png(image, "room.png")
"""

from os import PathLike

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from sphere_pathtracer.preview.srgb import encode_srgb8


def image_to_uint8(image: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Convert a linear float32 image to sRGB uint8 for display or export.

    Args:
        image: Linear radiance image of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3).

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    image = np.asarray(image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Image must have shape (H, W, 3), got {image.shape}")
    return encode_srgb8(image)


def save_png(image: npt.NDArray[np.float32], filepath: str | PathLike) -> None:
    """Save a linear radiance image as an 8-bit sRGB PNG file.

    Args:
        image: Linear radiance image of shape (H, W, 3), row 0 at the top.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the image does not have shape (H, W, 3).
    """
    image_uint8 = image_to_uint8(image)

    # Save using Pillow
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
