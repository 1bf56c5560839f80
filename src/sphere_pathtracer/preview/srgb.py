"""sRGB display encoding and BGRA8 buffer writing.

Linear radiance is encoded for display with the piecewise sRGB transfer
curve:

    srgb = 12.92 * x                      for x <= 0.0031308
    srgb = 1.055 * x^(1/2.4) - 0.055      otherwise

after clamping x to [0, 1]. The result is scaled to [0, 255] and rounded half
to even. All arithmetic is float32.

write_bgra() packs an encoded image into a host pixel buffer laid out as
rows of ``stride`` bytes, each pixel stored as B, G, R, A with A = 255. Bytes
past ``width * 4`` in a row are left untouched.

Example:
    >>> import numpy as np
    >>> from sphere_pathtracer.preview.srgb import encode_srgb8, to_display_byte
    >>> to_display_byte(0.5)
    188
    >>> encode_srgb8(np.ones((2, 2, 3), dtype=np.float32))[0, 0]
    array([255, 255, 255], dtype=uint8)
"""

import numpy as np
import numpy.typing as npt

# Linear segment threshold of the sRGB curve
SRGB_LINEAR_THRESHOLD = np.float32(0.0031308)

BYTES_PER_PIXEL = 4


def encode_srgb8(image: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Encode linear radiance values to 8-bit sRGB.

    Args:
        image: Linear values of any shape, typically (H, W, 3). NaN is
            treated as 0.

    Returns:
        uint8 array of the same shape.
    """
    x = np.asarray(image, dtype=np.float32)
    x = np.nan_to_num(x, nan=0.0, posinf=1.0, neginf=0.0)
    x = np.clip(x, np.float32(0.0), np.float32(1.0))

    with np.errstate(invalid="ignore"):
        curve = np.float32(1.055) * np.power(x, np.float32(1.0 / 2.4)) - np.float32(0.055)
    srgb = np.where(x <= SRGB_LINEAR_THRESHOLD, np.float32(12.92) * x, curve)

    # np.rint rounds half to even
    scaled = np.rint(srgb * np.float32(255.0))
    return np.clip(scaled, 0, 255).astype(np.uint8)


def to_display_byte(value: float) -> int:
    """Encode one linear channel value to an sRGB byte.

    Args:
        value: Linear radiance. Values <= 0 give 0, values >= 1 give 255.

    Returns:
        The encoded byte as an int in [0, 255].
    """
    return int(encode_srgb8(np.float32(value)))


def check_bgra_target(width: int, height: int, buffer=None, stride: int | None = None) -> int:
    """Validate a BGRA destination for a width x height image.

    Returns:
        The effective stride in bytes.

    Raises:
        ValueError: If the stride is smaller than width * 4, or the buffer is
            too small or read-only.
    """
    row_bytes = width * BYTES_PER_PIXEL
    if stride is None:
        stride = row_bytes
    if stride < row_bytes:
        raise ValueError(f"stride ({stride}) must be at least width * 4 ({row_bytes})")

    if buffer is not None:
        required = stride * height
        raw = np.frombuffer(buffer, dtype=np.uint8)
        if raw.size < required:
            raise ValueError(f"Buffer holds {raw.size} bytes, need at least {required}")
        if not raw.flags.writeable:
            raise ValueError("Buffer must be writable")
    return stride


def write_bgra(
    image: npt.ArrayLike,
    buffer=None,
    stride: int | None = None,
):
    """Encode an image and write it into a BGRA8 buffer.

    Args:
        image: Linear radiance image of shape (H, W, 3), row 0 at the top.
        buffer: Writable bytes-like object (bytearray, memoryview, uint8
            array) of at least stride * H bytes. Allocated when None.
        stride: Bytes per row. Defaults to W * 4 and must be at least W * 4.

    Returns:
        The buffer that was written.

    Raises:
        ValueError: If the image shape is wrong, the stride is smaller than
            W * 4, or the buffer is too small or read-only.
    """
    encoded = encode_srgb8(image)
    if encoded.ndim != 3 or encoded.shape[2] != 3:
        raise ValueError(f"Image must have shape (H, W, 3), got {encoded.shape}")

    height, width = encoded.shape[:2]
    row_bytes = width * BYTES_PER_PIXEL
    stride = check_bgra_target(width, height, buffer, stride)

    required = stride * height
    if buffer is None:
        buffer = bytearray(required)

    raw = np.frombuffer(buffer, dtype=np.uint8)
    rows = raw[:required].reshape(height, stride)[:, :row_bytes]
    rows[:, 0::4] = encoded[:, :, 2]
    rows[:, 1::4] = encoded[:, :, 1]
    rows[:, 2::4] = encoded[:, :, 0]
    rows[:, 3::4] = 255
    return buffer
