"""Render configuration and Taichi backend initialization.

RenderSettings collects everything a render pass needs besides the scene and
the camera, and validates it up front so configuration mistakes surface as
ValueError before any kernel runs.

Example:
    >>> from sphere_pathtracer.config import RenderSettings, init_backend
    >>> init_backend("cpu")
    >>> settings = RenderSettings(width=256, height=256, samples_per_pixel=64, seed=1)
"""

import logging
from dataclasses import dataclass

import taichi as ti

from sphere_pathtracer.core.integrator import MAX_DEPTH
from sphere_pathtracer.core.sampler import SEED_MASK

logger = logging.getLogger(__name__)

# Largest supported image side in pixels
MAX_IMAGE_SIZE = 8192

# Default number of image rows traced per kernel launch
DEFAULT_ROWS_PER_BATCH = 32

_ARCHS = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
    "cuda": ti.cuda,
    "vulkan": ti.vulkan,
    "metal": ti.metal,
}


@dataclass(frozen=True)
class RenderSettings:
    """Settings for one render pass.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of paths averaged per pixel (>= 1). With a
            single sample the camera ray goes through the pixel center.
        seed: Global seed; renders with the same seed are bit-identical.
        max_depth: Hard cap on surface interactions per path.
        rows_per_batch: Image rows traced per kernel launch. Progress is
            reported and cancellation is possible between batches.

    Raises:
        ValueError: If any setting is out of range.
    """

    width: int
    height: int
    samples_per_pixel: int = 16
    seed: int = 0
    max_depth: int = MAX_DEPTH
    rows_per_batch: int = DEFAULT_ROWS_PER_BATCH

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if value < 1:
                raise ValueError(f"Image {name} must be positive, got {value}")
            if value > MAX_IMAGE_SIZE:
                raise ValueError(
                    f"Image {name} ({value}) exceeds maximum supported ({MAX_IMAGE_SIZE})"
                )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {self.max_depth}")
        if self.rows_per_batch < 1:
            raise ValueError(f"rows_per_batch must be at least 1, got {self.rows_per_batch}")
        object.__setattr__(self, "seed", int(self.seed) & SEED_MASK)

    @property
    def jitter(self) -> bool:
        """Whether camera rays are jittered inside the pixel."""
        return self.samples_per_pixel > 1


def init_backend(arch: str = "cpu", *, random_seed: int = 0, debug: bool = False) -> None:
    """Initialize the Taichi runtime.

    Must be called once, before any Scene is created or frame rendered.

    Args:
        arch: One of "cpu", "gpu", "cuda", "vulkan", "metal". "gpu" lets
            Taichi pick an available GPU backend and fall back to CPU.
        random_seed: Seed for Taichi's own generator. The path tracer draws
            from its per-sample streams and does not depend on it.
        debug: Enable Taichi debug mode (bounds checks, slower).

    Raises:
        ValueError: If arch is not a known backend name.
    """
    key = arch.lower()
    if key not in _ARCHS:
        raise ValueError(f"Unknown backend {arch!r}; expected one of {sorted(_ARCHS)}")

    logger.debug("Initializing Taichi backend %s (debug=%s)", key, debug)
    ti.init(arch=_ARCHS[key], random_seed=random_seed, debug=debug)
