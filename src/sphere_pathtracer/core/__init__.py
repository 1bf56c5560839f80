"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers
    sampler: Per-sample random streams and hemisphere sampling
    integrator: Path tracing with Russian roulette
    frame: Per-pixel frame driver with row batching

The integrator and frame driver are not imported here to avoid circular
imports with sphere_pathtracer.config. Import them directly:
    from sphere_pathtracer.core.frame import FrameRenderer, render
"""

from .ray import (
    Ray,
    as_vec3_tuple,
    length_squared,
    make_ray,
    max_component,
    normalize,
    normalize_direction,
    reflect,
    vec3,
)
from .sampler import (
    next_float,
    pcg_hash,
    sample_in_unit_ball,
    sample_uniform_hemisphere,
    seed_sampler,
)

__all__ = [
    "Ray",
    "make_ray",
    "vec3",
    "length_squared",
    "normalize",
    "reflect",
    "max_component",
    "as_vec3_tuple",
    "normalize_direction",
    "pcg_hash",
    "seed_sampler",
    "next_float",
    "sample_in_unit_ball",
    "sample_uniform_hemisphere",
]
