"""Diffuse lobe: uniform hemisphere bounce weighted by albedo.

The bounce direction is drawn uniformly over the hemisphere around the normal
and the path throughput is multiplied by the albedo alone. There is no
``2 cos(theta)`` factor, so this is not the textbook unbiased Lambertian
estimator (which would pair cosine-weighted sampling with an albedo weight).
Renders keep this behavior on purpose; expect slightly different brightness
and more noise at grazing angles than a cosine-weighted tracer.

Example:
    >>> # Inside a Taichi kernel:
    >>> # direction, attenuation, state = scatter_diffuse(albedo, normal, state)
"""

import taichi as ti
import taichi.math as tm

from sphere_pathtracer.core.sampler import sample_uniform_hemisphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_diffuse(albedo: vec3, normal: vec3, state: ti.u32):
    """Sample a diffuse bounce.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        normal: The unit surface normal at the hit point.
        state: The sampler state of the current path.

    Returns:
        A tuple of (scattered_direction, attenuation, new_state) where
        scattered_direction lies in the hemisphere of normal and attenuation
        equals albedo.
    """
    scattered_direction, new_state = sample_uniform_hemisphere(normal, state)
    return scattered_direction, albedo, new_state
