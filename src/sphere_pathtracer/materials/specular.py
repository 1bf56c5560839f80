"""Mirror lobe: perfect specular reflection tinted by the specular color.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the surface normal.
"""

import taichi as ti
import taichi.math as tm

from sphere_pathtracer.core.ray import reflect

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_specular(tint: vec3, incident_direction: vec3, normal: vec3):
    """Reflect the incident ray about the surface normal.

    Args:
        tint: The mirror color (RGB, each component in [0, 1]).
        incident_direction: The incoming unit ray direction.
        normal: The unit surface normal.

    Returns:
        A tuple of (reflected_direction, attenuation).
    """
    reflected = tm.normalize(reflect(incident_direction, normal))
    return reflected, tint
