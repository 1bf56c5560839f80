"""Path tracing integrator for Monte Carlo light transport.

The integrator estimates the radiance arriving along a ray by following one
random path through the scene. At every hit it:

1. adds the surface emission, scaled by the path throughput,
2. computes the continuation probability q from the material albedos,
3. plays Russian roulette: with probability 1 - q the path stops,
4. otherwise picks the mirror lobe with probability specular_chance, or the
   diffuse lobe, and multiplies the throughput by the lobe weight / q.

This is the recursive estimator ``L = Le + (weight / q) * L(next)`` unrolled
into a loop with a running throughput, so stack usage stays flat. A path that
escapes the scene picks up the background radiance.

Paths normally end by Russian roulette alone. ``max_depth`` is a hard cap that
only matters for scenes where q stays at 1, such as closed mirror cavities.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_pathtracer.core.integrator import trace_ray
    >>> from sphere_pathtracer.scene.room import create_room_scene
    >>> scene, camera = create_room_scene()
    >>> radiance = trace_ray(scene, camera.eye, (0.0, 0.0, 1.0), seed=3)
"""

from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from sphere_pathtracer.core.ray import as_vec3_tuple, normalize_direction
from sphere_pathtracer.core.sampler import SEED_MASK, next_float, seed_sampler
from sphere_pathtracer.materials.lambertian import scatter_diffuse
from sphere_pathtracer.materials.material import continuation_probability
from sphere_pathtracer.materials.specular import scatter_specular

if TYPE_CHECKING:
    from sphere_pathtracer.scene.scene import Scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Hard cap on path length (safety net; Russian roulette ends paths first)
MAX_DEPTH = 64

# Offset along the normal for bounce ray origins
RAY_EPSILON = 1e-4

# Radiance of rays that leave the scene
BACKGROUND_COLOR = (0.0, 0.0, 0.0)


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_radiance(
    scene: ti.template(),
    ray_origin: vec3,
    ray_direction: vec3,
    background: vec3,
    state: ti.u32,
    max_depth: ti.i32,
):
    """Trace a single path and return its radiance estimate.

    Args:
        scene: The Scene to trace against.
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        background: Radiance for rays that escape the scene.
        state: Sampler state owned by this path.
        max_depth: Maximum number of surface interactions.

    Returns:
        A tuple of (radiance, new_state).
    """
    s = state
    origin = ray_origin
    direction = ray_direction

    # Accumulated radiance for this path
    radiance = vec3(0.0, 0.0, 0.0)

    # Product of (lobe weight / q) over all bounces so far
    throughput = vec3(1.0, 1.0, 1.0)

    active = 1
    depth = 0

    while active == 1:
        hit_record = scene.intersect(origin, direction)

        if hit_record.hit == 0:
            radiance += throughput * background
            active = 0
        else:
            material = scene.material(hit_record.sphere_index)
            hit_point = hit_record.point
            normal = hit_record.normal

            radiance += throughput * material.emission

            q = continuation_probability(material)
            u, s = next_float(s)

            # u is in [0, 1), so q == 0 always terminates and q == 1 never does
            if u >= q:
                active = 0
            else:
                lobe, s = next_float(s)

                scattered_direction = vec3(0.0, 0.0, 0.0)
                attenuation = vec3(0.0, 0.0, 0.0)
                if lobe < material.specular_chance:
                    scattered_direction, attenuation = scatter_specular(
                        material.specular, direction, normal
                    )
                else:
                    scattered_direction, attenuation, s = scatter_diffuse(
                        material.diffuse, normal, s
                    )

                throughput *= attenuation / q
                origin = hit_point + RAY_EPSILON * normal
                direction = scattered_direction

                depth += 1
                if depth >= max_depth:
                    active = 0

    return radiance, s


# =============================================================================
# Single-path kernel (testing and probing)
# =============================================================================


@ti.kernel
def _trace_single(
    scene: ti.template(),
    ray_origin: vec3,
    ray_direction: vec3,
    background: vec3,
    seed: ti.u32,
    stream: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Trace one path from a given ray and return its radiance."""
    state = seed_sampler(seed, stream, 0)
    radiance, state = trace_radiance(scene, ray_origin, ray_direction, background, state, max_depth)
    return radiance


def trace_ray(
    scene: "Scene",
    origin,
    direction,
    *,
    seed: int = 0,
    stream: int = 0,
    background=BACKGROUND_COLOR,
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace a single path from Python.

    For production rendering, use the frame driver, which traces every pixel
    in parallel.

    Args:
        scene: The scene to trace against.
        origin: Ray origin as (x, y, z).
        direction: Ray direction as (x, y, z). Normalized before tracing.
        seed: Global seed for the sampler.
        stream: Stream index, so several paths can share a seed.
        background: Radiance for rays leaving the scene.
        max_depth: Maximum number of surface interactions.

    Returns:
        Tuple of (R, G, B) linear radiance.

    Raises:
        ValueError: If direction has zero length or max_depth < 1.
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")

    origin = as_vec3_tuple(origin, "origin")
    direction = normalize_direction(direction)
    background = as_vec3_tuple(background, "background")

    color = _trace_single(
        scene,
        vec3(*origin),
        vec3(*direction),
        vec3(*background),
        seed & SEED_MASK,
        stream,
        max_depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))
