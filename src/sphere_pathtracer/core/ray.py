"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the small set of vector helpers the
integrator needs. Everything here runs inside Taichi kernels; host code works
with plain 3-tuples and converts at the kernel boundary.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray.origin + 5.0 * ray.direction  # Point 5 units along the ray
"""

import math

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Unit length by the
            time it reaches an intersection test.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Args:
        v: The input vector.

    Returns:
        The squared Euclidean length of the vector.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The mirrored direction ``incident - 2 (incident . normal) normal``.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def max_component(v: vec3) -> ti.f32:
    """Return the largest of the three components of v."""
    return ti.max(v.x, ti.max(v.y, v.z))


# =============================================================================
# Host-side helpers
# =============================================================================


def as_vec3_tuple(value, name: str = "vector") -> tuple[float, float, float]:
    """Convert a 3-sequence to a tuple of finite floats.

    Args:
        value: Any sequence of three numbers.
        name: Name used in error messages.

    Returns:
        The value as a tuple of three Python floats.

    Raises:
        ValueError: If value does not have exactly three finite components.
    """
    components = tuple(float(c) for c in value)
    if len(components) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(components)}")
    if not all(math.isfinite(c) for c in components):
        raise ValueError(f"{name} must be finite, got {components}")
    return components  # type: ignore[return-value]


def normalize_direction(direction) -> tuple[float, float, float]:
    """Normalize a host-side direction, rejecting zero-length input.

    Raises:
        ValueError: If the direction has zero (or non-finite) length.
    """
    x, y, z = as_vec3_tuple(direction, "direction")
    norm = math.sqrt(x * x + y * y + z * z)
    if norm == 0.0:
        raise ValueError("Ray direction must have non-zero length")
    return (x / norm, y / norm, z / norm)
