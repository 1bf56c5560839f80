"""Sphere primitive with epsilon-guarded ray-sphere intersection.

The intersection solves

    |o + t d - c|^2 = r^2

as a quadratic in t. It is evaluated in the half-b form with the robust root
formula from Ray Tracing Gems, which gives the same roots as the textbook
``(-b -+ sqrt(b^2 - 4ac)) / 2a`` without catastrophic cancellation. Large
spheres (the room walls use radius 1000) depend on that.

The smaller root is taken first. Roots closer than ``HIT_EPSILON`` are
rejected so a ray leaving a surface does not hit that same surface again.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 5), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Roots below this distance are treated as self-intersections
HIT_EPSILON = 1e-3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected (1 if hit, 0 if miss).
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The 3D point where the ray intersected the sphere.
            Only valid if hit == 1.
        normal: The outward surface normal at the intersection point
            (unit length, pointing away from the sphere center).
            Only valid if hit == 1.
        sphere_index: Index of the hit sphere in its scene, -1 on a miss.
            Set by scene-level queries; the material is looked up through it.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    sphere_index: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        sphere_index=-1,
    )


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve quadratic equation using robust formula from Ray Tracing Gems.

    Solves a*t^2 + 2*h*t + c = 0 using a numerically stable method.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Tangent ray through the center plane; the standard formula is exact here
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def solve_sphere_roots(ray_origin: vec3, ray_direction: vec3, sphere: Sphere):
    """Compute both ray parameters where the ray's line meets the sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        sphere: The sphere to test.

    Returns:
        A tuple (has_roots, t0, t1) with t0 <= t1. When has_roots is 0 the
        discriminant is negative and t0, t1 are zero.
    """
    oc = ray_origin - sphere.center

    # a*t^2 + 2*h*t + c = 0, with h half of the usual b = 2 * dot(oc, d)
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    # h^2 - ac is a quarter of b^2 - 4ac and has the same sign
    discriminant = h * h - a * c

    has_roots = 0
    t0 = 0.0
    t1 = 0.0
    if discriminant >= 0.0:
        has_roots = 1
        t0, t1 = _solve_quadratic_robust(h, a, c, ti.sqrt(discriminant))

    return has_roots, t0, t1


@ti.func
def hit_sphere(ray_origin: vec3, ray_direction: vec3, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.

    Returns:
        A HitRecord for the nearest root at or beyond HIT_EPSILON. The
        sphere_index field is left at -1 for the caller to fill in.
    """
    result = make_miss_record()

    has_roots, t0, t1 = solve_sphere_roots(ray_origin, ray_direction, sphere)

    if has_roots == 1:
        t = t0
        valid = t >= HIT_EPSILON

        if not valid:
            t = t1
            valid = t >= HIT_EPSILON

        if valid:
            hit_point = ray_origin + t * ray_direction
            result.hit = 1
            result.t = t
            result.point = hit_point
            result.normal = tm.normalize(hit_point - sphere.center)

    return result
