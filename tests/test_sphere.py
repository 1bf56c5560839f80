"""Unit tests for ray-sphere intersection.

Tests cover:
- Ray hitting a sphere from outside
- Ray missing a sphere
- Ray starting on or inside the sphere
- Sphere entirely behind the ray
- Chord length through the center
"""

import math

import taichi as ti


def _hit(origin, direction, center, radius):
    """Run hit_sphere in a kernel and return (hit, t, point, normal)."""
    from sphere_pathtracer.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, c: vec3, r: ti.f32):
        record = hit_sphere(o, d, Sphere(center=c, radius=r))
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius)
    return hit[None], t_val[None], point[None], normal[None]


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_center_aimed_ray_distance(self):
        """A ray aimed at the center hits at |eye - center| - radius."""
        eye = (0.0, 0.0, -4.0)
        center = (0.0, 0.0, 5.0)
        hit, t, point, normal = _hit(eye, (0.0, 0.0, 1.0), center, 1.0)

        assert hit == 1
        assert abs(t - 8.0) < 1e-5
        assert abs(point[2] - 4.0) < 1e-5
        # Outward normal faces the eye
        assert abs(normal[2] + 1.0) < 1e-5

    def test_normal_parallel_to_hit_minus_center(self):
        origin = (3.0, 4.0, 0.0)
        direction = (-0.6, -0.8, 0.0)
        hit, t, point, normal = _hit(origin, direction, (0.0, 0.0, 0.0), 1.0)

        assert hit == 1
        assert abs(t - 4.0) < 1e-5
        # Unit sphere at the origin: the normal equals the hit point
        for i in range(3):
            assert abs(normal[i] - point[i]) < 1e-5
        assert abs(math.sqrt(sum(n * n for n in normal)) - 1.0) < 1e-5

    def test_miss(self):
        hit, _, _, _ = _hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 5.0), 1.0)
        assert hit == 0

    def test_sphere_behind_ray_is_missed(self):
        hit, _, _, _ = _hit((0.0, 0.0, 10.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert hit == 0

    def test_origin_on_surface_uses_far_root(self):
        """A root closer than the epsilon is skipped in favor of the far root."""
        hit, t, point, normal = _hit((0.0, 0.0, -1.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)

        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert abs(point[2] - 1.0) < 1e-5
        assert abs(normal[2] - 1.0) < 1e-5

    def test_origin_inside_normal_points_outward(self):
        hit, t, _, normal = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0), 2.0)

        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert abs(normal[0] - 1.0) < 1e-5

    def test_large_sphere_far_from_origin(self):
        """Wall-sized spheres stay accurate in f32."""
        hit, t, _, _ = _hit((0.0, 0.0, -4.0), (0.0, 0.0, 1.0), (0.0, 0.0, 1001.0), 1000.0)

        assert hit == 1
        assert abs(t - 5.0) < 1e-3


class TestChordLength:
    """The two roots of a ray through the center are one diameter apart."""

    def test_chord_through_center(self):
        from sphere_pathtracer.geometry.sphere import Sphere, solve_sphere_roots, vec3

        has_roots = ti.field(dtype=ti.i32, shape=())
        t0 = ti.field(dtype=ti.f32, shape=())
        t1 = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(1.0, -2.0, 3.0), radius=2.5)
            direction = vec3(1.0, 1.0, -1.0).normalized()
            origin = sphere.center - 10.0 * direction
            found, a, b = solve_sphere_roots(origin, direction, sphere)
            has_roots[None] = found
            t0[None] = a
            t1[None] = b

        test_kernel()
        assert has_roots[None] == 1
        assert abs((t1[None] - t0[None]) - 5.0) < 1e-4
        assert abs(t0[None] - 7.5) < 1e-4
