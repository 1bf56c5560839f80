"""Tests for the scene container and nearest-hit queries."""

import math

import pytest


def _diffuse(r=0.5, g=0.5, b=0.5):
    from sphere_pathtracer.materials.material import Material

    return Material(diffuse=(r, g, b))


class TestSphereInfo:
    """Tests for SphereInfo validation."""

    @pytest.mark.parametrize("radius", [0.0, -1.0, math.inf, math.nan])
    def test_invalid_radius_raises(self, radius):
        from sphere_pathtracer.scene.scene import SphereInfo

        with pytest.raises(ValueError, match="radius"):
            SphereInfo(center=(0.0, 0.0, 0.0), radius=radius, material=_diffuse())

    def test_material_type_checked(self):
        from sphere_pathtracer.scene.scene import SphereInfo

        with pytest.raises(ValueError, match="Material"):
            SphereInfo(center=(0.0, 0.0, 0.0), radius=1.0, material=(0.5, 0.5, 0.5))

    def test_center_coerced_to_floats(self):
        from sphere_pathtracer.scene.scene import SphereInfo

        sphere = SphereInfo(center=[1, 2, 3], radius=2, material=_diffuse())
        assert sphere.center == (1.0, 2.0, 3.0)
        assert sphere.radius == 2.0


class TestScene:
    """Tests for Scene construction and queries."""

    def test_rejects_non_sphere_elements(self):
        from sphere_pathtracer.scene.scene import Scene

        with pytest.raises(ValueError, match="SphereInfo"):
            Scene([object()])

    def test_len_and_repr(self):
        from sphere_pathtracer.scene.scene import Scene, SphereInfo

        scene = Scene([SphereInfo(center=(0.0, 0.0, 5.0), radius=1.0, material=_diffuse())])
        assert len(scene) == 1
        assert repr(scene) == "Scene(spheres=1)"

    def test_empty_scene_misses(self):
        from sphere_pathtracer.scene.scene import Scene

        hit = Scene().nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert not hit.did_hit
        assert hit.material is None
        assert hit.distance == math.inf

    def test_nearest_of_two_spheres(self):
        from sphere_pathtracer.scene.scene import Scene, SphereInfo

        near = _diffuse(0.9, 0.1, 0.1)
        far = _diffuse(0.1, 0.1, 0.9)
        # Insertion order must not matter
        scene = Scene([
            SphereInfo(center=(0.0, 0.0, 10.0), radius=1.0, material=far),
            SphereInfo(center=(0.0, 0.0, 5.0), radius=1.0, material=near),
        ])

        hit = scene.nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
        assert hit.did_hit
        assert hit.distance == pytest.approx(4.0, abs=1e-5)
        assert hit.material is near
        assert hit.point == pytest.approx((0.0, 0.0, 4.0), abs=1e-5)
        assert hit.normal == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)

    def test_direction_is_normalized(self):
        from sphere_pathtracer.scene.scene import Scene, SphereInfo

        scene = Scene([SphereInfo(center=(0.0, 0.0, 5.0), radius=1.0, material=_diffuse())])
        hit = scene.nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, 10.0))
        assert hit.distance == pytest.approx(4.0, abs=1e-5)

    def test_zero_direction_raises(self):
        from sphere_pathtracer.scene.scene import Scene

        with pytest.raises(ValueError, match="non-zero length"):
            Scene().nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_miss_beside_sphere(self):
        from sphere_pathtracer.scene.scene import Scene, SphereInfo

        scene = Scene([SphereInfo(center=(0.0, 0.0, 5.0), radius=1.0, material=_diffuse())])
        hit = scene.nearest_hit((0.0, 2.0, 0.0), (0.0, 0.0, 1.0))
        assert not hit.did_hit


class TestRoomScene:
    """Tests for the reference room scene."""

    def test_contents(self, room):
        from sphere_pathtracer.scene.room import WALL_RADIUS

        scene, camera = room
        assert len(scene) == 7
        walls = [s for s in scene.spheres if s.radius == WALL_RADIUS]
        assert len(walls) == 5
        emissive = [s for s in scene.spheres if any(c > 0.0 for c in s.material.emission)]
        assert len(emissive) == 1
        assert emissive[0].center[1] > 0.0

    def test_camera(self, room):
        _, camera = room
        assert camera.eye == (0.0, 0.0, -4.0)
        assert camera.look_at == (0.0, 0.0, 6.0)
        assert camera.vfov == 36.0
        assert camera.background == (0.0, 0.0, 0.0)

    def test_center_ray_hits_cyan_sphere(self, room):
        from sphere_pathtracer.scene.room import CYAN_SPHERE_ALBEDO

        scene, camera = room
        hit = scene.nearest_hit(camera.eye, (0.0, 0.0, 1.0))
        assert hit.did_hit
        assert hit.material.diffuse == pytest.approx(CYAN_SPHERE_ALBEDO)

    def test_upward_ray_hits_emissive_ceiling(self, room):
        from sphere_pathtracer.scene.room import RoomParams

        scene, _ = room
        # In front of both small spheres, so the vertical ray reaches the ceiling
        hit = scene.nearest_hit((0.0, 0.0, -0.9), (0.0, 1.0, 0.0))
        assert hit.did_hit
        assert hit.distance == pytest.approx(1.0, abs=1e-3)
        assert hit.material.emission == RoomParams().light_emission

    def test_upward_ray_from_inside_cyan_sphere_exits_it(self, room):
        from sphere_pathtracer.scene.room import CYAN_SPHERE_ALBEDO

        scene, _ = room
        # The room origin lies inside the cyan sphere centred at (0.3, -0.4, 0.3)
        hit = scene.nearest_hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert hit.did_hit
        assert hit.distance == pytest.approx(math.sqrt(0.18) - 0.4, abs=1e-4)
        assert hit.material.diffuse == pytest.approx(CYAN_SPHERE_ALBEDO)

    def test_mirror_chance_parameter(self):
        from sphere_pathtracer.scene.room import RoomParams, create_room_spheres

        spheres = create_room_spheres(RoomParams(mirror_chance=0.25))
        assert spheres[-1].material.specular_chance == 0.25
        assert all(s.material.specular_chance == 0.0 for s in spheres[:-1])
