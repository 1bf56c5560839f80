"""Tests for the material model and its scattering lobes."""

import pytest
import taichi as ti


class TestMaterialValidation:
    """Tests for Material construction."""

    def test_defaults_are_black(self):
        from sphere_pathtracer.materials.material import Material

        material = Material()
        assert material.diffuse == (0.0, 0.0, 0.0)
        assert material.emission == (0.0, 0.0, 0.0)
        assert material.specular_chance == 0.0

    @pytest.mark.parametrize("diffuse", [(1.2, 0.5, 0.5), (0.5, -0.1, 0.5)])
    def test_diffuse_outside_unit_range_raises(self, diffuse):
        from sphere_pathtracer.materials.material import Material

        with pytest.raises(ValueError, match="energy conservation"):
            Material(diffuse=diffuse)

    def test_specular_outside_unit_range_raises(self):
        from sphere_pathtracer.materials.material import Material

        with pytest.raises(ValueError, match="specular"):
            Material(specular=(0.5, 0.5, 1.5), specular_chance=0.5)

    def test_negative_emission_raises(self):
        from sphere_pathtracer.materials.material import Material

        with pytest.raises(ValueError, match="non-negative"):
            Material(emission=(1.0, -0.5, 1.0))

    def test_emission_above_one_is_allowed(self):
        from sphere_pathtracer.materials.material import Material

        assert Material(emission=(15.0, 15.0, 15.0)).emission == (15.0, 15.0, 15.0)

    @pytest.mark.parametrize("chance", [-0.1, 1.1])
    def test_specular_chance_out_of_range_raises(self, chance):
        from sphere_pathtracer.materials.material import Material

        with pytest.raises(ValueError, match="specular_chance"):
            Material(specular_chance=chance)

    def test_material_is_immutable(self):
        from dataclasses import FrozenInstanceError

        from sphere_pathtracer.materials.material import Material

        material = Material(diffuse=(0.5, 0.5, 0.5))
        with pytest.raises(FrozenInstanceError):
            material.diffuse = (0.1, 0.1, 0.1)


class TestContinuationProbability:
    """Tests for the Russian roulette survival probability."""

    def _q(self, material):
        """Evaluate continuation_probability for a host Material in a kernel."""
        from sphere_pathtracer.materials.material import (
            MaterialRecord,
            continuation_probability,
            vec3,
        )

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(diffuse: vec3, emission: vec3, specular: vec3, chance: ti.f32):
            record = MaterialRecord(
                diffuse=diffuse,
                emission=emission,
                specular=specular,
                specular_chance=chance,
            )
            result[None] = continuation_probability(record)

        test_kernel(
            vec3(*material.diffuse),
            vec3(*material.emission),
            vec3(*material.specular),
            material.specular_chance,
        )
        return result[None]

    def test_diffuse_only(self):
        from sphere_pathtracer.materials.material import Material

        material = Material(diffuse=(0.2, 0.7, 0.4), specular=(1.0, 1.0, 1.0))
        # Specular is ignored while it can never be sampled
        assert self._q(material) == pytest.approx(0.7, abs=1e-6)

    def test_specular_counts_when_reachable(self):
        from sphere_pathtracer.materials.material import Material

        material = Material(diffuse=(0.2, 0.7, 0.4), specular=(0.9, 0.9, 0.9), specular_chance=0.1)
        assert self._q(material) == pytest.approx(0.9, abs=1e-6)

    def test_pure_emitter_never_continues(self):
        from sphere_pathtracer.materials.material import Material

        material = Material(emission=(4.0, 4.0, 4.0))
        assert self._q(material) == 0.0


class TestScatteringLobes:
    """Tests for the diffuse and mirror lobes."""

    def test_specular_reflects_and_tints(self):
        from sphere_pathtracer.materials.specular import scatter_specular, vec3

        direction = ti.Vector.field(3, dtype=ti.f32, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            incident = vec3(1.0, -1.0, 0.0).normalized()
            d, a = scatter_specular(vec3(0.9, 0.5, 0.1), incident, vec3(0.0, 1.0, 0.0))
            direction[None] = d
            attenuation[None] = a

        test_kernel()
        d = direction[None]
        s = 1.0 / 2.0**0.5
        assert abs(d[0] - s) < 1e-5
        assert abs(d[1] - s) < 1e-5
        a = attenuation[None]
        assert abs(a[0] - 0.9) < 1e-6
        assert abs(a[1] - 0.5) < 1e-6
        assert abs(a[2] - 0.1) < 1e-6

    def test_diffuse_stays_in_hemisphere(self):
        from sphere_pathtracer.core.sampler import seed_sampler
        from sphere_pathtracer.materials.lambertian import scatter_diffuse, vec3

        n = 512
        cosines = ti.field(dtype=ti.f32, shape=n)
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 0.0, -1.0)
            for i in range(n):
                state = seed_sampler(ti.u32(17), 0, i)
                d, a, state = scatter_diffuse(vec3(0.3, 0.6, 0.9), normal, state)
                cosines[i] = d.dot(normal)
                if i == 0:
                    attenuation[None] = a

        test_kernel()
        assert cosines.to_numpy().min() >= -1e-6
        a = attenuation[None]
        assert abs(a[0] - 0.3) < 1e-6
        assert abs(a[2] - 0.9) < 1e-6
