"""Immutable sphere scene with nearest-hit queries.

A Scene is built once from a sequence of SphereInfo records and uploaded to
Taichi fields in a structure-of-arrays layout. After construction it is
read-only: kernels receive it as a template argument and only read from it, so
any number of render kernels can share one scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_pathtracer.materials.material import Material
    >>> from sphere_pathtracer.scene.scene import Scene, SphereInfo
    >>> red = Material(diffuse=(0.8, 0.2, 0.2))
    >>> light = Material(emission=(4.0, 4.0, 4.0))
    >>> scene = Scene([
    ...     SphereInfo(center=(0.0, 0.0, 5.0), radius=1.0, material=red),
    ...     SphereInfo(center=(0.0, 3.0, 5.0), radius=1.0, material=light),
    ... ])
    >>> hit = scene.nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0))
    >>> hit.distance
    4.0
"""

import math
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from sphere_pathtracer.core.ray import as_vec3_tuple, normalize_direction
from sphere_pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record
from sphere_pathtracer.materials.material import Material, MaterialRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class SphereInfo:
    """A sphere in the scene.

    Attributes:
        center: The center of the sphere as (x, y, z).
        radius: The radius of the sphere, strictly positive.
        material: The surface material.

    Raises:
        ValueError: If the radius is not a positive finite number.
    """

    center: tuple[float, float, float]
    radius: float
    material: Material

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_vec3_tuple(self.center, "center"))
        radius = float(self.radius)
        if not math.isfinite(radius) or radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        object.__setattr__(self, "radius", radius)
        if not isinstance(self.material, Material):
            raise ValueError(f"material must be a Material, got {type(self.material).__name__}")


@dataclass(frozen=True)
class HitInfo:
    """Host-side result of a nearest-hit query.

    Attributes:
        did_hit: Whether any sphere was hit.
        distance: Ray parameter of the hit. Only meaningful if did_hit.
        point: Hit point. Only meaningful if did_hit.
        normal: Outward unit normal at the hit point. Only meaningful if did_hit.
        material: Material of the hit sphere, None on a miss.
    """

    did_hit: bool
    distance: float = math.inf
    point: tuple[float, float, float] = (0.0, 0.0, 0.0)
    normal: tuple[float, float, float] = (0.0, 0.0, 0.0)
    material: Material | None = None


@ti.data_oriented
class Scene:
    """Read-only collection of spheres stored in Taichi fields.

    Attributes:
        spheres: The spheres in insertion order.
    """

    def __init__(self, spheres: Iterable[SphereInfo] = ()) -> None:
        """Validate the spheres and upload them to Taichi fields.

        Args:
            spheres: The spheres making up the scene. May be empty.

        Raises:
            ValueError: If an element is not a SphereInfo.
        """
        self.spheres: tuple[SphereInfo, ...] = tuple(spheres)
        for i, sphere in enumerate(self.spheres):
            if not isinstance(sphere, SphereInfo):
                raise ValueError(f"Scene element {i} is not a SphereInfo: {sphere!r}")

        # Fields need at least one element even for an empty scene
        capacity = max(len(self.spheres), 1)

        self._centers = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self._radii = ti.field(dtype=ti.f32, shape=capacity)
        self._diffuse = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self._emission = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self._specular = ti.Vector.field(3, dtype=ti.f32, shape=capacity)
        self._specular_chance = ti.field(dtype=ti.f32, shape=capacity)
        self._num_spheres = ti.field(dtype=ti.i32, shape=())

        # Query results for nearest_hit()
        self._query_hit = ti.field(dtype=ti.i32, shape=())
        self._query_t = ti.field(dtype=ti.f32, shape=())
        self._query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
        self._query_index = ti.field(dtype=ti.i32, shape=())

        self._upload()

    def _upload(self) -> None:
        """Copy sphere data into the Taichi fields."""
        n = len(self.spheres)
        self._num_spheres[None] = n
        if n == 0:
            return

        def column(getter) -> np.ndarray:
            return np.array([getter(s) for s in self.spheres], dtype=np.float32)

        self._centers.from_numpy(column(lambda s: s.center))
        self._radii.from_numpy(column(lambda s: s.radius))
        self._diffuse.from_numpy(column(lambda s: s.material.diffuse))
        self._emission.from_numpy(column(lambda s: s.material.emission))
        self._specular.from_numpy(column(lambda s: s.material.specular))
        self._specular_chance.from_numpy(column(lambda s: s.material.specular_chance))

    def __len__(self) -> int:
        return len(self.spheres)

    def __repr__(self) -> str:
        return f"Scene(spheres={len(self.spheres)})"

    # =========================================================================
    # Kernel-side queries
    # =========================================================================

    @ti.func
    def sphere(self, index: ti.i32) -> Sphere:
        """Get the geometry of a sphere by index."""
        return Sphere(center=self._centers[index], radius=self._radii[index])

    @ti.func
    def material(self, index: ti.i32) -> MaterialRecord:
        """Get the material of a sphere by index."""
        return MaterialRecord(
            diffuse=self._diffuse[index],
            emission=self._emission[index],
            specular=self._specular[index],
            specular_chance=self._specular_chance[index],
        )

    @ti.func
    def intersect(self, ray_origin: vec3, ray_direction: vec3) -> HitRecord:
        """Find the nearest sphere hit along a ray.

        Linearly scans all spheres and keeps the hit with the smallest t.

        Args:
            ray_origin: The starting point of the ray.
            ray_direction: The unit direction of the ray.

        Returns:
            The closest HitRecord with sphere_index set, or a miss record.
        """
        result = make_miss_record()
        closest_t = 0.0

        for i in range(self._num_spheres[None]):
            rec = hit_sphere(ray_origin, ray_direction, self.sphere(i))
            if rec.hit == 1:
                if result.hit == 0 or rec.t < closest_t:
                    closest_t = rec.t
                    result = rec
                    result.sphere_index = i

        return result

    @ti.kernel
    def _nearest_hit_kernel(self, ray_origin: vec3, ray_direction: vec3):
        rec = self.intersect(ray_origin, ray_direction)
        self._query_hit[None] = rec.hit
        self._query_t[None] = rec.t
        self._query_point[None] = rec.point
        self._query_normal[None] = rec.normal
        self._query_index[None] = rec.sphere_index

    # =========================================================================
    # Host-side queries
    # =========================================================================

    def nearest_hit(self, origin, direction) -> HitInfo:
        """Find the nearest sphere hit along a ray from Python.

        Args:
            origin: Ray origin as (x, y, z).
            direction: Ray direction as (x, y, z). Normalized before testing.

        Returns:
            HitInfo describing the closest hit, with did_hit False on a miss.

        Raises:
            ValueError: If direction has zero length.
        """
        origin = as_vec3_tuple(origin, "origin")
        direction = normalize_direction(direction)

        self._nearest_hit_kernel(vec3(*origin), vec3(*direction))

        if self._query_hit[None] == 0:
            return HitInfo(did_hit=False)

        point = self._query_point[None]
        normal = self._query_normal[None]
        index = int(self._query_index[None])
        return HitInfo(
            did_hit=True,
            distance=float(self._query_t[None]),
            point=(float(point[0]), float(point[1]), float(point[2])),
            normal=(float(normal[0]), float(normal[1]), float(normal[2])),
            material=self.spheres[index].material,
        )
