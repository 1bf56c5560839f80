"""Geometry module: the sphere primitive and ray-sphere intersection."""

from .sphere import HIT_EPSILON, HitRecord, Sphere, hit_sphere, make_miss_record

__all__ = [
    "HIT_EPSILON",
    "HitRecord",
    "Sphere",
    "hit_sphere",
    "make_miss_record",
]
