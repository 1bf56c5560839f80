"""Sphere path tracer built on Taichi.

Renders static scenes of spheres by Monte Carlo path tracing with
Russian-roulette path termination, and encodes the result as sRGB bytes.

Subpackages:
    core: Ray utilities, sampler, path integrator and frame driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Material model with diffuse and mirror lobes
    scene: Scene container and the reference room scene
    camera: Pinhole camera with ray generation
    preview: sRGB encoding, BGRA buffers and PNG export

Example:
    >>> from sphere_pathtracer import create_room_scene, init_backend, render
    >>> init_backend("cpu")
    >>> scene, camera = create_room_scene()
    >>> image = render(scene, camera, 128, 128, samples_per_pixel=16)
"""

from .camera.pinhole import PinholeCamera
from .config import MAX_IMAGE_SIZE, RenderSettings, init_backend
from .core.frame import FrameRenderer, render
from .core.integrator import trace_ray
from .materials.material import Material
from .preview.export import save_png
from .preview.srgb import encode_srgb8, to_display_byte, write_bgra
from .scene.room import RoomParams, create_room_scene
from .scene.scene import HitInfo, Scene, SphereInfo

__version__ = "0.1.0"

__all__ = [
    "FrameRenderer",
    "HitInfo",
    "MAX_IMAGE_SIZE",
    "Material",
    "PinholeCamera",
    "RenderSettings",
    "RoomParams",
    "Scene",
    "SphereInfo",
    "create_room_scene",
    "encode_srgb8",
    "init_backend",
    "render",
    "save_png",
    "to_display_byte",
    "trace_ray",
    "write_bgra",
]
