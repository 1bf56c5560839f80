"""Pinhole camera model for perspective projection ray generation.

The camera builds an orthonormal basis from the view parameters:
- forward: points from the eye toward the look-at target
- right: normalize(cross(vup, forward)), right in the image plane
- up: cross(forward, right), up in the image plane

Pixel coordinates map to normalized device coordinates u, v in [-1, 1]. Row 0
is the top of the image, so v is flipped:

    u = 2 (x + jx) / width - 1
    v = 1 - 2 (y + jy) / height

and the ray direction is normalize(forward + u*half_width*right +
v*half_height*up), with half_height = tan(vfov / 2) and half_width =
half_height * width / height.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_pathtracer.camera.pinhole import PinholeCamera, primary_ray
    >>> from sphere_pathtracer.core.ray import vec3
    >>>
    >>> camera = PinholeCamera(eye=(0.0, 0.0, -4.0), look_at=(0.0, 0.0, 6.0), vfov=36.0)
    >>>
    >>> @ti.kernel
    ... def render(eye: vec3, forward: vec3, right: vec3, up: vec3, half_height: ti.f32):
    ...     # Ray through the top-left pixel center
    ...     ray = primary_ray(eye, forward, right, up, half_height, 0, 0, 0.5, 0.5, 64, 64)
    >>>
    >>> render(*camera.view_vectors())

The camera state travels as plain kernel arguments, so one compiled kernel
serves every camera.
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from sphere_pathtracer.core.ray import Ray, as_vec3_tuple, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        vfov: Vertical field of view in degrees, in (0, 180).
        background: Radiance returned for rays that leave the scene (RGB).
        vup: World up direction used to orient the camera.
    """

    eye: tuple[float, float, float]
    look_at: tuple[float, float, float]
    vfov: float = 36.0
    background: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "eye", as_vec3_tuple(self.eye, "eye"))
        object.__setattr__(self, "look_at", as_vec3_tuple(self.look_at, "look_at"))
        object.__setattr__(self, "vup", as_vec3_tuple(self.vup, "vup"))
        background = as_vec3_tuple(self.background, "background")
        if any(c < 0.0 for c in background):
            raise ValueError(f"background must be non-negative, got {background}")
        object.__setattr__(self, "background", background)

        vfov = float(self.vfov)
        if not 0.0 < vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {vfov}")
        object.__setattr__(self, "vfov", vfov)

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Compute the camera's orthonormal basis.

        Returns:
            A tuple (forward, right, up) of unit float64 vectors.

        Raises:
            ValueError: If the eye coincides with the target or the view
                direction is parallel to vup.
        """
        eye = np.array(self.eye, dtype=np.float64)
        look_at = np.array(self.look_at, dtype=np.float64)
        vup = np.array(self.vup, dtype=np.float64)

        forward = look_at - eye
        forward_len = np.linalg.norm(forward)
        if forward_len == 0.0:
            raise ValueError("Camera eye and look_at must be different points")
        forward = forward / forward_len

        right = np.cross(vup, forward)
        right_len = np.linalg.norm(right)
        if right_len < 1e-8:
            raise ValueError("Camera view direction must not be parallel to vup")
        right = right / right_len

        up = np.cross(forward, right)
        return forward, right, up

    @property
    def half_height(self) -> float:
        """Half the viewport height at unit distance, tan(vfov / 2)."""
        return math.tan(math.radians(self.vfov) / 2.0)

    def view_vectors(self) -> tuple[vec3, vec3, vec3, vec3, float]:
        """Kernel arguments for primary_ray().

        Returns:
            (eye, forward, right, up, half_height) as Taichi vectors and a float.

        Raises:
            ValueError: If the camera configuration is degenerate.
        """
        forward, right, up = self.basis()
        return (
            vec3(*self.eye),
            vec3(*forward.tolist()),
            vec3(*right.tolist()),
            vec3(*up.tolist()),
            self.half_height,
        )


# =============================================================================
# Primary ray generation
# =============================================================================


@ti.func
def primary_ray(
    eye: vec3,
    forward: vec3,
    right: vec3,
    up: vec3,
    half_height: ti.f32,
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    jitter_x: ti.f32,
    jitter_y: ti.f32,
    width: ti.i32,
    height: ti.i32,
) -> Ray:
    """Generate the primary ray through a point of a pixel.

    Args:
        eye, forward, right, up, half_height: Camera state from
            PinholeCamera.view_vectors().
        pixel_x: Pixel column (0 = left).
        pixel_y: Pixel row (0 = top).
        jitter_x: Horizontal offset inside the pixel in [0, 1).
            Use 0.5 for the pixel center.
        jitter_y: Vertical offset inside the pixel in [0, 1).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray from the eye with unit direction.
    """
    aspect_ratio = ti.cast(width, ti.f32) / ti.cast(height, ti.f32)
    half_width = half_height * aspect_ratio

    u = 2.0 * (ti.cast(pixel_x, ti.f32) + jitter_x) / ti.cast(width, ti.f32) - 1.0
    v = 1.0 - 2.0 * (ti.cast(pixel_y, ti.f32) + jitter_y) / ti.cast(height, ti.f32)

    direction = tm.normalize(forward + u * half_width * right + v * half_height * up)
    return make_ray(eye, direction)
