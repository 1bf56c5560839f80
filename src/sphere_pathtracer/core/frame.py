"""Frame driver: renders a full image by tracing every pixel in parallel.

For each pixel, ``samples_per_pixel`` independent paths are traced and their
radiance averaged. Every pixel sample owns its own sampler stream, seeded
from (seed, pixel index, sample index), so a render with a fixed seed is
bit-identical no matter how Taichi schedules the pixel loop.

The image is rendered in row batches, one kernel launch per batch. Between
batches, FrameRenderer.iter_render() yields progress; stopping the iteration
cancels the render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_pathtracer.core.frame import render
    >>> from sphere_pathtracer.scene.room import create_room_scene
    >>> scene, camera = create_room_scene()
    >>> image = render(scene, camera, 128, 128, samples_per_pixel=16, seed=7)
    >>> image.shape
    (128, 128, 3)
"""

import logging
import time
from collections.abc import Callable, Iterator

import numpy as np
import taichi as ti
import taichi.math as tm

from sphere_pathtracer.camera.pinhole import PinholeCamera, primary_ray
from sphere_pathtracer.config import DEFAULT_ROWS_PER_BATCH, RenderSettings
from sphere_pathtracer.core.integrator import MAX_DEPTH, trace_radiance
from sphere_pathtracer.core.sampler import next_float, seed_sampler
from sphere_pathtracer.preview.srgb import check_bgra_target, write_bgra
from sphere_pathtracer.scene.scene import Scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Progress callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


@ti.func
def _sanitize(value: ti.f32) -> ti.f32:
    """Map NaN and infinities to zero and clamp negatives."""
    result = value
    if tm.isnan(value) or tm.isinf(value):
        result = 0.0
    return ti.max(result, 0.0)


@ti.kernel
def _render_rows(
    scene: ti.template(),
    eye: vec3,
    forward: vec3,
    right: vec3,
    up: vec3,
    half_height: ti.f32,
    image: ti.types.ndarray(dtype=vec3, ndim=2),
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    seed: ti.u32,
    background: vec3,
    max_depth: ti.i32,
    jitter: ti.i32,
):
    """Render rows [row_start, row_end) of the image."""
    for y, x in ti.ndrange((row_start, row_end), width):
        pixel_index = y * width + x
        total = vec3(0.0, 0.0, 0.0)

        for sample in range(samples_per_pixel):
            state = seed_sampler(seed, pixel_index, sample)

            jitter_x = 0.5
            jitter_y = 0.5
            if jitter == 1:
                jitter_x, state = next_float(state)
                jitter_y, state = next_float(state)

            ray = primary_ray(
                eye, forward, right, up, half_height, x, y, jitter_x, jitter_y, width, height
            )
            radiance, state = trace_radiance(
                scene, ray.origin, ray.direction, background, state, max_depth
            )
            total += radiance

        color = total / ti.cast(samples_per_pixel, ti.f32)
        image[y, x] = vec3(_sanitize(color[0]), _sanitize(color[1]), _sanitize(color[2]))


class FrameRenderer:
    """Renders one image of a scene in row batches.

    Attributes:
        scene: The scene being rendered.
        camera: The camera configuration.
        settings: Image size, sample count and seed.
    """

    def __init__(self, scene: Scene, camera: PinholeCamera, settings: RenderSettings) -> None:
        """Compute the camera basis and allocate the image buffer.

        Args:
            scene: The scene to render.
            camera: The camera to render from.
            settings: Validated render settings.

        Raises:
            ValueError: If the camera is degenerate.
        """
        self.scene = scene
        self.camera = camera
        self.settings = settings

        self._view = camera.view_vectors()
        self._image = np.zeros((settings.height, settings.width, 3), dtype=np.float32)
        self._rows_done = 0

        logger.debug(
            "Prepared %dx%d frame at %d spp (seed=%d, %s)",
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            settings.seed,
            scene,
        )

    @property
    def rows_done(self) -> int:
        """Number of rows finished in the current or last pass."""
        return self._rows_done

    @property
    def image(self) -> np.ndarray:
        """The (height, width, 3) linear radiance buffer.

        Rows not yet rendered in the current pass are zero.
        """
        return self._image

    def iter_render(self) -> Iterator[tuple[int, int]]:
        """Render the image batch by batch.

        Yields:
            (rows_done, height) after each batch. Closing the generator early
            leaves the remaining rows black.
        """
        settings = self.settings
        self._image.fill(0.0)
        self._rows_done = 0

        start_time = time.perf_counter()
        for row_start in range(0, settings.height, settings.rows_per_batch):
            row_end = min(row_start + settings.rows_per_batch, settings.height)
            _render_rows(
                self.scene,
                *self._view,
                self._image,
                row_start,
                row_end,
                settings.width,
                settings.height,
                settings.samples_per_pixel,
                settings.seed,
                vec3(*self.camera.background),
                settings.max_depth,
                1 if settings.jitter else 0,
            )
            self._rows_done = row_end
            logger.debug("Rendered rows %d-%d of %d", row_start, row_end, settings.height)
            yield row_end, settings.height

        elapsed = time.perf_counter() - start_time
        logger.info(
            "Rendered %dx%d at %d spp in %.2fs",
            settings.width,
            settings.height,
            settings.samples_per_pixel,
            elapsed,
        )

    def render(self, callback: ProgressCallback | None = None) -> np.ndarray:
        """Render the whole image.

        Args:
            callback: Optional function called after each batch with
                (rows_done, height).

        Returns:
            A copy of the (height, width, 3) float32 linear radiance image.
        """
        for rows_done, total in self.iter_render():
            if callback is not None:
                callback(rows_done, total)
        return self._image.copy()

    def render_bgra(self, buffer=None, stride: int | None = None):
        """Render the image and encode it into a BGRA8 buffer.

        Args:
            buffer: Writable bytes-like object of at least stride * height
                bytes. A new bytearray is allocated when None.
            stride: Bytes per row, at least width * 4. Defaults to width * 4.

        Returns:
            The buffer that was written.

        Raises:
            ValueError: If the stride or buffer is too small.
        """
        check_bgra_target(self.settings.width, self.settings.height, buffer, stride)
        image = self.render()
        return write_bgra(image, buffer, stride)


def render(
    scene: Scene,
    camera: PinholeCamera,
    width: int,
    height: int,
    samples_per_pixel: int = 16,
    *,
    seed: int = 0,
    max_depth: int = MAX_DEPTH,
    rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    callback: ProgressCallback | None = None,
) -> np.ndarray:
    """Render a scene to a linear radiance image.

    Args:
        scene: The scene to render.
        camera: The camera to render from. Its background is used for rays
            that leave the scene.
        width: Image width in pixels.
        height: Image height in pixels.
        samples_per_pixel: Number of paths averaged per pixel (>= 1).
        seed: Global seed. Equal seeds give bit-identical images.
        max_depth: Hard cap on surface interactions per path.
        rows_per_batch: Image rows per kernel launch.
        callback: Optional progress callback receiving (rows_done, height).

    Returns:
        A (height, width, 3) float32 array of non-negative linear radiance.
        Row 0 is the top of the image.

    Raises:
        ValueError: If any setting is out of range or the camera is degenerate.
    """
    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=samples_per_pixel,
        seed=seed,
        max_depth=max_depth,
        rows_per_batch=rows_per_batch,
    )
    return FrameRenderer(scene, camera, settings).render(callback)
