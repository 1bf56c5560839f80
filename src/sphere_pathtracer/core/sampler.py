"""Per-sample random number streams for Monte Carlo path tracing.

Every pixel sample owns a 32-bit generator state that is threaded through the
call chain by value::

    value, state = next_float(state)

No generator state lives in a field, so pixels traced in parallel never touch
each other's randomness. Streams are derived from ``(seed, pixel_index,
sample_index)`` with the PCG hash, which also makes a render bit-reproducible
for a given seed no matter how Taichi schedules the pixel loop.

The generator itself is the 32-bit PCG variant RXS-M-XS: an LCG step followed by
an output permutation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from sphere_pathtracer.core.sampler import draw_uniform
    >>> values = draw_uniform(seed=7, stream=0, count=4)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from sphere_pathtracer.core.ray import length_squared, normalize

vec3 = tm.vec3

# LCG and permutation constants from the PCG family
PCG_MULTIPLIER = 747796405
# Odd increment below 2^31 so it stays a valid i32 literal inside kernels
PCG_INCREMENT = 1013904223
PCG_OUTPUT_MULTIPLIER = 277803737

# 2^-24: floats are built from the top 24 bits so the result is exactly < 1
FLOAT_SCALE = 1.0 / 16777216.0

# Bound on rejection sampling tries (acceptance rate is pi/6 per try)
MAX_REJECTION_TRIES = 64

SEED_MASK = 0xFFFFFFFF


@ti.func
def pcg_hash(value: ti.u32) -> ti.u32:
    """Hash a 32-bit integer with the PCG output permutation."""
    state = value * ti.u32(PCG_MULTIPLIER) + ti.u32(PCG_INCREMENT)
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(PCG_OUTPUT_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_sampler(seed: ti.u32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the initial state of an independent stream.

    Args:
        seed: Global render seed.
        pixel_index: Linear pixel index (``y * width + x``).
        sample_index: Index of the sample within the pixel.

    Returns:
        The starting generator state for this pixel sample.
    """
    h = pcg_hash(ti.cast(sample_index, ti.u32))
    h = pcg_hash(ti.cast(pixel_index, ti.u32) ^ h)
    return pcg_hash(seed ^ h)


@ti.func
def next_float(state: ti.u32):
    """Advance the stream and return a uniform float in [0, 1).

    Args:
        state: Current generator state.

    Returns:
        A tuple of (value, new_state).
    """
    new_state = state * ti.u32(PCG_MULTIPLIER) + ti.u32(PCG_INCREMENT)
    shift = (new_state >> ti.u32(28)) + ti.u32(4)
    word = ((new_state >> shift) ^ new_state) * ti.u32(PCG_OUTPUT_MULTIPLIER)
    word = (word >> ti.u32(22)) ^ word
    value = ti.cast(word >> ti.u32(8), ti.f32) * FLOAT_SCALE
    return value, new_state


@ti.func
def sample_in_unit_ball(state: ti.u32):
    """Rejection sample a point strictly inside the unit ball.

    Points with zero length are rejected too, so the result can always be
    normalized.

    Returns:
        A tuple of (point, new_state).
    """
    s = state
    p = vec3(0.0, 0.0, 1.0)
    found = 0
    for _ in range(MAX_REJECTION_TRIES):
        if found == 0:
            x, s = next_float(s)
            y, s = next_float(s)
            z, s = next_float(s)
            candidate = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 2.0 * z - 1.0)
            lsq = length_squared(candidate)
            if lsq < 1.0 and lsq > 1e-12:
                p = candidate
                found = 1
    return p, s


@ti.func
def sample_uniform_hemisphere(normal: vec3, state: ti.u32):
    """Sample a direction uniformly over the hemisphere around normal.

    The direction is uniform over the hemisphere, not cosine-weighted. The
    diffuse bounce weights by albedo alone to match.

    Args:
        normal: Unit surface normal defining the hemisphere.
        state: Current generator state.

    Returns:
        A tuple of (unit direction with dot(direction, normal) >= 0, new_state).
    """
    p, s = sample_in_unit_ball(state)
    direction = normalize(p)
    if tm.dot(direction, normal) < 0.0:
        direction = -direction
    return direction, s


# =============================================================================
# Host-side sampling (testing and diagnostics)
# =============================================================================


@ti.kernel
def _draw_uniform(out: ti.types.ndarray(dtype=ti.f32, ndim=1), seed: ti.u32, stream: ti.i32):
    for i in range(out.shape[0]):
        state = seed_sampler(seed, stream, i)
        value, state = next_float(state)
        out[i] = value


@ti.kernel
def _draw_sequence(out: ti.types.ndarray(dtype=ti.f32, ndim=1), seed: ti.u32, stream: ti.i32):
    # Single outer iteration so the stream is drawn serially in the inner loop
    for _ in range(1):
        state = seed_sampler(seed, stream, 0)
        for i in range(out.shape[0]):
            value, state = next_float(state)
            out[i] = value


@ti.kernel
def _draw_hemisphere(
    out: ti.types.ndarray(dtype=vec3, ndim=1),
    normal: vec3,
    seed: ti.u32,
):
    for i in range(out.shape[0]):
        state = seed_sampler(seed, 0, i)
        direction, state = sample_uniform_hemisphere(normal, state)
        out[i] = direction


def draw_uniform(
    seed: int, stream: int, count: int, *, sequential: bool = False
) -> npt.NDArray[np.float32]:
    """Draw uniform floats in [0, 1) from the kernel-side generator.

    Args:
        seed: Global seed.
        stream: Stream index (plays the role of the pixel index).
        count: Number of values to draw.
        sequential: If True, draw ``count`` successive values from a single
            stream. Otherwise draw the first value of ``count`` sibling streams.

    Returns:
        Array of shape (count,) with dtype float32.
    """
    out = np.zeros(count, dtype=np.float32)
    if count > 0:
        if sequential:
            _draw_sequence(out, seed & SEED_MASK, stream)
        else:
            _draw_uniform(out, seed & SEED_MASK, stream)
    return out


def draw_hemisphere(
    normal: tuple[float, float, float], seed: int, count: int
) -> npt.NDArray[np.float32]:
    """Draw directions from the uniform hemisphere sampler.

    Args:
        normal: Unit normal defining the hemisphere.
        seed: Global seed.
        count: Number of directions.

    Returns:
        Array of shape (count, 3) with dtype float32.
    """
    out = np.zeros((count, 3), dtype=np.float32)
    if count > 0:
        _draw_hemisphere(out, vec3(*normal), seed & SEED_MASK)
    return out
