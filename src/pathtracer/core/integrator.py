"""Monte Carlo transport sampler and render kernels.

This module implements the light transport estimate for a single ray and the
kernels that evaluate it over the image.

The transport sampler follows a path through the scene one bounce at a time:

    1. Intersect the ray with every primitive and keep the nearest hit.
       No hit: the path contributes the sky term for the ray direction.
    2. Add the surface emission colour * luminance.
    3. Bounce budget exhausted: stop (no further random draws).
    4. Decide reflection or transmission (Snell's law and Fresnel), build the
       next ray and multiply the path throughput by the surface colour.

This loop evaluates exactly the recursive estimate

    sample(ray, bounce) = colour * sample(next_ray, bounce + 1) + colour * luminance

with the bounce counter bounding the recursion depth.

Rendering is sequential: the pixel loop is serialized so that the random
stream is consumed in a fixed order (column by column, bottom to top within a
column, then sample by sample) and a render is reproducible for a seed.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import (
    ...     setup_render_target, seed_render, render_column, get_image_numpy
    ... )
    >>> from pathtracer.core.sky import default_sky
    >>> setup_render_target(64, 48)
    >>> seed_render(0)
    >>> for x in range(64):
    ...     render_column(x, samples=4, max_bounces=3, sky=default_sky)
    >>> image = get_image_numpy()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.projection import get_ray_jittered
from pathtracer.core.ray import Ray, make_ray, ray_at, vec3
from pathtracer.core.sampler import RandomStream
from pathtracer.materials.dielectric import choose_transmission, transmitted_direction
from pathtracer.materials.material import SurfaceMaterial, emitted_radiance, get_material
from pathtracer.materials.reflection import reflected_direction
from pathtracer.scene.intersection import Collision, intersect_scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Scale applied to the hit parameter to step just past the surface
TRANSMIT_OFFSET = 1.0001

# Scale applied to the hit parameter to stay just before the surface
REFLECT_OFFSET = 0.9999

# =============================================================================
# Random Stream
# =============================================================================

# One stream for all renders; reseeded at the start of each render
_random_stream = RandomStream()


def seed_render(seed: int) -> None:
    """Reset the render random stream to the start of the sequence for seed."""
    _random_stream.seed(seed)


def get_random_stream() -> RandomStream:
    """Get the random stream shared by the render kernels."""
    return _random_stream


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Buffers are indexed [row, column] with row 0 at the top of the image
_radiance_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))
_image_buffer = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is zero or exceeds the maximum size.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be at least 1x1")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffers to zero."""
    _radiance_buffer.fill(0.0)
    _image_buffer.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Transport Sampler
# =============================================================================


@ti.func
def scatter(collision: Collision, material: SurfaceMaterial, rng: ti.template()) -> Ray:
    """Build the next ray of a path from a surface hit.

    Transmitted rays start just past the surface, reflected rays just before
    it, so the next intersection test does not find the same hit again.

    Args:
        collision: The nearest hit of the current ray.
        material: The material of the hit primitive.
        rng: The 0-D u32 state field of a RandomStream.

    Returns:
        The next ray of the path.
    """
    ray = collision.ray
    transmit, transmission_angle, directed_normal = choose_transmission(
        material, collision.normal, ray.direction, rng
    )

    next_ray = make_ray(ray.origin, ray.direction)
    if transmit == 1:
        hit_point = ray_at(ray, collision.t * TRANSMIT_OFFSET)
        direction = transmitted_direction(ray.direction, directed_normal, transmission_angle)
        next_ray = make_ray(hit_point, direction)
    else:
        hit_point = ray_at(ray, collision.t * REFLECT_OFFSET)
        direction = reflected_direction(
            ray.direction,
            collision.normal,
            hit_point,
            ray.origin,
            material.diffusion,
            rng,
        )
        next_ray = make_ray(hit_point, direction)

    return next_ray


@ti.func
def trace_path(
    ray: Ray,
    start_bounce: ti.i32,
    max_bounces: ti.i32,
    sky: ti.template(),
    rng: ti.template(),
) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray: The ray to trace.
        start_bounce: Bounce depth of the ray (0 for camera rays).
        max_bounces: Bounce budget. A hit at depth >= max_bounces adds its
            emission and ends the path.
        sky: Taichi function mapping an escaping direction to radiance.
        rng: The 0-D u32 state field of a RandomStream.

    Returns:
        The estimated radiance (RGB).
    """
    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    steps = ti.max(max_bounces - start_bounce, 0) + 1
    for step in range(steps):
        if active == 1:
            collision = intersect_scene(current)

            if collision.hit == 0:
                # Ray escaped: the sky term ends the path
                radiance += throughput * sky(current.direction)
                active = 0
            else:
                material = get_material(collision.material_id)
                radiance += throughput * emitted_radiance(material)

                if start_bounce + step >= max_bounces:
                    active = 0
                else:
                    current = scatter(collision, material, rng)
                    throughput *= material.colour

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_column(
    column: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    max_bounces: ti.i32,
    sky: ti.template(),
    rng: ti.template(),
):
    """Render every pixel of one image column.

    Rows are visited bottom to top (y = 0 is the bottom row); the result for
    pixel (column, y) is stored in buffer row height - y - 1.
    """
    ti.loop_config(serialize=True)
    for y in range(height):
        total = vec3(0.0, 0.0, 0.0)
        for _ in range(samples):
            ray = get_ray_jittered(column, y, width, height, rng)
            color = trace_path(ray, 0, max_bounces, sky, rng)

            # Replace NaN from degenerate geometry with zero
            for c in ti.static(range(3)):
                if tm.isnan(color[c]):
                    color[c] = 0.0

            total += color

        average = total / ti.cast(samples, ti.f32)
        row = height - y - 1
        _radiance_buffer[row, column] = average
        _image_buffer[row, column] = ti.cast(tm.clamp(average, 0.0, 1.0) * 255.0, ti.u8)


@ti.kernel
def _sample_ray(
    origin: vec3,
    direction: vec3,
    bounce: ti.i32,
    max_bounces: ti.i32,
    sky: ti.template(),
    rng: ti.template(),
) -> vec3:
    """Run the transport sampler on a single ray."""
    return trace_path(make_ray(origin, direction), bounce, max_bounces, sky, rng)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_column(column: int, samples: int, max_bounces: int, sky) -> None:
    """Render one column of the image into the render target.

    Args:
        column: Pixel x-coordinate of the column (0 = left).
        samples: Samples per pixel (>= 1).
        max_bounces: Bounce budget per path (>= 0).
        sky: Taichi sky function.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_column(column, width, height, samples, max_bounces, sky, _random_stream.state)


def sample_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    bounce: int,
    max_bounces: int,
    sky,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray from Python.

    Draws from the render random stream; call seed_render() first for a
    reproducible result.

    Returns:
        Tuple of (R, G, B) radiance values.
    """
    color = _sample_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        bounce,
        max_bounces,
        sky,
        _random_stream.state,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def get_image_numpy() -> npt.NDArray[np.uint8]:
    """Get the rendered 8-bit image.

    Returns:
        NumPy array of shape (height, width, 3) with dtype uint8, row 0 at
        the top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _image_buffer.to_numpy()[:height, :width, :]
    return np.ascontiguousarray(image, dtype=np.uint8)


def get_radiance_numpy() -> npt.NDArray[np.float32]:
    """Get the unclamped per-pixel average radiance.

    Returns:
        NumPy array of shape (height, width, 3) with dtype float32, in the
        same orientation as get_image_numpy().

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    radiance = _radiance_buffer.to_numpy()[:height, :width, :]
    return np.ascontiguousarray(radiance, dtype=np.float32)
