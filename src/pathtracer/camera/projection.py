"""Orthographic and perspective camera models for primary ray generation.

Both cameras map an integer pixel (x to the right, y up, 0-indexed) to a
world-space ray through a randomly jittered point of that pixel's footprint.
The jitter is uniform within +/- half a pixel on each axis and is the only
source of randomness, drawn from the render's random stream (x first, then y).

Orthographic camera:
    Per-axis scale = size / resolution. Rays start on the view-plane
    rectangle centered at the camera origin (rotated by the camera rotation)
    and all point along the rotated local +Z axis.

Perspective camera:
    Per-axis scale = 1 / resolution. The local target point lies on a plane
    at depth 0.5 / tan(horizontal_fov / 2), so the image spans [-0.5, 0.5] on
    both axes; all rays start at the camera origin.

The camera state lives in Taichi fields, written once by setup_camera() and
read by the ray generation functions inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.projection import PerspectiveCamera, setup_camera
    >>>
    >>> camera = PerspectiveCamera(origin=(0.0, 1.0, 0.0), horizontal_fov=60.0)
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render(rng: ti.template()):
    ...     ray = get_ray_jittered(10, 20, 64, 64, rng)
"""

import math
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from pathtracer.camera.rotation import IDENTITY_ROTATION, Quaternion, quat_normalize
from pathtracer.core.ray import Ray, make_ray, quat_rotate, vec3
from pathtracer.core.sampler import uniform_range

# =============================================================================
# Camera Data Structures
# =============================================================================


class CameraType(IntEnum):
    """Camera model selector stored in the camera state field."""

    ORTHOGRAPHIC = 0
    PERSPECTIVE = 1


@dataclass
class OrthographicCamera:
    """Configuration for an orthographic (parallel projection) camera.

    Attributes:
        origin: Center of the view window in world space (x, y, z).
        rotation: Orientation as a quaternion (x, y, z, w). The camera looks
            along its local +Z axis.
        size: World-space width and height of the view window.
    """

    origin: tuple[float, float, float]
    rotation: Quaternion = IDENTITY_ROTATION
    size: tuple[float, float] = (1.0, 1.0)


@dataclass
class PerspectiveCamera:
    """Configuration for a perspective (pinhole) camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        rotation: Orientation as a quaternion (x, y, z, w). The camera looks
            along its local +Z axis.
        horizontal_fov: Horizontal field of view in degrees, in (0, 180).
    """

    origin: tuple[float, float, float]
    rotation: Quaternion = IDENTITY_ROTATION
    horizontal_fov: float = 60.0


Camera = OrthographicCamera | PerspectiveCamera


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_type = ti.field(dtype=ti.i32, shape=())
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_rotation = ti.Vector.field(4, dtype=ti.f32, shape=())

# View window extent: size for orthographic, (1, 1) for perspective
_camera_extent = ti.Vector.field(2, dtype=ti.f32, shape=())

# Local depth of the perspective image plane
_camera_depth = ti.field(dtype=ti.f32, shape=())

_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def setup_camera(camera: Camera) -> None:
    """Upload a camera configuration to the camera state fields.

    The rotation is normalized on upload.

    Args:
        camera: An OrthographicCamera or PerspectiveCamera.

    Raises:
        ValueError: If the camera parameters are invalid.
        TypeError: If camera is not a supported camera type.
    """
    rotation = quat_normalize(camera.rotation)

    if isinstance(camera, OrthographicCamera):
        width, height = camera.size
        if not (width > 0.0 and height > 0.0):
            raise ValueError(f"Orthographic view size must be positive, got {camera.size}")
        _camera_type[None] = int(CameraType.ORTHOGRAPHIC)
        _camera_extent[None] = [width, height]
        _camera_depth[None] = 0.0
    elif isinstance(camera, PerspectiveCamera):
        fov = camera.horizontal_fov
        if not 0.0 < fov < 180.0:
            raise ValueError(f"Horizontal field of view must be in (0, 180), got {fov}")
        _camera_type[None] = int(CameraType.PERSPECTIVE)
        _camera_extent[None] = [1.0, 1.0]
        _camera_depth[None] = perspective_depth(fov)
    else:
        raise TypeError(f"Unsupported camera type: {type(camera).__name__}")

    origin = camera.origin
    _camera_origin[None] = [origin[0], origin[1], origin[2]]
    _camera_rotation[None] = list(rotation)
    _camera_initialized[None] = 1


def perspective_depth(horizontal_fov: float) -> float:
    """Local depth of the image plane for a [-0.5, 0.5] wide view."""
    return 0.5 / math.tan(math.radians(horizontal_fov) / 2.0)


def is_camera_initialized() -> bool:
    """Check whether setup_camera() has been called."""
    return bool(_camera_initialized[None])


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def view_plane_ray(local_x: ti.f32, local_y: ti.f32) -> Ray:
    """Generate the ray through a point of the camera's local view plane.

    Args:
        local_x: Horizontal view-plane coordinate, in the camera's units
            (world units for orthographic, [-0.5, 0.5] for perspective).
        local_y: Vertical view-plane coordinate.

    Returns:
        The world-space ray.
    """
    rotation = _camera_rotation[None]
    origin = _camera_origin[None]
    direction = vec3(0.0, 0.0, 1.0)

    if _camera_type[None] == int(CameraType.ORTHOGRAPHIC):
        origin = origin + quat_rotate(rotation, vec3(local_x, local_y, 0.0))
        direction = quat_rotate(rotation, vec3(0.0, 0.0, 1.0))
    else:
        target = tm.normalize(vec3(local_x, local_y, _camera_depth[None]))
        direction = quat_rotate(rotation, target)

    return make_ray(origin, direction)


@ti.func
def get_ray_jittered(
    pixel_x: ti.i32,
    pixel_y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    rng: ti.template(),
) -> Ray:
    """Generate a jittered ray through a pixel for anti-aliasing.

    Draws two uniform offsets (x then y) within +/- half a pixel and maps
    the jittered pixel position onto the view plane.

    Args:
        pixel_x: Pixel x-coordinate (0 = left).
        pixel_y: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        rng: The 0-D u32 state field of a RandomStream.

    Returns:
        A world-space Ray through the jittered pixel position.
    """
    extent = _camera_extent[None]
    scale_x = extent[0] / ti.cast(width, ti.f32)
    scale_y = extent[1] / ti.cast(height, ti.f32)

    off_x = uniform_range(rng, -scale_x / 2.0, scale_x / 2.0)
    off_y = uniform_range(rng, -scale_y / 2.0, scale_y / 2.0)

    local_x = ti.cast(pixel_x, ti.f32) * scale_x + scale_x / 2.0 - extent[0] / 2.0 + off_x
    local_y = ti.cast(pixel_y, ti.f32) * scale_y + scale_y / 2.0 - extent[1] / 2.0 + off_y

    return view_plane_ray(local_x, local_y)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, object]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with type, origin, rotation, extent and depth.
    """
    origin_vec = _camera_origin[None]
    rotation_vec = _camera_rotation[None]
    extent_vec = _camera_extent[None]

    return {
        "type": CameraType(int(_camera_type[None])),
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "rotation": tuple(float(rotation_vec[i]) for i in range(4)),
        "extent": (float(extent_vec[0]), float(extent_vec[1])),
        "depth": float(_camera_depth[None]),
    }
