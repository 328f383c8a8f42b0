"""Camera module for view and ray generation.

This module provides camera models for generating primary rays:

Components:
    projection: Orthographic and perspective cameras, camera state fields
        and jittered ray generation
    rotation: Host-side quaternion helpers for camera orientation

Pixel coordinates are integers with x increasing to the right and y
increasing upward. Each call to get_ray_jittered draws two jitter values from
the render's random stream.
"""

from .projection import (
    Camera,
    CameraType,
    OrthographicCamera,
    PerspectiveCamera,
    get_camera_info,
    get_ray_jittered,
    is_camera_initialized,
    perspective_depth,
    setup_camera,
    view_plane_ray,
)
from .rotation import (
    IDENTITY_ROTATION,
    quat_from_axis_angle,
    quat_from_euler_yxz,
    quat_multiply,
    quat_normalize,
    rotate_vector,
)

__all__ = [
    "Camera",
    "CameraType",
    "OrthographicCamera",
    "PerspectiveCamera",
    "setup_camera",
    "get_ray_jittered",
    "view_plane_ray",
    "perspective_depth",
    "is_camera_initialized",
    "get_camera_info",
    "IDENTITY_ROTATION",
    "quat_normalize",
    "quat_multiply",
    "quat_from_axis_angle",
    "quat_from_euler_yxz",
    "rotate_vector",
]
