"""Host-side quaternion helpers for camera orientation.

Quaternions are (x, y, z, w) tuples with w the scalar part, matching the vec4
layout used by the Taichi functions in pathtracer.core.ray. These helpers run
in Python with NumPy and are used when configuring cameras, not inside
kernels.

Example:
    >>> from pathtracer.camera.rotation import quat_from_euler_yxz, rotate_vector
    >>> import math
    >>> q = quat_from_euler_yxz(math.pi / 2, 0.0, 0.0)  # Turn left 90 degrees
    >>> rotate_vector(q, (0.0, 0.0, 1.0))  # Forward becomes +X
"""

import math

import numpy as np

Quaternion = tuple[float, float, float, float]

IDENTITY_ROTATION: Quaternion = (0.0, 0.0, 0.0, 1.0)


def _as_tuple(q: np.ndarray) -> Quaternion:
    return (float(q[0]), float(q[1]), float(q[2]), float(q[3]))


def quat_normalize(q: Quaternion) -> Quaternion:
    """Scale a quaternion to unit length.

    Raises:
        ValueError: If the quaternion has zero (or non-finite) length.
    """
    arr = np.asarray(q, dtype=np.float64)
    if arr.shape != (4,):
        raise ValueError(f"Quaternion must have 4 components, got shape {arr.shape}")
    norm = float(np.linalg.norm(arr))
    if not math.isfinite(norm) or norm < 1e-12:
        raise ValueError(f"Cannot normalize quaternion {q}")
    return _as_tuple(arr / norm)


def quat_multiply(a: Quaternion, b: Quaternion) -> Quaternion:
    """Hamilton product a * b (apply b first, then a)."""
    ax, ay, az, aw = a
    bx, by, bz, bw = b
    return (
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
        aw * bw - ax * bx - ay * by - az * bz,
    )


def quat_from_axis_angle(axis: tuple[float, float, float], angle: float) -> Quaternion:
    """Quaternion rotating by angle radians about axis.

    Raises:
        ValueError: If the axis has zero length.
    """
    arr = np.asarray(axis, dtype=np.float64)
    norm = float(np.linalg.norm(arr))
    if norm < 1e-12:
        raise ValueError(f"Rotation axis {axis} has zero length")
    arr = arr / norm
    s = math.sin(angle / 2.0)
    return (float(arr[0] * s), float(arr[1] * s), float(arr[2] * s), math.cos(angle / 2.0))


def quat_from_euler_yxz(yaw: float, pitch: float, roll: float) -> Quaternion:
    """Quaternion from intrinsic Y, X, Z Euler angles in radians.

    The result is Ry(yaw) * Rx(pitch) * Rz(roll): roll about the view axis is
    applied first, yaw about the up axis last.
    """
    qy = quat_from_axis_angle((0.0, 1.0, 0.0), yaw)
    qx = quat_from_axis_angle((1.0, 0.0, 0.0), pitch)
    qz = quat_from_axis_angle((0.0, 0.0, 1.0), roll)
    return quat_multiply(quat_multiply(qy, qx), qz)


def rotate_vector(q: Quaternion, v: tuple[float, float, float]) -> tuple[float, float, float]:
    """Rotate a vector by a unit quaternion (host-side twin of quat_rotate)."""
    u = np.asarray(q[:3], dtype=np.float64)
    s = float(q[3])
    vec = np.asarray(v, dtype=np.float64)
    out = 2.0 * np.dot(u, vec) * u + (s * s - np.dot(u, u)) * vec + 2.0 * s * np.cross(u, vec)
    return (float(out[0]), float(out[1]), float(out[2]))
