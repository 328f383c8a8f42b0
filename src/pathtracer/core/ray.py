"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the small set of vector and
quaternion helpers the transport sampler relies on. All functions are Taichi
functions (@ti.func) and are meant to be called from inside kernels.

Rotations are stored as unit quaternions packed into a vec4 in (x, y, z, w)
order, where w is the scalar part.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type aliases for vectors using Taichi's math module
vec2 = tm.vec2
vec3 = tm.vec3
vec4 = tm.vec4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It is not required
            to be normalized; angle computations normalize internally.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def angle_between(a: vec3, b: vec3) -> ti.f32:
    """Compute the angle in radians between two vectors.

    Neither vector needs to be normalized. The cosine is clamped to [-1, 1]
    so rounding error never pushes acos out of its domain.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        The angle in [0, pi].
    """
    denominator = ti.sqrt(tm.dot(a, a) * tm.dot(b, b))
    cos_angle = tm.clamp(tm.dot(a, b) / denominator, -1.0, 1.0)
    return ti.acos(cos_angle)


@ti.func
def lerp(a: vec3, b: vec3, s: ti.f32) -> vec3:
    """Linearly interpolate from a (s = 0) to b (s = 1)."""
    return a + (b - a) * s


# =============================================================================
# Quaternion Utilities
# =============================================================================


@ti.func
def quat_rotate(q: vec4, v: vec3) -> vec3:
    """Rotate a vector by a unit quaternion.

    Uses the expanded form of q * v * q^-1:
        v' = 2 (u . v) u + (s^2 - u . u) v + 2 s (u x v)

    Args:
        q: Unit quaternion (x, y, z, w).
        v: The vector to rotate.

    Returns:
        The rotated vector.
    """
    u = vec3(q[0], q[1], q[2])
    s = q[3]
    return 2.0 * tm.dot(u, v) * u + (s * s - tm.dot(u, u)) * v + 2.0 * s * tm.cross(u, v)


@ti.func
def quat_from_axis_angle(axis: vec3, angle: ti.f32) -> vec4:
    """Build the quaternion rotating by angle radians about a unit axis."""
    half = angle * 0.5
    s = ti.sin(half)
    return vec4(axis[0] * s, axis[1] * s, axis[2] * s, ti.cos(half))
