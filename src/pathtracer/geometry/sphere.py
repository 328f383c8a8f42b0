"""Sphere primitive with ray-sphere intersection.

The intersection solves the quadratic

    a*t^2 + b*t + c = 0

with
    a = dot(direction, direction)
    b = 2 * dot(offset, direction)
    c = dot(offset, offset) - radius^2
    offset = ray.origin - center

and keeps the nearest strictly positive root. When the ray starts inside the
sphere the near root is negative and the far root is used instead.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(origin=ti.math.vec3(0, 0, 3), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Hits at or beyond this distance are treated as non-finite
T_MAX = 1e30


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        origin: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    origin: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The ray parameter of the intersection, always > 0.
            Only valid if hit == 1.
        normal: The outward surface normal at the intersection (unit length).
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    normal: vec3


@ti.func
def is_valid_t(t: ti.f32) -> ti.i32:
    """Check that a ray parameter is positive and finite.

    NaN fails both comparisons, so it is rejected as well.
    """
    return 1 if (t > 0.0) and (t < T_MAX) else 0


@ti.func
def make_miss() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0))


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray: The ray to test. The direction need not be normalized.
        sphere: The sphere to test against.

    Returns:
        A HitRecord for the nearest positive intersection. Check the hit
        field to determine if an intersection occurred.
    """
    offset = ray.origin - sphere.origin

    a = tm.dot(ray.direction, ray.direction)
    b = 2.0 * tm.dot(offset, ray.direction)
    c = tm.dot(offset, offset) - sphere.radius * sphere.radius

    discriminant = b * b - 4.0 * a * c

    result = make_miss()

    if discriminant >= 0.0:
        sqrt_disc = ti.sqrt(discriminant)
        t_far = (-b + sqrt_disc) / (2.0 * a)
        t_near = (-b - sqrt_disc) / (2.0 * a)

        # Use the far root only when the near root is behind the origin
        t = t_near
        if is_valid_t(t_near) == 0:
            t = t_far

        if is_valid_t(t) == 1:
            result = HitRecord(
                hit=1,
                t=t,
                normal=tm.normalize(ray_at(ray, t) - sphere.origin),
            )

    return result
