"""Infinite plane primitive with ray-plane intersection.

The plane is given by a point on it and its normal. The intersection is

    t = dot(origin - ray.origin, normal) / dot(ray.direction, normal)

A ray parallel to the plane (zero denominator) misses, as do hits behind the
ray origin. Planes are unbounded, so there is no far limit other than
finiteness.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.plane import Plane, hit_plane
    >>> ground = Plane(origin=ti.math.vec3(0, 0, 0), normal=ti.math.vec3(0, 1, 0))
    >>> # Use hit_plane within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray
from pathtracer.geometry.sphere import HitRecord, is_valid_t, make_miss

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        origin: Any point on the plane (vec3).
        normal: The plane normal (vec3). Expected to be unit length, but the
            reported collision normal is normalized regardless.
    """

    origin: vec3
    normal: vec3


@ti.func
def hit_plane(ray: Ray, plane: Plane) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray: The ray to test.
        plane: The plane to test against.

    Returns:
        A HitRecord for the intersection, or a miss record.
    """
    numerator = tm.dot(plane.origin - ray.origin, plane.normal)
    denominator = tm.dot(ray.direction, plane.normal)

    result = make_miss()

    if denominator != 0.0:
        t = numerator / denominator
        if is_valid_t(t) == 1:
            result = HitRecord(hit=1, t=t, normal=tm.normalize(plane.normal))

    return result
