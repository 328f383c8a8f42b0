"""Geometry module for shape primitives.

This module provides the collidable primitives of the tracer:

Components:
    sphere: Sphere primitive with ray-sphere intersection
    plane: Infinite plane primitive with ray-plane intersection

All intersection routines are Taichi functions (@ti.func). Each returns the
nearest strictly positive, finite hit with a unit outward normal, or a miss:

    record = hit_shape(ray, shape)
"""

from .plane import Plane, hit_plane
from .sphere import HitRecord, Sphere, hit_sphere, is_valid_t, make_miss

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "is_valid_t",
    "make_miss",
    "Plane",
    "hit_plane",
]
