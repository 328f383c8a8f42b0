"""Core rendering module.

This module contains the fundamental building blocks of the path tracer:

Components:
    ray: Ray data structure, vector and quaternion utilities
    sampler: Seeded random stream shared by a render
    sky: Environment functions for escaping rays
    integrator: Transport sampler, render kernels and image buffers
    solver: Validated render configuration and the pixel loop

All compute-intensive operations use Taichi kernels.
"""

from .ray import (
    Ray,
    angle_between,
    lerp,
    make_ray,
    quat_from_axis_angle,
    quat_rotate,
    ray_at,
    vec2,
    vec3,
    vec4,
)
from .sampler import RandomStream, fold_seed, next_uniform, random_unit_vector, uniform_range
from .sky import black_sky, constant_sky, default_sky

# Note: integrator and solver are NOT imported here because they allocate
# Taichi fields at import time, which must happen after ti.init().
# Import directly from pathtracer.core.integrator or pathtracer.core.solver.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec2",
    "vec3",
    "vec4",
    "angle_between",
    "lerp",
    "quat_rotate",
    "quat_from_axis_angle",
    "RandomStream",
    "fold_seed",
    "next_uniform",
    "uniform_range",
    "random_unit_vector",
    "default_sky",
    "constant_sky",
    "black_sky",
]
