"""Reflect branch of the transport sampler.

A reflected path leaves the surface in a direction blended between a mirror
target and a randomized diffuse target:

    reflect_target = direction + 2 * normal
    diffuse_target = random_unit_vector +/- normal
    new_direction = reflect_target + (diffuse_target - reflect_target) * diffusion

The sign of the normal added to the diffuse target is chosen by
dot(hit_point + normal, ray_origin) > 0, which compares against the origin of
the incoming ray rather than the freshly drawn vector.
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import lerp
from pathtracer.core.sampler import random_unit_vector

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def diffuse_target(hit_point: vec3, normal: vec3, ray_origin: vec3, rng: ti.template()) -> vec3:
    """Random unit vector pushed to one side of the surface.

    Args:
        hit_point: The (offset) hit position.
        normal: Outward surface normal (unit length).
        ray_origin: Origin of the incoming ray.
        rng: The 0-D u32 state field of a RandomStream.

    Returns:
        The unnormalized diffuse target direction.
    """
    target = random_unit_vector(rng)
    if tm.dot(hit_point + normal, ray_origin) > 0.0:
        target += normal
    else:
        target -= normal
    return target


@ti.func
def reflected_direction(
    direction: vec3,
    normal: vec3,
    hit_point: vec3,
    ray_origin: vec3,
    diffusion: ti.f32,
    rng: ti.template(),
) -> vec3:
    """Blend mirror and diffuse targets by the material's diffusion.

    Always draws two random numbers, even for pure mirrors, so the draw count
    per bounce does not depend on the material.

    Args:
        direction: Incoming ray direction.
        normal: Outward surface normal (unit length).
        hit_point: The (offset) hit position.
        ray_origin: Origin of the incoming ray.
        diffusion: 0 for a mirror, 1 for fully diffuse.
        rng: The 0-D u32 state field of a RandomStream.

    Returns:
        The new (unnormalized) ray direction.
    """
    scattered = diffuse_target(hit_point, normal, ray_origin, rng)
    reflect_target = direction + normal * 2.0
    return lerp(reflect_target, scattered, diffusion)
