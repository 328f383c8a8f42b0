"""Refraction decision at a dielectric boundary (Snell's law and Fresnel).

At every surface hit that continues the path, the tracer decides
stochastically whether the path is reflected or transmitted:

    - Snell's law: n1 * sin(theta_i) = n2 * sin(theta_t)
    - Total internal reflection when (n1 / n2) * sin(theta_i) > 1
    - Unpolarized Fresnel reflectance R = (Rs + Rp) / 2, with the exact
      s- and p-polarized dielectric terms (no Schlick approximation)

The path transmits with probability 1 - R. Surfaces with a refractive index of
0 are opaque: rays entering them are totally reflected without a draw, rays
leaving them have R = 1 and always reflect after one draw.

Example:
    >>> # Use within a Taichi kernel:
    >>> # transmit, angle, directed_normal = choose_transmission(
    >>> #     material, normal, direction, rng
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import angle_between, quat_from_axis_angle, quat_rotate
from pathtracer.core.sampler import next_uniform
from pathtracer.materials.material import SurfaceMaterial

# Type alias for 3D vectors
vec3 = tm.vec3

# Below this length the rotation axis of a transmitted ray is degenerate
# (normal incidence) and the ray continues along the directed normal.
AXIS_EPSILON = 1e-12


@ti.func
def orient_to_surface(normal: vec3, direction: vec3, refractive_index: ti.f32):
    """Pick the media on each side of the boundary for an incoming ray.

    A ray travelling against the outward normal is entering the material,
    otherwise it is leaving it.

    Args:
        normal: Outward surface normal (unit length).
        direction: Incoming ray direction.
        refractive_index: Refractive index of the material.

    Returns:
        A tuple of (n1, n2, directed_normal) where:
        - n1: Refractive index of the medium the ray travels in.
        - n2: Refractive index of the medium on the far side.
        - directed_normal: The normal flipped to point along the ray.
    """
    n1 = 1.0
    n2 = refractive_index
    directed_normal = -normal

    if tm.dot(normal, direction) >= 0.0:
        # Leaving the material
        n1 = refractive_index
        n2 = 1.0
        directed_normal = normal

    return n1, n2, directed_normal


@ti.func
def transmission_sine(n1: ti.f32, n2: ti.f32, incidence_angle: ti.f32) -> ti.f32:
    """Sine of the transmission angle from Snell's law.

    Values above 1 signal total internal reflection. Entering an opaque
    material (n2 = 0) always reports total internal reflection, including at
    normal incidence where n1 / n2 * sin(0) would be NaN.
    """
    sin_t = 2.0
    if n2 != 0.0:
        sin_t = n1 / n2 * ti.sin(incidence_angle)
    return sin_t


@ti.func
def fresnel_reflectance(
    n1: ti.f32,
    n2: ti.f32,
    incidence_angle: ti.f32,
    transmission_angle: ti.f32,
) -> ti.f32:
    """Compute unpolarized Fresnel reflectance for a dielectric boundary.

    Rs = ((n1 cos_i - n2 cos_t) / (n1 cos_i + n2 cos_t))^2
    Rp = ((n1 cos_t - n2 cos_i) / (n1 cos_t + n2 cos_i))^2
    R = (Rs + Rp) / 2

    Args:
        n1: Refractive index on the incoming side.
        n2: Refractive index on the transmitted side.
        incidence_angle: Angle between the ray and the directed normal.
        transmission_angle: Angle of the transmitted ray from Snell's law.

    Returns:
        The reflectance in [0, 1].
    """
    cos_i = ti.cos(incidence_angle)
    cos_t = ti.cos(transmission_angle)

    n1_cos_i = n1 * cos_i
    n1_cos_t = n1 * cos_t
    n2_cos_i = n2 * cos_i
    n2_cos_t = n2 * cos_t

    rs = ((n1_cos_i - n2_cos_t) / (n1_cos_i + n2_cos_t)) ** 2
    rp = ((n1_cos_t - n2_cos_i) / (n1_cos_t + n2_cos_i)) ** 2

    return (rs + rp) / 2.0


@ti.func
def choose_transmission(
    material: SurfaceMaterial,
    normal: vec3,
    direction: vec3,
    rng: ti.template(),
):
    """Decide between reflection and transmission at a surface hit.

    Total internal reflection always reflects without a draw. Otherwise one
    uniform draw is compared against the Fresnel reflectance. Opaque
    materials (refractive index 0) reflect either way: a ray entering one
    meets total internal reflection, and a ray leaving one sees R = 1 but
    still consumes its draw.

    Args:
        material: The material at the hit point.
        normal: Outward surface normal (unit length).
        direction: Incoming ray direction.
        rng: The 0-D u32 state field of a RandomStream.

    Returns:
        A tuple of (transmit, transmission_angle, directed_normal) where:
        - transmit: 1 if the path is transmitted, 0 if it is reflected.
        - transmission_angle: The refraction angle (only valid if transmit).
        - directed_normal: The normal flipped to point along the ray.
    """
    n1, n2, directed_normal = orient_to_surface(normal, direction, material.refractive_index)

    transmit = 0
    transmission_angle = 0.0

    incidence_angle = angle_between(direction, directed_normal)
    sin_t = transmission_sine(n1, n2, incidence_angle)

    if sin_t <= 1.0:
        transmission_angle = ti.asin(sin_t)
        reflectance = fresnel_reflectance(n1, n2, incidence_angle, transmission_angle)
        if next_uniform(rng) >= reflectance:
            transmit = 1

    return transmit, transmission_angle, directed_normal


@ti.func
def transmitted_direction(direction: vec3, directed_normal: vec3, transmission_angle: ti.f32) -> vec3:
    """Direction of the transmitted ray.

    The directed normal is rotated about normalize(direction x directed_normal)
    by the transmission angle. At normal incidence the axis vanishes and the
    directed normal is returned unchanged.

    Args:
        direction: Incoming ray direction.
        directed_normal: Normal pointing along the ray.
        transmission_angle: Refraction angle in radians.

    Returns:
        The transmitted direction (unit length).
    """
    axis = tm.cross(direction, directed_normal)
    axis_length = tm.length(axis)

    result = directed_normal
    if axis_length > AXIS_EPSILON:
        rotation = quat_from_axis_angle(axis / axis_length, transmission_angle)
        result = quat_rotate(rotation, directed_normal)

    return result
