"""Scene-level primitive intersection testing.

This module stores the scene's primitives in one ordered table of tagged
entries (sphere or plane) and provides the nearest-hit scan used by the
transport sampler. Traversal is a brute-force linear scan in insertion order;
on equal t the earlier primitive wins.

Each primitive carries a material ID referring to the material table.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import (
    ...     Collision, add_sphere, add_plane, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere((0, 1, 3), 0.5, material_id=0)
    >>> add_plane((0, 0, 0), (0, 1, 0), material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray
from pathtracer.geometry.plane import Plane, hit_plane
from pathtracer.geometry.sphere import Sphere, hit_sphere, make_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


class PrimitiveKind(IntEnum):
    """Tag of a primitive table entry."""

    SPHERE = 0
    PLANE = 1


@ti.dataclass
class Collision:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        ray: The ray that produced the collision.
        t: The ray parameter of the nearest hit (> 0). Only valid if hit == 1.
        normal: The outward surface normal (unit length). Only valid if hit == 1.
        material_id: The material ID of the hit primitive. -1 on a miss.
    """

    hit: ti.i32
    ray: Ray
    t: ti.f32
    normal: vec3
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_PRIMITIVES = 1024

# Primitive storage: Structure of Arrays layout, one slot per primitive.
# primitive_vectors holds the plane normal; primitive_radii the sphere radius.
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_vectors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_radii = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_material_ids = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive count to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_primitives[None] = 0


def _next_slot() -> int:
    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    return idx


def add_sphere(origin: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        origin: The center point of the sphere.
        radius: The radius of the sphere (should be positive).
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = _next_slot()
    primitive_kinds[idx] = int(PrimitiveKind.SPHERE)
    primitive_origins[idx] = vec3(origin[0], origin[1], origin[2])
    primitive_vectors[idx] = vec3(0.0, 0.0, 0.0)
    primitive_radii[idx] = radius
    primitive_material_ids[idx] = material_id
    num_primitives[None] = idx + 1
    return idx


def add_plane(
    origin: tuple[float, float, float],
    normal: tuple[float, float, float],
    material_id: int = 0,
) -> int:
    """Add an infinite plane to the scene.

    Args:
        origin: Any point on the plane.
        normal: The plane normal.
        material_id: The material ID to associate with this plane.

    Returns:
        The index of the added primitive.

    Raises:
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    idx = _next_slot()
    primitive_kinds[idx] = int(PrimitiveKind.PLANE)
    primitive_origins[idx] = vec3(origin[0], origin[1], origin[2])
    primitive_vectors[idx] = vec3(normal[0], normal[1], normal[2])
    primitive_radii[idx] = 0.0
    primitive_material_ids[idx] = material_id
    num_primitives[None] = idx + 1
    return idx


def get_primitive_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_primitives[None])


def get_primitive_material_ids() -> list[int]:
    """Get the material ID of every primitive, in table order."""
    count = get_primitive_count()
    return [int(material_id) for material_id in primitive_material_ids.to_numpy()[:count]]


@ti.func
def _make_miss_collision(ray: Ray) -> Collision:
    """Create a Collision indicating no intersection."""
    return Collision(
        hit=0,
        ray=ray,
        t=0.0,
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def intersect_scene(ray: Ray) -> Collision:
    """Test a ray against all primitives in the scene.

    Iterates the primitive table in order, testing each entry and tracking
    the closest hit (strictly smallest t).

    Args:
        ray: The ray to trace.

    Returns:
        A Collision for the closest intersection, or a miss record if no
        primitive was hit.
    """
    result = _make_miss_collision(ray)

    n_primitives = num_primitives[None]
    for i in range(n_primitives):
        rec = make_miss()
        if primitive_kinds[i] == int(PrimitiveKind.SPHERE):
            rec = hit_sphere(ray, Sphere(origin=primitive_origins[i], radius=primitive_radii[i]))
        else:
            rec = hit_plane(ray, Plane(origin=primitive_origins[i], normal=primitive_vectors[i]))

        if rec.hit == 1 and (result.hit == 0 or rec.t < result.t):
            result = Collision(
                hit=1,
                ray=ray,
                t=rec.t,
                normal=rec.normal,
                material_id=primitive_material_ids[i],
            )

    return result
