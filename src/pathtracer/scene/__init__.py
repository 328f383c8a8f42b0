"""Scene module for scene construction and ray-scene queries.

Components:
    intersection: Ordered primitive table and nearest-hit search
    manager: Scene manager coordinating primitives and materials
    demo: The demo scene (five spheres over a ground plane)

Scene data lives in preallocated Taichi fields, so import this package after
ti.init().
"""

from .demo import DemoSceneParams, create_demo_scene
from .intersection import (
    MAX_PRIMITIVES,
    Collision,
    PrimitiveKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_primitive_count,
    get_primitive_material_ids,
    intersect_scene,
)
from .manager import PrimitiveInfo, SceneConfig, SceneManager

__all__ = [
    # Intersection module
    "Collision",
    "PrimitiveKind",
    "add_sphere",
    "add_plane",
    "clear_scene",
    "get_primitive_count",
    "get_primitive_material_ids",
    "intersect_scene",
    "MAX_PRIMITIVES",
    # Manager module
    "SceneManager",
    "PrimitiveInfo",
    "SceneConfig",
    # Demo scene
    "create_demo_scene",
    "DemoSceneParams",
]
