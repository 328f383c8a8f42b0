"""Scene manager for coordinating primitives and materials.

This module provides a high-level scene building API on top of the primitive
table (pathtracer.scene.intersection) and the material table
(pathtracer.materials.material). It validates inputs before they reach the
Taichi fields and keeps a Python-side record of the scene for inspection and
serialization.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.material import Material
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> red = scene.add_material(Material(colour=(0.95, 0.55, 0.55), diffusion=0.5))
    >>> scene.add_sphere((1.0, 0.8, 3.0), 0.7, red)
    >>> ground = scene.add_material(Material(colour=(0.3, 0.75, 0.3), diffusion=1.0))
    >>> scene.add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), ground)
"""

import math
from dataclasses import asdict, dataclass, field
from typing import Any

from pathtracer.materials.material import (
    MAX_MATERIALS,
    Material,
    add_material,
    clear_materials,
    get_material_count,
    is_valid_material_id,
)
from pathtracer.scene.intersection import (
    MAX_PRIMITIVES,
    PrimitiveKind,
    add_plane,
    add_sphere,
    clear_scene,
    get_primitive_count,
)


@dataclass
class PrimitiveInfo:
    """Information about a primitive in the scene.

    Attributes:
        index: The index in the primitive table.
        kind: Sphere or plane.
        origin: Sphere center or a point on the plane.
        material_id: The material ID assigned to the primitive.
        radius: Sphere radius (None for planes).
        normal: Plane normal (None for spheres).
    """

    index: int
    kind: PrimitiveKind
    origin: tuple[float, float, float]
    material_id: int
    radius: float | None = None
    normal: tuple[float, float, float] | None = None


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        primitives: List of primitive configurations in table order. Each
            entry has a "kind" of "sphere" (with "radius") or "plane" (with
            "normal").
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    primitives: list[dict[str, Any]] = field(default_factory=list)


def _vec3(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    x, y, z = (float(v) for v in values)
    if not all(math.isfinite(v) for v in (x, y, z)):
        raise ValueError(f"{name} must be finite, got {tuple(values)}")
    return (x, y, z)


class SceneManager:
    """Scene builder coordinating primitives and materials.

    Only one scene exists at a time: creating a SceneManager clears the
    primitive and material tables.

    Attributes:
        materials: List of Material values, indexed by material ID.
        primitives: List of PrimitiveInfo in primitive table order.
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[Material] = []
        self.primitives: list[PrimitiveInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_materials()
        self.materials.clear()
        self.primitives.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, material: Material) -> int:
        """Add a material to the scene.

        Args:
            material: The material to register.

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If the material values are invalid.
        """
        material_id = add_material(material)
        self.materials.append(material)
        return material_id

    def get_material(self, material_id: int) -> Material | None:
        """Get a registered material, or None for an unknown ID."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_count(self) -> int:
        """Get the number of materials in the scene."""
        return get_material_count()

    def _check_material_id(self, material_id: int) -> None:
        if not is_valid_material_id(material_id):
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        origin: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            origin: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The material ID for the sphere.

        Returns:
            The primitive index of the sphere.

        Raises:
            ValueError: If the radius is not positive or material_id is invalid.
            RuntimeError: If the maximum number of primitives is exceeded.
        """
        center = _vec3(origin, "Sphere origin")
        if not (math.isfinite(radius) and radius > 0.0):
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        self._check_material_id(material_id)

        index = add_sphere(center, radius, material_id)
        self.primitives.append(
            PrimitiveInfo(
                index=index,
                kind=PrimitiveKind.SPHERE,
                origin=center,
                material_id=material_id,
                radius=float(radius),
            )
        )
        return index

    def add_plane(
        self,
        origin: tuple[float, float, float],
        normal: tuple[float, float, float],
        material_id: int,
    ) -> int:
        """Add an infinite plane to the scene.

        Args:
            origin: Any point on the plane as (x, y, z).
            normal: The plane normal. Normalized before upload.
            material_id: The material ID for the plane.

        Returns:
            The primitive index of the plane.

        Raises:
            ValueError: If the normal has zero length or material_id is invalid.
            RuntimeError: If the maximum number of primitives is exceeded.
        """
        point = _vec3(origin, "Plane origin")
        nx, ny, nz = _vec3(normal, "Plane normal")
        length = math.sqrt(nx * nx + ny * ny + nz * nz)
        if length < 1e-12:
            raise ValueError(f"Plane normal {tuple(normal)} has zero length")
        unit_normal = (nx / length, ny / length, nz / length)
        self._check_material_id(material_id)

        index = add_plane(point, unit_normal, material_id)
        self.primitives.append(
            PrimitiveInfo(
                index=index,
                kind=PrimitiveKind.PLANE,
                origin=point,
                material_id=material_id,
                normal=unit_normal,
            )
        )
        return index

    # =========================================================================
    # Convenience Methods (Primitive + Material)
    # =========================================================================

    def add_sphere_with_material(
        self,
        origin: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> tuple[int, int]:
        """Add a sphere with a new material.

        Returns:
            Tuple of (primitive_index, material_id).
        """
        material_id = self.add_material(material)
        index = self.add_sphere(origin, radius, material_id)
        return index, material_id

    def add_plane_with_material(
        self,
        origin: tuple[float, float, float],
        normal: tuple[float, float, float],
        material: Material,
    ) -> tuple[int, int]:
        """Add a plane with a new material.

        Returns:
            Tuple of (primitive_index, material_id).
        """
        material_id = self.add_material(material)
        index = self.add_plane(origin, normal, material_id)
        return index, material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return sum(1 for p in self.primitives if p.kind == PrimitiveKind.SPHERE)

    def get_plane_count(self) -> int:
        """Get the number of planes in the scene."""
        return sum(1 for p in self.primitives if p.kind == PrimitiveKind.PLANE)

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return get_primitive_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def get_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials and primitives.
        """
        config = SceneConfig()

        for material in self.materials:
            mat_config = asdict(material)
            mat_config["colour"] = list(material.colour)
            config.materials.append(mat_config)

        for primitive in self.primitives:
            if primitive.kind == PrimitiveKind.SPHERE:
                config.primitives.append(
                    {
                        "kind": "sphere",
                        "origin": list(primitive.origin),
                        "radius": primitive.radius,
                        "material_id": primitive.material_id,
                    }
                )
            else:
                config.primitives.append(
                    {
                        "kind": "plane",
                        "origin": list(primitive.origin),
                        "normal": list(primitive.normal or (0.0, 1.0, 0.0)),
                        "material_id": primitive.material_id,
                    }
                )

        return config

    def load_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. Primitives are
        added in the order they are listed, so a round trip through
        get_config() keeps the primitive table order.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Load materials first (needed for primitives)
        for mat_config in config.materials:
            colour = _vec3(mat_config.get("colour", [1.0, 1.0, 1.0]), "Material colour")
            self.add_material(
                Material(
                    colour=colour,
                    diffusion=float(mat_config.get("diffusion", 0.0)),
                    refractive_index=float(mat_config.get("refractive_index", 0.0)),
                    luminance=float(mat_config.get("luminance", 0.0)),
                )
            )

        for prim_config in config.primitives:
            kind = prim_config.get("kind")
            material_id = int(prim_config.get("material_id", 0))
            if kind == "sphere":
                self.add_sphere(
                    _vec3(prim_config.get("origin", [0.0, 0.0, 0.0]), "Sphere origin"),
                    float(prim_config.get("radius", 1.0)),
                    material_id,
                )
            elif kind == "plane":
                self.add_plane(
                    _vec3(prim_config.get("origin", [0.0, 0.0, 0.0]), "Plane origin"),
                    _vec3(prim_config.get("normal", [0.0, 1.0, 0.0]), "Plane normal"),
                    material_id,
                )
            else:
                raise ValueError(f"Unknown primitive kind: {kind!r}")

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.get_config()
        return {
            "materials": config.materials,
            "primitives": config.primitives,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials' and 'primitives' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            primitives=data.get("primitives", []),
        )
        self.load_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_primitives() -> int:
        """Get the maximum number of primitives supported."""
        return MAX_PRIMITIVES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
