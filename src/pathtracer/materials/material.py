"""Surface material description and the scene material table.

A single material model covers every surface in the tracer. Each material is a
passive value with four properties:

    colour: Linear RGB reflectance/tint. Components are usually in [0, 1] but
        are not clamped.
    diffusion: Blend between mirror reflection (0) and diffuse scattering (1).
    refractive_index: 0 marks an opaque surface; a positive value enables the
        Fresnel reflect/transmit decision.
    luminance: Self-emission multiplier, applied to the colour.

Materials are stored in Taichi fields and referenced from primitives by an
integer material ID, so every primitive and collision refers to a material
that outlives the render.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.material import Material, add_material
    >>> glass = add_material(Material(colour=(1.0, 1.0, 1.0), refractive_index=1.5))
"""

import math
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Material:
    """Host-side material configuration.

    Attributes:
        colour: RGB colour as (R, G, B).
        diffusion: Diffuse fraction in [0, 1]. 0 is a perfect mirror.
        refractive_index: Index of refraction. 0 for opaque surfaces.
        luminance: Emission multiplier (>= 0).
    """

    colour: tuple[float, float, float] = (1.0, 1.0, 1.0)
    diffusion: float = 0.0
    refractive_index: float = 0.0
    luminance: float = 0.0

    def validate(self) -> None:
        """Check the material values.

        Raises:
            ValueError: If any value is outside its valid range.
        """
        if len(self.colour) != 3:
            raise ValueError(f"Colour must have 3 components, got {len(self.colour)}")
        for i, component in enumerate(self.colour):
            if not math.isfinite(component):
                raise ValueError(f"Colour component {i} = {component} is not finite")
        if not 0.0 <= self.diffusion <= 1.0:
            raise ValueError(f"Diffusion = {self.diffusion} is outside [0, 1]")
        if not math.isfinite(self.refractive_index) or self.refractive_index < 0.0:
            raise ValueError(
                f"Refractive index = {self.refractive_index} must be 0 (opaque) or positive"
            )
        if not math.isfinite(self.luminance) or self.luminance < 0.0:
            raise ValueError(f"Luminance = {self.luminance} must be non-negative")


@ti.dataclass
class SurfaceMaterial:
    """Device-side view of one material table entry."""

    colour: vec3
    diffusion: ti.f32
    refractive_index: ti.f32
    luminance: ti.f32


# =============================================================================
# Material Field Storage
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 1024

material_colours = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_diffusion = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_refractive_indices = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_luminance = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Add a material to the material table.

    Args:
        material: The material to register.

    Returns:
        The material ID of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If the material values are invalid.
    """
    material.validate()

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    colour = material.colour
    material_colours[idx] = vec3(colour[0], colour[1], colour[2])
    material_diffusion[idx] = material.diffusion
    material_refractive_indices[idx] = material.refractive_index
    material_luminance[idx] = material.luminance
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the table."""
    return int(num_materials[None])


def is_valid_material_id(material_id: int) -> bool:
    """Check whether material_id refers to a registered material."""
    return 0 <= material_id < get_material_count()


@ti.func
def get_material(material_id: ti.i32) -> SurfaceMaterial:
    """Get the material table entry for a material ID.

    Args:
        material_id: The ID returned by add_material.

    Returns:
        The SurfaceMaterial for the ID.
    """
    return SurfaceMaterial(
        colour=material_colours[material_id],
        diffusion=material_diffusion[material_id],
        refractive_index=material_refractive_indices[material_id],
        luminance=material_luminance[material_id],
    )


@ti.func
def emitted_radiance(material: SurfaceMaterial) -> vec3:
    """Colour-weighted self-emission of a surface: colour * luminance."""
    return material.colour * material.luminance
