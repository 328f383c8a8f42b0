"""Materials module for surface response.

Components:
    material: The Material model and the scene material table
    dielectric: Snell's law, Fresnel reflectance and the transmit decision
    reflection: Mirror/diffuse blended reflection

Every surface uses the same model: a colour that tints incoming light and
emission, a diffusion factor blending mirror and diffuse reflection, an
optional refractive index enabling transmission, and a luminance for
self-emission.

The material table allocates Taichi fields at import time, so import this
package after ti.init().
"""

from .dielectric import (
    choose_transmission,
    fresnel_reflectance,
    orient_to_surface,
    transmission_sine,
    transmitted_direction,
)
from .material import (
    MAX_MATERIALS,
    Material,
    SurfaceMaterial,
    add_material,
    clear_materials,
    emitted_radiance,
    get_material,
    get_material_count,
    is_valid_material_id,
)
from .reflection import diffuse_target, reflected_direction

__all__ = [
    "Material",
    "SurfaceMaterial",
    "MAX_MATERIALS",
    "add_material",
    "clear_materials",
    "get_material",
    "get_material_count",
    "is_valid_material_id",
    "emitted_radiance",
    "orient_to_surface",
    "transmission_sine",
    "fresnel_reflectance",
    "choose_transmission",
    "transmitted_direction",
    "diffuse_target",
    "reflected_direction",
]
