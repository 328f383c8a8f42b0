"""Preview module for render output.

Components:
    export: PNG export and image comparison utilities

Example:
    >>> from pathtracer.preview import save_png
    >>> save_png(image, "output.png")
"""

from pathtracer.preview.export import (
    compute_rmse,
    load_png,
    radiance_to_uint8,
    save_png,
    save_png_from_radiance,
)

__all__ = [
    "save_png",
    "save_png_from_radiance",
    "load_png",
    "radiance_to_uint8",
    "compute_rmse",
]
