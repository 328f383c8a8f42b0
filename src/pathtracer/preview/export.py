"""Image export utilities for rendered images.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from pathtracer.preview.export import save_png
    >>> from pathtracer.core.solver import Solver
    >>>
    >>> image = Solver(camera, (512, 512), samples=16, max_bounces=4).solve()
    >>> save_png(image, "output.png")
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def radiance_to_uint8(radiance: npt.NDArray[np.floating[npt.NBitBase]]) -> npt.NDArray[np.uint8]:
    """Convert linear radiance to 8-bit channels.

    Clamps each channel to [0, 1] and truncates value * 255, the same
    conversion the render kernel applies.

    Args:
        radiance: Image array of shape (H, W, 3).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    clamped = np.clip(np.nan_to_num(radiance.astype(np.float32), nan=0.0), 0.0, 1.0)
    return (clamped * np.float32(255.0)).astype(np.uint8)


def save_png(image: npt.NDArray[np.uint8], filepath: str | Path) -> None:
    """Save an 8-bit RGB image as a PNG file.

    Args:
        image: Image array of shape (H, W, 3) with dtype uint8, row 0 at the
            top.
        filepath: Output file path (should end in .png).

    Raises:
        ValueError: If the array is not an (H, W, 3) uint8 image.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got dtype {image.dtype}")

    pil_image = PILImage.fromarray(np.ascontiguousarray(image))
    pil_image.save(filepath, format="PNG")


def save_png_from_radiance(
    radiance: npt.NDArray[np.floating[npt.NBitBase]],
    filepath: str | Path,
) -> None:
    """Save a linear radiance array as a PNG file.

    Args:
        radiance: Linear image array of shape (H, W, 3).
        filepath: Output file path (should end in .png).
    """
    save_png(radiance_to_uint8(radiance), filepath)


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load a PNG file as an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.generic],
    image_b: npt.NDArray[np.generic],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match: {image_a.shape} vs {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
