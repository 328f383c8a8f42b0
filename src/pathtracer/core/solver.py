"""Solver: validated render configuration and the per-pixel sampling loop.

The Solver owns the camera, the render settings and the sky function, and
drives the render kernels in pathtracer.core.integrator. The scene geometry
and materials are read from the scene tables (see pathtracer.scene).

Rendering proceeds column by column (x = 0 to width - 1), and within each
column from the bottom row to the top. After each column the optional
progress callback is invoked; it cannot influence the image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera import PerspectiveCamera
    >>> from pathtracer.core.solver import Solver
    >>> from pathtracer.scene.demo import create_demo_scene
    >>>
    >>> scene, camera = create_demo_scene()
    >>> solver = Solver(camera, (256, 256), samples=16, max_bounces=4)
    >>> image = solver.solve(seed=0)  # (256, 256, 3) uint8
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt

from pathtracer.camera.projection import Camera, setup_camera
from pathtracer.core.integrator import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    get_image_numpy,
    get_radiance_numpy,
    render_column,
    sample_ray,
    seed_render,
    setup_render_target,
)
from pathtracer.core.sky import default_sky
from pathtracer.materials.material import get_material_count
from pathtracer.scene.intersection import get_primitive_material_ids

# Type alias for progress callback
# Callback receives (columns_done, total_columns)
ProgressCallback = Callable[[int, int], None]


class Solver:
    """Sequential Monte Carlo renderer for the current scene.

    Attributes:
        camera: The camera configuration used for primary rays.
        resolution: Image size as (width, height).
        samples: Samples per pixel (>= 1).
        max_bounces: Bounce budget per path (>= 0).
        sky: Taichi function evaluated for escaping rays.
    """

    def __init__(
        self,
        camera: Camera,
        resolution: tuple[int, int],
        *,
        samples: int = 1,
        max_bounces: int = 0,
        sky=default_sky,
    ) -> None:
        """Initialize and validate the solver configuration.

        Args:
            camera: An OrthographicCamera or PerspectiveCamera.
            resolution: Image size as (width, height) in pixels.
            samples: Number of jittered samples per pixel.
            max_bounces: Maximum number of surface interactions per path.
            sky: Taichi function mapping a direction to background radiance.

        Raises:
            ValueError: If the resolution, sample count or bounce budget is
                invalid.
        """
        width, height = resolution
        if width < 1 or height < 1:
            raise ValueError(f"Resolution ({width}x{height}) must be at least 1x1")
        if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Resolution ({width}x{height}) exceeds maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if samples < 1:
            raise ValueError(f"Samples per pixel must be at least 1, got {samples}")
        if max_bounces < 0:
            raise ValueError(f"Max bounces must be non-negative, got {max_bounces}")

        self._camera = camera
        self._resolution = (int(width), int(height))
        self._samples = int(samples)
        self._max_bounces = int(max_bounces)
        self._sky = sky

    @property
    def camera(self) -> Camera:
        """Get the camera configuration."""
        return self._camera

    @property
    def resolution(self) -> tuple[int, int]:
        """Get the image size as (width, height)."""
        return self._resolution

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._resolution[0]

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._resolution[1]

    @property
    def samples(self) -> int:
        """Get the number of samples per pixel."""
        return self._samples

    @property
    def max_bounces(self) -> int:
        """Get the bounce budget."""
        return self._max_bounces

    @property
    def sky(self):
        """Get the sky function."""
        return self._sky

    def solve(self, seed: int = 0, callback: ProgressCallback | None = None) -> npt.NDArray[np.uint8]:
        """Render the image.

        Seeds one random stream for the whole render and visits every pixel
        in a fixed order, so equal configurations and seeds give
        byte-identical images.

        Args:
            seed: Seed for the render random stream, in [0, 2**64).
            callback: Optional callback called after each column with
                (columns_done, total_columns).

        Returns:
            NumPy array of shape (height, width, 3) with dtype uint8. Row 0
            is the top of the image.

        Raises:
            ValueError: If the camera parameters or seed are invalid.
            RuntimeError: If a primitive refers to a missing material.

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} columns")
            >>> image = solver.solve(seed=7, callback=progress)
        """
        self._check_materials()
        setup_camera(self._camera)
        setup_render_target(self.width, self.height)
        seed_render(seed)

        for column in range(self.width):
            render_column(column, self._samples, self._max_bounces, self._sky)
            if callback is not None:
                callback(column + 1, self.width)

        return get_image_numpy()

    def get_radiance_numpy(self) -> npt.NDArray[np.float32]:
        """Get the unclamped average radiance of the last render.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        return get_radiance_numpy()

    def sample(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        bounce: int = 0,
        seed: int = 0,
    ) -> tuple[float, float, float]:
        """Run the transport sampler on a single ray.

        Useful for testing and debugging individual paths.

        Args:
            origin: Ray origin.
            direction: Ray direction (need not be normalized).
            bounce: Bounce depth of the ray.
            seed: Seed for the random stream used by this path.

        Returns:
            Tuple of (R, G, B) radiance values.

        Raises:
            RuntimeError: If a primitive refers to a missing material.
        """
        self._check_materials()
        seed_render(seed)
        return sample_ray(origin, direction, bounce, self._max_bounces, self._sky)

    def _check_materials(self) -> None:
        """Check that every primitive refers to a material in the table."""
        material_count = get_material_count()
        for index, material_id in enumerate(get_primitive_material_ids()):
            if not 0 <= material_id < material_count:
                raise RuntimeError(
                    f"Primitive {index} refers to material {material_id}, but the "
                    f"material table holds {material_count} material(s)"
                )

    def __repr__(self) -> str:
        """Return a string representation of the solver configuration."""
        return (
            f"Solver(width={self.width}, height={self.height}, "
            f"samples={self.samples}, max_bounces={self.max_bounces})"
        )
