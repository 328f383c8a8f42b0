"""Demo scene configuration.

This module provides a factory function to create the demo scene: three
coloured spheres side by side, a refractive sphere in front of them, a small
light sphere and a green ground plane, seen by a perspective camera standing
one unit above the ground and looking down +Z.

The spheres show off the three surface behaviours:
- Left sphere: blue, fully diffuse
- Middle sphere: white mirror, raised above the others
- Right sphere: red, half diffuse
- Front sphere: clear, refractive index 3
- Light sphere: white, luminance 3

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.solver import Solver
    >>> from pathtracer.scene.demo import create_demo_scene
    >>>
    >>> scene, camera = create_demo_scene()
    >>> image = Solver(camera, (200, 200), samples=8, max_bounces=4).solve(seed=0)
"""

from dataclasses import dataclass

from pathtracer.camera.projection import PerspectiveCamera
from pathtracer.camera.rotation import quat_from_euler_yxz
from pathtracer.materials.material import Material
from pathtracer.scene.manager import SceneManager

# =============================================================================
# Demo Scene Parameters
# =============================================================================


@dataclass
class DemoSceneParams:
    """Parameters for configuring the demo scene.

    Attributes:
        light_luminance: Luminance of the light sphere. Default is 3.0.
        light_colour: RGB colour of the light sphere.
        ground_colour: RGB colour of the ground plane.
        glass_refractive_index: Refractive index of the front sphere.
        camera_origin: Camera position.
        horizontal_fov: Camera horizontal field of view in degrees.

    Example:
        >>> params = DemoSceneParams(light_luminance=6.0)
        >>> scene, camera = create_demo_scene(params)
    """

    light_luminance: float = 3.0
    light_colour: tuple[float, float, float] = (1.0, 1.0, 1.0)
    ground_colour: tuple[float, float, float] = (0.3, 0.75, 0.3)
    glass_refractive_index: float = 3.0
    camera_origin: tuple[float, float, float] = (0.0, 1.0, 0.0)
    horizontal_fov: float = 60.0


# =============================================================================
# Demo Scene Constants
# =============================================================================

SPHERE_RADIUS = 0.7

LEFT_SPHERE_MATERIAL = Material(colour=(0.55, 0.55, 0.95), diffusion=1.0)
MIDDLE_SPHERE_MATERIAL = Material(colour=(0.95, 0.95, 0.95), diffusion=0.0)
RIGHT_SPHERE_MATERIAL = Material(colour=(0.95, 0.55, 0.55), diffusion=0.5)

# Render settings of the full-size demo render
DEMO_RESOLUTION = (1000, 1000)
DEMO_SAMPLES = 500
DEMO_MAX_BOUNCES = 10


# =============================================================================
# Demo Scene Factory
# =============================================================================


def create_demo_scene(
    params: DemoSceneParams | None = None,
) -> tuple[SceneManager, PerspectiveCamera]:
    """Create the demo scene.

    Primitives are added in a fixed order (left, middle, right, front and
    light spheres, then the ground plane), so renders of the demo scene are
    reproducible.

    Args:
        params: Optional DemoSceneParams. If None, uses DemoSceneParams().

    Returns:
        A tuple of (SceneManager, PerspectiveCamera).

    Example:
        >>> scene, camera = create_demo_scene()
        >>> scene.get_sphere_count(), scene.get_plane_count()
        (5, 1)
    """
    if params is None:
        params = DemoSceneParams()

    scene = SceneManager()

    scene.add_sphere_with_material((-1.0, 0.7, 3.0), SPHERE_RADIUS, LEFT_SPHERE_MATERIAL)
    scene.add_sphere_with_material((0.0, 1.7, 3.0), SPHERE_RADIUS, MIDDLE_SPHERE_MATERIAL)
    scene.add_sphere_with_material((1.0, 0.8, 3.0), SPHERE_RADIUS, RIGHT_SPHERE_MATERIAL)

    scene.add_sphere_with_material(
        (0.0, 0.8, 2.5),
        0.5,
        Material(
            colour=(1.0, 1.0, 1.0),
            diffusion=0.0,
            refractive_index=params.glass_refractive_index,
        ),
    )

    scene.add_sphere_with_material(
        (-0.5, 0.3, 2.5),
        0.3,
        Material(colour=params.light_colour, luminance=params.light_luminance),
    )

    scene.add_plane_with_material(
        (0.0, 0.0, 0.0),
        (0.0, 1.0, 0.0),
        Material(colour=params.ground_colour, diffusion=1.0),
    )

    camera = PerspectiveCamera(
        origin=params.camera_origin,
        rotation=quat_from_euler_yxz(0.0, 0.0, 0.0),
        horizontal_fov=params.horizontal_fov,
    )

    return scene, camera
