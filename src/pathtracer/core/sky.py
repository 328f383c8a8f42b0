"""Environment ("sky") functions evaluated when a path escapes the scene.

A sky is a Taichi function of the ray direction only, returning radiance:

    @ti.func
    def my_sky(direction: vec3) -> vec3: ...

Sky functions are passed to the render kernels as ti.template() arguments,
so any @ti.func with that signature can be used. Each distinct function
object compiles its own kernel instance; constant_sky() caches its results so
repeated requests for the same colour reuse one function.
"""

import functools

import taichi as ti

from pathtracer.core.ray import vec3


@ti.func
def default_sky(direction: vec3) -> vec3:
    """Pale blue gradient brightening towards +Y.

    Returns (0.7, 0.7, 1.0) * (direction.y + 0.2). Downward directions past
    y = -0.2 give negative radiance, which the image buffer clamps to black.
    """
    return vec3(0.7, 0.7, 1.0) * (direction[1] + 0.2)


@functools.lru_cache(maxsize=None)
def constant_sky(colour: tuple[float, float, float]):
    """Create a sky returning the same radiance in every direction.

    Args:
        colour: The constant RGB radiance.

    Returns:
        A Taichi function usable as a sky.
    """
    r, g, b = (float(c) for c in colour)

    @ti.func
    def sky(direction: vec3) -> vec3:
        return vec3(r, g, b)

    return sky


def black_sky():
    """Sky contributing no light."""
    return constant_sky((0.0, 0.0, 0.0))
