"""Seeded random stream shared by a whole render.

A render consumes a single pseudo-random stream in a fixed order (pixel,
sample, camera jitter, then whatever the transport sampler draws), which makes
the output reproducible for a given seed. Taichi's built-in ti.random() keeps
per-thread state that cannot be reseeded between renders, so the stream is
implemented here as a 32-bit PCG (RXS-M-XS variant) whose state lives in a
0-D Taichi field.

The field is passed explicitly, as a ti.template() argument, to every Taichi
function that draws from it.

Example:
    >>> stream = RandomStream()
    >>> stream.seed(42)
    >>> @ti.kernel
    ... def draw(rng: ti.template()) -> ti.f32:
    ...     return next_uniform(rng)
    >>> value = draw(stream.state)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import vec3

# LCG step constants (multiplier from PCG, odd increment)
PCG_MULTIPLIER = 747796405
PCG_INCREMENT = 1013904223
PCG_OUTPUT_MULTIPLIER = 277803737

# 24 random bits map exactly onto the f32 mantissa
_INV_2_24 = 1.0 / 16777216.0

_MASK_32 = 0xFFFFFFFF
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def fold_seed(seed: int) -> int:
    """Fold a 64-bit seed into a 32-bit generator state.

    Applies one SplitMix64 step so that nearby seeds (0, 1, 2, ...) start
    from well separated states.

    Args:
        seed: Seed in [0, 2**64).

    Returns:
        The initial 32-bit state.

    Raises:
        ValueError: If the seed is negative or does not fit in 64 bits.
    """
    if seed < 0 or seed > _MASK_64:
        raise ValueError(f"Seed must be in [0, 2**64), got {seed}")

    z = (seed + 0x9E3779B97F4A7C15) & _MASK_64
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    z ^= z >> 31
    return (z ^ (z >> 32)) & _MASK_32


class RandomStream:
    """Host-side handle owning the generator state field.

    Attributes:
        state: 0-D u32 Taichi field holding the generator state. Pass it to
            kernels as a ti.template() argument.
    """

    def __init__(self) -> None:
        self.state = ti.field(dtype=ti.u32, shape=())

    def seed(self, seed: int) -> None:
        """Reset the stream to the start of the sequence for seed."""
        self.state[None] = fold_seed(seed)

    def get_state(self) -> int:
        """Get the raw generator state (for debugging and tests)."""
        return int(self.state[None])


# =============================================================================
# Drawing (Taichi-compatible)
# =============================================================================


@ti.func
def next_uniform(rng: ti.template()) -> ti.f32:
    """Advance the stream and return a uniform float in [0, 1).

    Args:
        rng: The 0-D u32 state field of a RandomStream.

    Returns:
        A float in [0, 1) with 24 bits of randomness.
    """
    state = rng[None] * ti.u32(PCG_MULTIPLIER) + ti.u32(PCG_INCREMENT)
    rng[None] = state

    # RXS-M-XS output permutation
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(PCG_OUTPUT_MULTIPLIER)
    bits = (word >> ti.u32(22)) ^ word

    return ti.cast(bits >> ti.u32(8), ti.f32) * _INV_2_24


@ti.func
def uniform_range(rng: ti.template(), low: ti.f32, high: ti.f32) -> ti.f32:
    """Draw a uniform float in [low, high)."""
    return low + (high - low) * next_uniform(rng)


@ti.func
def random_unit_vector(rng: ti.template()) -> vec3:
    """Draw a unit vector from two independent uniform angles.

    Two angles theta and phi are drawn in [0, 2 pi), theta first, and mapped
    to (cos theta cos phi, cos theta sin phi, sin theta). The result always
    has unit length; the distribution is denser towards the poles than a
    true uniform sphere sample.

    Args:
        rng: The 0-D u32 state field of a RandomStream.

    Returns:
        A unit vector.
    """
    theta = uniform_range(rng, 0.0, 2.0 * tm.pi)
    phi = uniform_range(rng, 0.0, 2.0 * tm.pi)
    return vec3(ti.cos(theta) * ti.cos(phi), ti.cos(theta) * ti.sin(phi), ti.sin(theta))
