"""Taichi-based Monte Carlo path tracer.

Renders scenes of spheres and infinite planes with a single surface model
(colour, diffusion, refractive index, luminance) into 8-bit RGB images.
Renders are sequential and reproducible for a given seed.

Subpackages:
    core: Rays, random stream, sky functions, transport sampler and solver
    geometry: Sphere and plane primitives with ray intersection
    materials: Surface material table, reflection and refraction
    scene: Primitive table, scene manager and the demo scene
    camera: Orthographic and perspective cameras
    preview: Image export utilities
"""

__version__ = "0.1.0"
