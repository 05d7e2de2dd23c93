"""Taichi-based Phong ray tracer.

Renders scenes of spheres and planes lit by one point light, with:
- Nearest-hit ray casting from a pinhole camera
- Phong shading (ambient, diffuse, specular)
- Hard shadows and gamma correction
- Jittered supersampling with a seeded random generator

Subpackages:
    core: Rays, render target kernels and the Renderer
    geometry: Sphere and plane primitives
    materials: Phong material registry
    scene: Surface storage, light, shading and scene building
    camera: Pinhole camera with an explicit image plane
    preview: Image export utilities
"""

__version__ = "0.1.0"
