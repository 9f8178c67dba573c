"""Core rendering module.

Components:
    ray: Ray data structure and homogeneous vector utilities
    integrator: Whitted-style shading/recursion and the render pass
    renderer: Renderer wrapper tying a Scene to the render target

The integrator keeps the frame buffer in Taichi fields, so it is NOT imported
here. Import it directly once Taichi has been initialized:
    from whitted.core.integrator import render_image
"""

from .ray import (
    Ray,
    direction4,
    inverse_scale_matrix,
    make_ray,
    mat4,
    point4,
    ray_at,
    reflect,
    scale_matrix,
    vec3,
    vec4,
)

__all__ = [
    "Ray",
    "make_ray",
    "ray_at",
    "point4",
    "direction4",
    "reflect",
    "scale_matrix",
    "inverse_scale_matrix",
    "vec3",
    "vec4",
    "mat4",
]
