"""Geometry module for the scaled-sphere primitive.

Components:
    sphere: Sphere primitive, hit-time policy and normal transform

Intersection routines are Taichi functions (@ti.func) evaluated inside the
render kernels.
"""

from .sphere import (
    MIN_HIT_TIME,
    MIN_REFLECT_HIT_TIME,
    Sphere,
    SphereHit,
    hit_sphere,
    is_valid_hit_time,
    make_sphere,
    sphere_normal,
)

__all__ = [
    "Sphere",
    "SphereHit",
    "hit_sphere",
    "is_valid_hit_time",
    "make_sphere",
    "sphere_normal",
    "MIN_HIT_TIME",
    "MIN_REFLECT_HIT_TIME",
]
