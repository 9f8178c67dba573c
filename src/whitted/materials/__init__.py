"""Materials module.

Components:
    blinn_phong: Blinn-Phong material coefficients and local lighting terms

Coefficients are stored per sphere in the scene storage
(whitted.scene.intersection) and loaded with get_sphere_material().
"""

from .blinn_phong import (
    BlinnPhongMaterial,
    ambient_term,
    diffuse_term,
    specular_term,
)

__all__ = [
    "BlinnPhongMaterial",
    "ambient_term",
    "diffuse_term",
    "specular_term",
]
