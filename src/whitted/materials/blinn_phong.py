"""Blinn-Phong local illumination terms.

Every sphere carries one Blinn-Phong material. For a hit point with unit
normal N, a unit direction L toward an unoccluded light and the incoming ray
direction D, the local color is

    local = color * Ka * ambient
          + Kd * sum_lights( (N.L) * light_color * color )
          + Ks * sum_lights( ((N.H)^n)^3 * light_color ),   H = normalize(L - D)

where a light only contributes when N.L > 0. The cube of the exponentiated
specular term is part of the shading style. Colors are never clamped here.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.materials.blinn_phong import diffuse_term, specular_term
    >>> # Use within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import vec3, vec4


@ti.dataclass
class BlinnPhongMaterial:
    """Blinn-Phong material coefficients.

    Attributes:
        color: Diffuse color (RGB).
        ka: Ambient coefficient.
        kd: Diffuse coefficient.
        ks: Specular coefficient.
        kr: Mirror reflection coefficient.
        specular_exponent: Shininess n.
    """

    color: vec3
    ka: ti.f32
    kd: ti.f32
    ks: ti.f32
    kr: ti.f32
    specular_exponent: ti.f32


@ti.func
def ambient_term(material: BlinnPhongMaterial, ambient: vec3) -> vec3:
    """Ambient contribution: color * Ka * ambient, component-wise."""
    return material.color * material.ka * ambient


@ti.func
def diffuse_term(normal: vec4, light_dir: vec4, light_color: vec3, color: vec3) -> vec3:
    """Lambert diffuse contribution of one light (before Kd).

    Args:
        normal: Unit surface normal.
        light_dir: Unit direction from the surface toward the light.
        light_color: Light color/intensity.
        color: Surface diffuse color.

    Returns:
        (N.L) * light_color * color, or zero when N.L <= 0.
    """
    n_dot_l = tm.dot(normal, light_dir)
    result = vec3(0.0, 0.0, 0.0)
    if n_dot_l > 0.0:
        result = n_dot_l * light_color * color
    return result


@ti.func
def specular_term(
    normal: vec4,
    light_dir: vec4,
    ray_dir: vec4,
    light_color: vec3,
    specular_exponent: ti.f32,
) -> vec3:
    """Blinn specular contribution of one light (before Ks).

    Uses the half vector H = normalize(L - D) with the incoming ray direction
    D as given (primary rays are not normalized). A non-positive N.H yields
    zero instead of raising a negative base to a fractional power.

    Args:
        normal: Unit surface normal.
        light_dir: Unit direction from the surface toward the light.
        ray_dir: Direction of the ray that hit the surface.
        light_color: Light color/intensity.
        specular_exponent: Shininess n.

    Returns:
        ((N.H)^n)^3 * light_color.
    """
    half_vector = tm.normalize(light_dir - ray_dir)
    intensity = tm.dot(normal, half_vector)
    result = vec3(0.0, 0.0, 0.0)
    if intensity > 0.0:
        highlight = intensity**specular_exponent
        result = highlight * highlight * highlight * light_color
    return result
