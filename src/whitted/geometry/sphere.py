"""Scaled sphere primitive with ray-sphere intersection.

A sphere is a unit sphere that has been scaled per axis (making it an
ellipsoid) and translated to its center. Instead of intersecting the
ellipsoid directly, the ray is mapped into the sphere's object space with the
precomputed inverse scale matrix, where the surface is the unit sphere.

With S = M^-1 (center - origin) and C = M^-1 direction the hit times solve

    a*t^2 - 2*b*t + c = 0,   a = C.C,  b = S.C,  c = S.S - 1

Hit-time policy:
    - every hit must satisfy t > MIN_REFLECT_HIT_TIME (self-intersection guard)
    - primary rays (reflection_level == 0) must also satisfy t > MIN_HIT_TIME,
      since they start at the eye, behind the near plane
    - if the near root fails, the far root is tried and the hit is flagged as
      interior (the ray started inside the sphere)

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.geometry.sphere import Sphere, hit_sphere
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from whitted.core.ray import Ray, mat4, vec4

# Minimum hit time for primary rays
MIN_HIT_TIME = 1.0

# Minimum hit time for every ray
MIN_REFLECT_HIT_TIME = 1e-4


@ti.dataclass
class Sphere:
    """A sphere as seen by the intersection solver.

    Attributes:
        center: World-space center (vec4, w = 1).
        inverse_transform: Inverse of the sphere's scale matrix.
    """

    center: vec4
    inverse_transform: mat4


@ti.dataclass
class SphereHit:
    """Result of intersecting a ray with one sphere.

    Attributes:
        hit: 1 if a valid root was found, 0 otherwise.
        t: Hit time along the ray. -1 when hit == 0.
        interior: 1 if the valid root is the far one (ray started inside).
    """

    hit: ti.i32
    t: ti.f32
    interior: ti.i32


@ti.func
def is_valid_hit_time(t: ti.f32, reflection_level: ti.i32) -> ti.i32:
    """Check a root against the hit-time policy for the ray's level."""
    return t > MIN_REFLECT_HIT_TIME and (reflection_level > 0 or t > MIN_HIT_TIME)


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere) -> SphereHit:
    """Intersect a ray with a scaled sphere.

    A zero-length direction (a == 0) or a negative discriminant yields no hit.
    A zero discriminant collapses both roots into t = b / a.

    Args:
        ray: The probing ray.
        sphere: The sphere to test.

    Returns:
        A SphereHit with the first valid root.
    """
    s = sphere.inverse_transform @ (sphere.center - ray.origin)
    c = sphere.inverse_transform @ ray.direction

    a = tm.dot(c, c)
    b = tm.dot(s, c)
    k = tm.dot(s, s) - 1.0
    discriminant = b * b - a * k

    did_hit = 0
    hit_t = -1.0
    interior = 0

    if a > 0.0 and discriminant >= 0.0:
        root = ti.sqrt(discriminant)
        t_near = (b - root) / a
        t_far = (b + root) / a

        if is_valid_hit_time(t_near, ray.reflection_level):
            did_hit = 1
            hit_t = t_near
        elif is_valid_hit_time(t_far, ray.reflection_level):
            did_hit = 1
            hit_t = t_far
            interior = 1

    return SphereHit(hit=did_hit, t=hit_t, interior=interior)


@ti.func
def sphere_normal(sphere: Sphere, point: vec4, interior: ti.i32) -> vec4:
    """Compute the unit shading normal at a point on the sphere.

    The radial vector is flipped for interior hits, then mapped with
    M^-T M^-1, the normal transform for a non-uniform scale.

    Args:
        sphere: The sphere that was hit.
        point: The hit point (w = 1).
        interior: 1 if the hit was flagged interior.

    Returns:
        The unit normal (w = 0).
    """
    n = point - sphere.center
    if interior == 1:
        n = -n
    n = sphere.inverse_transform.transpose() @ (sphere.inverse_transform @ n)
    n[3] = 0.0
    return tm.normalize(n)


@ti.func
def make_sphere(center: vec4, inverse_transform: mat4) -> Sphere:
    """Create a sphere from its center and inverse scale matrix."""
    return Sphere(center=center, inverse_transform=inverse_transform)
