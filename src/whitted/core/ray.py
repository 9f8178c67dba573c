"""Ray data structure and homogeneous vector utilities.

Points and directions are carried as homogeneous 4-vectors so that the
per-sphere scale transforms can be applied with a single 4x4 matrix:

- points have w = 1
- directions have w = 0

The difference of two points is therefore a direction, and the ray-sphere
solver can push both through the inverse scale matrix without special cases.

Host-side helpers (scale_matrix, inverse_scale_matrix) use NumPy and run once
per sphere when the scene is built.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.ray import Ray, point4, direction4
    >>> # Inside a Taichi kernel:
    >>> # ray = make_ray(point4(0.0, 0.0, 0.0), direction4(0.0, 0.0, -1.0), 0)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type aliases using Taichi's math module
vec3 = tm.vec3
vec4 = tm.vec4
mat4 = tm.mat4


@ti.dataclass
class Ray:
    """A ray with an origin point, a direction and a recursion depth.

    Attributes:
        origin: Starting point of the ray (vec4, w = 1).
        direction: Direction vector (vec4, w = 0). Not required to be unit
            length; primary rays point at the view plane un-normalized.
        reflection_level: Number of mirror bounces that produced this ray.
            0 marks a primary ray cast from the eye.
    """

    origin: vec4
    direction: vec4
    reflection_level: ti.i32


@ti.func
def make_ray(origin: vec4, direction: vec4, reflection_level: ti.i32) -> Ray:
    """Create a ray from origin, direction and reflection level."""
    return Ray(origin=origin, direction=direction, reflection_level=reflection_level)


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec4:
    """Compute the point origin + t * direction along the ray."""
    return ray.origin + t * ray.direction


@ti.func
def point4(x: ti.f32, y: ti.f32, z: ti.f32) -> vec4:
    """Build a homogeneous point (w = 1)."""
    return vec4(x, y, z, 1.0)


@ti.func
def direction4(x: ti.f32, y: ti.f32, z: ti.f32) -> vec4:
    """Build a homogeneous direction (w = 0)."""
    return vec4(x, y, z, 0.0)


@ti.func
def reflect(incident: vec4, normal: vec4) -> vec4:
    """Mirror an incident direction about a unit normal.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length, w = 0).

    Returns:
        The normalized reflected direction.
    """
    return tm.normalize(incident - 2.0 * tm.dot(normal, incident) * normal)


# =============================================================================
# Host-side transform helpers
# =============================================================================


def scale_matrix(scale: tuple[float, float, float]) -> npt.NDArray[np.float64]:
    """Build the 4x4 homogeneous scale matrix diag(sx, sy, sz, 1)."""
    return np.diag([float(scale[0]), float(scale[1]), float(scale[2]), 1.0])


def inverse_scale_matrix(scale: tuple[float, float, float]) -> npt.NDArray[np.float64]:
    """Invert the scale matrix for a sphere.

    Args:
        scale: Per-axis scale factors. None of them may be zero.

    Returns:
        The 4x4 inverse transform that maps world space into the sphere's
        unit-sphere object space (up to the translation, which the solver
        handles separately).

    Raises:
        ValueError: If any scale factor is zero (singular transform).
    """
    if any(float(s) == 0.0 for s in scale):
        raise ValueError(f"Scale {tuple(scale)} has a zero component; transform is singular")
    return np.linalg.inv(scale_matrix(scale))
