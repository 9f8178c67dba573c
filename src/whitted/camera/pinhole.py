"""Fixed pinhole camera mapping pixels onto the view plane.

The eye sits at the origin looking down -z. The view plane is the rectangle
[left, right] x [bottom, top] at z = -near. Pixel (ix, iy) maps to the
plane point at the fraction (ix / width, iy / height) of the rectangle, with
iy = 0 at the bottom:

    x = left   + (ix / width)  * (right - left)
    y = bottom + (iy / height) * (top - bottom)
    z = -near

The resulting direction is not normalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.camera.pinhole import setup_camera, get_primary_ray
    >>> from whitted.scene.model import ViewPlane
    >>> setup_camera(ViewPlane(near=1.0, left=-1.0, right=1.0, top=1.0, bottom=-1.0))
    >>> # Inside a Taichi kernel:
    >>> # ray = get_primary_ray(ix, iy, width, height)
"""

import taichi as ti

from whitted.core.ray import Ray, make_ray, vec4
from whitted.scene.model import ViewPlane

# View plane state
_near = ti.field(dtype=ti.f32, shape=())
_left = ti.field(dtype=ti.f32, shape=())
_right = ti.field(dtype=ti.f32, shape=())
_top = ti.field(dtype=ti.f32, shape=())
_bottom = ti.field(dtype=ti.f32, shape=())


def setup_camera(view: ViewPlane) -> None:
    """Store the view rectangle used by get_primary_ray().

    Args:
        view: The view-plane rectangle.
    """
    _near[None] = view.near
    _left[None] = view.left
    _right[None] = view.right
    _top[None] = view.top
    _bottom[None] = view.bottom


@ti.func
def pixel_to_direction(
    ix: ti.i32,
    iy: ti.i32,
    width: ti.i32,
    height: ti.i32,
    left: ti.f32,
    right: ti.f32,
    top: ti.f32,
    bottom: ti.f32,
    near: ti.f32,
) -> vec4:
    """Map a pixel onto the view plane.

    Args:
        ix: Pixel column in [0, width), 0 = left.
        iy: Pixel row in [0, height), 0 = bottom.
        width: Image width in pixels.
        height: Image height in pixels.
        left, right, top, bottom: View-plane rectangle.
        near: Distance of the view plane from the eye.

    Returns:
        The direction (w = 0) from the eye to the pixel's plane point.
    """
    x = left + (ti.cast(ix, ti.f32) / ti.cast(width, ti.f32)) * (right - left)
    y = bottom + (ti.cast(iy, ti.f32) / ti.cast(height, ti.f32)) * (top - bottom)
    return vec4(x, y, -near, 0.0)


@ti.func
def get_primary_ray(ix: ti.i32, iy: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Build the primary ray through a pixel using the stored view plane."""
    direction = pixel_to_direction(
        ix, iy, width, height, _left[None], _right[None], _top[None], _bottom[None], _near[None]
    )
    return make_ray(vec4(0.0, 0.0, 0.0, 1.0), direction, 0)


# =============================================================================
# Utility Functions
# =============================================================================


def pixel_direction(
    ix: int, iy: int, width: int, height: int, view: ViewPlane
) -> tuple[float, float, float, float]:
    """Python mirror of pixel_to_direction() for inspection.

    Returns:
        The direction (x, y, z, 0.0).
    """
    x = view.left + (ix / width) * (view.right - view.left)
    y = view.bottom + (iy / height) * (view.top - view.bottom)
    return (x, y, -view.near, 0.0)


def get_camera_info() -> dict[str, float]:
    """Get the stored view rectangle for debugging."""
    return {
        "near": float(_near[None]),
        "left": float(_left[None]),
        "right": float(_right[None]),
        "top": float(_top[None]),
        "bottom": float(_bottom[None]),
    }
