"""Whitted-style integrator: local shading, shadow rays and mirror bounces.

For a ray the traced color is defined recursively:

    trace(ray) = 0                                   if level >= max_depth
               = background                          on a miss at level 0
               = 0                                   on a miss at level > 0
               = local(hit) + Kr * trace(reflected)  otherwise

where local() is the Blinn-Phong color with per-light shadow tests. Taichi
functions cannot recurse, so trace() unrolls the recursion into a loop that
carries the product of Kr factors along the bounce chain.

Shadow rays are tagged with SHADOW_RAY_LEVEL so the solver applies the small
hit-time epsilon to them and never the primary-ray bias.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.integrator import render_image, setup_render_target
    >>> from whitted.scene.intersection import upload_scene
    >>> from whitted.camera.pinhole import setup_camera
    >>> upload_scene(scene)
    >>> setup_camera(scene.view)
    >>> setup_render_target(scene.width, scene.height)
    >>> render_image(max_depth=3)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from whitted.camera.pinhole import get_primary_ray
from whitted.core.ray import Ray, make_ray, reflect, vec3
from whitted.materials.blinn_phong import ambient_term, diffuse_term, specular_term
from whitted.scene.intersection import (
    Intersection,
    ambient_intensity,
    background_color,
    get_sphere_material,
    light_colors,
    light_positions,
    nearest_intersection,
    num_lights,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Default reflection recursion limit
DEFAULT_MAX_DEPTH = 3

# Reflection level given to shadow rays (any value > 0)
SHADOW_RAY_LEVEL = 1

# =============================================================================
# Render Target (Frame Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Unclamped colors, indexed [ix, iy] with iy = 0 at the bottom
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Writes per pixel during the last pass
_write_count = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the frame buffer for an image size.

    Args:
        width: Image width in pixels (1..MAX_IMAGE_WIDTH).
        height: Image height in pixels (1..MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If the dimensions are not positive or exceed the maximum
            supported size.
    """
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the frame buffer and write counters to zero."""
    _color_buffer.fill(0.0)
    _write_count.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Shading
# =============================================================================


@ti.func
def shade_local(hit: Intersection) -> vec3:
    """Compute the Blinn-Phong color at a hit, with shadow tests.

    A light contributes only if its shadow ray reports no hit at all and the
    light is in front of the surface (N.L > 0).

    Args:
        hit: A valid intersection (distance >= 0).

    Returns:
        ambient + Kd * diffuse + Ks * specular, unclamped.
    """
    material = get_sphere_material(hit.sphere_index)
    color = ambient_term(material, ambient_intensity[None])

    diffuse = vec3(0.0, 0.0, 0.0)
    specular = vec3(0.0, 0.0, 0.0)

    for light_idx in range(num_lights[None]):
        light_dir = tm.normalize(light_positions[light_idx] - hit.point)
        shadow_ray = make_ray(hit.point, light_dir, SHADOW_RAY_LEVEL)
        blocker = nearest_intersection(shadow_ray)

        if blocker.distance < 0.0 and tm.dot(hit.normal, light_dir) > 0.0:
            diffuse += diffuse_term(hit.normal, light_dir, light_colors[light_idx], material.color)
            specular += specular_term(
                hit.normal,
                light_dir,
                hit.ray.direction,
                light_colors[light_idx],
                material.specular_exponent,
            )

    return color + diffuse * material.kd + specular * material.ks


@ti.func
def trace(ray: Ray, max_depth: ti.i32) -> vec3:
    """Trace a ray through the scene.

    Args:
        ray: The ray to trace. Its reflection_level is the starting depth.
        max_depth: Rays at this level or deeper contribute nothing.

    Returns:
        The traced color (RGB), unclamped.
    """
    color = vec3(0.0, 0.0, 0.0)

    # Product of Kr over the bounces so far
    weight = 1.0

    origin = ray.origin
    direction = ray.direction
    level = ray.reflection_level
    active = 1

    while active == 1:
        if level >= max_depth:
            active = 0
        else:
            hit = nearest_intersection(make_ray(origin, direction, level))

            if hit.distance < 0.0:
                if level == 0:
                    color += weight * background_color[None]
                active = 0
            else:
                color += weight * shade_local(hit)
                weight *= get_sphere_material(hit.sphere_index).kr

                origin = hit.point
                direction = reflect(direction, hit.normal)
                level += 1

    return color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_pass(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace one primary ray per pixel into the frame buffer."""
    for ix, iy in ti.ndrange(width, height):
        ray = get_primary_ray(ix, iy, width, height)
        _color_buffer[ix, iy] = trace(ray, max_depth)
        _write_count[ix, iy] += 1


_trace_origin = ti.Vector.field(4, dtype=ti.f32, shape=())
_trace_direction = ti.Vector.field(4, dtype=ti.f32, shape=())
_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single(reflection_level: ti.i32, max_depth: ti.i32):
    """Trace the ray stored in _trace_origin / _trace_direction."""
    # Nested so the inner loops stay serial
    for _ in range(1):
        ray = make_ray(_trace_origin[None], _trace_direction[None], reflection_level)
        _trace_result[None] = trace(ray, max_depth)


@ti.kernel
def _trace_pixel(ix: ti.i32, iy: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32):
    """Trace the primary ray of one pixel into _trace_result."""
    for _ in range(1):
        ray = get_primary_ray(ix, iy, width, height)
        _trace_result[None] = trace(ray, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def _result_tuple() -> tuple[float, float, float]:
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    reflection_level: int = 0,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace a single ray against the uploaded scene.

    This is a Python-callable function for inspection and testing. For
    production rendering, use render_image() which processes all pixels in
    parallel.

    Args:
        origin: Ray origin point.
        direction: Ray direction (non-zero).
        reflection_level: Starting depth, 0 for a primary ray.
        max_depth: Reflection recursion limit.

    Returns:
        Tuple of (R, G, B) color values, unclamped.
    """
    _trace_origin[None] = [origin[0], origin[1], origin[2], 1.0]
    _trace_direction[None] = [direction[0], direction[1], direction[2], 0.0]
    _trace_single(reflection_level, max_depth)
    return _result_tuple()


def render_pixel(
    pixel_i: int, pixel_j: int, max_depth: int = DEFAULT_MAX_DEPTH
) -> tuple[float, float, float]:
    """Render a single pixel without touching the frame buffer.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        max_depth: Reflection recursion limit.

    Returns:
        Tuple of (R, G, B) color values, unclamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _trace_pixel(pixel_i, pixel_j, width, height, max_depth)
    return _result_tuple()


def render_image(max_depth: int = DEFAULT_MAX_DEPTH) -> None:
    """Render every pixel of the render target once.

    Args:
        max_depth: Reflection recursion limit.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If max_depth is negative.
    """
    _check_render_target_initialized()
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")

    width, height = get_image_dimensions()
    clear_render_target()
    logger.info("Rendering %dx%d (max depth %d)", width, height, max_depth)
    _render_pass(width, height, max_depth)


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the rendered image as a NumPy array.

    The array has shape (height, width, 3), row 0 is the top of the image,
    and values are NOT clamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]

    # (width, height, 3) -> (height, width, 3), then flip so row 0 is the top
    image = np.flipud(np.transpose(image, (1, 0, 2)))
    return np.ascontiguousarray(image, dtype=np.float32)


def get_write_counts() -> npt.NDArray[np.int32]:
    """Get how many times each pixel was written in the last pass.

    Returns:
        Array of shape (height, width), in the same orientation as
        get_image_numpy().
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    counts = _write_count.to_numpy()[:width, :height]
    return np.ascontiguousarray(np.flipud(counts.T))
