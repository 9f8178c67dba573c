"""Scene storage and nearest-hit ray queries.

The uploaded scene lives in Taichi fields (Structure of Arrays layout) and is
read-only while kernels run. Spheres are referenced by their index in scene
order, which is also the tie-break order for equal hit times.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.scene.intersection import upload_scene, probe_intersection
    >>> from whitted.scene.loader import load_scene
    >>> upload_scene(load_scene("examples/scenes/three_spheres.txt"))
    >>> info = probe_intersection((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    >>> info.hit
    True
"""

import logging
from dataclasses import dataclass

import taichi as ti

from whitted.core.ray import Ray, make_ray, ray_at, vec4
from whitted.geometry.sphere import Sphere, hit_sphere, sphere_normal
from whitted.materials.blinn_phong import BlinnPhongMaterial
from whitted.scene.model import MAX_LIGHTS, MAX_SPHERES, LightInfo, Scene, SphereInfo

logger = logging.getLogger(__name__)


@ti.dataclass
class Intersection:
    """Nearest intersection of a ray with the scene.

    Attributes:
        ray: The probing ray.
        distance: Hit time along the ray, or -1 if nothing was hit.
        point: The hit point (w = 1). Only valid if distance >= 0.
        interior: 1 if the ray started inside the hit sphere.
        sphere_index: Index of the hit sphere in scene order, -1 on a miss.
        normal: Unit shading normal (w = 0), inverted for interior hits.
    """

    ray: Ray
    distance: ti.f32
    point: vec4
    interior: ti.i32
    sphere_index: ti.i32
    normal: vec4


# Sphere storage
sphere_centers = ti.Vector.field(4, dtype=ti.f32, shape=MAX_SPHERES)
sphere_inverse_transforms = ti.Matrix.field(4, 4, dtype=ti.f32, shape=MAX_SPHERES)
sphere_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_ka = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_kd = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_ks = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_kr = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_specular_exponents = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Light storage
light_positions = ti.Vector.field(4, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

# Global colors
background_color = ti.Vector.field(3, dtype=ti.f32, shape=())
ambient_intensity = ti.Vector.field(3, dtype=ti.f32, shape=())


def clear_scene() -> None:
    """Remove all spheres and lights and reset the global colors to black."""
    num_spheres[None] = 0
    num_lights[None] = 0
    background_color[None] = [0.0, 0.0, 0.0]
    ambient_intensity[None] = [0.0, 0.0, 0.0]


def add_sphere(sphere: SphereInfo) -> int:
    """Append a sphere to the scene storage.

    Args:
        sphere: The sphere description.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    x, y, z = sphere.position
    sphere_centers[idx] = [x, y, z, 1.0]
    sphere_inverse_transforms[idx] = sphere.inverse_transform.tolist()
    sphere_colors[idx] = list(sphere.color)
    sphere_ka[idx] = sphere.ka
    sphere_kd[idx] = sphere.kd
    sphere_ks[idx] = sphere.ks
    sphere_kr[idx] = sphere.kr
    sphere_specular_exponents[idx] = sphere.specular_exponent
    num_spheres[None] = idx + 1
    return idx


def add_light(light: LightInfo) -> int:
    """Append a point light to the scene storage.

    Args:
        light: The light description.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    x, y, z = light.position
    light_positions[idx] = [x, y, z, 1.0]
    light_colors[idx] = list(light.color)
    num_lights[None] = idx + 1
    return idx


def upload_scene(scene: Scene) -> None:
    """Replace the scene storage with the contents of a Scene.

    Args:
        scene: The scene to render.

    Raises:
        RuntimeError: If the scene holds more spheres or lights than the
            storage supports. The previous scene is left in place.
    """
    if len(scene.spheres) > MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    if len(scene.lights) > MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    clear_scene()
    for sphere in scene.spheres:
        add_sphere(sphere)
    for light in scene.lights:
        add_light(light)
    background_color[None] = list(scene.background)
    ambient_intensity[None] = list(scene.ambient)
    logger.debug(
        "Uploaded scene: %d spheres, %d lights", len(scene.spheres), len(scene.lights)
    )


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_sphere(index: ti.i32) -> Sphere:
    """Load the geometric part of a stored sphere."""
    return Sphere(center=sphere_centers[index], inverse_transform=sphere_inverse_transforms[index])


@ti.func
def get_sphere_material(index: ti.i32) -> BlinnPhongMaterial:
    """Load the Blinn-Phong coefficients of a stored sphere."""
    return BlinnPhongMaterial(
        color=sphere_colors[index],
        ka=sphere_ka[index],
        kd=sphere_kd[index],
        ks=sphere_ks[index],
        kr=sphere_kr[index],
        specular_exponent=sphere_specular_exponents[index],
    )


@ti.func
def _make_miss_record(ray: Ray) -> Intersection:
    """Create an Intersection indicating no hit."""
    return Intersection(
        ray=ray,
        distance=-1.0,
        point=vec4(0.0, 0.0, 0.0, 1.0),
        interior=0,
        sphere_index=-1,
        normal=vec4(0.0, 0.0, 0.0, 0.0),
    )


@ti.func
def nearest_intersection(ray: Ray) -> Intersection:
    """Find the closest valid hit of a ray against all spheres.

    Spheres are tested in scene order; a later sphere replaces the current
    best only with a strictly smaller hit time.

    Args:
        ray: The probing ray. Its reflection_level selects the hit-time
            policy (see whitted.geometry.sphere).

    Returns:
        The nearest Intersection, or a miss record with distance -1.
    """
    closest_t = -1.0
    closest_index = -1
    closest_interior = 0

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i))
        if rec.hit == 1:
            if closest_index == -1 or rec.t < closest_t:
                closest_t = rec.t
                closest_index = i
                closest_interior = rec.interior

    result = _make_miss_record(ray)
    if closest_index >= 0:
        point = ray_at(ray, closest_t)
        normal = sphere_normal(get_sphere(closest_index), point, closest_interior)
        result = Intersection(
            ray=ray,
            distance=closest_t,
            point=point,
            interior=closest_interior,
            sphere_index=closest_index,
            normal=normal,
        )
    return result


# =============================================================================
# Host-side probing (inspection and tests)
# =============================================================================


@dataclass(frozen=True)
class IntersectionInfo:
    """Host-side copy of an Intersection.

    Attributes:
        distance: Hit time, -1 on a miss.
        point: Hit point (x, y, z).
        interior: Whether the ray started inside the hit sphere.
        sphere_index: Index of the hit sphere, -1 on a miss.
        normal: Unit shading normal (x, y, z).
    """

    distance: float
    point: tuple[float, float, float]
    interior: bool
    sphere_index: int
    normal: tuple[float, float, float]

    @property
    def hit(self) -> bool:
        """Whether anything was hit."""
        return self.distance >= 0.0


_probe_origin = ti.Vector.field(4, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(4, dtype=ti.f32, shape=())
_probe_distance = ti.field(dtype=ti.f32, shape=())
_probe_point = ti.Vector.field(4, dtype=ti.f32, shape=())
_probe_interior = ti.field(dtype=ti.i32, shape=())
_probe_sphere_index = ti.field(dtype=ti.i32, shape=())
_probe_normal = ti.Vector.field(4, dtype=ti.f32, shape=())


@ti.kernel
def _probe_kernel(reflection_level: ti.i32):
    # Nested so the sphere loop stays serial
    for _ in range(1):
        ray = make_ray(_probe_origin[None], _probe_direction[None], reflection_level)
        hit = nearest_intersection(ray)
        _probe_distance[None] = hit.distance
        _probe_point[None] = hit.point
        _probe_interior[None] = hit.interior
        _probe_sphere_index[None] = hit.sphere_index
        _probe_normal[None] = hit.normal


def _xyz(v) -> tuple[float, float, float]:
    return (float(v[0]), float(v[1]), float(v[2]))


def probe_intersection(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    reflection_level: int = 0,
) -> IntersectionInfo:
    """Run the nearest-hit query for a single ray from Python.

    Args:
        origin: Ray origin point.
        direction: Ray direction (non-zero).
        reflection_level: 0 for a primary ray, > 0 otherwise.

    Returns:
        The intersection copied back to the host.
    """
    _probe_origin[None] = [origin[0], origin[1], origin[2], 1.0]
    _probe_direction[None] = [direction[0], direction[1], direction[2], 0.0]
    _probe_kernel(reflection_level)
    return IntersectionInfo(
        distance=float(_probe_distance[None]),
        point=_xyz(_probe_point[None]),
        interior=bool(_probe_interior[None]),
        sphere_index=int(_probe_sphere_index[None]),
        normal=_xyz(_probe_normal[None]),
    )
