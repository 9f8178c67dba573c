"""Immutable host-side description of a scene.

The Scene value is the single context a render pass reads from. It is built
once (by the text loader or programmatically), uploaded to the Taichi scene
storage, and never mutated afterwards.

Example:
    >>> from whitted.scene.model import Scene, SphereInfo, LightInfo, ViewPlane
    >>> sphere = SphereInfo(
    ...     name="s1", position=(0.0, 0.0, -5.0), scale=(1.0, 1.0, 1.0),
    ...     color=(1.0, 0.0, 0.0), ka=0.2, kd=0.8, ks=0.5, kr=0.0,
    ...     specular_exponent=10.0,
    ... )
    >>> scene = Scene(
    ...     view=ViewPlane(near=1.0, left=-1.0, right=1.0, top=1.0, bottom=-1.0),
    ...     width=64, height=64, spheres=(sphere,),
    ... )
"""

from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from whitted.core.ray import inverse_scale_matrix

# Maximum number of spheres and lights in a scene
MAX_SPHERES = 5
MAX_LIGHTS = 5

Color = tuple[float, float, float]
Vector3 = tuple[float, float, float]


@dataclass(frozen=True)
class SphereInfo:
    """A scaled sphere with its Blinn-Phong material.

    Attributes:
        name: Opaque label from the scene file.
        position: World-space center.
        scale: Per-axis scale factors (an ellipsoid when unequal).
        color: Diffuse color.
        ka: Ambient coefficient.
        kd: Diffuse coefficient.
        ks: Specular coefficient.
        kr: Mirror reflection coefficient.
        specular_exponent: Blinn-Phong shininess.
        inverse_transform: Inverse of the scale matrix, derived from scale.
    """

    name: str
    position: Vector3
    scale: Vector3
    color: Color
    ka: float
    kd: float
    ks: float
    kr: float
    specular_exponent: float
    inverse_transform: npt.NDArray[np.float64] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "inverse_transform", inverse_scale_matrix(self.scale))


@dataclass(frozen=True)
class LightInfo:
    """A point light.

    Attributes:
        name: Opaque label from the scene file.
        position: World-space position.
        color: Light color/intensity (may exceed 1).
    """

    name: str
    position: Vector3
    color: Color


@dataclass(frozen=True)
class ViewPlane:
    """The view rectangle at distance `near` in front of the eye."""

    near: float
    left: float
    right: float
    top: float
    bottom: float


@dataclass(frozen=True)
class Scene:
    """Everything a render pass needs to know.

    Attributes:
        view: The view-plane rectangle.
        width: Image width in pixels.
        height: Image height in pixels.
        spheres: Spheres in scene order (order decides ties).
        lights: Point lights.
        background: Color returned by primary rays that hit nothing.
        ambient: Ambient light intensity.
        output: Output image filename.
    """

    view: ViewPlane
    width: int
    height: int
    spheres: tuple[SphereInfo, ...] = ()
    lights: tuple[LightInfo, ...] = ()
    background: Color = (0.0, 0.0, 0.0)
    ambient: Color = (0.0, 0.0, 0.0)
    output: str = "output.ppm"

    def __post_init__(self) -> None:
        object.__setattr__(self, "spheres", tuple(self.spheres))
        object.__setattr__(self, "lights", tuple(self.lights))
