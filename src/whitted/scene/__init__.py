"""Scene module for scene description, loading and storage.

Components:
    model: Immutable Scene / SphereInfo / LightInfo / ViewPlane values
    loader: Text scene-file parser
    intersection: Taichi scene storage and nearest-hit queries

The intersection module allocates Taichi fields when imported, so it is NOT
imported here. Import it directly after ti.init():
    from whitted.scene.intersection import upload_scene
"""

from .loader import SceneFormatError, load_scene, parse_scene
from .model import (
    MAX_LIGHTS,
    MAX_SPHERES,
    LightInfo,
    Scene,
    SphereInfo,
    ViewPlane,
)

__all__ = [
    "Scene",
    "SphereInfo",
    "LightInfo",
    "ViewPlane",
    "MAX_SPHERES",
    "MAX_LIGHTS",
    "load_scene",
    "parse_scene",
    "SceneFormatError",
]
