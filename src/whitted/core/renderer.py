"""Renderer binding a Scene to the render target.

The Renderer uploads an immutable Scene to the Taichi scene storage, sets up
the camera and frame buffer, and exposes rendering and image output in one
place.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from whitted.core.renderer import Renderer
    >>> from whitted.scene.loader import load_scene
    >>>
    >>> renderer = Renderer(load_scene("examples/scenes/three_spheres.txt"))
    >>> renderer.render()
    >>> renderer.save_image()  # writes scene.output
"""

from pathlib import Path

import numpy as np
import numpy.typing as npt

from whitted.camera.pinhole import setup_camera
from whitted.core.integrator import (
    DEFAULT_MAX_DEPTH,
    get_image_numpy,
    render_image,
    setup_render_target,
)
from whitted.preview.export import image_to_uint8, save_image
from whitted.scene.intersection import upload_scene
from whitted.scene.model import Scene


class Renderer:
    """Renders one Scene into the shared frame buffer.

    Only one scene can be loaded at a time since the scene storage and frame
    buffer are global Taichi fields; constructing a Renderer replaces them.

    Attributes:
        scene: The scene being rendered.
        max_depth: Reflection recursion limit.
    """

    def __init__(self, scene: Scene, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        """Upload the scene and set up the camera and frame buffer.

        Args:
            scene: The scene to render.
            max_depth: Reflection recursion limit.

        Raises:
            ValueError: If the scene's resolution is not supported.
            RuntimeError: If the scene exceeds the sphere or light limits.
        """
        self._scene = scene
        self._max_depth = max_depth
        self._rendered = False
        upload_scene(scene)
        setup_render_target(scene.width, scene.height)
        setup_camera(scene.view)

    @property
    def scene(self) -> Scene:
        """Get the scene being rendered."""
        return self._scene

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._scene.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._scene.height

    @property
    def max_depth(self) -> int:
        """Get the reflection recursion limit."""
        return self._max_depth

    @property
    def rendered(self) -> bool:
        """Whether render() has completed at least once."""
        return self._rendered

    def render(self) -> None:
        """Render every pixel of the scene once."""
        render_image(self._max_depth)
        self._rendered = True

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the unclamped image, shape (height, width, 3), row 0 on top."""
        return get_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the clamped, quantized 8-bit image."""
        return image_to_uint8(self.get_image_numpy())

    def save_image(self, filepath: str | Path | None = None) -> Path:
        """Save the rendered image.

        Args:
            filepath: Destination path. Defaults to the scene's output name.
                The format follows the suffix (.ppm writes binary P6).

        Returns:
            The path that was written.
        """
        target = Path(filepath if filepath is not None else self._scene.output)
        save_image(self.get_image_numpy(), target)
        return target

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"spheres={len(self._scene.spheres)}, lights={len(self._scene.lights)}, "
            f"max_depth={self._max_depth})"
        )
