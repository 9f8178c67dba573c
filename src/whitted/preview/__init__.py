"""Preview module for image output.

Components:
    export: 8-bit encoding and PPM/PNG export via Pillow

Example:
    >>> from whitted.preview import save_image
    >>> save_image(renderer.get_image_numpy(), "output.ppm")
"""

from whitted.preview.export import (
    QUANTIZE_SCALE,
    image_to_uint8,
    save_image,
)

__all__ = [
    "QUANTIZE_SCALE",
    "image_to_uint8",
    "save_image",
]
