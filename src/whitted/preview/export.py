"""Image export utilities for rendered images.

Rendered colors are linear and unbounded. Encoding for output clamps every
channel to [0, 1] and quantizes with truncation:

    byte = int(min(max(c, 0), 1) * 255.9)

so 1.0 maps to 255 and anything above 1.0 saturates. No gamma is applied.

Supported formats (via Pillow, chosen by file suffix):
    - PPM (binary P6, maxval 255)
    - PNG and any other RGB format Pillow can write

Example:
    >>> from whitted.preview.export import save_image
    >>> save_image(renderer.get_image_numpy(), "output.ppm")
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Scale applied before truncating to 8 bits
QUANTIZE_SCALE = 255.9


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to 8-bit.

    Args:
        image: Image array of shape (H, W, 3) or (H, W, 4); only the first
            three channels are kept.

    Returns:
        8-bit image array of shape (H, W, 3).

    Raises:
        ValueError: If the array is not an (H, W, C) image with C >= 3.
    """
    if image.ndim != 3 or image.shape[2] < 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    rgb = np.clip(image[:, :, :3].astype(np.float64), 0.0, 1.0)
    return (rgb * QUANTIZE_SCALE).astype(np.uint8)


def save_image(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear float image, picking the format from the suffix.

    Args:
        image: Image array of shape (H, W, 3), row 0 at the top.
        filepath: Output file path (.ppm, .png, ...).
    """
    path = Path(filepath)
    pil_image = PILImage.fromarray(image_to_uint8(image))
    if path.suffix.lower() in (".ppm", ".pnm", ""):
        pil_image.save(path, format="PPM")
    else:
        pil_image.save(path)
