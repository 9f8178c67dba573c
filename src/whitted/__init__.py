"""Whitted-style ray tracer for scenes of ellipsoidal spheres and point lights.

Rendering runs in Taichi kernels; scene description and image output are
handled on the host with NumPy and Pillow.

Subpackages:
    core: Ray utilities, the recursive shading integrator and render pass
    geometry: Ray-sphere intersection for scaled spheres
    materials: Blinn-Phong local illumination terms
    scene: Scene model, text loader and uploaded scene storage
    camera: Fixed pinhole view-plane mapping
    preview: Image encoding and PPM/PNG export
"""

__version__ = "0.1.0"
