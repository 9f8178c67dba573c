"""Pytest configuration for raytracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate fields allocated by modules imported earlier in the session.
    """
    ti.init(arch=ti.cpu)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear uploaded scene data and the frame buffer around each test."""
    # Import here so Taichi is initialized before fields are allocated
    from whitted.core.integrator import clear_render_target
    from whitted.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_render_target()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def sphere_factory():
    """Build SphereInfo values with neutral defaults.

    Defaults: unit sphere at (0, 0, -5), white, all coefficients zero.
    """
    from whitted.scene.model import SphereInfo

    def _make(**overrides):
        params = {
            "name": "sphere",
            "position": (0.0, 0.0, -5.0),
            "scale": (1.0, 1.0, 1.0),
            "color": (1.0, 1.0, 1.0),
            "ka": 0.0,
            "kd": 0.0,
            "ks": 0.0,
            "kr": 0.0,
            "specular_exponent": 1.0,
        }
        params.update(overrides)
        return SphereInfo(**params)

    return _make


@pytest.fixture
def scene_factory():
    """Build Scene values around a -1..1 view plane at near = 1."""
    from whitted.scene.model import Scene, ViewPlane

    def _make(spheres=(), lights=(), width=8, height=8, **overrides):
        params = {
            "view": ViewPlane(near=1.0, left=-1.0, right=1.0, top=1.0, bottom=-1.0),
            "width": width,
            "height": height,
            "spheres": tuple(spheres),
            "lights": tuple(lights),
        }
        params.update(overrides)
        return Scene(**params)

    return _make
