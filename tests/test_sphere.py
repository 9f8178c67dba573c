"""Unit tests for scaled-sphere intersection.

Tests cover:
- Ray hitting sphere from outside
- Ray missing sphere, sphere behind ray
- Tangent rays (single root)
- Primary-ray hit-time bias vs. reflection-ray epsilon
- Ray starting inside sphere (interior flag)
- Degenerate zero direction
- Ellipsoids (non-uniform scale)
- Normal transform and interior flip
"""

import numpy as np
import pytest
import taichi as ti


def _run_hit(origin, direction, center, scale=(1.0, 1.0, 1.0), reflection_level=0):
    """Run hit_sphere in a kernel and return (hit, t, interior)."""
    from whitted.core.ray import inverse_scale_matrix, make_ray
    from whitted.geometry.sphere import hit_sphere, make_sphere

    ray_origin = ti.Vector.field(4, dtype=ti.f32, shape=())
    ray_direction = ti.Vector.field(4, dtype=ti.f32, shape=())
    sphere_center = ti.Vector.field(4, dtype=ti.f32, shape=())
    inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    interior = ti.field(dtype=ti.i32, shape=())

    ray_origin[None] = [origin[0], origin[1], origin[2], 1.0]
    ray_direction[None] = [direction[0], direction[1], direction[2], 0.0]
    sphere_center[None] = [center[0], center[1], center[2], 1.0]
    inverse[None] = inverse_scale_matrix(scale).tolist()

    @ti.kernel
    def test_kernel(level: ti.i32):
        ray = make_ray(ray_origin[None], ray_direction[None], level)
        record = hit_sphere(ray, make_sphere(sphere_center[None], inverse[None]))
        hit[None] = record.hit
        t_val[None] = record.t
        interior[None] = record.interior

    test_kernel(reflection_level)
    return hit[None], t_val[None], interior[None]


class TestHitTimePolicy:
    """Tests for is_valid_hit_time."""

    @pytest.mark.parametrize(
        "t, level, expected",
        [
            (0.5, 0, 0),
            (1.0, 0, 0),
            (1.5, 0, 1),
            (0.5, 1, 1),
            (5e-5, 1, 0),
            (-2.0, 1, 0),
            (0.5, 3, 1),
        ],
    )
    def test_is_valid_hit_time(self, t, level, expected):
        """Test the primary bias and the reflection epsilon."""
        from whitted.geometry.sphere import is_valid_hit_time

        result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel(t: ti.f32, level: ti.i32):
            result[None] = is_valid_hit_time(t, level)

        test_kernel(t, level)
        assert bool(result[None]) == bool(expected)


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_sphere_direct_hit(self):
        """Test ray hitting a unit sphere head-on from the eye."""
        hit, t, interior = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0))

        assert hit == 1
        # Front of the sphere is at z = -4
        assert abs(t - 4.0) < 1e-5
        assert interior == 0

    def test_hit_sphere_unnormalized_direction(self):
        """Test that hit time is measured in units of the given direction."""
        hit, t, _ = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -2.0), (0.0, 0.0, -5.0))

        assert hit == 1
        assert abs(t - 2.0) < 1e-5

    def test_hit_sphere_miss(self):
        """Test ray passing beside the sphere."""
        hit, t, _ = _run_hit((5.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0))

        assert hit == 0
        assert t == -1.0

    def test_hit_sphere_behind_ray(self):
        """Test that a sphere behind the origin is not hit."""
        hit, _, _ = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 5.0), reflection_level=1)

        assert hit == 0

    def test_tangent_ray_single_root(self):
        """Test that a grazing ray reports the double root t = b / a."""
        hit, t, interior = _run_hit((0.0, 1.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0))

        assert hit == 1
        assert abs(t - 5.0) < 1e-5
        assert interior == 0

    def test_tangent_root_below_epsilon_is_no_hit(self):
        """Test that a grazing ray starting at the tangent point does not hit."""
        hit, t, _ = _run_hit(
            (0.0, 1.0, -5.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), reflection_level=1
        )

        assert hit == 0
        assert t == -1.0

    def test_zero_direction_is_no_hit(self):
        """Test that a degenerate direction reports no hit instead of dividing by zero."""
        hit, t, _ = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, -5.0), reflection_level=1)

        assert hit == 0
        assert t == -1.0


class TestPrimaryRayBias:
    """Tests for the primary-ray minimum hit time."""

    def test_primary_ray_skips_near_root_below_bias(self):
        """Test that a primary ray falls through to the far root inside the bias."""
        # Near root at t = 0.5, far root at t = 2.5
        hit, t, interior = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.5))

        assert hit == 1
        assert abs(t - 2.5) < 1e-5
        assert interior == 1

    def test_reflection_ray_accepts_near_root_below_bias(self):
        """Test that non-primary rays only use the small epsilon."""
        hit, t, interior = _run_hit(
            (0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.5), reflection_level=1
        )

        assert hit == 1
        assert abs(t - 0.5) < 1e-5
        assert interior == 0

    def test_primary_ray_inside_sphere_within_bias_misses(self):
        """Test that both roots inside the bias yield no hit for a primary ray."""
        # Roots at t = -0.5 and t = 0.5
        hit, _, _ = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0))

        assert hit == 0


class TestInteriorHits:
    """Tests for rays starting inside a sphere."""

    def test_ray_from_center_finds_far_root(self):
        """Test that a reflection ray from the center exits through the far side."""
        hit, t, interior = _run_hit(
            (0.0, 0.0, -5.0), (0.0, 0.0, 1.0), (0.0, 0.0, -5.0), reflection_level=1
        )

        assert hit == 1
        assert abs(t - 1.0) < 1e-5
        assert interior == 1

    def test_ray_leaving_surface_does_not_self_hit(self):
        """Test that a ray leaving the surface outward ignores the root at t = 0."""
        hit, _, _ = _run_hit(
            (0.0, 0.0, -4.0), (0.0, 0.0, 1.0), (0.0, 0.0, -5.0), reflection_level=1
        )

        assert hit == 0


class TestEllipsoidIntersection:
    """Tests for non-uniformly scaled spheres."""

    def test_hit_along_stretched_axis(self):
        """Test that scale (2, 1, 1) moves the x extent to 2."""
        hit, t, _ = _run_hit(
            (5.0, 0.0, 0.0), (-1.0, 0.0, 0.0), (0.0, 0.0, 0.0), scale=(2.0, 1.0, 1.0),
            reflection_level=1,
        )

        assert hit == 1
        assert abs(t - 3.0) < 1e-5

    def test_hit_along_unscaled_axis(self):
        """Test that scale (2, 1, 1) leaves the y extent at 1."""
        hit, t, _ = _run_hit(
            (0.0, 5.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, 0.0), scale=(2.0, 1.0, 1.0),
            reflection_level=1,
        )

        assert hit == 1
        assert abs(t - 4.0) < 1e-5

    def test_miss_outside_squashed_extent(self):
        """Test that a ray passing at y = 0.8 misses a sphere squashed to 0.5 in y."""
        hit, _, _ = _run_hit(
            (0.0, 0.8, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), scale=(1.0, 0.5, 1.0),
            reflection_level=1,
        )

        assert hit == 0


class TestSphereNormal:
    """Tests for the shading normal."""

    def _normal(self, point, center, scale, interior):
        from whitted.core.ray import inverse_scale_matrix
        from whitted.geometry.sphere import make_sphere, sphere_normal

        hit_point = ti.Vector.field(4, dtype=ti.f32, shape=())
        sphere_center = ti.Vector.field(4, dtype=ti.f32, shape=())
        inverse = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
        result = ti.Vector.field(4, dtype=ti.f32, shape=())

        hit_point[None] = [point[0], point[1], point[2], 1.0]
        sphere_center[None] = [center[0], center[1], center[2], 1.0]
        inverse[None] = inverse_scale_matrix(scale).tolist()

        @ti.kernel
        def test_kernel(interior: ti.i32):
            sphere = make_sphere(sphere_center[None], inverse[None])
            result[None] = sphere_normal(sphere, hit_point[None], interior)

        test_kernel(interior)
        return result[None].to_numpy()

    def test_unit_sphere_normal_is_radial(self):
        """Test that the normal on a unit sphere points from the center."""
        n = self._normal((0.6, 0.8, -5.0), (0.0, 0.0, -5.0), (1.0, 1.0, 1.0), 0)
        assert np.allclose(n, [0.6, 0.8, 0.0, 0.0], atol=1e-6)

    def test_interior_normal_is_inverted(self):
        """Test that interior hits flip the normal."""
        n = self._normal((0.0, 0.0, -4.0), (0.0, 0.0, -5.0), (1.0, 1.0, 1.0), 1)
        assert np.allclose(n, [0.0, 0.0, -1.0, 0.0], atol=1e-6)

    def test_ellipsoid_normal_uses_inverse_transpose(self):
        """Test the ellipsoid normal against the analytic gradient."""
        # Point on x^2/4 + y^2 + z^2 = 1; gradient is (x/4, y, z)
        point = (np.sqrt(2.0), np.sqrt(0.5), 0.0)
        n = self._normal(point, (0.0, 0.0, 0.0), (2.0, 1.0, 1.0), 0)

        expected = np.array([1.0, 2.0, 0.0, 0.0]) / np.sqrt(5.0)
        assert np.allclose(n, expected, atol=1e-5)
        assert abs(np.linalg.norm(n) - 1.0) < 1e-5
