"""Tests for quaternion interpolation."""

import math

import numpy as np
import pytest

from euclid3d import (
    Quaternion,
    quaternion_negate,
    quaternion_nlerp,
    quaternion_slerp,
)


def assert_quat_close(actual: Quaternion, expected: Quaternion, atol: float = 1e-9):
    np.testing.assert_allclose(actual.as_array(), expected.as_array(), atol=atol)


@pytest.fixture
def endpoints():
    """Two unit quaternions less than 90 degrees apart."""
    return Quaternion.about_axis([0.6, 0.8, 0.0], 0.4), Quaternion.about_axis([0.0, 0.6, 0.8], 1.3)


class TestSlerp:
    """Test spherical linear interpolation."""

    def test_endpoints(self, endpoints):
        a, b = endpoints
        assert_quat_close(quaternion_slerp(a, b, 0.0), a)
        assert_quat_close(quaternion_slerp(a, b, 1.0), b)

    def test_same_input(self, endpoints):
        a, _ = endpoints
        for t in (0.0, 0.3, 1.0):
            assert_quat_close(quaternion_slerp(a, a, t), a)

    @pytest.mark.parametrize("t", [0.25, 0.5, 0.8])
    def test_interpolates_angle_about_fixed_axis(self, t):
        result = quaternion_slerp(Quaternion.identity(), Quaternion.about_z(math.pi / 2), t)
        assert_quat_close(result, Quaternion.about_z(t * math.pi / 2))

    def test_each_component_interpolated(self):
        axis = np.array([0.48, 0.6, 0.64])
        result = quaternion_slerp(Quaternion.identity(), Quaternion.about_axis(axis, 2.0), 0.5)
        assert_quat_close(result, Quaternion.about_axis(axis, 1.0))
        assert result.z == pytest.approx(math.sin(0.5) * 0.64)

    def test_shortest_arc(self, endpoints):
        a, b = endpoints
        far = quaternion_negate(b)
        for t in (0.2, 0.5, 0.9):
            assert_quat_close(quaternion_slerp(a, far, t), quaternion_slerp(a, b, t))

    def test_constant_angular_velocity(self, endpoints):
        a, b = endpoints
        total = a.dot(b)
        steps = [quaternion_slerp(a, b, t) for t in np.linspace(0.0, 1.0, 5)]
        gaps = [steps[i].dot(steps[i + 1]) for i in range(4)]
        np.testing.assert_allclose(gaps, gaps[0], atol=1e-12)
        assert gaps[0] > total

    def test_unit_norm(self, endpoints):
        a, b = endpoints
        for t in np.linspace(0.0, 1.0, 11):
            assert quaternion_slerp(a, b, t).norm() == pytest.approx(1.0)

    def test_nearly_parallel_falls_back_to_lerp(self):
        a = Quaternion.about_x(0.3)
        b = Quaternion.about_x(0.3 + 1e-5)
        result = quaternion_slerp(a, b, 0.5)
        assert np.all(np.isfinite(result.as_array()))
        assert_quat_close(result, Quaternion.about_x(0.3 + 5e-6), atol=1e-9)

    def test_method(self, endpoints):
        a, b = endpoints
        assert_quat_close(a.slerp(b, 0.3), quaternion_slerp(a, b, 0.3), atol=0.0)


class TestNlerp:
    """Test normalized linear interpolation."""

    def test_endpoints(self, endpoints):
        a, b = endpoints
        assert_quat_close(quaternion_nlerp(a, b, 0.0), a)
        assert_quat_close(quaternion_nlerp(a, b, 1.0), b)

    def test_midpoint_matches_slerp(self, endpoints):
        a, b = endpoints
        assert_quat_close(quaternion_nlerp(a, b, 0.5), quaternion_slerp(a, b, 0.5))

    def test_unit_norm(self, endpoints):
        a, b = endpoints
        for t in np.linspace(0.0, 1.0, 7):
            assert quaternion_nlerp(a, b, t).norm() == pytest.approx(1.0)

    def test_shortest_arc(self, endpoints):
        a, b = endpoints
        assert_quat_close(quaternion_nlerp(a, quaternion_negate(b), 0.4), quaternion_nlerp(a, b, 0.4))

    def test_method(self, endpoints):
        a, b = endpoints
        assert_quat_close(a.nlerp(b, 0.7), quaternion_nlerp(a, b, 0.7), atol=0.0)
