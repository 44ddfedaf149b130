"""Tests for conversions between Euler angles, quaternions and matrices."""

import math

import numpy as np
import pytest

from euclid3d import (
    EulerAngles,
    Quaternion,
    Transform,
    euler_from_matrix,
    euler_from_object_to_world_quaternion,
    euler_from_world_to_object_quaternion,
    matrix4_multiply,
    matrix_from_euler_angles,
    matrix_from_object_to_world_quaternion,
    matrix_from_world_to_object_quaternion,
    quaternion_conjugate,
    quaternion_cross,
    quaternion_from_euler_object_to_world,
    quaternion_from_euler_world_to_object,
    quaternion_from_rotation_matrix,
)


EULER_SAMPLES = [
    EulerAngles(0.0, 0.0, 0.0),
    EulerAngles(0.3, 0.0, 0.0),
    EulerAngles(0.0, 0.4, 0.0),
    EulerAngles(0.0, 0.0, -0.5),
    EulerAngles(0.7, -0.2, 1.1),
    EulerAngles(-2.5, 1.2, -3.0),
    EulerAngles(3.0, -1.4, 0.1),
]


def rotation_block(tf: Transform) -> np.ndarray:
    return tf.as_matrix()[:3, :3]


def assert_same_rotation(actual: Quaternion, expected: Quaternion, atol: float = 1e-9):
    """Compare quaternions up to sign."""
    a, e = actual.as_array(), expected.as_array()
    if np.dot(a, e) < 0:
        a = -a
    np.testing.assert_allclose(a, e, atol=atol)


def assert_euler_close(actual: EulerAngles, expected: EulerAngles, atol: float = 1e-9):
    np.testing.assert_allclose(actual.as_array(), expected.as_array(), atol=atol)


@pytest.fixture
def random_quaternions():
    """Unit quaternions spread over the sphere."""
    rng = np.random.default_rng(7)
    samples = rng.normal(size=(20, 4))
    samples /= np.linalg.norm(samples, axis=1, keepdims=True)
    return [Quaternion.from_array(s) for s in samples]


class TestEulerToMatrix:
    """Test the object-to-world matrix built from Euler angles."""

    @pytest.mark.parametrize("e", EULER_SAMPLES)
    def test_matches_quaternion_route(self, e):
        from_euler = matrix_from_euler_angles(e)
        from_quat = matrix_from_object_to_world_quaternion(quaternion_from_euler_object_to_world(e))
        np.testing.assert_allclose(from_euler.as_matrix(), from_quat.as_matrix(), atol=1e-12)

    def test_single_angle_rotations(self):
        heading = matrix_from_euler_angles(EulerAngles(heading=0.6))
        np.testing.assert_allclose(
            rotation_block(heading), rotation_block(Transform.rotation_about("y", 0.6)).T, atol=1e-12
        )
        pitch = matrix_from_euler_angles(EulerAngles(pitch=0.6))
        np.testing.assert_allclose(
            rotation_block(pitch), rotation_block(Transform.rotation_about("x", 0.6)).T, atol=1e-12
        )
        bank = matrix_from_euler_angles(EulerAngles(bank=0.6))
        np.testing.assert_allclose(
            rotation_block(bank), rotation_block(Transform.rotation_about("z", 0.6)).T, atol=1e-12
        )

    def test_no_translation(self):
        tf = matrix_from_euler_angles(EulerAngles(0.7, -0.2, 1.1))
        assert (tf.tx, tf.ty, tf.tz, tf.tw) == (0.0, 0.0, 0.0, 1.0)
        assert (tf.m14, tf.m24, tf.m34) == (0.0, 0.0, 0.0)

    def test_classmethod(self):
        e = EulerAngles(0.7, -0.2, 1.1)
        np.testing.assert_array_equal(
            Transform.from_euler_angles(e).as_matrix(), matrix_from_euler_angles(e).as_matrix()
        )


class TestQuaternionToMatrix:
    """Test quaternion to rotation matrix conversion."""

    def test_object_to_world_matches_scipy(self, random_quaternions):
        for q in random_quaternions:
            np.testing.assert_allclose(
                rotation_block(matrix_from_object_to_world_quaternion(q)), q.to_scipy().as_matrix(), atol=1e-12
            )

    def test_world_to_object_is_transpose(self, random_quaternions):
        for q in random_quaternions:
            np.testing.assert_allclose(
                matrix_from_world_to_object_quaternion(q).as_matrix(),
                matrix_from_object_to_world_quaternion(q).as_matrix().T,
                atol=1e-12,
            )

    def test_world_to_object_matches_rotation_about_vector(self):
        axis = np.array([0.0, 0.6, 0.8])
        for theta in (0.3, -1.2, 2.9):
            np.testing.assert_allclose(
                matrix_from_world_to_object_quaternion(Quaternion.about_axis(axis, theta)).as_matrix(),
                Transform.rotation_about_vector(axis, theta).as_matrix(),
                atol=1e-12,
            )

    def test_apply_matches_matrix(self, random_quaternions):
        v = np.array([[1.0, 2.0, 3.0], [-0.5, 0.0, 4.0]])
        for q in random_quaternions:
            np.testing.assert_allclose(
                q.apply(v), Transform.from_world_to_object_quaternion(q).apply(v), atol=1e-12
            )

    def test_composition_matches_matrix_product(self, random_quaternions):
        a, b = random_quaternions[0], random_quaternions[1]
        np.testing.assert_allclose(
            matrix_from_world_to_object_quaternion(quaternion_cross(a, b)).as_matrix(),
            matrix4_multiply(
                matrix_from_world_to_object_quaternion(a), matrix_from_world_to_object_quaternion(b)
            ).as_matrix(),
            atol=1e-12,
        )

    def test_classmethods(self):
        q = Quaternion.about_axis([0.6, 0.0, 0.8], 1.0)
        np.testing.assert_array_equal(
            Transform.from_object_to_world_quaternion(q).as_matrix(),
            matrix_from_object_to_world_quaternion(q).as_matrix(),
        )


class TestMatrixToQuaternion:
    """Test quaternion extraction from a rotation block."""

    @pytest.mark.parametrize(
        "q",
        [
            Quaternion.identity(),
            Quaternion.about_x(math.pi),
            Quaternion.about_y(3.0),
            Quaternion.about_z(3.0),
            Quaternion.about_axis([0.6, 0.8, 0.0], 2.5),
            Quaternion.about_axis([0.0, 0.6, -0.8], -0.4),
        ],
    )
    def test_each_branch_round_trips(self, q):
        assert_same_rotation(quaternion_from_rotation_matrix(matrix_from_world_to_object_quaternion(q)), q)

    def test_random_round_trip(self, random_quaternions):
        for q in random_quaternions:
            recovered = Quaternion.from_rotation_matrix(Transform.from_world_to_object_quaternion(q))
            assert_same_rotation(recovered, q)
            assert recovered.norm() == pytest.approx(1.0)

    def test_largest_component_is_positive(self, random_quaternions):
        for q in random_quaternions:
            recovered = quaternion_from_rotation_matrix(matrix_from_world_to_object_quaternion(q)).as_array()
            assert recovered[np.argmax(np.abs(recovered))] > 0

    def test_elementary_rotation(self):
        m = Transform.rotation_about_vector([0.0, 0.0, 1.0], 0.8)
        assert_same_rotation(quaternion_from_rotation_matrix(m), Quaternion.about_z(0.8))


class TestMatrixToEuler:
    """Test Euler angle extraction."""

    @pytest.mark.parametrize("e", EULER_SAMPLES)
    def test_round_trip(self, e):
        assert_euler_close(euler_from_matrix(matrix_from_euler_angles(e)), e)

    def test_method(self):
        e = EulerAngles(0.7, -0.2, 1.1)
        assert_euler_close(matrix_from_euler_angles(e).to_euler_angles(), e)

    @pytest.mark.parametrize("pitch", [math.pi / 2, -math.pi / 2])
    def test_gimbal_lock(self, pitch):
        m = matrix_from_euler_angles(EulerAngles(0.5, pitch, 0.3))
        e = euler_from_matrix(m)
        assert e.pitch == pytest.approx(pitch)
        assert e.bank == 0.0
        np.testing.assert_allclose(matrix_from_euler_angles(e).as_matrix(), m.as_matrix(), atol=1e-9)


class TestQuaternionToEuler:
    """Test Euler angle extraction from quaternions."""

    @pytest.mark.parametrize("e", EULER_SAMPLES)
    def test_object_to_world_round_trip(self, e):
        assert_euler_close(euler_from_object_to_world_quaternion(quaternion_from_euler_object_to_world(e)), e)

    @pytest.mark.parametrize("e", EULER_SAMPLES)
    def test_world_to_object_round_trip(self, e):
        q = quaternion_from_euler_world_to_object(e)
        assert_euler_close(euler_from_world_to_object_quaternion(q), e)
        assert_same_rotation(q, quaternion_conjugate(quaternion_from_euler_object_to_world(e)), atol=0.0)

    def test_agrees_with_matrix_route(self, random_quaternions):
        for q in random_quaternions:
            assert_euler_close(
                euler_from_object_to_world_quaternion(q),
                euler_from_matrix(matrix_from_object_to_world_quaternion(q)),
            )

    @pytest.mark.parametrize("pitch", [math.pi / 2, -math.pi / 2])
    def test_gimbal_lock(self, pitch):
        q = quaternion_from_euler_object_to_world(EulerAngles(0.5, pitch, 0.3))
        e = euler_from_object_to_world_quaternion(q)
        assert e.pitch == pytest.approx(pitch)
        assert e.bank == 0.0
        assert_same_rotation(quaternion_from_euler_object_to_world(e), q)

    def test_method(self):
        e = EulerAngles(-2.5, 1.2, -3.0)
        assert_euler_close(Quaternion.from_euler_object_to_world(e).to_euler_angles(), e)
