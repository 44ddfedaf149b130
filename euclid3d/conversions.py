"""
Conversion functions between Euler angles, quaternions and rotation matrices.

Conventions
-----------
- Euler angles: heading (y), pitch (x), bank (z), in radians. The
  object-to-world rotation applies bank, then pitch, then heading.
- ``matrix_from_euler_angles`` and ``matrix_from_object_to_world_quaternion``
  produce the same object-to-world rotation block from the two independent
  derivations; ``euler_from_matrix`` inverts them.
- ``matrix_from_world_to_object_quaternion`` is the transpose of the
  object-to-world block. It equals ``Transform.rotation_about_vector`` for the
  same axis and angle, and ``quaternion_from_rotation_matrix`` inverts it
  (up to the sign of the quaternion).
"""

from __future__ import annotations

import math

from ._core import EulerAngles, GIMBAL_LOCK_THRESHOLD
from .quaternion import Quaternion, quaternion_conjugate
from .transform import Transform


# =============================================================================
# Euler Angles -> Matrix
# =============================================================================


def matrix_from_euler_angles(orientation: EulerAngles) -> Transform:
    """
    Object-to-world rotation matrix from heading/pitch/bank.

    Args:
        orientation: Euler angles in radians

    Returns:
        Transform with the rotation block set and no translation
    """
    sh, ch = math.sin(orientation.heading), math.cos(orientation.heading)
    sp, cp = math.sin(orientation.pitch), math.cos(orientation.pitch)
    sb, cb = math.sin(orientation.bank), math.cos(orientation.bank)

    return Transform(
        m11=ch * cb + sh * sp * sb,
        m12=-ch * sb + sh * sp * cb,
        m13=sh * cp,
        m21=sb * cp,
        m22=cb * cp,
        m23=-sp,
        m31=-sh * cb + ch * sp * sb,
        m32=sb * sh + ch * sp * cb,
        m33=ch * cp,
    )


# =============================================================================
# Quaternion -> Matrix
# =============================================================================


def matrix_from_object_to_world_quaternion(q: Quaternion) -> Transform:
    """Rotation block from an object-to-world unit quaternion."""
    w, x, y, z = q.w, q.x, q.y, q.z
    return Transform(
        m11=1 - 2 * y * y - 2 * z * z,
        m12=2 * x * y - 2 * w * z,
        m13=2 * x * z + 2 * w * y,
        m21=2 * x * y + 2 * w * z,
        m22=1 - 2 * x * x - 2 * z * z,
        m23=2 * y * z - 2 * w * x,
        m31=2 * x * z - 2 * w * y,
        m32=2 * y * z + 2 * w * x,
        m33=1 - 2 * x * x - 2 * y * y,
    )


def matrix_from_world_to_object_quaternion(q: Quaternion) -> Transform:
    """Rotation block from a world-to-object unit quaternion (cross terms flip sign)."""
    w, x, y, z = q.w, q.x, q.y, q.z
    return Transform(
        m11=1 - 2 * y * y - 2 * z * z,
        m12=2 * x * y + 2 * w * z,
        m13=2 * x * z - 2 * w * y,
        m21=2 * x * y - 2 * w * z,
        m22=1 - 2 * x * x - 2 * z * z,
        m23=2 * y * z + 2 * w * x,
        m31=2 * x * z + 2 * w * y,
        m32=2 * y * z - 2 * w * x,
        m33=1 - 2 * x * x - 2 * y * y,
    )


# =============================================================================
# Matrix -> Quaternion
# =============================================================================


def quaternion_from_rotation_matrix(m: Transform) -> Quaternion:
    """
    Extract a unit quaternion from a rotation block.

    Of w, x, y, z the component with the largest magnitude is recovered from
    the trace/diagonal (largest of the four "4c^2 - 1" terms), and the other
    three from sums and differences of symmetric off-diagonal pairs divided by
    it. This keeps the divisor away from zero for every rotation.

    Args:
        m: Transform whose rotation block is a world-to-object rotation

    Returns:
        Quaternion q with ``matrix_from_world_to_object_quaternion(q) == m``
        (q or -q, depending on the branch taken)
    """
    four_w_sq_minus_1 = m.m11 + m.m22 + m.m33
    four_x_sq_minus_1 = m.m11 - m.m22 - m.m33
    four_y_sq_minus_1 = m.m22 - m.m11 - m.m33
    four_z_sq_minus_1 = m.m33 - m.m11 - m.m22

    candidates = (four_w_sq_minus_1, four_x_sq_minus_1, four_y_sq_minus_1, four_z_sq_minus_1)
    biggest_index = 0
    for index in range(1, 4):
        if candidates[index] > candidates[biggest_index]:
            biggest_index = index

    biggest_val = math.sqrt(candidates[biggest_index] + 1) * 0.5
    mult = 0.25 / biggest_val

    if biggest_index == 0:
        return Quaternion(
            biggest_val,
            (m.m23 - m.m32) * mult,
            (m.m31 - m.m13) * mult,
            (m.m12 - m.m21) * mult,
        )
    if biggest_index == 1:
        return Quaternion(
            (m.m23 - m.m32) * mult,
            biggest_val,
            (m.m12 + m.m21) * mult,
            (m.m31 + m.m13) * mult,
        )
    if biggest_index == 2:
        return Quaternion(
            (m.m31 - m.m13) * mult,
            (m.m12 + m.m21) * mult,
            biggest_val,
            (m.m23 + m.m32) * mult,
        )
    return Quaternion(
        (m.m12 - m.m21) * mult,
        (m.m31 + m.m13) * mult,
        (m.m23 + m.m32) * mult,
        biggest_val,
    )


# =============================================================================
# Matrix / Quaternion -> Euler Angles
# =============================================================================


def euler_from_matrix(m: Transform) -> EulerAngles:
    """
    Heading/pitch/bank from an object-to-world rotation block.

    Near gimbal lock (|sin(pitch)| > 0.9999) bank is set to zero and the whole
    rotation about the vertical axis is assigned to heading.
    """
    sin_pitch = -m.m23
    if abs(sin_pitch) > GIMBAL_LOCK_THRESHOLD:
        pitch = math.copysign(math.pi / 2, sin_pitch)
        heading = math.atan2(-m.m31, m.m11)
        bank = 0.0
    else:
        pitch = math.asin(sin_pitch)
        heading = math.atan2(m.m13, m.m33)
        bank = math.atan2(m.m21, m.m22)
    return EulerAngles(heading=heading, pitch=pitch, bank=bank)


def euler_from_object_to_world_quaternion(q: Quaternion) -> EulerAngles:
    """Heading/pitch/bank from an object-to-world unit quaternion."""
    w, x, y, z = q.w, q.x, q.y, q.z

    sin_pitch = -2.0 * (y * z - w * x)
    if abs(sin_pitch) > GIMBAL_LOCK_THRESHOLD:
        pitch = math.copysign(math.pi / 2, sin_pitch)
        heading = math.atan2(-x * z + w * y, 0.5 - y * y - z * z)
        bank = 0.0
    else:
        pitch = math.asin(sin_pitch)
        heading = math.atan2(x * z + w * y, 0.5 - x * x - y * y)
        bank = math.atan2(x * y + w * z, 0.5 - x * x - z * z)
    return EulerAngles(heading=heading, pitch=pitch, bank=bank)


def euler_from_world_to_object_quaternion(q: Quaternion) -> EulerAngles:
    """Heading/pitch/bank from a world-to-object unit quaternion."""
    return euler_from_object_to_world_quaternion(quaternion_conjugate(q))
