"""
Quaternion interpolation.

Both functions take the shortest arc: when the inputs lie in opposite
hemispheres (negative dot product) the second quaternion is negated, which
represents the same rotation.
"""

from __future__ import annotations

import math

from ._core import SLERP_PARALLEL_THRESHOLD
from .quaternion import Quaternion, quaternion_dot, quaternion_negate, quaternion_normalize


def quaternion_slerp(a: Quaternion, b: Quaternion, t: float) -> Quaternion:
    """
    Spherical linear interpolation between unit quaternions.

    Inputs closer than cos(omega) > 0.9999 are blended linearly, avoiding the
    0/0 of sin(omega).

    Args:
        a, b: Unit quaternions
        t: Parameter in [0, 1]. t=0 returns a, t=1 returns b (or -b).

    Returns:
        Interpolated quaternion
    """
    cos_omega = quaternion_dot(a, b)
    if cos_omega < 0:
        b = quaternion_negate(b)
        cos_omega = -cos_omega

    if cos_omega > SLERP_PARALLEL_THRESHOLD:
        k0 = 1 - t
        k1 = t
    else:
        sin_omega = math.sqrt(1 - cos_omega * cos_omega)
        omega = math.atan2(sin_omega, cos_omega)
        k0 = math.sin((1 - t) * omega) / sin_omega
        k1 = math.sin(t * omega) / sin_omega

    return Quaternion(
        a.w * k0 + b.w * k1,
        a.x * k0 + b.x * k1,
        a.y * k0 + b.y * k1,
        a.z * k0 + b.z * k1,
    )


def quaternion_nlerp(a: Quaternion, b: Quaternion, t: float) -> Quaternion:
    """
    Normalized linear interpolation (faster than slerp, non-constant velocity).

    Args:
        a, b: Unit quaternions
        t: Parameter in [0, 1]

    Returns:
        Interpolated unit quaternion
    """
    if quaternion_dot(a, b) < 0:
        b = quaternion_negate(b)
    blended = Quaternion(
        (1 - t) * a.w + t * b.w,
        (1 - t) * a.x + t * b.x,
        (1 - t) * a.y + t * b.y,
        (1 - t) * a.z + t * b.z,
    )
    return quaternion_normalize(blended)
