"""
Quaternion value type and pure quaternion functions.

Quaternions are stored as (w, x, y, z) with w the cosine of the half angle.
Every operation exists as a pure module-level function returning a new value;
the ``Quaternion`` class exposes the same operations as methods, plus in-place
mutators (``set_to_*``, trailing-underscore methods) implemented as
assign-from-pure-result.

Product convention
------------------
``quaternion_cross(a, b)`` evaluates the Hamilton product ``b * a`` by default
(``ProductOrder.REVERSED``). Reading the operands left to right gives the order
in which rotations are applied, matching the row-vector ``matrix4_multiply``:

    matrix_from_world_to_object_quaternion(quaternion_cross(a, b))
        == matrix4_multiply(M(a), M(b))

Pass ``order="hamilton"`` for the textbook order.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import reduce
from typing import TYPE_CHECKING, Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation as ScipyRotation

from ._core import (
    ArrayLike,
    DEFAULT_PRODUCT_ORDER,
    EulerAngles,
    InvalidArgumentCountError,
    POW_IDENTITY_THRESHOLD,
    ProductOrder,
    VectorLike,
    check_unit_axis,
    safe_acos,
    to_numpy,
)

if TYPE_CHECKING:
    from .transform import Transform

logger = logging.getLogger(__name__)


@dataclass(slots=True, eq=False)
class Quaternion:
    """
    Rotation quaternion (w, x, y, z).

    Non-unit quaternions are valid intermediate values; normalize before
    interpreting one as a rotation.

    Example:
        >>> q = Quaternion.about_axis([0.0, 0.0, 1.0], np.pi / 2)
        >>> q.rotation_angle()
        1.5707963267948966
        >>> both = q @ Quaternion.about_x(0.3)  # q first, then the x rotation
    """

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def __post_init__(self) -> None:
        self.w = float(self.w)
        self.x = float(self.x)
        self.y = float(self.y)
        self.z = float(self.z)

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def identity(cls) -> "Quaternion":
        """Create the identity quaternion (1, 0, 0, 0)."""
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_array(cls, wxyz: Union[ArrayLike, Tuple[float, ...]]) -> "Quaternion":
        """Create from a [w, x, y, z] array (NumPy or PyTorch)."""
        arr = to_numpy(wxyz)
        if arr.shape != (4,):
            raise ValueError(f"Quaternion must have shape (4,), got {arr.shape}")
        return cls(*arr.tolist())

    @classmethod
    def from_xyzw(cls, xyzw: Union[ArrayLike, Tuple[float, ...]]) -> "Quaternion":
        """Create from an [x, y, z, w] array (SciPy/ROS ordering)."""
        arr = to_numpy(xyzw)
        if arr.shape != (4,):
            raise ValueError(f"Quaternion must have shape (4,), got {arr.shape}")
        x, y, z, w = arr.tolist()
        return cls(w, x, y, z)

    @classmethod
    def from_scipy(cls, rotation: ScipyRotation) -> "Quaternion":
        """Create from a single ``scipy.spatial.transform.Rotation``."""
        if not rotation.single:
            raise ValueError("Only single rotations can be converted to a Quaternion")
        return cls.from_xyzw(rotation.as_quat())

    @classmethod
    def about_x(cls, theta: float) -> "Quaternion":
        """Rotation of theta radians about the x axis."""
        return cls(math.cos(theta / 2), math.sin(theta / 2), 0.0, 0.0)

    @classmethod
    def about_y(cls, theta: float) -> "Quaternion":
        """Rotation of theta radians about the y axis."""
        return cls(math.cos(theta / 2), 0.0, math.sin(theta / 2), 0.0)

    @classmethod
    def about_z(cls, theta: float) -> "Quaternion":
        """Rotation of theta radians about the z axis."""
        return cls(math.cos(theta / 2), 0.0, 0.0, math.sin(theta / 2))

    @classmethod
    def about_axis(cls, axis: VectorLike, theta: float) -> "Quaternion":
        """
        Rotation of theta radians about a unit axis.

        Raises:
            NonUnitAxisError: If the axis is not unit length within 0.01
        """
        ax, ay, az = check_unit_axis(axis).tolist()
        s = math.sin(theta / 2)
        return cls(math.cos(theta / 2), s * ax, s * ay, s * az)

    @classmethod
    def from_euler_object_to_world(cls, orientation: EulerAngles) -> "Quaternion":
        """Object-to-world quaternion from heading/pitch/bank."""
        return quaternion_from_euler_object_to_world(orientation)

    @classmethod
    def from_euler_world_to_object(cls, orientation: EulerAngles) -> "Quaternion":
        """World-to-object quaternion from heading/pitch/bank."""
        return quaternion_from_euler_world_to_object(orientation)

    @classmethod
    def from_rotation_matrix(cls, matrix: "Transform") -> "Quaternion":
        """Extract a quaternion from the rotation block of a Transform."""
        from .conversions import quaternion_from_rotation_matrix

        return quaternion_from_rotation_matrix(matrix)

    # -------------------------------------------------------------------------
    # In-place Mutators
    # -------------------------------------------------------------------------

    def copy_from(self, other: "Quaternion") -> "Quaternion":
        """Overwrite all components with those of other."""
        self.w, self.x, self.y, self.z = other.w, other.x, other.y, other.z
        return self

    def set_to_rotate_about_x(self, theta: float) -> "Quaternion":
        return self.copy_from(Quaternion.about_x(theta))

    def set_to_rotate_about_y(self, theta: float) -> "Quaternion":
        return self.copy_from(Quaternion.about_y(theta))

    def set_to_rotate_about_z(self, theta: float) -> "Quaternion":
        return self.copy_from(Quaternion.about_z(theta))

    def set_to_rotate_about_axis(self, axis: VectorLike, theta: float) -> "Quaternion":
        """Replace self with a rotation about a unit axis."""
        return self.copy_from(Quaternion.about_axis(axis, theta))

    def normalize_(self) -> "Quaternion":
        """Normalize in place. The zero quaternion becomes the identity."""
        return self.copy_from(quaternion_normalize(self))

    def scalar_multiply_(self, scalar: float) -> "Quaternion":
        """Scale all four components in place."""
        return self.copy_from(quaternion_scalar_multiply(scalar, self))

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def norm(self) -> float:
        return quaternion_norm(self)

    def normalized(self) -> "Quaternion":
        return quaternion_normalize(self)

    def conjugate(self) -> "Quaternion":
        return quaternion_conjugate(self)

    def inverse(self) -> "Quaternion":
        return quaternion_inverse(self)

    def dot(self, other: "Quaternion") -> float:
        return quaternion_dot(self, other)

    def log(self) -> "Quaternion":
        return quaternion_log(self)

    def pow(self, exponent: float) -> "Quaternion":
        return quaternion_pow(self, exponent)

    def slerp(self, other: "Quaternion", t: float) -> "Quaternion":
        """Spherical linear interpolation to another quaternion."""
        from .interpolation import quaternion_slerp

        return quaternion_slerp(self, other, t)

    def nlerp(self, other: "Quaternion", t: float) -> "Quaternion":
        """Normalized linear interpolation to another quaternion (faster than slerp)."""
        from .interpolation import quaternion_nlerp

        return quaternion_nlerp(self, other, t)

    def rotation_angle(self) -> float:
        """Rotation angle in radians, 2 * acos(w)."""
        return 2.0 * safe_acos(self.w)

    def rotation_axis(self) -> np.ndarray:
        """
        Unit rotation axis.

        Returns the x axis [1, 0, 0] when the quaternion carries no rotation.
        """
        sin_half_sq = 1.0 - self.w * self.w
        if sin_half_sq <= 0.0:
            return np.array([1.0, 0.0, 0.0])
        sin_half = math.sqrt(sin_half_sq)
        return np.array([self.x / sin_half, self.y / sin_half, self.z / sin_half])

    def to_euler_angles(self) -> EulerAngles:
        """Heading/pitch/bank of this object-to-world quaternion."""
        from .conversions import euler_from_object_to_world_quaternion

        return euler_from_object_to_world_quaternion(self)

    def apply(self, vectors: VectorLike) -> np.ndarray:
        """
        Rotate vector(s) by this (unit) quaternion.

        Consistent with the row-vector matrix of
        ``Transform.from_world_to_object_quaternion(self)``.

        Args:
            vectors: Vector(s) to rotate (..., 3)

        Returns:
            Rotated vector(s) (..., 3)
        """
        v = to_numpy(vectors)
        if v.shape[-1] != 3:
            raise ValueError(f"Vectors must have shape (..., 3), got {v.shape}")
        qxyz = np.array([self.x, self.y, self.z])
        t = 2 * np.cross(qxyz, v)
        return v + self.w * t + np.cross(qxyz, t)

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def as_array(self) -> np.ndarray:
        """Return [w, x, y, z] as a float64 array."""
        return np.array([self.w, self.x, self.y, self.z], dtype=np.float64)

    def to_xyzw(self) -> np.ndarray:
        """Return [x, y, z, w] (SciPy/ROS ordering)."""
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float64)

    def to_scipy(self) -> ScipyRotation:
        """Return the equivalent ``scipy.spatial.transform.Rotation``."""
        return ScipyRotation.from_quat(self.to_xyzw())

    def copy(self) -> "Quaternion":
        return Quaternion(self.w, self.x, self.y, self.z)

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def __neg__(self) -> "Quaternion":
        return quaternion_negate(self)

    def __matmul__(self, other: "Quaternion") -> "Quaternion":
        """
        Compose rotations: self @ other.

        The result applies self first, then other (library product order).
        """
        return quaternion_cross(self, other)

    def __mul__(self, scalar: float) -> "Quaternion":
        if isinstance(scalar, Quaternion):
            return NotImplemented
        return quaternion_scalar_multiply(scalar, self)

    __rmul__ = __mul__


# =============================================================================
# Pure Functions
# =============================================================================


def quaternion_negate(a: Quaternion) -> Quaternion:
    """Negate all components. -q represents the same rotation as q."""
    return Quaternion(-a.w, -a.x, -a.y, -a.z)


def quaternion_conjugate(a: Quaternion) -> Quaternion:
    """Conjugate (w, -x, -y, -z). For unit quaternions, equals the inverse."""
    return Quaternion(a.w, -a.x, -a.y, -a.z)


def quaternion_norm(a: Quaternion) -> float:
    return math.sqrt(a.w * a.w + a.x * a.x + a.y * a.y + a.z * a.z)


def quaternion_normalize(a: Quaternion) -> Quaternion:
    """
    Return a unit-length copy of a.

    The zero quaternion maps to the identity instead of producing NaN.
    """
    norm = quaternion_norm(a)
    if norm == 0.0:
        logger.debug("Normalizing zero quaternion, falling back to identity")
        return Quaternion.identity()
    return Quaternion(a.w / norm, a.x / norm, a.y / norm, a.z / norm)


def quaternion_dot(a: Quaternion, b: Quaternion) -> float:
    return a.w * b.w + a.x * b.x + a.y * b.y + a.z * b.z


def _hamilton(p: Quaternion, q: Quaternion) -> Quaternion:
    """Textbook Hamilton product p * q."""
    return Quaternion(
        p.w * q.w - p.x * q.x - p.y * q.y - p.z * q.z,
        p.w * q.x + p.x * q.w + p.y * q.z - p.z * q.y,
        p.w * q.y - p.x * q.z + p.y * q.w + p.z * q.x,
        p.w * q.z + p.x * q.y - p.y * q.x + p.z * q.w,
    )


def quaternion_cross(
    *quaternions: Quaternion,
    order: Union[str, ProductOrder] = DEFAULT_PRODUCT_ORDER,
) -> Quaternion:
    """
    Multiply two or more quaternions, reducing left to right.

    NOTE: with the default ``ProductOrder.REVERSED`` this is NOT the textbook
    product: ``quaternion_cross(a, b)`` returns ``b * a``, i.e. the rotation
    that applies ``a`` first and ``b`` second.

    Args:
        *quaternions: Two or more quaternions
        order: "reversed" (library convention) or "hamilton"

    Returns:
        Product quaternion

    Raises:
        InvalidArgumentCountError: If fewer than two quaternions are given
    """
    if len(quaternions) < 2:
        raise InvalidArgumentCountError(
            f"quaternion_cross requires at least 2 quaternions, got {len(quaternions)}"
        )
    order = ProductOrder(order)
    if order == ProductOrder.HAMILTON:
        return reduce(_hamilton, quaternions)
    return reduce(lambda a, b: _hamilton(b, a), quaternions)


def quaternion_scalar_multiply(scalar: float, a: Quaternion) -> Quaternion:
    return Quaternion(scalar * a.w, scalar * a.x, scalar * a.y, scalar * a.z)


def quaternion_inverse(a: Quaternion) -> Quaternion:
    """
    Multiplicative inverse, conjugate / |a|^2.

    The zero quaternion maps to the identity.
    """
    norm_sq = quaternion_dot(a, a)
    if norm_sq == 0.0:
        logger.debug("Inverting zero quaternion, falling back to identity")
        return Quaternion.identity()
    return quaternion_scalar_multiply(1.0 / norm_sq, quaternion_conjugate(a))


def quaternion_log(a: Quaternion) -> Quaternion:
    """
    Logarithm in the library's scaled form.

    Returns (0, theta/2 * x, theta/2 * y, theta/2 * z) where theta is the
    rotation angle of a. Note the imaginary part is scaled by theta/2 directly
    rather than by theta/2 / sin(theta/2) as in the standard log map.
    """
    half_theta = a.rotation_angle() / 2
    return Quaternion(0.0, half_theta * a.x, half_theta * a.y, half_theta * a.z)


def quaternion_pow(a: Quaternion, exponent: float) -> Quaternion:
    """
    Raise a unit quaternion to a power (scale its rotation angle).

    Quaternions with |w| > 0.999 are returned unchanged (as a copy), since
    sin(alpha) is too small to divide by.

    Args:
        a: Unit quaternion
        exponent: Angle scale factor

    Returns:
        Quaternion rotating by exponent * angle(a) about the same axis
    """
    if abs(a.w) > POW_IDENTITY_THRESHOLD:
        return a.copy()

    alpha = safe_acos(a.w)
    new_alpha = alpha * exponent
    mult = math.sin(new_alpha) / math.sin(alpha)
    return Quaternion(math.cos(new_alpha), a.x * mult, a.y * mult, a.z * mult)


def angular_displacement(a: Quaternion, b: Quaternion) -> Quaternion:
    """
    Rotation taking orientation a to orientation b.

    Satisfies ``quaternion_cross(a, angular_displacement(a, b)) == b``.
    """
    return quaternion_cross(quaternion_conjugate(a), b)


def quaternion_from_euler_object_to_world(orientation: EulerAngles) -> Quaternion:
    """Object-to-world quaternion from heading/pitch/bank (half-angle products)."""
    sh, ch = math.sin(orientation.heading / 2), math.cos(orientation.heading / 2)
    sp, cp = math.sin(orientation.pitch / 2), math.cos(orientation.pitch / 2)
    sb, cb = math.sin(orientation.bank / 2), math.cos(orientation.bank / 2)

    return Quaternion(
        ch * cp * cb + sh * sp * sb,
        ch * sp * cb + sh * cp * sb,
        -ch * sp * sb + sh * cp * cb,
        -sh * sp * cb + ch * cp * sb,
    )


def quaternion_from_euler_world_to_object(orientation: EulerAngles) -> Quaternion:
    """World-to-object quaternion, the conjugate of the object-to-world one."""
    return quaternion_conjugate(quaternion_from_euler_object_to_world(orientation))
