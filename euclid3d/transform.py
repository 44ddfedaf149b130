"""
Transform class for 4x4 homogeneous transforms.

Layout and convention
---------------------
Sixteen scalars, row-major: the 4x3 rotation/scale/shear block ``m11..m34``
followed by the translation/homogeneous row ``tx, ty, tz, tw``::

    | m11 m12 m13 m14 |
    | m21 m22 m23 m24 |
    | m31 m32 m33 m34 |
    | tx  ty  tz  tw  |

Points are row vectors: ``p' = p . A . B`` applies A first, then B, and
``matrix4_multiply(A, B)`` is that combined transform.

Elementary ``set_*`` mutators compose into the receiver by right
multiplication (``self = self . E``); call ``set_identity()`` first for a
fresh transform. Pure classmethod builders (``Transform.rotation_about``,
``Transform.perspective``, ...) return the elementary matrix itself.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import reduce
from typing import TYPE_CHECKING, Tuple, Union

import numpy as np
import torch

from ._core import (
    ArrayLike,
    Axis,
    Backend,
    EulerAngles,
    InvalidArgumentCountError,
    VectorLike,
    as_vector3,
    check_unit_axis,
    cross,
    normalize,
    sincos,
    to_backend,
    to_numpy,
)

if TYPE_CHECKING:
    from .quaternion import Quaternion

logger = logging.getLogger(__name__)


@dataclass(slots=True, eq=False)
class Transform:
    """
    Homogeneous 4x4 transform (rotation, scale, shear, reflection,
    translation, projection).

    Example:
        >>> tf = Transform().set_rotate_about("z", np.pi / 2).set_translation([1.0, 2.0, 3.0])
        >>> tf.apply([1.0, 0.0, 0.0])  # rotate, then translate
        array([1., 3., 3.])
        >>> gl_buffer = tf.to_array()  # float32, 16 values, row-major
    """

    m11: float = 1.0
    m12: float = 0.0
    m13: float = 0.0
    m14: float = 0.0
    m21: float = 0.0
    m22: float = 1.0
    m23: float = 0.0
    m24: float = 0.0
    m31: float = 0.0
    m32: float = 0.0
    m33: float = 1.0
    m34: float = 0.0
    tx: float = 0.0
    ty: float = 0.0
    tz: float = 0.0
    tw: float = 1.0

    def __post_init__(self) -> None:
        self._assign(self.values())

    def _assign(self, values) -> "Transform":
        (
            self.m11, self.m12, self.m13, self.m14,
            self.m21, self.m22, self.m23, self.m24,
            self.m31, self.m32, self.m33, self.m34,
            self.tx, self.ty, self.tz, self.tw,
        ) = (float(v) for v in values)
        return self

    # -------------------------------------------------------------------------
    # Factory Methods
    # -------------------------------------------------------------------------

    @classmethod
    def identity(cls) -> "Transform":
        """Create identity transform."""
        return cls()

    @classmethod
    def from_array(cls, values: Union[ArrayLike, Tuple[float, ...]]) -> "Transform":
        """Create from 16 row-major values (NumPy, PyTorch or sequence)."""
        flat = to_numpy(values).reshape(-1)
        if flat.shape != (16,):
            raise ValueError(f"Transform requires 16 values, got {flat.shape[0]}")
        return cls(*flat.tolist())

    @classmethod
    def from_matrix(cls, matrix: ArrayLike) -> "Transform":
        """
        Create from a (4, 4) matrix, or a (3, 3) rotation block with identity
        translation row.
        """
        arr = to_numpy(matrix)
        if arr.shape == (3, 3):
            full = np.eye(4)
            full[:3, :3] = arr
            arr = full
        if arr.shape != (4, 4):
            raise ValueError(f"Matrix must have shape (4, 4) or (3, 3), got {arr.shape}")
        return cls(*arr.reshape(-1).tolist())

    @classmethod
    def rotation_about(cls, axis: Union[str, Axis], theta: float) -> "Transform":
        """Rotation of theta radians about a cardinal axis ("x", "y" or "z")."""
        axis = Axis.parse(axis)
        s, c = sincos(theta)
        if axis == Axis.X:
            return cls(m22=c, m23=s, m32=-s, m33=c)
        if axis == Axis.Y:
            return cls(m11=c, m13=-s, m31=s, m33=c)
        return cls(m11=c, m12=s, m21=-s, m22=c)

    @classmethod
    def rotation_about_vector(cls, axis: VectorLike, theta: float) -> "Transform":
        """
        Rotation of theta radians about an arbitrary unit axis.

        Raises:
            NonUnitAxisError: If the axis is not unit length within 0.01
        """
        nx, ny, nz = check_unit_axis(axis).tolist()
        s, c = sincos(theta)
        a = 1 - c
        ax, ay, az = a * nx, a * ny, a * nz

        return cls(
            ax * nx + c, ax * ny + nz * s, ax * nz - ny * s, 0.0,
            ay * nx - nz * s, ay * ny + c, ay * nz + nx * s, 0.0,
            az * nx + ny * s, az * ny - nx * s, az * nz + c, 0.0,
            0.0, 0.0, 0.0, 1.0,
        )

    @classmethod
    def scaling(cls, factors: VectorLike) -> "Transform":
        """Scale along the cardinal axes by factors [kx, ky, kz]."""
        kx, ky, kz = as_vector3(factors, name="factors").tolist()
        return cls(m11=kx, m22=ky, m33=kz)

    @classmethod
    def scaling_along_axis(cls, axis: VectorLike, k: float) -> "Transform":
        """
        Scale by k along an arbitrary unit axis.

        Raises:
            NonUnitAxisError: If the axis is not unit length within 0.01
        """
        nx, ny, nz = check_unit_axis(axis).tolist()
        a = k - 1
        ax, ay, az = a * nx, a * ny, a * nz
        return cls(
            m11=ax * nx + 1, m12=ax * ny, m13=ax * nz,
            m21=ax * ny, m22=ay * ny + 1, m23=ay * nz,
            m31=ax * nz, m32=ay * nz, m33=az * nz + 1,
        )

    @classmethod
    def shearing(cls, axis: Union[str, Axis], s: float, t: float) -> "Transform":
        """
        Shear the other two coordinates by the named axis coordinate.

        Row-vector entries: "x" sets m12/m13, "y" sets m21/m23, "z" sets m31/m32.

        "x": y += s*x, z += t*x
        "y": x += s*y, z += t*y
        "z": x += s*z, y += t*z
        """
        axis = Axis.parse(axis)
        if axis == Axis.X:
            return cls(m12=s, m13=t)
        if axis == Axis.Y:
            return cls(m21=s, m23=t)
        return cls(m31=s, m32=t)

    @classmethod
    def reflection(cls, normal: VectorLike) -> "Transform":
        """
        Reflection about the plane through the origin with the given unit normal.

        Raises:
            NonUnitAxisError: If the normal is not unit length within 0.01
        """
        nx, ny, nz = check_unit_axis(normal, name="normal").tolist()
        ax, ay, az = -2 * nx, -2 * ny, -2 * nz
        return cls(
            m11=1 + ax * nx, m12=ax * ny, m13=ax * nz,
            m21=ax * ny, m22=1 + ay * ny, m23=ay * nz,
            m31=ax * nz, m32=ay * nz, m33=1 + az * nz,
        )

    @classmethod
    def translation(cls, offset: VectorLike) -> "Transform":
        """Translation by offset [x, y, z]."""
        x, y, z = as_vector3(offset, name="offset").tolist()
        return cls(tx=x, ty=y, tz=z)

    @classmethod
    def look_at(cls, eye: VectorLike, center: VectorLike, up: VectorLike) -> "Transform":
        """
        View matrix for a camera at eye looking at center.

        The camera basis is z = normalize(eye - center), x = normalize(up x z),
        y = normalize(z x x). The camera-to-world transform is composed as
        rotation-then-translation and inverted; inverting a product reverses
        its factors, so the result translates by -eye first and then rotates
        into the camera basis.
        """
        eye = as_vector3(eye, name="eye")
        center = as_vector3(center, name="center")
        up = normalize(as_vector3(up, name="up"))

        z = normalize(eye - center)
        x = normalize(cross(up, z))
        y = normalize(cross(z, x))
        if not np.any(x):
            logger.debug("look_at: up is parallel to the view direction, basis is degenerate")

        basis = np.eye(4)
        basis[:3, :3] = np.stack([x, y, z])
        camera_to_world = matrix4_multiply(cls.from_matrix(basis), cls.translation(eye))
        return matrix4_inverse(camera_to_world)

    @classmethod
    def orthographic(
        cls,
        left: float,
        right: float,
        bottom: float,
        top: float,
        near: float,
        far: float,
    ) -> "Transform":
        """
        Orthographic projection of the box [left, right] x [bottom, top] x
        [-near, -far] onto the clip cube [-1, 1]^3.
        """
        return cls(
            m11=2 / (right - left),
            m22=2 / (top - bottom),
            m33=-2 / (far - near),
            tx=-(right + left) / (right - left),
            ty=-(top + bottom) / (top - bottom),
            tz=-(far + near) / (far - near),
        )

    @classmethod
    def perspective(cls, fov: float, aspect: float, near: float, far: float) -> "Transform":
        """
        Perspective projection onto the clip cube [-1, 1]^3.

        Args:
            fov: Vertical field of view in radians
            aspect: Width / height
            near: Distance to the near plane (mapped to depth -1)
            far: Distance to the far plane (mapped to depth 1)
        """
        f = math.tan(math.pi / 2 - fov / 2)
        range_inv = 1 / (near - far)
        return cls(
            m11=f / aspect,
            m22=f,
            m33=(near + far) * range_inv,
            m34=-1.0,
            tz=2 * near * far * range_inv,
            tw=0.0,
        )

    @classmethod
    def from_euler_angles(cls, orientation: EulerAngles) -> "Transform":
        """Object-to-world rotation matrix from heading/pitch/bank."""
        from .conversions import matrix_from_euler_angles

        return matrix_from_euler_angles(orientation)

    @classmethod
    def from_object_to_world_quaternion(cls, q: "Quaternion") -> "Transform":
        """Rotation matrix from an object-to-world quaternion."""
        from .conversions import matrix_from_object_to_world_quaternion

        return matrix_from_object_to_world_quaternion(q)

    @classmethod
    def from_world_to_object_quaternion(cls, q: "Quaternion") -> "Transform":
        """Rotation matrix from a world-to-object quaternion."""
        from .conversions import matrix_from_world_to_object_quaternion

        return matrix_from_world_to_object_quaternion(q)

    # -------------------------------------------------------------------------
    # In-place Mutators
    # -------------------------------------------------------------------------

    def copy_from(self, other: "Transform") -> "Transform":
        """Overwrite all 16 values with those of other."""
        return self._assign(other.values())

    def set_identity(self) -> "Transform":
        return self.copy_from(Transform())

    def clear_translation(self) -> "Transform":
        """Zero tx, ty and tz."""
        self.tx = self.ty = self.tz = 0.0
        return self

    def multiply_(self, *others: "Transform") -> "Transform":
        """self = self . others[0] . others[1] ..."""
        return self.copy_from(matrix4_multiply(self, *others))

    def scalar_multiply_(self, scalar: float) -> "Transform":
        return self.copy_from(matrix4_scalar_multiply(scalar, self))

    def invert_(self) -> "Transform":
        """Invert in place. Singular matrices become their adjugate."""
        return self.copy_from(matrix4_inverse(self))

    def transpose_(self) -> "Transform":
        return self.copy_from(matrix4_transpose(self))

    def set_rotate_about(self, axis: Union[str, Axis], theta: float) -> "Transform":
        return self.multiply_(Transform.rotation_about(axis, theta))

    def set_rotate_about_vector(self, axis: VectorLike, theta: float) -> "Transform":
        return self.multiply_(Transform.rotation_about_vector(axis, theta))

    def set_scale(self, factors: VectorLike) -> "Transform":
        return self.multiply_(Transform.scaling(factors))

    def set_scale_along_axis(self, axis: VectorLike, k: float) -> "Transform":
        return self.multiply_(Transform.scaling_along_axis(axis, k))

    def set_shear(self, axis: Union[str, Axis], s: float, t: float) -> "Transform":
        return self.multiply_(Transform.shearing(axis, s, t))

    def set_reflection(self, normal: VectorLike) -> "Transform":
        return self.multiply_(Transform.reflection(normal))

    def set_translation(self, offset: VectorLike) -> "Transform":
        return self.multiply_(Transform.translation(offset))

    def set_look_at(self, eye: VectorLike, center: VectorLike, up: VectorLike) -> "Transform":
        return self.multiply_(Transform.look_at(eye, center, up))

    def set_ortho(
        self,
        left: float,
        right: float,
        bottom: float,
        top: float,
        near: float,
        far: float,
    ) -> "Transform":
        return self.multiply_(Transform.orthographic(left, right, bottom, top, near, far))

    def set_perspective(self, fov: float, aspect: float, near: float, far: float) -> "Transform":
        return self.multiply_(Transform.perspective(fov, aspect, near, far))

    def set_local_to_parent(
        self,
        position: VectorLike,
        orientation: Union[EulerAngles, "Transform"],
    ) -> "Transform":
        """
        Replace self with the local-to-parent transform of an object.

        Args:
            position: Object position in the parent frame
            orientation: Euler angles, or a Transform whose rotation block is
                the object-to-world rotation
        """
        if isinstance(orientation, EulerAngles):
            orientation = Transform.from_euler_angles(orientation)
        x, y, z = as_vector3(position, name="position").tolist()
        self.copy_from(orientation)
        self.tx, self.ty, self.tz = x, y, z
        return self

    def set_parent_to_local(
        self,
        position: VectorLike,
        orientation: Union[EulerAngles, "Transform"],
    ) -> "Transform":
        """
        Replace self with the parent-to-local transform of an object.

        The inverse of ``set_local_to_parent`` for the same Euler angles.

        Args:
            position: Object position in the parent frame
            orientation: Euler angles, or a Transform whose rotation block is
                the world-to-object rotation
        """
        if isinstance(orientation, EulerAngles):
            orientation = Transform.from_euler_angles(orientation).transposed()
        pos = as_vector3(position, name="position")
        self.copy_from(orientation)
        self.tx, self.ty, self.tz = (-(pos @ self.as_matrix()[:3, :3])).tolist()
        return self

    # -------------------------------------------------------------------------
    # Pure Operations
    # -------------------------------------------------------------------------

    def inverse(self) -> "Transform":
        return matrix4_inverse(self)

    def transposed(self) -> "Transform":
        return matrix4_transpose(self)

    def scalar_multiply(self, scalar: float) -> "Transform":
        return matrix4_scalar_multiply(scalar, self)

    def determinant(self) -> float:
        return matrix4_determinant(self)

    def to_euler_angles(self) -> EulerAngles:
        """Heading/pitch/bank of an object-to-world rotation block."""
        from .conversions import euler_from_matrix

        return euler_from_matrix(self)

    def apply(self, points: VectorLike) -> np.ndarray:
        """
        Transform point(s) as row vectors with w=1, then divide by w.

        Args:
            points: Point(s) (..., 3)

        Returns:
            Transformed point(s) (..., 3)
        """
        p = to_numpy(points)
        if p.shape[-1] != 3:
            raise ValueError(f"Points must have shape (..., 3), got {p.shape}")
        ones = np.ones(p.shape[:-1] + (1,))
        homogeneous = self.apply_homogeneous(np.concatenate([p, ones], axis=-1))
        return homogeneous[..., :3] / homogeneous[..., 3:]

    def apply_homogeneous(self, points: VectorLike) -> np.ndarray:
        """
        Multiply homogeneous row vector(s) by this matrix, without division.

        Args:
            points: Homogeneous point(s) (..., 4)

        Returns:
            Transformed homogeneous point(s) (..., 4)
        """
        p = to_numpy(points)
        if p.shape[-1] != 4:
            raise ValueError(f"Homogeneous points must have shape (..., 4), got {p.shape}")
        return np.matmul(p, self.as_matrix())

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def values(self) -> Tuple[float, ...]:
        """The 16 values in row-major order (rotation block, then translation row)."""
        return (
            self.m11, self.m12, self.m13, self.m14,
            self.m21, self.m22, self.m23, self.m24,
            self.m31, self.m32, self.m33, self.m34,
            self.tx, self.ty, self.tz, self.tw,
        )

    def as_matrix(self) -> np.ndarray:
        """Return the (4, 4) float64 matrix."""
        return np.array(self.values(), dtype=np.float64).reshape(4, 4)

    def to_array(self, backend: Backend = "numpy", dtype=None, device=None) -> ArrayLike:
        """
        Flat row-major array of the 16 values for a graphics backend.

        Args:
            backend: "numpy" or "torch"
            dtype: Defaults to single precision
            device: PyTorch device (torch backend only)

        Returns:
            Array of shape (16,)
        """
        flat = np.array(self.values(), dtype=np.float64)
        if backend == "torch":
            return to_backend(flat, "torch", dtype=dtype or torch.float32, device=device)
        return to_backend(flat, backend, dtype=dtype or np.float32)

    def copy(self) -> "Transform":
        return Transform(*self.values())

    def __matmul__(self, other: "Transform") -> "Transform":
        """
        Compose transforms: self @ other.

        The result applies self first, then other (row-vector convention).
        """
        return matrix4_multiply(self, other)


# =============================================================================
# Pure Functions
# =============================================================================


def matrix4_multiply(*matrices: Transform) -> Transform:
    """
    Multiply two or more transforms, reducing left to right.

    Row-vector convention: the result applies matrices[0] first.

    Raises:
        InvalidArgumentCountError: If fewer than two transforms are given
    """
    if len(matrices) < 2:
        raise InvalidArgumentCountError(
            f"matrix4_multiply requires at least 2 transforms, got {len(matrices)}"
        )
    product = reduce(np.matmul, (m.as_matrix() for m in matrices))
    return Transform.from_matrix(product)


def matrix4_scalar_multiply(scalar: float, m: Transform) -> Transform:
    return Transform(*(v * scalar for v in m.values()))


def matrix4_transpose(m: Transform) -> Transform:
    return Transform.from_matrix(m.as_matrix().T)


def _adjugate(m: Transform) -> np.ndarray:
    """Adjugate (transposed cofactor matrix) by direct cofactor expansion."""
    (
        a00, a01, a02, a03,
        a10, a11, a12, a13,
        a20, a21, a22, a23,
        a30, a31, a32, a33,
    ) = m.values()

    # 2x2 minors of the top and bottom row pairs
    b00 = a00 * a11 - a01 * a10
    b01 = a00 * a12 - a02 * a10
    b02 = a00 * a13 - a03 * a10
    b03 = a01 * a12 - a02 * a11
    b04 = a01 * a13 - a03 * a11
    b05 = a02 * a13 - a03 * a12
    b06 = a20 * a31 - a21 * a30
    b07 = a20 * a32 - a22 * a30
    b08 = a20 * a33 - a23 * a30
    b09 = a21 * a32 - a22 * a31
    b10 = a21 * a33 - a23 * a31
    b11 = a22 * a33 - a23 * a32

    return np.array([
        [a11 * b11 - a12 * b10 + a13 * b09,
         a02 * b10 - a01 * b11 - a03 * b09,
         a31 * b05 - a32 * b04 + a33 * b03,
         a22 * b04 - a21 * b05 - a23 * b03],
        [a12 * b08 - a10 * b11 - a13 * b07,
         a00 * b11 - a02 * b08 + a03 * b07,
         a32 * b02 - a30 * b05 - a33 * b01,
         a20 * b05 - a22 * b02 + a23 * b01],
        [a10 * b10 - a11 * b08 + a13 * b06,
         a01 * b08 - a00 * b10 - a03 * b06,
         a30 * b04 - a31 * b02 + a33 * b00,
         a21 * b02 - a20 * b04 - a23 * b00],
        [a11 * b07 - a10 * b09 - a12 * b06,
         a00 * b09 - a01 * b07 + a02 * b06,
         a31 * b01 - a30 * b03 - a32 * b00,
         a20 * b03 - a21 * b01 + a22 * b00],
    ])


def _first_row_determinant(m: Transform, adjugate: np.ndarray) -> float:
    # det = sum_j a0j * C0j, and column 0 of the adjugate holds the C0j
    return float(np.dot(m.as_matrix()[0], adjugate[:, 0]))


def matrix4_determinant(m: Transform) -> float:
    """Determinant by first-row cofactor expansion."""
    return _first_row_determinant(m, _adjugate(m))


def matrix4_inverse(m: Transform) -> Transform:
    """
    Inverse by cofactor expansion.

    A singular matrix (determinant exactly zero) yields its unscaled adjugate
    instead of raising; check ``determinant()`` when a true inverse is required.
    """
    adjugate = _adjugate(m)
    det = _first_row_determinant(m, adjugate)
    if det == 0.0:
        logger.debug("Inverting singular transform, returning the unscaled adjugate")
        return Transform.from_matrix(adjugate)
    return Transform.from_matrix(adjugate / det)
