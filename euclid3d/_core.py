"""
Core utilities: types, constants, errors, and small vector helpers.

This module provides the foundational building blocks used throughout euclid3d.
All internal modules depend on this module.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Sequence, Tuple, Union

import numpy as np
import torch


# =============================================================================
# Type Definitions
# =============================================================================

ArrayLike = Union[np.ndarray, torch.Tensor]
VectorLike = Union[ArrayLike, Sequence[float]]
Backend = Literal["numpy", "torch"]


# =============================================================================
# Numerical Constants
# =============================================================================

EPS = 1e-8  # General epsilon for division safety
AXIS_UNIT_TOLERANCE = 0.01  # Allowed | |axis| - 1 | for axis-based constructors
POW_IDENTITY_THRESHOLD = 0.999  # |w| above this: pow returns the input
SLERP_PARALLEL_THRESHOLD = 0.9999  # cos(omega) above this: slerp falls back to lerp
GIMBAL_LOCK_THRESHOLD = 0.9999  # |sin(pitch)| above this: bank is folded into heading


# =============================================================================
# Enums
# =============================================================================


class Axis(str, Enum):
    """Cardinal axis names accepted by the elementary matrix builders."""

    X = "x"
    Y = "y"
    Z = "z"

    @classmethod
    def parse(cls, axis: Union[str, "Axis"]) -> "Axis":
        """Parse an axis name, case-insensitive."""
        if isinstance(axis, cls):
            return axis
        try:
            return cls(str(axis).lower())
        except ValueError:
            raise ValueError(f"Unknown axis {axis!r}, expected one of 'x', 'y', 'z'") from None


class ProductOrder(str, Enum):
    """
    Operand order of the quaternion product.

    REVERSED is the library convention: ``quaternion_cross(a, b)`` evaluates the
    Hamilton product ``b * a``, so reading the operands left to right gives the
    order in which the rotations are applied (``a`` first, then ``b``). This
    matches the row-vector matrix convention of ``matrix4_multiply``.

    HAMILTON is the textbook ``a * b``.
    """

    REVERSED = "reversed"
    HAMILTON = "hamilton"


DEFAULT_PRODUCT_ORDER = ProductOrder.REVERSED


# =============================================================================
# Errors
# =============================================================================


class InvalidArgumentCountError(ValueError):
    """Raised when a variadic product receives fewer than two operands."""

    pass


class NonUnitAxisError(ValueError):
    """Raised when an axis or plane normal is not unit length within tolerance."""

    pass


# =============================================================================
# Euler Angles
# =============================================================================


@dataclass(frozen=True, slots=True)
class EulerAngles:
    """
    Heading/pitch/bank orientation in radians.

    Heading rotates about the vertical (y) axis, pitch about the lateral (x)
    axis and bank about the forward (z) axis. Used only as an input/output
    format by the conversion routines.
    """

    heading: float = 0.0
    pitch: float = 0.0
    bank: float = 0.0

    @classmethod
    def from_array(cls, angles: VectorLike, degrees: bool = False) -> "EulerAngles":
        """Create from a [heading, pitch, bank] array."""
        h, p, b = (float(a) for a in as_vector3(angles, name="angles"))
        if degrees:
            h, p, b = math.radians(h), math.radians(p), math.radians(b)
        return cls(heading=h, pitch=p, bank=b)

    def as_array(self, degrees: bool = False) -> np.ndarray:
        """Return [heading, pitch, bank] as a float64 array."""
        angles = np.array([self.heading, self.pitch, self.bank], dtype=np.float64)
        return np.rad2deg(angles) if degrees else angles


# =============================================================================
# Backend Helpers
# =============================================================================


def to_numpy(x: Union[ArrayLike, Sequence[float]], dtype=np.float64) -> np.ndarray:
    """Convert NumPy arrays, PyTorch tensors and sequences to a NumPy array."""
    if isinstance(x, torch.Tensor):
        x = x.detach().cpu().numpy()
    return np.asarray(x, dtype=dtype)


def to_backend(
    x: np.ndarray,
    backend: Backend,
    dtype=None,
    device=None,
) -> ArrayLike:
    """Convert a NumPy array to the specified backend."""
    if backend == "torch":
        return torch.as_tensor(x, dtype=dtype, device=device)
    if backend != "numpy":
        raise ValueError(f"Unknown backend: {backend!r}")
    return np.asarray(x, dtype=dtype)


# =============================================================================
# Scalar and Vector Helpers
# =============================================================================


def safe_acos(x: float) -> float:
    """Arc cosine with the argument clamped to [-1, 1]."""
    if x <= -1.0:
        return math.pi
    if x >= 1.0:
        return 0.0
    return math.acos(x)


def as_vector3(v: VectorLike, name: str = "vector") -> np.ndarray:
    """Convert input to a float64 array of shape (3,)."""
    arr = to_numpy(v)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {arr.shape}")
    return arr


def normalize(v: np.ndarray, eps: float = EPS) -> np.ndarray:
    """Normalize a vector. Vectors shorter than eps are returned unscaled."""
    norm = np.linalg.norm(v)
    return v / max(norm, eps)


def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Cross product of two 3-vectors."""
    return np.cross(a, b)


def check_unit_axis(axis: VectorLike, name: str = "axis") -> np.ndarray:
    """
    Validate that an axis is unit length within AXIS_UNIT_TOLERANCE.

    Args:
        axis: 3-vector
        name: Name used in the error message

    Returns:
        The axis as a float64 array of shape (3,)

    Raises:
        NonUnitAxisError: If | |axis| - 1 | exceeds the tolerance
    """
    arr = as_vector3(axis, name=name)
    norm = float(np.linalg.norm(arr))
    if abs(norm - 1.0) > AXIS_UNIT_TOLERANCE:
        raise NonUnitAxisError(
            f"{name} must be a unit vector (tolerance {AXIS_UNIT_TOLERANCE}), got norm {norm:.6f}"
        )
    return arr


def sincos(theta: float) -> Tuple[float, float]:
    """Return (sin(theta), cos(theta))."""
    return math.sin(theta), math.cos(theta)
