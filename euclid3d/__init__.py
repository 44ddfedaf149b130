"""
3D rotation and transform math: quaternions, 4x4 homogeneous transforms and
Euler angles, with conversions between them.

API Styles
----------
1. Direct Functions (pure, return new values):
   - Examples: quaternion_cross(), quaternion_slerp(), matrix4_multiply(),
     matrix4_inverse(), quaternion_from_rotation_matrix()

2. Class-based API:
   - Quaternion: (w, x, y, z) value type
   - Transform: 4x4 row-major value type
   - Classmethod factories return new values; set_* methods and methods with
     a trailing underscore mutate the receiver and return it

Usage Examples
--------------
Build a model-view-projection matrix:
    mvp = (
        Transform()
        .set_rotate_about("y", heading)
        .set_translation(position)
        .set_look_at(eye, center, up)
        .set_perspective(fov, aspect, near, far)
    )
    buffer = mvp.to_array()  # float32, 16 values

Interpolate orientations:
    q = quaternion_slerp(q0, q1, t)
    tf = Transform.from_world_to_object_quaternion(q)

Conventions
-----------
- Points are row vectors: p' = p . A . B applies A first.
- quaternion_cross(a, b) = b * a (Hamilton): a applies first. See ProductOrder.
- Euler angles: heading (y), pitch (x), bank (z), radians.
"""

# Types, constants and errors
from ._core import (
    ArrayLike,
    Axis,
    AXIS_UNIT_TOLERANCE,
    Backend,
    DEFAULT_PRODUCT_ORDER,
    EPS,
    EulerAngles,
    GIMBAL_LOCK_THRESHOLD,
    InvalidArgumentCountError,
    NonUnitAxisError,
    POW_IDENTITY_THRESHOLD,
    ProductOrder,
    SLERP_PARALLEL_THRESHOLD,
    safe_acos,
)

# Quaternion
from .quaternion import (
    Quaternion,
    angular_displacement,
    quaternion_conjugate,
    quaternion_cross,
    quaternion_dot,
    quaternion_from_euler_object_to_world,
    quaternion_from_euler_world_to_object,
    quaternion_inverse,
    quaternion_log,
    quaternion_negate,
    quaternion_norm,
    quaternion_normalize,
    quaternion_pow,
    quaternion_scalar_multiply,
)

# Transform
from .transform import (
    Transform,
    matrix4_determinant,
    matrix4_inverse,
    matrix4_multiply,
    matrix4_scalar_multiply,
    matrix4_transpose,
)

# Conversions
from .conversions import (
    euler_from_matrix,
    euler_from_object_to_world_quaternion,
    euler_from_world_to_object_quaternion,
    matrix_from_euler_angles,
    matrix_from_object_to_world_quaternion,
    matrix_from_world_to_object_quaternion,
    quaternion_from_rotation_matrix,
)

# Interpolation
from .interpolation import quaternion_nlerp, quaternion_slerp

__all__ = [
    # Types
    "ArrayLike",
    "Axis",
    "Backend",
    "EulerAngles",
    "ProductOrder",
    # Constants
    "AXIS_UNIT_TOLERANCE",
    "DEFAULT_PRODUCT_ORDER",
    "EPS",
    "GIMBAL_LOCK_THRESHOLD",
    "POW_IDENTITY_THRESHOLD",
    "SLERP_PARALLEL_THRESHOLD",
    # Errors
    "InvalidArgumentCountError",
    "NonUnitAxisError",
    # Classes
    "Quaternion",
    "Transform",
    # Quaternion
    "angular_displacement",
    "quaternion_conjugate",
    "quaternion_cross",
    "quaternion_dot",
    "quaternion_from_euler_object_to_world",
    "quaternion_from_euler_world_to_object",
    "quaternion_inverse",
    "quaternion_log",
    "quaternion_negate",
    "quaternion_norm",
    "quaternion_normalize",
    "quaternion_pow",
    "quaternion_scalar_multiply",
    # Transform
    "matrix4_determinant",
    "matrix4_inverse",
    "matrix4_multiply",
    "matrix4_scalar_multiply",
    "matrix4_transpose",
    # Conversions
    "euler_from_matrix",
    "euler_from_object_to_world_quaternion",
    "euler_from_world_to_object_quaternion",
    "matrix_from_euler_angles",
    "matrix_from_object_to_world_quaternion",
    "matrix_from_world_to_object_quaternion",
    "quaternion_from_rotation_matrix",
    # Interpolation
    "quaternion_slerp",
    "quaternion_nlerp",
    # Utilities
    "safe_acos",
]

__version__ = "0.1.0"
