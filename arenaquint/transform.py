"""Vector and 4x4 transform helpers using the row-vector convention (v @ M)."""
from __future__ import annotations

import math

import numpy as np


def _const(*values: float) -> np.ndarray:
    arr = np.array(values, dtype=float)
    arr.setflags(write=False)
    return arr


X_AXIS = _const(1.0, 0.0, 0.0)
Y_AXIS = _const(0.0, 1.0, 0.0)
Z_AXIS = _const(0.0, 0.0, 1.0)
ZERO_VECTOR = _const(0.0, 0.0, 0.0)
TO_PLAYER = _const(0.70710678, 0.70710678, 0.0)
TO_RIGHTSIDE = _const(0.70710678, -0.70710678, 0.0)

SQRT_3 = 1.7320508075688772935274463415059
INVSQRT_3 = 0.57735026918962576450914878050196
SQRT_2 = 1.4142135623730950488016887242097
INVSQRT_2 = 0.70710678118654752440084436210485


def vector(x: float, y: float, z: float) -> np.ndarray:
    """Return a three-component float vector."""
    return np.array([x, y, z], dtype=float)


def normalize(v) -> np.ndarray:
    """Return ``v`` scaled to unit length; a zero vector stays zero."""
    arr = np.asarray(v, dtype=float)
    length = float(np.linalg.norm(arr))
    if length == 0.0:
        return np.zeros_like(arr)
    return arr / length


def get_translation(transform) -> np.ndarray:
    """Translation part of a transform (its bottom row)."""
    return np.array(np.asarray(transform, dtype=float)[3, :3])


def get_scale(transform) -> np.ndarray:
    """Per-axis scale of a transform: lengths of its upper 3x3 columns."""
    return np.linalg.norm(np.asarray(transform, dtype=float)[:3, :3], axis=0)


def get_rotation(transform, scale=None) -> np.ndarray:
    """Pure rotation part of a transform, with scale divided out."""
    matrix = np.asarray(transform, dtype=float)
    if scale is None:
        scale = get_scale(matrix)
    result = np.eye(4)
    result[:3, :3] = matrix[:3, :3] / np.asarray(scale, dtype=float)
    return result


def rotation_axis(angle: float, axis: int) -> np.ndarray:
    """Rotation by ``angle`` radians about axis 0 (x), 1 (y) or 2 (z)."""
    if axis not in (0, 1, 2):
        raise ValueError(f"axis must be 0, 1 or 2, not {axis!r}")
    c, s = math.cos(angle), math.sin(angle)
    a, b = (axis + 1) % 3, (axis + 2) % 3
    result = np.eye(4)
    result[a, a] = c
    result[a, b] = s
    result[b, a] = -s
    result[b, b] = c
    return result


def orthographic(lower, upper, near: float, far: float) -> np.ndarray:
    """Orthographic projection mapping the box [lower, upper] to clip space.

    The x and y extents map to [-1, 1]; the last axis maps lower to ``near``
    and upper to ``far``.
    """
    lo = np.asarray(lower, dtype=float)
    hi = np.asarray(upper, dtype=float)
    size = hi - lo
    if np.any(size == 0):
        raise ValueError("orthographic volume must have non-zero extent")
    scale = 2.0 / size
    scale[-1] *= 0.5 * (far - near)
    offset = -(hi + lo) / 2.0 * scale
    offset[-1] += (far + near) / 2.0
    dim = lo.shape[0]
    result = np.eye(dim + 1)
    result[np.arange(dim), np.arange(dim)] = scale
    result[dim, :dim] = offset
    return result