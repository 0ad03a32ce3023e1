# MIT License (see LICENSE)
"""
Utility functions for 3D vector and quaternion math.

Vectors are numpy arrays of shape (3,). Quaternions are numpy arrays of
shape (4,) stored scalar-first as (w, x, y, z), following the Hamilton
convention: composing ``q ⊗ p`` applies ``p`` first, then ``q``.
"""
from __future__ import annotations

import numpy as np

IDENTITY_QUAT = (1.0, 0.0, 0.0, 0.0)


def f64(x) -> np.ndarray:
    """Convert any array-like to a float64 numpy array."""
    return np.array(x, dtype=np.float64)


def norm(v: np.ndarray) -> float:
    """Magnitude (length) of a vector, computed in double precision."""
    v = np.asarray(v, dtype=np.float64)
    return float(np.sqrt(np.dot(v, v)))


def unit(v: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    """
    Return a unit vector in the same direction as v.

    Returns a zero vector if |v| < eps to avoid division by zero.
    """
    n = norm(v)
    if n < eps:
        return np.zeros_like(np.asarray(v, dtype=np.float64))
    return np.asarray(v, dtype=np.float64) / n


def quat_mul(q: np.ndarray, p: np.ndarray) -> np.ndarray:
    """Hamilton product q ⊗ p."""
    w1, x1, y1, z1 = q
    w2, x2, y2, z2 = p
    return np.array([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
    ], dtype=np.float64)


def quat_normalize(q: np.ndarray) -> np.ndarray:
    """Return q scaled to unit length. A zero quaternion maps to identity."""
    n = norm(q)
    if n < 1e-12:
        return f64(IDENTITY_QUAT)
    return np.asarray(q, dtype=np.float64) / n


def quat_from_axis_angle(axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Rotation of `angle` radians about `axis`.

    The axis is normalized here; a degenerate axis yields the identity.
    """
    a = unit(axis)
    if not a.any():
        return f64(IDENTITY_QUAT)
    half = 0.5 * angle
    s = np.sin(half)
    return np.array([np.cos(half), a[0] * s, a[1] * s, a[2] * s], dtype=np.float64)


def quat_rotate(q: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Rotate vector v by unit quaternion q (computes q v q*).

    Uses the expanded form v' = v + 2w(u × v) + 2 u × (u × v), with u the
    vector part of q, which avoids building the full rotation matrix.
    """
    q = np.asarray(q, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    w = q[0]
    u = q[1:]
    t = 2.0 * np.cross(u, v)
    return v + w * t + np.cross(u, t)

