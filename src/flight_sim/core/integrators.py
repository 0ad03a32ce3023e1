# MIT License (see LICENSE)
"""
Numerical integrators for the real-time entity store.

Each sub-step advances every entity with constant-acceleration velocity
Verlet:
    a  = F * inv_m
    x += v*h + 0.5*a*h²
    v += a*h

Rotation uses a simplified, non-tensor model: the torque is scaled by the
inverse mass to get an angular acceleration, and the orientation is
advanced by composing a body-frame delta rotation

    q ← normalize(q ⊗ quat(axis = ω/|ω|, angle = |ω|*h))

only when |ω| exceeds a small threshold, so near-zero spin never produces
an ill-defined axis.

Reference:
    Velocity Verlet: https://en.wikipedia.org/wiki/Verlet_integration#Velocity_Verlet
"""
from __future__ import annotations

import numpy as np

from ..constants import MIN_ANGULAR_SPEED
from ..state import EntityStateStore


def quat_mul_many(q: np.ndarray, p: np.ndarray) -> np.ndarray:
    """Row-wise Hamilton product for arrays of shape (N, 4)."""
    w1, x1, y1, z1 = q[:, 0], q[:, 1], q[:, 2], q[:, 3]
    w2, x2, y2, z2 = p[:, 0], p[:, 1], p[:, 2], p[:, 3]
    return np.stack([
        w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
        w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
        w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
    ], axis=1)


def integrate_motion(store: EntityStateStore, h: float) -> None:
    """
    Advance linear state of every entity by h using velocity Verlet.

    Forces are read from store.forces and held constant over h. The
    resulting acceleration is written to store.accelerations.
    """
    if len(store) == 0:
        return
    a = store.forces.astype(np.float64) * store.inverse_masses[:, None]
    v = store.velocities.astype(np.float64)
    store.positions[:] += v * h + 0.5 * a * h * h
    store.velocities[:] = v + a * h
    store.accelerations[:] = a


def integrate_rotation(store: EntityStateStore, h: float, threshold: float = MIN_ANGULAR_SPEED) -> None:
    """
    Advance angular velocity and orientation of every entity by h.

    Entities spinning slower than `threshold` (rad/s) keep their
    orientation; the rest are rotated and re-normalized to unit length.
    """
    if len(store) == 0:
        return
    alpha = store.torques.astype(np.float64) * store.inverse_masses[:, None]
    w = store.angular_velocities.astype(np.float64) + alpha * h
    store.angular_velocities[:] = w

    speed = np.sqrt(np.einsum("ij,ij->i", w, w))
    spinning = speed > threshold
    if not spinning.any():
        return

    s = speed[spinning]
    axis = w[spinning] / s[:, None]
    half = 0.5 * s * h
    dq = np.column_stack([np.cos(half), axis * np.sin(half)[:, None]])
    q = quat_mul_many(store.orientations[spinning].astype(np.float64), dq)
    q /= np.linalg.norm(q, axis=1)[:, None]
    store.orientations[spinning] = q

