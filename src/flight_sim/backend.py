# MIT License (see LICENSE)
"""
Rigid-body backend boundary.

A native rigid-body/collision engine can stand in for the analytic linear
integrator. The core only needs three capabilities from it:

    add_force(index, force)        accumulate a world-space force
    step(dt)                       advance and resolve collisions
    get_linear_velocity(handle)    read back a post-step velocity

Handles are dense store indices. They are only used within a single
sub-step, during which the store is never compacted.

AnalyticBackend implements the same boundary in pure Python over the store
itself, for headless and test builds.
"""
from __future__ import annotations
from typing import Protocol, runtime_checkable

import numpy as np

from .state import EntityStateStore


@runtime_checkable
class RigidBodyBackend(Protocol):
    """Capability set the motion stepper drives when a backend is configured."""

    def add_force(self, index: int, force: np.ndarray) -> None:
        ...

    def step(self, dt: float) -> None:
        ...

    def get_linear_velocity(self, handle: int) -> np.ndarray:
        ...


class AnalyticBackend:
    """
    Collision-free backend: v' = v + (ΣF) * inv_m * dt per entity.

    Reads masses and pre-step velocities from the store on each step();
    it never writes to the store. The stepper copies the velocities back.
    """

    def __init__(self, store: EntityStateStore) -> None:
        self.store = store
        self._pending: dict[int, np.ndarray] = {}
        self._velocities: np.ndarray = np.zeros((0, 3), dtype=np.float64)
        self.steps = 0

    def add_force(self, index: int, force: np.ndarray) -> None:
        f = np.asarray(force, dtype=np.float64)
        if index in self._pending:
            self._pending[index] = self._pending[index] + f
        else:
            self._pending[index] = f.copy()

    def step(self, dt: float) -> None:
        n = len(self.store)
        acc = np.zeros((n, 3), dtype=np.float64)
        for i, f in self._pending.items():
            if 0 <= i < n:
                acc[i] = f * self.store.inverse_masses[i]
        self._velocities = self.store.velocities.astype(np.float64) + acc * dt
        self._pending.clear()
        self.steps += 1

    def get_linear_velocity(self, handle: int) -> np.ndarray:
        if 0 <= handle < len(self._velocities):
            return self._velocities[handle].copy()
        return np.zeros(3, dtype=np.float64)
