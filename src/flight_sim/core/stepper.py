# MIT License (see LICENSE)
"""
Fixed sub-step motion stepper.

One outer tick is clamped to `max_dt` and split into `substeps` equal
sub-steps. Each sub-step:

    1. zero the force/torque accumulators
    2. accumulate controlled forces, gravity and drag (ForceIntegrator)
    3. integrate (analytically, or through a RigidBodyBackend)

Drag grows with |v|², so a single coarse step at high speed can overshoot
and reverse the velocity; the clamp plus sub-stepping keeps h small.
"""
from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from ..backend import RigidBodyBackend
from ..constants import SUBSTEPS, MAX_TICK_DT, MIN_ANGULAR_SPEED
from ..profiler import Profiler, section
from ..state import EntityStateStore
from .forces import ForceIntegrator
from .integrators import integrate_motion, integrate_rotation


@dataclass
class MotionStepper:
    """
    Attributes:
        substeps: Sub-steps per outer tick.
        max_dt: Upper bound on the outer tick length in seconds.
        angular_threshold: Minimum |ω| (rad/s) for orientation updates.
        profiler: Optional section timer.
        steps_taken: Total sub-steps executed so far.
    """
    substeps: int = SUBSTEPS
    max_dt: float = MAX_TICK_DT
    angular_threshold: float = MIN_ANGULAR_SPEED
    profiler: Profiler | None = None
    steps_taken: int = 0

    def __post_init__(self) -> None:
        if self.substeps < 1:
            raise ValueError(f"substeps must be >= 1, got {self.substeps}")
        if self.max_dt <= 0:
            raise ValueError(f"max_dt must be > 0, got {self.max_dt}")

    def clamp(self, dt: float) -> float:
        """Outer tick length actually simulated for a requested dt."""
        return min(max(float(dt), 0.0), self.max_dt)

    def step(
        self,
        store: EntityStateStore,
        forces: ForceIntegrator,
        dt: float,
        backend: RigidBodyBackend | None = None,
    ) -> float:
        """
        Advance the store by one outer tick.

        Args:
            store: Entity state (modified in place).
            forces: Force generator invoked every sub-step.
            dt: Requested tick length; clamped to max_dt.
            backend: Optional rigid-body backend for the linear update.

        Returns:
            Simulated time advanced (the clamped dt).
        """
        dt = self.clamp(dt)
        if dt <= 0:
            return 0.0
        h = dt / self.substeps
        prof = self.profiler

        for _ in range(self.substeps):
            with section(prof, "forces"):
                store.clear_forces()
                forces.accumulate(store)
            if backend is None:
                with section(prof, "integrate"):
                    integrate_motion(store, h)
            else:
                with section(prof, "backend"):
                    self._backend_substep(store, backend, h)
            integrate_rotation(store, h, self.angular_threshold)
            self.steps_taken += 1
        return dt

    @staticmethod
    def _backend_substep(store: EntityStateStore, backend: RigidBodyBackend, h: float) -> None:
        """
        Hand accumulated forces to the backend, step it, read velocities back.

        Positions advance with the mean of the pre- and post-step velocity,
        which matches the Verlet update when the backend applies F/m exactly.
        """
        n = len(store)
        for i in range(n):
            backend.add_force(i, store.forces[i])
        backend.step(h)

        v_old = store.velocities.astype(np.float64)
        v_new = np.array([backend.get_linear_velocity(i) for i in range(n)], dtype=np.float64).reshape(n, 3)
        store.positions[:] += 0.5 * (v_old + v_new) * h
        store.accelerations[:] = (v_new - v_old) / h
        store.velocities[:] = v_new
