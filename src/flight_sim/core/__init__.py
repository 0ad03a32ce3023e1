# MIT License (see LICENSE)
"""
Real-time physics components.

This subpackage provides:
    - Force generators: thrust, uniform gravity, atmospheric drag.
    - Integrators: velocity Verlet for translation, quaternion composition
      for rotation.
    - MotionStepper: the clamped, fixed sub-step tick driver.
    - Invariant checks for tests and telemetry.

Typical usage:
    from flight_sim.core import ForceIntegrator, MotionStepper

    stepper = MotionStepper()
    stepper.step(store, ForceIntegrator(), dt=1/120)
"""
from .forces import (
    ForceIntegrator,
    apply_thrust,
    apply_gravity,
    apply_atmospheric_drag,
)
from .integrators import integrate_motion, integrate_rotation
from .stepper import MotionStepper
from .invariants import total_mass, total_fuel, linear_momentum, kinetic_energy

__all__ = [
    # Forces
    "ForceIntegrator",
    "apply_thrust",
    "apply_gravity",
    "apply_atmospheric_drag",
    # Integrators
    "integrate_motion",
    "integrate_rotation",
    "MotionStepper",
    # Invariants
    "total_mass",
    "total_fuel",
    "linear_momentum",
    "kinetic_energy",
]
