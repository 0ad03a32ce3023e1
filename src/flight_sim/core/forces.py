# MIT License (see LICENSE)
"""
Force generators for the real-time flight simulation.

All generators operate on an EntityStateStore in place. There are two
accumulators per entity:

- control_forces / control_torques: controlled forces (thrust), applied
  during the outer tick and cleared by the driving loop once the tick has
  integrated them.
- forces / torques: the per-sub-step accumulator the motion integrator
  reads. It is zeroed before every sub-step and refilled by
  ForceIntegrator.accumulate(): controlled forces first, then gravity and
  atmospheric drag.

Thrust is a continuous force, so it composes with gravity and drag in the
same accumulator before a single integration pass.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

import numpy as np

from ..atmosphere import AtmosphereModel
from ..constants import G0, SURFACE_GRAVITY, DRAG_CEILING, MIN_DRAG_SPEED
from ..state import EntityStateStore
from ..util import f64, quat_rotate

# Local thrust axis before rotation by the entity's orientation.
FORWARD_AXIS = np.array([0.0, 0.0, 1.0], dtype=np.float64)


def apply_thrust(
    store: EntityStateStore,
    index: int,
    throttle: float,
    dt: float,
    feed: Callable[[float], float] | None = None,
) -> float:
    """
    Apply engine thrust to one entity and burn the matching propellant.

    Implements:
        mdot = thrust / (isp * g0) * throttle
        F    = forward * thrust * throttle
        m'   = max(m - mdot * dt, dry_mass)
        fuel = max(fuel - (m - m'), 0), and 0 once m' reaches dry_mass

    An engine with no fuel of its own burns from `feed` instead: the feed is
    asked for mdot * dt and thrust is scaled by the fraction it delivers.
    The engine's mass is unchanged; the feed debits the tank it drew from.

    Args:
        store: Entity state store (modified in place).
        index: Dense index of the entity.
        throttle: Requested throttle, clamped to [0, 1].
        dt: Burn duration in seconds.
        feed: Callable taking a requested propellant mass and returning the
            mass delivered, e.g. ResourceFlowSystem.feed_for(identity).

    Returns:
        Propellant mass actually burned (kg). 0 when the call was a no-op:
        no engine, thrust ≤ 0, throttle ≤ 0, or no fuel and nothing fed.
    """
    throttle = min(max(float(throttle), 0.0), 1.0)
    if not store.has_engine[index]:
        return 0.0
    thrust = float(store.thrusts[index])
    if thrust <= 0 or throttle <= 0:
        return 0.0
    mdot = thrust / (store.isps[index] * G0) * throttle
    direction = quat_rotate(store.orientations[index], FORWARD_AXIS)

    if store.fuels[index] <= 0:
        requested = mdot * dt
        if feed is None or requested <= 0:
            return 0.0
        delivered = feed(requested)
        if delivered > 0:
            store.control_forces[index] += direction * (thrust * throttle * min(delivered / requested, 1.0))
        return delivered

    store.control_forces[index] += direction * (thrust * throttle)
    mass = float(store.masses[index])
    dry = float(store.dry_masses[index])
    new_mass = max(mass - mdot * dt, dry)
    burned = mass - new_mass
    store.set_mass(index, new_mass)
    # reaching dry mass exhausts the tank regardless of rounding in fuel
    store.fuels[index] = 0.0 if new_mass <= dry else max(0.0, float(store.fuels[index]) - burned)
    return burned


def apply_gravity(store: EntityStateStore, g: np.ndarray) -> None:
    """
    Apply a uniform gravitational field: F += m * g for every entity.

    Central-body gravity for free flight is the orbital propagator's job;
    this is the near-ground local field.
    """
    store.forces[:] += store.masses[:, None] * g


def apply_atmospheric_drag(
    store: EntityStateStore,
    atmosphere: AtmosphereModel,
    ceiling: float = DRAG_CEILING,
    min_speed: float = MIN_DRAG_SPEED,
) -> None:
    """
    Apply quadratic aerodynamic drag opposite to each entity's velocity.

    Implements F = -0.5 * rho(h) * Cd * A * |v|² * v̂, with h the local-up (Y)
    coordinate. Entities above `ceiling` or slower than `min_speed` are
    skipped; the speed floor keeps v̂ well defined.
    """
    if len(store) == 0:
        return
    v = store.velocities.astype(np.float64)
    speed = np.sqrt(np.einsum("ij,ij->i", v, v))
    altitude = store.positions[:, 1].astype(np.float64)
    mask = (altitude <= ceiling) & (speed > min_speed)
    if not mask.any():
        return

    rho = atmosphere.density(altitude[mask])
    s = speed[mask]
    mag = 0.5 * rho * store.drag_coefficients[mask] * store.cross_sections[mask] * s * s
    store.forces[mask] -= v[mask] / s[:, None] * mag[:, None]


@dataclass
class ForceIntegrator:
    """
    Per-sub-step force accumulation for all entities.

    Attributes:
        gravity: Uniform field vector in m/s².
        atmosphere: Density model used by the drag pass.
        drag_ceiling: Altitude above which drag is skipped.
        min_drag_speed: Speed below which drag is skipped.
        enable_drag: Toggle for the drag pass.
    """
    gravity: tuple[float, float, float] = SURFACE_GRAVITY
    atmosphere: AtmosphereModel = field(default_factory=AtmosphereModel)
    drag_ceiling: float = DRAG_CEILING
    min_drag_speed: float = MIN_DRAG_SPEED
    enable_drag: bool = True

    def __post_init__(self) -> None:
        self._g = f64(self.gravity)

    def apply_controls(self, store: EntityStateStore, dt: float, resources=None) -> float:
        """
        Apply thrust for every engine at its stored throttle.

        With a ResourceFlowSystem, engines out of their own fuel are fed
        from the tanks of their part.

        Returns the total propellant burned this call (kg).
        """
        burned = 0.0
        active = np.flatnonzero(store.has_engine & (store.throttles > 0))
        for i in active:
            i = int(i)
            feed = None if resources is None else resources.feed_for(store.identity_of(i))
            burned += apply_thrust(store, i, float(store.throttles[i]), dt, feed)
        return burned

    def accumulate(self, store: EntityStateStore) -> None:
        """
        Refill the sub-step accumulators: controlled forces, gravity, drag.

        The caller zeroes store.forces/torques first.
        """
        store.forces[:] += store.control_forces
        store.torques[:] += store.control_torques
        apply_gravity(store, self._g)
        if self.enable_drag:
            apply_atmospheric_drag(store, self.atmosphere, self.drag_ceiling, self.min_drag_speed)
