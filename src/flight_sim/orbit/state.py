# MIT License (see LICENSE)
"""
Value types for orbital planning.

These live outside the real-time store: they are created per planning query
and never touched by the tick loop. Everything is float64.

Maneuver delta-v vectors are expressed in the local orbital frame of the
state they are applied to, with components

    (prograde, normal, radial)

prograde along v, normal along h = r × v, radial = prograde × normal
(pointing away from the central body for a circular orbit).
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace

import numpy as np

from ..constants import EARTH_MU
from ..util import f64, norm


@dataclass
class OrbitalState:
    """
    Cartesian state about a central body.

    Attributes:
        position: Position vector in m.
        velocity: Velocity vector in m/s.
        time: Epoch in s.
        mu: Gravitational parameter of the central body in m³/s².
    """
    position: np.ndarray
    velocity: np.ndarray
    time: float = 0.0
    mu: float = EARTH_MU

    def __post_init__(self) -> None:
        self.position = f64(self.position)
        self.velocity = f64(self.velocity)

    @property
    def radius(self) -> float:
        return norm(self.position)

    @property
    def speed(self) -> float:
        return norm(self.velocity)

    @property
    def angular_momentum(self) -> np.ndarray:
        """Specific angular momentum h = r × v (m²/s)."""
        return np.cross(self.position, self.velocity)

    @property
    def specific_energy(self) -> float:
        """ε = v²/2 − μ/r (J/kg). Conserved by exact two-body motion."""
        r = self.radius
        if r < 1e-6:
            return 0.5 * self.speed ** 2
        return 0.5 * self.speed ** 2 - self.mu / r

    def copy(self) -> OrbitalState:
        return replace(self, position=self.position.copy(), velocity=self.velocity.copy())


@dataclass(frozen=True)
class OrbitalElements:
    """
    Classical Keplerian elements (angles in radians).

    Attributes:
        semi_major_axis: a in m (negative for hyperbolic orbits).
        eccentricity: e.
        inclination: i in [0, π].
        raan: Longitude of the ascending node Ω in [0, 2π).
        arg_periapsis: Argument of periapsis ω in [0, 2π).
        true_anomaly: ν in [0, 2π).
        mu: Gravitational parameter in m³/s².
    """
    semi_major_axis: float
    eccentricity: float
    inclination: float = 0.0
    raan: float = 0.0
    arg_periapsis: float = 0.0
    true_anomaly: float = 0.0
    mu: float = EARTH_MU

    @property
    def periapsis(self) -> float:
        return self.semi_major_axis * (1.0 - self.eccentricity)

    @property
    def apoapsis(self) -> float:
        """Apoapsis radius; infinite for open orbits."""
        if self.eccentricity >= 1.0:
            return float("inf")
        return self.semi_major_axis * (1.0 + self.eccentricity)


@dataclass
class ManeuverNode:
    """
    A planned impulsive burn.

    Attributes:
        time: Execution epoch in s.
        delta_v: (prograde, normal, radial) velocity change in m/s.
        pre_state: State just before the burn, when known.
        post_state: State just after the burn, when known.
    """
    time: float
    delta_v: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    pre_state: OrbitalState | None = None
    post_state: OrbitalState | None = None

    def __post_init__(self) -> None:
        self.delta_v = f64(self.delta_v)

    @property
    def delta_v_magnitude(self) -> float:
        return norm(self.delta_v)
