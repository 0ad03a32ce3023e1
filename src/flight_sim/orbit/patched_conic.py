# MIT License (see LICENSE)
"""
Patched-conic trajectory solver.

The trajectory is propagated in fixed time slices. At the start of each
slice the dominant body is chosen as the smallest sphere of influence that
contains the position (falling back to the primary, bodies[0]), and the
state is propagated as a two-body problem about that body.

Within a slice, find_soi_transition() marches forward and, when the
dominant body changes between two samples, bisects on the boundary crossing
until the bracket is narrower than `tol`. The slice is cut at the crossing
so the next slice starts under the new body.

States are expressed in the primary's frame. Bodies are fixed in that frame
(no ephemerides).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field, replace

import numpy as np

from ..constants import (
    EARTH_MU, EARTH_RADIUS, EARTH_SOI,
    MOON_MU, MOON_RADIUS, MOON_DISTANCE, MOON_SOI,
)
from ..util import f64, norm
from .propagator import propagate_orbit
from .state import OrbitalState

logger = logging.getLogger(__name__)


@dataclass
class CelestialBody:
    """
    Attributes:
        name: Label.
        mu: Gravitational parameter in m³/s².
        radius: Physical radius in m.
        soi: Sphere-of-influence radius in m.
        position: Fixed position in the primary's frame.
    """
    name: str
    mu: float
    radius: float
    soi: float
    position: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))

    def __post_init__(self) -> None:
        self.position = f64(self.position)

    def contains(self, point: np.ndarray) -> bool:
        return norm(np.asarray(point) - self.position) <= self.soi


def earth_moon_system() -> list[CelestialBody]:
    """Earth as primary at the origin, Moon on +X at its mean distance."""
    return [
        CelestialBody("Earth", EARTH_MU, EARTH_RADIUS, EARTH_SOI),
        CelestialBody("Moon", MOON_MU, MOON_RADIUS, MOON_SOI, (MOON_DISTANCE, 0.0, 0.0)),
    ]


class PatchedConicSolver:
    def __init__(self, bodies: list[CelestialBody] | None = None, tol: float = 1e-3) -> None:
        self.bodies = bodies if bodies is not None else earth_moon_system()
        if not self.bodies:
            raise ValueError("at least one celestial body is required")
        self.tol = tol

    @property
    def primary(self) -> CelestialBody:
        return self.bodies[0]

    def dominant_body(self, position: np.ndarray) -> CelestialBody:
        """Smallest SOI containing `position`; the primary if none does."""
        best = None
        for body in self.bodies:
            if body.contains(position) and (best is None or body.soi < best.soi):
                best = body
        return best if best is not None else self.primary

    def propagate_about(self, body: CelestialBody, state: OrbitalState, duration: float,
                        time_step: float) -> OrbitalState:
        """Two-body propagation about `body`; input and output in the primary frame."""
        if duration <= 0:
            return replace(state.copy(), mu=body.mu)
        rel = OrbitalState(state.position - body.position, state.velocity, state.time, body.mu)
        out = propagate_orbit(rel, min(time_step, duration), duration)
        out.position = out.position + body.position
        return out

    def find_soi_transition(self, state: OrbitalState, max_time: float, time_step: float) -> float:
        """
        Time from `state` until the dominant body changes, capped at max_time.

        Samples every `time_step`; on the first sample under a different
        body, bisects the bracketing interval down to self.tol seconds and
        returns its upper end (just past the boundary).
        """
        body = self.dominant_body(state.position)
        t = 0.0
        current = state
        while t < max_time:
            h = min(time_step, max_time - t)
            nxt = self.propagate_about(body, current, h, h)
            if self.dominant_body(nxt.position) is not body:
                lo, hi = 0.0, h
                while hi - lo > self.tol:
                    mid = 0.5 * (lo + hi)
                    sample = self.propagate_about(body, current, mid, mid)
                    if self.dominant_body(sample.position) is body:
                        lo = mid
                    else:
                        hi = mid
                return t + hi
            current = nxt
            t += h
        return max_time

    def solve_trajectory(
        self,
        initial_state: OrbitalState,
        duration: float,
        time_slice: float,
        substeps: int = 10,
    ) -> list[OrbitalState]:
        """
        Propagate through any SOI changes for `duration` seconds.

        Args:
            initial_state: Start state in the primary frame.
            duration: Total time in s.
            time_slice: Maximum length of one patched segment.
            substeps: propagation steps per slice (also the SOI sampling density).

        Returns:
            The state at the end of every segment; each carries the μ of
            the body it was propagated about.
        """
        if time_slice <= 0 or substeps < 1:
            raise ValueError("time_slice must be > 0 and substeps >= 1")
        out: list[OrbitalState] = []
        current = initial_state.copy()
        elapsed = 0.0
        previous = None
        while elapsed < duration - 1e-9:
            body = self.dominant_body(current.position)
            if previous is not None and body is not previous:
                logger.debug("SOI change %s -> %s at t=%.1f s", previous.name, body.name, current.time)
            previous = body
            current = replace(current, mu=body.mu)

            span = min(time_slice, duration - elapsed)
            step = span / substeps
            dt = min(span, self.find_soi_transition(current, span, step))
            dt = max(dt, min(self.tol, span))
            current = self.propagate_about(body, current, dt, step)
            out.append(current)
            elapsed += dt
        return out
