# MIT License (see LICENSE)
"""
Impulsive maneuver calculators for mission planning.

All transfers assume circular, coplanar start and end orbits unless stated
otherwise. Speeds come from the vis-viva equation

    v² = μ (2/r − 1/a)

and transfer times are half periods of the transfer ellipses. Burns are
returned as ManeuverNodes whose delta_v is (prograde, normal, radial); a
negative prograde component is a retrograde burn.
"""
from __future__ import annotations
import math
from typing import Sequence

import numpy as np

from ..constants import G0, BI_ELLIPTIC_RATIO, SOLAR_MU
from ..util import unit
from .propagator import propagate_orbit
from .state import ManeuverNode, OrbitalState

HOHMANN = "hohmann"
BI_ELLIPTIC = "bi-elliptic"


def _circular_speed(r: float, mu: float) -> float:
    return math.sqrt(mu / r)


def _vis_viva(r: float, a: float, mu: float) -> float:
    return math.sqrt(mu * (2.0 / r - 1.0 / a))


def _half_period(a: float, mu: float) -> float:
    return math.pi * math.sqrt(a ** 3 / mu)


def orbital_frame(state: OrbitalState) -> np.ndarray:
    """
    Rows are the (prograde, normal, radial) unit vectors of `state`.

    Degenerate states (zero velocity or rectilinear motion) give zero rows
    rather than NaNs.
    """
    prograde = unit(state.velocity)
    normal = unit(np.cross(state.position, state.velocity))
    radial = np.cross(prograde, normal)
    return np.vstack([prograde, normal, radial])


def apply_maneuver(state: OrbitalState, node: ManeuverNode) -> OrbitalState:
    """Return the state right after an impulsive burn of node.delta_v."""
    dv = node.delta_v @ orbital_frame(state)
    return OrbitalState(
        position=state.position.copy(),
        velocity=state.velocity + dv,
        time=state.time,
        mu=state.mu,
    )


def hohmann_delta_v(r1: float, r2: float, mu: float) -> tuple[float, float, float]:
    """
    Closed-form Hohmann transfer between circular orbits.

    Returns:
        (dv1, dv2, transfer_time): signed prograde burns in m/s and the
        coast time in s between them.
    """
    a_t = 0.5 * (r1 + r2)
    dv1 = _vis_viva(r1, a_t, mu) - _circular_speed(r1, mu)
    dv2 = _circular_speed(r2, mu) - _vis_viva(r2, a_t, mu)
    return dv1, dv2, _half_period(a_t, mu)


def hohmann_transfer(
    r1: float,
    r2: float,
    mu: float,
    current_time: float = 0.0,
    state: OrbitalState | None = None,
    time_step: float = 10.0,
) -> tuple[ManeuverNode, ManeuverNode]:
    """
    Two-burn Hohmann transfer from radius r1 to r2.

    Args:
        r1: Initial circular orbit radius in m.
        r2: Target circular orbit radius in m.
        mu: Gravitational parameter in m³/s².
        current_time: Epoch of the first burn.
        state: Optional state on the r1 orbit at current_time. When given,
               both nodes get pre/post-maneuver snapshots, the coast being
               propagated numerically with `time_step`.
        time_step: Propagation step for the coast propagation.

    Returns:
        (first_burn, second_burn)
    """
    dv1, dv2, tof = hohmann_delta_v(r1, r2, mu)
    first = ManeuverNode(time=current_time, delta_v=(dv1, 0.0, 0.0))
    second = ManeuverNode(time=current_time + tof, delta_v=(dv2, 0.0, 0.0))

    if state is not None:
        first.pre_state = state.copy()
        first.post_state = apply_maneuver(state, first)
        second.pre_state = propagate_orbit(first.post_state, time_step, tof)
        second.post_state = apply_maneuver(second.pre_state, second)
    return first, second


def bi_elliptic_transfer(
    r1: float,
    r2: float,
    r_intermediate: float,
    mu: float,
    current_time: float = 0.0,
) -> tuple[ManeuverNode, ManeuverNode, ManeuverNode]:
    """
    Three-burn bi-elliptic transfer through apoapsis radius r_intermediate.

    Burn 1 raises apoapsis to r_intermediate, burn 2 (at r_intermediate)
    raises periapsis to r2, burn 3 (at r2) circularizes.
    """
    a1 = 0.5 * (r1 + r_intermediate)
    a2 = 0.5 * (r_intermediate + r2)

    dv1 = _vis_viva(r1, a1, mu) - _circular_speed(r1, mu)
    dv2 = _vis_viva(r_intermediate, a2, mu) - _vis_viva(r_intermediate, a1, mu)
    dv3 = _circular_speed(r2, mu) - _vis_viva(r2, a2, mu)

    t1 = _half_period(a1, mu)
    t2 = _half_period(a2, mu)
    return (
        ManeuverNode(time=current_time, delta_v=(dv1, 0.0, 0.0)),
        ManeuverNode(time=current_time + t1, delta_v=(dv2, 0.0, 0.0)),
        ManeuverNode(time=current_time + t1 + t2, delta_v=(dv3, 0.0, 0.0)),
    )


def plane_change(state: OrbitalState, inclination_change: float) -> ManeuverNode:
    """
    Pure inclination change at the current position.

    The velocity is turned by Δi towards the orbit normal, so
    |Δv| = 2 v sin(Δi/2); the node carries the exact vector
    (v(cos Δi − 1), v sin Δi, 0). Cheapest at apoapsis, where v is lowest.
    """
    v = state.speed
    node = ManeuverNode(
        time=state.time,
        delta_v=(v * (math.cos(inclination_change) - 1.0), v * math.sin(inclination_change), 0.0),
        pre_state=state.copy(),
    )
    node.post_state = apply_maneuver(state, node)
    return node


def plane_change_delta_v(speed: float, inclination_change: float) -> float:
    """Δv = 2 v sin(Δi/2)."""
    return 2.0 * speed * math.sin(0.5 * inclination_change)


def gravity_assist_delta_v(v_infinity: float, turn_angle: float) -> float:
    """Velocity change from a flyby turning v∞ by turn_angle: 2 v∞ sin(δ/2)."""
    return 2.0 * v_infinity * math.sin(0.5 * turn_angle)


def orbital_period(semi_major_axis: float, mu: float) -> float:
    """T = 2π √(a³/μ)."""
    return 2.0 * math.pi * math.sqrt(semi_major_axis ** 3 / mu)


def escape_velocity(altitude: float, mu: float, body_radius: float) -> float:
    """v_esc = √(2μ / (R + h))."""
    return math.sqrt(2.0 * mu / (body_radius + altitude))


def sphere_of_influence(semi_major_axis: float, primary_mu: float, secondary_mu: float) -> float:
    """Laplace SOI radius a (m2/m1)^(2/5); μ ratios equal mass ratios."""
    return semi_major_axis * (secondary_mu / primary_mu) ** 0.4


def rocket_delta_v(isp: float, initial_mass: float, final_mass: float) -> float:
    """
    Tsiolkovsky: Δv = Isp g0 ln(m0 / m1).

    Planning helper only; the tick loop models thrust as a force.
    """
    if isp <= 0 or initial_mass <= 0 or final_mass <= 0:
        raise ValueError("isp and masses must be > 0")
    return isp * G0 * math.log(initial_mass / final_mass)


def optimal_transfer_type(r1: float, r2: float) -> str:
    """HOHMANN below a radius ratio of 11.94, BI_ELLIPTIC at or above it."""
    ratio = max(r1, r2) / min(r1, r2)
    return HOHMANN if ratio < BI_ELLIPTIC_RATIO else BI_ELLIPTIC


def mission_delta_v(maneuvers: Sequence[ManeuverNode]) -> float:
    """Total |Δv| budget of a maneuver sequence."""
    return sum(m.delta_v_magnitude for m in maneuvers)


def hohmann_phase_angle(r1: float, r2: float, mu: float) -> float:
    """
    Lead angle (rad) the target on the r2 orbit must have at departure so
    that it arrives at apoapsis together with the transfer: π - n2 * t_transfer.
    """
    _, _, tof = hohmann_delta_v(r1, r2, mu)
    return math.pi - math.sqrt(mu / r2**3) * tof


def find_launch_window(
    r_departure: float,
    r_arrival: float,
    search_start: float,
    search_duration: float,
    time_step: float,
    mu: float = SOLAR_MU,
    phase0: float | None = None,
) -> tuple[float, float, float]:
    """
    Best Hohmann launch time between coplanar circular orbits.

    Both bodies move on circular orbits. phase0 is the target's angle ahead
    of the departure body at t = 0; the phase then drifts at n2 - n1. The
    search samples [search_start, search_start + search_duration] at
    time_step and keeps the launch whose phase is closest to
    hohmann_phase_angle. Without phase0 every launch costs the same and the
    first sample is returned.

    Args:
        r_departure: Departure orbit radius in m.
        r_arrival: Arrival orbit radius in m.
        search_start: First candidate launch time in s.
        search_duration: Length of the search window in s.
        time_step: Sampling interval in s (> 0).
        mu: Central body parameter, the Sun by default.
        phase0: Target lead angle at t = 0 in rad.

    Returns:
        (launch_time, arrival_time, total_delta_v) with total_delta_v the
        sum of both burn magnitudes in m/s.

    Raises:
        ValueError: If time_step ≤ 0 or search_duration < 0.
    """
    if time_step <= 0 or search_duration < 0:
        raise ValueError("time_step must be > 0 and search_duration >= 0")
    dv1, dv2, tof = hohmann_delta_v(r_departure, r_arrival, mu)
    total = abs(dv1) + abs(dv2)
    if phase0 is None:
        return search_start, search_start + tof, total

    times = search_start + time_step * np.arange(int(search_duration // time_step) + 1)
    drift = math.sqrt(mu / r_arrival**3) - math.sqrt(mu / r_departure**3)
    error = phase0 + drift * times - hohmann_phase_angle(r_departure, r_arrival, mu)
    error = (error + np.pi) % (2.0 * np.pi) - np.pi
    launch = float(times[int(np.argmin(np.abs(error)))])
    return launch, launch + tof, total
