# MIT License (see LICENSE)
"""
Orbital mechanics for mission planning.

This subpackage is independent of the real-time tick loop and works in
double precision throughout:
    - OrbitalState / OrbitalElements / ManeuverNode value types.
    - Runge-Kutta-Nystrom two-body propagation.
    - State vector <-> Keplerian element conversion.
    - Maneuver calculators (Hohmann, bi-elliptic, plane change, flyby,
      launch windows).
    - A patched-conic solver for multi-body trajectories.

Typical usage:
    from flight_sim.orbit import OrbitalState, propagate_orbit, state_to_elements

    final = propagate_orbit(state, time_step=10.0, duration=3600.0)
    elements = state_to_elements(final)
"""
from .state import OrbitalState, OrbitalElements, ManeuverNode
from .propagator import two_body_acceleration, rk4_step, propagate_orbit, iter_orbit, trajectory
from .elements import state_to_elements, elements_to_state, eccentricity_vector
from .maneuvers import (
    HOHMANN,
    BI_ELLIPTIC,
    apply_maneuver,
    hohmann_delta_v,
    hohmann_transfer,
    bi_elliptic_transfer,
    plane_change,
    plane_change_delta_v,
    gravity_assist_delta_v,
    orbital_period,
    escape_velocity,
    sphere_of_influence,
    rocket_delta_v,
    optimal_transfer_type,
    mission_delta_v,
    hohmann_phase_angle,
    find_launch_window,
)
from .patched_conic import CelestialBody, PatchedConicSolver, earth_moon_system

__all__ = [
    # Types
    "OrbitalState",
    "OrbitalElements",
    "ManeuverNode",
    # Propagation
    "two_body_acceleration",
    "rk4_step",
    "propagate_orbit",
    "iter_orbit",
    "trajectory",
    # Conversions
    "state_to_elements",
    "elements_to_state",
    "eccentricity_vector",
    # Maneuvers
    "HOHMANN",
    "BI_ELLIPTIC",
    "apply_maneuver",
    "hohmann_delta_v",
    "hohmann_transfer",
    "bi_elliptic_transfer",
    "plane_change",
    "plane_change_delta_v",
    "gravity_assist_delta_v",
    "orbital_period",
    "escape_velocity",
    "sphere_of_influence",
    "rocket_delta_v",
    "optimal_transfer_type",
    "mission_delta_v",
    "hohmann_phase_angle",
    "find_launch_window",
    # Patched conics
    "CelestialBody",
    "PatchedConicSolver",
    "earth_moon_system",
]
