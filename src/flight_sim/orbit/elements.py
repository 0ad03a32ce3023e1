# MIT License (see LICENSE)
"""
Conversions between Cartesian state vectors and Keplerian elements.

Degenerate geometry is guarded with ORBIT_EPS instead of dividing by a
near-zero magnitude:

- |h| < eps (rectilinear motion): inclination is 0.
- |n| < eps (equatorial orbit, n = ẑ × h): RAAN and argument of periapsis are 0.
- e < eps (circular orbit): argument of periapsis and true anomaly are 0.
- |ε| < eps (parabolic energy): semi-major axis is reported as 0.

Reference:
    Vallado, "Fundamentals of Astrodynamics and Applications", RV2COE/COE2RV.
"""
from __future__ import annotations
import math

import numpy as np

from ..constants import ORBIT_EPS
from ..util import norm, unit
from .state import OrbitalElements, OrbitalState

_Z = np.array([0.0, 0.0, 1.0])


def _angle(cos_value: float) -> float:
    return math.acos(min(1.0, max(-1.0, cos_value)))


def eccentricity_vector(r: np.ndarray, v: np.ndarray, mu: float) -> np.ndarray:
    """e = (v × h)/μ − r̂, pointing at periapsis."""
    h = np.cross(r, v)
    return np.cross(v, h) / mu - unit(r, ORBIT_EPS)


def state_to_elements(state: OrbitalState, eps: float = ORBIT_EPS) -> OrbitalElements:
    """Convert a state vector to classical elements (angles in radians)."""
    r, v, mu = state.position, state.velocity, state.mu
    r_mag = norm(r)

    h = np.cross(r, v)
    h_mag = norm(h)

    e_vec = eccentricity_vector(r, v, mu)
    e = norm(e_vec)

    energy = state.specific_energy
    a = -mu / (2.0 * energy) if abs(energy) > eps else 0.0

    inc = _angle(h[2] / h_mag) if h_mag > eps else 0.0

    n = np.cross(_Z, h)
    n_mag = norm(n)
    raan = 0.0
    if n_mag > eps:
        raan = _angle(n[0] / n_mag)
        if n[1] < 0:
            raan = 2.0 * math.pi - raan

    argp = 0.0
    if n_mag > eps and e > eps:
        argp = _angle(float(np.dot(n, e_vec)) / (n_mag * e))
        if e_vec[2] < 0:
            argp = 2.0 * math.pi - argp

    nu = 0.0
    if e > eps and r_mag > eps:
        nu = _angle(float(np.dot(e_vec, r)) / (e * r_mag))
        if np.dot(r, v) < 0:
            nu = 2.0 * math.pi - nu

    return OrbitalElements(
        semi_major_axis=a,
        eccentricity=e,
        inclination=inc,
        raan=raan,
        arg_periapsis=argp,
        true_anomaly=nu,
        mu=mu,
    )


def perifocal_to_inertial(raan: float, inc: float, argp: float) -> np.ndarray:
    """3x3 rotation from the perifocal (PQW) frame to the inertial frame."""
    cO, sO = math.cos(raan), math.sin(raan)
    ci, si = math.cos(inc), math.sin(inc)
    cw, sw = math.cos(argp), math.sin(argp)
    return np.array([
        [cO * cw - sO * sw * ci, -cO * sw - sO * cw * ci, sO * si],
        [sO * cw + cO * sw * ci, -sO * sw + cO * cw * ci, -cO * si],
        [sw * si, cw * si, ci],
    ], dtype=np.float64)


def elements_to_state(elements: OrbitalElements, time: float = 0.0) -> OrbitalState:
    """
    Convert classical elements to a state vector at epoch `time`.

    Raises:
        ValueError: If the semi-latus rectum is not positive (e.g. a = 0).
    """
    a, e, nu, mu = elements.semi_major_axis, elements.eccentricity, elements.true_anomaly, elements.mu
    p = a * (1.0 - e * e)
    if p <= 0:
        raise ValueError(f"semi-latus rectum must be > 0 (a={a}, e={e})")

    r = p / (1.0 + e * math.cos(nu))
    r_pqw = np.array([r * math.cos(nu), r * math.sin(nu), 0.0])
    k = math.sqrt(mu / p)
    v_pqw = np.array([-k * math.sin(nu), k * (e + math.cos(nu)), 0.0])

    rot = perifocal_to_inertial(elements.raan, elements.inclination, elements.arg_periapsis)
    return OrbitalState(position=rot @ r_pqw, velocity=rot @ v_pqw, time=time, mu=mu)
