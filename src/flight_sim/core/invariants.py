# MIT License (see LICENSE)
"""
Conserved and monitored quantities of the entity store.

Used by tests and telemetry to check the integrators: with no thrust, drag
or gravity, linear momentum should stay constant; total mass only ever
decreases, and only through propellant burn.
"""
from __future__ import annotations

import numpy as np

from ..state import EntityStateStore


def total_mass(store: EntityStateStore) -> float:
    """Sum of all positive entity masses in kg."""
    m = store.masses
    return float(m[m > 0].sum())


def total_fuel(store: EntityStateStore) -> float:
    """Sum of remaining propellant in kg."""
    return float(store.fuels.sum())


def linear_momentum(store: EntityStateStore) -> np.ndarray:
    """
    P = Σ m v over entities with m > 0.

    Returns:
        Momentum vector in kg·m/s (float64).
    """
    m = np.where(store.masses > 0, store.masses, 0.0)
    return (m[:, None] * store.velocities.astype(np.float64)).sum(axis=0)


def kinetic_energy(store: EntityStateStore) -> float:
    """T = Σ ½ m |v|² in J (translational only)."""
    m = np.where(store.masses > 0, store.masses, 0.0)
    v = store.velocities.astype(np.float64)
    return float(0.5 * (m * np.einsum("ij,ij->i", v, v)).sum())


def dry_mass_violations(store: EntityStateStore) -> np.ndarray:
    """Indices of engine entities whose mass dropped below dry mass (should be empty)."""
    return np.flatnonzero(store.has_engine & (store.masses < store.dry_masses))
