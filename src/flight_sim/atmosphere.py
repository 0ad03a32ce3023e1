# MIT License (see LICENSE)
"""
Exponential planetary atmosphere.

    rho(h) = rho0 * exp(-h / H)

with h clamped to 0 for negative input and rho = 0 strictly above the
ceiling. Works on scalars and numpy arrays alike.
"""
from __future__ import annotations
from dataclasses import dataclass

import numpy as np

from .constants import SEA_LEVEL_DENSITY, SCALE_HEIGHT, ATMOSPHERE_CEILING


@dataclass(frozen=True)
class AtmosphereModel:
    """
    Attributes:
        rho0: Density at h = 0 in kg/m³.
        scale_height: e-folding height H in m.
        ceiling: Altitude in m above which density is exactly zero.
    """
    rho0: float = SEA_LEVEL_DENSITY
    scale_height: float = SCALE_HEIGHT
    ceiling: float = ATMOSPHERE_CEILING

    def __post_init__(self) -> None:
        if self.rho0 < 0 or self.scale_height <= 0 or self.ceiling < 0:
            raise ValueError(
                "atmosphere needs rho0 >= 0, scale_height > 0 and ceiling >= 0"
            )

    def density(self, altitude):
        """
        Density at `altitude` (m), scalar or array.

        Returns a float for scalar input and a float64 array otherwise.
        """
        h = np.asarray(altitude, dtype=np.float64)
        clamped = np.maximum(h, 0.0)
        rho = np.where(h > self.ceiling, 0.0, self.rho0 * np.exp(-clamped / self.scale_height))
        if rho.ndim == 0:
            return float(rho)
        return rho


STANDARD_ATMOSPHERE = AtmosphereModel()


def density(altitude):
    """Density of the standard Earth-like atmosphere at `altitude` (m)."""
    return STANDARD_ATMOSPHERE.density(altitude)
