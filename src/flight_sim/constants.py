# MIT License (see LICENSE)
"""
Physical constants and fixed tuning values used throughout the simulation.

All values are SI: metres, seconds, kilograms. Celestial values follow the
usual IERS/JPL figures used for mission planning.
"""
from __future__ import annotations

# Standard gravity, used to turn specific impulse into exhaust velocity.
# Reference: https://physics.nist.gov/cgi-bin/cuu/Value?gn
G0: float = 9.80665

# Uniform near-ground field applied along local -Y.
SURFACE_GRAVITY: tuple[float, float, float] = (0.0, -9.81, 0.0)

# Celestial bodies (μ in m³/s², radii in m)
EARTH_MU: float = 3.986004418e14
EARTH_RADIUS: float = 6.371e6
EARTH_SOI: float = 9.24e8
MOON_MU: float = 4.9048695e12
MOON_RADIUS: float = 1.737e6
MOON_DISTANCE: float = 3.844e8
MOON_SOI: float = 6.61e7
SOLAR_MU: float = 1.32712440018e20

# Exponential atmosphere
SEA_LEVEL_DENSITY: float = 1.225      # kg/m³
SCALE_HEIGHT: float = 8500.0          # m
ATMOSPHERE_CEILING: float = 150_000.0  # m, density is exactly 0 above this

# Drag is not evaluated above this altitude or below this speed.
DRAG_CEILING: float = 80_000.0        # m
MIN_DRAG_SPEED: float = 0.01          # m/s

# Motion stepper
SUBSTEPS: int = 4
MAX_TICK_DT: float = 1.0 / 120.0
FIXED_TICK_DT: float = MAX_TICK_DT
MIN_ANGULAR_SPEED: float = 1e-3       # rad/s

# Degeneracy guard for orbital conversions
ORBIT_EPS: float = 1e-6

# Radius ratio above which a bi-elliptic transfer beats Hohmann.
BI_ELLIPTIC_RATIO: float = 11.94

# Drag coefficient and cross-sectional area (m²) per piece type.
PIECE_TYPE_TABLE: dict[str, tuple[float, float]] = {
    "engine": (0.8, 0.8),
    "tank": (0.6, 1.2),
    "cockpit": (0.4, 1.0),
    "wing": (0.1, 2.0),
}
DEFAULT_PIECE_TYPE: tuple[float, float] = (0.7, 1.0)
