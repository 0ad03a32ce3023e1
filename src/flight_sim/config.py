# MIT License (see LICENSE)
"""
Simulation configuration.

SimulationConfig groups the fixed tuning values of the tick loop. It can be
built directly, from a plain mapping (e.g. decoded JSON), or from the
environment:

    FLIGHT_SIM_SUBSTEPS   overrides the sub-step count
"""
from __future__ import annotations
import os
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

from .atmosphere import AtmosphereModel
from .constants import (
    SURFACE_GRAVITY,
    SUBSTEPS,
    MAX_TICK_DT,
    FIXED_TICK_DT,
    DRAG_CEILING,
    MIN_DRAG_SPEED,
    MIN_ANGULAR_SPEED,
)


@dataclass(frozen=True)
class SimulationConfig:
    """
    Attributes:
        gravity: Uniform local gravity vector in m/s².
        substeps: Sub-steps per outer tick.
        max_dt: Clamp on the outer tick length in seconds.
        fixed_dt: Tick length used by Simulation.run_for and tick() without dt.
        drag_ceiling: Altitude (m) above which drag is not evaluated.
        min_drag_speed: Speed (m/s) below which drag is not evaluated.
        angular_threshold: |ω| (rad/s) below which orientation is frozen.
        enable_drag: Toggle for the drag pass.
        atmosphere: Density model.
    """
    gravity: tuple[float, float, float] = SURFACE_GRAVITY
    substeps: int = SUBSTEPS
    max_dt: float = MAX_TICK_DT
    fixed_dt: float = FIXED_TICK_DT
    drag_ceiling: float = DRAG_CEILING
    min_drag_speed: float = MIN_DRAG_SPEED
    angular_threshold: float = MIN_ANGULAR_SPEED
    enable_drag: bool = True
    atmosphere: AtmosphereModel = field(default_factory=AtmosphereModel)

    def __post_init__(self) -> None:
        if len(self.gravity) != 3:
            raise ValueError(f"gravity must have 3 components, got {self.gravity!r}")
        if self.substeps < 1:
            raise ValueError(f"substeps must be >= 1, got {self.substeps}")
        if self.max_dt <= 0 or self.fixed_dt <= 0:
            raise ValueError("max_dt and fixed_dt must be > 0")
        if self.min_drag_speed < 0 or self.angular_threshold < 0:
            raise ValueError("thresholds must be >= 0")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SimulationConfig:
        """
        Build a config from plain data. Unknown keys are rejected.

        "atmosphere" may be a mapping of AtmosphereModel fields.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown config keys: {sorted(unknown)}")
        kwargs = dict(data)
        if "gravity" in kwargs:
            kwargs["gravity"] = tuple(float(x) for x in kwargs["gravity"])
        if "substeps" in kwargs:
            kwargs["substeps"] = int(kwargs["substeps"])
        atm = kwargs.get("atmosphere")
        if isinstance(atm, Mapping):
            kwargs["atmosphere"] = AtmosphereModel(**atm)
        return cls(**kwargs)

    @classmethod
    def from_env(cls, base: SimulationConfig | None = None) -> SimulationConfig:
        """Apply FLIGHT_SIM_* environment overrides on top of `base`."""
        cfg = base or cls()
        raw = os.environ.get("FLIGHT_SIM_SUBSTEPS")
        if raw:
            cfg = replace(cfg, substeps=int(raw))
        return cfg
