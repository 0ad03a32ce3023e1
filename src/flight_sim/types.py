# MIT License (see LICENSE)
"""
Descriptor and configuration types for vessel pieces.

Pieces arrive from an external catalog as loosely typed records: an id, a
type tag, a mass, and a string-keyed numeric property map ("fuel", "thrust",
"isp", "dry_mass", "gimbal"). This module turns those records into typed,
validated configuration once, at the load boundary:

- PieceDescriptor: the raw catalog record.
- EngineDescriptor: immutable engine parameters.
- PieceConfig: everything the store needs to create an entity, with no
  string lookups left for the tick loop.
- Part, Vessel: the fixed piece/part/vessel hierarchy used for spawning
  and staging.
"""
from __future__ import annotations
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from .constants import PIECE_TYPE_TABLE, DEFAULT_PIECE_TYPE

logger = logging.getLogger(__name__)


class DescriptorError(ValueError):
    """Raised when a piece descriptor cannot be turned into a valid configuration."""


def _finite(name: str, value: Any, piece_id: str) -> float:
    try:
        x = float(value)
    except (TypeError, ValueError) as exc:
        raise DescriptorError(f"piece {piece_id!r}: {name} is not numeric ({value!r})") from exc
    if not math.isfinite(x):
        raise DescriptorError(f"piece {piece_id!r}: {name} must be finite, got {x}")
    return x


# =============================================================================
# Catalog records
# =============================================================================

@dataclass(frozen=True)
class PieceDescriptor:
    """
    A piece as supplied by the catalog/asset loader.

    Attributes:
        id: Catalog identifier of the piece (not the simulation identity).
        type: Type tag, e.g. "engine", "tank", "cockpit", "wing".
        mass: Wet mass in kg. Mass ≤ 0 marks an immovable piece.
        properties: Numeric properties keyed by name.
        name: Human-readable label.
    """
    id: str
    type: str
    mass: float
    properties: Mapping[str, float] = field(default_factory=dict)
    name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PieceDescriptor:
        """Build a descriptor from a plain mapping (e.g. decoded JSON)."""
        try:
            piece_id = str(data["id"])
            mass = data["mass"]
        except KeyError as exc:
            raise DescriptorError(f"piece record missing required key {exc.args[0]!r}") from exc
        props = data.get("properties") or {}
        return cls(
            id=piece_id,
            type=str(data.get("type", "")),
            mass=_finite("mass", mass, piece_id),
            properties={str(k): _finite(k, v, piece_id) for k, v in props.items()},
            name=str(data.get("name", "")),
        )


@dataclass(frozen=True)
class EngineDescriptor:
    """
    Immutable engine parameters.

    Attributes:
        thrust: Vacuum thrust in N.
        isp: Specific impulse in s. Exhaust velocity is isp * g0.
        dry_mass: Mass in kg the piece never burns below.
        gimbal: Gimbal range in degrees (orientation offset only).
    """
    thrust: float
    isp: float
    dry_mass: float
    gimbal: float = 0.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.thrust) and self.thrust >= 0):
            raise DescriptorError(f"engine thrust must be finite and >= 0, got {self.thrust}")
        if not (math.isfinite(self.isp) and self.isp > 0):
            raise DescriptorError(f"engine isp must be finite and > 0, got {self.isp}")
        if not (math.isfinite(self.dry_mass) and self.dry_mass >= 0):
            raise DescriptorError(f"engine dry mass must be finite and >= 0, got {self.dry_mass}")


@dataclass(frozen=True)
class PieceConfig:
    """
    Validated per-piece configuration consumed by EntityStateStore.add_entity.

    Attributes:
        piece_type: Type tag carried into the store.
        mass: Initial mass in kg.
        fuel: Initial fuel mass in kg (≥ 0).
        drag_coefficient: Cd used by the drag model.
        cross_section: Reference area in m².
        engine: Engine parameters, or None for non-propulsive pieces.
    """
    piece_type: str
    mass: float
    fuel: float = 0.0
    drag_coefficient: float = DEFAULT_PIECE_TYPE[0]
    cross_section: float = DEFAULT_PIECE_TYPE[1]
    engine: EngineDescriptor | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.mass):
            raise DescriptorError(f"mass must be finite, got {self.mass}")
        if not (math.isfinite(self.fuel) and self.fuel >= 0):
            raise DescriptorError(f"fuel must be finite and >= 0, got {self.fuel}")
        if self.drag_coefficient < 0 or self.cross_section < 0:
            raise DescriptorError("drag coefficient and cross section must be >= 0")
        if self.engine is not None and self.mass < self.engine.dry_mass:
            raise DescriptorError(
                f"mass {self.mass} kg is below engine dry mass {self.engine.dry_mass} kg"
            )
        # fuel must fit between dry mass and mass or the tank outlives the burn
        if self.engine is not None and self.fuel > (self.mass - self.engine.dry_mass) * (1 + 1e-9) + 1e-9:
            raise DescriptorError(
                f"fuel {self.fuel} kg exceeds mass {self.mass} kg minus engine dry mass "
                f"{self.engine.dry_mass} kg"
            )

    @classmethod
    def from_descriptor(
        cls,
        piece: PieceDescriptor,
        type_table: Mapping[str, tuple[float, float]] = PIECE_TYPE_TABLE,
    ) -> PieceConfig:
        """
        Resolve a catalog record into a typed configuration.

        Fuel comes from the "fuel" property (0 when absent). Drag coefficient
        and area come from the piece-type table. An engine is attached only
        when both "thrust" and "isp" are present; "dry_mass" defaults to the
        piece mass minus its fuel.

        Raises:
            DescriptorError: If any value is malformed (e.g. isp ≤ 0).
        """
        props = piece.properties
        try:
            fuel = _finite("fuel", props.get("fuel", 0.0), piece.id)
            cd, area = type_table.get(piece.type, DEFAULT_PIECE_TYPE)

            engine = None
            if "thrust" in props and "isp" in props:
                dry = props.get("dry_mass", max(piece.mass - fuel, 0.0))
                engine = EngineDescriptor(
                    thrust=_finite("thrust", props["thrust"], piece.id),
                    isp=_finite("isp", props["isp"], piece.id),
                    dry_mass=_finite("dry_mass", dry, piece.id),
                    gimbal=_finite("gimbal", props.get("gimbal", 0.0), piece.id),
                )
            return cls(
                piece_type=piece.type,
                mass=_finite("mass", piece.mass, piece.id),
                fuel=fuel,
                drag_coefficient=float(cd),
                cross_section=float(area),
                engine=engine,
            )
        except DescriptorError as exc:
            logger.warning("rejected piece %r: %s", piece.id, exc)
            raise


# =============================================================================
# Hierarchy
# =============================================================================

@dataclass
class Part:
    """A group of pieces that stage together (e.g. an engine assembly)."""
    id: str
    pieces: list[PieceDescriptor] = field(default_factory=list)
    name: str = ""

    @property
    def mass(self) -> float:
        return sum(p.mass for p in self.pieces)


@dataclass
class Vessel:
    """A player-assembled vehicle made of parts."""
    id: str
    parts: list[Part] = field(default_factory=list)
    name: str = ""

    @property
    def mass(self) -> float:
        return sum(p.mass for p in self.parts)

    def pieces(self) -> Iterator[tuple[Part, PieceDescriptor]]:
        """Iterate (part, piece) pairs in assembly order."""
        for part in self.parts:
            for piece in part.pieces:
                yield part, piece
