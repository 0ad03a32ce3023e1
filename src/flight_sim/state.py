# MIT License (see LICENSE)
"""
Structure-of-arrays entity state store.

Every per-entity field lives in its own contiguous numpy array, so the force
and motion passes sweep one field at a time across all entities. Entities
are addressed from the outside by a stable identity (a UUID); the dense
array index behind it may change whenever another entity is removed, since
removal swaps the last slot into the hole and pops.

Precision:
    - Kinematics (position, velocity, acceleration, orientation, angular
      velocity, force, torque) are float32, relative to the vessel's local
      origin.
    - Mass, inverse mass, fuel and engine parameters are float64 so that
      the mass ≥ dry-mass clamp holds exactly.

Views returned by the field properties (e.g. ``store.positions``) cover the
live slots only and are invalidated by the next add/remove. External code
must keep identities, never indices or views, across ticks.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass

import numpy as np

from .types import PieceConfig, PieceDescriptor, EngineDescriptor
from .util import IDENTITY_QUAT, quat_normalize

logger = logging.getLogger(__name__)

# name -> (trailing shape, dtype)
_FIELDS: dict[str, tuple[tuple[int, ...], type]] = {
    "positions": ((3,), np.float32),
    "velocities": ((3,), np.float32),
    "accelerations": ((3,), np.float32),
    "orientations": ((4,), np.float32),
    "angular_velocities": ((3,), np.float32),
    "forces": ((3,), np.float32),
    "torques": ((3,), np.float32),
    "control_forces": ((3,), np.float32),
    "control_torques": ((3,), np.float32),
    "masses": ((), np.float64),
    "inverse_masses": ((), np.float64),
    "fuels": ((), np.float64),
    "drag_coefficients": ((), np.float32),
    "cross_sections": ((), np.float32),
    "throttles": ((), np.float64),
    "thrusts": ((), np.float64),
    "isps": ((), np.float64),
    "dry_masses": ((), np.float64),
    "has_engine": ((), np.bool_),
}


@dataclass(frozen=True)
class StoreSnapshot:
    """
    Read-only copy of the fields external layers display.

    Arrays are copies flagged non-writeable; row i of every array belongs to
    identities[i].
    """
    identities: tuple[uuid.UUID, ...]
    piece_types: tuple[str, ...]
    positions: np.ndarray
    velocities: np.ndarray
    orientations: np.ndarray
    masses: np.ndarray
    fuels: np.ndarray

    def __len__(self) -> int:
        return len(self.identities)


class EntityStateStore:
    """
    Dense, swap-compacted storage for all simulated pieces.

    Usage:
        store = EntityStateStore()
        eid = store.add_entity(descriptor, position=(0, 0, 0))
        i = store.index_of(eid)
        store.velocities[i]       # float32 view row
        store.remove_entity(eid)
    """

    def __init__(self, capacity: int = 64) -> None:
        self._capacity = max(1, int(capacity))
        self._count = 0
        self._arrays: dict[str, np.ndarray] = {
            name: np.zeros((self._capacity, *shape), dtype=dtype)
            for name, (shape, dtype) in _FIELDS.items()
        }
        self._piece_types: list[str] = []
        self._engines: list[EngineDescriptor | None] = []
        self._index_by_id: dict[uuid.UUID, int] = {}
        self._id_by_index: list[uuid.UUID] = []

    # ------------------------------------------------------------------
    # Field views
    # ------------------------------------------------------------------

    def _view(self, name: str) -> np.ndarray:
        return self._arrays[name][: self._count]

    positions = property(lambda self: self._view("positions"))
    velocities = property(lambda self: self._view("velocities"))
    accelerations = property(lambda self: self._view("accelerations"))
    orientations = property(lambda self: self._view("orientations"))
    angular_velocities = property(lambda self: self._view("angular_velocities"))
    forces = property(lambda self: self._view("forces"))
    torques = property(lambda self: self._view("torques"))
    control_forces = property(lambda self: self._view("control_forces"))
    control_torques = property(lambda self: self._view("control_torques"))
    masses = property(lambda self: self._view("masses"))
    inverse_masses = property(lambda self: self._view("inverse_masses"))
    fuels = property(lambda self: self._view("fuels"))
    drag_coefficients = property(lambda self: self._view("drag_coefficients"))
    cross_sections = property(lambda self: self._view("cross_sections"))
    throttles = property(lambda self: self._view("throttles"))
    thrusts = property(lambda self: self._view("thrusts"))
    isps = property(lambda self: self._view("isps"))
    dry_masses = property(lambda self: self._view("dry_masses"))
    has_engine = property(lambda self: self._view("has_engine"))

    @property
    def piece_types(self) -> tuple[str, ...]:
        """Type tag per dense index (a copy; the store owns the list)."""
        return tuple(self._piece_types)

    def __len__(self) -> int:
        return self._count

    def __contains__(self, identity: object) -> bool:
        return identity in self._index_by_id

    # ------------------------------------------------------------------
    # Identity mapping
    # ------------------------------------------------------------------

    def index_of(self, identity: uuid.UUID) -> int | None:
        """Dense index of an identity, or None if it is not live."""
        return self._index_by_id.get(identity)

    def identity_of(self, index: int) -> uuid.UUID | None:
        """Identity stored at a dense index, or None if out of range."""
        if 0 <= index < self._count:
            return self._id_by_index[index]
        return None

    def identities(self) -> list[uuid.UUID]:
        """Live identities in index order (a copy)."""
        return list(self._id_by_index)

    def engine_of(self, key: uuid.UUID | int) -> EngineDescriptor | None:
        """Engine descriptor by identity or index; None when absent or unknown."""
        index = key if isinstance(key, (int, np.integer)) else self.index_of(key)
        if index is None or not 0 <= index < self._count:
            return None
        return self._engines[index]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _grow(self) -> None:
        new_cap = self._capacity * 2
        for name, arr in self._arrays.items():
            grown = np.zeros((new_cap, *arr.shape[1:]), dtype=arr.dtype)
            grown[: self._count] = arr[: self._count]
            self._arrays[name] = grown
        self._capacity = new_cap

    def add_entity(
        self,
        piece: PieceDescriptor | PieceConfig,
        position=(0.0, 0.0, 0.0),
        orientation=IDENTITY_QUAT,
    ) -> uuid.UUID:
        """
        Append a new entity and return its identity.

        Velocity, acceleration, angular velocity, force and torque start at
        zero. Mass, fuel, drag coefficient, area and engine come from the
        resolved PieceConfig; a raw PieceDescriptor is resolved (and
        validated) here.

        Raises:
            DescriptorError: If a raw descriptor fails validation.
        """
        cfg = piece if isinstance(piece, PieceConfig) else PieceConfig.from_descriptor(piece)
        if self._count == self._capacity:
            self._grow()

        i = self._count
        a = self._arrays
        for arr in a.values():
            arr[i] = 0
        a["positions"][i] = position
        a["orientations"][i] = quat_normalize(np.asarray(orientation, dtype=np.float64))
        a["masses"][i] = cfg.mass
        a["inverse_masses"][i] = 1.0 / cfg.mass if cfg.mass > 0 else 0.0
        a["fuels"][i] = cfg.fuel
        a["drag_coefficients"][i] = cfg.drag_coefficient
        a["cross_sections"][i] = cfg.cross_section
        if cfg.engine is not None:
            a["has_engine"][i] = True
            a["thrusts"][i] = cfg.engine.thrust
            a["isps"][i] = cfg.engine.isp
            a["dry_masses"][i] = cfg.engine.dry_mass

        identity = uuid.uuid4()
        self._index_by_id[identity] = i
        self._id_by_index.append(identity)
        self._piece_types.append(cfg.piece_type)
        self._engines.append(cfg.engine)
        self._count += 1
        logger.debug("added %s entity %s at index %d", cfg.piece_type, identity, i)
        return identity

    def remove_entity(self, identity: uuid.UUID) -> bool:
        """
        Remove an entity by swap-with-last-and-pop.

        Unknown identities are ignored. Returns True if something was removed.
        """
        index = self._index_by_id.get(identity)
        if index is None:
            return False

        last = self._count - 1
        if index != last:
            for arr in self._arrays.values():
                arr[index] = arr[last]
            moved = self._id_by_index[last]
            self._piece_types[index] = self._piece_types[last]
            self._engines[index] = self._engines[last]
            self._id_by_index[index] = moved
            self._index_by_id[moved] = index

        del self._index_by_id[identity]
        self._id_by_index.pop()
        self._piece_types.pop()
        self._engines.pop()
        for arr in self._arrays.values():
            arr[last] = 0
        self._count -= 1
        logger.debug("removed entity %s (index %d)", identity, index)
        return True

    # ------------------------------------------------------------------
    # Mutation helpers
    # ------------------------------------------------------------------

    def set_mass(self, index: int, mass: float) -> None:
        """Set mass and keep inverse mass consistent."""
        self._arrays["masses"][index] = mass
        self._arrays["inverse_masses"][index] = 1.0 / mass if mass > 0 else 0.0

    def clear_forces(self) -> None:
        """Zero the per-sub-step force and torque accumulators."""
        self.forces[:] = 0.0
        self.torques[:] = 0.0

    def clear_control_forces(self) -> None:
        """Zero the per-tick controlled force and torque accumulators."""
        self.control_forces[:] = 0.0
        self.control_torques[:] = 0.0

    def snapshot(self) -> StoreSnapshot:
        """Copy the display fields into a read-only StoreSnapshot."""
        def frozen(x: np.ndarray) -> np.ndarray:
            c = x.copy()
            c.flags.writeable = False
            return c

        return StoreSnapshot(
            identities=tuple(self._id_by_index),
            piece_types=tuple(self._piece_types),
            positions=frozen(self.positions),
            velocities=frozen(self.velocities),
            orientations=frozen(self.orientations),
            masses=frozen(self.masses),
            fuels=frozen(self.fuels),
        )
