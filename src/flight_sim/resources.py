# MIT License (see LICENSE)
"""
Per-part resource tanks and engine propellant feed.

Every part of a spawned vessel can hold tanks of typed resources. Engines
burn their own propellant first; once that is gone they are fed FUEL from
the tanks of the part they belong to, in registration order.

A tank may be backed by a store entity (a tank piece). Drawing from such a
tank also lowers that entity's fuel and mass, so the mass ledger stays in
the store. Tanks whose entity has been removed (e.g. by staging) are
detached and skipped.
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Hashable

from .state import EntityStateStore
from .types import DescriptorError, PieceDescriptor, _finite

logger = logging.getLogger(__name__)


class ResourceType(Enum):
    FUEL = "fuel"
    OXIDIZER = "oxidizer"
    MONOPROP = "monoprop"
    ELECTRIC_CHARGE = "electric_charge"


@dataclass
class ResourceTank:
    """
    Attributes:
        type: Resource held.
        capacity: Maximum amount.
        amount: Current amount, 0 ≤ amount ≤ capacity.
        entity: Store entity whose fuel and mass mirror this tank, if any.
    """
    type: ResourceType
    capacity: float
    amount: float
    entity: uuid.UUID | None = None

    def __post_init__(self) -> None:
        if self.capacity < 0 or not 0 <= self.amount <= self.capacity:
            raise ValueError(f"tank amount {self.amount} outside [0, {self.capacity}]")


def declared_tanks(piece: PieceDescriptor) -> list[tuple[ResourceType, float]]:
    """
    Non-propellant tanks a catalog piece declares through its properties.

    Keys are the ResourceType values other than "fuel". Zero amounts are
    skipped.

    Raises:
        DescriptorError: If an amount is not a finite number ≥ 0.
    """
    tanks = []
    for kind in (ResourceType.OXIDIZER, ResourceType.MONOPROP, ResourceType.ELECTRIC_CHARGE):
        if kind.value not in piece.properties:
            continue
        amount = _finite(kind.value, piece.properties[kind.value], piece.id)
        if amount < 0:
            raise DescriptorError(f"piece {piece.id!r}: {kind.value} must be >= 0, got {amount}")
        if amount > 0:
            tanks.append((kind, amount))
    return tanks


class ResourceFlowSystem:
    """Tank registry keyed by part, plus the engine → part assignment."""

    def __init__(self, store: EntityStateStore) -> None:
        self.store = store
        self._tanks: dict[Hashable, list[ResourceTank]] = {}
        self._part_of: dict[uuid.UUID, Hashable] = {}

    def register_tank(self, part: Hashable, tank: ResourceTank) -> ResourceTank:
        self._tanks.setdefault(part, []).append(tank)
        return tank

    def assign(self, identity: uuid.UUID, part: Hashable) -> None:
        """Record that an entity belongs to a part (engines draw from that part)."""
        self._part_of[identity] = part

    def forget(self, identity: uuid.UUID) -> None:
        self._part_of.pop(identity, None)

    def tanks(self, part: Hashable) -> tuple[ResourceTank, ...]:
        return tuple(self._tanks.get(part, ()))

    def part_of(self, identity: uuid.UUID) -> Hashable | None:
        return self._part_of.get(identity)

    def amount(self, part: Hashable, kind: ResourceType) -> float:
        """Total of one resource across the attached tanks of a part."""
        return sum(t.amount for t in self._tanks.get(part, ()) if t.type is kind and self._attached(t))

    def consume(self, part: Hashable, kind: ResourceType, amount: float) -> bool:
        """
        Take `amount` from a single tank of the part holding at least that much.

        All or nothing: returns False and leaves every tank untouched when no
        one tank can cover the request.
        """
        for tank in self._tanks.get(part, ()):
            if tank.type is kind and tank.amount >= amount and self._attached(tank):
                self._take(tank, amount)
                return True
        return False

    def draw(self, part: Hashable, kind: ResourceType, amount: float) -> float:
        """
        Take up to `amount` across the part's tanks in registration order.

        Returns the amount actually drawn.
        """
        remaining = amount
        for tank in self._tanks.get(part, ()):
            if remaining <= 0:
                break
            if tank.type is not kind or tank.amount <= 0 or not self._attached(tank):
                continue
            take = min(tank.amount, remaining)
            self._take(tank, take)
            remaining -= take
        return amount - remaining

    def feed_for(self, identity: uuid.UUID) -> Callable[[float], float] | None:
        """
        Propellant feed for an engine: a callable drawing FUEL from its part.

        None when the entity belongs to no part.
        """
        part = self._part_of.get(identity)
        if part is None:
            return None
        return lambda requested: self.draw(part, ResourceType.FUEL, requested)

    def _attached(self, tank: ResourceTank) -> bool:
        return tank.entity is None or tank.entity in self.store

    def _take(self, tank: ResourceTank, amount: float) -> None:
        tank.amount = max(0.0, tank.amount - amount)
        if tank.entity is None:
            return
        index = self.store.index_of(tank.entity)
        if index is None:
            return
        mass = float(self.store.masses[index])
        self.store.set_mass(index, max(mass - amount, float(self.store.dry_masses[index])))
        self.store.fuels[index] = max(0.0, float(self.store.fuels[index]) - amount)
        if tank.amount <= 0:
            logger.info("tank on entity %s empty", tank.entity)
