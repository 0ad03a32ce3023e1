# MIT License (see LICENSE)
"""
Vessel staging: ordered decoupling of groups of pieces.

Each vessel owns a FIFO of stages; a stage is the set of entity identities
that separate together. Activating a stage removes those entities from the
store (they stop being simulated as part of the vessel) and publishes
StageActivated.
"""
from __future__ import annotations
import logging
import uuid
from collections import deque
from typing import TYPE_CHECKING, Iterable

from .events import StageActivated

if TYPE_CHECKING:
    from .simulation import Simulation

logger = logging.getLogger(__name__)


class StagingSystem:
    def __init__(self, sim: Simulation) -> None:
        self._sim = sim
        self._stages: dict[str, deque[tuple[uuid.UUID, ...]]] = {}

    def register_stage(self, vessel_id: str, identities: Iterable[uuid.UUID]) -> int:
        """Queue a stage after the vessel's existing ones. Returns the queue length."""
        stages = self._stages.setdefault(vessel_id, deque())
        stages.append(tuple(identities))
        return len(stages)

    def remaining_stages(self, vessel_id: str) -> int:
        return len(self._stages.get(vessel_id, ()))

    def activate_next_stage(self, vessel_id: str) -> tuple[uuid.UUID, ...]:
        """
        Decouple the vessel's next stage.

        Returns the identities actually removed; empty when the vessel has
        no stages left. Identities already gone from the store are skipped.
        """
        stages = self._stages.get(vessel_id)
        if not stages:
            return ()
        stage = stages.popleft()
        removed = tuple(eid for eid in stage if self._sim.remove_piece(eid))
        logger.info("vessel %s staged: %d pieces decoupled, %d stages left",
                    vessel_id, len(removed), len(stages))
        self._sim.events.publish(StageActivated(vessel_id=vessel_id, removed=removed))
        return removed
