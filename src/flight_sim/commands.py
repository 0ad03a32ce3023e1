# MIT License (see LICENSE)
"""
Thread-safe command queue drained by the tick loop.

Producers on any thread enqueue callables taking the Simulation. At the
start of every tick the owning thread drains the queue to completion and
runs each command before any force integration, so commands never race
with state mutation. A command that raises is logged and counted; the rest
of the queue and the tick still run.
"""
from __future__ import annotations
import logging
import queue
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from .types import PieceConfig, PieceDescriptor
from .util import IDENTITY_QUAT

if TYPE_CHECKING:
    from .simulation import Simulation

logger = logging.getLogger(__name__)

Command = Callable[["Simulation"], None]


@dataclass(frozen=True)
class DrainReport:
    executed: int = 0
    failed: int = 0


class CommandQueue:
    """FIFO of pending commands; `enqueue` may be called from any thread."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[Command] = queue.SimpleQueue()

    def enqueue(self, command: Command) -> None:
        self._queue.put(command)

    def __len__(self) -> int:
        return self._queue.qsize()

    def drain(self, sim: Simulation) -> DrainReport:
        """Run every queued command (including ones enqueued meanwhile) on `sim`."""
        executed = failed = 0
        while True:
            try:
                cmd = self._queue.get_nowait()
            except queue.Empty:
                break
            try:
                cmd(sim)
            except Exception:
                failed += 1
                logger.exception("command %r failed", cmd)
            else:
                executed += 1
        return DrainReport(executed=executed, failed=failed)


# =============================================================================
# Built-in commands
# =============================================================================

@dataclass(frozen=True)
class SetThrottle:
    identity: uuid.UUID
    throttle: float

    def __call__(self, sim: Simulation) -> None:
        sim.set_throttle(self.identity, self.throttle)


@dataclass(frozen=True)
class RemoveEntity:
    identity: uuid.UUID

    def __call__(self, sim: Simulation) -> None:
        sim.remove_piece(self.identity)


@dataclass(frozen=True)
class SpawnPiece:
    """Add a piece; `on_spawned` receives the new identity on the tick thread."""
    piece: PieceDescriptor | PieceConfig
    position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    orientation: tuple[float, float, float, float] = IDENTITY_QUAT
    on_spawned: Callable[[uuid.UUID], None] | None = None

    def __call__(self, sim: Simulation) -> None:
        identity = sim.add_piece(self.piece, self.position, self.orientation)
        if self.on_spawned is not None:
            self.on_spawned(identity)


@dataclass(frozen=True)
class ActivateStage:
    vessel_id: str

    def __call__(self, sim: Simulation) -> None:
        sim.staging.activate_next_stage(self.vessel_id)
