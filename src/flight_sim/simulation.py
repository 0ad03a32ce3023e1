# MIT License (see LICENSE)
"""
The simulation context and tick loop.

Simulation owns everything a tick touches: the entity store, the force
integrator, the motion stepper, the optional rigid-body backend, the
per-part resource tanks, the command queue and the event bus. There is no global physics state; callers
create a Simulation and pass it around.

One tick:
    1. Drain the command queue (commands run here, on the tick thread).
    2. Apply thrust at each engine's throttle, feeding dry engines from
       their part's tanks.
    3. Sub-step: zero forces, accumulate thrust + gravity + drag, integrate.
    4. Clear controlled forces and publish TickCompleted.

Thrust a command or caller applies before the tick is integrated by it.

The loop is synchronous and single-threaded. stop() only takes effect
between ticks.

Example:
    sim = Simulation()
    eid = sim.add_piece(PieceDescriptor("e1", "engine", 5750.0,
                                        {"thrust": 150e3, "isp": 300.0,
                                         "dry_mass": 750.0, "fuel": 5000.0}))
    sim.set_throttle(eid, 1.0)
    sim.run_for(1.0)
"""
from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass, field

from .backend import RigidBodyBackend
from .commands import CommandQueue
from .config import SimulationConfig
from .core.forces import ForceIntegrator, apply_thrust
from .core.stepper import MotionStepper
from .events import EventBus, EntityRemoved, TickCompleted
from .profiler import Profiler, section
from .resources import ResourceFlowSystem, ResourceTank, ResourceType, declared_tanks
from .staging import StagingSystem
from .state import EntityStateStore
from .types import PieceConfig, PieceDescriptor, Vessel
from .util import IDENTITY_QUAT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SimulationMetrics:
    active_bodies: int
    ticks: int
    substeps_taken: int
    last_dt: float
    substeps_per_frame: int


@dataclass
class Simulation:
    """
    Attributes:
        config: Tick loop tuning.
        store: Entity state for every simulated piece.
        backend: Optional rigid-body backend; None integrates analytically.
        profiler: Optional section timer.
        commands: Thread-safe queue drained at the start of each tick.
        events: Event bus for tick/staging notifications.
        resources: Per-part tanks, keyed by (vessel id, part id); set up in
            __post_init__.
        time: Simulated time in seconds.
        ticks: Completed ticks.
    """
    config: SimulationConfig = field(default_factory=SimulationConfig)
    store: EntityStateStore = field(default_factory=EntityStateStore)
    backend: RigidBodyBackend | None = None
    profiler: Profiler | None = None
    commands: CommandQueue = field(default_factory=CommandQueue)
    events: EventBus = field(default_factory=EventBus)
    time: float = 0.0
    ticks: int = 0

    def __post_init__(self) -> None:
        cfg = self.config
        self.forces = ForceIntegrator(
            gravity=cfg.gravity,
            atmosphere=cfg.atmosphere,
            drag_ceiling=cfg.drag_ceiling,
            min_drag_speed=cfg.min_drag_speed,
            enable_drag=cfg.enable_drag,
        )
        self.stepper = MotionStepper(
            substeps=cfg.substeps,
            max_dt=cfg.max_dt,
            angular_threshold=cfg.angular_threshold,
            profiler=self.profiler,
        )
        self.staging = StagingSystem(self)
        self.resources = ResourceFlowSystem(self.store)
        self._running = False
        self._last_dt = 0.0

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def add_piece(
        self,
        piece: PieceDescriptor | PieceConfig,
        position=(0.0, 0.0, 0.0),
        orientation=IDENTITY_QUAT,
    ) -> uuid.UUID:
        """Create an entity for a piece; see EntityStateStore.add_entity."""
        return self.store.add_entity(piece, position, orientation)

    def spawn_vessel(
        self,
        vessel: Vessel,
        position=(0.0, 0.0, 0.0),
        orientation=IDENTITY_QUAT,
        stage_by_part: bool = False,
    ) -> dict[str, uuid.UUID]:
        """
        Add every piece of a vessel at the given pose.

        All descriptors are validated before any entity is created, so a bad
        piece leaves the store untouched.

        Every piece is assigned to its part for propellant feed. Tank pieces
        (fuel but no engine) become FUEL tanks backed by their entity; the
        "oxidizer", "monoprop" and "electric_charge" properties of any piece
        become massless tanks of that type.

        Args:
            vessel: Vessel to spawn.
            position: Spawn position of every piece (local frame).
            orientation: Spawn orientation of every piece.
            stage_by_part: Register one stage per part, last part first.

        Returns:
            Mapping of catalog piece id to entity identity.

        Raises:
            DescriptorError: If any piece fails validation.
        """
        resolved = [
            (part, piece, PieceConfig.from_descriptor(piece), declared_tanks(piece))
            for part, piece in vessel.pieces()
        ]
        ids: dict[str, uuid.UUID] = {}
        by_part: dict[str, list[uuid.UUID]] = {}
        for part, piece, cfg, extra in resolved:
            eid = self.store.add_entity(cfg, position, orientation)
            ids[piece.id] = eid
            by_part.setdefault(part.id, []).append(eid)
            self._register_resources((vessel.id, part.id), cfg, extra, eid)
        if stage_by_part:
            for part in reversed(vessel.parts):
                if part.id in by_part:
                    self.staging.register_stage(vessel.id, by_part[part.id])
        logger.info("spawned vessel %s with %d pieces", vessel.id, len(ids))
        return ids

    def _register_resources(
        self,
        part_key: tuple[str, str],
        cfg: PieceConfig,
        extra: list[tuple[ResourceType, float]],
        eid: uuid.UUID,
    ) -> None:
        self.resources.assign(eid, part_key)
        if cfg.engine is None and cfg.fuel > 0:
            self.resources.register_tank(part_key, ResourceTank(ResourceType.FUEL, cfg.fuel, cfg.fuel, eid))
        for kind, amount in extra:
            self.resources.register_tank(part_key, ResourceTank(kind, amount, amount))

    def remove_piece(self, identity: uuid.UUID) -> bool:
        """Remove an entity; unknown identities are a no-op returning False."""
        removed = self.store.remove_entity(identity)
        if removed:
            self.resources.forget(identity)
            self.events.publish(EntityRemoved(identity))
        return removed

    # ------------------------------------------------------------------
    # Controls
    # ------------------------------------------------------------------

    def set_throttle(self, identity: uuid.UUID, throttle: float) -> bool:
        """Store a throttle in [0, 1] for an entity. False for unknown identities."""
        index = self.store.index_of(identity)
        if index is None:
            return False
        self.store.throttles[index] = min(max(float(throttle), 0.0), 1.0)
        return True

    def clear_forces(self) -> None:
        """Clear the controlled forces; tick() does this after integrating them."""
        self.store.clear_control_forces()

    def apply_thrust(self, identity: uuid.UUID, throttle: float, dt: float) -> float | None:
        """
        Apply thrust to one entity by identity.

        Returns the propellant burned (kg), or None for an unknown identity.
        """
        index = self.store.index_of(identity)
        if index is None:
            return None
        return apply_thrust(self.store, index, throttle, dt, self.resources.feed_for(identity))

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def step(self, dt: float) -> float:
        """Run the sub-stepped integration only. Returns simulated time advanced."""
        return self.stepper.step(self.store, self.forces, dt, self.backend)

    def tick(self, dt: float | None = None) -> float:
        """
        Advance one outer tick.

        Propellant is charged for the requested dt; the motion integration
        covers dt clamped to config.max_dt.

        Returns:
            Simulated time advanced.
        """
        dt = float(self.config.fixed_dt if dt is None else dt)
        prof = self.profiler

        with section(prof, "commands"):
            report = self.commands.drain(self)
        if report.failed:
            logger.warning("tick %d: %d of %d commands failed",
                           self.ticks, report.failed, report.executed + report.failed)

        with section(prof, "controls"):
            self.forces.apply_controls(self.store, dt, self.resources)

        advanced = self.step(dt)
        self.clear_forces()
        self.time += advanced
        self.ticks += 1
        self._last_dt = dt
        self.events.publish(TickCompleted(tick=self.ticks, time=self.time, entity_count=len(self.store)))
        return advanced

    def run_for(self, seconds: float) -> int:
        """
        Tick at config.fixed_dt for `seconds` of requested time.

        Stops early if stop() is called (e.g. from an event handler or a
        command). Returns the number of ticks run.
        """
        steps = int(round(seconds / self.config.fixed_dt))
        self._running = True
        logger.info("running %d ticks at dt=%.6f s", steps, self.config.fixed_dt)
        done = 0
        while done < steps and self._running:
            self.tick()
            done += 1
        self._running = False
        return done

    def stop(self) -> None:
        """Request the run loop to stop before the next tick."""
        if self._running:
            logger.info("stop requested at tick %d", self.ticks)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def metrics(self) -> SimulationMetrics:
        return SimulationMetrics(
            active_bodies=len(self.store),
            ticks=self.ticks,
            substeps_taken=self.stepper.steps_taken,
            last_dt=self._last_dt,
            substeps_per_frame=self.stepper.substeps,
        )
