# MIT License (see LICENSE)
"""
flight_sim - Flight dynamics and orbital planning for modular vessels.

This package simulates vessels assembled from pieces (engines, tanks,
structure) under thrust, gravity and atmospheric drag, and propagates
orbits in double precision for maneuver planning.

Main entry points:
    - Simulation: The owned simulation context and tick loop.
    - EntityStateStore: Structure-of-arrays state for every piece.
    - PieceDescriptor, Part, Vessel: Catalog records and hierarchy.
    - SimulationConfig: Tick loop tuning.

Submodules:
    - core: Force generators, integrators, motion stepper.
    - orbit: Two-body propagation, Keplerian elements, maneuvers.
    - backend: Rigid-body backend protocol and analytic fallback.
    - commands, events, staging: Tick loop collaborators.
    - resources: Per-part tanks and engine propellant feed.

Example:
    from flight_sim import Simulation, PieceDescriptor

    sim = Simulation()
    tank = sim.add_piece(PieceDescriptor("t1", "tank", 1200.0, {"fuel": 1000.0}),
                         position=(0, 100, 0))
    sim.run_for(1.0)
"""
from .simulation import Simulation, SimulationMetrics
from .state import EntityStateStore, StoreSnapshot
from .types import PieceDescriptor, EngineDescriptor, PieceConfig, Part, Vessel, DescriptorError
from .config import SimulationConfig
from .atmosphere import AtmosphereModel
from .backend import RigidBodyBackend, AnalyticBackend
from .resources import ResourceFlowSystem, ResourceTank, ResourceType

__all__ = [
    # Simulation
    "Simulation",
    "SimulationMetrics",
    "SimulationConfig",
    # State
    "EntityStateStore",
    "StoreSnapshot",
    # Descriptors
    "PieceDescriptor",
    "EngineDescriptor",
    "PieceConfig",
    "Part",
    "Vessel",
    "DescriptorError",
    # Environment / backend
    "AtmosphereModel",
    "RigidBodyBackend",
    "AnalyticBackend",
    # Resources
    "ResourceFlowSystem",
    "ResourceTank",
    "ResourceType",
]
