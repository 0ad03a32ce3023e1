import pytest

from flight_sim.constants import PIECE_TYPE_TABLE, DEFAULT_PIECE_TYPE
from flight_sim.types import (
    PieceDescriptor, PieceConfig, EngineDescriptor, Part, Vessel, DescriptorError,
)


def test_engine_resolved_from_properties():
    piece = PieceDescriptor("e1", "engine", 5750.0,
                            {"thrust": 150e3, "isp": 300.0, "dry_mass": 750.0,
                             "fuel": 5000.0, "gimbal": 5.0})
    cfg = PieceConfig.from_descriptor(piece)

    assert cfg.piece_type == "engine"
    assert cfg.fuel == 5000.0
    assert (cfg.drag_coefficient, cfg.cross_section) == PIECE_TYPE_TABLE["engine"]
    assert cfg.engine == EngineDescriptor(thrust=150e3, isp=300.0, dry_mass=750.0, gimbal=5.0)


def test_dry_mass_defaults_to_mass_minus_fuel():
    piece = PieceDescriptor("e1", "engine", 1200.0, {"thrust": 1e4, "isp": 280.0, "fuel": 1000.0})
    cfg = PieceConfig.from_descriptor(piece)
    assert cfg.engine.dry_mass == pytest.approx(200.0)


def test_non_engine_and_unknown_type():
    cfg = PieceConfig.from_descriptor(PieceDescriptor("x", "antenna", 3.0))
    assert cfg.engine is None
    assert cfg.fuel == 0.0
    assert (cfg.drag_coefficient, cfg.cross_section) == DEFAULT_PIECE_TYPE

    # thrust without isp is not an engine
    cfg = PieceConfig.from_descriptor(PieceDescriptor("y", "tank", 3.0, {"thrust": 10.0}))
    assert cfg.engine is None


@pytest.mark.parametrize("props", [
    {"thrust": 1e3, "isp": 0.0},
    {"thrust": 1e3, "isp": -5.0},
    {"thrust": -1.0, "isp": 300.0},
    {"thrust": 1e3, "isp": float("nan")},
    {"fuel": -1.0},
    {"thrust": 1e3, "isp": 300.0, "dry_mass": 500.0},
    # 100 kg piece cannot hold 60 kg of fuel on a 50 kg dry engine
    {"thrust": 1e3, "isp": 300.0, "dry_mass": 50.0, "fuel": 60.0},
])
def test_malformed_descriptors_rejected(props):
    with pytest.raises(DescriptorError):
        PieceConfig.from_descriptor(PieceDescriptor("bad", "engine", 100.0, props))


def test_descriptor_error_is_value_error():
    assert issubclass(DescriptorError, ValueError)


def test_from_dict():
    piece = PieceDescriptor.from_dict({
        "id": 7, "type": "tank", "mass": "250", "name": "Small tank",
        "properties": {"fuel": 200},
    })
    assert piece.id == "7"
    assert piece.mass == 250.0
    assert piece.properties == {"fuel": 200.0}

    with pytest.raises(DescriptorError):
        PieceDescriptor.from_dict({"type": "tank", "mass": 1.0})
    with pytest.raises(DescriptorError):
        PieceDescriptor.from_dict({"id": "t", "mass": "heavy"})


def test_vessel_hierarchy():
    engine = PieceDescriptor("e", "engine", 500.0, {"thrust": 1e4, "isp": 300.0})
    tank = PieceDescriptor("t", "tank", 1500.0, {"fuel": 1400.0})
    capsule = PieceDescriptor("c", "cockpit", 800.0)
    vessel = Vessel("v", [Part("lower", [engine, tank]), Part("upper", [capsule])])

    assert vessel.mass == pytest.approx(2800.0)
    assert vessel.parts[0].mass == pytest.approx(2000.0)
    assert [p.id for _, p in vessel.pieces()] == ["e", "t", "c"]


def test_engine_fuel_must_fit_above_dry_mass():
    """mass = dry + fuel is accepted; more fuel than mass - dry is not."""
    ok = PieceConfig("engine", 1000.0, fuel=600.0,
                     engine=EngineDescriptor(thrust=2e4, isp=250.0, dry_mass=400.0))
    assert ok.fuel == 600.0
    # extra structure beyond dry + fuel is allowed: fuel runs out first
    PieceConfig("engine", 1100.0, fuel=600.0,
                engine=EngineDescriptor(thrust=2e4, isp=250.0, dry_mass=400.0))

    with pytest.raises(DescriptorError, match="exceeds"):
        PieceConfig("engine", 1000.0, fuel=700.0,
                    engine=EngineDescriptor(thrust=2e4, isp=250.0, dry_mass=400.0))
    with pytest.raises(DescriptorError):
        PieceConfig.from_descriptor(PieceDescriptor(
            "e", "engine", 1000.0, {"thrust": 2e4, "isp": 250.0, "dry_mass": 400.0, "fuel": 700.0}))
