import pytest

from flight_sim import Simulation, SimulationConfig, AtmosphereModel


def test_defaults():
    cfg = SimulationConfig()
    assert cfg.substeps == 4
    assert cfg.max_dt == pytest.approx(1 / 120)
    assert cfg.gravity == (0.0, -9.81, 0.0)
    assert cfg.atmosphere == AtmosphereModel()


def test_from_mapping():
    cfg = SimulationConfig.from_mapping({
        "substeps": "8",
        "gravity": [0, -1.62, 0],
        "atmosphere": {"rho0": 0.0},
        "enable_drag": False,
    })
    assert cfg.substeps == 8
    assert cfg.gravity == (0.0, -1.62, 0.0)
    assert cfg.atmosphere.rho0 == 0.0
    assert not cfg.enable_drag

    sim = Simulation(config=cfg)
    assert sim.stepper.substeps == 8
    assert not sim.forces.enable_drag


def test_from_mapping_rejects_unknown_keys():
    with pytest.raises(ValueError, match="unknown config keys"):
        SimulationConfig.from_mapping({"substep": 2})


@pytest.mark.parametrize("kwargs", [
    {"substeps": 0},
    {"max_dt": 0.0},
    {"fixed_dt": -1.0},
    {"gravity": (0.0, 1.0)},
    {"min_drag_speed": -0.1},
])
def test_invalid_values(kwargs):
    with pytest.raises(ValueError):
        SimulationConfig(**kwargs)


def test_from_env(monkeypatch):
    monkeypatch.setenv("FLIGHT_SIM_SUBSTEPS", "2")
    assert SimulationConfig.from_env().substeps == 2
    base = SimulationConfig(enable_drag=False)
    cfg = SimulationConfig.from_env(base)
    assert cfg.substeps == 2 and not cfg.enable_drag

    monkeypatch.delenv("FLIGHT_SIM_SUBSTEPS")
    assert SimulationConfig.from_env().substeps == 4
