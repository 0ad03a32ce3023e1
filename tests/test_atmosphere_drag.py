import numpy as np
import pytest

from flight_sim import Simulation, SimulationConfig, PieceDescriptor
from flight_sim.atmosphere import AtmosphereModel, density
from flight_sim.core.forces import apply_atmospheric_drag
from flight_sim.state import EntityStateStore


def test_density_profile():
    """
    rho(h) = 1.225 exp(-h / 8500), 0 above 150 km, ground value below 0.
    """
    assert density(0.0) == pytest.approx(1.225)
    assert density(8500.0) == pytest.approx(1.225 / np.e)
    assert density(-500.0) == density(0.0)
    assert density(150_000.0) > 0.0
    assert density(150_000.1) == 0.0
    assert density(400_000.0) == 0.0

    h = np.linspace(0.0, 150_000.0, 301)
    rho = density(h)
    assert isinstance(rho, np.ndarray)
    assert np.all(np.diff(rho) < 0)


def test_custom_atmosphere():
    thin = AtmosphereModel(rho0=0.02, scale_height=11_100.0, ceiling=120_000.0)
    assert thin.density(0.0) == pytest.approx(0.02)
    assert thin.density(130_000.0) == 0.0
    with pytest.raises(ValueError):
        AtmosphereModel(scale_height=0.0)


def _falling_tank(store, altitude, vy):
    eid = store.add_entity(PieceDescriptor("t", "tank", 100.0), position=(0, altitude, 0))
    i = store.index_of(eid)
    store.velocities[i] = (0, vy, 0)
    return i


def test_drag_force_magnitude_and_direction():
    """
    F = 0.5 rho Cd A v², opposite v.
    tank: Cd = 0.6, A = 1.2; at 1 km falling at 100 m/s.
    """
    store = EntityStateStore()
    i = _falling_tank(store, 1000.0, -100.0)
    atm = AtmosphereModel()

    apply_atmospheric_drag(store, atm)
    expected = 0.5 * atm.density(1000.0) * 0.6 * 1.2 * 100.0 ** 2
    print("drag", store.forces[i], "expected", expected)

    assert store.forces[i][1] == pytest.approx(expected, rel=1e-5)
    assert store.forces[i][0] == 0.0 and store.forces[i][2] == 0.0


def test_drag_skipped_above_ceiling_and_at_rest():
    store = EntityStateStore()
    high = _falling_tank(store, 90_000.0, -2000.0)
    slow = _falling_tank(store, 0.0, -0.001)
    apply_atmospheric_drag(store, AtmosphereModel())
    assert np.allclose(store.forces[high], 0)
    assert np.allclose(store.forces[slow], 0)


def test_freefall_without_drag():
    """
    Analytic (constant g):
      y(t) = y0 + 1/2 g t^2
      v(t) = g t
    """
    g = -9.81
    y0 = 1000.0
    sim = Simulation(config=SimulationConfig(enable_drag=False))
    eid = sim.add_piece(PieceDescriptor("c", "cockpit", 500.0), position=(0, y0, 0))

    ticks = sim.run_for(1.0)
    T = sim.time
    i = sim.store.index_of(eid)
    y_exp = y0 + 0.5 * g * T * T
    v_exp = g * T
    print("freefall y", sim.store.positions[i][1], "exp", y_exp)
    print("freefall v", sim.store.velocities[i][1], "exp", v_exp)

    assert ticks == 120
    assert T == pytest.approx(1.0)
    assert abs(sim.store.positions[i][1] - y_exp) / y_exp <= 1e-4
    assert abs(sim.store.velocities[i][1] - v_exp) / abs(v_exp) <= 1e-4


def test_drag_slows_fall_without_reversing():
    """A fast fall through dense air decelerates but never turns upward."""
    sim = Simulation()
    eid = sim.add_piece(PieceDescriptor("w", "wing", 20.0), position=(0, 2000.0, 0))
    i = sim.store.index_of(eid)
    sim.store.velocities[i] = (0, -300.0, 0)

    speeds = []
    for _ in range(240):
        sim.tick()
        speeds.append(-float(sim.store.velocities[i][1]))

    assert all(s > 0 for s in speeds)
    assert speeds[-1] < 300.0
    # terminal speed at ground density is sqrt(2 m g / (rho Cd A)) ≈ 56.6 m/s
    v_t = np.sqrt(2 * 20.0 * 9.81 / (1.225 * 0.1 * 2.0))
    assert speeds[-1] > 0.5 * v_t
