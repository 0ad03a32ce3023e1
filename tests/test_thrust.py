import numpy as np
import pytest

from flight_sim import Simulation, SimulationConfig, PieceDescriptor
from flight_sim.constants import G0
from flight_sim.core.forces import apply_thrust
from flight_sim.core.invariants import dry_mass_violations
from flight_sim.state import EntityStateStore
from flight_sim.util import quat_from_axis_angle


def _engine(fuel=5000.0, dry=750.0, thrust=150e3, isp=300.0):
    return PieceDescriptor("e1", "engine", dry + fuel,
                           {"thrust": thrust, "isp": isp, "dry_mass": dry, "fuel": fuel})


def test_single_burn_mass_flow():
    """
    mdot = T / (Isp g0) * throttle
    150 kN, 300 s, dt = 1/60 s  ->  Δm ≈ 0.849 kg
    """
    store = EntityStateStore()
    eid = store.add_entity(_engine())
    i = store.index_of(eid)
    dt = 1.0 / 60.0

    burned = apply_thrust(store, i, 1.0, dt)
    expected = 150e3 / (300.0 * G0) * dt
    print("burned", burned, "expected", expected)

    assert burned == pytest.approx(expected, rel=1e-12)
    assert burned == pytest.approx(0.849, abs=1e-3)
    assert store.masses[i] == pytest.approx(5750.0 - expected, rel=1e-12)
    assert store.fuels[i] == pytest.approx(5000.0 - expected, rel=1e-12)
    assert store.inverse_masses[i] == pytest.approx(1.0 / store.masses[i])
    # identity orientation thrusts along local +Z
    assert np.allclose(store.control_forces[i], (0, 0, 150e3))


def test_throttle_scales_force_and_flow():
    store = EntityStateStore()
    i = store.index_of(store.add_entity(_engine()))
    burned = apply_thrust(store, i, 0.5, 1.0)
    assert burned == pytest.approx(0.5 * 150e3 / (300.0 * G0))
    assert np.allclose(store.control_forces[i], (0, 0, 75e3))

    # throttle above 1 is clamped
    store.clear_control_forces()
    apply_thrust(store, i, 3.0, 0.0)
    assert np.allclose(store.control_forces[i], (0, 0, 150e3))


def test_thrust_follows_orientation():
    """A +90° turn about X maps local +Z onto world -Y."""
    q = quat_from_axis_angle((1, 0, 0), np.pi / 2)
    store = EntityStateStore()
    i = store.index_of(store.add_entity(_engine(), orientation=q))
    apply_thrust(store, i, 1.0, 0.01)
    f = store.control_forces[i] / 150e3
    assert np.allclose(f, (0, -1, 0), atol=1e-6)


def test_mass_never_below_dry_mass():
    """
    5 kg of fuel at ~51 kg/s is gone within one 1 s burn:
      mass clamps at dry mass exactly, fuel at zero.
    """
    store = EntityStateStore()
    i = store.index_of(store.add_entity(_engine(fuel=5.0)))
    burned = apply_thrust(store, i, 1.0, 1.0)

    assert burned == pytest.approx(5.0)
    assert store.masses[i] == 750.0
    assert store.fuels[i] == 0.0
    assert len(dry_mass_violations(store)) == 0

    # empty tank: no force, no mass change
    store.clear_control_forces()
    assert apply_thrust(store, i, 1.0, 1.0) == 0.0
    assert np.allclose(store.control_forces[i], 0)
    assert store.masses[i] == 750.0


def test_noop_cases():
    store = EntityStateStore()
    tank = store.index_of(store.add_entity(PieceDescriptor("t", "tank", 100.0, {"fuel": 90.0})))
    eng = store.index_of(store.add_entity(_engine()))

    assert apply_thrust(store, tank, 1.0, 1.0) == 0.0
    assert store.fuels[tank] == 90.0
    assert apply_thrust(store, eng, 0.0, 1.0) == 0.0
    assert apply_thrust(store, eng, -1.0, 1.0) == 0.0
    assert np.allclose(store.control_forces, 0)
    assert store.masses[eng] == 5750.0


def test_zero_thrust_engine_is_noop():
    store = EntityStateStore()
    i = store.index_of(store.add_entity(_engine(thrust=0.0)))
    assert apply_thrust(store, i, 1.0, 1.0) == 0.0
    assert store.masses[i] == 5750.0


def test_fuel_monotonic_over_long_burn():
    sim = Simulation(config=SimulationConfig(enable_drag=False))
    eid = sim.add_piece(_engine(fuel=50.0), position=(0, 1000, 0))
    sim.set_throttle(eid, 1.0)

    fuels = []
    for _ in range(120):
        sim.tick()
        fuels.append(float(sim.store.fuels[sim.store.index_of(eid)]))

    assert all(b <= a for a, b in zip(fuels, fuels[1:]))
    assert fuels[-1] == 0.0
    assert sim.store.masses[0] == pytest.approx(750.0)


def test_end_to_end_tick():
    """
    One tick at dt = 1/60 with full throttle:
      mass and fuel both drop by 150000 / (300 * 9.80665) / 60 ≈ 0.849 kg,
      and the engine accelerates along +Z.
    """
    sim = Simulation(config=SimulationConfig(gravity=(0.0, 0.0, 0.0), enable_drag=False))
    eid = sim.add_piece(_engine())
    sim.set_throttle(eid, 1.0)

    sim.tick(1.0 / 60.0)

    i = sim.store.index_of(eid)
    dm = 150000.0 / (300.0 * G0) / 60.0
    print("mass", sim.store.masses[i], "fuel", sim.store.fuels[i], "dm", dm)
    assert 5750.0 - sim.store.masses[i] == pytest.approx(dm, rel=1e-9)
    assert 5000.0 - sim.store.fuels[i] == pytest.approx(dm, rel=1e-9)
    assert sim.store.velocities[i][2] > 0
    assert np.allclose(sim.store.velocities[i][:2], 0)


def test_sim_apply_thrust_unknown_identity():
    import uuid

    sim = Simulation()
    assert sim.apply_thrust(uuid.uuid4(), 1.0, 0.1) is None
    assert not sim.set_throttle(uuid.uuid4(), 1.0)


def test_mass_only_leaves_through_propellant():
    """Δ(total mass) == Δ(total fuel) over a multi-engine burn."""
    from flight_sim.core import total_mass, total_fuel

    sim = Simulation()
    a = sim.add_piece(_engine(fuel=30.0), position=(0, 500, 0))
    sim.add_piece(_engine(fuel=3000.0), position=(5, 500, 0))
    sim.add_piece(PieceDescriptor("t", "tank", 400.0, {"fuel": 350.0}), position=(10, 500, 0))
    for eid in sim.store.identities():
        sim.set_throttle(eid, 1.0)
    m0, f0 = total_mass(sim.store), total_fuel(sim.store)

    sim.run_for(1.0)

    dm = m0 - total_mass(sim.store)
    df = f0 - total_fuel(sim.store)
    assert dm > 0
    assert dm == pytest.approx(df, rel=1e-9)
    assert sim.store.fuels[sim.store.index_of(a)] == 0.0
    assert len(dry_mass_violations(sim.store)) == 0


@pytest.mark.parametrize("throttle", [0.1, 0.5, 1.0])
@pytest.mark.parametrize("dt", [1 / 240, 1 / 60, 0.5, 3.0])
def test_dry_mass_holds_for_any_throttle_and_dt(throttle, dt):
    """Burn a small tank dry at several throttles and tick lengths."""
    store = EntityStateStore()
    i = store.index_of(store.add_entity(_engine(fuel=20.0)))
    total = 0.0
    for _ in range(200):
        total += apply_thrust(store, i, throttle, dt)
        assert len(dry_mass_violations(store)) == 0
        assert store.fuels[i] >= 0.0
        if store.fuels[i] == 0.0:
            break

    assert store.masses[i] >= 750.0
    assert total == pytest.approx(5770.0 - store.masses[i], rel=1e-9)
