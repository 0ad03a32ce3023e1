import numpy as np
import pytest

from flight_sim import PieceDescriptor
from flight_sim.backend import AnalyticBackend, RigidBodyBackend
from flight_sim.core import ForceIntegrator, MotionStepper, linear_momentum, kinetic_energy
from flight_sim.profiler import Profiler
from flight_sim.state import EntityStateStore
from flight_sim.core.integrators import quat_mul_many
from flight_sim.util import quat_from_axis_angle, quat_mul, quat_rotate


def _store_with(n=1, mass=10.0, altitude=100.0):
    store = EntityStateStore()
    for k in range(n):
        store.add_entity(PieceDescriptor(f"p{k}", "cockpit", mass), position=(k, altitude, 0))
    return store


def test_outer_dt_clamped_and_substepped():
    store = _store_with()
    stepper = MotionStepper()
    forces = ForceIntegrator()

    advanced = stepper.step(store, forces, 1.0)
    assert advanced == pytest.approx(1.0 / 120.0)
    assert stepper.steps_taken == 4

    assert stepper.step(store, forces, 0.0) == 0.0
    assert stepper.step(store, forces, -1.0) == 0.0
    assert stepper.steps_taken == 4


def test_invalid_stepper_settings():
    with pytest.raises(ValueError):
        MotionStepper(substeps=0)
    with pytest.raises(ValueError):
        MotionStepper(max_dt=0.0)


def test_forces_cleared_each_substep():
    """
    Gravity alone: after a step the accumulator holds exactly m g,
    not 4 m g from the four sub-steps.
    """
    store = _store_with(mass=10.0)
    MotionStepper().step(store, ForceIntegrator(enable_drag=False), 1 / 120)
    assert np.allclose(store.forces[0], (0, -98.1, 0), rtol=1e-6)
    assert np.allclose(store.accelerations[0], (0, -9.81, 0), rtol=1e-6)


def test_momentum_conserved_without_forces():
    store = _store_with(n=3, mass=2.0)
    store.velocities[:] = [(1, 0, 0), (-2, 1, 0), (0, 0, 3)]
    store.set_mass(1, 5.0)
    p0 = linear_momentum(store)
    e0 = kinetic_energy(store)

    stepper = MotionStepper()
    forces = ForceIntegrator(gravity=(0, 0, 0), enable_drag=False)
    for _ in range(100):
        stepper.step(store, forces, 1 / 120)

    assert np.allclose(linear_momentum(store), p0)
    assert kinetic_energy(store) == pytest.approx(e0)


def test_spin_rotates_orientation():
    """
    Constant ω about Z with no torque for t seconds:
      q(t) = axis_angle(Z, |ω| t), still unit length.
    """
    store = _store_with()
    store.angular_velocities[0] = (0, 0, 0.5)
    stepper = MotionStepper()
    forces = ForceIntegrator(gravity=(0, 0, 0), enable_drag=False)
    for _ in range(240):
        stepper.step(store, forces, 1 / 120)

    q = store.orientations[0].astype(np.float64)
    expected = quat_from_axis_angle((0, 0, 1), 0.5 * 2.0)
    print("q", q, "expected", expected)
    assert np.linalg.norm(q) == pytest.approx(1.0, abs=1e-6)
    assert np.allclose(q, expected, atol=1e-4)
    assert np.allclose(quat_rotate(q, (1, 0, 0)), (np.cos(1.0), np.sin(1.0), 0), atol=1e-4)


def test_slow_spin_keeps_orientation():
    store = _store_with()
    store.angular_velocities[0] = (0, 5e-4, 0)
    stepper = MotionStepper()
    forces = ForceIntegrator(gravity=(0, 0, 0), enable_drag=False)
    for _ in range(60):
        stepper.step(store, forces, 1 / 120)
    assert np.array_equal(store.orientations[0], np.array([1, 0, 0, 0], dtype=np.float32))


def test_torque_spins_up_with_inverse_mass():
    """ω(t) = τ inv_m t for a constant torque from rest."""
    store = _store_with(mass=4.0)
    stepper = MotionStepper()
    forces = ForceIntegrator(gravity=(0, 0, 0), enable_drag=False)
    store.control_torques[0] = (0, 2.0, 0)
    for _ in range(120):
        stepper.step(store, forces, 1 / 120)
    assert store.angular_velocities[0][1] == pytest.approx(0.5, rel=1e-4)


def test_analytic_backend_matches_integrator():
    """Both paths apply x += v h + ½ a h², v += a h for constant forces."""
    a = _store_with(n=2, mass=3.0)
    b = _store_with(n=2, mass=3.0)
    for store in (a, b):
        store.velocities[:] = [(5, 20, 0), (0, -3, 1)]
    backend = AnalyticBackend(b)
    assert isinstance(backend, RigidBodyBackend)

    forces = ForceIntegrator(enable_drag=False)
    s1, s2 = MotionStepper(), MotionStepper()
    for _ in range(60):
        s1.step(a, forces, 1 / 120)
        s2.step(b, forces, 1 / 120, backend)

    assert backend.steps == 60 * 4
    assert np.allclose(a.positions, b.positions, atol=1e-4)
    assert np.allclose(a.velocities, b.velocities, atol=1e-5)


def test_analytic_backend_unknown_handle():
    store = _store_with()
    backend = AnalyticBackend(store)
    backend.add_force(7, (1, 2, 3))
    backend.step(0.1)
    assert np.allclose(backend.get_linear_velocity(7), 0)
    assert np.allclose(backend.get_linear_velocity(0), 0)


def test_profiler_sections():
    prof = Profiler()
    stepper = MotionStepper(profiler=prof)
    store = _store_with()
    stepper.step(store, ForceIntegrator(), 1 / 120)

    summary = prof.stats.summary()
    assert summary["forces"]["n"] == 4
    assert summary["integrate"]["n"] == 4
    assert summary["integrate"]["total_ms"] >= 0.0
    prof.stats.reset()
    assert prof.stats.summary() == {}


def test_quaternion_composition():
    """Two turns about one axis compose into a single turn of the summed angle."""
    z = (0, 0, 1)
    q = quat_mul(quat_from_axis_angle(z, 0.3), quat_from_axis_angle(z, 0.4))
    assert np.allclose(q, quat_from_axis_angle(z, 0.7))

    a = np.stack([quat_from_axis_angle((1, 0, 0), 0.2), quat_from_axis_angle((0, 1, 0), 1.1)])
    b = np.stack([quat_from_axis_angle((0, 1, 0), -0.5), quat_from_axis_angle((1, 1, 0), 0.9)])
    batched = quat_mul_many(a, b)
    for k in range(2):
        assert np.allclose(batched[k], quat_mul(a[k], b[k]))
