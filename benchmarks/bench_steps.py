"""
Microbenchmark: time per tick vs number of entities.
Run:
  python benchmarks/bench_steps.py
"""
import time
import numpy as np
from flight_sim import Simulation, PieceDescriptor
from flight_sim.profiler import Profiler


def run(n: int, ticks: int = 300):
    prof = Profiler()
    sim = Simulation(profiler=prof)

    rng = np.random.default_rng(12345)  # determinism (no randomness elsewhere)

    # half engines at full throttle, half falling debris, in a loose grid
    side = int(np.ceil(np.sqrt(n)))
    for k in range(n):
        ix, iy = k % side, k // side
        pos = (2.0 * ix, 1000.0 + 2.0 * iy, 0.01 * float(rng.normal()))
        if k % 2:
            piece = PieceDescriptor(f"e{k}", "engine", 1500.0,
                                    {"thrust": 2e4, "isp": 280.0, "dry_mass": 500.0, "fuel": 1000.0})
            eid = sim.add_piece(piece, position=pos)
            sim.set_throttle(eid, 1.0)
        else:
            eid = sim.add_piece(PieceDescriptor(f"d{k}", "tank", 50.0), position=pos)
            sim.store.velocities[sim.store.index_of(eid)] = (0.0, -50.0 * float(rng.random()), 0.0)

    # warmup
    for _ in range(30):
        sim.tick()
    prof.stats.reset()

    t0 = time.perf_counter()
    for _ in range(ticks):
        sim.tick()
    t1 = time.perf_counter()

    per_tick = (t1 - t0) / ticks
    return per_tick, prof.stats.summary()


if __name__ == "__main__":
    for n in [10, 100, 1000, 5000]:
        per_tick, summary = run(n)
        print(f"N={n:5d}  tick={1e3*per_tick:8.3f} ms  ticks/s={1/per_tick:8.1f}")
        for k in ["commands", "controls", "forces", "integrate"]:
            if k in summary:
                print(" ", k, summary[k])
        print()
