# examples/ascent.py
import logging

from flight_sim import Simulation, PieceDescriptor, Part, Vessel

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

engine = PieceDescriptor("lv-t30", "engine", 5750.0,
                         {"thrust": 150e3, "isp": 300.0, "dry_mass": 750.0, "fuel": 5000.0})
pod = PieceDescriptor("mk1-pod", "cockpit", 840.0)
rocket = Vessel("demo", [Part("booster", [engine]), Part("capsule", [pod])])

sim = Simulation()
ids = sim.spawn_vessel(rocket, position=(0.0, 0.0, 0.0),
                       orientation=(0.7071068, -0.7071068, 0.0, 0.0))  # nose up: local +Z -> world +Y
sim.set_throttle(ids["lv-t30"], 1.0)

sim.run_for(5.0)

i = sim.store.index_of(ids["lv-t30"])
print("t:", sim.time)
print("alt:", sim.store.positions[i][1])
print("vel:", sim.store.velocities[i])
print("mass:", sim.store.masses[i], "fuel:", sim.store.fuels[i])
print(sim.metrics())
