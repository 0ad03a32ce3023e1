# examples/plan_transfer.py
import math

from flight_sim.constants import EARTH_MU, EARTH_RADIUS
from flight_sim.orbit import (
    OrbitalState, hohmann_transfer, bi_elliptic_transfer, optimal_transfer_type,
    mission_delta_v, plane_change_delta_v, state_to_elements, find_launch_window,
)

r1 = EARTH_RADIUS + 300e3   # parking orbit
r2 = 4.2164e7               # geostationary radius

parking = OrbitalState((r1, 0.0, 0.0), (0.0, math.sqrt(EARTH_MU / r1), 0.0))
first, second = hohmann_transfer(r1, r2, EARTH_MU, state=parking)

print("transfer:", optimal_transfer_type(r1, r2))
print("burn 1: t=%8.1f s  dv=%7.1f m/s" % (first.time, first.delta_v[0]))
print("burn 2: t=%8.1f s  dv=%7.1f m/s" % (second.time, second.delta_v[0]))
print("total :", round(mission_delta_v([first, second]), 1), "m/s")
print("plane change 28.5 deg at GEO:",
      round(plane_change_delta_v(math.sqrt(EARTH_MU / r2), math.radians(28.5)), 1), "m/s")
print("final elements:", state_to_elements(second.post_state))

bi = bi_elliptic_transfer(r1, 20 * r2, 40 * r2, EARTH_MU)
print("bi-elliptic to 20x GEO:", round(mission_delta_v(bi), 1), "m/s")

# Earth -> Mars with Mars 60 degrees ahead today
day = 86400.0
launch, arrival, dv = find_launch_window(1.496e11, 2.279e11, 0.0, 800 * day, day,
                                         phase0=math.radians(60.0))
print("Mars window: launch day %.0f, arrive day %.0f, %.0f m/s" % (launch / day, arrival / day, dv))
