# MIT License (see LICENSE)
"""
Section timing for the tick loop.

Sections recorded by the simulation: "commands", "controls", "forces",
"integrate" and "backend". Timing is opt-in; with no profiler attached the
loop uses a null context and pays nothing.

Example:
    profiler = Profiler()
    sim = Simulation(profiler=profiler)
    sim.run_for(1.0)
    print(profiler.stats.summary()["integrate"]["p95_ms"])
"""
from __future__ import annotations
import time
from collections import defaultdict
from contextlib import contextmanager, nullcontext
from typing import ContextManager, Iterator

import numpy as np


class ProfileStats:
    """Raw timing samples (seconds) per named section."""

    def __init__(self) -> None:
        self.samples: defaultdict[str, list[float]] = defaultdict(list)

    def add(self, name: str, seconds: float) -> None:
        self.samples[name].append(seconds)

    def summary(self) -> dict[str, dict[str, float]]:
        """
        Per section: 'n', 'mean_ms', 'p95_ms', 'max_ms' and 'total_ms'.

        Sections with no samples are omitted.
        """
        report = {}
        for name, seconds in self.samples.items():
            if not seconds:
                continue
            ms = 1e3 * np.asarray(seconds)
            report[name] = {
                "n": int(ms.size),
                "mean_ms": float(ms.mean()),
                "p95_ms": float(np.percentile(ms, 95)),
                "max_ms": float(ms.max()),
                "total_ms": float(ms.sum()),
            }
        return report

    def reset(self) -> None:
        self.samples.clear()


class Profiler:
    """Times `with profiler.section(name):` blocks into a ProfileStats."""

    def __init__(self) -> None:
        self.stats = ProfileStats()

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self.stats.add(name, time.perf_counter() - start)


def section(profiler: Profiler | None, name: str) -> ContextManager[None]:
    """profiler.section(name), or a no-op context when profiling is off."""
    if profiler is None:
        return nullcontext()
    return profiler.section(name)
