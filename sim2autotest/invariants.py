"""
Structural invariant checks for simulation runs.

These functions check properties of runs without raising exceptions,
returning a list of human-readable violation messages instead.
"""

import math

from .models import SimulationRun


def check_run_invariants(run: SimulationRun) -> list[str]:
    """
    Validate a SimulationRun against structural invariants.

    Args:
        run: The run to validate.

    Returns:
        List of violation messages. Empty list means all invariants passed.
    """
    violations = []

    # Invariant 1: all time values are finite
    for idx, t in enumerate(run.time):
        if not math.isfinite(t):
            violations.append(f"time[{idx}]={t} is not finite")

    # Invariant 2: time strictly increasing (only between finite neighbours)
    for idx in range(1, len(run.time)):
        prev, cur = run.time[idx - 1], run.time[idx]
        if math.isfinite(prev) and math.isfinite(cur) and cur <= prev:
            violations.append(
                f"time[{idx}]={cur} is not greater than time[{idx - 1}]={prev}"
            )

    # Invariant 3: all signal values are finite
    for name, samples in run.signals.items():
        for idx, value in enumerate(samples):
            if not math.isfinite(value):
                violations.append(f"Signal {name}[{idx}]={value} is not finite")

    return violations
