"""
Signal Statistics Module

Computes summary statistics from simulation runs.

- compute_signal_stats(run, name) -> SignalStats
- compute_run_stats(run) -> RunStats

Non-finite samples (nan, inf) are ignored; the invariant checks report them.
"""

import logging
import math

from .models import RunStats, SignalStats, SimulationRun

logger = logging.getLogger(__name__)


def compute_signal_stats(run: SimulationRun, name: str) -> SignalStats:
    """
    Compute statistics for a single signal.

    Pure function: does not mutate inputs, no I/O.

    Raises:
        KeyError: if the signal does not exist
        ValueError: if the signal has no finite samples
    """
    samples = run.get_signal(name)
    finite = [
        (t, v) for t, v in zip(run.time, samples)
        if math.isfinite(t) and math.isfinite(v)
    ]
    if not finite:
        raise ValueError(f"Signal '{name}' has no finite samples")

    t_min, v_min = min(finite, key=lambda pair: pair[1])
    t_max, v_max = max(finite, key=lambda pair: pair[1])
    values = [v for _, v in finite]

    return SignalStats(
        name=name,
        unit=run.units.get(name),
        count=len(values),
        min=v_min,
        max=v_max,
        mean=math.fsum(values) / len(values),
        initial=values[0],
        final=values[-1],
        time_of_min=t_min,
        time_of_max=t_max,
    )


def compute_run_stats(run: SimulationRun) -> RunStats:
    """
    Compute statistics for every signal in a run.

    Raises:
        ValueError: if any signal has no finite samples
    """
    signals = {name: compute_signal_stats(run, name) for name in run.signal_names()}

    stats = RunStats(
        run_id=run.run_id,
        sample_count=len(run.time),
        duration=run.duration(),
        signals=signals,
    )
    logger.debug(
        "compute_run_stats: run=%s samples=%d signals=%d",
        stats.run_id,
        stats.sample_count,
        len(stats.signals),
    )
    return stats
