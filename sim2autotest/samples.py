"""
Sample Data Module

Deterministic demo data:
- build_sample_run() -> SimulationRun: first-order step response
- build_sample_suite() -> ExpectationSuite: expectations that all pass on it
"""

import math

from .models import (
    Expectation,
    ExpectationSuite,
    ExpectationType,
    MonotonicDirection,
    SimulationRun,
)

SAMPLE_TAU = 0.5
SAMPLE_DT = 0.1
SAMPLE_END = 5.0


def build_sample_run() -> SimulationRun:
    """
    Build a first-order step response run.

    output(t) = 1 - exp(-t / tau), tau = 0.5 s, sampled every 0.1 s from 0 to 5 s.
    command is a constant unit step.
    """
    n = int(round(SAMPLE_END / SAMPLE_DT)) + 1
    time = [round(i * SAMPLE_DT, 10) for i in range(n)]
    output = [1.0 - math.exp(-t / SAMPLE_TAU) for t in time]
    command = [1.0] * n

    return SimulationRun(
        run_id="sample_step_response",
        metadata={"model": "first_order", "tau": str(SAMPLE_TAU)},
        time=time,
        signals={"command": command, "output": output},
        units={"command": "V", "output": "V"},
    )


def build_sample_suite() -> ExpectationSuite:
    """
    Build a suite describing the sample run.

    The 2% band around 1.0 is entered at t = tau * ln(50) ~= 1.96 s,
    so the first in-band sample is at 2.0 s.
    """
    return ExpectationSuite(
        name="sample_step_response",
        description="First-order step response reaches and holds its setpoint",
        default_tolerance=1e-6,
        expectations=[
            Expectation(
                id="output_bounded",
                signal="output",
                kind=ExpectationType.RANGE,
                min_value=0.0,
                max_value=1.0,
            ),
            Expectation(
                id="output_rises",
                signal="output",
                kind=ExpectationType.MONOTONIC,
                direction=MonotonicDirection.INCREASING,
                strict=True,
                tolerance=0.0,
            ),
            Expectation(
                id="output_settles",
                signal="output",
                kind=ExpectationType.SETTLING,
                target=1.0,
                tolerance=0.02,
                settle_by=2.5,
            ),
            Expectation(
                id="output_final",
                signal="output",
                kind=ExpectationType.FINAL_VALUE,
                target=1.0,
                tolerance=0.001,
            ),
            Expectation(
                id="command_constant",
                signal="command",
                kind=ExpectationType.RANGE,
                min_value=1.0,
                max_value=1.0,
            ),
        ],
    )
