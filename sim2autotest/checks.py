"""
Check Execution Module

Evaluates expectations against a SimulationRun and assembles a ValidationReport.

Every evaluation is a pure function of (run, expectation, tolerance). Data
problems never raise: a missing signal or an empty time window becomes an
ERROR outcome. Non-finite samples are skipped here; they are reported by the
run invariants instead.
"""

import logging
import math
from typing import Optional

from .config import get_default_tolerance, get_strict_mode
from .invariants import check_run_invariants
from .models import (
    CheckOutcome,
    CheckStatus,
    Expectation,
    ExpectationSuite,
    ExpectationType,
    MonotonicDirection,
    SimulationRun,
    ValidationReport,
)

logger = logging.getLogger(__name__)


def resolve_tolerance(expectation: Expectation, suite: Optional[ExpectationSuite] = None) -> float:
    """Pick the expectation's tolerance, else the suite default, else the configured default."""
    if expectation.tolerance is not None:
        return expectation.tolerance
    if suite is not None and suite.default_tolerance is not None:
        return suite.default_tolerance
    return get_default_tolerance()


def _windowed_samples(run: SimulationRun, expectation: Expectation) -> list[tuple[float, float]]:
    """Return (time, value) pairs inside the expectation's window, finite only."""
    samples = run.signals[expectation.signal]
    window = []
    for t, v in zip(run.time, samples):
        if not (math.isfinite(t) and math.isfinite(v)):
            continue
        if expectation.t_start is not None and t < expectation.t_start:
            continue
        if expectation.t_end is not None and t > expectation.t_end:
            continue
        window.append((t, v))
    return window


def _outcome(
    expectation: Expectation,
    status: CheckStatus,
    message: str,
    observed: Optional[float] = None,
    at_time: Optional[float] = None,
) -> CheckOutcome:
    return CheckOutcome(
        expectation_id=expectation.id,
        signal=expectation.signal,
        kind=expectation.kind,
        status=status,
        message=message,
        observed=observed,
        at_time=at_time,
    )


def _check_range(expectation: Expectation, window: list[tuple[float, float]], tol: float) -> CheckOutcome:
    lo = expectation.min_value
    hi = expectation.max_value
    for t, v in window:
        if lo is not None and v < lo - tol:
            return _outcome(
                expectation, CheckStatus.FAIL,
                f"{expectation.signal}={v:g} at t={t:g} is below minimum {lo:g}",
                observed=v, at_time=t,
            )
        if hi is not None and v > hi + tol:
            return _outcome(
                expectation, CheckStatus.FAIL,
                f"{expectation.signal}={v:g} at t={t:g} is above maximum {hi:g}",
                observed=v, at_time=t,
            )

    values = [v for _, v in window]
    bounds = f"[{'-inf' if lo is None else f'{lo:g}'}, {'inf' if hi is None else f'{hi:g}'}]"
    return _outcome(
        expectation, CheckStatus.PASS,
        f"{expectation.signal} stayed within {bounds} (min {min(values):g}, max {max(values):g})",
    )


def _check_final_value(expectation: Expectation, window: list[tuple[float, float]], tol: float) -> CheckOutcome:
    assert expectation.target is not None, "final_value requires target"
    t, v = window[-1]
    error = abs(v - expectation.target)
    if error <= tol:
        return _outcome(
            expectation, CheckStatus.PASS,
            f"final {expectation.signal}={v:g} is within {tol:g} of {expectation.target:g}",
            observed=v, at_time=t,
        )
    return _outcome(
        expectation, CheckStatus.FAIL,
        f"final {expectation.signal}={v:g} differs from {expectation.target:g} by {error:g} (tolerance {tol:g})",
        observed=v, at_time=t,
    )


def _check_monotonic(expectation: Expectation, window: list[tuple[float, float]], tol: float) -> CheckOutcome:
    assert expectation.direction is not None, "monotonic requires direction"
    increasing = expectation.direction == MonotonicDirection.INCREASING
    sign = 1.0 if increasing else -1.0
    label = expectation.direction.value

    for (_, prev), (t, v) in zip(window, window[1:]):
        # Positive step means movement in the expected direction
        step = sign * (v - prev)
        if step < -tol:
            return _outcome(
                expectation, CheckStatus.FAIL,
                f"{expectation.signal} is not {label}: {prev:g} -> {v:g} at t={t:g}",
                observed=v, at_time=t,
            )
        if expectation.strict and step <= tol:
            return _outcome(
                expectation, CheckStatus.FAIL,
                f"{expectation.signal} is not strictly {label}: {prev:g} -> {v:g} at t={t:g}",
                observed=v, at_time=t,
            )

    qualifier = "strictly " if expectation.strict else ""
    return _outcome(
        expectation, CheckStatus.PASS,
        f"{expectation.signal} is {qualifier}{label} over {len(window)} samples",
    )


def _check_settling(expectation: Expectation, window: list[tuple[float, float]], tol: float) -> CheckOutcome:
    assert expectation.target is not None and expectation.settle_by is not None, \
        "settling requires target and settle_by"
    target = expectation.target

    # Walk backwards to find the last sample outside the band
    settled_index: Optional[int] = 0
    for idx in range(len(window) - 1, -1, -1):
        if abs(window[idx][1] - target) > tol:
            settled_index = idx + 1 if idx + 1 < len(window) else None
            break

    if settled_index is None:
        t, v = window[-1]
        return _outcome(
            expectation, CheckStatus.FAIL,
            f"{expectation.signal} never settled within {tol:g} of {target:g} (last value {v:g})",
            observed=v, at_time=t,
        )

    settling_time = window[settled_index][0]
    if settling_time <= expectation.settle_by:
        return _outcome(
            expectation, CheckStatus.PASS,
            f"{expectation.signal} settled within {tol:g} of {target:g} at t={settling_time:g} "
            f"(limit {expectation.settle_by:g})",
            observed=settling_time, at_time=settling_time,
        )
    return _outcome(
        expectation, CheckStatus.FAIL,
        f"{expectation.signal} settled at t={settling_time:g}, later than {expectation.settle_by:g}",
        observed=settling_time, at_time=settling_time,
    )


_CHECKERS = {
    ExpectationType.RANGE: _check_range,
    ExpectationType.FINAL_VALUE: _check_final_value,
    ExpectationType.MONOTONIC: _check_monotonic,
    ExpectationType.SETTLING: _check_settling,
}


def evaluate_expectation(
    run: SimulationRun,
    expectation: Expectation,
    tolerance: Optional[float] = None,
) -> CheckOutcome:
    """
    Evaluate one expectation against a run.

    Args:
        run: SimulationRun to inspect (never mutated)
        expectation: Expectation to evaluate
        tolerance: Absolute tolerance; resolved from the expectation/config when None

    Returns:
        CheckOutcome with PASS, FAIL or ERROR status
    """
    tol = resolve_tolerance(expectation) if tolerance is None else tolerance

    if expectation.signal not in run.signals:
        return _outcome(
            expectation, CheckStatus.ERROR,
            f"signal '{expectation.signal}' not found in run '{run.run_id}' "
            f"(available: {sorted(run.signals)})",
        )

    window = _windowed_samples(run, expectation)
    if not window:
        return _outcome(
            expectation, CheckStatus.ERROR,
            f"no finite samples of '{expectation.signal}' in window "
            f"[{expectation.t_start}, {expectation.t_end}]",
        )

    checker = _CHECKERS.get(expectation.kind)
    if checker is None:
        raise ValueError(f"Unknown expectation kind: {expectation.kind}")

    outcome = checker(expectation, window, tol)
    logger.debug(
        "evaluate_expectation: id=%s kind=%s status=%s",
        expectation.id,
        expectation.kind.value,
        outcome.status.value,
    )
    return outcome


def run_checks(
    run: SimulationRun,
    suite: ExpectationSuite,
    strict: Optional[bool] = None,
) -> ValidationReport:
    """
    Evaluate every expectation of a suite against a run.

    Expectations are evaluated in suite order. Run invariant violations are
    attached to the report; in strict mode they fail it.

    Args:
        run: SimulationRun to validate
        suite: ExpectationSuite to apply
        strict: Whether invariant violations fail the report (config default when None)

    Returns:
        ValidationReport
    """
    if strict is None:
        strict = get_strict_mode()

    violations = check_run_invariants(run)
    if violations:
        logger.warning(
            "Run %s has %d invariant violation(s)", run.run_id, len(violations)
        )

    outcomes = [
        evaluate_expectation(run, expectation, resolve_tolerance(expectation, suite))
        for expectation in suite.expectations
    ]

    report = ValidationReport(
        run_id=run.run_id,
        suite_name=suite.name,
        outcomes=outcomes,
        run_violations=violations,
        strict=strict,
    )
    logger.info(
        "run_checks: run=%s suite=%s passed=%d failed=%d errors=%d",
        report.run_id,
        report.suite_name,
        report.passed_count,
        report.failed_count,
        report.error_count,
    )
    return report
