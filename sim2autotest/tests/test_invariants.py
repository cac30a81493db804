"""
Tests for run invariant checks.
"""

import math

from sim2autotest.invariants import check_run_invariants
from sim2autotest.models import SimulationRun
from sim2autotest.samples import build_sample_run


class TestCheckRunInvariants:
    """Tests for check_run_invariants."""

    def test_sample_run_has_no_violations(self):
        assert check_run_invariants(build_sample_run()) == []

    def test_repeated_time_reported(self):
        run = SimulationRun(run_id="r", time=[0.0, 1.0, 1.0], signals={"x": [0.0, 0.0, 0.0]})
        violations = check_run_invariants(run)
        assert violations == ["time[2]=1.0 is not greater than time[1]=1.0"]

    def test_decreasing_time_reported(self):
        run = SimulationRun(run_id="r", time=[0.0, 2.0, 1.0], signals={"x": [0.0, 0.0, 0.0]})
        assert len(check_run_invariants(run)) == 1

    def test_non_finite_time_reported(self):
        run = SimulationRun(run_id="r", time=[0.0, math.inf], signals={"x": [0.0, 0.0]})
        violations = check_run_invariants(run)
        assert violations == ["time[1]=inf is not finite"]

    def test_non_finite_signal_reported(self):
        run = SimulationRun(run_id="r", time=[0.0, 1.0], signals={"x": [math.nan, 1.0], "y": [1.0, -math.inf]})
        violations = check_run_invariants(run)
        assert "Signal x[0]=nan is not finite" in violations
        assert "Signal y[1]=-inf is not finite" in violations
        assert len(violations) == 2

    def test_never_raises_on_single_sample(self):
        run = SimulationRun(run_id="r", time=[0.0], signals={"x": [1.0]})
        assert check_run_invariants(run) == []
