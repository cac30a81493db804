"""
Validation pipeline.

Chains the stages run -> suite -> invariants -> checks and keeps a StageRecord
for each one:

    P0 Load run
    P1 Load suite
    P2 Run invariants
    P3 Evaluate expectations

A failing stage re-raises its exception; the records collected so far,
including the failed one, are attached to it as `stages`.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from .checks import run_checks
from .instrumentation import instrument_stage
from .invariants import check_run_invariants
from .models import (
    ExpectationSuite,
    SimulationRun,
    StageRecord,
    ValidationReport,
)
from .parser import load_run
from .suite import load_suite

logger = logging.getLogger(__name__)


class PipelineResult(BaseModel):
    """Report plus the stage records that produced it."""

    report: ValidationReport
    stages: list[StageRecord] = Field(default_factory=list)


_load_run_stage = instrument_stage(
    "P0",
    "Load run",
    lambda run: {"run_id": run.run_id, "samples": len(run.time), "signals": run.signal_names()},
)(load_run)

_load_suite_stage = instrument_stage(
    "P1",
    "Load suite",
    lambda suite: {"suite": suite.name, "expectations": len(suite.expectations)},
)(load_suite)

_invariants_stage = instrument_stage(
    "P2",
    "Run invariants",
    lambda violations: {"violations": len(violations)},
)(check_run_invariants)

_checks_stage = instrument_stage(
    "P3",
    "Evaluate expectations",
    lambda report: {
        "passed": report.passed_count,
        "failed": report.failed_count,
        "errors": report.error_count,
    },
)(run_checks)


def _run_stage(stage: Callable[..., Any], stages: list[StageRecord], *args, **kwargs) -> Any:
    """Run an instrumented stage, appending its record to stages."""
    try:
        result, record = stage(*args, **kwargs)
    except Exception as e:
        failed = getattr(e, "stage_record", None)
        if failed is not None:
            stages.append(failed)
        e.stages = list(stages)
        raise
    stages.append(record)
    return result


def validate_run(
    run: SimulationRun,
    suite: ExpectationSuite,
    strict: Optional[bool] = None,
    stages: Optional[list[StageRecord]] = None,
) -> PipelineResult:
    """
    Run invariants and checks for an in-memory run and suite.

    Args:
        run: SimulationRun to validate
        suite: ExpectationSuite to apply
        strict: Whether invariant violations fail the report (config default when None)
        stages: Records of earlier stages to prepend

    Returns:
        PipelineResult with the report and stage records
    """
    stages = list(stages or [])
    _run_stage(_invariants_stage, stages, run)
    report = _run_stage(_checks_stage, stages, run, suite, strict=strict)
    return PipelineResult(report=report, stages=stages)


def validate_files(
    run_path: str | Path,
    suite_path: str | Path,
    strict: Optional[bool] = None,
) -> PipelineResult:
    """
    Load a run file and a suite file, then validate.

    Raises:
        ParseError: if the run file cannot be loaded
        SuiteError: if the suite file cannot be loaded
    """
    logger.info("validate_files: run=%s suite=%s", run_path, suite_path)
    stages: list[StageRecord] = []
    run = _run_stage(_load_run_stage, stages, run_path)
    suite = _run_stage(_load_suite_stage, stages, suite_path)
    return validate_run(run, suite, strict=strict, stages=stages)
