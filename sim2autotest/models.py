"""
Core data models for Sim2AutoTest.

These models define the domain objects used throughout the system:
- Simulation runs (shared time base + named signals)
- Expectations and expectation suites
- Check outcomes and validation reports
- Signal statistics
- Pipeline stage records
"""

import math
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class SimulationRun(BaseModel):
    """One simulation output: a time base and signals sampled on it."""

    run_id: str = Field(..., description="Identifier of the run, e.g. 'step_response_001'")
    source: Optional[str] = Field(default=None, description="Where the run was loaded from")
    metadata: dict[str, str] = Field(default_factory=dict, description="Free-form key/value metadata")
    time: list[float] = Field(..., description="Sample times, one per row")
    signals: dict[str, list[float]] = Field(..., description="Signal name -> samples")
    units: dict[str, str] = Field(default_factory=dict, description="Signal name -> unit")

    @model_validator(mode="after")
    def validate_shape(self):
        """Validate that every signal is sampled on the time base."""
        if not self.time:
            raise ValueError("time must contain at least one sample")
        if not self.signals:
            raise ValueError("run must contain at least one signal")
        n = len(self.time)
        for name, samples in self.signals.items():
            if len(samples) != n:
                raise ValueError(
                    f"signal '{name}' has {len(samples)} samples but time has {n}"
                )
        for name in self.units:
            if name not in self.signals:
                raise ValueError(f"unit given for unknown signal '{name}'")
        return self

    def signal_names(self) -> list[str]:
        return list(self.signals)

    def get_signal(self, name: str) -> list[float]:
        """Return samples for a signal; raises KeyError listing available names."""
        if name not in self.signals:
            raise KeyError(
                f"Signal '{name}' not found in run '{self.run_id}'. "
                f"Available: {sorted(self.signals)}"
            )
        return self.signals[name]

    def duration(self) -> float:
        return self.time[-1] - self.time[0]


class ExpectationType(str, Enum):
    """Kinds of expectation a signal can be checked against."""
    RANGE = "range"
    FINAL_VALUE = "final_value"
    MONOTONIC = "monotonic"
    SETTLING = "settling"


class MonotonicDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"


_NUMERIC_FIELDS = ("min_value", "max_value", "target", "tolerance", "settle_by", "t_start", "t_end")


class Expectation(BaseModel):
    """
    A single declarative property a signal must satisfy.

    - RANGE: every sample within [min_value, max_value] (either bound optional).
    - FINAL_VALUE: last sample equals target within tolerance.
    - MONOTONIC: samples never move against direction.
    - SETTLING: signal stays within target +/- tolerance from some time <= settle_by.

    t_start/t_end restrict evaluation to an inclusive time window.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., description="Unique expectation ID within a suite")
    signal: str = Field(..., description="Name of the signal to check")
    kind: ExpectationType = Field(..., description="Kind of check to apply")
    description: Optional[str] = Field(default=None, description="Human-readable intent")
    min_value: Optional[float] = Field(default=None, description="Lower bound for RANGE")
    max_value: Optional[float] = Field(default=None, description="Upper bound for RANGE")
    target: Optional[float] = Field(default=None, description="Target for FINAL_VALUE and SETTLING")
    tolerance: Optional[float] = Field(default=None, description="Absolute tolerance override")
    direction: Optional[MonotonicDirection] = Field(default=None, description="Direction for MONOTONIC")
    strict: bool = Field(default=False, description="MONOTONIC: require movement on every step")
    settle_by: Optional[float] = Field(default=None, description="Latest allowed settling time for SETTLING")
    t_start: Optional[float] = Field(default=None, description="Window start (inclusive)")
    t_end: Optional[float] = Field(default=None, description="Window end (inclusive)")

    @model_validator(mode="after")
    def validate_kind_fields(self):
        """Validate that fields are consistent with kind."""
        if not self.id:
            raise ValueError("expectation id must be non-empty")
        if not self.signal:
            raise ValueError(f"expectation '{self.id}' requires a non-empty signal")
        for field_name in _NUMERIC_FIELDS:
            value = getattr(self, field_name)
            if value is not None and not math.isfinite(value):
                raise ValueError(f"{field_name} must be a finite number, got {value}")

        if self.kind == ExpectationType.RANGE:
            if self.min_value is None and self.max_value is None:
                raise ValueError("RANGE expectation requires min_value or max_value")
            if (
                self.min_value is not None
                and self.max_value is not None
                and self.min_value > self.max_value
            ):
                raise ValueError("RANGE expectation requires min_value <= max_value")
            if self.target is not None:
                raise ValueError("RANGE expectation must have target=None")
            if self.direction is not None:
                raise ValueError("RANGE expectation must have direction=None")
            if self.settle_by is not None:
                raise ValueError("RANGE expectation must have settle_by=None")
        elif self.kind == ExpectationType.FINAL_VALUE:
            if self.target is None:
                raise ValueError("FINAL_VALUE expectation requires target")
            if self.min_value is not None or self.max_value is not None:
                raise ValueError("FINAL_VALUE expectation must not set min_value/max_value")
            if self.direction is not None:
                raise ValueError("FINAL_VALUE expectation must have direction=None")
            if self.settle_by is not None:
                raise ValueError("FINAL_VALUE expectation must have settle_by=None")
        elif self.kind == ExpectationType.MONOTONIC:
            if self.direction is None:
                raise ValueError("MONOTONIC expectation requires direction")
            if self.target is not None:
                raise ValueError("MONOTONIC expectation must have target=None")
            if self.min_value is not None or self.max_value is not None:
                raise ValueError("MONOTONIC expectation must not set min_value/max_value")
            if self.settle_by is not None:
                raise ValueError("MONOTONIC expectation must have settle_by=None")
        elif self.kind == ExpectationType.SETTLING:
            if self.target is None:
                raise ValueError("SETTLING expectation requires target")
            if self.settle_by is None:
                raise ValueError("SETTLING expectation requires settle_by")
            if self.min_value is not None or self.max_value is not None:
                raise ValueError("SETTLING expectation must not set min_value/max_value")
            if self.direction is not None:
                raise ValueError("SETTLING expectation must have direction=None")

        if self.tolerance is not None and self.tolerance < 0:
            raise ValueError("tolerance must be non-negative")
        if self.t_start is not None and self.t_end is not None and self.t_start > self.t_end:
            raise ValueError("t_start must be <= t_end")
        return self


class ExpectationSuite(BaseModel):
    """A named, hand-written list of expectations."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., description="Suite name")
    description: Optional[str] = Field(default=None, description="What the suite verifies")
    default_tolerance: Optional[float] = Field(
        default=None, description="Tolerance for expectations that do not set one"
    )
    expectations: list[Expectation] = Field(default_factory=list, description="Ordered expectations")

    def validate_unique_ids(self):
        """Validate that expectations have unique IDs."""
        ids = [e.id for e in self.expectations]
        if len(ids) != len(set(ids)):
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            raise ValueError(f"Duplicate expectation IDs: {duplicates}")

    @model_validator(mode="after")
    def validate_suite(self):
        if self.default_tolerance is not None:
            if not math.isfinite(self.default_tolerance):
                raise ValueError(f"default_tolerance must be a finite number, got {self.default_tolerance}")
            if self.default_tolerance < 0:
                raise ValueError("default_tolerance must be non-negative")
        self.validate_unique_ids()
        return self


class CheckStatus(str, Enum):
    """
    Outcome of evaluating one expectation.

    - PASS: the property holds
    - FAIL: the property is violated
    - ERROR: the expectation could not be evaluated (missing signal, empty window)
    """
    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"


class CheckOutcome(BaseModel):
    """Result of evaluating a single expectation against a run."""

    expectation_id: str
    signal: str
    kind: ExpectationType
    status: CheckStatus
    message: str
    observed: Optional[float] = Field(default=None, description="Value that decided the outcome")
    at_time: Optional[float] = Field(default=None, description="Time at which observed occurred")


class ValidationReport(BaseModel):
    """Outcomes of a suite evaluated against one run."""

    run_id: str
    suite_name: str
    outcomes: list[CheckOutcome] = Field(default_factory=list)
    run_violations: list[str] = Field(default_factory=list)
    strict: bool = True

    @computed_field
    @property
    def passed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == CheckStatus.PASS)

    @computed_field
    @property
    def failed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == CheckStatus.FAIL)

    @computed_field
    @property
    def error_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status == CheckStatus.ERROR)

    @computed_field
    @property
    def passed(self) -> bool:
        if self.failed_count or self.error_count:
            return False
        if self.strict and self.run_violations:
            return False
        return True


class SignalStats(BaseModel):
    """Summary statistics for one signal (non-finite samples ignored)."""

    name: str
    unit: Optional[str] = None
    count: int = Field(..., description="Number of finite samples")
    min: float
    max: float
    mean: float
    initial: float
    final: float
    time_of_min: float
    time_of_max: float


class RunStats(BaseModel):
    """Summary statistics for a whole run."""

    run_id: str
    sample_count: int
    duration: float
    signals: dict[str, SignalStats] = Field(default_factory=dict)


class StageStatus(str, Enum):
    """Status of a single pipeline stage execution."""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"


class StageRecord(BaseModel):
    """Bookkeeping for one pipeline stage."""

    id: str = Field(..., description="Stage identifier, e.g. 'P0'")
    name: str = Field(..., description="Human-readable stage name")
    status: StageStatus = StageStatus.SUCCESS
    duration_ms: int = 0
    errors: list[str] = Field(default_factory=list)
    summary: dict[str, Any] = Field(default_factory=dict)
