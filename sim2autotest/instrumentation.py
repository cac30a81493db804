"""
Pipeline stage instrumentation.

Wraps individual pipeline stages to collect a StageRecord per stage:
status, elapsed time, error messages and a small summary.

The instrumentation is additive and does not change the control flow or
error handling semantics of the wrapped stage: exceptions are recorded and
re-raised.
"""

import logging
import time
from typing import Any, Callable, Tuple, TypeVar

from .models import StageRecord, StageStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_ERROR_CHARS = 200


def instrument_stage(
    stage_id: str,
    stage_name: str,
    summarize: Callable[[Any], dict[str, Any]] | None = None,
) -> Callable[[Callable[..., T]], Callable[..., Tuple[T, StageRecord]]]:
    """
    Decorator to wrap a stage function and collect a StageRecord.

    Wraps the function to:
    - Create a StageRecord
    - Execute the function, timing it
    - On success: set status=SUCCESS, fill summary, return (result, record)
    - On exception: set status=FAILED, append error message, attach the
      record to the exception as `stage_record`, re-raise

    Args:
        stage_id: Stage identifier (e.g., "P0")
        stage_name: Human-readable name (e.g., "Load run")
        summarize: Optional function mapping the stage result to a summary dict

    Returns:
        Decorator that wraps a function
    """

    def decorator(func: Callable[..., T]) -> Callable[..., Tuple[T, StageRecord]]:
        def wrapper(*args, **kwargs) -> Tuple[T, StageRecord]:
            record = StageRecord(id=stage_id, name=stage_name)
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                record.status = StageStatus.FAILED
                record.errors.append(str(e)[:MAX_ERROR_CHARS])
                record.duration_ms = int((time.perf_counter() - started) * 1000)
                logger.debug("Stage %s (%s) failed: %s", stage_id, stage_name, e)
                e.stage_record = record
                raise
            record.duration_ms = int((time.perf_counter() - started) * 1000)
            if summarize is not None:
                record.summary = summarize(result)
            logger.debug(
                "Stage %s (%s) succeeded in %d ms", stage_id, stage_name, record.duration_ms
            )
            return result, record

        wrapper.__name__ = getattr(func, "__name__", "stage")
        wrapper.__doc__ = func.__doc__
        return wrapper

    return decorator
