"""
JSON-friendly conversion of pipeline outputs.
"""

import math
from enum import Enum
from pydantic import BaseModel


def serialize_result(result: dict) -> dict:
    """
    Convert {"report": ValidationReport, "stages": [StageRecord, ...]} or
    {"stats": RunStats} into plain JSON-native values.

    Computed report fields are kept; nan/inf become strings.
    """
    return {key: _serialize_value(value) for key, value in result.items()}


def _serialize_value(value):
    if isinstance(value, BaseModel):
        return _serialize_value(value.model_dump())
    if isinstance(value, Enum):
        return value.value
    # JSON has no nan/inf
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    return value
