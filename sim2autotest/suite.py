"""
Expectation suite loading.

Suites are hand-written YAML (or JSON, which YAML accepts) documents:

    name: step_response
    default_tolerance: 0.01
    expectations:
      - id: output_bounded
        signal: output
        kind: range
        min_value: 0.0
        max_value: 1.0
"""

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from .errors import SuiteError
from .models import ExpectationSuite

logger = logging.getLogger(__name__)

SUITE_SUFFIXES = (".yaml", ".yml", ".json")


def _format_validation_error(e: ValidationError) -> list[str]:
    messages = []
    for err in e.errors():
        location = ".".join(str(part) for part in err["loc"])
        messages.append(f"{location}: {err['msg']}" if location else err["msg"])
    return messages


def parse_suite(text: str, source: Optional[str] = None) -> ExpectationSuite:
    """
    Parse suite text into an ExpectationSuite.

    Args:
        text: YAML or JSON content
        source: Where the text came from, used in error details

    Raises:
        SuiteError: on empty input, YAML syntax errors, a non-mapping document
            or any model validation failure
    """
    if not text.strip():
        raise SuiteError("EMPTY_INPUT", "suite input is empty", {"source": source})

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SuiteError("INVALID_YAML", str(e), {"source": source}) from e

    if not isinstance(data, dict):
        raise SuiteError(
            "INVALID_STRUCTURE",
            f"suite must be a mapping, got {type(data).__name__}",
            {"source": source},
        )
    if not isinstance(data.get("expectations", []), list):
        raise SuiteError(
            "INVALID_STRUCTURE",
            "'expectations' must be a list",
            {"source": source},
        )

    try:
        suite = ExpectationSuite(**data)
    except ValidationError as e:
        messages = _format_validation_error(e)
        raise SuiteError(
            "INVALID_SUITE",
            "; ".join(messages),
            {"source": source, "errors": messages},
        ) from e

    logger.debug(
        "parse_suite: name=%s expectations=%d", suite.name, len(suite.expectations)
    )
    return suite


def load_suite(path: str | Path) -> ExpectationSuite:
    """
    Load an expectation suite from a .yaml, .yml or .json file.

    Raises:
        SuiteError: if the file is missing, unreadable, not UTF-8, has an
            unsupported suffix, or fails to parse
    """
    path = Path(path)
    if path.suffix.lower() not in SUITE_SUFFIXES:
        raise SuiteError(
            "UNSUPPORTED_FORMAT",
            f"unsupported suite file suffix '{path.suffix}' (expected one of {list(SUITE_SUFFIXES)})",
            {"path": str(path)},
        )
    if not path.is_file():
        raise SuiteError("FILE_NOT_FOUND", f"suite file not found: {path}", {"path": str(path)})

    logger.info("Loading suite from %s", path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise SuiteError(
            "INVALID_ENCODING",
            f"suite file is not valid UTF-8: {path} (byte {e.start})",
            {"path": str(path), "position": e.start},
        ) from e
    except OSError as e:
        raise SuiteError("READ_ERROR", f"cannot read suite file {path}: {e}", {"path": str(path)}) from e
    return parse_suite(text, source=str(path))
