"""
Simulation Data Parser Module

Turns simulation output files into SimulationRun objects.

Supported inputs:
- CSV: optional '# key: value' metadata lines, then a header row containing
  the time column, then one numeric row per sample.
  '# run_id: X' sets the run id, '# unit.<signal>: <unit>' sets a unit.
- JSON: {"run_id": ..., "time": [...], "signals": {name: [...]},
         "metadata": {...}, "units": {...}}

All structural problems raise ParseError; numeric oddities such as nan/inf are
accepted here and reported later by the invariant checks.
"""

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from .config import get_time_column
from .errors import ParseError
from .models import SimulationRun

logger = logging.getLogger(__name__)

UNIT_PREFIX = "unit."
BOM = "\ufeff"


def _parse_float(raw: str, line_no: int, column: str) -> float:
    try:
        return float(raw.strip())
    except ValueError:
        raise ParseError(
            "INVALID_NUMBER",
            f"line {line_no}: column '{column}' has non-numeric value {raw.strip()!r}",
            {"line": line_no, "column": column, "value": raw},
        ) from None


def _build_run(fields: dict[str, Any]) -> SimulationRun:
    """Construct a SimulationRun, converting pydantic errors into ParseError."""
    try:
        return SimulationRun(**fields)
    except ValidationError as e:
        messages = [err["msg"] for err in e.errors()]
        raise ParseError(
            "INVALID_STRUCTURE",
            "; ".join(messages),
            {"errors": messages},
        ) from e


def parse_csv_run(
    text: str,
    run_id: Optional[str] = None,
    time_column: Optional[str] = None,
    source: Optional[str] = None,
) -> SimulationRun:
    """
    Parse CSV simulation output into a SimulationRun.

    Args:
        text: CSV content
        run_id: Run id to use when the file does not declare one
        time_column: Name of the time column (defaults to config)
        source: Where the text came from, recorded on the run

    Returns:
        SimulationRun with one signal per non-time column

    Raises:
        ParseError: on empty input, bad header, missing time column,
            ragged rows or non-numeric values
    """
    time_column = time_column or get_time_column()
    text = text.removeprefix(BOM)

    if not text.strip():
        raise ParseError("EMPTY_INPUT", "CSV input is empty")

    metadata: dict[str, str] = {}
    units: dict[str, str] = {}
    header: Optional[list[str]] = None
    header_line = 0
    rows: list[tuple[int, list[str]]] = []

    reader = csv.reader(io.StringIO(text))
    for row in reader:
        line_no = reader.line_num
        if not row or all(not cell.strip() for cell in row):
            continue

        first = row[0].lstrip()
        if first.startswith("#"):
            # Metadata is only honoured before the header row
            if header is None:
                comment = ",".join(row).lstrip()[1:]
                if ":" in comment:
                    key, value = comment.split(":", 1)
                    key, value = key.strip(), value.strip()
                    if key.startswith(UNIT_PREFIX):
                        units[key[len(UNIT_PREFIX):]] = value
                    elif key:
                        metadata[key] = value
            continue

        if header is None:
            header = [cell.strip() for cell in row]
            header_line = line_no
            continue

        rows.append((line_no, row))

    if header is None:
        raise ParseError("EMPTY_INPUT", "CSV input has no header row")

    if any(not name for name in header):
        raise ParseError(
            "BAD_HEADER",
            f"line {header_line}: header contains an empty column name",
            {"line": header_line, "header": header},
        )
    if len(header) != len(set(header)):
        duplicates = sorted({h for h in header if header.count(h) > 1})
        raise ParseError(
            "BAD_HEADER",
            f"line {header_line}: duplicate column names {duplicates}",
            {"line": header_line, "duplicates": duplicates},
        )
    if time_column not in header:
        raise ParseError(
            "MISSING_TIME_COLUMN",
            f"header has no '{time_column}' column (columns: {header})",
            {"line": header_line, "header": header, "time_column": time_column},
        )

    time_index = header.index(time_column)
    signal_columns = [(i, name) for i, name in enumerate(header) if i != time_index]

    time: list[float] = []
    signals: dict[str, list[float]] = {name: [] for _, name in signal_columns}

    for line_no, row in rows:
        if len(row) != len(header):
            raise ParseError(
                "ROW_LENGTH_MISMATCH",
                f"line {line_no}: expected {len(header)} values, got {len(row)}",
                {"line": line_no, "expected": len(header), "actual": len(row)},
            )
        time.append(_parse_float(row[time_index], line_no, time_column))
        for i, name in signal_columns:
            signals[name].append(_parse_float(row[i], line_no, name))

    resolved_id = metadata.pop("run_id", None) or run_id or "run"

    logger.debug(
        "parse_csv_run: run_id=%s rows=%d signals=%s",
        resolved_id,
        len(time),
        list(signals),
    )

    return _build_run(
        {
            "run_id": resolved_id,
            "source": source,
            "metadata": metadata,
            "time": time,
            "signals": signals,
            "units": units,
        }
    )


def parse_json_run(
    text: str,
    run_id: Optional[str] = None,
    source: Optional[str] = None,
) -> SimulationRun:
    """
    Parse JSON simulation output into a SimulationRun.

    Raises:
        ParseError: on empty input, invalid JSON or a wrongly shaped document
    """
    text = text.removeprefix(BOM)
    if not text.strip():
        raise ParseError("EMPTY_INPUT", "JSON input is empty")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(
            "INVALID_JSON",
            f"line {e.lineno} column {e.colno}: {e.msg}",
            {"line": e.lineno, "column": e.colno},
        ) from e

    if not isinstance(data, dict):
        raise ParseError(
            "INVALID_STRUCTURE",
            f"expected a JSON object, got {type(data).__name__}",
        )
    for key in ("time", "signals"):
        if key not in data:
            raise ParseError("INVALID_STRUCTURE", f"missing required key '{key}'")

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, dict):
        raise ParseError("INVALID_STRUCTURE", "'metadata' must be an object")

    resolved_id = data.get("run_id") or run_id or "run"

    return _build_run(
        {
            "run_id": str(resolved_id),
            "source": source,
            "metadata": {str(k): str(v) for k, v in metadata.items()},
            "time": data["time"],
            "signals": data["signals"],
            "units": data.get("units") or {},
        }
    )


def load_run(path: str | Path, run_id: Optional[str] = None) -> SimulationRun:
    """
    Load a simulation run from a .csv or .json file.

    The run id falls back to the file stem when neither the caller nor the
    file provides one.

    Raises:
        ParseError: if the file is missing, unreadable, not UTF-8, has an
            unsupported suffix, or fails to parse
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix not in (".csv", ".json"):
        raise ParseError(
            "UNSUPPORTED_FORMAT",
            f"unsupported run file suffix '{path.suffix}' (expected .csv or .json)",
            {"path": str(path)},
        )
    if not path.is_file():
        raise ParseError("FILE_NOT_FOUND", f"run file not found: {path}", {"path": str(path)})

    try:
        text = path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as e:
        raise ParseError(
            "INVALID_ENCODING",
            f"run file is not valid UTF-8: {path} (byte {e.start})",
            {"path": str(path), "position": e.start},
        ) from e
    except OSError as e:
        raise ParseError("READ_ERROR", f"cannot read run file {path}: {e}", {"path": str(path)}) from e
    fallback_id = run_id or path.stem
    logger.info("Loading run from %s", path)

    if suffix == ".csv":
        return parse_csv_run(text, run_id=fallback_id, source=str(path))
    return parse_json_run(text, run_id=fallback_id, source=str(path))
