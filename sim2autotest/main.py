"""
CLI Entrypoint Module

Usage:
    sim2autotest check RUN SUITE [--json] [--no-strict]
    sim2autotest stats RUN [--json]
    sim2autotest demo

Exit codes:
    0  report passed (or command succeeded)
    1  report failed
    2  invalid input (unreadable run or suite, bad configuration)
"""

import argparse
import json
import logging
import sys
from typing import Optional

from .config import get_log_level
from .errors import Sim2AutoTestError
from .metrics import compute_run_stats
from .parser import load_run
from .pipeline import validate_files, validate_run
from .report import render_markdown, render_stats
from .samples import build_sample_run, build_sample_suite
from .serializer import serialize_result

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INPUT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sim2autotest",
        description="Validate simulation runs against expectation suites.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Evaluate a suite against a run file.")
    check.add_argument("run", help="Run file (.csv or .json).")
    check.add_argument("suite", help="Suite file (.yaml, .yml or .json).")
    check.add_argument("--json", action="store_true", help="Print the report as JSON.")
    check.add_argument(
        "--no-strict",
        dest="strict",
        action="store_false",
        default=None,
        help="Do not fail the report on run invariant violations.",
    )

    stats = sub.add_parser("stats", help="Print per-signal statistics for a run file.")
    stats.add_argument("run", help="Run file (.csv or .json).")
    stats.add_argument("--json", action="store_true", help="Print statistics as JSON.")

    sub.add_parser("demo", help="Validate the built-in sample run against the sample suite.")
    return parser


def _cmd_check(args: argparse.Namespace) -> int:
    result = validate_files(args.run, args.suite, strict=args.strict)
    if args.json:
        print(json.dumps(serialize_result({"report": result.report, "stages": result.stages}), indent=2))
    else:
        print(render_markdown(result.report))
    return EXIT_OK if result.report.passed else EXIT_FAILED


def _cmd_stats(args: argparse.Namespace) -> int:
    run = load_run(args.run)
    try:
        stats = compute_run_stats(run)
    except ValueError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    if args.json:
        print(json.dumps(serialize_result({"stats": stats})["stats"], indent=2))
    else:
        print(render_stats(stats))
    return EXIT_OK


def _cmd_demo(args: argparse.Namespace) -> int:
    result = validate_run(build_sample_run(), build_sample_suite())
    print(render_markdown(result.report))
    return EXIT_OK if result.report.passed else EXIT_FAILED


_COMMANDS = {
    "check": _cmd_check,
    "stats": _cmd_stats,
    "demo": _cmd_demo,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Run the Sim2AutoTest CLI.

    Returns:
        Process exit code (see module docstring).
    """
    args = _build_parser().parse_args(argv)

    try:
        level = logging.DEBUG if args.verbose else get_log_level()
    except RuntimeError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return _COMMANDS[args.command](args)
    except (Sim2AutoTestError, RuntimeError) as exc:
        logger.debug("command %s failed", args.command, exc_info=True)
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
