"""
Error types shared by the parser, suite loader and CLI.
"""

from typing import Any


class Sim2AutoTestError(Exception):
    """
    Base exception for input problems (bad run files, bad suites).

    Carries structured error information:
    - code: error category (e.g., 'INVALID_NUMBER', 'UNSUPPORTED_FORMAT')
    - message: human-readable error description
    - details: optional dict with location or debug information
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"{code}: {message}")


class ParseError(Sim2AutoTestError):
    """Raised when simulation data cannot be parsed into a SimulationRun."""


class SuiteError(Sim2AutoTestError):
    """Raised when an expectation suite cannot be loaded."""
