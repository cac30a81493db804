import os
from dotenv import load_dotenv

load_dotenv()

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_TOLERANCE = 1e-6
DEFAULT_TIME_COLUMN = "time"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def get_log_level() -> str:
    """
    Return the configured log level name (upper-cased).

    Raises:
        RuntimeError: if SIM2AUTOTEST_LOG_LEVEL is not a standard level name.
    """
    level = os.environ.get("SIM2AUTOTEST_LOG_LEVEL", "").strip().upper() or DEFAULT_LOG_LEVEL
    if level not in _LOG_LEVELS:
        raise RuntimeError(
            f"SIM2AUTOTEST_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {level!r}"
        )
    return level


def get_default_tolerance() -> float:
    """
    Return the fallback absolute tolerance for expectations.

    Raises:
        RuntimeError: if SIM2AUTOTEST_DEFAULT_TOLERANCE is not a non-negative number.
    """
    raw = os.environ.get("SIM2AUTOTEST_DEFAULT_TOLERANCE", "").strip()
    if not raw:
        return DEFAULT_TOLERANCE
    try:
        value = float(raw)
    except ValueError:
        raise RuntimeError(
            f"SIM2AUTOTEST_DEFAULT_TOLERANCE must be a number, got {raw!r}"
        ) from None
    if value < 0 or value != value:
        raise RuntimeError(
            f"SIM2AUTOTEST_DEFAULT_TOLERANCE must be >= 0, got {raw!r}"
        )
    return value


def get_time_column() -> str:
    """Return the name of the time column expected in CSV runs."""
    return os.environ.get("SIM2AUTOTEST_TIME_COLUMN", "").strip() or DEFAULT_TIME_COLUMN


def get_strict_mode() -> bool:
    """
    Return whether run invariant violations fail a report.

    Raises:
        RuntimeError: if SIM2AUTOTEST_STRICT is not a recognised boolean.
    """
    raw = os.environ.get("SIM2AUTOTEST_STRICT", "").strip().lower()
    if not raw:
        return True
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise RuntimeError(f"SIM2AUTOTEST_STRICT must be a boolean, got {raw!r}")


def get_cors_origins() -> list[str]:
    """Return allowed CORS origins from BACKEND_CORS_ORIGINS, defaulting to ['*']."""
    origins_env = os.getenv("BACKEND_CORS_ORIGINS")
    if origins_env:
        origins = [o.strip() for o in origins_env.split(",") if o.strip()]
        if origins:
            return origins
    return ["*"]
