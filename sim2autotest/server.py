"""
FastAPI HTTP server for Sim2AutoTest.

Exposes:
- POST /api/validate - Evaluate an expectation suite against a run
- POST /api/stats    - Summary statistics for a run
- GET  /health       - Health check
"""

import logging
import sys
from typing import Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from . import __version__
from .config import get_cors_origins, get_log_level
from .metrics import compute_run_stats
from .models import ExpectationSuite, SimulationRun
from .pipeline import validate_run
from .report import render_markdown
from .serializer import serialize_result

# Configure logging
logging.basicConfig(
    level=get_log_level(),
    format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Sim2AutoTest API",
    description="Validate simulation runs against expectation suites",
    version=__version__,
)

allow_origins = get_cors_origins()
logger.info("CORS allow_origins = %r", allow_origins)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class ValidateRequest(BaseModel):
    """Request body for POST /api/validate."""

    run: SimulationRun = Field(..., description="Simulation run to validate")
    suite: ExpectationSuite = Field(..., description="Expectations to evaluate")
    strict: Optional[bool] = Field(
        default=None, description="Fail on run invariant violations (server default when omitted)"
    )


class StatsRequest(BaseModel):
    """Request body for POST /api/stats."""

    run: SimulationRun


# =============================================================================
# ENDPOINTS
# =============================================================================

@app.post("/api/validate")
def validate_endpoint(req: ValidateRequest) -> dict:
    """
    Evaluate a suite against a run.

    Returns:
        Dict with the serialized report, a markdown rendering and stage records
    """
    logger.info(
        "POST /api/validate run=%s suite=%s expectations=%d",
        req.run.run_id,
        req.suite.name,
        len(req.suite.expectations),
    )
    result = validate_run(req.run, req.suite, strict=req.strict)
    return serialize_result(
        {
            "report": result.report,
            "markdown": render_markdown(result.report),
            "stages": result.stages,
        }
    )


@app.post("/api/stats")
def stats_endpoint(req: StatsRequest) -> dict:
    """Compute per-signal statistics for a run."""
    logger.info("POST /api/stats run=%s", req.run.run_id)
    try:
        stats = compute_run_stats(req.run)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return serialize_result({"stats": stats})["stats"]


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok"}
