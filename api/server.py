"""
ShopSolver — FastAPI + MCP Server
The interface layer: exposes the job-shop solver over HTTP and as MCP tools.

Four tools exposed:
  1. solve_jobshop — Solve a classic job shop (one machine per task)
  2. solve_flexible_jobshop — Solve a flexible job shop (machine alternatives)
  3. validate_schedule — Validate a schedule against a classic dataset
  4. validate_flexible_schedule — Validate a schedule against a flexible dataset
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from jobshop.config import SolverSettings
from jobshop.engine import solve_jobshop
from jobshop.errors import JobShopError
from jobshop.models import (
    FlexibleJobShopDataset, FlexibleValidateRequest, JobShopDataset,
    ScheduleResponse, SolveOptions, ValidateRequest, ValidateResponse,
)
from jobshop.validator import validate_schedule

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────
# App Configuration
# ─────────────────────────────────────────────

APP_NAME = "ShopSolver"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = """
**Job Shop Scheduling Solver** — minimizes makespan with Google OR-Tools CP-SAT.

### Capabilities
- **Classic job shop**: every task bound to one machine
- **Flexible job shop**: every task lists (duration, machine) alternatives, the solver picks one
- **Per-machine timelines**: ordered task labels and [start, end) intervals
- **Schedule validation**: precedence, overlap, eligibility and duration checks
"""


class JobShopSolveRequest(BaseModel):
    """Classic dataset plus optional solver options."""
    dataset: JobShopDataset
    options: Optional[SolveOptions] = Field(None, description="Solver options. None = server defaults.")


class FlexibleSolveRequest(BaseModel):
    """Flexible dataset plus optional solver options."""
    dataset: FlexibleJobShopDataset
    options: Optional[SolveOptions] = Field(None, description="Solver options. None = server defaults.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    app.state.default_options = SolverSettings().to_options()
    logger.info("%s v%s starting (defaults: %s)", APP_NAME, APP_VERSION, app.state.default_options)
    yield
    logger.info("%s shutting down.", APP_NAME)


app = FastAPI(
    title=APP_NAME,
    version=APP_VERSION,
    description=APP_DESCRIPTION,
    lifespan=lifespan,
)


# ─────────────────────────────────────────────
# Request tracking middleware
# ─────────────────────────────────────────────

_SOLVE_PATHS = (
    "/solve_jobshop", "/solve_flexible_jobshop",
    "/validate_schedule", "/validate_flexible_schedule",
)
_request_count = 0
_total_solve_time = 0.0


@app.middleware("http")
async def track_requests(request: Request, call_next):
    """Track request count and timing for the info endpoint."""
    global _request_count, _total_solve_time
    start = time.time()
    response = await call_next(request)
    elapsed = time.time() - start
    if request.url.path in _SOLVE_PATHS:
        _request_count += 1
        _total_solve_time += elapsed
    return response


def _options(request: Request, options: Optional[SolveOptions]) -> SolveOptions:
    if options is not None:
        return options
    return getattr(request.app.state, "default_options", None) or SolveOptions()


# ─────────────────────────────────────────────
# Health & Info Endpoints
# ─────────────────────────────────────────────

@app.get("/", operation_id="root", summary="Server info and status")
async def root():
    """Returns server info, available tools, and usage statistics."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "status": "operational",
        "tools": [
            {"name": "solve_jobshop", "endpoint": "/solve_jobshop"},
            {"name": "solve_flexible_jobshop", "endpoint": "/solve_flexible_jobshop"},
            {"name": "validate_schedule", "endpoint": "/validate_schedule"},
            {"name": "validate_flexible_schedule", "endpoint": "/validate_flexible_schedule"},
        ],
        "stats": {
            "requests_served": _request_count,
            "total_solve_time_seconds": round(_total_solve_time, 2),
        },
    }


@app.get("/health", operation_id="health_check", summary="Health check")
async def health():
    return {"status": "healthy", "version": APP_VERSION}


# ─────────────────────────────────────────────
# Core Tool Endpoints
# ─────────────────────────────────────────────

@app.post(
    "/solve_jobshop",
    response_model=ScheduleResponse,
    operation_id="solve_jobshop",
    summary="Solve a classic job shop problem",
    description="""
Every job is an ordered list of tasks, every task a `machine` and a `duration`.
Minimizes makespan.

**Example**:
```json
{"dataset": {"jobs": [
  {"tasks": [{"machine": 0, "duration": 3}, {"machine": 1, "duration": 2}]},
  {"tasks": [{"machine": 0, "duration": 2}, {"machine": 1, "duration": 4}]}
]}}
```
""",
    tags=["Scheduling"],
)
def solve_jobshop_endpoint(body: JobShopSolveRequest, request: Request) -> ScheduleResponse:
    return solve_jobshop(body.dataset, _options(request, body.options))


@app.post(
    "/solve_flexible_jobshop",
    response_model=ScheduleResponse,
    operation_id="solve_flexible_jobshop",
    summary="Solve a flexible job shop problem",
    description="""
Every task lists `alternatives`, each a `duration` on a `machine`. The solver
selects exactly one alternative per task and minimizes makespan.
""",
    tags=["Scheduling"],
)
def solve_flexible_endpoint(body: FlexibleSolveRequest, request: Request) -> ScheduleResponse:
    return solve_jobshop(body.dataset, _options(request, body.options))


@app.post(
    "/validate_schedule",
    response_model=ValidateResponse,
    operation_id="validate_schedule",
    summary="Validate a schedule against a classic dataset",
    tags=["Validation"],
)
def validate_schedule_endpoint(body: ValidateRequest) -> ValidateResponse:
    return validate_schedule(body.dataset, body.schedule)


@app.post(
    "/validate_flexible_schedule",
    response_model=ValidateResponse,
    operation_id="validate_flexible_schedule",
    summary="Validate a schedule against a flexible dataset",
    tags=["Validation"],
)
def validate_flexible_endpoint(body: FlexibleValidateRequest) -> ValidateResponse:
    return validate_schedule(body.dataset, body.schedule)


# ─────────────────────────────────────────────
# Error Handlers
# ─────────────────────────────────────────────

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Return helpful error messages for malformed datasets."""
    return JSONResponse(
        status_code=422,
        content={
            "status": "error",
            "message": "Invalid dataset. Check the schema at /docs for required fields.",
            "details": str(exc),
        },
    )


@app.exception_handler(JobShopError)
async def solver_error_handler(request: Request, exc: JobShopError):
    logger.error("Solver failure on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"status": "error", "message": f"Solver error: {exc}"},
    )


# ─────────────────────────────────────────────
# MCP Integration
# ─────────────────────────────────────────────

try:
    from fastapi_mcp import FastApiMCP

    mcp = FastApiMCP(
        app,
        name=APP_NAME,
        description=(
            "Job Shop Scheduling Solver — minimizes makespan of classic and flexible "
            "job shop problems using OR-Tools CP-SAT."
        ),
        describe_all_responses=True,
        describe_full_response_schema=True,
    )
    mcp.mount()
    logger.info("MCP server mounted at /mcp")
except ImportError:
    logger.warning("fastapi-mcp not installed. MCP endpoint disabled. Install with: pip install fastapi-mcp")


# ─────────────────────────────────────────────
# Entry point
# ─────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("api.server:app", host="0.0.0.0", port=port, reload=True)
