"""
ShopSolver — Solve Orchestration
Horizon → model → blocking solve → status mapping → schedule reconstruction.

Supports:
  - Classic job shop (one machine per task)
  - Flexible job shop (machine choice per task)
  - Any backend implementing ConstraintBackend (CP-SAT by default)
  - Optional reconstruction of FEASIBLE, not proven optimal, results

No retries happen here. UNKNOWN is reported separately from INFEASIBLE so
the caller can decide to rerun with a larger time limit.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from .backend import ConstraintBackend, CpSatBackend
from .builder import ModelBuilder
from .errors import ModelBuildError
from .models import (
    FlexibleJobShopDataset, JobShopDataset,
    ScheduleResponse, SolveOptions, SolveStatus,
)
from .reconstruct import reconstruct_schedule

logger = logging.getLogger(__name__)


_STATUS_MESSAGES = {
    SolveStatus.INFEASIBLE: "No schedule exists for this dataset.",
    SolveStatus.MODEL_INVALID: "The solver rejected the model as malformed.",
    SolveStatus.UNKNOWN: (
        "Solver limit reached before a solution was found or infeasibility was proven. "
        "Try increasing max_time_in_seconds."
    ),
}


def solve_jobshop(
    dataset: JobShopDataset | FlexibleJobShopDataset,
    options: Optional[SolveOptions] = None,
    backend: Optional[ConstraintBackend] = None,
) -> ScheduleResponse:
    """
    Solve a classic or flexible job-shop dataset, minimizing makespan.

    1. Builds the constraint model on ``backend`` (a fresh CP-SAT model by default)
    2. Solves it once with ``options``
    3. Reconstructs the per-machine schedule for OPTIMAL results, and for
       FEASIBLE ones when ``options.accept_feasible`` is set
    """
    options = options or SolveOptions()
    backend = backend or CpSatBackend()
    t0 = time.time()

    builder = ModelBuilder(dataset)
    kind = "flexible job shop" if dataset.flexible else "job shop"
    logger.info(
        "Building %s model: %d jobs, %d tasks, %d machines, horizon %d",
        kind, len(dataset.jobs), dataset.num_tasks(), builder.num_machines, builder.horizon,
    )
    try:
        built = builder.build(backend)
    except Exception:
        logger.exception("Model construction failed")
        raise

    logger.info("Solving (time limit: %ss, workers: %d)", options.max_time_in_seconds, options.num_workers)
    status = backend.solve(options)
    solve_time = time.time() - t0

    base = dict(status=status, horizon=builder.horizon, solve_time_seconds=round(solve_time, 3))

    if status == SolveStatus.OPTIMAL or (status == SolveStatus.FEASIBLE and options.accept_feasible):
        try:
            schedule, machines = reconstruct_schedule(built, backend)
        except ModelBuildError:
            logger.exception("Solution is inconsistent with the model")
            raise
        makespan = backend.value(built.makespan)
        optimal = status == SolveStatus.OPTIMAL
        logger.info(
            "%s schedule found in %.2fs (solver wall time %.2fs), makespan %d",
            status.value.capitalize(), solve_time, backend.wall_time(), makespan,
        )
        return ScheduleResponse(
            message=(
                f"{'Optimal' if optimal else 'Feasible (not proven optimal)'} schedule found "
                f"in {solve_time:.2f}s. Makespan: {makespan} time units."
            ),
            proven_optimal=optimal,
            makespan=makespan,
            objective_bound=backend.best_objective_bound(),
            schedule=schedule,
            machines=machines,
            **base,
        )

    if status == SolveStatus.FEASIBLE:
        logger.info("Feasible solution found, optimality not proven; schedule not reconstructed")
        return ScheduleResponse(
            message=(
                f"A feasible schedule with makespan {backend.objective_value()} was found but not proven "
                f"optimal. Set accept_feasible to reconstruct it, or increase max_time_in_seconds."
            ),
            objective_bound=backend.best_objective_bound(),
            **base,
        )

    logger.warning("Solver returned status %s", status.value)
    return ScheduleResponse(message=_STATUS_MESSAGES[status], **base)


def solve_with_first_alternatives(
    dataset: FlexibleJobShopDataset,
    options: Optional[SolveOptions] = None,
) -> ScheduleResponse:
    """Solve ``dataset`` with every task pinned to its first-listed alternative."""
    return solve_jobshop(dataset.with_first_alternatives(), options)
