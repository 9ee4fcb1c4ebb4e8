"""
ShopSolver — Data Models
Pydantic schemas for the job-shop and flexible job-shop solver.

The dataset is a three-level ordered structure: jobs → tasks → alternatives.
A classic task is the one-alternative special case of a flexible task, so
both variants expose ``choices()`` and the model builder handles them
through a single code path.

Malformed datasets (non-positive durations, negative machine ids, empty
alternative lists, empty jobs) are rejected here, before any model is built.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar, Optional

from pydantic import BaseModel, Field, model_validator


# ─────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────

class SolveStatus(str, Enum):
    """Terminal status reported by the constraint backend."""
    OPTIMAL = "optimal"
    FEASIBLE = "feasible"
    INFEASIBLE = "infeasible"
    UNKNOWN = "unknown"
    MODEL_INVALID = "model_invalid"


# ─────────────────────────────────────────────
# Dataset
# ─────────────────────────────────────────────

class Alternative(BaseModel):
    """One way to process a task: a fixed duration on a given machine."""
    duration: int = Field(..., gt=0, description="Processing time in time units")
    machine: int = Field(..., ge=0, description="Machine index")


class Task(BaseModel):
    """A classic job-shop task, bound to exactly one machine."""
    machine: int = Field(..., ge=0, description="Machine index")
    duration: int = Field(..., gt=0, description="Processing time in time units")

    def choices(self) -> list[Alternative]:
        return [Alternative(duration=self.duration, machine=self.machine)]


class FlexibleTask(BaseModel):
    """A flexible task: the solver picks exactly one of the listed alternatives."""
    alternatives: list[Alternative] = Field(
        ..., min_length=1,
        description="Ordered (duration, machine) alternatives. Exactly one is selected.",
    )

    def choices(self) -> list[Alternative]:
        return self.alternatives

    @property
    def min_duration(self) -> int:
        return min(a.duration for a in self.alternatives)

    @property
    def max_duration(self) -> int:
        return max(a.duration for a in self.alternatives)


class Job(BaseModel):
    """A classic job: ordered tasks executed in sequence."""
    tasks: list[Task] = Field(..., min_length=1, description="Ordered list of tasks. Executed in sequence.")


class FlexibleJob(BaseModel):
    """A flexible job: ordered tasks, each with machine alternatives."""
    tasks: list[FlexibleTask] = Field(..., min_length=1, description="Ordered list of tasks. Executed in sequence.")


class _DatasetBase(BaseModel):
    num_machines: Optional[int] = Field(
        None, ge=1,
        description="Explicit machine count. None = one plus the highest machine id referenced.",
    )

    flexible: ClassVar[bool] = False

    def referenced_machines(self) -> int:
        """One plus the maximum machine id referenced by any task."""
        return 1 + max(
            a.machine
            for job in self.jobs
            for task in job.tasks
            for a in task.choices()
        )

    @model_validator(mode="after")
    def validate_machine_count(self):
        referenced = self.referenced_machines()
        if self.num_machines is not None and self.num_machines < referenced:
            raise ValueError(
                f"num_machines ({self.num_machines}) is smaller than the "
                f"{referenced} machines referenced by tasks"
            )
        return self

    def num_tasks(self) -> int:
        return sum(len(job.tasks) for job in self.jobs)


class JobShopDataset(_DatasetBase):
    """
    Classic job-shop dataset.

    Jobs are identified by their position; task ids are positions within the job.
    """
    jobs: list[Job] = Field(..., min_length=1, description="Jobs to schedule")

    @classmethod
    def from_tuples(cls, jobs_data, num_machines: Optional[int] = None) -> "JobShopDataset":
        """Build from nested ``[[(machine, duration), ...], ...]`` data."""
        return cls(
            jobs=[
                Job(tasks=[Task(machine=m, duration=d) for m, d in job])
                for job in jobs_data
            ],
            num_machines=num_machines,
        )


class FlexibleJobShopDataset(_DatasetBase):
    """Flexible job-shop dataset: every task lists its (duration, machine) alternatives."""
    jobs: list[FlexibleJob] = Field(..., min_length=1, description="Jobs to schedule")
    flexible: ClassVar[bool] = True

    @classmethod
    def from_tuples(cls, jobs_data, num_machines: Optional[int] = None) -> "FlexibleJobShopDataset":
        """Build from nested ``[[[(duration, machine), ...], ...], ...]`` data."""
        return cls(
            jobs=[
                FlexibleJob(tasks=[
                    FlexibleTask(alternatives=[Alternative(duration=d, machine=m) for d, m in task])
                    for task in job
                ])
                for job in jobs_data
            ],
            num_machines=num_machines,
        )

    def with_first_alternatives(self) -> JobShopDataset:
        """Classic dataset fixing every task to its first-listed alternative."""
        return JobShopDataset(
            jobs=[
                Job(tasks=[
                    Task(machine=t.alternatives[0].machine, duration=t.alternatives[0].duration)
                    for t in job.tasks
                ])
                for job in self.jobs
            ],
            num_machines=self.num_machines or self.referenced_machines(),
        )


# ─────────────────────────────────────────────
# Configuration
# ─────────────────────────────────────────────

class SolveOptions(BaseModel):
    """Solver configuration. Passed once to the backend's blocking solve call."""
    max_time_in_seconds: Optional[float] = Field(
        30.0, gt=0, description="Solver time limit in seconds. None = no limit."
    )
    num_workers: int = Field(8, ge=0, description="Parallel search workers (0 = solver default)")
    random_seed: Optional[int] = Field(None, ge=0, description="Fixed search seed")
    log_search_progress: bool = Field(False, description="Let the backend log its search")
    accept_feasible: bool = Field(
        False,
        description="Reconstruct a schedule from FEASIBLE (not proven optimal) results too.",
    )


# ─────────────────────────────────────────────
# Output Models
# ─────────────────────────────────────────────

def task_label(job_id: int, task_id: int) -> str:
    return f"job_{job_id}_task{task_id}"


class AssignedTask(BaseModel):
    """A task placed on a machine with concrete times."""
    job_id: int
    task_id: int
    machine_id: int
    start: int = Field(..., ge=0, description="Start time")
    end: int = Field(..., ge=0, description="End time")
    duration: int = Field(..., gt=0)
    alternative: int = Field(0, ge=0, description="Index of the selected alternative")

    @property
    def label(self) -> str:
        return task_label(self.job_id, self.task_id)


class MachineTimeline(BaseModel):
    """Ordered work of one machine."""
    machine_id: int
    labels: list[str] = Field(default_factory=list, description="Task labels in execution order")
    intervals: list[tuple[int, int]] = Field(
        default_factory=list, description="[start, end) intervals in execution order"
    )
    busy_time: int = Field(0, ge=0)


class ScheduleResponse(BaseModel):
    """
    Complete solver response.

    ``schedule`` and ``machines`` are filled only when a schedule was
    reconstructed: always for OPTIMAL, for FEASIBLE only when the caller set
    ``SolveOptions.accept_feasible``.
    """
    status: SolveStatus
    message: str = Field(..., description="Human-readable status message")
    proven_optimal: bool = False
    makespan: Optional[int] = None
    objective_bound: Optional[int] = None
    horizon: int = 0
    solve_time_seconds: float = 0.0
    schedule: list[AssignedTask] = Field(default_factory=list)
    machines: list[MachineTimeline] = Field(default_factory=list)


# ─────────────────────────────────────────────
# Validation Request/Response
# ─────────────────────────────────────────────

class ValidationViolation(BaseModel):
    """A single constraint violation found in a schedule."""
    violation_type: str = Field(..., description="Type: overlap, precedence, machine_eligibility, etc.")
    severity: str = Field("error", description="error or warning")
    description: str
    affected_tasks: list[str] = Field(default_factory=list)


class ValidateRequest(BaseModel):
    """Validate an existing schedule against a classic dataset."""
    schedule: list[AssignedTask] = Field(..., min_length=1)
    dataset: JobShopDataset


class FlexibleValidateRequest(BaseModel):
    """Validate an existing schedule against a flexible dataset."""
    schedule: list[AssignedTask] = Field(..., min_length=1)
    dataset: FlexibleJobShopDataset


class ValidateResponse(BaseModel):
    """Validation result."""
    is_valid: bool
    num_violations: int = 0
    violations: list[ValidationViolation] = Field(default_factory=list)
    makespan: Optional[int] = None
