"""
ShopSolver — Schedule Validator
Checks a schedule (solver output or hand-made) against its dataset.
"""

from __future__ import annotations

import collections

from .models import (
    AssignedTask, FlexibleJobShopDataset, JobShopDataset,
    ValidateResponse, ValidationViolation, task_label,
)


def validate_schedule(
    dataset: JobShopDataset | FlexibleJobShopDataset,
    schedule: list[AssignedTask],
) -> ValidateResponse:
    """
    Validate ``schedule`` against ``dataset``.

    Checks:
      1. Consistency (start + duration == end)
      2. Known job / task, scheduled at most once
      3. Machine eligibility and duration of the selected alternative
      4. No overlaps on a machine
      5. Precedence within each job
      6. Missing tasks (warning)
    """
    violations: list[ValidationViolation] = []

    def violation(kind, description, *tasks, severity="error"):
        violations.append(ValidationViolation(
            violation_type=kind, severity=severity,
            description=description, affected_tasks=list(tasks),
        ))

    # ── 1. Consistency check ──
    for at in schedule:
        if at.start + at.duration != at.end:
            violation(
                "consistency",
                f"Task {at.label}: start({at.start}) + duration({at.duration}) != end({at.end})",
                at.label,
            )

    # ── 2-3. Known task, eligibility, duration ──
    task_lookup: dict[tuple[int, int], AssignedTask] = {}
    for at in schedule:
        if not 0 <= at.job_id < len(dataset.jobs):
            violation("unknown_job", f"Scheduled task references unknown job {at.job_id}", at.label)
            continue
        job = dataset.jobs[at.job_id]
        if not 0 <= at.task_id < len(job.tasks):
            violation("unknown_task", f"Job {at.job_id} has no task {at.task_id}", at.label)
            continue
        if (at.job_id, at.task_id) in task_lookup:
            violation("duplicate_task", f"Task {at.label} is scheduled more than once", at.label)
            continue
        task_lookup[(at.job_id, at.task_id)] = at

        choices = job.tasks[at.task_id].choices()
        eligible = [a.machine for a in choices]
        if at.machine_id not in eligible:
            violation(
                "machine_eligibility",
                f"Task {at.label} assigned to machine {at.machine_id} but eligible machines are {eligible}",
                at.label,
            )
        elif at.duration not in {a.duration for a in choices if a.machine == at.machine_id}:
            violation(
                "duration",
                f"Task {at.label} runs {at.duration} time units on machine {at.machine_id}, "
                f"which matches none of its alternatives",
                at.label,
            )
        elif at.alternative >= len(choices):
            violation(
                "alternative",
                f"Task {at.label} selects alternative {at.alternative} but has only {len(choices)}",
                at.label,
            )
        elif (choices[at.alternative].machine, choices[at.alternative].duration) != (at.machine_id, at.duration):
            chosen = choices[at.alternative]
            violation(
                "alternative",
                f"Task {at.label}: alternative {at.alternative} is {chosen.duration} time units "
                f"on machine {chosen.machine}, not {at.duration} on machine {at.machine_id}",
                at.label,
            )

    # ── 4. No-overlap per machine ──
    tasks_by_machine: dict[int, list[AssignedTask]] = collections.defaultdict(list)
    for at in task_lookup.values():
        tasks_by_machine[at.machine_id].append(at)

    for mid, tasks in tasks_by_machine.items():
        sorted_tasks = sorted(tasks, key=lambda t: t.start)
        for a, b in zip(sorted_tasks, sorted_tasks[1:]):
            if a.end > b.start:
                violation(
                    "overlap",
                    f"Machine {mid}: task {a.label} ends at {a.end} but {b.label} starts at {b.start}",
                    a.label, b.label,
                )

    # ── 5. Precedence within jobs ──
    for job_id, job in enumerate(dataset.jobs):
        for task_id in range(len(job.tasks) - 1):
            first = task_lookup.get((job_id, task_id))
            second = task_lookup.get((job_id, task_id + 1))
            if first and second and second.start < first.end:
                violation(
                    "precedence",
                    f"Job {job_id}: task {task_id + 1} starts at {second.start} "
                    f"before predecessor {task_id} ends at {first.end}",
                    first.label, second.label,
                )

    # ── 6. Missing tasks (warnings) ──
    for job_id, job in enumerate(dataset.jobs):
        for task_id in range(len(job.tasks)):
            if (job_id, task_id) not in task_lookup:
                violation(
                    "missing_task", f"Task {task_label(job_id, task_id)} is not in the schedule",
                    task_label(job_id, task_id), severity="warning",
                )

    errors = [v for v in violations if v.severity == "error"]
    return ValidateResponse(
        is_valid=not errors,
        num_violations=len(violations),
        violations=violations,
        makespan=max((at.end for at in task_lookup.values()), default=None) if not errors else None,
    )
