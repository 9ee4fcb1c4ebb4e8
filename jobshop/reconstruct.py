"""
ShopSolver — Schedule Reconstruction
Reads solved values back out of the backend and lays them out per machine.
"""

from __future__ import annotations

import collections

from .backend import ConstraintBackend
from .builder import BuiltModel
from .errors import ModelBuildError
from .models import AssignedTask, MachineTimeline


def assigned_tasks(built: BuiltModel, backend: ConstraintBackend) -> list[AssignedTask]:
    """One AssignedTask per task, in (job, task) order, using the selected alternative."""
    result = []
    for (job_id, task_id), tv in built.tasks.items():
        if built.flexible:
            selected = [i for i, c in enumerate(tv.choices) if backend.value(c.presence)]
            if len(selected) != 1:
                raise ModelBuildError(
                    f"Task {job_id}/{task_id}: expected exactly one selected alternative, got {len(selected)}"
                )
            alt_id = selected[0]
        else:
            alt_id = 0

        choice = tv.choices[alt_id]
        start = backend.value(tv.start)
        result.append(AssignedTask(
            job_id=job_id, task_id=task_id, machine_id=choice.machine,
            start=start, end=start + choice.duration,
            duration=choice.duration, alternative=alt_id,
        ))
    return result


def machine_timelines(tasks: list[AssignedTask], machine_count: int) -> list[MachineTimeline]:
    """Group by machine and order by start; ties keep encounter order."""
    by_machine: dict[int, list[AssignedTask]] = collections.defaultdict(list)
    for at in tasks:
        by_machine[at.machine_id].append(at)

    timelines = []
    for machine in range(machine_count):
        ordered = sorted(by_machine.get(machine, []), key=lambda t: t.start)
        timelines.append(MachineTimeline(
            machine_id=machine,
            labels=[t.label for t in ordered],
            intervals=[(t.start, t.end) for t in ordered],
            busy_time=sum(t.duration for t in ordered),
        ))
    return timelines


def reconstruct_schedule(built: BuiltModel, backend: ConstraintBackend) -> tuple[list[AssignedTask], list[MachineTimeline]]:
    """Assigned tasks plus the per-machine view of a solved model."""
    tasks = assigned_tasks(built, backend)
    return tasks, machine_timelines(tasks, built.num_machines)
