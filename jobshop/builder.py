"""
ShopSolver — Model Builder
Translates a job-shop dataset into constraint-model elements on a backend.

Emits, in one deterministic pass:
  - a master start/duration/end and interval per task
  - per-alternative presence literals, local times and optional intervals
    (flexible datasets), linked to the master when selected
  - one no-overlap constraint per machine
  - precedence between consecutive tasks of a job
  - the makespan variable and its minimization
"""

from __future__ import annotations

import collections
from dataclasses import dataclass, field
from typing import Any

from .backend import ConstraintBackend
from .horizon import compute_horizon, num_machines
from .models import Alternative, FlexibleJobShopDataset, JobShopDataset


# Named tuples for internal bookkeeping
_TaskVars = collections.namedtuple("_TaskVars", "start duration end interval choices")
_ChoiceVars = collections.namedtuple("_ChoiceVars", "presence start end interval duration machine")


@dataclass
class BuiltModel:
    """Handles of everything the builder declared, keyed by (job id, task id)."""
    horizon: int
    num_machines: int
    flexible: bool
    tasks: dict[tuple[int, int], _TaskVars] = field(default_factory=dict)
    machine_intervals: dict[int, list[Any]] = field(default_factory=dict)
    makespan: Any = None


class ModelBuilder:
    """Walks a dataset and posts its variables and constraints on a backend."""

    def __init__(self, dataset: JobShopDataset | FlexibleJobShopDataset, horizon: int | None = None):
        self.dataset = dataset
        self.horizon = compute_horizon(dataset) if horizon is None else horizon
        self.num_machines = num_machines(dataset)

    def build(self, backend: ConstraintBackend) -> BuiltModel:
        built = BuiltModel(
            horizon=self.horizon,
            num_machines=self.num_machines,
            flexible=self.dataset.flexible,
            machine_intervals={m: [] for m in range(self.num_machines)},
        )

        # ── Task and alternative variables ──
        for job_id, job in enumerate(self.dataset.jobs):
            for task_id, task in enumerate(job.tasks):
                built.tasks[(job_id, task_id)] = self._add_task(
                    backend, built, job_id, task_id, task.choices()
                )

        # ── No-overlap per machine ──
        for machine in range(self.num_machines):
            backend.add_no_overlap(built.machine_intervals[machine])

        # ── Precedence constraints (tasks within a job are sequential) ──
        for job_id, job in enumerate(self.dataset.jobs):
            for task_id in range(len(job.tasks) - 1):
                backend.add_less_or_equal(
                    built.tasks[(job_id, task_id)].end,
                    built.tasks[(job_id, task_id + 1)].start,
                )

        # ── Objective ──
        built.makespan = backend.new_int_var(0, self.horizon, "makespan")
        backend.add_max_equality(built.makespan, [tv.end for tv in built.tasks.values()])
        backend.minimize(built.makespan)
        return built

    def _add_task(self, backend, built, job_id, task_id, choices: list[Alternative]) -> _TaskVars:
        suffix = f"_j{job_id}_t{task_id}"
        start = backend.new_int_var(0, self.horizon, f"start{suffix}")
        end = backend.new_int_var(0, self.horizon, f"end{suffix}")

        if not self.dataset.flexible:
            # The lone alternative is always selected: the master interval goes on the machine
            alt = choices[0]
            interval = backend.new_interval(start, alt.duration, end, f"interval{suffix}")
            built.machine_intervals[alt.machine].append(interval)
            return _TaskVars(
                start=start, duration=alt.duration, end=end, interval=interval,
                choices=[_ChoiceVars(None, start, end, interval, alt.duration, alt.machine)],
            )

        duration = backend.new_int_var(
            min(a.duration for a in choices), max(a.duration for a in choices), f"duration{suffix}"
        )
        interval = backend.new_interval(start, duration, end, f"interval{suffix}")
        return _TaskVars(
            start=start, duration=duration, end=end, interval=interval,
            choices=self._add_choice(backend, built, suffix, start, duration, end, choices),
        )

    def _add_choice(self, backend, built, suffix, start, duration, end, choices) -> list[_ChoiceVars]:
        """
        Select exactly one of ``choices`` for the master (start, duration, end).

        Every alternative gets a presence literal and an optional interval on
        its machine; the present one pins the master start/duration/end.
        """
        result = []
        for alt_id, alt in enumerate(choices):
            alt_suffix = f"{suffix}_a{alt_id}"
            presence = backend.new_bool_var(f"presence{alt_suffix}")
            alt_start = backend.new_int_var(0, self.horizon, f"start{alt_suffix}")
            alt_end = backend.new_int_var(0, self.horizon, f"end{alt_suffix}")
            alt_interval = backend.new_optional_interval(
                alt_start, alt.duration, alt_end, presence, f"interval{alt_suffix}"
            )
            built.machine_intervals[alt.machine].append(alt_interval)

            # Link alternative start/duration/end to the master when present
            backend.add_equality(start, alt_start, enforce=presence)
            backend.add_equality(duration, alt.duration, enforce=presence)
            backend.add_equality(end, alt_end, enforce=presence)

            result.append(_ChoiceVars(presence, alt_start, alt_end, alt_interval, alt.duration, alt.machine))

        # Exactly one machine must be chosen
        backend.add_exactly_one([c.presence for c in result])
        return result


def build_model(dataset, backend: ConstraintBackend) -> BuiltModel:
    """Build ``dataset`` on ``backend`` with the default horizon."""
    return ModelBuilder(dataset).build(backend)
