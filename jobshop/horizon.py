"""
ShopSolver — Horizon
Upper bound on every time variable of the model.

The bound assumes every task runs back to back on a single timeline using
its longest alternative. Any feasible schedule can be compacted to fit in it.
"""

from __future__ import annotations

from .models import FlexibleJobShopDataset, JobShopDataset


def compute_horizon(dataset: JobShopDataset | FlexibleJobShopDataset) -> int:
    """Sum over all tasks of the (longest alternative) duration."""
    return sum(
        max(a.duration for a in task.choices())
        for job in dataset.jobs
        for task in job.tasks
    )


def num_machines(dataset: JobShopDataset | FlexibleJobShopDataset) -> int:
    """Machine count: the declared one, else one plus the highest referenced id."""
    if dataset.num_machines is not None:
        return dataset.num_machines
    return dataset.referenced_machines()
