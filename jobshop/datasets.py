"""
ShopSolver — Reference Datasets
Small instances with known behavior, used by the API examples and tests.
"""

from .models import FlexibleJobShopDataset, JobShopDataset


# task = (machine, duration)
CLASSIC_JOBS = [
    [(0, 3), (1, 2), (2, 2)],
    [(0, 2), (2, 1), (1, 4)],
    [(1, 4), (2, 3)],
]
CLASSIC_OPTIMAL_MAKESPAN = 11

# task = [(duration, machine), ...]
FLEXIBLE_JOBS = [
    [[(3, 0), (1, 1), (5, 2)], [(2, 0), (4, 1), (6, 2)], [(2, 0), (3, 1), (1, 2)]],
    [[(2, 0), (3, 1), (4, 2)], [(1, 0), (5, 1), (4, 2)], [(2, 0), (1, 1), (4, 2)]],
    [[(2, 0), (1, 1), (4, 2)], [(2, 0), (3, 1), (4, 2)], [(3, 0), (1, 1), (5, 2)]],
]


def classic_example() -> JobShopDataset:
    """3 jobs on 3 machines; optimal makespan 11."""
    return JobShopDataset.from_tuples(CLASSIC_JOBS)


def flexible_example() -> FlexibleJobShopDataset:
    """3 jobs x 3 tasks, every task with one alternative per machine."""
    return FlexibleJobShopDataset.from_tuples(FLEXIBLE_JOBS)
