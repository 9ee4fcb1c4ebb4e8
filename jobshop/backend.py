"""
ShopSolver — Constraint Backends
The narrow capability interface the model builder and the schedule
reconstructor talk to, and its Google OR-Tools CP-SAT implementation.

A backend is single-use: declare variables and constraints, call ``solve``
once, then read values. Handles returned by the ``new_*`` methods are opaque
to callers and only ever passed back to the same backend.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from ortools.sat.python import cp_model

from .models import SolveOptions, SolveStatus

logger = logging.getLogger(__name__)


class ConstraintBackend(ABC):
    """Capability set of a constraint-solving engine."""

    # ── Declarations ──

    @abstractmethod
    def new_int_var(self, lb: int, ub: int, name: str) -> Any:
        """Bounded integer variable in ``[lb, ub]``."""

    @abstractmethod
    def new_bool_var(self, name: str) -> Any:
        ...

    @abstractmethod
    def new_interval(self, start: Any, duration: Any, end: Any, name: str) -> Any:
        """Interval tying ``end == start + duration``."""

    @abstractmethod
    def new_optional_interval(self, start: Any, duration: Any, end: Any, presence: Any, name: str) -> Any:
        """Interval that only exists when ``presence`` is true."""

    # ── Constraints ──

    @abstractmethod
    def add_equality(self, left: Any, right: Any, enforce: Optional[Any] = None) -> None:
        """``left == right``, only when ``enforce`` holds if given."""

    @abstractmethod
    def add_less_or_equal(self, left: Any, right: Any, enforce: Optional[Any] = None) -> None:
        """``left <= right``, only when ``enforce`` holds if given."""

    @abstractmethod
    def add_exactly_one(self, literals: Sequence[Any]) -> None:
        """The booleans in ``literals`` sum to exactly 1."""

    @abstractmethod
    def add_no_overlap(self, intervals: Sequence[Any]) -> None:
        """No two present intervals overlap. An empty set is a no-op."""

    @abstractmethod
    def add_max_equality(self, target: Any, variables: Sequence[Any]) -> None:
        ...

    @abstractmethod
    def minimize(self, objective: Any) -> None:
        ...

    # ── Solving & results ──

    @abstractmethod
    def solve(self, options: SolveOptions) -> SolveStatus:
        """Blocking search until a terminal status or the configured limit."""

    @abstractmethod
    def value(self, handle: Any) -> int:
        ...

    @abstractmethod
    def objective_value(self) -> int:
        ...

    @abstractmethod
    def best_objective_bound(self) -> int:
        ...

    @abstractmethod
    def wall_time(self) -> float:
        ...


_STATUS_MAP = {
    cp_model.OPTIMAL: SolveStatus.OPTIMAL,
    cp_model.FEASIBLE: SolveStatus.FEASIBLE,
    cp_model.INFEASIBLE: SolveStatus.INFEASIBLE,
    cp_model.MODEL_INVALID: SolveStatus.MODEL_INVALID,
    cp_model.UNKNOWN: SolveStatus.UNKNOWN,
}


class CpSatBackend(ConstraintBackend):
    """OR-Tools CP-SAT engine."""

    def __init__(self):
        self.model = cp_model.CpModel()
        self.solver = cp_model.CpSolver()
        self._solved = False

    def new_int_var(self, lb, ub, name):
        return self.model.new_int_var(lb, ub, name)

    def new_bool_var(self, name):
        return self.model.new_bool_var(name)

    def new_interval(self, start, duration, end, name):
        return self.model.new_interval_var(start, duration, end, name)

    def new_optional_interval(self, start, duration, end, presence, name):
        return self.model.new_optional_interval_var(start, duration, end, presence, name)

    def add_equality(self, left, right, enforce=None):
        ct = self.model.add(left == right)
        if enforce is not None:
            ct.only_enforce_if(enforce)

    def add_less_or_equal(self, left, right, enforce=None):
        ct = self.model.add(left <= right)
        if enforce is not None:
            ct.only_enforce_if(enforce)

    def add_exactly_one(self, literals):
        self.model.add_exactly_one(literals)

    def add_no_overlap(self, intervals):
        self.model.add_no_overlap(intervals)

    def add_max_equality(self, target, variables):
        self.model.add_max_equality(target, variables)

    def minimize(self, objective):
        self.model.minimize(objective)

    def solve(self, options):
        params = self.solver.parameters
        if options.max_time_in_seconds is not None:
            params.max_time_in_seconds = options.max_time_in_seconds
        params.num_workers = options.num_workers
        if options.random_seed is not None:
            params.random_seed = options.random_seed
        params.log_search_progress = options.log_search_progress

        status = self.solver.solve(self.model)
        self._solved = True
        logger.debug("CP-SAT finished: %s", self.solver.response_stats())
        return _STATUS_MAP.get(status, SolveStatus.UNKNOWN)

    def value(self, handle):
        return self.solver.value(handle)

    def objective_value(self):
        return int(self.solver.objective_value)

    def best_objective_bound(self):
        return int(self.solver.best_objective_bound)

    def wall_time(self):
        return self.solver.wall_time if self._solved else 0.0
