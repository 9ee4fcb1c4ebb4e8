"""Shared fixtures: a recording backend that stands in for a real solver."""

import pytest

from jobshop.backend import ConstraintBackend
from jobshop.models import SolveStatus


class RecordingBackend(ConstraintBackend):
    """Logs every declaration and constraint; handles are variable names."""

    def __init__(self, status=SolveStatus.OPTIMAL, values=None):
        self.calls = []
        self.status = status
        self.values = values or {}
        self.options = None

    def new_int_var(self, lb, ub, name):
        self.calls.append(("int", lb, ub, name))
        return name

    def new_bool_var(self, name):
        self.calls.append(("bool", name))
        return name

    def new_interval(self, start, duration, end, name):
        self.calls.append(("interval", start, duration, end, name))
        return name

    def new_optional_interval(self, start, duration, end, presence, name):
        self.calls.append(("optional_interval", start, duration, end, presence, name))
        return name

    def add_equality(self, left, right, enforce=None):
        self.calls.append(("eq", left, right, enforce))

    def add_less_or_equal(self, left, right, enforce=None):
        self.calls.append(("le", left, right, enforce))

    def add_exactly_one(self, literals):
        self.calls.append(("exactly_one", tuple(literals)))

    def add_no_overlap(self, intervals):
        self.calls.append(("no_overlap", tuple(intervals)))

    def add_max_equality(self, target, variables):
        self.calls.append(("max_eq", target, tuple(variables)))

    def minimize(self, objective):
        self.calls.append(("minimize", objective))

    def solve(self, options):
        self.options = options
        return self.status

    def value(self, handle):
        return self.values.get(handle, 0)

    def objective_value(self):
        return self.values.get("makespan", 0)

    def best_objective_bound(self):
        return self.values.get("makespan", 0)

    def wall_time(self):
        return 0.0

    def of_kind(self, kind):
        return [c for c in self.calls if c[0] == kind]


@pytest.fixture
def recording_backend():
    """Factory for RecordingBackend instances."""
    return RecordingBackend
