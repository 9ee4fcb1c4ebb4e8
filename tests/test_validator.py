"""Tests for the ShopSolver schedule validator."""

from jobshop.datasets import CLASSIC_OPTIMAL_MAKESPAN, classic_example, flexible_example
from jobshop.models import AssignedTask
from jobshop.validator import validate_schedule


def at(job, task, machine, start, duration, end=None, alternative=0):
    return AssignedTask(
        job_id=job, task_id=task, machine_id=machine, start=start,
        end=start + duration if end is None else end,
        duration=duration, alternative=alternative,
    )


# Optimal classic schedule with job_0_task0 before job_1_task0 on machine 0
OPTIMAL_CLASSIC = [
    at(0, 0, 0, 0, 3), at(0, 1, 1, 4, 2), at(0, 2, 2, 6, 2),
    at(1, 0, 0, 3, 2), at(1, 1, 2, 5, 1), at(1, 2, 1, 6, 4),
    at(2, 0, 1, 0, 4), at(2, 1, 2, 8, 3),
]


def kinds(result):
    return {v.violation_type for v in result.violations}


class TestValidSchedules:
    def test_known_optimal_classic(self):
        result = validate_schedule(classic_example(), OPTIMAL_CLASSIC)
        assert result.is_valid
        assert result.num_violations == 0
        assert result.makespan == CLASSIC_OPTIMAL_MAKESPAN

    def test_flexible_serial_on_fastest_machine(self):
        ds = flexible_example()
        # Job 0 on machine 1/0/2, jobs one after the other
        schedule = [
            at(0, 0, 1, 0, 1, alternative=1), at(0, 1, 0, 1, 2, alternative=0), at(0, 2, 2, 3, 1, alternative=2),
        ]
        result = validate_schedule(ds, schedule)
        assert result.is_valid
        assert "missing_task" in kinds(result)
        assert all(v.severity == "warning" for v in result.violations)
        missing = {label for v in result.violations for label in v.affected_tasks}
        assert "job_1_task0" in missing


class TestViolations:
    def test_overlap(self):
        schedule = list(OPTIMAL_CLASSIC)
        schedule[3] = at(1, 0, 0, 2, 2)
        result = validate_schedule(classic_example(), schedule)
        assert not result.is_valid
        assert "overlap" in kinds(result)
        assert result.makespan is None

    def test_precedence(self):
        schedule = list(OPTIMAL_CLASSIC)
        schedule[7] = at(2, 1, 2, 3, 3)
        result = validate_schedule(classic_example(), schedule)
        assert "precedence" in kinds(result)

    def test_machine_eligibility(self):
        schedule = list(OPTIMAL_CLASSIC)
        schedule[0] = at(0, 0, 2, 0, 3)
        result = validate_schedule(classic_example(), schedule)
        assert "machine_eligibility" in kinds(result)

    def test_duration_mismatch(self):
        schedule = list(OPTIMAL_CLASSIC)
        schedule[0] = at(0, 0, 0, 0, 1)
        result = validate_schedule(classic_example(), schedule)
        assert "duration" in kinds(result)

    def test_flexible_duration_must_match_machine(self):
        # Task (0, 0) takes 3 on machine 0, 1 on machine 1
        result = validate_schedule(flexible_example(), [at(0, 0, 0, 0, 1)])
        assert "duration" in kinds(result)

    def test_alternative_out_of_range(self):
        result = validate_schedule(flexible_example(), [at(0, 0, 0, 0, 3, alternative=7)])
        assert not result.is_valid
        assert "alternative" in kinds(result)

    def test_alternative_must_match_machine_and_duration(self):
        # Alternative 2 of task (0, 0) is 5 time units on machine 2
        result = validate_schedule(flexible_example(), [at(0, 0, 0, 0, 3, alternative=2)])
        assert not result.is_valid
        assert "alternative" in kinds(result)

    def test_matching_alternative_accepted(self):
        result = validate_schedule(flexible_example(), [at(0, 0, 2, 0, 5, alternative=2)])
        assert result.is_valid

    def test_classic_task_has_only_alternative_zero(self):
        schedule = list(OPTIMAL_CLASSIC)
        schedule[0] = at(0, 0, 0, 0, 3, alternative=1)
        result = validate_schedule(classic_example(), schedule)
        assert not result.is_valid
        assert kinds(result) == {"alternative"}

    def test_consistency(self):
        schedule = list(OPTIMAL_CLASSIC)
        schedule[0] = at(0, 0, 0, 0, 3, end=4)
        result = validate_schedule(classic_example(), schedule)
        assert "consistency" in kinds(result)

    def test_unknown_job_and_task(self):
        schedule = OPTIMAL_CLASSIC + [at(7, 0, 0, 20, 1), at(2, 5, 0, 20, 1)]
        result = validate_schedule(classic_example(), schedule)
        assert {"unknown_job", "unknown_task"} <= kinds(result)

    def test_duplicate_task(self):
        schedule = OPTIMAL_CLASSIC + [at(0, 0, 0, 12, 3)]
        result = validate_schedule(classic_example(), schedule)
        assert "duplicate_task" in kinds(result)
        assert not result.is_valid
