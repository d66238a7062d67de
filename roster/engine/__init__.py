"""Scheduling engine: date stepping, assignment policies and the generator."""

from .dates import add_months, count_occurrences, iter_occurrences, step_date
from .generator import ScheduleGenerator, generate_schedule
from .policies import (
    AssignmentPolicy,
    BalancedPolicy,
    FirstMemberPolicy,
    RandomPolicy,
    RotationPolicy,
    get_policy,
)

__all__ = [
    "add_months",
    "count_occurrences",
    "iter_occurrences",
    "step_date",
    "ScheduleGenerator",
    "generate_schedule",
    "AssignmentPolicy",
    "BalancedPolicy",
    "FirstMemberPolicy",
    "RandomPolicy",
    "RotationPolicy",
    "get_policy",
]
