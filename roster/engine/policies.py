"""Assignment policies that pick the member covering each occurrence."""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import List, Optional

from roster.domain.models import ALGORITHM_BALANCED, ALGORITHM_RANDOM, ALGORITHM_ROTATION, Member


def sort_by_participation(members: List[Member]) -> List[Member]:
    """Stable ascending sort by participation count."""
    return sorted(members, key=lambda m: m.participation_count)


class AssignmentPolicy(ABC):
    """
    Abstract base class for assignment policies.

    A policy sees the working list of members for one activity, already
    sorted by participation count when the activity started, and the
    zero-based index of the occurrence being assigned.
    """

    name: str | None = None  # Override in subclasses (e.g., "rotation")

    @abstractmethod
    def pick(self, members: List[Member], occurrence: int) -> Member:
        """
        Choose the member for one occurrence.

        Args:
            members: Working list for the current activity (may be reordered)
            occurrence: Index of the occurrence within the activity

        Returns:
            The assigned member
        """
        pass


class RotationPolicy(AssignmentPolicy):
    """Round robin over the activity's starting order."""

    name = ALGORITHM_ROTATION

    def pick(self, members: List[Member], occurrence: int) -> Member:
        return members[occurrence % len(members)]


class RandomPolicy(AssignmentPolicy):
    """Uniform random pick, independent for every occurrence."""

    name = ALGORITHM_RANDOM

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def pick(self, members: List[Member], occurrence: int) -> Member:
        return members[self.rng.randrange(len(members))]


class BalancedPolicy(AssignmentPolicy):
    """Least-assigned member first; re-sorts the working list every time."""

    name = ALGORITHM_BALANCED

    def pick(self, members: List[Member], occurrence: int) -> Member:
        members.sort(key=lambda m: m.participation_count)
        return members[0]


class FirstMemberPolicy(AssignmentPolicy):
    """Fallback for unrecognised algorithm names."""

    name = "first"

    def pick(self, members: List[Member], occurrence: int) -> Member:
        return members[0]


def get_policy(algorithm: str, rng: Optional[random.Random] = None) -> AssignmentPolicy:
    """Return the policy for an algorithm name, falling back to the first member."""
    if algorithm == ALGORITHM_ROTATION:
        return RotationPolicy()
    if algorithm == ALGORITHM_RANDOM:
        return RandomPolicy(rng)
    if algorithm == ALGORITHM_BALANCED:
        return BalancedPolicy()
    print(f"[WARN] Unknown algorithm {algorithm!r}, assigning the first member")
    return FirstMemberPolicy()
