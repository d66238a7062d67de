"""ScheduleGenerator - assigns members to every activity occurrence in a date window."""

from __future__ import annotations

import random
from datetime import date
from typing import List, Optional

from roster.domain.models import Activity, Member, ScheduleEntry
from roster.domain.repositories import RecordStore
from roster.errors import InvalidDateRange, NoActiveMembers, NoActivities
from roster.validator import validate_schedule

from .dates import iter_occurrences
from .policies import AssignmentPolicy, get_policy, sort_by_participation


class ScheduleGenerator:
    """
    Builds a complete schedule from the store's active members and activities.

    Activities are processed in store order and share the same member
    records, so counts accumulated by one activity shape the starting order
    (and, for the balanced policy, every pick) of the next.
    """

    def __init__(self, store: RecordStore, rng: Optional[random.Random] = None):
        """
        Initialize generator.

        Args:
            store: Record store to read from and write to
            rng: Random source for the random policy (seed it for repeatable runs)
        """
        self.store = store
        self.rng = rng or random.Random()

    def generate(self, start_date: date, end_date: date) -> List[ScheduleEntry]:
        """
        Replace the stored schedule with a new one covering start..end inclusive.

        Args:
            start_date: First day of the window
            end_date: Last day of the window

        Returns:
            The new schedule entries, grouped by activity

        Raises:
            InvalidDateRange: If start_date is after end_date
            NoActiveMembers: If no member is active
            NoActivities: If there is no activity
        """
        if start_date > end_date:
            raise InvalidDateRange(start_date, end_date)

        with self.store.lock:
            members = self.store.list_active_members()
            activities = list(self.store.activities)
            algorithm = self.store.settings.algorithm

            # Checked before anything is cleared, so a failed run keeps the old schedule
            if not members:
                raise NoActiveMembers()
            if not activities:
                raise NoActivities()

            print(f"[INFO] Generating schedule {start_date} .. {end_date} ({algorithm})")
            self.store.schedules = []
            for member in members:
                member.participation_count = 0

            policy = get_policy(algorithm, self.rng)
            entries: List[ScheduleEntry] = []
            try:
                for activity in activities:
                    activity_entries = self.generate_activity(activity, members, start_date, end_date, policy)
                    entries.extend(activity_entries)
                    print(f"[OK] {activity.name}: {len(activity_entries)} occurrences")

                validate_schedule(entries, members, start_date, end_date)
                self.store.replace_many({"schedules": entries, "members": self.store.members})
            except Exception:
                # Drop the half-applied in-memory changes
                self.store.load()
                raise

        print(f"[OK] Generated {len(entries)} schedule entries")
        return entries

    def generate_activity(
        self,
        activity: Activity,
        members: List[Member],
        start_date: date,
        end_date: date,
        policy: AssignmentPolicy,
    ) -> List[ScheduleEntry]:
        """Assign every occurrence of one activity, incrementing member counts."""
        working = sort_by_participation(members)
        entries: List[ScheduleEntry] = []

        for occurrence, current in enumerate(
            iter_occurrences(start_date, end_date, activity.frequency, activity.frequency_unit)
        ):
            member = policy.pick(working, occurrence)
            entries.append(
                ScheduleEntry(
                    id=self.store.new_id(),
                    activity_id=activity.id,
                    activity_name=activity.name,
                    member_id=member.id,
                    member_name=member.name,
                    date=current,
                    notified=False,
                )
            )
            member.participation_count += 1

        return entries


def generate_schedule(
    store: RecordStore,
    start_date: date,
    end_date: date,
    rng: Optional[random.Random] = None,
) -> List[ScheduleEntry]:
    """Convenience function to generate and persist a schedule."""
    return ScheduleGenerator(store, rng).generate(start_date, end_date)
