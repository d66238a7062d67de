from __future__ import annotations

from datetime import date
from typing import List

import pandas as pd

from roster.domain.models import Member, ScheduleEntry


def validate_schedule(
    entries: List[ScheduleEntry],
    members: List[Member],
    start: date,
    end: date,
) -> None:
    # Every entry inside the window and assigned to a known member
    member_ids = {m.id for m in members}
    for entry in entries:
        if not start <= entry.date <= end:
            raise ValueError(f"Entry for {entry.activity_name} on {entry.date} is outside {start} .. {end}")
        if entry.member_id not in member_ids:
            raise ValueError(f"Entry on {entry.date} references unknown member {entry.member_id}")
        if entry.notified:
            raise ValueError(f"Fresh entry on {entry.date} is already marked notified")

    # Member counts must equal the number of assignments
    counts = pd.Series([e.member_id for e in entries], dtype=object).value_counts()
    for member in members:
        if member.is_active and int(counts.get(member.id, 0)) != member.participation_count:
            raise ValueError(
                f"Participation count mismatch for {member.name}: "
                f"recorded {member.participation_count}, assigned {int(counts.get(member.id, 0))}"
            )


def summarize_schedule(entries: List[ScheduleEntry]) -> str:
    if not entries:
        return "No schedule entries."
    df = pd.DataFrame(
        [{"date": e.date, "activity": e.activity_name, "member": e.member_name} for e in entries]
    )

    per_activity = df.groupby("activity").agg(
        occurrences=("date", "size"),
        first=("date", "min"),
        last=("date", "max"),
    )
    per_member = df.groupby("member").size().sort_values(ascending=False)
    matrix = df.groupby(["member", "activity"]).size().unstack(fill_value=0)

    lines = ["Occurrences per activity:"]
    lines.append(per_activity.to_string())
    lines.append("")
    lines.append("Assignments per member:")
    lines.append(per_member.to_string())
    lines.append("")
    lines.append("Assignments per member per activity:")
    lines.append(matrix.to_string())
    return "\n".join(lines)
