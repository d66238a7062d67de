"""CSV export of schedules and members."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from roster.domain.repositories import RecordStore

SCHEDULE_COLUMNS = ["date", "activity", "member", "notified"]
MEMBER_COLUMNS = ["name", "email", "status", "participation_count"]


def schedule_frame(store: RecordStore) -> pd.DataFrame:
    """Schedule entries as a DataFrame, sorted by date."""
    rows = [
        {
            "date": s.date.isoformat(),
            "activity": s.activity_name,
            "member": s.member_name,
            "notified": s.notified,
        }
        for s in store.schedules
    ]
    df = pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)
    return df.sort_values("date", kind="stable").reset_index(drop=True)


def export_schedule_csv(store: RecordStore, csv_path: str | Path) -> int:
    """
    Export the current schedule to CSV.

    Returns:
        Number of entries exported
    """
    df = schedule_frame(store)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} schedule entries to {csv_path}")
    return len(df)


def export_members_csv(store: RecordStore, csv_path: str | Path) -> int:
    """Export members with their participation counts. Returns the row count."""
    df = pd.DataFrame(
        [
            {
                "name": m.name,
                "email": m.email or "",
                "status": m.status,
                "participation_count": m.participation_count,
            }
            for m in store.members
        ],
        columns=MEMBER_COLUMNS,
    )
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} members to {csv_path}")
    return len(df)
