"""Batch member import from ``name,email`` lines."""

from __future__ import annotations

from io import StringIO
from pathlib import Path
from typing import List

import pandas as pd

from roster.domain.models import STATUS_ACTIVE, Member
from roster.domain.repositories import RecordStore


def parse_member_lines(text: str, default_status: str = STATUS_ACTIVE) -> List[Member]:
    """
    Parse one member per line, ``name[,email]``.

    Blank lines are skipped and line numbers in errors count only the
    non-blank lines. A leading ``name,email`` header row is ignored but
    still counted.

    Raises:
        ValueError: If any line has no name (nothing is returned in that case)
    """
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return []

    df = pd.read_csv(
        StringIO("\n".join(lines)),
        header=None,
        names=["name", "email"],
        index_col=False,
        dtype=str,
        keep_default_na=False,
        skipinitialspace=True,
    ).fillna("")
    # Header only when both columns are labelled, so a member called "Name" still imports
    first = df.iloc[0]
    has_header = first["name"].strip().lower() == "name" and first["email"].strip().lower() == "email"

    members = []
    errors = []
    for line_no, (_, row) in enumerate(df.iterrows(), start=1):
        if has_header and line_no == 1:
            continue
        name = row["name"].strip()
        if not name:
            errors.append(f"line {line_no}: name is required")
            continue
        members.append(Member(name=name, email=row["email"].strip() or None, status=default_status))

    if errors:
        raise ValueError("Member import failed:\n" + "\n".join(errors))
    return members


def import_member_lines(store: RecordStore, text: str, default_status: str = STATUS_ACTIVE) -> int:
    """Add every member parsed from ``text``. Returns the number added."""
    members = parse_member_lines(text, default_status)
    for member in members:
        store.add_member(member)
    print(f"[INFO] Imported {len(members)} members")
    return len(members)


def import_members_csv(store: RecordStore, csv_path: str | Path, default_status: str = STATUS_ACTIVE) -> int:
    """
    Import members from a CSV file into the store.

    Args:
        store: Record store
        csv_path: Path to a ``name,email`` CSV (header optional)
        default_status: Status given to every imported member

    Returns:
        Number of members imported
    """
    text = Path(csv_path).read_text(encoding="utf-8")
    return import_member_lines(store, text, default_status)
