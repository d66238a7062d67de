"""Recurrence date arithmetic."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterator


def add_months(start: date, months: int) -> date:
    """
    Add calendar months, letting an out-of-range day roll into the next month.

    The day-of-month is kept and any excess over the target month's length
    carries forward, so 2024-01-31 plus one month is 2024-03-02 rather than
    being clamped to 2024-02-29.
    """
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    return date(year, month, 1) + timedelta(days=start.day - 1)


def step_date(current: date, frequency: int, unit: str) -> date:
    """Advance ``current`` by one recurrence interval."""
    if unit == "days":
        return current + timedelta(days=frequency)
    if unit == "weeks":
        return current + timedelta(days=frequency * 7)
    if unit == "months":
        return add_months(current, frequency)
    raise ValueError(f"Unknown frequency unit: {unit!r}")


def iter_occurrences(start: date, end: date, frequency: int, unit: str) -> Iterator[date]:
    """Yield every occurrence date from ``start`` through ``end`` inclusive."""
    if frequency < 1:
        raise ValueError(f"Frequency must be at least 1, got {frequency}")
    current = start
    while current <= end:
        yield current
        current = step_date(current, frequency, unit)


def count_occurrences(start: date, end: date, frequency: int, unit: str) -> int:
    return sum(1 for _ in iter_occurrences(start, end, frequency, unit))
