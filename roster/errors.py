"""Exceptions raised by the roster package."""

from __future__ import annotations


class RosterError(Exception):
    """Base class for user-facing roster errors."""


class NoActiveMembers(RosterError, RuntimeError):
    """Raised when a schedule is requested but no member is active."""

    def __init__(self, message: str = "No active members, cannot generate a schedule"):
        super().__init__(message)


class NoActivities(RosterError, RuntimeError):
    """Raised when a schedule is requested but no activity exists."""

    def __init__(self, message: str = "No activities, cannot generate a schedule"):
        super().__init__(message)


class InvalidDateRange(RosterError, ValueError):
    """Raised when the start date falls after the end date."""

    def __init__(self, start, end):
        super().__init__(f"Start date {start} is after end date {end}")
        self.start = start
        self.end = end


class ImportParseFailure(RosterError, ValueError):
    """Raised when an import document cannot be parsed. Nothing is applied."""
