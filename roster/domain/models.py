"""Roster records and the SQLAlchemy table that persists them."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date, datetime
from typing import Any, Dict, Optional

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase


STATUS_ACTIVE = "active"
STATUS_INACTIVE = "inactive"
MEMBER_STATUSES = (STATUS_ACTIVE, STATUS_INACTIVE)

FREQUENCY_UNITS = ("days", "weeks", "months")

ALGORITHM_ROTATION = "rotation"
ALGORITHM_RANDOM = "random"
ALGORITHM_BALANCED = "balanced"
ALGORITHMS = (ALGORITHM_ROTATION, ALGORITHM_RANDOM, ALGORITHM_BALANCED)

COLLECTIONS = ("members", "activities", "schedules")


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class StoredCollection(Base):
    """One persisted collection: a key and the JSON document holding it."""

    __tablename__ = "collections"

    key = Column(String(32), primary_key=True)  # members, activities, schedules, settings
    payload = Column(Text, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<StoredCollection(key='{self.key}', bytes={len(self.payload or '')})>"


def _require_bool(value: Any, field: str) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{field} must be true or false, got {value!r}")
    return value


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Accept full ISO timestamps as well as plain dates
    return date.fromisoformat(str(value)[:10])


@dataclass
class Member:
    """A team member who can be assigned to activity occurrences."""

    name: str
    email: Optional[str] = None
    status: str = STATUS_ACTIVE
    participation_count: int = 0
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise ValueError("Member name is required")
        self.email = self.email or None
        if self.status not in MEMBER_STATUSES:
            raise ValueError(f"Unknown member status: {self.status!r}")
        if self.participation_count < 0:
            raise ValueError("participationCount cannot be negative")

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "status": self.status,
            "participationCount": self.participation_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Member":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            email=data.get("email") or None,
            status=data.get("status", STATUS_ACTIVE),
            participation_count=int(data.get("participationCount", 0) or 0),
        )


@dataclass
class Activity:
    """A recurring activity, repeated every ``frequency`` ``frequency_unit``."""

    name: str
    frequency: int = 1
    frequency_unit: str = "weeks"
    description: Optional[str] = None
    id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.name or not str(self.name).strip():
            raise ValueError("Activity name is required")
        self.description = self.description or None
        self.frequency = int(self.frequency)
        if self.frequency < 1:
            raise ValueError(f"Activity frequency must be at least 1, got {self.frequency}")
        if self.frequency_unit not in FREQUENCY_UNITS:
            raise ValueError(f"Unknown frequency unit: {self.frequency_unit!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "frequency": self.frequency,
            "frequencyUnit": self.frequency_unit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Activity":
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            description=data.get("description") or None,
            frequency=int(data.get("frequency", 1)),
            frequency_unit=data.get("frequencyUnit", "weeks"),
        )


@dataclass
class ScheduleEntry:
    """
    One occurrence of an activity assigned to a member.

    ``activity_name`` and ``member_name`` are copies taken when the schedule
    was generated. They keep their value when the activity or member is
    later renamed or deleted.
    """

    activity_id: Optional[str]
    activity_name: str
    member_id: Optional[str]
    member_name: str
    date: date
    notified: bool = False
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "activityId": self.activity_id,
            "activityName": self.activity_name,
            "memberId": self.member_id,
            "memberName": self.member_name,
            "date": self.date.isoformat(),
            "notified": self.notified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleEntry":
        return cls(
            id=data.get("id"),
            activity_id=data.get("activityId"),
            activity_name=str(data.get("activityName", "")),
            member_id=data.get("memberId"),
            member_name=str(data.get("memberName", "")),
            date=_parse_date(data["date"]),
            notified=_require_bool(data.get("notified", False), "notified"),
        )


@dataclass
class Settings:
    """
    Generation and reminder settings.

    ``algorithm`` is kept as a plain string: values outside ``ALGORITHMS``
    are tolerated and make generation fall back to the first member.
    """

    algorithm: str = ALGORITHM_ROTATION
    notification_enabled: bool = True
    notification_days: int = 3

    def __post_init__(self) -> None:
        self.notification_days = int(self.notification_days)
        if self.notification_days < 0:
            raise ValueError("notificationDays cannot be negative")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "notificationEnabled": self.notification_enabled,
            "notificationDays": self.notification_days,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        defaults = cls()
        return cls(
            algorithm=str(data.get("algorithm", defaults.algorithm)),
            notification_enabled=_require_bool(
                data.get("notificationEnabled", defaults.notification_enabled), "notificationEnabled"
            ),
            notification_days=int(data.get("notificationDays", defaults.notification_days)),
        )


def _apply_patch(patch, record):
    """Copy every field of ``patch`` that is set onto a copy of ``record``."""
    changes = {f.name: getattr(patch, f.name) for f in fields(patch) if getattr(patch, f.name) is not None}
    return replace(record, **changes)


@dataclass
class MemberPatch:
    """Partial update for a member. Fields left as None are untouched."""

    name: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None

    def apply(self, member: Member) -> Member:
        return _apply_patch(self, member)


@dataclass
class ActivityPatch:
    """Partial update for an activity. Fields left as None are untouched."""

    name: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[int] = None
    frequency_unit: Optional[str] = None

    def apply(self, activity: Activity) -> Activity:
        return _apply_patch(self, activity)


@dataclass
class SettingsPatch:
    """Partial update for the settings record."""

    algorithm: Optional[str] = None
    notification_enabled: Optional[bool] = None
    notification_days: Optional[int] = None

    def apply(self, settings: Settings) -> Settings:
        return _apply_patch(self, settings)
