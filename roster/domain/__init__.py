"""Domain models and data access layer."""

from .models import (
    Activity,
    ActivityPatch,
    Base,
    Member,
    MemberPatch,
    ScheduleEntry,
    Settings,
    SettingsPatch,
    StoredCollection,
)
from .repositories import CollectionRepository, RecordStore

__all__ = [
    "Activity",
    "ActivityPatch",
    "Base",
    "Member",
    "MemberPatch",
    "ScheduleEntry",
    "Settings",
    "SettingsPatch",
    "StoredCollection",
    "CollectionRepository",
    "RecordStore",
]
