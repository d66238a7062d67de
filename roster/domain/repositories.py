"""Record store: in-memory collections backed by write-through persistence."""

from __future__ import annotations

import json
import threading
import uuid
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session, sessionmaker

from roster.errors import ImportParseFailure

from .db import DEFAULT_DB_URL, get_session_factory
from .models import (
    COLLECTIONS,
    Activity,
    ActivityPatch,
    Member,
    MemberPatch,
    ScheduleEntry,
    Settings,
    SettingsPatch,
    StoredCollection,
)

SETTINGS_KEY = "settings"
RECORD_TYPES = {"members": Member, "activities": Activity, "schedules": ScheduleEntry}


def new_record_id() -> str:
    """Return a fresh opaque record id."""
    return uuid.uuid4().hex


class CollectionRepository:
    """Repository for the persisted collection documents."""

    @staticmethod
    def get(session: Session, key: str) -> Optional[StoredCollection]:
        """Get the stored row for a collection key."""
        return session.get(StoredCollection, key)

    @staticmethod
    def load(session: Session, key: str) -> Optional[Any]:
        """Load and decode a collection document, or None if never written."""
        row = CollectionRepository.get(session, key)
        if row is None:
            return None
        return json.loads(row.payload)

    @staticmethod
    def save(session: Session, key: str, document: Any) -> StoredCollection:
        """Encode and upsert a collection document. The caller commits."""
        row = session.merge(StoredCollection(key=key, payload=json.dumps(document, ensure_ascii=False)))
        return row


class RecordStore:
    """
    Members, activities, schedule entries and settings.

    Every mutating call writes the affected collection documents in one
    transaction before updating the in-memory lists, so memory and database
    agree whenever a call returns. ``lock`` serializes writers; hold it
    around multi-step operations such as a generation run or a reminder
    scan.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        id_factory: Callable[[], str] = new_record_id,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize the store and load persisted state.

        Args:
            session_factory: SQLAlchemy session factory bound to the roster database
            id_factory: Callable producing fresh record ids
            today: Callable returning the current local date
        """
        self.session_factory = session_factory
        self.new_id = id_factory
        self.today = today
        self.lock = threading.RLock()
        self.members: List[Member] = []
        self.activities: List[Activity] = []
        self.schedules: List[ScheduleEntry] = []
        self.settings = Settings()
        self.load()

    @classmethod
    def from_url(cls, db_url: str = DEFAULT_DB_URL, **kwargs) -> "RecordStore":
        """Open a store on a database URL, creating the table if needed."""
        return cls(get_session_factory(db_url), **kwargs)

    # ------------------------------------------------------------------
    # Persistence

    def load(self) -> None:
        """(Re)load every collection from the database."""
        with self.session_factory() as session:
            documents = {key: CollectionRepository.load(session, key) for key in COLLECTIONS + (SETTINGS_KEY,)}
        with self.lock:
            self.members = [Member.from_dict(d) for d in documents["members"] or []]
            self.activities = [Activity.from_dict(d) for d in documents["activities"] or []]
            self.schedules = [ScheduleEntry.from_dict(d) for d in documents["schedules"] or []]
            settings = documents[SETTINGS_KEY]
            self.settings = Settings.from_dict(settings) if settings is not None else Settings()

    def _write(self, collections: Dict[str, Any]) -> None:
        """Persist the given collections (name -> records) in one transaction."""
        with self.session_factory.begin() as session:
            for name, value in collections.items():
                if name == SETTINGS_KEY:
                    document = value.to_dict()
                else:
                    document = [record.to_dict() for record in value]
                CollectionRepository.save(session, name, document)

    def _commit(self, collections: Dict[str, Any]) -> None:
        with self.lock:
            self._write(collections)
            for name, value in collections.items():
                setattr(self, name, value)

    def persist(self, *names: str) -> None:
        """Write the current in-memory state of the named collections."""
        with self.lock:
            self._write({name: getattr(self, name) for name in names})

    def replace_all(self, name: str, records: List[Any]) -> None:
        """Atomically overwrite one collection."""
        self.replace_many({name: records})

    def replace_many(self, collections: Dict[str, List[Any]]) -> None:
        """Atomically overwrite several collections in a single transaction."""
        for name in collections:
            if name not in RECORD_TYPES:
                raise ValueError(f"Unknown collection: {name}")
        self._commit({name: list(records) for name, records in collections.items()})

    # ------------------------------------------------------------------
    # Members

    def add_member(self, member: Member) -> Member:
        """Store a new member with a fresh id and a zero participation count."""
        with self.lock:
            member.id = self.new_id()
            member.participation_count = 0
            self._commit({"members": self.members + [member]})
            return member

    def update_member(self, member_id: str, patch: MemberPatch) -> Optional[Member]:
        """Apply a patch to a member. Returns None if the id is unknown."""
        with self.lock:
            for i, member in enumerate(self.members):
                if member.id == member_id:
                    updated = patch.apply(member)
                    members = list(self.members)
                    members[i] = updated
                    self._commit({"members": members})
                    return updated
            return None

    def delete_member(self, member_id: str) -> None:
        with self.lock:
            self._commit({"members": [m for m in self.members if m.id != member_id]})

    def get_member(self, member_id: str) -> Optional[Member]:
        return next((m for m in self.members if m.id == member_id), None)

    def list_active_members(self) -> List[Member]:
        """Active members, in store order. The records are shared, not copies."""
        return [m for m in self.members if m.is_active]

    # ------------------------------------------------------------------
    # Activities

    def add_activity(self, activity: Activity) -> Activity:
        with self.lock:
            activity.id = self.new_id()
            self._commit({"activities": self.activities + [activity]})
            return activity

    def update_activity(self, activity_id: str, patch: ActivityPatch) -> Optional[Activity]:
        """Apply a patch to an activity. Returns None if the id is unknown."""
        with self.lock:
            for i, activity in enumerate(self.activities):
                if activity.id == activity_id:
                    updated = patch.apply(activity)
                    activities = list(self.activities)
                    activities[i] = updated
                    self._commit({"activities": activities})
                    return updated
            return None

    def delete_activity(self, activity_id: str) -> None:
        with self.lock:
            self._commit({"activities": [a for a in self.activities if a.id != activity_id]})

    def get_activity(self, activity_id: str) -> Optional[Activity]:
        return next((a for a in self.activities if a.id == activity_id), None)

    # ------------------------------------------------------------------
    # Schedules

    def add_schedule(self, entry: ScheduleEntry) -> ScheduleEntry:
        with self.lock:
            entry.id = self.new_id()
            self._commit({"schedules": self.schedules + [entry]})
            return entry

    def clear_schedules(self) -> None:
        self.replace_all("schedules", [])

    def schedules_in_range(self, start: date, end: date) -> List[ScheduleEntry]:
        """Entries dated between start and end, inclusive."""
        return [s for s in self.schedules if start <= s.date <= end]

    def upcoming_schedules(self, limit: int = 10) -> List[ScheduleEntry]:
        """Entries dated today or later, earliest first, at most ``limit``."""
        today = self.today()
        upcoming = sorted((s for s in self.schedules if s.date >= today), key=lambda s: s.date)
        return upcoming[:limit]

    # ------------------------------------------------------------------
    # Settings

    def update_settings(self, patch: SettingsPatch) -> Settings:
        with self.lock:
            settings = patch.apply(self.settings)
            self._commit({SETTINGS_KEY: settings})
            return settings

    # ------------------------------------------------------------------
    # Snapshots

    def export_snapshot(self) -> Dict[str, Any]:
        """Return every collection plus an ISO-8601 ``exportDate``."""
        with self.lock:
            return {
                "members": [m.to_dict() for m in self.members],
                "activities": [a.to_dict() for a in self.activities],
                "schedules": [s.to_dict() for s in self.schedules],
                "settings": self.settings.to_dict(),
                "exportDate": datetime.now().isoformat(),
            }

    def import_snapshot(self, data: Any) -> List[str]:
        """
        Replace every collection present in ``data``.

        Keys that are absent (or null) leave their collection untouched;
        ``exportDate`` is ignored. The whole document is parsed before
        anything is written.

        Returns:
            Names of the collections that were replaced

        Raises:
            ImportParseFailure: If the document or any record is malformed
        """
        if not isinstance(data, dict):
            raise ImportParseFailure("Import document must be a JSON object")

        parsed: Dict[str, Any] = {}
        try:
            for name, record_type in RECORD_TYPES.items():
                if data.get(name) is not None:
                    if not isinstance(data[name], list):
                        raise TypeError(f"'{name}' must be a list")
                    parsed[name] = [record_type.from_dict(record) for record in data[name]]
                    for record in parsed[name]:
                        if record.id is None:
                            record.id = self.new_id()
            if data.get(SETTINGS_KEY) is not None:
                parsed[SETTINGS_KEY] = Settings.from_dict(data[SETTINGS_KEY])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ImportParseFailure(f"Malformed import document: {e}") from e

        if parsed:
            self._commit(parsed)
        print(f"[INFO] Imported collections: {', '.join(parsed) or 'none'}")
        return list(parsed)

    def reset(self) -> None:
        """Clear all collections and restore default settings."""
        self._commit({"members": [], "activities": [], "schedules": [], SETTINGS_KEY: Settings()})
        print("[WARN] All roster data cleared")
