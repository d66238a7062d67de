"""Tests for RecordStore CRUD, views and persistence."""

import datetime as dt

import pytest

from roster.domain.db import get_session
from roster.domain.models import (
    Activity,
    ActivityPatch,
    Member,
    MemberPatch,
    ScheduleEntry,
    Settings,
    SettingsPatch,
)
from roster.domain.repositories import CollectionRepository, RecordStore

TODAY = dt.date(2025, 3, 10)


def _reopen(store):
    """Open a second store on the same database to check durability."""
    return RecordStore(store.session_factory, today=store.today)


def _entry(day, member="Max", activity="Cleaning"):
    return ScheduleEntry(
        activity_id="a1",
        activity_name=activity,
        member_id="m1",
        member_name=member,
        date=day,
    )


def test_add_member_assigns_id_and_defaults(store):
    """Test that a new member gets an id, zero count and active status."""
    member = store.add_member(Member(name="Max", email="max@example.com", participation_count=5))

    assert member.id
    assert member.participation_count == 0
    assert member.status == "active"
    assert store.members == [member]


def test_add_member_ids_are_unique(store):
    """Test that every added record gets a distinct id."""
    ids = {store.add_member(Member(name=f"M{i}")).id for i in range(20)}
    assert len(ids) == 20


def test_add_member_keeps_explicit_status(store):
    """Test that a caller-supplied inactive status survives add."""
    member = store.add_member(Member(name="Mia", status="inactive"))
    assert member.status == "inactive"
    assert store.list_active_members() == []


def test_member_requires_name():
    """Test that a blank name is rejected."""
    with pytest.raises(ValueError):
        Member(name="   ")


def test_activity_requires_positive_frequency():
    """Test that frequency must be at least 1 and the unit known."""
    with pytest.raises(ValueError):
        Activity(name="Cleaning", frequency=0)
    with pytest.raises(ValueError):
        Activity(name="Cleaning", frequency_unit="years")


def test_mutations_are_durable(store):
    """Test that every mutation is visible from a freshly opened store."""
    member = store.add_member(Member(name="Max"))
    activity = store.add_activity(Activity(name="Cleaning", frequency=2, frequency_unit="days"))
    store.update_settings(SettingsPatch(algorithm="balanced"))

    reopened = _reopen(store)
    assert [m.to_dict() for m in reopened.members] == [member.to_dict()]
    assert [a.to_dict() for a in reopened.activities] == [activity.to_dict()]
    assert reopened.settings.algorithm == "balanced"


def test_update_member_merges_fields(store):
    """Test that only patched fields change."""
    member = store.add_member(Member(name="Max", email="max@example.com"))

    updated = store.update_member(member.id, MemberPatch(status="inactive"))

    assert updated.id == member.id
    assert updated.name == "Max"
    assert updated.email == "max@example.com"
    assert updated.status == "inactive"
    assert _reopen(store).members[0].status == "inactive"


def test_update_unknown_id_returns_none(store):
    """Test that updating an unknown id is a no-op returning None."""
    store.add_member(Member(name="Max"))
    assert store.update_member("missing", MemberPatch(name="X")) is None
    assert store.update_activity("missing", ActivityPatch(name="X")) is None
    assert store.members[0].name == "Max"


def test_update_activity_validates(store):
    """Test that a patch producing an invalid activity is rejected."""
    activity = store.add_activity(Activity(name="Cleaning"))
    with pytest.raises(ValueError):
        store.update_activity(activity.id, ActivityPatch(frequency=0))
    assert store.activities[0].frequency == 1


def test_delete_member_and_unknown_id(store):
    """Test that delete removes the record and ignores unknown ids."""
    keep = store.add_member(Member(name="Max"))
    gone = store.add_member(Member(name="Mia"))

    store.delete_member(gone.id)
    store.delete_member("missing")

    assert [m.id for m in store.members] == [keep.id]
    assert [m.id for m in _reopen(store).members] == [keep.id]


def test_delete_activity(store):
    """Test that deleting an activity leaves schedule entries alone."""
    activity = store.add_activity(Activity(name="Cleaning"))
    store.replace_all("schedules", [_entry(TODAY)])

    store.delete_activity(activity.id)

    assert store.activities == []
    assert len(store.schedules) == 1


def test_list_active_members(store):
    """Test that only active members are listed, in store order."""
    a = store.add_member(Member(name="A"))
    store.add_member(Member(name="B", status="inactive"))
    c = store.add_member(Member(name="C"))

    assert [m.id for m in store.list_active_members()] == [a.id, c.id]


def test_schedules_in_range(store):
    """Test inclusive date range filtering."""
    days = [dt.date(2025, 3, d) for d in (1, 5, 10, 15)]
    store.replace_all("schedules", [_entry(d) for d in days])

    found = store.schedules_in_range(dt.date(2025, 3, 5), dt.date(2025, 3, 10))
    assert [s.date for s in found] == [dt.date(2025, 3, 5), dt.date(2025, 3, 10)]


def test_upcoming_schedules(store):
    """Test that upcoming entries start today, are sorted and truncated."""
    days = [dt.date(2025, 3, d) for d in (20, 9, 10, 12, 11)]
    store.replace_all("schedules", [_entry(d) for d in days])

    upcoming = store.upcoming_schedules(limit=3)
    assert [s.date for s in upcoming] == [TODAY, dt.date(2025, 3, 11), dt.date(2025, 3, 12)]


def test_replace_all_rejects_unknown_collection(store):
    """Test that replace_all only accepts record collections."""
    with pytest.raises(ValueError):
        store.replace_all("widgets", [])


def test_update_settings_partial(store):
    """Test that settings patches merge into the defaults."""
    settings = store.update_settings(SettingsPatch(notification_days=5))

    assert settings == Settings(algorithm="rotation", notification_enabled=True, notification_days=5)
    assert _reopen(store).settings.notification_days == 5


def test_reset_restores_defaults(store):
    """Test that reset clears everything and restores default settings."""
    store.add_member(Member(name="Max"))
    store.add_activity(Activity(name="Cleaning"))
    store.replace_all("schedules", [_entry(TODAY)])
    store.update_settings(SettingsPatch(algorithm="random", notification_enabled=False, notification_days=1))

    store.reset()

    for s in (store, _reopen(store)):
        assert s.members == []
        assert s.activities == []
        assert s.schedules == []
        assert s.settings == Settings(algorithm="rotation", notification_enabled=True, notification_days=3)


def test_collection_repository_round_trip(session_factory):
    """Test that collection documents are stored as JSON text."""
    with session_factory.begin() as session:
        CollectionRepository.save(session, "members", [{"id": "1", "name": "Max"}])

    with session_factory() as session:
        assert CollectionRepository.load(session, "members") == [{"id": "1", "name": "Max"}]
        assert CollectionRepository.load(session, "activities") is None


def test_get_session_reads_stored_documents(tmp_path):
    """Test that a plain session sees what a store on the same file wrote."""
    db_url = f"sqlite:///{tmp_path / 'roster.db'}"
    RecordStore.from_url(db_url).add_member(Member(name="Max"))

    with get_session(db_url) as session:
        members = CollectionRepository.load(session, "members")
        assert [m["name"] for m in members] == ["Max"]
        assert CollectionRepository.get(session, "members").payload.startswith("[")


def test_get_member_and_activity(store):
    """Test lookup by id, with None for unknown ids."""
    member = store.add_member(Member(name="Max"))
    activity = store.add_activity(Activity(name="Cleaning"))

    assert store.get_member(member.id) is member
    assert store.get_activity(activity.id) is activity
    assert store.get_member("missing") is None
    assert store.get_activity("missing") is None


def test_add_schedule_assigns_id_and_is_durable(store):
    """Test that a single added entry gets a fresh id and is persisted."""
    first = store.add_schedule(_entry(TODAY))
    second = store.add_schedule(_entry(TODAY + dt.timedelta(days=1), member="Mia"))

    assert first.id and second.id and first.id != second.id
    reopened = _reopen(store)
    assert [s.to_dict() for s in reopened.schedules] == [first.to_dict(), second.to_dict()]


def test_clear_schedules_is_durable(store):
    """Test that clearing schedules is persisted and leaves members alone."""
    store.add_member(Member(name="Max"))
    store.add_schedule(_entry(TODAY))

    store.clear_schedules()

    assert store.schedules == []
    reopened = _reopen(store)
    assert reopened.schedules == []
    assert [m.name for m in reopened.members] == ["Max"]
