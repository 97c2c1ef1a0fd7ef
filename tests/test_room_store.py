"""Tests for RoomStore."""

import threading
from datetime import timedelta

import pytest
from conftest import REF_A, REF_B, T0, make_slot

from errors import RoomAuthError, RoomNotFoundError, ScheduleValidationError, ValidationError
from services.room_store import RoomStore, authorize, check_password


def test_create_room_defaults(store):
    """New rooms get generated ids and default settings."""
    config = store.create_room(name="Main Stage")
    assert len(config.id) == 8
    assert config.timezone == "UTC"
    assert config.rotation_policy == "round_robin"
    assert config.rotation_interval_sec == 60
    assert config.default_items == ()
    assert config.password is None

    room = store.get_room(config.id)
    assert room.version == 1
    assert room.schedule is None


def test_create_room_generates_unique_ids(store):
    """Generated ids never collide."""
    ids = {store.create_room(name=f"room {i}").id for i in range(50)}
    assert len(ids) == 50


def test_create_room_with_explicit_id(store):
    """A supplied id is used as-is; reusing it is rejected."""
    assert store.create_room(name="Stage", room_id="stage-1").id == "stage-1"
    with pytest.raises(ValidationError, match="already exists"):
        store.create_room(name="Other", room_id="stage-1")


@pytest.mark.parametrize("name", [None, "", "   "])
def test_create_room_requires_name(store, name):
    """Room name is required."""
    with pytest.raises(ValidationError, match="name is required"):
        store.create_room(name=name)


def test_create_room_rejects_unknown_timezone(store):
    """Timezones must be IANA names."""
    with pytest.raises(ValidationError, match="Unknown timezone"):
        store.create_room(name="Stage", timezone="Mars/Olympus")


def test_create_room_accepts_known_timezone(store):
    """Display timezone is stored as given."""
    assert store.create_room(name="Stage", timezone="Europe/Lisbon").timezone == "Europe/Lisbon"


def test_empty_password_means_unprotected(store):
    """An empty password string leaves the room open."""
    config = store.create_room(name="Stage", password="")
    assert config.password is None
    assert config.has_password is False


def test_update_config_patches_only_given_fields(store):
    """Absent fields keep their current values."""
    config = store.create_room(name="Stage", slug="stage", default_items=[REF_A])
    updated = store.update_config(config.id, {"rotation_policy": "weighted", "rotation_interval_sec": 15})
    assert updated.rotation_policy == "weighted"
    assert updated.rotation_interval_sec == 15
    assert updated.name == "Stage"
    assert updated.slug == "stage"
    assert updated.default_items == (REF_A,)
    assert updated.id == config.id


def test_update_config_unknown_room(store):
    """Updating an unknown room raises RoomNotFoundError."""
    with pytest.raises(RoomNotFoundError):
        store.update_config("missing", {"name": "x"})


@pytest.mark.parametrize(
    ("changes", "message"),
    [
        ({"rotation_policy": "shuffle"}, "rotationPolicy must be one of"),
        ({"rotation_interval_sec": 0}, "rotationIntervalSec must be a positive integer"),
        ({"rotation_interval_sec": -5}, "rotationIntervalSec must be a positive integer"),
        ({"default_items": ["https://x"]}, "defaultItems 1"),
        ({"id": "new-id"}, "Cannot update field"),
        ({"password": "secret"}, "Cannot update field"),
        ({"name": ""}, "name is required"),
    ],
)
def test_update_config_rejects_invalid(store, changes, message):
    """Invalid updates are rejected and leave the room untouched."""
    config = store.create_room(name="Stage")
    with pytest.raises(ValidationError, match=message):
        store.update_config(config.id, changes)
    room = store.get_room(config.id)
    assert room.config == config
    assert room.version == 1


def test_set_schedule_unknown_room(store):
    """Setting a schedule on an unknown room raises RoomNotFoundError."""
    with pytest.raises(RoomNotFoundError):
        store.set_schedule("missing", {"slots": []})


def test_version_counts_mutations(store):
    """N successful mutations add exactly N to the version."""
    room_id = store.create_room(name="Stage").id
    store.update_config(room_id, {"name": "Stage 2"})
    store.set_schedule(room_id, {"slots": [make_slot(T0, 600, REF_A)]})
    assert store.set_schedule(room_id, {"slots": []}) == 4
    store.update_config(room_id, {})
    assert store.get_room(room_id).version == 5


def test_rejected_schedule_leaves_room_untouched(store):
    """A failed schedule neither replaces the old one nor bumps the version."""
    room_id = store.create_room(name="Stage").id
    store.set_schedule(room_id, {"slots": [make_slot(T0, 600, REF_A)]})
    before = store.get_room(room_id)

    with pytest.raises(ScheduleValidationError):
        store.set_schedule(room_id, {"slots": [make_slot(T0, 600, REF_B), make_slot(T0, 600, "bad")]})

    after = store.get_room(room_id)
    assert after is before
    assert after.version == 2
    assert after.schedule.slots[0].refs == [REF_A]


def test_schedule_replaced_wholesale(store):
    """A new schedule fully supersedes the previous one."""
    room_id = store.create_room(name="Stage").id
    store.set_schedule(room_id, {"slots": [make_slot(T0, 600, REF_A), make_slot(T0 + timedelta(hours=1), 600, REF_A)]})
    store.set_schedule(room_id, {"slots": [make_slot(T0, 60, REF_B)]})
    slots = store.get_room(room_id).schedule.slots
    assert len(slots) == 1
    assert slots[0].refs == [REF_B]


def test_concurrent_updates_do_not_lose_versions(store):
    """Mutations from many threads each bump the version exactly once."""
    room_id = store.create_room(name="Stage").id

    def worker():
        for _ in range(50):
            store.update_config(room_id, {"rotation_interval_sec": 30})

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert store.get_room(room_id).version == 1 + 8 * 50


def test_require_room(store):
    """require_room raises for unknown ids."""
    with pytest.raises(RoomNotFoundError):
        store.require_room("missing")


def test_list_rooms(store):
    """All created rooms are listed."""
    store.create_room(name="A")
    store.create_room(name="B")
    assert sorted(r.config.name for r in store.list_rooms()) == ["A", "B"]


def test_check_password(store):
    """Protected rooms need the exact password; open rooms accept anything."""
    protected = store.get_room(store.create_room(name="Vip", password="s3cret").id)
    open_room = store.get_room(store.create_room(name="Open").id)

    assert check_password(protected, "s3cret") is True
    assert check_password(protected, "S3CRET") is False
    assert check_password(protected, None) is False
    assert check_password(open_room, None) is True
    assert check_password(open_room, "anything") is True


def test_authorize_raises_on_mismatch(store):
    """authorize returns the room or raises RoomAuthError."""
    room = store.get_room(store.create_room(name="Vip", password="s3cret").id)
    assert authorize(room, "s3cret") is room
    with pytest.raises(RoomAuthError):
        authorize(room, "nope")


def test_stores_are_independent():
    """Each store instance owns its own rooms."""
    first, second = RoomStore(), RoomStore()
    room_id = first.create_room(name="Stage").id
    assert second.get_room(room_id) is None
