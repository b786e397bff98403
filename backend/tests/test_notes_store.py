from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from notes_api.errors import NotFoundError, ValidationError
from notes_api.storage import notes_store as notes_store_module
from notes_api.storage import sql_notes_store as sql_store_module


@pytest.fixture()
def ticking_clock(monkeypatch):
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    ticks = count()

    def now():
        return start + timedelta(seconds=next(ticks))

    monkeypatch.setattr(notes_store_module, "_utc_now", now)
    monkeypatch.setattr(sql_store_module, "_utc_now", now)


def test_save_without_id_creates_note_listed_first(store, ticking_clock):
    store.save_note("u1", None, "Older", "")
    note = store.save_note("u1", None, "Shopping", "<p>milk</p>")

    assert note.id
    assert note.owner_id == "u1"
    assert note.title == "Shopping"
    assert note.content == "<p>milk</p>"
    assert note.created_at == note.updated_at

    listed = store.list_notes("u1")
    assert [n.id for n in listed][0] == note.id
    assert len(listed) == 2


def test_save_with_id_updates_in_place(store):
    created = store.save_note("u1", None, "Shopping", "<p>milk</p>")
    updated = store.save_note("u1", created.id, "Groceries", "<p>milk, eggs</p>")

    assert updated.id == created.id
    assert updated.title == "Groceries"
    assert updated.content == "<p>milk, eggs</p>"
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at
    assert [n.id for n in store.list_notes("u1")] == [created.id]


def test_unknown_id_creates_note_with_fresh_id(store):
    note = store.save_note("u1", "no-such-note", "Title", "body")

    assert note.id != "no-such-note"
    assert store.get_note("u1", note.id) == note
    assert store.get_note("u1", "no-such-note") is None


@pytest.mark.parametrize("title", ["", "   ", "\n\t"])
def test_blank_title_creates_nothing(store, title):
    with pytest.raises(ValidationError):
        store.save_note("u1", None, title, "x")
    assert store.list_notes("u1") == []


def test_blank_title_leaves_existing_note_untouched(store):
    note = store.save_note("u1", None, "Keep", "body")
    with pytest.raises(ValidationError):
        store.save_note("u1", note.id, " ", "changed")
    assert store.get_note("u1", note.id) == note


def test_list_is_ordered_by_last_update(store, ticking_clock):
    a = store.save_note("u1", None, "a", "")
    b = store.save_note("u1", None, "b", "")
    c = store.save_note("u1", None, "c", "")
    store.save_note("u1", a.id, "a2", "")

    assert [n.id for n in store.list_notes("u1")] == [a.id, c.id, b.id]


def test_list_is_scoped_to_owner(store):
    store.save_note("u1", None, "mine", "")
    assert store.list_notes("u2") == []


def test_delete_removes_note(store):
    keep = store.save_note("u1", None, "keep", "")
    gone = store.save_note("u1", None, "gone", "")

    store.delete_note("u1", gone.id)

    assert [n.id for n in store.list_notes("u1")] == [keep.id]


def test_delete_missing_note_raises_not_found(store):
    with pytest.raises(NotFoundError):
        store.delete_note("u1", "no-such-note")


def test_other_owner_cannot_update_or_delete(store):
    note = store.save_note("u1", None, "private", "secret")

    with pytest.raises(NotFoundError):
        store.save_note("u2", note.id, "hijacked", "")
    with pytest.raises(NotFoundError):
        store.delete_note("u2", note.id)

    assert store.get_note("u1", note.id) == note
    assert store.get_note("u2", note.id) is None


def test_updated_at_advances_when_clock_stalls(store, monkeypatch):
    frozen = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    monkeypatch.setattr(notes_store_module, "_utc_now", lambda: frozen)
    monkeypatch.setattr(sql_store_module, "_utc_now", lambda: frozen)

    first = store.save_note("u1", None, "t", "")
    second = store.save_note("u1", first.id, "t", "again")
    third = store.save_note("u1", first.id, "t", "and again")

    assert first.updated_at < second.updated_at < third.updated_at
    assert third.created_at == frozen


def test_wire_shape_has_iso_timestamps_and_no_owner(store):
    note = store.save_note("u1", None, "t", "c")
    data = note.to_dict()

    assert set(data) == {"id", "title", "content", "createdAt", "updatedAt"}
    assert datetime.fromisoformat(data["createdAt"]).tzinfo is not None
