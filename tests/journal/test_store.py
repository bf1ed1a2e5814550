"""Tests for the journal entry store."""

import json
from datetime import UTC, datetime, timedelta

import pytest

from inkwell.core.events import ENTRY_CREATED, ENTRY_DELETED, ENTRY_UPDATED, JOURNAL_RELOADED
from inkwell.core.storage import LocalFileSystem, StoragePermissionError
from inkwell.journal.locations import StorageLocation, StorageMode
from inkwell.journal.models import EmptyReason, LoadStatus, TimestampFormat
from inkwell.journal.store import EntryStore


class Clock:
    """Deterministic clock that advances one second per call."""

    def __init__(self):
        self.now = datetime(2025, 9, 20, 12, 0, tzinfo=UTC)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def doc_path(tmp_path):
    return tmp_path / "Documents" / "journal_entries.json"


@pytest.fixture
def store(doc_path):
    s = EntryStore(doc_path, clock=Clock())
    s.load()
    return s


def _restart(store: EntryStore) -> EntryStore:
    fresh = EntryStore(store.location)
    fresh.load()
    return fresh


def _snapshot(store: EntryStore) -> list[dict]:
    return [e.to_dict() for e in store.list()]


class TestLoad:
    def test_missing_file_is_empty(self, doc_path):
        s = EntryStore(doc_path)
        result = s.load()
        assert result.status is LoadStatus.EMPTY
        assert result.reason is EmptyReason.NOT_FOUND
        assert s.list() == []
        assert not doc_path.exists()

    def test_corrupt_file_is_empty_and_untouched(self, doc_path):
        doc_path.parent.mkdir(parents=True)
        doc_path.write_bytes(b"{definitely not json")
        s = EntryStore(doc_path)
        result = s.load()
        assert result.reason is EmptyReason.CORRUPT
        assert s.list() == []
        assert doc_path.read_bytes() == b"{definitely not json"

    def test_corrupt_file_heals_on_next_write(self, doc_path):
        doc_path.parent.mkdir(parents=True)
        doc_path.write_bytes(b"[{]")
        s = EntryStore(doc_path)
        s.load()
        entry_id = s.create("Fresh start", "after corruption", "Happy")

        raw = json.loads(doc_path.read_bytes())
        assert len(raw) == 1
        assert raw[0]["id"] == entry_id
        assert _restart(s).list()[0].title == "Fresh start"

    @pytest.mark.parametrize("bad_date", ["1e12", "-1e300", "NaN", "Infinity"])
    def test_out_of_range_timestamp_is_corrupt(self, doc_path, bad_date):
        doc_path.parent.mkdir(parents=True)
        raw = '[{"id": "A", "title": "t", "content": "", "mood": "Happy", "date": ' + bad_date + "}]"
        doc_path.write_text(raw)
        s = EntryStore(doc_path)
        result = s.load()
        assert result.status is LoadStatus.EMPTY
        assert result.reason is EmptyReason.CORRUPT
        assert s.list() == []
        assert doc_path.read_text() == raw

    def test_load_keeps_disk_order(self, store, doc_path):
        ids = [store.create(f"#{i}") for i in range(3)]
        raw = json.loads(doc_path.read_bytes())
        raw.reverse()
        doc_path.write_text(json.dumps(raw))

        store.load()
        assert [e.id for e in store.list()] == ids

    def test_load_replaces_memory(self, store, doc_path):
        store.create("in memory")
        doc_path.write_text("[]")
        store.load()
        assert len(store) == 0

    def test_duplicate_ids_keep_first(self, store, doc_path):
        store.create("only")
        raw = json.loads(doc_path.read_bytes())
        dup = dict(raw[0], title="copy")
        doc_path.write_text(json.dumps(raw + [dup]))

        store.load()
        assert [e.title for e in store.list()] == ["only"]

    def test_reload_emits_event(self, store):
        seen = []
        store.events.on(JOURNAL_RELOADED, seen.append)
        store.reload()
        assert len(seen) == 1
        assert seen[0].payload["count"] == 0


class TestCreate:
    def test_create_inserts_at_head(self, store):
        ids = [store.create(f"entry {i}") for i in range(4)]
        listed = store.list()
        assert listed[0].id == ids[-1]
        assert listed[-1].id == ids[0]

    def test_create_returns_id_and_sets_fields(self, store):
        shown = datetime(2024, 12, 25, tzinfo=UTC)
        entry_id = store.create("Holiday", "Snow", "Excited", date=shown, image_data=b"\x89PNG")
        entry = store.get(entry_id)
        assert entry.title == "Holiday"
        assert entry.content == "Snow"
        assert entry.mood == "Excited"
        assert entry.date == shown
        assert entry.image_data == b"\x89PNG"
        assert entry.created_at == entry.modified_at

    def test_create_persists_immediately(self, store):
        entry_id = store.create("Durable")
        assert [e.id for e in _restart(store).list()] == [entry_id]

    def test_mood_is_not_validated(self, store):
        entry_id = store.create("Odd", mood="Bewildered")
        assert store.get(entry_id).mood == "Bewildered"

    def test_create_emits_event(self, store):
        seen = []
        store.events.on(ENTRY_CREATED, seen.append)
        entry_id = store.create("Hello")
        assert seen[0].payload == {"id": entry_id}


class TestUpdate:
    def test_partial_update_keeps_image(self, store):
        image = bytes(range(256)) * 4
        entry_id = store.create("Photo day", "Beach", "Happy", image_data=image)
        assert store.update(entry_id, title="X") is True

        entry = store.get(entry_id)
        assert entry.title == "X"
        assert entry.content == "Beach"
        assert entry.image_data == image
        assert _restart(store).get(entry_id).image_data == image

    def test_update_replaces_image_when_given(self, store):
        entry_id = store.create("Photo", image_data=b"old")
        store.update(entry_id, image_data=b"new")
        assert store.get(entry_id).image_data == b"new"

    def test_update_bumps_modified_only(self, store):
        entry_id = store.create("Draft")
        before = store.get(entry_id)
        store.update(entry_id, content="Final")
        after = store.get(entry_id)
        assert after.modified_at > before.modified_at
        assert after.created_at == before.created_at

    def test_update_unknown_id_is_noop(self, store, doc_path):
        store.create("A")
        before = doc_path.read_bytes()
        snapshot = _snapshot(store)

        assert store.update("NOPE", title="B") is False
        assert _snapshot(store) == snapshot
        assert doc_path.read_bytes() == before

    def test_update_keeps_position(self, store):
        first = store.create("first")
        store.create("second")
        store.update(first, title="first, edited")
        assert [e.title for e in store.list()] == ["second", "first, edited"]

    def test_update_emits_event(self, store):
        entry_id = store.create("Hello")
        seen = []
        store.events.on(ENTRY_UPDATED, seen.append)
        store.update(entry_id, mood="Sad")
        assert seen[0].payload == {"id": entry_id}


class TestDelete:
    def test_delete_by_id(self, store):
        keep = store.create("keep")
        drop = store.create("drop")
        assert store.delete(drop) is True
        assert [e.id for e in store.list()] == [keep]
        assert [e.id for e in _restart(store).list()] == [keep]

    def test_delete_twice_is_noop(self, store):
        entry_id = store.create("once")
        assert store.delete(entry_id) is True
        assert store.delete(entry_id) is False
        assert len(store) == 0

    def test_delete_at_single_position(self, store):
        oldest = store.create("oldest")
        newest = store.create("newest")
        assert store.delete_at(0) == [newest]
        assert [e.id for e in store.list()] == [oldest]

    def test_delete_at_index_set(self, store):
        ids = [store.create(f"e{i}") for i in range(5)]  # list order: e4..e0
        removed = store.delete_at({0, 2, 4})
        assert removed == [ids[4], ids[2], ids[0]]
        assert [e.id for e in store.list()] == [ids[3], ids[1]]

    def test_delete_at_out_of_range_raises_and_changes_nothing(self, store):
        store.create("a")
        store.create("b")
        snapshot = _snapshot(store)
        with pytest.raises(IndexError):
            store.delete_at([0, 5])
        with pytest.raises(IndexError):
            store.delete_at(-1)
        assert _snapshot(store) == snapshot

    def test_delete_at_empty_set(self, store):
        store.create("a")
        assert store.delete_at([]) == []
        assert len(store) == 1

    def test_delete_emits_event(self, store):
        entry_id = store.create("bye")
        seen = []
        store.events.on(ENTRY_DELETED, seen.append)
        store.delete(entry_id)
        assert seen[0].payload == {"ids": [entry_id]}


class TestListSnapshot:
    def test_mutating_returned_list_does_not_affect_store(self, store):
        store.create("a")
        listed = store.list()
        listed.clear()
        assert len(store.list()) == 1

    def test_iteration(self, store):
        store.create("a")
        store.create("b")
        assert [e.title for e in store] == ["b", "a"]


class TestDurability:
    def test_every_mutation_survives_restart(self, store):
        image = b"\x00\x01\x02"
        a = store.create("a", "alpha", "Happy", image_data=image)
        assert _snapshot(_restart(store)) == _snapshot(store)
        b = store.create("b", "beta", "Sad")
        assert _snapshot(_restart(store)) == _snapshot(store)
        store.update(a, content="alpha 2", mood="Calm")
        assert _snapshot(_restart(store)) == _snapshot(store)
        store.delete(b)
        assert _snapshot(_restart(store)) == _snapshot(store)
        store.create("c")
        store.delete_at(1)
        assert _snapshot(_restart(store)) == _snapshot(store)


    def test_naive_date_survives_reload(self, store):
        entry_id = store.create("t", date=datetime(2024, 5, 1, 12, 0))
        before = store.list()
        store.load()
        assert store.list() == before
        assert store.get(entry_id).date == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    def test_naive_clock_survives_reload(self, doc_path):
        s = EntryStore(doc_path, clock=lambda: datetime(2025, 1, 2, 3, 4, 5))
        entry_id = s.create("t")
        s.update(entry_id, date=datetime(2025, 2, 1))
        assert _snapshot(_restart(s)) == _snapshot(s)
        assert s.get(entry_id).modified_at.tzinfo is not None

    def test_reference_timestamps_survive_restart(self, doc_path):
        s = EntryStore(doc_path, clock=Clock(), timestamp_format=TimestampFormat.REFERENCE)
        entry_id = s.create("t", date=datetime(2025, 9, 1, tzinfo=UTC))
        raw = json.loads(doc_path.read_bytes())
        assert isinstance(raw[0]["date"], float)
        assert isinstance(raw[0]["createdAt"], float)
        assert _restart(s).get(entry_id) == s.get(entry_id)


class TestWriteFailure:
    def test_save_failure_is_swallowed_and_memory_kept(self, doc_path, monkeypatch):
        fs = LocalFileSystem()
        s = EntryStore(doc_path, fs=fs)
        s.load()

        def refuse(path, data):
            raise StoragePermissionError("read-only volume")

        monkeypatch.setattr(fs, "atomic_write", refuse)
        entry_id = s.create("unsaved")
        assert s.get(entry_id).title == "unsaved"
        assert s.save() is False
        assert not doc_path.exists()


class TestDiagnostics:
    def test_before_first_write(self, doc_path):
        s = EntryStore(doc_path)
        s.load()
        info = s.diagnostics()
        assert f"Storage Location: {doc_path}" in info
        assert "File Exists: False" in info
        assert "File Size: File doesn't exist" in info
        assert "Entries in Memory: 0" in info

    def test_after_write(self, store, doc_path):
        store.create("a")
        info = store.diagnostics()
        assert "File Exists: True" in info
        assert f"File Size: {doc_path.stat().st_size} bytes" in info
        assert "Entries in Memory: 1" in info
        assert "Storage Mode: local_only" in info

    def test_synchronized_mode_reported(self, doc_path):
        s = EntryStore(StorageLocation(doc_path, StorageMode.SYNCHRONIZED))
        assert "Storage Mode: synchronized" in s.diagnostics()


class TestRelocate:
    def test_relocate_then_load_reads_new_document(self, store, tmp_path):
        store.create("old home")
        other = EntryStore(tmp_path / "elsewhere.json")
        other.create("new home")

        store.relocate(other.location)
        assert store.path == tmp_path / "elsewhere.json"
        store.load()
        assert [e.title for e in store.list()] == ["new home"]
