import json

import pytest

from tasklist.errors import QuotaExceededError
from tasklist.storage import InMemoryStorage
from tasklist.task_store import SAVE_FAILED_MESSAGE, TaskStore

from .fakes import FIXED_NOW_MS, FlakyStorage, RecordingNotifier


def stored_tasks(storage, key="tasks"):
    raw = storage.get_item(key)
    return None if raw is None else json.loads(raw)


class TestLoad:
    def test_empty_storage_loads_empty(self, storage):
        s = TaskStore(storage)
        s.load()
        assert s.tasks == ()
        assert storage.writes == []

    def test_malformed_json_discarded_without_write_back(self):
        storage = FlakyStorage(initial={"tasks": "[{broken"})
        s = TaskStore(storage)
        s.load()
        assert s.tasks == ()
        assert storage.writes == []
        assert storage.get_item("tasks") == "[{broken"

    def test_wrong_structure_discarded(self):
        storage = FlakyStorage(initial={"tasks": json.dumps({"id": 1})})
        s = TaskStore(storage)
        s.load()
        assert len(s) == 0

    def test_salvage_keeps_good_records(self):
        initial = json.dumps(
            [
                {"id": 1, "text": "good", "completed": False, "category": "work", "dueDate": None, "createdAt": 1},
                {"id": 2, "completed": False},
            ]
        )
        storage = FlakyStorage(initial={"tasks": initial})
        s = TaskStore(storage, salvage=True)
        s.load()
        assert [t.id for t in s.tasks] == [1]
        assert [r["id"] for r in stored_tasks(storage)] == [1]

    def test_legacy_records_migrated_and_written_back(self):
        legacy = json.dumps([{"id": 3, "text": "Old task", "completed": False}])
        storage = FlakyStorage(initial={"tasks": legacy})
        s = TaskStore(storage, clock=lambda: FIXED_NOW_MS)
        s.load()
        assert storage.writes == ["tasks"]
        assert stored_tasks(storage) == [
            {
                "id": 3,
                "text": "Old task",
                "completed": False,
                "category": "uncategorized",
                "dueDate": None,
                "createdAt": FIXED_NOW_MS,
            }
        ]

        # A second load sees the canonical schema and does not write again.
        again = TaskStore(storage)
        again.load()
        assert storage.writes == ["tasks"]
        assert again.tasks == s.tasks

    def test_read_failure_treated_as_empty(self):
        storage = FlakyStorage()
        storage.fail_reads_for.add("tasks")
        s = TaskStore(storage)
        s.load()
        assert s.tasks == ()

    def test_load_fires_listeners(self, storage):
        s = TaskStore(storage)
        calls = []
        s.subscribe(lambda: calls.append("changed"))
        s.load()
        assert calls == ["changed"]


class TestAdd:
    def test_add_creates_task(self, store, storage):
        task = store.add("  Buy milk  ", "shopping", "2024-03-15")
        assert task is not None
        assert task.text == "Buy milk"
        assert task.category == "shopping"
        assert task.due_date == "2024-03-15"
        assert task.completed is False
        assert task.created_at == FIXED_NOW_MS
        assert store.tasks == (task,)
        assert stored_tasks(storage)[0]["text"] == "Buy milk"

    def test_defaults_for_falsy_category_and_date(self, store):
        task = store.add("Read", "", "")
        assert task.category == "uncategorized"
        assert task.due_date is None

    def test_invalid_due_date_dropped(self, store):
        task = store.add("Read", "work", "31/12/2024")
        assert task.due_date is None

    def test_whitespace_only_is_silently_rejected(self, store, storage, notifier):
        calls = []
        store.subscribe(lambda: calls.append(1))
        assert store.add("   ") is None
        assert store.add("") is None
        assert store.tasks == ()
        assert storage.writes == []
        assert notifier.messages == []
        assert calls == []

    def test_ids_unique_within_same_millisecond(self, store):
        tasks = [store.add(f"task {i}") for i in range(50)]
        ids = [t.id for t in tasks]
        assert len(set(ids)) == 50
        assert ids == sorted(ids)

    def test_ids_do_not_collide_with_loaded_ids(self):
        initial = json.dumps(
            [{"id": FIXED_NOW_MS + 10, "text": "x", "completed": False,
              "category": "work", "dueDate": None, "createdAt": 1}]
        )
        s = TaskStore(FlakyStorage(initial={"tasks": initial}), clock=lambda: FIXED_NOW_MS)
        s.load()
        new = s.add("y")
        assert new.id == FIXED_NOW_MS + 11


class TestDeleteAndToggle:
    def test_toggle_flips_and_persists(self, store, storage):
        task = store.add("Walk")
        storage.writes.clear()
        store.toggle_complete(task.id)
        assert store.get(task.id).completed is True
        assert stored_tasks(storage)[0]["completed"] is True
        store.toggle_complete(task.id)
        assert store.get(task.id).completed is False
        assert storage.writes == ["tasks", "tasks"]

    def test_delete_removes_and_persists(self, store, storage):
        a = store.add("a")
        b = store.add("b")
        assert store.delete(a.id) is True
        assert [t.id for t in store.tasks] == [b.id]
        assert [r["id"] for r in stored_tasks(storage)] == [b.id]
        assert a.id not in store

    def test_unknown_ids_are_noops(self, store, storage):
        store.add("a")
        storage.writes.clear()
        assert store.delete(12345) is False
        assert store.toggle_complete(12345) is None
        assert storage.writes == []
        assert len(store) == 1


class TestPersistFailure:
    def test_write_failure_notifies_user(self, notifier):
        storage = FlakyStorage()
        storage.fail_writes_for.add("tasks")
        s = TaskStore(storage, notify=notifier)
        s.load()
        task = s.add("Important")
        # In-memory state keeps the task even though storage rejected it.
        assert s.tasks == (task,)
        assert notifier.messages == [SAVE_FAILED_MESSAGE]
        assert storage.get_item("tasks") is None

    def test_quota_exceeded_notifies_user(self):
        notifier = RecordingNotifier()
        storage = InMemoryStorage(quota_bytes=200)
        s = TaskStore(storage, notify=notifier)
        s.load()
        s.add("short")
        assert notifier.messages == []
        s.add("x" * 300)
        assert notifier.messages == [SAVE_FAILED_MESSAGE]
        assert len(json.loads(storage.get_item("tasks"))) == 1

    def test_persist_reports_result(self, storage, notifier):
        s = TaskStore(storage, notify=notifier)
        assert s.persist() is True
        storage.fail_writes_for.add("tasks")
        assert s.persist() is False


class TestRoundTrip:
    def test_reload_yields_same_collection(self, store, storage):
        store.add("One", "work", "2024-01-02")
        t = store.add("Two", "health")
        store.toggle_complete(t.id)
        reloaded = TaskStore(storage)
        reloaded.load()
        assert reloaded.tasks == store.tasks


def test_quota_error_carries_sizes():
    storage = InMemoryStorage(quota_bytes=10)
    try:
        storage.set_item("tasks", "x" * 20)
    except QuotaExceededError as exc:
        assert exc.quota_bytes == 10
        assert exc.required_bytes == 25
        assert exc.key == "tasks"
    else:
        raise AssertionError("expected QuotaExceededError")


class TestNonFiniteAndDeepValues:
    @pytest.mark.parametrize("bad_id", ["NaN", "Infinity", "-Infinity", "1e999"])
    def test_non_finite_id_discards_collection(self, bad_id):
        storage = FlakyStorage(initial={"tasks": '[{"id": %s, "text": "x", "completed": false}]' % bad_id})
        s = TaskStore(storage)
        s.load()
        assert s.tasks == ()
        assert storage.writes == []

    def test_non_finite_id_salvaged_around(self):
        initial = (
            '[{"id": NaN, "text": "bad", "completed": false},'
            ' {"id": 2, "text": "good", "completed": false, "category": "work",'
            ' "dueDate": null, "createdAt": 1}]'
        )
        storage = FlakyStorage(initial={"tasks": initial})
        s = TaskStore(storage, clock=lambda: FIXED_NOW_MS, salvage=True)
        s.load()
        assert [t.text for t in s.tasks] == ["good"]
        assert s.add("next").id == FIXED_NOW_MS

    def test_deeply_nested_value_treated_as_malformed(self):
        storage = FlakyStorage(initial={"tasks": "[" * 100000 + "]" * 100000})
        s = TaskStore(storage)
        s.load()
        assert s.tasks == ()


class TestUnknownFields:
    def test_extra_fields_survive_unrelated_saves(self, storage):
        storage.set_item(
            "tasks",
            json.dumps(
                [{"id": 1, "text": "x", "completed": False, "category": "work",
                  "dueDate": None, "createdAt": 1, "notes": "keep me"}]
            ),
        )
        s = TaskStore(storage, clock=lambda: FIXED_NOW_MS)
        s.load()
        s.add("y")
        first = stored_tasks(storage)[0]
        assert first["notes"] == "keep me"


class TestInvalidCategoryOnAdd:
    def test_non_string_category_defaults_to_uncategorized(self, store, storage):
        task = store.add("Buy milk", 5)
        assert task is not None
        assert task.category == "uncategorized"
        assert stored_tasks(storage)[0]["category"] == "uncategorized"
