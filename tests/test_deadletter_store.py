"""Tests for the SQLite dead-letter store."""

from pathlib import Path

from crm_sync.store import DeadLetterStore


def test_write_and_get(temp_db: Path) -> None:
    """Write a dead letter and read it back."""
    store = DeadLetterStore(temp_db)
    letter = store.write({"email": "a@b.de"}, "Validation failed: name is required", {"x-source": "test"})
    assert letter.id.startswith("deadletter-")

    loaded = store.get(letter.id)
    assert loaded is not None
    assert loaded.payload == {"email": "a@b.de"}
    assert loaded.error == "Validation failed: name is required"
    assert loaded.headers == {"x-source": "test"}


def test_get_missing(temp_db: Path) -> None:
    assert DeadLetterStore(temp_db).get("deadletter-nope") is None


def test_list_and_count(temp_db: Path) -> None:
    store = DeadLetterStore(temp_db)
    ids = {store.write({"n": i}, f"error {i}").id for i in range(3)}
    assert store.count() == 3
    assert {letter.id for letter in store.list()} == ids
    assert len(store.list(limit=2)) == 2


def test_to_dict(temp_db: Path) -> None:
    letter = DeadLetterStore(temp_db).write(["raw"], "boom")
    data = letter.to_dict()
    assert set(data) == {"id", "timestamp", "error", "payload", "headers"}
    assert data["payload"] == ["raw"]
    assert data["headers"] is None


def test_events(temp_db: Path) -> None:
    store = DeadLetterStore(temp_db)
    store.write_event("success", {"license": None})
    store.write_event("failure", {"error": "boom"})
    store.write_event("failure", {"error": "boom again"})
    assert store.count_events() == 3
    assert store.count_events("failure") == 2


def test_schema_is_reentrant(temp_db: Path) -> None:
    """Opening an existing database keeps its rows."""
    DeadLetterStore(temp_db).write({}, "boom")
    assert DeadLetterStore(temp_db).count() == 1
