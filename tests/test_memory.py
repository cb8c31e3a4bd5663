from __future__ import annotations

import pytest

from agent_qa.lifecycle import LOG_CAPACITY, MemoryStore
from agent_qa.lifecycle.memory import LOG_KEY


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_recall_before_ttl_returns_value() -> None:
    clock = FakeClock()
    store = MemoryStore(clock=clock)

    store.remember("session", {"token": "abc"}, ttl=30)
    clock.now += 29.9

    assert store.recall("session") == {"token": "abc"}


def test_expired_entry_is_removed_on_read() -> None:
    clock = FakeClock()
    store = MemoryStore(clock=clock)
    store.remember("session", "value", ttl=30)

    clock.now += 30
    # Still stored until a read discovers it stale.
    assert "session" in store

    assert store.recall("session") is None
    assert "session" not in store
    assert len(store) == 0


def test_entries_without_ttl_never_expire() -> None:
    clock = FakeClock()
    store = MemoryStore(clock=clock)
    store.remember("k", 1)

    clock.now += 10**9

    assert store.recall("k") == 1


def test_recall_default_and_forget() -> None:
    store = MemoryStore()

    assert store.recall("missing", "fallback") == "fallback"

    store.remember("k", "v")
    assert store.forget("k") is True
    assert store.forget("k") is False


def test_log_ring_keeps_most_recent_records_in_order() -> None:
    store = MemoryStore()

    for index in range(105):
        store.append_log({"seq": index})

    logs = store.recent_logs()
    assert len(logs) == LOG_CAPACITY
    assert [record["seq"] for record in logs] == list(range(5, 105))
    assert [record["seq"] for record in store.recent_logs(3)] == [102, 103, 104]


def test_log_key_is_reserved() -> None:
    store = MemoryStore()

    with pytest.raises(ValueError):
        store.remember(LOG_KEY, [])


def test_non_positive_ttl_rejected() -> None:
    store = MemoryStore()

    with pytest.raises(ValueError):
        store.remember("k", "v", ttl=0)
