"""Per-unit key/value memory with lazy time-to-live expiry."""

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Iterator

LOG_KEY = "logs"
LOG_CAPACITY = 100


@dataclass(slots=True)
class MemoryEntry:
    """A stored value with its creation time and optional absolute expiry (epoch seconds)."""

    value: Any
    created_at: float
    expires_at: float | None = None

    def is_visible(self, now: float) -> bool:
        return self.expires_at is None or now < self.expires_at


class MemoryStore:
    """Unbounded key/value store; expired entries are removed by the read that finds them.

    The ``logs`` key is reserved for a ring buffer holding the most recent
    ``LOG_CAPACITY`` log records.
    """

    def __init__(self, *, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.time
        self._entries: dict[str, MemoryEntry] = {}

    def remember(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store ``value`` under ``key``; ``ttl`` is in seconds."""

        if key == LOG_KEY:
            raise ValueError(f"'{LOG_KEY}' is reserved for the log ring buffer")
        if ttl is not None and ttl <= 0:
            raise ValueError("ttl must be positive when provided")
        now = self._clock()
        self._entries[key] = MemoryEntry(
            value=value,
            created_at=now,
            expires_at=now + ttl if ttl is not None else None,
        )

    def recall(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` when absent or expired."""

        entry = self._entries.get(key)
        if entry is None:
            return default
        if not entry.is_visible(self._clock()):
            del self._entries[key]
            return default
        return entry.value

    def forget(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def append_log(self, record: dict[str, Any]) -> None:
        entry = self._entries.get(LOG_KEY)
        if entry is None:
            entry = MemoryEntry(value=deque(maxlen=LOG_CAPACITY), created_at=self._clock())
            self._entries[LOG_KEY] = entry
        entry.value.append(record)

    def recent_logs(self, limit: int | None = None) -> list[dict[str, Any]]:
        entry = self._entries.get(LOG_KEY)
        if entry is None:
            return []
        logs = list(entry.value)
        if limit is not None:
            return logs[-limit:] if limit > 0 else []
        return logs

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))


__all__ = ["LOG_CAPACITY", "LOG_KEY", "MemoryEntry", "MemoryStore"]
