"""Key-value storage for values that outlive a single round (e.g. best scores)."""

from __future__ import annotations

from typing import Protocol


class KeyValueStore(Protocol):
    """String key-value store, shaped like browser local storage."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemoryStore:
    """Process-local store; contents are lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __repr__(self) -> str:
        return f"InMemoryStore(keys={sorted(self._data)})"


def get_int(store: KeyValueStore, key: str, default: int = 0) -> int:
    """Read an integer value, falling back to `default` when absent or unparsable."""
    raw = store.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default
