"""Per-call record cache."""

from dataclasses import dataclass, field
from typing import Protocol


class Cache(Protocol):
    """Cache interface for reference lookups."""

    def get(self, key: str) -> object | None:
        """Return a cached value if present."""

    def set(self, key: str, value: object) -> None:
        """Store a value for the lifetime of the cache."""


@dataclass
class InMemoryCache(Cache):
    """Dictionary-backed cache; discarded together with its owner."""

    _entries: dict[str, object] = field(default_factory=dict)

    def get(self, key: str) -> object | None:
        """Return a cached value, if any."""
        return self._entries.get(key)

    def set(self, key: str, value: object) -> None:
        """Store a value."""
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)
