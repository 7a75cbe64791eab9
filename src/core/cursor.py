"""Per-subscriber read position backed by the key-value port."""

from __future__ import annotations

from core.ports import KeyValueStorePort

CURSOR_NAMESPACE = "last_update"


class CursorStore:
    """Stores the last processed unix timestamp for each subscriber."""

    def __init__(self, storage: KeyValueStorePort) -> None:
        self._storage = storage

    def get(self, subscriber_id: str) -> int:
        """Return the stored cursor, or 0 when the subscriber has none."""

        value = self._storage.get(CURSOR_NAMESPACE, str(subscriber_id))
        if value is None:
            return 0
        return int(value)

    def set(self, subscriber_id: str, timestamp: int) -> None:
        self._storage.set(CURSOR_NAMESPACE, str(subscriber_id), int(timestamp))
