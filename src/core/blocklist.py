"""Block registry and the URL fragment it is keyed on."""

from __future__ import annotations

from typing import Optional

from core.ports import KeyValueStorePort

BLOCK_NAMESPACE = "block"

# "https://64.media.tumblr.com/<fragment>/..." splits into
# ["https:", "", "64.media.tumblr.com", "<fragment>", ...].
_FRAGMENT_INDEX = 3


def extract_fragment(url: str) -> Optional[str]:
    """Return the per-image fragment of a resource URL, if it has one."""

    parts = url.strip().split("/")
    if len(parts) <= _FRAGMENT_INDEX:
        return None
    return parts[_FRAGMENT_INDEX]


def block_key(owner_id: str, fragment: str) -> str:
    return f"{owner_id}@{fragment}"


class BlockRegistry:
    """Persistent set of blocked (owner, fragment) pairs. Entries never expire."""

    def __init__(self, storage: KeyValueStorePort) -> None:
        self._storage = storage

    def is_blocked(self, owner_id: str, fragment: str) -> bool:
        return bool(self._storage.get(BLOCK_NAMESPACE, block_key(owner_id, fragment)))

    def block(self, owner_id: str, fragment: str) -> str:
        """Persist a block entry and return its key."""

        key = block_key(owner_id, fragment)
        self._storage.set(BLOCK_NAMESPACE, key, True)
        return key
