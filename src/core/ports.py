"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for HTTP, storage, caching and transport
adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Any, Hashable, Optional, Protocol, Sequence

from core.models import Resource


class HttpPort(Protocol):
    """Retrieval of a remote document."""

    async def get(self, url: str) -> bytes:
        ...


class KeyValueStorePort(Protocol):
    """Namespaced, durable key-value persistence."""

    def get(self, namespace: str, key: str) -> Optional[Any]:
        ...

    def set(self, namespace: str, key: str, value: Any) -> None:
        ...


class CachePort(Protocol):
    """In-memory TTL map used for dedup."""

    def get(self, key: Hashable) -> Optional[Any]:
        ...

    def set(self, key: Hashable, value: Any) -> None:
        ...

    def add(self, key: Hashable, value: Any = True) -> bool:
        ...

    def purge_expired(self) -> int:
        ...


class TransportPort(Protocol):
    """Outbound chat operations required by the dispatcher."""

    async def send_text(self, recipient: Any, text: str) -> None:
        ...

    async def send_single_media(self, recipient: Any, resource: Resource, caption: str) -> None:
        ...

    async def send_album(self, recipient: Any, resources: Sequence[Resource], caption: str) -> None:
        ...
