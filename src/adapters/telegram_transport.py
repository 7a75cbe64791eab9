"""Telegram transport adapter.

Sends text, single media and albums through a Telethon client. Media are
passed to Telegram by URL so the relay never downloads them itself.
"""

from __future__ import annotations

from typing import Any, Sequence

from core.models import Resource, ResourceKind


class TelethonTransport:
    """TransportPort adapter over a connected Telethon client."""

    def __init__(self, client) -> None:
        self._client = client

    async def send_text(self, recipient: Any, text: str) -> None:
        await self._client.send_message(recipient, text, link_preview=True)

    async def send_single_media(self, recipient: Any, resource: Resource, caption: str) -> None:
        await self._client.send_file(
            recipient,
            resource.url,
            caption=caption,
            supports_streaming=resource.kind == ResourceKind.VIDEO,
        )

    async def send_album(self, recipient: Any, resources: Sequence[Resource], caption: str) -> None:
        # Telegram renders an album caption from its first item.
        captions = [caption] + [""] * (len(resources) - 1)
        await self._client.send_file(
            recipient,
            [resource.url for resource in resources],
            caption=captions,
        )
