"""Delivery of reply messages through the transport port."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, List, Optional, Sequence, Set

from core.config import DeliveryConfig
from core.errors import UnsupportedMediaError
from core.models import DeliveryOutcome, ReplyMessage, Resource, ResourceKind
from core.ports import TransportPort

LOGGER = logging.getLogger(__name__)

SUPPORTED_KINDS = frozenset({ResourceKind.IMAGE, ResourceKind.VIDEO})


def chunk_resources(resources: Sequence[Resource], size: int) -> List[Sequence[Resource]]:
    """Split resources into consecutive batches of at most ``size``."""

    if size <= 0:
        raise ValueError("Batch size must be positive")
    return [resources[i : i + size] for i in range(0, len(resources), size)]


class DeliveryDispatcher:
    """Sends messages as text, single media or albums."""

    def __init__(self, transport: TransportPort, config: Optional[DeliveryConfig] = None) -> None:
        self._transport = transport
        self._config = config or DeliveryConfig()
        # Strong references keep fire-and-forget tasks alive until they finish.
        self._pending: Set[asyncio.Task] = set()

    async def deliver(self, recipient: Any, message: ReplyMessage) -> None:
        """Send one message, raising the first error that makes it undeliverable."""

        if message.error is not None:
            LOGGER.warning("Not sending failed message to %s: %s", recipient, message.error)
            raise message.error

        if not message.resources:
            await self._transport.send_text(recipient, message.caption)
            LOGGER.info("Sent text to %s: %s", recipient, message.caption)
            return

        if len(message.resources) == 1:
            resource = message.resources[0]
            if resource.kind not in SUPPORTED_KINDS:
                raise UnsupportedMediaError(f"Undefined resource kind: {resource.kind!r}")
            caption = message.caption[: self._config.caption_max_chars]
            await self._transport.send_single_media(recipient, resource, caption)
            return

        await self._deliver_albums(recipient, message)

    async def _deliver_albums(self, recipient: Any, message: ReplyMessage) -> None:
        last_error: Optional[Exception] = None
        for batch in chunk_resources(message.resources, self._config.max_album_size):
            media = [resource for resource in batch if resource.kind in SUPPORTED_KINDS]
            if not media:
                continue
            try:
                await self._transport.send_album(recipient, media, message.caption)
            except Exception as exc:
                LOGGER.warning("Unable to send album to %s: %s", recipient, exc)
                last_error = exc
            else:
                LOGGER.info("Sent album of %s to %s", len(media), recipient)
        if last_error is not None:
            raise last_error

    async def _deliver_logged(self, recipient: Any, message: ReplyMessage) -> DeliveryOutcome:
        try:
            await self.deliver(recipient, message)
        except Exception as exc:
            LOGGER.error("Delivery to %s failed for %s: %s", recipient, message.caption, exc)
            return DeliveryOutcome(message=message, error=exc)
        return DeliveryOutcome(message=message)

    def dispatch_all(self, recipient: Any, messages: Iterable[ReplyMessage]) -> List[asyncio.Task]:
        """Schedule independent deliveries and return without waiting.

        Sends may complete in any order. Callers that need the outcomes can
        await the returned tasks, or use ``deliver_all``.
        """

        tasks = []
        for message in messages:
            task = asyncio.ensure_future(self._deliver_logged(recipient, message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            tasks.append(task)
        return tasks

    async def deliver_all(self, recipient: Any, messages: Iterable[ReplyMessage]) -> List[DeliveryOutcome]:
        """Deliver messages concurrently and collect one outcome per message."""

        tasks = self.dispatch_all(recipient, messages)
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks))
