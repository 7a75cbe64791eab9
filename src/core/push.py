"""Push orchestration for one subscriber.

This module is integration-agnostic. It only relies on the fetcher and the
cursor and block stores, enabling future frontends or adapters without
changes here.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Iterable, List, Protocol

from core.blocklist import BlockRegistry, extract_fragment
from core.cursor import CursorStore
from core.errors import InvalidArgumentError, RelayError
from core.models import ReplyMessage

LOGGER = logging.getLogger(__name__)

UNRECOGNIZED_CAPTION = "Unrecognized image caption."


class Fetcher(Protocol):
    async def fetch(self, source_id: str, since_timestamp: int) -> List[ReplyMessage]:
        ...


class PushOrchestrator:
    """Collects new messages for a subscriber and keeps its cursor."""

    def __init__(
        self,
        fetcher: Fetcher,
        cursors: CursorStore,
        blocklist: BlockRegistry,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._fetcher = fetcher
        self._cursors = cursors
        self._blocklist = blocklist
        self._clock = clock

    async def push_for(self, subscriber_id: str, followed_sources: Iterable[str]) -> List[ReplyMessage]:
        """Fetch every followed source and return the new messages.

        One failing source is logged and skipped. The cursor only moves when at
        least one message comes back, so an outage on every source does not
        silently skip a window of posts.
        """

        sources = list(followed_sources)
        cursor = self._cursors.get(subscriber_id)
        results = await asyncio.gather(
            *(self._fetcher.fetch(source, cursor) for source in sources),
            return_exceptions=True,
        )

        messages: List[ReplyMessage] = []
        for source, result in zip(sources, results):
            if isinstance(result, RelayError):
                LOGGER.warning("Fetch failed for %s: %s", source, result)
                continue
            if isinstance(result, BaseException):
                LOGGER.error("Unexpected fetch failure for %s", source, exc_info=result)
                continue
            messages.extend(result)

        if messages:
            now = int(self._clock())
            # Concurrent pushes for one subscriber are last-writer-wins.
            self._cursors.set(subscriber_id, max(cursor, now))
            LOGGER.info("Collected %s message(s) for %s", len(messages), subscriber_id)
        return messages

    def rewind(self, subscriber_id: str, seconds: int) -> int:
        """Move the cursor to ``seconds`` before now and return it."""

        now = int(self._clock())
        if seconds < 0:
            raise InvalidArgumentError("Rewind seconds must not be negative.")
        if seconds > now:
            raise InvalidArgumentError("Back too long!")
        cursor = now - seconds
        self._cursors.set(subscriber_id, cursor)
        LOGGER.info("Cursor for %s rewound to %s", subscriber_id, cursor)
        return cursor

    def block(self, user_id: str, caption_or_url: str) -> str:
        """Block the image a caption or URL points at and describe the result."""

        fragment = extract_fragment(caption_or_url)
        if fragment is None:
            return UNRECOGNIZED_CAPTION
        key = self._blocklist.block(user_id, fragment)
        LOGGER.info("Blocked %s", key)
        return f"{key} blocked."
