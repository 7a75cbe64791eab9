"""Timeline retrieval and post normalization.

The fetcher pulls one source's feed, walks it newest first and turns eligible
posts into reply messages. The walk stops at the subscriber's cursor, skips
items the dedup cache has already seen and drops single resources that are on
the block list.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, List, Mapping, Optional
from urllib.parse import quote

from core.blocklist import BlockRegistry, extract_fragment
from core.config import FetcherConfig
from core.dedup import dedup_key
from core.errors import ConfigurationError, FetchError, RemoteAPIError
from core.models import Post, ReplyMessage, Resource, ResourceKind, TrailEntry, resolve_item_id
from core.ports import CachePort, HttpPort

LOGGER = logging.getLogger(__name__)

ELIGIBLE_TYPES = frozenset({"photo", "video"})
SUCCESS_STATUS = 200


def _photo_urls(raw_post: Mapping[str, Any]) -> tuple[str, ...]:
    urls = []
    for photo in raw_post.get("photos") or []:
        original = (photo or {}).get("original_size") or {}
        url = original.get("url")
        if isinstance(url, str) and url:
            urls.append(url)
    return tuple(urls)


def _trail(raw_post: Mapping[str, Any]) -> tuple[TrailEntry, ...]:
    entries = []
    for hop in raw_post.get("trail") or []:
        post = (hop or {}).get("post") or {}
        entries.append(TrailEntry(post_id=resolve_item_id(post.get("id"), post.get("id_string"))))
    return tuple(entries)


def parse_post(raw_post: Mapping[str, Any]) -> Optional[Post]:
    """Decode one raw post, or return None when it has no usable id."""

    post_id = resolve_item_id(raw_post.get("id"), raw_post.get("id_string"))
    if post_id is None:
        return None
    try:
        timestamp = int(raw_post.get("timestamp") or 0)
    except (TypeError, ValueError):
        timestamp = 0
    return Post(
        type=str(raw_post.get("type") or ""),
        id=post_id,
        timestamp=timestamp,
        short_url=str(raw_post.get("short_url") or raw_post.get("post_url") or ""),
        trail=_trail(raw_post),
        photo_urls=_photo_urls(raw_post),
        video_url=raw_post.get("video_url") or None,
    )


def parse_posts(payload: bytes) -> List[Post]:
    """Decode an API payload into posts, in feed order.

    Raises FetchError for undecodable payloads and RemoteAPIError when the API
    reports a non-success status.
    """

    try:
        document = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FetchError(f"Unable to decode feed payload: {exc}") from exc
    if not isinstance(document, dict):
        raise FetchError("Feed payload is not a JSON object")

    meta = document.get("meta") or {}
    status = meta.get("status")
    if status != SUCCESS_STATUS:
        try:
            code = int(status)
        except (TypeError, ValueError):
            code = 0
        raise RemoteAPIError(code, meta.get("msg"))

    response = document.get("response") or {}
    raw_posts = response.get("posts") if isinstance(response, dict) else None
    if not isinstance(raw_posts, list):
        raise FetchError("Feed payload has no post list")

    posts: List[Post] = []
    for raw_post in raw_posts:
        if not isinstance(raw_post, dict):
            continue
        post = parse_post(raw_post)
        if post is None:
            LOGGER.debug("Dropping post without id: %s", raw_post.get("post_url"))
            continue
        posts.append(post)
    return posts


class TimelineFetcher:
    """Turns a source's feed into reply messages not delivered before."""

    def __init__(
        self,
        http: HttpPort,
        cache: CachePort,
        blocklist: BlockRegistry,
        config: FetcherConfig,
    ) -> None:
        self._http = http
        self._cache = cache
        self._blocklist = blocklist
        self._config = config

    def _feed_url(self, source_id: str) -> str:
        return self._config.api_url.format(
            source=quote(source_id, safe=""),
            api_key=quote(self._config.api_key, safe=""),
        )

    async def fetch(self, source_id: str, since_timestamp: int) -> List[ReplyMessage]:
        """Return messages for posts newer than ``since_timestamp``."""

        if not self._config.api_key:
            raise ConfigurationError("A Tumblr API key is required")

        LOGGER.debug("Fetching timeline for %s since %s", source_id, since_timestamp)
        payload = await self._http.get(self._feed_url(source_id))
        posts = parse_posts(payload)
        messages = self.build_messages(source_id, since_timestamp, posts)
        LOGGER.info("Fetched %s new message(s) from %s", len(messages), source_id)
        return messages

    def build_messages(
        self, source_id: str, since_timestamp: int, posts: Iterable[Post]
    ) -> List[ReplyMessage]:
        messages: List[ReplyMessage] = []
        for post in posts:
            if post.type not in ELIGIBLE_TYPES:
                continue
            # The feed is newest first, so the first older post marks the cursor.
            if post.timestamp < since_timestamp:
                break
            # Marked seen before resources are known so empty posts are not rescanned.
            if not self._cache.add(dedup_key(source_id, post.canonical_id)):
                continue

            resources = self._resources(source_id, post)
            if resources:
                messages.append(ReplyMessage(resources=tuple(resources), caption=post.short_url))
        return messages

    def _resources(self, source_id: str, post: Post) -> List[Resource]:
        resources: List[Resource] = []
        for url in post.photo_urls:
            kind = ResourceKind.VIDEO if url.lower().endswith(".gif") else ResourceKind.IMAGE
            fragment = extract_fragment(url)
            if fragment is not None and self._blocklist.is_blocked(source_id, fragment):
                LOGGER.debug("Skipping blocked resource %s from %s", fragment, source_id)
                continue
            resources.append(Resource(url=url, kind=kind, caption_source_url=url))
        if post.video_url:
            resources.append(
                Resource(url=post.video_url, kind=ResourceKind.VIDEO, caption_source_url=post.video_url)
            )
        return resources
