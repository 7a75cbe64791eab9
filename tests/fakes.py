from __future__ import annotations

import json
from typing import Any, Optional, Sequence

from core.errors import FetchError
from core.models import Resource


class FakeStorage:
    def __init__(self) -> None:
        self.data: dict[tuple[str, str], Any] = {}

    def get(self, namespace: str, key: str) -> Optional[Any]:
        return self.data.get((namespace, key))

    def set(self, namespace: str, key: str, value: Any) -> None:
        self.data[(namespace, key)] = value


class FakeHttp:
    """Serves canned payloads keyed by a substring of the requested URL."""

    def __init__(self, payloads: Optional[dict[str, bytes]] = None) -> None:
        self.payloads = payloads or {}
        self.requested: list[str] = []

    async def get(self, url: str) -> bytes:
        self.requested.append(url)
        for marker, payload in self.payloads.items():
            if marker in url:
                return payload
        raise FetchError(f"no route for {url}")


class FakeTransport:
    def __init__(self, fail_albums: Sequence[int] = ()) -> None:
        self.texts: list[tuple[Any, str]] = []
        self.singles: list[tuple[Any, Resource, str]] = []
        self.albums: list[tuple[Any, list[Resource], str]] = []
        self._fail_albums = set(fail_albums)
        self._album_calls = 0

    async def send_text(self, recipient: Any, text: str) -> None:
        self.texts.append((recipient, text))

    async def send_single_media(self, recipient: Any, resource: Resource, caption: str) -> None:
        self.singles.append((recipient, resource, caption))

    async def send_album(self, recipient: Any, resources: Sequence[Resource], caption: str) -> None:
        index = self._album_calls
        self._album_calls += 1
        if index in self._fail_albums:
            raise RuntimeError(f"album {index} rejected")
        self.albums.append((recipient, list(resources), caption))


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def photo_url(fragment: str, name: str = "s1280x1920/image.jpg") -> str:
    return f"https://64.media.tumblr.com/{fragment}/{name}"


def raw_post(
    post_id: Any,
    timestamp: int,
    *,
    post_type: str = "photo",
    photos: Sequence[str] = (),
    video_url: Optional[str] = None,
    trail_ids: Sequence[Any] = (),
) -> dict:
    post: dict[str, Any] = {
        "type": post_type,
        "blog_name": "artblog",
        "id": post_id,
        "timestamp": timestamp,
        "short_url": f"https://tmblr.co/{post_id}",
        "post_url": f"https://artblog.tumblr.com/post/{post_id}",
        "photos": [{"caption": "", "original_size": {"url": url}} for url in photos],
        "trail": [{"post": {"id": trail_id}} for trail_id in trail_ids],
    }
    if video_url:
        post["video_url"] = video_url
    return post


def feed(*posts: dict, status: int = 200, msg: str = "OK") -> bytes:
    return json.dumps(
        {"meta": {"status": status, "msg": msg}, "response": {"posts": list(posts), "total_posts": len(posts)}}
    ).encode("utf-8")
